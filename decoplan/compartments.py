"""
Bühlmann ZH-L16 nitrogen compartment constants and tissue physics.

Single source of truth for half-times and ceiling coefficients.
All functions are pure (no side effects) so planning runs can execute
independently of each other.
"""

from typing import Tuple

import numpy as np

# ZH-L16 N2 compartment parameters (16 compartments, index 0 = fastest)
# Half-times in minutes
ZH_L16_N2_HALFTIMES: Tuple[float, ...] = (
    5.0, 8.0, 12.5, 18.5, 27.0, 38.3, 54.3, 77.0,
    109.0, 146.0, 187.0, 239.0, 305.0, 390.0, 498.0, 635.0,
)

# Ceiling coefficients: ceiling(P) = (P - a) * b
# Published, empirically tuned values; not recomputed from the half-times.
ZH_L16_N2_A: Tuple[float, ...] = (
    1.1696, 1.0, 0.8618, 0.7562, 0.62, 0.5043, 0.441, 0.4,
    0.375, 0.35, 0.3295, 0.3065, 0.2835, 0.261, 0.248, 0.2327,
)

ZH_L16_N2_B: Tuple[float, ...] = (
    0.5578, 0.6514, 0.7222, 0.7825, 0.8126, 0.8434, 0.8693, 0.8910,
    0.9092, 0.9222, 0.9319, 0.9403, 0.9477, 0.9544, 0.9602, 0.9653,
)

NUM_COMPARTMENTS = 16

# Ceiling floor: a compartment at or below this pressure may surface.
SURFACE_CEILING = 1.0

HALFTIMES = np.array(ZH_L16_N2_HALFTIMES)
N2_A = np.array(ZH_L16_N2_A)
N2_B = np.array(ZH_L16_N2_B)


def loading(
    p_begin: float, p_gas: float, exposure_min: float, half_time: float
) -> float:
    """Compartment inert gas pressure after a constant-pressure exposure.

    P = P_begin + (P_gas - P_begin) * (1 - 2^(-t / T½))

    Args:
        p_begin: compartment pressure before the exposure (bar)
        p_gas: ambient inert gas pressure during the exposure (bar)
        exposure_min: exposure time in minutes (>= 0)
        half_time: compartment half-time in minutes

    Returns:
        Compartment pressure after the exposure (bar). Equal to p_begin for
        a zero-length exposure.
    """
    return p_begin + (p_gas - p_begin) * (1.0 - 2.0 ** (-exposure_min / half_time))


def loading_vec(
    p_begin: np.ndarray,
    p_gas: float,
    exposure_min: float,
    half_times: np.ndarray = HALFTIMES,
) -> np.ndarray:
    """Vectorized loading() across all compartments."""
    return p_begin + (p_gas - p_begin) * (1.0 - np.power(2.0, -exposure_min / half_times))


def ceiling(p_comp: float, a: float, b: float) -> float:
    """Ceiling pressure (bar) of a single compartment.

    Floored at 1.0 bar, meaning no restriction: the diver may surface.
    """
    return max(SURFACE_CEILING, (p_comp - a) * b)


def ceiling_vec(
    p_comp: np.ndarray, a: np.ndarray = N2_A, b: np.ndarray = N2_B
) -> np.ndarray:
    """Vectorized ceiling() across all compartments."""
    return np.maximum(SURFACE_CEILING, (p_comp - a) * b)
