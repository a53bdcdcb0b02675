"""
Step-wise tissue simulation across descent, bottom time and ascent.

Depth to pressure conversion uses fixed offset conventions, which differ
between the stepped transit phases and the flat exposures:

    stepped descent/ascent:  ((depth_m * 10) - 1) * fN2
    bottom time:             ((depth_m - 1) / 10) * fN2
    stop minute:             (1 + stop_depth // 10) * fN2

Every step scales the compartment's starting pressure by fN2 before loading.
Stop times depend on all of these together.
"""

import math
from typing import Callable

from .compartments import HALFTIMES, loading_vec
from .tissue import TissueState

# Ascent / descent rates (m/min)
ASCENT_RATE = 10.0
DESCENT_RATE = 10.0

# Refresh tissues every 6 seconds
STEP_MIN = 0.1

AmbientFn = Callable[[int], float]


def stepped_inert_pressure(depth_m: float, f_n2: float) -> float:
    """Inert gas pressure used for a transit step at depth_m."""
    return ((depth_m * 10) - 1) * f_n2


def bottom_inert_pressure(depth_m: float, f_n2: float) -> float:
    """Inert gas pressure used for the bottom time exposure at depth_m."""
    return ((depth_m - 1) / 10.0) * f_n2


def stop_inert_pressure(stop_depth: int, f_n2: float) -> float:
    """Inert gas pressure used for one minute spent at a ladder stop."""
    return (1 + stop_depth // 10) * f_n2


def step_count(total_minutes: float, step_minutes: float) -> int:
    """Number of whole steps in total_minutes; a partial last step is dropped.

    The quotient is rounded to 1e-9 first so 0.3 / 0.1 counts three steps.
    """
    if total_minutes <= 0:
        return 0
    return math.floor(round(total_minutes / step_minutes, 9))


def step_profile(
    state: TissueState,
    f_n2: float,
    ambient: AmbientFn,
    total_minutes: float,
    step_minutes: float = STEP_MIN,
) -> TissueState:
    """Advance every compartment through fixed-size time steps.

    Args:
        state: tissue state at the start of the segment
        f_n2: nitrogen fraction of the breathing gas
        ambient: maps the 1-based step index to that step's inert gas pressure
        total_minutes: segment duration
        step_minutes: step size

    Returns:
        Tissue state at the end of the last whole step.
    """
    pressures = state.pressures
    for i in range(1, step_count(total_minutes, step_minutes) + 1):
        pressures = loading_vec(pressures * f_n2, ambient(i), step_minutes, HALFTIMES)
    return TissueState(pressures)


def transit(
    state: TissueState, f_n2: float, from_depth: float, to_depth: float
) -> TissueState:
    """Descend or ascend between two depths at the fixed rate.

    Each 0.1 minute step covers 1 m; step i is evaluated at
    from_depth -/+ i metres. Any remainder below one step is not simulated.
    """
    descending = to_depth > from_depth
    rate = DESCENT_RATE if descending else ASCENT_RATE
    step_distance = rate * STEP_MIN
    direction = 1.0 if descending else -1.0

    def ambient(i: int) -> float:
        return stepped_inert_pressure(from_depth + direction * i * step_distance, f_n2)

    return step_profile(state, f_n2, ambient, abs(to_depth - from_depth) / rate)


def expose(
    state: TissueState, f_n2: float, inert_pressure: float, minutes: float
) -> TissueState:
    """Hold all compartments at a constant inert gas pressure for `minutes`."""
    return TissueState(
        loading_vec(state.pressures * f_n2, inert_pressure, minutes, HALFTIMES)
    )
