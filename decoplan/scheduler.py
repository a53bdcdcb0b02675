"""
Decompression scheduler on a fixed stop ladder.

Greedy, one-minute-granularity iteration: while any compartment ceiling is
above the surface limit, ascend to the ladder stop covering the deepest
ceiling and spend one more minute there.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .simulator import expose, stop_inert_pressure, transit
from .tissue import TissueState

logger = logging.getLogger(__name__)

# Candidate stop depths (m), shallowest first
STOP_LADDER: Tuple[int, ...] = (3, 6, 9, 12)

# Safety stop duration in minutes at 3 meters
SAFETY_STOP_MIN = 3
SAFETY_STOP_DEPTH = 3

# Hard cap on stop minutes for one schedule
MAX_SCHEDULE_ITERATIONS = 10_000


class DecompressionDivergenceError(RuntimeError):
    """The stop loop failed to clear all ceilings within the iteration cap."""


def ceiling_depth(ceiling_bar: float) -> float:
    """Depth (m) corresponding to a ceiling pressure (bar)."""
    return (ceiling_bar - 1) * 10


def nearest_stop(required_depth: float) -> int:
    """Shallowest ladder stop at or below the required depth.

    Requirements deeper than the last rung are clamped to it.
    """
    candidates = [stop for stop in STOP_LADDER if stop >= required_depth]
    if not candidates:
        logger.debug(
            f"Required stop depth {required_depth:.2f}m exceeds ladder, "
            f"clamping to {STOP_LADDER[-1]}m"
        )
        return STOP_LADDER[-1]
    return min(candidates)


@dataclass(frozen=True)
class DecoSchedule:
    """Minutes owed at each ladder stop, safety stop floor included."""

    minutes: Dict[int, int]
    final_tissues: TissueState
    safety_stop_min: int = SAFETY_STOP_MIN
    iterations: int = field(default=0, compare=False)

    @property
    def total_minutes(self) -> int:
        return sum(self.minutes.values())

    @property
    def deco_minutes(self) -> int:
        """Stop time beyond the safety stop floor."""
        return self.total_minutes - self.safety_stop_min

    @property
    def requires_deco(self) -> bool:
        return self.total_minutes != self.safety_stop_min

    @property
    def deepest_stop(self) -> Optional[int]:
        owed = [depth for depth, mins in self.minutes.items() if mins > 0]
        return max(owed) if owed else None

    @property
    def stops(self) -> List[Tuple[int, int]]:
        """(depth, minutes) pairs with time owed, deepest first."""
        return [
            (depth, self.minutes[depth])
            for depth in sorted(self.minutes, reverse=True)
            if self.minutes[depth] > 0
        ]

    def as_tuple(self) -> Tuple[int, ...]:
        """Stop minutes ordered 3m, 6m, 9m, 12m."""
        return tuple(self.minutes[depth] for depth in STOP_LADDER)


def schedule_decompression(
    state: TissueState,
    f_n2: float,
    depth_m: float,
    safety_stop_min: int = SAFETY_STOP_MIN,
    max_iterations: int = MAX_SCHEDULE_ITERATIONS,
) -> DecoSchedule:
    """Determine stop minutes needed to clear all ceilings from `depth_m`.

    Args:
        state: tissue state at the start of the ascent
        f_n2: nitrogen fraction of the breathing gas
        depth_m: depth the ascent starts from
        safety_stop_min: minutes always owed at the 3 m stop
        max_iterations: stop-minute cap before giving up

    Returns:
        DecoSchedule with per-stop minutes and the tissue state after the
        last stop minute.

    Raises:
        DecompressionDivergenceError: if the ceilings do not clear within
            max_iterations stop minutes.
    """
    minutes = {depth: 0 for depth in STOP_LADDER}
    minutes[SAFETY_STOP_DEPTH] += safety_stop_min

    tissues = state
    last_stop = depth_m
    iterations = 0

    while tissues.requires_stop():
        if iterations >= max_iterations:
            raise DecompressionDivergenceError(
                f"Ceilings not cleared after {max_iterations} stop minutes "
                f"(max ceiling {tissues.max_ceiling():.4f} bar)"
            )

        stop = nearest_stop(ceiling_depth(tissues.max_ceiling()))

        # A stop deeper than the current depth is entered without transit
        if stop < last_stop:
            tissues = transit(tissues, f_n2, last_stop, stop)
        tissues = expose(tissues, f_n2, stop_inert_pressure(stop, f_n2), 1.0)

        minutes[stop] += 1
        last_stop = stop
        iterations += 1

    return DecoSchedule(
        minutes=minutes,
        final_tissues=tissues,
        safety_stop_min=safety_stop_min,
        iterations=iterations,
    )
