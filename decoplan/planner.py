"""
Dive planner: runs a full square dive and derives the user-facing times.

A planning run descends from surface equilibrium, spends the bottom time,
and hands the resulting tissue state to the decompression scheduler. From
that it reports deco time, the remaining no-decompression time and the
no-fly time, each clamped to two display digits.
"""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

from .compartments import ZH_L16_N2_HALFTIMES
from .scheduler import (
    DecoSchedule,
    MAX_SCHEDULE_ITERATIONS,
    SAFETY_STOP_MIN,
    schedule_decompression,
)
from .simulator import bottom_inert_pressure, expose, transit
from .tissue import TissueState, equilibrium

logger = logging.getLogger(__name__)

# Largest value any output can report
OUTPUT_CAP = 99

# Extra bottom minutes tried when searching the no-decompression limit
NO_DECO_SEARCH_LIMIT = 99

# Compartment pressure considered safe for flying (bar)
NO_FLY_PRESSURE = 0.75

# Compartment 0 is too fast to limit the surface interval
NO_FLY_FIRST_COMPARTMENT = 1


class InvalidDiveParametersError(ValueError):
    """Dive parameters outside the range the model can simulate."""


@dataclass(frozen=True)
class DiveParameters:
    """Inputs of one planning run.

    depth_m:          target depth in meters (> 0)
    bottom_time_min:  planned bottom time in minutes (>= 0)
    f_o2:             oxygen fraction of the breathing gas (0 < fO2 <= 1)
    p_factor:         reserved conservatism setting. Accepted and validated
                      but not applied anywhere in the computation.
    """
    depth_m: float
    bottom_time_min: float
    f_o2: float = 0.21
    p_factor: int = 0

    def __post_init__(self):
        if not self.depth_m > 0:
            raise InvalidDiveParametersError(
                f"depth_m must be > 0, got {self.depth_m}"
            )
        if not self.bottom_time_min >= 0:
            raise InvalidDiveParametersError(
                f"bottom_time_min must be >= 0, got {self.bottom_time_min}"
            )
        if not (0.0 < self.f_o2 <= 1.0):
            raise InvalidDiveParametersError(
                f"f_o2 must be in (0, 1.0], got {self.f_o2}"
            )
        if self.p_factor < 0:
            raise InvalidDiveParametersError(
                f"p_factor must be >= 0, got {self.p_factor}"
            )

    @property
    def f_n2(self) -> float:
        return 1.0 - self.f_o2


@dataclass(frozen=True)
class PlanningResult:
    """Outputs of one planning run, each clamped to [0, 99]."""
    deco_minutes: int
    no_deco_minutes: int
    no_fly_minutes: int
    schedule: DecoSchedule
    pre_deco_tissues: TissueState
    params: DiveParameters

    @property
    def f_n2(self) -> float:
        """Nitrogen fraction of the breathing gas used for this plan."""
        return self.params.f_n2

    @property
    def outputs(self) -> Tuple[int, int, int]:
        """(no_fly_minutes, deco_minutes, no_deco_minutes)"""
        return (self.no_fly_minutes, self.deco_minutes, self.no_deco_minutes)


def clamp_output(value: float) -> int:
    """Clamp to [0, OUTPUT_CAP] and truncate toward zero."""
    return int(min(OUTPUT_CAP, max(0, value)))


def no_fly_minutes(tissues: TissueState) -> int:
    """Minutes until every gas-limiting compartment decays to 0.75 bar.

    t = -T½ * ln(0.75 / P0) per compartment above the threshold; the
    slowest one wins. Truncated, not rounded up.
    """
    max_time = 0.0
    for i in range(NO_FLY_FIRST_COMPARTMENT, len(tissues)):
        p0 = tissues[i]
        if p0 > NO_FLY_PRESSURE:
            time_to_fly = -ZH_L16_N2_HALFTIMES[i] * math.log(NO_FLY_PRESSURE / p0)
            if time_to_fly > max_time:
                max_time = time_to_fly
    return clamp_output(max_time)


class DivePlanner:
    """Plans square dives with the single-gas ZH-L16 model.

    Holds only fixed settings; every call to plan() owns its tissue states,
    so repeated or interleaved runs never see each other's state.
    """

    def __init__(
        self,
        safety_stop_min: int = SAFETY_STOP_MIN,
        max_iterations: int = MAX_SCHEDULE_ITERATIONS,
    ):
        self.safety_stop_min = safety_stop_min
        self.max_iterations = max_iterations

    def simulate_bottom(
        self, params: DiveParameters, bottom_time_min: float = None
    ) -> TissueState:
        """Tissue state after descending from the surface and the bottom time."""
        if bottom_time_min is None:
            bottom_time_min = params.bottom_time_min
        f_n2 = params.f_n2

        tissues = equilibrium(f_n2)
        tissues = transit(tissues, f_n2, 0.0, params.depth_m)
        return expose(
            tissues,
            f_n2,
            bottom_inert_pressure(params.depth_m, f_n2),
            bottom_time_min,
        )

    def schedule(self, params: DiveParameters, tissues: TissueState) -> DecoSchedule:
        return schedule_decompression(
            tissues,
            params.f_n2,
            params.depth_m,
            safety_stop_min=self.safety_stop_min,
            max_iterations=self.max_iterations,
        )

    def search_no_deco(self, params: DiveParameters) -> int:
        """Brute-force no-decompression search.

        Re-plans the dive from surface equilibrium with one more bottom
        minute per trial until a stop beyond the safety stop is needed or
        NO_DECO_SEARCH_LIMIT extra minutes were counted. Returns the extra
        minutes counted minus the requested bottom time, unclamped.
        """
        extra = 0
        trial_time = params.bottom_time_min + 1
        while extra < NO_DECO_SEARCH_LIMIT:
            trial = self.schedule(params, self.simulate_bottom(params, trial_time))
            if trial.requires_deco:
                break
            trial_time += 1
            extra += 1
        return extra - params.bottom_time_min

    def plan(self, params: DiveParameters) -> PlanningResult:
        """Run one full planning session for `params`."""
        if params.p_factor:
            logger.debug(f"p_factor={params.p_factor} accepted but not applied")

        bottom_tissues = self.simulate_bottom(params)
        deco_tissues = bottom_tissues.snapshot()
        no_fly_tissues = bottom_tissues.snapshot()

        schedule = self.schedule(params, deco_tissues)
        no_fly = no_fly_minutes(no_fly_tissues)

        if schedule.requires_deco:
            no_deco = 0
        else:
            no_deco = clamp_output(self.search_no_deco(params))

        result = PlanningResult(
            deco_minutes=clamp_output(schedule.deco_minutes),
            no_deco_minutes=no_deco,
            no_fly_minutes=no_fly,
            schedule=schedule,
            pre_deco_tissues=no_fly_tissues,
            params=params,
        )
        logger.debug(
            f"Planned {params.depth_m}m/{params.bottom_time_min}min "
            f"fO2={params.f_o2}: stops={schedule.as_tuple()} "
            f"deco={result.deco_minutes} no_deco={result.no_deco_minutes} "
            f"no_fly={result.no_fly_minutes}"
        )
        return result


def plan_dive(
    depth_m: float, bottom_time_min: float, f_o2: float = 0.21, p_factor: int = 0
) -> PlanningResult:
    """Validate inputs and plan a single dive with default settings."""
    params = DiveParameters(
        depth_m=depth_m, bottom_time_min=bottom_time_min, f_o2=f_o2, p_factor=p_factor
    )
    return DivePlanner().plan(params)
