"""
Single-gas Bühlmann ZH-L16 decompression planning.

Modules:
    - compartments: ZH-L16 N2 constants, gas loading and ceiling functions
    - tissue: immutable 16-compartment tissue state
    - simulator: step-wise descent, bottom time and ascent simulation
    - scheduler: decompression stops on the fixed 3/6/9/12 m ladder
    - planner: full dive planning with deco, no-deco and no-fly times
    - config: config.yaml loading with CLI overrides
    - session: cancel-and-restart interactive planning, batch planning
"""

from .tissue import TissueState, equilibrium
from .scheduler import DecoSchedule, DecompressionDivergenceError, schedule_decompression
from .planner import (
    DiveParameters,
    DivePlanner,
    InvalidDiveParametersError,
    PlanningResult,
    plan_dive,
)
from .config import build_parameters, load_effective_config
from .session import PlanningSession, plan_batch

__version__ = "0.1.0"

__all__ = [
    "TissueState",
    "equilibrium",
    "DecoSchedule",
    "DecompressionDivergenceError",
    "schedule_decompression",
    "DiveParameters",
    "DivePlanner",
    "InvalidDiveParametersError",
    "PlanningResult",
    "plan_dive",
    "build_parameters",
    "load_effective_config",
    "PlanningSession",
    "plan_batch",
]
