"""
Tissue state: the 16 compartment nitrogen pressures of one planning run.

States are immutable values. Every simulation step builds a new state, so a
snapshot kept for a what-if calculation can never be changed by the live run.
"""

from dataclasses import dataclass
from typing import Iterable, List

import numpy as np

from .compartments import (
    NUM_COMPARTMENTS,
    HALFTIMES,
    ceiling_vec,
    loading_vec,
    SURFACE_CEILING,
)

# Surface exposure used to settle tissues before a dive (minutes).
EQUILIBRIUM_EXPOSURE_MIN = 100.0


def _frozen(values: Iterable[float]) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class TissueState:
    """Ordered compartment inert gas pressures (bar), index 0 = fastest."""

    pressures: np.ndarray

    def __post_init__(self):
        pressures = _frozen(self.pressures)
        if pressures.shape != (NUM_COMPARTMENTS,):
            raise ValueError(
                f"TissueState needs {NUM_COMPARTMENTS} compartments, "
                f"got shape {pressures.shape}"
            )
        object.__setattr__(self, "pressures", pressures)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TissueState):
            return NotImplemented
        return bool(np.array_equal(self.pressures, other.pressures))

    def __hash__(self):
        return hash(self.pressures.tobytes())

    def __len__(self) -> int:
        return NUM_COMPARTMENTS

    def __getitem__(self, idx: int) -> float:
        return float(self.pressures[idx])

    def tolist(self) -> List[float]:
        return self.pressures.tolist()

    def snapshot(self) -> "TissueState":
        """Independent copy sharing no buffer with this state."""
        return TissueState(self.pressures.copy())

    @staticmethod
    def restore(snapshot: "TissueState") -> "TissueState":
        """Live copy of a previously taken snapshot."""
        return snapshot.snapshot()

    def ceilings(self) -> np.ndarray:
        """Per-compartment ceiling pressures (bar), floored at 1.0."""
        return ceiling_vec(self.pressures)

    def max_ceiling(self) -> float:
        return float(np.max(self.ceilings()))

    def requires_stop(self) -> bool:
        """True if any compartment ceiling is above the surface limit."""
        return bool(np.any(self.ceilings() > SURFACE_CEILING))


def equilibrium(f_n2: float) -> TissueState:
    """Tissue state saturated at surface for a gas with nitrogen fraction f_n2.

    A 100 minute exposure at the surface partial pressure starting from that
    same pressure, which leaves every compartment at exactly f_n2.
    """
    start = np.full(NUM_COMPARTMENTS, f_n2, dtype=float)
    return TissueState(loading_vec(start, f_n2, EQUILIBRIUM_EXPOSURE_MIN, HALFTIMES))
