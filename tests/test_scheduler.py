"""Tests for the ladder decompression scheduler."""

import numpy as np
import pytest

from decoplan.scheduler import (
    STOP_LADDER,
    DecompressionDivergenceError,
    ceiling_depth,
    nearest_stop,
    schedule_decompression,
)
from decoplan.tissue import TissueState, equilibrium

AIR_N2 = 0.79


def loaded_state(compartment: int, pressure: float) -> TissueState:
    """Air-saturated tissues with one compartment raised to `pressure`."""
    pressures = np.full(16, AIR_N2)
    pressures[compartment] = pressure
    return TissueState(pressures)


class TestLadder:
    """Ceiling depth to ladder stop mapping."""

    def test_ceiling_depth(self):
        """(ceiling - 1) * 10 metres."""
        assert abs(ceiling_depth(1.5) - 5.0) < 1e-12
        assert ceiling_depth(1.0) == 0.0

    @pytest.mark.parametrize(
        "required,expected",
        [(-1.0, 3), (0.0, 3), (2.9, 3), (3.0, 3), (3.1, 6), (6.0, 6),
         (8.5, 9), (9.0, 9), (11.9, 12), (12.0, 12)],
    )
    def test_rounds_up_to_ladder(self, required, expected):
        """Smallest ladder depth at or below the requirement."""
        assert nearest_stop(required) == expected

    @pytest.mark.parametrize("required", [12.1, 16.0, 45.0])
    def test_deep_requirement_clamped(self, required):
        """Requirements beyond the last rung clamp to 12 m."""
        assert nearest_stop(required) == 12

    def test_ladder_is_fixed(self):
        assert STOP_LADDER == (3, 6, 9, 12)


class TestNoObligation:
    """Clear tissues only owe the safety stop."""

    def test_safety_stop_only(self):
        """Surface-saturated tissues need nothing beyond 3 min at 3 m."""
        state = equilibrium(AIR_N2)
        schedule = schedule_decompression(state, AIR_N2, 18.0)

        assert schedule.as_tuple() == (3, 0, 0, 0)
        assert schedule.total_minutes == 3
        assert schedule.deco_minutes == 0
        assert not schedule.requires_deco
        assert schedule.deepest_stop == 3
        assert schedule.iterations == 0
        assert schedule.final_tissues == state

    def test_without_safety_stop(self):
        """A zero safety stop floor gives an empty schedule."""
        schedule = schedule_decompression(
            equilibrium(AIR_N2), AIR_N2, 18.0, safety_stop_min=0
        )
        assert schedule.total_minutes == 0
        assert schedule.deepest_stop is None
        assert schedule.stops == []


class TestStops:
    """Stop selection and per-minute accounting."""

    def test_single_minute_at_six(self):
        """Ceiling of 1.30 bar (3.03 m) is served by one minute at 6 m."""
        state = loaded_state(1, 3.0)
        schedule = schedule_decompression(state, AIR_N2, 6.0)

        assert schedule.minutes == {3: 3, 6: 1, 9: 0, 12: 0}
        assert schedule.deco_minutes == 1
        assert schedule.requires_deco
        assert schedule.deepest_stop == 6
        assert schedule.stops == [(6, 1), (3, 3)]
        assert schedule.iterations == 1
        assert not schedule.final_tissues.requires_stop()

    def test_deep_ceiling_clamped_to_twelve(self):
        """A 16 m requirement is scheduled at 12 m, never deeper."""
        state = loaded_state(1, 5.0)
        schedule = schedule_decompression(state, AIR_N2, 12.0)

        assert schedule.minutes[12] >= 1
        assert schedule.deepest_stop == 12
        assert set(schedule.minutes) == set(STOP_LADDER)
        assert not schedule.final_tissues.requires_stop()

    def test_minutes_sum_to_iterations(self):
        """Every loop iteration adds exactly one stop minute."""
        state = loaded_state(2, 4.0)
        schedule = schedule_decompression(state, AIR_N2, 20.0)
        assert schedule.total_minutes == schedule.iterations + 3

    def test_input_state_unchanged(self):
        """Scheduling never mutates the caller's tissue state."""
        state = loaded_state(1, 3.0)
        before = state.tolist()
        schedule_decompression(state, AIR_N2, 6.0)
        assert state.tolist() == before


class TestDivergenceGuard:
    """The iteration cap turns a runaway loop into an error."""

    def test_cap_exceeded_raises(self):
        """A loaded state with no allowed iterations fails loudly."""
        with pytest.raises(DecompressionDivergenceError, match="not cleared"):
            schedule_decompression(loaded_state(1, 3.0), AIR_N2, 6.0, max_iterations=0)

    def test_is_runtime_error(self):
        assert issubclass(DecompressionDivergenceError, RuntimeError)
