import pytest

from phdoser.state import (
    CALIBRATION_SLOTS,
    CLUSTER_CENTERS,
    PH_VALUES,
    Cooldown,
    DoserState,
    Mode,
    Phase,
)


def test_cooldown_ready_after_period():
    timer = Cooldown(100, last=50)
    assert not timer.ready(149)
    assert timer.ready(150)


def test_cooldown_restart_moves_start():
    timer = Cooldown(100)
    timer.restart(1000)
    assert timer.last == 1000
    assert not timer.ready(1050)
    assert timer.ready(1100)


def test_cooldown_remaining_bounds():
    timer = Cooldown(100, last=50)
    assert timer.remaining(50) == 100
    assert timer.remaining(150) == 0
    assert timer.remaining(10_000) == 0


def test_cooldown_handles_clock_wrap():
    timer = Cooldown(100, last=2**32 - 10)
    assert not timer.ready(5)
    assert timer.ready(95)


def test_cooldown_clock_behind_start_counts_as_elapsed():
    timer = Cooldown(100, last=10)
    assert timer.ready(5)


def test_state_tables_align():
    state = DoserState()
    assert len(state.ph_values) == len(state.cluster_centers)
    assert list(state.cluster_centers) == sorted(set(state.cluster_centers))
    assert list(state.ph_values) == sorted(state.ph_values, reverse=True)
    assert list(state.cluster_centers) == list(CLUSTER_CENTERS)
    assert list(state.ph_values) == list(PH_VALUES)


def test_default_state():
    state = DoserState()
    assert state.mode is Mode.DOSER
    assert state.phase is Phase.WATCHING
    assert len(state.clustered) == len(state.cluster_centers)
    assert len(state.calibration_values) == CALIBRATION_SLOTS
    assert state.min_ph < state.max_ph


def test_states_do_not_share_lists():
    first = DoserState()
    second = DoserState()
    first.clustered[0] += 5
    assert second.clustered[0] == 0


def test_reset_calibration():
    state = DoserState()
    state.enough_samples = True
    state.median_std = 2.5
    state.calib_median = 640
    state.reset_calibration()
    assert state.enough_samples is False
    assert state.median_std == 0.0
    assert state.calib_median == 0


@pytest.mark.parametrize("mode", list(Mode))
def test_mode_round_trip(mode):
    assert Mode(mode.value) is mode