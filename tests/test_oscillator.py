"""Tests for the mass-spring-damper model and its run-state machine."""

import pytest

from engilab.errors import ConfigurationError
from engilab.oscillator import (
    OscillatorParams,
    OscillatorState,
    RunState,
    ShmSimulator,
    mechanical_energy,
    shm_step,
)


@pytest.fixture
def simulator():
    return ShmSimulator(dt=0.125, max_substeps=100)


class TestModel:
    def test_free_particle_keeps_energy(self):
        params = OscillatorParams(mass=2.0, stiffness=0.0, damping=0.0)
        state = OscillatorState(position=0.0, velocity=0.3)
        start = mechanical_energy(state, params)
        for _ in range(500):
            state = shm_step(state, params, 0.01)
        assert state.velocity == 0.3
        assert state.position == pytest.approx(1.5)
        assert mechanical_energy(state, params) == pytest.approx(start)

    def test_undamped_energy_drift_is_small(self):
        params = OscillatorParams(damping=0.0)
        state = OscillatorState(position=0.12, velocity=0.0)
        start = mechanical_energy(state, params)
        for _ in range(1200):
            state = shm_step(state, params, 1.0 / 120.0)
        assert mechanical_energy(state, params) == pytest.approx(start, rel=1e-5)

    def test_damping_removes_energy(self):
        params = OscillatorParams()
        state = OscillatorState(position=0.12, velocity=0.0)
        start = mechanical_energy(state, params)
        for _ in range(600):
            state = shm_step(state, params, 1.0 / 120.0)
        assert mechanical_energy(state, params) < start

    @pytest.mark.parametrize(
        "params",
        [
            OscillatorParams(mass=0.0),
            OscillatorParams(mass=-1.0),
            OscillatorParams(stiffness=-1.0),
            OscillatorParams(damping=float("nan")),
        ],
    )
    def test_invalid_params(self, params):
        with pytest.raises(ConfigurationError):
            shm_step(OscillatorState(0.1, 0.0), params, 0.01)

    def test_derived_quantities(self):
        params = OscillatorParams(mass=1.0, stiffness=4.0, damping=2.0)
        assert params.natural_frequency == pytest.approx(2.0)
        assert params.damping_ratio == pytest.approx(0.5)


class TestShmSimulator:
    def test_initial_state(self, simulator):
        assert simulator.run_state is RunState.IDLE
        assert simulator.history == [(0.0, 0.12)]
        assert simulator.recent_max_amplitude() == pytest.approx(0.12)

    def test_tick_converts_elapsed_time_into_substeps(self, simulator):
        simulator.start(now=0.0)
        assert simulator.tick(0.5) == 4
        assert simulator.state.time == pytest.approx(0.5)
        assert simulator.tick(0.5625) == 0
        assert simulator.tick(0.625) == 1
        assert len(simulator.history) == 6

    def test_idle_ticks_do_nothing(self, simulator):
        assert simulator.tick(10.0) == 0
        assert simulator.state.time == 0.0

    def test_pause_stops_advancing(self, simulator):
        simulator.start(now=0.0)
        assert simulator.tick(0.25) == 2
        simulator.pause()
        assert simulator.tick(10.0) == 0
        simulator.start(now=100.0)
        assert simulator.tick(100.25) == 2
        assert simulator.state.time == pytest.approx(0.5)

    def test_substep_cap_drops_backlog(self):
        simulator = ShmSimulator(dt=0.125, max_substeps=3)
        simulator.start(now=0.0)
        assert simulator.tick(10.0) == 3
        assert simulator.tick(10.0) == 0
        assert simulator.state.time == pytest.approx(0.375)

    def test_toggle(self, simulator):
        assert simulator.toggle(now=0.0) is True
        assert simulator.toggle(now=1.0) is False

    def test_reset_restores_initial_conditions(self, simulator):
        simulator.start(now=0.0)
        simulator.tick(1.0)
        simulator.reset()
        assert not simulator.running
        assert simulator.state == OscillatorState(0.12, 0.0, 0.0)
        assert simulator.history == [(0.0, 0.12)]

    def test_rejected_params_leave_simulator_untouched(self, simulator):
        before = simulator.params
        with pytest.raises(ConfigurationError):
            simulator.set_params(mass=0.0)
        assert simulator.params == before
        assert simulator.set_params(stiffness=10.0).stiffness == 10.0

    def test_set_initial_conditions(self, simulator):
        simulator.set_initial_conditions(0.05, 0.2)
        assert simulator.state == OscillatorState(0.05, 0.2, 0.0)

    def test_history_is_bounded(self):
        simulator = ShmSimulator(dt=0.01, history=5)
        for _ in range(10):
            simulator.step()
        assert len(simulator.history) == 5
        assert simulator.history[-1][0] == pytest.approx(0.1)

    def test_invalid_construction(self):
        with pytest.raises(ConfigurationError):
            ShmSimulator(OscillatorParams(mass=0.0))
        with pytest.raises(ConfigurationError):
            ShmSimulator(dt=0.0)

    def test_snapshot(self, simulator):
        simulator.step()
        snapshot = simulator.snapshot()
        assert snapshot["running"] is False
        assert snapshot["time"] == pytest.approx(0.125)
        assert snapshot["params"] == {"mass": 0.5, "stiffness": 20.0, "damping": 0.4}
        assert len(snapshot["history"]) == 2
