"""Tests for the series-resistor solver and the RLC step response."""

import math

import pytest

from engilab.circuits import (
    MIN_TOTAL_RESISTANCE,
    RlcParams,
    rlc_derivative,
    series_circuit,
    simulate_rlc,
)
from engilab.errors import ConfigurationError, InvalidInput


class TestSeriesCircuit:
    def test_three_equal_resistors(self):
        solution = series_circuit(5.0, [100, 100, 100])
        assert solution.total_resistance == pytest.approx(300.0)
        assert solution.current == pytest.approx(0.016667, rel=1e-4)
        assert solution.drops == pytest.approx((1.6667, 1.6667, 1.6667), rel=1e-4)
        assert sum(solution.drops) == pytest.approx(5.0)

    def test_total_resistance_is_floored(self):
        solution = series_circuit(5.0, [0, 0])
        assert solution.total_resistance == MIN_TOTAL_RESISTANCE
        assert math.isfinite(solution.current)

    @pytest.mark.parametrize(
        "voltage, resistances",
        [(5.0, []), (5.0, [100, -1]), (float("nan"), [100]), (5.0, [float("inf")])],
    )
    def test_invalid_input(self, voltage, resistances):
        with pytest.raises(InvalidInput):
            series_circuit(voltage, resistances)


class TestRlc:
    def test_from_ui_converts_units(self):
        params = RlcParams.from_ui(100, 10, 100)
        assert params.inductance == pytest.approx(0.01)
        assert params.capacitance == pytest.approx(1e-4)
        assert params.voltage == 5.0

    def test_default_response_settles_near_step_voltage(self):
        response = simulate_rlc(RlcParams.from_ui(100, 10, 100), subdivisions=600)
        assert len(response.times) == len(response.voltages) == 601
        assert response.times[0] == 0.0
        assert response.voltages[0] == 0.0
        assert response.times[-1] == pytest.approx(0.05)
        assert response.final_voltage == pytest.approx(5.0, abs=0.1)
        assert response.clamped == 0

    def test_unstable_parameters_are_clamped(self):
        response = simulate_rlc(RlcParams(resistance=1e6, inductance=1e-9, capacitance=1e-6), subdivisions=600)
        assert response.clamped > 0
        assert all(math.isfinite(value) for value in response.voltages)
        assert all(math.isfinite(value) for value in response.currents)

    @pytest.mark.parametrize("inductance, capacitance", [(0.0, 1e-4), (0.01, 0.0), (-1.0, 1e-4)])
    def test_non_positive_l_or_c_rejected(self, inductance, capacitance):
        with pytest.raises(ConfigurationError):
            simulate_rlc(RlcParams(resistance=100.0, inductance=inductance, capacitance=capacitance))

    @pytest.mark.parametrize("field", ["resistance", "inductance", "capacitance", "voltage"])
    def test_non_finite_params_rejected(self, field):
        values = {"resistance": 100.0, "inductance": 0.01, "capacitance": 1e-4, field: float("nan")}
        with pytest.raises(ConfigurationError):
            simulate_rlc(RlcParams(**values))

    def test_derivative_guards_zero_inductance(self):
        derivative = rlc_derivative(RlcParams(resistance=1.0, inductance=0.0, capacitance=1e-6))
        di_dt, dvc_dt = derivative(0.0, (1.0, 0.0))
        assert di_dt == 0.0
        assert dvc_dt == pytest.approx(1e6)

    def test_snapshot(self):
        snapshot = simulate_rlc(RlcParams.from_ui(100, 10, 100), subdivisions=10).snapshot()
        assert len(snapshot["voltages"]) == 11
        assert snapshot["clamped"] == 0
