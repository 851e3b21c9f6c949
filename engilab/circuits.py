r"""Circuit models for the ECE levels.

Two models are provided:

``simulate_rlc``
    Step response of a series RLC branch driven by a constant voltage.  The state
    ``(i, v_C)`` obeys

    .. math::

        \frac{di}{dt} = \frac{V - R i - v_C}{L}, \qquad \frac{dv_C}{dt} = \frac{i}{C},

    and is integrated with explicit Euler over a fixed number of subdivisions.  The
    response is recomputed wholesale whenever a parameter changes.

``series_circuit``
    Algebraic solution of resistors in series across an ideal source.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from . import config
from .errors import ConfigurationError, InvalidInput
from .integrators import IntegrationResult, State, fixed_step_euler

STEP_VOLTAGE = 5.0  # volts applied by the RLC sandbox

# Floor for the total series resistance so the current stays finite.
MIN_TOTAL_RESISTANCE = 1e-4  # ohms

# UI unit conversions.
MILLIHENRY = 1e-3
MICROFARAD = 1e-6


@dataclass(frozen=True)
class RlcParams:
    """Series RLC parameters in SI units (ohm, henry, farad, volt)."""

    resistance: float
    inductance: float
    capacitance: float
    voltage: float = STEP_VOLTAGE

    @classmethod
    def from_ui(
        cls,
        resistance_ohm: float,
        inductance_mh: float,
        capacitance_uf: float,
        voltage: float = STEP_VOLTAGE,
    ) -> "RlcParams":
        """Build parameters from slider units (ohm, mH, µF)."""

        return cls(
            resistance=float(resistance_ohm),
            inductance=float(inductance_mh) * MILLIHENRY,
            capacitance=float(capacitance_uf) * MICROFARAD,
            voltage=float(voltage),
        )

    def validate(self) -> "RlcParams":
        for name in ("resistance", "inductance", "capacitance", "voltage"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"{name} must be a finite number")
        if self.resistance < 0.0:
            raise ConfigurationError("resistance must be non-negative")
        if self.inductance <= 0.0:
            raise ConfigurationError("inductance must be positive")
        if self.capacitance <= 0.0:
            raise ConfigurationError("capacitance must be positive")
        return self


def rlc_derivative(params: RlcParams):
    """Return ``d(i, v_C)/dt`` for *params*.

    A non-positive inductance or capacitance contributes a zero derivative for the
    corresponding component instead of dividing by zero.
    """

    R, L, C, V = params.resistance, params.inductance, params.capacitance, params.voltage

    def _derivative(_: float, state: State) -> Tuple[float, float]:
        i, v_c = state
        di_dt = (V - R * i - v_c) / L if L > 0.0 else 0.0
        dvc_dt = i / C if C > 0.0 else 0.0
        return di_dt, dvc_dt

    return _derivative


@dataclass(frozen=True)
class RlcResponse:
    """Sampled step response; ``times``, ``currents`` and ``voltages`` align."""

    params: RlcParams
    times: Tuple[float, ...]
    currents: Tuple[float, ...]
    voltages: Tuple[float, ...]
    clamped: int = 0

    @property
    def final_voltage(self) -> float:
        return self.voltages[-1]

    @property
    def final_current(self) -> float:
        return self.currents[-1]

    @property
    def peak_voltage(self) -> float:
        return max(self.voltages)

    def snapshot(self) -> dict:
        return {
            "times": list(self.times),
            "currents": list(self.currents),
            "voltages": list(self.voltages),
            "clamped": self.clamped,
        }


def simulate_rlc(
    params: RlcParams,
    duration: float = 0.05,
    *,
    subdivisions: int | None = None,
) -> RlcResponse:
    """Compute the capacitor-voltage step response over ``duration`` seconds.

    Both ``i`` and ``v_C`` start at zero.  The result holds ``subdivisions + 1`` samples
    including the initial one.  Non-finite values produced by an unstable choice of
    parameters are clamped to zero (see :func:`~engilab.integrators.fixed_step_euler`).
    """

    if subdivisions is None:
        subdivisions = config.RLC_SUBDIVISIONS
    params.validate()
    result: IntegrationResult = fixed_step_euler(
        rlc_derivative(params),
        (0.0, 0.0),
        duration=duration,
        subdivisions=subdivisions,
    )
    return RlcResponse(
        params=params,
        times=result.times,
        currents=result.component(0),
        voltages=result.component(1),
        clamped=result.clamped,
    )


@dataclass(frozen=True)
class SeriesCircuit:
    """Solution of a resistive series network."""

    voltage: float
    resistances: Tuple[float, ...]
    total_resistance: float
    current: float
    drops: Tuple[float, ...]


def series_circuit(voltage: float, resistances: Sequence[float]) -> SeriesCircuit:
    """Solve resistors in series across ``voltage``.

    The total resistance is floored at :data:`MIN_TOTAL_RESISTANCE`; the current is
    ``V / R_total`` and each drop is ``I * R_k``.
    """

    values = tuple(float(r) for r in resistances)
    if not values:
        raise InvalidInput("at least one resistor is required")
    if not math.isfinite(voltage) or not all(math.isfinite(r) for r in values):
        raise InvalidInput("voltage and resistances must be finite numbers")
    if any(r < 0.0 for r in values):
        raise InvalidInput("resistances must be non-negative")

    total = max(MIN_TOTAL_RESISTANCE, sum(values))
    current = voltage / total
    return SeriesCircuit(
        voltage=float(voltage),
        resistances=values,
        total_resistance=total,
        current=current,
        drops=tuple(current * r for r in values),
    )
