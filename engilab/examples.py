"""Worked scenarios exercising each model, printed as a short summary."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import List, Sequence

from .circuits import RlcParams, series_circuit, simulate_rlc
from .logging_config import setup_logging
from .mechanics import BeamBalance, beam_deflection
from .oscillator import OscillatorParams, OscillatorState, mechanical_energy, shm_step
from .sorting import ALGORITHMS, generate_steps


@dataclass(frozen=True)
class EnergyDrift:
    """Relative energy change of an undamped oscillator after ``steps`` RK4 steps."""

    steps: int
    dt: float
    initial_energy: float
    final_energy: float

    @property
    def relative_drift(self) -> float:
        return abs(self.final_energy - self.initial_energy) / self.initial_energy


def undamped_energy_drift(*, steps: int = 10_000, dt: float = 1.0 / 120.0) -> EnergyDrift:
    """Integrate ``m=1, k=1, c=0`` from ``x=1`` and compare energies."""

    params = OscillatorParams(mass=1.0, stiffness=1.0, damping=0.0)
    state = OscillatorState(position=1.0, velocity=0.0)
    initial = mechanical_energy(state, params)
    for _ in range(steps):
        state = shm_step(state, params, dt)
    return EnergyDrift(steps=steps, dt=dt, initial_energy=initial, final_energy=mechanical_energy(state, params))


def tip_balance() -> BeamBalance:
    """5 kg at -2 against 2 kg at +5: both sides carry 10 kg·slot of torque."""

    beam = BeamBalance()
    beam.place(5.0, -2)
    beam.place(2.0, 5)
    return beam


def _format_float(value: float) -> str:
    return f"{value:.6g}"


def summary_lines(values: Sequence[int] = (38, 27, 43, 3, 9, 82, 10)) -> List[str]:
    lines: List[str] = []

    for name in ALGORITHMS:
        sequence = generate_steps(name, values)
        lines.append(f"{name:>9} sort: {len(sequence):3d} steps -> {sequence.replay()}")

    beam = tip_balance()
    lines.append(
        f"Beam balance: left {_format_float(beam.left_torque)}, right {_format_float(beam.right_torque)}, "
        f"balanced = {beam.balanced}"
    )

    circuit = series_circuit(5.0, (100.0, 100.0, 100.0))
    lines.append(
        f"DC series: R_total = {_format_float(circuit.total_resistance)} ohm, "
        f"I = {_format_float(circuit.current)} A, drops = {tuple(_format_float(v) for v in circuit.drops)} V"
    )

    response = simulate_rlc(RlcParams.from_ui(100.0, 10.0, 100.0))
    lines.append(f"RLC step: v_C(t_end) = {_format_float(response.final_voltage)} V")

    lines.append(f"Beam deflection: {beam_deflection(100.0, 2.0, 200.0, 5000.0):.3e} m")

    drift = undamped_energy_drift()
    lines.append(
        f"Undamped RK4: {drift.steps} steps of dt = {_format_float(drift.dt)} s, "
        f"relative energy drift = {_format_float(drift.relative_drift)}"
    )
    return lines


def main(argv: Sequence[str] | None = None) -> None:
    """Print the worked scenarios."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--log-level", default=None, help="logging level, e.g. DEBUG")
    args = parser.parse_args(argv)
    setup_logging("engilab", args.log_level)

    for line in summary_lines():
        print(line)


if __name__ == "__main__":  # pragma: no cover - simple demonstration helper
    main()
