"""Render snapshots of the simulations as matplotlib figures.

The core never draws anything itself; these helpers exist for notebooks, documentation
and quick visual checks of a model.  matplotlib is an optional dependency.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple

from .circuits import RlcResponse
from .oscillator import ShmSimulator
from .sorting import Compare, Swap, SortPlayer


class FigureGenerationError(RuntimeError):
    """Raised when matplotlib is unavailable for figure generation."""


@dataclass(frozen=True)
class SavedFigure:
    """Information about a saved matplotlib figure."""

    identifier: str
    path: Path


def _ensure_matplotlib():
    try:
        import matplotlib.pyplot as plt  # type: ignore
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise FigureGenerationError("matplotlib is required to create figures") from exc
    return plt


def _save_figure(plt, figure, path: Path, *, show: bool) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    figure.savefig(path, dpi=150, bbox_inches="tight")
    if show:  # pragma: no cover - interactive display
        plt.show()
    plt.close(figure)


def figure_oscillator(simulator: ShmSimulator, plt, *, target_mm: Optional[float] = None) -> Tuple[str, Any]:
    """Displacement history in mm with an optional symmetric target band."""

    history = simulator.history
    times = [t for t, _ in history]
    displacements = [1000.0 * x for _, x in history]

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(times, displacements, color="#1a73e8", linewidth=2.0, label="x(t)")
    ax.axhline(0.0, color="#bbbbbb", linewidth=1.0)
    if target_mm is not None:
        for level in (target_mm, -target_mm):
            ax.axhline(level, color="#f44336", linestyle="--", alpha=0.6)
    ax.set_xlabel("Time [s]")
    ax.set_ylabel("Displacement [mm]")
    params = simulator.params
    ax.set_title(f"Mass-spring-damper (m={params.mass:g} kg, k={params.stiffness:g} N/m, c={params.damping:g} Ns/m)")
    ax.grid(True, linestyle="--", alpha=0.5)
    ax.legend()
    fig.tight_layout()
    return "shm-displacement", fig


def figure_rlc(response: RlcResponse, plt) -> Tuple[str, Any]:
    """Capacitor voltage against time with the step voltage as reference."""

    fig, ax = plt.subplots(figsize=(8, 4))
    ax.plot(response.times, response.voltages, color="#22aa66", linewidth=2.0, label=r"$v_C(t)$")
    ax.axhline(response.params.voltage, color="#bbbbbb", linestyle="--", label="step")
    ax.set_xlabel("Time [s]")
    ax.set_ylabel("Capacitor voltage [V]")
    params = response.params
    ax.set_title(
        f"RLC step response (R={params.resistance:g} Ω, L={params.inductance * 1e3:g} mH, "
        f"C={params.capacitance * 1e6:g} µF)"
    )
    ax.grid(True, linestyle="--", alpha=0.5)
    ax.legend()
    fig.tight_layout()
    return "rlc-step-response", fig


def figure_sort(player: SortPlayer, plt) -> Tuple[str, Any]:
    """Bar chart of the array at the player's cursor with the next step highlighted."""

    values = player.array
    colors: List[str] = ["#1a73e8"] * len(values)
    step = player.highlighted
    if isinstance(step, (Compare, Swap)):
        highlight = "#ff7043" if isinstance(step, Swap) else "#ffd54f"
        colors[step.i] = highlight
        colors[step.j] = highlight

    fig, ax = plt.subplots(figsize=(8, 3))
    ax.bar(range(len(values)), values, color=colors, edgecolor="black")
    ax.set_xticks(range(len(values)))
    ax.set_title(f"{player.sequence.algorithm.title()} sort, step {player.cursor}/{len(player.sequence)}")
    fig.tight_layout()
    return f"sort-{player.sequence.algorithm}-{player.cursor:04d}", fig


def create_figures(
    directory: str | Path,
    *,
    simulator: Optional[ShmSimulator] = None,
    target_mm: Optional[float] = None,
    response: Optional[RlcResponse] = None,
    players: Tuple[SortPlayer, ...] = (),
    show: bool = False,
) -> Tuple[SavedFigure, ...]:
    """Create and save a figure for every model passed in.

    Parameters
    ----------
    directory:
        Target directory for the generated figures. Created if necessary.
    simulator, target_mm:
        Oscillator whose history should be plotted, and an optional amplitude band.
    response:
        RLC step response to plot.
    players:
        Sort players, each rendered at its current cursor.
    show:
        When ``True`` the figures are displayed using :func:`matplotlib.pyplot.show`
        after saving. The default ``False`` keeps the function non-interactive.
    """

    plt = _ensure_matplotlib()
    output_dir = Path(directory)
    built: List[Tuple[str, Any]] = []
    if simulator is not None:
        built.append(figure_oscillator(simulator, plt, target_mm=target_mm))
    if response is not None:
        built.append(figure_rlc(response, plt))
    for player in players:
        built.append(figure_sort(player, plt))

    saved: List[SavedFigure] = []
    for identifier, figure in built:
        path = output_dir / f"{identifier}.png"
        _save_figure(plt, figure, path, show=show)
        saved.append(SavedFigure(identifier=identifier, path=path))
    return tuple(saved)


__all__ = [
    "FigureGenerationError",
    "SavedFigure",
    "create_figures",
    "figure_oscillator",
    "figure_rlc",
    "figure_sort",
]
