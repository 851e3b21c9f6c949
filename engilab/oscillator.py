r"""Mass-spring-damper model advanced with the classic RK4 scheme.

The equation of motion

.. math::

    m \ddot{x} + c \dot{x} + k x = 0

is written as the first-order system ``x' = v`` and ``v' = (-k x - c v) / m`` and
integrated with :func:`engilab.integrators.rk4_step`.

:class:`ShmSimulator` is an explicit ``IDLE -> RUNNING -> IDLE`` state machine.  Each
animation tick reports the current wall-clock time; the elapsed time since the previous
tick is accumulated and converted into a bounded number of fixed-size sub-steps, which
are applied one after another to the stored state.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, replace
from enum import Enum
from typing import Deque, List, Optional, Tuple

from . import config
from .errors import ConfigurationError
from .integrators import DerivativeFunc, State, rk4_step
from .logging_config import get_logger

logger = get_logger(__name__)

# Tolerance absorbing round-off when converting accumulated time into sub-steps.
_TIME_EPSILON = 1e-12


@dataclass(frozen=True)
class OscillatorParams:
    """Physical parameters of the oscillator in SI units."""

    mass: float = 0.5  # kg
    stiffness: float = 20.0  # N/m
    damping: float = 0.4  # N s/m

    def validate(self) -> "OscillatorParams":
        """Return ``self`` if the parameters describe a well-posed model."""

        for name in ("mass", "stiffness", "damping"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"{name} must be a finite number")
        if self.mass <= 0.0:
            raise ConfigurationError("mass must be positive")
        if self.stiffness < 0.0:
            raise ConfigurationError("stiffness must be non-negative")
        if self.damping < 0.0:
            raise ConfigurationError("damping must be non-negative")
        return self

    @property
    def natural_frequency(self) -> float:
        """Undamped angular frequency ``sqrt(k / m)`` in rad/s."""

        return math.sqrt(self.stiffness / self.mass)

    @property
    def damping_ratio(self) -> float:
        """Dimensionless damping ratio ``c / (2 sqrt(k m))``; infinite when ``k = 0``."""

        critical = 2.0 * math.sqrt(self.stiffness * self.mass)
        if critical == 0.0:
            return math.inf
        return self.damping / critical


@dataclass(frozen=True)
class OscillatorState:
    """Position (m), velocity (m/s) and elapsed time (s)."""

    position: float
    velocity: float
    time: float = 0.0


def oscillator_derivative(params: OscillatorParams) -> DerivativeFunc:
    """Return the derivative callable for ``(x, v)`` under *params*."""

    params.validate()
    m, k, c = params.mass, params.stiffness, params.damping

    def _derivative(_: float, state: State) -> Tuple[float, float]:
        x, v = state
        return v, (-k * x - c * v) / m

    return _derivative


def shm_step(state: OscillatorState, params: OscillatorParams, dt: float) -> OscillatorState:
    """Advance *state* by one RK4 step of size ``dt``.

    Raises :class:`ConfigurationError` before touching the state when the mass is not
    positive or ``dt`` is not a positive number.
    """

    if not dt > 0.0:
        raise ConfigurationError("time step must be positive")
    derivative = oscillator_derivative(params)
    x, v = rk4_step(derivative, state.time, (state.position, state.velocity), dt)
    return OscillatorState(position=x, velocity=v, time=state.time + dt)


def mechanical_energy(state: OscillatorState, params: OscillatorParams) -> float:
    """Kinetic plus spring potential energy ``m v^2 / 2 + k x^2 / 2`` in joules."""

    return 0.5 * params.mass * state.velocity**2 + 0.5 * params.stiffness * state.position**2


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class ShmSimulator:
    """Interactive oscillator owning its state, history buffer and run state."""

    def __init__(
        self,
        params: OscillatorParams | None = None,
        *,
        initial_position: float = 0.12,
        initial_velocity: float = 0.0,
        dt: float | None = None,
        max_substeps: int | None = None,
        history: int | None = None,
    ) -> None:
        self._params = (params or OscillatorParams()).validate()
        self.dt = config.SHM_TIME_STEP if dt is None else float(dt)
        if not self.dt > 0.0:
            raise ConfigurationError("time step must be positive")
        self.max_substeps = config.SHM_MAX_SUBSTEPS if max_substeps is None else int(max_substeps)
        if self.max_substeps <= 0:
            raise ConfigurationError("max_substeps must be positive")
        self._history_size = config.SHM_HISTORY if history is None else int(history)

        self.initial_position = float(initial_position)
        self.initial_velocity = float(initial_velocity)
        self.run_state = RunState.IDLE
        self._state = OscillatorState(self.initial_position, self.initial_velocity, 0.0)
        self._history: Deque[Tuple[float, float]] = deque(maxlen=self._history_size)
        self._history.append((0.0, self.initial_position))
        self._last_tick: Optional[float] = None
        self._accumulator = 0.0

    # --- read-only views -------------------------------------------------------

    @property
    def params(self) -> OscillatorParams:
        return self._params

    @property
    def state(self) -> OscillatorState:
        return self._state

    @property
    def running(self) -> bool:
        return self.run_state is RunState.RUNNING

    @property
    def history(self) -> List[Tuple[float, float]]:
        """Recent ``(t, x)`` samples, oldest first."""

        return list(self._history)

    def energy(self) -> float:
        return mechanical_energy(self._state, self._params)

    # --- configuration ---------------------------------------------------------

    def set_params(self, **changes: float) -> OscillatorParams:
        """Replace some of ``mass``, ``stiffness``, ``damping``.

        The new parameters are validated before being installed, so a rejected change
        leaves the simulator untouched.
        """

        updated = replace(self._params, **changes).validate()
        self._params = updated
        return updated

    def set_initial_conditions(self, position: float, velocity: float = 0.0) -> None:
        """Change ``x0``/``v0`` and move the idle oscillator back to them."""

        self.initial_position = float(position)
        self.initial_velocity = float(velocity)
        self.reset()

    # --- transitions -----------------------------------------------------------

    def _advance(self) -> OscillatorState:
        self._state = shm_step(self._state, self._params, self.dt)
        self._history.append((self._state.time, self._state.position))
        return self._state

    def step(self) -> OscillatorState:
        """Apply a single manual RK4 step regardless of the run state."""

        return self._advance()

    def start(self, now: float) -> None:
        """Enter ``RUNNING``; *now* is the wall-clock time in seconds."""

        if self.running:
            return
        self.run_state = RunState.RUNNING
        self._last_tick = float(now)
        self._accumulator = 0.0
        logger.info("SHM simulation started at t=%.3f s", self._state.time)

    def pause(self) -> None:
        """Return to ``IDLE``; later ticks do not advance the state."""

        if self.running:
            logger.info("SHM simulation paused at t=%.3f s", self._state.time)
        self.run_state = RunState.IDLE
        self._last_tick = None
        self._accumulator = 0.0

    def toggle(self, now: float) -> bool:
        """Start when idle, pause when running; return whether it is now running."""

        if self.running:
            self.pause()
        else:
            self.start(now)
        return self.running

    def reset(self) -> None:
        """Stop and restore the initial conditions and an empty history."""

        self.pause()
        self._state = OscillatorState(self.initial_position, self.initial_velocity, 0.0)
        self._history.clear()
        self._history.append((0.0, self.initial_position))

    def tick(self, now: float) -> int:
        """Catch the simulation up to wall-clock time *now*.

        Returns the number of sub-steps applied.  At most :attr:`max_substeps` steps run
        per tick; when the cap is hit the remaining backlog is dropped so the simulation
        never spirals behind real time.
        """

        if not self.running or self._last_tick is None:
            return 0
        elapsed = max(0.0, float(now) - self._last_tick)
        self._last_tick = float(now)
        self._accumulator += elapsed

        wanted = int((self._accumulator + _TIME_EPSILON) / self.dt)
        count = min(wanted, self.max_substeps)
        for _ in range(count):
            self._advance()
        if wanted > self.max_substeps:
            logger.warning("SHM tick capped at %d sub-steps; dropping %.3f s backlog", count, self._accumulator)
            self._accumulator = 0.0
        else:
            self._accumulator = max(0.0, self._accumulator - count * self.dt)
        return count

    # --- queries ---------------------------------------------------------------

    def recent_max_amplitude(self, window: float = 2.0) -> Optional[float]:
        """Largest ``|x|`` over the last *window* seconds of history, or ``None``."""

        if not self._history:
            return None
        now = self._history[-1][0]
        recent = [abs(x) for t, x in self._history if t >= now - window]
        if not recent:
            return None
        return max(recent)

    def snapshot(self) -> dict:
        return {
            "running": self.running,
            "time": self._state.time,
            "position": self._state.position,
            "velocity": self._state.velocity,
            "energy": self.energy(),
            "params": {
                "mass": self._params.mass,
                "stiffness": self._params.stiffness,
                "damping": self._params.damping,
            },
            "dt": self.dt,
            "history": [list(sample) for sample in self._history],
        }
