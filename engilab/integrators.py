"""Fixed-step integrators for the small ODE systems behind the games.

The module implements the explicit schemes used by the dynamics widgets:

* :func:`euler_step` / :func:`forward_euler` – first order explicit Euler.
* :func:`rk4_step` / :func:`runge_kutta4` – classic fourth-order Runge–Kutta scheme.
* :func:`fixed_step_euler` – explicit Euler over a fixed number of subdivisions, with
  non-finite components clamped to zero.

All routines operate on callables that return the time-derivative of the state.  The
state is represented as a tuple of floating point numbers so the helpers only need the
Python standard library.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from .errors import ConfigurationError
from .logging_config import get_logger

logger = get_logger(__name__)

State = Tuple[float, ...]
DerivativeFunc = Callable[[float, State], Sequence[float]]


@dataclass
class IntegrationResult:
    """Container holding the sampled time points and system states."""

    times: Tuple[float, ...]
    states: Tuple[State, ...]
    clamped: int = 0

    def as_lists(self) -> Tuple[List[float], List[List[float]]]:
        """Return copies of the time and state arrays as mutable lists."""

        return list(self.times), [list(state) for state in self.states]

    def component(self, index: int) -> Tuple[float, ...]:
        """Return the time series of a single state component."""

        return tuple(state[index] for state in self.states)


def _ensure_state(state: Sequence[float]) -> State:
    """Convert *state* into an immutable :class:`State` tuple."""

    return tuple(float(component) for component in state)


def _clamp_non_finite(state: State) -> Tuple[State, bool]:
    """Replace NaN or infinite components with ``0.0``; report whether any were replaced."""

    if all(math.isfinite(component) for component in state):
        return state, False
    return tuple(component if math.isfinite(component) else 0.0 for component in state), True


def _advance_time_grid(t0: float, t_end: float, h: float) -> Tuple[float, ...]:
    if h <= 0:
        raise ConfigurationError("Step size h must be positive.")
    if t_end < t0:
        raise ConfigurationError("t_end must be greater than or equal to t0.")

    times: List[float] = []
    t = t0
    while t < t_end:
        times.append(t)
        t = min(t_end, t + h)
    if not times or times[-1] != t_end:
        times.append(t_end)
    return tuple(times)


def euler_step(derivative: DerivativeFunc, t: float, state: Sequence[float], h: float) -> State:
    """Advance *state* by one explicit Euler step of size ``h``."""

    y = _ensure_state(state)
    slope = derivative(t, y)
    return _ensure_state(component + h * float(ds_dt) for component, ds_dt in zip(y, slope))


def rk4_step(derivative: DerivativeFunc, t: float, state: Sequence[float], h: float) -> State:
    """Advance *state* by one classic Runge–Kutta step of size ``h``.

    The four slopes are evaluated at ``t``, twice at ``t + h/2`` and at ``t + h`` and
    combined with the usual ``(1, 2, 2, 1) / 6`` weights.
    """

    y = _ensure_state(state)
    k1 = tuple(float(value) for value in derivative(t, y))
    y_k2 = _ensure_state(component + 0.5 * h * value for component, value in zip(y, k1))
    k2 = tuple(float(value) for value in derivative(t + 0.5 * h, y_k2))
    y_k3 = _ensure_state(component + 0.5 * h * value for component, value in zip(y, k2))
    k3 = tuple(float(value) for value in derivative(t + 0.5 * h, y_k3))
    y_k4 = _ensure_state(component + h * value for component, value in zip(y, k3))
    k4 = tuple(float(value) for value in derivative(t + h, y_k4))

    return _ensure_state(
        component
        + (h / 6.0)
        * (k1_i + 2.0 * k2_i + 2.0 * k3_i + k4_i)
        for component, k1_i, k2_i, k3_i, k4_i in zip(y, k1, k2, k3, k4)
    )


def forward_euler(
    derivative: DerivativeFunc,
    initial_state: Sequence[float],
    *,
    t0: float,
    t_end: float,
    step: float,
) -> IntegrationResult:
    """Integrate a system of first-order equations using the forward Euler method.

    Parameters
    ----------
    derivative:
        Callable returning ``dy/dt`` given ``(t, y)``.
    initial_state:
        Iterable of floats describing the starting state ``y(t0)``.
    t0, t_end:
        Start and end times of the integration interval.
    step:
        Positive step size ``h``.

    Returns
    -------
    IntegrationResult
        Sampled time points (including ``t_end``) and states.
    """

    times = _advance_time_grid(t0, t_end, step)
    states: List[State] = [_ensure_state(initial_state)]

    for idx, t in enumerate(times[:-1]):
        states.append(euler_step(derivative, t, states[idx], times[idx + 1] - t))

    return IntegrationResult(times=times, states=tuple(states))


def runge_kutta4(
    derivative: DerivativeFunc,
    initial_state: Sequence[float],
    *,
    t0: float,
    t_end: float,
    step: float,
) -> IntegrationResult:
    """Integrate a system with the classic fourth-order Runge–Kutta scheme."""

    times = _advance_time_grid(t0, t_end, step)
    states: List[State] = [_ensure_state(initial_state)]

    for idx, t in enumerate(times[:-1]):
        states.append(rk4_step(derivative, t, states[idx], times[idx + 1] - t))

    return IntegrationResult(times=times, states=tuple(states))


def fixed_step_euler(
    derivative: DerivativeFunc,
    initial_state: Sequence[float],
    *,
    t0: float = 0.0,
    duration: float,
    subdivisions: int,
) -> IntegrationResult:
    """Integrate with explicit Euler using exactly ``subdivisions`` equal steps.

    Any component that becomes NaN or infinite after a step is reset to ``0.0`` before
    the next step, so a diverging model produces a flat trace instead of poisoning every
    later sample.  The number of steps where this happened is reported in
    :attr:`IntegrationResult.clamped`.
    """

    if subdivisions <= 0:
        raise ConfigurationError("subdivisions must be a positive integer")
    if duration <= 0:
        raise ConfigurationError("duration must be positive")

    h = duration / subdivisions
    t = t0
    state = _ensure_state(initial_state)
    times: List[float] = [t]
    states: List[State] = [state]
    clamped = 0

    for _ in range(subdivisions):
        state, replaced = _clamp_non_finite(euler_step(derivative, t, state, h))
        if replaced:
            clamped += 1
        t = t + h
        times.append(t)
        states.append(state)

    if clamped:
        logger.warning("Clamped non-finite state to zero in %d of %d steps", clamped, subdivisions)
    return IntegrationResult(times=tuple(times), states=tuple(states), clamped=clamped)
