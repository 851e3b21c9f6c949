"""Statics helpers for the MECH levels: the beam balance and beam bending."""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterator, List, Optional, Tuple

from .errors import ConfigurationError, InvalidInput
from .ids import IdAllocator
from .logging_config import get_logger

logger = get_logger(__name__)

# Integer slots either side of the pivot; 0 is the pivot itself.
SLOTS: Tuple[int, ...] = (-5, -4, -3, -2, -1, 1, 2, 3, 4, 5)
PALETTE: Tuple[float, ...] = (1.0, 2.0, 3.0, 5.0)  # kg
MAX_TILT_DEG = 12.0

GPA = 1e9  # Pa
CM4 = 1e-8  # m^4


@dataclass(frozen=True)
class Weight:
    """A mass placed on the beam at an integer slot."""

    id: str
    mass: float
    position: int

    @property
    def torque(self) -> float:
        return self.mass * abs(self.position)


def snap_to_slot(ratio: float) -> int:
    """Map a fractional position along the beam (0 = left end, 1 = right end) to a slot.

    Positions that round to the pivot are nudged to ``-1`` or ``+1`` depending on which
    side of the centre they fall; positions beyond the ends clamp to ``-5``/``+5``.
    """

    if not math.isfinite(ratio):
        raise InvalidInput("drop position must be a finite number")
    normalized = ratio * 2.0 - 1.0
    approx = int(math.floor(normalized * 5.0 + 0.5))
    if approx == 0:
        approx = 1 if normalized >= 0.0 else -1
    return max(-5, min(5, approx))


class BeamBalance:
    """Lever with weights on integer slots; at most one weight per slot."""

    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        self._items: List[Weight] = []
        if id_factory is None:
            id_factory = partial(IdAllocator().allocate, "w")
        self._new_id = id_factory

    def __iter__(self) -> Iterator[Weight]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def items(self) -> Tuple[Weight, ...]:
        return tuple(self._items)

    def place(self, mass: float, position: int) -> Weight:
        """Put ``mass`` kg at ``position``, replacing any weight already there."""

        if not math.isfinite(mass) or mass <= 0.0:
            raise InvalidInput("mass must be a positive number")
        if position not in SLOTS:
            raise InvalidInput(f"position must be one of {SLOTS}")
        weight = Weight(id=self._new_id(), mass=float(mass), position=int(position))
        self._items = sorted(
            [item for item in self._items if item.position != position] + [weight],
            key=lambda item: item.position,
        )
        logger.debug("Placed %.1f kg at slot %d", mass, position)
        return weight

    def drop(self, mass: float, ratio: float) -> Weight:
        """Place a weight at the slot nearest the fractional beam position *ratio*."""

        return self.place(mass, snap_to_slot(ratio))

    def remove(self, weight_id: str) -> bool:
        before = len(self._items)
        self._items = [item for item in self._items if item.id != weight_id]
        return len(self._items) != before

    def reset(self) -> None:
        self._items = []

    @property
    def left_torque(self) -> float:
        return sum(item.torque for item in self._items if item.position < 0)

    @property
    def right_torque(self) -> float:
        return sum(item.torque for item in self._items if item.position > 0)

    @property
    def balanced(self) -> bool:
        return self.left_torque == self.right_torque

    @property
    def tilt(self) -> float:
        """Display tilt in degrees; positive when the right side is heavier."""

        raw = (self.right_torque - self.left_torque) / 5.0
        return max(-MAX_TILT_DEG, min(MAX_TILT_DEG, raw))

    def snapshot(self) -> dict:
        return {
            "items": [{"id": w.id, "mass": w.mass, "position": w.position} for w in self._items],
            "left_torque": self.left_torque,
            "right_torque": self.right_torque,
            "balanced": self.balanced,
            "tilt": self.tilt,
        }


def beam_deflection(force: float, length: float, modulus_gpa: float, inertia_cm4: float) -> float:
    """Centre deflection (m) of a simply supported beam under a central point load.

    Parameters
    ----------
    force:
        Point load ``F`` in newtons.
    length:
        Span ``L`` in metres.
    modulus_gpa:
        Young's modulus ``E`` in GPa.
    inertia_cm4:
        Second moment of area ``I`` in cm^4.

    Returns
    -------
    float
        ``F L^3 / (48 E I)`` evaluated in SI units.
    """

    if not all(math.isfinite(value) for value in (force, length, modulus_gpa, inertia_cm4)):
        raise ConfigurationError("beam inputs must be finite numbers")
    e_si = modulus_gpa * GPA
    i_si = inertia_cm4 * CM4
    if e_si <= 0.0 or i_si <= 0.0:
        raise ConfigurationError("modulus and second moment of area must be positive")
    if length < 0.0:
        raise ConfigurationError("length must be non-negative")
    return (force * length**3) / (48.0 * e_si * i_si)
