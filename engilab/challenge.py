"""Random targets and tolerance checks for the level challenges."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .errors import InvalidInput
from .logging_config import get_logger
from .progress import Progress, ProgressStore

logger = get_logger(__name__)

DEFAULT_REWARD: Tuple[int, int] = (3, 50)  # stars, xp


class Outcome(Enum):
    SUCCESS = "success"
    RETRY = "retry"

    def __bool__(self) -> bool:
        return self is Outcome.SUCCESS


def new_target(
    low: float,
    high: float,
    *,
    digits: Optional[int] = None,
    rng: random.Random | None = None,
) -> float:
    """Draw a uniform target in ``[low, high]``, optionally rounded to *digits*."""

    if high < low:
        raise InvalidInput("target range must satisfy high >= low")
    if rng is None:
        rng = random.Random()
    value = low + rng.random() * (high - low)
    return round(value, digits) if digits is not None else value


def _finite(value: float, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name} must be a number") from exc
    if not math.isfinite(number):
        raise InvalidInput(f"{name} must be finite")
    return number


def evaluate(current: float, target: float, tolerance: float) -> Outcome:
    """Success iff ``|current - target| <= |target| * tolerance``."""

    current = _finite(current, "current value")
    target = _finite(target, "target")
    if tolerance < 0:
        raise InvalidInput("tolerance must be non-negative")
    if abs(current - target) <= abs(target) * tolerance:
        return Outcome.SUCCESS
    return Outcome.RETRY


def evaluate_ceiling(current: float, target: float, tolerance: float) -> Outcome:
    """Success iff ``current`` does not exceed ``target`` by more than *tolerance*."""

    current = _finite(current, "current value")
    target = _finite(target, "target")
    if current <= target * (1.0 + tolerance):
        return Outcome.SUCCESS
    return Outcome.RETRY


@dataclass
class Challenge:
    """A regenerable target with a relative tolerance."""

    low: float
    high: float
    tolerance: float = 0.05
    digits: Optional[int] = None
    rng: random.Random = field(default_factory=random.Random, repr=False)
    target: float = field(init=False)

    def __post_init__(self) -> None:
        self.target = self.new_target()

    def new_target(self, low: float | None = None, high: float | None = None) -> float:
        """Pick a fresh target, optionally from a different range than the default."""

        self.target = new_target(
            self.low if low is None else low,
            self.high if high is None else high,
            digits=self.digits,
            rng=self.rng,
        )
        return self.target

    def evaluate(self, current: float) -> Outcome:
        return evaluate(current, self.target, self.tolerance)


class ChallengeSession:
    """Completion signal for one level, fired into the progress store at most once.

    A session corresponds to one mounted widget; a new session (a page reload) may
    complete again, which the store's max-merge makes harmless.
    """

    def __init__(self, level_key: str, store: ProgressStore, reward: Tuple[int, int] = DEFAULT_REWARD) -> None:
        self.level_key = level_key
        self.store = store
        self.reward = reward
        self.completed = False
        self.progress: Progress = store.read(level_key)

    def complete_once(self) -> bool:
        """Record the reward if this session has not already; return whether it did."""

        if self.completed:
            return False
        self.completed = True
        stars, xp = self.reward
        self.progress = self.store.write(self.level_key, stars, xp)
        logger.info("Level %s completed", self.level_key)
        return True

    def record(self, outcome: Outcome) -> Outcome:
        """Fire the completion signal on the first success and pass *outcome* through."""

        if outcome is Outcome.SUCCESS:
            self.complete_once()
        return outcome
