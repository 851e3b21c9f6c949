"""Replayable step sequences for the sorting visualiser.

Each generator copies its input, sorts the copy, and records every atomic action as a
:class:`Compare`, :class:`Swap` or :class:`Set` step.  Replaying the first ``k`` steps
of a :class:`StepSequence` against its base array yields exactly the picture after
``k`` actions, for every ``0 <= k <= len(steps)``.  Compare steps never change data.

Ordering rules that affect the recorded steps:

* bubble, selection and insertion only act on a strict inequality, so equal keys
  produce no swap, no new minimum and no shift;
* merge takes from the left run on ties and records writes only;
* quick sort uses the middle element as pivot and records every cursor comparison
  against the pivot's original index ``(lo + hi) // 2``, even if a swap has since
  moved the pivot value elsewhere.
"""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from . import config
from .errors import InvalidInput
from .logging_config import get_logger

logger = get_logger(__name__)

Number = Union[int, float]


@dataclass(frozen=True)
class Compare:
    i: int
    j: int
    kind = "compare"


@dataclass(frozen=True)
class Swap:
    i: int
    j: int
    kind = "swap"


@dataclass(frozen=True)
class Set:
    i: int
    value: Number
    kind = "set"


Step = Union[Compare, Swap, Set]


@dataclass(frozen=True)
class StepSequence:
    """The base array, the algorithm name and the ordered steps."""

    algorithm: str
    base: Tuple[Number, ...]
    steps: Tuple[Step, ...]

    def __len__(self) -> int:
        return len(self.steps)

    def replay(self, count: Optional[int] = None) -> List[Number]:
        return replay(self.base, self.steps, count)


# --- generators ------------------------------------------------------------------


def bubble_steps(values: Sequence[Number]) -> StepSequence:
    arr = list(values)
    steps: List[Step] = []
    n = len(arr)
    for sweep in range(n - 1):
        for i in range(n - 1 - sweep):
            steps.append(Compare(i, i + 1))
            if arr[i] > arr[i + 1]:
                steps.append(Swap(i, i + 1))
                arr[i], arr[i + 1] = arr[i + 1], arr[i]
    return StepSequence("bubble", tuple(values), tuple(steps))


def selection_steps(values: Sequence[Number]) -> StepSequence:
    arr = list(values)
    steps: List[Step] = []
    n = len(arr)
    for i in range(n - 1):
        min_index = i
        for j in range(i + 1, n):
            steps.append(Compare(min_index, j))
            if arr[j] < arr[min_index]:
                min_index = j
        if min_index != i:
            steps.append(Swap(i, min_index))
            arr[i], arr[min_index] = arr[min_index], arr[i]
    return StepSequence("selection", tuple(values), tuple(steps))


def insertion_steps(values: Sequence[Number]) -> StepSequence:
    """Shift larger elements right with :class:`Set` writes, then write the key.

    A compare is recorded between the cell being tested and the key's original
    index before every shift test.
    """

    arr = list(values)
    steps: List[Step] = []
    for i in range(1, len(arr)):
        key = arr[i]
        j = i - 1
        steps.append(Compare(j, i))
        while j >= 0 and arr[j] > key:
            steps.append(Set(j + 1, arr[j]))
            arr[j + 1] = arr[j]
            j -= 1
            if j >= 0:
                steps.append(Compare(j, i))
        steps.append(Set(j + 1, key))
        arr[j + 1] = key
    return StepSequence("insertion", tuple(values), tuple(steps))


def merge_steps(values: Sequence[Number]) -> StepSequence:
    arr = list(values)
    steps: List[Step] = []

    def _merge_sort(lo: int, hi: int) -> None:
        # sorts the half-open range [lo, hi)
        if hi - lo <= 1:
            return
        mid = (lo + hi) // 2
        _merge_sort(lo, mid)
        _merge_sort(mid, hi)
        merged: List[Number] = []
        left, right = lo, mid
        while left < mid or right < hi:
            if right >= hi or (left < mid and arr[left] <= arr[right]):
                merged.append(arr[left])
                left += 1
            else:
                merged.append(arr[right])
                right += 1
        for offset, value in enumerate(merged):
            steps.append(Set(lo + offset, value))
            arr[lo + offset] = value

    _merge_sort(0, len(arr))
    return StepSequence("merge", tuple(values), tuple(steps))


def quick_steps(values: Sequence[Number]) -> StepSequence:
    arr = list(values)
    steps: List[Step] = []

    def _quick_sort(lo: int, hi: int) -> None:
        # sorts the closed range [lo, hi]
        if lo >= hi:
            return
        mid = (lo + hi) // 2
        pivot = arr[mid]
        i, j = lo, hi
        while i <= j:
            while arr[i] < pivot:
                steps.append(Compare(i, mid))
                i += 1
            while arr[j] > pivot:
                steps.append(Compare(mid, j))
                j -= 1
            if i <= j:
                steps.append(Swap(i, j))
                arr[i], arr[j] = arr[j], arr[i]
                i += 1
                j -= 1
        if lo < j:
            _quick_sort(lo, j)
        if i < hi:
            _quick_sort(i, hi)

    _quick_sort(0, len(arr) - 1)
    return StepSequence("quick", tuple(values), tuple(steps))


GENERATORS: Dict[str, Callable[[Sequence[Number]], StepSequence]] = {
    "bubble": bubble_steps,
    "selection": selection_steps,
    "insertion": insertion_steps,
    "merge": merge_steps,
    "quick": quick_steps,
}
ALGORITHMS: Tuple[str, ...] = tuple(GENERATORS)


def generate_steps(algorithm: str, values: Sequence[Number]) -> StepSequence:
    """Run the named algorithm (case-insensitive) on a copy of *values*."""

    try:
        generator = GENERATORS[algorithm.lower()]
    except KeyError:
        raise InvalidInput(f"unknown sorting algorithm {algorithm!r}; expected one of {ALGORITHMS}") from None
    sequence = generator(values)
    logger.debug("Generated %d %s steps for %d values", len(sequence), sequence.algorithm, len(values))
    return sequence


# --- replay ----------------------------------------------------------------------


def apply_step(arr: List[Number], step: Step) -> None:
    """Apply *step* to *arr* in place."""

    if isinstance(step, Swap):
        arr[step.i], arr[step.j] = arr[step.j], arr[step.i]
    elif isinstance(step, Set):
        arr[step.i] = step.value


def replay(base: Sequence[Number], steps: Sequence[Step], count: Optional[int] = None) -> List[Number]:
    """Return a fresh array equal to *base* after the first *count* steps (default all)."""

    if count is None:
        count = len(steps)
    if not 0 <= count <= len(steps):
        raise InvalidInput(f"step count {count} outside [0, {len(steps)}]")
    arr = list(base)
    for step in steps[:count]:
        apply_step(arr, step)
    return arr


def random_array(size: int = 12, high: int = 120, *, rng: random.Random | None = None) -> List[int]:
    """Random integers in ``[5, high + 4]``, tall enough to label as bars."""

    if rng is None:
        rng = random.Random()
    return [int(rng.random() * high) + 5 for _ in range(size)]


# --- playback --------------------------------------------------------------------


class SortPlayer:
    """Cursor over a :class:`StepSequence` driven by a fixed-delay timer.

    The caller reports time through :meth:`tick`.  At most one step is applied per
    tick, and only once the pending deadline has passed; :meth:`pause` and
    :meth:`reset` drop the deadline so no scheduled step can fire afterwards.
    """

    def __init__(
        self,
        sequence: StepSequence,
        *,
        min_delay: float | None = None,
        max_delay: float | None = None,
    ) -> None:
        self.sequence = sequence
        self.min_delay = config.SORT_MIN_DELAY if min_delay is None else float(min_delay)
        self.max_delay = config.SORT_MAX_DELAY if max_delay is None else float(max_delay)
        self.delay = (self.min_delay + self.max_delay) / 2.0
        self.cursor = 0
        self.array: List[Number] = list(sequence.base)
        self._deadline: Optional[float] = None

    @property
    def playing(self) -> bool:
        return self._deadline is not None

    @property
    def finished(self) -> bool:
        return self.cursor >= len(self.sequence.steps)

    @property
    def highlighted(self) -> Optional[Step]:
        """The step about to be applied, or ``None`` once every step has run."""

        if self.finished:
            return None
        return self.sequence.steps[self.cursor]

    def set_speed(self, slider: float) -> float:
        """Map a speed slider in ``[min_delay, max_delay]`` to a delay; higher is faster."""

        slider = max(self.min_delay, min(self.max_delay, float(slider)))
        self.delay = self.min_delay + self.max_delay - slider
        return self.delay

    def _apply_next(self) -> bool:
        if self.finished:
            return False
        apply_step(self.array, self.sequence.steps[self.cursor])
        self.cursor += 1
        return True

    def play(self, now: float) -> None:
        if self.finished:
            return
        self._deadline = float(now) + self.delay

    def pause(self) -> None:
        self._deadline = None

    def toggle(self, now: float) -> bool:
        if self.playing:
            self.pause()
        else:
            self.play(now)
        return self.playing

    def tick(self, now: float) -> bool:
        """Apply the next step if playing and due; return whether a step was applied."""

        if self._deadline is None or now < self._deadline:
            return False
        applied = self._apply_next()
        if self.finished:
            self._deadline = None
        else:
            self._deadline = float(now) + self.delay
        return applied

    def step_forward(self) -> bool:
        self.pause()
        return self._apply_next()

    def step_backward(self) -> bool:
        """Rebuild the array from the base with one step fewer applied."""

        self.pause()
        if self.cursor == 0:
            return False
        self.cursor -= 1
        self.array = replay(self.sequence.base, self.sequence.steps, self.cursor)
        return True

    def reset(self) -> None:
        self.pause()
        self.cursor = 0
        self.array = list(self.sequence.base)

    def snapshot(self) -> dict:
        step = self.highlighted
        return {
            "algorithm": self.sequence.algorithm,
            "array": list(self.array),
            "cursor": self.cursor,
            "total": len(self.sequence.steps),
            "playing": self.playing,
            "delay": self.delay,
            "highlight": None if step is None else {"kind": step.kind, **asdict(step)},
        }
