"""Subject and level catalogue, and the factory mounting a game for a level."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from . import games
from .progress import ProgressStore


@dataclass(frozen=True)
class Level:
    id: str
    title: str


SUBJECT_TITLES: Dict[str, str] = {
    "cse": "Computer Science & Engineering",
    "ece": "Electronics & Communication Engineering",
    "mech": "Mechanical Engineering",
}

SUBJECTS: Dict[str, Tuple[Level, ...]] = {
    "cse": (
        Level("stacks", "Stacks (Push/Pop)"),
        Level("queues", "Queues (Enqueue/Dequeue)"),
        Level("sorting", "Sorting Basics"),
        Level("graphs", "Graph Basics"),
    ),
    "ece": (
        Level("dc", "DC Circuits"),
        Level("rlc", "RLC Response"),
        Level("diodes", "Diodes & Rectifiers"),
    ),
    "mech": (
        Level("torque", "Torque & Balance"),
        Level("beams", "Beams & Bending"),
        Level("shm", "Simple Harmonic Motion"),
    ),
}

GameFactory = Callable[[ProgressStore], object]


def _sorting_game(_store: ProgressStore) -> games.SortingGame:
    # sorting keeps no progress
    return games.SortingGame()


# Levels without an entry are placeholders ("game coming soon").
GAMES: Dict[str, GameFactory] = {
    "cse_stacks": games.StackGame,
    "cse_queues": games.QueueGame,
    "cse_sorting": _sorting_game,
    "cse_graphs": games.GraphGame,
    "ece_dc": games.DcCircuitGame,
    "ece_rlc": games.RlcGame,
    "mech_torque": games.BeamBalanceGame,
    "mech_beams": games.BeamBendingGame,
    "mech_shm": games.ShmGame,
}


def level_key(subject: str, level: str) -> str:
    """Progress key for a level, e.g. ``cse_stacks``."""

    return f"{subject}_{level}"


def find_level(subject: str, level: str) -> Optional[Level]:
    for candidate in SUBJECTS.get(subject, ()):
        if candidate.id == level:
            return candidate
    return None


def create_game(subject: str, level: str, store: ProgressStore):
    """Instantiate the game for ``subject``/``level``, or ``None`` for a placeholder."""

    factory = GAMES.get(level_key(subject, level))
    if factory is None:
        return None
    return factory(store)


def format_level_listing(subject: str, store: ProgressStore) -> List[str]:
    """One line per level with its best stars and xp, as shown on a subject page."""

    lines: List[str] = []
    for level in SUBJECTS.get(subject, ()):
        progress = store.read(level_key(subject, level.id))
        stars = "*" * progress.stars if progress.stars > 0 else "-"
        xp = f" +{progress.xp} XP" if progress.xp > 0 else ""
        lines.append(f"{level.title}  {stars}{xp}")
    return lines
