"""Best-ever (stars, xp) records per level key.

Stores never downgrade a record: :meth:`ProgressStore.write` keeps the maximum of the
stored and the new value for each field independently.  Nothing here deletes records;
an unreadable JSON file is kept aside rather than overwritten.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from . import config
from .errors import InvalidInput
from .logging_config import get_logger

logger = get_logger(__name__)

MAX_STARS = 3


@dataclass(frozen=True)
class Progress:
    stars: int = 0
    xp: int = 0

    def merge(self, other: "Progress") -> "Progress":
        return Progress(stars=max(self.stars, other.stars), xp=max(self.xp, other.xp))


def _validated(stars: int, xp: int) -> Progress:
    if isinstance(stars, bool) or not isinstance(stars, int) or not 0 <= stars <= MAX_STARS:
        raise InvalidInput(f"stars must be an integer in [0, {MAX_STARS}]")
    if isinstance(xp, bool) or not isinstance(xp, int) or xp < 0:
        raise InvalidInput("xp must be a non-negative integer")
    return Progress(stars=stars, xp=xp)


class ProgressStore:
    """Read-merge-write store; subclasses provide ``_load``/``_save`` and the snapshot hooks.

    Besides progress records a store keeps whole-widget snapshots (for example the
    graph editor's document) under their own keys.  Snapshots are replaced wholesale.
    """

    def _load(self, level_key: str) -> Optional[Progress]:
        raise NotImplementedError

    def _save(self, level_key: str, progress: Progress) -> None:
        raise NotImplementedError

    def _load_snapshot(self, key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def _save_snapshot(self, key: str, document: Dict[str, Any]) -> None:
        raise NotImplementedError

    def read(self, level_key: str) -> Progress:
        """Return the stored record, or ``Progress(0, 0)`` if none exists yet."""

        return self._load(level_key) or Progress()

    def write(self, level_key: str, stars: int, xp: int) -> Progress:
        """Merge ``(stars, xp)`` into the stored record and persist it immediately."""

        incoming = _validated(stars, xp)
        current = self.read(level_key)
        merged = current.merge(incoming)
        if merged != current:
            logger.info("Progress for %s upgraded to %d stars / %d xp", level_key, merged.stars, merged.xp)
        self._save(level_key, merged)
        return merged

    def read_snapshot(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the last saved snapshot for *key*, or ``None``."""

        return self._load_snapshot(key)

    def write_snapshot(self, key: str, document: Dict[str, Any]) -> None:
        self._save_snapshot(key, document)


class MemoryProgressStore(ProgressStore):
    def __init__(self) -> None:
        self._records: Dict[str, Progress] = {}
        self._snapshots: Dict[str, str] = {}

    def _load(self, level_key: str) -> Optional[Progress]:
        return self._records.get(level_key)

    def _save(self, level_key: str, progress: Progress) -> None:
        self._records[level_key] = progress

    def _load_snapshot(self, key: str) -> Optional[Dict[str, Any]]:
        text = self._snapshots.get(key)
        return None if text is None else json.loads(text)

    def _save_snapshot(self, key: str, document: Dict[str, Any]) -> None:
        # kept as JSON text; every read returns a fresh copy
        self._snapshots[key] = json.dumps(document)


def _read_json_object(path: Path) -> Optional[Dict[str, Any]]:
    """Return the JSON object in *path*; ``{}`` if the file is missing, ``None`` if unreadable."""

    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable file %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return None
    return data


class JsonProgressStore(ProgressStore):
    """Persist every record into a single JSON object keyed by level.

    Snapshots live next to it in ``<stem>.<key>.json``.  An unreadable progress file is
    moved aside to ``<name>.corrupt`` before the next write instead of being overwritten.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else config.PROGRESS_PATH

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_name(self.path.name + ".corrupt")

    def snapshot_path(self, key: str) -> Path:
        return self.path.with_name(f"{self.path.stem}.{key}.json")

    def _read_all(self) -> Dict[str, Dict[str, int]]:
        data = _read_json_object(self.path)
        return {} if data is None else data

    def _load(self, level_key: str) -> Optional[Progress]:
        record = self._read_all().get(level_key)
        if not isinstance(record, dict):
            return None
        try:
            return _validated(record.get("stars", 0), record.get("xp", 0))
        except InvalidInput:
            logger.warning("Ignoring invalid progress record for %s", level_key)
            return None

    def _save(self, level_key: str, progress: Progress) -> None:
        data = _read_json_object(self.path)
        if data is None:
            self.path.replace(self.corrupt_path)
            logger.warning("Moved unreadable progress file to %s", self.corrupt_path)
            data = {}
        data[level_key] = asdict(progress)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

    def _load_snapshot(self, key: str) -> Optional[Dict[str, Any]]:
        return _read_json_object(self.snapshot_path(key)) or None

    def _save_snapshot(self, key: str, document: Dict[str, Any]) -> None:
        path = self.snapshot_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document, indent=2), encoding="utf-8")
