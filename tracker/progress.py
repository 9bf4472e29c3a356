"""
Progress document schema and the pure functions that reduce it.

A progress document is a plain JSON object. Every stored document carries at
least the keys of `default_document()`; unknown top-level keys are kept as-is
but never interpreted.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from tracker.errors import MalformedBody, StorageUnavailable, UnknownField
from tracker.storage import DocumentStore

logger = logging.getLogger(__name__)

RECOGNIZED_FIELDS = frozenset(
    {
        "currentDay",
        "dayTasks",
        "todos",
        "dailyChecks",
        "timeLog",
        "topicLog",
        "mocks",
        "lastUpdated",
    }
)

TIME_PERIODS = ("morning", "evening", "night")


def default_document() -> dict:
    """Return a fresh empty document. Never share the result across tenants."""
    return {
        "currentDay": 1,
        "dayTasks": {},
        "todos": [],
        "dailyChecks": {},
        "timeLog": {},
        "topicLog": {},
        "mocks": [],
        "lastUpdated": None,
    }


def is_recognized_field(name: str) -> bool:
    return name in RECOGNIZED_FIELDS


def normalize_document(value: Any) -> dict:
    """Fill in any missing default keys. Extra keys pass through."""
    if not isinstance(value, dict):
        raise MalformedBody("Progress data must be a JSON object")
    doc = default_document()
    doc.update(copy.deepcopy(value))
    return doc


def _iso_now() -> str:
    # Millisecond precision with a Z suffix, as browsers emit from toISOString().
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _round_half_up(value: float, digits: int = 0) -> float:
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def touch_timestamp(doc: dict, now: Optional[str] = None) -> dict:
    touched = dict(doc)
    touched["lastUpdated"] = now or _iso_now()
    return touched


def apply_patch(doc: dict, field: str, value: Any) -> dict:
    """
    Replace one top-level field wholesale.

    Mapping-typed fields are not merged: patching `dayTasks` swaps the whole
    mapping, so clients resend every entry.
    """
    if not is_recognized_field(field):
        raise UnknownField()
    patched = dict(doc)
    patched[field] = value
    return patched


@dataclass(frozen=True)
class StatsSummary:
    current_day: Any
    total_tasks_done: int
    total_mocks: int
    avg_score: int
    total_time_minutes: float
    total_time_hours: float
    days_tracked: int
    last_updated: Optional[str]

    def as_dict(self) -> dict:
        return {
            "currentDay": self.current_day,
            "totalTasksDone": self.total_tasks_done,
            "totalMocks": self.total_mocks,
            "avgScore": self.avg_score,
            "totalTimeMinutes": self.total_time_minutes,
            "totalTimeHours": self.total_time_hours,
            "daysTracked": self.days_tracked,
            "lastUpdated": self.last_updated,
        }


def _entries(value: Any) -> list:
    """Values of a mapping or items of a list; anything else is empty."""
    if isinstance(value, dict):
        return list(value.values())
    if isinstance(value, list):
        return value
    return []


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _minutes(entry: Any) -> float:
    if not isinstance(entry, dict):
        return 0
    return sum(_number(entry.get(period)) for period in TIME_PERIODS)


def _score(mock: Any) -> float:
    if not isinstance(mock, dict):
        return 0
    return _number(mock.get("score"))


def compute_stats(doc: dict) -> StatsSummary:
    """
    Derive the read-only summary. Does not touch `doc`.

    Fields holding the wrong JSON type are tolerated: a list counts like a
    mapping's values and a scalar counts as empty.
    """
    day_tasks = _entries(doc.get("dayTasks"))
    mocks = doc.get("mocks")
    if not isinstance(mocks, list):
        mocks = []
    time_log = _entries(doc.get("timeLog"))
    daily_checks = _entries(doc.get("dailyChecks"))

    total_tasks_done = sum(1 for done in day_tasks if done)

    total_mocks = len(mocks)
    if total_mocks:
        score_sum = sum(_score(mock) for mock in mocks)
        avg_score = int(_round_half_up(score_sum / total_mocks))
    else:
        avg_score = 0

    total_minutes = sum(_minutes(entry) for entry in time_log)

    return StatsSummary(
        current_day=doc.get("currentDay"),
        total_tasks_done=total_tasks_done,
        total_mocks=total_mocks,
        avg_score=avg_score,
        total_time_minutes=total_minutes,
        total_time_hours=_round_half_up(total_minutes / 60, 1),
        days_tracked=len(daily_checks),
        last_updated=doc.get("lastUpdated"),
    )


def load_or_default(store: DocumentStore, key: str) -> dict:
    try:
        stored = store.load(key)
    except Exception as exc:
        logger.exception("Error loading progress for %s", key)
        raise StorageUnavailable("Failed to load data") from exc
    if stored is None:
        return default_document()
    if not isinstance(stored, dict):
        logger.error("Stored progress for %s is not a JSON object", key)
        raise StorageUnavailable("Failed to load data")
    return normalize_document(stored)


def save_document(store: DocumentStore, key: str, doc: Any) -> dict:
    """Normalize, stamp `lastUpdated` and persist. Returns the saved document."""
    to_save = touch_timestamp(normalize_document(doc))
    try:
        store.save(key, to_save)
    except Exception as exc:
        logger.exception("Error saving progress for %s", key)
        raise StorageUnavailable("Failed to save") from exc
    return to_save


def reset_document(store: DocumentStore, key: str) -> dict:
    return save_document(store, key, default_document())
