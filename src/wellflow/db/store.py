"""Typed load/save of the persisted records.

The store keeps four independent records (profile, calorie logs, fasting
history, current fast) plus the day-boundary marker. Each record is parsed
into its model on load. A missing, corrupt or schema-mismatched record never
raises: the documented default is returned, a warning is logged and the
raw text is kept under `<key>.unusable` so a later save cannot destroy it.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from wellflow.db.connection import DatabaseConnection
from wellflow.db.queries import RecordQueries
from wellflow.fasting.session import FastingState
from wellflow.tracking.models import FastingSession, LogEntry, UserProfile
from wellflow.tracking.timeutils import now_ms

logger = logging.getLogger(__name__)

PROFILE_KEY = "profile"
LOGS_KEY = "logs"
FASTING_HISTORY_KEY = "fasting_logs"
FASTING_STATE_KEY = "fasting_state"
LAST_RESET_KEY = "last_reset"

# Records carried by export files, in document order
EXPORTED_KEYS = (PROFILE_KEY, LOGS_KEY, FASTING_HISTORY_KEY, FASTING_STATE_KEY)


def unusable_key(key: str) -> str:
    """Key under which the raw text of an unusable record is preserved."""
    return f"{key}.unusable"


def _parse_list(item_parser: Callable[[Any], Any]) -> Callable[[Any], list]:
    def parse(data: Any) -> list:
        if not isinstance(data, list):
            raise ValueError("expected a list")
        return [item_parser(item) for item in data]

    return parse


def _parse_marker(data: Any) -> int:
    if isinstance(data, bool) or not isinstance(data, (int, float)):
        raise ValueError(f"marker must be a number, got {data!r}")
    if not math.isfinite(data):
        raise ValueError(f"marker must be finite, got {data!r}")
    return int(data)


@dataclass(frozen=True)
class RecordCodec:
    """How one record maps between its model and its JSON document."""

    parse: Callable[[Any], Any]
    dump: Callable[[Any], Any]


RECORD_CODECS: dict[str, RecordCodec] = {
    PROFILE_KEY: RecordCodec(UserProfile.from_dict, lambda p: p.to_dict()),
    LOGS_KEY: RecordCodec(
        _parse_list(LogEntry.from_dict), lambda logs: [e.to_dict() for e in logs]
    ),
    FASTING_HISTORY_KEY: RecordCodec(
        _parse_list(FastingSession.from_dict),
        lambda sessions: [s.to_dict() for s in sessions],
    ),
    FASTING_STATE_KEY: RecordCodec(FastingState.from_dict, lambda s: s.to_dict()),
    LAST_RESET_KEY: RecordCodec(_parse_marker, int),
}


def parse_record(key: str, data: Any) -> Any:
    """Parse a decoded JSON document into the model for key.

    Raises:
        KeyError: If key is not a known record
        ValueError: If the document does not match the record's schema
    """
    try:
        return RECORD_CODECS[key].parse(data)
    except (TypeError, AttributeError) as exc:
        raise ValueError(f"invalid '{key}' record: {exc}") from exc


def dump_record(key: str, value: Any) -> Any:
    """Convert a model value into its JSON-ready document."""
    return RECORD_CODECS[key].dump(value)


class StateStore:
    """Load/save access to the persisted records."""

    def __init__(self, db: DatabaseConnection):
        self.db = db
        self.db.initialize_schema()

    def _load(self, key: str, default: Callable[[], Any]) -> Any:
        with self.db.get_connection() as conn:
            raw = RecordQueries.get_record(conn, key)

        if raw is None:
            return default()

        try:
            return parse_record(key, json.loads(raw))
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError too
            self._keep_unusable(key, raw)
            logger.warning(
                "Stored '%s' record is unusable, using default (raw copy kept under '%s'): %s",
                key,
                unusable_key(key),
                exc,
            )
            return default()

    def _keep_unusable(self, key: str, raw: str) -> None:
        with self.db.get_connection() as conn:
            RecordQueries.put_record(conn, unusable_key(key), raw)

    def _save(self, key: str, value: Any) -> None:
        self.write_document(key, dump_record(key, value))

    def write_document(self, key: str, document: Any) -> None:
        """Persist an already-serialized JSON document under key."""
        with self.db.get_connection() as conn:
            RecordQueries.put_record(conn, key, json.dumps(document))
        logger.debug("Saved '%s' record", key)

    def has_record(self, key: str) -> bool:
        with self.db.get_connection() as conn:
            return RecordQueries.get_record(conn, key) is not None

    def load_profile(self) -> UserProfile:
        return self._load(PROFILE_KEY, UserProfile)

    def save_profile(self, profile: UserProfile) -> None:
        self._save(PROFILE_KEY, profile)

    def load_logs(self) -> list[LogEntry]:
        return self._load(LOGS_KEY, list)

    def save_logs(self, logs: list[LogEntry]) -> None:
        self._save(LOGS_KEY, logs)

    def load_fasting_history(self) -> list[FastingSession]:
        return self._load(FASTING_HISTORY_KEY, list)

    def save_fasting_history(self, history: list[FastingSession]) -> None:
        self._save(FASTING_HISTORY_KEY, history)

    def load_fasting_state(self) -> FastingState:
        return self._load(FASTING_STATE_KEY, FastingState)

    def save_fasting_state(self, state: FastingState) -> None:
        self._save(FASTING_STATE_KEY, state)

    def load_last_reset(self, now: Optional[int] = None) -> int:
        """Return the day-boundary marker.

        A missing or unusable marker defaults to now, which is saved right
        away so later runs compare against the first one.
        """
        marker = self._load(LAST_RESET_KEY, lambda: None)
        if marker is None:
            marker = now if now is not None else now_ms()
            self.save_last_reset(marker)
        return marker

    def save_last_reset(self, marker: int) -> None:
        self._save(LAST_RESET_KEY, marker)
