"""Export and import of the tracked data as a single JSON document.

The document holds the four main records under their store keys:
``profile``, ``logs``, ``fasting_logs`` and ``fasting_state``. Importing
overwrites only the records present in the document; the caller must then
reload all in-memory state from the store.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from wellflow import __version__
from wellflow.db.store import EXPORTED_KEYS, StateStore, dump_record, parse_record
from wellflow.tracking.state import AppState

logger = logging.getLogger(__name__)


def default_export_filename(now: Optional[datetime] = None) -> str:
    """Return a timestamped backup file name."""
    if now is None:
        now = datetime.now()
    return f"wellflow_backup_{now.strftime('%Y%m%d_%H%M%S')}.json"


def export_document(state: AppState) -> dict[str, Any]:
    """Serialize the four exported records into one document."""
    values = {
        "profile": state.profile,
        "logs": state.logs,
        "fasting_logs": state.fasting_history,
        "fasting_state": state.fasting,
    }
    document: dict[str, Any] = {key: dump_record(key, values[key]) for key in EXPORTED_KEYS}
    document["exported_at"] = datetime.now().isoformat()
    document["app"] = f"wellflow {__version__}"
    return document


def write_export(state: AppState, output_path: Optional[Path] = None) -> Path:
    """Write an export document to output_path (default: timestamped file in cwd)."""
    if output_path is None:
        output_path = Path(default_export_filename())
    elif output_path.is_dir():
        output_path = output_path / default_export_filename()

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(export_document(state), f, indent=2, ensure_ascii=False)

    logger.info("Exported %d log entries to %s", len(state.logs), output_path)
    return output_path


def read_import(input_path: Path) -> dict[str, Any]:
    """Read an export document from disk.

    Raises:
        ValueError: If the file is not valid JSON or not a JSON object
    """
    with open(input_path, encoding="utf-8") as f:
        document = json.load(f)
    if not isinstance(document, dict):
        raise ValueError(f"{input_path} does not contain a JSON object")
    return document


def import_document(store: StateStore, document: dict[str, Any]) -> tuple[list[str], list[str]]:
    """Overwrite stored records with those present in document.

    Each record is validated before it is written; an invalid record is
    skipped so the store never holds data that would load as a default.
    Keys absent from the document leave their record unchanged.

    Returns:
        (imported keys, skipped keys)
    """
    imported: list[str] = []
    skipped: list[str] = []

    for key in EXPORTED_KEYS:
        if key not in document:
            continue
        try:
            value = parse_record(key, document[key])
        except ValueError as exc:
            logger.warning("Skipping '%s' from import: %s", key, exc)
            skipped.append(key)
            continue
        store.write_document(key, dump_record(key, value))
        imported.append(key)

    logger.info("Imported records: %s", ", ".join(imported) or "none")
    return imported, skipped
