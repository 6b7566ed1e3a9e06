# campusdash/services/legacy_source.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from campusdash.errors import SourceParseError

logger = logging.getLogger(__name__)

LEGACY_FILENAME = "campusdash-db.json"

Record = dict[str, Any]


@dataclass(frozen=True)
class LegacyDocument:
    transactions: list[Record] = field(default_factory=list)
    grades: list[Record] = field(default_factory=list)
    user_profile: list[Record] = field(default_factory=list)
    assignments: list[Record] = field(default_factory=list)
    schedule: list[Record] = field(default_factory=list)


def locate_legacy_file(
    candidate_dirs: Iterable[Union[Path, str, None]],
    filename: str = LEGACY_FILENAME,
) -> Optional[Path]:
    """
    First existing <dir>/<filename> in priority order, or None.
    Unset directories are skipped.
    """
    checked: list[Path] = []
    for d in candidate_dirs:
        if d is None:
            continue
        path = Path(d) / filename
        if path.is_file():
            logger.info("Legacy data found at %s", path)
            return path
        checked.append(path)
    logger.info("No legacy data file at any of: %s", ", ".join(str(p) for p in checked) or "(none)")
    return None


def _records(raw: Any, section: str) -> list[Record]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Legacy section %r is not a list; ignoring it", section)
        return []
    out = [item for item in raw if isinstance(item, dict)]
    if len(out) != len(raw):
        logger.warning("Skipped %d non-object entries in %r", len(raw) - len(out), section)
    return out


def normalize_schedule(raw: Any) -> list[Record]:
    """
    The legacy schedule was saved either as a list of entries or as an
    object keyed by entry (or by day). Both become one flat list here.
    """
    if raw is None:
        return []
    if isinstance(raw, dict):
        values: list[Any] = list(raw.values())
    elif isinstance(raw, list):
        values = raw
    else:
        logger.warning("Legacy schedule has unexpected type %s; ignoring it", type(raw).__name__)
        return []

    out: list[Record] = []
    for value in values:
        if isinstance(value, dict):
            out.append(value)
        elif isinstance(value, list):
            # day -> [entries]
            out.extend(v for v in value if isinstance(v, dict))
    return out


def parse_legacy_document(data: Any) -> LegacyDocument:
    if not isinstance(data, dict):
        raise SourceParseError(f"Legacy document must be a JSON object, got {type(data).__name__}")
    return LegacyDocument(
        transactions=_records(data.get("transactions"), "transactions"),
        grades=_records(data.get("grades"), "grades"),
        user_profile=_records(data.get("user_profile"), "user_profile"),
        assignments=_records(data.get("assignments"), "assignments"),
        schedule=normalize_schedule(data.get("schedule")),
    )


def load_legacy_document(path: Path) -> LegacyDocument:
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceParseError(f"Cannot read {path}: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SourceParseError(f"Invalid JSON in {path}: {exc}") from exc
    return parse_legacy_document(data)
