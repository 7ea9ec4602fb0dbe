from __future__ import annotations

import fnmatch
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def iso_now() -> str:
    """Return a UTC ISO 8601 timestamp."""

    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def read_text_soft(path: Path) -> str | None:
    """Read a UTF-8 file, returning ``None`` when it cannot be read."""

    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Skipping unreadable file %s: %s", path, exc)
        return None


def is_excluded(path: Path, root: Path, patterns: Iterable[str]) -> bool:
    """True when any directory between ``root`` and ``path`` matches a pattern."""

    try:
        parts = Path(path).relative_to(root).parts[:-1]
    except ValueError:
        parts = Path(path).parts[:-1]
    patterns = tuple(patterns)
    return any(fnmatch.fnmatch(part, pattern) for part in parts for pattern in patterns)
