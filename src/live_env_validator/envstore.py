from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Iterable, List, Set

from dotenv import dotenv_values

from .config import DEFAULT_ENV_GLOB, DEFAULT_EXCLUDE
from .utils import is_excluded, read_text_soft

logger = logging.getLogger(__name__)


def find_env_files(
    root: Path,
    pattern: str = DEFAULT_ENV_GLOB,
    exclude: Iterable[str] = DEFAULT_EXCLUDE,
) -> List[Path]:
    """Every ``.env*`` file anywhere below ``root``."""

    root = Path(root)
    if not root.is_dir():
        return []
    exclude = tuple(exclude)
    found = [
        path
        for path in root.rglob(pattern)
        if path.is_file() and not is_excluded(path, root, exclude)
    ]
    return sorted(found)


def parse_names(text: str) -> Set[str]:
    # python-dotenv logs and skips lines it cannot parse, and yields a bare
    # KEY line with a None value; only KEY=VALUE declares a name
    values = dotenv_values(stream=io.StringIO(text), interpolate=False)
    return {key for key, value in values.items() if key and value is not None}


def load_texts(contents: Iterable[str]) -> Set[str]:
    declared: Set[str] = set()
    for text in contents:
        declared |= parse_names(text)
    return declared


def load(files: Iterable[Path]) -> Set[str]:
    """Union of the keys declared across ``files``.

    Missing or unreadable files contribute nothing.
    """

    declared: Set[str] = set()
    skipped = 0
    for path in files:
        text = read_text_soft(path)
        if text is None:
            skipped += 1
            continue
        declared |= parse_names(text)
    if skipped:
        logger.warning("Ignored %d unreadable .env file(s)", skipped)
    return declared
