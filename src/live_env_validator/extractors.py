"""Lexical extraction of environment variable references.

Each supported language is one member of :class:`SourceLanguage` paired with
one compiled pattern. The variable name is always the ``name`` group of a
match, so the reported offsets never include the surrounding syntax
(``process.env.``, ``os.Getenv("`` and the closing ``")``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, Optional


class SourceLanguage(str, Enum):
    TYPESCRIPT_LIKE = "typescript"
    GO_LIKE = "go"
    PYTHON_LIKE = "python"


@dataclass(frozen=True, slots=True)
class VariableReference:
    name: str
    start: int
    end: int
    document: str = ""


_NAME_CHARS = r"[A-Z0-9_]+"
_NAME = rf"(?P<name>{_NAME_CHARS})"
_FLAGS = re.IGNORECASE | re.ASCII

NAME_PATTERN = re.compile(_NAME_CHARS, _FLAGS)

PATTERNS: Dict[SourceLanguage, re.Pattern[str]] = {
    SourceLanguage.TYPESCRIPT_LIKE: re.compile(r"process\.env\." + _NAME, _FLAGS),
    SourceLanguage.GO_LIKE: re.compile(r'os\.Getenv\("' + _NAME + r'"\)', _FLAGS),
    SourceLanguage.PYTHON_LIKE: re.compile(
        r"os\.(?:getenv\(|environ\.get\(|environ\[)\s*(?P<quote>[\"'])" + _NAME + r"(?P=quote)",
        _FLAGS,
    ),
}

# Editor language identifiers.
LANGUAGE_IDS: Dict[str, SourceLanguage] = {
    "typescript": SourceLanguage.TYPESCRIPT_LIKE,
    "typescriptreact": SourceLanguage.TYPESCRIPT_LIKE,
    "javascript": SourceLanguage.TYPESCRIPT_LIKE,
    "javascriptreact": SourceLanguage.TYPESCRIPT_LIKE,
    "go": SourceLanguage.GO_LIKE,
    "python": SourceLanguage.PYTHON_LIKE,
}

SUFFIXES: Dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "typescriptreact",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".go": "go",
    ".py": "python",
}


def language_for(language_id: str | SourceLanguage | None) -> Optional[SourceLanguage]:
    """Map a language identifier onto a supported language, or ``None``."""

    if language_id is None:
        return None
    if isinstance(language_id, SourceLanguage):
        return language_id
    return LANGUAGE_IDS.get(language_id.lower())


def language_id_for_path(path: Path) -> Optional[str]:
    return SUFFIXES.get(Path(path).suffix.lower())


def extract(text: str, language: SourceLanguage, document: str = "") -> Iterator[VariableReference]:
    pattern = PATTERNS[language]
    for match in pattern.finditer(text):
        yield VariableReference(
            name=match.group("name"),
            start=match.start("name"),
            end=match.end("name"),
            document=document,
        )
