from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from .extractors import extract, language_for, language_id_for_path
from .utils import read_text_soft

logger = logging.getLogger(__name__)

MESSAGE_TEMPLATE = "{name} is not defined in any .env file"


class Severity(str, Enum):
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True, slots=True)
class Span:
    start: Position
    end: Position

    def as_record(self) -> Dict[str, Dict[str, int]]:
        return {
            "start": {"line": self.start.line, "character": self.start.character},
            "end": {"line": self.end.line, "character": self.end.character},
        }


@dataclass(frozen=True, slots=True)
class FixRequest:
    """Everything the add-variable command needs: what to add, and where it was seen."""

    name: str
    document: str


@dataclass(frozen=True, slots=True)
class Diagnostic:
    message: str
    span: Span
    fix: FixRequest
    severity: Severity = Severity.WARNING

    @property
    def name(self) -> str:
        return self.fix.name

    def as_record(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "severity": self.severity.value,
            "range": self.span.as_record(),
            "name": self.fix.name,
            "document": self.fix.document,
        }


@dataclass(slots=True)
class Document:
    uri: str
    language_id: str
    text: str

    @classmethod
    def from_path(cls, path: Path, uri: Optional[str] = None, language_id: Optional[str] = None) -> Optional["Document"]:
        """Load a source file, or ``None`` when it is unreadable."""

        text = read_text_soft(path)
        if text is None:
            return None
        return cls(
            uri=uri or str(path),
            language_id=language_id or language_id_for_path(path) or "plaintext",
            text=text,
        )


class _LineIndex:
    def __init__(self, text: str):
        self.starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self.starts.append(index + 1)

    def position_at(self, offset: int) -> Position:
        line = bisect_right(self.starts, offset) - 1
        return Position(line=line, character=offset - self.starts[line])


def validate(document: Document, declared: Set[str]) -> List[Diagnostic]:
    language = language_for(document.language_id)
    if language is None:
        logger.debug("No extractor for %s (%s)", document.uri, document.language_id)
        return []
    lines: Optional[_LineIndex] = None
    diagnostics: List[Diagnostic] = []
    for reference in extract(document.text, language, document.uri):
        if reference.name in declared:
            continue
        if lines is None:
            lines = _LineIndex(document.text)
        diagnostics.append(
            Diagnostic(
                message=MESSAGE_TEMPLATE.format(name=reference.name),
                span=Span(lines.position_at(reference.start), lines.position_at(reference.end)),
                fix=FixRequest(name=reference.name, document=document.uri),
            )
        )
    return diagnostics
