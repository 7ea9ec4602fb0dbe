from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .utils import iso_now
from .validator import Diagnostic


class DiagnosticStore:
    """Published diagnostics, keyed by document.

    Every write replaces whole documents; nothing is merged into an existing
    entry. ``version`` increases on each write so renderers can poll for it.
    """

    def __init__(self, name: str = "live-env-validator"):
        self.name = name
        self.version = 0
        self.updated_at: Optional[str] = None
        self._entries: Dict[str, List[Diagnostic]] = {}
        self._lock = threading.Lock()

    def _touch(self) -> None:
        self.version += 1
        self.updated_at = iso_now()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._touch()

    def set(self, document: str, diagnostics: Sequence[Diagnostic]) -> None:
        with self._lock:
            self._entries[document] = list(diagnostics)
            self._touch()

    def publish(
        self,
        results: Mapping[str, Sequence[Diagnostic]],
        scope: Optional[Iterable[str]] = None,
    ) -> None:
        """Clear ``scope`` (everything when omitted), then store ``results``."""

        with self._lock:
            if scope is None:
                self._entries.clear()
            else:
                for document in scope:
                    self._entries.pop(document, None)
            for document, diagnostics in results.items():
                self._entries[document] = list(diagnostics)
            self._touch()

    def get(self, document: str) -> List[Diagnostic]:
        with self._lock:
            return list(self._entries.get(document, []))

    def items(self) -> List[Tuple[str, List[Diagnostic]]]:
        with self._lock:
            return [(document, list(diagnostics)) for document, diagnostics in sorted(self._entries.items())]

    @property
    def total(self) -> int:
        with self._lock:
            return sum(len(diagnostics) for diagnostics in self._entries.values())

    def snapshot(self, document: Optional[str] = None) -> Dict[str, Any]:
        entries = self.items()
        if document is not None:
            entries = [(uri, diagnostics) for uri, diagnostics in entries if uri == document]
        return {
            "name": self.name,
            "version": self.version,
            "updated_at": self.updated_at,
            "documents": {uri: [d.as_record() for d in diagnostics] for uri, diagnostics in entries},
        }
