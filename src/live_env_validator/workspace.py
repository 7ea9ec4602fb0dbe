from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from . import envstore
from .config import Config, load_config
from .diagnostics import DiagnosticStore
from .errors import NotAnEnvFile
from .extractors import SUFFIXES, language_for
from .fixes import Chooser, FixOutcome, apply_fix, select_env_file
from .utils import is_excluded
from .validator import Diagnostic, Document, FixRequest, validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CodeAction:
    title: str
    fix: FixRequest


class Workspace:
    def __init__(self, root: str | Path, config: Optional[Config] = None):
        self.root = Path(root)
        self.config = config if config is not None else load_config(self.root)

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------
    def env_files(self) -> List[Path]:
        return envstore.find_env_files(self.root, self.config.env_glob, self.config.exclude)

    def declared(self) -> Set[str]:
        return envstore.load(self.env_files())

    def documents(self) -> List[Path]:
        if not self.root.is_dir():
            return []
        found: List[Path] = []
        for path in self.root.rglob("*"):
            if path.suffix.lower() not in SUFFIXES or not path.is_file():
                continue
            if is_excluded(path, self.root, self.config.exclude):
                continue
            found.append(path)
        return sorted(found)

    def identity(self, path: Path) -> str:
        try:
            return Path(path).relative_to(self.root).as_posix()
        except ValueError:
            return str(path)

    def resolve(self, path: str | Path) -> Path:
        path = Path(path)
        return path if path.is_absolute() else self.root / path

    def supports(self, language_id: str) -> bool:
        language = language_for(language_id)
        return language is not None and language in self.config.languages

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate_text(
        self,
        document: str,
        language_id: str,
        text: str,
        declared: Optional[Set[str]] = None,
    ) -> List[Diagnostic]:
        if not self.supports(language_id):
            return []
        if declared is None:
            declared = self.declared()
        return validate(Document(uri=document, language_id=language_id, text=text), declared)

    def scan(self, paths: Optional[Iterable[str | Path]] = None) -> Dict[str, List[Diagnostic]]:
        """Diagnostics for every supported document, keyed by document identity.

        Documents in unsupported languages get no entry at all.
        """

        targets = self.documents() if paths is None else [self.resolve(p) for p in paths]
        declared = self.declared()
        results: Dict[str, List[Diagnostic]] = {}
        for path in targets:
            document = Document.from_path(path, uri=self.identity(path))
            if document is None or not self.supports(document.language_id):
                continue
            results[document.uri] = validate(document, declared)
        logger.debug("Scanned %d document(s) against %d declared name(s)", len(results), len(declared))
        return results

    def update_diagnostics(
        self,
        store: DiagnosticStore,
        paths: Optional[Iterable[str | Path]] = None,
    ) -> Dict[str, List[Diagnostic]]:
        """Rescan and publish; stale entries for the rescanned scope are dropped first."""

        if paths is None:
            results = self.scan()
            store.publish(results)
            return results
        paths = list(paths)
        results = self.scan(paths)
        store.publish(results, scope=[self.identity(self.resolve(p)) for p in paths])
        return results

    # ------------------------------------------------------------------
    # Fixes
    # ------------------------------------------------------------------
    def code_actions(self, diagnostics: Sequence[Diagnostic]) -> List[CodeAction]:
        return [CodeAction(title=f"Add {d.fix.name} to .env file", fix=d.fix) for d in diagnostics]

    def add_env_var(
        self,
        request: FixRequest,
        choose: Optional[Chooser] = None,
        env_file: Optional[str | Path] = None,
    ) -> FixOutcome:
        """Declare ``request.name`` in one of the workspace's .env files.

        ``env_file`` preselects the target; it must be one of :meth:`env_files`.
        """

        logger.debug("Fix for %s requested from %s", request.name, request.document or "(no document)")
        candidates = self.env_files()
        if env_file is not None:
            wanted = self.resolve(env_file).resolve()
            matches = [path for path in candidates if path.resolve() == wanted]
            if candidates and not matches:
                raise NotAnEnvFile(self.resolve(env_file))
            target = select_env_file(candidates, lambda _candidates: matches[0])
        else:
            target = select_env_file(candidates, choose)
        return apply_fix(request.name, target)

    def describe(self, outcome: FixOutcome) -> str:
        if outcome.changed:
            return f"Added {outcome.name} to {outcome.env_file.name}"
        return f"{outcome.name} is already declared in {outcome.env_file.name}"


class WorkspaceWatcher:
    """Re-validates a workspace whenever a watched file changes."""

    def __init__(self, workspace: Workspace, store: DiagnosticStore):
        self.workspace = workspace
        self.store = store
        self._signature: Optional[Tuple[Tuple[str, int, int], ...]] = None

    def _current_signature(self) -> Tuple[Tuple[str, int, int], ...]:
        entries = []
        for path in self.workspace.env_files() + self.workspace.documents():
            try:
                stat = path.stat()
            except OSError:
                continue
            entries.append((str(path), stat.st_mtime_ns, stat.st_size))
        return tuple(sorted(entries))

    def poll(self) -> bool:
        """Rescan if anything changed since the last poll; True when it did."""

        signature = self._current_signature()
        if signature == self._signature:
            return False
        self._signature = signature
        self.workspace.update_diagnostics(self.store)
        return True
