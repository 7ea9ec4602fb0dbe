from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence

from .errors import AmbiguousEnvFile, EnvFileUnwritable, FixCancelled, InvalidVariableName, NoEnvFileFound
from .extractors import NAME_PATTERN

logger = logging.getLogger(__name__)

Chooser = Callable[[Sequence[Path]], Optional[Path]]


class FixStatus(str, Enum):
    UPDATED = "updated"
    NOOP = "noop"


@dataclass(frozen=True, slots=True)
class FixOutcome:
    status: FixStatus
    name: str
    env_file: Path

    @property
    def changed(self) -> bool:
        return self.status is FixStatus.UPDATED


def select_env_file(candidates: Sequence[Path], choose: Optional[Chooser] = None) -> Path:
    """Pick the file a declaration should go into.

    One candidate is used as-is. With several, ``choose`` decides; it may
    return ``None`` when the user backs out.
    """

    candidates = list(candidates)
    if not candidates:
        raise NoEnvFileFound()
    if len(candidates) == 1:
        return candidates[0]
    if choose is None:
        raise AmbiguousEnvFile(candidates)
    selected = choose(candidates)
    if selected is None:
        raise FixCancelled()
    return Path(selected)


def declares(content: str, name: str) -> bool:
    prefix = f"{name}="
    return any(line.startswith(prefix) for line in content.splitlines())


def apply_fix(name: str, env_file: Path) -> FixOutcome:
    """Append ``NAME=`` to ``env_file`` unless a line already starts with it."""

    if not NAME_PATTERN.fullmatch(name):
        raise InvalidVariableName(name)
    env_file = Path(env_file)
    try:
        content = env_file.read_text(encoding="utf-8") if env_file.exists() else ""
        if declares(content, name):
            logger.debug("%s already declared in %s", name, env_file)
            return FixOutcome(FixStatus.NOOP, name, env_file)
        with env_file.open("a", encoding="utf-8") as handle:
            handle.write(f"\n{name}=")
    except UnicodeDecodeError as exc:
        raise EnvFileUnwritable(env_file, "not valid UTF-8 text") from exc
    except OSError as exc:
        raise EnvFileUnwritable(env_file, exc.strerror or str(exc)) from exc
    logger.info("Added %s to %s", name, env_file)
    return FixOutcome(FixStatus.UPDATED, name, env_file)
