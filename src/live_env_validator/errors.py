from __future__ import annotations

from pathlib import Path
from typing import Sequence


class EnvValidatorError(RuntimeError):
    """Base class for failures surfaced to the user."""


class NoEnvFileFound(EnvValidatorError):
    def __init__(self, message: str = "No .env file found in the workspace.") -> None:
        super().__init__(message)


class AmbiguousEnvFile(EnvValidatorError):
    def __init__(self, candidates: Sequence[Path]) -> None:
        self.candidates = list(candidates)
        names = ", ".join(str(path) for path in self.candidates)
        super().__init__(f"Several .env files found, pick one of: {names}")


class FixCancelled(EnvValidatorError):
    def __init__(self, message: str = "No .env file selected.") -> None:
        super().__init__(message)


class ConfigError(EnvValidatorError):
    pass


class InvalidVariableName(EnvValidatorError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Invalid variable name {name!r}: use letters, digits and underscores only.")


class NotAnEnvFile(EnvValidatorError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"{path} is not a .env file in this workspace.")


class EnvFileUnwritable(EnvValidatorError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot update {path}: {reason}")
