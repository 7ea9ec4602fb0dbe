from .diagnostics import DiagnosticStore
from .errors import (
    AmbiguousEnvFile,
    ConfigError,
    EnvFileUnwritable,
    EnvValidatorError,
    FixCancelled,
    InvalidVariableName,
    NoEnvFileFound,
    NotAnEnvFile,
)
from .extractors import SourceLanguage, VariableReference, extract
from .fixes import FixOutcome, FixStatus, apply_fix, select_env_file
from .validator import Diagnostic, Document, FixRequest, Severity, validate
from .workspace import Workspace, WorkspaceWatcher

__all__ = [
    "AmbiguousEnvFile",
    "ConfigError",
    "Diagnostic",
    "DiagnosticStore",
    "Document",
    "EnvFileUnwritable",
    "EnvValidatorError",
    "FixCancelled",
    "FixOutcome",
    "FixRequest",
    "FixStatus",
    "InvalidVariableName",
    "NoEnvFileFound",
    "NotAnEnvFile",
    "Severity",
    "SourceLanguage",
    "VariableReference",
    "Workspace",
    "WorkspaceWatcher",
    "apply_fix",
    "extract",
    "select_env_file",
    "validate",
]
