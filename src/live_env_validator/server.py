from __future__ import annotations

import json
import logging
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

from .diagnostics import DiagnosticStore
from .errors import EnvValidatorError
from .validator import FixRequest
from .workspace import Workspace

logger = logging.getLogger(__name__)


def _string_field(payload: Dict[str, Any], key: str, default: Optional[str] = None) -> str:
    value = payload.get(key, default)
    if value is None:
        raise KeyError(key)
    if not isinstance(value, str):
        raise ValueError(f"Field {key!r} must be a string")
    return value


class _ValidatorHandler(BaseHTTPRequestHandler):
    workspace: Workspace
    store: DiagnosticStore

    def _json_response(self, payload: Dict[str, Any], status: HTTPStatus = HTTPStatus.OK) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _read_json(self) -> Dict[str, Any]:
        length = int(self.headers.get("Content-Length", 0))
        raw = self.rfile.read(length) if length else b"{}"
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ValueError("Expected a JSON object")
        return payload

    def do_GET(self) -> None:  # noqa: N802 - framework API
        parsed = urlparse(self.path)
        params = parse_qs(parsed.query)
        if parsed.path == "/health":
            self._json_response({"status": "ok"})
            return
        if parsed.path == "/env":
            files = self.workspace.env_files()
            self._json_response(
                {
                    "files": [self.workspace.identity(path) for path in files],
                    "declared": sorted(self.workspace.declared()),
                }
            )
            return
        if parsed.path == "/diagnostics":
            document = params.get("document", [None])[0]
            self._json_response(self.store.snapshot(document))
            return
        self._json_response({"error": "not found"}, status=HTTPStatus.NOT_FOUND)

    def do_POST(self) -> None:  # noqa: N802 - framework API
        parsed = urlparse(self.path)
        try:
            if parsed.path == "/validate":
                payload = self._read_json()
                document = _string_field(payload, "document")
                diagnostics = self.workspace.validate_text(
                    document,
                    _string_field(payload, "language", "plaintext"),
                    _string_field(payload, "text", ""),
                )
                self.store.publish({document: diagnostics}, scope=[document])
                self._json_response(
                    {
                        "document": document,
                        "diagnostics": [d.as_record() for d in diagnostics],
                        "actions": [action.title for action in self.workspace.code_actions(diagnostics)],
                    }
                )
                return
            if parsed.path == "/scan":
                results = self.workspace.update_diagnostics(self.store)
                self._json_response(
                    {"documents": len(results), "diagnostics": sum(len(items) for items in results.values())}
                )
                return
            if parsed.path == "/fix":
                payload = self._read_json()
                request = FixRequest(
                    name=_string_field(payload, "name"),
                    document=_string_field(payload, "document", ""),
                )
                env_file = _string_field(payload, "env_file", "") or None
                outcome = self.workspace.add_env_var(request, env_file=env_file)
                self._json_response(
                    {
                        "status": outcome.status.value,
                        "env_file": self.workspace.identity(outcome.env_file),
                        "message": self.workspace.describe(outcome),
                    }
                )
                return
        except KeyError as exc:
            self._json_response({"error": f"Missing field {exc}"}, status=HTTPStatus.BAD_REQUEST)
            return
        except (EnvValidatorError, ValueError) as exc:
            self._json_response({"error": str(exc)}, status=HTTPStatus.BAD_REQUEST)
            return
        self._json_response({"error": "not found"}, status=HTTPStatus.NOT_FOUND)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A003 - API name
        return  # silence default logging


def make_server(workspace: Workspace, store: DiagnosticStore, *, host: str, port: int) -> ThreadingHTTPServer:
    handler = type("ValidatorHandler", (_ValidatorHandler,), {"workspace": workspace, "store": store})
    return ThreadingHTTPServer((host, port), handler)


def serve_http(workspace: Workspace, store: DiagnosticStore, *, host: str, port: int) -> None:
    server = make_server(workspace, store, host=host, port=port)
    logger.info("HTTP server listening on %s:%s", host, server.server_address[1])
    try:
        server.serve_forever()
    except KeyboardInterrupt:  # pragma: no cover - CLI use only
        server.shutdown()
