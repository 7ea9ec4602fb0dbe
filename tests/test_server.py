import json
import threading
import urllib.error
import urllib.request

import pytest

from live_env_validator import DiagnosticStore, Workspace
from live_env_validator.server import make_server


@pytest.fixture
def server(tmp_path):
    (tmp_path / ".env").write_text("MY_VAR=123\n", encoding="utf-8")
    store = DiagnosticStore()
    httpd = make_server(Workspace(tmp_path), store, host="127.0.0.1", port=0)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{httpd.server_address[1]}", store, tmp_path
    finally:
        httpd.shutdown()
        httpd.server_close()


def _get(url):
    with urllib.request.urlopen(url, timeout=5) as response:
        return json.loads(response.read())


def _post(url, payload):
    request = urllib.request.Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    with urllib.request.urlopen(request, timeout=5) as response:
        return json.loads(response.read())


def test_health_and_env(server):
    base, _, _ = server
    assert _get(f"{base}/health") == {"status": "ok"}
    assert _get(f"{base}/env") == {"files": [".env"], "declared": ["MY_VAR"]}


def test_validate_publishes_and_fix_appends(server):
    base, store, root = server
    result = _post(
        f"{base}/validate",
        {"document": "untitled.ts", "language": "typescript", "text": "process.env.MY_VAR process.env.MY_THIRD_VAR"},
    )
    assert [d["message"] for d in result["diagnostics"]] == ["MY_THIRD_VAR is not defined in any .env file"]
    assert result["actions"] == ["Add MY_THIRD_VAR to .env file"]
    assert [d.name for d in store.get("untitled.ts")] == ["MY_THIRD_VAR"]

    published = _get(f"{base}/diagnostics?document=untitled.ts")
    assert list(published["documents"]) == ["untitled.ts"]

    fixed = _post(f"{base}/fix", {"name": "MY_THIRD_VAR", "document": "untitled.ts"})
    assert fixed["status"] == "updated"
    assert fixed["message"] == "Added MY_THIRD_VAR to .env"
    assert (root / ".env").read_text(encoding="utf-8") == "MY_VAR=123\n\nMY_THIRD_VAR="


def test_fix_errors_are_bad_requests(server):
    base, _, root = server
    (root / ".env.local").write_text("", encoding="utf-8")
    with pytest.raises(urllib.error.HTTPError) as excinfo:
        _post(f"{base}/fix", {"name": "X"})
    assert excinfo.value.code == 400
    assert "Several .env files" in json.loads(excinfo.value.read())["error"]

    with pytest.raises(urllib.error.HTTPError) as excinfo:
        _post(f"{base}/fix", {"document": "a.ts"})
    assert excinfo.value.code == 400


def test_scan(server):
    base, store, root = server
    (root / "app.ts").write_text("process.env.MISSING", encoding="utf-8")
    assert _post(f"{base}/scan", {}) == {"documents": 1, "diagnostics": 1}
    assert store.total == 1


def test_non_string_fields_are_bad_requests(server):
    base, _, _ = server
    with pytest.raises(urllib.error.HTTPError) as excinfo:
        _post(f"{base}/validate", {"document": "a.ts", "language": 5, "text": "process.env.X"})
    assert excinfo.value.code == 400
    assert "language" in json.loads(excinfo.value.read())["error"]


def test_fix_rejects_injected_name_and_foreign_target(server):
    base, _, root = server
    with pytest.raises(urllib.error.HTTPError) as excinfo:
        _post(f"{base}/fix", {"name": "X\nEVIL=1"})
    assert excinfo.value.code == 400

    (root / "app.ts").write_text("process.env.X", encoding="utf-8")
    with pytest.raises(urllib.error.HTTPError) as excinfo:
        _post(f"{base}/fix", {"name": "X", "env_file": "app.ts"})
    assert excinfo.value.code == 400
    assert (root / ".env").read_text(encoding="utf-8") == "MY_VAR=123\n"
    assert (root / "app.ts").read_text(encoding="utf-8") == "process.env.X"
