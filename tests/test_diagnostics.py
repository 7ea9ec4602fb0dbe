from live_env_validator import DiagnosticStore, Document, validate


def _diagnostics(uri, text):
    return validate(Document(uri, "typescript", text), set())


def test_publish_replaces_everything_by_default():
    store = DiagnosticStore()
    store.publish({"a.ts": _diagnostics("a.ts", "process.env.A"), "b.ts": _diagnostics("b.ts", "process.env.B")})
    assert store.total == 2

    store.publish({"a.ts": []})
    assert store.get("b.ts") == []
    assert store.get("a.ts") == []
    assert [doc for doc, _ in store.items()] == ["a.ts"]


def test_publish_with_scope_keeps_other_documents():
    store = DiagnosticStore()
    store.publish({"a.ts": _diagnostics("a.ts", "process.env.A"), "b.ts": _diagnostics("b.ts", "process.env.B")})

    store.publish({"a.ts": _diagnostics("a.ts", "process.env.X process.env.Y")}, scope=["a.ts"])
    assert [d.name for d in store.get("a.ts")] == ["X", "Y"]
    assert [d.name for d in store.get("b.ts")] == ["B"]


def test_version_and_snapshot():
    store = DiagnosticStore()
    assert store.version == 0
    store.set("a.ts", _diagnostics("a.ts", "process.env.A"))
    store.clear()
    assert store.version == 2
    assert store.total == 0

    store.set("a.ts", _diagnostics("a.ts", "process.env.A"))
    snap = store.snapshot()
    assert snap["version"] == 3
    assert snap["updated_at"]
    assert snap["documents"]["a.ts"][0]["message"] == "A is not defined in any .env file"
    assert store.snapshot("missing.ts")["documents"] == {}
