import asyncio
import json
import time

from websockets.asyncio.client import connect
from websockets.asyncio.server import serve

from live_env_validator import DiagnosticStore, Document, validate
from live_env_validator.ws import DiagnosticRelay


def test_relay_pushes_publications_for_one_document():
    store = DiagnosticStore()
    store.publish({"b.ts": validate(Document("b.ts", "typescript", "process.env.B"), set())})
    relay = DiagnosticRelay(store, poll_interval=0.05)

    async def scenario():
        async with serve(relay.handler, "127.0.0.1", 0) as server:
            port = server.sockets[0].getsockname()[1]
            async with connect(f"ws://127.0.0.1:{port}/a.ts") as client:
                first = json.loads(await asyncio.wait_for(client.recv(), 2))
                store.publish(
                    {"a.ts": validate(Document("a.ts", "typescript", "process.env.A"), set())},
                    scope=["a.ts"],
                )
                second = json.loads(await asyncio.wait_for(client.recv(), 2))
        return first, second

    first, second = asyncio.run(scenario())
    assert first["documents"] == {}
    assert second["version"] == first["version"] + 1
    assert [d["name"] for d in second["documents"]["a.ts"]] == ["A"]


class _SlowWatcher:
    def __init__(self):
        self.calls = 0

    def poll(self):
        self.calls += 1
        time.sleep(0.3)
        return False


def test_watch_loop_does_not_block_clients():
    watcher = _SlowWatcher()
    relay = DiagnosticRelay(DiagnosticStore(), watcher=watcher, poll_interval=0.01)

    async def scenario():
        task = asyncio.create_task(relay._watch())
        await asyncio.sleep(0.05)
        started = time.monotonic()
        await asyncio.sleep(0.01)
        elapsed = time.monotonic() - started
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return elapsed

    elapsed = asyncio.run(scenario())
    assert watcher.calls >= 1
    assert elapsed < 0.2
