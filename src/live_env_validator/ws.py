from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

from websockets.asyncio.server import ServerConnection
from websockets.asyncio.server import serve as ws_serve
from websockets.exceptions import ConnectionClosed

from .diagnostics import DiagnosticStore
from .workspace import WorkspaceWatcher

logger = logging.getLogger(__name__)


class DiagnosticRelay:
    """Pushes every diagnostic publication to connected clients.

    A client connecting to ``/<document>`` only receives that document's
    entries; ``/`` receives all of them.
    """

    def __init__(self, store: DiagnosticStore, watcher: Optional[WorkspaceWatcher] = None, poll_interval: float = 1.0):
        self.store = store
        self.watcher = watcher
        self.poll_interval = poll_interval

    def _document_filter(self, websocket: ServerConnection) -> Optional[str]:
        path = websocket.request.path if websocket.request else "/"
        return path.lstrip("/") or None

    async def handler(self, websocket: ServerConnection) -> None:
        document = self._document_filter(websocket)
        seen = self.store.version
        await self._send(websocket, document)
        try:
            while True:
                if self.store.version != seen:
                    seen = self.store.version
                    await self._send(websocket, document)
                try:
                    await asyncio.wait_for(websocket.wait_closed(), self.poll_interval)
                except asyncio.TimeoutError:
                    continue
                return
        except ConnectionClosed:
            logger.debug("Client disconnected")

    async def _send(self, websocket: ServerConnection, document: Optional[str]) -> None:
        await websocket.send(json.dumps(self.store.snapshot(document)))

    async def _watch(self) -> None:
        while True:
            if self.watcher is not None and await asyncio.to_thread(self.watcher.poll):
                logger.debug("Workspace changed, diagnostics republished (version %d)", self.store.version)
            await asyncio.sleep(self.poll_interval)

    async def run(self, host: str, port: int) -> None:
        async with ws_serve(self.handler, host, port):
            await self._watch()


def serve_ws(store: DiagnosticStore, watcher: Optional[WorkspaceWatcher] = None, *, host: str, port: int) -> None:
    relay = DiagnosticRelay(store, watcher=watcher)
    try:
        asyncio.run(relay.run(host, port))
    except KeyboardInterrupt:  # pragma: no cover - CLI use only
        pass
