from __future__ import annotations

import asyncio
import logging

from healthnet.probe.base import BaseProbe
from healthnet.wire.codec import write_snapshot

logger = logging.getLogger(__name__)


class Responder:
    """TCP server answering every connection with one encoded snapshot.

    Each accepted connection runs in its own task: sample the probe, write
    the frame, close. A failed write only drops that connection.
    """

    def __init__(self, probe: BaseProbe, host: str = "0.0.0.0", port: int = 9999) -> None:
        self._probe = probe
        self.host = host
        self.port = port
        self._server: asyncio.Server | None = None
        self._served = 0

    # ── lifecycle ────────────────────────────────────────

    async def start(self) -> None:
        """Bind and listen. A bind failure raises OSError to the caller."""
        if self._server is not None:
            return
        self._server = await asyncio.start_server(self._handle, self.host, self.port)
        logger.info("Responder listening on %s:%d", *self.address)

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        await self._server.wait_closed()
        self._server = None
        logger.info("Responder stopped after %d connection(s)", self._served)

    async def serve_forever(self) -> None:
        await self.start()
        if self._server is None:
            raise RuntimeError("responder is not listening")
        await self._server.serve_forever()

    # ── internals ───────────────────────────────────────

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        peer = writer.get_extra_info("peername")
        try:
            info = await self._probe.collect()
            await write_snapshot(writer, info)
            self._served += 1
            logger.debug("Sent snapshot of %s to %s", info.hostname or "?", peer)
        except Exception:
            logger.exception("Failed to send snapshot to %s", peer)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass

    # ── introspection ───────────────────────────────────

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port); resolves an ephemeral port 0 once started."""
        if self._server is not None and self._server.sockets:
            sockname = self._server.sockets[0].getsockname()
            return sockname[0], sockname[1]
        return self.host, self.port

    @property
    def served(self) -> int:
        return self._served
