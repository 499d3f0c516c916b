from __future__ import annotations

import asyncio
import logging
import socket
import warnings
from types import TracebackType
from typing import Optional, Tuple, Type

import aiohttp

from .exceptions import TransportError


log = logging.getLogger(__name__)


class AttachStream:
    """
    The raw duplex byte stream of a connection the Engine upgraded with
    ``101 UPGRADED``.

    Bytes are delivered exactly as the Engine writes them; for containers
    created without a TTY that is the multiplexed stdout/stderr framing.
    The caller reads and writes at its own pace and must close the stream,
    preferably through ``async with``.
    """

    def __init__(self, response: aiohttp.ClientResponse) -> None:
        self._resp = response
        self._closed = False
        self._queue: Optional[aiohttp.FlowControlDataQueue[bytes]] = None

    async def _init(self) -> None:
        if self._queue is not None:
            return
        # a 101 carries no body, this only completes the response
        body = await self._resp.read()
        conn = self._resp.connection
        if conn is None:
            msg = (
                "Cannot upgrade connection to vendored tcp protocol, "
                "the docker server has closed underlying socket."
            )
            msg += f" Status code: {self._resp.status}."
            if body:
                msg += f" Body: [{body[:100]!r}]"
            raise TransportError(msg)
        protocol = conn.protocol
        assert protocol is not None
        assert protocol.transport is not None
        sock = protocol.transport.get_extra_info("socket")
        if sock is not None and sock.family in (socket.AF_INET, socket.AF_INET6):
            # set TCP keepalive for vendored socket
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)

        queue: aiohttp.FlowControlDataQueue[bytes] = aiohttp.FlowControlDataQueue(
            protocol, limit=2**16, loop=asyncio.get_running_loop()
        )
        protocol.set_parser(_RawParser(queue), queue)
        protocol.force_close()
        self._queue = queue
        log.debug("attached to %s", self._resp.url)

    async def read(self) -> Optional[bytes]:
        """Read the next chunk of output, or None once the Engine closed the stream."""
        await self._init()
        assert self._queue is not None
        try:
            return await self._queue.read()
        except aiohttp.EofStream:
            return None

    async def write(self, data: bytes) -> None:
        """Write into the container's stdin."""
        if self._closed:
            raise RuntimeError("Cannot write to closed transport")
        await self._init()
        assert self._resp.connection is not None
        transport = self._resp.connection.transport
        assert transport is not None
        transport.write(data)
        protocol = self._resp.connection.protocol
        assert protocol is not None
        if protocol.transport is not None:
            await protocol._drain_helper()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        conn = self._resp.connection
        if conn is not None:
            transport = conn.transport
            if transport and transport.can_write_eof():
                transport.write_eof()
        self._resp.close()

    async def __aenter__(self) -> AttachStream:
        await self._init()
        return self

    async def __aexit__(
        self,
        exc_typ: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    def __del__(self, _warnings=warnings) -> None:
        if not self._closed:
            _warnings.warn("Unclosed AttachStream", ResourceWarning)


class _RawParser:
    def __init__(self, queue: aiohttp.FlowControlDataQueue[bytes]) -> None:
        self.queue = queue

    def set_exception(self, exc: BaseException, exc_cause: object = None) -> None:
        self.queue.set_exception(exc)

    def feed_eof(self) -> None:
        self.queue.feed_eof()

    def feed_data(self, data: bytes) -> Tuple[bool, bytes]:
        if data:
            self.queue.feed_data(data, len(data))
        return False, b""
