from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

import pytest

from aiowharf.docker import Docker
from aiowharf.exceptions import ProtocolFailure
from aiowharf.opts import AttachOpts
from aiowharf.resolve import ErrorKind
from aiowharf.stream import AttachStream


if TYPE_CHECKING:
    from conftest import FakeEngine


UPGRADED = (
    b"HTTP/1.1 101 UPGRADED\r\n"
    b"Content-Type: application/vnd.docker.raw-stream\r\n"
    b"Connection: Upgrade\r\n"
    b"Upgrade: tcp\r\n"
    b"\r\n"
)


class EchoEngine:
    """Answers one attach request with a 101 and echoes what it receives."""

    def __init__(self) -> None:
        self.request_head = b""

    async def handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self.request_head = await reader.readuntil(b"\r\n\r\n")
        writer.write(UPGRADED + b"hello")
        await writer.drain()
        data = await reader.readexactly(5)
        writer.write(b"echo:" + data)
        await writer.drain()
        writer.close()
        await writer.wait_closed()


@pytest.fixture
async def echo_engine() -> AsyncIterator[tuple[EchoEngine, str]]:
    echo = EchoEngine()
    server = await asyncio.start_server(echo.handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        yield echo, f"tcp://127.0.0.1:{port}"
    finally:
        server.close()
        await server.wait_closed()


async def read_exactly(stream: AttachStream, size: int) -> bytes:
    data = b""
    while len(data) < size:
        chunk = await stream.read()
        assert chunk is not None, f"stream ended after {data!r}"
        data += chunk
    return data


@pytest.mark.asyncio
async def test_attach_is_duplex(
    clean_env: None, echo_engine: tuple[EchoEngine, str]
) -> None:
    echo, url = echo_engine
    async with Docker(url=url) as docker:
        container = docker.container("web")
        opts = AttachOpts(stream=True, stdin=True, stdout=True)
        async with await container.attach(opts) as stream:
            assert await read_exactly(stream, 5) == b"hello"
            await stream.write(b"world")
            assert await read_exactly(stream, 10) == b"echo:world"
            assert await stream.read() is None
        with pytest.raises(RuntimeError):
            await stream.write(b"late")
    head = echo.request_head.decode("latin-1")
    assert head.startswith("POST /containers/web/attach?")
    assert "stream=true" in head
    assert "upgrade: tcp" in head.lower()


@pytest.mark.asyncio
async def test_attach_to_missing_container(
    docker: Docker, engine: FakeEngine
) -> None:
    engine.reply("POST", "/containers/nope/attach", 404)
    with pytest.raises(ProtocolFailure) as exc_info:
        await docker.container("nope").attach()
    assert exc_info.value.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_attach_with_bad_parameters(
    docker: Docker, engine: FakeEngine
) -> None:
    engine.reply(
        "POST",
        "/containers/web/attach",
        400,
        json_body={"message": "invalid detach keys"},
    )
    with pytest.raises(ProtocolFailure) as exc_info:
        await docker.container("web").attach(AttachOpts(detach_keys="bogus"))
    assert exc_info.value.kind is ErrorKind.BAD_PARAMETER
    assert exc_info.value.message == "bad parameter - invalid detach keys"
