from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any, Optional

import attrs
import pytest
from aiohttp import web
from multidict import CIMultiDict, CIMultiDictProxy

from aiowharf.docker import Docker


@attrs.frozen
class Reply:
    status: int = 200
    body: bytes = b""
    headers: dict[str, str] = attrs.Factory(dict)


@attrs.frozen
class RecordedRequest:
    method: str
    path: str
    query: dict[str, str]
    headers: CIMultiDictProxy[str]
    body: bytes

    def json(self) -> Any:
        return json.loads(self.body)


class FakeEngine:
    """
    An in-process stand-in for the Docker Engine answering canned replies
    keyed by ``(method, path)`` and recording every request it receives.
    """

    def __init__(self) -> None:
        self.replies: dict[tuple[str, str], Reply] = {}
        self.requests: list[RecordedRequest] = []
        self.url = ""
        self.app = web.Application()
        self.app.router.add_route("*", "/{tail:.*}", self._handle)

    def reply(
        self,
        method: str,
        path: str,
        status: int = 200,
        *,
        json_body: Any = None,
        body: bytes | str = b"",
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        _headers = dict(headers or {})
        if json_body is not None:
            body = json.dumps(json_body)
            _headers.setdefault("Content-Type", "application/json")
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.replies[(method, path)] = Reply(status, body, _headers)

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]

    async def _handle(self, request: web.Request) -> web.StreamResponse:
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=request.path,
                query=dict(request.query),
                headers=CIMultiDictProxy(CIMultiDict(request.headers)),
                body=await request.read(),
            )
        )
        reply = self.replies.get((request.method, request.path))
        if reply is None:
            return web.json_response(
                {"message": f"no reply for {request.method} {request.path}"},
                status=599,
            )
        if reply.status in (204, 304):
            return web.Response(status=reply.status, headers=reply.headers)
        return web.Response(status=reply.status, body=reply.body, headers=reply.headers)


@pytest.fixture
async def engine() -> AsyncIterator[FakeEngine]:
    fake = FakeEngine()
    runner = web.AppRunner(fake.app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = site._server.sockets[0].getsockname()[1]  # type: ignore[union-attr]
    fake.url = f"tcp://127.0.0.1:{port}"
    try:
        yield fake
    finally:
        await runner.cleanup()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DOCKER_HOST", "DOCKER_TLS_VERIFY", "DOCKER_CERT_PATH"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
async def docker(engine: FakeEngine, clean_env: None) -> AsyncIterator[Docker]:
    docker = Docker(url=engine.url)
    try:
        yield docker
    finally:
        await docker.close()
