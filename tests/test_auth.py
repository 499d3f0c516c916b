from __future__ import annotations

import base64
import json
from typing import TYPE_CHECKING

import pytest

from aiowharf.docker import Docker
from aiowharf.exceptions import DecodeError, ProtocolFailure
from aiowharf.opts import AuthOpts
from aiowharf.resolve import ErrorKind


if TYPE_CHECKING:
    from conftest import FakeEngine


CREDENTIALS = AuthOpts(
    username="alice",
    password="s3cr3t",
    email="alice@example.org",
    server_address="registry.example.org",
)


@pytest.mark.asyncio
async def test_auth_returns_identity_token(
    docker: Docker, engine: FakeEngine
) -> None:
    engine.reply(
        "POST",
        "/auth",
        json_body={"Status": "Login Succeeded", "IdentityToken": "9cbaf023786cd7"},
    )
    assert await docker.auth(CREDENTIALS) == "9cbaf023786cd7"
    assert engine.last.headers["Content-Type"] == "application/json"


@pytest.mark.asyncio
async def test_auth_without_token(docker: Docker, engine: FakeEngine) -> None:
    engine.reply("POST", "/auth", json_body={"Status": "Login Succeeded"})
    assert await docker.auth(CREDENTIALS) == ""
    engine.reply("POST", "/auth", 204)
    assert await docker.auth(CREDENTIALS) == ""


@pytest.mark.asyncio
async def test_auth_failures(docker: Docker, engine: FakeEngine) -> None:
    engine.reply("POST", "/auth", 500, json_body={"message": "registry down"})
    with pytest.raises(ProtocolFailure) as exc_info:
        await docker.auth(CREDENTIALS)
    assert exc_info.value.kind is ErrorKind.SERVER_ERROR

    engine.reply("POST", "/auth", 200, body="Login Succeeded")
    with pytest.raises(DecodeError):
        await docker.auth(CREDENTIALS)


@pytest.mark.asyncio
async def test_posted_body_matches_registry_header(
    docker: Docker, engine: FakeEngine
) -> None:
    engine.reply("POST", "/auth", 204)
    engine.reply("POST", "/images/create")
    await docker.auth(CREDENTIALS)
    await docker.images.pull("registry.example.org/app", auth=CREDENTIALS)
    posted, pulled = engine.requests
    header = json.loads(base64.urlsafe_b64decode(pulled.headers["X-Registry-Auth"]))
    assert posted.json() == header
    assert header["serveraddress"] == "registry.example.org"
