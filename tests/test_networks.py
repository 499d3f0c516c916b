from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from aiowharf.docker import Docker
from aiowharf.exceptions import ProtocolFailure
from aiowharf.resolve import ErrorKind


if TYPE_CHECKING:
    from conftest import FakeEngine


@pytest.mark.asyncio
async def test_list_networks(docker: Docker, engine: FakeEngine) -> None:
    engine.reply(
        "GET",
        "/networks",
        json_body=[
            {"Name": "bridge", "Id": "f2de39df4171", "Driver": "bridge"},
            {"Name": "host", "Id": "0b6ad2e1cd9a", "Driver": "host"},
        ],
    )
    networks = await docker.networks.list(filters={"type": "builtin"})
    assert [n.name for n in networks] == ["bridge", "host"]
    assert engine.last.query == {"filters": '{"type": ["builtin"]}'}


@pytest.mark.asyncio
async def test_inspect_network(docker: Docker, engine: FakeEngine) -> None:
    engine.reply(
        "GET",
        "/networks/backend",
        json_body={"Name": "backend", "Id": "abc", "Internal": True},
    )
    network = await docker.networks.inspect("backend")
    assert network.internal is True

    engine.reply("GET", "/networks/nope", 404)
    with pytest.raises(ProtocolFailure) as exc_info:
        await docker.networks.inspect("nope")
    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert exc_info.value.message == "no such network"


@pytest.mark.asyncio
async def test_remove_network(docker: Docker, engine: FakeEngine) -> None:
    engine.reply("DELETE", "/networks/backend", 204)
    await docker.networks.remove("backend")
    assert engine.last.method == "DELETE"


@pytest.mark.asyncio
async def test_remove_predefined_network(docker: Docker, engine: FakeEngine) -> None:
    engine.reply(
        "DELETE",
        "/networks/bridge",
        403,
        json_body={"message": "bridge is a pre-defined network and cannot be removed"},
    )
    with pytest.raises(ProtocolFailure) as exc_info:
        await docker.networks.remove("bridge")
    assert exc_info.value.kind is ErrorKind.NOT_SUPPORTED
    assert exc_info.value.message.startswith(
        "operation not supported for pre-defined networks - "
    )
