from __future__ import annotations

from typing import TYPE_CHECKING, List, Mapping, Optional, Sequence

from .records import NetworkSummary
from .resolve import ErrorKind, Failure, Payload, StatusTable
from .utils import clean_filters


if TYPE_CHECKING:
    from .docker import Docker


_NOT_FOUND = Failure(ErrorKind.NOT_FOUND, "no such network")
_SERVER_ERROR = Failure(ErrorKind.SERVER_ERROR, "server error")

NETWORK_LIST = StatusTable(
    ok={200},
    failures={500: _SERVER_ERROR},
    payload=Payload.JSON,
    into=NetworkSummary.from_json_list,
)
NETWORK_INSPECT = StatusTable(
    ok={200},
    failures={404: _NOT_FOUND, 500: _SERVER_ERROR},
    payload=Payload.JSON,
    into=NetworkSummary.from_json,
)
NETWORK_REMOVE = StatusTable(
    ok={204},
    failures={
        403: Failure(
            ErrorKind.NOT_SUPPORTED, "operation not supported for pre-defined networks"
        ),
        404: _NOT_FOUND,
        500: _SERVER_ERROR,
    },
)


class DockerNetworks:
    def __init__(self, docker: Docker) -> None:
        self.docker = docker

    async def list(
        self,
        *,
        filters: Optional[Mapping[str, str | Sequence[str]]] = None,
    ) -> List[NetworkSummary]:
        """
        Return a list of networks

        Args:
            filters: a dict with a list of filters

        Available filters:
            dangling=<boolean>
            driver=<driver-name>
            id=<network-id>
            label=<key> or label=<key>=<value> of a network label.
            name=<network-name>
            scope=["swarm"|"global"|"local"]
            type=["custom"|"builtin"]
        """
        params = {} if filters is None else {"filters": clean_filters(filters)}
        return await self.docker._request(NETWORK_LIST, "networks", params=params)

    async def inspect(self, net_specs: str) -> NetworkSummary:
        return await self.docker._request(NETWORK_INSPECT, f"networks/{net_specs}")

    async def remove(self, net_specs: str) -> None:
        """Remove a network; the predefined networks cannot be removed."""
        await self.docker._request(NETWORK_REMOVE, f"networks/{net_specs}", "DELETE")
