from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .records.record import expect_object, field
from .resolve import ErrorKind, Failure, Payload, StatusTable


if TYPE_CHECKING:
    from .docker import Docker


# Without a TTY the output of an exec instance is the multiplexed stdout/stderr
# stream described under "Stream Format" of
# https://docs.docker.com/engine/api/v1.41/#operation/ContainerAttach
# and it is returned here as-is.


def _exec_id(data: Any) -> str:
    return field(expect_object(data), "Id", str)


EXEC_CREATE = StatusTable(
    ok={201},
    failures={
        404: Failure(ErrorKind.NOT_FOUND, "no such container"),
        409: Failure(ErrorKind.CONTAINER_PAUSED, "container is paused"),
        500: Failure(ErrorKind.SERVER_ERROR, "server error"),
    },
    payload=Payload.JSON,
    into=_exec_id,
)

EXEC_START = StatusTable(
    ok={200},
    failures={
        404: Failure(ErrorKind.NOT_FOUND, "no such exec instance"),
        409: Failure(ErrorKind.CONTAINER_PAUSED, "container is paused"),
    },
    payload=Payload.RAW,
)


class Exec:
    def __init__(self, docker: Docker, id: str, tty: bool = False) -> None:
        self.docker = docker
        self._id = id
        self._tty = tty

    @property
    def id(self) -> str:
        return self._id

    @property
    def tty(self) -> bool:
        return self._tty

    def __repr__(self) -> str:
        return f"Exec(id={self._id!r}, tty={self._tty!r})"

    async def start(self, *, detach: bool = False) -> bytes:
        """
        Start this exec instance.

        Args:
            detach: Detach from the command (like the ``-d`` option to
                ``docker exec``); the Engine then answers with an empty body.

        Returns:
            The output of the command read until the Engine closed it.
        """
        return await self.docker._request(
            EXEC_START,
            f"exec/{self._id}/start",
            "POST",
            json={"Detach": detach, "Tty": self._tty},
        )
