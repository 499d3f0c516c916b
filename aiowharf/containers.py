from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from .exceptions import DecodeError, MissingStatHeader
from .execs import EXEC_CREATE, Exec
from .opts import (
    AttachOpts,
    ContainerBuilderOpts,
    ContainerLogsOpts,
    ExecOpts,
    ListContainersOpts,
    RmContainerOpts,
    UploadArchiveOpts,
)
from .records import ContainerInspect, ContainerSummary, FileInfo, Process
from .resolve import ErrorKind, Failure, Payload, StatusTable, resolve
from .stream import AttachStream


if TYPE_CHECKING:
    from .docker import Docker


log = logging.getLogger(__name__)

_NOT_FOUND = Failure(ErrorKind.NOT_FOUND, "no such container")
_SERVER_ERROR = Failure(ErrorKind.SERVER_ERROR, "internal server error")
_BAD_PARAMETER = Failure(ErrorKind.BAD_PARAMETER, "bad parameter")

STAT_HEADER = "X-Docker-Container-Path-Stat"

CONTAINER_LIST = StatusTable(
    ok={200},
    failures={400: _BAD_PARAMETER, 500: _SERVER_ERROR},
    payload=Payload.JSON,
    into=ContainerSummary.from_json_list,
)
CONTAINER_CREATE = StatusTable(
    ok={201},
    failures={
        400: _BAD_PARAMETER,
        404: Failure(ErrorKind.NOT_FOUND, "no such image"),
        409: Failure(ErrorKind.CONFLICT, "conflict"),
        500: _SERVER_ERROR,
    },
)
CONTAINER_START = StatusTable(
    ok={204},
    failures={
        304: Failure(ErrorKind.ALREADY_STARTED, "container already started"),
        404: _NOT_FOUND,
        500: _SERVER_ERROR,
    },
)
CONTAINER_STOP = StatusTable(
    ok={204},
    failures={
        304: Failure(ErrorKind.ALREADY_STOPPED, "container already stopped"),
        404: _NOT_FOUND,
        500: _SERVER_ERROR,
    },
)
CONTAINER_INSPECT = StatusTable(
    ok={200},
    failures={404: _NOT_FOUND, 500: _SERVER_ERROR},
    payload=Payload.JSON,
    into=ContainerInspect.from_json,
)
# restart, kill, pause and unpause
CONTAINER_SIGNAL = StatusTable(
    ok={204},
    failures={404: _NOT_FOUND, 500: _SERVER_ERROR},
)
CONTAINER_RENAME = StatusTable(
    ok={204},
    failures={
        404: _NOT_FOUND,
        409: Failure(ErrorKind.NAME_CONFLICT, "name already in use"),
        500: _SERVER_ERROR,
    },
)
CONTAINER_REMOVE = StatusTable(
    ok={200, 204},
    failures={
        404: _NOT_FOUND,
        409: Failure(ErrorKind.CONFLICT, "conflict"),
        500: _SERVER_ERROR,
    },
)
CONTAINER_LOGS = StatusTable(
    ok={200, 204},
    failures={404: _NOT_FOUND, 500: _SERVER_ERROR},
    payload=Payload.TEXT,
)
CONTAINER_TOP = StatusTable(
    ok={200},
    failures={404: _NOT_FOUND, 500: _SERVER_ERROR},
    payload=Payload.JSON,
    into=Process.from_top,
)

_ARCHIVE_BAD_PARAMETER = Failure(ErrorKind.BAD_PARAMETER, "bad parameter")
_ARCHIVE_READ_ONLY = Failure(
    ErrorKind.PERMISSION_DENIED,
    "permission denied, the volume or container rootfs is marked as read-only",
)
_ARCHIVE_NOT_FOUND = Failure(
    ErrorKind.NOT_FOUND, "container or path does not exist"
)
_ARCHIVE_SERVER_ERROR = Failure(ErrorKind.SERVER_ERROR, "server error")

ARCHIVE_STAT = StatusTable(
    ok={200},
    failures={
        400: _ARCHIVE_BAD_PARAMETER,
        403: _ARCHIVE_READ_ONLY,
        404: _ARCHIVE_NOT_FOUND,
        500: _ARCHIVE_SERVER_ERROR,
    },
    payload=Payload.HEADERS,
)
ARCHIVE_GET = StatusTable(
    ok={200},
    failures={
        400: _ARCHIVE_BAD_PARAMETER,
        404: _ARCHIVE_NOT_FOUND,
        500: _ARCHIVE_SERVER_ERROR,
    },
    payload=Payload.RAW,
)
ARCHIVE_PUT = StatusTable(
    ok={200},
    failures={
        400: _ARCHIVE_BAD_PARAMETER,
        403: _ARCHIVE_READ_ONLY,
        404: _ARCHIVE_NOT_FOUND,
        500: _ARCHIVE_SERVER_ERROR,
    },
)
CONTAINER_ATTACH = StatusTable(
    ok={101},
    failures={400: _BAD_PARAMETER, 404: _NOT_FOUND, 500: _SERVER_ERROR},
    payload=Payload.UPGRADE,
)


class DockerContainers:
    def __init__(self, docker: Docker) -> None:
        self.docker = docker

    async def list(
        self, opts: Optional[ListContainersOpts] = None
    ) -> List[DockerContainer]:
        """
        List containers. Only running containers are returned unless
        ``opts.all`` is set.

        Returns:
            Handles carrying the :class:`ContainerSummary` they were listed with
            as ``data``.
        """
        params = opts.to_query() if opts is not None else None
        summaries = await self.docker._request(
            CONTAINER_LIST, "containers/json", params=params
        )
        return [DockerContainer(self.docker, s.id, data=s) for s in summaries]

    async def create(self, name: str, opts: ContainerBuilderOpts) -> DockerContainer:
        """
        Create a container named ``name`` and return a handle for it.

        Raises:
            ValueError: If ``name`` is empty.
        """
        if not name:
            raise ValueError("Container name must not be empty")
        await self.docker._request(
            CONTAINER_CREATE,
            "containers/create",
            "POST",
            params={"name": name},
            json=opts.to_json(),
        )
        return DockerContainer(self.docker, name)

    def container(self, container_id: str) -> DockerContainer:
        return DockerContainer(self.docker, container_id)

    def exec(self, exec_id: str, tty: bool = False) -> Exec:
        """Return Exec instance for already created exec object."""
        return Exec(self.docker, exec_id, tty)


class DockerContainer:
    def __init__(
        self,
        docker: Docker,
        id: str,
        data: Optional[ContainerSummary] = None,
    ) -> None:
        self.docker = docker
        self._id = id
        self.data = data

    @property
    def id(self) -> str:
        return self._id

    def __repr__(self) -> str:
        return f"DockerContainer(id={self._id!r})"

    async def inspect(self) -> ContainerInspect:
        return await self.docker._request(
            CONTAINER_INSPECT, f"containers/{self._id}/json"
        )

    async def start(self) -> None:
        await self.docker._request(
            CONTAINER_START, f"containers/{self._id}/start", "POST"
        )

    async def stop(self, *, wait: Optional[int] = None) -> None:
        """
        Stop the container.

        Args:
            wait: Seconds to wait before killing the container.
        """
        params = {"t": wait} if wait is not None else None
        await self.docker._request(
            CONTAINER_STOP, f"containers/{self._id}/stop", "POST", params=params
        )

    async def restart(self, *, wait: Optional[int] = None) -> None:
        params = {"t": wait} if wait is not None else None
        await self.docker._request(
            CONTAINER_SIGNAL, f"containers/{self._id}/restart", "POST", params=params
        )

    async def kill(self, *, signal: Optional[str] = None) -> None:
        """
        Send a POSIX signal to the container, ``SIGKILL`` unless ``signal``
        names another (e.g. ``"SIGINT"``).
        """
        params = {"signal": signal} if signal is not None else None
        await self.docker._request(
            CONTAINER_SIGNAL, f"containers/{self._id}/kill", "POST", params=params
        )

    async def pause(self) -> None:
        await self.docker._request(
            CONTAINER_SIGNAL, f"containers/{self._id}/pause", "POST"
        )

    async def unpause(self) -> None:
        await self.docker._request(
            CONTAINER_SIGNAL, f"containers/{self._id}/unpause", "POST"
        )

    async def rename(self, new_name: str) -> None:
        """
        Rename the container. The handle refers to ``new_name`` afterwards;
        on any failure it keeps its previous identifier.
        """
        await self.docker._request(
            CONTAINER_RENAME,
            f"containers/{self._id}/rename",
            "POST",
            params={"name": new_name},
        )
        log.debug("renamed container %s to %s", self._id, new_name)
        self._id = new_name

    async def remove(self, opts: Optional[RmContainerOpts] = None) -> None:
        params = opts.to_query() if opts is not None else None
        await self.docker._request(
            CONTAINER_REMOVE, f"containers/{self._id}", "DELETE", params=params
        )

    async def logs(self, opts: ContainerLogsOpts) -> str:
        """
        Read the logs the container has produced so far.

        Raises:
            TypeError: If neither ``stdout`` nor ``stderr`` is requested.
        """
        if not (opts.stdout or opts.stderr):
            raise TypeError("Need one of stdout or stderr")
        return await self.docker._request(
            CONTAINER_LOGS, f"containers/{self._id}/logs", params=opts.to_query()
        )

    async def ps(self, ps_args: Optional[str] = None) -> List[Process]:
        """
        List the processes running inside the container.

        Args:
            ps_args: Arguments to pass to ``ps``, e.g. ``"aux"``.
        """
        params = {"ps_args": ps_args} if ps_args is not None else None
        return await self.docker._request(
            CONTAINER_TOP, f"containers/{self._id}/top", params=params
        )

    async def file_info(self, path: str) -> FileInfo:
        """
        Get information about a file or directory inside the container.

        Raises:
            MissingStatHeader: If the Engine answered without the stat header.
            DecodeError: If the header is not base64-encoded stat JSON.
        """
        headers = await self.docker._request(
            ARCHIVE_STAT,
            f"containers/{self._id}/archive",
            "HEAD",
            params={"path": path},
        )
        value = headers.get(STAT_HEADER)
        if value is None:
            raise MissingStatHeader()
        try:
            return FileInfo.from_header(value)
        except (KeyError, TypeError, ValueError) as exc:
            raise DecodeError(
                200, "could not parse FileInfo from base64 encoded header"
            ) from exc

    async def get_archive(self, path: str) -> bytes:
        """Download ``path`` from the container as an uncompressed tar archive."""
        return await self.docker._request(
            ARCHIVE_GET, f"containers/{self._id}/archive", params={"path": path}
        )

    async def upload_archive(self, data: bytes, opts: UploadArchiveOpts) -> None:
        """
        Extract a tar archive into a directory of the container.

        Args:
            data: The tar archive, optionally compressed with gzip, bzip2 or xz.
            opts: Where and how to extract it; ``opts.path`` is required.
        """
        if opts.path is None:
            raise TypeError("UploadArchiveOpts.path is required")
        await self.docker._request(
            ARCHIVE_PUT,
            f"containers/{self._id}/archive",
            "PUT",
            params=opts.to_query(),
            data=data,
            headers={"Content-Type": "application/x-tar"},
        )

    async def attach(self, opts: Optional[AttachOpts] = None) -> AttachStream:
        """
        Attach to the container and return the upgraded connection.

        The returned stream must be closed by the caller.
        """
        params = opts.to_query() if opts is not None else None
        response = await self.docker._do_query(
            f"containers/{self._id}/attach",
            "POST",
            params=params,
            headers={"Connection": "Upgrade", "Upgrade": "tcp"},
            read_until_eof=False,
        )
        try:
            await resolve(response, CONTAINER_ATTACH)
        except BaseException:
            response.release()
            raise
        stream = AttachStream(response)
        try:
            await stream._init()
        except BaseException:
            await stream.close()
            raise
        return stream

    async def create_exec(self, opts: ExecOpts) -> Exec:
        """Create an exec instance running ``opts.cmd`` without starting it."""
        exec_id = await self.docker._request(
            EXEC_CREATE,
            f"containers/{self._id}/exec",
            "POST",
            json=opts.to_json(),
        )
        return Exec(self.docker, exec_id, tty=opts.tty)

    async def exec(self, opts: ExecOpts) -> bytes:
        """Run a command inside the container and return its output."""
        exec_ = await self.create_exec(opts)
        return await exec_.start(detach=opts.detach)
