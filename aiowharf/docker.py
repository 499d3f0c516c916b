from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import ssl
from collections.abc import Mapping
from contextlib import asynccontextmanager
from pathlib import Path
from types import TracebackType
from typing import Any, AsyncIterator, Optional, Type, Union

import aiohttp
from multidict import CIMultiDict
from yarl import URL

from .containers import DockerContainer, DockerContainers
from .exceptions import DecodeError, TransportError
from .images import DockerImages
from .networks import DockerNetworks
from .opts import AuthOpts
from .resolve import ErrorKind, Failure, Payload, StatusTable, resolve
from .utils import httpize


__all__ = (
    "Docker",
    "DockerContainer",
    "DockerContainers",
    "DockerImages",
    "DockerNetworks",
)

log = logging.getLogger(__name__)

_sock_search_paths = [
    Path("/run/docker.sock"),
    Path("/var/run/docker.sock"),
    Path.home() / ".docker/run/docker.sock",
]

_rx_version = re.compile(r"^v\d+\.\d+$")
_rx_tcp_schemes = re.compile(r"^(tcp|http|https)://")

# the `json` argument of Docker._request shadows the module
_dumps = json.dumps

AUTH = StatusTable(
    ok={200, 204},
    failures={500: Failure(ErrorKind.SERVER_ERROR, "server error")},
    payload=Payload.RAW,
)


class Docker:
    """
    The Docker client as the main entrypoint to the sub-APIs for containers,
    images and networks.
    You may access such sub-API collections via the attributes of the client
    instance, like:

    .. code-block:: python

        async with aiowharf.Docker() as docker:
            await docker.containers.list()
            await docker.images.pull(CreateImageOpts(from_image="alpine"))

    The endpoint is determined using the following precedence order:

    1. **url parameter**
    2. **DOCKER_HOST environment variable**
    3. **Socket auto-detection** among ``/run/docker.sock``,
       ``/var/run/docker.sock`` and ``~/.docker/run/docker.sock``

    The endpoint configuration and the underlying session are created once
    and shared, read-only, by every handle derived from the client.

    Args:
        url: The Docker daemon address as the full URL string (e.g.,
            ``"unix:///var/run/docker.sock"``, ``"tcp://127.0.0.1:2375"``).
        connector: Custom :class:`aiohttp.BaseConnector` used instead of the one
            derived from **url**.
        session: Custom :class:`aiohttp.ClientSession`. If None, a new session
            is created with the connector and timeout settings.
        timeout: :class:`aiohttp.ClientTimeout` applied to every request.
            If None, there is no timeout at all.
        ssl_context: SSL context for TCP endpoints. If None and
            ``DOCKER_TLS_VERIFY`` is set, a context is created from the
            ``DOCKER_CERT_PATH`` certificates.
        api_version: Pin the API version (e.g. ``"v1.43"``) as the first path
            segment of every request. If None, paths are sent unversioned.

    Raises:
        ValueError: If the docker host cannot be determined or is not a valid
            URL, or if api_version format is invalid.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        connector: Optional[aiohttp.BaseConnector] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        api_version: Optional[str] = None,
    ) -> None:
        docker_host = url  # rename
        if docker_host is None:
            docker_host = os.environ.get("DOCKER_HOST", None)
        if docker_host is None:
            for sockpath in _sock_search_paths:
                if sockpath.is_socket():
                    docker_host = "unix://" + str(sockpath)
                    break
        if docker_host is None:
            raise ValueError(
                "Missing valid docker_host. "
                "Either DOCKER_HOST or local sockets are not available."
            )

        if api_version is not None and _rx_version.search(api_version) is None:
            raise ValueError("Invalid API version format")
        self._api_version = api_version

        self._timeout = timeout or aiohttp.ClientTimeout()
        self._connection_info = docker_host

        UNIX_PRE = "unix://"
        UNIX_PRE_LEN = len(UNIX_PRE)
        if _rx_tcp_schemes.search(docker_host):
            if ssl_context is None and os.environ.get("DOCKER_TLS_VERIFY", "0") == "1":
                ssl_context = self._docker_machine_ssl_context()
            if ssl_context is not None:
                docker_host = _rx_tcp_schemes.sub("https://", docker_host)
            else:
                docker_host = re.sub(r"^tcp://", "http://", docker_host)
            self._check_tcp_url(docker_host)
            if connector is None:
                connector = aiohttp.TCPConnector(ssl=ssl_context)  # type: ignore[arg-type]
            self._docker_host = docker_host.rstrip("/")
        elif docker_host.startswith(UNIX_PRE):
            if not docker_host[UNIX_PRE_LEN:]:
                raise ValueError(f"Missing socket path in docker_host {docker_host!r}")
            if connector is None:
                connector = aiohttp.UnixConnector(docker_host[UNIX_PRE_LEN:])
            # dummy hostname for URL composition
            self._docker_host = UNIX_PRE + "localhost"
        else:
            raise ValueError("Missing protocol scheme in docker_host.")
        self.connector = connector
        if session is None:
            session = aiohttp.ClientSession(
                connector=self.connector,
                timeout=self._timeout,
            )
        self.session = session

        self.containers = DockerContainers(self)
        self.images = DockerImages(self)
        self.networks = DockerNetworks(self)

    @property
    def docker_host(self) -> str:
        """The base URL requests are composed against."""
        return self._docker_host

    @property
    def api_version(self) -> Optional[str]:
        return self._api_version

    async def __aenter__(self) -> Docker:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying aiohttp session and release its connections."""
        await self.session.close()

    def container(self, container_id: str) -> DockerContainer:
        """Return a handle for the given container id or name without a request."""
        return self.containers.container(container_id)

    async def auth(self, opts: AuthOpts) -> str:
        """Validate registry credentials.

        Args:
            opts: The registry credentials to check.

        Returns:
            The identity token issued by the registry, or an empty string when
            the registry issued none.

        Raises:
            ProtocolFailure: If the daemon reports a server error.
            DecodeError: If the response body is not the expected JSON object.
        """
        body = await self._request(AUTH, "auth", "POST", json=opts.to_json())
        if not body:
            return ""
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise DecodeError(200, f"malformed JSON response: {exc}") from exc
        if not isinstance(data, dict):
            raise DecodeError(200, "auth response is not a JSON object")
        token = data.get("IdentityToken") or ""
        if not isinstance(token, str):
            raise DecodeError(200, "IdentityToken is not a string")
        return token

    def _canonicalize_url(self, path: Union[str, URL]) -> URL:
        if isinstance(path, URL):
            assert not path.is_absolute()
        if self._api_version is not None:
            return URL(f"{self._docker_host}/{self._api_version}/{path}")
        return URL(f"{self._docker_host}/{path}")

    @asynccontextmanager
    async def _query(
        self,
        path: str | URL,
        method: str = "GET",
        *,
        params: Optional[Mapping[str, Any]] = None,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """
        Get the response object by performing the HTTP request.
        The response is released when the context exits.
        """
        response = await self._do_query(
            path, method, params=params, data=data, headers=headers
        )
        try:
            yield response
        finally:
            response.release()

    async def _do_query(
        self,
        path: str | URL,
        method: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        read_until_eof: bool = True,
    ) -> aiohttp.ClientResponse:
        """
        Send exactly one request and return the raw response.

        Status codes are never interpreted here; that is the job of the
        operation's :class:`~aiowharf.resolve.StatusTable`.
        """
        url = self._canonicalize_url(path)
        _headers: CIMultiDict[str] = CIMultiDict()
        if headers:
            _headers.update(headers)
        log.debug("%s %s params=%r", method, url, params)
        try:
            response = await self.session.request(
                method,
                url,
                params=httpize(params),
                headers=_headers,
                data=data,
                read_until_eof=read_until_eof,
            )
        except asyncio.TimeoutError:
            raise
        except aiohttp.ClientError as exc:
            raise TransportError(
                f"Cannot connect to Docker Engine via {self._connection_info} [{exc}]"
            ) from exc
        log.debug("%s %s -> %d", method, url, response.status)
        return response

    async def _request(
        self,
        table: StatusTable,
        path: str | URL,
        method: str = "GET",
        *,
        params: Optional[Mapping[str, Any]] = None,
        data: Any = None,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """
        Perform one operation: dispatch the request and resolve the response
        through the operation's status table.
        """
        _headers: CIMultiDict[str] = CIMultiDict()
        if headers:
            _headers.update(headers)
        if json is not None:
            data = _dumps(json)
            _headers["Content-Type"] = "application/json"
        async with self._query(
            path, method, params=params, data=data, headers=_headers
        ) as response:
            return await resolve(response, table)

    @staticmethod
    def _check_tcp_url(docker_host: str) -> None:
        try:
            url = URL(docker_host)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid docker_host {docker_host!r}: {exc}") from exc
        if not url.is_absolute() or not url.host:
            raise ValueError(f"Invalid docker_host {docker_host!r}: missing host")

    @staticmethod
    def _docker_machine_ssl_context() -> ssl.SSLContext:
        """
        Create a SSLContext object using DOCKER_* env vars.
        """
        context = ssl.create_default_context(purpose=ssl.Purpose.SERVER_AUTH)
        certs_path = os.environ.get("DOCKER_CERT_PATH", None)
        if certs_path is None:
            raise ValueError("Cannot create ssl context, DOCKER_CERT_PATH is not set!")
        certs_path2 = Path(certs_path)
        context.load_verify_locations(cafile=str(certs_path2 / "ca.pem"))
        context.load_cert_chain(
            certfile=str(certs_path2 / "cert.pem"), keyfile=str(certs_path2 / "key.pem")
        )
        return context
