from __future__ import annotations

import enum
import json
import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

import aiohttp
import attrs

from .exceptions import DecodeError, ProtocolFailure, UnexpectedStatus


log = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    """
    The named failure conditions an operation may map a status code to.
    """

    ALREADY_STARTED = enum.auto()
    ALREADY_STOPPED = enum.auto()
    NOT_FOUND = enum.auto()
    NAME_CONFLICT = enum.auto()
    CONFLICT = enum.auto()
    BAD_PARAMETER = enum.auto()
    PERMISSION_DENIED = enum.auto()
    NOT_SUPPORTED = enum.auto()
    CONTAINER_PAUSED = enum.auto()
    SERVER_ERROR = enum.auto()


class Payload(enum.Enum):
    """
    How the body of a success response is turned into a return value.
    """

    EMPTY = enum.auto()  # drained and discarded
    JSON = enum.auto()
    TEXT = enum.auto()  # UTF-8, undecodable bytes replaced
    RAW = enum.auto()
    HEADERS = enum.auto()  # the response headers, body discarded
    UPGRADE = enum.auto()  # the unread response, for connection upgrades


@attrs.frozen
class Failure:
    kind: ErrorKind
    message: str


def _freeze_failures(failures: Mapping[int, Failure]) -> Mapping[int, Failure]:
    return MappingProxyType(dict(failures))


def _freeze_codes(codes: Iterable[int]) -> frozenset[int]:
    return frozenset(codes)


@attrs.frozen
class StatusTable:
    """
    The fixed status-to-outcome mapping of a single operation.

    Args:
        ok: Status codes that mean success.
        failures: Status codes known to mean a specific failure.
        payload: How a success body is returned.
        into: Converter applied to decoded JSON payloads, e.g. a record's
            ``from_json``. Shape mismatches it raises become :class:`DecodeError`.
    """

    ok: frozenset[int] = attrs.field(converter=_freeze_codes)
    failures: Mapping[int, Failure] = attrs.field(
        factory=dict, converter=_freeze_failures
    )
    payload: Payload = Payload.EMPTY
    into: Callable[[Any], Any] | None = None


def enrich(body: bytes, default: str) -> str:
    """
    Attach the message of the Engine's ``{"message": ...}`` envelope to the
    default text of a failure, falling back to the default alone whenever the
    body cannot be parsed as the envelope.
    """
    try:
        envelope = json.loads(body)
    except ValueError:
        return default
    if not isinstance(envelope, dict):
        return default
    message = envelope.get("message")
    if not isinstance(message, str) or not message:
        return default
    return f"{default} - {message}"


async def resolve(response: aiohttp.ClientResponse, table: StatusTable) -> Any:
    """
    Classify the response status by the operation's table and return the
    success payload or raise the mapped error.
    """
    status = response.status
    if status in table.ok:
        return await _read_payload(response, table)
    body = await response.read()
    log.debug(
        "%s %s answered %d: %r", response.method, response.url, status, body[:512]
    )
    failure = table.failures.get(status)
    if failure is not None:
        raise ProtocolFailure(status, failure.kind, enrich(body, failure.message))
    raise UnexpectedStatus(status, enrich(body, f"unexpected status code {status}"))


async def _read_payload(response: aiohttp.ClientResponse, table: StatusTable) -> Any:
    status = response.status
    match table.payload:
        case Payload.UPGRADE:
            return response
        case Payload.EMPTY:
            await response.read()
            return None
        case Payload.HEADERS:
            await response.read()
            return response.headers
        case Payload.RAW:
            return await response.read()
        case Payload.TEXT:
            # log streams carry binary frame headers
            body = await response.read()
            return body.decode("utf-8", errors="replace")
        case Payload.JSON:
            body = await response.read()
            try:
                data = json.loads(body)
            except ValueError as exc:
                raise DecodeError(status, f"malformed JSON response: {exc}") from exc
            return convert(data, table.into, status)


def convert(data: Any, into: Callable[[Any], Any] | None, status: int = 200) -> Any:
    if into is None:
        return data
    try:
        return into(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise DecodeError(status, f"unexpected response shape: {exc!r}") from exc
