from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from .resolve import ErrorKind


class DockerError(Exception):
    """Base exception for all aiowharf errors.

    Catch this to handle every error the client may raise.

    Attributes:
        status: The HTTP status code of the response, or a sentinel value
            for errors that did not produce one.
        message: The error message.
    """

    status: int

    def __init__(self, status: int, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.status = status
        self.message = message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.status}, {self.message!r})"

    def __str__(self) -> str:
        return f"[{self.status}] {self.message}"


class TransportError(DockerError):
    """The request could not be sent or no response was received.

    Raised for connection, DNS, TLS and malformed target failures.
    The status is always 900 and the underlying aiohttp exception is
    available as ``__cause__``.
    """

    def __init__(self, message: str) -> None:
        super().__init__(900, message)


class DecodeError(DockerError):
    """A success response carried a body that did not match its expected shape."""


class ProtocolFailure(DockerError):
    """The Engine answered with a failure status known for the operation.

    Attributes:
        status: The HTTP status code.
        kind: The :class:`~aiowharf.resolve.ErrorKind` mapped to the status.
        message: The fixed text for the failure, enriched with the message
            the Engine supplied when it could be parsed.
    """

    def __init__(self, status: int, kind: ErrorKind, message: str) -> None:
        super().__init__(status, message)
        self.kind = kind

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"{self.status}, {self.kind.name}, {self.message!r})"
        )


class UnexpectedStatus(DockerError):
    """The status code is neither a success nor a known failure for the operation."""


class MissingStatHeader(DockerError):
    """A path stat request succeeded but carried no stat header."""

    def __init__(
        self, message: str = "missing X-Docker-Container-Path-Stat header"
    ) -> None:
        super().__init__(200, message)
