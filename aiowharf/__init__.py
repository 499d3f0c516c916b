from .docker import Docker
from .exceptions import (
    DecodeError,
    DockerError,
    MissingStatHeader,
    ProtocolFailure,
    TransportError,
    UnexpectedStatus,
)
from .resolve import ErrorKind


__version__ = "0.1.0"


__all__ = (
    "DecodeError",
    "Docker",
    "DockerError",
    "ErrorKind",
    "MissingStatHeader",
    "ProtocolFailure",
    "TransportError",
    "UnexpectedStatus",
)
