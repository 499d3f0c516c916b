from __future__ import annotations

from collections.abc import Mapping
from typing import Any, List, Type, TypeVar


_R = TypeVar("_R", bound="Record")
_T = TypeVar("_T")

_MISSING: Any = object()


class Record:
    """
    Base of the typed records decoded from Engine responses.

    Fields the client acts upon (ids, names, states) are checked strictly;
    engine-version-dependent substructures are kept as opaque JSON values.
    Shape mismatches raise ``KeyError``/``TypeError``, which the resolver
    reports as :class:`~aiowharf.exceptions.DecodeError`.
    """

    __slots__ = ()

    @classmethod
    def from_json(cls: Type[_R], data: Any) -> _R:
        raise NotImplementedError

    @classmethod
    def from_json_list(cls: Type[_R], data: Any) -> List[_R]:
        if not isinstance(data, list):
            raise TypeError(f"expected a JSON array, got {type(data).__name__}")
        return [cls.from_json(item) for item in data]


def expect_object(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"expected a JSON object, got {type(data).__name__}")
    return data


def field(
    data: Mapping[str, Any],
    key: str,
    type_: type[_T] | tuple[type, ...],
    default: Any = _MISSING,
) -> _T:
    """
    Read ``key`` from a decoded JSON object and check its type.

    Without a default the key is required; with one, a missing key or an
    explicit ``null`` yields the default.
    """
    if default is _MISSING:
        value = data[key]
    else:
        value = data.get(key)
        if value is None:
            return default
    if not isinstance(value, type_):
        raise TypeError(f"field {key!r} has unexpected type {type(value).__name__}")
    return value
