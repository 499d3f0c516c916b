from __future__ import annotations

from typing import Any

import attrs

from ..types import JSONValue
from .record import Record, expect_object, field


@attrs.frozen
class NetworkSummary(Record):
    name: str
    id: str
    created: str
    scope: str
    driver: str
    enable_ipv6: bool
    internal: bool
    attachable: bool
    ingress: bool
    ipam: JSONValue
    options: JSONValue

    @classmethod
    def from_json(cls, data: Any) -> NetworkSummary:
        data = expect_object(data)
        return cls(
            name=field(data, "Name", str),
            id=field(data, "Id", str),
            created=field(data, "Created", str, ""),
            scope=field(data, "Scope", str, ""),
            driver=field(data, "Driver", str, ""),
            enable_ipv6=field(data, "EnableIPv6", bool, False),
            internal=field(data, "Internal", bool, False),
            attachable=field(data, "Attachable", bool, False),
            ingress=field(data, "Ingress", bool, False),
            ipam=data.get("IPAM"),
            options=data.get("Options"),
        )
