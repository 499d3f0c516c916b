from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TypeAlias, Union


# NOTE: These aliases annotate arguments and opaque payload fields only.
# Fields the client acts upon are typed explicitly in the records.
JSONValue: TypeAlias = Union[
    str,
    int,
    float,
    bool,
    None,
    Mapping[str, "JSONValue"],
    Sequence["JSONValue"],
]
JSONObject: TypeAlias = Mapping[str, JSONValue]
