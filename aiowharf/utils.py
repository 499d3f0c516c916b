from __future__ import annotations

import base64
import json
from typing import Any, Mapping, Optional, Sequence

from .types import JSONObject


def httpize(d: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, str]]:
    """
    Render a flat mapping as query parameters the way the Engine expects them:
    booleans as ``true``/``false``, strings as-is and anything else in its
    JSON form.
    """
    if d is None:
        return None
    converted = {}
    for k, v in d.items():
        if isinstance(v, bool):
            v = "true" if v else "false"
        if not isinstance(v, str):
            v = json.dumps(v)
        converted[k] = v
    return converted


def clean_map(obj: Mapping[Any, Any]) -> Mapping[Any, Any]:
    """
    Return a new copied dictionary without the keys with ``None`` values from
    the given Mapping object.
    """
    return {k: v for k, v in obj.items() if v is not None}


def clean_filters(filters: Optional[Mapping[str, Any] | Sequence[str]] = None) -> str:
    """
    Ensures that the values inside `filters` are lists of string values, by
    wrapping scalar values as a single-item lists.  Returns the result as the
    jsonized form of `map[string][]string` as described in
    https://docs.docker.com/engine/api/v1.41/#operation/ContainerList .
    """
    if filters is None:
        return "{}"
    if not isinstance(filters, Mapping):
        raise TypeError("filters must be a mapping")
    cleaned = {}
    for k, v in filters.items():
        if not isinstance(v, list):
            v = [v]
        cleaned[k] = v
    return json.dumps(cleaned)


def compose_auth_header(auth: JSONObject) -> str:
    """
    Encode registry credentials as the value of the ``X-Registry-Auth`` header.

    Args:
        auth: The same JSON object that is posted to the ``auth`` endpoint.

    Returns:
        The URL-safe base64 encoding of the JSON-serialized credentials.
    """
    auth_json = json.dumps(dict(auth)).encode("utf-8")
    return base64.urlsafe_b64encode(auth_json).decode("ascii")


def decode_json_header(value: str) -> Any:
    """
    Decode a header value carrying base64-encoded JSON.

    Raises:
        ValueError: If the value is not valid base64 or the decoded bytes are
            not valid JSON.
    """
    raw = base64.b64decode(value.encode("ascii"), validate=True)
    return json.loads(raw)
