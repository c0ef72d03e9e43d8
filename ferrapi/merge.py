"""ferrapi merge - combine a stored record with the current invocation."""

import json
from typing import Any

from ferrapi.core import DEFAULT_TIMEOUT, normalize_method
from ferrapi.errors import ValidationError


def parse_headers(header_strings) -> dict[str, str]:
    """Parse -H 'Name: Value' strings into a dict.

    Splits on the first colon; a later duplicate name wins.
    """
    headers: dict[str, str] = {}
    for h in header_strings or ():
        if ":" not in h:
            raise ValidationError(f"Invalid header format: {h}")
        k, v = h.split(":", 1)
        k = k.strip()
        if not k:
            raise ValidationError(f"Invalid header format: {h}")
        headers[k] = v.strip()
    return headers


def parse_body(text: str) -> Any:
    """Decode a body string as JSON, keeping it as a plain string if it isn't."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return text


def merge_record(
    stored: dict,
    method: str,
    url: str | None = None,
    headers: dict[str, str] | None = None,
    json_value: str | None = None,
    value: str | None = None,
    data: str | None = None,
    timeout: int | None = None,
) -> dict:
    """Build the effective record for this invocation.

    Precedence, later rules win:
      1. method      - always the invocation's
      2. url         - invocation's if given, else stored
      3. headers     - stored headers updated with invocation headers
      4. body        - json_value > value > data; replaces the stored body
      5. timeout     - invocation's, or the default

    The stored record is left untouched.
    """
    effective: dict[str, Any] = {k: v for k, v in stored.items() if k != "headers"}

    effective["method"] = normalize_method(method)

    if url:
        effective["url"] = url

    merged_headers = dict(stored.get("headers") or {})
    merged_headers.update(headers or {})
    effective["headers"] = merged_headers

    if json_value is not None:
        effective["data"] = parse_body(json_value)
    elif value is not None:
        effective["data"] = parse_body(value)
    elif data is not None:
        effective["data"] = data

    effective["timeout"] = DEFAULT_TIMEOUT if timeout is None else timeout

    return effective
