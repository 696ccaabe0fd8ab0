"""
Response envelope normalization.

The link service wraps responses inconsistently across endpoints:

    Flat:    {"valid": true}            {"links": [...]}      [...]
    Nested:  {"success": true, "data": {"valid": true}}

Every gateway call decodes the body into a tagged union once and reads
fields through `field()` / `unwrap()`, so no endpoint guesses on its own.
Order of preference: nested shape, then flat shape, then FormatError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from linkshelf.core.ports.gateway import FormatError, RequestError

_MISSING = object()


@dataclass(frozen=True)
class FlatEnvelope:
    body: Any


@dataclass(frozen=True)
class NestedEnvelope:
    success: bool
    data: Any
    error: str | None = None


Envelope = FlatEnvelope | NestedEnvelope


def decode(payload: Any) -> Envelope:
    """Classify a decoded JSON payload."""
    if isinstance(payload, dict) and "success" in payload and (
        "data" in payload or payload.get("success") is False
    ):
        error = payload.get("error") or payload.get("message")
        return NestedEnvelope(
            success=payload.get("success") is True,
            data=payload.get("data"),
            error=str(error) if error else None,
        )
    return FlatEnvelope(body=payload)


def unwrap(envelope: Envelope, status: int | None = None) -> Any:
    """
    Return the meaningful body of an envelope.

    Raises:
        RequestError: If a nested envelope reports success=false
    """
    if isinstance(envelope, NestedEnvelope):
        if not envelope.success:
            raise RequestError(envelope.error or "Request was not successful", status)
        return envelope.data
    return envelope.body


def field(envelope: Envelope, name: str, status: int | None = None) -> Any:
    """
    Read a named field: nested `data[name]` first, then flat `body[name]`.

    Raises:
        FormatError: If neither shape carries the field
    """
    value = _MISSING
    if isinstance(envelope, NestedEnvelope):
        body = unwrap(envelope, status)
        if isinstance(body, dict):
            value = body.get(name, _MISSING)
    elif isinstance(envelope.body, dict):
        value = envelope.body.get(name, _MISSING)

    if value is _MISSING:
        raise FormatError(f"Response is missing field '{name}'", status)
    return value


def optional_field(envelope: Envelope, name: str, status: int | None = None) -> Any:
    try:
        return field(envelope, name, status)
    except FormatError:
        return None


def links_payload(envelope: Envelope, status: int | None = None) -> list[Any]:
    """
    Extract the raw link list.

    Accepts a bare list or an object with a `links` list, in either shape.
    """
    body = unwrap(envelope, status)
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and isinstance(body.get("links"), list):
        return body["links"]
    raise FormatError("Response does not contain a links list", status)


def error_details(payload: Any) -> tuple[str | None, str | None]:
    """Best-effort (message, code) from an error body of either shape."""
    if not isinstance(payload, dict):
        return None, None
    source = payload
    if isinstance(payload.get("data"), dict) and not (
        payload.get("error") or payload.get("message")
    ):
        source = payload["data"]
    message = source.get("error") or source.get("message")
    code = source.get("code") or payload.get("code")
    return (str(message) if message else None), (str(code) if code else None)
