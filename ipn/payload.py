"""
Form codec for IPN messages.

PayPal posts notifications as application/x-www-form-urlencoded bodies and
expects them echoed back verbatim behind ``cmd=_notify-validate``. Reading
fields through a framework's parsed form loses ordering and can mangle array
style keys, so the raw body is decoded here instead.
"""

from collections.abc import Mapping
from urllib.parse import quote_plus, unquote_plus

VALIDATE_PREFIX = "cmd=_notify-validate"

# Non-UTF-8 bytes (IPN bodies are often windows-1252) must survive the round trip
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def _as_text(raw_body: bytes | str) -> str:
    if isinstance(raw_body, bytes):
        return raw_body.decode(_ENCODING, _ERRORS)
    return raw_body


def decode(raw_body: bytes | str) -> dict[str, str]:
    """
    Decode a raw form body into an ordered mapping.

    Segments without exactly one ``=`` are skipped, as are empty keys.
    A repeated key keeps its first position but takes the last value.
    """
    decoded: dict[str, str] = {}
    for segment in _as_text(raw_body).split("&"):
        parts = segment.split("=")
        if len(parts) != 2 or not parts[0]:
            continue
        key, value = parts
        decoded[key] = unquote_plus(value, encoding=_ENCODING, errors=_ERRORS)
    return decoded


def encode(fields: Mapping[str, str], prefix: str = VALIDATE_PREFIX) -> str:
    """Build the validation message: the prefix followed by ``&key=value`` per field."""
    message = prefix
    for key, value in fields.items():
        quoted = quote_plus(value, safe="", encoding=_ENCODING, errors=_ERRORS)
        message += f"&{key}={quoted}"
    return message


def validation_body(raw_body: bytes | str) -> str:
    return encode(decode(raw_body))


def to_bytes(message: str) -> bytes:
    return message.encode(_ENCODING, _ERRORS)
