"""Detection and decoding of uploaded file content.

Clients may send ``content`` either as plain text or base64. There is no
flag saying which, so the format is guessed.
"""

from __future__ import annotations

import base64
import binascii
import re

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
_WHITESPACE = (" ", "\n", "\t", "\r")


def looks_like_base64(value: str) -> bool:
    if not value or len(value) < 4:
        return False
    if len(value) % 4 != 0:
        return False
    if not _BASE64_RE.match(value):
        return False
    if any(ch in value for ch in _WHITESPACE):
        return False

    body = value.replace("=", "")
    has_upper = any(ch.isupper() for ch in body)
    has_digit = any(ch.isdigit() for ch in body)
    # Short all-lowercase words ("test", "readme") are valid base64 but are text.
    if not has_upper and not has_digit and len(value) <= 8:
        return False

    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    if len(value) > 12 and len(decoded) < 4:
        return False
    return True


def decode_content(value: str) -> bytes:
    """Return the bytes to write for ``value``."""
    if looks_like_base64(value):
        return base64.b64decode(value, validate=True)
    return value.encode("utf-8")


__all__ = ["decode_content", "looks_like_base64"]
