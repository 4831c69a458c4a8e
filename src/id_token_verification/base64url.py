"""Base64URL codec used by the JWT compact serialization.

``encode`` produces the URL-safe, unpadded alphabet. ``decode`` accepts both
padded and unpadded input, but rejects anything outside the alphabet instead
of silently discarding it: a lenient decoder would let two different tokens
map to the same bytes.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Final

from jwt.utils import base64url_encode

from .errors import MalformedToken

_ALPHABET: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9+/]*={0,2}")


def encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return base64url_encode(data).decode("ascii")


def decode(value: str) -> bytes:
    """Decode base64url text (padding optional).

    Raises:
        MalformedToken: If ``value`` contains characters outside the alphabet
            or has a length no base64 encoding can produce.
    """
    standard = value.replace("-", "+").replace("_", "/")
    if not _ALPHABET.fullmatch(standard):
        raise MalformedToken()

    standard = standard.rstrip("=")
    if len(standard) % 4 == 1:
        raise MalformedToken()
    standard += "=" * (-len(standard) % 4)

    try:
        return base64.b64decode(standard, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedToken() from e
