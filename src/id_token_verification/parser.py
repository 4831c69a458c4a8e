"""Structural parsing of compact JWTs.

``parse`` only establishes that a token *looks* like a JWT: three segments,
with a decodable header and payload. Nothing returned here is trusted until
the signature verifier accepts it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from . import base64url
from .errors import MalformedToken


@dataclass(frozen=True, slots=True)
class ParsedToken:
    """A structurally valid compact JWT.

    Attributes:
        header: Decoded header bytes.
        payload: Decoded payload bytes.
        signature: Signature segment, still base64url-encoded.
        header_segment: Header segment as received.
        payload_segment: Payload segment as received.
    """

    header: bytes
    payload: bytes
    signature: str
    header_segment: str
    payload_segment: str


@dataclass(frozen=True, slots=True)
class Header:
    """View over the fields of a JOSE header the verifier needs."""

    key_id: str | None
    algorithm: str | None
    type: str = "JWT"


def parse(raw: str) -> ParsedToken:
    """Split and decode a raw compact JWT.

    Raises:
        MalformedToken: If the token does not have exactly three segments or
            the header or payload segment decodes to nothing.
    """
    parts = raw.split(".")
    if len(parts) != 3:
        raise MalformedToken()

    header_segment, payload_segment, signature = parts
    header = base64url.decode(header_segment)
    payload = base64url.decode(payload_segment)

    if not header or not payload:
        raise MalformedToken()

    return ParsedToken(
        header=header,
        payload=payload,
        signature=signature,
        header_segment=header_segment,
        payload_segment=payload_segment,
    )


def parse_header(parsed: ParsedToken) -> Header:
    """Read ``kid``, ``alg`` and ``typ`` from the decoded header.

    Undecodable JSON, a non-object header, and non-string or empty values all
    yield ``None`` for the affected field; the caller decides whether that is
    fatal.
    """
    try:
        data: Any = json.loads(parsed.header)
    except ValueError:
        data = None
    if not isinstance(data, dict):
        data = {}

    typ = data.get("typ")
    return Header(
        key_id=_non_empty_str(data.get("kid")),
        algorithm=_non_empty_str(data.get("alg")),
        type=typ if isinstance(typ, str) and typ else "JWT",
    )


def _non_empty_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None
