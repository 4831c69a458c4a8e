"""Token extraction strategies for Flask requests.

Implementations:
- FormFieldExtractor: reads the ID token from a POSTed form field (what
  Google's one-tap callback posts)
- BearerExtractor: reads ``Authorization: Bearer <token>``
"""

from __future__ import annotations

from flask import request

from .errors import MissingToken


class FormFieldExtractor:
    """Extracts the ID token from a form field.

    Attributes:
        _field: Name of the form field holding the token.
    """

    def __init__(self, field: str = "token") -> None:
        """Raises ValueError if ``field`` is empty."""
        if not field or not field.strip():
            raise ValueError("field cannot be empty")
        self._field = field

    def extract(self) -> str:
        """Return the raw token.

        Raises:
            MissingToken: If the field is absent or blank.
        """
        token = (request.form.get(self._field) or "").strip()
        if not token:
            raise MissingToken(f"Missing form field '{self._field}'")
        return token


class BearerExtractor:
    """Extracts the ID token from an ``Authorization: Bearer`` header."""

    def extract(self) -> str:
        """Return the raw token (without the ``Bearer`` prefix).

        Raises:
            MissingToken: If the header is missing, uses another scheme or is empty.
        """
        auth_header = request.headers.get("Authorization", "").strip()

        if not auth_header:
            raise MissingToken("Missing Authorization header")

        parts = auth_header.split(" ", 1)
        if len(parts) != 2:
            raise MissingToken("Invalid Authorization header format (expected 'Bearer <token>')")

        scheme, token = parts
        if scheme.lower() != "bearer":
            raise MissingToken("Invalid authorization scheme (expected 'Bearer')")

        token = token.strip()
        if not token:
            raise MissingToken("Bearer token is empty")

        return token
