"""Protocol definitions for the ID token verifier.

This module defines structural interfaces using Protocol (PEP 544) for:
- Public key resolution
- Key set sources and caching
- Token verification
- Failure notification
- The HTTP session used to fetch certificates
- Token extraction from Flask requests

Any object that implements the required methods satisfies the protocol, which
keeps the verifier testable with small hand-written doubles.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .claims import Identity
    from .config import VerifierConfig
    from .errors import VerificationError
    from .key_resolvers.google import KeySet

# ============================================================================
# Type Aliases
# ============================================================================

type Claims = Mapping[str, Any]
"""Decoded ID token payload."""

type Notifier = Callable[[VerificationError], None]
"""Observer called with the error whenever a verification fails."""


# ============================================================================
# Core Protocols
# ============================================================================


class KeyResolver(Protocol):
    """Resolves the PEM-encoded public key for a key id.

    Implementations return ``None`` for every kind of failure (absent kid,
    network error, non-200, malformed body, unknown kid). The signature
    verifier turns ``None`` into KeyNotFound.
    """

    def get_public_key(self, key_id: str | None) -> str | None:
        """Return the PEM string for ``key_id`` or ``None``."""
        ...


class KeySetSource(Protocol):
    """Fetches the identity provider's complete public key set."""

    def fetch_key_set(self) -> KeySet | None:
        """Fetch all current keys.

        Returns:
            The key set, or ``None`` when the endpoint could not supply one.
        """
        ...


class CacheStore(Protocol):
    """Protocol for caching PEM public keys by key id.

    Negative caching (remembering unknown kids for a short time) keeps
    attacker-supplied random kids from triggering endpoint fetches.
    """

    def get(self, kid: str) -> str | None:
        """Return the cached PEM, or ``None`` when absent, expired or known-missing."""
        ...

    def set(self, kid: str, pem: str, ttl_seconds: int) -> None:
        """Store a PEM for ``ttl_seconds``."""
        ...

    def set_missing(self, kid: str, ttl_seconds: int) -> None:
        """Remember that ``kid`` is not in the current key set."""
        ...

    def is_missing(self, kid: str) -> bool:
        """Return True if ``kid`` is negatively cached."""
        ...

    def delete(self, kid: str) -> None:
        """Drop any entry for ``kid``."""
        ...


class TokenVerifier(Protocol):
    """Protocol for ID token verification implementations."""

    def verify(self, token: str, config: VerifierConfig) -> Identity:
        """Verify a raw ID token and return the identity it asserts.

        Raises:
            VerificationError: The concrete subclass names the failing check.
        """
        ...


class HttpResponse(Protocol):
    status_code: int
    headers: Mapping[str, str]

    def json(self) -> Any: ...


class HttpSession(Protocol):
    """The subset of ``requests.Session`` the certificate resolver uses."""

    def get(self, url: str, *, timeout: float) -> HttpResponse: ...


class Extractor(Protocol):
    """Pulls the raw ID token out of the current Flask request."""

    def extract(self) -> str:
        """Return the raw token.

        Raises:
            MissingToken: Token not found or improperly formatted.
        """
        ...
