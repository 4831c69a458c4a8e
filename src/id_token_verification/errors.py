"""ID token verification errors.

This module defines the exception hierarchy for ID token verification
failures. Every failure the verifier can produce inherits from
VerificationError so callers can catch a single type, while the concrete
subclass (and its ``kind``) tells them which stage rejected the token.

Security Note:
    Messages are intentionally short and generic. They are safe to show to
    the end user; details belong in server-side logs.
"""

from __future__ import annotations

from typing import ClassVar


class VerificationError(Exception):
    """Base exception for all ID token verification failures.

    Attributes:
        kind: Stable machine-readable identifier of the failure.
        error_code: HTTP status hint for web integrations.
        description: Human-readable message.
    """

    kind: ClassVar[str] = "verification_error"
    error_code: ClassVar[int] = 401
    default_message: ClassVar[str] = "Cannot verify the credentials"

    def __init__(self, description: str | None = None) -> None:
        self.description = description or self.default_message
        super().__init__(self.description)


class MalformedToken(VerificationError):  # noqa: N818
    """Token is not three dot-separated segments, or header/payload do not decode."""

    kind = "malformed_token"
    default_message = "ID token is invalid"


class MissingHeaderFields(VerificationError):  # noqa: N818
    """Header JSON lacks ``kid`` or ``alg``."""

    kind = "missing_header_fields"
    default_message = "Cannot verify the ID token signature. Please try again."


class KeyNotFound(VerificationError):  # noqa: N818
    """No usable public key could be resolved for the token's ``kid``.

    Network failures, non-200 responses, a missing entry and an unparsable
    PEM all collapse into this error.
    """

    kind = "key_not_found"
    default_message = "Cannot verify the ID token signature. Please try again."


class SignatureInvalid(VerificationError):  # noqa: N818
    """Cryptographic verification did not succeed."""

    kind = "signature_invalid"
    default_message = "Cannot verify the ID token signature. Please try again."


class NoIdentity(VerificationError):  # noqa: N818
    """The signed payload did not yield a claim set."""

    kind = "no_identity"
    default_message = "No user present to validate"


class AudienceMismatch(VerificationError):  # noqa: N818
    """``aud`` is not the configured client id."""

    kind = "audience_mismatch"
    default_message = "Invalid data found for authentication"


class IssuerMismatch(VerificationError):  # noqa: N818
    """``iss`` is not one of the accepted Google issuers."""

    kind = "issuer_mismatch"
    default_message = "Invalid source found for authentication"


class TokenExpired(VerificationError):  # noqa: N818
    """``exp`` lies in the past."""

    kind = "token_expired"
    default_message = "User data is stale! Please try again."


class DomainNotAllowed(VerificationError):  # noqa: N818
    """``hd`` is not on the configured domain allow-list."""

    kind = "domain_not_allowed"
    default_message = "Cannot login with this email."


class MissingToken(VerificationError):  # noqa: N818
    """Raised by the Flask extractors when the request carries no token.

    Not produced by the verifier itself.
    """

    kind = "missing_token"
    default_message = "Missing token"
