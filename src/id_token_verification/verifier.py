"""ID token verification entry point.

IdTokenVerifier sequences the stages and is the only public way to turn a
raw token into an Identity:

    parse (structure) -> SignatureVerifier (kid, key, signature)
        -> ClaimValidator (aud, iss, exp, hd) -> Identity

Each stage raises its own VerificationError subclass and later stages never
run after a failure. On failure the verifier reports the error to the
injected notifier and re-raises it unchanged.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .claims import ClaimValidator
from .errors import MalformedToken, SignatureInvalid, VerificationError
from .key_resolvers import GoogleCertsResolver
from .parser import parse
from .signature import SignatureVerifier

if TYPE_CHECKING:
    from .claims import Identity
    from .config import VerifierConfig
    from .protocols import KeyResolver, Notifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of ``try_verify``: exactly one of identity or error is set."""

    identity: Identity | None = None
    error: VerificationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class IdTokenVerifier:
    """Verifies Google ID tokens.

    The verifier itself holds no per-call state: the config travels with
    each call, and the only shared collaborator is the key resolver. With
    the default GoogleCertsResolver every call fetches the certificates once;
    pass a CachingKeyResolver to reuse them.

    Thread Safety:
        Safe to share between threads as long as the key resolver and
        notifier are.

    Example:
        ```python
        verifier = IdTokenVerifier(
            key_resolver=CachingKeyResolver(GoogleCertsResolver()),
            notifier=audit_log.record_failure,
        )

        try:
            identity = verifier.verify(raw_token, VerifierConfig.from_env())
        except TokenExpired:
            # ask the user to sign in again
        except VerificationError as e:
            # reject, e.description is safe to display
        ```

    Args:
        key_resolver: Source of PEM public keys. Defaults to GoogleCertsResolver.
        notifier: Called with the error whenever verification fails. Its own
            exceptions are logged and otherwise ignored.
        signature_verifier: Overrides the SignatureVerifier built around
            ``key_resolver``.
        clock: Current Unix time for expiry checks.
    """

    def __init__(
        self,
        key_resolver: KeyResolver | None = None,
        *,
        notifier: Notifier | None = None,
        signature_verifier: SignatureVerifier | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._signatures = signature_verifier or SignatureVerifier(
            key_resolver or GoogleCertsResolver()
        )
        self._claims = ClaimValidator(clock=clock)
        self._notifier = notifier

    def verify(self, token: str, config: VerifierConfig) -> Identity:
        """Verify ``token`` and return the identity it asserts.

        Raises:
            VerificationError: The concrete subclass names the failing check.
        """
        try:
            return self._verify(token, config)
        except VerificationError as e:
            logger.info("ID token rejected: %s", e.kind)
            self._notify(e)
            raise

    def try_verify(self, token: str, config: VerifierConfig) -> VerificationResult:
        """Like ``verify`` but returns the outcome instead of raising."""
        try:
            return VerificationResult(identity=self.verify(token, config))
        except VerificationError as e:
            return VerificationResult(error=e)

    def _verify(self, token: str, config: VerifierConfig) -> Identity:
        try:
            parsed = parse(token)
        except (AttributeError, TypeError) as e:
            raise MalformedToken() from e

        try:
            claims = self._signatures.verify(parsed)
        except VerificationError:
            raise
        except Exception as e:
            # Never let a crypto backend error read as success.
            logger.exception("Signature verification failed unexpectedly")
            raise SignatureInvalid() from e

        return self._claims.validate(claims, config)

    def _notify(self, error: VerificationError) -> None:
        if self._notifier is None:
            return
        try:
            self._notifier(error)
        except Exception:
            logger.exception("Verification failure notifier raised")


def verify_token(
    raw: str,
    config: VerifierConfig,
    *,
    key_resolver: KeyResolver | None = None,
    notifier: Notifier | None = None,
) -> Identity:
    """Verify ``raw`` with a one-off IdTokenVerifier.

    Raises:
        VerificationError: The concrete subclass names the failing check.
    """
    return IdTokenVerifier(key_resolver, notifier=notifier).verify(raw, config)

