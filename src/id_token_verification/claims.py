"""Identity claims and their semantic validation.

Only payloads that passed signature verification reach this module. The
validator checks, in order: presence, audience, issuer, expiry and the
hosted-domain allow-list, stopping at the first failure.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Final

from .errors import (
    AudienceMismatch,
    DomainNotAllowed,
    IssuerMismatch,
    NoIdentity,
    TokenExpired,
)

if TYPE_CHECKING:
    from .config import VerifierConfig
    from .protocols import Claims

GOOGLE_ISSUERS: Final[frozenset[str]] = frozenset(
    {"accounts.google.com", "https://accounts.google.com"}
)


class Identity(Mapping[str, Any]):
    """Verified claims of the signed-in Google user.

    This is not a local account. Known claims have typed accessors; anything
    else the provider sends (``email_verified``, ``given_name``, ...) is
    available through normal mapping access.

    Example:
        ```python
        identity = verifier.verify(raw_token, config)
        identity.email
        identity["given_name"]
        ```
    """

    __slots__ = ("_claims",)

    def __init__(self, claims: Claims) -> None:
        self._claims: Mapping[str, Any] = MappingProxyType(dict(claims))

    def __getitem__(self, key: str) -> Any:
        return self._claims[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._claims)

    def __len__(self) -> int:
        return len(self._claims)

    def __repr__(self) -> str:
        return f"Identity(sub={self.sub!r}, email={self.email!r})"

    def _str(self, name: str) -> str | None:
        value = self._claims.get(name)
        return value if isinstance(value, str) else None

    @property
    def aud(self) -> str | None:
        return self._str("aud")

    @property
    def iss(self) -> str | None:
        return self._str("iss")

    @property
    def exp(self) -> int | None:
        value = self._claims.get("exp")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(value)

    @property
    def hd(self) -> str | None:
        return self._str("hd")

    @property
    def sub(self) -> str | None:
        return self._str("sub")

    @property
    def email(self) -> str | None:
        return self._str("email")

    @property
    def name(self) -> str | None:
        return self._str("name")

    @property
    def picture(self) -> str | None:
        return self._str("picture")

    def to_dict(self) -> dict[str, Any]:
        return dict(self._claims)


class ClaimValidator:
    """Validates signed claims against a VerifierConfig.

    Args:
        clock: Returns the current Unix time. Injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    def validate(self, claims: Claims | None, config: VerifierConfig) -> Identity:
        """Run every claim check and wrap the claims as an Identity.

        ``exp`` equal to the current second is still valid. When the config
        has a non-empty ``whitelisted_domains``, its entries are lowercased but
        ``hd`` is compared as sent; a setting with only blanks or commas
        rejects every domain.

        Raises:
            NoIdentity: ``claims`` is None.
            AudienceMismatch: ``aud`` differs from ``config.client_id``.
            IssuerMismatch: ``iss`` is not a Google issuer.
            TokenExpired: ``exp`` is missing or in the past.
            DomainNotAllowed: ``hd`` is not on the allow-list.
        """
        if claims is None:
            raise NoIdentity()

        identity = claims if isinstance(claims, Identity) else Identity(claims)

        if identity.aud is None or identity.aud != config.client_id:
            raise AudienceMismatch()

        if identity.iss not in GOOGLE_ISSUERS:
            raise IssuerMismatch()

        exp = identity.exp
        if exp is None or exp < int(self._clock()):
            raise TokenExpired()

        # a set but blank allow-list admits nobody
        if config.whitelisted_domains and identity.hd not in config.allowed_domains:
            raise DomainNotAllowed()

        return identity
