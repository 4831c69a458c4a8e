"""
Google certificate key resolver.

Fetches Google's signing certificates from the v1 certs endpoint, which
answers with a JSON object mapping key ids to PEM-encoded X.509
certificates.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

import requests

if TYPE_CHECKING:
    from ..protocols import HttpSession

logger = logging.getLogger(__name__)

GOOGLE_CERTS_URL: Final[str] = "https://www.googleapis.com/oauth2/v1/certs"

_MAX_AGE: Final[re.Pattern[str]] = re.compile(r"max-age=(\d+)")


@dataclass(frozen=True, slots=True)
class KeySet:
    """One fetch of the provider's public keys.

    Attributes:
        keys: Key id -> PEM string.
        max_age: Freshness lifetime from ``Cache-Control``, if the response
            declared one.
    """

    keys: Mapping[str, str] = field(default_factory=dict)
    max_age: int | None = None


class GoogleCertsResolver:
    """
    Resolves public keys from Google's certificate endpoint.

    Every lookup performs exactly one HTTP GET; there is no caching and no
    retry here. Wrap the resolver in a CachingKeyResolver to avoid fetching
    on every verification.

    Failure policy
    --------------
    Network errors, non-200 responses, malformed JSON and unknown kids are
    all reported as ``None``. The signature verifier turns that into
    KeyNotFound.

    Parameters
    ----------
    certs_url : str
        Certificate endpoint.

    session : HttpSession | None
        ``requests.Session`` (or compatible) used for the fetch. Callers own
        its adapters, proxies and retry policy.

    timeout : float
        Request timeout in seconds.

    Example
    -------
    resolver = GoogleCertsResolver()
    pem = resolver.get_public_key(header.key_id)
    """

    def __init__(
        self,
        certs_url: str = GOOGLE_CERTS_URL,
        session: HttpSession | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._url = certs_url
        self._session = session or requests.Session()
        self._timeout = timeout

    def fetch_key_set(self) -> KeySet | None:
        try:
            response = self._session.get(self._url, timeout=self._timeout)
        except requests.RequestException as e:
            logger.warning("Fetching %s failed: %s", self._url, e)
            return None

        if response.status_code != 200:
            logger.warning("Fetching %s returned HTTP %s", self._url, response.status_code)
            return None

        try:
            body = response.json()
        except ValueError:
            logger.warning("Fetching %s returned a body that is not JSON", self._url)
            return None

        if not isinstance(body, dict):
            logger.warning("Fetching %s returned JSON that is not an object", self._url)
            return None

        keys = {
            kid: pem
            for kid, pem in body.items()
            if isinstance(kid, str) and isinstance(pem, str)
        }
        return KeySet(keys=keys, max_age=_parse_max_age(response.headers))

    def get_public_key(self, key_id: str | None) -> str | None:
        if not key_id:
            return None

        key_set = self.fetch_key_set()
        if key_set is None:
            return None
        return key_set.keys.get(key_id)


def _parse_max_age(headers: Mapping[str, str]) -> int | None:
    match = _MAX_AGE.search(headers.get("Cache-Control", "") or "")
    return int(match.group(1)) if match else None
