"""Per-call verifier configuration.

The verifier holds no global settings. Callers build a VerifierConfig (from
their own settings store, ``app.config`` or the environment) and pass it to
every ``verify`` call.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv


@dataclass(frozen=True, slots=True)
class VerifierConfig:
    """Settings snapshot the claim validator checks against.

    Attributes:
        client_id: OAuth client id of this application. The token's ``aud``
            must equal it exactly.
        whitelisted_domains: Optional comma-separated list of Google Workspace
            domains allowed to sign in. Empty or None accepts every domain;
            a value of only blanks or commas accepts none.

    Example:
        ```python
        config = VerifierConfig(
            client_id="1234.apps.googleusercontent.com",
            whitelisted_domains="example.com, example.org",
        )
        ```
    """

    client_id: str
    whitelisted_domains: str | None = None

    @property
    def allowed_domains(self) -> tuple[str, ...]:
        """Allow-list entries, lowercased and trimmed, blank entries dropped."""
        if not self.whitelisted_domains:
            return ()
        entries = (entry.lower().strip() for entry in self.whitelisted_domains.split(","))
        return tuple(entry for entry in entries if entry)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], prefix: str = "GOOGLE_") -> VerifierConfig:
        """Build a config from ``<prefix>CLIENT_ID`` and ``<prefix>WHITELISTED_DOMAINS``.

        Raises:
            ValueError: If the client id is missing or empty.
        """
        client_id = mapping.get(f"{prefix}CLIENT_ID")
        if not client_id:
            raise ValueError(f"Missing required setting {prefix}CLIENT_ID")

        domains = mapping.get(f"{prefix}WHITELISTED_DOMAINS") or None
        return cls(client_id=str(client_id), whitelisted_domains=domains)

    @classmethod
    def from_env(cls, prefix: str = "GOOGLE_") -> VerifierConfig:
        """Load ``.env`` (if present) and build a config from the environment."""
        load_dotenv()
        return cls.from_mapping(os.environ, prefix=prefix)
