"""
Google ID token verification with an optional Flask one-tap endpoint.

High-level flow (per token)
---------------------------
1. `parse(token)` checks the compact JWT structure: exactly three
   dot-separated segments with a decodable header and payload.
2. `SignatureVerifier.verify(parsed)`:
   - Reads `kid` and `alg` from the header
   - Asks the KeyResolver for the PEM public key of that `kid`
   - Verifies the signature over the re-encoded header and payload
3. `ClaimValidator.validate(claims, config)` checks `aud`, `iss`, `exp`
   and the hosted-domain allow-list.
4. On success an immutable `Identity` is returned. On failure the matching
   `VerificationError` subclass is raised after the notifier has seen it.

Security notes
--------------
- Never trust claims until signature verification succeeds.
- The `alg` header only selects a digest; the key type fixes the scheme, so
  there is no way to downgrade to HMAC or `none`.
- Every failure is final. Nothing is retried inside the verifier.
- Cache keys with `CachingKeyResolver`; it throttles refetches so random
  `kid` values cannot turn into outbound request floods.

Example usage
-------------

.. code-block:: python

    from id_token_verification import (
        CachingKeyResolver,
        GoogleCertsResolver,
        IdTokenVerifier,
        InMemoryCache,
        VerificationError,
        VerifierConfig,
    )

    resolver = CachingKeyResolver(GoogleCertsResolver(), cache=InMemoryCache())
    verifier = IdTokenVerifier(resolver, notifier=lambda e: audit.warning(e.kind))

    config = VerifierConfig(
        client_id="1234.apps.googleusercontent.com",
        whitelisted_domains="example.com",
    )

    try:
        identity = verifier.verify(raw_token, config)
    except VerificationError as e:
        return {"success": False, "data": e.description}, e.error_code
"""

# Codec and parsing
from . import base64url
from .parser import Header, ParsedToken, parse, parse_header

# Cache stores
from .cache_stores import InMemoryCache, RedisCache

# Claims
from .claims import GOOGLE_ISSUERS, ClaimValidator, Identity

# Configuration
from .config import VerifierConfig

# Errors
from .errors import (
    AudienceMismatch,
    DomainNotAllowed,
    IssuerMismatch,
    KeyNotFound,
    MalformedToken,
    MissingHeaderFields,
    MissingToken,
    NoIdentity,
    SignatureInvalid,
    TokenExpired,
    VerificationError,
)

# Extractors
from .extractors import BearerExtractor, FormFieldExtractor

# Flask extension
from .flask_extension import OneTapLogin

# Key resolvers
from .key_resolvers import GOOGLE_CERTS_URL, CachingKeyResolver, GoogleCertsResolver, KeySet

# Protocols
from .protocols import (
    CacheStore,
    Claims,
    Extractor,
    KeyResolver,
    KeySetSource,
    Notifier,
    TokenVerifier,
)

# Refresh gate
from .refresh_gate import RefreshGate

# Signature verification
from .signature import (
    DEFAULT_ALGORITHM,
    SUPPORTED_ALGORITHMS,
    SignatureVerifier,
    get_supported_algorithm,
    load_public_key,
)

# Verifier
from .verifier import IdTokenVerifier, VerificationResult, verify_token

__all__ = [
    # Codec and parsing
    "base64url",
    "Header",
    "ParsedToken",
    "parse",
    "parse_header",
    # Errors
    "AudienceMismatch",
    "DomainNotAllowed",
    "IssuerMismatch",
    "KeyNotFound",
    "MalformedToken",
    "MissingHeaderFields",
    "MissingToken",
    "NoIdentity",
    "SignatureInvalid",
    "TokenExpired",
    "VerificationError",
    # Protocols
    "CacheStore",
    "Claims",
    "Extractor",
    "KeyResolver",
    "KeySetSource",
    "Notifier",
    "TokenVerifier",
    # Configuration
    "VerifierConfig",
    # Key resolvers
    "GOOGLE_CERTS_URL",
    "CachingKeyResolver",
    "GoogleCertsResolver",
    "KeySet",
    # Cache stores
    "InMemoryCache",
    "RedisCache",
    # Refresh gate
    "RefreshGate",
    # Signature verification
    "DEFAULT_ALGORITHM",
    "SUPPORTED_ALGORITHMS",
    "SignatureVerifier",
    "get_supported_algorithm",
    "load_public_key",
    # Claims
    "GOOGLE_ISSUERS",
    "ClaimValidator",
    "Identity",
    # Verifier
    "IdTokenVerifier",
    "VerificationResult",
    "verify_token",
    # Extractors
    "BearerExtractor",
    "FormFieldExtractor",
    # Flask extension
    "OneTapLogin",
]
