"""Asymmetric signature verification for ID tokens.

The verifier reconstructs the signing input from the decoded header and
payload, resolves the public key named by the header's ``kid`` and checks the
signature with ``cryptography``.

The ``alg`` header selects only the digest. The signature scheme follows the
resolved key: RSA keys verify PKCS#1 v1.5 signatures, EC keys verify ECDSA
signatures given in the JWS ``r || s`` form. No HMAC path exists, so a token
claiming ``HS256`` cannot turn the public key into a shared secret.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Final

from cryptography import x509
from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.serialization import load_pem_public_key
from jwt.utils import raw_to_der_signature

from . import base64url
from .errors import KeyNotFound, MalformedToken, MissingHeaderFields, SignatureInvalid
from .parser import parse_header

if TYPE_CHECKING:
    from .parser import ParsedToken
    from .protocols import Claims, KeyResolver

logger = logging.getLogger(__name__)

type HashFactory = type[hashes.HashAlgorithm]
type PublicKey = rsa.RSAPublicKey | ec.EllipticCurvePublicKey

SUPPORTED_ALGORITHMS: Final[Mapping[str, HashFactory]] = MappingProxyType(
    {
        "RS256": hashes.SHA256,
        "RS384": hashes.SHA384,
        "RS512": hashes.SHA512,
        "ES384": hashes.SHA384,
        # RFC 7518 pairs ES256 with SHA-256; the deployed table uses SHA-512.
        "ES256": hashes.SHA512,
    }
)
"""JWS ``alg`` name -> digest."""

DEFAULT_ALGORITHM: Final[HashFactory] = hashes.SHA256
"""Digest used when ``alg`` is not in the table."""


def get_supported_algorithm(
    alg: str,
    default: HashFactory = DEFAULT_ALGORITHM,
    algorithms: Mapping[str, HashFactory] = SUPPORTED_ALGORITHMS,
) -> HashFactory:
    """Map a JWS ``alg`` to its digest, falling back to ``default``."""
    return algorithms.get(alg, default)


def load_public_key(pem: str) -> PublicKey:
    """Load a public key from a PEM certificate or SubjectPublicKeyInfo block.

    Raises:
        ValueError: If the PEM cannot be parsed or holds an unsupported key type.
    """
    data = pem.encode("utf-8")
    try:
        if b"-----BEGIN CERTIFICATE-----" in data:
            key: Any = x509.load_pem_x509_certificate(data).public_key()
        else:
            key = load_pem_public_key(data)
    except UnsupportedAlgorithm as e:
        raise ValueError(f"Unsupported key: {e}") from e

    if not isinstance(key, (rsa.RSAPublicKey, ec.EllipticCurvePublicKey)):
        raise ValueError(f"Unsupported key type: {type(key).__name__}")
    return key


class SignatureVerifier:
    """Checks a parsed token's signature and releases its claims.

    Args:
        key_resolver: Supplies the PEM for the header's ``kid``.
        default_algorithm: Digest used for ``alg`` values missing from the table.
        algorithms: ``alg`` -> digest table.

    Example:
        ```python
        verifier = SignatureVerifier(CachingKeyResolver(GoogleCertsResolver()))
        claims = verifier.verify(parse(raw_token))
        ```
    """

    def __init__(
        self,
        key_resolver: KeyResolver,
        default_algorithm: HashFactory = DEFAULT_ALGORITHM,
        algorithms: Mapping[str, HashFactory] = SUPPORTED_ALGORITHMS,
    ) -> None:
        self._keys = key_resolver
        self._default = default_algorithm
        self._algorithms = algorithms

    def verify(self, parsed: ParsedToken) -> Claims | None:
        """Verify the signature of ``parsed``.

        Returns:
            The decoded payload, or None when the payload is not a JSON object
            (the claim validator reports that as NoIdentity).

        Raises:
            MissingHeaderFields: Header lacks ``kid`` or ``alg``.
            KeyNotFound: No key, or an unusable key, for ``kid``.
            SignatureInvalid: The signature does not verify.
        """
        header = parse_header(parsed)
        if header.key_id is None or header.algorithm is None:
            raise MissingHeaderFields()

        try:
            pem = self._keys.get_public_key(header.key_id)
        except Exception as e:
            logger.warning("Key resolution for kid %s failed: %s", header.key_id, e)
            raise KeyNotFound() from e

        if pem is None:
            raise KeyNotFound()

        try:
            public_key = load_public_key(pem)
        except ValueError as e:
            logger.warning("Public key for kid %s is unusable: %s", header.key_id, e)
            invalidate = getattr(self._keys, "invalidate", None)
            if invalidate is not None:
                try:
                    invalidate(header.key_id)
                except Exception as cleanup_error:
                    logger.warning("Could not invalidate kid %s: %s", header.key_id, cleanup_error)
            raise KeyNotFound() from e

        digest = get_supported_algorithm(header.algorithm, self._default, self._algorithms)
        message = f"{base64url.encode(parsed.header)}.{base64url.encode(parsed.payload)}"

        try:
            signature = base64url.decode(parsed.signature)
        except MalformedToken as e:
            raise SignatureInvalid() from e

        if not _signature_matches(public_key, signature, message.encode("ascii"), digest()):
            raise SignatureInvalid()

        try:
            claims: Any = json.loads(parsed.payload)
        except ValueError:
            return None
        return claims if isinstance(claims, dict) else None


def _signature_matches(
    key: PublicKey,
    signature: bytes,
    message: bytes,
    digest: hashes.HashAlgorithm,
) -> bool:
    if not signature:
        return False

    try:
        if isinstance(key, rsa.RSAPublicKey):
            key.verify(signature, message, padding.PKCS1v15(), digest)
        else:
            key.verify(raw_to_der_signature(signature, key.curve), message, ec.ECDSA(digest))
    except (InvalidSignature, ValueError, TypeError, UnsupportedAlgorithm):
        return False
    return True
