"""
Key resolver implementations for ID token public keys.

This package contains implementations of the KeyResolver protocol.
"""

from .cached import CachingKeyResolver
from .google import GOOGLE_CERTS_URL, GoogleCertsResolver, KeySet

__all__ = ["GOOGLE_CERTS_URL", "CachingKeyResolver", "GoogleCertsResolver", "KeySet"]
