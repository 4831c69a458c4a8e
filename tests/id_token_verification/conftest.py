import datetime
import time
from collections.abc import Callable
from typing import Any

import jwt
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID
from flask import Flask

import id_token_verification as m

NOW = 1_700_000_000
CLIENT_ID = "1234.apps.googleusercontent.com"


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_p384_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP384R1())


@pytest.fixture(scope="session")
def ec_p256_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


def public_pem(private_key: Any) -> str:
    return (
        private_key.public_key()
        .public_bytes(
            serialization.Encoding.PEM,
            serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("ascii")
    )


def certificate_pem(private_key: Any) -> str:
    """Self-signed certificate, the format Google's v1 certs endpoint serves."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "federated-signon.system.gserviceaccount.com")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(private_key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


def google_claims(**overrides: Any) -> dict[str, Any]:
    claims: dict[str, Any] = {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "110169484474386276334",
        "email": "jane@example.com",
        "email_verified": True,
        "name": "Jane Doe",
        "picture": "https://lh3.googleusercontent.com/a/photo.jpg",
        "hd": "example.com",
        "iat": NOW - 60,
        "exp": NOW + 3600,
    }
    claims.update(overrides)
    return claims


@pytest.fixture
def make_token(rsa_key: rsa.RSAPrivateKey) -> Callable[..., str]:
    """
    Factory fixture that signs Google-shaped ID tokens.

    Usage in tests:
        token = make_token(aud="someone-else")
        token = make_token(key=ec_key, alg="ES384", kid="ec1")
    """

    def _make(*, key: Any = None, alg: str = "RS256", kid: str | None = "kid1", **claims: Any) -> str:
        headers = {"kid": kid} if kid is not None else None
        return jwt.encode(google_claims(**claims), key or rsa_key, algorithm=alg, headers=headers)

    return _make


class StubResolver:
    """Duck-typed KeyResolver returning fixed PEMs and counting lookups."""

    def __init__(self, keys: dict[str, str] | None = None):
        self.keys = keys or {}
        self.calls: list[str | None] = []
        self.invalidated: list[str] = []

    def get_public_key(self, key_id: str | None) -> str | None:
        self.calls.append(key_id)
        if not key_id:
            return None
        return self.keys.get(key_id)

    def invalidate(self, key_id: str) -> None:
        self.invalidated.append(key_id)


@pytest.fixture
def resolver(rsa_key: rsa.RSAPrivateKey) -> StubResolver:
    return StubResolver({"kid1": certificate_pem(rsa_key)})


@pytest.fixture
def config() -> m.VerifierConfig:
    return m.VerifierConfig(client_id=CLIENT_ID)


@pytest.fixture
def verifier(resolver: StubResolver) -> m.IdTokenVerifier:
    return m.IdTokenVerifier(resolver, clock=lambda: NOW)


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, headers: dict[str, str] | None = None):
        self.status_code = status_code
        self._body = body
        self.headers = headers or {}

    def json(self) -> Any:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    """Minimal requests.Session stand-in that records GETs."""

    def __init__(self, response: FakeResponse | Exception):
        self.response = response
        self.requests: list[tuple[str, float]] = []

    def get(self, url: str, *, timeout: float) -> FakeResponse:
        self.requests.append((url, timeout))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class FakeRedis:
    """
    Minimal redis stub for RedisCache tests.
    Stores bytes under keys and supports setex/delete.
    """

    def __init__(self):
        self._store: dict[str, tuple[bytes, int]] = {}

    def get(self, key: str):
        item = self._store.get(key)
        if item is None:
            return None
        data, expires_at = item
        if int(time.time()) >= expires_at:
            self._store.pop(key, None)
            return None
        return data

    def setex(self, key: str, ttl_seconds: int, value: str | bytes):
        expires_at = int(time.time()) + int(ttl_seconds)
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._store[key] = (value, expires_at)

    def delete(self, key: str):
        self._store.pop(key, None)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
