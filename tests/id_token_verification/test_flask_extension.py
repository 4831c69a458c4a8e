"""
Tests for the OneTapLogin Flask integration.
"""

from collections.abc import Callable
from typing import Any

import pytest
from flask import Flask

import id_token_verification as m

from .conftest import CLIENT_ID


class OkVerifier:
    """Duck-typed TokenVerifier that accepts 'GOOD' tokens."""

    def __init__(self):
        self.configs: list[m.VerifierConfig] = []

    def verify(self, token: str, config: m.VerifierConfig) -> m.Identity:
        self.configs.append(config)
        if token != "GOOD":
            raise m.SignatureInvalid()
        return m.Identity({"sub": "u1", "email": "user@example.com"})


class TestOneTapLogin:
    def test_valid_token_returns_identity(self, app: Flask):
        one_tap = m.OneTapLogin(OkVerifier(), m.VerifierConfig(client_id=CLIENT_ID))
        one_tap.init_app(app)

        r = app.test_client().post("/validate-id-token", data={"token": "GOOD"})

        assert r.status_code == 200
        assert r.get_json() == {"success": True, "data": {"sub": "u1", "email": "user@example.com"}}

    def test_invalid_token_returns_error_message(self, app: Flask):
        m.OneTapLogin(OkVerifier(), m.VerifierConfig(client_id=CLIENT_ID)).init_app(app)

        r = app.test_client().post("/validate-id-token", data={"token": "BAD"})

        assert r.status_code == 401
        assert r.get_json() == {
            "success": False,
            "data": "Cannot verify the ID token signature. Please try again.",
        }

    def test_missing_token_returns_401(self, app: Flask):
        m.OneTapLogin(OkVerifier(), m.VerifierConfig(client_id=CLIENT_ID)).init_app(app)

        r = app.test_client().post("/validate-id-token", data={})

        assert r.status_code == 401
        assert r.get_json()["success"] is False

    def test_get_is_not_allowed(self, app: Flask):
        m.OneTapLogin(OkVerifier(), m.VerifierConfig(client_id=CLIENT_ID)).init_app(app)

        assert app.test_client().get("/validate-id-token").status_code == 405

    def test_unexpected_error_returns_generic_401(self, app: Flask):
        class Exploding:
            def verify(self, token: str, config: m.VerifierConfig) -> m.Identity:
                raise RuntimeError("boom")

        m.OneTapLogin(Exploding(), m.VerifierConfig(client_id=CLIENT_ID)).init_app(app)

        r = app.test_client().post("/validate-id-token", data={"token": "x"})

        assert r.status_code == 401
        assert r.get_json() == {"success": False, "data": "Cannot verify the credentials"}

    def test_config_read_from_app_config(self, app: Flask):
        app.config["GOOGLE_CLIENT_ID"] = "from-app-config"
        app.config["GOOGLE_WHITELISTED_DOMAINS"] = "example.com"
        verifier = OkVerifier()
        m.OneTapLogin(verifier).init_app(app)

        app.test_client().post("/validate-id-token", data={"token": "GOOD"})

        assert verifier.configs == [
            m.VerifierConfig(client_id="from-app-config", whitelisted_domains="example.com")
        ]

    def test_init_app_without_client_id_fails(self, app: Flask):
        with pytest.raises(ValueError):
            m.OneTapLogin(OkVerifier()).init_app(app)

    def test_registers_extension_and_custom_rule(self, app: Flask):
        one_tap = m.OneTapLogin(
            OkVerifier(),
            m.VerifierConfig(client_id=CLIENT_ID),
            extractor=m.BearerExtractor(),
            url_rule="/auth/google",
        )
        one_tap.init_app(app)

        r = app.test_client().post("/auth/google", headers={"Authorization": "Bearer GOOD"})

        assert app.extensions["one_tap_login"] is one_tap
        assert r.status_code == 200


def test_end_to_end_with_real_verifier(
    app: Flask, make_token: Callable[..., str], verifier: m.IdTokenVerifier
):
    m.OneTapLogin(verifier, m.VerifierConfig(client_id=CLIENT_ID, whitelisted_domains="corp.example")).init_app(app)
    client = app.test_client()

    denied = client.post("/validate-id-token", data={"token": make_token(hd="example.com")})
    allowed = client.post("/validate-id-token", data={"token": make_token(hd="corp.example")})

    assert denied.status_code == 401
    assert denied.get_json()["data"] == "Cannot login with this email."
    assert allowed.status_code == 200
    body: dict[str, Any] = allowed.get_json()
    assert body["data"]["hd"] == "corp.example"


def test_two_instances_with_distinct_endpoints(app: Flask):
    first = m.OneTapLogin(OkVerifier(), m.VerifierConfig(client_id=CLIENT_ID))
    second = m.OneTapLogin(
        OkVerifier(),
        m.VerifierConfig(client_id="other-client"),
        url_rule="/validate-id-token/admin",
        endpoint="validate_admin_id_token",
    )
    first.init_app(app)
    second.init_app(app)
    client = app.test_client()

    assert client.post("/validate-id-token", data={"token": "GOOD"}).status_code == 200
    assert client.post("/validate-id-token/admin", data={"token": "GOOD"}).status_code == 200
    assert app.extensions["one_tap_login"] is first
