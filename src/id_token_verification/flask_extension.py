"""Flask endpoint for validating Google one-tap ID tokens.

The browser-side one-tap callback posts the credential it received from
Google to this endpoint. The extension verifies it and answers with JSON;
it does not create sessions or local users, that is left to the
application (for example in a ``@app.after_request`` hook or by wrapping
the view).

Response shape:
    ``{"success": true, "data": {...claims...}}`` on success
    ``{"success": false, "data": "<message>"}`` with the error's status code
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from flask import Flask, current_app, jsonify

from .config import VerifierConfig
from .errors import VerificationError
from .extractors import FormFieldExtractor

if TYPE_CHECKING:
    from flask.typing import ResponseReturnValue

    from .protocols import Extractor, TokenVerifier

_EXT_KEY: Final[str] = "one_tap_login"
"""Flask extensions registry key for OneTapLogin."""


class OneTapLogin:
    """
    Flask glue for one-tap ID token validation.

    Responsibilities:
    - Extract the token from the request
    - Verify it against the configured VerifierConfig
    - Convert VerificationError into a JSON error response

    Usage:
        one_tap = OneTapLogin(IdTokenVerifier(CachingKeyResolver(GoogleCertsResolver())))
        one_tap.init_app(app)  # reads GOOGLE_CLIENT_ID from app.config
    """

    def __init__(
        self,
        verifier: TokenVerifier,
        config: VerifierConfig | None = None,
        extractor: Extractor | None = None,
        url_rule: str = "/validate-id-token",
        endpoint: str = "validate_id_token",
    ) -> None:
        self._verifier = verifier
        self._config = config
        self._extractor = extractor or FormFieldExtractor()
        self._url_rule = url_rule
        self._endpoint = endpoint

    def init_app(self, app: Flask, *, config: VerifierConfig | None = None) -> None:
        """Register the validation endpoint on ``app``.

        Args:
            app: The Flask application instance.
            config: Overrides the config given at construction. When neither is
                set, it is built from ``app.config`` (``GOOGLE_CLIENT_ID``,
                ``GOOGLE_WHITELISTED_DOMAINS``).

        Several instances can share an app when each has its own
        ``url_rule`` and ``endpoint``; ``app.extensions`` keeps the first one.

        Raises:
            ValueError: If no config was given and ``app.config`` lacks a client id.
        """
        if config is not None:
            self._config = config
        if self._config is None:
            self._config = VerifierConfig.from_mapping(app.config)

        app.add_url_rule(
            self._url_rule,
            endpoint=self._endpoint,
            view_func=self.validate_token,
            methods=["POST"],
        )
        app.extensions.setdefault(_EXT_KEY, self)

    @property
    def config(self) -> VerifierConfig:
        if self._config is None:
            raise RuntimeError("OneTapLogin has no VerifierConfig; call init_app first")
        return self._config

    def validate_token(self) -> ResponseReturnValue:
        try:
            token = self._extractor.extract()
            identity = self._verifier.verify(token, self.config)
        except VerificationError as e:
            return _json_error(e.description, e.error_code)
        except Exception:
            current_app.logger.exception("ID token validation failed")
            return _json_error("Cannot verify the credentials", 401)

        return jsonify({"success": True, "data": dict(identity)})


def _json_error(message: str, status: int) -> tuple[Any, int]:
    return jsonify({"success": False, "data": message}), status
