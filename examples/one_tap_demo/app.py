import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify

from id_token_verification import (
    CachingKeyResolver,
    GoogleCertsResolver,
    IdTokenVerifier,
    InMemoryCache,
    OneTapLogin,
    RedisCache,
    VerificationError,
)

logger = logging.getLogger("one_tap_demo")


def log_failure(error: VerificationError) -> None:
    logger.warning("Google sign-in rejected (%s): %s", error.kind, error.description)


def create_app() -> Flask:
    """
    Create a Flask app exposing the one-tap validation endpoint.

    Settings come from the environment (or a .env file):
        GOOGLE_CLIENT_ID            required
        GOOGLE_WHITELISTED_DOMAINS  optional, comma-separated
        REDIS_URL                   optional, shares cached certificates
    """
    load_dotenv()

    app = Flask(__name__)
    app.config["GOOGLE_CLIENT_ID"] = os.environ.get("GOOGLE_CLIENT_ID")
    app.config["GOOGLE_WHITELISTED_DOMAINS"] = os.environ.get("GOOGLE_WHITELISTED_DOMAINS")

    redis_url = os.environ.get("REDIS_URL")
    if redis_url:
        import redis

        cache = RedisCache(redis.Redis.from_url(redis_url, decode_responses=True))
    else:
        cache = InMemoryCache()

    resolver = CachingKeyResolver(GoogleCertsResolver(), cache=cache)
    OneTapLogin(IdTokenVerifier(resolver, notifier=log_failure)).init_app(app)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"}), 200

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"success": False, "data": "Resource not found."}), 404

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_app().run(port=5000)
