import logging

import click
from flask import Flask, request, g, jsonify, send_from_directory
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from models.user import User
from routes import health_bp, auth_bp, users_bp, venues_bp, geocoding_bp, audit_bp
from security.csrf import require_csrf, uses_cookie_session
from services.errors import DirectoryError
from utils.auth_context import load_current_user
from utils.seed import seed_venues
from utils.storage import init_blob_store


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(venues_bp)
    app.register_blueprint(geocoding_bp)
    app.register_blueprint(audit_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # Image blobs on local disk, served back under UPLOAD_URL_PREFIX
    init_blob_store(app)

    @app.get(app.config["UPLOAD_URL_PREFIX"].rstrip("/") + "/<path:filename>")
    def venue_image_file(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    @app.before_request
    def _load_user():
        load_current_user()

    CSRF_EXEMPT_PATHS = {
        "/auth/login",
        "/auth/register",
        "/health",
    }

    @app.before_request
    def _csrf_protect():
        # Only protect state-changing requests
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            # Exempt auth bootstrap endpoints
            if request.path in CSRF_EXEMPT_PATHS:
                return None

            # Only enforce CSRF for authenticated cookie sessions
            if getattr(g, "user", None) is not None and uses_cookie_session():
                failure = require_csrf()
                if failure:
                    return failure

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(self), microphone=(), camera=()"
        return resp

    register_error_handlers(app)
    register_cli(app)

    return app

#-------------------------

def register_error_handlers(app):
    @app.errorhandler(DirectoryError)
    def _directory_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(413)
    def _too_large(exc):
        limit_mb = app.config.get("MAX_IMAGE_BYTES", 5 * 1024 * 1024) // (1024 * 1024)
        return jsonify(error=f"File too large (max {limit_mb} MB)"), 413

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        return jsonify(error=exc.description), exc.code

    @app.errorhandler(Exception)
    def _unhandled(exc):
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify(error="Server error"), 500

#-------------------------

def register_cli(app):
    @app.cli.command("make-admin")
    @click.argument("identifier")
    def make_admin(identifier):
        """Promote a user to admin by email or username (bootstrap)."""
        identifier = identifier.strip()
        user = (
            User.query.filter_by(email=identifier.lower()).first()
            or User.query.filter_by(username=identifier).first()
        )
        if not user:
            click.echo("User not found")
            return

        if not user.is_admin:
            user.is_admin = True
            db.session.commit()

        click.echo(f"{user.username} promoted to admin")

    @app.cli.command("seed-venues")
    def seed_venues_command():
        """Insert the sample venues into an empty directory."""
        added = seed_venues()
        click.echo(f"Seeded {added} venue(s)")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5000)
