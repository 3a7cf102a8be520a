"""
Main Flask application entry point for Euro Arcade
"""
import os

import click
from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_login import LoginManager
from werkzeug.exceptions import HTTPException

load_dotenv()

from config import Config
from models import store
from services.sessions import load_user_from_request
from utils.errors import AppError, Unauthorized
from utils.google_auth import GoogleTokenVerifier
from utils.mail import mail
from utils.payment_gateway import PayPalGateway

GENERIC_ERROR = "Internal server error. Please try again later."

# Sessions are resolved per request from the session token; nothing is kept in the Flask cookie session
login_manager = LoginManager()
login_manager.session_protection = None


@login_manager.request_loader
def load_user(req):
    return load_user_from_request(req)


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthorized()


def create_app(config_class=Config):
    """Application factory pattern."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    store.init_app(app)
    login_manager.init_app(app)
    mail.init_app(app)
    GoogleTokenVerifier().init_app(app)
    PayPalGateway().init_app(app)

    register_error_handlers(app)
    register_commands(app)

    from routes import public_bp, auth_bp, user_coins_bp, user_payment_bp, admin_users_bp

    app.register_blueprint(public_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(user_coins_bp)
    app.register_blueprint(user_payment_bp)
    app.register_blueprint(admin_users_bp)

    return app


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(e):
        if e.status_code >= 500:
            app.logger.error("%s on %s: %s", type(e).__name__, request.path, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"success": False, "message": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.error(f"Unhandled error on {request.method} {request.path}: {str(e)}", exc_info=True)
        return jsonify({"success": False, "message": GENERIC_ERROR}), 500


def register_commands(app):
    @app.cli.command("create-admin")
    @click.argument("email")
    def create_admin(email):
        """Promote an existing account to admin."""
        from services.identity import promote_to_admin
        user = promote_to_admin(email)
        click.echo(f"[SUCCESS] {user.email} is now an admin.")

    @app.cli.command("purge-sessions")
    def purge_sessions():
        """Delete expired login sessions."""
        from services.sessions import purge_expired_sessions
        click.echo(f"Removed {purge_expired_sessions()} expired session(s).")


# WSGI entry point: gunicorn -c gunicorn_config.py app:app
app = create_app()
application = app

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 3000))
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "false").lower() in ("true", "1"))
