from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from config import Config
from routes import health_bp, auth_bp

from models import db
from flask_migrate import Migrate
from security.errors import AuthError
from utils.auth_context import get_account_guard, init_auth, load_current_user


def create_app(config_class=Config, clock=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)

    # Database init (audit log always, accounts/sessions when STORAGE_BACKEND=database)
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    if app.config.get("TESTING"):
        with app.app_context():
            db.create_all()

    # Account store + guard
    init_auth(app, clock=clock)

    @app.before_request
    def _load_user():
        load_current_user()

    @app.errorhandler(AuthError)
    def _auth_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(SQLAlchemyError)
    def _db_error(exc):
        db.session.rollback()
        app.logger.exception("Database failure: %s", exc)
        return jsonify(error="InternalError", message="Something went wrong. Please try again."), 500

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp


    register_cli(app)


    return app

#-------------------------
import click

def register_cli(app):
    @app.cli.command("make-admin")
    @click.argument("email")
    def make_admin(email):
        """Give an account the admin role by email (bootstrap)."""
        store = get_account_guard().store
        user = store.get_user_by_email(email.strip())
        if not user:
            click.echo("User not found")
            return

        if user.role != "admin":
            store.update_user(user.id, {"role": "admin"})

        click.echo(f"{user.email} promoted to admin")

    @app.cli.command("unlock-account")
    @click.argument("email")
    def unlock_account(email):
        """Clear the failed-login counter and lock of an account."""
        if not get_account_guard().unlock(email.strip()):
            click.echo("User not found")
            return
        click.echo(f"{email.strip()} unlocked")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5000)
