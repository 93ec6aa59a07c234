from functools import wraps
from flask import current_app, g, request

from security.account_guard import AccountGuard
from security.errors import NotAuthenticated
from security.session import SessionManager
from storage import StoreFactory

def init_auth(app, clock=None):
    """Builds the configured store and the AccountGuard for this app."""
    store = StoreFactory.from_config(app.config)
    kwargs = {"clock": clock} if clock else {}

    sessions = SessionManager(
        store,
        lifetime_seconds=app.config.get("SESSION_LIFETIME_SECONDS", 7 * 24 * 60 * 60),
        **kwargs,
    )
    app.extensions["account_guard"] = AccountGuard(
        store,
        sessions,
        max_attempts=app.config.get("MAX_LOGIN_ATTEMPTS", 5),
        lockout_minutes=app.config.get("LOCKOUT_MINUTES", 30),
        hash_scheme=app.config.get("PASSWORD_HASH_SCHEME", "scrypt"),
        **kwargs,
    )

def get_account_guard() -> AccountGuard:
    return current_app.extensions["account_guard"]

def session_token():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "thescent_session")
    return request.cookies.get(cookie_name)

def load_current_user():
    token = session_token()
    g.account = None
    if not token:
        return
    try:
        g.account = get_account_guard().current_account(token)
    except NotAuthenticated:
        g.account = None

def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "account", None) is None:
            raise NotAuthenticated()
        return fn(*args, **kwargs)
    return wrapper
