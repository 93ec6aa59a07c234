from flask import Blueprint, request, jsonify, current_app, g

from security.errors import AccountLocked, AuthError, InvalidCredentials, ValidationError
from security.password_policy import validate_password
from utils.audit import log_event
from utils.auth_context import get_account_guard, login_required, session_token


auth_bp = Blueprint("auth", __name__, url_prefix="/api")

# request JSON key -> account field
_PROFILE_KEYS = {
    "firstName": "first_name",
    "first_name": "first_name",
    "lastName": "last_name",
    "last_name": "last_name",
    "phone": "phone",
}

# column widths in models/user.py
_PROFILE_MAX_LEN = {
    "first_name": 120,
    "last_name": 120,
    "phone": 30,
}


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid request")
    return data


def _str_field(data: dict, key: str):
    """The raw value, "" when absent, None when not a string."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        return None
    return value


def _client_info() -> dict:
    return {
        "ip": request.headers.get("X-Forwarded-For", request.remote_addr),
        "user_agent": request.headers.get("User-Agent"),
    }


def _profile_from(data: dict) -> dict:
    profile = {}
    for key, field in _PROFILE_KEYS.items():
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, str) or len(value.strip()) > _PROFILE_MAX_LEN[field]:
            raise ValidationError(f"Invalid {key}")
        profile[field] = value.strip()
    return profile


def _with_session_cookie(resp, raw_token: str):
    resp.set_cookie(
        current_app.config.get("AUTH_COOKIE_NAME", "thescent_session"),
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 7 * 24 * 60 * 60),
        path="/",
    )
    return resp


@auth_bp.post("/register")
def register():
    data = _json_body()
    email = _str_field(data, "email")
    username = _str_field(data, "username")
    password = _str_field(data, "password")
    if email is None or username is None or password is None:
        raise ValidationError("email, username and password must be strings")
    email = email.strip()
    username = username.strip()

    if not _is_valid_email(email):
        raise ValidationError("Invalid email")
    if not username or len(username) > 80:
        raise ValidationError("Invalid username")
    valid, errors = validate_password(password)
    if not valid:
        raise ValidationError("Password does not meet policy", details=errors)
    profile = _profile_from(data)

    try:
        result = get_account_guard().register(
            email, username, password, profile=profile, **_client_info()
        )
    except AuthError as exc:
        log_event("REGISTER_FAIL", metadata={"email": email, "username": username, "reason": exc.name})
        raise

    log_event("REGISTER_SUCCESS", user_id=result.account["id"], entity="user", entity_id=result.account["id"])
    return _with_session_cookie(jsonify(result.account), result.session_token), 201


@auth_bp.post("/login")
def login():
    data = _json_body()
    email = _str_field(data, "email")
    password = _str_field(data, "password")
    if email is None or password is None:
        log_event("LOGIN_FAIL", metadata={"reason": "malformed"})
        raise InvalidCredentials()
    email = email.strip()

    try:
        result = get_account_guard().login(email, password, **_client_info())
    except AccountLocked as exc:
        action = "LOGIN_FAIL" if exc.locked_now else "LOGIN_LOCKED"
        log_event(action, metadata={"email": email, "locked_now": exc.locked_now})
        raise
    except InvalidCredentials:
        log_event("LOGIN_FAIL", metadata={"email": email})
        raise

    log_event("LOGIN_SUCCESS", user_id=result.account["id"])
    return _with_session_cookie(jsonify(result.account), result.session_token), 200


@auth_bp.post("/logout")
def logout():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "thescent_session")

    if get_account_guard().logout(session_token()):
        account = getattr(g, "account", None)
        log_event("LOGOUT", user_id=account["id"] if account else None)

    resp = jsonify(message="Logged out successfully")
    resp.delete_cookie(cookie_name, path="/")
    return resp, 200


@auth_bp.get("/user")
@login_required
def current_user():
    return jsonify(g.account), 200
