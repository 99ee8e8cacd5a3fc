from flask import Blueprint, request, jsonify, current_app, g
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import User
from security.password import hash_password, verify_password
from security.session import create_session, revoke_session, revoke_all_sessions, token_from_cookie_or_header
from security.csrf import issue_csrf_token, clear_csrf_token
from security.password_policy import validate_password, validate_username
from utils.audit import log_event
from utils.auth_context import login_required
from utils.blocklist import is_disposable_email, normalize_email


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _is_valid_email(email: str) -> bool:
    if not isinstance(email, str) or len(email) > 255:
        return False
    local, sep, domain = email.partition("@")
    return bool(local) and bool(sep) and "." in domain and not domain.startswith(".") and not domain.endswith(".")


def _user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "is_admin": user.is_admin,
    }


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object"), 400
    username = (data.get("username") or "").strip()
    email = normalize_email(data.get("email"))
    password = data.get("password") or ""

    valid, errors = validate_username(username)
    if not valid:
        return jsonify(error="Invalid username", details=errors), 400
    if not _is_valid_email(email):
        return jsonify(error="Invalid email"), 400
    if is_disposable_email(email):
        return jsonify(error="Disposable email addresses are not allowed"), 400
    valid, errors = validate_password(password)
    if not valid:
        return jsonify(error="Password does not meet policy", details=errors), 400

    if User.query.filter_by(username=username).first():
        log_event("REGISTER_FAIL_USERNAME_EXISTS", metadata={"username": username})
        return jsonify(error="Username already taken"), 409
    if User.query.filter_by(email=email).first():
        log_event("REGISTER_FAIL_EMAIL_EXISTS", metadata={"email": email})
        return jsonify(error="Email already registered"), 409

    user = User(username=username, email=email, password_hash=hash_password(password))
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error="Username or email already registered"), 409
    log_event("REGISTER_SUCCESS", user_id=user.id)

    return jsonify(message="Registered successfully", user=_user_payload(user)), 201


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object"), 400
    # "username" accepts either the username or the email address
    identifier = (data.get("username") or data.get("email") or "").strip()
    password = data.get("password") or ""

    user = None
    if identifier:
        user = User.query.filter(
            or_(User.username == identifier, User.email == normalize_email(identifier))
        ).first()
    if not user or not verify_password(password, user.password_hash):
        log_event(
            "LOGIN_FAIL",
            user_id=user.id if user else None,
            metadata={"identifier": identifier},
        )
        return jsonify(error="Invalid credentials"), 401

    # Rotate: revoke any existing sessions for this user
    revoked_count = revoke_all_sessions(user.id)

    raw_token = create_session(user.id)
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "venuemap_session")
    max_age = current_app.config.get("SESSION_LIFETIME_SECONDS", 24 * 60 * 60)

    resp = jsonify(message="Login successful", user=_user_payload(user), token=raw_token)
    resp.set_cookie(
        cookie_name,
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=max_age,
        path="/",
    )
    resp = issue_csrf_token(resp)

    log_event("LOGIN_SUCCESS", user_id=user.id, metadata={"revoked_sessions": revoked_count})
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(_user_payload(g.user)), 200


@auth_bp.post("/logout")
@login_required
def logout():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "venuemap_session")

    revoke_session(token_from_cookie_or_header())
    log_event("LOGOUT", user_id=g.user.id)

    resp = jsonify(message="Logged out")
    resp.delete_cookie(cookie_name, path="/")
    resp = clear_csrf_token(resp)
    return resp, 200


@auth_bp.get("/check-username/<username>")
def check_username(username: str):
    valid, errors = validate_username(username)
    if not valid:
        return jsonify(available=False, message=errors[0]), 200
    taken = User.query.filter_by(username=username).first() is not None
    return jsonify(available=not taken), 200


@auth_bp.get("/check-email/<email>")
def check_email(email: str):
    email = normalize_email(email)
    if not _is_valid_email(email):
        return jsonify(available=False, message="Invalid email"), 200
    taken = User.query.filter_by(email=email).first() is not None
    return jsonify(available=not taken), 200
