from functools import wraps
from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from .extensions import db
from .http import Unauthorized
from .models import User

_SALT = "auth-token"

def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=_SALT)

def issue_token(user_id: int) -> str:
    return _serializer().dumps({"uid": user_id})

def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "").strip()
    if not auth_header.lower().startswith("bearer "):
        return None
    return auth_header[7:].strip() or None

def resolve_user_id() -> int:
    """
    Resolves the caller from the Authorization bearer token.
    Raises Unauthorized when the token is missing, tampered with, expired,
    or names a user that no longer exists.
    """
    token = _bearer_token()
    if not token:
        raise Unauthorized("Missing or invalid bearer token.")

    try:
        data = _serializer().loads(token, max_age=current_app.config["TOKEN_MAX_AGE"])
    except SignatureExpired:
        raise Unauthorized("Token has expired.")
    except BadSignature:
        raise Unauthorized("Missing or invalid bearer token.")

    user_id = data.get("uid") if isinstance(data, dict) else None
    if not isinstance(user_id, int) or db.session.get(User, user_id) is None:
        raise Unauthorized("Missing or invalid bearer token.")
    return user_id

def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.user_id = resolve_user_id()
        return view(*args, **kwargs)
    return wrapper
