"""
Authentication: password hashing, bearer tokens and the request gate.

There is no server-side session.  A request is authenticated purely from
its ``Authorization: Bearer <token>`` header: the token is an HS256-signed
JWT carrying the user's id, and :func:`require_auth` resolves that id
against storage on every request.

Token structure (claims):
    - ``user_id`` -- integer primary key of the authenticated user.
    - ``iat``     -- issued-at timestamp (UTC epoch seconds).
    - ``exp``     -- expiration timestamp; omitted when ``JWT_EXPIRY_HOURS``
      is ``0``.

Key Concepts Demonstrated:
- Werkzeug password hashing (salted, slow one-way hash)
- HS256 signing and verification with PyJWT
- Decorator pattern for endpoint authentication (``require_auth``)
- Using ``flask.g`` to store request-scoped user identity
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any

import jwt
from flask import current_app, g, request
from werkzeug.security import check_password_hash, generate_password_hash

from .entities import User
from .errors import AuthError, ConflictError
from .schemas import Credentials, Registration
from .storage import Storage, get_storage

logger = logging.getLogger(__name__)

EXTENSION_KEY = "taskboard.auth"
ALGORITHM = "HS256"
REQUIRED_TOKEN_CLAIMS = ["user_id", "iat"]


def hash_password(password: str) -> str:
    """Hash a plain-text password with Werkzeug's default salted scheme."""
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    """Check a plain-text password against a stored hash."""
    return check_password_hash(password_hash, password)


def create_token(user_id: int, secret_key: str, expiry_hours: int) -> str:
    """
    Create an HS256-signed JWT identifying *user_id*.

    Args:
        user_id: Primary key of the authenticated user.  Must be positive.
        secret_key: Server-side HMAC secret.
        expiry_hours: Hours until the token expires; ``0`` or less issues a
            token without an ``exp`` claim.

    Returns:
        A compact JWS string suitable for a Bearer ``Authorization`` header.

    Raises:
        ValueError: If *user_id* is not positive.
    """
    if int(user_id) <= 0:
        raise ValueError("user_id must be a positive integer")

    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "user_id": int(user_id),
        "iat": int(now.timestamp()),
    }
    if expiry_hours > 0:
        payload["exp"] = int((now + timedelta(hours=int(expiry_hours))).timestamp())
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def decode_token(token: str, secret_key: str, leeway: int = 30) -> int:
    """
    Verify *token* and return the user id it carries.

    Raises:
        AuthError: If the token is malformed, badly signed, expired, or the
            ``user_id`` claim is not a positive integer.
    """
    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[ALGORITHM],
            options={"require": REQUIRED_TOKEN_CLAIMS},
            leeway=leeway,
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError("Invalid token") from exc

    user_id = payload.get("user_id")
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id <= 0:
        raise AuthError("Invalid token")
    return user_id


@dataclass
class AuthResult:
    """A freshly issued token and the user it belongs to."""

    token: str
    user: User

    def to_dict(self) -> dict[str, Any]:
        return {"token": self.token, "user": self.user.to_public_dict()}


class Authenticator:
    """
    Registers and logs in users and resolves bearer tokens.

    Args:
        storage: Where users are stored.
        secret_key: HMAC secret for signing tokens.
        expiry_hours: Token lifetime; ``0`` disables expiry.
        leeway: Clock-skew tolerance in seconds when checking ``exp``.
    """

    def __init__(
        self,
        storage: Storage,
        secret_key: str,
        expiry_hours: int = 24,
        leeway: int = 30,
    ) -> None:
        self.storage = storage
        self.secret_key = secret_key
        self.expiry_hours = expiry_hours
        self.leeway = leeway

    def issue_token(self, user: User) -> str:
        return create_token(user.id, self.secret_key, self.expiry_hours)

    def register(self, registration: Registration) -> AuthResult:
        """
        Create an account and sign the user in.

        Raises:
            ConflictError: If the email or username is already registered.
        """
        if self.storage.get_user_by_email(registration.email):
            raise ConflictError("Email already exists")
        if self.storage.get_user_by_username(registration.username):
            raise ConflictError("Username already exists")

        user = self.storage.create_user(
            {
                "username": registration.username,
                "email": registration.email,
                "fullname": registration.fullname,
                "password_hash": hash_password(registration.password),
            }
        )
        logger.info("Registered user %s", user.id)
        return AuthResult(token=self.issue_token(user), user=user)

    def login(self, credentials: Credentials) -> AuthResult:
        """
        Check credentials and issue a token.

        The same message is used for an unknown email and a wrong password so
        the response does not reveal which accounts exist.

        Raises:
            AuthError: If the credentials do not match a user.
        """
        user = self.storage.get_user_by_email(credentials.email)
        if user is None or not verify_password(user.password_hash, credentials.password):
            raise AuthError("Invalid credentials")
        return AuthResult(token=self.issue_token(user), user=user)

    def authenticate(self, token: str) -> User:
        """
        Resolve a bearer token to the user it names.

        Raises:
            AuthError: If the token is invalid or the user no longer exists.
        """
        user_id = decode_token(token, self.secret_key, self.leeway)
        user = self.storage.get_user(user_id)
        if user is None:
            raise AuthError("User not found")
        return user


def get_authenticator() -> Authenticator:
    """Return the authenticator attached to the current application."""
    return current_app.extensions[EXTENSION_KEY]


def build_authenticator(config: dict[str, Any], storage: Storage | None = None) -> Authenticator:
    """Create an :class:`Authenticator` from Flask config values."""
    return Authenticator(
        storage or get_storage(),
        secret_key=config["JWT_SECRET_KEY"],
        expiry_hours=int(config.get("JWT_EXPIRY_HOURS", 24)),
        leeway=int(config.get("JWT_CLOCK_SKEW_SECONDS", 30)),
    )


def extract_bearer_token() -> str | None:
    """
    Extract the Bearer token from the current request's Authorization header.

    Returns:
        The raw JWT string, or ``None`` if no valid Bearer token is present.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header[7:].strip()
    return token or None


def require_auth(view_func: Callable[..., Any]):
    """
    Decorator that enforces Bearer-token authentication on API endpoints.

    On success the resolved user is stored on ``flask.g`` as ``g.user`` and
    ``g.user_id``.  Otherwise an :class:`AuthError` is raised, which the
    application's error handler turns into a 401 before the view runs.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        token = extract_bearer_token()
        if token is None:
            raise AuthError("Authentication required")

        user = get_authenticator().authenticate(token)
        g.user = user
        g.user_id = user.id
        return view_func(*args, **kwargs)

    return wrapper
