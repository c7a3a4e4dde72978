"""
Authentication API endpoints.

Endpoints:
    POST /api/auth/register  - Create an account and receive a token
    POST /api/auth/login     - Exchange email and password for a token
    GET  /api/auth/me        - Return the user behind the bearer token
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, g, jsonify, request

from ..auth import get_authenticator, require_auth
from ..schemas import validate_login, validate_register

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    """
    Register a new user account.

    Request Body (JSON):
        email: Email address (required, must look like an address)
        username: Login handle (required)
        fullname: Display name (required)
        password: Plain-text password (required)

    Returns:
        200 with ``token`` and ``user`` on success, 400 when the input is
        invalid or the email/username is taken.
    """
    logger.info("POST /api/auth/register - Registering user")

    registration = validate_register(request.get_json(silent=True))
    result = get_authenticator().register(registration)
    return jsonify(result.to_dict()), 200


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[Response, int]:
    """
    Authenticate a user and issue a token.

    Returns:
        200 with ``token`` and ``user``, 400 for malformed input, 401 for
        wrong credentials.
    """
    logger.info("POST /api/auth/login - Logging in")

    credentials = validate_login(request.get_json(silent=True))
    result = get_authenticator().login(credentials)
    logger.info("User %s logged in", result.user.id)
    return jsonify(result.to_dict()), 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me() -> tuple[Response, int]:
    """Return the public profile of the authenticated user."""
    return jsonify({"user": g.user.to_public_dict()}), 200
