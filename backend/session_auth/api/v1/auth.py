"""Authentication endpoints using the service layer."""

from __future__ import annotations

from dataclasses import asdict

from flask import Blueprint, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from session_auth.api.deps import get_auth_service, json_response, timing
from session_auth.schemas import (
    LoginSchema,
    ProfileSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
)
from session_auth.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
profile_schema = ProfileSchema()
token_pair_schema = TokenPairSchema()


def _json_body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
def register():
    """Register a new user and return its first token pair."""
    data = register_schema.load(_json_body())
    pair = get_auth_service().register(RegisterIn(**data))
    return json_response({"data": token_pair_schema.dump(asdict(pair))}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a token pair."""
    data = login_schema.load(_json_body())
    pair = get_auth_service().login(LoginIn(**data))
    return json_response({"data": token_pair_schema.dump(asdict(pair))})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a new pair."""
    data = refresh_schema.load(_json_body())
    pair = get_auth_service().refresh(RefreshIn(**data))
    return json_response({"data": token_pair_schema.dump(asdict(pair))})


@bp.post("/logout")
@timing
def logout():
    """Revoke the presented refresh token; succeeds whatever its state."""
    token = _json_body().get("refreshToken")
    if isinstance(token, str) and token:
        get_auth_service().logout(LogoutIn(refresh_token=token))
    return json_response({"message": "Logged out successfully"})


@bp.post("/logout-all")
@jwt_required()
@timing
def logout_all():
    """Revoke every refresh token of the authenticated user."""
    revoked = get_auth_service().logout_all(str(get_jwt_identity()))
    return json_response({"message": "Logged out from all sessions", "revoked": revoked})


@bp.get("/profile")
@jwt_required()
@timing
def profile():
    """Return the authenticated user's profile."""
    user = get_auth_service().get_profile(str(get_jwt_identity()))
    return json_response({"data": profile_schema.dump(asdict(user))})
