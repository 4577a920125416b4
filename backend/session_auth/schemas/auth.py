"""Authentication-related Marshmallow schemas.

Wire names are camelCase (``firstName``, ``refreshToken``); Python attributes
stay snake_case through ``data_key``.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate

from session_auth.models.user import has_dotted_domain


def _dotted_domain(value: str) -> None:
    if not has_dotted_domain(value):
        raise ValidationError("Email domain must contain a dot.")


def _not_blank(value: str) -> None:
    if not value.strip():
        raise ValidationError("Must not be blank.")


class RegisterSchema(Schema):
    """Input payload for account registration.

    Mirrors the ``User`` model checks so accepted input never fails at insert.
    """

    email = fields.Email(required=True, validate=[validate.Length(max=254), _dotted_domain])
    password = fields.String(required=True, validate=validate.Length(min=6, max=128))
    first_name = fields.String(
        required=True,
        data_key="firstName",
        validate=[validate.Length(min=1, max=100), _not_blank],
    )
    last_name = fields.String(
        required=True,
        data_key="lastName",
        validate=[validate.Length(min=1, max=100), _not_blank],
    )


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Input payload carrying a refresh token (refresh and logout)."""

    refresh_token = fields.String(
        required=True, data_key="refreshToken", validate=validate.Length(min=1)
    )


class ProfileSchema(Schema):
    """Public identity representation."""

    id = fields.String(required=True)
    email = fields.String(required=True)
    first_name = fields.String(data_key="firstName")
    last_name = fields.String(data_key="lastName")
    is_active = fields.Boolean(data_key="isActive")
    created_at = fields.DateTime(data_key="createdAt", allow_none=True)


class TokenPairSchema(Schema):
    """Response payload containing an access/refresh token pair."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")
    expires_in = fields.Integer(required=True, data_key="expiresIn")
    token_type = fields.String(data_key="tokenType")
    user = fields.Nested(ProfileSchema)
