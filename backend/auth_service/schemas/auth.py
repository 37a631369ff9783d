"""Authentication-related Marshmallow schemas (camelCase on the wire)."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class SignInSchema(Schema):
    """Input payload for authenticating a user."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class SignUpSchema(Schema):
    """Input payload for account registration."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class TokenRefreshRequestSchema(Schema):
    """Input payload carrying the refresh token."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(
        required=True, data_key="refreshToken", validate=validate.Length(min=1)
    )


class JwtResponseSchema(Schema):
    """Response payload of a successful sign-in."""

    access_token = fields.String(required=True, data_key="accessToken")
    token_type = fields.String(required=True, data_key="tokenType")
    refresh_token = fields.String(required=True, data_key="refreshToken")
    user_id = fields.Integer(required=True, data_key="userId")
    username = fields.String(required=True)


class TokenRefreshResponseSchema(Schema):
    """Response payload of a refresh."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")


class MessageSchema(Schema):
    """Plain ``{"message": ...}`` payload."""

    message = fields.String(required=True)
