"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class UserSchema(Schema):
    """Public representation of a user account."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
