"""User lookup endpoint for other services."""

from __future__ import annotations

from flask import Blueprint

from auth_service.api.deps import json_response, require_principal, service_context
from auth_service.schemas import UserSchema
from auth_service.services.users import UserService

bp = Blueprint("users", __name__)

user_schema = UserSchema()


@bp.get("/<int:user_id>")
@require_principal
def get_user(user_id: int):
    """Return the public view of one account."""

    user = UserService(ctx=service_context()).get_user(user_id)
    return json_response(user_schema.dump(user))
