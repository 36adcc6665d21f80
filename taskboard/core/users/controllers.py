"""User API controllers."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from taskboard.core.users.schemas import UserCreateRequest, UserUpdateRequest, serialize_user
from taskboard.core.users.services import create_user, get_user, update_user
from taskboard.extensions import limiter

user_api_bp = Blueprint("user_api", __name__)


@user_api_bp.post("")
@limiter.limit("10/minute")
def api_create_user():
    payload = request.get_json(silent=True) or {}
    try:
        data = UserCreateRequest.model_validate(payload)
    except ValidationError as exc:
        return (
            jsonify({"ok": False, "error": "validation_error", "details": exc.errors()}),
            400,
        )
    try:
        user = create_user(data)
    except ValueError:
        return jsonify({"ok": False, "error": "duplicate"}), 409
    return jsonify({"ok": True, "user": serialize_user(user).model_dump(mode="json")}), 201


@user_api_bp.get("/me")
@jwt_required()
def api_me():
    user = get_user(int(get_jwt_identity()))
    if not user:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "user": serialize_user(user).model_dump(mode="json")})


@user_api_bp.patch("/me")
@jwt_required()
def api_update_me():
    user = get_user(int(get_jwt_identity()))
    if not user:
        return jsonify({"ok": False, "error": "not_found"}), 404
    payload = request.get_json(silent=True) or {}
    try:
        data = UserUpdateRequest.model_validate(payload)
    except ValidationError as exc:
        return (
            jsonify({"ok": False, "error": "validation_error", "details": exc.errors()}),
            400,
        )
    user = update_user(user, data)
    return jsonify({"ok": True, "user": serialize_user(user).model_dump(mode="json")})
