"""Notification API controllers."""

from __future__ import annotations

import math

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import BaseModel, Field, ValidationError

from taskboard.domains.notifications import services
from taskboard.domains.notifications.mappers import map_notification

notification_api_bp = Blueprint("notification_api", __name__)


class NotificationListFilter(BaseModel):
    unread: bool = False
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=50, ge=1, le=200)


@notification_api_bp.get("")
@jwt_required()
def list_notifications():
    user_id = int(get_jwt_identity())
    try:
        params = NotificationListFilter.model_validate(dict(request.args.items()))
    except ValidationError as exc:
        return (
            jsonify({"ok": False, "error": "validation_error", "details": exc.errors()}),
            400,
        )
    items, total = services.list_notifications(
        user_id, unread_only=params.unread, page=params.page, per_page=params.per_page
    )
    pages = math.ceil(total / params.per_page) if params.per_page else 1
    return jsonify(
        {
            "ok": True,
            "items": [map_notification(n) for n in items],
            "page": params.page,
            "pages": pages,
            "total": total,
        }
    )


@notification_api_bp.post("/<int:notification_id>/read")
@jwt_required()
def mark_read(notification_id: int):
    user_id = int(get_jwt_identity())
    notification = services.mark_read(user_id, notification_id)
    if not notification:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "notification": map_notification(notification)})


@notification_api_bp.post("/read-all")
@jwt_required()
def mark_all_read():
    user_id = int(get_jwt_identity())
    updated = services.mark_all_read(user_id)
    return jsonify({"ok": True, "updated": updated})


@notification_api_bp.delete("/<int:notification_id>")
@jwt_required()
def delete_notification(notification_id: int):
    user_id = int(get_jwt_identity())
    if not services.delete_notification(user_id, notification_id):
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})
