"""Task API controllers."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from taskboard.domains.projects import services
from taskboard.domains.projects.controllers.project_api import _error, _validation_error
from taskboard.domains.projects.mappers import map_comment, map_history, map_task
from taskboard.domains.projects.schemas.project_schemas import CommentCreate, TaskUpdate
from taskboard.extensions import limiter

task_api_bp = Blueprint("task_api", __name__)


@task_api_bp.get("/<int:task_id>")
@jwt_required()
def get_task(task_id: int):
    user_id = int(get_jwt_identity())
    task = services.get_task(user_id, task_id)
    if not task:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "task": map_task(task)})


@task_api_bp.patch("/<int:task_id>")
@jwt_required()
@limiter.limit("240/minute")
def update_task(task_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = TaskUpdate.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    user_id = int(get_jwt_identity())
    try:
        # exclude_unset keeps an explicit null (clear assignee or due date) apart from an absent key.
        result = services.apply_task_update(user_id, task_id, **data.model_dump(exclude_unset=True))
    except ValueError as exc:
        return _error(exc)
    if not result:
        return jsonify({"ok": False, "error": "not_found"}), 404
    task, reports = result
    return jsonify(
        {
            "ok": True,
            "task": map_task(task),
            "automations": [report.summary() for report in reports],
        }
    )


@task_api_bp.delete("/<int:task_id>")
@jwt_required()
def delete_task(task_id: int):
    user_id = int(get_jwt_identity())
    try:
        deleted = services.delete_task(user_id, task_id)
    except ValueError as exc:
        return _error(exc)
    if not deleted:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})


@task_api_bp.get("/<int:task_id>/comments")
@jwt_required()
def list_comments(task_id: int):
    user_id = int(get_jwt_identity())
    try:
        items = services.list_comments(user_id, task_id)
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "items": [map_comment(c) for c in items]})


@task_api_bp.post("/<int:task_id>/comments")
@jwt_required()
@limiter.limit("120/minute")
def add_comment(task_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = CommentCreate.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    user_id = int(get_jwt_identity())
    try:
        comment = services.add_comment(user_id, task_id, data.text)
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "comment": map_comment(comment)}), 201


@task_api_bp.get("/<int:task_id>/history")
@jwt_required()
def list_history(task_id: int):
    user_id = int(get_jwt_identity())
    try:
        items = services.list_history(user_id, task_id)
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "items": [map_history(h) for h in items]})
