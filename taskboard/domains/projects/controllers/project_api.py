"""Project API controllers."""

from __future__ import annotations

import math

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from taskboard.core.events.event_service import list_project_events
from taskboard.domains.projects import services
from taskboard.domains.projects.mappers import map_event, map_member, map_project, map_task
from taskboard.domains.projects.schemas.project_schemas import (
    EventListFilter,
    MemberAdd,
    ProjectCreate,
    ProjectListFilter,
    ProjectUpdate,
    StatusesReplace,
    TaskCreate,
    TaskListFilter,
)

project_api_bp = Blueprint("project_api", __name__)

_ERROR_STATUS = {
    "not_found": 404,
    "forbidden": 403,
    "duplicate": 409,
    "status_in_use": 409,
}


def _error(exc: ValueError):
    code = str(exc)
    return jsonify({"ok": False, "error": code}), _ERROR_STATUS.get(code, 400)


def _validation_error(exc: ValidationError):
    return (
        jsonify({"ok": False, "error": "validation_error", "details": exc.errors()}),
        400,
    )


def _parse_query(schema_cls):
    data = {k: v for k, v in request.args.items()}
    try:
        return schema_cls.model_validate(data), None
    except ValidationError as exc:
        return None, exc


@project_api_bp.get("")
@jwt_required()
def list_projects():
    user_id = int(get_jwt_identity())
    params, err = _parse_query(ProjectListFilter)
    if err:
        return _validation_error(err)
    items, total = services.list_projects(user_id, page=params.page, per_page=params.per_page)
    pages = math.ceil(total / params.per_page) if params.per_page else 1
    return jsonify(
        {
            "ok": True,
            "items": [map_project(p) for p in items],
            "page": params.page,
            "pages": pages,
            "total": total,
        }
    )


@project_api_bp.post("")
@jwt_required()
def create_project():
    payload = request.get_json(silent=True) or {}
    try:
        data = ProjectCreate.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    user_id = int(get_jwt_identity())
    statuses = [(s.name, s.color) for s in data.statuses] if data.statuses else None
    try:
        project = services.create_project(
            user_id, name=data.name, description=data.description, statuses=statuses
        )
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "project": map_project(project)}), 201


@project_api_bp.get("/<int:project_id>")
@jwt_required()
def get_project(project_id: int):
    user_id = int(get_jwt_identity())
    project = services.get_project(user_id, project_id)
    if not project:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "project": map_project(project)})


@project_api_bp.patch("/<int:project_id>")
@jwt_required()
def update_project(project_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = ProjectUpdate.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    user_id = int(get_jwt_identity())
    try:
        project = services.update_project(
            user_id,
            project_id,
            **{k: v for k, v in data.model_dump().items() if v is not None},
        )
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "project": map_project(project)})


@project_api_bp.delete("/<int:project_id>")
@jwt_required()
def delete_project(project_id: int):
    user_id = int(get_jwt_identity())
    try:
        deleted = services.delete_project(user_id, project_id)
    except ValueError as exc:
        return _error(exc)
    if not deleted:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})


@project_api_bp.put("/<int:project_id>/statuses")
@jwt_required()
def replace_statuses(project_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = StatusesReplace.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    user_id = int(get_jwt_identity())
    try:
        project = services.set_statuses(
            user_id, project_id, [(s.name, s.color) for s in data.statuses]
        )
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "project": map_project(project)})


@project_api_bp.post("/<int:project_id>/members")
@jwt_required()
def add_member(project_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = MemberAdd.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    user_id = int(get_jwt_identity())
    try:
        member = services.add_member(user_id, project_id, data.user_id, role=data.role)
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "member": map_member(member)}), 201


@project_api_bp.delete("/<int:project_id>/members/<int:member_user_id>")
@jwt_required()
def remove_member(project_id: int, member_user_id: int):
    user_id = int(get_jwt_identity())
    try:
        removed = services.remove_member(user_id, project_id, member_user_id)
    except ValueError as exc:
        return _error(exc)
    if not removed:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})


@project_api_bp.get("/<int:project_id>/tasks")
@jwt_required()
def list_tasks(project_id: int):
    user_id = int(get_jwt_identity())
    params, err = _parse_query(TaskListFilter)
    if err:
        return _validation_error(err)
    try:
        items, total = services.list_tasks(
            user_id,
            project_id,
            status=params.status,
            assignee_id=params.assignee_id,
            page=params.page,
            per_page=params.per_page,
        )
    except ValueError as exc:
        return _error(exc)
    pages = math.ceil(total / params.per_page) if params.per_page else 1
    return jsonify(
        {
            "ok": True,
            "items": [map_task(t) for t in items],
            "page": params.page,
            "pages": pages,
            "total": total,
        }
    )


@project_api_bp.post("/<int:project_id>/tasks")
@jwt_required()
def create_task(project_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = TaskCreate.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    user_id = int(get_jwt_identity())
    try:
        task = services.create_task(user_id, project_id, **data.model_dump())
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "task": map_task(task)}), 201


@project_api_bp.get("/<int:project_id>/events")
@jwt_required()
def list_events(project_id: int):
    user_id = int(get_jwt_identity())
    params, err = _parse_query(EventListFilter)
    if err:
        return _validation_error(err)
    try:
        services.require_member(user_id, project_id)
    except ValueError as exc:
        return _error(exc)
    items, total = list_project_events(
        project_id, event_type=params.event_type, page=params.page, per_page=params.per_page
    )
    pages = math.ceil(total / params.per_page) if params.per_page else 1
    return jsonify(
        {
            "ok": True,
            "items": [map_event(e) for e in items],
            "page": params.page,
            "pages": pages,
            "total": total,
        }
    )
