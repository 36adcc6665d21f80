"""Automation rule API controllers."""

from __future__ import annotations

import dataclasses

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required
from pydantic import ValidationError

from taskboard.domains.automations.errors import ConfigurationError
from taskboard.domains.automations.mappers import map_rule
from taskboard.domains.automations.schemas.automation_schemas import (
    RuleCreate,
    RuleListFilter,
    RuleToggle,
    RuleUpdate,
    TelemetryFilter,
    split_kind,
)
from taskboard.domains.automations.services import rule_service
from taskboard.extensions import limiter

automation_api_bp = Blueprint("automation_api", __name__)

_ERROR_STATUS = {"not_found": 404, "forbidden": 403}


def _error(exc: ValueError):
    if isinstance(exc, ConfigurationError):
        return jsonify({"ok": False, "error": exc.kind, "message": exc.message}), 400
    code = str(exc)
    return jsonify({"ok": False, "error": code}), _ERROR_STATUS.get(code, 400)


def _validation_error(exc: ValidationError):
    return (
        jsonify(
            {"ok": False, "error": "validation_error", "details": exc.errors(include_context=False)}
        ),
        400,
    )


@automation_api_bp.get("")
@jwt_required()
def list_rules():
    user_id = int(get_jwt_identity())
    try:
        params = RuleListFilter.model_validate(dict(request.args.items()))
    except ValidationError as exc:
        return _validation_error(exc)
    try:
        rules = rule_service.list_rules(user_id, params.project_id, active=params.active)
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "items": [map_rule(r) for r in rules]})


@automation_api_bp.post("")
@jwt_required()
@limiter.limit("60/minute")
def create_rule():
    payload = request.get_json(silent=True) or {}
    try:
        data = RuleCreate.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    user_id = int(get_jwt_identity())
    trigger_kind, conditions = split_kind(data.trigger)
    action_kind, params = split_kind(data.action)
    try:
        rule = rule_service.create_rule(
            user_id,
            data.project_id,
            name=data.name,
            active=data.active,
            trigger_kind=trigger_kind,
            trigger_conditions=conditions,
            action_kind=action_kind,
            action_params=params,
        )
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "rule": map_rule(rule)}), 201


@automation_api_bp.get("/telemetry")
@jwt_required()
def telemetry():
    user_id = int(get_jwt_identity())
    try:
        params = TelemetryFilter.model_validate(dict(request.args.items()))
    except ValidationError as exc:
        return _validation_error(exc)
    try:
        snapshot = rule_service.project_telemetry(user_id, params.project_id)
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "telemetry": dataclasses.asdict(snapshot)})


@automation_api_bp.get("/<int:rule_id>")
@jwt_required()
def get_rule(rule_id: int):
    user_id = int(get_jwt_identity())
    rule = rule_service.get_rule(user_id, rule_id)
    if not rule:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "rule": map_rule(rule)})


@automation_api_bp.patch("/<int:rule_id>")
@jwt_required()
@limiter.limit("60/minute")
def update_rule(rule_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = RuleUpdate.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    user_id = int(get_jwt_identity())
    fields = {"name": data.name, "active": data.active}
    if data.trigger is not None:
        fields["trigger_kind"], fields["trigger_conditions"] = split_kind(data.trigger)
    if data.action is not None:
        fields["action_kind"], fields["action_params"] = split_kind(data.action)
    try:
        rule = rule_service.update_rule(user_id, rule_id, **fields)
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "rule": map_rule(rule)})


@automation_api_bp.post("/<int:rule_id>/toggle")
@jwt_required()
def toggle_rule(rule_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = RuleToggle.model_validate(payload)
    except ValidationError as exc:
        return _validation_error(exc)
    user_id = int(get_jwt_identity())
    try:
        rule = rule_service.toggle_rule(user_id, rule_id, active=data.active)
    except ValueError as exc:
        return _error(exc)
    return jsonify({"ok": True, "rule": map_rule(rule)})


@automation_api_bp.delete("/<int:rule_id>")
@jwt_required()
def delete_rule(rule_id: int):
    user_id = int(get_jwt_identity())
    try:
        deleted = rule_service.delete_rule(user_id, rule_id)
    except ValueError as exc:
        return _error(exc)
    if not deleted:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})
