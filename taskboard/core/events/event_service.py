"""Event persistence and dispatch."""

from __future__ import annotations

from typing import List, Optional, Tuple

from taskboard.core.events.event_bus import event_bus
from taskboard.core.events.event_models import EventRecord
from taskboard.extensions import db


def log_event(
    event_type: str,
    payload: dict,
    user_id: Optional[int] = None,
    project_id: Optional[int] = None,
) -> EventRecord:
    """Persist an event and publish to subscribers."""
    record = EventRecord(
        event_type=event_type, payload=payload, user_id=user_id, project_id=project_id
    )
    db.session.add(record)
    db.session.commit()
    event_bus.publish(record)
    return record


def list_project_events(
    project_id: int, *, event_type: str | None = None, page: int = 1, per_page: int = 50
) -> Tuple[List[EventRecord], int]:
    query = EventRecord.query.filter_by(project_id=project_id)
    if event_type:
        query = query.filter(EventRecord.event_type == event_type)
    query = query.order_by(EventRecord.created_at.desc(), EventRecord.id.desc())
    total = query.count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return items, total
