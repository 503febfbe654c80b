"""
Events service routes: create, list, and update roster events.
"""

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, Response

from backend.common.http_utils import (
    error_response,
    get_request_data,
    install_request_logging,
    success_response,
)
from backend.database.db_connection import get_db
from backend.events_service.models import EventValidationError, build_columns
from backend.events_service.store import EventStore

events_bp = Blueprint("events", __name__)
install_request_logging(events_bp, "Events")


def get_event_store() -> EventStore:
    return EventStore(get_db())


@events_bp.route("/addEvent", methods=["POST"])
def add_event() -> Tuple[Response, int]:
    """
    Create an event.

    Required: eventDate (ISO-8601), eventName, leader.
    Optional: createdBy, modifiedBy, backups, keyboardist, acousticGuitar,
    electricGuitar, drums, keys, bass, other ([{name, instrument}, ...]).

    Returns:
        200: `{"message": "success", "data": <event>}`.
        400: Validation error.
        500: Database error.
    """
    data: Dict[str, Any] = get_request_data()
    try:
        columns = build_columns(data)
    except EventValidationError as e:
        return error_response(str(e), 400)

    try:
        event = get_event_store().create(columns)
    except Exception:
        logging.exception("[Events] Database error creating event")
        return error_response("Failed to create event", 500)

    return success_response(event)


@events_bp.route("/events", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """
    Return every event in creation order.
    """
    try:
        events = get_event_store().list()
    except Exception:
        logging.exception("[Events] Database error listing events")
        return error_response("Failed to retrieve events", 500)

    return success_response(events)


@events_bp.route("/updateEvent", methods=["PUT"])
def update_event() -> Tuple[Response, int]:
    """
    Update the event named by `_id` with the other supplied fields.

    Returns:
        200: `{"message": "success"}`.
        400: Missing/invalid `_id` or invalid field values.
        404: No event with that id.
        500: Database error.
    """
    data: Dict[str, Any] = get_request_data()

    try:
        event_id = int(data.get("_id"))
    except (TypeError, ValueError):
        return error_response("A valid _id is required", 400)

    try:
        columns = build_columns(data, partial=True)
    except EventValidationError as e:
        return error_response(str(e), 400)

    try:
        updated = get_event_store().update(event_id, columns)
    except Exception:
        logging.exception("[Events] Database error updating event")
        return error_response("Failed to update event", 500)

    if updated is None:
        return error_response("Event not found", 404)

    logging.info(f"[Events] Updated event {event_id}")
    return success_response()
