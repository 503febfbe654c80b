"""
Request/response helpers shared by every blueprint.
Provides the JSON envelope, body parsing, datetime parsing, and
per-blueprint request logging.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, Response, jsonify, request

GENERIC_ERROR_MESSAGE = "Something went wrong. Please contact the admin"


def success_response(data: Any = None, status: int = 200) -> Tuple[Response, int]:
    """
    Build `{"message": "success", "data": ...}`. `data` is omitted when None.
    """
    body: Dict[str, Any] = {"message": "success"}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def error_response(message: str, status: int) -> Tuple[Response, int]:
    """
    Build the failure envelope `{"error": true, "message": ...}`.
    """
    return jsonify({"error": True, "message": message}), status


def get_request_data() -> Dict[str, Any]:
    """
    Return the request body as a dict, accepting JSON or form encoding.
    """
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    if request.form:
        return request.form.to_dict()
    return {}


def parse_dt(val: Any) -> Optional[datetime]:
    """
    Safely parse an ISO-8601 or datetime-local string to a datetime object.

    Args:
        val (str): The date string to parse.

    Returns:
        datetime: The parsed datetime, or None if invalid.
    """
    if not val or not isinstance(val, str):
        return None
    try:
        # Handles 'YYYY-MM-DDTHH:MM' and '...Z' or '...+00:00'
        if val.endswith("Z"):
            val = val[:-1] + "+00:00"
        return datetime.fromisoformat(val)
    except (ValueError, TypeError):
        return None


def install_request_logging(blueprint: Blueprint, label: str) -> None:
    """
    Log the method/path of every request the blueprint handles, and the
    response status. Bodies are never logged since they carry passwords.
    """

    @blueprint.before_request
    def before_request() -> None:
        logging.info(f"[{label}] Incoming {request.method} {request.path}")

    @blueprint.after_request
    def after_request(response: Response) -> Response:
        logging.info(f"[{label}] Response {response.status}")
        return response
