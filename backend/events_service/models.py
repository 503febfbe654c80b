"""
Event field mapping and payload validation.

The API speaks camelCase (`eventDate`, `acousticGuitar`, ...) while the
`events` table uses snake_case columns. Everything that crosses that
boundary goes through this module.
"""

from typing import Any, Dict, List, Mapping

from backend.common.http_utils import parse_dt

# API field -> column
FIELD_COLUMNS: Dict[str, str] = {
    "createdBy": "created_by",
    "modifiedBy": "modified_by",
    "eventDate": "event_date",
    "eventName": "event_name",
    "leader": "leader",
    "backups": "backups",
    "keyboardist": "keyboardist",
    "acousticGuitar": "acoustic_guitar",
    "electricGuitar": "electric_guitar",
    "drums": "drums",
    "keys": "keys",
    "bass": "bass",
    "other": "other",
}

REQUIRED_FIELDS = ("eventDate", "eventName", "leader")

EVENT_COLUMNS = (
    "event_id, " + ", ".join(FIELD_COLUMNS.values()) + ", created_at, updated_at"
)


class EventValidationError(ValueError):
    """Raised when an event payload cannot be stored."""


def _clean_other(value: Any) -> List[Dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise EventValidationError("other must be a list of {name, instrument} objects")

    cleaned = []
    for entry in value:
        if not isinstance(entry, dict):
            raise EventValidationError("other must be a list of {name, instrument} objects")
        cleaned.append({"name": entry.get("name"), "instrument": entry.get("instrument")})
    return cleaned


def _clean_value(field: str, value: Any) -> Any:
    if field == "eventDate":
        parsed = parse_dt(value)
        if parsed is None:
            raise EventValidationError("Invalid eventDate format. Use ISO-8601.")
        return parsed
    if field == "other":
        return _clean_other(value)
    if field in REQUIRED_FIELDS and (value is None or str(value).strip() == ""):
        raise EventValidationError(f"{field} cannot be empty")
    return None if value is None else str(value)


def build_columns(data: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Validate an API payload and map it to column values.

    Unknown keys are dropped. With `partial=False` every required field
    must be present.

    Args:
        data (Mapping): Request body.
        partial (bool): True for updates, where only supplied fields change.

    Returns:
        dict: column name -> value ready for psycopg2.

    Raises:
        EventValidationError: On missing or malformed fields.
    """
    if not partial:
        missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
        if missing:
            raise EventValidationError(f"{', '.join(missing)} required")

    return {
        column: _clean_value(field, data[field])
        for field, column in FIELD_COLUMNS.items()
        if field in data
    }


def row_to_dict(row: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Serialize an `events` row into the API shape.
    """
    event: Dict[str, Any] = {"_id": row["event_id"]}
    for field, column in FIELD_COLUMNS.items():
        event[field] = row[column]

    if event.get("eventDate"):
        event["eventDate"] = event["eventDate"].isoformat()
    event["other"] = event.get("other") or []
    event["createdAt"] = row["created_at"].isoformat() if row["created_at"] else None
    event["updatedAt"] = row["updated_at"].isoformat() if row["updated_at"] else None
    return event
