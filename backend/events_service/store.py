"""
Persistence for roster events.
"""

from typing import Any, Dict, List, Optional

from psycopg2.extras import Json

from backend.database.db_connection import Database
from backend.events_service.models import EVENT_COLUMNS, row_to_dict


def _adapt(columns: Dict[str, Any]) -> Dict[str, Any]:
    # The `other` column is JSONB
    return {k: Json(v) if k == "other" else v for k, v in columns.items()}


class EventStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    def create(self, columns: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert an event from validated column values and return it.
        """
        values = _adapt(columns)
        names = list(values)
        sql = f"""
            INSERT INTO events ({", ".join(names)})
            VALUES ({", ".join(["%s"] * len(names))})
            RETURNING {EVENT_COLUMNS};
        """
        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, [values[n] for n in names])
                return row_to_dict(cur.fetchone())

    def list(self) -> List[Dict[str, Any]]:
        sql = f"SELECT {EVENT_COLUMNS} FROM events ORDER BY event_id;"
        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql)
                return [row_to_dict(r) for r in cur.fetchall()]

    def update(self, event_id: int, columns: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update.

        Returns:
            dict | None: The updated event, or None if no event has that id.
        """
        values = _adapt(columns)
        set_clause = ", ".join(f"{k} = %s" for k in values)
        if set_clause:
            set_clause += ", "
        set_clause += "updated_at = CURRENT_TIMESTAMP"

        sql = f"UPDATE events SET {set_clause} WHERE event_id = %s RETURNING {EVENT_COLUMNS};"

        with self.db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(sql, list(values.values()) + [event_id])
                row = cur.fetchone()
        return row_to_dict(row) if row else None
