"""Repository pattern for owner-scoped CRUD operations."""

import uuid
import logging
from typing import Dict, Any, List, Optional
from datetime import datetime

from .database import Database

logger = logging.getLogger(__name__)


class Repository:
    """Generic CRUD over the trainforge tables.

    Every query is scoped to ``owner_id``, so one repository instance only
    ever sees the records of the user it was created for.
    """

    TABLES: Dict[str, frozenset] = {
        "api_keys": frozenset({
            "id", "owner_id", "provider", "api_key", "is_active", "created_at", "updated_at",
        }),
        "training_sessions": frozenset({
            "id", "owner_id", "project_id", "model_id", "status", "progress", "tokens_used",
            "estimated_cost", "started_at", "completed_at", "error_message", "created_at",
        }),
        "training_results": frozenset({
            "id", "seq", "owner_id", "session_id", "input_text", "output_text",
            "quality_score", "tokens_used", "created_at",
        }),
        "uploaded_files": frozenset({
            "id", "owner_id", "project_id", "file_name", "file_type", "file_size",
            "extracted_text", "processing_status", "error_message", "created_at",
        }),
    }

    DEFAULT_ORDER = {"training_results": "seq"}

    def __init__(self, db: Database, owner_id: str):
        self.db = db
        self.owner_id = owner_id

    def _columns(self, table: str) -> frozenset:
        if table not in self.TABLES:
            raise ValueError(f"Unknown table: {table}")
        return self.TABLES[table]

    def _check_fields(self, table: str, fields) -> None:
        unknown = set(fields) - self._columns(table)
        if unknown:
            raise ValueError(f"Unknown columns for {table}: {', '.join(sorted(unknown))}")

    def _where(self, table: str, filters: Optional[Dict[str, Any]]):
        filters = dict(filters or {})
        self._check_fields(table, filters)
        clauses = ["owner_id = ?"]
        params: list = [self.owner_id]
        for column, value in filters.items():
            if column == "owner_id":
                continue
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(value)
        return " AND ".join(clauses), params

    # ── Reads ─────────────────────────────────────────────────────────

    def get(self, table: str, filters: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        where, params = self._where(table, filters)
        return self.db.fetchone(f"SELECT * FROM {table} WHERE {where} LIMIT 1", params)

    def get_by_id(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        return self.get(table, {"id": record_id})

    def list(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        order_by = order_by or self.DEFAULT_ORDER.get(table, "created_at")
        self._check_fields(table, [order_by])
        where, params = self._where(table, filters)
        direction = "DESC" if descending else "ASC"
        return self.db.fetchall(
            f"SELECT * FROM {table} WHERE {where} ORDER BY {order_by} {direction}", params
        )

    def count(self, table: str, filters: Optional[Dict[str, Any]] = None) -> int:
        where, params = self._where(table, filters)
        row = self.db.fetchone(f"SELECT COUNT(*) AS n FROM {table} WHERE {where}", params)
        return int(row["n"]) if row else 0

    # ── Writes ────────────────────────────────────────────────────────

    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a record owned by the current owner. Returns the stored row."""
        values = dict(record)
        values.setdefault("id", str(uuid.uuid4()))
        values.setdefault("created_at", datetime.utcnow())
        values["owner_id"] = self.owner_id
        self._check_fields(table, values)

        columns = list(values.keys())
        placeholders = ",".join("?" for _ in columns)
        self.db.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
            [values[c] for c in columns],
        )
        return self.get_by_id(table, values["id"])

    def update(self, table: str, record_id: str, patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Patch a record in place. Returns the updated row, or None if absent."""
        if self.get_by_id(table, record_id) is None:
            return None
        patch = {k: v for k, v in patch.items() if k not in ("id", "owner_id")}
        if patch:
            self._check_fields(table, patch)
            assignments = ", ".join(f"{column} = ?" for column in patch)
            self.db.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ? AND owner_id = ?",
                [*patch.values(), record_id, self.owner_id],
            )
        return self.get_by_id(table, record_id)

    def upsert(self, table: str, key: Dict[str, Any], record: Dict[str, Any]) -> Dict[str, Any]:
        """Update the record matching ``key`` or insert a new one."""
        existing = self.get(table, key)
        if existing:
            return self.update(table, existing["id"], record)
        return self.insert(table, {**record, **key})

    def delete(self, table: str, record_id: str) -> bool:
        """Delete one record. Returns False when it did not exist."""
        return self.delete_where(table, {"id": record_id}) > 0

    def delete_where(self, table: str, filters: Dict[str, Any]) -> int:
        """Delete all matching records. Returns the number removed."""
        removed = self.count(table, filters)
        if removed:
            where, params = self._where(table, filters)
            self.db.execute(f"DELETE FROM {table} WHERE {where}", params)
            logger.debug(f"Deleted {removed} row(s) from {table}")
        return removed
