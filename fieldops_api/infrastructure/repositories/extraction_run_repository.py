"""Extraction run repository - sessions, runs and run items in Postgres."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ...domain.entities.extraction_run import (
    ExtractionRun,
    ExtractionRunItem,
    ExtractionRunItemStatus,
    ExtractionRunStatus,
    ExtractionSession,
)
from ..adapters.postgres import PostgresClient

logger = logging.getLogger(__name__)

SESSION_COLUMNS = "id, label, encrypted_state, expires_at, is_active, created_at, updated_at"
RUN_COLUMNS = """
    id, session_id, status, total_count, processed_count, success_count,
    failure_count, error_summary, started_at, finished_at, created_at
"""
RUN_UPDATABLE_COLUMNS = frozenset({
    "status", "processed_count", "success_count", "failure_count",
    "error_summary", "started_at", "finished_at",
})


class PostgresExtractionRunStore:
    """Extraction run store over the extraction_* tables."""

    def __init__(self, client: PostgresClient):
        self._client = client

    def create_session(self, label: str, encrypted_state: str, expires_at: datetime) -> ExtractionSession:
        sql = f"""
            INSERT INTO extraction_session (label, encrypted_state, expires_at, is_active, created_at, updated_at)
            VALUES (%s, %s, %s, TRUE, NOW(), NOW())
            RETURNING {SESSION_COLUMNS}
        """
        row = self._client.execute_insert(sql, (label, encrypted_state, expires_at))
        return _row_to_session(row)

    def get_session(self, session_id: int) -> Optional[ExtractionSession]:
        sql = f"SELECT {SESSION_COLUMNS} FROM extraction_session WHERE id = %s"
        rows = self._client.execute_query(sql, (session_id,))
        return _row_to_session(rows[0]) if rows else None

    def list_sessions(self) -> List[ExtractionSession]:
        sql = f"SELECT {SESSION_COLUMNS} FROM extraction_session ORDER BY created_at DESC"
        return [_row_to_session(row) for row in self._client.execute_query(sql)]

    def create_run(self, session_id: int, property_ids: Sequence[int]) -> ExtractionRun:
        """Create the run and its QUEUED items in one transaction."""
        run_sql = f"""
            INSERT INTO extraction_run (session_id, status, total_count, created_at, updated_at)
            VALUES (%s, %s, %s, NOW(), NOW())
            RETURNING {RUN_COLUMNS}
        """
        item_sql = """
            INSERT INTO extraction_run_item (run_id, property_id, status, created_at, updated_at)
            VALUES (%s, %s, %s, NOW(), NOW())
            RETURNING id, run_id, property_id, status, error
        """
        with self._client.transaction() as tx:
            run_row = tx.fetch_one(run_sql, (session_id, ExtractionRunStatus.PENDING.value, len(property_ids)))
            item_rows = [
                tx.fetch_one(item_sql, (run_row["id"], property_id, ExtractionRunItemStatus.QUEUED.value))
                for property_id in property_ids
            ]
        return _row_to_run(run_row, [_row_to_item(row) for row in item_rows])

    def get_run(self, run_id: int) -> Optional[ExtractionRun]:
        run_sql = f"SELECT {RUN_COLUMNS} FROM extraction_run WHERE id = %s"
        items_sql = """
            SELECT id, run_id, property_id, status, error
            FROM extraction_run_item
            WHERE run_id = %s
            ORDER BY id ASC
        """
        with self._client.transaction() as tx:
            run_row = tx.fetch_one(run_sql, (run_id,))
            if not run_row:
                return None
            item_rows = tx.fetch_all(items_sql, (run_id,))
        return _row_to_run(run_row, [_row_to_item(row) for row in item_rows])

    def update_run(self, run_id: int, fields: Dict[str, Any]) -> None:
        unknown = set(fields) - RUN_UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported extraction run fields: {sorted(unknown)}")
        assignments = [f"{column} = %s" for column in fields]
        params: List[Any] = [
            value.value if isinstance(value, ExtractionRunStatus) else value
            for value in fields.values()
        ]
        assignments.append("updated_at = NOW()")
        sql = f"UPDATE extraction_run SET {', '.join(assignments)} WHERE id = %s"
        params.append(run_id)
        self._client.execute_update(sql, tuple(params))

    def claim_run(self, run_id: int) -> bool:
        """Move a PENDING run to RUNNING; False when another caller got there first."""
        sql = """
            UPDATE extraction_run
            SET status = %s, started_at = COALESCE(started_at, NOW()), updated_at = NOW()
            WHERE id = %s AND status = %s
        """
        updated = self._client.execute_update(sql, (
            ExtractionRunStatus.RUNNING.value,
            run_id,
            ExtractionRunStatus.PENDING.value,
        ))
        return updated == 1

    def update_run_item(
        self,
        item_id: int,
        status: ExtractionRunItemStatus,
        error: Optional[str] = None,
    ) -> None:
        sql = """
            UPDATE extraction_run_item
            SET status = %s, error = %s, updated_at = NOW()
            WHERE id = %s
        """
        self._client.execute_update(sql, (status.value, error, item_id))

    def fail_queued_items(self, run_id: int, item_ids: Sequence[int], error: str) -> int:
        if not item_ids:
            return 0
        sql = """
            UPDATE extraction_run_item
            SET status = %s, error = %s, updated_at = NOW()
            WHERE run_id = %s AND id = ANY(%s) AND status = %s
        """
        return self._client.execute_update(sql, (
            ExtractionRunItemStatus.FAILED.value,
            error,
            run_id,
            list(item_ids),
            ExtractionRunItemStatus.QUEUED.value,
        ))


def _row_to_session(row: dict) -> ExtractionSession:
    return ExtractionSession(
        id=row["id"],
        label=row["label"],
        encrypted_state=row["encrypted_state"],
        expires_at=row["expires_at"],
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_item(row: dict) -> ExtractionRunItem:
    return ExtractionRunItem(
        id=row["id"],
        run_id=row["run_id"],
        property_id=row["property_id"],
        status=ExtractionRunItemStatus(row["status"]),
        error=row.get("error"),
    )


def _row_to_run(row: dict, items: List[ExtractionRunItem]) -> ExtractionRun:
    """Convert database row to ExtractionRun entity."""
    return ExtractionRun(
        id=row["id"],
        session_id=row["session_id"],
        status=ExtractionRunStatus(row["status"]),
        total_count=row["total_count"],
        processed_count=row["processed_count"],
        success_count=row["success_count"],
        failure_count=row["failure_count"],
        error_summary=row.get("error_summary"),
        started_at=row.get("started_at"),
        finished_at=row.get("finished_at"),
        items=items,
        created_at=row["created_at"],
    )
