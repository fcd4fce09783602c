"""
SQLite Claim Store

File backed ClaimStore. One connection per operation, committed on success
and rolled back on any error. Status updates are compare-and-swap so that
several processes sharing the file cannot overwrite each other's reviews.
"""
import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from app.core.errors import ClaimConflictError, ClaimNotFoundError, PersistenceError
from app.core.models import AuditLogEntry, Claim
from app.core.states import ClaimStatus
from app.storage.base import ClaimStore

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS claims (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    lecturer_name TEXT NOT NULL,
    additional_notes TEXT NOT NULL,
    supporting_document TEXT NOT NULL,
    original_filename TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL,
    audit_log TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL,
    updated_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_claims_status ON claims(status);
"""


class SQLiteClaimStore(ClaimStore):
    """ClaimStore persisted to a SQLite database file."""

    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

        directory = os.path.dirname(os.path.abspath(db_path))
        os.makedirs(directory, exist_ok=True)

        self.init_db()
        logger.info(f"Initialized SQLiteClaimStore at {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def db_conn(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open claim database: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(f"Claim database error: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.db_conn() as conn:
            conn.executescript(SCHEMA)

    # ------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------

    @staticmethod
    def _dump_audit_log(claim: Claim) -> str:
        return json.dumps([entry.model_dump(mode="json") for entry in claim.audit_log])

    @staticmethod
    def _row_to_claim(row: sqlite3.Row) -> Claim:
        return Claim(
            id=row["id"],
            lecturer_name=row["lecturer_name"],
            additional_notes=row["additional_notes"],
            supporting_document=row["supporting_document"],
            original_filename=row["original_filename"],
            status=ClaimStatus(row["status"]),
            audit_log=[AuditLogEntry.model_validate(e) for e in json.loads(row["audit_log"])],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]) if row["updated_at"] else None,
        )

    # ------------------------------------------------------------
    # ClaimStore operations
    # ------------------------------------------------------------

    def create(self, claim: Claim) -> int:
        with self.db_conn() as conn:
            cursor = conn.execute("""
                INSERT INTO claims (
                  lecturer_name, additional_notes, supporting_document,
                  original_filename, status, audit_log, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                claim.lecturer_name,
                claim.additional_notes,
                claim.supporting_document,
                claim.original_filename,
                claim.status.value,
                self._dump_audit_log(claim),
                claim.created_at.isoformat(),
                claim.updated_at.isoformat() if claim.updated_at else None,
            ))
            return cursor.lastrowid

    def get_by_id(self, claim_id: int) -> Claim:
        with self.db_conn() as conn:
            row = conn.execute("SELECT * FROM claims WHERE id=?", (claim_id,)).fetchone()
        if row is None:
            raise ClaimNotFoundError(claim_id)
        return self._row_to_claim(row)

    def list_by_status(self, status: ClaimStatus) -> List[Claim]:
        with self.db_conn() as conn:
            rows = conn.execute(
                "SELECT * FROM claims WHERE status=? ORDER BY id ASC",
                (status.value,)
            ).fetchall()
        return [self._row_to_claim(r) for r in rows]

    def list_all(self) -> List[Claim]:
        with self.db_conn() as conn:
            rows = conn.execute("SELECT * FROM claims ORDER BY id ASC").fetchall()
        return [self._row_to_claim(r) for r in rows]

    def update(self, claim: Claim, expected_status: Optional[ClaimStatus] = None) -> None:
        sql = """
            UPDATE claims SET
              lecturer_name=?, additional_notes=?, supporting_document=?,
              original_filename=?, status=?, audit_log=?, updated_at=?
            WHERE id=?
        """
        params = [
            claim.lecturer_name,
            claim.additional_notes,
            claim.supporting_document,
            claim.original_filename,
            claim.status.value,
            self._dump_audit_log(claim),
            claim.updated_at.isoformat() if claim.updated_at else None,
            claim.id,
        ]
        if expected_status is not None:
            sql += " AND status=?"
            params.append(expected_status.value)

        with self.db_conn() as conn:
            cursor = conn.execute(sql, params)
            if cursor.rowcount == 1:
                return

            row = conn.execute("SELECT status FROM claims WHERE id=?", (claim.id,)).fetchone()
            if row is None:
                raise ClaimNotFoundError(claim.id)
            raise ClaimConflictError(claim.id, expected_status, ClaimStatus(row["status"]))

    def delete(self, claim_id: int) -> None:
        with self.db_conn() as conn:
            cursor = conn.execute("DELETE FROM claims WHERE id=?", (claim_id,))
            if cursor.rowcount == 0:
                raise ClaimNotFoundError(claim_id)
