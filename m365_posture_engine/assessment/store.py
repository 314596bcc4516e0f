"""
SQLite-backed assessment store.
Keyed by assessment id and queryable by tenant + date for "most recent"
lookups. Enforces the assessment lifecycle on every write.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import timezone
from pathlib import Path
from typing import Optional

from .models import (
    COMPLETED,
    Assessment,
    ImmutableStateError,
    check_transition,
)

logger = logging.getLogger("m365_posture_engine.store")


def _metrics_snapshot(assessment: Assessment) -> Optional[dict]:
    if assessment.metrics is None:
        return None
    return json.loads(json.dumps(assessment.metrics.to_dict(), default=str))


class AssessmentStore:
    """
    Persistent assessment store backed by SQLite.
    Features:
      - Connection-per-call, safe to share across threads
      - Lifecycle enforcement (draft → completed → archived)
      - Frozen metrics on completed / archived records
      - Most-recent lookup per tenant
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _init_db(self):
        """Initialize the store schema."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS assessments (
                    id TEXT PRIMARY KEY,
                    tenant_id TEXT NOT NULL,
                    assessment_date TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'draft',
                    overall_score INTEGER,
                    data TEXT NOT NULL,
                    last_modified TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_assessments_tenant_date
                ON assessments(tenant_id, assessment_date)
            """)
            conn.commit()

    # --- Reads ---

    def get(self, assessment_id: str) -> Optional[Assessment]:
        """Return the stored assessment, or None if the id is unknown."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM assessments WHERE id = ?",
                (assessment_id,),
            ).fetchone()
        if row is None:
            return None
        return Assessment.from_dict(json.loads(row[0]))

    def latest_for_tenant(
        self,
        tenant_id: str,
        status: Optional[str] = COMPLETED,
        exclude_id: Optional[str] = None,
    ) -> Optional[Assessment]:
        """Most recent assessment for a tenant, optionally filtered by status."""
        query = "SELECT data FROM assessments WHERE tenant_id = ?"
        params: list = [tenant_id]
        if status is not None:
            query += " AND status = ?"
            params.append(status)
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        query += " ORDER BY assessment_date DESC, last_modified DESC LIMIT 1"

        with self._connect() as conn:
            row = conn.execute(query, params).fetchone()
        if row is None:
            return None
        return Assessment.from_dict(json.loads(row[0]))

    def list_for_tenant(self, tenant_id: str, limit: int = 10) -> list[Assessment]:
        """Recent assessments for a tenant, newest first."""
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT data FROM assessments WHERE tenant_id = ?
                ORDER BY assessment_date DESC, last_modified DESC LIMIT ?
                """,
                (tenant_id, limit),
            ).fetchall()
        return [Assessment.from_dict(json.loads(r[0])) for r in rows]

    # --- Writes ---

    def save(self, assessment: Assessment) -> None:
        """
        Insert or update an assessment.

        Raises:
            ImmutableStateError: the stored record is completed/archived and
                the new metrics differ. The stored record is left untouched.
            InvalidTransitionError: the status change is not permitted.
        """
        existing = self.get(assessment.id)
        if existing is not None:
            check_transition(existing.status, assessment.status)
            if existing.is_frozen and _metrics_snapshot(existing) != _metrics_snapshot(assessment):
                raise ImmutableStateError(
                    f"Assessment {assessment.id} is {existing.status}; stored metrics cannot be replaced"
                )

        data = json.dumps(assessment.to_dict(), default=str)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO assessments
                    (id, tenant_id, assessment_date, status, overall_score, data, last_modified)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    assessment.id,
                    assessment.tenant_id,
                    assessment.assessment_date.astimezone(timezone.utc).isoformat(),
                    assessment.status,
                    assessment.overall_score,
                    data,
                    assessment.last_modified.astimezone(timezone.utc).isoformat(),
                ),
            )
            conn.commit()
        logger.debug(f"Saved assessment {assessment.id} ({assessment.status}) for tenant {assessment.tenant_id}")

    def archive_superseded(self, tenant_id: str, newer: Assessment) -> list[str]:
        """Archive every other completed assessment of the tenant dated no later than ``newer``."""
        archived = []
        cutoff = newer.assessment_date.astimezone(timezone.utc).isoformat()
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT data FROM assessments
                WHERE tenant_id = ? AND status = ? AND id != ? AND assessment_date <= ?
                """,
                (tenant_id, COMPLETED, newer.id, cutoff),
            ).fetchall()

        for (data,) in rows:
            old = Assessment.from_dict(json.loads(data))
            old.archive()
            self.save(old)
            archived.append(old.id)

        if archived:
            logger.info(f"Archived {len(archived)} superseded assessment(s) for tenant {tenant_id}")
        return archived
