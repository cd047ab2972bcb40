"""SQLite-backed generation log storage."""

from __future__ import annotations

import json
import sqlite3
from datetime import date, datetime, timezone
from pathlib import Path

from resumeit.logging.models import GenerationLog

DEFAULT_DB_PATH = Path.home() / ".resumeit" / "usage.db"


class UsageStore:
    """SQLite-backed store for generation logs with WAL mode."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS generation_logs (
                    id TEXT PRIMARY KEY,
                    timestamp TEXT NOT NULL,
                    provider TEXT,
                    model TEXT,
                    success INTEGER NOT NULL DEFAULT 1,
                    duration_ms INTEGER NOT NULL DEFAULT 0,
                    attempted_providers TEXT NOT NULL DEFAULT '[]',
                    skipped_providers TEXT NOT NULL DEFAULT '[]',
                    error_kind TEXT,
                    error_message TEXT,
                    match_score REAL
                )
            """)

    def save_log(self, log: GenerationLog) -> None:
        """Persist a generation log entry."""
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO generation_logs
                   (id, timestamp, provider, model, success, duration_ms,
                    attempted_providers, skipped_providers, error_kind,
                    error_message, match_score)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    log.id,
                    log.timestamp.isoformat(),
                    log.provider,
                    log.model,
                    1 if log.success else 0,
                    log.duration_ms,
                    json.dumps(log.attempted_providers),
                    json.dumps(log.skipped_providers),
                    log.error_kind,
                    log.error_message,
                    log.match_score,
                ),
            )

    def get_logs(self, provider: str | None = None, limit: int = 50) -> list[GenerationLog]:
        """Retrieve recent logs, optionally only those answered by ``provider``."""
        with self._connect() as conn:
            if provider is not None:
                rows = conn.execute(
                    "SELECT * FROM generation_logs WHERE provider = ? ORDER BY timestamp DESC LIMIT ?",
                    (provider, limit),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM generation_logs ORDER BY timestamp DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        return [self._row_to_log(row) for row in rows]

    def get_daily_stats(self, day: date | None = None) -> dict:
        """Per-provider success and failure counts for one UTC day."""
        day = day or datetime.now(timezone.utc).date()
        with self._connect() as conn:
            rows = conn.execute(
                """SELECT
                       COALESCE(provider, '-') as provider,
                       SUM(CASE WHEN success = 1 THEN 1 ELSE 0 END) as successes,
                       SUM(CASE WHEN success = 0 THEN 1 ELSE 0 END) as failures,
                       AVG(duration_ms) as avg_duration
                   FROM generation_logs
                   WHERE substr(timestamp, 1, 10) = ?
                   GROUP BY COALESCE(provider, '-')""",
                (day.isoformat(),),
            ).fetchall()
        return {
            "day": day.isoformat(),
            "providers": {
                row[0]: {
                    "successes": row[1] or 0,
                    "failures": row[2] or 0,
                    "avg_duration_ms": round(row[3], 1) if row[3] is not None else None,
                }
                for row in rows
            },
        }

    @staticmethod
    def _row_to_log(row: tuple) -> GenerationLog:
        return GenerationLog(
            id=row[0],
            timestamp=datetime.fromisoformat(row[1]),
            provider=row[2],
            model=row[3],
            success=bool(row[4]),
            duration_ms=row[5],
            attempted_providers=json.loads(row[6]),
            skipped_providers=json.loads(row[7]),
            error_kind=row[8],
            error_message=row[9],
            match_score=row[10],
        )
