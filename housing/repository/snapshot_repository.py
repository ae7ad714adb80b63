"""Repository layer responsible for tenant snapshot persistence."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Optional

from housing.utils.config import Settings, get_settings
from housing.utils.logger import get_logger


logger = get_logger(__name__)


class SnapshotRepository:
    """Encapsulates SQLite access so the tenant store stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        return connection

    def initialize_database(self) -> None:
        """Create the snapshot table before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS TenantSnapshots (
                        namespace TEXT PRIMARY KEY,
                        payload TEXT NOT NULL,
                        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )
                conn.commit()
            logger.info("Snapshot database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def save_snapshot(self, namespace: str, payload: dict[str, Any]) -> None:
        """Insert or replace the committed dataset of one tenant."""
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO TenantSnapshots (namespace, payload, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(namespace) DO UPDATE SET
                        payload = excluded.payload,
                        updated_at = CURRENT_TIMESTAMP;
                    """,
                    (namespace, json.dumps(payload, ensure_ascii=False)),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise RuntimeError(f"Snapshot save failed for {namespace}: {exc}") from exc

    def load_snapshot(self, namespace: str) -> Optional[dict[str, Any]]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT payload FROM TenantSnapshots WHERE namespace = ?;",
                (namespace,),
            )
            row = cursor.fetchone()
            if row is None:
                return None
            return json.loads(str(row["payload"]))

    def list_namespaces(self) -> list[str]:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT namespace FROM TenantSnapshots ORDER BY namespace ASC;")
            return [str(row["namespace"]) for row in cursor.fetchall()]

    def delete_snapshot(self, namespace: str) -> bool:
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "DELETE FROM TenantSnapshots WHERE namespace = ?;",
                    (namespace,),
                )
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as exc:
            raise RuntimeError(f"Snapshot delete failed for {namespace}: {exc}") from exc

    def count_snapshots(self) -> int:
        """Return persisted snapshot count for diagnostics and tests."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM TenantSnapshots;")
            return int(cursor.fetchone()["count"])
