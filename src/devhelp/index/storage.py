"""SQLite store of packages loaded in development mode."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from devhelp.errors import RegistryUnavailable
from devhelp.ingestion.rd_loader import build_topic_records, read_package_name

LOGGER = logging.getLogger(__name__)


class SQLiteRegistryStore:
    """Persistence layer for development packages and their topic aliases."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        try:
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys=ON;")
            self._ensure_schema()
        except sqlite3.Error as exc:
            raise RegistryUnavailable(f"Cannot open registry {self.db_path}: {exc}") from exc

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    @contextmanager
    def _query(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
        except sqlite3.Error as exc:
            raise RegistryUnavailable(f"Registry {self.db_path} cannot be queried: {exc}") from exc

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS packages (
                    id INTEGER PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE,
                    path TEXT NOT NULL,
                    load_order INTEGER NOT NULL,
                    loaded_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS topics (
                    id INTEGER PRIMARY KEY,
                    package_id INTEGER NOT NULL,
                    topic TEXT NOT NULL,
                    rd_path TEXT NOT NULL,
                    FOREIGN KEY(package_id) REFERENCES packages(id) ON DELETE CASCADE
                )
                """
            )
            conn.execute(
                """CREATE INDEX IF NOT EXISTS idx_topics_package_topic
                    ON topics(package_id, topic)
                """
            )

    def load_package(self, package_dir: Path) -> str:
        """Register ``package_dir`` as loaded in development mode and index its topics.

        Returns the package name. A package that is already loaded keeps its
        position in the load order.
        """
        package_dir = Path(package_dir).resolve()
        name = read_package_name(package_dir)
        records = list(build_topic_records(package_dir / "man"))

        with self._query(), self.transaction() as conn:
            existing = conn.execute("SELECT id FROM packages WHERE name = ?", (name,)).fetchone()
            if existing:
                package_id = existing["id"]
                conn.execute("UPDATE packages SET path = ? WHERE id = ?", (str(package_dir), package_id))
                conn.execute("DELETE FROM topics WHERE package_id = ?", (package_id,))
            else:
                next_order = conn.execute(
                    "SELECT COALESCE(MAX(load_order), 0) + 1 FROM packages"
                ).fetchone()[0]
                package_id = conn.execute(
                    "INSERT INTO packages(name, path, load_order) VALUES (?, ?, ?)",
                    (name, str(package_dir), next_order),
                ).lastrowid

            conn.executemany(
                "INSERT INTO topics(package_id, topic, rd_path) VALUES (?, ?, ?)",
                [(package_id, record.topic, str(record.path)) for record in records],
            )

        LOGGER.info("Loaded %s from %s (%d topics)", name, package_dir, len(records))
        return name

    def unload_package(self, name: str) -> bool:
        with self._query(), self.transaction() as conn:
            deleted = conn.execute("DELETE FROM packages WHERE name = ?", (name,)).rowcount
        if deleted:
            LOGGER.info("Unloaded %s", name)
        return deleted > 0

    def list_dev_packages(self) -> List[str]:
        with self._query() as conn:
            rows = conn.execute("SELECT name FROM packages ORDER BY load_order").fetchall()
        return [row["name"] for row in rows]

    def package_path(self, name: str) -> Path | None:
        with self._query() as conn:
            row = conn.execute("SELECT path FROM packages WHERE name = ?", (name,)).fetchone()
        return Path(row["path"]) if row else None

    def list_topics(self, name: str) -> List[str]:
        with self._query() as conn:
            rows = conn.execute(
                """
                SELECT t.topic AS topic
                FROM topics t
                JOIN packages p ON p.id = t.package_id
                WHERE p.name = ?
                ORDER BY t.topic
                """,
                (name,),
            ).fetchall()
        return [row["topic"] for row in rows]

    def lookup_entry(self, package: str, topic: str) -> Path | None:
        # = on TEXT is case-sensitive under SQLite's default BINARY collation
        with self._query() as conn:
            row = conn.execute(
                """
                SELECT t.rd_path AS rd_path
                FROM topics t
                JOIN packages p ON p.id = t.package_id
                WHERE p.name = ? AND t.topic = ?
                ORDER BY t.id
                LIMIT 1
                """,
                (package, topic),
            ).fetchone()
        return Path(row["rd_path"]) if row else None
