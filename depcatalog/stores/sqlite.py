"""SQLite-backed catalog stores.

Read-only views over the catalog schema written by the poller and the admin
API.  Integer booleans are converted to ``bool`` (or None where the column is
tri-state) as rows are materialized, so nothing above this module sees
SQLite encodings.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from dataclasses import replace

from depcatalog.models.catalog import (
    CanonicalOverride,
    DependencyWithTarget,
    ServiceWithTeam,
    Team,
)
from depcatalog.observability.logging import get_logger

_logger = get_logger("stores.sqlite")

SCHEMA = """
CREATE TABLE IF NOT EXISTS teams (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT
);

CREATE TABLE IF NOT EXISTS services (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    team_id TEXT NOT NULL,
    health_endpoint TEXT NOT NULL DEFAULT '',
    is_active INTEGER NOT NULL DEFAULT 1,
    is_external INTEGER NOT NULL DEFAULT 0,
    description TEXT,
    last_poll_success INTEGER,
    last_poll_error TEXT
);

CREATE TABLE IF NOT EXISTS dependencies (
    id TEXT PRIMARY KEY,
    service_id TEXT NOT NULL,
    name TEXT NOT NULL,
    canonical_name TEXT,
    impact TEXT,
    type TEXT NOT NULL DEFAULT 'other',
    healthy INTEGER,
    latency_ms INTEGER,
    contact TEXT,
    contact_override TEXT,
    impact_override TEXT,
    check_details TEXT,
    error TEXT,
    error_message TEXT,
    skipped INTEGER NOT NULL DEFAULT 0,
    UNIQUE (service_id, name)
);

CREATE TABLE IF NOT EXISTS dependency_associations (
    id TEXT PRIMARY KEY,
    dependency_id TEXT NOT NULL,
    linked_service_id TEXT NOT NULL,
    association_type TEXT NOT NULL DEFAULT 'api_call',
    is_auto_suggested INTEGER NOT NULL DEFAULT 0,
    confidence_score REAL,
    is_dismissed INTEGER NOT NULL DEFAULT 0,
    UNIQUE (dependency_id, linked_service_id)
);

CREATE TABLE IF NOT EXISTS dependency_latency_history (
    id TEXT PRIMARY KEY,
    dependency_id TEXT NOT NULL,
    latency_ms INTEGER NOT NULL,
    recorded_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS dependency_canonical_overrides (
    id TEXT PRIMARY KEY,
    canonical_name TEXT NOT NULL,
    team_id TEXT,
    contact_override TEXT,
    impact_override TEXT
);
"""

_SERVICE_WITH_TEAM = """
    SELECT s.*, t.name AS team_name
    FROM services s
    JOIN teams t ON s.team_id = t.id
"""

# One row per (dependency, non-dismissed association); dependencies linked
# to several services therefore appear more than once.
_DEPENDENCY_WITH_TARGET = """
    SELECT
        d.*,
        s.name AS service_name,
        da.linked_service_id AS target_service_id,
        da.association_type,
        da.is_auto_suggested,
        da.confidence_score,
        (
            SELECT ROUND(AVG(h.latency_ms))
            FROM dependency_latency_history h
            WHERE h.dependency_id = d.id
              AND datetime(h.recorded_at) >= datetime('now', ?)
        ) AS avg_latency_24h
    FROM dependencies d
    JOIN services s ON d.service_id = s.id
    LEFT JOIN dependency_associations da ON d.id = da.dependency_id AND da.is_dismissed = 0
"""

_DEPENDENCY_ORDER = " ORDER BY d.service_id, d.name, da.linked_service_id"


def connect(path: str) -> sqlite3.Connection:
    """Open the catalog database with name-addressable rows."""
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA)
    conn.commit()


def _tri(value: int | None) -> bool | None:
    if value is None:
        return None
    return bool(value)


def _service_from_row(row: sqlite3.Row) -> ServiceWithTeam:
    return ServiceWithTeam(
        id=row["id"],
        name=row["name"],
        team_id=row["team_id"],
        team_name=row["team_name"],
        health_endpoint=row["health_endpoint"] or "",
        is_active=bool(row["is_active"]),
        is_external=bool(row["is_external"]),
        last_poll_success=_tri(row["last_poll_success"]),
        last_poll_error=row["last_poll_error"],
        description=row["description"],
    )


def _dependency_from_row(row: sqlite3.Row, joined: bool = True) -> DependencyWithTarget:
    dep = DependencyWithTarget(
        id=row["id"],
        service_id=row["service_id"],
        name=row["name"],
        type=row["type"],
        canonical_name=row["canonical_name"],
        healthy=_tri(row["healthy"]),
        latency_ms=row["latency_ms"],
        check_details=row["check_details"],
        error=row["error"],
        error_message=row["error_message"],
        impact=row["impact"],
        contact=row["contact"],
        contact_override=row["contact_override"],
        impact_override=row["impact_override"],
        skipped=bool(row["skipped"]),
    )
    if not joined:
        return dep

    avg = row["avg_latency_24h"]
    return replace(
        dep,
        service_name=row["service_name"],
        target_service_id=row["target_service_id"],
        association_type=row["association_type"],
        is_auto_suggested=_tri(row["is_auto_suggested"]),
        confidence_score=row["confidence_score"],
        avg_latency_24h=float(avg) if avg is not None else None,
    )


class SqliteServiceStore:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def find_active_with_team(self) -> list[ServiceWithTeam]:
        return self.find_all_with_team(is_active=True)

    def find_all_with_team(
        self,
        team_id: str | None = None,
        is_active: bool | None = None,
    ) -> list[ServiceWithTeam]:
        clauses: list[str] = []
        params: list[object] = []
        if team_id is not None:
            clauses.append("s.team_id = ?")
            params.append(team_id)
        if is_active is not None:
            clauses.append("s.is_active = ?")
            params.append(1 if is_active else 0)

        query = _SERVICE_WITH_TEAM
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY s.name ASC"
        rows = self._conn.execute(query, params).fetchall()
        return [_service_from_row(r) for r in rows]

    def find_by_id_with_team(self, service_id: str) -> ServiceWithTeam | None:
        row = self._conn.execute(_SERVICE_WITH_TEAM + " WHERE s.id = ?", (service_id,)).fetchone()
        return _service_from_row(row) if row is not None else None


class SqliteDependencyStore:
    def __init__(self, conn: sqlite3.Connection, latency_window_hours: int = 24) -> None:
        self._conn = conn
        self._window = f"-{latency_window_hours} hours"

    def find_all_with_associations_and_latency(
        self,
        active_services_only: bool = False,
    ) -> list[DependencyWithTarget]:
        query = _DEPENDENCY_WITH_TARGET
        if active_services_only:
            query += " WHERE s.is_active = 1"
        query += _DEPENDENCY_ORDER
        rows = self._conn.execute(query, (self._window,)).fetchall()
        return [_dependency_from_row(r) for r in rows]

    def find_by_service_ids_with_associations_and_latency(
        self,
        service_ids: Sequence[str],
    ) -> list[DependencyWithTarget]:
        if not service_ids:
            return []
        placeholders = ",".join("?" for _ in service_ids)
        query = _DEPENDENCY_WITH_TARGET + f" WHERE d.service_id IN ({placeholders})" + _DEPENDENCY_ORDER
        rows = self._conn.execute(query, (self._window, *service_ids)).fetchall()
        return [_dependency_from_row(r) for r in rows]

    def find_by_service_id(self, service_id: str) -> list[DependencyWithTarget]:
        rows = self._conn.execute(
            "SELECT * FROM dependencies WHERE service_id = ? ORDER BY name ASC",
            (service_id,),
        ).fetchall()
        return [_dependency_from_row(r, joined=False) for r in rows]

    def find_by_id(self, dependency_id: str) -> DependencyWithTarget | None:
        row = self._conn.execute("SELECT * FROM dependencies WHERE id = ?", (dependency_id,)).fetchone()
        return _dependency_from_row(row, joined=False) if row is not None else None


class SqliteTeamStore:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def find_by_id(self, team_id: str) -> Team | None:
        row = self._conn.execute(
            "SELECT id, name, description FROM teams WHERE id = ?",
            (team_id,),
        ).fetchone()
        if row is None:
            return None
        return Team(id=row["id"], name=row["name"], description=row["description"])


class SqliteCanonicalOverrideStore:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def find_all(self) -> list[CanonicalOverride]:
        rows = self._conn.execute(
            "SELECT canonical_name, team_id, contact_override, impact_override "
            "FROM dependency_canonical_overrides ORDER BY canonical_name ASC"
        ).fetchall()
        return [
            CanonicalOverride(
                canonical_name=r["canonical_name"],
                team_id=r["team_id"],
                contact_override=r["contact_override"],
                impact_override=r["impact_override"],
            )
            for r in rows
        ]


class SqliteStores:
    """All catalog stores sharing one connection."""

    def __init__(self, conn: sqlite3.Connection, latency_window_hours: int = 24) -> None:
        self.conn = conn
        self.services = SqliteServiceStore(conn)
        self.dependencies = SqliteDependencyStore(conn, latency_window_hours)
        self.teams = SqliteTeamStore(conn)
        self.canonical_overrides = SqliteCanonicalOverrideStore(conn)

    @classmethod
    def open(cls, path: str, latency_window_hours: int = 24, create_schema: bool = False) -> SqliteStores:
        conn = connect(path)
        if create_schema:
            init_schema(conn)
        _logger.info("catalog_db_opened", path=path, latency_window_hours=latency_window_hours)
        return cls(conn, latency_window_hours)

    def close(self) -> None:
        self.conn.close()
