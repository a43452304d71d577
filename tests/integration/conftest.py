"""Shared fixtures for depcatalog integration tests.

Provides an in-memory SQLite catalog seeded with a small but realistic
topology, and a GraphService wired over it exactly as the bootstrap does.

Topology (consumer -> provider)::

    team-web:   web ---rest---> orders
                web ---cache--> "Redis Cache"       (unassociated)
    team-core:  orders ---database---> pg           (pg is_external service)
                orders ---cache--> "redis cache "   (unassociated, same group)
                orders ---rest---> "Stripe"         (unassociated, skipped)
                billing ---rest---> orders          (billing inactive)
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator

import pytest

from depcatalog.app import build_graph_service
from depcatalog.graph.service import GraphService
from depcatalog.models.config import DepCatalogConfig
from depcatalog.stores.sqlite import SqliteStores, connect, init_schema

SEED = """
INSERT INTO teams (id, name) VALUES
    ('team-web', 'Web'),
    ('team-core', 'Core'),
    ('team-empty', 'Empty');

INSERT INTO services (id, name, team_id, health_endpoint, is_active, is_external, last_poll_success, last_poll_error) VALUES
    ('web', 'Web Frontend', 'team-web', 'http://web/health', 1, 0, 1, NULL),
    ('orders', 'Order Service', 'team-core', 'http://orders/health', 1, 0, 0, 'timeout'),
    ('pg', 'Postgres Cluster', 'team-core', '', 1, 1, NULL, NULL),
    ('billing', 'Billing', 'team-core', 'http://billing/health', 0, 0, NULL, NULL);

INSERT INTO dependencies
    (id, service_id, name, canonical_name, type, healthy, latency_ms, contact, contact_override,
     impact, impact_override, check_details, error, error_message, skipped) VALUES
    ('web-orders', 'web', 'orders-api', 'Orders API', 'rest', 1, 40,
     '{"email":"orders@x.com","slack":"#orders"}', NULL, 'High', NULL,
     '{"status":200}', NULL, NULL, 0),
    ('web-redis', 'web', 'Redis Cache', NULL, 'cache', 1, 2, NULL, NULL, NULL, NULL, NULL, NULL, NULL, 0),
    ('orders-pg', 'orders', 'postgres', 'PostgreSQL', 'database', 0, 900,
     '{"email":"dba@x.com"}', '{"pager":"orders-oncall"}', 'Critical', NULL,
     '{broken', '{"code":"ECONNREFUSED"}', 'connection refused', 0),
    ('orders-redis', 'orders', 'redis cache ', NULL, 'cache', 0, NULL, NULL, NULL, NULL, NULL, NULL, NULL, NULL, 0),
    ('orders-stripe', 'orders', 'Stripe', NULL, 'rest', NULL, NULL, NULL, NULL, NULL, 'Low', NULL, NULL, NULL, 1),
    ('billing-orders', 'billing', 'orders', NULL, 'rest', 1, 10, NULL, NULL, NULL, NULL, NULL, NULL, NULL, 0);

INSERT INTO dependency_associations
    (id, dependency_id, linked_service_id, association_type, is_auto_suggested, confidence_score, is_dismissed) VALUES
    ('a1', 'web-orders', 'orders', 'api_call', 0, NULL, 0),
    ('a2', 'orders-pg', 'pg', 'database', 1, 0.92, 0),
    ('a3', 'billing-orders', 'orders', 'api_call', 0, NULL, 0),
    ('a4', 'web-redis', 'pg', 'cache', 1, 0.1, 1);

INSERT INTO dependency_canonical_overrides (id, canonical_name, team_id, contact_override, impact_override) VALUES
    ('co1', 'PostgreSQL', NULL, '{"email":"db-team@x.com","slack":"#db"}', 'Critical (global)'),
    ('co2', 'PostgreSQL', 'team-core', NULL, 'Critical (core)'),
    ('co3', 'Orders API', NULL, '{"slack":"#orders-canonical"}', NULL);
"""


def seed_latency(conn: sqlite3.Connection) -> None:
    conn.executemany(
        "INSERT INTO dependency_latency_history (id, dependency_id, latency_ms, recorded_at) "
        "VALUES (?, ?, ?, datetime('now', ?))",
        [
            ("h1", "web-orders", 30, "-1 hours"),
            ("h2", "web-orders", 50, "-2 hours"),
            ("h3", "web-orders", 5000, "-48 hours"),
        ],
    )
    # Pollers write ISO-8601 with a 'T' separator; the window must still apply.
    conn.execute(
        "INSERT INTO dependency_latency_history (id, dependency_id, latency_ms, recorded_at) "
        "VALUES ('h4', 'orders-pg', 800, strftime('%Y-%m-%dT%H:%M:%fZ', 'now', '-30 minutes'))"
    )
    conn.commit()


@pytest.fixture()
def catalog_conn() -> Iterator[sqlite3.Connection]:
    conn = connect(":memory:")
    init_schema(conn)
    conn.executescript(SEED)
    seed_latency(conn)
    yield conn
    conn.close()


@pytest.fixture()
def stores(catalog_conn: sqlite3.Connection) -> SqliteStores:
    return SqliteStores(catalog_conn)


@pytest.fixture()
def graph_service(stores: SqliteStores) -> GraphService:
    return build_graph_service(stores, DepCatalogConfig())


@pytest.fixture()
def catalog_db_path(tmp_path) -> str:  # type: ignore[no-untyped-def]
    """A seeded on-disk catalog, for code paths that open the database themselves."""
    path = str(tmp_path / "catalog.db")
    conn = connect(path)
    try:
        init_schema(conn)
        conn.executescript(SEED)
        seed_latency(conn)
    finally:
        conn.close()
    return path
