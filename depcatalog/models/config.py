"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DatabaseConfig:
    """Catalog database configuration."""

    path: str = "depcatalog.db"
    latency_window_hours: int = 24


@dataclass
class GraphConfig:
    """Graph construction configuration."""

    include_canonical_overrides: bool = True


@dataclass
class APIConfig:
    """REST API configuration."""

    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class DepCatalogConfig:
    """Top-level depcatalog configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
