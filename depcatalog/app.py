"""Application bootstrap for depcatalog.

Wires components in dependency order:
config -> logging -> stores -> GraphService -> REST

Exactly one GraphService is built here and injected into the API; nothing
else constructs one.
"""

from __future__ import annotations

from dataclasses import dataclass

from depcatalog.config import load_config
from depcatalog.graph.service import GraphService
from depcatalog.graph.type_inference import ServiceTypeInferencer
from depcatalog.models.config import DepCatalogConfig
from depcatalog.observability.logging import get_logger, setup_logging
from depcatalog.stores.sqlite import SqliteStores


@dataclass
class DepCatalogApp:
    """Long-lived components shared by every request."""

    config: DepCatalogConfig
    stores: SqliteStores
    graph_service: GraphService

    def close(self) -> None:
        self.stores.close()


def build_graph_service(stores: SqliteStores, config: DepCatalogConfig) -> GraphService:
    return GraphService(
        services=stores.services,
        dependencies=stores.dependencies,
        teams=stores.teams,
        canonical_overrides=stores.canonical_overrides if config.graph.include_canonical_overrides else None,
        type_inferencer=ServiceTypeInferencer(),
    )


def bootstrap(config: DepCatalogConfig | None = None, json_logs: bool = True) -> DepCatalogApp:
    """Load config, configure logging, open the catalog and build the graph service."""
    config = config or load_config()
    setup_logging(config.log.level, json_output=json_logs)
    log = get_logger("app")

    stores = SqliteStores.open(config.database.path, config.database.latency_window_hours)
    graph_service = build_graph_service(stores, config)
    log.info("depcatalog bootstrapped", version=_depcatalog_version(), db=config.database.path)
    return DepCatalogApp(config=config, stores=stores, graph_service=graph_service)


def serve(app: DepCatalogApp) -> None:
    """Run the REST API until interrupted."""
    import uvicorn

    from depcatalog.api import create_app

    log = get_logger("app")
    fastapi_app = create_app(graph_service=app.graph_service, config=app.config)
    log.info("rest api starting", host=app.config.api.host, port=app.config.api.port)
    try:
        uvicorn.run(
            fastapi_app,
            host=app.config.api.host,
            port=app.config.api.port,
            log_config=None,  # structlog handles all logging
            access_log=False,
        )
    finally:
        app.close()
        log.info("depcatalog stopped")


def _depcatalog_version() -> str:
    from depcatalog import __version__

    return __version__


def main() -> None:
    serve(bootstrap())
