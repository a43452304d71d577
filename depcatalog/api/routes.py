"""REST routes for graph retrieval."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from depcatalog.api.schemas import GraphQuery, HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    from depcatalog import __version__

    return HealthResponse(version=__version__)


@router.get("/graph")
def get_graph(request: Request, query: Annotated[GraphQuery, Query()]) -> JSONResponse:
    """Return the graph for the requested view.

    Declared sync so FastAPI runs the blocking store reads in its threadpool.
    """
    graph_service = request.app.state.graph_service
    graph = graph_service.get_graph(
        team=query.team,
        service=query.service,
        dependency=query.dependency,
    )
    return JSONResponse(content=graph.to_dict())
