"""Tests for the REST API: graph route, error envelope, health and metrics.

Includes hypothesis fuzzing of the graph filters: whatever the query, the
response is JSON with either a graph or an error envelope, never a 500.
"""

from __future__ import annotations

from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from hypothesis import given, settings
from hypothesis import strategies as st

import depcatalog.observability.metrics  # noqa: F401  (registers collectors)
from depcatalog.api.app import create_app
from depcatalog.models.graph import GraphNode, GraphResponse, ServiceNodeData


def _make_graph() -> GraphResponse:
    return GraphResponse(
        nodes=(
            GraphNode(
                id="svc-1",
                data=ServiceNodeData(
                    name="User Service",
                    team_id="team-1",
                    team_name="Team One",
                    health_endpoint="http://user/health",
                    is_active=True,
                    dependency_count=0,
                    healthy_count=0,
                    unhealthy_count=0,
                ),
            ),
        )
    )


def _make_graph_service(graph: GraphResponse | None = None) -> MagicMock:
    graph_service = MagicMock()
    graph_service.get_graph.return_value = graph or _make_graph()
    return graph_service


def _make_client(graph_service: MagicMock | None = None) -> TestClient:
    app = create_app(graph_service=graph_service or _make_graph_service())
    return TestClient(app, raise_server_exceptions=False)


class TestGraphRoute:
    def test_full_graph(self) -> None:
        graph_service = _make_graph_service()
        response = _make_client(graph_service).get("/api/v1/graph")

        assert response.status_code == 200
        body = response.json()
        assert body["nodes"][0]["id"] == "svc-1"
        assert body["nodes"][0]["data"]["teamName"] == "Team One"
        assert body["edges"] == []
        graph_service.get_graph.assert_called_once_with(team=None, service=None, dependency=None)

    def test_filters_forwarded(self) -> None:
        graph_service = _make_graph_service()
        _make_client(graph_service).get("/api/v1/graph", params={"team": "team-1", "dependency": "dep-1"})
        graph_service.get_graph.assert_called_once_with(team="team-1", service=None, dependency="dep-1")

    def test_empty_graph_is_200(self) -> None:
        response = _make_client(_make_graph_service(GraphResponse.empty())).get(
            "/api/v1/graph", params={"team": "missing"}
        )
        assert response.status_code == 200
        assert response.json() == {"nodes": [], "edges": []}

    def test_overlong_filter_is_400(self) -> None:
        response = _make_client().get("/api/v1/graph", params={"service": "x" * 500})
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_QUERY"

    def test_store_failure_is_500_envelope(self) -> None:
        graph_service = MagicMock()
        graph_service.get_graph.side_effect = RuntimeError("disk I/O error")
        response = _make_client(graph_service).get("/api/v1/graph")

        assert response.status_code == 500
        assert response.json() == {"error": "INTERNAL_ERROR", "detail": "An unexpected error occurred."}
        assert "disk" not in response.text


class TestHealthAndMetrics:
    def test_health(self) -> None:
        response = _make_client().get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_metrics_exposed(self) -> None:
        response = _make_client().get("/metrics/")
        assert response.status_code == 200
        assert "depcatalog_graph_builds_total" in response.text


_filter_text = st.text(
    alphabet=st.characters(codec="utf-8", exclude_categories=("Cs", "Cc")),
    min_size=0,
    max_size=200,
)


class TestGraphRouteFuzz:
    @settings(max_examples=50, deadline=None)
    @given(team=_filter_text, service=_filter_text, dependency=_filter_text)
    def test_never_500(self, team: str, service: str, dependency: str) -> None:
        response = _make_client().get(
            "/api/v1/graph",
            params={"team": team, "service": service, "dependency": dependency},
        )
        assert response.status_code in (200, 400)
        assert response.headers["content-type"].startswith("application/json")
        body = response.json()
        if response.status_code == 400:
            assert set(body) == {"error", "detail"}
        else:
            assert set(body) == {"nodes", "edges"}
