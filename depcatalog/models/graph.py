"""Renderable dependency graph structures.

These are the only values handed to the HTTP layer.  ``to_dict()`` renders
the camelCase wire shape consumed by the dashboard.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

EXTERNAL_TEAM_ID = "external"
EXTERNAL_TEAM_NAME = "External"


@dataclass(frozen=True)
class ServiceNodeData:
    """Health rollup and identity of a node (real service or virtual external)."""

    name: str
    team_id: str
    team_name: str
    health_endpoint: str
    is_active: bool
    dependency_count: int
    healthy_count: int
    unhealthy_count: int
    skipped_count: int = 0
    last_poll_success: bool | None = None
    last_poll_error: str | None = None
    service_type: str | None = None
    is_external: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "teamId": self.team_id,
            "teamName": self.team_name,
            "healthEndpoint": self.health_endpoint,
            "isActive": self.is_active,
            "dependencyCount": self.dependency_count,
            "healthyCount": self.healthy_count,
            "unhealthyCount": self.unhealthy_count,
            "skippedCount": self.skipped_count,
            "lastPollSuccess": self.last_poll_success,
            "lastPollError": self.last_poll_error,
            "isExternal": self.is_external,
        }
        if self.service_type is not None:
            data["serviceType"] = str(self.service_type)
        return data


@dataclass(frozen=True)
class GraphNode:
    """A node in the rendered graph."""

    id: str
    data: ServiceNodeData
    type: Literal["service"] = "service"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "data": self.data.to_dict()}


@dataclass(frozen=True)
class GraphEdgeData:
    """Per-edge health, association and effective override metadata.

    ``check_details`` and ``error`` are None when the stored JSON text was
    empty or malformed; they are then omitted from the wire output.
    """

    dependency_type: str
    dependency_name: str
    dependency_id: str
    canonical_name: str | None = None
    healthy: bool | None = None
    latency_ms: int | None = None
    avg_latency_ms_24h: float | None = None
    association_type: str | None = None
    is_auto_suggested: bool = False
    confidence_score: float | None = None
    check_details: Any = None
    error: Any = None
    error_message: str | None = None
    impact: str | None = None
    effective_contact: str | None = None
    skipped: bool = False
    relationship: Literal["depends_on"] = "depends_on"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "relationship": self.relationship,
            "dependencyType": str(self.dependency_type),
            "dependencyName": self.dependency_name,
            "canonicalName": self.canonical_name,
            "dependencyId": self.dependency_id,
            "healthy": self.healthy,
            "latencyMs": self.latency_ms,
            "avgLatencyMs24h": self.avg_latency_ms_24h,
            "associationType": self.association_type,
            "isAutoSuggested": self.is_auto_suggested,
            "confidenceScore": self.confidence_score,
            "errorMessage": self.error_message,
            "impact": self.impact,
            "effectiveContact": self.effective_contact,
            "skipped": self.skipped,
        }
        if self.check_details is not None:
            data["checkDetails"] = self.check_details
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class GraphEdge:
    """A provider -> consumer edge.

    ``source`` is the node that provides the capability, ``target`` the
    service that depends on it, so an outage propagates along the edge.
    """

    id: str
    source: str
    target: str
    data: GraphEdgeData

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "data": self.data.to_dict(),
        }


@dataclass(frozen=True)
class GraphResponse:
    """Immutable graph snapshot, rebuilt per query."""

    nodes: tuple[GraphNode, ...] = field(default_factory=tuple)
    edges: tuple[GraphEdge, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> GraphResponse:
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }
