"""Core data structures for depcatalog."""

from depcatalog.models.catalog import (
    AssociationType,
    CanonicalOverride,
    DependencyType,
    DependencyWithTarget,
    ServiceWithTeam,
    Team,
)
from depcatalog.models.config import DepCatalogConfig
from depcatalog.models.graph import (
    EXTERNAL_TEAM_ID,
    EXTERNAL_TEAM_NAME,
    GraphEdge,
    GraphEdgeData,
    GraphNode,
    GraphResponse,
    ServiceNodeData,
)

__all__ = [
    "EXTERNAL_TEAM_ID",
    "EXTERNAL_TEAM_NAME",
    "AssociationType",
    "CanonicalOverride",
    "DepCatalogConfig",
    "DependencyType",
    "DependencyWithTarget",
    "GraphEdge",
    "GraphEdgeData",
    "GraphNode",
    "GraphResponse",
    "ServiceNodeData",
    "ServiceWithTeam",
    "Team",
]
