"""Accumulates service nodes, virtual nodes and edges into one graph snapshot.

A builder is transient: create one per graph request, feed it nodes first,
configure the lookup maps, then add edges and call ``build()``.

Ordering contract::

    add_service_node / add_external_node     (any order, idempotent)
    set_external_node_map / set_canonical_override_map
    add_edge ...                             (maps are frozen from here on)
    build()

Calling a ``set_*`` method after the first ``add_edge`` raises
BuilderOrderError, since edges already added would have been resolved
against the old map.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping

from depcatalog.graph.external_nodes import external_key
from depcatalog.graph.json_fields import parse_json_text
from depcatalog.graph.overrides import resolve_contact, resolve_impact
from depcatalog.models.catalog import CanonicalOverride, DependencyWithTarget, ServiceWithTeam
from depcatalog.models.graph import (
    GraphEdge,
    GraphEdgeData,
    GraphNode,
    GraphResponse,
    ServiceNodeData,
)

# (team_id or None for global, canonical_name)
CanonicalOverrideKey = tuple[str | None, str]

DROP_NO_SOURCE = "no_source"
DROP_UNKNOWN_SOURCE = "unknown_source"
DROP_DUPLICATE = "duplicate"


class BuilderOrderError(RuntimeError):
    """Raised when a lookup map is configured after edges were added."""


def build_canonical_override_map(
    overrides: Iterable[CanonicalOverride],
) -> dict[CanonicalOverrideKey, CanonicalOverride]:
    """Index overrides by (team scope, canonical name); last one wins on collision."""
    return {(o.team_id, o.canonical_name): o for o in overrides}


def dedupe_by_id(deps: Iterable[DependencyWithTarget]) -> list[DependencyWithTarget]:
    """Drop repeated dependency ids, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[DependencyWithTarget] = []
    for dep in deps:
        if dep.id in seen:
            continue
        seen.add(dep.id)
        unique.append(dep)
    return unique


def edge_id(source: str, target: str, dep_type: str) -> str:
    return f"{source}-{target}-{dep_type}"


class DependencyGraphBuilder:
    """Builds a node/edge graph with no duplicate nodes, edges or dangling sources."""

    def __init__(self) -> None:
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}
        self._external_node_map: dict[str, str] = {}
        self._canonical_overrides: dict[CanonicalOverrideKey, CanonicalOverride] | None = None
        self._edges_started = False
        self._dropped: Counter[str] = Counter()

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def add_service_node(
        self,
        service: ServiceWithTeam,
        dependencies: Iterable[DependencyWithTarget],
        service_type: str | None = None,
    ) -> None:
        """Add *service* with a health rollup of the dependencies it owns.

        No-op if a node with the same id already exists.  *dependencies* may
        contain the same row more than once (e.g. gathered by several
        traversal steps); rows are deduplicated by id before counting.
        """
        if service.id in self._nodes:
            return

        unique = dedupe_by_id(dependencies)
        healthy = unhealthy = skipped = 0
        for dep in unique:
            if dep.skipped:
                skipped += 1
            elif dep.healthy is True:
                healthy += 1
            elif dep.healthy is False:
                unhealthy += 1

        self._nodes[service.id] = GraphNode(
            id=service.id,
            data=ServiceNodeData(
                name=service.name,
                team_id=service.team_id,
                team_name=service.team_name,
                health_endpoint=service.health_endpoint,
                is_active=service.is_active,
                dependency_count=len(unique),
                healthy_count=healthy,
                unhealthy_count=unhealthy,
                skipped_count=skipped,
                last_poll_success=service.last_poll_success,
                last_poll_error=service.last_poll_error,
                service_type=service_type,
                is_external=service.is_external,
            ),
        )

    def add_external_node(self, node_id: str, data: ServiceNodeData) -> None:
        """Add a virtual node.  No-op if *node_id* is already present."""
        if node_id in self._nodes:
            return
        self._nodes[node_id] = GraphNode(id=node_id, data=data)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    # ------------------------------------------------------------------
    # Lookup maps (must precede add_edge)
    # ------------------------------------------------------------------

    def set_external_node_map(self, mapping: Mapping[str, str]) -> None:
        """Normalized dependency name -> virtual node id."""
        self._check_not_started("set_external_node_map")
        self._external_node_map = dict(mapping)

    def set_canonical_override_map(
        self,
        mapping: Mapping[CanonicalOverrideKey, CanonicalOverride],
    ) -> None:
        """(team id or None, canonical name) -> override."""
        self._check_not_started("set_canonical_override_map")
        self._canonical_overrides = dict(mapping)

    def _check_not_started(self, method: str) -> None:
        if self._edges_started:
            raise BuilderOrderError(f"{method}() must be called before the first add_edge()")

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def resolve_source(self, dep: DependencyWithTarget) -> str | None:
        """Id of the node providing *dep*: its target service, else its virtual node."""
        if dep.target_service_id:
            return dep.target_service_id
        return self._external_node_map.get(external_key(dep))

    def add_edge(self, dep: DependencyWithTarget) -> None:
        """Add a provider -> consumer edge for *dep*.

        The edge is silently dropped when no source resolves, when the source
        is not a node of this graph (partial views), or when an edge with the
        same (source, target, type) already exists.
        """
        self._edges_started = True

        source = self.resolve_source(dep)
        if source is None:
            self._dropped[DROP_NO_SOURCE] += 1
            return
        if source not in self._nodes:
            self._dropped[DROP_UNKNOWN_SOURCE] += 1
            return

        eid = edge_id(source, dep.service_id, dep.type)
        if eid in self._edges:
            self._dropped[DROP_DUPLICATE] += 1
            return

        self._edges[eid] = GraphEdge(
            id=eid,
            source=source,
            target=dep.service_id,
            data=self.create_edge_data(dep),
        )

    def create_edge_data(self, dep: DependencyWithTarget) -> GraphEdgeData:
        """Edge payload for *dep*, with effective contact and impact resolved."""
        global_override, team_override = self._find_canonical_overrides(dep)

        return GraphEdgeData(
            dependency_type=dep.type,
            dependency_name=dep.canonical_name or dep.name,
            canonical_name=dep.canonical_name,
            dependency_id=dep.id,
            healthy=dep.healthy,
            latency_ms=dep.latency_ms,
            avg_latency_ms_24h=dep.avg_latency_24h,
            association_type=dep.association_type,
            is_auto_suggested=bool(dep.is_auto_suggested),
            confidence_score=dep.confidence_score,
            check_details=parse_json_text(dep.check_details),
            error=parse_json_text(dep.error),
            error_message=dep.error_message,
            impact=resolve_impact(
                dep.impact,
                global_override.impact_override if global_override else None,
                dep.impact_override,
                team_override=team_override.impact_override if team_override else None,
            ),
            effective_contact=resolve_contact(
                dep.contact,
                global_override.contact_override if global_override else None,
                dep.contact_override,
                team_override=team_override.contact_override if team_override else None,
            ),
            skipped=dep.skipped,
        )

    def _find_canonical_overrides(
        self,
        dep: DependencyWithTarget,
    ) -> tuple[CanonicalOverride | None, CanonicalOverride | None]:
        """Return (global, team-scoped) overrides for *dep*'s canonical name."""
        if self._canonical_overrides is None or not dep.canonical_name:
            return None, None

        global_override = self._canonical_overrides.get((None, dep.canonical_name))
        team_override = None
        owner = self._nodes.get(dep.service_id)
        if owner is not None and not owner.data.is_external:
            team_override = self._canonical_overrides.get((owner.data.team_id, dep.canonical_name))
        return global_override, team_override

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @property
    def dropped_edges(self) -> dict[str, int]:
        """Count of add_edge calls that produced no edge, by reason."""
        return dict(self._dropped)

    def build(self) -> GraphResponse:
        """Snapshot the current nodes and edges; later mutation does not affect it."""
        return GraphResponse(nodes=tuple(self._nodes.values()), edges=tuple(self._edges.values()))

    def reset(self) -> None:
        """Clear all state so the builder can be reused for a new graph."""
        self._nodes.clear()
        self._edges.clear()
        self._external_node_map = {}
        self._canonical_overrides = None
        self._edges_started = False
        self._dropped.clear()
