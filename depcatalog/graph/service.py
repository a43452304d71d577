"""Graph retrieval: fetches catalog rows and drives graph construction.

Four views are offered:

    full        -- every active service and its dependencies.
    team        -- one team's services plus the services and virtual nodes
                   they depend on.
    service     -- a service and everything upstream of it, transitively.
    dependency  -- the service view of the service owning a dependency.

Every view adds all nodes first, then configures the builder's lookup maps,
then adds edges.  Unknown teams, services and dependencies produce an empty
graph.  Store errors are not caught.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable

from depcatalog.graph.builder import DependencyGraphBuilder, build_canonical_override_map
from depcatalog.graph.external_nodes import (
    build_name_to_id_map,
    build_node_data,
    group_unassociated_deps,
)
from depcatalog.graph.type_inference import ServiceTypeInferencer
from depcatalog.models.catalog import DependencyWithTarget, ServiceWithTeam
from depcatalog.models.graph import GraphResponse
from depcatalog.observability.logging import get_logger
from depcatalog.observability.metrics import (
    graph_build_duration_seconds,
    graph_builds_total,
    graph_edges_dropped_total,
)
from depcatalog.stores.base import CanonicalOverrideStore, DependencyStore, ServiceStore, TeamStore

_logger = get_logger("graph.service")

MODE_FULL = "full"
MODE_TEAM = "team"
MODE_SERVICE = "service"
MODE_DEPENDENCY = "dependency"


def group_by_service(deps: Iterable[DependencyWithTarget]) -> dict[str, list[DependencyWithTarget]]:
    grouped: dict[str, list[DependencyWithTarget]] = {}
    for dep in deps:
        grouped.setdefault(dep.service_id, []).append(dep)
    return grouped


class GraphService:
    """Builds graph snapshots from the catalog stores.

    Holds only read-only store handles and a stateless inferencer, so one
    instance is created at startup and shared by all requests.

    Args:
        services:            Service rows joined with team names.
        dependencies:        Dependency rows joined with associations.
        teams:               Team lookup, used to tell unknown teams apart.
        canonical_overrides: Optional source of canonical overrides.  When
                             None, edges carry only polled and instance-level
                             contact/impact.
        type_inferencer:     Defaults to a fresh ServiceTypeInferencer.
    """

    def __init__(
        self,
        services: ServiceStore,
        dependencies: DependencyStore,
        teams: TeamStore,
        canonical_overrides: CanonicalOverrideStore | None = None,
        type_inferencer: ServiceTypeInferencer | None = None,
    ) -> None:
        self._services = services
        self._dependencies = dependencies
        self._teams = teams
        self._canonical_overrides = canonical_overrides
        self._type_inferencer = type_inferencer or ServiceTypeInferencer()

    # ------------------------------------------------------------------
    # Public views
    # ------------------------------------------------------------------

    def get_graph(
        self,
        team: str | None = None,
        service: str | None = None,
        dependency: str | None = None,
    ) -> GraphResponse:
        """Pick a view from filters; dependency beats service beats team."""
        if dependency:
            return self.get_dependency_subgraph(dependency)
        if service:
            return self.get_service_subgraph(service)
        if team:
            return self.get_team_graph(team)
        return self.get_full_graph()

    def get_full_graph(self) -> GraphResponse:
        return self._observe(MODE_FULL, self._full_graph)

    def get_team_graph(self, team_id: str) -> GraphResponse:
        return self._observe(MODE_TEAM, lambda: self._team_graph(team_id))

    def get_service_subgraph(self, service_id: str) -> GraphResponse:
        return self._observe(MODE_SERVICE, lambda: self._service_subgraph(service_id))

    def get_dependency_subgraph(self, dependency_id: str) -> GraphResponse:
        dependency = self._dependencies.find_by_id(dependency_id)
        if dependency is None:
            _logger.debug("graph_dependency_not_found", dependency_id=dependency_id)
            return GraphResponse.empty()
        return self._observe(MODE_DEPENDENCY, lambda: self._service_subgraph(dependency.service_id))

    # ------------------------------------------------------------------
    # View assembly
    # ------------------------------------------------------------------

    def _full_graph(self) -> GraphResponse:
        services = self._services.find_active_with_team()
        dependencies = self._dependencies.find_all_with_associations_and_latency(active_services_only=True)

        builder = DependencyGraphBuilder()
        service_types = self._type_inferencer.compute(dependencies)
        deps_by_service = group_by_service(dependencies)
        for svc in services:
            builder.add_service_node(svc, deps_by_service.get(svc.id, []), service_types.get(svc.id))

        return self._finish(builder, dependencies)

    def _team_graph(self, team_id: str) -> GraphResponse:
        if self._teams.find_by_id(team_id) is None:
            _logger.debug("graph_team_not_found", team_id=team_id)
            return GraphResponse.empty()

        services = self._services.find_all_with_team(team_id=team_id, is_active=True)
        if not services:
            return GraphResponse.empty()

        dependencies = self._dependencies.find_by_service_ids_with_associations_and_latency(
            [svc.id for svc in services]
        )

        builder = DependencyGraphBuilder()
        service_types = self._type_inferencer.compute(dependencies)
        deps_by_service = group_by_service(dependencies)
        for svc in services:
            builder.add_service_node(svc, deps_by_service.get(svc.id, []), service_types.get(svc.id))

        # Providers owned by other teams are real services, not virtual nodes.
        foreign_ids: list[str] = []
        for dep in dependencies:
            target = dep.target_service_id
            if target and not builder.has_node(target) and target not in foreign_ids:
                foreign_ids.append(target)
        for service_id in foreign_ids:
            foreign = self._services.find_by_id_with_team(service_id)
            if foreign is None:
                continue
            builder.add_service_node(
                foreign,
                self._dependencies.find_by_service_id(service_id),
                service_types.get(service_id),
            )

        return self._finish(builder, dependencies)

    def _service_subgraph(self, service_id: str) -> GraphResponse:
        visited, collected = self._collect_upstream(service_id)
        if not collected:
            _logger.debug("graph_service_not_found", service_id=service_id, visited=len(visited))
            return GraphResponse.empty()

        all_deps = [dep for _, deps in collected for dep in deps]
        builder = DependencyGraphBuilder()
        service_types = self._type_inferencer.compute(all_deps)
        for svc, deps in collected:
            builder.add_service_node(svc, deps, service_types.get(svc.id))

        return self._finish(builder, all_deps)

    def _collect_upstream(
        self,
        service_id: str,
    ) -> tuple[set[str], list[tuple[ServiceWithTeam, list[DependencyWithTarget]]]]:
        """Walk provider links upstream from *service_id*, depth first.

        The visited set makes cycles (A -> B -> A) terminate; an explicit
        stack keeps deep catalogs off the interpreter's call stack.
        """
        visited: set[str] = set()
        collected: list[tuple[ServiceWithTeam, list[DependencyWithTarget]]] = []
        stack = [service_id]

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)

            svc = self._services.find_by_id_with_team(current)
            if svc is None:
                continue
            deps = self._dependencies.find_by_service_ids_with_associations_and_latency([current])
            collected.append((svc, deps))

            upstream = [dep.target_service_id for dep in deps if dep.target_service_id]
            stack.extend(reversed(upstream))

        return visited, collected

    def _finish(self, builder: DependencyGraphBuilder, dependencies: list[DependencyWithTarget]) -> GraphResponse:
        """Add virtual nodes, configure lookup maps, add edges, snapshot."""
        groups = group_unassociated_deps(dependencies)
        for group in groups.values():
            builder.add_external_node(group.id, build_node_data(group.name, group.deps))
        if groups:
            builder.set_external_node_map(build_name_to_id_map(groups))

        if self._canonical_overrides is not None:
            builder.set_canonical_override_map(build_canonical_override_map(self._canonical_overrides.find_all()))

        for dep in dependencies:
            builder.add_edge(dep)

        for reason, count in builder.dropped_edges.items():
            graph_edges_dropped_total.labels(reason=reason).inc(count)
        return builder.build()

    def _observe(self, mode: str, build: Callable[[], GraphResponse]) -> GraphResponse:
        started = time.monotonic()
        graph = build()
        elapsed = time.monotonic() - started

        graph_builds_total.labels(mode=mode).inc()
        graph_build_duration_seconds.labels(mode=mode).observe(elapsed)
        _logger.info(
            "graph_built",
            mode=mode,
            nodes=len(graph.nodes),
            edges=len(graph.edges),
            duration_ms=round(elapsed * 1000.0, 2),
        )
        return graph
