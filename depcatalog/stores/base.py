"""Read-only store interfaces consumed by the graph service.

Implementations return fully materialized rows and let their own errors
(connection loss, SQL errors) propagate; the graph layer never catches them.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from depcatalog.models.catalog import (
    CanonicalOverride,
    DependencyWithTarget,
    ServiceWithTeam,
    Team,
)


class ServiceStore(Protocol):
    def find_active_with_team(self) -> list[ServiceWithTeam]: ...

    def find_all_with_team(
        self,
        team_id: str | None = None,
        is_active: bool | None = None,
    ) -> list[ServiceWithTeam]: ...

    def find_by_id_with_team(self, service_id: str) -> ServiceWithTeam | None: ...


class DependencyStore(Protocol):
    def find_all_with_associations_and_latency(
        self,
        active_services_only: bool = False,
    ) -> list[DependencyWithTarget]: ...

    def find_by_service_ids_with_associations_and_latency(
        self,
        service_ids: Sequence[str],
    ) -> list[DependencyWithTarget]: ...

    def find_by_service_id(self, service_id: str) -> list[DependencyWithTarget]:
        """Dependencies owned by *service_id*, without association or latency joins."""
        ...

    def find_by_id(self, dependency_id: str) -> DependencyWithTarget | None: ...


class TeamStore(Protocol):
    def find_by_id(self, team_id: str) -> Team | None: ...


class CanonicalOverrideStore(Protocol):
    def find_all(self) -> list[CanonicalOverride]:
        """Every override, global and team-scoped."""
        ...
