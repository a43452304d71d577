"""Virtual nodes for dependencies that no catalogued service provides.

Dependencies without a ``target_service_id`` (a SaaS API, a managed
database nobody registered) would otherwise have no node to hang their
edges on.  They are grouped by normalized name so that every consumer of
"Redis Cache" shares one virtual node, whose id is derived from the name
alone and is therefore stable across requests and restarts.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from dataclasses import dataclass, field

from depcatalog.graph.type_inference import dominant_type
from depcatalog.models.catalog import DependencyWithTarget
from depcatalog.models.graph import EXTERNAL_TEAM_ID, EXTERNAL_TEAM_NAME, ServiceNodeData

_EXTERNAL_ID_PREFIX = "external-"
_EXTERNAL_ID_HASH_LEN = 12


@dataclass
class ExternalGroup:
    """Unassociated dependencies that collapse into one virtual node."""

    id: str
    name: str  # display name: first occurrence, not normalized
    deps: list[DependencyWithTarget] = field(default_factory=list)


def normalize_dep_name(name: str) -> str:
    """Grouping key for a dependency name: case and surrounding whitespace ignored."""
    return name.lower().strip()


def external_key(dep: DependencyWithTarget) -> str:
    """Normalized key of *dep*, preferring its canonical name."""
    return normalize_dep_name(dep.canonical_name if dep.canonical_name is not None else dep.name)


def generate_external_id(normalized_name: str) -> str:
    """Content-addressed node id: ``external-`` + 12 hex chars of SHA-256."""
    digest = hashlib.sha256(normalized_name.encode("utf-8")).hexdigest()
    return f"{_EXTERNAL_ID_PREFIX}{digest[:_EXTERNAL_ID_HASH_LEN]}"


def group_unassociated_deps(deps: Iterable[DependencyWithTarget]) -> dict[str, ExternalGroup]:
    """Group dependencies lacking a target service by normalized name.

    Dependencies with a ``target_service_id`` are skipped.  Returns
    normalized name -> group, in first-seen order.
    """
    groups: dict[str, ExternalGroup] = {}
    for dep in deps:
        if dep.target_service_id is not None:
            continue

        display_name = dep.canonical_name if dep.canonical_name is not None else dep.name
        key = normalize_dep_name(display_name)
        group = groups.get(key)
        if group is None:
            group = ExternalGroup(id=generate_external_id(key), name=display_name)
            groups[key] = group
        group.deps.append(dep)
    return groups


def build_node_data(name: str, deps: list[DependencyWithTarget]) -> ServiceNodeData:
    """Aggregate health of a group into the data of its virtual node.

    A skipped dependency counts as skipped only, never as healthy or
    unhealthy.  Virtual nodes are never polled themselves.
    """
    healthy = unhealthy = skipped = 0
    for dep in deps:
        if dep.skipped:
            skipped += 1
        elif dep.healthy is True:
            healthy += 1
        elif dep.healthy is False:
            unhealthy += 1

    return ServiceNodeData(
        name=name,
        team_id=EXTERNAL_TEAM_ID,
        team_name=EXTERNAL_TEAM_NAME,
        health_endpoint="",
        is_active=True,
        dependency_count=len(deps),
        healthy_count=healthy,
        unhealthy_count=unhealthy,
        skipped_count=skipped,
        last_poll_success=None,
        last_poll_error=None,
        service_type=dominant_type(dep.type for dep in deps),
        is_external=True,
    )


def build_name_to_id_map(groups: dict[str, ExternalGroup]) -> dict[str, str]:
    """Normalized name -> external node id, for edge source resolution."""
    return {key: group.id for key, group in groups.items()}
