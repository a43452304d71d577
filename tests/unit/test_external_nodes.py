"""Tests for virtual external node grouping, identity and health rollup."""

from __future__ import annotations

import hashlib
import re

from hypothesis import given
from hypothesis import strategies as st

from depcatalog.graph.external_nodes import (
    build_name_to_id_map,
    build_node_data,
    generate_external_id,
    group_unassociated_deps,
    normalize_dep_name,
)
from depcatalog.models.catalog import DependencyWithTarget


def _dep(
    dep_id: str,
    name: str,
    service_id: str = "svc-1",
    target: str | None = None,
    canonical_name: str | None = None,
    healthy: bool | None = True,
    skipped: bool = False,
    dep_type: str = "rest",
) -> DependencyWithTarget:
    return DependencyWithTarget(
        id=dep_id,
        service_id=service_id,
        name=name,
        type=dep_type,
        canonical_name=canonical_name,
        healthy=healthy,
        skipped=skipped,
        target_service_id=target,
    )


class TestNormalize:
    def test_lowercases_and_trims(self) -> None:
        assert normalize_dep_name("  Redis Cache \t") == "redis cache"

    def test_inner_whitespace_kept(self) -> None:
        assert normalize_dep_name("Redis  Cache") == "redis  cache"


class TestGenerateExternalId:
    def test_format(self) -> None:
        assert re.fullmatch(r"external-[a-f0-9]{12}", generate_external_id("redis"))

    def test_matches_sha256_prefix(self) -> None:
        expected = hashlib.sha256(b"redis").hexdigest()[:12]
        assert generate_external_id("redis") == f"external-{expected}"

    def test_deterministic(self) -> None:
        assert generate_external_id("postgres") == generate_external_id("postgres")

    def test_different_names_differ(self) -> None:
        names = ["redis", "kafka", "postgres", "stripe api", "s3", "redis cache"]
        ids = {generate_external_id(n) for n in names}
        assert len(ids) == len(names)

    @given(st.from_regex(r"[A-Za-z0-9][A-Za-z0-9 ._-]{0,30}", fullmatch=True))
    def test_case_and_whitespace_insensitive(self, name: str) -> None:
        variants = [name, name.upper(), name.lower(), f"  {name}\t"]
        ids = {generate_external_id(normalize_dep_name(v)) for v in variants}
        assert len(ids) == 1


class TestGroupUnassociatedDeps:
    def test_case_variants_group_with_first_display_name(self) -> None:
        deps = [
            _dep("d1", "Redis Cache", service_id="svc-1"),
            _dep("d2", "redis cache", service_id="svc-2"),
        ]
        groups = group_unassociated_deps(deps)

        assert len(groups) == 1
        group = groups["redis cache"]
        assert group.name == "Redis Cache"
        assert len(group.deps) == 2
        assert group.id == generate_external_id("redis cache")

    def test_excludes_associated_dependencies(self) -> None:
        deps = [
            _dep("d1", "Orders API", target="svc-orders"),
            _dep("d2", "Stripe"),
        ]
        groups = group_unassociated_deps(deps)
        assert list(groups) == ["stripe"]
        assert all(d.target_service_id is None for g in groups.values() for d in g.deps)

    def test_canonical_name_preferred(self) -> None:
        deps = [
            _dep("d1", "pg-primary", canonical_name="PostgreSQL"),
            _dep("d2", "postgres-main", canonical_name="postgresql"),
        ]
        groups = group_unassociated_deps(deps)
        assert list(groups) == ["postgresql"]
        assert groups["postgresql"].name == "PostgreSQL"

    def test_empty(self) -> None:
        assert group_unassociated_deps([]) == {}

    @given(
        st.lists(
            st.tuples(st.sampled_from(["Redis", "redis", " REDIS ", "Kafka", "kafka"]), st.booleans()),
            max_size=20,
        )
    )
    def test_every_unassociated_dep_lands_in_exactly_one_group(self, rows: list[tuple[str, bool]]) -> None:
        deps = [_dep(f"d{i}", name, target="svc-x" if linked else None) for i, (name, linked) in enumerate(rows)]
        groups = group_unassociated_deps(deps)

        grouped_ids = [d.id for g in groups.values() for d in g.deps]
        expected = [d.id for d in deps if d.target_service_id is None]
        assert sorted(grouped_ids) == sorted(expected)
        assert set(groups) <= {"redis", "kafka"}


class TestBuildNodeData:
    def test_counts_and_external_fields(self) -> None:
        deps = [
            _dep("d1", "Redis", healthy=True),
            _dep("d2", "Redis", healthy=False),
            _dep("d3", "Redis", healthy=None),
        ]
        data = build_node_data("Redis", deps)

        assert data.name == "Redis"
        assert data.team_id == "external"
        assert data.team_name == "External"
        assert data.health_endpoint == ""
        assert data.is_active is True
        assert data.is_external is True
        assert data.last_poll_success is None
        assert data.last_poll_error is None
        assert data.dependency_count == 3
        assert data.healthy_count == 1
        assert data.unhealthy_count == 1
        assert data.skipped_count == 0

    def test_skipped_takes_precedence(self) -> None:
        deps = [
            _dep("d1", "Redis", healthy=True, skipped=True),
            _dep("d2", "Redis", healthy=False, skipped=True),
            _dep("d3", "Redis", healthy=True),
        ]
        data = build_node_data("Redis", deps)
        assert data.skipped_count == 2
        assert data.healthy_count == 1
        assert data.unhealthy_count == 0

    def test_infers_type_within_group(self) -> None:
        deps = [
            _dep("d1", "Redis", dep_type="cache"),
            _dep("d2", "Redis", dep_type="database"),
            _dep("d3", "Redis", dep_type="cache"),
        ]
        assert build_node_data("Redis", deps).service_type == "cache"


class TestBuildNameToIdMap:
    def test_maps_normalized_names_to_ids(self) -> None:
        groups = group_unassociated_deps([_dep("d1", "Redis"), _dep("d2", "Kafka")])
        mapping = build_name_to_id_map(groups)

        assert mapping == {"redis": generate_external_id("redis"), "kafka": generate_external_id("kafka")}
