"""Majority-vote inference of a service's type from its incoming edges."""

from __future__ import annotations

from collections.abc import Iterable

from depcatalog.models.catalog import DependencyWithTarget


def dominant_type(types: Iterable[str]) -> str | None:
    """Return the most frequent value in *types*, or None if it is empty.

    Ties go to the value seen first: counts live in an insertion-ordered
    dict and only a strictly greater count displaces the current leader.
    """
    counts: dict[str, int] = {}
    for dep_type in types:
        counts[dep_type] = counts.get(dep_type, 0) + 1

    leader: str | None = None
    best = 0
    for dep_type, count in counts.items():
        if count > best:
            best = count
            leader = dep_type
    return leader


class ServiceTypeInferencer:
    """Infers what kind of provider a service is from how others consume it.

    A service that five dependencies reach as ``database`` and one as ``rest``
    is shown as a database.  Stateless; one instance can be shared freely.
    """

    def compute(self, dependencies: Iterable[DependencyWithTarget]) -> dict[str, str]:
        """Map each targeted service id to its dominant incoming dependency type.

        Services no dependency points at are absent from the result; callers
        treat a missing entry as "type unknown".
        """
        incoming: dict[str, list[str]] = {}
        for dep in dependencies:
            if not dep.target_service_id:
                continue
            incoming.setdefault(dep.target_service_id, []).append(dep.type)

        result: dict[str, str] = {}
        for service_id, types in incoming.items():
            leader = dominant_type(types)
            if leader is not None:
                result[service_id] = leader
        return result
