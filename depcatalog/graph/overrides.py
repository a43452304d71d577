"""Tiered resolution of a dependency's effective contact and impact.

Precedence, highest first::

    instance override > team canonical override > global canonical override > polled

Contact is merged field by field: every tier is a JSON object and keys from
higher tiers replace keys from lower ones, while lower tiers fill the gaps.
Impact is a plain string: the first tier holding a value wins outright.

Omitting ``team_override`` gives the three-tier form
(instance > canonical > polled).
"""

from __future__ import annotations

import json

from depcatalog.graph.json_fields import parse_json_object


def resolve_contact(
    polled: str | None,
    canonical_override: str | None,
    instance_override: str | None,
    team_override: str | None = None,
) -> str | None:
    """Merge the contact tiers into one JSON object string.

    Tiers that are empty, malformed or not JSON objects are ignored.
    Returns None when no tier holds any contact data.
    """
    tiers = [
        parse_json_object(polled),
        parse_json_object(canonical_override),
        parse_json_object(team_override),
        parse_json_object(instance_override),
    ]
    if all(tier is None for tier in tiers):
        return None

    merged: dict[str, object] = {}
    for tier in tiers:
        if tier:
            merged.update(tier)
    return json.dumps(merged, separators=(",", ":"))


def resolve_impact(
    polled: str | None,
    canonical_override: str | None,
    instance_override: str | None,
    team_override: str | None = None,
) -> str | None:
    """Return the highest-precedence impact value that is not None."""
    for value in (instance_override, team_override, canonical_override, polled):
        if value is not None:
            return value
    return None
