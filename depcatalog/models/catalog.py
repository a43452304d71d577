"""Catalog row structures materialized from the service/dependency store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class DependencyType(StrEnum):
    """Kind of capability a dependency represents."""

    DATABASE = "database"
    REST = "rest"
    SOAP = "soap"
    GRPC = "grpc"
    GRAPHQL = "graphql"
    MESSAGE_QUEUE = "message_queue"
    CACHE = "cache"
    FILE_SYSTEM = "file_system"
    SMTP = "smtp"
    OTHER = "other"


class AssociationType(StrEnum):
    """How a dependency was linked to the service that provides it."""

    API_CALL = "api_call"
    DATABASE = "database"
    MESSAGE_QUEUE = "message_queue"
    CACHE = "cache"
    OTHER = "other"


@dataclass(frozen=True)
class Team:
    """An owning team."""

    id: str
    name: str
    description: str | None = None


@dataclass(frozen=True)
class ServiceWithTeam:
    """A catalogued service joined with its team's display name."""

    id: str
    name: str
    team_id: str
    team_name: str
    health_endpoint: str = ""
    is_active: bool = True
    is_external: bool = False
    last_poll_success: bool | None = None  # None: never polled
    last_poll_error: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class DependencyWithTarget:
    """A dependency reported by a service, joined with its association.

    ``target_service_id`` is the catalogued service that provides the
    dependency, or None when nobody has linked it to one.  The JSON text
    columns (``check_details``, ``error``, ``contact*``) are kept raw; they
    are parsed lazily at edge construction time.
    """

    id: str
    service_id: str
    name: str
    type: str = DependencyType.OTHER
    canonical_name: str | None = None
    service_name: str = ""
    healthy: bool | None = None
    latency_ms: int | None = None
    check_details: str | None = None
    error: str | None = None
    error_message: str | None = None
    impact: str | None = None
    contact: str | None = None
    contact_override: str | None = None
    impact_override: str | None = None
    skipped: bool = False
    target_service_id: str | None = None
    association_type: str | None = None
    is_auto_suggested: bool | None = None
    confidence_score: float | None = None
    avg_latency_24h: float | None = None


@dataclass(frozen=True)
class CanonicalOverride:
    """Contact/impact override applied to every dependency sharing a canonical name.

    ``team_id`` of None marks a global override; otherwise the override only
    applies to dependencies owned by that team's services.
    """

    canonical_name: str
    contact_override: str | None = None
    impact_override: str | None = None
    team_id: str | None = None
