"""Dependency graph construction.

Turns catalog rows into a renderable node/edge graph:

    type_inference  -- majority-vote service type from incoming edges.
    external_nodes  -- virtual nodes for dependencies no service provides.
    overrides       -- tiered contact/impact resolution.
    builder         -- DependencyGraphBuilder, the per-request accumulator.
    service         -- GraphService, which fetches rows and drives the rest.
"""

from depcatalog.graph.builder import BuilderOrderError, DependencyGraphBuilder
from depcatalog.graph.overrides import resolve_contact, resolve_impact
from depcatalog.graph.service import GraphService
from depcatalog.graph.type_inference import ServiceTypeInferencer

__all__ = [
    "BuilderOrderError",
    "DependencyGraphBuilder",
    "GraphService",
    "ServiceTypeInferencer",
    "resolve_contact",
    "resolve_impact",
]
