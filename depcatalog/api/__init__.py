"""REST API layer for depcatalog.

Exposes:
    create_app -- FastAPI application factory.
"""

from depcatalog.api.app import create_app

__all__ = ["create_app"]
