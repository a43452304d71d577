"""depcatalog: service dependency catalog and health graph."""

__version__ = "0.1.0"
