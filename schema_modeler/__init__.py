"""Schema Modeler - database catalog introspection into an intermediate model."""

__version__ = "0.1.0"
