"""Error types for schema-modeler.

Only failures with no fallback surface as exceptions. Optional metadata
lookups (enum/composite/domain/geometry) and unknown native types degrade
silently instead of raising.
"""

from typing import Optional, Dict, Any


class SchemaModelerError(Exception):
    """Base exception for schema-modeler errors."""

    def __init__(self, message: str, code: str = "SCHEMA_MODELER_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class CatalogUnavailableError(SchemaModelerError):
    """A required catalog query failed (schemas, tables, columns, keys, indexes)."""

    def __init__(self, query: str, cause: Optional[BaseException] = None, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details["query"] = query
        if cause is not None:
            details["cause"] = f"{type(cause).__name__}: {cause}"
        message = f"Catalog query '{query}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, code="CATALOG_UNAVAILABLE", details=details)
        self.query = query


class ConfigurationError(SchemaModelerError):
    """Invalid or missing configuration (e.g. no database URL)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)
