"""Migration ordering and timestamp allocation."""

from schema_modeler.migration.timestamps import TimestampAllocator
from schema_modeler.migration.ordering import (
    MigrationOrderingEngine,
    MigrationPlan,
    MigrationUnit,
    SchemaObjects,
)

__all__ = [
    "TimestampAllocator",
    "MigrationOrderingEngine",
    "MigrationPlan",
    "MigrationUnit",
    "SchemaObjects",
]
