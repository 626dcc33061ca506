"""Catalog access for schema-modeler.

This module provides the catalog collaborator interface, raw row types and
the descriptors the rest of the package works with. The asyncpg-backed
source lives in ``schema_modeler.catalog.postgres`` and the fetch
coordinator in ``schema_modeler.catalog.coordinator``.
"""

from schema_modeler.catalog.base import CatalogSource, Row
from schema_modeler.catalog.rows import (
    RawColumn,
    RawElementType,
    RawGeoType,
    RawRelationship,
    RawTable,
)
from schema_modeler.catalog.models import (
    ColumnClassification,
    ColumnDescriptor,
    ColumnFlags,
    ColumnRef,
    CompositeTypeDescriptor,
    DomainConstraint,
    DomainTypeDescriptor,
    EnumDescriptor,
    ForeignKeyDescriptor,
    IndexDescriptor,
    OrmMarker,
    RelationshipDescriptor,
    RelationshipKind,
    SchemaModel,
    StructuredTypeDefinition,
    TableModel,
    TableRef,
    TypeMapping,
)

__all__ = [
    # Collaborator
    "CatalogSource",
    "Row",
    # Raw rows
    "RawColumn",
    "RawElementType",
    "RawGeoType",
    "RawRelationship",
    "RawTable",
    # Descriptors
    "ColumnClassification",
    "ColumnDescriptor",
    "ColumnFlags",
    "ColumnRef",
    "CompositeTypeDescriptor",
    "DomainConstraint",
    "DomainTypeDescriptor",
    "EnumDescriptor",
    "ForeignKeyDescriptor",
    "IndexDescriptor",
    "OrmMarker",
    "RelationshipDescriptor",
    "RelationshipKind",
    "SchemaModel",
    "StructuredTypeDefinition",
    "TableModel",
    "TableRef",
    "TypeMapping",
]
