"""Relationship classification and naming helpers."""

from schema_modeler.analysis.relationships import (
    AliasResolution,
    RelationshipClassifier,
    create_alias,
    filter_relationships,
)

__all__ = [
    "AliasResolution",
    "RelationshipClassifier",
    "create_alias",
    "filter_relationships",
]
