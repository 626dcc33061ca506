"""Relationship classification and alias generation."""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from schema_modeler.analysis import naming
from schema_modeler.catalog.models import (
    ColumnRef,
    ForeignKeyDescriptor,
    RelationshipDescriptor,
    RelationshipKind,
    TableRef,
)
from schema_modeler.catalog.rows import RawRelationship
from schema_modeler.models import GeneratorOptions

logger = logging.getLogger(__name__)


@dataclass
class AliasResolution:
    """Relationships that survived alias deduplication, plus what was dropped."""
    kept: List[RelationshipDescriptor] = field(default_factory=list)
    dropped_relationships: List[RelationshipDescriptor] = field(default_factory=list)

    @property
    def dropped(self) -> int:
        return len(self.dropped_relationships)


def create_alias(
    kind: RelationshipKind,
    source: ColumnRef,
    target: ColumnRef,
    junction: Optional[TableRef] = None,
) -> str:
    """Association alias for one relationship; depends only on its inputs."""
    if kind is RelationshipKind.HAS_MANY:
        return naming.singularize(naming.camel_case(source.table)) + naming.pluralize(
            naming.omit_id_suffix(source.column, capitalize=True)
        )
    if kind is RelationshipKind.BELONGS_TO:
        return naming.singularize(naming.camel_case(target.table)) + naming.omit_id_suffix(
            target.column, capitalize=True
        )
    if kind is RelationshipKind.HAS_ONE:
        return naming.singularize(naming.camel_case(source.table)) + naming.omit_id_suffix(
            source.column, capitalize=True
        )
    if kind is RelationshipKind.MANY_TO_MANY:
        if junction is None:
            raise ValueError("ManyToMany alias requires a junction table")
        # Trailing "es" keeps these visibly distinct from HasMany aliases
        return (
            naming.camel_case(naming.singularize(junction.table))
            + naming.pluralize(naming.omit_id_suffix(source.table, capitalize=True))
            + "es"
        )
    return ""


class RelationshipClassifier:
    """Classifies foreign keys and catalog relationship rows into descriptors.

    The constrained side of every foreign key is a BelongsTo. HasOne and
    HasMany come from the catalog's declared directions. ManyToMany needs a
    junction; a catalog row without one is downgraded to HasMany, and
    junction tables the catalog missed are detected from foreign keys.
    """

    KIND_NAMES = {
        "belongsto": RelationshipKind.BELONGS_TO,
        "hasone": RelationshipKind.HAS_ONE,
        "hasmany": RelationshipKind.HAS_MANY,
        "manytomany": RelationshipKind.MANY_TO_MANY,
        "belongstomany": RelationshipKind.MANY_TO_MANY,
    }

    def __init__(self, junction_max_columns: int = 4):
        self.junction_max_columns = junction_max_columns

    @classmethod
    def parse_kind(cls, name: str) -> Optional[RelationshipKind]:
        key = "".join(ch for ch in str(name).lower() if ch.isalnum())
        return cls.KIND_NAMES.get(key)

    def classify(
        self,
        foreign_keys: Sequence[ForeignKeyDescriptor],
        catalog_relationships: Sequence[RawRelationship] = (),
        column_counts: Optional[Mapping[Tuple[str, str], int]] = None,
    ) -> List[RelationshipDescriptor]:
        """Classify relationships and attach aliases.

        Args:
            foreign_keys: Every foreign key column pair
            catalog_relationships: Pre-classified rows from the catalog
            column_counts: (schema, table) -> number of columns, for the
                junction width check

        Returns:
            Distinct relationship descriptors with aliases, in a stable order
        """
        found: "OrderedDict[tuple, RelationshipDescriptor]" = OrderedDict()

        def add(relationship: RelationshipDescriptor):
            if relationship.key not in found:
                found[relationship.key] = relationship

        for fk in foreign_keys:
            add(RelationshipDescriptor(
                kind=RelationshipKind.BELONGS_TO,
                source=fk.source,
                target=fk.referenced,
            ))

        for row in catalog_relationships:
            relationship = self._from_catalog_row(row)
            if relationship is not None:
                add(relationship)

        for relationship in self.detect_junction_relationships(foreign_keys, column_counts or {}):
            add(relationship)

        return [
            replace(r, alias=create_alias(r.kind, r.source, r.target, r.junction))
            for r in found.values()
        ]

    def _from_catalog_row(self, row: RawRelationship) -> Optional[RelationshipDescriptor]:
        kind = self.parse_kind(row.relationship_type)
        if kind is None:
            logger.debug("Skipping relationship row with unknown type '%s'", row.relationship_type)
            return None

        junction = None
        if kind is RelationshipKind.MANY_TO_MANY:
            if row.junction_table:
                junction = TableRef(row.junction_schema or row.source_schema, row.junction_table)
            else:
                logger.debug(
                    "ManyToMany %s.%s -> %s.%s has no junction; classifying as HasMany",
                    row.source_table, row.source_column, row.target_table, row.target_column,
                )
                kind = RelationshipKind.HAS_MANY

        return RelationshipDescriptor(
            kind=kind,
            source=ColumnRef(row.source_schema, row.source_table, row.source_column),
            target=ColumnRef(row.target_schema, row.target_table, row.target_column),
            junction=junction,
        )

    def detect_junctions(
        self,
        foreign_keys: Sequence[ForeignKeyDescriptor],
        column_counts: Mapping[Tuple[str, str], int],
    ) -> Dict[Tuple[str, str], List[ForeignKeyDescriptor]]:
        """Narrow tables with exactly two outward foreign keys to two different tables."""
        by_table: "OrderedDict[Tuple[str, str], List[ForeignKeyDescriptor]]" = OrderedDict()
        for fk in foreign_keys:
            by_table.setdefault((fk.table_schema, fk.table_name), []).append(fk)

        junctions = {}
        for table_key, fks in by_table.items():
            columns = {fk.column_name for fk in fks}
            targets = {(fk.referenced.schema, fk.referenced.table) for fk in fks}
            if len(fks) != 2 or len(columns) != 2 or len(targets) != 2:
                continue
            width = column_counts.get(table_key)
            if width is None or width > self.junction_max_columns:
                continue
            junctions[table_key] = fks
        return junctions

    def detect_junction_relationships(
        self,
        foreign_keys: Sequence[ForeignKeyDescriptor],
        column_counts: Mapping[Tuple[str, str], int],
    ) -> List[RelationshipDescriptor]:
        """One ManyToMany per direction for each detected junction table."""
        relationships = []
        for (schema, table), (first, second) in self.detect_junctions(foreign_keys, column_counts).items():
            junction = TableRef(schema, table)
            relationships.append(RelationshipDescriptor(
                kind=RelationshipKind.MANY_TO_MANY,
                source=first.referenced,
                target=second.referenced,
                junction=junction,
            ))
            relationships.append(RelationshipDescriptor(
                kind=RelationshipKind.MANY_TO_MANY,
                source=second.referenced,
                target=first.referenced,
                junction=junction,
            ))
        return relationships

    @staticmethod
    def resolve_aliases(relationships: Iterable[RelationshipDescriptor]) -> AliasResolution:
        """First occurrence of an alias wins within each source table."""
        resolution = AliasResolution()
        seen: Dict[Tuple[str, str], Set[str]] = {}
        for relationship in relationships:
            taken = seen.setdefault((relationship.source.schema, relationship.source.table), set())
            if relationship.alias in taken:
                logger.debug(
                    "Dropping %s relationship %s.%s -> %s.%s: alias '%s' already used",
                    relationship.kind.value,
                    relationship.source.table, relationship.source.column,
                    relationship.target.table, relationship.target.column,
                    relationship.alias,
                )
                resolution.dropped_relationships.append(relationship)
                continue
            taken.add(relationship.alias)
            resolution.kept.append(relationship)
        return resolution


def filter_relationships(
    relationships: Iterable[RelationshipDescriptor],
    options: GeneratorOptions,
) -> List[RelationshipDescriptor]:
    """Keep relationships whose both endpoints pass the schema/table allow-lists."""
    return [
        r for r in relationships
        if options.passes_filter(r.source.schema, r.source.table)
        and options.passes_filter(r.target.schema, r.target.table)
    ]
