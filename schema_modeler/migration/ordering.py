"""Ordering of schema-object migrations with timestamp allocation."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from schema_modeler.analysis import naming
from schema_modeler.catalog.models import ForeignKeyDescriptor, IndexDescriptor, TableModel
from schema_modeler.migration.timestamps import TimestampAllocator
from schema_modeler.models import CATEGORY_ORDER, MigrationCategory, MigrationOptions

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


@dataclass
class SchemaObjects:
    """Everything the ordering engine may emit, grouped by category."""
    schemas: List[str] = field(default_factory=list)
    tables: List[TableModel] = field(default_factory=list)
    functions: Dict[str, List[Row]] = field(default_factory=dict)
    composites: Dict[str, List[Row]] = field(default_factory=dict)
    domains: Dict[str, List[Row]] = field(default_factory=dict)
    views: Dict[str, List[Row]] = field(default_factory=dict)
    triggers: Dict[str, List[Row]] = field(default_factory=dict)
    indexes: List[IndexDescriptor] = field(default_factory=list)
    foreign_keys: List[ForeignKeyDescriptor] = field(default_factory=list)


@dataclass(frozen=True)
class MigrationUnit:
    """One emitted migration file."""
    category: MigrationCategory
    name: str
    timestamp: str
    payload: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def file_stem(self) -> str:
        return f"{self.timestamp}-{naming.slugify(self.name)}"


@dataclass
class MigrationPlan:
    units: List[MigrationUnit] = field(default_factory=list)

    def by_category(self, category: MigrationCategory) -> List[MigrationUnit]:
        return [u for u in self.units if u.category is category]

    @property
    def timestamps(self) -> List[str]:
        return [u.timestamp for u in self.units]

    def __len__(self) -> int:
        return len(self.units)

    def __iter__(self):
        return iter(self.units)


class MigrationOrderingEngine:
    """Sequences migration units in a fixed category order.

    Categories run functions, composites, domains, tables, indexes,
    foreign keys, views, triggers, then seeders. Every emitted unit takes
    exactly one timestamp; disabled categories take none.
    """

    def __init__(
        self,
        allocator: TimestampAllocator,
        options: Optional[MigrationOptions] = None,
        table_filter: Sequence[str] = (),
    ):
        self.allocator = allocator
        self.options = options or MigrationOptions()
        self.table_filter = list(table_filter)

    def sequence(self, objects: SchemaObjects) -> MigrationPlan:
        plan = MigrationPlan()
        handlers = {
            MigrationCategory.FUNCTIONS: self._schema_objects("functions", objects.functions),
            MigrationCategory.COMPOSITES: self._schema_objects("composites", objects.composites),
            MigrationCategory.DOMAINS: self._schema_objects("domains", objects.domains),
            MigrationCategory.TABLES: self._tables,
            MigrationCategory.INDEXES: self._indexes,
            MigrationCategory.FOREIGN_KEYS: self._foreign_keys,
            MigrationCategory.VIEWS: self._schema_objects("views", objects.views),
            MigrationCategory.TRIGGERS: self._schema_objects("triggers", objects.triggers),
            MigrationCategory.SEEDERS: self._seeders,
        }

        for category in CATEGORY_ORDER:
            if not self.options.is_enabled(category):
                logger.debug("Migration category '%s' disabled", category.value)
                continue
            for name, payload in handlers[category](objects):
                plan.units.append(MigrationUnit(
                    category=category,
                    name=name,
                    timestamp=self.allocator.next(),
                    payload=payload,
                ))

        logger.info("Planned %d migration units", len(plan))
        return plan

    def _schema_objects(self, label: str, rows_by_schema: Dict[str, List[Row]]):
        def generate(objects: SchemaObjects):
            for schema in objects.schemas:
                rows = rows_by_schema.get(schema) or []
                if rows:
                    yield f"create_{schema}_{label}", {"schema": schema, label: list(rows)}
        return generate

    def _tables(self, objects: SchemaObjects):
        for schema in objects.schemas:
            for table in objects.tables:
                if table.schema != schema:
                    continue
                if self.table_filter and table.name not in self.table_filter:
                    continue
                foreign_keys = [
                    fk for fk in objects.foreign_keys
                    if fk.table_schema == schema and fk.table_name == table.name
                ]
                yield f"create_{schema}_{table.name}_table", {
                    "schema": schema,
                    "table": table,
                    "foreign_keys": foreign_keys,
                }

    def _indexes(self, objects: SchemaObjects):
        grouped: Dict[tuple, List[IndexDescriptor]] = {}
        for index in objects.indexes:
            if index.schema not in objects.schemas:
                continue
            if self.table_filter and index.table not in self.table_filter:
                continue
            grouped.setdefault((index.schema, index.table), []).append(index)
        for (schema, table), indexes in grouped.items():
            yield f"create_{schema}_{table}_indexes", {"schema": schema, "table": table, "indexes": indexes}

    def _foreign_keys(self, objects: SchemaObjects):
        yield "create_foreign_keys", {"foreign_keys": list(objects.foreign_keys)}

    def _seeders(self, objects: SchemaObjects):
        yield "add_init_records", {}
