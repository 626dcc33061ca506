"""End-to-end introspection: fetch -> map -> classify -> SchemaModel."""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from schema_modeler.analysis import naming
from schema_modeler.analysis.relationships import AliasResolution, RelationshipClassifier, filter_relationships
from schema_modeler.catalog.base import CatalogSource
from schema_modeler.catalog.coordinator import FetchedCatalog, SchemaFetchCoordinator
from schema_modeler.catalog.models import SchemaModel, TableModel, UserDefinedType
from schema_modeler.catalog.rows import RawTable
from schema_modeler.mapping.columns import ColumnBuilder
from schema_modeler.mapping.type_mapper import TypeMapper
from schema_modeler.mapping.udt import UserDefinedTypeResolver
from schema_modeler.mapping.vocabulary import DEFAULT_VOCABULARY, TypeVocabulary
from schema_modeler.migration.ordering import MigrationOrderingEngine, MigrationPlan, SchemaObjects
from schema_modeler.migration.timestamps import TimestampAllocator
from schema_modeler.models import GeneratorOptions

logger = logging.getLogger(__name__)


class SchemaIntrospector:
    """Builds the intermediate model for one run.

    Only the fetch phase touches the catalog; mapping and classification
    are a single pass over fetched data.
    """

    def __init__(
        self,
        catalog: CatalogSource,
        options: Optional[GeneratorOptions] = None,
        vocabulary: TypeVocabulary = DEFAULT_VOCABULARY,
    ):
        self.catalog = catalog
        self.options = options or GeneratorOptions()
        self.coordinator = SchemaFetchCoordinator(catalog, self.options)
        self.udt_resolver = UserDefinedTypeResolver(catalog)
        self.column_builder = ColumnBuilder(TypeMapper(vocabulary))
        self.classifier = RelationshipClassifier(self.options.junction_max_columns)

    async def introspect(self) -> SchemaModel:
        fetched = await self.coordinator.fetch()

        tables: List[TableModel] = []
        for schema in fetched.schemas:
            for table_name in await self.coordinator.fetch_tables(schema):
                raw = await self.coordinator.fetch_table(schema, table_name)
                udts = await self.resolve_udts(raw)
                tables.append(self._table_model(raw, udts, fetched))

        model = SchemaModel(
            schemas=list(fetched.schemas),
            tables=tables,
            foreign_keys=list(fetched.foreign_keys),
            indexes=list(fetched.indexes),
        )
        self.attach_relationships(model, fetched)
        logger.info("Introspected %d tables in %d schemas", len(model.tables), len(model.schemas))
        return model

    async def resolve_udts(self, raw: RawTable) -> Dict[str, UserDefinedType]:
        """Enum/composite/domain descriptor per column, where one exists."""
        elements = [raw.element_for(c.name) for c in raw.columns]
        resolved = await asyncio.gather(*(
            self.udt_resolver.resolve(raw.schema, raw.name, element) for element in elements
        ))
        return {
            column.name: udt
            for column, udt in zip(raw.columns, resolved)
            if udt is not None
        }

    def _table_model(self, raw: RawTable, udts: Dict[str, UserDefinedType], fetched: FetchedCatalog) -> TableModel:
        return TableModel(
            schema=raw.schema,
            name=raw.name,
            model_name=naming.model_name(raw.name),
            columns=self.column_builder.build(raw, udts),
            indexes=[i for i in fetched.indexes if i.schema == raw.schema and i.table == raw.name],
            foreign_keys=[
                fk for fk in fetched.foreign_keys
                if fk.table_schema == raw.schema and fk.table_name == raw.name
            ],
        )

    def attach_relationships(self, model: SchemaModel, fetched: FetchedCatalog) -> Dict[Tuple[str, str], AliasResolution]:
        """Classify, filter and alias-deduplicate relationships per source table."""
        column_counts = {(t.schema, t.name): len(t.columns) for t in model.tables}
        classified = self.classifier.classify(fetched.foreign_keys, fetched.relationships, column_counts)
        model.relationships = filter_relationships(classified, self.options)

        resolutions = {}
        for table in model.tables:
            owned = [
                r for r in model.relationships
                if r.source.schema == table.schema and r.source.table == table.name
            ]
            resolution = self.classifier.resolve_aliases(owned)
            table.relationships = resolution.kept
            table.dropped_aliases = resolution.dropped
            resolutions[(table.schema, table.name)] = resolution
        return resolutions

    async def plan_migrations(
        self,
        model: SchemaModel,
        base: Optional[datetime] = None,
        quantum_seconds: int = 30,
    ) -> MigrationPlan:
        """Order migration units for an already introspected model."""
        objects = await self.coordinator.fetch_schema_objects(model.schemas)
        schema_objects = SchemaObjects(
            schemas=list(model.schemas),
            tables=list(model.tables),
            functions=objects["functions"],
            composites=objects["composites"],
            domains=objects["domains"],
            views=objects["views"],
            triggers=objects["triggers"],
            indexes=list(model.indexes),
            foreign_keys=list(model.foreign_keys),
        )
        engine = MigrationOrderingEngine(
            TimestampAllocator(base, quantum_seconds),
            self.options.migration_options(),
            table_filter=self.options.tables,
        )
        return engine.sequence(schema_objects)
