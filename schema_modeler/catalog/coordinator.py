"""Concurrent catalog fetching with schema/table filtering."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, TypeVar

from schema_modeler.catalog.base import CatalogSource, Row
from schema_modeler.catalog.models import ForeignKeyDescriptor, IndexDescriptor
from schema_modeler.catalog.rows import RawColumn, RawElementType, RawGeoType, RawRelationship, RawTable
from schema_modeler.errors import CatalogUnavailableError
from schema_modeler.mapping.columns import needs_sample
from schema_modeler.models import GeneratorOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class FetchedCatalog:
    """Result of the parallel fetch phase, already filtered."""
    schemas: List[str] = field(default_factory=list)
    indexes: List[IndexDescriptor] = field(default_factory=list)
    relationships: List[RawRelationship] = field(default_factory=list)
    foreign_keys: List[ForeignKeyDescriptor] = field(default_factory=list)


class SchemaFetchCoordinator:
    """Pulls raw catalog slices and applies the schema/table allow-lists.

    Schemas, indexes, relationships and foreign keys have no ordering
    dependency and are fetched concurrently. A failed required query
    cancels its siblings and surfaces as CatalogUnavailableError.
    """

    def __init__(self, catalog: CatalogSource, options: GeneratorOptions):
        self.catalog = catalog
        self.options = options

    async def _required(self, query: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except CatalogUnavailableError:
            raise
        except Exception as e:
            raise CatalogUnavailableError(query, e) from e

    async def fetch(self) -> FetchedCatalog:
        """Fetch and filter the four independent catalog slices."""
        logger.info("Fetching catalog: schemas, indexes, relationships, foreign keys")
        tasks = [
            asyncio.ensure_future(self._required("schemas", self.catalog.schemas())),
            asyncio.ensure_future(self._required("indexes", self.catalog.indexes())),
            asyncio.ensure_future(self._required("relationships", self.catalog.relationships())),
            asyncio.ensure_future(self._required("foreign_keys", self.catalog.foreign_keys())),
        ]
        try:
            schemas, index_rows, relationship_rows, fk_rows = await asyncio.gather(*tasks)
        except CatalogUnavailableError as e:
            for task in tasks:
                task.cancel()
            logger.error("Catalog fetch aborted: %s", e.message)
            raise

        try:
            fetched = FetchedCatalog(
                schemas=self.filter_schemas(schemas),
                indexes=self.filter_indexes([IndexDescriptor.from_row(r) for r in index_rows]),
                relationships=self.filter_relationships([RawRelationship.from_row(r) for r in relationship_rows]),
                foreign_keys=self.filter_foreign_keys([ForeignKeyDescriptor.from_row(r) for r in fk_rows]),
            )
        except KeyError as e:
            raise CatalogUnavailableError("catalog rows", e, {"missing_key": str(e)}) from e

        logger.info(
            "Catalog fetched: %d schemas, %d indexes, %d relationships, %d foreign keys",
            len(fetched.schemas), len(fetched.indexes), len(fetched.relationships), len(fetched.foreign_keys),
        )
        return fetched

    # -- filters ----------------------------------------------------------

    def filter_schemas(self, schemas: List[str]) -> List[str]:
        if not self.options.schemas:
            return list(schemas)
        return [s for s in schemas if s in self.options.schemas]

    def filter_tables(self, tables: List[str]) -> List[str]:
        if not self.options.tables:
            return list(tables)
        return [t for t in tables if t in self.options.tables]

    def filter_indexes(self, indexes: List[IndexDescriptor]) -> List[IndexDescriptor]:
        return [i for i in indexes if self.options.passes_filter(i.schema, i.table)]

    def filter_foreign_keys(self, foreign_keys: List[ForeignKeyDescriptor]) -> List[ForeignKeyDescriptor]:
        return [fk for fk in foreign_keys if self.options.passes_filter(fk.table_schema, fk.table_name)]

    def filter_relationships(self, relationships: List[RawRelationship]) -> List[RawRelationship]:
        """Both endpoints must pass the allow-lists to keep the row."""
        return [
            r for r in relationships
            if self.options.passes_filter(r.source_schema, r.source_table)
            and self.options.passes_filter(r.target_schema, r.target_table)
        ]

    # -- per-table --------------------------------------------------------

    async def fetch_tables(self, schema: str) -> List[str]:
        tables = await self._required(f"tables:{schema}", self.catalog.tables(schema))
        return self.filter_tables(tables)

    async def fetch_table(self, schema: str, table: str) -> RawTable:
        """Columns and element types (required), geometry facets and JSON samples (optional)."""
        column_rows, element_rows = await asyncio.gather(
            self._required(f"columns:{schema}.{table}", self.catalog.columns(schema, table)),
            self._required(f"element_types:{schema}.{table}", self.catalog.element_types(schema, table)),
        )
        raw = RawTable(
            schema=schema,
            name=table,
            columns=[RawColumn.from_row(r) for r in column_rows],
            element_types=[RawElementType.from_row(r) for r in element_rows],
            geo_types=await self._geometry_types(schema, table),
        )
        for column in raw.columns:
            if needs_sample(column):
                sample = await self._longest_json(schema, table, column.name)
                if sample is not None:
                    raw.samples[column.name] = sample
        return raw

    async def _geometry_types(self, schema: str, table: str) -> List[RawGeoType]:
        try:
            rows = await self.catalog.geometry_types(schema, table)
        except Exception as e:
            logger.warning("Geometry metadata unavailable for %s.%s, continuing without: %s", schema, table, e)
            return []
        return [RawGeoType.from_row(r) for r in rows]

    async def _longest_json(self, schema: str, table: str, column: str):
        try:
            return await self.catalog.longest_json(schema, table, column)
        except Exception as e:
            logger.warning("Could not sample JSON for %s.%s.%s: %s", schema, table, column, e)
            return None

    # -- migration-only objects ------------------------------------------

    async def fetch_schema_objects(self, schemas: List[str]) -> Dict[str, Dict[str, List[Row]]]:
        """Functions, composites, domains, views and triggers keyed by category then schema."""
        sources = {
            "functions": self.catalog.functions,
            "composites": self.catalog.composite_types,
            "domains": self.catalog.domain_types,
            "views": self.catalog.views,
            "triggers": self.catalog.triggers,
        }
        result: Dict[str, Dict[str, List[Row]]] = {label: {} for label in sources}
        for label, source in sources.items():
            for schema in schemas:
                result[label][schema] = await self._optional_rows(label, schema, source(schema))
        return result

    async def _optional_rows(self, label: str, schema: str, awaitable: Awaitable[Any]) -> List[Row]:
        try:
            return list(await awaitable)
        except Exception as e:
            logger.warning("Could not fetch %s for schema %s: %s", label, schema, e)
            return []
