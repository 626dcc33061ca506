"""Abstract base class for the catalog collaborator."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Row = Dict[str, Any]


class CatalogSource(ABC):
    """Supplies raw catalog rows; one instance per run.

    Required queries (schemas, tables, columns, indexes, foreign keys,
    relationships) should raise on failure. Optional metadata queries may
    raise too; callers contain those failures.
    """

    # Override in subclasses to exclude system schemas
    EXCLUDED_SCHEMAS: set = {"information_schema", "pg_catalog", "pg_toast"}

    @abstractmethod
    async def connect(self):
        """Open the underlying connection."""
        pass

    @abstractmethod
    async def close(self):
        """Close the underlying connection."""
        pass

    @abstractmethod
    async def schemas(self) -> List[str]:
        """Get all user schemas.

        Returns:
            List of schema names (excluding system schemas)
        """
        pass

    @abstractmethod
    async def tables(self, schema: str) -> List[str]:
        """Get all base tables in a schema.

        Args:
            schema: Schema name

        Returns:
            List of table names
        """
        pass

    @abstractmethod
    async def columns(self, schema: str, table: str) -> List[Row]:
        """Get information_schema column rows for a table.

        Args:
            schema: Schema name
            table: Table name

        Returns:
            Rows with table_schema, table_name, column_name, data_type,
            udt_name, is_nullable, column_default, character_maximum_length,
            numeric_precision, numeric_scale, constraint_type, column_comment
        """
        pass

    @abstractmethod
    async def element_types(self, schema: str, table: str) -> List[Row]:
        """Get array element types and enum labels per column.

        Returns:
            Rows with columnName, dataType, udtName, elementType, enumData
        """
        pass

    @abstractmethod
    async def indexes(self) -> List[Row]:
        """Get every index in the database."""
        pass

    @abstractmethod
    async def foreign_keys(self) -> List[Row]:
        """Get every foreign key column pair in the database."""
        pass

    @abstractmethod
    async def relationships(self) -> List[Row]:
        """Get the pre-classified relationship list.

        Returns:
            Rows with relationship_type, source_*, target_*, junction_*
        """
        pass

    @abstractmethod
    async def composite_type(self, schema: str, table: str, column: str) -> Optional[Row]:
        """Composite type of a column, or None if it is not one.

        Returns:
            Row with typeName, attributeNames, attributeTypes
        """
        pass

    @abstractmethod
    async def domain_type(self, schema: str, table: str, column: str) -> List[Row]:
        """Domain rows of a column (one per constraint); empty if not a domain."""
        pass

    async def geometry_types(self, schema: str, table: str) -> List[Row]:
        """PostGIS geometry/geography facets (column_name, type, srid)."""
        return []

    async def longest_json(self, schema: str, table: str, column: str) -> Optional[str]:
        """Largest stored JSON payload of a column as text, if any."""
        return None

    # Schema objects only needed for migration planning

    async def functions(self, schema: str) -> List[Row]:
        return []

    async def composite_types(self, schema: str) -> List[Row]:
        return []

    async def domain_types(self, schema: str) -> List[Row]:
        return []

    async def views(self, schema: str) -> List[Row]:
        return []

    async def triggers(self, schema: str) -> List[Row]:
        return []

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
