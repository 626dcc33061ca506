"""PostgreSQL catalog source backed by asyncpg."""

import logging
from typing import Any, List, Optional

import asyncpg

from schema_modeler.catalog.base import CatalogSource, Row
from schema_modeler.errors import CatalogUnavailableError, ConfigurationError

logger = logging.getLogger(__name__)


SCHEMAS_SQL = """
    SELECT nspname AS name
    FROM pg_namespace
    WHERE nspname NOT IN ('pg_catalog', 'information_schema', 'pg_toast')
    AND nspname NOT LIKE 'pg_temp_%'
    AND nspname NOT LIKE 'pg_toast_temp_%'
    ORDER BY nspname
"""

TABLES_SQL = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = $1
    AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

COLUMNS_SQL = """
    SELECT
        c.table_schema,
        c.table_name,
        c.column_name,
        c.ordinal_position,
        c.data_type,
        c.udt_name,
        c.is_nullable,
        c.is_identity,
        c.column_default,
        c.character_maximum_length,
        c.numeric_precision,
        c.numeric_scale,
        (
            SELECT tc.constraint_type
            FROM information_schema.key_column_usage kcu
            JOIN information_schema.table_constraints tc
              ON tc.constraint_name = kcu.constraint_name
             AND tc.table_schema = kcu.table_schema
            WHERE kcu.table_schema = c.table_schema
            AND kcu.table_name = c.table_name
            AND kcu.column_name = c.column_name
            ORDER BY CASE tc.constraint_type
                WHEN 'PRIMARY KEY' THEN 0
                WHEN 'UNIQUE' THEN 1
                ELSE 2
            END
            LIMIT 1
        ) AS constraint_type,
        col_description(
            (quote_ident(c.table_schema) || '.' || quote_ident(c.table_name))::regclass,
            c.ordinal_position
        ) AS column_comment
    FROM information_schema.columns c
    WHERE c.table_schema = $1
    AND c.table_name = $2
    ORDER BY c.ordinal_position
"""

ELEMENT_TYPES_SQL = """
    SELECT
        c.column_name AS "columnName",
        LOWER(c.data_type) AS "dataType",
        c.udt_name AS "udtName",
        e.data_type AS "elementType",
        (
            SELECT ARRAY_AGG(pe.enumlabel ORDER BY pe.enumsortorder)
            FROM pg_catalog.pg_type pt
            JOIN pg_catalog.pg_enum pe ON pt.oid = pe.enumtypid
            WHERE pt.typname = c.udt_name
            OR '_' || pt.typname = c.udt_name
        ) AS "enumData"
    FROM information_schema.columns c
    LEFT JOIN information_schema.element_types e ON (
        (c.table_catalog, c.table_schema, c.table_name, 'TABLE', c.dtd_identifier)
        = (e.object_catalog, e.object_schema, e.object_name, e.object_type, e.collection_type_identifier)
    )
    WHERE c.table_schema = $1
    AND c.table_name = $2
    ORDER BY c.ordinal_position
"""

COMPOSITE_TYPE_SQL = """
    SELECT
        t.typname AS "typeName",
        ARRAY_AGG(a.attname ORDER BY a.attnum) AS "attributeNames",
        ARRAY_AGG(format_type(a.atttypid, a.atttypmod) ORDER BY a.attnum) AS "attributeTypes"
    FROM pg_type t
    JOIN pg_namespace n ON n.oid = t.typnamespace
    JOIN pg_attribute a ON a.attrelid = t.typrelid
    JOIN pg_class c ON c.relname = $2
    JOIN pg_namespace cn ON cn.oid = c.relnamespace AND cn.nspname = $1
    JOIN pg_attribute ca ON ca.attrelid = c.oid AND ca.attname = $3
    WHERE t.typtype = 'c'
    AND t.oid = ca.atttypid
    GROUP BY t.typname
"""

DOMAIN_TYPE_SQL = """
    SELECT
        t.typname AS domain_name,
        bt.typname AS base_type,
        COALESCE(pg_get_constraintdef(co.oid), '') AS check_expression,
        co.conname AS constraint_name,
        co.contype AS constraint_type,
        t.typdefault AS default_value
    FROM pg_type t
    JOIN pg_attribute a ON a.atttypid = t.oid
    JOIN pg_class c ON c.oid = a.attrelid
    JOIN pg_namespace n ON n.oid = c.relnamespace
    LEFT JOIN pg_type bt ON t.typbasetype = bt.oid
    LEFT JOIN pg_constraint co ON co.contypid = t.oid
    WHERE n.nspname = $1
    AND c.relname = $2
    AND a.attname = $3
    AND t.typtype = 'd'
"""

GEOMETRY_TYPES_SQL = """
    SELECT f_geometry_column AS column_name, type, srid
    FROM geometry_columns
    WHERE f_table_schema = $1 AND f_table_name = $2
    UNION ALL
    SELECT f_geography_column AS column_name, type, srid
    FROM geography_columns
    WHERE f_table_schema = $1 AND f_table_name = $2
"""

INDEXES_SQL = """
    SELECT
        n.nspname AS schema_name,
        t.relname AS table_name,
        i.relname AS index_name,
        am.amname AS index_type,
        CASE
            WHEN ix.indisprimary THEN 'PRIMARY KEY'
            WHEN ix.indisunique THEN 'UNIQUE'
            ELSE 'INDEX'
        END AS constraint_type,
        STRING_AGG(a.attname, ',' ORDER BY array_position(ix.indkey, a.attnum)) AS columns,
        obj_description(i.oid, 'pg_class') AS index_comment
    FROM pg_index ix
    JOIN pg_class i ON i.oid = ix.indexrelid
    JOIN pg_class t ON t.oid = ix.indrelid
    JOIN pg_namespace n ON n.oid = t.relnamespace
    JOIN pg_am am ON am.oid = i.relam
    JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = ANY(ix.indkey)
    WHERE n.nspname NOT IN ('pg_catalog', 'information_schema', 'pg_toast')
    AND t.relkind = 'r'
    GROUP BY n.nspname, t.relname, i.relname, i.oid, am.amname, ix.indisprimary, ix.indisunique
    ORDER BY n.nspname, t.relname, i.relname
"""

FOREIGN_KEYS_SQL = """
    SELECT
        tc.constraint_schema AS fk_schema,
        tc.constraint_name AS fk_constraint_name,
        kcu.table_schema,
        kcu.table_name,
        kcu.column_name,
        col.column_default,
        ccu.table_schema AS referenced_schema,
        ccu.table_name AS referenced_table,
        ccu.column_name AS referenced_column,
        rc.update_rule,
        rc.delete_rule,
        rc.match_option,
        tc.is_deferrable = 'YES' AS is_deferrable,
        tc.initially_deferred = 'YES' AS is_deferred,
        obj_description(pc.oid, 'pg_constraint') AS constraint_comment,
        obj_description((quote_ident(kcu.table_schema) || '.' || quote_ident(kcu.table_name))::regclass, 'pg_class')
            AS source_table_comment,
        col_description((quote_ident(kcu.table_schema) || '.' || quote_ident(kcu.table_name))::regclass, col.ordinal_position)
            AS source_column_comment,
        obj_description((quote_ident(ccu.table_schema) || '.' || quote_ident(ccu.table_name))::regclass, 'pg_class')
            AS referenced_table_comment,
        NULL AS referenced_column_comment
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
      ON kcu.constraint_name = tc.constraint_name AND kcu.table_schema = tc.table_schema
    JOIN information_schema.constraint_column_usage ccu
      ON ccu.constraint_name = tc.constraint_name AND ccu.constraint_schema = tc.constraint_schema
    JOIN information_schema.referential_constraints rc
      ON rc.constraint_name = tc.constraint_name AND rc.constraint_schema = tc.constraint_schema
    JOIN information_schema.columns col
      ON col.table_schema = kcu.table_schema AND col.table_name = kcu.table_name AND col.column_name = kcu.column_name
    LEFT JOIN pg_constraint pc ON pc.conname = tc.constraint_name
    WHERE tc.constraint_type = 'FOREIGN KEY'
    ORDER BY kcu.table_schema, kcu.table_name, tc.constraint_name
"""

RELATIONSHIPS_SQL = """
    WITH fk AS (
        SELECT
            kcu.table_schema AS source_schema,
            kcu.table_name AS source_table,
            kcu.column_name AS source_column,
            ccu.table_schema AS target_schema,
            ccu.table_name AS target_table,
            ccu.column_name AS target_column
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage kcu
          ON kcu.constraint_name = tc.constraint_name AND kcu.table_schema = tc.table_schema
        JOIN information_schema.constraint_column_usage ccu
          ON ccu.constraint_name = tc.constraint_name AND ccu.constraint_schema = tc.constraint_schema
        WHERE tc.constraint_type = 'FOREIGN KEY'
    ),
    single_unique AS (
        SELECT kcu.table_schema, kcu.table_name, MIN(kcu.column_name) AS column_name
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage kcu
          ON kcu.constraint_name = tc.constraint_name AND kcu.table_schema = tc.table_schema
        WHERE tc.constraint_type IN ('UNIQUE', 'PRIMARY KEY')
        GROUP BY kcu.table_schema, kcu.table_name, tc.constraint_name
        HAVING COUNT(*) = 1
    ),
    junctions AS (
        SELECT source_schema, source_table
        FROM fk
        GROUP BY source_schema, source_table
        HAVING COUNT(*) = 2 AND COUNT(DISTINCT target_table) = 2
    )
    SELECT 'BelongsTo' AS relationship_type, fk.*, NULL AS junction_schema, NULL AS junction_table
    FROM fk
    UNION ALL
    SELECT
        CASE WHEN su.column_name IS NOT NULL THEN 'HasOne' ELSE 'HasMany' END,
        fk.*, NULL, NULL
    FROM fk
    LEFT JOIN single_unique su
      ON su.table_schema = fk.source_schema
     AND su.table_name = fk.source_table
     AND su.column_name = fk.source_column
    UNION ALL
    SELECT
        'ManyToMany',
        a.target_schema, a.target_table, a.target_column,
        b.target_schema, b.target_table, b.target_column,
        a.source_schema, a.source_table
    FROM fk a
    JOIN fk b
      ON a.source_schema = b.source_schema
     AND a.source_table = b.source_table
     AND a.target_table <> b.target_table
    JOIN junctions j
      ON j.source_schema = a.source_schema AND j.source_table = a.source_table
"""

LONGEST_JSON_SQL = """
    SELECT {column}::text AS payload
    FROM {schema}.{table}
    WHERE {column} IS NOT NULL
    ORDER BY LENGTH({column}::text) DESC
    LIMIT 1
"""

FUNCTIONS_SQL = """
    SELECT
        n.nspname AS schema,
        p.proname AS name,
        pg_get_function_arguments(p.oid) AS arguments,
        pg_get_function_result(p.oid) AS return_type,
        pg_get_functiondef(p.oid) AS definition
    FROM pg_proc p
    JOIN pg_namespace n ON n.oid = p.pronamespace
    LEFT JOIN pg_depend d ON d.objid = p.oid AND d.deptype = 'e'
    WHERE n.nspname = $1
    AND p.prokind = 'f'
    AND d.objid IS NULL
    ORDER BY p.proname
"""

COMPOSITE_TYPES_SQL = """
    SELECT
        n.nspname AS schema,
        t.typname AS name,
        ARRAY_AGG(a.attname ORDER BY a.attnum) AS attribute_names,
        ARRAY_AGG(format_type(a.atttypid, a.atttypmod) ORDER BY a.attnum) AS attribute_types
    FROM pg_type t
    JOIN pg_namespace n ON n.oid = t.typnamespace
    JOIN pg_class c ON c.oid = t.typrelid AND c.relkind = 'c'
    JOIN pg_attribute a ON a.attrelid = t.typrelid AND a.attnum > 0
    WHERE n.nspname = $1
    AND t.typtype = 'c'
    GROUP BY n.nspname, t.typname
    ORDER BY t.typname
"""

DOMAIN_TYPES_SQL = """
    SELECT
        n.nspname AS schema,
        t.typname AS name,
        format_type(t.typbasetype, t.typtypmod) AS base_type,
        t.typnotnull AS not_null,
        t.typdefault AS default_value
    FROM pg_type t
    JOIN pg_namespace n ON n.oid = t.typnamespace
    WHERE n.nspname = $1
    AND t.typtype = 'd'
    ORDER BY t.typname
"""

VIEWS_SQL = """
    SELECT schemaname AS schema, viewname AS name, definition
    FROM pg_views
    WHERE schemaname = $1
    ORDER BY viewname
"""

TRIGGERS_SQL = """
    SELECT
        n.nspname AS schema,
        t.tgname AS name,
        c.relname AS table_name,
        pg_get_triggerdef(t.oid) AS definition
    FROM pg_trigger t
    JOIN pg_class c ON c.oid = t.tgrelid
    JOIN pg_namespace n ON n.oid = c.relnamespace
    WHERE n.nspname = $1
    AND NOT t.tgisinternal
    ORDER BY c.relname, t.tgname
"""


def _quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


class PostgresCatalog(CatalogSource):
    """Catalog source reading information_schema and pg_catalog via asyncpg."""

    def __init__(self, dsn: Optional[str], pool_size: int = 4, command_timeout: float = 60.0):
        """Initialize the catalog.

        Args:
            dsn: PostgreSQL connection string
            pool_size: Maximum pooled connections; fetches run concurrently
            command_timeout: Per-query timeout in seconds
        """
        if not dsn:
            raise ConfigurationError(
                "No database URL configured. Pass --database-url or set SCHEMA_MODELER_DATABASE_URL."
            )
        self.dsn = dsn
        self.pool_size = pool_size
        self.command_timeout = command_timeout
        self._pool: Optional[asyncpg.Pool] = None

    async def connect(self):
        if self._pool is not None:
            return self._pool
        logger.info("Connecting to catalog database")
        try:
            self._pool = await asyncpg.create_pool(
                self.dsn,
                min_size=1,
                max_size=self.pool_size,
                command_timeout=self.command_timeout,
            )
        except (OSError, asyncpg.PostgresError) as e:
            raise CatalogUnavailableError("connect", e) from e
        return self._pool

    async def close(self):
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def _fetch(self, query: str, *args: Any) -> List[Row]:
        pool = await self.connect()
        async with pool.acquire() as conn:
            rows = await conn.fetch(query, *args)
        return [dict(r) for r in rows]

    async def schemas(self) -> List[str]:
        rows = await self._fetch(SCHEMAS_SQL)
        return [r["name"] for r in rows if r["name"] not in self.EXCLUDED_SCHEMAS]

    async def tables(self, schema: str) -> List[str]:
        rows = await self._fetch(TABLES_SQL, schema)
        return [r["table_name"] for r in rows]

    async def columns(self, schema: str, table: str) -> List[Row]:
        return await self._fetch(COLUMNS_SQL, schema, table)

    async def element_types(self, schema: str, table: str) -> List[Row]:
        return await self._fetch(ELEMENT_TYPES_SQL, schema, table)

    async def indexes(self) -> List[Row]:
        return await self._fetch(INDEXES_SQL)

    async def foreign_keys(self) -> List[Row]:
        return await self._fetch(FOREIGN_KEYS_SQL)

    async def relationships(self) -> List[Row]:
        return await self._fetch(RELATIONSHIPS_SQL)

    async def composite_type(self, schema: str, table: str, column: str) -> Optional[Row]:
        rows = await self._fetch(COMPOSITE_TYPE_SQL, schema, table, column)
        return rows[0] if rows else None

    async def domain_type(self, schema: str, table: str, column: str) -> List[Row]:
        return await self._fetch(DOMAIN_TYPE_SQL, schema, table, column)

    async def geometry_types(self, schema: str, table: str) -> List[Row]:
        return await self._fetch(GEOMETRY_TYPES_SQL, schema, table)

    async def longest_json(self, schema: str, table: str, column: str) -> Optional[str]:
        query = LONGEST_JSON_SQL.format(
            schema=_quote_ident(schema),
            table=_quote_ident(table),
            column=_quote_ident(column),
        )
        rows = await self._fetch(query)
        return rows[0]["payload"] if rows else None

    async def functions(self, schema: str) -> List[Row]:
        return await self._fetch(FUNCTIONS_SQL, schema)

    async def composite_types(self, schema: str) -> List[Row]:
        return await self._fetch(COMPOSITE_TYPES_SQL, schema)

    async def domain_types(self, schema: str) -> List[Row]:
        return await self._fetch(DOMAIN_TYPES_SQL, schema)

    async def views(self, schema: str) -> List[Row]:
        return await self._fetch(VIEWS_SQL, schema)

    async def triggers(self, schema: str) -> List[Row]:
        return await self._fetch(TRIGGERS_SQL, schema)
