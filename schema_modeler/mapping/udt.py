"""Resolution of enum, composite and domain metadata for a column."""

import asyncio
import logging
from typing import List, Mapping, Optional, Any

from schema_modeler.catalog.base import CatalogSource
from schema_modeler.catalog.models import (
    CompositeTypeDescriptor,
    DomainConstraint,
    DomainTypeDescriptor,
    EnumDescriptor,
    UserDefinedType,
)
from schema_modeler.catalog.rows import RawElementType, parse_text_array

logger = logging.getLogger(__name__)


def enum_from_element(element: Optional[RawElementType]) -> Optional[EnumDescriptor]:
    """Enum descriptor when the catalog reported literal values for the column."""
    if element is None or not element.has_enum_values:
        return None
    return EnumDescriptor(values=tuple(parse_text_array(element.enum_data)))


def composite_from_row(row: Optional[Mapping[str, Any]]) -> Optional[CompositeTypeDescriptor]:
    if not row:
        return None
    return CompositeTypeDescriptor(
        type_name=row["typeName"],
        attribute_names=tuple(parse_text_array(row.get("attributeNames"))),
        attribute_types=tuple(parse_text_array(row.get("attributeTypes"))),
    )


def domain_from_rows(rows: List[Mapping[str, Any]]) -> Optional[DomainTypeDescriptor]:
    if not rows:
        return None
    first = rows[0]
    constraints = tuple(
        DomainConstraint(
            name=row.get("constraint_name"),
            check_expression=row.get("check_expression") or None,
            not_null=row.get("constraint_type") == "n",
            default=row.get("default_value") or None,
        )
        for row in rows
        if row.get("constraint_name")
    )
    return DomainTypeDescriptor(
        domain_name=first["domain_name"],
        base_type=first.get("base_type") or "",
        constraints=constraints,
    )


class UserDefinedTypeResolver:
    """Resolves a column to at most one user-defined type descriptor.

    Precedence is enum, then composite, then domain. A failed catalog lookup
    for one category makes that category resolve to None; it never aborts
    the run.
    """

    def __init__(self, catalog: CatalogSource):
        self.catalog = catalog

    async def resolve(
        self,
        schema: str,
        table: str,
        element: Optional[RawElementType],
    ) -> Optional[UserDefinedType]:
        if element is None:
            return None

        enum = enum_from_element(element)
        if enum is not None:
            return enum

        composite, domain = await asyncio.gather(
            self.resolve_composite(schema, table, element.column_name),
            self.resolve_domain(schema, table, element.column_name),
        )
        return composite or domain

    async def resolve_composite(self, schema: str, table: str, column: str) -> Optional[CompositeTypeDescriptor]:
        try:
            row = await self.catalog.composite_type(schema, table, column)
            return composite_from_row(row)
        except Exception as e:
            logger.warning(
                "Composite type lookup failed for %s.%s.%s, treating as non-composite: %s",
                schema, table, column, e,
            )
            return None

    async def resolve_domain(self, schema: str, table: str, column: str) -> Optional[DomainTypeDescriptor]:
        try:
            rows = await self.catalog.domain_type(schema, table, column)
            return domain_from_rows(rows)
        except Exception as e:
            logger.warning(
                "Domain type lookup failed for %s.%s.%s, treating as non-domain: %s",
                schema, table, column, e,
            )
            return None
