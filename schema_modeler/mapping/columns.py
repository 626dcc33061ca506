"""Builds immutable ColumnDescriptors from fetched table rows."""

import json
from typing import List, Mapping, Optional

from schema_modeler.analysis import naming
from schema_modeler.catalog.models import ColumnDescriptor, ColumnFlags, UserDefinedType
from schema_modeler.catalog.rows import RawColumn, RawTable
from schema_modeler.mapping.defaults import is_auto_increment, is_default_now, parse_default
from schema_modeler.mapping.type_mapper import TypeMapper
from schema_modeler.mapping.vocabulary import normalize_udt

JSON_NATIVE_TYPES = ("json", "jsonb")


def needs_sample(column: RawColumn) -> bool:
    """JSON columns whose default tells nothing about the payload shape."""
    if (column.data_type or "").strip().lower() not in JSON_NATIVE_TYPES:
        return False
    value = parse_default(column.column_default)
    return value is None or (isinstance(value, str) and value.strip() in ("", "{}", "null"))


class ColumnBuilder:
    """Turns one RawTable into ColumnDescriptors; no I/O."""

    def __init__(self, mapper: Optional[TypeMapper] = None):
        self.mapper = mapper or TypeMapper()

    def build(self, table: RawTable, udts: Optional[Mapping[str, UserDefinedType]] = None) -> List[ColumnDescriptor]:
        udts = udts or {}
        return [self.build_column(table, column, udts.get(column.name)) for column in table.columns]

    def build_column(self, table: RawTable, column: RawColumn, udt: Optional[UserDefinedType] = None) -> ColumnDescriptor:
        element = table.element_for(column.name)
        default_value = parse_default(column.column_default)

        mapping = self.mapper.map(
            column,
            udt=udt,
            geo=table.geo_for(column.name),
            sample=self._sample_for(table, column, default_value),
            enum_name=naming.enum_type_name(table.name, column.name),
            structured_name=naming.structured_type_name(table.name, column.name),
        )

        type_name = (element.udt_name if element else None) or column.udt_name or column.data_type
        flags = ColumnFlags(
            nullable=column.is_nullable,
            primary=(column.constraint or "").upper() == "PRIMARY KEY",
            auto_increment=is_auto_increment(column.column_default, column.is_identity),
            default_now=is_default_now(type_name, column.column_default),
        )

        return ColumnDescriptor(
            schema=table.schema,
            table=table.name,
            name=column.name,
            property_name=naming.property_name(column.name),
            native_type=(column.data_type or "").strip().lower(),
            udt_name=normalize_udt(column.udt_name),
            flags=flags,
            default_raw=column.column_default,
            default_value=default_value,
            mapping=mapping,
            udt=udt,
            comment=column.comment,
        )

    @staticmethod
    def _sample_for(table: RawTable, column: RawColumn, default_value) -> Optional[str]:
        if needs_sample(column):
            return table.samples.get(column.name)
        if isinstance(default_value, list):
            return json.dumps(default_value)
        if isinstance(default_value, str):
            return default_value
        return None
