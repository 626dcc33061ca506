"""Flat key-value contexts handed to the external template renderer."""

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from schema_modeler.analysis import naming
from schema_modeler.catalog.models import (
    ColumnDescriptor,
    EnumDescriptor,
    ForeignKeyDescriptor,
    RelationshipDescriptor,
    RelationshipKind,
    SchemaModel,
    TableModel,
    to_plain,
)
from schema_modeler.mapping.type_mapper import TypeMapper
from schema_modeler.migration.ordering import MigrationPlan, MigrationUnit
from schema_modeler.models import GeneratorOptions

_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z_$]")


def enum_member_name(value: str, position: int) -> str:
    member = naming.pascal_case(_NON_IDENTIFIER.sub("_", value))
    if not member:
        return f"Value{position}"
    if member[0].isdigit():
        return f"_{member}"
    return member


def enum_block(name: str, values: Sequence[str], as_union: bool = False) -> str:
    """``export enum`` block, or a string-literal union when ``as_union``."""
    if as_union:
        union = " | ".join(f"'{v}'" for v in values) or "never"
        return f"export type {name} = {union};"
    members = "\n".join(
        f"  {enum_member_name(v, i)} = '{v}',"
        for i, v in enumerate(values)
    )
    return f"export enum {name} {{\n{members}\n}}"


def foreign_key_target(table: TableModel, column: ColumnDescriptor) -> Optional[Tuple[str, str]]:
    """(ModelName, propertyName) the column references, if it is a foreign key."""
    for fk in table.foreign_keys:
        if fk.column_name == column.name:
            return naming.model_name(fk.referenced.table), naming.property_name(fk.referenced.column)
    return None


def column_context(table: TableModel, column: ColumnDescriptor, options: GeneratorOptions) -> Dict[str, Any]:
    return {
        "name": column.name,
        "property": column.property_name,
        "declared_type": TypeMapper.declared_type(
            column,
            add_null_type=options.model.add_null_type_for_nullable,
            foreign_key_target=foreign_key_target(table, column),
        ),
        "orm_type": column.orm_type,
        "orm_type_expression": column.orm_type_expression,
        "host_type": column.host_type,
        "marker": column.mapping.marker.value,
        "annotation": column.mapping.annotation,
        "allow_null": column.flags.nullable,
        "primary_key": column.flags.primary,
        "auto_increment": column.flags.auto_increment,
        "default_now": column.flags.default_now,
        "default_value": column.default_value,
        "comment": column.comment,
    }


def model_context(table: TableModel, options: Optional[GeneratorOptions] = None) -> Dict[str, Any]:
    """Everything the model template needs for one table."""
    options = options or GeneratorOptions()
    as_union = options.model.replace_enums_with_types

    enums = []
    structured = []
    for column in table.columns:
        if isinstance(column.udt, EnumDescriptor):
            enums.append(enum_block(
                naming.enum_type_name(table.name, column.name),
                column.udt.values,
                as_union=as_union,
            ))
        if column.structured_type is not None:
            structured.append(column.structured_type.text)

    return {
        "schema": table.schema,
        "table": table.name,
        "model_name": table.model_name,
        "columns": [column_context(table, c, options) for c in table.columns],
        "enums": enums,
        "structured_types": structured,
        "associations": [association_declaration(r) for r in table.relationships],
        "dropped_aliases": table.dropped_aliases,
    }


# -- associations -----------------------------------------------------------

def association_declaration(relationship: RelationshipDescriptor) -> str:
    source = naming.model_name(relationship.source.table)
    target = naming.model_name(relationship.target.table)
    return f"{relationship.alias}: Association<{source}, {target}>;"


def association_initializer(relationship: RelationshipDescriptor) -> str:
    """One ``Model.method(Other, {...});`` line for the init file."""
    source, target = relationship.source, relationship.target
    source_model = naming.model_name(source.table)
    target_model = naming.model_name(target.table)
    alias = relationship.alias

    if relationship.kind is RelationshipKind.BELONGS_TO:
        return (
            f"{source_model}.belongsTo({target_model}, "
            f"{{ as: '{alias}', foreignKey: '{naming.property_name(source.column)}' }});"
        )
    if relationship.kind is RelationshipKind.MANY_TO_MANY:
        junction_model = naming.model_name(relationship.junction.table)
        foreign_key = naming.camel_case(f"{naming.singularize(source.table)}_{source.column}")
        other_key = naming.camel_case(f"{naming.singularize(target.table)}_{target.column}")
        return (
            f"{source_model}.belongsToMany({target_model}, {{ as: '{alias}', through: {junction_model}, "
            f"foreignKey: '{foreign_key}', otherKey: '{other_key}' }});"
        )
    method = "hasOne" if relationship.kind is RelationshipKind.HAS_ONE else "hasMany"
    return (
        f"{target_model}.{method}({source_model}, "
        f"{{ as: '{alias}', foreignKey: '{naming.property_name(source.column)}' }});"
    )


def associations_context(model: SchemaModel) -> Dict[str, Any]:
    """Imports and initializer lines for the associations init file.

    Only relationships that survived per-table alias deduplication are
    emitted.
    """
    lines: List[str] = []
    models = set()
    for table in model.tables:
        for relationship in table.relationships:
            lines.append(association_initializer(relationship))
            models.add(naming.model_name(relationship.source.table))
            models.add(naming.model_name(relationship.target.table))
            if relationship.junction is not None:
                models.add(naming.model_name(relationship.junction.table))
    return {
        "models": sorted(models),
        "associations": lines,
    }


# -- migrations -------------------------------------------------------------

def foreign_key_context(fk: ForeignKeyDescriptor) -> Dict[str, Any]:
    return {
        "name": fk.constraint_name,
        "table": f"{fk.table_schema}.{fk.table_name}",
        "column": fk.column_name,
        "references": f"{fk.referenced.schema}.{fk.referenced.table}",
        "references_column": fk.referenced.column,
        "on_update": fk.update_rule,
        "on_delete": fk.delete_rule,
    }


def migration_context(unit: MigrationUnit) -> Dict[str, Any]:
    context: Dict[str, Any] = {
        "name": unit.name,
        "category": unit.category.value,
        "timestamp": unit.timestamp,
        "file_stem": unit.file_stem,
    }
    for key, value in unit.payload.items():
        if key == "foreign_keys":
            context[key] = [foreign_key_context(fk) for fk in value]
        else:
            context[key] = to_plain(value)
    return context


def plan_context(plan: MigrationPlan) -> List[Dict[str, Any]]:
    return [migration_context(unit) for unit in plan]
