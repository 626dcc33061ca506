"""Descriptor data models produced by introspection."""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from schema_modeler.catalog.rows import parse_text_array


# ---------------------------------------------------------------------------
# User-defined types
# ---------------------------------------------------------------------------

class ColumnClassification(str, Enum):
    """Exactly one of these holds per column."""
    ENUM = "enum"
    COMPOSITE = "composite"
    DOMAIN = "domain"
    PLAIN = "plain"


@dataclass(frozen=True)
class EnumDescriptor:
    """Enum literal values in catalog order."""
    values: Tuple[str, ...]

    @property
    def classification(self) -> ColumnClassification:
        return ColumnClassification.ENUM


@dataclass(frozen=True)
class CompositeTypeDescriptor:
    """Composite (row) type with index-aligned attribute names and types."""
    type_name: str
    attribute_names: Tuple[str, ...]
    attribute_types: Tuple[str, ...]

    def __post_init__(self):
        if len(self.attribute_names) != len(self.attribute_types):
            raise ValueError(
                f"Composite type '{self.type_name}' has {len(self.attribute_names)} "
                f"attribute names but {len(self.attribute_types)} attribute types"
            )

    @property
    def classification(self) -> ColumnClassification:
        return ColumnClassification.COMPOSITE

    @property
    def fields(self) -> List[Tuple[str, str]]:
        return list(zip(self.attribute_names, self.attribute_types))

    def describe_fields(self) -> str:
        """Human-readable ``name: type, ...`` list."""
        return ", ".join(f"{name}: {type_}" for name, type_ in self.fields)


@dataclass(frozen=True)
class DomainConstraint:
    """A named constraint attached to a domain."""
    name: Optional[str]
    check_expression: Optional[str] = None
    not_null: bool = False
    default: Optional[str] = None


@dataclass(frozen=True)
class DomainTypeDescriptor:
    """Domain over a base native type."""
    domain_name: str
    base_type: str
    constraints: Tuple[DomainConstraint, ...] = ()

    @property
    def classification(self) -> ColumnClassification:
        return ColumnClassification.DOMAIN


UserDefinedType = Union[EnumDescriptor, CompositeTypeDescriptor, DomainTypeDescriptor]


# ---------------------------------------------------------------------------
# Type mapping results
# ---------------------------------------------------------------------------

class OrmMarker(str, Enum):
    """How emission should treat the ORM expression."""
    NONE = "none"
    RAW = "raw"          # passthrough: custom getter/setter needed
    COMMENT = "comment"  # plain type plus a documentation comment


@dataclass(frozen=True)
class StructuredField:
    name: str
    type: str


@dataclass(frozen=True)
class StructuredType:
    """One named structural type synthesized from a JSON sample."""
    name: str
    fields: Tuple[StructuredField, ...] = ()
    is_open: bool = False

    def render(self) -> str:
        if self.is_open:
            return f"interface {self.name} {{\n  [key: string]: unknown;\n}}"
        body = "\n".join(f"  {f.name}: {f.type};" for f in self.fields)
        return f"interface {self.name} {{\n{body}\n}}"


@dataclass(frozen=True)
class StructuredTypeDefinition:
    """Root type plus its dependencies, dependencies first."""
    name: str
    types: Tuple[StructuredType, ...]
    is_array: bool = False

    @property
    def is_open(self) -> bool:
        return len(self.types) == 1 and self.types[0].is_open

    @property
    def text(self) -> str:
        return "\n\n".join(t.render() for t in self.types)


@dataclass(frozen=True)
class TypeMapping:
    """The (ormType, ormTypeExpression, hostType) triple for one column."""
    orm_type: str
    orm_type_expression: str
    host_type: str
    marker: OrmMarker = OrmMarker.NONE
    annotation: Optional[str] = None
    exact: bool = True
    structured_type: Optional[StructuredTypeDefinition] = None

    @property
    def triple(self) -> Tuple[str, str, str]:
        return (self.orm_type, self.orm_type_expression, self.host_type)


# ---------------------------------------------------------------------------
# Columns, keys, indexes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColumnFlags:
    nullable: bool = True
    primary: bool = False
    auto_increment: bool = False
    default_now: bool = False


@dataclass(frozen=True)
class ColumnDescriptor:
    """Represents one introspected column; immutable after creation."""
    schema: str
    table: str
    name: str
    property_name: str
    native_type: str
    udt_name: Optional[str]
    flags: ColumnFlags
    default_raw: Optional[str]
    default_value: Any
    mapping: TypeMapping
    udt: Optional[UserDefinedType] = None
    comment: Optional[str] = None

    @property
    def classification(self) -> ColumnClassification:
        if self.udt is None:
            return ColumnClassification.PLAIN
        return self.udt.classification

    @property
    def orm_type(self) -> str:
        return self.mapping.orm_type

    @property
    def orm_type_expression(self) -> str:
        return self.mapping.orm_type_expression

    @property
    def host_type(self) -> str:
        return self.mapping.host_type

    @property
    def structured_type(self) -> Optional[StructuredTypeDefinition]:
        return self.mapping.structured_type


@dataclass(frozen=True)
class ColumnRef:
    schema: str
    table: str
    column: str


@dataclass(frozen=True)
class TableRef:
    schema: str
    table: str


@dataclass(frozen=True)
class ForeignKeyDescriptor:
    """A foreign key constraint column pair."""
    constraint_name: str
    schema: str
    table_schema: str
    table_name: str
    column_name: str
    referenced: ColumnRef
    update_rule: Optional[str] = None
    delete_rule: Optional[str] = None
    match_option: Optional[str] = None
    is_deferrable: bool = False
    is_deferred: bool = False
    default_value: Optional[str] = None
    comment: Optional[str] = None
    source_table_comment: Optional[str] = None
    source_column_comment: Optional[str] = None
    referenced_table_comment: Optional[str] = None
    referenced_column_comment: Optional[str] = None

    @property
    def source(self) -> ColumnRef:
        return ColumnRef(self.table_schema, self.table_name, self.column_name)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ForeignKeyDescriptor":
        return cls(
            constraint_name=row["fk_constraint_name"],
            schema=row.get("fk_schema") or row["table_schema"],
            table_schema=row["table_schema"],
            table_name=row["table_name"],
            column_name=row["column_name"],
            referenced=ColumnRef(
                schema=row["referenced_schema"],
                table=row["referenced_table"],
                column=row["referenced_column"],
            ),
            update_rule=row.get("update_rule"),
            delete_rule=row.get("delete_rule"),
            match_option=row.get("match_option"),
            is_deferrable=bool(row.get("is_deferrable", False)),
            is_deferred=bool(row.get("is_deferred", False)),
            default_value=row.get("column_default"),
            comment=row.get("constraint_comment"),
            source_table_comment=row.get("source_table_comment"),
            source_column_comment=row.get("source_column_comment"),
            referenced_table_comment=row.get("referenced_table_comment"),
            referenced_column_comment=row.get("referenced_column_comment"),
        )


@dataclass(frozen=True)
class IndexDescriptor:
    schema: str
    table: str
    name: str
    type: Optional[str]
    constraint: Optional[str]
    columns: Tuple[str, ...]
    comment: Optional[str] = None

    @property
    def unique(self) -> bool:
        return (self.constraint or "").upper() in ("UNIQUE", "PRIMARY KEY")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "IndexDescriptor":
        return cls(
            schema=row["schema_name"],
            table=row["table_name"],
            name=row["index_name"],
            type=row.get("index_type"),
            constraint=row.get("constraint_type"),
            columns=tuple(parse_text_array(row.get("columns"))),
            comment=row.get("index_comment"),
        )


# ---------------------------------------------------------------------------
# Relationships
# ---------------------------------------------------------------------------

class RelationshipKind(str, Enum):
    BELONGS_TO = "BelongsTo"
    HAS_ONE = "HasOne"
    HAS_MANY = "HasMany"
    MANY_TO_MANY = "ManyToMany"


@dataclass(frozen=True)
class RelationshipDescriptor:
    """A classified relationship; junction present iff kind is ManyToMany."""
    kind: RelationshipKind
    source: ColumnRef
    target: ColumnRef
    junction: Optional[TableRef] = None
    alias: str = ""

    def __post_init__(self):
        if (self.kind is RelationshipKind.MANY_TO_MANY) != (self.junction is not None):
            raise ValueError(
                f"{self.kind.value} relationship {self.source.table}.{self.source.column} -> "
                f"{self.target.table}.{self.target.column} must "
                f"{'have' if self.kind is RelationshipKind.MANY_TO_MANY else 'not have'} a junction"
            )

    @property
    def key(self) -> Tuple[Any, ...]:
        return (self.kind, self.source, self.target, self.junction)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

@dataclass
class TableModel:
    """Everything known about one table after mapping and classification."""
    schema: str
    name: str
    model_name: str
    columns: List[ColumnDescriptor] = field(default_factory=list)
    indexes: List[IndexDescriptor] = field(default_factory=list)
    foreign_keys: List[ForeignKeyDescriptor] = field(default_factory=list)
    relationships: List[RelationshipDescriptor] = field(default_factory=list)
    dropped_aliases: int = 0

    def get_column(self, name: str) -> Optional[ColumnDescriptor]:
        for column in self.columns:
            if column.name == name:
                return column
        return None


@dataclass
class SchemaModel:
    """The full intermediate model for one run."""
    schemas: List[str] = field(default_factory=list)
    tables: List[TableModel] = field(default_factory=list)
    relationships: List[RelationshipDescriptor] = field(default_factory=list)
    foreign_keys: List[ForeignKeyDescriptor] = field(default_factory=list)
    indexes: List[IndexDescriptor] = field(default_factory=list)

    def get_table(self, schema: str, name: str) -> Optional[TableModel]:
        for table in self.tables:
            if table.schema == schema and table.name == name:
                return table
        return None

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)


def to_plain(value: Any) -> Any:
    """Convert descriptors into JSON-friendly structures."""
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    return value
