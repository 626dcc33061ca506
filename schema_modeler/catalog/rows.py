"""Raw catalog rows as handed over by a CatalogSource.

These mirror the shape of the catalog queries (information_schema plus
pg_catalog lookups). They are plain containers; all interpretation happens
in the mapping and analysis layers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union


def parse_text_array(value: Union[str, Sequence[Any], None]) -> List[str]:
    """Split a catalog array value into trimmed, unquoted strings.

    Accepts driver-decoded sequences as well as the textual ``{a,b,"c d"}``
    form that some drivers and views return.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        text = str(value).strip()
        if text.startswith("{") and text.endswith("}"):
            text = text[1:-1]
        if not text:
            return []
        items = text.split(",")
    return [item.strip().strip('"').strip("'") for item in items]


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().upper() in ("YES", "TRUE", "T", "Y", "1")
    return bool(value)


@dataclass(frozen=True)
class RawColumn:
    """One row of information_schema.columns, plus the constraint kind."""
    schema: str
    table: str
    name: str
    data_type: str
    udt_name: Optional[str] = None
    is_nullable: bool = True
    column_default: Optional[str] = None
    character_maximum_length: Optional[Union[int, str]] = None
    numeric_precision: Optional[Union[int, str]] = None
    numeric_scale: Optional[Union[int, str]] = None
    is_identity: bool = False
    constraint: Optional[str] = None
    comment: Optional[str] = None
    ordinal_position: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RawColumn":
        return cls(
            schema=row.get("table_schema") or "public",
            table=row["table_name"],
            name=row["column_name"],
            data_type=str(row.get("data_type") or ""),
            udt_name=row.get("udt_name"),
            is_nullable=_to_bool(row.get("is_nullable", True)),
            column_default=row.get("column_default"),
            character_maximum_length=row.get("character_maximum_length"),
            numeric_precision=row.get("numeric_precision"),
            numeric_scale=row.get("numeric_scale"),
            is_identity=_to_bool(row.get("is_identity", False)),
            constraint=row.get("constraint_type"),
            comment=row.get("column_comment"),
            ordinal_position=int(row.get("ordinal_position") or 0),
        )


@dataclass(frozen=True)
class RawElementType:
    """Element-type row for a column: array element type and enum labels."""
    column_name: str
    data_type: str
    udt_name: Optional[str] = None
    element_type: Optional[str] = None
    enum_data: Optional[Union[str, Sequence[str]]] = None

    @property
    def has_enum_values(self) -> bool:
        return self.enum_data is not None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RawElementType":
        return cls(
            column_name=row["columnName"] if "columnName" in row else row["column_name"],
            data_type=str(row.get("dataType") or row.get("data_type") or "").lower(),
            udt_name=row.get("udtName") or row.get("udt_name"),
            element_type=row.get("elementType") or row.get("element_type"),
            enum_data=row.get("enumData") if "enumData" in row else row.get("enum_data"),
        )


@dataclass(frozen=True)
class RawGeoType:
    """Geometry/geography column facet from PostGIS metadata views."""
    column_name: str
    type: str
    srid: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RawGeoType":
        srid = row.get("srid")
        return cls(
            column_name=row["column_name"],
            type=str(row.get("type") or "").upper(),
            srid=int(srid) if srid not in (None, "") else None,
        )


@dataclass(frozen=True)
class RawRelationship:
    """Pre-classified relationship row from the catalog relationship query."""
    relationship_type: str
    source_schema: str
    source_table: str
    source_column: str
    target_schema: str
    target_table: str
    target_column: str
    junction_schema: Optional[str] = None
    junction_table: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RawRelationship":
        return cls(
            relationship_type=str(row["relationship_type"]),
            source_schema=row["source_schema"],
            source_table=row["source_table"],
            source_column=row["source_column"],
            target_schema=row["target_schema"],
            target_table=row["target_table"],
            target_column=row["target_column"],
            junction_schema=row.get("junction_schema"),
            junction_table=row.get("junction_table"),
        )


@dataclass
class RawTable:
    """Everything fetched for one table before mapping."""
    schema: str
    name: str
    columns: List[RawColumn] = field(default_factory=list)
    element_types: List[RawElementType] = field(default_factory=list)
    geo_types: List[RawGeoType] = field(default_factory=list)
    # column name -> longest stored JSON payload
    samples: Dict[str, str] = field(default_factory=dict)

    def element_for(self, column_name: str) -> Optional[RawElementType]:
        for element in self.element_types:
            if element.column_name == column_name:
                return element
        return None

    def geo_for(self, column_name: str) -> Optional[RawGeoType]:
        for geo in self.geo_types:
            if geo.column_name == column_name:
                return geo
        return None
