"""Native type name lookup tables for the ORM and host vocabularies."""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

# Generic fallbacks for anything the tables do not know
ORM_FALLBACK = "STRING"
HOST_FALLBACK = "any"

ORM_TYPES = {
    # Numeric
    "int2": "SMALLINT",
    "int4": "INTEGER",
    "int8": "BIGINT",
    "smallint": "SMALLINT",
    "integer": "INTEGER",
    "bigint": "BIGINT",
    "decimal": "DECIMAL",
    "numeric": "DECIMAL",
    "num": "DECIMAL",
    "real": "REAL",
    "float4": "REAL",
    "double": "DOUBLE",
    "float8": "DOUBLE",
    "double precision": "DOUBLE",
    "serial": "INTEGER",
    "bigserial": "BIGINT",
    "money": "DECIMAL",
    # Character
    "char": "CHAR",
    "character": "CHAR",
    "bpchar": "CHAR",
    "varchar": "STRING",
    "character varying": "STRING",
    "bit": "STRING",
    "varbit": "STRING",
    "bit varying": "STRING",
    "text": "TEXT",
    "citext": "CITEXT",
    "xml": "TEXT",
    "tsvector": "STRING",
    # Boolean
    "boolean": "BOOLEAN",
    "bool": "BOOLEAN",
    # Date/time
    "date": "DATEONLY",
    "time": "TIME",
    "timetz": "TIME",
    "time without time zone": "TIME",
    "time with time zone": "TIME",
    "timestamp": "DATE",
    "timestamptz": "DATE",
    "timestamp without time zone": "DATE",
    "timestamp with time zone": "DATE",
    "interval": "STRING",
    # Identifiers, documents, binary
    "uuid": "UUID",
    "json": "JSON",
    "jsonb": "JSONB",
    "hstore": "HSTORE",
    "bytea": "BLOB",
    "enum": "ENUM",
    # Network
    "inet": "INET",
    "cidr": "CIDR",
    "macaddr": "MACADDR",
    "macaddr8": "MACADDR",
    # Geometric
    "point": "GEOMETRY('POINT')",
    "line": "GEOMETRY",
    "lseg": "GEOMETRY",
    "box": "GEOMETRY",
    "path": "GEOMETRY",
    "polygon": "GEOMETRY('POLYGON')",
    "circle": "GEOMETRY",
    "geometry": "GEOMETRY",
    "geography": "GEOGRAPHY",
    # User-defined fallbacks
    "user-defined": "JSON",
    "composite": "JSON",
    "domain": "STRING",
}

HOST_TYPES = {
    # Numeric; 64-bit and arbitrary precision values stay strings
    "smallint": "number",
    "int2": "number",
    "integer": "number",
    "int4": "number",
    "bigint": "string",
    "int8": "string",
    "decimal": "string",
    "numeric": "string",
    "real": "number",
    "float4": "number",
    "double precision": "number",
    "float8": "number",
    "serial": "number",
    "bigserial": "string",
    "money": "string",
    "oid": "number",
    # Character
    "character varying": "string",
    "varchar": "string",
    "character": "string",
    "char": "string",
    "bpchar": "string",
    "text": "string",
    "citext": "string",
    # Binary
    "bytea": "Buffer",
    # Date/time
    "date": "Date",
    "time": "Date",
    "timetz": "Date",
    "time without time zone": "Date",
    "time with time zone": "Date",
    "timestamp": "Date",
    "timestamptz": "Date",
    "timestamp without time zone": "Date",
    "timestamp with time zone": "Date",
    "interval": "string",
    # Boolean
    "boolean": "boolean",
    "bool": "boolean",
    # Geometric
    "point": "object",
    "line": "object",
    "lseg": "object",
    "box": "object",
    "path": "object",
    "polygon": "object",
    "circle": "object",
    "geometry": "object",
    "geography": "object",
    # Network
    "cidr": "string",
    "inet": "string",
    "macaddr": "string",
    "macaddr8": "string",
    # Bit strings and text search
    "bit": "string",
    "bit varying": "string",
    "varbit": "string",
    "tsvector": "string",
    "tsquery": "string",
    # Documents
    "uuid": "string",
    "xml": "string",
    "json": "object",
    "jsonb": "object",
    "hstore": "object",
    # Object identifiers
    "regproc": "string",
    "regprocedure": "string",
    "regoper": "string",
    "regoperator": "string",
    "regclass": "string",
    "regtype": "string",
    "regconfig": "string",
    "regdictionary": "string",
}

# Range prefix -> native base type
RANGE_BASES = {
    "int4": "integer",
    "int8": "bigint",
    "num": "numeric",
    "ts": "timestamp",
    "tstz": "timestamp with time zone",
    "date": "date",
}

_MODIFIERS = re.compile(r"\s*\([^)]*\)")
_RANGE_SUFFIX = re.compile(r"(multirange|range)$")


@dataclass(frozen=True)
class OrmResolution:
    """ORM type name, optional wrapped element, and whether the tables knew it."""
    orm_type: str
    element: Optional[str] = None
    exact: bool = True

    @property
    def expression(self) -> str:
        if self.element:
            return f"{self.orm_type}({self.element})"
        return self.orm_type


def normalize_type(native_type: Optional[str]) -> str:
    """Lower-case, trim and drop type modifiers (``varchar(255)`` -> ``varchar``)."""
    return _MODIFIERS.sub("", str(native_type or "")).strip().lower()


def normalize_udt(udt_name: Optional[str]) -> Optional[str]:
    """Normalize a catalog udt name; the array marker underscore is removed."""
    if udt_name is None:
        return None
    return str(udt_name).strip().lower().replace("_", "", 1)


class TypeVocabulary:
    """Immutable native -> ORM / host lookup with array and range unwrapping.

    Built once per process and injected into the mapper.
    """

    def __init__(
        self,
        orm_types: Optional[Mapping[str, str]] = None,
        host_types: Optional[Mapping[str, str]] = None,
        range_bases: Optional[Mapping[str, str]] = None,
    ):
        self._orm = MappingProxyType(dict(ORM_TYPES if orm_types is None else orm_types))
        self._host = MappingProxyType(dict(HOST_TYPES if host_types is None else host_types))
        self._ranges = MappingProxyType(dict(RANGE_BASES if range_bases is None else range_bases))

    # -- classification --------------------------------------------------

    @staticmethod
    def is_array(native_type: str, udt_name: Optional[str] = None) -> bool:
        normalized = normalize_type(native_type)
        if normalized.endswith("[]") or normalized == "array":
            return True
        return not normalized and bool(udt_name) and str(udt_name).startswith("_")

    @staticmethod
    def is_range(native_type: str) -> bool:
        return bool(_RANGE_SUFFIX.search(normalize_type(native_type)))

    def array_element(self, native_type: str, udt_name: Optional[str] = None) -> Optional[str]:
        """Element native type of an array, or None when it cannot be told."""
        normalized = normalize_type(native_type)
        if normalized.endswith("[]"):
            return normalized[:-2].strip()
        if udt_name:
            udt = str(udt_name).strip().lower()
            return udt[1:] if udt.startswith("_") else udt
        return None

    def range_base(self, native_type: str) -> str:
        prefix = _RANGE_SUFFIX.sub("", normalize_type(native_type))
        return self._ranges.get(prefix, prefix)

    # -- lookups ----------------------------------------------------------

    def lookup(self, native_type: str) -> Optional[str]:
        """Raw ORM table hit for a scalar native type; None when unknown."""
        return self._orm.get(normalize_type(native_type))

    def lookup_host(self, native_type: str) -> Optional[str]:
        return self._host.get(normalize_type(native_type))

    def resolve_orm(self, native_type: str, udt_name: Optional[str] = None) -> OrmResolution:
        """ORM resolution with array/range unwrapping and the generic fallback."""
        if self.is_array(native_type, udt_name):
            element = self.array_element(native_type, udt_name)
            inner = self.resolve_orm(element) if element else OrmResolution(ORM_FALLBACK, exact=False)
            return OrmResolution("ARRAY", element=inner.expression, exact=inner.exact)

        if self.is_range(native_type) and self.lookup(native_type) is None:
            base = self.lookup(self.range_base(native_type))
            return OrmResolution("RANGE", element=base or ORM_FALLBACK, exact=base is not None)

        found = self.lookup(native_type)
        if found is None:
            return OrmResolution(ORM_FALLBACK, exact=False)
        return OrmResolution(found)

    def resolve_host(self, native_type: str, udt_name: Optional[str] = None) -> Tuple[str, bool]:
        """Host type and whether it was an exact hit."""
        if self.is_array(native_type, udt_name):
            element = self.array_element(native_type, udt_name)
            inner, exact = self.resolve_host(element) if element else (HOST_FALLBACK, False)
            return f"Array<{inner}>", exact

        if self.is_range(native_type) and self.lookup_host(native_type) is None:
            base = self.lookup_host(self.range_base(native_type))
            return f"Range<{base or HOST_FALLBACK}>", base is not None

        found = self.lookup_host(native_type)
        if found is None:
            return HOST_FALLBACK, False
        return found, True


# Process-wide default, passed by reference into mappers
DEFAULT_VOCABULARY = TypeVocabulary()
