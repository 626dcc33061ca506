"""Deterministic native type -> (ormType, ormTypeExpression, hostType) mapping."""

import logging
from typing import Any, Optional, Tuple

from schema_modeler.catalog.models import (
    ColumnDescriptor,
    CompositeTypeDescriptor,
    DomainTypeDescriptor,
    EnumDescriptor,
    OrmMarker,
    TypeMapping,
    UserDefinedType,
)
from schema_modeler.catalog.rows import RawColumn, RawGeoType
from schema_modeler.mapping.facets import NumericFacetExtractor, NumericFacets
from schema_modeler.mapping.structured import StructuredTypeSynthesizer
from schema_modeler.mapping.vocabulary import DEFAULT_VOCABULARY, HOST_FALLBACK, TypeVocabulary

logger = logging.getLogger(__name__)

LENGTH_TYPES = ("STRING", "CHAR", "TEXT", "BLOB")
SPATIAL_TYPES = ("GEOMETRY", "GEOGRAPHY")
JSON_TYPES = ("JSON", "JSONB")


def format_orm_type(orm_type: str, *args: Any) -> Tuple[str, str]:
    """``("DECIMAL", 10, 2)`` -> ``("DECIMAL", "DECIMAL(10, 2)")``; empty args are dropped."""
    kept = [str(a) for a in args if a]
    if not kept:
        return orm_type, orm_type
    return orm_type, f"{orm_type}({', '.join(kept)})"


def enum_literal(values) -> str:
    return ", ".join(f"'{v.replace(chr(34), '')}'" for v in values)


class TypeMapper:
    """Composes vocabulary, facets and user-defined types into one TypeMapping.

    Mapping is pure: the same inputs always give the same triple, and an
    unknown native type degrades to the generic fallback with ``exact=False``.
    """

    def __init__(
        self,
        vocabulary: TypeVocabulary = DEFAULT_VOCABULARY,
        facet_extractor: Optional[NumericFacetExtractor] = None,
        synthesizer: Optional[StructuredTypeSynthesizer] = None,
    ):
        self.vocabulary = vocabulary
        self.facet_extractor = facet_extractor or NumericFacetExtractor()
        self.synthesizer = synthesizer or StructuredTypeSynthesizer()

    def map(
        self,
        column: RawColumn,
        udt: Optional[UserDefinedType] = None,
        geo: Optional[RawGeoType] = None,
        sample: Optional[str] = None,
        enum_name: Optional[str] = None,
        structured_name: Optional[str] = None,
    ) -> TypeMapping:
        """Map one column.

        Args:
            column: Raw catalog column row
            udt: Resolved enum/composite/domain descriptor, if any
            geo: Geometry/geography facet row, if any
            sample: JSON text used for structured-type synthesis
            enum_name: Host type name enum columns refer to
            structured_name: Root type name for JSON synthesis

        Returns:
            TypeMapping for the column
        """
        native = self.native_type(column)

        if isinstance(udt, EnumDescriptor):
            return self._map_enum(native, column.udt_name, udt, enum_name)
        if isinstance(udt, CompositeTypeDescriptor):
            return self._map_composite(udt)
        if isinstance(udt, DomainTypeDescriptor):
            return self._map_domain(udt)

        facets = self.facet_extractor.facets(column)
        mapping = self.map_native(native, column.udt_name, facets, geo)

        if mapping.orm_type in JSON_TYPES and structured_name:
            structured = self.synthesizer.synthesize_text(sample, structured_name)
            mapping = TypeMapping(
                orm_type=mapping.orm_type,
                orm_type_expression=mapping.orm_type_expression,
                host_type=mapping.host_type,
                exact=mapping.exact,
                structured_type=structured,
            )
        return mapping

    def native_type(self, column: RawColumn) -> str:
        """The native type name to look up.

        ``USER-DEFINED`` columns (extension types such as citext or geometry)
        are looked up by their udt name when the vocabulary knows it.
        """
        data_type = (column.data_type or "").strip().lower()
        if data_type == "user-defined" and column.udt_name:
            if self.vocabulary.lookup(column.udt_name) is not None:
                return column.udt_name.lower()
        if not data_type and column.udt_name:
            return column.udt_name.lower()
        return data_type

    def map_native(
        self,
        native: str,
        udt_name: Optional[str] = None,
        facets: Optional[NumericFacets] = None,
        geo: Optional[RawGeoType] = None,
    ) -> TypeMapping:
        """Plain scalar, array or range mapping for a native type name."""
        facets = facets or NumericFacets()
        resolution = self.vocabulary.resolve_orm(native, udt_name)
        host_type, host_exact = self.vocabulary.resolve_host(native, udt_name)

        orm_type = resolution.orm_type
        if resolution.element is not None:
            expression = resolution.expression
        elif orm_type in LENGTH_TYPES:
            orm_type, expression = format_orm_type(orm_type, facets.length)
        elif orm_type == "DECIMAL":
            orm_type, expression = format_orm_type(orm_type, facets.precision, facets.scale)
        elif orm_type in SPATIAL_TYPES and geo is not None:
            orm_type, expression = format_orm_type(orm_type, f"'{geo.type}'" if geo.type else None, geo.srid)
        else:
            orm_type, expression = format_orm_type(orm_type)

        exact = resolution.exact and host_exact
        if not exact:
            logger.debug("No exact mapping for native type '%s'; using fallback %s/%s", native, expression, host_type)

        return TypeMapping(
            orm_type=orm_type,
            orm_type_expression=expression,
            host_type=host_type,
            exact=exact,
        )

    def _map_enum(self, native: str, udt_name: Optional[str], enum: EnumDescriptor, enum_name: Optional[str]) -> TypeMapping:
        expression = f"ENUM({enum_literal(enum.values)})"
        reference = enum_name or " | ".join(f"'{v}'" for v in enum.values) or HOST_FALLBACK
        if self.vocabulary.is_array(native, udt_name):
            return TypeMapping(
                orm_type="ARRAY",
                orm_type_expression=f"ARRAY({expression})",
                host_type=f"Array<{reference}>",
            )
        return TypeMapping(orm_type="ENUM", orm_type_expression=expression, host_type=reference)

    def _map_composite(self, composite: CompositeTypeDescriptor) -> TypeMapping:
        orm_type = composite.type_name.upper()
        return TypeMapping(
            orm_type=orm_type,
            orm_type_expression=orm_type,
            host_type=HOST_FALLBACK,
            marker=OrmMarker.RAW,
            annotation=f"Composite Type '{composite.type_name}({composite.describe_fields()})'",
        )

    def _map_domain(self, domain: DomainTypeDescriptor) -> TypeMapping:
        base = self.map_native(domain.base_type)
        return TypeMapping(
            orm_type=base.orm_type,
            orm_type_expression=base.orm_type_expression,
            host_type=base.host_type,
            marker=OrmMarker.COMMENT,
            annotation=f"Domain Type '{domain.domain_name}'",
            exact=base.exact,
        )

    @staticmethod
    def declared_type(
        column: ColumnDescriptor,
        add_null_type: bool = True,
        foreign_key_target: Optional[Tuple[str, str]] = None,
    ) -> str:
        """Host declaration for a model attribute.

        Primary and nullable columns are wrapped in ``CreationOptional<...>``;
        non-primary foreign keys become ``ForeignKey<Target['prop']>``.
        """
        flags = column.flags
        structured = column.structured_type
        host = column.host_type
        if structured is not None:
            host = structured.name

        if structured is not None and structured.is_array:
            declared = f"CreationOptional<{host}[]>"
        elif foreign_key_target is not None and not flags.primary:
            model, prop = foreign_key_target
            declared = f"ForeignKey<{model}['{prop}']>"
        elif flags.nullable or flags.primary:
            declared = f"CreationOptional<{host}>"
        else:
            declared = host

        if flags.nullable and add_null_type:
            declared = f"{declared} | null"
        return declared
