"""Type mapping for schema-modeler.

Native database types are translated into an ORM type expression and a
host-language type. Enum, composite and domain types are resolved first;
everything else goes through the TypeVocabulary with numeric and spatial
facets applied.
"""

from schema_modeler.mapping.vocabulary import DEFAULT_VOCABULARY, TypeVocabulary
from schema_modeler.mapping.facets import NumericFacetExtractor, NumericFacets
from schema_modeler.mapping.structured import StructuredTypeSynthesizer
from schema_modeler.mapping.udt import UserDefinedTypeResolver
from schema_modeler.mapping.type_mapper import TypeMapper
from schema_modeler.mapping.columns import ColumnBuilder

__all__ = [
    "DEFAULT_VOCABULARY",
    "TypeVocabulary",
    "NumericFacetExtractor",
    "NumericFacets",
    "StructuredTypeSynthesizer",
    "UserDefinedTypeResolver",
    "TypeMapper",
    "ColumnBuilder",
]
