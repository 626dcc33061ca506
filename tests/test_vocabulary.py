"""Tests for the native type vocabulary."""

from types import MappingProxyType

from schema_modeler.mapping.vocabulary import (
    DEFAULT_VOCABULARY,
    TypeVocabulary,
    normalize_type,
    normalize_udt,
)


class TestNormalization:
    """Test type and udt name normalization."""

    def test_modifiers_are_dropped(self):
        assert normalize_type("character varying(255)") == "character varying"
        assert normalize_type("NUMERIC(10, 2)") == "numeric"
        assert normalize_type(None) == ""

    def test_udt_array_marker_removed_once(self):
        assert normalize_udt("_int4") == "int4"
        assert normalize_udt("_my_type") == "my_type"
        assert normalize_udt("varchar") == "varchar"
        assert normalize_udt(None) is None


class TestLookup:
    """Test scalar lookups."""

    def test_known_types(self):
        assert DEFAULT_VOCABULARY.lookup("integer") == "INTEGER"
        assert DEFAULT_VOCABULARY.lookup("varchar(255)") == "STRING"
        assert DEFAULT_VOCABULARY.lookup("timestamp with time zone") == "DATE"
        assert DEFAULT_VOCABULARY.lookup_host("numeric") == "string"
        assert DEFAULT_VOCABULARY.lookup_host("bytea") == "Buffer"

    def test_unknown_type_falls_back(self):
        resolution = DEFAULT_VOCABULARY.resolve_orm("mystery_type")
        assert resolution.orm_type == "STRING"
        assert resolution.exact is False
        assert DEFAULT_VOCABULARY.resolve_host("mystery_type") == ("any", False)

    def test_tables_are_read_only(self):
        vocabulary = TypeVocabulary()
        assert isinstance(vocabulary._orm, MappingProxyType)
        assert isinstance(vocabulary._host, MappingProxyType)

    def test_injected_tables_do_not_leak(self):
        vocabulary = TypeVocabulary(orm_types={"money": "MONEY"})
        assert vocabulary.lookup("money") == "MONEY"
        assert vocabulary.lookup("integer") is None
        assert DEFAULT_VOCABULARY.lookup("money") == "DECIMAL"


class TestArrays:
    """Test array unwrapping."""

    def test_bracket_suffix(self):
        resolution = DEFAULT_VOCABULARY.resolve_orm("text[]")
        assert resolution.expression == "ARRAY(TEXT)"
        assert DEFAULT_VOCABULARY.resolve_host("text[]") == ("Array<string>", True)

    def test_array_keyword_with_udt(self):
        resolution = DEFAULT_VOCABULARY.resolve_orm("ARRAY", "_int4")
        assert resolution.orm_type == "ARRAY"
        assert resolution.expression == "ARRAY(INTEGER)"
        assert DEFAULT_VOCABULARY.resolve_host("ARRAY", "_int4") == ("Array<number>", True)

    def test_array_of_unknown_element(self):
        resolution = DEFAULT_VOCABULARY.resolve_orm("mystery[]")
        assert resolution.expression == "ARRAY(STRING)"
        assert resolution.exact is False
        assert DEFAULT_VOCABULARY.resolve_host("mystery[]") == ("Array<any>", False)

    def test_detection(self):
        assert DEFAULT_VOCABULARY.is_array("integer[]")
        assert DEFAULT_VOCABULARY.is_array("ARRAY")
        assert DEFAULT_VOCABULARY.is_array("", "_text")
        assert not DEFAULT_VOCABULARY.is_array("text", "text")


class TestRanges:
    """Test range base derivation."""

    def test_integer_range(self):
        assert DEFAULT_VOCABULARY.is_range("int4range")
        assert DEFAULT_VOCABULARY.resolve_orm("int4range").expression == "RANGE(INTEGER)"
        assert DEFAULT_VOCABULARY.resolve_host("int4range") == ("Range<number>", True)

    def test_other_ranges(self):
        assert DEFAULT_VOCABULARY.resolve_orm("int8range").expression == "RANGE(BIGINT)"
        assert DEFAULT_VOCABULARY.resolve_orm("numrange").expression == "RANGE(DECIMAL)"
        assert DEFAULT_VOCABULARY.resolve_orm("tstzrange").expression == "RANGE(DATE)"
        assert DEFAULT_VOCABULARY.resolve_orm("daterange").expression == "RANGE(DATEONLY)"
        assert DEFAULT_VOCABULARY.resolve_host("numrange") == ("Range<string>", True)

    def test_unknown_range_base(self):
        resolution = DEFAULT_VOCABULARY.resolve_orm("floatrange")
        assert resolution.expression == "RANGE(STRING)"
        assert resolution.exact is False
