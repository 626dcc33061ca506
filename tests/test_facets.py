"""Tests for numeric facet extraction."""

from schema_modeler.mapping.facets import NumericFacetExtractor, NumericFacets, to_number


class TestToNumber:
    def test_conversions(self):
        assert to_number(10) == 10
        assert to_number("12") == 12
        assert to_number(" 7 ") == 7
        assert to_number("10.0") == 10

    def test_unparseable(self):
        assert to_number(None) is None
        assert to_number("abc") is None
        assert to_number(True) is None


class TestNumericFacetExtractor:
    """Test facet extraction from raw columns."""

    def test_catalog_fields(self, make_column):
        column = make_column(data_type="numeric", numeric_precision=10, numeric_scale=2)
        assert NumericFacetExtractor().facets(column) == NumericFacets(precision=10, scale=2)

    def test_textual_catalog_fields(self, make_column):
        column = make_column(data_type="numeric", numeric_precision="12", numeric_scale="4")
        facets = NumericFacetExtractor().facets(column)
        assert (facets.precision, facets.scale) == (12, 4)

    def test_falls_back_to_type_modifiers(self, make_column):
        extractor = NumericFacetExtractor()
        assert extractor.facets(make_column(data_type="numeric(8,3)")) == NumericFacets(precision=8, scale=3)
        assert extractor.facets(make_column(data_type="varchar(255)")).length == 255

    def test_length(self, make_column):
        column = make_column(data_type="character varying", character_maximum_length=64)
        assert NumericFacetExtractor().facets(column).length == 64

    def test_absent_column(self):
        assert NumericFacetExtractor().facets(None) == NumericFacets()

    def test_parse_helpers(self):
        assert NumericFacetExtractor.parse_decimal_definition("numeric(10)") == (10, None)
        assert NumericFacetExtractor.parse_decimal_definition("integer") is None
        assert NumericFacetExtractor.parse_length_definition("char(2)") == 2
