"""Tests for user-defined type resolution."""

import pytest

from schema_modeler.catalog.models import CompositeTypeDescriptor, DomainTypeDescriptor, EnumDescriptor
from schema_modeler.catalog.rows import RawElementType
from schema_modeler.mapping.udt import UserDefinedTypeResolver, composite_from_row, domain_from_rows
from tests.fixtures import FakeCatalog, element_row


def _element(column, udt_name, enum_data=None):
    return RawElementType.from_row(element_row(column, "user-defined", udt_name, enum_data=enum_data))


@pytest.fixture
def catalog():
    catalog = FakeCatalog()
    catalog.composites[("public", "shops", "address")] = {
        "typeName": "address",
        "attributeNames": "{street,zip}",
        "attributeTypes": ["text", "integer"],
    }
    catalog.domains[("public", "shops", "slug")] = [
        {"domain_name": "slug_text", "base_type": "text", "constraint_name": "slug_text_check",
         "check_expression": "CHECK (VALUE <> '')", "constraint_type": "c", "default_value": None},
        {"domain_name": "slug_text", "base_type": "text", "constraint_name": "slug_text_not_null",
         "check_expression": None, "constraint_type": "n", "default_value": None},
    ]
    return catalog


class TestUserDefinedTypeResolver:
    """Test enum > composite > domain precedence and degradation."""

    @pytest.mark.asyncio
    async def test_enum_wins_without_lookups(self, catalog):
        udt = await UserDefinedTypeResolver(catalog).resolve("public", "shops", _element("kind", "shop_kind", "{a,b}"))
        assert udt == EnumDescriptor(("a", "b"))
        assert "composite_type" not in catalog.calls
        assert "domain_type" not in catalog.calls

    @pytest.mark.asyncio
    async def test_composite(self, catalog):
        udt = await UserDefinedTypeResolver(catalog).resolve("public", "shops", _element("address", "address"))
        assert isinstance(udt, CompositeTypeDescriptor)
        assert udt.fields == [("street", "text"), ("zip", "integer")]

    @pytest.mark.asyncio
    async def test_domain(self, catalog):
        udt = await UserDefinedTypeResolver(catalog).resolve("public", "shops", _element("slug", "slug_text"))
        assert isinstance(udt, DomainTypeDescriptor)
        assert udt.base_type == "text"
        assert [c.not_null for c in udt.constraints] == [False, True]

    @pytest.mark.asyncio
    async def test_composite_failure_degrades_to_domain(self, catalog):
        catalog.composites[("public", "shops", "slug")] = {"typeName": "x", "attributeNames": "{a}", "attributeTypes": "{b}"}
        catalog.fail("composite_type")
        udt = await UserDefinedTypeResolver(catalog).resolve("public", "shops", _element("slug", "slug_text"))
        assert isinstance(udt, DomainTypeDescriptor)

    @pytest.mark.asyncio
    async def test_all_lookups_fail(self, catalog):
        catalog.fail("composite_type")
        catalog.fail("domain_type")
        assert await UserDefinedTypeResolver(catalog).resolve("public", "shops", _element("slug", "slug_text")) is None

    @pytest.mark.asyncio
    async def test_plain_column(self, catalog):
        assert await UserDefinedTypeResolver(catalog).resolve("public", "shops", _element("name", "text")) is None

    @pytest.mark.asyncio
    async def test_no_element_row(self, catalog):
        assert await UserDefinedTypeResolver(catalog).resolve("public", "shops", None) is None
        assert catalog.calls == []


class TestRowConversion:
    def test_composite_length_mismatch(self):
        with pytest.raises(ValueError, match="attribute names"):
            composite_from_row({"typeName": "bad", "attributeNames": "{a,b}", "attributeTypes": "{text}"})

    def test_empty_rows(self):
        assert composite_from_row(None) is None
        assert domain_from_rows([]) is None
