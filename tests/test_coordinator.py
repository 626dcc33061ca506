"""Tests for the concurrent catalog fetch phase."""

import asyncio
import logging

import pytest

from schema_modeler.catalog.coordinator import SchemaFetchCoordinator
from schema_modeler.errors import CatalogUnavailableError
from schema_modeler.models import GeneratorOptions


class TestFetch:
    """Test the four independent catalog slices."""

    @pytest.mark.asyncio
    async def test_fetch_everything(self, blog_catalog, options):
        fetched = await SchemaFetchCoordinator(blog_catalog, options).fetch()
        assert fetched.schemas == ["public"]
        assert len(fetched.indexes) == 3
        assert len(fetched.relationships) == 2
        assert len(fetched.foreign_keys) == 3
        assert {"schemas", "indexes", "relationships", "foreign_keys"} <= set(blog_catalog.calls)

    @pytest.mark.asyncio
    async def test_table_filter(self, blog_catalog):
        coordinator = SchemaFetchCoordinator(blog_catalog, GeneratorOptions(tables=["posts"]))
        fetched = await coordinator.fetch()
        assert [i.name for i in fetched.indexes] == ["posts_user_id_idx"]
        assert [(fk.table_name, fk.column_name) for fk in fetched.foreign_keys] == [("posts", "user_id")]
        assert fetched.relationships == []

    @pytest.mark.asyncio
    async def test_relationship_needs_both_tables_allowed(self, blog_catalog):
        options = GeneratorOptions(tables=["posts", "users"])
        fetched = await SchemaFetchCoordinator(blog_catalog, options).fetch()
        assert [(r.source_table, r.target_table) for r in fetched.relationships] == [
            ("posts", "users"), ("posts", "users"),
        ]

    @pytest.mark.asyncio
    async def test_schema_filter(self, blog_catalog):
        fetched = await SchemaFetchCoordinator(blog_catalog, GeneratorOptions(schemas=["other"])).fetch()
        assert fetched.schemas == []
        assert fetched.indexes == []
        assert fetched.foreign_keys == []

    @pytest.mark.asyncio
    async def test_failure_cancels_siblings(self, blog_catalog, options):
        blog_catalog.fail("indexes")
        blog_catalog.delay("relationships", 5)

        with pytest.raises(CatalogUnavailableError) as exc_info:
            await SchemaFetchCoordinator(blog_catalog, options).fetch()

        assert exc_info.value.query == "indexes"
        assert exc_info.value.code == "CATALOG_UNAVAILABLE"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        await asyncio.sleep(0.01)
        assert "relationships" in blog_catalog.cancelled

    @pytest.mark.asyncio
    async def test_missing_row_key(self, blog_catalog, options):
        blog_catalog._indexes.append({"schema_name": "public"})
        with pytest.raises(CatalogUnavailableError) as exc_info:
            await SchemaFetchCoordinator(blog_catalog, options).fetch()
        assert exc_info.value.query == "catalog rows"


class TestFetchTable:
    """Test per-table fetching and optional metadata degradation."""

    @pytest.mark.asyncio
    async def test_columns_geometry_and_samples(self, blog_catalog, options):
        raw = await SchemaFetchCoordinator(blog_catalog, options).fetch_table("public", "users")
        assert [c.name for c in raw.columns][:3] == ["id", "email", "status"]
        assert raw.element_for("status").enum_data == ["active", "disabled"]
        assert raw.geo_for("location").type == "POINT"
        assert raw.geo_for("location").srid == 4326
        assert list(raw.samples) == ["profile"]

    @pytest.mark.asyncio
    async def test_missing_sample_is_skipped(self, blog_catalog, options):
        raw = await SchemaFetchCoordinator(blog_catalog, options).fetch_table("public", "posts")
        assert "longest_json" in blog_catalog.calls
        assert raw.samples == {}

    @pytest.mark.asyncio
    async def test_geometry_failure_degrades(self, blog_catalog, options, caplog):
        blog_catalog.fail("geometry_types")
        with caplog.at_level(logging.WARNING):
            raw = await SchemaFetchCoordinator(blog_catalog, options).fetch_table("public", "users")
        assert raw.geo_types == []
        assert len(raw.columns) == 8
        assert "Geometry metadata unavailable" in caplog.text

    @pytest.mark.asyncio
    async def test_sample_failure_degrades(self, blog_catalog, options):
        blog_catalog.fail("longest_json")
        raw = await SchemaFetchCoordinator(blog_catalog, options).fetch_table("public", "users")
        assert raw.samples == {}

    @pytest.mark.asyncio
    async def test_columns_failure_is_fatal(self, blog_catalog, options):
        blog_catalog.fail("columns")
        with pytest.raises(CatalogUnavailableError) as exc_info:
            await SchemaFetchCoordinator(blog_catalog, options).fetch_table("public", "posts")
        assert exc_info.value.query == "columns:public.posts"
        assert exc_info.value.to_dict()["details"]["query"] == "columns:public.posts"

    @pytest.mark.asyncio
    async def test_fetch_tables_filtered(self, blog_catalog):
        coordinator = SchemaFetchCoordinator(blog_catalog, GeneratorOptions(tables=["users", "missing"]))
        assert await coordinator.fetch_tables("public") == ["users"]


class TestFetchSchemaObjects:
    @pytest.mark.asyncio
    async def test_objects_by_category(self, blog_catalog, options):
        objects = await SchemaFetchCoordinator(blog_catalog, options).fetch_schema_objects(["public"])
        assert set(objects) == {"functions", "composites", "domains", "views", "triggers"}
        assert objects["functions"]["public"][0]["name"] == "touch_updated_at"
        assert objects["triggers"]["public"] == []

    @pytest.mark.asyncio
    async def test_failed_category_degrades(self, blog_catalog, options, caplog):
        blog_catalog.fail("views")
        with caplog.at_level(logging.WARNING):
            objects = await SchemaFetchCoordinator(blog_catalog, options).fetch_schema_objects(["public"])
        assert objects["views"]["public"] == []
        assert objects["functions"]["public"]
        assert "Could not fetch views" in caplog.text
