"""End-to-end introspection against the in-memory blog catalog."""

from datetime import datetime, timezone

import pytest

from schema_modeler.catalog.models import (
    ColumnClassification,
    DomainTypeDescriptor,
    OrmMarker,
    RelationshipKind,
    TableRef,
)
from schema_modeler.errors import CatalogUnavailableError
from schema_modeler.introspector import SchemaIntrospector
from schema_modeler.models import GeneratorOptions, MigrationCategory, MigrationOptions


class TestIntrospect:
    """Test column mapping over the whole model."""

    @pytest.mark.asyncio
    async def test_tables_in_catalog_order(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog).introspect()
        assert model.schemas == ["public"]
        assert [t.name for t in model.tables] == ["posts", "roles", "user_roles", "users"]
        assert [t.model_name for t in model.tables] == ["Post", "Role", "UserRole", "User"]

    @pytest.mark.asyncio
    async def test_user_columns(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog).introspect()
        users = model.get_table("public", "users")

        assert users.get_column("id").flags.auto_increment
        assert users.get_column("email").orm_type_expression == "STRING(255)"
        assert users.get_column("balance").mapping.triple == ("DECIMAL", "DECIMAL(10, 2)", "string")
        assert users.get_column("tags").mapping.triple == ("ARRAY", "ARRAY(TEXT)", "Array<string>")
        assert users.get_column("tags").default_value == []
        assert users.get_column("location").orm_type_expression == "GEOMETRY('POINT', 4326)"
        assert users.get_column("created_at").flags.default_now

    @pytest.mark.asyncio
    async def test_enum_column(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog).introspect()
        status = model.get_table("public", "users").get_column("status")
        assert status.classification is ColumnClassification.ENUM
        assert status.mapping.triple == ("ENUM", "ENUM('active', 'disabled')", "UserStatus")
        assert status.default_value == "active"

    @pytest.mark.asyncio
    async def test_json_sample_synthesis(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog).introspect()
        profile = model.get_table("public", "users").get_column("profile")
        assert profile.structured_type.name == "UserProfileData"
        assert [t.name for t in profile.structured_type.types] == ["Address", "UserProfileData"]

        metadata = model.get_table("public", "posts").get_column("metadata")
        assert metadata.structured_type.is_open

    @pytest.mark.asyncio
    async def test_domain_column(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog).introspect()
        slug = model.get_table("public", "posts").get_column("slug")
        assert isinstance(slug.udt, DomainTypeDescriptor)
        assert slug.mapping.triple == ("TEXT", "TEXT", "string")
        assert slug.mapping.marker is OrmMarker.COMMENT

    @pytest.mark.asyncio
    async def test_domain_lookup_failure_degrades(self, blog_catalog):
        blog_catalog.fail("domain_type")
        model = await SchemaIntrospector(blog_catalog).introspect()
        slug = model.get_table("public", "posts").get_column("slug")
        assert slug.udt is None
        assert slug.mapping.exact is False

    @pytest.mark.asyncio
    async def test_required_failure_aborts(self, blog_catalog):
        blog_catalog.fail("schemas")
        with pytest.raises(CatalogUnavailableError) as exc_info:
            await SchemaIntrospector(blog_catalog).introspect()
        assert exc_info.value.query == "schemas"

    @pytest.mark.asyncio
    async def test_indexes_and_keys_attached_per_table(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog).introspect()
        users = model.get_table("public", "users")
        assert [i.name for i in users.indexes] == ["users_pkey", "users_email_key"]
        assert [fk.column_name for fk in model.get_table("public", "user_roles").foreign_keys] == ["user_id", "role_id"]

    @pytest.mark.asyncio
    async def test_to_dict(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog).introspect()
        data = model.to_dict()
        assert data["tables"][0]["name"] == "posts"
        assert data["relationships"][0]["kind"] == "BelongsTo"


class TestRelationships:
    """Test classification and aliasing inside a full run."""

    @pytest.mark.asyncio
    async def test_all_relationships(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog).introspect()
        assert len(model.relationships) == 6
        kinds = [r.kind for r in model.relationships]
        assert kinds.count(RelationshipKind.BELONGS_TO) == 3
        assert kinds.count(RelationshipKind.HAS_MANY) == 1
        assert kinds.count(RelationshipKind.MANY_TO_MANY) == 2

    @pytest.mark.asyncio
    async def test_per_table_aliases(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog).introspect()
        aliases = {t.name: [r.alias for r in t.relationships] for t in model.tables}
        assert aliases == {
            "posts": ["user", "postUsers"],
            "roles": ["userRoleRoleses"],
            "user_roles": ["user", "role"],
            "users": ["userRoleUserses"],
        }

    @pytest.mark.asyncio
    async def test_junction_detected(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog).introspect()
        many = [r for r in model.relationships if r.kind is RelationshipKind.MANY_TO_MANY]
        assert {r.junction for r in many} == {TableRef("public", "user_roles")}

    @pytest.mark.asyncio
    async def test_alias_collision_recorded(self, blog_catalog):
        blog_catalog._tables[("public", "posts")].append(
            {**blog_catalog._tables[("public", "posts")][1], "column_name": "editor_id"}
        )
        blog_catalog._foreign_keys.append({
            **blog_catalog._foreign_keys[0],
            "fk_constraint_name": "posts_editor_id_fkey",
            "column_name": "editor_id",
        })
        model = await SchemaIntrospector(blog_catalog).introspect()
        posts = model.get_table("public", "posts")
        assert posts.dropped_aliases == 1
        assert [r.source.column for r in posts.relationships if r.alias == "user"] == ["user_id"]

    @pytest.mark.asyncio
    async def test_table_filter(self, blog_catalog):
        model = await SchemaIntrospector(blog_catalog, GeneratorOptions(tables=["posts"])).introspect()
        assert [t.name for t in model.tables] == ["posts"]
        assert model.relationships == []

    @pytest.mark.asyncio
    async def test_filter_keeps_relationships_between_allowed_tables(self, blog_catalog):
        options = GeneratorOptions(tables=["posts", "users"])
        model = await SchemaIntrospector(blog_catalog, options).introspect()
        assert [r.alias for r in model.relationships] == ["user", "postUsers"]


class TestPlanMigrations:
    @pytest.mark.asyncio
    async def test_plan(self, blog_catalog):
        introspector = SchemaIntrospector(blog_catalog)
        model = await introspector.introspect()
        plan = await introspector.plan_migrations(model, base=datetime(2024, 1, 1, tzinfo=timezone.utc))

        assert len(plan) == 10
        assert plan.units[0].name == "create_public_functions"
        assert plan.units[0].timestamp == "20240101000030"
        assert plan.timestamps[-1] == "20240101000500"
        assert len(plan.by_category(MigrationCategory.TABLES)) == 4
        assert [u.name for u in plan.by_category(MigrationCategory.INDEXES)] == [
            "create_public_users_indexes",
            "create_public_posts_indexes",
        ]

    @pytest.mark.asyncio
    async def test_plan_respects_options(self, blog_catalog):
        options = GeneratorOptions(migrations=MigrationOptions(seeders=False, views=False))
        introspector = SchemaIntrospector(blog_catalog, options)
        model = await introspector.introspect()
        plan = await introspector.plan_migrations(model, base=datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert len(plan) == 8
        assert plan.by_category(MigrationCategory.SEEDERS) == []

    @pytest.mark.asyncio
    async def test_migrations_disabled(self, blog_catalog):
        introspector = SchemaIntrospector(blog_catalog, GeneratorOptions(migrations=False))
        model = await introspector.introspect()
        assert len(await introspector.plan_migrations(model)) == 0
