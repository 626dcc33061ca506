"""Shared pytest fixtures for schema-modeler tests."""

import asyncio

import pytest

from schema_modeler.catalog.rows import RawColumn
from schema_modeler.introspector import SchemaIntrospector
from schema_modeler.mapping.type_mapper import TypeMapper
from schema_modeler.models import GeneratorOptions
from tests.fixtures import FakeCatalog, column_row, element_row, fk_row, relationship_row


@pytest.fixture
def mapper():
    """A TypeMapper over the default vocabulary."""
    return TypeMapper()


@pytest.fixture
def make_column():
    """Build a RawColumn from keyword arguments."""
    def _make(name="value", data_type="text", udt_name=None, table="things", **kwargs):
        return RawColumn(schema="public", table=table, name=name, data_type=data_type, udt_name=udt_name, **kwargs)
    return _make


@pytest.fixture
def options():
    return GeneratorOptions()


@pytest.fixture
def blog_tables():
    """Column rows for a small blog database: users, posts, roles, user_roles."""
    return {
        ("public", "users"): [
            column_row("users", "id", "integer", "int4", nullable=False,
                       default="nextval('users_id_seq'::regclass)", constraint="PRIMARY KEY"),
            column_row("users", "email", "character varying", "varchar", nullable=False,
                       constraint="UNIQUE", character_maximum_length=255),
            column_row("users", "status", "USER-DEFINED", "user_status", nullable=False,
                       default="'active'::user_status"),
            column_row("users", "balance", "numeric", "numeric", numeric_precision=10, numeric_scale=2),
            column_row("users", "tags", "ARRAY", "_text", default="'{}'::text[]"),
            column_row("users", "profile", "jsonb", "jsonb"),
            column_row("users", "location", "USER-DEFINED", "geometry"),
            column_row("users", "created_at", "timestamp without time zone", "timestamp", nullable=False,
                       default="CURRENT_TIMESTAMP"),
        ],
        ("public", "posts"): [
            column_row("posts", "id", "integer", "int4", nullable=False,
                       default="nextval('posts_id_seq'::regclass)", constraint="PRIMARY KEY"),
            column_row("posts", "user_id", "integer", "int4", nullable=False, constraint="FOREIGN KEY"),
            column_row("posts", "title", "text", "text", nullable=False),
            column_row("posts", "slug", "USER-DEFINED", "slug_text"),
            column_row("posts", "metadata", "jsonb", "jsonb", default="'{}'::jsonb"),
        ],
        ("public", "roles"): [
            column_row("roles", "id", "integer", "int4", nullable=False,
                       default="nextval('roles_id_seq'::regclass)", constraint="PRIMARY KEY"),
            column_row("roles", "name", "character varying", "varchar", nullable=False,
                       character_maximum_length=50),
        ],
        ("public", "user_roles"): [
            column_row("user_roles", "user_id", "integer", "int4", nullable=False, constraint="FOREIGN KEY"),
            column_row("user_roles", "role_id", "integer", "int4", nullable=False, constraint="FOREIGN KEY"),
        ],
    }


@pytest.fixture
def blog_element_types():
    return {
        ("public", "users"): [
            element_row("id", "integer", "int4"),
            element_row("email", "character varying", "varchar"),
            element_row("status", "user-defined", "user_status", enum_data=["active", "disabled"]),
            element_row("balance", "numeric", "numeric"),
            element_row("tags", "array", "_text", element_type="text"),
            element_row("profile", "jsonb", "jsonb"),
            element_row("location", "user-defined", "geometry"),
            element_row("created_at", "timestamp without time zone", "timestamp"),
        ],
        ("public", "posts"): [
            element_row("id", "integer", "int4"),
            element_row("user_id", "integer", "int4"),
            element_row("title", "text", "text"),
            element_row("slug", "user-defined", "slug_text"),
            element_row("metadata", "jsonb", "jsonb"),
        ],
        ("public", "roles"): [
            element_row("id", "integer", "int4"),
            element_row("name", "character varying", "varchar"),
        ],
        ("public", "user_roles"): [
            element_row("user_id", "integer", "int4"),
            element_row("role_id", "integer", "int4"),
        ],
    }


@pytest.fixture
def blog_catalog(blog_tables, blog_element_types):
    """FakeCatalog for the blog database, including optional metadata."""
    catalog = FakeCatalog(
        tables=blog_tables,
        element_types=blog_element_types,
        foreign_keys=[
            fk_row("posts", "user_id", "users"),
            fk_row("user_roles", "user_id", "users"),
            fk_row("user_roles", "role_id", "roles"),
        ],
        indexes=[
            {"schema_name": "public", "table_name": "users", "index_name": "users_pkey",
             "index_type": "btree", "constraint_type": "PRIMARY KEY", "columns": "id"},
            {"schema_name": "public", "table_name": "users", "index_name": "users_email_key",
             "index_type": "btree", "constraint_type": "UNIQUE", "columns": "email"},
            {"schema_name": "public", "table_name": "posts", "index_name": "posts_user_id_idx",
             "index_type": "btree", "constraint_type": "INDEX", "columns": "user_id"},
        ],
        relationships=[
            relationship_row("BelongsTo", ("posts", "user_id"), ("users", "id")),
            relationship_row("HasMany", ("posts", "user_id"), ("users", "id")),
        ],
    )
    catalog.domains[("public", "posts", "slug")] = [{
        "domain_name": "slug_text",
        "base_type": "text",
        "constraint_name": "slug_text_check",
        "check_expression": "CHECK (VALUE ~ '^[a-z0-9-]+$')",
        "constraint_type": "c",
        "default_value": None,
    }]
    catalog.geometry[("public", "users")] = [{"column_name": "location", "type": "point", "srid": 4326}]
    catalog.samples[("public", "users", "profile")] = (
        '{"name": "Ada", "address": {"city": "London", "zip": "N1"}, "tags": ["admin"]}'
    )
    catalog.schema_objects = {
        "functions": {"public": [{"schema": "public", "name": "touch_updated_at"}]},
        "views": {"public": [{"schema": "public", "name": "active_users"}]},
    }
    return catalog


@pytest.fixture
def blog_model(blog_catalog):
    """The introspected SchemaModel for the blog database."""
    return asyncio.run(SchemaIntrospector(blog_catalog).introspect())
