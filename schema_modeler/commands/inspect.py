"""Inspection commands - introspect a database and print the intermediate model."""

import asyncio
import json
from datetime import datetime
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from ..catalog.base import CatalogSource
from ..catalog.models import SchemaModel
from ..catalog.postgres import PostgresCatalog
from ..config import settings
from ..errors import SchemaModelerError
from ..introspector import SchemaIntrospector
from ..migration.ordering import MigrationPlan
from ..migration.timestamps import TimestampAllocator
from ..models import GeneratorOptions, MigrationCategory, MigrationOptions, ModelOptions
from ..render.context import associations_context, model_context, plan_context

app = typer.Typer(help="Introspect a database catalog and print the results")
console = Console()

SchemaOption = Annotated[Optional[List[str]], typer.Option(
    "--schema", "-s",
    help="Schema to include. Can be specified multiple times (default: all user schemas)."
)]
TableOption = Annotated[Optional[List[str]], typer.Option(
    "--table", "-t",
    help="Table to include. Can be specified multiple times (default: all tables)."
)]
DatabaseUrlOption = Annotated[Optional[str], typer.Option(
    "--database-url", "-d",
    help="PostgreSQL DSN (or SCHEMA_MODELER_DATABASE_URL env)"
)]


def get_catalog(database_url: Optional[str]) -> CatalogSource:
    """Catalog collaborator for a run."""
    return PostgresCatalog(database_url or settings.database_url, pool_size=settings.catalog_pool_size)


def build_options(
    schemas: Optional[List[str]] = None,
    tables: Optional[List[str]] = None,
    replace_enums: bool = False,
    null_type: Optional[bool] = None,
    skip: Optional[List[str]] = None,
) -> GeneratorOptions:
    """Merge CLI flags with settings defaults."""
    migrations = MigrationOptions(**{category: False for category in (skip or [])})
    return GeneratorOptions(
        schemas=schemas or settings.default_schemas,
        tables=tables or settings.default_tables,
        model=ModelOptions(
            add_null_type_for_nullable=settings.add_null_type_for_nullable if null_type is None else null_type,
            replace_enums_with_types=replace_enums,
        ),
        migrations=migrations,
    )


async def introspect(catalog: CatalogSource, options: GeneratorOptions) -> SchemaModel:
    async with catalog:
        return await SchemaIntrospector(catalog, options).introspect()


async def plan(catalog: CatalogSource, options: GeneratorOptions, base: Optional[datetime]) -> MigrationPlan:
    async with catalog:
        introspector = SchemaIntrospector(catalog, options)
        model = await introspector.introspect()
        return await introspector.plan_migrations(model, base, settings.migration_quantum_seconds)


def run(coro):
    """Run a coroutine, turning library errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except SchemaModelerError as e:
        console.print(f"[red]Error ({e.code}): {e.message}[/red]")
        raise typer.Exit(1)


def catalog_or_exit(database_url: Optional[str]) -> CatalogSource:
    try:
        return get_catalog(database_url)
    except SchemaModelerError as e:
        console.print(f"[red]Error ({e.code}): {e.message}[/red]")
        raise typer.Exit(1)


@app.command("model")
def inspect_model(
    database_url: DatabaseUrlOption = None,
    schema: SchemaOption = None,
    table: TableOption = None,
    replace_enums: bool = typer.Option(False, "--replace-enums", help="Render enums as string-literal unions"),
    null_type: bool = typer.Option(True, "--null-type/--no-null-type", help="Append ' | null' for nullable columns"),
    contexts: bool = typer.Option(False, "--contexts", help="Print renderer contexts instead of the raw model"),
):
    """
    Print the introspected model as JSON.

    Examples:
        schema-modeler inspect model --schema public
        schema-modeler inspect model -s public -t users -t posts --contexts
    """
    options = build_options(schema, table, replace_enums, null_type)
    catalog = catalog_or_exit(database_url)
    model = run(introspect(catalog, options))

    if contexts:
        payload = {
            "models": [model_context(t, options) for t in model.tables],
            "associations": associations_context(model),
        }
    else:
        payload = model.to_dict()
    console.print_json(json.dumps(payload, default=str))


@app.command("relations")
def inspect_relations(
    database_url: DatabaseUrlOption = None,
    schema: SchemaOption = None,
    table: TableOption = None,
):
    """Show classified relationships, their aliases and alias collisions."""
    options = build_options(schema, table)
    catalog = catalog_or_exit(database_url)
    model = run(introspect(catalog, options))

    if not model.relationships:
        console.print("[yellow]No relationships found.[/yellow]")
        return

    rel_table = Table(title="Relationships")
    rel_table.add_column("Kind", style="cyan")
    rel_table.add_column("Source", style="green")
    rel_table.add_column("Target", style="green")
    rel_table.add_column("Junction")
    rel_table.add_column("Alias", style="magenta")

    for t in model.tables:
        for rel in t.relationships:
            rel_table.add_row(
                rel.kind.value,
                f"{rel.source.schema}.{rel.source.table}.{rel.source.column}",
                f"{rel.target.schema}.{rel.target.table}.{rel.target.column}",
                f"{rel.junction.schema}.{rel.junction.table}" if rel.junction else "-",
                rel.alias,
            )
    console.print(rel_table)

    dropped = [(t, t.dropped_aliases) for t in model.tables if t.dropped_aliases]
    if dropped:
        console.print("\n[yellow]Dropped due to alias collisions:[/yellow]")
        for t, count in dropped:
            console.print(f"  {t.schema}.{t.name}: {count}")


@app.command("migrations")
def inspect_migrations(
    database_url: DatabaseUrlOption = None,
    schema: SchemaOption = None,
    table: TableOption = None,
    skip: Annotated[Optional[List[str]], typer.Option(
        "--skip",
        help=f"Category to skip ({', '.join(c.value for c in MigrationCategory)}). Can be specified multiple times."
    )] = None,
    base: Optional[str] = typer.Option(None, "--base", help="Base timestamp (YYYYMMDDHHMMSS, default: now)"),
    contexts: bool = typer.Option(False, "--contexts", help="Print renderer contexts as JSON instead of a table"),
):
    """Show the ordered migration plan with allocated timestamps."""
    valid = {c.value for c in MigrationCategory}
    unknown = [s for s in (skip or []) if s not in valid]
    if unknown:
        console.print(f"[red]Unknown migration categories: {', '.join(unknown)}[/red]")
        raise typer.Exit(1)

    base_instant = None
    if base:
        try:
            base_instant = TimestampAllocator.decode(base)
        except ValueError:
            console.print(f"[red]Invalid base timestamp '{base}', expected YYYYMMDDHHMMSS[/red]")
            raise typer.Exit(1)

    options = build_options(schema, table, skip=skip)
    catalog = catalog_or_exit(database_url)
    migration_plan = run(plan(catalog, options, base_instant))

    if contexts:
        console.print_json(json.dumps(plan_context(migration_plan), default=str))
        return

    if not len(migration_plan):
        console.print("[yellow]No migrations planned.[/yellow]")
        return

    plan_table = Table(title="Migration Plan")
    plan_table.add_column("Timestamp", style="cyan")
    plan_table.add_column("Category", style="green")
    plan_table.add_column("File")
    for unit in migration_plan:
        plan_table.add_row(unit.timestamp, unit.category.value, unit.file_stem)
    console.print(plan_table)
