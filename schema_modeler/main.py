"""Schema Modeler - Main entry point."""

import logging

import typer
from rich.console import Console

from .commands import inspect
from .config import settings

app = typer.Typer(
    name="schema-modeler",
    help="Introspect a PostgreSQL catalog into a model of tables, relationships and migrations",
    add_completion=False,
)

# Add subcommands
app.add_typer(inspect.app, name="inspect")

console = Console()


@app.command()
def config():
    """Show current configuration."""
    console.print("[bold]Current Configuration[/bold]")
    console.print(f"  Database URL: {'Configured' if settings.database_url else 'Not set'}")
    console.print(f"  Default Schemas: {', '.join(settings.default_schemas) or 'All'}")
    console.print(f"  Default Tables: {', '.join(settings.default_tables) or 'All'}")
    console.print(f"  Catalog Pool Size: {settings.catalog_pool_size}")
    console.print(f"  Migration Quantum: {settings.migration_quantum_seconds}s")
    console.print(f"  Null Type For Nullable: {'Yes' if settings.add_null_type_for_nullable else 'No'}")
    console.print(f"  Log Level: {settings.log_level}")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
):
    """
    Schema Modeler - Turn a database catalog into an intermediate model.

    Examples:

        schema-modeler inspect model --schema public

        schema-modeler inspect relations -s public -t users -t posts

        schema-modeler inspect migrations --skip seeders --base 20240101000000
    """
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


if __name__ == "__main__":
    app()
