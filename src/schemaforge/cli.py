import importlib
import logging
import sys
from pathlib import Path
from typing import Any

import rich_click as click
from graphql import GraphQLSchema, print_schema
from pydantic import ValidationError
from rich.traceback import install

from schemaforge import __version__, log
from schemaforge.config import import_from_string, load_build_options
from schemaforge.errors import SchemaBuildError, SchemaValidationError
from schemaforge.metadata.storage import type_metadata_storage
from schemaforge.schema_factory import GraphQLSchemaFactory

module_option = click.option(
    "--module",
    "-m",
    "modules",
    type=str,
    required=True,
    multiple=True,
    help="Python module declaring the types (imported to register them). Can be specified multiple times.",
)

query_option = click.option(
    "--query",
    "-q",
    type=str,
    required=True,
    help="Query root type, as 'module:Class' or a class name from the first --module",
)

mutation_option = click.option(
    "--mutation",
    type=str,
    help="Mutation root type, as 'module:Class' or a class name from the first --module",
)

config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file containing build options",
)


def _resolve_root(reference: str | None, modules: tuple[str, ...]) -> Any:
    if reference is None:
        return None
    if ":" in reference or "." in reference:
        return import_from_string(reference)
    return import_from_string(f"{modules[0]}:{reference}")


def build_schema_from_modules(
    modules: tuple[str, ...], query: str, mutation: str | None, config: Path | None
) -> GraphQLSchema:
    """Import the declaring modules and build the schema, reporting failures as click errors."""
    try:
        options = load_build_options(config)
    except (TypeError, ValidationError) as e:
        raise click.ClickException(f"Invalid build options: {e}") from e

    for module in modules:
        log.debug(f"Importing {module}")
        try:
            importlib.import_module(module)
        except ImportError as e:
            raise click.ClickException(f"Cannot import module '{module}': {e}") from e

    try:
        schema = GraphQLSchemaFactory(type_metadata_storage).create(
            query=_resolve_root(query, modules),
            mutation=_resolve_root(mutation, modules),
            options=options,
        )
    except SchemaValidationError as e:
        raise click.ClickException(str(e)) from e
    except SchemaBuildError as e:
        raise click.ClickException(f"Schema build failed: {e}") from e
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    return schema


@click.group(context_settings={"auto_envvar_prefix": "schemaforge"})
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
def cli(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)


@cli.command(name="print")
@module_option
@query_option
@mutation_option
@config_option
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=False,
    help="Output file, stdout when omitted",
)
def print_command(
    modules: tuple[str, ...], query: str, mutation: str | None, config: Path | None, output: Path | None
) -> None:
    """Build the schema declared in the given modules and print it as SDL."""
    schema = build_schema_from_modules(modules, query, mutation, config)
    sdl = print_schema(schema)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(sdl + "\n", encoding="utf-8")
        log.info(f"Schema written to {output}")
    else:
        click.echo(sdl)


@cli.command(name="check")
@module_option
@query_option
@mutation_option
@config_option
def check_command(modules: tuple[str, ...], query: str, mutation: str | None, config: Path | None) -> None:
    """Build the schema declared in the given modules and report whether it is valid."""
    try:
        schema = build_schema_from_modules(modules, query, mutation, config)
    except click.ClickException as e:
        log.error(e.message)
        sys.exit(1)
    click.echo(f"Schema is valid: {len(schema.type_map)} types")


if __name__ == "__main__":
    cli()
