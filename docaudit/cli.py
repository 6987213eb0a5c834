"""CLI entrypoint for docaudit."""

import logging
import sys
from pathlib import Path

import click

from . import __version__


@click.group()
@click.version_option(__version__, prog_name="docaudit")
@click.option("--verbose", is_flag=True, help="Enable debug logging on stderr")
def cli(verbose: bool) -> None:
    """docaudit - Property-level audit trail for document changes.

    Compare before/after document snapshots and emit one audit entry per
    modified property.
    """
    if verbose:
        from rich.console import Console
        from rich.logging import RichHandler

        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


@cli.command()
@click.argument("before", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("after", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--schemas",
    "schema_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="TOML file declaring the document schemas",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="TOML file with an [audit] table (excluded_fields, date_format)",
)
@click.option("--principal", type=str, default="system", show_default=True, help="Actor name recorded on entries")
@click.option(
    "--log",
    "log_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Append entries to this JSON Lines audit log",
)
@click.option("--json", "output_json", is_flag=True, help="Output entries as JSON")
def diff(
    before: Path,
    after: Path,
    schema_path: Path,
    config_path: Path | None,
    principal: str,
    log_path: Path | None,
    output_json: bool,
) -> None:
    """Diff two document snapshots (YAML or JSON).

    Examples:

        docaudit diff before.yml after.yml --schemas schemas.toml

        docaudit diff before.yml after.yml --schemas schemas.toml --log audit.jsonl
    """
    from .commands.diff_cmd import run_diff

    try:
        run_diff(
            schema_path,
            before,
            after,
            principal=principal,
            config_path=config_path,
            log_path=log_path,
            output_json=output_json,
        )
    except (ValueError, KeyError) as e:
        raise click.ClickException(str(e)) from e


@cli.command("log")
@click.argument("log_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--doc", "doc_id", type=str, default=None, help="Only entries for this document id")
@click.option("--last", "last_n", type=int, default=None, help="Show only the last N entries")
@click.option("--json", "output_json", is_flag=True, help="Output entries as JSON Lines")
def log_cmd(log_path: Path, doc_id: str | None, last_n: int | None, output_json: bool) -> None:
    """Display entries from a JSON Lines audit log."""
    from .commands.diff_cmd import run_log

    count = run_log(log_path, doc_id=doc_id, last_n=last_n, output_json=output_json)
    sys.exit(0 if count > 0 else 1)


@cli.command()
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def schemas(schema_path: Path) -> None:
    """List schemas and properties declared in a schema file."""
    from .commands.diff_cmd import run_schemas

    try:
        run_schemas(schema_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
