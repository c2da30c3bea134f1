"""
pwsentry CLI - Main entry point for the command-line interface.
"""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pwsentry import __version__
from pwsentry.config import PasswordSecurityConfig
from pwsentry.exceptions import StoreError
from pwsentry.storage.sqlite_backend import SQLiteStore

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="pwsentry")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """pwsentry - Password Security Utilities

    Validate passwords against breach data, strength estimates and
    per-account password history.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    ctx.ensure_object(dict)
    ctx.obj["console"] = console


@main.command("config")
def show_config() -> None:
    """Show effective configuration."""
    config = PasswordSecurityConfig.from_env()

    table = Table(title="pwsentry Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for key, value in config.to_dict().items():
        table.add_row(key, str(value))

    console.print(table)

    for error in config.validate():
        console.print(f"[red]{error}[/red]")


@main.group()
def db() -> None:
    """Database commands."""
    pass


@db.command("init")
def db_init() -> None:
    """Create the cache and history tables."""
    config = PasswordSecurityConfig.from_env()
    store = SQLiteStore(config.get_sqlite_path())
    try:
        store.initialize()
    except StoreError as e:
        console.print(f"[red]Failed to initialize database: {e}[/red]")
        raise SystemExit(1)

    console.print(f"[green]Database initialized at {store.db_path}[/green]")


# Import and register subcommand groups
from pwsentry.hibp.cli import hibp
from pwsentry.security.cli import check, history

main.add_command(hibp)
main.add_command(check)
main.add_command(history)


if __name__ == "__main__":
    main()
