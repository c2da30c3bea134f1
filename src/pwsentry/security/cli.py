"""
CLI commands for password validation and history.
"""

import asyncio
import json

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pwsentry.config import build_password_security
from pwsentry.security.validator import ValidationResult
from pwsentry.storage.base import ChangeReason

console = Console()

SCORE_LABELS = ["Very weak", "Weak", "Fair", "Strong", "Very strong"]
SCORE_COLORS = ["bold red", "red", "yellow", "green", "bold green"]


def print_result(result: ValidationResult) -> None:
    """Render a validation result."""
    strength = result.strength
    color = SCORE_COLORS[strength.score]

    status = "[green]ACCEPTED[/green]" if result.is_valid else "[red]REJECTED[/red]"
    console.print(Panel(
        f"Status: {status}\n"
        f"Strength: [{color}]{SCORE_LABELS[strength.score]} ({strength.score}/4)[/{color}]\n"
        f"Estimated crack time: {strength.crack_time or 'unknown'}\n"
        f"Breached: {'[red]Yes[/red] (' + format(strength.breach_count, ',') + ')' if strength.is_breached else '[green]No[/green]'}\n"
        f"Reused: {'[red]Yes[/red]' if strength.is_reused else '[green]No[/green]'}",
        title="Password Validation"
    ))

    if result.errors:
        table = Table(title="Problems")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Reason")
        for i, error in enumerate(result.errors, 1):
            table.add_row(str(i), error)
        console.print(table)

    if result.degraded_checks:
        console.print(
            f"[yellow]Skipped (service unavailable): {', '.join(result.degraded_checks)}[/yellow]"
        )


@click.command("check")
@click.option("--account", "-a", "account_id", help="Existing account ID (enables history and caching)")
@click.option("--input", "-i", "user_inputs", multiple=True, help="User-specific string (email, name)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def check(
    account_id: str | None,
    user_inputs: tuple[str, ...],
    json_output: bool,
) -> None:
    """Validate a candidate password.

    Without --account the password is validated for a new account.

    Example:
        pwsentry check --account 42 -i alice@example.com -i Alice
    """
    password = click.prompt("Password", hide_input=True)

    async def _validate():
        async with build_password_security() as security:
            if account_id:
                return await security.validator.validate_for_existing_account(
                    password, account_id, list(user_inputs)
                )
            return await security.validator.validate_for_new_account(password, list(user_inputs))

    result = asyncio.run(_validate())

    if json_output:
        console.print(json.dumps(result.to_dict(), indent=2))
    else:
        print_result(result)

    if not result.is_valid:
        raise SystemExit(1)


@click.group()
def history() -> None:
    """Password history commands."""
    pass


@history.command("record")
@click.argument("account_id")
@click.option(
    "--reason",
    type=click.Choice([r.value for r in ChangeReason]),
    default=ChangeReason.USER_ACTION.value,
    help="Source of the change",
)
def record(account_id: str, reason: str) -> None:
    """Hash a new password and add it to an account's history.

    Example:
        pwsentry history record 42 --reason admin_reset
    """
    password = click.prompt("New password", hide_input=True, confirmation_prompt=True)

    async def _record():
        async with build_password_security() as security:
            return await security.history.record_password(
                account_id, password, change_reason=ChangeReason(reason)
            )

    if asyncio.run(_record()):
        console.print(f"[green]Recorded password change for account {account_id}[/green]")
    else:
        console.print("[red]Password history could not be updated (see log)[/red]")
        raise SystemExit(1)
