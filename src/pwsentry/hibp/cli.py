"""
CLI commands for Pwned Passwords breach checking.
"""

import asyncio
import json

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from pwsentry.config import PasswordSecurityConfig, build_password_security
from pwsentry.hibp.checker import BreachChecker
from pwsentry.hibp.client import HIBPClient
from pwsentry.hibp.models import BreachCheckResult, RiskLevel, format_breach_count

console = Console()


RISK_STYLES = {
    RiskLevel.SAFE: "green",
    RiskLevel.LOW: "yellow",
    RiskLevel.MEDIUM: "orange3",
    RiskLevel.HIGH: "red",
    RiskLevel.CRITICAL: "bold red",
}


def print_check_result(result: BreachCheckResult) -> None:
    """Render a breach check result as a panel."""
    style = RISK_STYLES[result.risk_level]
    verdict = "[red]REJECT[/red]" if result.is_breached else "[green]ACCEPT[/green]"
    console.print(Panel(
        f"Breach policy: {verdict}\n"
        f"Risk: [{style}]{result.risk_level.value.upper()}[/{style}]"
        f" ({format_breach_count(result.breach_count)} sightings)\n\n"
        f"{result.risk_description}",
        title=f"Prefix {result.hash_prefix}"
    ))


@click.group()
@click.pass_context
def hibp(ctx: click.Context) -> None:
    """Have I Been Pwned - password breach commands.

    Password checks use k-anonymity: only the first 5 characters of the
    SHA-1 hash are sent to the API.
    """
    ctx.ensure_object(dict)
    ctx.obj["console"] = console


@hibp.command("password")
@click.option("--password", "-p", help="Password to check (or prompts securely)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check_password(
    ctx: click.Context,
    password: str | None,
    json_output: bool,
) -> None:
    """Check if a password has been exposed in data breaches.

    Example:
        pwsentry hibp password
    """
    if not password:
        password = click.prompt("Password to check", hide_input=True)

    config = PasswordSecurityConfig.from_env()

    async def _check():
        async with HIBPClient(
            range_api_url=config.range_api_url,
            user_agent=config.user_agent,
            timeout=config.request_timeout,
            add_padding=config.add_padding,
        ) as client:
            return await BreachChecker(client).check(password)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Checking password...", total=None)
        result = asyncio.run(_check())

    if json_output:
        console.print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    if result.degraded:
        console.print(f"[yellow]Warning: {result.error}[/yellow]")
        console.print(Panel(result.risk_description, title="Password Check Result"))
        raise SystemExit(2)

    print_check_result(result)


@hibp.command("cleanup")
@click.pass_context
def cleanup_cache(ctx: click.Context) -> None:
    """Delete expired breach check cache entries.

    Safe to run from cron while validations are in flight.

    Example:
        pwsentry hibp cleanup
    """
    async def _cleanup():
        async with build_password_security() as security:
            return await security.breach_checker.cleanup_expired()

    deleted = asyncio.run(_cleanup())
    console.print(f"[green]Removed {deleted} expired cache entr{'y' if deleted == 1 else 'ies'}[/green]")
