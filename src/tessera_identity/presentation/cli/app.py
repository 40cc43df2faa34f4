"""Tessera CLI application using Typer.

This module provides command-line utilities for operating the identity
core: secret generation, password policy tooling and database setup.
"""

import asyncio
import secrets
from typing import Optional

import typer
from pydantic import ValidationError as SettingsValidationError
from rich.console import Console
from rich.table import Table

from tessera_auth import PasswordHashingService, PasswordPolicyService, PolicyViolation
from tessera_auth.factories import build_password_policy
from tessera_config import configure_logging, get_settings

app = typer.Typer(
    name="tessera",
    help="Tessera - identity and access-control core CLI",
    no_args_is_help=True,
)
console = Console()

secrets_app = typer.Typer(
    name="secrets",
    help="Secret generation utilities",
    no_args_is_help=True,
)
password_app = typer.Typer(
    name="password",
    help="Password policy and hash utilities",
    no_args_is_help=True,
)
db_app = typer.Typer(
    name="db",
    help="Database schema management",
    no_args_is_help=True,
)
app.add_typer(secrets_app)
app.add_typer(password_app)
app.add_typer(db_app)

SECRET_NAMES = (
    "JWT_ACCESS_SECRET",
    "JWT_REFRESH_SECRET",
    "JWT_EMAIL_VERIFICATION_SECRET",
    "JWT_PASSWORD_RESET_SECRET",
)


def _policy_service() -> PasswordPolicyService:
    """Policy from settings when configured, otherwise the built-in policy."""
    try:
        return build_password_policy(get_settings())
    except SettingsValidationError:
        console.print("[dim]Settings not configured; using the default policy.[/dim]")
        return PasswordPolicyService()


@secrets_app.command("generate")
def generate_secrets() -> None:
    """Generate one signing secret per token type.

    Copy the output to your .env file.
    """
    console.print("\n[bold green]Tessera Secret Generation[/bold green]")
    console.print("=" * 60)
    console.print(
        "\nGenerated secrets for your [bold].env[/bold] configuration file:\n"
    )

    # 64 bytes of entropy per secret for HS256
    for name in SECRET_NAMES:
        console.print(
            f"[cyan]{name}[/cyan]={secrets.token_urlsafe(64)}", soft_wrap=True
        )

    console.print("\n" + "=" * 60)
    console.print(
        "[yellow]Keep these secrets secure and never commit them "
        "to version control![/yellow]\n"
    )


@password_app.command("check")
def check_password(
    password: Optional[str] = typer.Argument(
        None, help="Password to check (prompted if omitted)"
    ),
) -> None:
    """Check a password against the policy and print its strength score."""
    if password is None:
        password = typer.prompt("Password", hide_input=True)

    service = _policy_service()
    result = service.enforce(password)
    score = service.score(password)

    if isinstance(result, PolicyViolation):
        console.print(f"[red]Rejected[/red] ({result.reason}): {result.message}")
        console.print(f"Strength score: [bold]{score}[/bold]/100")
        raise typer.Exit(code=1)

    console.print("[green]Accepted[/green]")
    console.print(f"Strength score: [bold]{score}[/bold]/100")


@password_app.command("generate")
def generate_password(
    length: int = typer.Option(16, "--length", "-l", help="Password length"),
) -> None:
    """Generate a random password that satisfies the policy."""
    service = _policy_service()
    try:
        password = service.generate_compliant(length)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2) from e
    console.print(password, markup=False, highlight=False, soft_wrap=True)


@password_app.command("inspect")
def inspect_hash(
    password_hash: str = typer.Argument(..., help="Stored password hash"),
    rounds: int = typer.Option(
        PasswordHashingService.DEFAULT_ROUNDS,
        "--rounds",
        "-r",
        help="Work factor currently configured",
    ),
) -> None:
    """Show algorithm and cost of a stored hash and whether it needs rehashing."""
    service = PasswordHashingService(rounds=rounds)
    info = service.describe(password_hash)
    if info is None:
        console.print("[red]Not a recognised bcrypt hash[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=False)
    table.add_row("Algorithm", info.algorithm)
    table.add_row("Cost", str(info.cost))
    table.add_row("Well-formed", "yes" if service.is_hashed(password_hash) else "no")
    table.add_row("Needs rehash", "yes" if service.needs_rehash(password_hash) else "no")
    console.print(table)


@db_app.command("init")
def db_init() -> None:
    """Create all identity and token tables (idempotent)."""
    from tessera_identity.infrastructure.persistence.sqlalchemy import (
        create_engine,
        create_tables,
    )

    async def _run() -> None:
        engine = create_engine()
        try:
            await create_tables(engine)
        finally:
            await engine.dispose()

    asyncio.run(_run())
    console.print("[green]Database initialized[/green]")


@db_app.command("drop")
def db_drop(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Drop all identity and token tables."""
    from tessera_identity.infrastructure.persistence.sqlalchemy import (
        create_engine,
        drop_tables,
    )

    if not force:
        typer.confirm("This will DELETE ALL DATA. Continue?", abort=True)

    async def _run() -> None:
        engine = create_engine()
        try:
            await drop_tables(engine)
        finally:
            await engine.dispose()

    asyncio.run(_run())
    console.print("[yellow]Database tables dropped[/yellow]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Configure logging before any command runs."""
    if verbose:
        configure_logging(level="DEBUG")
        return
    try:
        configure_logging(get_settings())
    except SettingsValidationError:
        configure_logging(level="INFO")


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
