"""CLI for managing catalog user profiles."""

import asyncio
import logging
import sys

import click

from speciescatalog.database.core import DatabaseService
from speciescatalog.profiles.repository import ProfileRepository
from speciescatalog.system.path_resolver import PathResolver
from speciescatalog.utils.auth import AuthService
from speciescatalog.utils.result import Err

logger = logging.getLogger(__name__)


async def _create_user(
    database: DatabaseService, username: str, display_name: str, password: str
) -> Err | str:
    await database.initialize()
    try:
        auth = AuthService(ProfileRepository(database))
        result = await auth.register(username, display_name, password)
        if isinstance(result, Err):
            return result
        return str(result.value.id)
    finally:
        await database.dispose()


async def _list_users(database: DatabaseService) -> list[tuple[str, str, str]] | Err:
    await database.initialize()
    try:
        result = await ProfileRepository(database).list_profiles()
        if isinstance(result, Err):
            return result
        return [(str(p.id), p.username, p.display_name) for p in result.value]
    finally:
        await database.dispose()


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Species catalog user management.

    Examples:
      # Create a user (prompts for the password)
      speciescatalog-users create jane --display-name "Jane Goodall"

      # List users
      speciescatalog-users list
    """
    ctx.ensure_object(dict)
    ctx.obj["path_resolver"] = PathResolver()


def _database(ctx: click.Context) -> DatabaseService:
    path_resolver: PathResolver = ctx.obj["path_resolver"]
    return DatabaseService(path_resolver.get_database_path())


@cli.command()
@click.argument("username")
@click.option("--display-name", required=True, help="Name shown as the author of species")
@click.password_option(help="Password (prompted when omitted)")
@click.pass_context
def create(ctx: click.Context, username: str, display_name: str, password: str) -> None:
    """Create a user profile that can log in and author species."""
    outcome = asyncio.run(_create_user(_database(ctx), username, display_name, password))
    if isinstance(outcome, Err):
        click.echo(click.style(f"Error: {outcome.message}", fg="red"), err=True)
        sys.exit(1)
    click.echo(click.style(f"Created user {username} ({outcome})", fg="green"))


@cli.command("list")
@click.pass_context
def list_users(ctx: click.Context) -> None:
    """List all user profiles."""
    outcome = asyncio.run(_list_users(_database(ctx)))
    if isinstance(outcome, Err):
        click.echo(click.style(f"Error: {outcome.message}", fg="red"), err=True)
        sys.exit(1)
    if not outcome:
        click.echo("No users yet.")
        return
    for profile_id, username, display_name in outcome:
        click.echo(f"{username}\t{display_name}\t{profile_id}")


def main() -> None:
    """Entry point for the user management CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
