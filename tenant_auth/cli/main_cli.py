# tenant_auth/cli/main_cli.py
import logging
import typer
from typing import Annotated

from . import licence_cli, tenant_cli, user_cli
from .utils_cli import echo_result, run_service_call
from ..auth.models import LoginRequest
from ..dependencies import get_credential_verifier
from ..settings import settings
from ..storage.sqlite_base import get_sqlite_db_connection

# Main CLI application with help enabled when no arguments are provided
app = typer.Typer(
    name="tenant-auth",
    help=f"{settings.app_name} Command Line Interface.",
    no_args_is_help=True
)

app.add_typer(tenant_cli.app, name="tenant")
app.add_typer(user_cli.app, name="user")
app.add_typer(licence_cli.app, name="licence")


@app.callback()
def main_callback():
    """
    Tenant Auth main CLI application.
    Use 'tenant-auth tenant --help' to get started.
    """
    pass


@app.command("init-db")
def init_db():
    """Create the SQLite database and its tables if they do not exist."""

    async def _init():
        await get_sqlite_db_connection()

    run_service_call(_init())
    typer.secho(f"Database ready at {settings.sqlite_db_path}", fg=typer.colors.GREEN)


@app.command("login")
def login(
    email: Annotated[str, typer.Option(prompt="Email")],
    password: Annotated[str, typer.Option(prompt="Password", hide_input=True)],
    client_ip: Annotated[
        str,
        typer.Option("--client-ip", help="Address recorded as the login origin.")
    ] = "127.0.0.1",
):
    """Verify a user's credentials and print the authenticated identity."""

    async def _login():
        verifier = await get_credential_verifier()
        return await verifier.login(LoginRequest(email=email, password=password), client_ip)

    result = run_service_call(_login())
    typer.secho("Login successful.", fg=typer.colors.GREEN)
    echo_result(result)


def cli_entry_point():
    """Entry point function for console script registration in pyproject.toml"""
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(format="%(asctime)s %(name)s - [%(levelname)s] - %(message)s")
    logging.getLogger().setLevel("DEBUG" if settings.debug_mode else settings.log_level.upper())
    app()


if __name__ == "__main__":
    cli_entry_point()
