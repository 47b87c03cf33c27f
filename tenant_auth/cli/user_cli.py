# tenant_auth/cli/user_cli.py
import typer
from typing import Annotated, Optional

from .utils_cli import echo_result, run_service_call
from ..dependencies import get_credential_verifier, get_user_registrar, get_user_service
from ..users.models import User, UserRegistration, UserUpdate

app = typer.Typer(
    name="user",
    help="Manage the users of a tenant.",
    no_args_is_help=True
)


@app.command("add")
def add_user(
    tenant_id: Annotated[str, typer.Argument(help="The tenant the user belongs to.")],
    first_name: Annotated[str, typer.Option(prompt="First Name")],
    last_name: Annotated[str, typer.Option(prompt="Last Name")],
    email: Annotated[str, typer.Option(prompt="Email")],
    password: Annotated[
        str,
        typer.Option(prompt="Password", hide_input=True, confirmation_prompt=True)
    ],
):
    """Add a user to a tenant, consuming one licence seat."""

    async def _add():
        registration = UserRegistration(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=password,
        )
        registrar = await get_user_registrar()
        return await registrar.register_user(tenant_id, registration)

    echo_result(User.model_validate(run_service_call(_add())))


@app.command("get")
def get_user(
    tenant_id: Annotated[str, typer.Argument(help="The tenant the user belongs to.")],
    user_id: Annotated[str, typer.Argument(help="The ID of the user to retrieve.")],
):
    """Get details for a specific user."""

    async def _get():
        service = await get_user_service()
        return await service.get_user(tenant_id, user_id)

    echo_result(run_service_call(_get()))


@app.command("list")
def list_users(
    tenant_id: Annotated[str, typer.Argument(help="The tenant whose users to list.")]
):
    """List the active users of a tenant."""

    async def _list():
        service = await get_user_service()
        return await service.list_users(tenant_id)

    echo_result(run_service_call(_list()))


@app.command("update")
def update_user(
    tenant_id: Annotated[str, typer.Argument(help="The tenant the user belongs to.")],
    user_id: Annotated[str, typer.Argument(help="The ID of the user to update.")],
    first_name: Annotated[Optional[str], typer.Option("--first-name")] = None,
    last_name: Annotated[Optional[str], typer.Option("--last-name")] = None,
    email: Annotated[Optional[str], typer.Option("--email")] = None,
):
    """Update a user's profile. Only provided fields will be updated."""
    payload = {}
    if first_name is not None:
        payload["first_name"] = first_name
    if last_name is not None:
        payload["last_name"] = last_name
    if email is not None:
        payload["email"] = email

    if not payload:
        typer.echo("No update parameters provided. Nothing to do.")
        raise typer.Exit()

    async def _update():
        service = await get_user_service()
        return await service.update_user(tenant_id, user_id, UserUpdate(**payload))

    echo_result(run_service_call(_update()))


@app.command("delete")
def delete_user(
    tenant_id: Annotated[str, typer.Argument(help="The tenant the user belongs to.")],
    user_id: Annotated[str, typer.Argument(help="The ID of the user to delete.")],
):
    """Soft-delete a user and free its licence seat."""

    async def _delete():
        registrar = await get_user_registrar()
        return await registrar.delete_user(tenant_id, user_id)

    run_service_call(_delete())
    typer.secho(f"User '{user_id}' deleted.", fg=typer.colors.GREEN)


@app.command("unlock")
def unlock_user(
    tenant_id: Annotated[str, typer.Argument(help="The tenant the user belongs to.")],
    user_id: Annotated[str, typer.Argument(help="The ID of the locked user.")],
):
    """Reset the failed login counter of a locked user."""

    async def _unlock():
        verifier = await get_credential_verifier()
        return await verifier.unlock_account(tenant_id, user_id)

    run_service_call(_unlock())
    typer.secho(f"User '{user_id}' unlocked.", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
