# tenant_auth/cli/tenant_cli.py
import typer
from typing import Annotated, Optional

from .utils_cli import echo_result, run_service_call
from ..dependencies import get_tenant_provisioner, get_tenant_service
from ..tenants.models import TenantRegistration, TenantUpdate
from ..users.models import User, UserRegistration

app = typer.Typer(
    name="tenant",
    help="Provision and manage tenants.",
    no_args_is_help=True
)


@app.command("register")
def register_tenant(
    name: Annotated[str, typer.Option(prompt="Tenant Name", help="Display name for the tenant.")],
    email: Annotated[
        str,
        typer.Option(prompt="Tenant Email", help="Contact email; its domain identifies the tenant.")
    ],
    admin_first_name: Annotated[str, typer.Option(prompt="Admin First Name")],
    admin_last_name: Annotated[str, typer.Option(prompt="Admin Last Name")],
    admin_email: Annotated[str, typer.Option(prompt="Admin Email")],
    admin_password: Annotated[
        str,
        typer.Option(prompt="Admin Password", hide_input=True, confirmation_prompt=True)
    ],
    phone: str = typer.Option("", help="Contact phone number."),
    address: str = typer.Option("", help="Postal address."),
):
    """Register a new tenant with its licence and first administrator."""

    async def _register():
        registration = TenantRegistration(
            name=name,
            email=email,
            phone=phone,
            address=address,
            user=UserRegistration(
                first_name=admin_first_name,
                last_name=admin_last_name,
                email=admin_email,
                password=admin_password,
            ),
        )
        provisioner = await get_tenant_provisioner()
        return await provisioner.register_tenant(registration)

    provisioned = run_service_call(_register())
    typer.secho(f"Tenant '{provisioned.tenant.id}' registered.", fg=typer.colors.GREEN)
    echo_result({
        "tenant": provisioned.tenant,
        "licence": provisioned.licence,
        "admin_user": User.model_validate(provisioned.admin_user),
    })


@app.command("get")
def get_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to retrieve.")]
):
    """Get details for a specific tenant."""

    async def _get():
        service = await get_tenant_service()
        return await service.get_tenant(tenant_id)

    echo_result(run_service_call(_get()))


@app.command("list")
def list_tenants(
    skip: Annotated[int, typer.Option("--skip", help="Number of tenants to skip.", min=0)] = 0,
    limit: Annotated[
        int,
        typer.Option("--limit", help="Maximum number of tenants to return.", min=1, max=100)
    ] = 100
):
    """List active tenants."""

    async def _list():
        service = await get_tenant_service()
        return await service.list_tenants(skip=skip, limit=limit)

    echo_result(run_service_call(_list()))


@app.command("update")
def update_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to update.")],
    new_name: Annotated[Optional[str], typer.Option("--name", help="New display name.")] = None,
    new_email: Annotated[Optional[str], typer.Option("--email", help="New contact email.")] = None,
    new_phone: Annotated[Optional[str], typer.Option("--phone", help="New phone number.")] = None,
    new_address: Annotated[Optional[str], typer.Option("--address", help="New postal address.")] = None,
):
    """Update an existing tenant. Only provided fields will be updated."""
    payload = {}

    # Build payload with only the fields that need to be updated
    if new_name is not None:
        payload["name"] = new_name
    if new_email is not None:
        payload["email"] = new_email
    if new_phone is not None:
        payload["phone"] = new_phone
    if new_address is not None:
        payload["address"] = new_address

    if not payload:
        typer.echo("No update parameters provided. Nothing to do.")
        raise typer.Exit()

    async def _update():
        service = await get_tenant_service()
        return await service.update_tenant(tenant_id, TenantUpdate(**payload))

    echo_result(run_service_call(_update()))


@app.command("delete")
def delete_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to delete.")]
):
    """Soft-delete a tenant and all of its users."""

    async def _delete():
        service = await get_tenant_service()
        return await service.delete_tenant(tenant_id)

    run_service_call(_delete())
    typer.secho(f"Tenant '{tenant_id}' deleted.", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
