# tenant_auth/cli/licence_cli.py
import typer
from datetime import datetime
from typing import Annotated, Optional

from .utils_cli import echo_result, run_service_call
from ..dependencies import get_licence_service
from ..licences.models import TenantLicenceUpdate

app = typer.Typer(
    name="licence",
    help="Inspect and adjust tenant licences.",
    no_args_is_help=True
)


@app.command("show")
def show_licence(
    tenant_id: Annotated[str, typer.Argument(help="The tenant whose licence to show.")]
):
    """Show seat usage and expiry of a tenant's licence."""

    async def _show():
        service = await get_licence_service()
        return await service.get_licence_for_tenant(tenant_id)

    echo_result(run_service_call(_show()))


@app.command("list")
def list_licences(
    skip: Annotated[int, typer.Option("--skip", min=0)] = 0,
    limit: Annotated[int, typer.Option("--limit", min=1, max=100)] = 100,
):
    """List tenant licences."""

    async def _list():
        service = await get_licence_service()
        return await service.list_licences(skip=skip, limit=limit)

    echo_result(run_service_call(_list()))


@app.command("update")
def update_licence(
    tenant_id: Annotated[str, typer.Argument(help="The tenant whose licence to update.")],
    seats: Annotated[
        Optional[int],
        typer.Option("--seats", min=0, help="New number of licenced seats.")
    ] = None,
    expiry: Annotated[
        Optional[datetime],
        typer.Option("--expiry", help="New expiry date (UTC unless an offset is given).")
    ] = None,
    no_expiry: Annotated[
        bool,
        typer.Option("--no-expiry", help="Remove the expiry date.")
    ] = False,
):
    """Change seat capacity and/or expiry of a tenant's licence."""
    if expiry is not None and no_expiry:
        typer.secho("Error: --expiry and --no-expiry are mutually exclusive.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    payload = {}
    if seats is not None:
        payload["licenced_seats"] = seats
    if expiry is not None:
        payload["expiry_date"] = expiry
    if no_expiry:
        payload["expiry_date"] = None

    if not payload:
        typer.echo("No update parameters provided. Nothing to do.")
        raise typer.Exit()

    async def _update():
        service = await get_licence_service()
        return await service.update_licence(tenant_id, TenantLicenceUpdate(**payload))

    echo_result(run_service_call(_update()))


if __name__ == "__main__":
    app()
