# tenant_auth/cli/utils_cli.py
import asyncio
import json
from typing import Any, Awaitable

import typer
from pydantic import BaseModel, ValidationError

from ..errors import TenantAuthError
from ..storage.sqlite_base import close_sqlite_db_connection


def run_service_call(call: Awaitable[Any]) -> Any:
    """
    Run one service coroutine to completion and close the database afterwards.

    Domain and validation errors are printed in red and turned into exit code 1;
    anything else propagates with its traceback.
    """

    async def _runner() -> Any:
        try:
            return await call
        finally:
            await close_sqlite_db_connection()

    try:
        return asyncio.run(_runner())
    except TenantAuthError as e:
        typer.secho(f"Error: {e.detail}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except ValidationError as e:
        typer.secho(f"Error: Invalid input.\n{e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {key: _to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    return value


def echo_result(result: Any) -> None:
    """Print models (or dicts and lists of them) as indented JSON."""
    typer.echo(json.dumps(_to_jsonable(result), indent=2))
