"""Job management commands."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer

from clocktick.cli.console import console, create_table, error, success, warning


def register(app: typer.Typer) -> None:
    """Register job commands."""

    @app.command("delete-job")
    def delete_job(
        job_id: Annotated[str, typer.Argument(help="ID of the job to delete")],
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
    ) -> None:
        """Delete a scheduled job."""
        from clocktick import client
        from clocktick.config import ConfigError, load_config
        from clocktick.errors import APIError, InvalidArgument

        try:
            clocktick_config = load_config(config)
        except (FileNotFoundError, ConfigError) as e:
            error(str(e))
            raise typer.Exit(1) from e

        if clocktick_config.api_key is None:
            error("No API key configured (set CLOCKTICK_API_KEY)")
            raise typer.Exit(1)

        try:
            asyncio.run(
                client.delete_job(
                    clocktick_config.api_key.get_secret_value(),
                    job_id,
                    base_url=clocktick_config.base_url,
                    timeout=clocktick_config.timeout,
                )
            )
        except (InvalidArgument, APIError) as e:
            error(f"Failed to delete job: {e}")
            raise typer.Exit(1) from e

        success(f"Deleted job {job_id}")

    @app.command()
    def routes(
        router_ref: Annotated[
            str,
            typer.Argument(
                metavar="APP",
                help="Router to inspect, as 'module:attribute'",
            ),
        ],
    ) -> None:
        """List registered routes and the endpoint each is delivered to."""
        from clocktick.cli.loading import import_router

        router = import_router(router_ref)
        leaves = list(router.tree.routes())
        if not leaves:
            warning("No routes registered")
            return

        table = create_table(
            "Routes",
            [("Path", "cyan"), ("Arguments", "magenta"), ("Endpoint", "green")],
        )
        for leaf in leaves:
            arity = f"{leaf.arity}+" if leaf.variadic else str(leaf.arity)
            endpoint = router.endpoint_for(leaf)
            if leaf.endpoint_id is None:
                endpoint += " (default)"
            table.add_row(leaf.path, arity, endpoint)
        console.print(table)
