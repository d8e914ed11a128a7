"""Server command for running the webhook receiver."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer


def register(app: typer.Typer) -> None:
    """Register the serve command."""

    @app.command()
    def serve(
        router_ref: Annotated[
            str,
            typer.Argument(
                metavar="APP",
                help="Router to serve, as 'module:attribute'",
            ),
        ],
        config: Annotated[
            Path | None,
            typer.Option(
                "--config",
                "-c",
                help="Path to configuration file",
            ),
        ] = None,
        host: Annotated[
            str | None,
            typer.Option(
                "--host",
                "-h",
                help="Host to bind to",
            ),
        ] = None,
        port: Annotated[
            int | None,
            typer.Option(
                "--port",
                "-p",
                help="Port to bind to",
            ),
        ] = None,
    ) -> None:
        """Receive job callbacks over HTTP."""
        try:
            asyncio.run(_run_server(router_ref, config, host, port))
        except KeyboardInterrupt:
            # Use print here since logging may not be configured yet
            print("\nServer stopped")


async def _run_server(
    router_ref: str,
    config_path: Path | None = None,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Run the server asynchronously."""
    from clocktick.cli.console import error
    from clocktick.cli.loading import import_router
    from clocktick.config import ConfigError, load_config
    from clocktick.logging import configure_logging
    from clocktick.server import ServerRunner, create_app

    configure_logging(use_rich=True)

    try:
        clocktick_config = load_config(config_path)
    except (FileNotFoundError, ConfigError) as e:
        error(str(e))
        raise typer.Exit(1) from e

    router = import_router(router_ref)
    server_config = clocktick_config.server
    app = create_app(router, webhook_path=server_config.webhook_path)

    runner = ServerRunner(
        app,
        host=host or server_config.host,
        port=port or server_config.port,
    )
    await runner.run()
