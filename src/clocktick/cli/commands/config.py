"""Configuration management commands."""

from pathlib import Path
from typing import Annotated

import typer

from clocktick.cli.console import console, create_table, error, success, warning


def register(app: typer.Typer) -> None:
    """Register the config command."""

    @app.command()
    def config(
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $CLOCKTICK_HOME/config.toml)",
            ),
        ] = None,
    ) -> None:
        """Validate configuration and show a summary."""
        from clocktick.auth import load_public_key
        from clocktick.config import ConfigError, load_config
        from clocktick.errors import ConfigurationError

        try:
            config_obj = load_config(path)
        except FileNotFoundError as e:
            error(str(e))
            raise typer.Exit(1) from e
        except ConfigError as e:
            error(f"Configuration validation failed:\n{e}")
            raise typer.Exit(1) from e

        def status(present: bool) -> str:
            return "[green]set[/green]" if present else "[yellow]missing[/yellow]"

        table = create_table(
            "Configuration Summary", [("Setting", "cyan"), ("Value", "")]
        )
        table.add_row("API key", status(config_obj.api_key is not None))
        table.add_row("Encryption key", status(config_obj.encryption_key is not None))
        table.add_row("Public key", status(bool(config_obj.public_key)))
        table.add_row("Default endpoint", config_obj.default_endpoint_id or "-")
        table.add_row("Base URL", config_obj.base_url)
        server = config_obj.server
        table.add_row("Server", f"{server.host}:{server.port}{server.webhook_path}")
        console.print(table)

        problems: list[str] = []
        if config_obj.api_key is None:
            problems.append("api_key is not set")
        if config_obj.encryption_key is None:
            problems.append("encryption_key is not set")
        if not config_obj.default_endpoint_id:
            problems.append("default_endpoint_id is not set")
        if not config_obj.public_key:
            problems.append("public_key is not set")
        else:
            try:
                load_public_key(config_obj.public_key)
            except ConfigurationError as e:
                problems.append(str(e))

        if problems:
            for problem in problems:
                warning(problem)
            raise typer.Exit(1)

        success("Configuration is valid")
