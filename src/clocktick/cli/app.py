"""Main CLI application."""

import typer

from clocktick.cli.commands import config, jobs, serve

app = typer.Typer(
    name="clocktick",
    help="clocktick - scheduled job callbacks",
    no_args_is_help=True,
)

serve.register(app)
jobs.register(app)
config.register(app)


if __name__ == "__main__":
    app()
