"""Main CLI application."""

from typing import Annotated

import typer

from codeassist.cli.commands import account, config, generate

app = typer.Typer(
    name="codeassist",
    help="codeassist - Code Assist API client",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    from codeassist.logging import configure_logging

    configure_logging(level="DEBUG" if verbose else None)


generate.register(app)
account.register(app)
config.register(app)


if __name__ == "__main__":
    app()
