"""Configuration command."""

from pathlib import Path
from typing import Annotated

import typer

from codeassist.cli.console import console, error, success


def register(app: typer.Typer) -> None:
    """Register the config command."""

    @app.command()
    def config(
        action: Annotated[
            str,
            typer.Argument(help="Action: show, validate"),
        ] = "show",
        path: Annotated[
            Path | None,
            typer.Option(
                "--path",
                "-p",
                help="Path to config file (default: $CODEASSIST_HOME/config.toml)",
            ),
        ] = None,
    ) -> None:
        """Show or validate the resolved configuration."""
        from rich.table import Table

        from codeassist.api.endpoint import resolve_endpoint
        from codeassist.config import ConfigError, load_config
        from codeassist.config.paths import get_all_paths

        if action not in ("show", "validate"):
            error(f"Unknown action: {action}")
            raise typer.Exit(1)

        try:
            cfg = load_config(path)
        except (ConfigError, FileNotFoundError) as e:
            error(str(e))
            raise typer.Exit(1) from None

        if action == "validate":
            success("Configuration is valid")
            return

        table = Table(title="Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        table.add_row("endpoint", resolve_endpoint(cfg.endpoint_override))
        table.add_row("project_id", cfg.project_id or "-")
        table.add_row("access_token", "set" if cfg.access_token else "not set")
        table.add_row("user_tier", cfg.user_tier or "-")
        table.add_row("session_logging", str(cfg.session_logging).lower())
        table.add_row("timeout_seconds", str(cfg.timeout_seconds))
        for name in sorted(cfg.http_options.headers):
            table.add_row(f"header {name}", cfg.http_options.headers[name])
        for name, location in get_all_paths().items():
            table.add_row(f"path {name}", str(location))
        console.print(table)
