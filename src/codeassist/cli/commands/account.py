"""Account state commands."""

from typing import Annotated, Any

import typer

from codeassist.cli.commands.generate import ConfigOption
from codeassist.cli.console import console, dim


def _load_request(project_id: str | None) -> dict[str, Any]:
    request: dict[str, Any] = {
        "metadata": {
            "ideType": "IDE_UNSPECIFIED",
            "platform": "PLATFORM_UNSPECIFIED",
            "pluginType": "GEMINI",
        }
    }
    if project_id:
        request["cloudaicompanionProject"] = project_id
        request["metadata"]["duetProject"] = project_id
    return request


def register(app: typer.Typer) -> None:
    """Register the tier and settings commands."""

    @app.command()
    def tier(config: ConfigOption = None) -> None:
        """Show the current service tier."""
        from codeassist.cli.runtime import open_server, run_command
        from codeassist.config import load_config

        async def run() -> dict[str, Any]:
            cfg = load_config(config)
            async with open_server(cfg) as server:
                return await server.load_code_assist(_load_request(cfg.project_id))

        response = run_command(run())
        current = response.get("currentTier") or {}
        console.print(f"Tier: [bold]{current.get('id', 'unknown')}[/bold]")
        if name := current.get("name"):
            dim(name)
        if project := response.get("cloudaicompanionProject"):
            console.print(f"Project: {project}")

    @app.command()
    def settings(
        as_json: Annotated[
            bool, typer.Option("--json", help="Print the raw response")
        ] = False,
        config: ConfigOption = None,
    ) -> None:
        """Show the global user setting."""
        import json

        from codeassist.cli.runtime import open_server, run_command
        from codeassist.config import load_config

        async def run() -> dict[str, Any]:
            cfg = load_config(config)
            async with open_server(cfg) as server:
                return await server.get_code_assist_global_user_setting()

        response = run_command(run())
        if as_json:
            console.print_json(json.dumps(response))
            return
        for key, value in sorted(response.items()):
            console.print(f"{key}: {value}")
