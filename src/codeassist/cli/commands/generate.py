"""Content generation commands."""

import uuid
from pathlib import Path
from typing import Annotated

import typer

from codeassist.cli.console import console

DEFAULT_MODEL = "gemini-2.5-pro"

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to configuration file"),
]
ModelOption = Annotated[
    str,
    typer.Option("--model", "-m", help="Model to use"),
]


def register(app: typer.Typer) -> None:
    """Register the generate and count-tokens commands."""

    @app.command()
    def generate(
        prompt: Annotated[str, typer.Argument(help="Prompt text")],
        model: ModelOption = DEFAULT_MODEL,
        stream: Annotated[
            bool,
            typer.Option("--stream/--no-stream", help="Print output as it arrives"),
        ] = True,
        config: ConfigOption = None,
    ) -> None:
        """Generate content for a prompt.

        Examples:
            codeassist generate "Explain asyncio.TaskGroup"
            codeassist generate --no-stream -m gemini-2.5-flash "Hello"
        """
        from codeassist.api.types import GenerateContentParameters
        from codeassist.cli.runtime import open_server, run_command
        from codeassist.config import load_config

        async def run() -> None:
            cfg = load_config(config)
            params = GenerateContentParameters(model=model, contents=prompt)
            user_prompt_id = uuid.uuid4().hex
            async with open_server(cfg) as server:
                if stream:
                    chunks = await server.generate_content_stream(
                        params, user_prompt_id
                    )
                    async for chunk in chunks:
                        if chunk.text:
                            console.print(
                                chunk.text, end="", markup=False, highlight=False
                            )
                    console.print()
                else:
                    response = await server.generate_content(params, user_prompt_id)
                    console.print(response.text or "", markup=False, highlight=False)

        run_command(run())

    @app.command("count-tokens")
    def count_tokens(
        prompt: Annotated[str, typer.Argument(help="Prompt text")],
        model: ModelOption = DEFAULT_MODEL,
        config: ConfigOption = None,
    ) -> None:
        """Count the tokens a prompt would use."""
        from codeassist.api.types import CountTokensParameters
        from codeassist.cli.runtime import open_server, run_command
        from codeassist.config import load_config

        async def run() -> int:
            cfg = load_config(config)
            async with open_server(cfg) as server:
                response = await server.count_tokens(
                    CountTokensParameters(model=model, contents=prompt)
                )
            return response.total_tokens

        total = run_command(run())
        console.print(f"{total} tokens")
