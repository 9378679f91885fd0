"""CLI command modules."""

from codeassist.cli.commands import account, config, generate

__all__ = [
    "account",
    "config",
    "generate",
]
