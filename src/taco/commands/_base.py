"""Click base classes for taco commands.

Commands take ``examples=(...)``, a sequence of command lines. They are
printed by an eager ``--examples`` flag, so required arguments are never
checked when only examples were asked for.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click


def format_examples(command_path: str, examples: Sequence[str]) -> str:
    lines = [f"Examples for '{command_path}':", ""]
    lines.extend(f"  $ {example}" for example in examples)
    return "\n".join(lines)


class ExamplesMixin:
    """Adds the ``--examples`` flag to a command or group."""

    examples: tuple[str, ...]

    def _install_examples(self, examples: Sequence[str] | None) -> None:
        self.examples = tuple(examples or ())
        if not self.examples:
            return

        def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
            if value and not ctx.resilient_parsing:
                click.echo(format_examples(ctx.command_path, self.examples))
                ctx.exit(0)

        self.params.append(  # type: ignore[attr-defined]
            click.Option(
                ["--examples"],
                is_flag=True,
                expose_value=False,
                is_eager=True,
                callback=show,
                help="Show usage examples and exit.",
            )
        )


class TacoCommand(ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: Sequence[str] | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._install_examples(examples)


class TacoGroup(ExamplesMixin, click.Group):
    """Group whose subcommands default to :class:`TacoCommand`."""

    command_class = TacoCommand

    def __init__(self, *args: Any, examples: Sequence[str] | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._install_examples(examples)
