"""Subcommand modules for taco.

Provides register_commands() which uses deferred imports to keep
``taco --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every standalone command on the root CLI group."""
    from taco.commands.edit import edit
    from taco.commands.init_cmd import init_cmd
    from taco.commands.list_cmd import list_cmd
    from taco.commands.new import new
    from taco.commands.reindex import reindex
    from taco.commands.show import show
    from taco.commands.template import template

    cli.add_command(init_cmd)
    cli.add_command(new)
    cli.add_command(edit)
    cli.add_command(show)
    cli.add_command(list_cmd)
    cli.add_command(template)
    cli.add_command(reindex)
