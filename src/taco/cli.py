"""Root CLI group for taco with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from taco import __version__
from taco.commands import register_commands
from taco.commands._base import TacoGroup
from taco.commands._context import AppContext
from taco.config.settings import TacoSettings


@click.group(
    cls=TacoGroup,
    invoke_without_command=True,
    examples=(
        "taco init",
        "taco new",
        "taco list kind:defect",
        "taco --json show 0f3c91a2",
    ),
)
@click.version_option(version=__version__, prog_name="taco")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "-C",
    "--root",
    "repo_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory containing .taco/ (default: walk up from the working directory).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    repo_root: Path | None,
) -> None:
    """taco — a flat-file issue tracker."""
    settings = TacoSettings.from_cli(
        config_path=config_path,
        repo_root=repo_root,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
