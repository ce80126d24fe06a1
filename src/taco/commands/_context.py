"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy schema and repository construction
and centralized result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taco.config.logging import configure_logging
from taco.config.models import apply_overrides
from taco.domain.errors import ConfigError
from taco.domain.issue import build_issue_schema
from taco.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from taco.config.settings import TacoSettings
    from taco.domain.schema import Schema
    from taco.infrastructure.repository import IssueRepository
    from taco.services.edit import EditService
    from taco.services.issues import IssueService
    from taco.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The schema and repository are built on first use so ``--help`` and
    ``--version`` never read configuration overlays or open the index.
    """

    def __init__(self, settings: TacoSettings) -> None:
        self.settings = settings
        self._schema: Schema | None = None
        self._repository: IssueRepository | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def schema(self) -> Schema:
        """Issue schema with the ``[attributes]`` overlay applied."""
        if self._schema is None:
            schema = build_issue_schema()
            try:
                apply_overrides(schema, self.settings.attributes)
                self.settings.profile.check(schema)
            except ConfigError as exc:
                raise click.ClickException(str(exc)) from exc
            self._schema = schema
        return self._schema

    @property
    def repository(self) -> IssueRepository:
        if self._repository is None:
            from taco.infrastructure.repository import IssueRepository

            self._repository = IssueRepository(self.settings.repo_root, schema=self.schema)
        return self._repository

    def issue_service(self) -> IssueService:
        from taco.services.issues import IssueService

        return IssueService(self.repository, profile=self.settings.profile)

    def edit_service(self) -> EditService:
        from taco.services.edit import EditService

        return EditService(self.repository, editor=self.settings.editor)

    def close(self) -> None:
        if self._repository is not None:
            self._repository.close()

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            if output:
                click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
