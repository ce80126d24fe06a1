"""BaseService — foundation for all taco services.

Every service receives an :class:`IssueRepository` at construction time.
Core failures arrive as :class:`TacoError` subclasses and leave the
service as a failed :class:`ServiceResult`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from taco.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from taco.domain.errors import TacoError
    from taco.infrastructure.repository import IssueRepository

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class IssueService(BaseService):
            def show(self, ids: list[str]) -> ServiceResult:
                try:
                    issues = [self._repository.read(i) for i in ids]
                except TacoError as exc:
                    return self._failure("show", exc)
                ...
    """

    def __init__(self, repository: IssueRepository) -> None:
        self._repository = repository

    def _failure(
        self,
        op: str,
        exc: TacoError,
        *,
        message: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Map a core failure onto a failed result carrying its code and detail."""
        logger.debug("%s failed: %s: %s", op, exc.code, exc)
        error = ServiceError.from_exception(exc, message=message, detail=detail)
        return ServiceResult(ok=False, op=op, error=error)
