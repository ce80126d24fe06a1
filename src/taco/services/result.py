"""Result envelope returned by every taco service method.

Commands never see core exceptions: a failed operation comes back as
``ServiceResult(ok=False)`` whose error carries the ``TacoError`` code
(``NOT_FOUND``, ``INVALID_ISSUE``, ...) and its structured detail.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from taco.domain.errors import TacoError


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(
        cls,
        exc: TacoError,
        *,
        message: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> ServiceError:
        """Carry *exc*'s code and detail, optionally reworded or with extra detail."""
        return cls(
            code=exc.code,
            message=message or str(exc),
            detail={**exc.detail, **(detail or {})},
        )


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    ``op`` names the operation (``"new_issue"``, ``"list_issues"``...) and
    selects the human renderer. ``data`` is the operation payload; issue
    payloads always carry their ``id``.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @property
    def aborted(self) -> bool:
        return bool(self.data.get("aborted"))

    @property
    def issue_ids(self) -> list[str]:
        """IDs of the issues this result is about, in payload order."""
        if not self.ok or self.aborted:
            return []
        if "items" in self.data:
            return [str(item["id"]) for item in self.data["items"]]
        if "issues" in self.data:
            return [str(entry["issue"]["id"]) for entry in self.data["issues"]]
        if self.data.get("id"):
            return [str(self.data["id"])]
        return []
