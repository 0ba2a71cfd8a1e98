"""BaseService: foundation for closuredeps services.

Every service receives a :class:`Workspace` at construction time. The
workspace provides the lazily built dependency graph and scan issues.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING

import structlog

from closuredeps.domain.graph import CycleDetectedError, UnknownPackageError
from closuredeps.services.result import ServiceResult

if TYPE_CHECKING:
    from closuredeps.infrastructure.workspace import Workspace


class BaseService:
    """Base for service-layer classes.

    Usage::

        class ResolveService(BaseService):
            def resolve(self, entries: list[str]) -> ServiceResult:
                with self._operation("resolve"), self._workspace.lock:
                    nodes = self._workspace.graph.get_dependencies(entries)
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    def _operation(self, op: str) -> AbstractContextManager[None]:
        """Bind *op* and the scan root to every log record in the block."""
        return structlog.contextvars.bound_contextvars(op=op, root=str(self._workspace.root))

    def _issue_warnings(self) -> list[str]:
        return [issue.message for issue in self._workspace.issues]

    @staticmethod
    def _dependency_failure(
        op: str,
        exc: UnknownPackageError | CycleDetectedError,
        *,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Translate a graph exception into an error result."""
        detail: dict[str, str] = {}
        if isinstance(exc, UnknownPackageError):
            code = "UNKNOWN_PACKAGE"
            detail["package"] = exc.package
        else:
            code = "CYCLE_DETECTED"
        if exc.from_package is not None:
            detail["from"] = exc.from_package
        if exc.to_package is not None:
            detail["to"] = exc.to_package
        return ServiceResult.failure(op, code, str(exc), warnings=warnings, **detail)
