"""Base class for per-project reconcile operations."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from gl_enforcer.logging_utils import LOGGER_NAME
from gl_enforcer.models import ActionResult, Project, RunResult

if TYPE_CHECKING:
    from gl_enforcer.client import GitLabClient
    from gl_enforcer.config import Config

ICONS = {
    "applied": "✓",
    "already_set": "·",
    "skipped": "→",
    "error": "✗",
    "would_apply": "○",
}


class Operation(ABC):
    """Base class for all operations."""

    operation_name: str = ""

    def __init__(self, client: GitLabClient, config: Config, run: RunResult):
        self.client = client
        self.config = config
        self.run = run
        self.logger = logging.getLogger(LOGGER_NAME)

    @property
    def dry_run(self) -> bool:
        return self.client.dry_run

    @abstractmethod
    def apply_to_project(self, project: Project) -> ActionResult:
        """Apply this operation to a single project."""
        ...

    def _result(self, project: Project, action: str, detail: str = "", operation: str | None = None) -> ActionResult:
        return self._record(
            ActionResult(
                target_path=project.path_with_namespace,
                target_id=project.id,
                operation=operation or self.operation_name,
                action=action,
                detail=detail,
                dry_run=self.dry_run and action == "would_apply",
            )
        )

    def _record(self, result: ActionResult) -> ActionResult:
        self.run.add(result)
        icon = ICONS.get(result.action, "?")
        level = logging.ERROR if result.action == "error" else logging.INFO

        # Log to structured logger
        record = self.logger.makeRecord(LOGGER_NAME, level, "", 0, "", (), None)
        record.action_result = result
        handler = self.logger.handlers[0] if self.logger.handlers else None
        json_mode = handler is not None and getattr(handler.formatter, "json_mode", False)
        if json_mode:
            self.logger.handle(record)
            return result

        prefix = "[DRY-RUN] " if result.dry_run else ""
        self.logger.log(
            level,
            f"{prefix}{icon} {result.target_path}: {result.operation} → {result.action}"
            f"{' (' + result.detail + ')' if result.detail else ''}",
        )
        return result
