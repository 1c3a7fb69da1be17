"""Approval settings and general project settings operations."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

from gl_enforcer.client import API_ERRORS
from gl_enforcer.errors import ReconcileError
from gl_enforcer.models import APPROVAL_SETTINGS, PROJECT_SETTINGS, ActionResult, Project
from gl_enforcer.operations.base import Operation
from gl_enforcer.settings import ApprovalSettings, ProjectSettings


class SettingsOperation(Operation):
    """Compare a declared settings patch against the project and apply it when they differ."""

    subsection: str = ""
    kind: type = object

    @abstractmethod
    def patch(self) -> Any: ...

    @abstractmethod
    def _fetch(self, project_id: int) -> dict: ...

    @abstractmethod
    def _update(self, project_id: int, data: dict) -> Any: ...

    def fetch(self, project: Project):
        """Current settings snapshot of ``project``."""
        self.logger.debug(f"Get {self.subsection} of project {project.path_with_namespace} ...")
        try:
            return self.kind.from_api(self._fetch(project.id))
        except API_ERRORS as e:
            raise ReconcileError(
                f"failed to get current {self.subsection} of project {project.path_with_namespace}: {e}"
            ) from e

    def reconcile(self, project: Project) -> tuple[Any, Any]:
        """Bring the project in line with the patch, returning the (before, after) snapshots."""
        original, updated = self.run.snapshots.pairs(self.subsection)
        path = project.path_with_namespace

        before = self.fetch(project)
        original[path] = before

        changes = before.changes_for(self.patch())
        self.logger.debug(f"{self.subsection} changes for {path}: {changes}")
        if not changes:
            self.logger.debug("No action required.")
            updated[path] = before
            return before, before

        if self.dry_run:
            self.logger.info(f"DRY-RUN: Skipped update of {self.subsection} on {path}")
            updated[path] = before
            return before, before

        try:
            self._update(project.id, {c.field: c.after for c in changes})
        except API_ERRORS as e:
            raise ReconcileError(f"failed to update {self.subsection} of project {path}: {e}") from e

        after = self.fetch(project)
        updated[path] = after
        self.logger.debug(f"Updating {self.subsection} of project {path} done.")
        return before, after

    def apply_to_project(self, project: Project) -> ActionResult:
        patch = self.patch()
        if patch is None:
            self.logger.debug(f"No {self.subsection} section provided in config")
            return self._result(project, "skipped", f"no {self.subsection} configured")

        try:
            before, after = self.reconcile(project)
        except ReconcileError as e:
            return self._result(project, "error", str(e))

        changed = [c.field for c in before.changes_for(patch)]
        if not changed:
            return self._result(project, "already_set", f"keys: {sorted(patch.declared())}")
        action = "would_apply" if self.dry_run else "applied"
        return self._result(project, action, f"changed: {changed}")

    def snapshot(self, project: Project) -> Any:
        """Fetch and record the current settings without changing anything."""
        original, _ = self.run.snapshots.pairs(self.subsection)
        try:
            current = self.fetch(project)
        except ReconcileError as e:
            original[project.path_with_namespace] = None
            self._result(project, "error", str(e), operation=f"{self.operation_name}:read")
            return None
        original[project.path_with_namespace] = current
        return current


class ApprovalSettingsOperation(SettingsOperation):
    """Merge request approval settings."""

    operation_name = "approval-settings"
    subsection = APPROVAL_SETTINGS
    kind = ApprovalSettings

    def patch(self) -> ApprovalSettings | None:
        return self.config.approval_settings

    def _fetch(self, project_id: int) -> dict:
        return self.client.get_approvals(project_id)

    def _update(self, project_id: int, data: dict) -> Any:
        return self.client.change_approvals(project_id, data)


class ProjectSettingsOperation(SettingsOperation):
    """General project settings."""

    operation_name = "project-settings"
    subsection = PROJECT_SETTINGS
    kind = ProjectSettings

    def patch(self) -> ProjectSettings | None:
        return self.config.project_settings

    def _fetch(self, project_id: int) -> dict:
        return self.client.get_project(project_id)

    def _update(self, project_id: int, data: dict) -> Any:
        return self.client.edit_project(project_id, data)
