"""Default branch creation."""

from __future__ import annotations

from gl_enforcer.client import API_ERRORS, is_not_found
from gl_enforcer.models import DEFAULT_SOURCE_BRANCH, ActionResult, Project
from gl_enforcer.operations.base import Operation


class DefaultBranchOperation(Operation):
    """Create the declared default branch from master when it does not exist yet."""

    operation_name = "default-branch"

    def enabled(self) -> bool:
        branch = self.config.declared_default_branch
        return self.config.create_default_branch and bool(branch) and branch != DEFAULT_SOURCE_BRANCH

    def apply_to_project(self, project: Project) -> ActionResult:
        if not self.enabled():
            return self._result(project, "skipped", "no default branch to create")

        branch = self.config.declared_default_branch
        operation = f"{self.operation_name}:{branch}"
        self.logger.debug(f"Ensuring default branch {branch} existence ...")

        try:
            self.client.get_branch(project.id, branch)
            return self._result(project, "already_set", "branch exists", operation=operation)
        except API_ERRORS as e:
            if not is_not_found(e):
                return self._result(
                    project, "error", f"failed to check for default branch existence: {e}", operation=operation
                )

        if self.dry_run:
            self.logger.info(f"DRY-RUN: Skipped create of branch {branch} on {project.path_with_namespace}")
            return self._result(project, "would_apply", f"create from {DEFAULT_SOURCE_BRANCH}", operation=operation)

        try:
            self.client.create_branch(project.id, branch, DEFAULT_SOURCE_BRANCH)
        except API_ERRORS as e:
            return self._result(project, "error", f"failed to create default branch: {e}", operation=operation)

        return self._result(project, "applied", f"created from {DEFAULT_SOURCE_BRANCH}", operation=operation)
