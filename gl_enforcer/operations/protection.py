"""Shared reconcile loop for branch and tag protection."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

from gl_enforcer.client import API_ERRORS, is_not_found
from gl_enforcer.errors import ReconcileError
from gl_enforcer.models import ActionResult, Project, ProtectionState
from gl_enforcer.operations.base import Operation


STATE_ACTIONS = {
    ProtectionState.UNCHANGED: "already_set",
    ProtectionState.NEEDS_REPLACE: "would_apply",
    ProtectionState.APPLIED: "applied",
}


def matches_level(access_levels: list[dict] | None, level: int) -> bool:
    """True only for exactly one access level entry equal to ``level``."""
    return bool(access_levels) and len(access_levels) == 1 and access_levels[0].get("access_level") == level


class ProtectionOperation(Operation):
    """Protect refs by name. GitLab can't edit a protection in place, so a mismatch is deleted and recreated."""

    kind: str = ""  # API collection: protected_branches / protected_tags
    label: str = ""

    @abstractmethod
    def rules(self) -> list[Any]: ...

    @abstractmethod
    def matches(self, existing: dict, rule: Any) -> bool: ...

    @abstractmethod
    def payload(self, rule: Any) -> dict: ...

    @abstractmethod
    def describe(self, rule: Any) -> str: ...

    def apply_to_project(self, project: Project) -> ActionResult:
        rules = self.rules()
        if not rules:
            return self._result(project, "skipped", f"no protected {self.label}s configured")

        result = None
        for rule in rules:
            operation = f"{self.operation_name}:{rule.name}"
            try:
                state = self.reconcile_rule(project, rule)
            except ReconcileError as e:
                # Remaining rules are left alone; the ref may now be unprotected
                return self._result(project, "error", str(e), operation=operation)
            result = self._result(project, STATE_ACTIONS[state], self.describe(rule), operation=operation)
        return result

    def current_protection(self, project: Project, name: str) -> dict | None:
        """Current protection of ``name``, or None when it is not protected."""
        try:
            return self.client.get_protected(project.id, self.kind, name)
        except API_ERRORS as e:
            if is_not_found(e):
                return None
            raise ReconcileError(f"failed to get protected {self.label} {name}: {e}") from e

    def reconcile_rule(self, project: Project, rule: Any) -> ProtectionState:
        existing = self.current_protection(project, rule.name)
        if existing is not None and self.matches(existing, rule):
            return ProtectionState.UNCHANGED

        if self.dry_run:
            self.logger.info(f"DRY-RUN: Skipped unprotect of {self.label} {rule.name} on {project.path_with_namespace}")
            self.logger.info(f"DRY-RUN: Skipped protect of {self.label} {rule.name} on {project.path_with_namespace}")
            return ProtectionState.NEEDS_REPLACE

        try:
            self.client.unprotect(project.id, self.kind, rule.name)
        except API_ERRORS as e:
            if not is_not_found(e):
                raise ReconcileError(f"failed to unprotect {self.label} {rule.name} before protection: {e}") from e

        try:
            self.client.protect(project.id, self.kind, self.payload(rule))
        except API_ERRORS as e:
            raise ReconcileError(f"failed to protect {self.label} {rule.name}: {e}") from e

        return ProtectionState.APPLIED
