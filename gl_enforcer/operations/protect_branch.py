"""Branch protection operation."""

from __future__ import annotations

from gl_enforcer.config import ProtectedBranchRule
from gl_enforcer.operations.protection import ProtectionOperation, matches_level


class ProtectBranchOperation(ProtectionOperation):
    """Make protected branches match the declared push/merge roles."""

    operation_name = "protect-branch"
    kind = "protected_branches"
    label = "branch"

    def rules(self) -> list[ProtectedBranchRule]:
        return self.config.protected_branches

    def matches(self, existing: dict, rule: ProtectedBranchRule) -> bool:
        return matches_level(existing.get("push_access_levels"), rule.push_level) and matches_level(
            existing.get("merge_access_levels"), rule.merge_level
        )

    def payload(self, rule: ProtectedBranchRule) -> dict:
        return {
            "name": rule.name,
            "push_access_level": rule.push_level,
            "merge_access_level": rule.merge_level,
        }

    def describe(self, rule: ProtectedBranchRule) -> str:
        return f"push={rule.push_access_level}, merge={rule.merge_access_level}"
