"""Tag protection operation."""

from __future__ import annotations

from gl_enforcer.config import ProtectedTagRule
from gl_enforcer.operations.protection import ProtectionOperation, matches_level


class ProtectTagOperation(ProtectionOperation):
    """Make protected tags match the declared create role."""

    operation_name = "protect-tag"
    kind = "protected_tags"
    label = "tag"

    def rules(self) -> list[ProtectedTagRule]:
        return self.config.protected_tags

    def matches(self, existing: dict, rule: ProtectedTagRule) -> bool:
        return matches_level(existing.get("create_access_levels"), rule.create_level)

    def payload(self, rule: ProtectedTagRule) -> dict:
        return {"name": rule.name, "create_access_level": rule.create_level}

    def describe(self, rule: ProtectedTagRule) -> str:
        return f"create={rule.create_access_level}"
