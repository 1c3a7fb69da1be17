"""Per-project reconcile operations for gl-enforcer."""

from gl_enforcer.operations.base import Operation
from gl_enforcer.operations.default_branch import DefaultBranchOperation
from gl_enforcer.operations.protect_branch import ProtectBranchOperation
from gl_enforcer.operations.protect_tag import ProtectTagOperation
from gl_enforcer.operations.settings import ApprovalSettingsOperation, ProjectSettingsOperation, SettingsOperation

__all__ = [
    "Operation",
    "DefaultBranchOperation",
    "ProtectBranchOperation",
    "ProtectTagOperation",
    "SettingsOperation",
    "ApprovalSettingsOperation",
    "ProjectSettingsOperation",
]
