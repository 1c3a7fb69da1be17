"""Data models and constants for gl-enforcer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_GITLAB_URL = "https://gitlab.com"
API_V4 = "/api/v4"
PER_PAGE = 100

# Retries are opt-in (--max-retries); remote failures surface as-is by default
DEFAULT_MAX_RETRIES = 0
RETRY_BACKOFF_FACTOR = 0.5  # seconds
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

# Branch new default branches are cut from
DEFAULT_SOURCE_BRANCH = "master"

# GitLab access level constants for the roles a config may name
ACCESS_LEVELS = {
    "none": 0,
    "developer": 30,
    "maintainer": 40,
}

APPROVAL_SETTINGS = "approval_settings"
PROJECT_SETTINGS = "project_settings"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ProtectionState(Enum):
    UNCHANGED = "unchanged"
    NEEDS_REPLACE = "needs_replace"
    APPLIED = "applied"


# ---------------------------------------------------------------------------
# Data Classes
# ---------------------------------------------------------------------------


@dataclass
class Project:
    """A GitLab project as returned by the group projects listing."""

    id: int
    path_with_namespace: str
    name: str = ""
    default_branch: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Project:
        return cls(
            id=data["id"],
            path_with_namespace=data["path_with_namespace"],
            name=data.get("name", ""),
            default_branch=data.get("default_branch"),
        )


@dataclass
class ActionResult:
    """Result of a single operation application."""

    target_path: str
    target_id: int
    operation: str
    action: str  # "applied", "would_apply", "already_set", "skipped", "error"
    detail: str = ""
    dry_run: bool = False
    target_type: str = "project"

    def to_dict(self) -> dict:
        d = {
            "target_type": self.target_type,
            "target_path": self.target_path,
            "target_id": self.target_id,
            "operation": self.operation,
            "action": self.action,
            "detail": self.detail,
        }
        if self.dry_run:
            d["dry_run"] = True
        return d


@dataclass
class SnapshotStore:
    """Before/after settings snapshots per project path, kept for one run."""

    approval_original: dict[str, Any] = field(default_factory=dict)
    approval_updated: dict[str, Any] = field(default_factory=dict)
    project_original: dict[str, Any] = field(default_factory=dict)
    project_updated: dict[str, Any] = field(default_factory=dict)

    def pairs(self, subsection: str) -> tuple[dict[str, Any], dict[str, Any]]:
        if subsection == APPROVAL_SETTINGS:
            return self.approval_original, self.approval_updated
        if subsection == PROJECT_SETTINGS:
            return self.project_original, self.project_updated
        raise KeyError(subsection)


@dataclass
class RunResult:
    """Aggregated outcome of one run, returned to the caller."""

    results: list[ActionResult] = field(default_factory=list)
    snapshots: SnapshotStore = field(default_factory=SnapshotStore)

    def add(self, result: ActionResult) -> ActionResult:
        self.results.append(result)
        return result

    def count(self, *actions: str) -> int:
        return sum(1 for r in self.results if r.action in actions)

    @property
    def has_errors(self) -> bool:
        return self.count("error") > 0
