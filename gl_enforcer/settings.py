"""Typed snapshots of project approval settings and general project settings.

Both the remote state and the declared patch are parsed through the same class,
so a patch compares against a snapshot field by field. Fields a patch leaves
out stay ``None`` and are never treated as a change.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Callable

from gl_enforcer.models import APPROVAL_SETTINGS, PROJECT_SETTINGS

NOT_VALID_SETTING = "NOT VALID SETTING"
NOT_AVAILABLE = "NOT AVAILABLE"


@dataclass(frozen=True)
class FieldChange:
    field: str
    before: Any
    after: Any


class _SettingsMixin:
    """Shared parsing and diffing for settings snapshots."""

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def unknown_keys(cls, data: dict[str, Any]) -> list[str]:
        known = set(cls.field_names())
        return sorted(k for k in data if k not in known)

    @classmethod
    def from_api(cls, data: dict[str, Any]):
        """Build a snapshot from an API payload, ignoring keys we do not track."""
        known = set(cls.field_names())
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def declared(self) -> dict[str, Any]:
        """Fields explicitly set (non-None) on this object."""
        return {k: v for k, v in self.to_dict().items() if v is not None}

    def changes_for(self, patch) -> list[FieldChange]:
        """Changes applying ``patch`` would make to this snapshot."""
        current = self.to_dict()
        return [
            FieldChange(name, current.get(name), value)
            for name, value in sorted(patch.declared().items())
            if current.get(name) != value
        ]

    def diff(self, other) -> list[FieldChange]:
        """Full field-by-field diff between two snapshots of the same kind."""
        before = self.to_dict()
        after = other.to_dict()
        return [
            FieldChange(name, before[name], after[name]) for name in self.field_names() if before[name] != after[name]
        ]


@dataclass(frozen=True)
class ApprovalSettings(_SettingsMixin):
    """Merge request approval configuration (``/projects/:id/approvals``)."""

    approvals_before_merge: int | None = None
    reset_approvals_on_push: bool | None = None
    disable_overriding_approvers_per_merge_request: bool | None = None
    merge_requests_author_approval: bool | None = None
    merge_requests_disable_committers_approval: bool | None = None
    require_password_to_approve: bool | None = None
    selective_code_owner_removals: bool | None = None


@dataclass(frozen=True)
class ProjectSettings(_SettingsMixin):
    """General project settings (``/projects/:id``)."""

    name: str | None = None
    description: str | None = None
    default_branch: str | None = None
    visibility: str | None = None
    issues_enabled: bool | None = None
    merge_requests_enabled: bool | None = None
    jobs_enabled: bool | None = None
    wiki_enabled: bool | None = None
    snippets_enabled: bool | None = None
    container_registry_enabled: bool | None = None
    packages_enabled: bool | None = None
    lfs_enabled: bool | None = None
    request_access_enabled: bool | None = None
    shared_runners_enabled: bool | None = None
    public_jobs: bool | None = None
    auto_devops_enabled: bool | None = None
    emails_disabled: bool | None = None
    only_allow_merge_if_pipeline_succeeds: bool | None = None
    only_allow_merge_if_all_discussions_are_resolved: bool | None = None
    allow_merge_on_skipped_pipeline: bool | None = None
    resolve_outdated_diff_discussions: bool | None = None
    remove_source_branch_after_merge: bool | None = None
    printing_merge_request_link_enabled: bool | None = None
    autoclose_referenced_issues: bool | None = None
    merge_method: str | None = None
    squash_option: str | None = None
    approvals_before_merge: int | None = None
    ci_config_path: str | None = None
    ci_default_git_depth: int | None = None
    build_timeout: int | None = None
    forking_access_level: str | None = None
    pages_access_level: str | None = None
    analytics_access_level: str | None = None
    merge_commit_template: str | None = None
    squash_commit_template: str | None = None
    suggestion_commit_message: str | None = None
    issue_branch_template: str | None = None
    topics: list[str] | None = None


SETTINGS_KINDS = {
    APPROVAL_SETTINGS: ApprovalSettings,
    PROJECT_SETTINGS: ProjectSettings,
}


def _accessor(name: str) -> Callable[[Any], Any]:
    return lambda snapshot: snapshot.to_dict()[name]


# subsection -> setting name -> accessor on the snapshot
SETTING_ACCESSORS: dict[str, dict[str, Callable[[Any], Any]]] = {
    subsection: {name: _accessor(name) for name in kind.field_names()} for subsection, kind in SETTINGS_KINDS.items()
}


def lookup_setting(subsection: str, setting: str, snapshot: Any) -> Any:
    """Actual value of ``setting`` on ``snapshot``, or a marker string when it can't be read."""
    accessor = SETTING_ACCESSORS.get(subsection, {}).get(setting)
    if accessor is None:
        return NOT_VALID_SETTING
    if snapshot is None:
        return NOT_AVAILABLE
    return accessor(snapshot)
