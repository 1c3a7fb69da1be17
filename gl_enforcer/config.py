"""Declared desired state, loaded from a JSON config file."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from gl_enforcer.errors import ConfigError
from gl_enforcer.models import ACCESS_LEVELS, APPROVAL_SETTINGS, PROJECT_SETTINGS
from gl_enforcer.settings import ApprovalSettings, ProjectSettings

DEFAULT_CONFIG_PATH = "config.json"


def access_level(role: str | None) -> int:
    """Map a role name to GitLab's numeric access level. A missing role means no access."""
    if not role:
        return ACCESS_LEVELS["none"]
    try:
        return ACCESS_LEVELS[role]
    except KeyError:
        raise ConfigError(f"unknown access level '{role}' (expected one of: {', '.join(ACCESS_LEVELS)})") from None


@dataclass
class ProtectedBranchRule:
    name: str
    push_access_level: str = "none"
    merge_access_level: str = "none"

    @property
    def push_level(self) -> int:
        return access_level(self.push_access_level)

    @property
    def merge_level(self) -> int:
        return access_level(self.merge_access_level)


@dataclass
class ProtectedTagRule:
    name: str
    create_access_level: str = "none"

    @property
    def create_level(self) -> int:
        return access_level(self.create_access_level)


@dataclass
class EmailConfig:
    sender: str = ""
    to: list[str] = field(default_factory=list)
    server: str = ""
    port: int = 0

    @property
    def ready(self) -> bool:
        return bool(self.sender and self.server and self.port)


@dataclass
class ComplianceConfig:
    mandatory: dict[str, dict[str, Any]] = field(default_factory=dict)
    email: EmailConfig = field(default_factory=EmailConfig)


@dataclass
class Config:
    group_name: str
    include_subgroups: bool = False
    create_default_branch: bool = False
    project_whitelist: list[str] = field(default_factory=list)
    project_blacklist: list[str] = field(default_factory=list)
    protected_branches: list[ProtectedBranchRule] = field(default_factory=list)
    protected_tags: list[ProtectedTagRule] = field(default_factory=list)
    approval_settings: ApprovalSettings | None = None
    project_settings: ProjectSettings | None = None
    compliance: ComplianceConfig | None = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not self.group_name:
            raise ConfigError("group_name is required")
        if self.project_whitelist and self.project_blacklist:
            raise ConfigError("only one is allowed: project_blacklist / project_whitelist")
        if self.project_settings is not None and self.project_settings.name is not None:
            raise ConfigError("project_settings.name must be empty")
        roles = [r for b in self.protected_branches for r in (b.push_access_level, b.merge_access_level)]
        roles += [t.create_access_level for t in self.protected_tags]
        for role in roles:
            access_level(role)

    @property
    def declared_default_branch(self) -> str | None:
        if self.project_settings is None:
            return None
        return self.project_settings.default_branch

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        if not isinstance(data, dict):
            raise ConfigError("config must be a JSON object")
        try:
            return cls(
                group_name=data.get("group_name", ""),
                include_subgroups=bool(data.get("include_subgroups", False)),
                create_default_branch=bool(data.get("create_default_branch", False)),
                project_whitelist=list(data.get("project_whitelist") or []),
                project_blacklist=list(data.get("project_blacklist") or []),
                protected_branches=[ProtectedBranchRule(**b) for b in data.get("protected_branches") or []],
                protected_tags=[ProtectedTagRule(**t) for t in data.get("protected_tags") or []],
                approval_settings=_parse_patch(ApprovalSettings, APPROVAL_SETTINGS, data.get(APPROVAL_SETTINGS)),
                project_settings=_parse_patch(ProjectSettings, PROJECT_SETTINGS, data.get(PROJECT_SETTINGS)),
                compliance=_parse_compliance(data.get("compliance")),
            )
        except TypeError as e:
            raise ConfigError(f"invalid config entry: {e}") from e


def _parse_patch(kind, section: str, data: dict[str, Any] | None):
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ConfigError(f"{section} must be an object")
    unknown = kind.unknown_keys(data)
    if unknown:
        raise ConfigError(f"unknown {section} key(s): {', '.join(unknown)}")
    return kind(**data)


def _parse_compliance(data: dict[str, Any] | None) -> ComplianceConfig | None:
    if data is None:
        return None
    email = data.get("email") or {}
    return ComplianceConfig(
        mandatory={subsection: dict(settings) for subsection, settings in (data.get("mandatory") or {}).items()},
        email=EmailConfig(
            sender=email.get("from", ""),
            to=list(email.get("to") or []),
            server=email.get("server", ""),
            port=_parse_port(email.get("port")),
        ),
    )


def _parse_port(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        raise ConfigError(f"compliance.email.port must be a number, got {value!r}") from None


def load_config(path: str | Path) -> Config:
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"config file does not exist: {path}")
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise ConfigError(f"config file {path} is not valid JSON: {e}") from e
    return Config.from_dict(data)
