"""Runs the reconcile operations over every project of the configured group."""

from __future__ import annotations

import logging

from gl_enforcer import report
from gl_enforcer.client import GitLabClient
from gl_enforcer.config import Config
from gl_enforcer.logging_utils import LOGGER_NAME
from gl_enforcer.mailer import send_email
from gl_enforcer.models import Project, RunResult
from gl_enforcer.operations import (
    ApprovalSettingsOperation,
    DefaultBranchOperation,
    ProjectSettingsOperation,
    ProtectBranchOperation,
    ProtectTagOperation,
)
from gl_enforcer.resolver import list_projects, resolve_group_id

COMPLIANCE_SUBJECT = "Compliance Report"


class ProjectManager:
    """Owns one run: its operations, their results and the settings snapshots."""

    def __init__(self, client: GitLabClient, config: Config):
        self.client = client
        self.config = config
        self.run = RunResult()
        self.logger = logging.getLogger(LOGGER_NAME)

        self.default_branch = DefaultBranchOperation(client, config, self.run)
        self.protect_branches = ProtectBranchOperation(client, config, self.run)
        self.protect_tags = ProtectTagOperation(client, config, self.run)
        self.project_settings = ProjectSettingsOperation(client, config, self.run)
        self.approval_settings = ApprovalSettingsOperation(client, config, self.run)

    def get_projects(self) -> list[Project]:
        """Resolve the configured group and list its projects. Resolution errors propagate."""
        self.logger.debug(f"Fetching projects under {self.config.group_name} ...")
        group_id = resolve_group_id(self.client, self.config.group_name)
        self.logger.debug(f"Group ID of {self.config.group_name} is {group_id}")
        return list_projects(
            self.client,
            group_id,
            include_subgroups=self.config.include_subgroups,
            whitelist=self.config.project_whitelist,
            blacklist=self.config.project_blacklist,
        )

    def sync_project(self, project: Project) -> None:
        branch_result = self.default_branch.apply_to_project(project)
        if branch_result.action == "error":
            self.logger.warning(f"Skipping branch protection of {project.path_with_namespace}")
        else:
            self.protect_branches.apply_to_project(project)
        self.protect_tags.apply_to_project(project)
        self.project_settings.apply_to_project(project)
        self.approval_settings.apply_to_project(project)

    def sync(self, projects: list[Project]) -> RunResult:
        self.logger.info(f"Identified {len(projects)} valid project(s).")
        for index, project in enumerate(projects, start=1):
            self.logger.info(f"Processing project #{index}: {project.path_with_namespace}")
            self.sync_project(project)
        return self.run

    def collect_compliance(self, projects: list[Project]) -> RunResult:
        """Record current settings of every project without changing anything."""
        self.logger.info(f"Identified {len(projects)} valid project(s).")
        for index, project in enumerate(projects, start=1):
            self.logger.info(f"Processing project #{index}: {project.path_with_namespace}")
            self.approval_settings.snapshot(project)
            self.project_settings.snapshot(project)
        return self.run

    def changelog_report(self) -> str:
        return report.format_changelog(report.build_changelog(self.run.snapshots))

    def compliance_report(self) -> str:
        return report.format_compliance_report(self.run.snapshots, self.config.compliance.mandatory)

    def send_compliance_email(self) -> bool:
        body = report.format_compliance_html(self.run.snapshots, self.config.compliance.mandatory)
        return send_email(self.config.compliance.email, COMPLIANCE_SUBJECT, body)
