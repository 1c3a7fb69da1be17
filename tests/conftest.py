"""Shared test fixtures for gl-enforcer tests."""

import logging
import sys
from pathlib import Path
from typing import Any

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from gl_enforcer.client import GitLabClient
from gl_enforcer.config import Config
from gl_enforcer.logging_utils import LOGGER_NAME
from gl_enforcer.models import Project, RunResult

MOCK_GITLAB_URL = "https://gitlab.example.com"
MOCK_API_URL = f"{MOCK_GITLAB_URL}/api/v4"


def make_config(**kwargs: Any) -> Config:
    """Build a Config from raw JSON-style values, with a group name filled in."""
    data = {"group_name": "myorg"}
    data.update(kwargs)
    return Config.from_dict(data)


@pytest.fixture(autouse=True)
def reset_logger():
    """CLI tests attach a stderr handler; drop it so it doesn't leak into later tests."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


@pytest.fixture
def mock_client():
    """GitLabClient pointing at mock server."""
    return GitLabClient(MOCK_GITLAB_URL, "test-token", dry_run=False)


@pytest.fixture
def dry_run_client():
    """GitLabClient in dry-run mode."""
    return GitLabClient(MOCK_GITLAB_URL, "test-token", dry_run=True)


@pytest.fixture
def run():
    return RunResult()


@pytest.fixture
def project() -> Project:
    return Project(id=123, path_with_namespace="myorg/my-project", name="my-project", default_branch="master")


@pytest.fixture
def sample_project_payload() -> dict[str, Any]:
    """Sample /projects/:id API response."""
    return {
        "id": 123,
        "name": "my-project",
        "path_with_namespace": "myorg/my-project",
        "web_url": f"{MOCK_GITLAB_URL}/myorg/my-project",
        "default_branch": "master",
        "visibility": "private",
        "merge_method": "merge",
        "only_allow_merge_if_pipeline_succeeds": False,
        "remove_source_branch_after_merge": True,
    }


@pytest.fixture
def sample_approvals_payload() -> dict[str, Any]:
    """Sample /projects/:id/approvals API response."""
    return {
        "approvers": [],
        "approver_groups": [],
        "approvals_before_merge": 0,
        "reset_approvals_on_push": True,
        "disable_overriding_approvers_per_merge_request": False,
        "merge_requests_author_approval": True,
        "merge_requests_disable_committers_approval": False,
        "require_password_to_approve": False,
    }
