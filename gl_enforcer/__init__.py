"""
gl-enforcer: enforce declared settings on every project of a GitLab group.

Resolves a group path, lists its projects and brings branch protection, tag
protection, approval settings and project settings in line with a JSON config,
then reports what changed. A compliance mode reports (and mails) the state of
mandatory settings without changing anything.

Environment:
    GITLAB_TOKEN - GitLab Personal Access Token (required)
    GITLAB_URL   - GitLab instance URL (default: https://gitlab.com)
"""

from gl_enforcer.cli import main

__version__ = "0.1.0"
__all__ = ["main", "__version__"]
