"""Group path resolution and project listing."""

from __future__ import annotations

import logging
import re

import requests

from gl_enforcer.client import GitLabClient, is_not_found
from gl_enforcer.errors import GroupNotFoundError
from gl_enforcer.logging_utils import LOGGER_NAME
from gl_enforcer.models import Project

logger = logging.getLogger(LOGGER_NAME)


def resolve_group_id(client: GitLabClient, path: str) -> int:
    """
    Resolve a slash separated group path to its numeric group ID.

    A single segment is looked up directly. Otherwise the first segment is
    taken as the root group and each further segment is matched against the
    subgroups of the group found so far, so a path of N segments costs N-1
    subgroup listings. When several subgroups match a segment the last one
    wins.
    """
    segments = path.strip("/").split("/")

    if len(segments) == 1:
        try:
            group = client.get_group(segments[0])
        except requests.HTTPError as e:
            if is_not_found(e):
                raise GroupNotFoundError(path) from None
            raise
        logger.debug(f"Group {path} has ID {group['id']}")
        return group["id"]

    current: str | int = segments[0]
    for depth, segment in enumerate(segments[1:], start=1):
        logger.debug(f"Walking {path}, looking for {segment} [{depth}/{len(segments) - 1}] under {current}")
        try:
            subgroups = client.get_subgroups(current)
        except requests.HTTPError as e:
            if is_not_found(e):
                raise GroupNotFoundError(path, current) from None
            raise

        pattern = re.compile(f"^{re.escape(segment)}$")
        match_id = None
        for subgroup in subgroups:
            if pattern.match(subgroup.get("path", "")):
                match_id = subgroup["id"]
        if match_id is None:
            raise GroupNotFoundError(path, segment)

        logger.debug(f"Found group ID {match_id} for {segment}")
        current = match_id

    return current


def path_allowed(path: str, whitelist: list[str], blacklist: list[str]) -> bool:
    """Keep a project if it contains any whitelist fragment (or none are set) and no blacklist fragment."""
    if whitelist and not any(fragment in path for fragment in whitelist):
        logger.debug(f"Skipping project {path} as it's not whitelisted")
        return False
    if any(fragment in path for fragment in blacklist):
        logger.debug(f"Skipping project {path} as it's blacklisted")
        return False
    return True


def list_projects(
    client: GitLabClient,
    group_id: int,
    include_subgroups: bool = False,
    whitelist: list[str] | None = None,
    blacklist: list[str] | None = None,
) -> list[Project]:
    """All projects of a group, filtered by the allow/deny lists."""
    whitelist = whitelist or []
    blacklist = blacklist or []
    projects = [
        Project.from_api(p)
        for p in client.get_group_projects(group_id, include_subgroups=include_subgroups)
        if path_allowed(p["path_with_namespace"], whitelist, blacklist)
    ]
    logger.debug(f"Fetching projects of group {group_id} done. Retrieved {len(projects)}.")
    return projects
