"""GitLab API client with pagination and opt-in retry support."""

from __future__ import annotations

import logging
import time
import urllib.parse
from typing import Any

import requests

from gl_enforcer.logging_utils import LOGGER_NAME
from gl_enforcer.models import (
    API_V4,
    DEFAULT_MAX_RETRIES,
    PER_PAGE,
    RETRY_BACKOFF_FACTOR,
    RETRYABLE_STATUS_CODES,
)


def encode(value: str | int) -> str:
    """URL-encode a path segment (project/group path, branch or tag name)."""
    return urllib.parse.quote(str(value), safe="")


def encode_group_path(path: str) -> str:
    """Encode a top-level group path; dots are escaped too, unescaped dots stall the lookup."""
    return encode(path).replace(".", "%2E")


# Failures of a single API call: HTTP status, transport, or a body that isn't JSON
API_ERRORS = (requests.RequestException, ValueError)


def is_not_found(error: Exception) -> bool:
    response = getattr(error, "response", None)
    return response is not None and response.status_code == 404


class GitLabClient:
    """Thin wrapper around GitLab REST API v4 with pagination support and retry logic."""

    def __init__(self, base_url: str, token: str, dry_run: bool = False, max_retries: int = DEFAULT_MAX_RETRIES):
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}{API_V4}"
        self.session = requests.Session()
        self.session.headers.update(
            {
                "PRIVATE-TOKEN": token,
                "Content-Type": "application/json",
            }
        )
        self.dry_run = dry_run
        self.max_retries = max_retries
        self.logger = logging.getLogger(LOGGER_NAME)

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Make an HTTP request, retrying transient failures when max_retries > 0."""
        url = f"{self.api_url}{endpoint}"

        for attempt in range(self.max_retries + 1):
            try:
                self.logger.debug(
                    f"{method.upper()} {url} {kwargs.get('params') or ''} {kwargs.get('json') or ''} "
                    f"(attempt {attempt + 1}/{self.max_retries + 1})"
                )
                resp = self.session.request(method, url, **kwargs)

                if resp.status_code in RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                    wait_time = self._calculate_backoff(resp, attempt)
                    self.logger.warning(f"Retryable error {resp.status_code}, waiting {wait_time:.1f}s before retry")
                    time.sleep(wait_time)
                    continue

                # 404s are routine here (unprotected branch, missing branch); callers decide
                if resp.status_code >= 400 and resp.status_code != 404:
                    self.logger.error(f"API error {resp.status_code}: {resp.text[:500]}")
                resp.raise_for_status()
                return resp

            except requests.exceptions.ConnectionError as e:
                if attempt < self.max_retries:
                    wait_time = RETRY_BACKOFF_FACTOR * (2**attempt)
                    self.logger.warning(f"Connection error, retrying in {wait_time:.1f}s: {e}")
                    time.sleep(wait_time)
                    continue
                raise

        raise RuntimeError("Unexpected retry loop exit")

    def _calculate_backoff(self, resp: requests.Response, attempt: int) -> float:
        """Calculate backoff time, respecting Retry-After header for 429s."""
        if resp.status_code == 429:
            retry_after = resp.headers.get("Retry-After")
            if retry_after:
                try:
                    return float(retry_after)
                except ValueError:
                    pass  # Fall through to exponential backoff
        return RETRY_BACKOFF_FACTOR * (2**attempt)

    def get(self, endpoint: str, params: dict | None = None) -> Any:
        return self._request("GET", endpoint, params=params).json()

    def post(self, endpoint: str, data: dict | None = None) -> Any:
        return self._request("POST", endpoint, json=data).json()

    def put(self, endpoint: str, data: dict | None = None) -> Any:
        return self._request("PUT", endpoint, json=data).json()

    def delete(self, endpoint: str, params: dict | None = None) -> requests.Response:
        return self._request("DELETE", endpoint, params=params)

    def paginate(self, endpoint: str, params: dict | None = None) -> list[dict]:
        """Fetch all pages of a paginated endpoint."""
        params = dict(params or {})
        params.setdefault("per_page", PER_PAGE)
        page = 1
        results = []
        while True:
            params["page"] = page
            resp = self._request("GET", endpoint, params=params)
            data = resp.json()
            if not data:
                break
            results.extend(data)
            total_pages = int(resp.headers.get("x-total-pages", page))
            if page >= total_pages:
                break
            page += 1
        return results

    # -- Groups --

    def get_group(self, path: str) -> dict:
        return self.get(f"/groups/{encode_group_path(path)}")

    def get_subgroups(self, group: str | int) -> list[dict]:
        ref = encode_group_path(group) if isinstance(group, str) else encode(group)
        return self.paginate(f"/groups/{ref}/subgroups")

    def get_group_projects(self, group_id: int, include_subgroups: bool = False) -> list[dict]:
        return self.paginate(f"/groups/{group_id}/projects", params={"include_subgroups": include_subgroups})

    # -- Project settings --

    def get_project(self, project_id: int) -> dict:
        return self.get(f"/projects/{project_id}")

    def edit_project(self, project_id: int, data: dict) -> dict:
        return self.put(f"/projects/{project_id}", data=data)

    def get_approvals(self, project_id: int) -> dict:
        return self.get(f"/projects/{project_id}/approvals")

    def change_approvals(self, project_id: int, data: dict) -> dict:
        # The approvals configuration endpoint takes POST, not PUT
        return self.post(f"/projects/{project_id}/approvals", data=data)

    # -- Branches and protection --

    def get_branch(self, project_id: int, branch: str) -> dict:
        return self.get(f"/projects/{project_id}/repository/branches/{encode(branch)}")

    def create_branch(self, project_id: int, branch: str, ref: str) -> dict:
        return self.post(f"/projects/{project_id}/repository/branches", data={"branch": branch, "ref": ref})

    def get_protected(self, project_id: int, kind: str, name: str) -> dict:
        """Fetch protection of a branch or tag; ``kind`` is ``protected_branches`` or ``protected_tags``."""
        return self.get(f"/projects/{project_id}/{kind}/{encode(name)}")

    def protect(self, project_id: int, kind: str, data: dict) -> dict:
        return self.post(f"/projects/{project_id}/{kind}", data=data)

    def unprotect(self, project_id: int, kind: str, name: str) -> requests.Response:
        return self.delete(f"/projects/{project_id}/{kind}/{encode(name)}")
