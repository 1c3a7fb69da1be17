"""Tests for group path resolution and project listing."""

from unittest.mock import patch

import pytest
import requests
import responses

from conftest import MOCK_API_URL
from gl_enforcer.errors import GroupNotFoundError, NotFoundError
from gl_enforcer.resolver import list_projects, path_allowed, resolve_group_id

ONE_PAGE = {"x-total-pages": "1"}


class TestResolveGroupId:
    @responses.activate
    def test_single_segment_looks_up_group_directly(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/groups/myorg", json={"id": 5, "path": "myorg"})

        assert resolve_group_id(mock_client, "myorg") == 5
        assert len(responses.calls) == 1
        assert "subgroups" not in responses.calls[0].request.url

    @responses.activate
    def test_single_segment_not_found(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/groups/missing", status=404)

        with pytest.raises(GroupNotFoundError):
            resolve_group_id(mock_client, "missing")

    @responses.activate
    def test_single_segment_server_error_propagates(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/groups/myorg", status=500)

        with pytest.raises(requests.HTTPError):
            resolve_group_id(mock_client, "myorg")

    @responses.activate
    def test_nested_path_walks_subgroups(self, mock_client):
        """Three segments cost exactly two subgroup listings."""
        responses.add(
            responses.GET,
            f"{MOCK_API_URL}/groups/org/subgroups",
            json=[{"id": 2, "path": "team"}, {"id": 3, "path": "team-b"}],
            headers=ONE_PAGE,
        )
        responses.add(
            responses.GET,
            f"{MOCK_API_URL}/groups/2/subgroups",
            json=[{"id": 7, "path": "services"}],
            headers=ONE_PAGE,
        )

        assert resolve_group_id(mock_client, "org/team/services") == 7
        assert len(responses.calls) == 2
        assert all("/subgroups" in call.request.url for call in responses.calls)

    @responses.activate
    def test_two_segments_one_lookup(self, mock_client):
        responses.add(
            responses.GET, f"{MOCK_API_URL}/groups/org/subgroups", json=[{"id": 3, "path": "team-b"}], headers=ONE_PAGE
        )

        assert resolve_group_id(mock_client, "org/team-b") == 3
        assert len(responses.calls) == 1

    @responses.activate
    def test_segment_match_is_exact(self, mock_client):
        """'team' must not match 'team-b' or 'my-team'."""
        responses.add(
            responses.GET,
            f"{MOCK_API_URL}/groups/org/subgroups",
            json=[{"id": 3, "path": "team-b"}, {"id": 4, "path": "my-team"}],
            headers=ONE_PAGE,
        )

        with pytest.raises(GroupNotFoundError) as exc_info:
            resolve_group_id(mock_client, "org/team")
        assert exc_info.value.segment == "team"

    @responses.activate
    def test_duplicate_paths_last_match_wins(self, mock_client):
        responses.add(
            responses.GET,
            f"{MOCK_API_URL}/groups/org/subgroups",
            json=[{"id": 2, "path": "team"}, {"id": 9, "path": "team"}],
            headers=ONE_PAGE,
        )

        assert resolve_group_id(mock_client, "org/team") == 9

    def test_dotted_root_is_escaped(self, mock_client):
        with patch.object(mock_client, "paginate", return_value=[{"id": 3, "path": "team"}]) as paginate:
            assert resolve_group_id(mock_client, "my.org/team") == 3

        assert paginate.call_args.args[0] == "/groups/my%2Eorg/subgroups"

    @responses.activate
    def test_missing_root_group(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/groups/nope/subgroups", status=404)

        with pytest.raises(NotFoundError):
            resolve_group_id(mock_client, "nope/team")


class TestPathAllowed:
    def test_no_lists_keeps_everything(self):
        assert path_allowed("org/a", [], [])

    def test_whitelist_fragment(self):
        assert path_allowed("org/team-a/service", ["team-a"], [])
        assert not path_allowed("org/team-b/service", ["team-a"], [])

    def test_blacklist_fragment(self):
        assert not path_allowed("org/legacy-app", [], ["legacy"])
        assert path_allowed("org/app", [], ["legacy"])

    def test_fragments_are_not_regexes(self):
        assert not path_allowed("org/service", ["serv.ce"], [])


class TestListProjects:
    PROJECTS = [
        {"id": 10, "name": "shared", "path_with_namespace": "org/shared"},
        {"id": 11, "name": "service", "path_with_namespace": "org/team-a/service"},
        {"id": 12, "name": "legacy", "path_with_namespace": "org/team-a/legacy"},
    ]

    def _register_pages(self):
        # A leftover last page would otherwise be served first on the next listing
        responses.reset()
        responses.add(
            responses.GET,
            f"{MOCK_API_URL}/groups/1/projects",
            json=self.PROJECTS[:2],
            headers={"x-total-pages": "2"},
        )
        responses.add(
            responses.GET,
            f"{MOCK_API_URL}/groups/1/projects",
            json=self.PROJECTS[2:],
            headers={"x-total-pages": "2"},
        )

    @responses.activate
    def test_all_pages_are_listed(self, mock_client):
        self._register_pages()

        projects = list_projects(mock_client, 1)

        assert [p.id for p in projects] == [10, 11, 12]
        assert projects[1].path_with_namespace == "org/team-a/service"
        assert len(responses.calls) == 2

    @responses.activate
    def test_include_subgroups_is_passed(self, mock_client):
        responses.add(responses.GET, f"{MOCK_API_URL}/groups/1/projects", json=[], headers=ONE_PAGE)

        list_projects(mock_client, 1, include_subgroups=True)

        assert "include_subgroups=True" in responses.calls[0].request.url

    @responses.activate
    def test_whitelist_and_blacklist_filtering(self, mock_client):
        self._register_pages()
        assert [p.id for p in list_projects(mock_client, 1, whitelist=["team-a"])] == [11, 12]

        self._register_pages()
        assert [p.id for p in list_projects(mock_client, 1, blacklist=["legacy"])] == [10, 11]

    @responses.activate
    def test_listing_is_repeatable(self, mock_client):
        self._register_pages()
        first = list_projects(mock_client, 1, blacklist=["legacy"])
        self._register_pages()
        second = list_projects(mock_client, 1, blacklist=["legacy"])

        assert first == second
