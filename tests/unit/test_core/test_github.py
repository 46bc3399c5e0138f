"""Tests for the GitHub run environment and GraphQL client."""

import json
import os
from unittest.mock import patch

import httpx
import pytest

from chored.config import ChoredConfig, set_config
from chored.core.errors import GraphQLError, MissingEnvironmentError, ValidationError
from chored.core.github import (
    GithubClient,
    Query,
    Repository,
    RunEnv,
    parse_repository,
    token_from_env,
)

URL = "https://api.example.com/graphql"


def make_client(handler, headers=None):
    return GithubClient(URL, headers or {}, transport=httpx.MockTransport(handler))


class RecordingHandler:
    """MockTransport handler answering queries in order and recording requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return self.responses.pop(0)

    def bodies(self):
        return [json.loads(r.content) for r in self.requests]


class TestRunEnv:
    """Reading the workflow environment."""

    def test_pull_request(self):
        env = RunEnv.from_env(
            {
                "GITHUB_EVENT_NAME": "pull_request",
                "GITHUB_HEAD_REF": "feature",
                "GITHUB_BASE_REF": "main",
                "GITHUB_REPOSITORY": "owner/repo",
                "CI": "true",
            }
        )
        assert env.is_pull_request and not env.is_push
        assert (env.pull_request_branch, env.pull_request_target) == ("feature", "main")
        assert env.repository == Repository("owner", "repo")
        assert env.pushed_branch is None
        assert env.is_ci

    def test_branch_push(self):
        env = RunEnv.from_env({"GITHUB_EVENT_NAME": "push", "GITHUB_REF_TYPE": "branch", "GITHUB_REF_NAME": "v2.x"})
        assert env.is_branch_push
        assert env.pushed_branch == "v2.x"
        assert env.pushed_tag is None

    def test_tag_push(self):
        env = RunEnv.from_env({"GITHUB_EVENT_NAME": "push", "GITHUB_REF_TYPE": "tag", "GITHUB_REF_NAME": "v1.0"})
        assert env.pushed_tag == "v1.0"

    def test_empty_values_are_unset(self):
        env = RunEnv.from_env({"GITHUB_HEAD_REF": "", "GITHUB_REPOSITORY": ""})
        assert env.pull_request_branch is None
        assert env.repository is None
        assert not env.is_ci

    def test_parse_repository(self):
        assert parse_repository("a/b").show() == "a/b"
        for bad in ["a", "a/b/c", "/b"]:
            with pytest.raises(ValidationError, match="Invalid github repository"):
                parse_repository(bad)


class TestGraphQLClient:
    """Request shape and error handling."""

    @pytest.mark.asyncio
    async def test_execute(self):
        handler = RecordingHandler(httpx.Response(200, json={"data": {"value": 42}}))
        client = make_client(handler, {"Authorization": "bearer t0ken"})
        query = Query(query_text="query { value }", extract=lambda data: data["value"])

        assert await client.execute(query, {"a": 1}) == 42
        request = handler.requests[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "bearer t0ken"
        assert request.headers["Content-Type"] == "application/json"
        assert handler.bodies() == [{"query": "query { value }", "variables": {"a": 1}}]

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = make_client(RecordingHandler(httpx.Response(401, text="nope")))
        with pytest.raises(GraphQLError) as exc:
            await client.execute(Query("query { x }", lambda d: d))
        assert exc.value.status_code == 401
        assert "HTTP status 401" in str(exc.value)

    @pytest.mark.asyncio
    async def test_errors_in_body(self):
        errors = [{"message": "Field 'x' doesn't exist"}]
        client = make_client(RecordingHandler(httpx.Response(200, json={"errors": errors})))
        with pytest.raises(GraphQLError) as exc:
            await client.execute(Query("query { x }", lambda d: d))
        assert exc.value.errors == errors
        assert "doesn't exist" in str(exc.value)


class TestGithubClient:
    """Pull request flows."""

    FOUND_NONE = {"data": {"repository": {"id": "R1", "pullRequests": {"edges": []}}}}
    FOUND_ONE = {
        "data": {
            "repository": {
                "id": "R1",
                "pullRequests": {"edges": [{"node": {"id": "PR1", "number": 7, "url": "https://x/7"}}]},
            }
        }
    }
    PR_ARGS = dict(owner="o", repo="r", branch_name="update", base_branch="main", title="T", body="B")

    @pytest.mark.asyncio
    async def test_creates_pull_request(self):
        created = {"data": {"createPullRequest": {"pullRequest": {"id": "PR2", "number": 8, "url": "https://x/8"}}}}
        handler = RecordingHandler(httpx.Response(200, json=self.FOUND_NONE), httpx.Response(200, json=created))
        pr = await make_client(handler).create_or_update_pull_request(**self.PR_ARGS)
        assert (pr.number, pr.url) == (8, "https://x/8")
        create_vars = handler.bodies()[1]["variables"]
        assert create_vars == {
            "repositoryId": "R1",
            "branchName": "update",
            "baseBranch": "main",
            "title": "T",
            "body": "B",
        }

    @pytest.mark.asyncio
    async def test_updates_existing_pull_request(self):
        updated = {"data": {"updatePullRequest": {"pullRequest": {"id": "PR1"}}}}
        handler = RecordingHandler(httpx.Response(200, json=self.FOUND_ONE), httpx.Response(200, json=updated))
        pr = await make_client(handler).create_or_update_pull_request(**self.PR_ARGS)
        assert pr.number == 7
        assert handler.bodies()[1]["variables"] == {"id": "PR1", "title": "T", "body": "B"}
        assert "updatePullRequest" in handler.bodies()[1]["query"]

    @pytest.mark.asyncio
    async def test_authenticated_user(self):
        handler = RecordingHandler(httpx.Response(200, json={"data": {"viewer": {"id": "U1", "login": "octocat"}}}))
        user = await make_client(handler).authenticated_user()
        assert user.login == "octocat"


class TestToken:
    """Token lookup from the environment."""

    def test_token_from_env(self):
        with patch.dict(os.environ, {"GITHUB_TOKEN": "abc"}):
            assert token_from_env() == "abc"

    def test_configured_env_name(self):
        config = ChoredConfig()
        config.github.token_env = "MY_TOKEN"
        set_config(config)
        with patch.dict(os.environ, {"MY_TOKEN": "xyz"}):
            assert token_from_env() == "xyz"

    def test_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(MissingEnvironmentError, match="GITHUB_TOKEN"):
                token_from_env()
