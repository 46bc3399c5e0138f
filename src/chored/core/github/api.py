"""GitHub GraphQL API: pull request queries and mutations."""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from pydantic import BaseModel, Field

from chored.core.errors import MissingEnvironmentError
from chored.core.github.graphql import GraphQLClient, Query

logger = logging.getLogger(__name__)

GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"


class Identity(BaseModel):
    id: str = Field(..., description="GraphQL node id")


class PullRequestIdentity(Identity):
    number: int = Field(..., description="Pull request number")
    url: str = Field(..., description="Pull request web URL")


class UserIdentity(Identity):
    login: str = Field(..., description="Login of the authenticated user")


class FindPullRequestsResult(BaseModel):
    repository_id: str
    pull_requests: list[PullRequestIdentity] = Field(default_factory=list)


def _ignore(_: Any) -> None:
    return None


find_pull_requests: Query[FindPullRequestsResult] = Query(
    query_text="""
        query findPR($owner: String!, $repo: String!, $branchName: String!) {
            repository(owner: $owner, name: $repo) {
                id
                pullRequests(headRefName: $branchName, states: [OPEN], first: 1) {
                    edges { node { id number url } }
                }
            }
        }
    """,
    extract=lambda data: FindPullRequestsResult(
        repository_id=data["repository"]["id"],
        pull_requests=[edge["node"] for edge in data["repository"]["pullRequests"]["edges"]],
    ),
)

update_pull_request_contents: Query[None] = Query(
    query_text="""
        mutation updatePR($id: ID!, $title: String!, $body: String!) {
            updatePullRequest(input: {pullRequestId: $id, title: $title, body: $body}) {
                pullRequest { id }
            }
        }
    """,
    extract=_ignore,
)

create_pull_request: Query[PullRequestIdentity] = Query(
    query_text="""
        mutation createPR(
            $branchName: String!,
            $baseBranch: String!,
            $body: String!,
            $title: String!,
            $repositoryId: ID!
        ) {
            createPullRequest(input: {
                repositoryId: $repositoryId,
                headRefName: $branchName,
                baseRefName: $baseBranch,
                title: $title,
                body: $body
            }) {
                pullRequest { id number url }
            }
        }
    """,
    extract=lambda data: PullRequestIdentity.model_validate(data["createPullRequest"]["pullRequest"]),
)

close_pull_request: Query[None] = Query(
    query_text="""
        mutation closePR($id: ID!) {
            closePullRequest(input: {pullRequestId: $id}) {
                pullRequest { id }
            }
        }
    """,
    extract=_ignore,
)

get_authenticated_user: Query[UserIdentity] = Query(
    query_text="query { viewer { id login } }",
    extract=lambda data: UserIdentity.model_validate(data["viewer"]),
)


class GithubClient(GraphQLClient):
    async def create_or_update_pull_request(
        self,
        *,
        owner: str,
        repo: str,
        branch_name: str,
        base_branch: str,
        title: str,
        body: str,
    ) -> PullRequestIdentity:
        """Update the open PR for ``branch_name``, or create one if there is none."""
        existing = await self.execute(
            find_pull_requests, {"owner": owner, "repo": repo, "branchName": branch_name}
        )
        if existing.pull_requests:
            pr = existing.pull_requests[0]
            logger.info("Updating pull request #%d (%s)", pr.number, pr.url)
            await self.execute(update_pull_request_contents, {"id": pr.id, "title": title, "body": body})
            return pr

        pr = await self.execute(
            create_pull_request,
            {
                "repositoryId": existing.repository_id,
                "branchName": branch_name,
                "baseBranch": base_branch,
                "title": title,
                "body": body,
            },
        )
        logger.info("Created pull request #%d (%s)", pr.number, pr.url)
        return pr

    async def close_pull_request(self, pr: Identity) -> None:
        await self.execute(close_pull_request, {"id": pr.id})

    async def authenticated_user(self) -> UserIdentity:
        return await self.execute(get_authenticated_user)


def client(token: str, url: str = GITHUB_GRAPHQL_URL) -> GithubClient:
    return GithubClient(url, {"Authorization": f"bearer {token}"})


def token_from_env(env_name: Optional[str] = None) -> str:
    """Read the GitHub token from the configured environment variable."""
    from chored.config import get_config

    github = get_config().github
    name = env_name or github.token_env
    token = os.environ.get(name)
    if not token:
        raise MissingEnvironmentError(name, "GitHub API access")
    return token


def default_client() -> GithubClient:
    from chored.config import get_config

    return client(token_from_env(), get_config().github.graphql_url)
