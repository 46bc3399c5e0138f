"""GitHub integration: run environment, GraphQL client and PR API."""

from chored.core.github.api import (
    FindPullRequestsResult,
    GithubClient,
    PullRequestIdentity,
    UserIdentity,
    client,
    default_client,
    token_from_env,
)
from chored.core.github.graphql import GraphQLClient, Query
from chored.core.github.run_env import Repository, RunEnv, parse_repository

__all__ = [
    "FindPullRequestsResult",
    "GithubClient",
    "GraphQLClient",
    "PullRequestIdentity",
    "Query",
    "Repository",
    "RunEnv",
    "UserIdentity",
    "client",
    "default_client",
    "parse_repository",
    "token_from_env",
]
