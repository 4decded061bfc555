import logging
from collections.abc import Mapping
from typing import Any

import httpx

from typecard.core.errors import NotFoundError
from typecard.core.errors import UpstreamError


logger = logging.getLogger(__name__)

USER_QUERY = """
query userId($login: String!) {
  user(login: $login) {
    id
  }
}
"""

REPOSITORIES_QUERY = """
query recentRepositories($login: String!, $first: Int!) {
  user(login: $login) {
    repositories(
      first: $first
      ownerAffiliations: OWNER
      orderBy: { direction: DESC, field: UPDATED_AT }
    ) {
      nodes {
        name
      }
    }
  }
}
"""

COMMIT_HISTORY_QUERY = """
query commitHistory($login: String!, $repo: String!, $id: ID!, $first: Int!) {
  repository(owner: $login, name: $repo) {
    defaultBranchRef {
      target {
        ... on Commit {
          history(first: $first, author: { id: $id }) {
            edges {
              node {
                committedDate
              }
            }
          }
        }
      }
    }
  }
}
"""


class GitHubClient:
    """Minimal async client for the GitHub GraphQL API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token: str | None,
        graphql_url: str = "https://api.github.com/graphql",
        timeout: float = 20.0,
    ) -> None:
        self._http = http_client
        self._token = token
        self._graphql_url = graphql_url
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": "typecard",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def graphql(
        self, query: str, variables: Mapping[str, Any]
    ) -> Mapping[str, Any]:
        """Run a GraphQL query and return its `data` object.

        Raises:
            UpstreamError: If the request fails or the payload is malformed.
            NotFoundError: If GitHub reports errors for the query.
        """

        try:
            response = await self._http.post(
                self._graphql_url,
                json={"query": query, "variables": dict(variables)},
                headers=self._headers(),
                timeout=self._timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("GitHub GraphQL request failed: %s", exc)
            raise UpstreamError("GitHub API request failed") from exc

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise UpstreamError("GitHub GraphQL response is invalid") from exc

        if not isinstance(payload, Mapping):
            raise UpstreamError("GitHub GraphQL response is invalid")

        if payload.get("errors"):
            logger.info("GitHub GraphQL returned errors: %s", payload["errors"])
            raise NotFoundError("GitHub GraphQL returned errors")

        data = payload.get("data")
        if not isinstance(data, Mapping):
            raise UpstreamError("GitHub GraphQL data is missing")

        return data

    async def fetch_user_id(self, login: str) -> str:
        data = await self.graphql(USER_QUERY, {"login": login})

        user = data.get("user")
        if not isinstance(user, Mapping):
            raise NotFoundError("GitHub user not found")

        raw_id = user.get("id")
        if not isinstance(raw_id, str) or not raw_id:
            raise NotFoundError("GitHub user not found")

        return raw_id

    async def fetch_recent_repositories(self, login: str, limit: int) -> list[str]:
        """Return names of repositories owned by `login`, most recently updated first."""

        data = await self.graphql(REPOSITORIES_QUERY, {"login": login, "first": limit})

        user = data.get("user")
        if not isinstance(user, Mapping):
            raise NotFoundError("GitHub user not found")

        repositories = user.get("repositories")
        if not isinstance(repositories, Mapping):
            raise UpstreamError("GitHub repositories are missing")

        nodes = repositories.get("nodes")
        if not isinstance(nodes, list):
            raise UpstreamError("GitHub repositories are missing")

        names: list[str] = []
        for node in nodes:
            if not isinstance(node, Mapping):
                continue
            name = node.get("name")
            if isinstance(name, str) and name:
                names.append(name)

        return names[:limit]

    async def fetch_commit_timestamps(
        self, owner: str, repo: str, author_id: str, limit: int
    ) -> list[str]:
        """Return `committedDate` values authored by `author_id` on the default branch."""

        data = await self.graphql(
            COMMIT_HISTORY_QUERY,
            {"login": owner, "repo": repo, "id": author_id, "first": limit},
        )

        repository = data.get("repository")
        if not isinstance(repository, Mapping):
            raise NotFoundError(f"GitHub repository {owner}/{repo} not found")

        # Empty repositories have no default branch.
        branch = repository.get("defaultBranchRef")
        if branch is None:
            return []
        if not isinstance(branch, Mapping):
            raise UpstreamError("GitHub default branch is invalid")

        target = branch.get("target")
        history = target.get("history") if isinstance(target, Mapping) else None
        if not isinstance(history, Mapping):
            raise UpstreamError("GitHub commit history is missing")

        edges = history.get("edges")
        if not isinstance(edges, list):
            raise UpstreamError("GitHub commit history is missing")

        timestamps: list[str] = []
        for edge in edges:
            node = edge.get("node") if isinstance(edge, Mapping) else None
            if not isinstance(node, Mapping):
                continue
            committed_date = node.get("committedDate")
            if isinstance(committed_date, str):
                timestamps.append(committed_date)

        return timestamps[:limit]
