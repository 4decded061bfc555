import asyncio

import pytest

from typecard.core.errors import NotFoundError


class FakeGitHubClient:
    """In-memory stand-in for GitHubClient keyed by repository name."""

    def __init__(
        self,
        commits: dict[str, list[str]] | None = None,
        user_id: str | None = "U_1",
        failures: dict[str, Exception] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.commits = commits or {}
        self.user_id = user_id
        self.failures = failures or {}
        self.delay = delay
        self.calls: list[tuple[str, ...]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_user_id(self, login: str) -> str:
        self.calls.append(("user", login))
        if self.user_id is None:
            raise NotFoundError("GitHub user not found")
        return self.user_id

    async def fetch_recent_repositories(self, login: str, limit: int) -> list[str]:
        self.calls.append(("repositories", login, str(limit)))
        return list(self.commits)[:limit]

    async def fetch_commit_timestamps(
        self, owner: str, repo: str, author_id: str, limit: int
    ) -> list[str]:
        self.calls.append(("commits", owner, repo, author_id, str(limit)))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if repo in self.failures:
                raise self.failures[repo]
            return self.commits[repo][:limit]
        finally:
            self.in_flight -= 1


class FakeImageClient:
    def __init__(self, encoded: str = "aW1hZ2U=", error: Exception | None = None):
        self.encoded = encoded
        self.error = error
        self.urls: list[str] = []

    async def fetch_base64(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.encoded


def timestamps_at(hour: int, count: int) -> list[str]:
    return [f"2026-02-{day + 1:02d}T{hour:02d}:15:00Z" for day in range(count)]


@pytest.fixture
def fake_github() -> FakeGitHubClient:
    return FakeGitHubClient(
        commits={
            "hello": timestamps_at(9, 3) + timestamps_at(14, 1),
            "demo": timestamps_at(20, 2) + timestamps_at(2, 1),
        }
    )
