import asyncio
import logging
from collections.abc import Iterable
from collections.abc import Sequence
from datetime import UTC
from datetime import datetime
from datetime import tzinfo
from zoneinfo import ZoneInfo

from typecard.clients.github_client import GitHubClient
from typecard.core.errors import AggregationEmptyError
from typecard.core.errors import CardError
from typecard.core.errors import UpstreamError
from typecard.models import AggregationResult
from typecard.models import BucketKey
from typecard.models import CardProps
from typecard.models import TimeBucket
from typecard.models import TypeLabel
from typecard.settings import Settings


logger = logging.getLogger(__name__)

MAX_REPOSITORIES = 10
MAX_COMMITS_PER_REPOSITORY = 100

# Half-open [start, end) hour ranges; together they cover 0..23 exactly once.
BUCKET_HOURS: dict[BucketKey, range] = {
    "morning": range(6, 12),
    "daytime": range(12, 18),
    "evening": range(18, 24),
    "night": range(0, 6),
}

BUCKET_NAMES: dict[BucketKey, str] = {
    "morning": "🌞 Morning",
    "daytime": "🌆 Daytime",
    "evening": "🌃 Evening",
    "night": "🌙 Night",
}

LABEL_TITLES: dict[TypeLabel, str] = {
    "early": "I'm an Early 🐤",
    "night": "I'm a Night 🦉",
}


def classify_hour(hour: int) -> BucketKey:
    """Map an hour of day (0..23) to its time bucket."""

    for key, hours in BUCKET_HOURS.items():
        if hour in hours:
            return key
    raise ValueError(f"hour out of range: {hour}")


def parse_commit_hour(raw_value: str, zone: tzinfo = UTC) -> int:
    try:
        parsed = datetime.fromisoformat(raw_value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise UpstreamError("GitHub commit timestamp is invalid") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(zone).hour


def percent_of(count: int, total: int) -> int:
    """Round count/total*100 half up, each bucket independently."""

    return (count * 200 + total) // (2 * total)


def derive_label(morning: int, daytime: int, evening: int, night: int) -> TypeLabel:
    if morning + daytime >= evening + night:
        return "early"
    return "night"


def build_aggregation(
    timestamps: Iterable[str],
    timezone: str = "UTC",
    failed_repositories: Sequence[str] = (),
) -> AggregationResult:
    """Classify commit timestamps into buckets and compute percentages.

    Raises:
        AggregationEmptyError: If there is nothing to classify.
    """

    zone = ZoneInfo(timezone)
    counts: dict[BucketKey, int] = {key: 0 for key in BUCKET_HOURS}
    for raw_value in timestamps:
        counts[classify_hour(parse_commit_hour(raw_value, zone))] += 1

    total = sum(counts.values())
    if total == 0:
        raise AggregationEmptyError("No commits found for this user")

    buckets = {
        key: TimeBucket(
            name=BUCKET_NAMES[key],
            commits=count,
            percent=percent_of(count, total),
        )
        for key, count in counts.items()
    }
    label = derive_label(
        counts["morning"], counts["daytime"], counts["evening"], counts["night"]
    )

    return AggregationResult(
        label=label,
        title=LABEL_TITLES[label],
        total=total,
        failed_repositories=tuple(failed_repositories),
        **buckets,
    )


async def resolve_identity(client: GitHubClient, username: str) -> str:
    return await client.fetch_user_id(username)


async def list_recent_repositories(
    client: GitHubClient, username: str, limit: int = MAX_REPOSITORIES
) -> list[str]:
    limit = min(max(limit, 1), MAX_REPOSITORIES)
    repositories = await client.fetch_recent_repositories(username, limit)
    return repositories[:limit]


async def fetch_commit_timestamps(
    client: GitHubClient,
    owner: str,
    repo: str,
    user_id: str,
    limit: int = MAX_COMMITS_PER_REPOSITORY,
) -> list[str]:
    limit = min(max(limit, 1), MAX_COMMITS_PER_REPOSITORY)
    return await client.fetch_commit_timestamps(owner, repo, user_id, limit)


async def fetch_all_commit_timestamps(
    client: GitHubClient,
    owner: str,
    repositories: Sequence[str],
    user_id: str,
    commit_limit: int = MAX_COMMITS_PER_REPOSITORY,
    timeout_seconds: float = 10.0,
    allow_partial: bool = False,
) -> tuple[list[str], tuple[str, ...]]:
    """Query every repository concurrently and wait for all of them.

    Returns the flattened timestamps and the names of repositories whose
    query failed. Unless `allow_partial` is set, the first failure is raised
    once every query has settled.
    """

    semaphore = asyncio.Semaphore(MAX_REPOSITORIES)

    async def fetch_one(repo: str) -> list[str]:
        async with semaphore:
            async with asyncio.timeout(timeout_seconds):
                return await fetch_commit_timestamps(
                    client, owner, repo, user_id, commit_limit
                )

    results = await asyncio.gather(
        *(fetch_one(repo) for repo in repositories), return_exceptions=True
    )

    timestamps: list[str] = []
    failures: list[tuple[str, Exception]] = []
    for repo, result in zip(repositories, results):
        if isinstance(result, Exception):
            logger.warning(
                "Commit history query failed for %s/%s: %r", owner, repo, result
            )
            failures.append((repo, result))
        elif isinstance(result, BaseException):
            raise result
        else:
            timestamps.extend(result)

    if failures and not allow_partial:
        repo, exc = failures[0]
        if isinstance(exc, CardError):
            raise exc
        if isinstance(exc, TimeoutError):
            raise UpstreamError(
                f"Commit history query timed out for {owner}/{repo}"
            ) from exc
        raise UpstreamError(f"Commit history query failed for {owner}/{repo}") from exc

    return timestamps, tuple(repo for repo, _ in failures)


async def fetch_and_aggregate(
    client: GitHubClient, props: CardProps, settings: Settings
) -> AggregationResult:
    """Resolve the user, fan out over their recent repositories and aggregate."""

    user_id = await resolve_identity(client, props.username)
    repositories = await list_recent_repositories(
        client, props.username, settings.repository_limit
    )
    logger.info(
        "Fetching commit history for %s across %d repositories",
        props.username,
        len(repositories),
    )

    timestamps, failed_repositories = await fetch_all_commit_timestamps(
        client,
        props.username,
        repositories,
        user_id,
        commit_limit=settings.commit_limit,
        timeout_seconds=settings.repository_timeout_seconds,
        allow_partial=settings.allow_partial_results,
    )

    return build_aggregation(
        timestamps,
        timezone=props.timezone,
        failed_repositories=failed_repositories,
    )
