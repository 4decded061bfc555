from collections.abc import AsyncGenerator

import httpx
from fastapi import Request

from typecard.cards.type_card import TypeCard
from typecard.clients.github_client import GitHubClient
from typecard.clients.image_client import ImageClient
from typecard.settings import Settings


def get_settings(request: Request) -> Settings:
    """Return the settings loaded once by `create_app`."""

    return request.app.state.settings


async def get_type_card(request: Request) -> AsyncGenerator[TypeCard, None]:
    """Provide a request-scoped type card with its own HTTP client."""

    settings = get_settings(request)
    async with httpx.AsyncClient() as http_client:
        yield TypeCard(
            github=GitHubClient(
                http_client,
                token=settings.github_token,
                graphql_url=settings.github_graphql_url,
                timeout=settings.github_timeout_seconds,
            ),
            images=ImageClient(http_client, timeout=settings.image_timeout_seconds),
            settings=settings,
        )
