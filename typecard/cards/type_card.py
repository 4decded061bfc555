import asyncio
from collections.abc import Mapping

from pydantic import ValidationError

from typecard.api.schemas.card import CardQuery
from typecard.clients.github_client import GitHubClient
from typecard.clients.image_client import ImageClient
from typecard.core.errors import InvalidRequestError
from typecard.models import CardProps
from typecard.models import TypeCardData
from typecard.services.aggregation_service import fetch_and_aggregate
from typecard.services.render_service import render_type_card
from typecard.services.theme_service import resolve_theme
from typecard.settings import Settings


def format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"]) or "query"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def parse_card_props(raw: Mapping[str, str], default_timezone: str = "UTC") -> CardProps:
    """Validate raw query parameters into card props.

    Raises:
        InvalidRequestError: If a required parameter is missing or malformed.
    """

    try:
        query = CardQuery.model_validate(dict(raw))
    except ValidationError as exc:
        raise InvalidRequestError(format_validation_error(exc)) from exc
    return query.to_props(default_timezone)


class TypeCard:
    """Card showing when during the day a user commits."""

    def __init__(
        self,
        github: GitHubClient,
        images: ImageClient,
        settings: Settings,
        include_background: bool = True,
    ) -> None:
        self.github = github
        self.images = images
        self.settings = settings
        self.include_background = include_background

    def without_background(self) -> "TypeCard":
        """Return a copy whose fetch phase never downloads the background image."""

        return TypeCard(
            self.github, self.images, self.settings, include_background=False
        )

    def normalize(self, raw: Mapping[str, str]) -> CardProps:
        return parse_card_props(raw, self.settings.default_timezone)

    async def fetch(self, props: CardProps) -> TypeCardData:
        aggregation, background_image = await asyncio.gather(
            fetch_and_aggregate(self.github, props, self.settings),
            self._fetch_background(props.url),
            return_exceptions=True,
        )
        # Both tasks have settled; the aggregation error wins if both failed.
        if isinstance(aggregation, BaseException):
            raise aggregation
        if isinstance(background_image, BaseException):
            raise background_image

        return TypeCardData(aggregation=aggregation, background_image=background_image)

    async def _fetch_background(self, url: str | None) -> str | None:
        if url is None or not self.include_background:
            return None
        return await self.images.fetch_base64(url)

    def render(self, data: TypeCardData, props: CardProps) -> str:
        theme = resolve_theme(props.theme_key, props.overrides)
        return render_type_card(
            theme,
            data.aggregation.buckets(),
            data.aggregation.title,
            data.background_image,
        )
