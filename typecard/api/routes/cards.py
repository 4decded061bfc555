from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Request
from fastapi import Response

from typecard.api.schemas.card import ThemeListResponse
from typecard.api.schemas.card import TypeCardJSONResponse
from typecard.cards.type_card import TypeCard
from typecard.core.errors import AggregationEmptyError
from typecard.core.errors import CardError
from typecard.core.errors import InvalidRequestError
from typecard.core.errors import NotFoundError
from typecard.core.errors import UpstreamError
from typecard.dependencies import get_type_card
from typecard.services.pipeline import collect_card_data
from typecard.services.pipeline import run_card
from typecard.services.theme_service import available_themes
from typecard.services.theme_service import resolve_theme


router = APIRouter()

CACHE_CONTROL = "public, max-age=7200"

ERROR_STATUS: dict[type[CardError], int] = {
    InvalidRequestError: 400,
    NotFoundError: 404,
    AggregationEmptyError: 422,
    UpstreamError: 502,
}


def card_http_exception(exc: CardError) -> HTTPException:
    """Translate a card failure into the HTTP error returned to the client."""

    status_code = ERROR_STATUS.get(type(exc), 500)
    return HTTPException(status_code=status_code, detail=str(exc) or "Card failed")


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get("/api/themes")
def list_themes() -> ThemeListResponse:
    """Return the preset theme keys accepted by `tq`."""

    return ThemeListResponse(themes=available_themes())


@router.get("/api/cards/type")
async def get_type_card_svg(
    request: Request, card: TypeCard = Depends(get_type_card)
) -> Response:
    """Render the commit type card as SVG."""

    try:
        svg = await run_card(card, dict(request.query_params))
    except CardError as exc:
        raise card_http_exception(exc) from exc

    return Response(
        content=svg,
        media_type="image/svg+xml",
        headers={"Cache-Control": CACHE_CONTROL},
    )


@router.get("/api/json/{username}/type")
async def get_type_card_json(
    username: str,
    request: Request,
    response: Response,
    card: TypeCard = Depends(get_type_card),
) -> TypeCardJSONResponse:
    """Return the aggregation and resolved theme without rendering.

    The background image is not part of the payload, so it is never fetched.
    """

    raw = {**request.query_params, "username": username}
    try:
        props, data = await collect_card_data(card.without_background(), raw)
    except CardError as exc:
        raise card_http_exception(exc) from exc

    response.headers["Cache-Control"] = CACHE_CONTROL
    return TypeCardJSONResponse(
        username=props.username,
        aggregation=data.aggregation,
        theme=resolve_theme(props.theme_key, props.overrides),
    )
