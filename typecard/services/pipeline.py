import logging
from collections.abc import Mapping
from typing import Protocol
from typing import TypeVar

from typecard.core.errors import CardError


logger = logging.getLogger(__name__)

PropsT = TypeVar("PropsT")
DataT = TypeVar("DataT")


class CardContract(Protocol[PropsT, DataT]):
    """Three phases every card implements; only `run_card` calls them."""

    def normalize(self, raw: Mapping[str, str]) -> PropsT: ...

    async def fetch(self, props: PropsT) -> DataT: ...

    def render(self, data: DataT, props: PropsT) -> str: ...


async def collect_card_data(
    card: CardContract[PropsT, DataT], raw: Mapping[str, str]
) -> tuple[PropsT, DataT]:
    """Run the normalize and fetch phases, stopping at the first failure."""

    card_name = type(card).__name__
    try:
        props = card.normalize(raw)
        data = await card.fetch(props)
    except CardError as exc:
        logger.info("%s failed: %s: %s", card_name, type(exc).__name__, exc)
        raise

    return props, data


async def run_card(card: CardContract[PropsT, DataT], raw: Mapping[str, str]) -> str:
    """Normalize, fetch and render a card in that fixed order."""

    props, data = await collect_card_data(card, raw)
    return card.render(data, props)
