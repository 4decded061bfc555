from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict


BucketKey = Literal["morning", "daytime", "evening", "night"]
TypeLabel = Literal["early", "night"]


class ThemeOverride(BaseModel):
    """Per-request theme values; `None` marks a field as unset."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    icon: str | None = None
    text: str | None = None
    background: str | None = None
    border: str | None = None
    font: str | None = None
    size: int | None = None
    weight: str | None = None
    title_size: int | None = None
    title_weight: str | None = None
    text_size: int | None = None
    text_weight: str | None = None


class CardProps(BaseModel):
    """Validated view of a card request, created once by normalization."""

    model_config = ConfigDict(frozen=True)

    username: str
    url: str | None = None
    theme_key: str | None = None
    timezone: str = "UTC"
    overrides: ThemeOverride = ThemeOverride()


class TimeBucket(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    commits: int
    percent: int


class AggregationResult(BaseModel):
    """Commit counts per time-of-day bucket and the derived type label."""

    model_config = ConfigDict(frozen=True)

    label: TypeLabel
    title: str
    total: int
    morning: TimeBucket
    daytime: TimeBucket
    evening: TimeBucket
    night: TimeBucket
    failed_repositories: tuple[str, ...] = ()

    def buckets(self) -> list[TimeBucket]:
        return [self.morning, self.daytime, self.evening, self.night]


class ThemeDesign(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    icon: str
    text: str
    background: str
    border: str


class TextMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    size: int
    weight: str


class ThemeText(BaseModel):
    model_config = ConfigDict(frozen=True)

    font: str
    size: int
    weight: str
    title: TextMetrics
    text: TextMetrics


class ResolvedTheme(BaseModel):
    """Fully populated theme; no field is ever missing."""

    model_config = ConfigDict(frozen=True)

    design: ThemeDesign
    text: ThemeText


class TypeCardData(BaseModel):
    model_config = ConfigDict(frozen=True)

    aggregation: AggregationResult
    background_image: str | None = None
