import re
from zoneinfo import ZoneInfo
from zoneinfo import ZoneInfoNotFoundError

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import HttpUrl
from pydantic import field_validator

from typecard.models import AggregationResult
from typecard.models import CardProps
from typecard.models import ResolvedTheme
from typecard.models import ThemeOverride


HEX_COLOR = re.compile(r"^(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
FONT_WEIGHT_PATTERN = r"^(?:[1-9]00|normal|bold|bolder|lighter)$"
COLOR_FIELDS = ("text", "border", "title", "icon", "background")


class CardQuery(BaseModel):
    """Query parameters accepted by every card endpoint.

    Color values that look like bare hex (3, 4, 6 or 8 hex digits) get a
    leading `#`, since `#` cannot be sent unescaped in a query string. This
    also applies to hex-only words, so `fade` becomes `#fade`; other values
    such as `transparent` or `rgb(0,0,0)` pass through unchanged. Blank
    values count as not given.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    username: str = Field(
        min_length=1,
        max_length=39,
        pattern=r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$",
    )
    url: HttpUrl | None = None
    tq: str | None = Field(default=None, max_length=50)
    tz: str | None = Field(default=None, max_length=64)
    text: str | None = Field(default=None, max_length=64)
    border: str | None = Field(default=None, max_length=64)
    title: str | None = Field(default=None, max_length=64)
    icon: str | None = Field(default=None, max_length=64)
    background: str | None = Field(default=None, max_length=64)
    font: str | None = Field(default=None, max_length=100)
    size: int | None = Field(default=None, ge=1, le=200)
    weight: str | None = Field(default=None, pattern=FONT_WEIGHT_PATTERN)
    titlesize: int | None = Field(default=None, ge=1, le=200)
    titleweight: str | None = Field(default=None, pattern=FONT_WEIGHT_PATTERN)
    textsize: int | None = Field(default=None, ge=1, le=200)
    textweight: str | None = Field(default=None, pattern=FONT_WEIGHT_PATTERN)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value: object) -> object:
        # An empty query value means the parameter was not given.
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator(*COLOR_FIELDS)
    @classmethod
    def prefix_hex_color(cls, value: str | None) -> str | None:
        if value is not None and HEX_COLOR.match(value):
            return f"#{value}"
        return value

    @field_validator("tz")
    @classmethod
    def check_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown time zone: {value}") from exc
        return value

    def to_props(self, default_timezone: str = "UTC") -> CardProps:
        return CardProps(
            username=self.username,
            url=str(self.url) if self.url is not None else None,
            theme_key=self.tq,
            timezone=self.tz or default_timezone,
            overrides=ThemeOverride(
                title=self.title,
                icon=self.icon,
                text=self.text,
                background=self.background,
                border=self.border,
                font=self.font,
                size=self.size,
                weight=self.weight,
                title_size=self.titlesize,
                title_weight=self.titleweight,
                text_size=self.textsize,
                text_weight=self.textweight,
            ),
        )


class TypeCardJSONResponse(BaseModel):
    """Raw aggregation and resolved theme behind a type card."""

    username: str
    aggregation: AggregationResult
    theme: ResolvedTheme


class ThemeListResponse(BaseModel):
    themes: list[str]
