from collections.abc import Mapping

from typecard.models import ResolvedTheme
from typecard.models import TextMetrics
from typecard.models import ThemeDesign
from typecard.models import ThemeOverride
from typecard.models import ThemeText


ThemeValues = Mapping[str, str | int]

DEFAULT_THEME: dict[str, str | int] = {
    "title": "#2f80ed",
    "icon": "#4c71f2",
    "text": "#434d58",
    "background": "#fffefe",
    "border": "#e4e2e2",
    "font": "'Segoe UI', Ubuntu, Sans-Serif",
    "size": 14,
    "weight": "400",
    "title_size": 18,
    "title_weight": "600",
    "text_size": 14,
    "text_weight": "400",
}

# Presets only list the fields they change; everything else comes from
# DEFAULT_THEME.
PRESET_THEMES: dict[str, ThemeValues] = {
    "default": {},
    "dark": {
        "title": "#ffffff",
        "icon": "#79ff97",
        "text": "#9f9f9f",
        "background": "#151515",
        "border": "#30363d",
    },
    "light": {
        "title": "#24292f",
        "icon": "#0969da",
        "text": "#57606a",
        "background": "#ffffff",
        "border": "#d0d7de",
    },
    "radical": {
        "title": "#fe428e",
        "icon": "#f8d847",
        "text": "#a9fef7",
        "background": "#141321",
        "border": "#fe428e",
    },
    "tokyonight": {
        "title": "#70a5fd",
        "icon": "#bf91f3",
        "text": "#38bdae",
        "background": "#1a1b27",
        "border": "#1a1b27",
    },
    "gruvbox": {
        "title": "#fabd2f",
        "icon": "#fe8019",
        "text": "#8ec07c",
        "background": "#282828",
        "border": "#3c3836",
        "font": "'Fira Code', monospace",
    },
    "dracula": {
        "title": "#ff6e96",
        "icon": "#79dafa",
        "text": "#f8f8f2",
        "background": "#282a36",
        "border": "#44475a",
        "title_weight": "700",
    },
}


def available_themes() -> list[str]:
    """Return the preset keys accepted by the `tq` parameter."""

    return sorted(PRESET_THEMES)


def get_preset(preset_key: str | None) -> ThemeValues | None:
    if preset_key is None:
        return None
    return PRESET_THEMES.get(preset_key.strip().lower())


def resolve_field(field: str, *sources: ThemeValues | None) -> str | int:
    """Return the first value present for `field`, falling back to the default."""

    for source in sources:
        if source is None:
            continue
        value = source.get(field)
        if value is not None:
            return value
    return DEFAULT_THEME[field]


def resolve_theme(
    preset_key: str | None, overrides: ThemeOverride | None = None
) -> ResolvedTheme:
    """Merge overrides, an optional preset and defaults field by field.

    An unknown preset key is treated like no preset at all.
    """

    override_values = (overrides or ThemeOverride()).model_dump()
    preset = get_preset(preset_key)
    values = {
        field: resolve_field(field, override_values, preset)
        for field in DEFAULT_THEME
    }

    return ResolvedTheme(
        design=ThemeDesign(
            title=str(values["title"]),
            icon=str(values["icon"]),
            text=str(values["text"]),
            background=str(values["background"]),
            border=str(values["border"]),
        ),
        text=ThemeText(
            font=str(values["font"]),
            size=int(values["size"]),
            weight=str(values["weight"]),
            title=TextMetrics(
                size=int(values["title_size"]),
                weight=str(values["title_weight"]),
            ),
            text=TextMetrics(
                size=int(values["text_size"]),
                weight=str(values["text_weight"]),
            ),
        ),
    )
