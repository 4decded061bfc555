import pytest

from typecard.models import ThemeOverride
from typecard.services.theme_service import DEFAULT_THEME
from typecard.services.theme_service import PRESET_THEMES
from typecard.services.theme_service import available_themes
from typecard.services.theme_service import resolve_theme


def flatten(theme) -> dict[str, str | int]:
    return {
        "title": theme.design.title,
        "icon": theme.design.icon,
        "text": theme.design.text,
        "background": theme.design.background,
        "border": theme.design.border,
        "font": theme.text.font,
        "size": theme.text.size,
        "weight": theme.text.weight,
        "title_size": theme.text.title.size,
        "title_weight": theme.text.title.weight,
        "text_size": theme.text.text.size,
        "text_weight": theme.text.text.weight,
    }


def test_single_override_inherits_rest_from_preset() -> None:
    theme = resolve_theme("dark", ThemeOverride(text="#123456"))

    resolved = flatten(theme)
    expected = {**DEFAULT_THEME, **PRESET_THEMES["dark"], "text": "#123456"}
    assert resolved == expected


def test_unknown_preset_falls_back_to_defaults() -> None:
    theme = resolve_theme("does-not-exist", ThemeOverride(border="#000000"))

    assert flatten(theme) == {**DEFAULT_THEME, "border": "#000000"}


def test_no_preset_and_no_overrides_gives_defaults() -> None:
    assert flatten(resolve_theme(None)) == DEFAULT_THEME


def test_preset_lookup_is_case_insensitive() -> None:
    assert resolve_theme("DARK") == resolve_theme("dark")


@pytest.mark.parametrize("preset_key", sorted(PRESET_THEMES))
def test_every_field_is_populated_for_each_preset(preset_key: str) -> None:
    resolved = flatten(resolve_theme(preset_key))

    assert set(resolved) == set(DEFAULT_THEME)
    assert all(value is not None for value in resolved.values())
    for field, value in PRESET_THEMES[preset_key].items():
        assert resolved[field] == value


def test_nested_text_overrides_are_field_granular() -> None:
    theme = resolve_theme(
        "dracula", ThemeOverride(title_size=22, text_weight="bold")
    )

    assert theme.text.title.size == 22
    assert theme.text.title.weight == PRESET_THEMES["dracula"]["title_weight"]
    assert theme.text.text.weight == "bold"
    assert theme.text.text.size == DEFAULT_THEME["text_size"]


def test_zero_like_values_still_count_as_overrides() -> None:
    theme = resolve_theme("dark", ThemeOverride(weight="normal", title=""))

    assert theme.text.weight == "normal"
    assert theme.design.title == ""


def test_available_themes_lists_presets() -> None:
    themes = available_themes()

    assert "dark" in themes
    assert themes == sorted(PRESET_THEMES)
