from xml.sax.saxutils import escape
from xml.sax.saxutils import quoteattr

from typecard.models import ResolvedTheme
from typecard.models import TimeBucket


CARD_WIDTH = 530
CARD_HEIGHT = 185
GRAPH_CELLS = 25
ROW_START_Y = 30
ROW_PITCH = 30


def make_graph(percent: int) -> str:
    """Draw `percent` as a fixed-width text bar of block characters."""

    clamped = min(max(percent, 0), 100)
    filled = int(clamped * GRAPH_CELLS / 100 + 0.5)
    return "█" * filled + "░" * (GRAPH_CELLS - filled)


def _text(x: int, value: str, fill: str, size: int, weight: str) -> str:
    return (
        f'<text x="{x}" fill={quoteattr(fill)} font-size="{size}" '
        f"font-weight={quoteattr(weight)}>{escape(value)}</text>"
    )


def render_bucket_rows(theme: ResolvedTheme, buckets: list[TimeBucket]) -> str:
    fill = theme.design.text
    size = theme.text.text.size
    weight = theme.text.text.weight

    rows: list[str] = []
    y = ROW_START_Y
    for bucket in buckets:
        y += ROW_PITCH
        rows.append(
            f'<g transform="translate(25, {y})">'
            + _text(0, bucket.name, fill, size, weight)
            + _text(90, f"{bucket.commits} commits", fill, size, weight)
            + _text(180, make_graph(bucket.percent), fill, size, weight)
            + _text(450, f"{bucket.percent}%", fill, size, weight)
            + "</g>"
        )
    return "\n".join(rows)


def render_background(background_image: str | None) -> str:
    if background_image is None:
        return ""

    href = quoteattr(f"data:image/png;base64,{background_image}")
    return (
        '<clipPath id="background">'
        '<rect x="5" y="5" width="390" height="175" rx="6" />'
        "</clipPath>\n"
        '<image x="5" y="5" clip-path="url(#background)" '
        'preserveAspectRatio="xMidYMid slice" '
        f'href={href} width="390" height="175" />\n'
    )


def render_type_card(
    theme: ResolvedTheme,
    buckets: list[TimeBucket],
    title: str,
    background_image: str | None = None,
) -> str:
    """Render the type card SVG document.

    The output depends only on the arguments, so equal inputs always give
    byte-identical documents.
    """

    design = theme.design
    text = theme.text

    return (
        f'<svg version="1.1" xmlns="http://www.w3.org/2000/svg" '
        f'width="{CARD_WIDTH}" height="{CARD_HEIGHT}" '
        f'viewBox="0 0 {CARD_WIDTH} {CARD_HEIGHT}" '
        f'font-size="{text.size}" font-family={quoteattr(text.font)} '
        f"font-weight={quoteattr(text.weight)}>\n"
        f'<rect x="5" y="5" width="520" height="175" '
        f"fill={quoteattr(design.background)} stroke={quoteattr(design.border)} "
        f'stroke-width="1px" rx="6px" ry="6px" />\n'
        + render_background(background_image)
        + f'<text x="25" y="30" fill={quoteattr(design.title)} '
        f'font-size="{text.title.size}" '
        f"font-weight={quoteattr(text.title.weight)}>{escape(title)}</text>\n"
        + render_bucket_rows(theme, buckets)
        + "\n</svg>\n"
    )
