"""Deterministic category colours for migrated palettes.

Each category domain owns a slice of the hue wheel: expenses get warm tones,
income greens and teals, investments blues and indigos. Consecutive indices
are spread with the golden angle so neighbouring categories stay distinct.
"""

GOLDEN_ANGLE = 137.508

HUE_RANGES: dict[str, dict] = {
    "expense": {
        "ranges": [(0, 30), (30, 50), (50, 70), (320, 360), (280, 320)],
        "saturation": 70,
        "lightness": 50,
    },
    "income": {
        "ranges": [(120, 180)],
        "saturation": 65,
        "lightness": 45,
    },
    "investment": {
        "ranges": [(200, 260)],
        "saturation": 70,
        "lightness": 50,
    },
}


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    """Convert an HSL colour (degrees, percent, percent) to ``#rrggbb``."""
    s = saturation / 100
    light = lightness / 100

    c = (1 - abs(2 * light - 1)) * s
    x = c * (1 - abs((hue / 60) % 2 - 1))
    m = light - c / 2

    if hue < 60:
        r, g, b = c, x, 0.0
    elif hue < 120:
        r, g, b = x, c, 0.0
    elif hue < 180:
        r, g, b = 0.0, c, x
    elif hue < 240:
        r, g, b = 0.0, x, c
    elif hue < 300:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    def channel(value: float) -> str:
        return f"{round((value + m) * 255):02x}"

    return f"#{channel(r)}{channel(g)}{channel(b)}"


def generate_semantic_color(category_type: str, index: int) -> str:
    """Generate the colour for the ``index``-th category of a domain.

    Args:
        category_type: expense, income or investment (unknown types use expense)
        index: 0-based position of the category within its domain

    Returns:
        Hex colour string such as "#d9462b"
    """
    config = HUE_RANGES.get(category_type, HUE_RANGES["expense"])
    ranges = config["ranges"]

    total_span = sum(end - start for start, end in ranges)
    offset = (index * GOLDEN_ANGLE) % total_span

    hue = float(ranges[0][0])
    accumulated = 0.0
    for start, end in ranges:
        span = end - start
        if offset < accumulated + span:
            hue = start + (offset - accumulated)
            break
        accumulated += span

    # -5, 0 or +5 so adjacent hues also differ in brightness
    lightness = config["lightness"] + (index % 3 - 1) * 5
    lightness = max(35, min(65, lightness))

    return hsl_to_hex(hue % 360, config["saturation"], lightness)
