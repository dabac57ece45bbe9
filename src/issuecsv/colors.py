"""Display colours for created projects and tags."""

from __future__ import annotations

import random

# Channels below this floor produce near-black, low-contrast swatches.
CHANNEL_MIN = 55
CHANNEL_MAX = 255

_RNG = random.Random()


def random_color(rng: random.Random | None = None) -> str:
    """Return ``#rrggbb`` (lowercase) with each channel in [CHANNEL_MIN, CHANNEL_MAX]."""
    source = rng or _RNG
    r, g, b = (source.randint(CHANNEL_MIN, CHANNEL_MAX) for _ in range(3))
    return f'#{r:02x}{g:02x}{b:02x}'


def tag_theme(color: str) -> dict[str, object]:
    return {'primary': color, 'is_auto_contrast': True}


__all__ = ['random_color', 'tag_theme', 'CHANNEL_MIN', 'CHANNEL_MAX']
