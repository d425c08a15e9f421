"""Color allocation for new groups."""

from __future__ import annotations

import random

DEFAULT_MAX_LUMINANCE = 200.0


def luminance(color: str) -> float:
    """Return the perceived luminance of a ``#rrggbb`` color.

    Args:
        color: Hex color string with a leading ``#``.

    Returns:
        float: ``0.2126R + 0.7152G + 0.0722B`` on the 0-255 scale.

    Raises:
        ValueError: If the string is not a six-digit hex color.
    """
    digits = color.lstrip("#")
    if len(digits) != 6:
        raise ValueError(f"Expected a #RRGGBB color, got {color!r}")
    red, green, blue = (int(digits[index : index + 2], 16) for index in (0, 2, 4))
    return 0.2126 * red + 0.7152 * green + 0.0722 * blue


class ColorAllocator:
    """Generate colors dark enough to carry the light overlay text of the group chip."""

    def __init__(
        self,
        *,
        max_luminance: float = DEFAULT_MAX_LUMINANCE,
        rng: random.Random | None = None,
    ) -> None:
        if not 0 <= max_luminance <= 255:
            raise ValueError("max_luminance must be between 0 and 255.")
        self._max_luminance = max_luminance
        self._rng = rng or random.Random()

    @property
    def max_luminance(self) -> float:
        return self._max_luminance

    def next_color(self) -> str:
        """Draw uniform RGB triples until one satisfies the luminance bound.

        Returns:
            str: Lower-case ``#rrggbb`` color.
        """
        while True:
            red, green, blue = (self._rng.randint(0, 255) for _ in range(3))
            if 0.2126 * red + 0.7152 * green + 0.0722 * blue <= self._max_luminance:
                return f"#{red:02x}{green:02x}{blue:02x}"


__all__ = ["ColorAllocator", "luminance", "DEFAULT_MAX_LUMINANCE"]
