"""Tests for group color allocation."""

from __future__ import annotations

import random

import pytest

from tabgroups.colors import ColorAllocator, luminance


def test_colors_respect_default_luminance_bound() -> None:
    allocator = ColorAllocator(rng=random.Random(1234))

    for _ in range(500):
        color = allocator.next_color()
        assert len(color) == 7 and color.startswith("#")
        assert luminance(color) <= 200


def test_custom_bound_is_honored() -> None:
    allocator = ColorAllocator(max_luminance=60, rng=random.Random(7))

    colors = [allocator.next_color() for _ in range(100)]

    assert all(luminance(color) <= 60 for color in colors)


def test_rejection_sampling_redraws_bright_colors() -> None:
    class _Scripted(random.Random):
        def __init__(self, values: list[int]) -> None:
            super().__init__()
            self._values = iter(values)

        def randint(self, a: int, b: int) -> int:
            return next(self._values)

    # White is rejected, the second triple is accepted.
    allocator = ColorAllocator(rng=_Scripted([255, 255, 255, 16, 32, 48]))

    assert allocator.next_color() == "#102030"


def test_luminance_uses_perceptual_weights() -> None:
    assert luminance("#ffffff") == pytest.approx(255.0)
    assert luminance("#000000") == 0
    assert luminance("#00ff00") == pytest.approx(0.7152 * 255)


def test_invalid_inputs_raise() -> None:
    with pytest.raises(ValueError):
        luminance("#fff")
    with pytest.raises(ValueError):
        ColorAllocator(max_luminance=300)
