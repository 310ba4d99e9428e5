"""Hue-wheel colorization of normalized escape values."""

from __future__ import annotations

import math

import numpy as np

WHEEL_STEPS = 768
SECTOR_STEPS = WHEEL_STEPS // 3
OPAQUE = 255
INSIDE_COLOR = (0, 0, 0, OPAQUE)


def _effective_interval(hue_interval: float) -> float:
    return hue_interval if hue_interval != 0 else 1.0


def wheel_color(h: int) -> tuple[int, int, int]:
    """RGB for step ``h`` of the red -> green -> blue -> red wheel."""

    if h < SECTOR_STEPS:
        return SECTOR_STEPS - 1 - h, h, 0
    if h < 2 * SECTOR_STEPS:
        return 0, 2 * SECTOR_STEPS - 1 - h, h - SECTOR_STEPS
    return h - 2 * SECTOR_STEPS, 0, WHEEL_STEPS - 1 - h


def colorize(value: float, min_hue: float, hue_interval: float) -> tuple[int, int, int, int]:
    """Map a normalized escape value to an RGBA quadruple."""

    if value == 0:
        return INSIDE_COLOR
    t = (value - min_hue) / _effective_interval(hue_interval)
    t = min(max(t, 0.0), 1.0)
    r, g, b = wheel_color(int(math.floor((WHEEL_STEPS - 1) * t)))
    return r, g, b, OPAQUE


def colorize_array(values: np.ndarray, min_hue: float, hue_interval: float) -> np.ndarray:
    """Vectorized :func:`colorize`; returns ``uint8`` with a trailing RGBA axis."""

    values = np.asarray(values, dtype=np.float64)
    t = np.clip((values - min_hue) / _effective_interval(hue_interval), 0.0, 1.0)
    h = np.floor((WHEEL_STEPS - 1) * t).astype(np.int64)

    first = h < SECTOR_STEPS
    second = np.logical_and(h >= SECTOR_STEPS, h < 2 * SECTOR_STEPS)
    third = h >= 2 * SECTOR_STEPS

    rgba = np.zeros(values.shape + (4,), dtype=np.uint8)
    rgba[..., 0] = np.where(first, SECTOR_STEPS - 1 - h, np.where(third, h - 2 * SECTOR_STEPS, 0))
    rgba[..., 1] = np.where(first, h, np.where(second, 2 * SECTOR_STEPS - 1 - h, 0))
    rgba[..., 2] = np.where(second, h - SECTOR_STEPS, np.where(third, WHEEL_STEPS - 1 - h, 0))
    rgba[..., 3] = OPAQUE

    rgba[values == 0] = INSIDE_COLOR
    return rgba
