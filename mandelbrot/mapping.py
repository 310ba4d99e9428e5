"""Mapping between the pixel grid and the complex plane."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import InvalidParameters, InvalidScale, OriginOutOfRange, PrecisionExhausted

ESCAPE_DISC_RADIUS = 2.0
# iteration counters are int64 in the TensorFlow kernel
MAX_ITERATION_BUDGET = int(np.iinfo(np.int64).max)


@dataclass(frozen=True)
class RenderParameters:
    """Parameters that describe a single render of the Mandelbrot set."""

    x_res: int
    y_res: int
    scale: float
    origin_re: float
    origin_im: float
    squared_escape_radius: float
    max_iterations: int
    rotation: float = 0.0


@dataclass(frozen=True)
class SamplingMetadata:
    """Metadata describing the sampling grid for a rendered frame."""

    radius: float
    x_min: float
    y_max: float
    x_step: float
    y_step: float
    x_res: int
    y_res: int
    rotation_cos: Optional[float] = None
    rotation_sin: Optional[float] = None

    @property
    def rotated(self) -> bool:
        return self.rotation_cos is not None


def _is_positive_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool) and value > 0


def validate_parameters(params: RenderParameters) -> None:
    """Reject resolutions, budgets, radii and rotations that cannot produce a render."""

    if not _is_positive_int(params.x_res) or not _is_positive_int(params.y_res):
        raise InvalidParameters(f"resolution must be positive integers, got {params.x_res}x{params.y_res}")
    if not _is_positive_int(params.max_iterations) or params.max_iterations > MAX_ITERATION_BUDGET:
        raise InvalidParameters(f"max_iterations must be a positive integer up to 2**63 - 1, got {params.max_iterations}")
    radius = float(params.squared_escape_radius)
    if not math.isfinite(radius) or radius <= math.e:
        raise InvalidParameters(
            f"squared_escape_radius must be finite and greater than e, got {params.squared_escape_radius}"
        )
    rotation = float(params.rotation)
    if not math.isfinite(rotation) or rotation < 0.0:
        raise InvalidParameters(f"rotation must be a finite angle >= 0, got {params.rotation}")


def compute_metadata(params: RenderParameters) -> SamplingMetadata:
    """Validate ``params`` and derive the sampling grid of the view."""

    validate_parameters(params)

    scale = np.float64(params.scale)
    if not scale >= 1.0:
        raise InvalidScale(f"scale must be >= 1, got {params.scale}")

    origin_re = np.float64(params.origin_re)
    origin_im = np.float64(params.origin_im)
    offset = origin_re * origin_re + origin_im * origin_im
    if not offset <= ESCAPE_DISC_RADIUS ** 2:
        raise OriginOutOfRange(
            f"origin ({params.origin_re}, {params.origin_im}) lies outside the radius-2 disc"
        )

    if offset == 0.0:
        radius = np.float64(ESCAPE_DISC_RADIUS) / scale
    else:
        radius = (np.float64(ESCAPE_DISC_RADIUS) - np.sqrt(offset)) / scale

    x_step = 2.0 * radius / params.x_res
    y_step = 2.0 * radius / params.y_res
    if not (x_step > 0.0 and y_step > 0.0):
        raise PrecisionExhausted(
            f"pixel step underflows at scale {params.scale} for {params.x_res}x{params.y_res}"
        )

    rotation_cos = rotation_sin = None
    if params.rotation > 0.0:
        rotation_cos = float(np.cos(np.float64(params.rotation)))
        rotation_sin = float(np.sin(np.float64(params.rotation)))

    return SamplingMetadata(
        radius=float(radius),
        x_min=float(origin_re - radius),
        y_max=float(origin_im + radius),
        x_step=float(x_step),
        y_step=float(y_step),
        x_res=int(params.x_res),
        y_res=int(params.y_res),
        rotation_cos=rotation_cos,
        rotation_sin=rotation_sin,
    )


def _rotate(metadata: SamplingMetadata, re, im):
    if not metadata.rotated:
        return re, im
    cos = np.float64(metadata.rotation_cos)
    sin = np.float64(metadata.rotation_sin)
    return re * cos - im * sin, re * sin + im * cos


def pixel_to_complex(metadata: SamplingMetadata, row: int, col: int) -> tuple[np.float64, np.float64]:
    """Return the plane coordinate sampled by pixel ``(row, col)``; row 0 is the top."""

    re = np.float64(metadata.x_min) + np.float64(col) * np.float64(metadata.x_step)
    im = np.float64(metadata.y_max) - np.float64(row) * np.float64(metadata.y_step)
    re, im = _rotate(metadata, re, im)
    return np.float64(re), np.float64(im)


def sample_rows(metadata: SamplingMetadata, row_start: int = 0, row_stop: Optional[int] = None) -> tuple[np.ndarray, np.ndarray]:
    """Plane coordinates for rows ``[row_start, row_stop)`` as two ``(rows, x_res)`` arrays."""

    if row_stop is None:
        row_stop = metadata.y_res
    cols = np.arange(metadata.x_res, dtype=np.float64)
    rows = np.arange(row_start, row_stop, dtype=np.float64)

    x = np.float64(metadata.x_min) + cols * np.float64(metadata.x_step)
    y = np.float64(metadata.y_max) - rows * np.float64(metadata.y_step)
    re, im = np.meshgrid(x, y)
    return _rotate(metadata, re, im)
