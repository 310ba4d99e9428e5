"""Two-pass rendering of Mandelbrot frames into a caller-owned RGBA buffer."""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Optional

import numpy as np

from .colorizer import colorize_array
from .errors import InvalidParameters
from .escape import iterate_grid, iterate_point
from .mapping import RenderParameters, SamplingMetadata, compute_metadata, sample_rows

BYTES_PER_PIXEL = 4
EVALUATORS = ("tensorflow", "python")


@dataclass(frozen=True)
class HueRange:
    """Observed range of normalized escape values over part of a frame."""

    min: float
    max: float

    @classmethod
    def of(cls, values: np.ndarray) -> "HueRange":
        return cls(min=float(np.min(values)), max=float(np.max(values)))

    def merge(self, other: "HueRange") -> "HueRange":
        return HueRange(min=min(self.min, other.min), max=max(self.max, other.max))

    @property
    def interval(self) -> float:
        """Width of the range; 1 for a uniform frame so colorization never divides by zero."""

        interval = self.max - self.min
        return interval if interval != 0 else 1.0


@dataclass(frozen=True)
class RenderResult:
    """Summary of a completed render; the pixels live in the caller's buffer."""

    hue_range: HueRange
    inside_pixels: int
    metadata: SamplingMetadata


def _pixel_view(buffer, params: RenderParameters) -> np.ndarray:
    needed = BYTES_PER_PIXEL * params.x_res * params.y_res
    try:
        view = memoryview(buffer)
    except TypeError as exc:
        raise InvalidParameters("buffer must support the buffer protocol") from exc
    if view.readonly:
        raise InvalidParameters("buffer is read-only")
    if not view.c_contiguous:
        raise InvalidParameters("buffer must be C-contiguous")
    if view.nbytes < needed:
        raise InvalidParameters(f"buffer holds {view.nbytes} bytes, {needed} required")
    pixels = np.frombuffer(view.cast("B"), dtype=np.uint8, count=needed)
    return pixels.reshape(params.y_res, params.x_res, BYTES_PER_PIXEL)


def _evaluate_python(cs_re: np.ndarray, cs_im: np.ndarray, params: RenderParameters) -> np.ndarray:
    values = np.empty(cs_re.shape, dtype=np.float64)
    for index in np.ndindex(cs_re.shape):
        c = complex(float(cs_re[index]), float(cs_im[index]))
        values[index] = iterate_point(c, params.squared_escape_radius, params.max_iterations)
    return values


def compute_escape_values(
    params: RenderParameters,
    metadata: SamplingMetadata,
    *,
    evaluator: str = "tensorflow",
    device: Optional[str] = None,
    rows_per_band: Optional[int] = None,
) -> tuple[np.ndarray, HueRange]:
    """First pass: escape values for every pixel and their combined hue range."""

    band = metadata.y_res if rows_per_band is None else rows_per_band
    raw = np.empty((metadata.y_res, metadata.x_res), dtype=np.float64)
    ranges = []

    for row_start in range(0, metadata.y_res, band):
        row_stop = min(row_start + band, metadata.y_res)
        cs_re, cs_im = sample_rows(metadata, row_start, row_stop)
        if evaluator == "tensorflow":
            values = iterate_grid(
                cs_re, cs_im, params.squared_escape_radius, params.max_iterations, device=device
            )
        else:
            values = _evaluate_python(cs_re, cs_im, params)
        raw[row_start:row_stop] = values
        ranges.append(HueRange.of(values))

    return raw, reduce(HueRange.merge, ranges)


def render_frame(
    params: RenderParameters,
    buffer,
    *,
    evaluator: str = "tensorflow",
    device: Optional[str] = None,
    rows_per_band: Optional[int] = None,
) -> RenderResult:
    """Render a Mandelbrot frame into ``buffer`` as row-major RGBA bytes."""

    if evaluator not in EVALUATORS:
        raise InvalidParameters(f"unknown evaluator {evaluator!r}, expected one of {', '.join(EVALUATORS)}")
    if rows_per_band is not None and (isinstance(rows_per_band, bool) or not isinstance(rows_per_band, int) or rows_per_band <= 0):
        raise InvalidParameters(f"rows_per_band must be a positive integer, got {rows_per_band}")
    metadata = compute_metadata(params)
    pixels = _pixel_view(buffer, params)

    raw, hue_range = compute_escape_values(
        params, metadata, evaluator=evaluator, device=device, rows_per_band=rows_per_band
    )

    pixels[...] = colorize_array(raw, hue_range.min, hue_range.interval)

    return RenderResult(
        hue_range=hue_range,
        inside_pixels=int(np.count_nonzero(raw == 0)),
        metadata=metadata,
    )


def render(
    buffer,
    xres: int,
    yres: int,
    scale: float,
    origin: tuple[float, float],
    squared_escape_radius: float,
    max_iterations: int,
    rotation_angle: float = 0.0,
    *,
    evaluator: str = "tensorflow",
    device: Optional[str] = None,
    rows_per_band: Optional[int] = None,
) -> RenderResult:
    """Tuple-origin form of :func:`render_frame`."""
    params = RenderParameters(
        x_res=xres,
        y_res=yres,
        scale=scale,
        origin_re=origin[0],
        origin_im=origin[1],
        squared_escape_radius=squared_escape_radius,
        max_iterations=max_iterations,
        rotation=rotation_angle,
    )
    return render_frame(
        params, buffer, evaluator=evaluator, device=device, rows_per_band=rows_per_band
    )
