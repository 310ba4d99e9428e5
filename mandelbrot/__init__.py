"""Public API for Mandelbrot rendering utilities."""

from .colorizer import colorize, colorize_array
from .errors import (
    InvalidParameters,
    InvalidScale,
    OriginOutOfRange,
    PrecisionExhausted,
    ValidationError,
)
from .escape import is_analytically_inside, iterate_grid, iterate_point
from .mapping import (
    RenderParameters,
    SamplingMetadata,
    compute_metadata,
    pixel_to_complex,
    sample_rows,
)
from .renderer import HueRange, RenderResult, compute_escape_values, render, render_frame

__all__ = [
    "HueRange",
    "InvalidParameters",
    "InvalidScale",
    "OriginOutOfRange",
    "PrecisionExhausted",
    "RenderParameters",
    "RenderResult",
    "SamplingMetadata",
    "ValidationError",
    "colorize",
    "colorize_array",
    "compute_escape_values",
    "compute_metadata",
    "is_analytically_inside",
    "iterate_grid",
    "iterate_point",
    "pixel_to_complex",
    "render",
    "render_frame",
    "sample_rows",
]
