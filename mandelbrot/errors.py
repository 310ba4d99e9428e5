"""Errors raised when a render request cannot be satisfied."""

from __future__ import annotations


class ValidationError(ValueError):
    """Base class for render parameters that fail validation."""


class InvalidParameters(ValidationError):
    """Resolution, iteration budget, escape radius, rotation or buffer is unusable."""


class InvalidScale(ValidationError):
    """The zoom scale is below 1."""


class OriginOutOfRange(ValidationError):
    """The view origin lies outside the radius-2 disc."""


class PrecisionExhausted(ValidationError):
    """The per-pixel step underflows to zero at the requested zoom."""
