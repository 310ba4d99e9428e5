"""Escape-time evaluation of the quadratic map z -> z^2 + c."""

from __future__ import annotations

import math
from typing import Optional

import numpy as np
import tensorflow as tf

SMOOTHING_OFFSET = 2.0

_LN2 = math.log(2.0)
_MIN_ESCAPE = float(np.finfo(np.float64).tiny)
# any value with log(log(x)) defined; only read for orbits that never escaped
_PLACEHOLDER_MODULUS = 16.0


def in_main_cardioid(re: float, im: float) -> bool:
    q = re * re + im * im - re / 2.0 + 1.0 / 16.0
    return q * (q + re - 0.25) - im * im / 4.0 < 0.0


def in_period2_bulb(re: float, im: float) -> bool:
    return re * re + im * im + 2.0 * re + 15.0 / 16.0 < 0.0


def is_analytically_inside(c: complex) -> bool:
    """Return True when ``c`` is provably inside the set without iterating."""

    re, im = c.real, c.imag
    if re == 0.0 and im == 0.0:
        return True
    return in_main_cardioid(re, im) or in_period2_bulb(re, im)


def smooth_escape(iterations: int, modulus: float, max_iterations: int) -> float:
    """Continuous escape value for an orbit whose squared modulus passed the radius."""

    value = (iterations + SMOOTHING_OFFSET - math.log(math.log(modulus)) / _LN2) / max_iterations
    return min(max(value, _MIN_ESCAPE), 1.0)


def iterate_point(c: complex, squared_escape_radius: float, max_iterations: int) -> float:
    """Return the normalized escape value of ``c``, 0 for points in the set."""

    cr, ci = c.real, c.imag
    zr, zi = cr, ci
    qr = zr * zr
    qi = zi * zi
    modulus = qr + qi
    if modulus > squared_escape_radius:
        return smooth_escape(0, modulus, max_iterations)
    if is_analytically_inside(c):
        return 0.0

    for n in range(1, max_iterations + 1):
        zi = 2.0 * zr * zi + ci
        zr = qr - qi + cr
        qr = zr * zr
        qi = zi * zi
        modulus = qr + qi
        if modulus > squared_escape_radius:
            return smooth_escape(n, modulus, max_iterations)
        if zr == 0.0 and zi == 0.0:
            # orbit returned to 0, so it repeats forever
            return 0.0
    return 0.0


def _analytically_inside(cs_re: tf.Tensor, cs_im: tf.Tensor, modulus: tf.Tensor) -> tf.Tensor:
    at_zero = tf.logical_and(tf.equal(cs_re, 0.0), tf.equal(cs_im, 0.0))
    q = modulus - cs_re / 2.0 + 1.0 / 16.0
    cardioid = q * (q + cs_re - 0.25) - cs_im * cs_im / 4.0 < 0.0
    bulb = modulus + 2.0 * cs_re + 15.0 / 16.0 < 0.0
    return tf.logical_or(at_zero, tf.logical_or(cardioid, bulb))


@tf.function
def _escape_step(cs_re: tf.Tensor, cs_im: tf.Tensor, zr: tf.Tensor, zi: tf.Tensor, active: tf.Tensor) -> tuple[tf.Tensor, tf.Tensor]:
    """Apply one iteration of the quadratic map to the orbits still active."""

    new_zi = 2.0 * zr * zi + cs_im
    new_zr = zr * zr - zi * zi + cs_re
    return tf.where(active, new_zr, zr), tf.where(active, new_zi, zi)


@tf.function
def _escape_run(
    cs_re: tf.Tensor,
    cs_im: tf.Tensor,
    squared_escape_radius: tf.Tensor,
    max_iterations: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate every orbit until it escapes, is proven inside, or the budget ends."""

    zr = tf.identity(cs_re)
    zi = tf.identity(cs_im)
    modulus = zr * zr + zi * zi
    escaped = tf.greater(modulus, squared_escape_radius)
    inside = tf.logical_and(tf.logical_not(escaped), _analytically_inside(cs_re, cs_im, modulus))
    active = tf.logical_not(tf.logical_or(escaped, inside))
    ns = tf.zeros_like(cs_re, tf.int64)
    escape_modulus = tf.where(escaped, modulus, tf.fill(tf.shape(modulus), tf.constant(_PLACEHOLDER_MODULUS, tf.float64)))
    i = tf.constant(0, dtype=tf.int64)

    def cond(i, zr, zi, ns, escape_modulus, escaped, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, ns, escape_modulus, escaped, active):
        i = i + 1
        zr, zi = _escape_step(cs_re, cs_im, zr, zi, active)
        modulus = zr * zr + zi * zi
        just_escaped = tf.logical_and(active, tf.greater(modulus, squared_escape_radius))
        at_zero = tf.logical_and(tf.equal(zr, 0.0), tf.equal(zi, 0.0))
        ns = tf.where(just_escaped, tf.fill(tf.shape(ns), i), ns)
        escape_modulus = tf.where(just_escaped, modulus, escape_modulus)
        escaped = tf.logical_or(escaped, just_escaped)
        active = tf.logical_and(active, tf.logical_not(tf.logical_or(just_escaped, at_zero)))
        return i, zr, zi, ns, escape_modulus, escaped, active

    _, _, _, ns, escape_modulus, escaped, _ = tf.while_loop(
        cond, body, (i, zr, zi, ns, escape_modulus, escaped, active)
    )
    return ns, escape_modulus, escaped


def iterate_grid(
    cs_re: np.ndarray,
    cs_im: np.ndarray,
    squared_escape_radius: float,
    max_iterations: int,
    *,
    device: Optional[str] = None,
) -> np.ndarray:
    """Vectorized :func:`iterate_point` over arrays of real and imaginary parts."""

    with tf.device(device if device is not None else "/CPU:0"):
        re_tf = tf.convert_to_tensor(np.asarray(cs_re, dtype=np.float64), dtype=tf.float64)
        im_tf = tf.convert_to_tensor(np.asarray(cs_im, dtype=np.float64), dtype=tf.float64)
        radius_tf = tf.constant(squared_escape_radius, dtype=tf.float64)
        max_iterations_tf = tf.constant(max_iterations, dtype=tf.int64)

        ns, escape_modulus, escaped = _escape_run(re_tf, im_tf, radius_tf, max_iterations_tf)

        ln2 = tf.constant(_LN2, dtype=tf.float64)
        log_log = tf.math.log(tf.math.log(escape_modulus))
        smooth = (tf.cast(ns, tf.float64) + SMOOTHING_OFFSET - log_log / ln2) / tf.cast(max_iterations_tf, tf.float64)
        smooth = tf.clip_by_value(smooth, tf.constant(_MIN_ESCAPE, tf.float64), tf.constant(1.0, tf.float64))
        values = tf.where(escaped, smooth, tf.zeros_like(smooth))

    return values.numpy()
