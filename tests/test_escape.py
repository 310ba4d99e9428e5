import math

import numpy as np
import pytest

from mandelbrot.escape import (
    SMOOTHING_OFFSET,
    in_main_cardioid,
    in_period2_bulb,
    is_analytically_inside,
    iterate_grid,
    iterate_point,
)

RADIUS = 4000.0


def test_small_disc_is_inside_without_iterating():
    """Every point with |c| < 1/4 lies in the main cardioid."""
    for angle in np.linspace(0.0, 2 * np.pi, 24, endpoint=False):
        for modulus in (0.0, 0.1, 0.24):
            c = complex(modulus * np.cos(angle), modulus * np.sin(angle))
            assert is_analytically_inside(c)
            assert iterate_point(c, RADIUS, 50) == 0.0


def test_period2_bulb():
    assert in_period2_bulb(-1.0, 0.0)
    assert in_period2_bulb(-1.0, 0.2)
    assert not in_period2_bulb(-1.0, 0.3)
    assert iterate_point(complex(-1.1, 0.1), RADIUS, 50) == 0.0


def test_cardioid_cusp_is_not_claimed():
    assert not in_main_cardioid(0.25, 0.0)
    # bounded but outside both shortcut regions, so it exhausts the budget
    assert iterate_point(0.25 + 0j, RADIUS, 200) == 0.0


def test_neck_point_is_not_classified_inside():
    """-0.75 + 0.1i sits between the cardioid and the bulb and escapes."""
    c = complex(-0.75, 0.1)
    assert not is_analytically_inside(c)
    assert iterate_point(c, RADIUS, 1000) > 0.0


def test_bounded_orbit_outside_shortcuts():
    c = complex(-2.0, 0.0)
    assert not is_analytically_inside(c)
    assert iterate_point(c, RADIUS, 100) == 0.0
    assert iterate_point(1j, RADIUS, 100) == 0.0


@pytest.mark.parametrize("c", [0.6 + 0j, 0.55 + 0.3j, 1.0 + 1.0j, 2.0 + 0j, 0.75 - 0.5j])
def test_right_half_plane_escapes(c):
    value = iterate_point(c, RADIUS, 200)
    assert 0.0 < value <= 1.0


def test_smooth_value_of_known_orbit():
    # 1+i -> 1+3i -> -7+7i -> 1-97i, whose squared modulus 9410 exceeds the radius
    expected = (3 + SMOOTHING_OFFSET - math.log(math.log(9410.0)) / math.log(2.0)) / 50
    assert iterate_point(1 + 1j, RADIUS, 50) == pytest.approx(expected)


def test_raw_count_does_not_depend_on_budget():
    c = 1 + 1j
    assert iterate_point(c, RADIUS, 50) * 50 == pytest.approx(iterate_point(c, RADIUS, 500) * 500)


def test_values_stay_normalized():
    for re in np.linspace(-2.0, 2.0, 21):
        for im in np.linspace(-2.0, 2.0, 21):
            value = iterate_point(complex(re, im), RADIUS, 30)
            assert 0.0 <= value <= 1.0


def test_grid_matches_point_evaluation():
    re, im = np.meshgrid(np.linspace(-2.0, 1.0, 31), np.linspace(-1.2, 1.2, 25))
    values = iterate_grid(re, im, RADIUS, 80)

    expected = np.array(
        [[iterate_point(complex(r, i), RADIUS, 80) for r, i in zip(row_re, row_im)] for row_re, row_im in zip(re, im)]
    )
    assert values.shape == re.shape
    np.testing.assert_array_equal(values == 0.0, expected == 0.0)
    np.testing.assert_allclose(values, expected, rtol=1e-12, atol=0.0)


def test_grid_handles_escape_before_first_step():
    values = iterate_grid(np.array([[60.0, 0.0]]), np.array([[60.0, 0.0]]), RADIUS, 10)
    assert values[0, 0] == pytest.approx(iterate_point(60 + 60j, RADIUS, 10))
    assert values[0, 0] > 0.0
    assert values[0, 1] == 0.0


def test_grid_budget_beyond_int32():
    budget = 2 ** 31
    value = iterate_grid(np.array([[1.0]]), np.array([[1.0]]), RADIUS, budget)[0, 0]
    assert value > 0.0
    assert value == pytest.approx(iterate_point(1 + 1j, RADIUS, budget), rel=1e-12)
