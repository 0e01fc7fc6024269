"""
Tests for aperture filters.
"""

import numpy as np
import pytest

from scintwf.aperture.filters import (
    AngleAveragedAperture,
    AnnularAperture,
    CircularAperture,
    CrossAnnularAperture,
    GaussAperture,
    PointAperture,
    SquareAperture,
    airy,
    annular_amplitude,
    make_aperture_filter,
)

# First zero of J1
J1_ZERO = 3.8317059702075125


class TestAiry:
    """Tests for the Airy amplitude."""

    def test_origin(self):
        assert airy(0.0) == 1.0

    def test_small_argument_series(self):
        x = 1e-6
        assert airy(x) == pytest.approx(1.0 - x * x / 8.0, rel=1e-15)

    def test_first_zero(self):
        assert airy(J1_ZERO) == pytest.approx(0.0, abs=1e-12)

    def test_infinity(self):
        assert airy(np.inf) == 0.0
        assert airy(-np.inf) == 0.0

    def test_even(self):
        x = np.array([0.5, 2.0, 7.3])
        assert np.allclose(airy(-x), airy(x))


class TestAxiallySymmetricApertures:
    """Tests for radial aperture filters."""

    @pytest.mark.parametrize("aperture", [
        PointAperture(), CircularAperture(), AnnularAperture(0.3), GaussAperture(),
    ])
    def test_unity_at_origin(self, aperture):
        assert aperture(0.0) == pytest.approx(1.0)
        assert aperture(0.0, 0.0) == pytest.approx(1.0)

    @pytest.mark.parametrize("aperture", [
        CircularAperture(), AnnularAperture(0.3), GaussAperture(),
    ])
    def test_zero_at_infinity(self, aperture):
        assert aperture(np.inf) == 0.0

    def test_point(self):
        af = PointAperture()
        assert af(np.inf) == 1.0
        assert np.array_equal(af(np.array([0.0, 1.0, 5.0])), np.ones(3))
        assert af(np.ones(3), np.ones((2, 1))).shape == (2, 3)

    def test_circular_zero(self):
        af = CircularAperture()
        assert af(J1_ZERO / np.pi) == pytest.approx(0.0, abs=1e-20)

    def test_cartesian_matches_radial(self):
        af = CircularAperture()
        assert af(0.3, 0.4) == pytest.approx(af(0.5), rel=1e-14)

    def test_annular_without_obscuration(self):
        x = np.array([0.0, 0.2, 1.0, 3.5, np.inf])
        assert np.array_equal(AnnularAperture(0.0)(x), CircularAperture()(x))

    def test_annular_invalid(self):
        with pytest.raises(ValueError):
            AnnularAperture(1.0)
        with pytest.raises(ValueError):
            AnnularAperture(-0.1)

    def test_gauss(self):
        assert GaussAperture()(1.0) == pytest.approx(np.exp(-1.0))

    def test_scalar_output(self):
        assert isinstance(CircularAperture()(0.5), float)


class TestCrossAnnularAperture:
    """Tests for the cross filter of two annuli."""

    def test_unity_at_origin(self):
        af = CrossAnnularAperture(0.7, 0.3, 0.5)
        assert af(0.0) == pytest.approx(1.0)
        assert af(0.0, 0.0) == pytest.approx(1.0)

    def test_zero_at_infinity(self):
        assert CrossAnnularAperture(0.4, 0.0, 0.6)(np.inf) == 0.0

    def test_same_annulus_is_annular(self):
        u = np.array([0.0, 0.2, 1.0, 3.5, np.inf])
        cross = CrossAnnularAperture(1.0, 0.4, 0.4)
        assert np.allclose(cross(u), AnnularAperture(0.4)(u), rtol=1e-14, atol=0.0)

    def test_filled_pupils(self):
        u = np.array([0.1, 0.8, 2.5])
        expected = airy(np.pi * u) * airy(0.3 * np.pi * u)
        assert np.allclose(CrossAnnularAperture(0.3, 0.0, 0.0)(u), expected, rtol=1e-14)

    def test_product_of_amplitudes(self):
        u = 1.2
        expected = annular_amplitude(np.pi * u, 0.2) * annular_amplitude(0.6 * np.pi * u, 0.5)
        assert CrossAnnularAperture(0.6, 0.2, 0.5)(u) == pytest.approx(expected, rel=1e-14)

    def test_not_squared(self):
        """Amplitudes of opposite sign give a negative filter value."""
        af = CrossAnnularAperture(0.5, 0.0, 0.0)
        assert airy(1.5 * np.pi) < 0.0 < airy(0.75 * np.pi)
        assert af(1.5) < 0.0

    def test_cartesian_matches_radial(self):
        af = CrossAnnularAperture(0.6, 0.2, 0.5)
        assert af(0.3, 0.4) == pytest.approx(af(0.5), rel=1e-14)

    @pytest.mark.parametrize("args", [(0.0, 0.1, 0.1), (-1.0, 0.1, 0.1), (0.5, 1.0, 0.1), (0.5, 0.1, -0.2)])
    def test_invalid(self, args):
        with pytest.raises(ValueError):
            CrossAnnularAperture(*args)


class TestSquareAperture:
    """Tests for the square aperture."""

    def test_values(self):
        af = SquareAperture()
        assert af(0.0, 0.0) == 1.0
        assert af(1.0, 0.0) == pytest.approx(0.0, abs=1e-30)
        assert af(0.5, 0.0) == pytest.approx((2.0 / np.pi) ** 2)
        assert af(np.inf, 0.0) == 0.0

    def test_no_radial_form(self):
        with pytest.raises(TypeError):
            SquareAperture()(1.0)


class TestAngleAveragedAperture:
    """Tests for the azimuthally averaged aperture."""

    def test_axially_symmetric_input(self):
        """Averaging a radial filter reproduces it at the tabulation nodes."""
        circular = CircularAperture()
        averaged = AngleAveragedAperture(circular, size=65)

        u = np.array([0.0, 1.0, 3.0])
        assert np.allclose(averaged(u), circular(u), rtol=1e-9, atol=1e-14)

    def test_square_origin(self):
        averaged = AngleAveragedAperture(SquareAperture(), size=33)
        assert averaged(0.0) == pytest.approx(1.0, rel=1e-9)
        assert averaged(np.inf) == 0.0

    def test_square_between_axis_and_diagonal(self):
        square = SquareAperture()
        averaged = AngleAveragedAperture(square, size=129)
        # u = 1/3 falls on node 96 of 129
        u = 1.0 / 3.0
        diagonal = square(u / np.sqrt(2.0), u / np.sqrt(2.0))
        axis = square(u, 0.0)
        assert min(axis, diagonal) <= averaged(u) <= max(axis, diagonal)

    def test_too_small(self):
        with pytest.raises(ValueError):
            AngleAveragedAperture(SquareAperture(), size=1)


class TestMakeApertureFilter:
    """Tests for the aperture factory."""

    def test_shapes(self):
        assert isinstance(make_aperture_filter('point'), PointAperture)
        assert isinstance(make_aperture_filter('Circular'), CircularAperture)
        assert isinstance(make_aperture_filter('gauss'), GaussAperture)
        assert isinstance(make_aperture_filter('square'), SquareAperture)

    def test_obscured_circular(self):
        af = make_aperture_filter('circular', obscuration=0.2)
        assert isinstance(af, AnnularAperture)
        assert af.obscuration == 0.2

    def test_cross_annular(self):
        af = make_aperture_filter('cross-annular', obscuration=0.2, ratio=0.5)
        assert isinstance(af, CrossAnnularAperture)
        assert af.ratio == 0.5
        assert af.second_obscuration == 0.2

        af = make_aperture_filter('cross-annular', obscuration=0.2, ratio=0.5, second_obscuration=0.0)
        assert af.second_obscuration == 0.0

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown aperture shape"):
            make_aperture_filter('hexagonal')
