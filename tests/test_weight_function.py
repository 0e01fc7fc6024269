"""
Tests for dimensionless, altitude and grid weight functions.

Reference values are high precision evaluations of the weight-function
integrals for a 550 nm wavelength and a 10 mm aperture.
"""

import numpy as np
import pytest

from scintwf.aperture.filters import (
    CircularAperture,
    GaussAperture,
    PointAperture,
    SquareAperture,
)
from scintwf.spectral.filters import GaussSpectralFilter, MonoSpectralFilter
from scintwf.weighting.dimensionless import (
    aspect_ratio,
    dimensionless_weight_function,
    dimensionless_weight_function_2d,
    spectrum,
)
from scintwf.weighting.grid_weight_function import GridWeightFunction
from scintwf.weighting.weight_function import WeightFunction, WeightFunction2D

# int_0^inf u^(-8/3) sin^2(pi u^2) du
POINT_MONO = 1.9991032874390479724

Z_NODES = np.linspace(0.0, 1.0, 11)

MONO_CIRCULAR = np.array([
    0.0,
    0.0095424267805903034,
    0.057751681372150198,
    0.18275258941523023,
    0.44924254632329664,
    0.86287430440237028,
    1.2614994482444274,
    1.5739245403642390,
    1.7957566887471521,
    1.9370991581536686,
    POINT_MONO,
])

MONO_GAUSS = np.array([
    0.0,
    0.027137581375996065,
    0.17476188516742233,
    0.51712345955734488,
    0.95171316166228320,
    1.3214145058928385,
    1.5899308811559573,
    1.7741515511024606,
    1.8952868631631815,
    1.9684370590292809,
    POINT_MONO,
])

ALTITUDES = np.array([0.0, 0.5, 1.0, 2.0, 4.0, 8.0, 16.0, 32.0, np.inf])

WF_MONO_POINT = np.array([
    0.0,
    68541193203.074700,
    122126522328.85717,
    217604724387.43276,
    387727540036.09136,
    690851936811.72176,
    1230958209860.6672,
    2193318182498.3904,
    np.inf,
])

WF_MONO_CIRCULAR = np.array([
    0.0,
    46095950091.596613,
    96324603994.200758,
    188826153859.60382,
    356304606621.61825,
    657076804976.76375,
    1195089206023.7646,
    2155584522441.6070,
    np.inf,
])


def assert_weight_function_close(actual, expected, rel):
    assert actual[0] == 0.0
    assert actual[-1] == np.inf
    assert actual[1:-1] == pytest.approx(expected[1:-1], rel=rel)


class TestDimensionless:
    """Tests for the dimensionless weight function."""

    def test_aspect_ratio(self):
        assert aspect_ratio(0.5) == 1.0
        assert aspect_ratio(1.0) == 0.0
        assert aspect_ratio(0.0) == np.inf

    def test_spectrum_branches_agree(self):
        """Both forms of the spectrum agree away from the origin."""
        sf = MonoSpectralFilter()
        u = np.array([0.3, 0.9, 1.1, 2.0])
        assert np.allclose(spectrum(sf, u), u ** (-8.0 / 3.0) * sf(u * u), rtol=1e-12)

    def test_mono_circular(self):
        actual = dimensionless_weight_function(MonoSpectralFilter(), CircularAperture(), Z_NODES)
        assert actual.shape == (11,)
        assert actual[0] == 0.0
        assert actual[1:6] == pytest.approx(MONO_CIRCULAR[1:6], abs=3e-4)
        assert actual[6:] == pytest.approx(MONO_CIRCULAR[6:], abs=3e-4)

    def test_mono_gauss(self):
        actual = dimensionless_weight_function(MonoSpectralFilter(), GaussAperture(), Z_NODES)
        assert actual[0] == 0.0
        assert actual[1:6] == pytest.approx(MONO_GAUSS[1:6], abs=3e-4)
        assert actual[6:] == pytest.approx(MONO_GAUSS[6:], abs=3e-4)

    def test_mono_point(self):
        actual = dimensionless_weight_function(MonoSpectralFilter(), PointAperture(), Z_NODES)
        assert actual == pytest.approx(np.full(11, POINT_MONO), abs=3e-4)

    def test_gauss_point(self):
        """A finite bandwidth damps the oscillating tail of the spectrum."""
        actual = dimensionless_weight_function(GaussSpectralFilter(0.1), PointAperture(), 0.5)
        assert actual == pytest.approx(1.9133847737114991, rel=1e-4)

    def test_scalar_node(self):
        actual = dimensionless_weight_function(MonoSpectralFilter(), CircularAperture(), 0.5)
        assert np.ndim(actual) == 0
        assert actual == pytest.approx(MONO_CIRCULAR[5], abs=3e-4)


class TestDimensionless2D:
    """Tests for the dimensionless weight function of arbitrary apertures."""

    def test_axially_symmetric_aperture(self):
        """For a circular pupil the azimuthal average is trivial."""
        actual = dimensionless_weight_function_2d(
            MonoSpectralFilter(), CircularAperture(), 0.5, rtol=1e-6
        )
        assert actual == pytest.approx(MONO_CIRCULAR[5], abs=3e-4)

    def test_infinite_aperture(self):
        actual = dimensionless_weight_function_2d(
            MonoSpectralFilter(), SquareAperture(), [0.0], rtol=1e-6
        )
        assert actual.shape == (1,)
        assert actual[0] == 0.0

    def test_square_below_point(self):
        """Aperture averaging only reduces scintillation."""
        actual = dimensionless_weight_function_2d(
            MonoSpectralFilter(), SquareAperture(), 0.5, rtol=1e-6
        )
        assert 0.0 < actual < POINT_MONO


class TestWeightFunction:
    """Tests for the altitude weight function."""

    @pytest.fixture(scope="class")
    def mono_point(self):
        return WeightFunction(MonoSpectralFilter(), 550.0, PointAperture(), 10.0, 1024)

    @pytest.fixture(scope="class")
    def mono_circular(self):
        return WeightFunction(MonoSpectralFilter(), 550.0, CircularAperture(), 10.0, 1024)

    def test_grid(self, mono_point):
        assert mono_point.grid.size == 1024
        assert mono_point.grid.delta == pytest.approx(1.0 / 1023)
        assert mono_point.values.shape == (1024,)

    def test_mono_point(self, mono_point):
        assert_weight_function_close(mono_point(ALTITUDES), WF_MONO_POINT, rel=1e-3)

    def test_mono_circular(self, mono_circular):
        assert_weight_function_close(mono_circular(ALTITUDES), WF_MONO_CIRCULAR, rel=1e-3)

    def test_scalar_altitude(self, mono_circular):
        w = mono_circular(1.0)
        assert np.ndim(w) == 0
        assert w == pytest.approx(WF_MONO_CIRCULAR[2], rel=1e-3)
        assert mono_circular(0.0) == 0.0

    def test_dimensionless_interpolation(self, mono_circular):
        assert mono_circular.dimensionless(0.5) == pytest.approx(MONO_CIRCULAR[5], abs=3e-4)
        assert mono_circular.dimensionless(0.0) == 0.0

    def test_kolmogorov_scaling(self, mono_point):
        """For a point aperture W scales as h^(5/6)."""
        ratio = mono_point(2.0) / mono_point(1.0)
        assert ratio == pytest.approx(2.0 ** (5.0 / 6.0), rel=1e-3)

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            WeightFunction(MonoSpectralFilter(), 0.0, PointAperture(), 10.0, 8)
        with pytest.raises(ValueError):
            WeightFunction(MonoSpectralFilter(), 550.0, PointAperture(), -1.0, 8)
        with pytest.raises(ValueError):
            WeightFunction(MonoSpectralFilter(), 550.0, PointAperture(), 10.0, 1)


class TestWeightFunction2D:
    """Tests for the weight function of arbitrary apertures."""

    def test_matches_axially_symmetric(self):
        """The 2-D variant omits the 2 pi of the azimuthal integral."""
        sf = MonoSpectralFilter()
        wf = WeightFunction(sf, 550.0, CircularAperture(), 10.0, 5, rtol=1e-6)
        wf2d = WeightFunction2D(sf, 550.0, CircularAperture(), 10.0, 5, rtol=1e-6)

        assert wf2d.scale == pytest.approx(wf.scale / (2.0 * np.pi))
        altitudes = np.array([1.0, 4.0])
        assert wf2d(altitudes) == pytest.approx(wf(altitudes) / (2.0 * np.pi), rel=1e-3)


class TestGridWeightFunction:
    """Tests for grid weight functions."""

    @pytest.fixture
    def grid_wf(self):
        with GridWeightFunction(
            MonoSpectralFilter(), 550.0, CircularAperture(), 10.0, (5, 5)
        ) as wf:
            yield wf

    def test_zero_altitude(self, grid_wf):
        weights = grid_wf(0.0)
        assert weights.shape == (5, 5)
        assert np.array_equal(weights, np.zeros((5, 5)))

    def test_shape_and_symmetry(self, grid_wf):
        weights = grid_wf(2.0)
        assert weights.shape == (5, 5)
        assert np.all(np.isfinite(weights))
        assert np.allclose(weights, weights.T, rtol=0.0, atol=1e-12 * np.abs(weights).max())

    def test_zero_lag_positive(self, grid_wf):
        """The zero-separation weight sums a non-negative spectrum."""
        assert grid_wf(1.0)[0, 0] > 0.0

    def test_default_step(self, grid_wf):
        assert grid_wf.grid_step == grid_wf.aperture_scale
        assert grid_wf.fft_norm == pytest.approx(1.0 / (4.0 * 4 * 4 * 100.0))

    def test_kernel_degenerate_points(self, grid_wf):
        kernel = grid_wf.kernel(np.array([0.0, np.inf, 0.5]), np.array([0.0, 0.0, 0.0]), 1.0)
        assert kernel[0] == 0.0
        assert kernel[1] == 0.0
        assert kernel[2] > 0.0

    def test_closed(self):
        wf = GridWeightFunction(MonoSpectralFilter(), 550.0, SquareAperture(), 10.0, (3, 4), 20.0)
        wf.close()
        with pytest.raises(RuntimeError):
            wf(1.0)

    def test_invalid_step(self):
        with pytest.raises(ValueError):
            GridWeightFunction(MonoSpectralFilter(), 550.0, SquareAperture(), 10.0, (3, 3), 0.0)
