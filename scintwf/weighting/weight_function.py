"""
Scintillation weight functions of altitude.

The weight function ``W(h)`` gives the scintillation index produced by a
thin turbulent layer at altitude ``h`` with unit ``Cn2 dh``:

    W(h) = c h^(5/6) / lambda^(7/6) W0(z),   z = r_F / (r_F + D)

where ``r_F = sqrt(lambda h)`` is the Fresnel radius, ``D`` the aperture
scale and ``W0`` the dimensionless weight function. ``W0`` is precomputed on
a uniform ``z`` grid over [0, 1] and interpolated by a cubic spline, so
evaluation at any altitude is cheap.

Units
-----
- altitude: km
- wavelength: nm
- aperture scale: mm
"""

import logging
from typing import Optional, Union

import numpy as np

from scintwf.core.constants import DEFAULT_WEIGHT_FUNCTION_GRID_SIZE, WEIGHT_FUNCTION_SCALE
from scintwf.core.grid import UniformGrid
from scintwf.core.spline import CubicSpline, FirstOrder
from scintwf.weighting.dimensionless import (
    dimensionless_weight_function,
    dimensionless_weight_function_2d,
)

logger = logging.getLogger(__name__)


class WeightFunction:
    """
    Weight function for an axially symmetric aperture.

    Parameters
    ----------
    spectral_filter : SpectralFilter
        Normalized spectral filter
    wavelength : float
        Equivalent wavelength [nm]
    aperture_filter : callable
        Radial aperture filter ``A(u)``
    aperture_scale : float
        Aperture scale [mm]
    grid : UniformGrid or int, optional
        Precomputation grid over [0, 1], or its number of nodes
        (default: 1025)
    rtol : float, optional
        Quadrature relative tolerance
    maxlevel : int, optional
        Maximum quadrature refinement level

    Examples
    --------
    >>> wf = WeightFunction(MonoSpectralFilter(), 550.0, CircularAperture(), 10.0, 129)
    >>> wf([0.5, 1.0, 2.0])
    """

    # 2 pi from the azimuthal integral of an axially symmetric spectrum
    scale = 2.0 * np.pi * WEIGHT_FUNCTION_SCALE

    def __init__(
        self,
        spectral_filter,
        wavelength: float,
        aperture_filter,
        aperture_scale: float,
        grid: Union[UniformGrid, int] = DEFAULT_WEIGHT_FUNCTION_GRID_SIZE,
        rtol: Optional[float] = None,
        maxlevel: Optional[int] = None,
    ):
        if wavelength <= 0:
            raise ValueError(f"Wavelength must be positive, got {wavelength}")
        if aperture_scale <= 0:
            raise ValueError(f"Aperture scale must be positive, got {aperture_scale}")
        if isinstance(grid, (int, np.integer)):
            if grid < 2:
                raise ValueError(f"Weight function grid needs at least 2 nodes, got {grid}")
            grid = UniformGrid(0.0, 1.0 / (grid - 1), grid)

        self.wavelength = float(wavelength)
        self.aperture_scale = float(aperture_scale)
        self.grid = grid

        values = self._dimensionless(
            spectral_filter, aperture_filter, grid.values, rtol=rtol, maxlevel=maxlevel
        )
        self.spline = CubicSpline(values, FirstOrder(0.0, 0.0))
        logger.debug(
            f"{type(self).__name__}: lambda={self.wavelength:.2f} nm, "
            f"D={self.aperture_scale:.3f} mm, {grid.size} nodes"
        )

    @staticmethod
    def _dimensionless(spectral_filter, aperture_filter, z, rtol=None, maxlevel=None):
        return dimensionless_weight_function(
            spectral_filter, aperture_filter, z, rtol=rtol, maxlevel=maxlevel
        )

    @property
    def values(self) -> np.ndarray:
        """Precomputed dimensionless weight function at the grid nodes."""
        return self.spline.values

    def dimensionless(self, z):
        """Interpolated dimensionless weight function at ``z`` in [0, 1]."""
        return self.spline(self.grid.fractional_index(z))

    def __call__(self, altitude):
        """
        Evaluate the weight function.

        Parameters
        ----------
        altitude : float or array_like
            Layer altitude [km]

        Returns
        -------
        W : float or ndarray
            0 at zero altitude, inf at infinite altitude
        """
        h = np.asarray(altitude, dtype=float)
        regular = (h > 0.0) & np.isfinite(h)
        h_safe = np.where(regular, h, 1.0)

        fresnel_radius = np.sqrt(self.wavelength * h_safe)
        z = 1.0 / (1.0 + self.aperture_scale / fresnel_radius)
        w = (self.scale * h_safe ** (5.0 / 6.0) / self.wavelength ** (7.0 / 6.0)
             * self.spline(self.grid.fractional_index(z)))

        w = np.where(regular, w, np.where(np.isinf(h), np.inf, 0.0))
        return w[()]

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(wavelength={self.wavelength}, "
            f"aperture_scale={self.aperture_scale}, size={self.grid.size})"
        )


class WeightFunction2D(WeightFunction):
    """
    Weight function for an aperture without axial symmetry.

    Same parameters as :class:`WeightFunction`, with a Cartesian aperture
    filter ``A(ux, uy)``. The dimensionless function is obtained by nested
    radial and azimuthal quadratures and is noticeably slower to precompute.
    """

    scale = WEIGHT_FUNCTION_SCALE

    @staticmethod
    def _dimensionless(spectral_filter, aperture_filter, z, rtol=None, maxlevel=None):
        return dimensionless_weight_function_2d(
            spectral_filter, aperture_filter, z, rtol=rtol, maxlevel=maxlevel
        )
