"""
Weight functions for grids of sub-apertures.

For a regular grid of identical sub-apertures with step ``s`` the
covariance weights between all sub-aperture pairs at one altitude are the
2-D cosine transform of the weighted spectrum

    F(ux, uy) = u^(-11/3) S(u^2) A(x ux, x uy),   u^2 = ux^2 + uy^2

sampled up to the Nyquist frequency ``r_F / (2 s)``. Nothing is
precomputed: every altitude resamples ``F`` on the Fresnel scale of that
altitude and runs the same fixed-shape type-I DCT.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from scintwf.core.constants import WEIGHT_FUNCTION_SCALE
from scintwf.core.fft import DCT2DPlan

logger = logging.getLogger(__name__)


class GridWeightFunction:
    """
    Altitude weights for every sub-aperture separation of a grid.

    Parameters
    ----------
    spectral_filter : SpectralFilter
        Normalized spectral filter
    wavelength : float
        Equivalent wavelength [nm]
    aperture_filter : callable
        Cartesian aperture filter ``A(ux, uy)``
    aperture_scale : float
        Sub-aperture scale [mm]
    shape : tuple of int
        Number of separations ``(Nx, Ny)`` along each axis, at least 2 each
    grid_step : float, optional
        Distance between neighbouring sub-apertures [mm]
        (default: the aperture scale)

    Notes
    -----
    The DCT plan is allocated once and released by :meth:`close` or when
    the object is used as a context manager.
    """

    def __init__(
        self,
        spectral_filter,
        wavelength: float,
        aperture_filter,
        aperture_scale: float,
        shape: Tuple[int, int],
        grid_step: Optional[float] = None,
    ):
        if wavelength <= 0:
            raise ValueError(f"Wavelength must be positive, got {wavelength}")
        if aperture_scale <= 0:
            raise ValueError(f"Aperture scale must be positive, got {aperture_scale}")
        if grid_step is None:
            grid_step = aperture_scale
        if grid_step <= 0:
            raise ValueError(f"Grid step must be positive, got {grid_step}")

        self.spectral_filter = spectral_filter
        self.aperture_filter = aperture_filter
        self.wavelength = float(wavelength)
        self.aperture_scale = float(aperture_scale)
        self.grid_step = float(grid_step)
        self.shape = (int(shape[0]), int(shape[1]))

        nx, ny = self.shape
        self._plan = DCT2DPlan(self.shape)
        self.fft_norm = 1.0 / (4.0 * (nx - 1) * (ny - 1) * self.grid_step ** 2)
        logger.debug(f"Grid weight function: shape {self.shape}, step {self.grid_step} mm")

    def kernel(self, ux, uy, x):
        """
        Weighted spectrum ``F(ux, uy)`` at aspect ratio ``x``.

        Zero at the origin and at infinite frequency.
        """
        ux, uy = np.broadcast_arrays(np.asarray(ux, dtype=float), np.asarray(uy, dtype=float))
        u2 = ux * ux + uy * uy
        with np.errstate(all='ignore'):
            af = self.aperture_filter(x * ux, x * uy)
            near = u2 ** (1.0 / 6.0) * self.spectral_filter.regular(u2)
            far = u2 ** (-11.0 / 6.0) * self.spectral_filter(u2)
            value = np.where(u2 < 1.0, near, far) * af
        degenerate = (u2 == 0.0) | np.isinf(ux) | np.isinf(uy)
        return np.where(degenerate, 0.0, value)

    def __call__(self, altitude: float) -> np.ndarray:
        """
        Weights at one altitude.

        Parameters
        ----------
        altitude : float
            Layer altitude [km]

        Returns
        -------
        weights : ndarray
            Array of ``shape``; element ``(i, j)`` belongs to the separation
            ``(i, j)`` grid steps. All zeros at zero altitude.
        """
        if altitude == 0:
            return np.zeros(self.shape)

        nx, ny = self.shape
        fresnel_radius = np.sqrt(self.wavelength * altitude)
        nyquist = fresnel_radius / self.grid_step / 2.0
        ux = np.linspace(0.0, nyquist, nx)
        uy = np.linspace(0.0, nyquist, ny)

        buf = self._plan.buffer
        buf[...] = self.kernel(ux[:, np.newaxis], uy[np.newaxis, :], self.aperture_scale / fresnel_radius)
        weights = self._plan.execute()

        weights *= (WEIGHT_FUNCTION_SCALE * self.fft_norm / self.wavelength ** (1.0 / 6.0)
                    * altitude ** (11.0 / 6.0))
        return weights

    def close(self) -> None:
        """Release the DCT plan."""
        self._plan.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False

    def __repr__(self) -> str:
        return (
            f"GridWeightFunction(wavelength={self.wavelength}, aperture_scale={self.aperture_scale}, "
            f"grid_step={self.grid_step}, shape={self.shape})"
        )
