"""
Spectral filters for polychromatic scintillation.

A spectral filter ``S(x)`` weights the spatial spectrum of scintillation by
the spectral content of the detected light. The argument is
``x = u^2 / lambda``, the squared spatial frequency divided by wavelength.
Every filter also provides ``regular(x) = S(x) / x^2``, evaluated without
the removable singularity at ``x = 0``.

Filters
-------
MonoSpectralFilter
    Monochromatic light, ``S(x) = sin^2(pi x)``
GaussSpectralFilter
    Gaussian passband of relative width ``fwhm``
PolySpectralFilter
    Arbitrary measured response, built through an FFT of ``R(lambda)/lambda``

The closed-form filters are already dimensionless (equivalent wavelength 1).
A PolySpectralFilter is built in physical units (1/nm) and must be
normalized before it is used for a weight function.
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from scintwf.core.constants import (
    DEFAULT_SPECTRAL_FILTER_SIZE,
    EQUIVALENT_WAVELENGTH_SCALE,
    FWHM_TO_GAUSS,
)
from scintwf.core.fft import RealFFTPlan
from scintwf.core.grid import UniformGrid
from scintwf.core.quadrature import integrate
from scintwf.core.spline import CubicSpline, FirstOrder, SecondOrder
from scintwf.spectral.response import SpectralResponse

logger = logging.getLogger(__name__)


class SpectralFilter(ABC):
    """Abstract base class for spectral filters."""

    @abstractmethod
    def __call__(self, x):
        """Filter value ``S(x)``, elementwise."""
        pass

    @abstractmethod
    def regular(self, x):
        """Regularized value ``S(x) / x^2``, elementwise."""
        pass

    @property
    def equivalent_wavelength(self) -> float:
        """Equivalent monochromatic wavelength, in the filter's own units."""
        return 1.0

    def normalize(self) -> "SpectralFilter":
        return self

    def normalized(self) -> "SpectralFilter":
        return copy.deepcopy(self).normalize()


class MonoSpectralFilter(SpectralFilter):
    """Monochromatic spectral filter ``S(x) = sin^2(pi x)``."""

    def __call__(self, x):
        x = np.asarray(x, dtype=float)
        return (np.sin(np.pi * x) ** 2)[()]

    def regular(self, x):
        x = np.asarray(x, dtype=float)
        # np.sinc is the normalized sin(pi x) / (pi x)
        return ((np.pi * np.sinc(x)) ** 2)[()]

    def __repr__(self) -> str:
        return "MonoSpectralFilter()"


class GaussSpectralFilter(SpectralFilter):
    """
    Spectral filter of a Gaussian passband.

    Parameters
    ----------
    fwhm : float
        Full width at half maximum relative to the central wavelength

    Notes
    -----
    ``S(x) = sin^2(pi x) exp(-(pi x fwhm)^2 / (8 ln 2))``. Where the envelope
    underflows the filter is exactly zero.
    """

    def __init__(self, fwhm: float):
        if fwhm < 0:
            raise ValueError(f"FWHM must be non-negative, got {fwhm}")
        self.fwhm = float(fwhm)

    def _envelope(self, x):
        return np.exp(-FWHM_TO_GAUSS * (self.fwhm * np.pi * x) ** 2)

    def __call__(self, x):
        x = np.asarray(x, dtype=float)
        e = self._envelope(x)
        with np.errstate(invalid='ignore'):
            s = np.where(e == 0.0, 0.0, e * np.sin(np.pi * x) ** 2)
        return s[()]

    def regular(self, x):
        x = np.asarray(x, dtype=float)
        e = self._envelope(x)
        with np.errstate(invalid='ignore'):
            s = np.where(e == 0.0, 0.0, (np.pi * np.sinc(x)) ** 2 * e)
        return s[()]

    def __repr__(self) -> str:
        return f"GaussSpectralFilter(fwhm={self.fwhm})"


class PolySpectralFilter(SpectralFilter):
    """
    Spectral filter of a measured spectral response.

    The photon-weighted response ``R(lambda) / lambda`` is zero padded to the
    working size, extended periodically and rotated so that the carrier
    wavelength becomes the first sample. Its real FFT gives the real and
    imaginary parts of the filter kernel, which are stored as cubic splines
    on the reciprocal-wavelength grid ``k / (delta_lambda * size)``.

    Parameters
    ----------
    response : SpectralResponse
        Response on a uniform wavelength grid [nm]
    size : int, optional
        Minimum FFT length (default: 4096)
    carrier : float, optional
        Carrier wavelength [nm] (default: the effective wavelength)

    Attributes
    ----------
    grid : UniformGrid
        Reciprocal-wavelength grid of the splines [1/nm]
    real, imag : CubicSpline
        Real and imaginary parts of the transform
    carrier : float
        Carrier wavelength, snapped to the response grid [nm]
    equivalent_wavelength : float
        Equivalent monochromatic wavelength [nm]

    Notes
    -----
    The real part is fitted with zero first derivatives at the ends and the
    imaginary part with zero second derivatives. The last (Nyquist) FFT
    coefficient is forced to zero so that the filter vanishes at the end of
    its support.
    """

    def __init__(
        self,
        response: SpectralResponse,
        size: int = DEFAULT_SPECTRAL_FILTER_SIZE,
        carrier: Optional[float] = None,
    ):
        if response.size < 2:
            raise ValueError("Spectral response needs at least 2 samples")
        if carrier is None:
            carrier = response.effective_lambda()

        carrier_idx = response.grid.to_index(carrier)
        if not 0 <= carrier_idx < response.size:
            raise ValueError(
                f"Carrier {carrier} nm lies outside the response grid "
                f"{response.grid.origin}-{response.grid.last} nm"
            )

        padded = max(response.size, size)
        weighted = np.pad(response.data / response.grid.values, (0, padded - response.size))
        rotated = np.tile(weighted, 2)[carrier_idx:carrier_idx + padded]

        with RealFFTPlan(padded) as plan:
            spectrum = plan.execute(rotated)
        spectrum[-1] = 0.0

        self.grid = UniformGrid(0.0, 1.0 / (response.grid.delta * padded), padded // 2 + 1)
        self.real = CubicSpline(spectrum.real, FirstOrder(0.0, 0.0))
        self.imag = CubicSpline(spectrum.imag, SecondOrder(0.0, 0.0))
        self.carrier = float(response.grid.value(carrier_idx))
        self._equivalent_wavelength = self._eval_equivalent_wavelength()

        logger.debug(
            f"Spectral filter: FFT size {padded}, carrier {self.carrier:.3f}, "
            f"equivalent wavelength {self._equivalent_wavelength:.3f}"
        )

    @property
    def equivalent_wavelength(self) -> float:
        return self._equivalent_wavelength

    def _arguments(self, x):
        ax = np.abs(np.asarray(x, dtype=float))
        inside = ax < self.grid.last
        c = np.pi * self.carrier
        # Outside the support the arguments are replaced by 0 and masked later
        ax_in = np.where(inside, ax, 0.0)
        dx = (ax_in / 2.0 - self.grid.origin) / self.grid.delta
        return ax_in, inside, c, dx

    def __call__(self, x):
        ax, inside, c, dx = self._arguments(x)
        cx = ax * c
        # Shift theorem sign follows the forward transform convention of rfft
        s = (np.sin(cx) * self.real(dx) - np.cos(cx) * self.imag(dx)) ** 2
        return np.where(inside, s, 0.0)[()]

    def regular(self, x):
        ax, inside, c, dx = self._arguments(x)
        cx = ax * c

        # imag(0) == 0, so imag(dx) / x has a finite limit on the first interval
        near = dx < 1.0
        imag_taylor = (
            self.imag.values[1]
            + self.imag.second_derivatives[1] * (dx * dx - 1.0) / 6.0
        ) / (self.grid.delta * 2.0)
        with np.errstate(divide='ignore', invalid='ignore'):
            imag_far = self.imag(dx) / ax
        im = np.where(near, imag_taylor, imag_far)

        # np.sinc(t / pi) == sin(t) / t
        s = (c * np.sinc(cx / np.pi) * self.real(dx) - np.cos(cx) * im) ** 2
        return np.where(inside, s, 0.0)[()]

    def _eval_equivalent_wavelength(self) -> float:
        """
        Equivalent wavelength ``3.28 I^(-6/7)`` with

            I = int_0^1 x^(1/6) regular(x) dx + int_1^inf x^(-11/6) S(x) dx

        The filter vanishes beyond the grid, so both ranges are finite.
        """
        def inner(x):
            with np.errstate(divide='ignore', invalid='ignore'):
                f = np.power(x, 1.0 / 6.0) * self.regular(x)
            return np.where(x == 0.0, 0.0, f)

        def outer(x):
            return np.power(x, -11.0 / 6.0) * self(x)

        support = self.grid.last
        total = float(integrate(inner, 0.0, min(1.0, support)))
        if support > 1.0:
            total += float(integrate(outer, 1.0, support))
        return EQUIVALENT_WAVELENGTH_SCALE * total ** (-6.0 / 7.0)

    def normalize(self) -> "PolySpectralFilter":
        """
        Rescale the filter into units of its equivalent wavelength.

        The reciprocal-wavelength grid and both splines are multiplied by the
        equivalent wavelength; the carrier and the equivalent wavelength are
        divided by it. Normalizing twice is a no-op.
        """
        lambda_0 = self._equivalent_wavelength
        self.grid = self.grid * lambda_0
        self.carrier /= lambda_0
        self._equivalent_wavelength /= lambda_0
        self.real = self.real * lambda_0
        self.imag = self.imag * lambda_0
        return self

    def recompute_equivalent_wavelength(self) -> float:
        """Evaluate the equivalent-wavelength integral for the current state."""
        return self._eval_equivalent_wavelength()

    def __repr__(self) -> str:
        return (
            f"PolySpectralFilter(size={self.grid.size}, carrier={self.carrier:.6g}, "
            f"equivalent_wavelength={self._equivalent_wavelength:.6g})"
        )
