"""
Aperture filters.

An aperture filter is the squared modulus of the Fourier transform of the
pupil, as a function of the dimensionless spatial frequency ``u`` scaled by
the aperture size. Filters accept either one radial argument ``A(u)`` or two
Cartesian arguments ``A(ux, uy)``; all arguments are broadcast elementwise.

Every filter equals 1 at ``u = 0`` and evaluates to a finite value (0 for
decaying filters) at ``u = inf``.

Filters
-------
PointAperture
    Point-like aperture, 1 everywhere
CircularAperture
    Filled circular pupil, ``(2 J1(pi u) / (pi u))^2``
AnnularAperture
    Circular pupil with a central obscuration
CrossAnnularAperture
    Cross spectrum of two concentric annular pupils
GaussAperture
    Gaussian apodized pupil, ``exp(-u^2)``
SquareAperture
    Square pupil, Cartesian only
AngleAveragedAperture
    Azimuthal average of any Cartesian filter, tabulated on a spline
"""

import logging
from abc import ABC, abstractmethod

import numpy as np
from scipy.special import j1

from scintwf.core.constants import AIRY_SERIES_THRESHOLD, DEFAULT_ANGLE_AVERAGED_SIZE
from scintwf.core.grid import UniformGrid
from scintwf.core.quadrature import integrate
from scintwf.core.spline import CubicSpline, FirstOrder

logger = logging.getLogger(__name__)


def airy(x):
    """
    Amplitude of the Airy pattern, ``2 J1(x) / x``.

    Returns 1 - x^2/8 for tiny arguments and 0 at infinity.
    """
    x = np.asarray(x, dtype=float)
    ax = np.abs(x)
    with np.errstate(divide='ignore', invalid='ignore'):
        value = 2.0 * j1(x) / x
    value = np.where(ax < AIRY_SERIES_THRESHOLD, 1.0 - x * x / 8.0, value)
    return np.where(np.isinf(x), 0.0, value)[()]


def annular_amplitude(x, obscuration: float):
    """
    Amplitude transform of an annular pupil at ``x = pi u``, unity at 0.

    ``(airy(x) - e^2 airy(e x)) / (1 - e^2)``; reduces to ``airy(x)`` for
    ``e = 0``.
    """
    if obscuration == 0.0:
        return airy(x)
    e2 = obscuration ** 2
    return (airy(x) - e2 * airy(obscuration * x)) / (1.0 - e2)


class ApertureFilter(ABC):
    """Abstract base class for aperture filters."""

    def __call__(self, ux, uy=None):
        """Evaluate radially, ``A(u)``, or in Cartesian form, ``A(ux, uy)``."""
        ux = np.asarray(ux, dtype=float)
        if uy is None:
            return np.asarray(self.radial(ux))[()]
        return np.asarray(self.cartesian(ux, np.asarray(uy, dtype=float)))[()]

    @abstractmethod
    def radial(self, u: np.ndarray) -> np.ndarray:
        """Filter value at radial frequency ``u``."""
        pass

    def cartesian(self, ux: np.ndarray, uy: np.ndarray) -> np.ndarray:
        """Filter value at ``(ux, uy)``; axially symmetric by default."""
        return self.radial(np.hypot(ux, uy))


class PointAperture(ApertureFilter):
    """Point-like aperture."""

    def radial(self, u):
        return np.ones_like(u)

    def cartesian(self, ux, uy):
        return np.ones(np.broadcast(ux, uy).shape)

    def __repr__(self) -> str:
        return "PointAperture()"


class CircularAperture(ApertureFilter):
    """Filled circular aperture, ``airy(pi u)^2``."""

    def radial(self, u):
        return airy(np.pi * u) ** 2

    def __repr__(self) -> str:
        return "CircularAperture()"


class AnnularAperture(ApertureFilter):
    """
    Circular aperture with a central obscuration.

    Parameters
    ----------
    obscuration : float
        Ratio of inner to outer diameter, in [0, 1)

    Notes
    -----
    ``A(u) = (airy(pi u) - e^2 airy(e pi u))^2 / (1 - e^2)^2``
    """

    def __init__(self, obscuration: float):
        if not 0.0 <= obscuration < 1.0:
            raise ValueError(f"Obscuration must be in [0, 1), got {obscuration}")
        self.obscuration = float(obscuration)

    def radial(self, u):
        return annular_amplitude(np.pi * u, self.obscuration) ** 2

    def __repr__(self) -> str:
        return f"AnnularAperture(obscuration={self.obscuration})"


class CrossAnnularAperture(ApertureFilter):
    """
    Cross filter of two concentric annular apertures.

    Used for the covariance of the signals of two annuli, as in the
    segments of a MASS entrance mask. Frequencies are scaled by the outer
    diameter of the first annulus.

    Parameters
    ----------
    ratio : float
        Outer diameter of the second annulus over that of the first
    obscuration : float
        Obscuration of the first annulus, in [0, 1)
    second_obscuration : float
        Obscuration of the second annulus, in [0, 1)

    Notes
    -----
    ``A(u) = a(pi u, e1) a(ratio pi u, e2)`` with :func:`annular_amplitude`
    ``a``. The product of amplitudes is not squared and may be negative.
    """

    def __init__(self, ratio: float, obscuration: float, second_obscuration: float):
        if ratio <= 0:
            raise ValueError(f"Diameter ratio must be positive, got {ratio}")
        for eps in (obscuration, second_obscuration):
            if not 0.0 <= eps < 1.0:
                raise ValueError(f"Obscuration must be in [0, 1), got {eps}")
        self.ratio = float(ratio)
        self.obscuration = float(obscuration)
        self.second_obscuration = float(second_obscuration)

    def radial(self, u):
        x = np.pi * u
        return (annular_amplitude(x, self.obscuration)
                * annular_amplitude(self.ratio * x, self.second_obscuration))

    def __repr__(self) -> str:
        return (
            f"CrossAnnularAperture(ratio={self.ratio}, obscuration={self.obscuration}, "
            f"second_obscuration={self.second_obscuration})"
        )


class GaussAperture(ApertureFilter):
    """Gaussian apodized aperture, ``exp(-u^2)``."""

    def radial(self, u):
        return np.exp(-u * u)

    def __repr__(self) -> str:
        return "GaussAperture()"


class SquareAperture(ApertureFilter):
    """
    Square aperture, ``(sinc(ux) sinc(uy))^2`` with the normalized sinc.

    The filter is not axially symmetric and has no radial form; use
    :class:`AngleAveragedAperture` to obtain one.
    """

    def radial(self, u):
        raise TypeError("SquareAperture has no radial form, call it with (ux, uy)")

    def cartesian(self, ux, uy):
        with np.errstate(invalid='ignore'):
            value = (np.sinc(ux) * np.sinc(uy)) ** 2
        return np.where(np.isinf(ux) | np.isinf(uy), 0.0, value)

    def __repr__(self) -> str:
        return "SquareAperture()"


class AngleAveragedAperture(ApertureFilter):
    """
    Azimuthal average of a Cartesian aperture filter.

    The average is computed on the grid ``z = linspace(0, 1, size)`` with
    ``u = (1 - z) / z`` and stored on a spline with zero end slopes; ``z = 0``
    (``u = inf``) is set to 0.

    Parameters
    ----------
    aperture_filter : callable
        Cartesian filter ``A(ux, uy)``
    size : int, optional
        Number of tabulation nodes (default: 1024)
    rtol : float, optional
        Quadrature tolerance of the azimuthal average
    """

    def __init__(self, aperture_filter, size: int = DEFAULT_ANGLE_AVERAGED_SIZE, rtol=None):
        if size < 2:
            raise ValueError(f"Angle averaged aperture needs at least 2 nodes, got {size}")

        self.grid = UniformGrid(0.0, 1.0 / (size - 1), size)
        z = np.linspace(0.0, 1.0, size)
        with np.errstate(divide='ignore'):
            u = (1.0 - z) / z

        def integrand(t, u):
            f = np.pi * (t + 1.0)
            return aperture_filter(u * np.cos(f), u * np.sin(f))

        values = np.zeros(size)
        finite = z > 0.0
        values[finite] = integrate(integrand, -1.0, 1.0, args=(u[finite],), rtol=rtol) / 2.0

        self.spline = CubicSpline(values, FirstOrder(0.0, 0.0))
        logger.debug(f"Tabulated angle averaged {aperture_filter!r} on {size} nodes")

    def radial(self, u):
        z = 1.0 / (1.0 + u)
        return self.spline(self.grid.fractional_index(z))


def make_aperture_filter(shape: str, obscuration: float = 0.0, ratio: float = 1.0,
                         second_obscuration=None) -> ApertureFilter:
    """
    Build an aperture filter by name.

    Parameters
    ----------
    shape : str
        'point', 'circular', 'annular', 'cross-annular', 'gauss' or 'square'
    obscuration : float
        Central obscuration; a circular aperture with non-zero obscuration
        becomes annular
    ratio : float
        Diameter ratio of the second annulus ('cross-annular' only)
    second_obscuration : float, optional
        Obscuration of the second annulus ('cross-annular' only, defaults
        to ``obscuration``)

    Returns
    -------
    ApertureFilter
    """
    shape = shape.lower()
    if shape == 'point':
        return PointAperture()
    if shape == 'circular':
        return AnnularAperture(obscuration) if obscuration > 0 else CircularAperture()
    if shape == 'annular':
        return AnnularAperture(obscuration)
    if shape == 'cross-annular':
        if second_obscuration is None:
            second_obscuration = obscuration
        return CrossAnnularAperture(ratio, obscuration, second_obscuration)
    if shape == 'gauss':
        return GaussAperture()
    if shape == 'square':
        return SquareAperture()
    raise ValueError(
        f"Unknown aperture shape: {shape}. "
        "Use 'point', 'circular', 'annular', 'cross-annular', 'gauss' or 'square'."
    )
