"""
Dimensionless scintillation weight functions.

For a spectral filter ``S`` and an aperture filter ``A`` the dimensionless
weight function at aspect ratio ``x`` (aperture scale over Fresnel radius) is

    W(x) = int_0^inf u^(-8/3) S(u^2) A(x u) du

Below ``u = 1`` the integrand is evaluated as ``u^(4/3) S.regular(u^2)``,
which avoids the cancellation of the singular form near the origin. The
integrand is exactly 0 at ``u = 0`` and ``u = inf``.

The functions below take the grid variable ``z`` in [0, 1] with
``x = (1 - z) / z``, so ``z = 0`` is an infinitely large aperture and
``z = 1`` a point-like one.
"""

import logging

import numpy as np

from scintwf.core.quadrature import integrate

logger = logging.getLogger(__name__)


def aspect_ratio(z):
    """Aspect ratio ``x = (1 - z) / z``; infinite at ``z = 0``."""
    z = np.asarray(z, dtype=float)
    with np.errstate(divide='ignore'):
        return (1.0 - z) / z


def spectrum(spectral_filter, u):
    """
    Radial spectrum ``u^(-8/3) S(u^2)`` in its regularized form.

    Defined for finite ``u > 0``; both branches are evaluated and the
    appropriate one selected elementwise.
    """
    u = np.asarray(u, dtype=float)
    u2 = u * u
    with np.errstate(all='ignore'):
        near = u ** (4.0 / 3.0) * spectral_filter.regular(u2)
        far = u ** (-8.0 / 3.0) * spectral_filter(u2)
    return np.where(u < 1.0, near, far)


def _radial_integrand(spectral_filter, aperture_filter):
    def integrand(u, x):
        valid = (u > 0.0) & np.isfinite(u)
        with np.errstate(all='ignore'):
            value = spectrum(spectral_filter, u) * aperture_filter(x * u)
        return np.where(valid, value, 0.0)

    return integrand


def dimensionless_weight_function(
    spectral_filter,
    aperture_filter,
    z,
    rtol=None,
    maxlevel=None,
):
    """
    Dimensionless weight function for an axially symmetric aperture.

    All nodes are integrated in one batched exp-sinh quadrature.

    Parameters
    ----------
    spectral_filter : SpectralFilter
        Normalized spectral filter with ``__call__`` and ``regular``
    aperture_filter : callable
        Radial aperture filter ``A(u)``
    z : float or array_like
        Grid variable in [0, 1]
    rtol : float, optional
        Quadrature relative tolerance (default: eps^(2/3))
    maxlevel : int, optional
        Maximum quadrature refinement level

    Returns
    -------
    W : float or ndarray
        Weight function at each ``z``
    """
    x = aspect_ratio(z)
    logger.debug(f"Integrating dimensionless weight function at {x.size} nodes")
    result = integrate(
        _radial_integrand(spectral_filter, aperture_filter),
        0.0, np.inf, args=(x,), rtol=rtol, maxlevel=maxlevel,
    )
    return result[()]


# =============================================================================
# Non axially symmetric apertures
# =============================================================================

def _axial_average(aperture_filter, r, rtol=None, maxlevel=None):
    """
    Integral of ``A(r cos(pi phi), r sin(pi phi))`` over ``phi`` in [-1, 1].

    An infinite radius collapses to the on-axis value ``2 A(inf, 0)``.
    """
    out = np.empty(r.shape)
    infinite = np.isinf(r)
    if np.any(infinite):
        out[infinite] = 2.0 * np.asarray(aperture_filter(r[infinite], np.zeros(np.count_nonzero(infinite))))
    finite = ~infinite
    if np.any(finite):
        def integrand(phi, radius):
            angle = np.pi * phi
            return aperture_filter(radius * np.cos(angle), radius * np.sin(angle))

        out[finite] = integrate(
            integrand, -1.0, 1.0, args=(r[finite],), rtol=rtol, maxlevel=maxlevel,
        )
    return out


def _weight_function_2d_at(spectral_filter, aperture_filter, x, rtol, maxlevel):
    def integrand(u):
        u = np.asarray(u, dtype=float)
        out = np.zeros(u.shape)
        valid = (u > 0.0) & np.isfinite(u)
        if np.any(valid):
            uv = u[valid]
            axial = _axial_average(aperture_filter, x * uv, rtol=rtol, maxlevel=maxlevel)
            out[valid] = spectrum(spectral_filter, uv) * axial
        return out

    return float(integrate(integrand, 0.0, np.inf, rtol=rtol, maxlevel=maxlevel))


def dimensionless_weight_function_2d(
    spectral_filter,
    aperture_filter,
    z,
    rtol=None,
    maxlevel=None,
):
    """
    Dimensionless weight function for an arbitrary aperture.

    The aperture filter is averaged over the polar angle by an inner
    tanh-sinh quadrature for every radial node of the outer exp-sinh
    quadrature. For an axially symmetric aperture the result equals
    :func:`dimensionless_weight_function`.

    Parameters
    ----------
    spectral_filter : SpectralFilter
        Normalized spectral filter
    aperture_filter : callable
        Cartesian aperture filter ``A(ux, uy)``
    z : float or array_like
        Grid variable in [0, 1]
    rtol : float, optional
        Relative tolerance of both quadratures (default: eps^(2/3))
    maxlevel : int, optional
        Maximum refinement level of both quadratures

    Returns
    -------
    W : float or ndarray
    """
    x = aspect_ratio(z)
    out = np.empty(x.shape)
    for idx, xk in np.ndenumerate(x):
        out[idx] = _weight_function_2d_at(spectral_filter, aperture_filter, xk, rtol, maxlevel)
    return (0.5 * out)[()]
