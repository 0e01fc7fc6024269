"""
Adaptive double-exponential quadrature.

Thin wrapper around :func:`scipy.integrate.tanhsinh`. Semi-infinite ranges
are mapped onto a finite interval by scipy, which turns the rule into the
exp-sinh variant used for the weight-function integrals. Integrands must be
elementwise functions of their array arguments; extra arguments are
broadcast against the integration limits, so one call integrates a whole
batch of integrals.
"""

import logging
from typing import Callable, Optional, Sequence

import numpy as np
from scipy.integrate import tanhsinh

from scintwf.core.constants import QUADRATURE_RTOL

logger = logging.getLogger(__name__)


def integrate(
    f: Callable,
    a,
    b,
    args: Sequence = (),
    rtol: Optional[float] = None,
    maxlevel: Optional[int] = None,
) -> np.ndarray:
    """
    Integrate ``f(x, *args)`` from ``a`` to ``b``.

    Parameters
    ----------
    f : callable
        Elementwise integrand
    a, b : float or array_like
        Integration limits, may be infinite
    args : sequence of array_like
        Extra arguments broadcast against the limits
    rtol : float, optional
        Relative tolerance (default: eps^(2/3))
    maxlevel : int, optional
        Maximum refinement level (default: scipy's)

    Returns
    -------
    integral : ndarray
        Integral estimates with the broadcast shape of limits and args

    Notes
    -----
    Integrals that stop before reaching ``rtol`` are returned as they are
    and counted in a warning.
    """
    if rtol is None:
        rtol = QUADRATURE_RTOL
    args = tuple(np.asarray(arg, dtype=float) for arg in args)

    res = tanhsinh(f, a, b, args=args, rtol=rtol, maxlevel=maxlevel)

    failed = ~np.asarray(res.success)
    if np.any(failed):
        logger.warning(
            f"Quadrature did not reach rtol={rtol:.1e} for {int(failed.sum())} "
            f"of {failed.size} integrals (max error estimate {np.max(np.asarray(res.error)[failed]):.3e})"
        )
    return np.asarray(res.integral, dtype=float)
