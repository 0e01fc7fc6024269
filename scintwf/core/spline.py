"""
Cubic spline interpolation on unit-spaced samples.

The spline works in index space: sample ``i`` sits at ``x = i`` and the
caller maps physical coordinates to fractional indices through a
:class:`~scintwf.core.grid.UniformGrid`. Second derivatives are obtained from
the tridiagonal system of a natural cubic spline,

    0.5 M[i-1] + 2 M[i] + 0.5 M[i+1] = 3 (y[i+1] - 2 y[i] + y[i-1])

closed by one of two boundary conditions:

FirstOrder(left, right)
    Prescribed first derivatives at both ends (clamped spline).
SecondOrder(left, right)
    Prescribed second derivatives at both ends. The default
    ``SecondOrder(0, 0)`` is the natural spline.

The system is solved with a single Thomas sweep.
"""

from dataclasses import dataclass
from typing import Union

import numpy as np
from numba import jit


@dataclass(frozen=True)
class FirstOrder:
    """Clamped boundary: first derivative at each end."""

    left: float = 0.0
    right: float = 0.0

    def coefficients(self, y: np.ndarray):
        """Return ``(first, last, d0, dn)`` boundary rows of the system."""
        d0 = (y[1] - y[0] - self.left) * 6.0
        dn = (self.right - (y[-1] - y[-2])) * 6.0
        return 1.0, 1.0, d0, dn


@dataclass(frozen=True)
class SecondOrder:
    """Boundary with prescribed second derivative at each end."""

    left: float = 0.0
    right: float = 0.0

    def coefficients(self, y: np.ndarray):
        """Return ``(first, last, d0, dn)`` boundary rows of the system."""
        return 0.0, 0.0, self.left * 2.0, self.right * 2.0


Boundary = Union[FirstOrder, SecondOrder]


# =============================================================================
# Numba kernels
# =============================================================================

@jit(nopython=True, cache=True)
def _second_derivatives(y, first, last, d0, dn):
    """Thomas sweep for the spline second derivatives.

    Args:
        y: Sample values, at least two
        first: Off-diagonal coefficient of the first row
        last: Off-diagonal coefficient of the last row
        d0: Right-hand side of the first row
        dn: Right-hand side of the last row

    Returns:
        Second derivatives at every sample
    """
    n = y.shape[0]
    cprime = np.empty(n - 1)
    d2 = np.empty(n)

    cprime[0] = first / 2.0
    d2[0] = d0 / 2.0
    for i in range(1, n - 1):
        rhs = (y[i + 1] - 2.0 * y[i] + y[i - 1]) * 3.0
        denom = 2.0 - 0.5 * cprime[i - 1]
        cprime[i] = 0.5 / denom
        d2[i] = (rhs - 0.5 * d2[i - 1]) / denom
    d2[n - 1] = (dn - last * d2[n - 2]) / (2.0 - last * cprime[n - 2])

    for i in range(n - 1, 0, -1):
        d2[i - 1] -= cprime[i - 1] * d2[i]
    return d2


@jit(nopython=True, cache=True)
def _evaluate(y, d2, x):
    """Evaluate the spline at fractional indices ``x`` (flat array)."""
    n = y.shape[0]
    out = np.empty(x.shape[0])
    for k in range(x.shape[0]):
        if not np.isfinite(x[k]):
            out[k] = np.nan
            continue
        idx = int(x[k])
        if idx > n - 2:
            idx = n - 2
        elif idx < 0:
            idx = 0
        delta0 = x[k] - idx
        delta1 = 1.0 - delta0
        a = d2[idx] / 6.0
        b = d2[idx + 1] / 6.0
        out[k] = (a * delta1 ** 3 + b * delta0 ** 3
                  + (y[idx] - a) * delta1 + (y[idx + 1] - b) * delta0)
    return out


class CubicSpline:
    """
    Cubic spline through unit-spaced samples.

    Parameters
    ----------
    values : array_like
        Samples ``y[0..N-1]``, ``N >= 2``
    boundary : FirstOrder or SecondOrder, optional
        End conditions (default: natural spline)

    Notes
    -----
    Evaluation at ``x`` uses the interval ``[int(x), int(x) + 1]``. The
    argument should lie in ``[0, N - 1]``; ``x = N - 1`` returns the last
    sample. Finite arguments outside that range extrapolate the end
    intervals and non-finite arguments give NaN.
    """

    def __init__(self, values, boundary: Boundary = SecondOrder()):
        y = np.ascontiguousarray(values, dtype=float)
        if y.ndim != 1:
            raise ValueError(f"Spline samples must be one-dimensional, got shape {y.shape}")
        if y.size < 2:
            raise ValueError(f"Spline needs at least 2 samples, got {y.size}")

        first, last, d0, dn = boundary.coefficients(y)
        self._values = y
        self._d2 = _second_derivatives(y, first, last, d0, dn)
        self.boundary = boundary

    @classmethod
    def _from_arrays(cls, values, d2, boundary):
        spline = cls.__new__(cls)
        spline._values = values
        spline._d2 = d2
        spline.boundary = boundary
        return spline

    @property
    def values(self) -> np.ndarray:
        """Interpolated samples."""
        return self._values

    @property
    def second_derivatives(self) -> np.ndarray:
        """Second derivatives at the samples."""
        return self._d2

    @property
    def size(self) -> int:
        return self._values.size

    def __len__(self) -> int:
        return self._values.size

    def __call__(self, x):
        """Evaluate at fractional index ``x`` (scalar or array)."""
        x = np.asarray(x, dtype=float)
        out = _evaluate(self._values, self._d2, np.ascontiguousarray(x.ravel()))
        if x.ndim == 0:
            return float(out[0])
        return out.reshape(x.shape)

    # -------------------------------------------------------------------------
    # Affine transforms
    # -------------------------------------------------------------------------

    def __add__(self, shift: float) -> "CubicSpline":
        return self._from_arrays(self._values + shift, self._d2.copy(), self.boundary)

    def __sub__(self, shift: float) -> "CubicSpline":
        return self._from_arrays(self._values - shift, self._d2.copy(), self.boundary)

    def __mul__(self, scale: float) -> "CubicSpline":
        return self._from_arrays(self._values * scale, self._d2 * scale, self.boundary)

    def __truediv__(self, scale: float) -> "CubicSpline":
        return self._from_arrays(self._values / scale, self._d2 / scale, self.boundary)

    __radd__ = __add__
    __rmul__ = __mul__

    def __repr__(self) -> str:
        return f"CubicSpline(size={self.size}, boundary={self.boundary!r})"
