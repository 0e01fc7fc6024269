"""
Two-dimensional digital filters.

A digital filter is a finite impulse response ``h[i, j]`` on a regular grid
of sub-apertures. Its frequency response is

    Omega(ux, uy) = sum_ij w_i w_j h[i, j] cos(2 pi (i ux + j uy))

with ``w_0 = 1`` and ``w_k = 2`` otherwise; frequencies are in units of the
inverse grid step. The impulse of a given frequency-domain kernel is
obtained with a type-I DCT of the kernel sampled on ``[0, 0.5]^2``.
"""

import logging
from typing import Callable, Tuple

import numpy as np
from numba import jit

from scintwf.core.fft import DCT2DPlan

logger = logging.getLogger(__name__)


@jit(nopython=True, cache=True)
def _frequency_response(impulse, ux, uy):
    """Evaluate the cosine series at flat arrays of frequencies.

    Harmonics are advanced with angle-addition recurrences instead of
    calling cos/sin for every term.
    """
    nx, ny = impulse.shape
    two_pi = 2.0 * np.pi
    out = np.zeros(ux.shape[0])

    for k in range(ux.shape[0]):
        cx = np.cos(two_pi * ux[k])
        sx = np.sin(two_pi * ux[k])
        cy = np.cos(two_pi * uy[k])
        sy = np.sin(two_pi * uy[k])

        total = 0.0
        cix = 1.0
        six = 0.0
        for i in range(nx):
            wi = 2.0 if i > 0 else 1.0
            cjy = 1.0
            sjy = 0.0
            for j in range(ny):
                wj = 2.0 if j > 0 else 1.0
                total += impulse[i, j] * wi * wj * (cix * cjy - six * sjy)
                tmp = cjy * cy - sjy * sy
                sjy = sjy * cy + cjy * sy
                cjy = tmp
            tmp = cix * cx - six * sx
            six = six * cx + cix * sx
            cix = tmp
        out[k] = total
    return out


class DigitalFilter2D:
    """
    Digital filter defined by its impulse response.

    Parameters
    ----------
    impulse : array_like
        Impulse response of shape ``(Nx, Ny)``
    """

    def __init__(self, impulse):
        impulse = np.array(impulse, dtype=float)
        if impulse.ndim != 2:
            raise ValueError(f"Impulse response must be 2-D, got shape {impulse.shape}")
        self.impulse = impulse

    @classmethod
    def from_function(cls, kernel: Callable, shape: Tuple[int, int]) -> "DigitalFilter2D":
        """
        Synthesize the impulse response of a frequency-domain kernel.

        Parameters
        ----------
        kernel : callable
            ``Omega(ux, uy)``, broadcast elementwise
        shape : tuple of int
            Impulse shape ``(Nx, Ny)``, each at least 2

        Returns
        -------
        DigitalFilter2D
        """
        nx, ny = shape
        ux = np.linspace(0.0, 0.5, nx)
        uy = np.linspace(0.0, 0.5, ny)
        samples = np.broadcast_to(kernel(ux[:, np.newaxis], uy[np.newaxis, :]), (nx, ny))

        with DCT2DPlan((nx, ny)) as plan:
            impulse = plan.execute(samples)
        impulse *= 1.0 / (4.0 * (nx - 1) * (ny - 1))

        logger.debug(f"Synthesized {nx}x{ny} digital filter")
        return cls(impulse)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.impulse.shape

    def mix(self) -> "DigitalFilter2D":
        """
        Remove the (0, 0) impulse coefficient in place.

        Its amplitude is spread over the whole impulse with a checkerboard of
        alternating signs: ``+a`` where ``i + j`` is odd and ``-a`` where it
        is even. Interior harmonics carry weight 2, so the response changes
        by ``a`` times the checkerboard response, not only at zero frequency.
        """
        amplitude = self.impulse[0, 0]
        i, j = np.indices(self.shape)
        self.impulse += np.where((i + j) % 2 == 1, amplitude, -amplitude)
        self.impulse[0, 0] = 0.0
        return self

    def mixed(self) -> "DigitalFilter2D":
        """Mixed copy of the filter."""
        return DigitalFilter2D(self.impulse.copy()).mix()

    def __call__(self, ux, uy):
        """Frequency response at ``(ux, uy)``, broadcast elementwise."""
        ux, uy = np.broadcast_arrays(np.asarray(ux, dtype=float), np.asarray(uy, dtype=float))
        out = _frequency_response(
            self.impulse,
            np.ascontiguousarray(ux.ravel()),
            np.ascontiguousarray(uy.ravel()),
        )
        return out.reshape(ux.shape)[()]

    def __repr__(self) -> str:
        return f"DigitalFilter2D(shape={self.shape})"
