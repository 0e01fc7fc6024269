"""
Transform plans for the spectral-filter and digital-filter stages.

Each plan is created for one fixed size, owns its input buffer and can be
executed any number of times. Plans are released with :meth:`close` or by
using them as context managers; executing a released plan raises
``RuntimeError``.

RealFFTPlan
    Real-to-complex 1-D FFT (``scipy.fft.rfft``).
DCT2DPlan
    Real-to-real 2-D type-I discrete cosine transform
    (``scipy.fft.dctn(type=1)``, the REDFT00 transform).
"""

import logging
from typing import Optional, Tuple

import numpy as np
import scipy.fft

logger = logging.getLogger(__name__)


class _Plan:
    """Shared buffer ownership for transform plans."""

    def __init__(self, shape: Tuple[int, ...]):
        self.shape = tuple(int(n) for n in shape)
        self._buffer: Optional[np.ndarray] = np.zeros(self.shape)
        logger.debug(f"Allocated {type(self).__name__} for shape {self.shape}")

    @property
    def closed(self) -> bool:
        return self._buffer is None

    @property
    def buffer(self) -> np.ndarray:
        """Input buffer, filled in place by callers that avoid a copy."""
        if self._buffer is None:
            raise RuntimeError(f"{type(self).__name__} has been released")
        return self._buffer

    def _load(self, data) -> np.ndarray:
        buf = self.buffer
        if data is not None:
            data = np.asarray(data, dtype=float)
            if data.shape != self.shape:
                raise ValueError(
                    f"Transform input has shape {data.shape}, plan expects {self.shape}"
                )
            buf[...] = data
        return buf

    def close(self) -> None:
        """Release the plan buffer."""
        if self._buffer is not None:
            logger.debug(f"Released {type(self).__name__} for shape {self.shape}")
        self._buffer = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
        return False


class RealFFTPlan(_Plan):
    """
    Real-to-complex FFT of a fixed length.

    Parameters
    ----------
    size : int
        Transform length, returns ``size // 2 + 1`` coefficients
    """

    def __init__(self, size: int):
        if size < 1:
            raise ValueError(f"FFT size must be positive, got {size}")
        super().__init__((size,))

    @property
    def size(self) -> int:
        return self.shape[0]

    def execute(self, data=None) -> np.ndarray:
        """Transform ``data`` (or the current buffer contents)."""
        return scipy.fft.rfft(self._load(data))


class DCT2DPlan(_Plan):
    """
    Unnormalized 2-D type-I DCT of a fixed shape.

    Parameters
    ----------
    shape : tuple of int
        Transform shape, each dimension at least 2
    """

    def __init__(self, shape: Tuple[int, int]):
        if len(shape) != 2 or min(shape) < 2:
            raise ValueError(f"DCT-I shape must be two dimensions of at least 2, got {shape}")
        super().__init__(shape)

    def execute(self, data=None) -> np.ndarray:
        """Transform ``data`` (or the current buffer contents) into a new array."""
        return scipy.fft.dctn(self._load(data), type=1)
