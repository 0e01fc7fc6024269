"""
Uniform one-dimensional sample grids.

A grid is the triple ``(origin, delta, size)``; sample ``i`` sits at
``origin + i * delta``. Grids are immutable values. Arithmetic with a scalar
produces a new grid: ``+``/``-`` shift the origin, ``*``/``/`` scale both
origin and step.

Comparisons are exact. Two grids match only when their steps are equal and
their origins have the same phase modulo the step, with no tolerance.
"""

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from scintwf.core.errors import MismatchedGridsError, NonUniformGridError


@dataclass(frozen=True)
class UniformGrid:
    """
    Uniform sample grid.

    Parameters
    ----------
    origin : float
        Value of the first sample
    delta : float
        Sample step, must be non-zero
    size : int
        Number of samples
    """

    origin: float = 0.0
    delta: float = 1.0
    size: int = 0

    def __post_init__(self):
        if self.delta == 0:
            raise ValueError("Grid step must be non-zero")
        if self.size < 0:
            raise ValueError(f"Grid size must be non-negative, got {self.size}")
        object.__setattr__(self, "origin", float(self.origin))
        object.__setattr__(self, "delta", float(self.delta))
        object.__setattr__(self, "size", int(self.size))

    @classmethod
    def from_sequence(cls, samples: Sequence[float]) -> "UniformGrid":
        """
        Build a grid from explicit sample values.

        The step is taken from the first two samples and every later sample
        must equal ``origin + i * delta`` exactly.

        Raises
        ------
        NonUniformGridError
            At the first sample that deviates from the uniform lattice
        """
        x = np.asarray(samples, dtype=float)
        n = x.size
        if n == 0:
            return cls(0.0, 1.0, 0)
        if n == 1:
            return cls(x[0], 1.0, 1)

        origin = x[0]
        delta = x[1] - x[0]
        for i in range(2, n):
            expected = origin + i * delta
            if expected != x[i]:
                raise NonUniformGridError(i, x[i], expected)
        return cls(origin, delta, n)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return self.size

    @property
    def last(self) -> float:
        """Value of the last sample."""
        return self.value(self.size - 1)

    @property
    def values(self) -> np.ndarray:
        """All sample values as an array."""
        return self.origin + np.arange(self.size) * self.delta

    def value(self, i):
        """Sample value at index ``i`` (scalar or array)."""
        return self.origin + i * self.delta

    def to_index(self, v):
        """Index of the sample at or below ``v``, ``floor((v - origin) / delta)``."""
        idx = np.floor((np.asarray(v, dtype=float) - self.origin) / self.delta)
        if idx.ndim == 0:
            return int(idx)
        return idx.astype(int)

    def fractional_index(self, v):
        """Continuous index ``(v - origin) / delta`` used by spline lookups."""
        return (np.asarray(v, dtype=float) - self.origin) / self.delta

    # -------------------------------------------------------------------------
    # Grid algebra
    # -------------------------------------------------------------------------

    def match(self, other: "UniformGrid") -> bool:
        """True if both grids share the step and the phase of their origins."""
        return (
            self.delta == other.delta
            and math.fmod(self.origin, self.delta) == math.fmod(other.origin, other.delta)
        )

    def intersect(self, other: "UniformGrid") -> "UniformGrid":
        """
        Overlap of two matching grids.

        The result lies on the lattice of the grid with the larger origin and
        has size 0 when the ranges do not overlap.

        Raises
        ------
        MismatchedGridsError
            If the grids differ in step or phase
        """
        if other.origin < self.origin:
            return other.intersect(self)
        if not self.match(other):
            raise MismatchedGridsError()

        if self.size == 0 or other.size == 0 or self.last < other.origin:
            size = 0
        else:
            size = int((min(self.last, other.last) - other.origin) / other.delta) + 1
        return UniformGrid(other.origin, other.delta, size)

    def __add__(self, shift: float) -> "UniformGrid":
        return UniformGrid(self.origin + shift, self.delta, self.size)

    def __sub__(self, shift: float) -> "UniformGrid":
        return UniformGrid(self.origin - shift, self.delta, self.size)

    def __mul__(self, scale: float) -> "UniformGrid":
        return UniformGrid(self.origin * scale, self.delta * scale, self.size)

    def __truediv__(self, scale: float) -> "UniformGrid":
        return UniformGrid(self.origin / scale, self.delta / scale, self.size)

    __radd__ = __add__
    __rmul__ = __mul__
