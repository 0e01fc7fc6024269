"""
Measured spectral responses.

A spectral response is a non-negative transmission curve sampled on a
uniform wavelength grid (nm). Responses of several optical elements along
the path (filter, detector, atmosphere) are combined by stacking: the grids
are intersected and the overlapping samples multiplied.

File format
-----------
Plain text, two whitespace-separated columns ``wavelength response``, one
sample per line, no header. Wavelengths must be exactly uniform.
"""

import logging
from dataclasses import dataclass
from functools import reduce
from pathlib import Path
from typing import Iterable, Union

import numpy as np

from scintwf.core.grid import UniformGrid

logger = logging.getLogger(__name__)


@dataclass
class SpectralResponse:
    """
    Spectral response sampled on a uniform wavelength grid.

    Attributes
    ----------
    grid : UniformGrid
        Wavelength grid [nm]
    data : ndarray
        Response value at each grid node
    """

    grid: UniformGrid
    data: np.ndarray

    def __post_init__(self):
        self.data = np.asarray(self.data, dtype=float)
        if self.data.shape != (self.grid.size,):
            raise ValueError(
                f"Response has {self.data.size} samples, grid has {self.grid.size}"
            )

    @classmethod
    def from_arrays(cls, wavelengths, data) -> "SpectralResponse":
        """Build a response from explicit wavelength samples."""
        return cls(UniformGrid.from_sequence(wavelengths), data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SpectralResponse":
        """
        Load a two-column ``wavelength response`` text file.

        Raises
        ------
        FileNotFoundError
            If the file does not exist
        NonUniformGridError
            If the wavelengths are not uniformly spaced
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Spectral response file not found: {path}")

        table = np.loadtxt(path, ndmin=2)
        if table.shape[1] < 2:
            raise ValueError(f"Expected two columns in {path}, found {table.shape[1]}")
        response = cls.from_arrays(table[:, 0], table[:, 1])
        logger.debug(
            f"Loaded {path.name}: {response.size} samples, "
            f"{response.grid.origin:.2f}-{response.grid.last:.2f} nm"
        )
        return response

    @classmethod
    def stack_from_files(cls, paths: Iterable[Union[str, Path]]) -> "SpectralResponse":
        """Load several responses and stack them into one."""
        responses = [cls.from_file(p) for p in paths]
        if not responses:
            raise ValueError("At least one spectral response file is required")
        return reduce(lambda acc, r: acc.stack(r), responses)

    @property
    def size(self) -> int:
        return self.grid.size

    @property
    def wavelengths(self) -> np.ndarray:
        """Wavelength of each sample [nm]."""
        return self.grid.values

    def normalize(self) -> "SpectralResponse":
        """Scale the response in place so that its samples sum to 1."""
        self.data = self.data / np.sum(self.data)
        return self

    def normalized(self) -> "SpectralResponse":
        """Normalized copy of the response."""
        return SpectralResponse(self.grid, self.data.copy()).normalize()

    def stack(self, other: "SpectralResponse") -> "SpectralResponse":
        """
        Multiply by another response in place, narrowing to the overlap.

        Raises
        ------
        MismatchedGridsError
            If the grids differ in step or phase
        """
        common = self.grid.intersect(other.grid)
        self.data = self._slice(common) * other._slice(common)
        self.grid = common
        return self

    def stacked(self, other: "SpectralResponse") -> "SpectralResponse":
        """Product of two responses as a new object."""
        return SpectralResponse(self.grid, self.data.copy()).stack(other)

    def _slice(self, sub: UniformGrid) -> np.ndarray:
        if sub.size == 0:
            return np.zeros(0)
        start = int(round(float(self.grid.fractional_index(sub.origin))))
        return self.data[start:start + sub.size]

    def effective_lambda(self) -> float:
        """
        Photon-weighted mean wavelength [nm].

        Weights are ``response / wavelength``, the mean index is mapped back
        onto the grid.
        """
        weights = self.data / self.grid.values
        return self.grid.origin + self.grid.delta * np.average(
            np.arange(self.size), weights=weights
        )
