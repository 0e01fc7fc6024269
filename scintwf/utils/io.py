"""
Text input and output.

Spectral responses are read from two-column whitespace-separated files.
Results are written with ``numpy.savetxt``: spectral filters as
``frequency value`` rows, weight functions as comma-separated
``altitude,weight`` rows and grid weights as a comma-separated matrix.
"""

import logging
from pathlib import Path
from typing import Iterable, Union

import numpy as np

from scintwf.spectral.response import SpectralResponse

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_spectral_response(paths: Union[PathLike, Iterable[PathLike]]) -> SpectralResponse:
    """
    Load one response file, or stack several into a single response.

    Raises
    ------
    FileNotFoundError
        If a file does not exist
    MismatchedGridsError
        If two files are sampled on incompatible grids
    """
    if isinstance(paths, (str, Path)):
        return SpectralResponse.from_file(paths)
    return SpectralResponse.stack_from_files(paths)


def dump_spectral_filter(path: PathLike, spectral_filter, size=None) -> str:
    """
    Write a polychromatic spectral filter on its frequency grid.

    Parameters
    ----------
    path : str or Path
        Output file
    spectral_filter : PolySpectralFilter
        Filter to dump
    size : int, optional
        Number of leading grid nodes to write (default: all)

    Returns
    -------
    str
        Path of the written file
    """
    grid = spectral_filter.grid
    n = grid.size if size is None else min(size, grid.size)
    x = grid.values[:n]
    np.savetxt(
        path,
        np.column_stack([x, spectral_filter(x)]),
        header="1/nm value",
        fmt="%.7g",
    )
    logger.info(f"Saved spectral filter to {path}")
    return str(path)


def dump_weight_function(path: PathLike, altitudes, values, names=None) -> str:
    """
    Write ``altitude,weight`` rows; altitudes in km.

    ``values`` may also be a sequence of weight functions sampled at the
    same altitudes, written as one column each and headed by ``names``.
    """
    columns = np.column_stack([np.asarray(altitudes)] + [np.asarray(v) for v in np.atleast_2d(values)])
    if names is None:
        names = ["weight"] if columns.shape[1] == 2 else [f"w{i}" for i in range(columns.shape[1] - 1)]
    np.savetxt(
        path,
        columns,
        delimiter=',',
        header=",".join(["altitude_km"] + list(names)),
        comments='',
    )
    logger.info(f"Saved weight function to {path}")
    return str(path)


def dump_grid_weights(path: PathLike, weights) -> str:
    """Write a 2-D array of grid weights as a comma-separated matrix."""
    np.savetxt(path, np.asarray(weights), delimiter=',')
    logger.info(f"Saved grid weights to {path}")
    return str(path)
