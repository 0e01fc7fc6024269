"""
scintwf: scintillation weight functions.

Computes the altitude weighting of optical turbulence for scintillation
measurements through a telescope aperture, from a measured spectral
response and an aperture shape.

Modules
-------
core
    Uniform grids, cubic splines, transform plans, quadrature
spectral
    Spectral responses and spectral filters (mono, gauss, poly)
aperture
    Aperture filters and 2-D digital filters
weighting
    Dimensionless and physical weight functions, grid weight functions
utils
    Configuration files and text I/O
"""

__version__ = "0.1.0"

from scintwf.core import UniformGrid, CubicSpline, WeightFunctionError
from scintwf.spectral import (
    SpectralResponse,
    MonoSpectralFilter,
    GaussSpectralFilter,
    PolySpectralFilter,
)
from scintwf.aperture import (
    PointAperture,
    CircularAperture,
    AnnularAperture,
    CrossAnnularAperture,
    GaussAperture,
    SquareAperture,
    AngleAveragedAperture,
    DigitalFilter2D,
)
from scintwf.weighting import WeightFunction, WeightFunction2D, GridWeightFunction

__all__ = [
    "__version__",
    "UniformGrid",
    "CubicSpline",
    "WeightFunctionError",
    "SpectralResponse",
    "MonoSpectralFilter",
    "GaussSpectralFilter",
    "PolySpectralFilter",
    "PointAperture",
    "CircularAperture",
    "AnnularAperture",
    "CrossAnnularAperture",
    "GaussAperture",
    "SquareAperture",
    "AngleAveragedAperture",
    "DigitalFilter2D",
    "WeightFunction",
    "WeightFunction2D",
    "GridWeightFunction",
]
