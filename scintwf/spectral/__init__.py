"""
Spectral responses and spectral filters.

Classes
-------
SpectralResponse
    Measured response on a uniform wavelength grid
MonoSpectralFilter
    Monochromatic filter
GaussSpectralFilter
    Gaussian passband filter
PolySpectralFilter
    Filter of an arbitrary measured response
"""

from scintwf.spectral.response import SpectralResponse
from scintwf.spectral.filters import (
    SpectralFilter,
    MonoSpectralFilter,
    GaussSpectralFilter,
    PolySpectralFilter,
)

__all__ = [
    "SpectralResponse",
    "SpectralFilter",
    "MonoSpectralFilter",
    "GaussSpectralFilter",
    "PolySpectralFilter",
]
