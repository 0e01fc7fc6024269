"""
Aperture filters and digital filters.

Classes
-------
PointAperture, CircularAperture, AnnularAperture, CrossAnnularAperture, GaussAperture,
SquareAperture
    Closed-form aperture filters
AngleAveragedAperture
    Azimuthal average of a Cartesian filter
DigitalFilter2D
    Finite impulse response filter on a grid of sub-apertures

Functions
---------
make_aperture_filter
    Build an aperture filter by name
"""

from scintwf.aperture.filters import (
    ApertureFilter,
    PointAperture,
    CircularAperture,
    AnnularAperture,
    CrossAnnularAperture,
    GaussAperture,
    SquareAperture,
    AngleAveragedAperture,
    airy,
    make_aperture_filter,
)
from scintwf.aperture.digital import DigitalFilter2D

__all__ = [
    "ApertureFilter",
    "PointAperture",
    "CircularAperture",
    "AnnularAperture",
    "CrossAnnularAperture",
    "GaussAperture",
    "SquareAperture",
    "AngleAveragedAperture",
    "airy",
    "make_aperture_filter",
    "DigitalFilter2D",
]
