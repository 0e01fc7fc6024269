"""
Scintillation weight functions.

Classes
-------
WeightFunction
    Weight function of altitude, axially symmetric aperture
WeightFunction2D
    Weight function of altitude, arbitrary aperture
GridWeightFunction
    Weights of all separations of a sub-aperture grid at one altitude

Functions
---------
dimensionless_weight_function
    Core integral for a radial aperture filter
dimensionless_weight_function_2d
    Core integral for a Cartesian aperture filter
"""

from scintwf.weighting.dimensionless import (
    dimensionless_weight_function,
    dimensionless_weight_function_2d,
)
from scintwf.weighting.weight_function import WeightFunction, WeightFunction2D
from scintwf.weighting.grid_weight_function import GridWeightFunction

__all__ = [
    "dimensionless_weight_function",
    "dimensionless_weight_function_2d",
    "WeightFunction",
    "WeightFunction2D",
    "GridWeightFunction",
]
