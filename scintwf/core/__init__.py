"""
Numerical building blocks.

Classes
-------
UniformGrid
    Uniform 1-D sample grid with matching and intersection
CubicSpline
    Cubic spline on unit-spaced samples
FirstOrder, SecondOrder
    Spline boundary conditions
RealFFTPlan, DCT2DPlan
    Fixed-size transform plans

Functions
---------
integrate
    Batched double-exponential quadrature
"""

from scintwf.core.errors import (
    WeightFunctionError,
    NonUniformGridError,
    MismatchedGridsError,
)
from scintwf.core.grid import UniformGrid
from scintwf.core.spline import CubicSpline, FirstOrder, SecondOrder
from scintwf.core.fft import RealFFTPlan, DCT2DPlan
from scintwf.core.quadrature import integrate

__all__ = [
    "WeightFunctionError",
    "NonUniformGridError",
    "MismatchedGridsError",
    "UniformGrid",
    "CubicSpline",
    "FirstOrder",
    "SecondOrder",
    "RealFFTPlan",
    "DCT2DPlan",
    "integrate",
]
