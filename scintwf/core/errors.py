"""
Exception types raised by scintwf.

Only malformed input raises. Numerical corner cases of the filter and
weight-function layers (0*inf, 0/0, arguments outside the support) are
absorbed and evaluate to 0.
"""


class WeightFunctionError(Exception):
    """Base class for scintwf errors."""


class NonUniformGridError(WeightFunctionError, ValueError):
    """A sample sequence does not have constant spacing."""

    def __init__(self, position, actual, expected):
        self.position = position
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"Non uniform input grid at position {position}, "
            f"actual value {actual}, expected {expected}"
        )


class MismatchedGridsError(WeightFunctionError, ValueError):
    """Two grids differ in step or phase and cannot be intersected."""

    def __init__(self, message="Grids can not be intersected: mismatched delta or phase"):
        super().__init__(message)
