"""
Numerical and physical constants used by scintwf.

All constants are in the units the weight-function stage works with:
altitudes in km, wavelengths in nm and aperture scales in mm.
"""

import numpy as np

# =============================================================================
# Turbulence constants
# =============================================================================

# Kolmogorov spectrum scale Gamma(8/3) sin(pi/3) / (2 pi)^(8/3), multiplies
# Cn2 in the phase power spectrum 0.033 Cn2 k^(-11/3)
KOLMOGOROV_CN2_SCALE = 0.0096931507043123421456817216188956817

# 16 pi^2 k^2 with (km, nm, mm) inputs collapses to 16e13 pi^2 K
WEIGHT_FUNCTION_SCALE = KOLMOGOROV_CN2_SCALE * 16.0e13 * np.pi ** 2

# Equivalent wavelength prefactor, lambda_eq = 3.28 I^(-6/7)
EQUIVALENT_WAVELENGTH_SCALE = 3.28

# =============================================================================
# Numerical tolerances
# =============================================================================

MACHINE_EPSILON = np.finfo(float).eps

# Default relative tolerance of the adaptive quadrature
QUADRATURE_RTOL = MACHINE_EPSILON ** (2.0 / 3.0)

# Below this argument the Airy pattern is replaced by 1 - x^2/8
AIRY_SERIES_THRESHOLD = 3.7 * MACHINE_EPSILON ** 0.25

# 1 / (8 ln 2), converts a FWHM to a Gaussian exponent
FWHM_TO_GAUSS = 1.0 / (8.0 * np.log(2.0))

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_SPECTRAL_FILTER_SIZE = 4096
DEFAULT_WEIGHT_FUNCTION_GRID_SIZE = 1025
DEFAULT_ANGLE_AVERAGED_SIZE = 1024
