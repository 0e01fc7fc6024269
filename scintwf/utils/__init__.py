"""
Configuration and I/O utilities.

Functions
---------
load_config
    Load a YAML or JSON configuration file
validate_config
    List configuration issues
load_spectral_response
    Load and stack spectral response files
dump_spectral_filter, dump_weight_function, dump_grid_weights
    Write results as text
"""

from scintwf.utils.config import (
    ScintillationConfig,
    load_config,
    create_default_config,
    validate_config,
)
from scintwf.utils.io import (
    load_spectral_response,
    dump_spectral_filter,
    dump_weight_function,
    dump_grid_weights,
)

__all__ = [
    "ScintillationConfig",
    "load_config",
    "create_default_config",
    "validate_config",
    "load_spectral_response",
    "dump_spectral_filter",
    "dump_weight_function",
    "dump_grid_weights",
]
