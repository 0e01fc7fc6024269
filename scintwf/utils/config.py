"""
Configuration file support for scintwf.

Provides YAML and JSON configuration file loading and validation for
weight-function computations. Command-line options override the values
read from a file.

Usage
-----
>>> from scintwf.utils.config import load_config
>>> config = load_config("mase.yaml")
>>> print(config.aperture.scale)
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from scintwf.core.constants import (
    DEFAULT_ANGLE_AVERAGED_SIZE,
    DEFAULT_SPECTRAL_FILTER_SIZE,
    DEFAULT_WEIGHT_FUNCTION_GRID_SIZE,
)

APERTURE_SHAPES = ("point", "circular", "annular", "cross-annular", "gauss", "square")


@dataclass
class SpectralConfig:
    """Spectral filter configuration."""

    size: int = DEFAULT_SPECTRAL_FILTER_SIZE  # minimum FFT length
    carrier: Optional[float] = None  # nm, None for the effective wavelength
    normalize_response: bool = True


@dataclass
class ApertureConfig:
    """Aperture configuration."""

    shape: str = "circular"  # point, circular, annular, cross-annular, gauss, square
    scale: float = 20.574  # mm
    obscuration: float = 0.0
    ratio: float = 1.0  # cross-annular: second outer diameter over the first
    second_obscuration: Optional[float] = None  # cross-annular, None for obscuration


@dataclass
class WeightFunctionConfig:
    """Weight function precomputation and output sampling."""

    grid_size: int = DEFAULT_WEIGHT_FUNCTION_GRID_SIZE
    altitude_max: float = 30.0  # km
    n_altitudes: int = 1024


@dataclass
class GridConfig:
    """Sub-aperture grid configuration."""

    grid_step: Optional[float] = None  # mm, None for the aperture scale
    shape: Tuple[int, int] = (16, 16)
    altitude: float = 1.0  # km


@dataclass
class DigitalFilterConfig:
    """Digital filter configuration."""

    impulse_size: int = 121
    angle_grid_size: int = DEFAULT_ANGLE_AVERAGED_SIZE
    aperture_scale: float = 11.0  # mm, side of the square sub-aperture


@dataclass
class MassConfig:
    """Concentric annuli of a MASS entrance mask."""

    inner_diameters: List[float] = field(default_factory=lambda: [0.0, 1.30, 2.20, 3.90])  # mm
    outer_diameters: List[float] = field(default_factory=lambda: [1.27, 2.15, 3.85, 5.50])  # mm
    magnification: float = 16.20  # entrance pupil over mask


@dataclass
class QuadratureConfig:
    """Quadrature configuration."""

    rtol: Optional[float] = None  # None for eps^(2/3)
    maxlevel: Optional[int] = None  # None for scipy's default


@dataclass
class ScintillationConfig:
    """Complete weight-function configuration."""

    name: str = "unnamed"
    description: str = ""

    spectral: SpectralConfig = field(default_factory=SpectralConfig)
    aperture: ApertureConfig = field(default_factory=ApertureConfig)
    weight_function: WeightFunctionConfig = field(default_factory=WeightFunctionConfig)
    grid: GridConfig = field(default_factory=GridConfig)
    digital_filter: DigitalFilterConfig = field(default_factory=DigitalFilterConfig)
    mass: MassConfig = field(default_factory=MassConfig)
    quadrature: QuadratureConfig = field(default_factory=QuadratureConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        data = asdict(self)
        data["grid"]["shape"] = list(self.grid.shape)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScintillationConfig":
        """Build a config from a (possibly partial) dictionary."""
        return _dict_to_config(data)

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        with open(path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_json(self, path: Union[str, Path], indent: int = 2) -> None:
        """Save configuration to JSON file."""
        path = Path(path)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=indent)


def _dict_to_config(data: Optional[Dict[str, Any]]) -> ScintillationConfig:
    """Convert dictionary to ScintillationConfig."""
    data = data or {}
    config = ScintillationConfig(
        name=data.get('name', 'unnamed'),
        description=data.get('description', ''),
    )

    if 'spectral' in data:
        config.spectral = SpectralConfig(**data['spectral'])
    if 'aperture' in data:
        config.aperture = ApertureConfig(**data['aperture'])
    if 'weight_function' in data:
        config.weight_function = WeightFunctionConfig(**data['weight_function'])
    if 'grid' in data:
        grid = dict(data['grid'])
        if 'shape' in grid:
            grid['shape'] = tuple(grid['shape'])
        config.grid = GridConfig(**grid)
    if 'digital_filter' in data:
        config.digital_filter = DigitalFilterConfig(**data['digital_filter'])
    if 'mass' in data:
        config.mass = MassConfig(**data['mass'])
    if 'quadrature' in data:
        config.quadrature = QuadratureConfig(**data['quadrature'])

    return config


def load_config(path: Union[str, Path]) -> ScintillationConfig:
    """
    Load configuration from YAML or JSON file.

    Parameters
    ----------
    path : str or Path
        Path to configuration file (.yaml, .yml, or .json)

    Returns
    -------
    config : ScintillationConfig
        Loaded configuration

    Raises
    ------
    FileNotFoundError
        If configuration file doesn't exist
    ValueError
        If file format is not supported
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()

    if suffix in ('.yaml', '.yml'):
        with open(path) as f:
            data = yaml.safe_load(f)
    elif suffix == '.json':
        with open(path) as f:
            data = json.load(f)
    else:
        raise ValueError(f"Unsupported file format: {suffix}. Use .yaml, .yml, or .json")

    return _dict_to_config(data)


def create_default_config(path: Union[str, Path] = "scintwf.yaml") -> ScintillationConfig:
    """
    Create and save a default configuration file.

    Parameters
    ----------
    path : str or Path
        Output path for configuration file

    Returns
    -------
    config : ScintillationConfig
        Default configuration
    """
    config = ScintillationConfig(
        name="default",
        description="Default scintwf configuration",
    )

    path = Path(path)
    if path.suffix.lower() in ('.yaml', '.yml'):
        config.to_yaml(path)
    else:
        config.to_json(path)

    return config


def validate_config(config: ScintillationConfig) -> List[str]:
    """
    Validate configuration and return list of issues.

    Parameters
    ----------
    config : ScintillationConfig
        Configuration to validate

    Returns
    -------
    issues : list of str
        List of validation issues (empty if valid)
    """
    issues = []

    if config.spectral.size < 2:
        issues.append("Spectral filter size must be at least 2")
    if config.spectral.carrier is not None and config.spectral.carrier <= 0:
        issues.append("Carrier wavelength must be positive")

    if config.aperture.shape not in APERTURE_SHAPES:
        issues.append(f"Aperture shape must be one of {', '.join(APERTURE_SHAPES)}")
    if config.aperture.scale <= 0:
        issues.append("Aperture scale must be positive")
    if not 0 <= config.aperture.obscuration < 1:
        issues.append("Central obscuration must be in [0, 1)")
    if config.aperture.ratio <= 0:
        issues.append("Diameter ratio must be positive")
    second = config.aperture.second_obscuration
    if second is not None and not 0 <= second < 1:
        issues.append("Second obscuration must be in [0, 1)")

    if config.weight_function.grid_size < 2:
        issues.append("Weight function grid needs at least 2 nodes")
    if config.weight_function.altitude_max <= 0:
        issues.append("Maximum altitude must be positive")
    if config.weight_function.n_altitudes < 1:
        issues.append("Number of altitudes must be at least 1")

    if config.grid.grid_step is not None and config.grid.grid_step <= 0:
        issues.append("Grid step must be positive")
    if len(config.grid.shape) != 2 or min(config.grid.shape) < 2:
        issues.append("Grid shape must be two sizes of at least 2")
    if config.grid.altitude < 0:
        issues.append("Altitude must be non-negative")

    if config.digital_filter.impulse_size < 2:
        issues.append("Impulse size must be at least 2")
    if config.digital_filter.angle_grid_size < 2:
        issues.append("Angle averaging grid needs at least 2 nodes")
    if config.digital_filter.aperture_scale <= 0:
        issues.append("Digital filter aperture scale must be positive")

    inner, outer = config.mass.inner_diameters, config.mass.outer_diameters
    if not outer or len(inner) != len(outer):
        issues.append("MASS mask needs as many inner as outer diameters")
    elif any(not 0 <= d_in < d_out for d_in, d_out in zip(inner, outer)):
        issues.append("MASS annuli need 0 <= inner < outer diameter")
    if config.mass.magnification <= 0:
        issues.append("Magnification must be positive")

    if config.quadrature.rtol is not None and not 0 < config.quadrature.rtol < 1:
        issues.append("Quadrature tolerance must be in (0, 1)")
    if config.quadrature.maxlevel is not None and config.quadrature.maxlevel < 1:
        issues.append("Quadrature level must be at least 1")

    return issues
