"""
Command-line interface for scintwf.

Provides CLI commands for:
- Dumping the spectral filter of a measured response
- Computing weight functions of altitude (radial and 2-D apertures)
- Computing grid weights at one altitude
- Computing the weight function of a digitally filtered square aperture
- Computing the cross weight functions of a MASS entrance mask
"""

import argparse
import logging
import sys
import time
from typing import List, Optional, Tuple

import numpy as np

from scintwf import __version__
from scintwf.aperture import (
    AngleAveragedAperture,
    CrossAnnularAperture,
    DigitalFilter2D,
    SquareAperture,
    make_aperture_filter,
)
from scintwf.core.errors import WeightFunctionError
from scintwf.spectral import PolySpectralFilter, SpectralResponse
from scintwf.utils.config import ScintillationConfig, load_config, validate_config
from scintwf.utils.io import (
    dump_grid_weights,
    dump_spectral_filter,
    dump_weight_function,
    load_spectral_response,
)
from scintwf.weighting import GridWeightFunction, WeightFunction, WeightFunction2D

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _override(section, **values) -> None:
    """Set config attributes for options given on the command line."""
    for key, value in values.items():
        if value is not None:
            setattr(section, key, value)


def load_run_config(args: argparse.Namespace) -> ScintillationConfig:
    """Read ``--config`` (if any) and apply command-line overrides."""
    config = load_config(args.config) if args.config else ScintillationConfig()

    _override(config.spectral, size=getattr(args, "spectral_size", None))
    _override(
        config.aperture,
        shape=getattr(args, "aperture", None),
        scale=getattr(args, "aperture_scale", None),
        obscuration=getattr(args, "central_obscuration", None),
        ratio=getattr(args, "ratio", None),
        second_obscuration=getattr(args, "second_obscuration", None),
    )
    _override(
        config.weight_function,
        grid_size=getattr(args, "grid_size", None),
        n_altitudes=getattr(args, "size", None),
        altitude_max=getattr(args, "altitude_max", None),
    )
    _override(
        config.grid,
        grid_step=getattr(args, "grid_step", None),
        altitude=getattr(args, "altitude", None),
    )
    shape = getattr(args, "shape", None)
    if shape is not None:
        config.grid.shape = tuple(shape)
    _override(
        config.digital_filter,
        impulse_size=getattr(args, "impulse_size", None),
        angle_grid_size=getattr(args, "angle_grid_size", None),
        aperture_scale=getattr(args, "digital_filter_aperture_scale", None),
    )
    _override(config.mass, magnification=getattr(args, "magnification", None))

    issues = validate_config(config)
    if issues:
        raise ValueError("Invalid configuration: " + "; ".join(issues))
    return config


def load_response(paths: List[str], config: ScintillationConfig) -> SpectralResponse:
    """Load and stack responses; normalize to unit area if configured."""
    response = load_spectral_response(paths)
    logger.info(f"Effective lambda: {response.effective_lambda():.4f} nm")
    if config.spectral.normalize_response:
        response.normalize()
    return response


def make_spectral_filter(
    paths: List[str], config: ScintillationConfig
) -> Tuple[float, PolySpectralFilter]:
    """
    Load and stack responses, build the spectral filter and normalize it.

    Returns
    -------
    wavelength : float
        Equivalent wavelength [nm]
    spectral_filter : PolySpectralFilter
        Normalized filter
    """
    response = load_response(paths, config)
    sf = PolySpectralFilter(response, config.spectral.size, config.spectral.carrier)
    wavelength = sf.equivalent_wavelength
    logger.info(f"Equivalent lambda: {wavelength:.4f} nm")
    return wavelength, sf.normalize()


def _aperture_filter(config: ScintillationConfig):
    return make_aperture_filter(
        config.aperture.shape,
        config.aperture.obscuration,
        ratio=config.aperture.ratio,
        second_obscuration=config.aperture.second_obscuration,
    )


def _radial_aperture(config: ScintillationConfig):
    af = _aperture_filter(config)
    if isinstance(af, SquareAperture):
        af = AngleAveragedAperture(af, config.digital_filter.angle_grid_size, rtol=config.quadrature.rtol)
    return af


def _altitudes(config: ScintillationConfig) -> np.ndarray:
    return np.linspace(0.0, config.weight_function.altitude_max, config.weight_function.n_altitudes)


def run_spectral_filter(args: argparse.Namespace) -> int:
    """Dump the spectral filter of a response."""
    config = load_run_config(args)
    response = load_response(args.response, config)

    sf = PolySpectralFilter(response, config.spectral.size, config.spectral.carrier)
    logger.info(f"Equivalent lambda: {sf.equivalent_wavelength:.4f} nm")
    if args.normalize:
        sf.normalize()
        logger.info(f"Equivalent lambda after normalization: {sf.equivalent_wavelength:.4f}")

    dump_spectral_filter(args.output, sf)
    return 0


def _run_weight_function(args: argparse.Namespace, two_dimensional: bool) -> int:
    config = load_run_config(args)
    wavelength, sf = make_spectral_filter(args.response, config)

    start = time.perf_counter()
    if two_dimensional:
        af = _aperture_filter(config)
        cls = WeightFunction2D
    else:
        af = _radial_aperture(config)
        cls = WeightFunction
    wf = cls(
        sf, wavelength, af, config.aperture.scale,
        config.weight_function.grid_size,
        rtol=config.quadrature.rtol, maxlevel=config.quadrature.maxlevel,
    )
    elapsed = time.perf_counter() - start

    altitudes = _altitudes(config)
    dump_weight_function(args.output, altitudes, wf(altitudes))
    logger.info(f"Consumed time: {elapsed:.3f} sec")
    return 0


def run_weight_function(args: argparse.Namespace) -> int:
    """Weight function for an axially symmetric aperture."""
    return _run_weight_function(args, two_dimensional=False)


def run_weight_function_2d(args: argparse.Namespace) -> int:
    """Weight function for an arbitrary aperture."""
    return _run_weight_function(args, two_dimensional=True)


def run_grid_weight_function(args: argparse.Namespace) -> int:
    """Grid weights at one altitude."""
    config = load_run_config(args)
    wavelength, sf = make_spectral_filter(args.response, config)
    af = _aperture_filter(config)

    start = time.perf_counter()
    with GridWeightFunction(
        sf, wavelength, af, config.aperture.scale,
        config.grid.shape, config.grid.grid_step,
    ) as gwf:
        weights = gwf(config.grid.altitude)
    elapsed = time.perf_counter() - start

    dump_grid_weights(args.output, weights)
    logger.info(f"Consumed time: {elapsed:.3f} sec")
    return 0


def run_digital_filter(args: argparse.Namespace) -> int:
    """
    Weight function of a square aperture seen through a digital filter.

    The filter ``(4 u^2)^(5/6) / A_square`` whitens the square aperture
    towards the Kolmogorov slope; the product of filter and aperture is
    averaged over angle and used as a radial aperture filter.
    """
    config = load_run_config(args)
    wavelength, sf = make_spectral_filter(args.response, config)
    n = config.digital_filter.impulse_size

    start = time.perf_counter()
    square = SquareAperture()

    def kernel(ux, uy):
        u2 = ux * ux + uy * uy
        return (4.0 * u2) ** (5.0 / 6.0) / square(ux, uy)

    df = DigitalFilter2D.from_function(kernel, (n, n))
    af = AngleAveragedAperture(
        lambda ux, uy: square(ux, uy) * df(ux, uy),
        config.digital_filter.angle_grid_size,
        rtol=config.quadrature.rtol,
    )
    wf = WeightFunction(
        sf, wavelength, af, config.digital_filter.aperture_scale,
        config.weight_function.grid_size,
        rtol=config.quadrature.rtol, maxlevel=config.quadrature.maxlevel,
    )
    elapsed = time.perf_counter() - start

    altitudes = _altitudes(config)
    dump_weight_function(args.output, altitudes, wf(altitudes))
    logger.info(f"Consumed time: {elapsed:.3f} sec")
    return 0


def run_mass_weight_function(args: argparse.Namespace) -> int:
    """
    Cross weight functions of the annuli of a MASS entrance mask.

    For annuli ``i >= j`` the aperture scale is the outer diameter of
    annulus ``i`` times the magnification, and the aperture filter is the
    cross filter of the two annuli. Columns are written in the order
    ``w00, w10, w11, w20, ...``.
    """
    config = load_run_config(args)
    wavelength, sf = make_spectral_filter(args.response, config)
    inner, outer = config.mass.inner_diameters, config.mass.outer_diameters

    start = time.perf_counter()
    weight_functions, names = [], []
    for i, (inner_i, outer_i) in enumerate(zip(inner, outer)):
        for j in range(i + 1):
            af = CrossAnnularAperture(outer[j] / outer_i, inner_i / outer_i, inner[j] / outer[j])
            weight_functions.append(WeightFunction(
                sf, wavelength, af, outer_i * config.mass.magnification,
                config.weight_function.grid_size,
                rtol=config.quadrature.rtol, maxlevel=config.quadrature.maxlevel,
            ))
            names.append(f"w{i}{j}")
            logger.debug(f"Computed {names[-1]}: {af!r}")
    elapsed = time.perf_counter() - start

    altitudes = _altitudes(config)
    dump_weight_function(args.output, altitudes, [wf(altitudes) for wf in weight_functions], names)
    logger.info(f"Consumed time: {elapsed:.3f} sec")
    return 0


def _add_aperture_options(parser: argparse.ArgumentParser, default_scale: str) -> None:
    parser.add_argument(
        "--aperture",
        type=str,
        choices=["point", "circular", "annular", "cross-annular", "gauss", "square"],
        help="Aperture shape (default: circular)",
    )
    parser.add_argument(
        "--aperture-scale",
        type=float,
        help=f"Aperture scale in mm (default: {default_scale})",
    )
    parser.add_argument(
        "--central-obscuration",
        type=float,
        help="Central obscuration ratio (default: 0)",
    )
    parser.add_argument(
        "--ratio",
        type=float,
        help="Cross-annular: second outer diameter over the first (default: 1)",
    )
    parser.add_argument(
        "--second-obscuration",
        type=float,
        help="Cross-annular: obscuration of the second annulus (default: central obscuration)",
    )


def _add_weight_function_options(parser: argparse.ArgumentParser, default_output: str = "wf.dat") -> None:
    parser.add_argument(
        "response",
        nargs="+",
        help="Spectral response files, stacked in order",
    )
    parser.add_argument(
        "--size",
        type=int,
        help="Number of output altitudes (default: 1024)",
    )
    parser.add_argument(
        "--altitude-max",
        type=float,
        help="Largest output altitude in km (default: 30)",
    )
    parser.add_argument(
        "--grid-size",
        type=int,
        help="Precomputation grid size (default: 1025)",
    )
    parser.add_argument(
        "--spectral-size",
        type=int,
        help="Spectral filter FFT size (default: 4096)",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=default_output,
        help=f"Output filename (default: {default_output})",
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="scintwf",
        description="scintwf: scintillation weight functions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Weight function of a 20.574 mm circular aperture
    scintwf weight-function filter.dat detector.dat --output wf.dat

    # Annular aperture read from a configuration file
    scintwf -c mase.yaml weight-function filter.dat --central-obscuration 0.3

    # Spectral filter in units of the equivalent wavelength
    scintwf spectral-filter filter.dat -o sf.dat --normalize

    # Ten cross weight functions of a MASS mask
    scintwf mass-weight-function filter.dat --magnification 16.2
        """,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"scintwf {__version__}",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to YAML or JSON configuration file",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    sf_parser = subparsers.add_parser("spectral-filter", help="Dump a spectral filter")
    sf_parser.add_argument("response", nargs="+", help="Spectral response files, stacked in order")
    sf_parser.add_argument("-o", "--output", type=str, default="sf.dat", help="Output filename (default: sf.dat)")
    sf_parser.add_argument("--spectral-size", type=int, help="FFT size (default: 4096)")
    sf_parser.add_argument("--normalize", action="store_true", help="Normalize by the equivalent wavelength")
    sf_parser.set_defaults(func=run_spectral_filter)

    wf_parser = subparsers.add_parser("weight-function", help="Weight function of altitude")
    _add_weight_function_options(wf_parser)
    _add_aperture_options(wf_parser, "20.574")
    wf_parser.set_defaults(func=run_weight_function)

    wf2_parser = subparsers.add_parser("weight-function-2d", help="Weight function for a 2-D aperture")
    _add_weight_function_options(wf2_parser)
    _add_aperture_options(wf2_parser, "20.574")
    wf2_parser.set_defaults(func=run_weight_function_2d)

    grid_parser = subparsers.add_parser("grid-weight-function", help="Grid weights at one altitude")
    grid_parser.add_argument("response", nargs="+", help="Spectral response files, stacked in order")
    grid_parser.add_argument("--altitude", type=float, help="Layer altitude in km (default: 1)")
    grid_parser.add_argument("--grid-step", type=float, help="Sub-aperture step in mm (default: aperture scale)")
    grid_parser.add_argument("--shape", type=int, nargs=2, metavar=("NX", "NY"), help="Grid shape (default: 16 16)")
    grid_parser.add_argument("--spectral-size", type=int, help="Spectral filter FFT size (default: 4096)")
    grid_parser.add_argument("-o", "--output", type=str, default="grid.dat", help="Output filename (default: grid.dat)")
    _add_aperture_options(grid_parser, "20.574")
    grid_parser.set_defaults(func=run_grid_weight_function)

    df_parser = subparsers.add_parser("digital-filter", help="Weight function of a digitally filtered square aperture")
    _add_weight_function_options(df_parser)
    df_parser.add_argument("--impulse-size", type=int, help="Filter impulse size (default: 121)")
    df_parser.add_argument("--angle-grid-size", type=int, help="Angle averaging nodes (default: 1024)")
    df_parser.add_argument(
        "--aperture-scale",
        dest="digital_filter_aperture_scale",
        type=float,
        help="Square sub-aperture side in mm (default: 11)",
    )
    df_parser.set_defaults(func=run_digital_filter)

    mass_parser = subparsers.add_parser("mass-weight-function", help="Cross weight functions of a MASS mask")
    _add_weight_function_options(mass_parser, default_output="weights.dat")
    mass_parser.add_argument("--magnification", type=float, help="Entrance pupil over mask size (default: 16.2)")
    mass_parser.set_defaults(func=run_mass_weight_function)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        return args.func(args)
    except (WeightFunctionError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
