#!/usr/bin/env python3
"""
Aperture Averaging of Scintillation
===================================

This example compares altitude weight functions of monochromatic light for
several pupil shapes of the same scale:
- Point-like aperture (no averaging, W ~ h^(5/6))
- Filled circular aperture
- Annular aperture with a central obscuration
- Gaussian apodized aperture

Large apertures average out scintillation from low layers, where the
Fresnel radius is small compared to the pupil.

Usage:
    python 01_aperture_averaging.py
    python 01_aperture_averaging.py --aperture-scale 20 --wavelength 500
    python 01_aperture_averaging.py --no-plot

Output:
    - Console: Table of weights at selected altitudes
    - Graph: aperture_averaging.png
"""

import argparse

import numpy as np

from scintwf import (
    AnnularAperture,
    CircularAperture,
    GaussAperture,
    MonoSpectralFilter,
    PointAperture,
    WeightFunction,
)


def parse_args():
    parser = argparse.ArgumentParser(
        description="Compare weight functions of different aperture shapes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # 10 mm pupils at 550 nm
  %(prog)s --aperture-scale 2       # Nearly point-like pupils
  %(prog)s --obscuration 0.5        # Larger central obscuration
        """
    )
    parser.add_argument(
        "--wavelength", type=float, default=550.0,
        help="Wavelength in nm (default: 550)"
    )
    parser.add_argument(
        "--aperture-scale", type=float, default=10.0,
        help="Aperture scale in mm (default: 10)"
    )
    parser.add_argument(
        "--obscuration", type=float, default=0.3,
        help="Central obscuration of the annular pupil (default: 0.3)"
    )
    parser.add_argument(
        "--grid-size", type=int, default=257,
        help="Precomputation grid size (default: 257)"
    )
    parser.add_argument(
        "--no-plot", action="store_true",
        help="Skip plot generation"
    )
    parser.add_argument(
        "--output", type=str, default="aperture_averaging.png",
        help="Output filename for plot"
    )
    return parser.parse_args()


def main():
    args = parse_args()

    print("=" * 70)
    print("APERTURE AVERAGING OF SCINTILLATION")
    print("=" * 70)
    print(f"\nWavelength: {args.wavelength:.1f} nm")
    print(f"Aperture scale: {args.aperture_scale:.2f} mm")

    sf = MonoSpectralFilter()
    apertures = {
        "point": PointAperture(),
        "circular": CircularAperture(),
        f"annular ({args.obscuration:.2f})": AnnularAperture(args.obscuration),
        "gauss": GaussAperture(),
    }

    weight_functions = {
        name: WeightFunction(sf, args.wavelength, af, args.aperture_scale, args.grid_size)
        for name, af in apertures.items()
    }

    altitudes = np.array([0.5, 1.0, 2.0, 4.0, 8.0, 16.0])
    print("\n" + "-" * 70)
    header = f"{'h [km]':>8}" + "".join(f"{name:>16}" for name in weight_functions)
    print(header)
    print("-" * 70)
    for h in altitudes:
        row = f"{h:8.1f}" + "".join(f"{wf(h):16.4e}" for wf in weight_functions.values())
        print(row)

    if not args.no_plot:
        import matplotlib.pyplot as plt

        h = np.linspace(0.0, 20.0, 401)
        fig, ax = plt.subplots(figsize=(8, 6))
        for name, wf in weight_functions.items():
            ax.plot(h, wf(h), label=name)
        ax.set_xlabel("Altitude [km]")
        ax.set_ylabel("Weight")
        ax.set_title(f"Weight functions, D = {args.aperture_scale:g} mm, "
                     f"lambda = {args.wavelength:g} nm")
        ax.legend()
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        plt.savefig(args.output, dpi=150, bbox_inches='tight')
        print(f"\nPlot saved to: {args.output}")


if __name__ == "__main__":
    main()
