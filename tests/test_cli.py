"""
Tests for the command-line interface.
"""

import logging
import re

import numpy as np
import pytest

from scintwf.cli import build_parser, load_run_config, main, make_spectral_filter
from scintwf.utils.config import ScintillationConfig


@pytest.fixture
def response_file(tmp_path):
    wavelengths = np.arange(500.0, 601.0)
    path = tmp_path / "filter.dat"
    np.savetxt(path, np.column_stack([wavelengths, np.exp(-0.5 * ((wavelengths - 550.0) / 15.0) ** 2)]))
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_weight_function_options(self):
        args = build_parser().parse_args([
            "weight-function", "a.dat", "b.dat",
            "--aperture", "gauss", "--aperture-scale", "12.5", "-o", "out.dat",
        ])
        assert args.response == ["a.dat", "b.dat"]
        assert args.aperture == "gauss"
        assert args.aperture_scale == 12.5
        assert args.output == "out.dat"
        assert args.grid_size is None

    def test_grid_shape(self):
        args = build_parser().parse_args(["grid-weight-function", "a.dat", "--shape", "4", "6"])
        assert args.shape == [4, 6]

    def test_digital_filter_options(self):
        args = build_parser().parse_args(["digital-filter", "a.dat", "--aperture-scale", "8", "--angle-grid-size", "65"])
        assert args.digital_filter_aperture_scale == 8.0
        assert args.angle_grid_size == 65
        assert args.output == "wf.dat"

        config = load_run_config(args)
        assert config.digital_filter.aperture_scale == 8.0
        assert config.aperture.scale == 20.574

    def test_digital_filter_default_scale(self):
        config = load_run_config(build_parser().parse_args(["digital-filter", "a.dat"]))
        assert config.digital_filter.aperture_scale == 11.0

    def test_mass_options(self):
        args = build_parser().parse_args(["mass-weight-function", "a.dat", "--magnification", "10"])
        assert args.output == "weights.dat"
        assert load_run_config(args).mass.magnification == 10.0

    def test_cross_annular_options(self):
        args = build_parser().parse_args([
            "weight-function", "a.dat", "--aperture", "cross-annular",
            "--ratio", "0.5", "--central-obscuration", "0.2", "--second-obscuration", "0.4",
        ])
        config = load_run_config(args)
        assert config.aperture.ratio == 0.5
        assert config.aperture.second_obscuration == 0.4


class TestCommands:
    """Tests for running CLI commands end to end."""

    def test_spectral_filter(self, tmp_path, response_file):
        output = tmp_path / "sf.dat"
        code = main([
            "spectral-filter", str(response_file),
            "-o", str(output), "--spectral-size", "256", "--normalize",
        ])
        assert code == 0

        table = np.loadtxt(output)
        assert table.shape == (129, 2)
        assert np.all(table[:, 1] >= 0.0)

    def test_weight_function(self, tmp_path, response_file):
        output = tmp_path / "wf.dat"
        code = main([
            "weight-function", str(response_file),
            "--grid-size", "9", "--size", "5", "--altitude-max", "4",
            "--spectral-size", "256", "-o", str(output),
        ])
        assert code == 0

        table = np.loadtxt(output, delimiter=",", skiprows=1)
        assert table.shape == (5, 2)
        assert np.allclose(table[:, 0], [0.0, 1.0, 2.0, 3.0, 4.0])
        assert table[0, 1] == 0.0
        assert np.all(table[1:, 1] > 0.0)
        assert np.all(np.diff(table[:, 1]) > 0.0)

    def test_grid_weight_function(self, tmp_path, response_file):
        output = tmp_path / "grid.dat"
        code = main([
            "grid-weight-function", str(response_file),
            "--shape", "4", "3", "--altitude", "2",
            "--spectral-size", "256", "-o", str(output),
        ])
        assert code == 0
        assert np.loadtxt(output, delimiter=",").shape == (4, 3)

    def test_config_file(self, tmp_path, response_file):
        config = tmp_path / "run.yaml"
        config.write_text(
            "aperture:\n"
            "  shape: gauss\n"
            "  scale: 5.0\n"
            "weight_function:\n"
            "  grid_size: 9\n"
            "  n_altitudes: 3\n"
            "  altitude_max: 2.0\n"
            "spectral:\n"
            "  size: 256\n"
        )
        output = tmp_path / "wf.dat"
        code = main(["-c", str(config), "weight-function", str(response_file), "-o", str(output)])
        assert code == 0
        assert np.loadtxt(output, delimiter=",", skiprows=1).shape == (3, 2)

    def test_missing_response(self, tmp_path, capsys):
        code = main(["spectral-filter", str(tmp_path / "missing.dat"), "-o", str(tmp_path / "sf.dat")])
        assert code == 1
        assert "Error" in capsys.readouterr().err

    def test_invalid_option(self, tmp_path, response_file, capsys):
        code = main([
            "weight-function", str(response_file),
            "--aperture-scale", "-1", "-o", str(tmp_path / "wf.dat"),
        ])
        assert code == 1
        assert "Aperture scale must be positive" in capsys.readouterr().err

    def test_spectral_filter_equivalent_wavelength(self, tmp_path, response_file, caplog):
        """Both commands report the same equivalent wavelength of the response."""
        caplog.set_level(logging.INFO, logger="scintwf")
        assert main(["spectral-filter", str(response_file), "--spectral-size", "256", "-o", str(tmp_path / "sf.dat")]) == 0
        assert main([
            "weight-function", str(response_file), "--grid-size", "9", "--size", "3",
            "--spectral-size", "256", "-o", str(tmp_path / "wf.dat"),
        ]) == 0

        reported = [float(value) for value in re.findall(r"Equivalent lambda: ([0-9.]+) nm", caplog.text)]
        assert len(reported) == 2
        assert reported[0] == reported[1]
        assert 500.0 < reported[0] < 600.0

    def test_response_scale_does_not_matter(self, tmp_path, response_file):
        scaled = tmp_path / "scaled.dat"
        table = np.loadtxt(response_file)
        table[:, 1] *= 100.0
        np.savetxt(scaled, table)

        config = ScintillationConfig()
        config.spectral.size = 256
        wavelength, _ = make_spectral_filter([str(response_file)], config)
        scaled_wavelength, _ = make_spectral_filter([str(scaled)], config)
        assert scaled_wavelength == pytest.approx(wavelength, rel=1e-8)

    def test_weight_function_2d(self, tmp_path, response_file):
        config = tmp_path / "run.yaml"
        config.write_text("quadrature:\n  rtol: 1.0e-6\n")
        output = tmp_path / "wf2d.dat"
        code = main([
            "-c", str(config), "weight-function-2d", str(response_file),
            "--aperture", "square", "--aperture-scale", "10",
            "--grid-size", "5", "--size", "3", "--spectral-size", "256", "-o", str(output),
        ])
        assert code == 0

        table = np.loadtxt(output, delimiter=",", skiprows=1)
        assert table.shape == (3, 2)
        assert np.allclose(table[:, 0], [0.0, 15.0, 30.0])
        assert table[0, 1] == 0.0
        assert np.all(np.isfinite(table[:, 1]))
        assert np.all(table[1:, 1] > 0.0)

    def test_digital_filter(self, tmp_path, response_file):
        output = tmp_path / "df.dat"
        code = main([
            "digital-filter", str(response_file),
            "--impulse-size", "5", "--angle-grid-size", "65",
            "--grid-size", "9", "--size", "3", "--spectral-size", "256", "-o", str(output),
        ])
        assert code == 0

        table = np.loadtxt(output, delimiter=",", skiprows=1)
        assert table.shape == (3, 2)
        assert table[0, 1] == 0.0
        assert np.all(np.isfinite(table[:, 1]))

    def test_mass_weight_function(self, tmp_path, response_file):
        output = tmp_path / "weights.dat"
        code = main([
            "mass-weight-function", str(response_file),
            "--grid-size", "9", "--size", "4", "--spectral-size", "256", "-o", str(output),
        ])
        assert code == 0

        header = output.read_text().splitlines()[0]
        assert header == "altitude_km,w00,w10,w11,w20,w21,w22,w30,w31,w32,w33"
        table = np.loadtxt(output, delimiter=",", skiprows=1)
        assert table.shape == (4, 11)
        assert np.all(table[0, 1:] == 0.0)
        # auto weights of the four annuli
        assert np.all(table[1:, [1, 3, 6, 10]] > 0.0)

    def test_mass_filled_annulus_is_circular(self, tmp_path, response_file):
        """The innermost annulus has no obscuration; 1.27 mm times 16.2 is 20.574 mm."""
        mass = tmp_path / "weights.dat"
        circular = tmp_path / "wf.dat"
        common = ["--grid-size", "9", "--size", "4", "--spectral-size", "256"]
        assert main(["mass-weight-function", str(response_file), "-o", str(mass)] + common) == 0
        assert main(["weight-function", str(response_file), "-o", str(circular)] + common) == 0

        w00 = np.loadtxt(mass, delimiter=",", skiprows=1)[:, 1]
        expected = np.loadtxt(circular, delimiter=",", skiprows=1)[:, 1]
        assert np.allclose(w00, expected, rtol=1e-6)
