"""
Integration tests for the inference workbench.

Tests cover:
- Sample datasets
- End-to-end inference on each model shape
- Reproducibility with a fixed seed
- Command-line entry point
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from changepoint import InsufficientDataError
from regression import PriorSpec
from simulation import ReportingObservation
from workbench import DATASETS, get_dataset, run_inference
from workbench.cli import main


class TestDatasets:
    """Tests for the bundled sample buildings."""

    @pytest.mark.parametrize("key", ["heating", "cooling", "mixed"])
    def test_complete(self, key: str) -> None:
        data = get_dataset(key)
        assert data.key == key
        assert len(data.months) == 24
        assert data.temperatures.shape == (24,)
        assert data.usage.shape == (24,)
        assert np.all(data.usage > 0)

    def test_suggested_shapes(self) -> None:
        assert {k: d.suggested_shape for k, d in DATASETS.items()} == {
            "heating": "3PH",
            "cooling": "3PC",
            "mixed": "5P",
        }

    def test_unknown_key(self) -> None:
        with pytest.raises(ValueError, match="Unknown dataset"):
            get_dataset("warehouse")


class TestRunInference:
    """End-to-end tests of run_inference."""

    def test_heating_report(self) -> None:
        data = get_dataset("heating")
        report = run_inference(data.temperatures, data.usage, "3PH", n_samples=1000, random_seed=7)

        assert report.model_shape == "3PH"
        assert report.best in report.candidates
        assert report.cp2 is None
        assert abs(sum(c.posterior for c in report.candidates) - 1.0) < 1e-9

        assert len(report.param_posteriors) == 2
        assert len(report.param_priors) == 2
        assert report.param_posteriors[1].mean > 0

        assert len(report.fan) == 100
        assert_allclose([report.fan[0].temp, report.fan[-1].temp], [21.0, 81.0])

        assert report.ols is not None
        assert report.ols_line[0, 0] == 21.0
        assert report.ols_line[-1, 0] == 81.0
        assert_allclose(report.ols_line[:, 1][-1], report.ols.beta[0])

        assert len(report.reporting) == 12
        assert report.savings.n_samples == 1000
        assert report.savings.mean > 0

    def test_seed_reproducible(self) -> None:
        data = get_dataset("cooling")
        a = run_inference(data.temperatures, data.usage, "3PC", n_samples=300, random_seed=11)
        b = run_inference(data.temperatures, data.usage, "3PC", n_samples=300, random_seed=11)
        assert a.reporting == b.reporting
        assert_array_equal(a.savings.samples, b.savings.samples)

    def test_mixed_shape(self) -> None:
        data = get_dataset("mixed")
        report = run_inference(data.temperatures, data.usage, "5P", n_samples=300, random_seed=1)
        assert report.cp2 - report.cp1 >= 6.0
        assert len(report.param_posteriors) == 3
        assert report.posterior.n_params == 3

    def test_given_reporting_period(self) -> None:
        data = get_dataset("heating")
        reporting = [ReportingObservation(temp=30.0, actual=3500.0),
                     ReportingObservation(temp=70.0, actual=450.0)]
        report = run_inference(
            data.temperatures, data.usage, "3PH",
            prior=PriorSpec(baseload=500, slope=80, noise_scale=40000.0),
            reporting=reporting, n_samples=200, random_seed=0,
        )
        assert report.reporting == reporting
        assert report.prior.slope == 80.0

    def test_insufficient_data(self) -> None:
        with pytest.raises(InsufficientDataError):
            run_inference([50, 51, 52, 53], [100, 101, 99, 100], "3PH", n_samples=10)

    def test_unknown_shape(self) -> None:
        with pytest.raises(ValueError, match="model_shape"):
            run_inference([30, 50, 70], [1, 2, 3], "2P")


class TestCLI:
    """Tests for the mv-bayes command."""

    def test_dataset(self, capsys) -> None:
        assert main(["--dataset", "heating", "--samples", "300", "--seed", "1"]) == 0
        out = capsys.readouterr().out
        assert "Model 3PH" in out
        assert "MAP cp=" in out
        assert "P(savings > 0)" in out

    def test_csv(self, tmp_path, capsys) -> None:
        data = get_dataset("cooling")
        path = tmp_path / "baseline.csv"
        rows = "\n".join(f"{t},{e}" for t, e in zip(data.temps, data.energy))
        path.write_text("temperature,energy\n" + rows + "\n")

        code = main(["--csv", str(path), "--shape", "3PC", "--samples", "200", "--seed", "2"])
        assert code == 0
        assert "Model 3PC" in capsys.readouterr().out

    def test_csv_requires_shape(self, tmp_path, capsys) -> None:
        path = tmp_path / "baseline.csv"
        path.write_text("temperature,energy\n30,100\n50,80\n")
        assert main(["--csv", str(path)]) == 2
        assert "--shape" in capsys.readouterr().err

    def test_insufficient_data_exit_code(self, tmp_path, capsys) -> None:
        path = tmp_path / "narrow.csv"
        path.write_text("temperature,energy\n50,100\n51,101\n52,99\n53,100\n")
        assert main(["--csv", str(path), "--shape", "3PH", "--samples", "10"]) == 1
        assert "insufficient data" in capsys.readouterr().err

    def test_blank_csv_cell(self, tmp_path, capsys) -> None:
        """Test that a missing value is reported, not passed to the prior."""
        path = tmp_path / "gaps.csv"
        path.write_text("temperature,energy\n30,900\n50,\n70,400\n80,420\n")
        assert main(["--csv", str(path), "--shape", "3PH", "--samples", "10"]) == 2
        err = capsys.readouterr().err
        assert "missing or non-numeric" in err
        assert "[2]" in err

    @pytest.mark.parametrize("argv", [
        ["--samples", "0"],
        ["--samples", "-5"],
        ["--step", "0"],
        ["--strength", "-1"],
    ])
    def test_non_positive_options_rejected(self, argv, capsys) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["--dataset", "heating"] + argv)
        assert exc.value.code == 2
        assert "positive" in capsys.readouterr().err

    def test_vanishing_strength_rejected(self, capsys) -> None:
        assert main(["--dataset", "heating", "--strength", "1e-120", "--samples", "10"]) == 2
        assert "strength must be at least" in capsys.readouterr().err
