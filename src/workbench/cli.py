"""
Command-line entry point: baseline fit and savings posterior in one run.

Examples
--------
    mv-bayes --dataset heating
    mv-bayes --csv baseline.csv --shape 3PC --samples 20000 --seed 1
    python -m workbench.cli --dataset mixed --strength 0.01 -v

CSV input: two columns (temperature, energy) with a header row.
"""

from typing import List, Optional
import argparse
import logging
import sys
import numpy as np

from changepoint import InsufficientDataError, ScanSettings
from regression import MODEL_SHAPES, PARAM_NAMES, default_prior_spec
from simulation import DEFAULT_N_SAMPLES
from workbench.datasets import DATASETS, get_dataset
from workbench.pipeline import InferenceReport, run_inference

logger = logging.getLogger(__name__)


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer. Got {text}")
    return value


def _positive_float(text: str) -> float:
    value = float(text)
    if not value > 0:
        raise argparse.ArgumentTypeError(f"must be a positive number. Got {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mv-bayes",
        description="Bayesian change-point baseline and savings uncertainty",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--dataset", choices=sorted(DATASETS), help="bundled sample building")
    source.add_argument("--csv", help="CSV file with temperature,energy columns")
    parser.add_argument("--shape", choices=MODEL_SHAPES,
                        help="model shape (default: the dataset's suggested shape)")
    parser.add_argument("--samples", type=_positive_int, default=DEFAULT_N_SAMPLES,
                        help=f"Monte Carlo draws (default {DEFAULT_N_SAMPLES})")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--strength", type=_positive_float, default=None,
                        help="prior precision multiplier")
    parser.add_argument("--step", type=_positive_float, default=None,
                        help="change-point grid step for 3PH/3PC")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for INFO, -vv for DEBUG logging")
    return parser


def format_report(report: InferenceReport, unit: str = "") -> str:
    """Plain-text summary of an inference run."""
    post = report.posterior
    names = PARAM_NAMES[report.model_shape]
    lines = [f"Model {report.model_shape}: {len(report.candidates)} change-point candidates"]

    cps = f"cp={report.cp1:g}" + (f", cp2={report.cp2:g}" if report.cp2 is not None else "")
    lines.append(f"MAP {cps} (posterior {report.best.posterior:.3f}, log-ML {post.log_ml:.2f})")

    for name, summary in zip(names, report.param_posteriors):
        lo, hi = summary.ci95
        lines.append(f"  {name:<14} {summary.mean:12.3f}   95% CI [{lo:.3f}, {hi:.3f}]")
    lines.append(f"  noise variance {post.noise_variance:12.3f}")

    if report.ols is not None:
        beta = ", ".join(f"{b:.3f}" for b in report.ols.beta)
        lines.append(
            f"OLS: beta [{beta}], R² {report.ols.r2:.3f}, CV(RMSE) {report.ols.cv_rmse:.1f}%"
        )
    else:
        lines.append("OLS: no qualifying change-point fit")

    s = report.savings
    lines.append(
        f"Savings over {len(report.reporting)} periods: mean {s.mean:.1f} {unit}".rstrip()
    )
    lines.append(f"  median {s.median:.1f}, 80% CI [{s.ci80[0]:.1f}, {s.ci80[1]:.1f}], "
                 f"95% CI [{s.ci95[0]:.1f}, {s.ci95[1]:.1f}]")
    lines.append(f"  P(savings > 0) = {s.probability_positive():.3f}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    unit = ""
    if args.dataset:
        dataset = get_dataset(args.dataset)
        temps, energy = dataset.temperatures, dataset.usage
        shape = args.shape or dataset.suggested_shape
        unit = dataset.unit
    else:
        if args.shape is None:
            print("error: --shape is required with --csv", file=sys.stderr)
            return 2
        data = np.genfromtxt(args.csv, delimiter=",", skip_header=1)
        data = np.atleast_2d(data)
        if data.shape[1] < 2:
            print(f"error: {args.csv} needs temperature and energy columns", file=sys.stderr)
            return 2
        finite = np.all(np.isfinite(data[:, :2]), axis=1)
        if not np.all(finite):
            bad = [int(i) + 1 for i in np.flatnonzero(~finite)]
            print(f"error: {args.csv} has missing or non-numeric values in data rows {bad}",
                  file=sys.stderr)
            return 2
        temps, energy = data[:, 0], data[:, 1]
        shape = args.shape

    prior = default_prior_spec(temps, energy, shape)
    if args.strength is not None:
        try:
            prior = prior.replace(strength=args.strength)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2

    try:
        report = run_inference(
            temps, energy, shape,
            prior=prior,
            n_samples=args.samples,
            settings=ScanSettings(step=args.step) if args.step is not None else None,
            random_seed=args.seed,
        )
    except InsufficientDataError as exc:
        logger.warning("%s", exc)
        print(f"insufficient data: {exc}", file=sys.stderr)
        return 1

    print(format_report(report, unit))
    return 0


if __name__ == "__main__":
    sys.exit(main())
