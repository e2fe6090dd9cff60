"""Convergence study: grid options of the 2-D Simpson integrator.

Integrates a toy differential distribution d2N/dW dQ2, a Breit-Wigner peak in
the invariant mass W times a dipole fall-off in Q2, with every combination of
linear/logarithmic spacing and slow/fast density increase.

## Key Observations

- Log spacing needs fewer evaluations when the integrand spans decades in Q2.
- Fast density increase quadruples the 2-D grid every iteration, so it
  converges in fewer iterations but can overshoot the number of points needed.
- Slow density increase refines W and Q2 alternately; every refinement after
  the first only evaluates the newly inserted midpoints.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from gridquad import (
    ConvergenceFailure,
    FunctionAdapter,
    IntegrationResult,
    IntegratorConfig,
    Simpson2D,
    enable_console_logging,
)

W_RANGE = (1.1, 1.6)  # GeV
Q2_RANGE = (0.01, 10.0)  # GeV^2

RESONANCE_MASS = 1.232
RESONANCE_WIDTH = 0.12
DIPOLE_MASS2 = 0.71


def toy_distribution(w: float, q2: float) -> float:
    """Breit-Wigner in W times a dipole form factor squared in Q2."""
    bw = (RESONANCE_WIDTH / 2) ** 2 / ((w - RESONANCE_MASS) ** 2 + (RESONANCE_WIDTH / 2) ** 2)
    dipole = 1.0 / (1.0 + q2 / DIPOLE_MASS2) ** 2
    return bw * dipole**2


@dataclass
class StudyResult:
    label: str
    config: IntegratorConfig
    result: IntegrationResult


def run_study(max_error: float = 0.01) -> list[StudyResult]:
    function = FunctionAdapter(toy_distribution, bounds=[W_RANGE, Q2_RANGE])
    results = []
    for in_loge in (False, True):
        for fast in (False, True):
            config = IntegratorConfig(
                max_iterations=24,
                initial_nstep=2,
                max_error=max_error,
                in_loge=in_loge,
                fast_density_increase=fast,
            )
            label = f"{'log' if in_loge else 'linear'} / {'fast' if fast else 'slow'}"
            results.append(StudyResult(label, config, Simpson2D(config).integrate_info(function)))
    return results


def print_summary(results: list[StudyResult]) -> None:
    rows = [
        {
            "configuration": r.label,
            "converged": r.result.converged,
            "integral": r.result.value,
            "error_pct": r.result.error_pct,
            "iterations": r.result.iterations,
            "evaluations": r.result.function_calls,
            "final_grid": r.result.n_points,
        }
        for r in results
    ]
    print("\n" + "=" * 70)
    print("CONVERGENCE STUDY")
    print("=" * 70)
    print(pd.DataFrame(rows).to_string(index=False))
    print("=" * 70)


def visualize_results(results: list[StudyResult], output_dir: Path) -> None:
    """Plot estimated error against cumulative function evaluations."""
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    output_dir.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(8, 5))
    for r in results:
        df = r.result.to_dataframe()
        df["evaluations"] = df["new_evaluations"].cumsum()
        df = df.dropna(subset=["error_pct"])
        ax.loglog(df["evaluations"], df["error_pct"], marker="o", label=r.label)

    ax.axhline(results[0].config.max_error, color="grey", linestyle="--", label="max error")
    ax.set_xlabel("Function evaluations")
    ax.set_ylabel("Estimated error [%]")
    ax.set_title("Simpson2D convergence")
    ax.grid(True, which="both", alpha=0.2)
    ax.legend()
    fig.tight_layout()

    path = output_dir / "convergence_study.png"
    fig.savefig(path, dpi=150)
    plt.close(fig)
    print(f"Saved: {path}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Simpson2D convergence study")
    parser.add_argument("--max-error", type=float, default=0.01, help="percent")
    parser.add_argument("--output", type=str, default="output/convergence_study")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--no-viz", action="store_true")
    args = parser.parse_args()

    if args.verbose:
        enable_console_logging(level="INFO")

    results = run_study(max_error=args.max_error)
    print_summary(results)

    if not args.no_viz:
        visualize_results(results, Path(args.output))

    failed = [r for r in results if not r.result.converged]
    if failed:
        raise ConvergenceFailure(failed[0].result, failed[0].config.max_error)
