"""Command-line interface for assocsim."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from .. import __version__
from ..engine.mining import format_results
from ..engine.summary import format_summary, summarize_dataset
from ..schema.samples import available_sample_configs, get_sample_config, load_config
from .models import RunConfig
from .scenario import ScenarioRunner


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assocsim",
        description=(
            "Build a synthetic association-mining dataset from a sample or "
            "YAML config and rank predictor combinations."
        ),
    )
    parser.add_argument(
        "--sample",
        type=str,
        help="Run one built-in scenario by name (use --list-samples to inspect)",
    )
    parser.add_argument("--config", type=str, help="Path to YAML config file")
    parser.add_argument(
        "--list-samples",
        action="store_true",
        help="Print available built-in scenarios and exit",
    )
    parser.add_argument("--rows", type=int, help="Number of rows to generate")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument(
        "--missing-seed",
        type=int,
        help="Separate seed for placing missing values",
    )
    parser.add_argument("--output", type=str, help="Output file path or directory")
    parser.add_argument(
        "--no-mine",
        action="store_true",
        help="Build the dataset only, do not call the miner",
    )
    parser.add_argument(
        "--mine-required",
        action="store_true",
        help="Fail if Rscript is unavailable instead of skipping mining",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print descriptive statistics and frequency tables",
    )
    parser.add_argument(
        "--log-level",
        choices=["info", "quiet"],
        help="Log verbosity",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print package version and exit",
    )
    return parser


def _print_guidance() -> None:
    print("assocsim CLI")
    print("No command arguments provided.")
    print()
    print("Quick test paths:")
    print("- Script:   python sample_run.py")
    print()
    print("Direct CLI examples:")
    print("- python -m assocsim --list-samples")
    print("- python -m assocsim --sample ground_truth --no-mine --summary")
    print("- python -m assocsim --config scenario.yaml --rows 2000 --seed 7")


def _load_runtime_config(args: argparse.Namespace):
    if args.sample:
        return get_sample_config(args.sample)

    config_path = Path(args.config).expanduser()
    if not config_path.exists() or not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    return load_config(config_path.read_text(encoding="utf-8"))


def _build_run_config(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        n_rows=args.rows,
        seed=args.seed,
        missing_seed=args.missing_seed,
        log_level=args.log_level,
        output_path=args.output,
        mine=not args.no_mine,
        mine_required=bool(args.mine_required),
    )


def main(argv: Sequence[str] | None = None) -> int:
    args_list = list(argv) if argv is not None else sys.argv[1:]
    if not args_list:
        _print_guidance()
        return 0

    parser = _build_parser()
    args = parser.parse_args(args_list)

    if args.version:
        print(__version__)
        return 0

    if args.list_samples:
        print("Available sample configs:")
        for name in available_sample_configs():
            print(f"- {name}")
        return 0

    if args.sample and args.config:
        parser.error("Use either --sample or --config, not both")

    if not args.sample and not args.config:
        parser.error(
            "Provide --sample <name> or --config <path>. "
            "Run without arguments to view guided examples."
        )

    try:
        config = _load_runtime_config(args)
        run_cfg = _build_run_config(args)
        result = ScenarioRunner(config, run_cfg).run()
    except Exception as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    frame = result.dataframe
    print(
        f"[FINAL SUMMARY] scenario={result.scenario} rows={len(frame)} "
        f"columns={len(frame.columns)} outcome={result.outcome} "
        f"mining_runs={len(result.mining_runs)} "
        f"output={result.output_path} log={result.log_path}"
    )
    if args.summary:
        print(format_summary(summarize_dataset(result.raw_dataframe)))
    for run in result.mining_runs:
        print(format_results(run.results, title=f"[RESULTS] {run.call.describe()}"))
    for warning in result.warnings:
        print(f"[WARN] {warning}")
    for note in result.runtime_notes:
        print(f"[NOTE] {note}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
