"""High-level runner: build a scenario dataset and hand it to the miner."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any

from .. import defaults
from ..backends.rscript import RscriptCasmiBackend
from ..engine.mining import format_results, mine
from ..engine.pipeline import build_dataset
from ..errors import ConfigurationError
from ..runtime.logging_utils import close_run_logger, setup_run_logger
from ..schema.config import MiningCall, parse_mining_calls, parse_scenario
from ..schema.samples import load_config
from ..schema.validation import validate_config
from .models import MiningRun, RunConfig, ScenarioResult

_VALID_LOG_LEVELS = {"info", "quiet"}
_OUTPUT_SUFFIXES = {".csv", ".xlsx"}


def _normalize_choice(value: Any, allowed: set[str], fallback: str) -> str:
    text = str(value).strip().lower() if value is not None else ""
    if text in allowed:
        return text
    return fallback


def _timestamped_output_name(scenario: str) -> str:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    return f"{stamp}_{scenario}.csv"


def _resolve_output_path(output_path: str | None, scenario: str) -> Path | None:
    if output_path is None:
        return None
    text = str(output_path).strip()
    if not text:
        return None

    path = Path(text).expanduser()
    is_dir = (
        text.endswith("/")
        or text.endswith("\\")
        or path.suffix == ""
        or (path.exists() and path.is_dir())
    )
    if is_dir:
        path = path / _timestamped_output_name(scenario)
    if path.suffix.lower() not in _OUTPUT_SUFFIXES:
        raise ConfigurationError(
            f"Output must end with one of {', '.join(sorted(_OUTPUT_SUFFIXES))}"
        )
    return path


def write_dataset(frame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".xlsx":
        try:
            frame.to_excel(path, index=False)
        except ModuleNotFoundError as exc:
            if getattr(exc, "name", "") == "openpyxl":
                raise RuntimeError(
                    "Saving Excel output requires openpyxl. "
                    "Install with `pip install openpyxl`."
                ) from exc
            raise
    else:
        frame.to_csv(path, index=False, na_rep="NA")
    return path


class ScenarioRunner:
    """Facade that runs one config-driven scenario end to end.

    ``miner`` and ``binner`` default to the Rscript CASMI backend. Any object
    with ``mine_combination`` / ``auto_bin`` methods can stand in for them.
    """

    def __init__(
        self,
        config: Any,
        run_config: RunConfig | None = None,
        miner=None,
        binner=None,
    ):
        self._config = load_config(config)
        self.run_config = run_config or RunConfig()
        self.miner = miner
        self.binner = binner

    def _mining_calls(self, spec) -> tuple[MiningCall, ...]:
        if self.run_config.mining_calls is None:
            return spec.mining
        return parse_mining_calls(list(self.run_config.mining_calls))

    def run(self) -> ScenarioResult:
        config = self._config
        metadata = config.get("metadata", {}) if isinstance(config, dict) else {}
        if not isinstance(metadata, dict):
            metadata = {}

        log_level = _normalize_choice(
            self.run_config.log_level
            if self.run_config.log_level is not None
            else metadata.get("log_level", defaults.DEFAULT_LOG_LEVEL),
            _VALID_LOG_LEVELS,
            defaults.DEFAULT_LOG_LEVEL,
        )
        quiet = log_level == "quiet"
        logger, log_path = setup_run_logger(
            log_dir=self.run_config.log_dir,
            name="assocsim",
            run_label=metadata.get("name"),
            quiet=quiet,
        )
        try:
            return self._run(config, logger, log_path, quiet)
        finally:
            close_run_logger(logger)

    def _run(self, config, logger, log_path, quiet) -> ScenarioResult:
        runtime_notes = []
        warnings = validate_config(config)
        if warnings and not quiet:
            logger.warning("[CONFIG WARNINGS]")
            for warning in warnings:
                logger.warning(f"  - {warning}")

        spec = parse_scenario(
            config, n_rows=self.run_config.n_rows, seed=self.run_config.seed
        )
        if self.run_config.missing_seed is not None:
            if spec.missingness is None:
                runtime_notes.append("missing_seed ignored: scenario has no missingness")
            else:
                spec = replace(
                    spec,
                    missingness=replace(
                        spec.missingness, reseed=int(self.run_config.missing_seed)
                    ),
                )

        backend = None
        needs_binner = any(b.mode == "supervised" for b in spec.binning)
        if (needs_binner and self.binner is None) or (
            self.run_config.mine and self.miner is None
        ):
            backend = RscriptCasmiBackend(logger=logger)
        binner = self.binner if self.binner is not None else backend

        pipeline = build_dataset(spec, binner=binner, logger=logger, quiet=quiet)
        warnings.extend(pipeline.warnings)

        output_file = _resolve_output_path(self.run_config.output_path, spec.name)
        if output_file is not None:
            write_dataset(pipeline.frame, output_file)
            if not quiet:
                logger.info(f"[OUTPUT] {output_file}")

        mining_runs = []
        miner = self.miner if self.miner is not None else backend
        if not self.run_config.mine:
            runtime_notes.append("Mining skipped by run configuration")
        elif self.miner is None and not backend.is_available():
            if self.run_config.mine_required:
                raise RuntimeError(
                    "Mining was requested as required, but Rscript is not installed"
                )
            runtime_notes.append(
                "Rscript is unavailable; dataset built but mining was skipped"
            )
        else:
            for call in self._mining_calls(spec):
                results = mine(
                    pipeline.frame,
                    miner,
                    pipeline.outcome,
                    combination_size=call.combination_size,
                    result_count=call.result_count,
                    logger=None if quiet else logger,
                )
                mining_runs.append(MiningRun(call=call, results=results))
                if not quiet:
                    title = f"[RESULTS] {call.describe()}"
                    logger.info(format_results(results, title=title))

        if not quiet:
            logger.info(
                f"[FINAL] scenario={spec.name} rows={len(pipeline.frame)} "
                f"mining_runs={len(mining_runs)} log={log_path}"
            )

        return ScenarioResult(
            scenario=spec.name,
            pipeline=pipeline,
            mining_runs=mining_runs,
            warnings=warnings,
            runtime_notes=runtime_notes,
            log_path=Path(log_path),
            output_path=output_file,
        )


def run_scenario(
    config: Any, run_config: RunConfig | None = None, miner=None, binner=None
) -> ScenarioResult:
    """Convenience function for one-off scenario runs."""

    return ScenarioRunner(config, run_config, miner=miner, binner=binner).run()
