"""Public runtime models for the import-first API."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from ..engine.mining import CombinationResult
from ..engine.pipeline import PipelineResult
from ..schema.config import MiningCall


@dataclass
class RunConfig:
    """Top-level runtime options for one scenario run.

    Unset fields fall back to the scenario metadata, then to package defaults.
    """

    n_rows: int | None = None
    seed: int | None = None
    missing_seed: int | None = None
    log_level: str | None = None
    log_dir: str | None = None
    output_path: str | None = None
    mine: bool = True
    mine_required: bool = False
    mining_calls: list[dict[str, Any]] | None = None


@dataclass
class MiningRun:
    """Results of one miner invocation."""

    call: MiningCall
    results: list[CombinationResult]


@dataclass
class ScenarioResult:
    """Result payload returned by ``ScenarioRunner.run``."""

    scenario: str
    pipeline: PipelineResult
    mining_runs: list[MiningRun] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    runtime_notes: list[str] = field(default_factory=list)
    log_path: Path | None = None
    output_path: Path | None = None

    @property
    def dataframe(self) -> pd.DataFrame:
        return self.pipeline.frame

    @property
    def raw_dataframe(self) -> pd.DataFrame:
        return self.pipeline.raw_frame

    @property
    def outcome(self) -> str:
        return self.pipeline.outcome

    def best(self) -> CombinationResult | None:
        """Top-ranked combination of the first mining run, if any."""

        for run in self.mining_runs:
            if run.results:
                return run.results[0]
        return None
