"""
One parametrized pipeline: generate, synthesize outcome, inject gaps, bin,
assemble.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from ..runtime.rng import RNG
from .assembler import AssembledDataset, assemble
from .discretize import apply_bin_spec, cut_fixed
from .missingness import inject_missing_columns
from .outcome import default_labels, discretize_score, synthesize_score
from .table import CATEGORICAL, Column, Table
from .variables import sample_categorical, sample_continuous


@dataclass
class PipelineResult:
    scenario: str
    seed: int
    raw_frame: pd.DataFrame
    score: pd.Series
    dataset: AssembledDataset
    missing_positions: dict[str, np.ndarray] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def frame(self) -> pd.DataFrame:
        return self.dataset.frame

    @property
    def outcome(self) -> str:
        return self.dataset.outcome


def _log(logger, message, quiet=False):
    if logger is not None and not quiet:
        logger.info(message)


def generate_column(spec, rng, n_rows):
    if spec.kind == "categorical":
        return sample_categorical(
            rng, spec.labels, spec.probabilities, n_rows, name=spec.name
        )
    column = sample_continuous(
        rng,
        spec.family,
        spec.params,
        n_rows,
        clamp=spec.clamp,
        decimals=spec.decimals,
        name=spec.name,
    )
    if spec.cut is None:
        return column
    values = cut_fixed(
        column.values,
        spec.cut.boundaries,
        spec.cut.labels,
        include_lowest=spec.cut.include_lowest,
        name=spec.name,
    )
    return Column(spec.name, CATEGORICAL, values, levels=list(spec.cut.labels))


def generate_columns(spec, rng):
    table = Table()
    for col_spec in spec.columns:
        column_rng = rng.spawn("generate", col_spec.name)
        table.add(generate_column(col_spec, column_rng, spec.n_rows))
    return table


def missing_stream(spec, rng):
    """Stream for gap placement; an explicit reseed ignores the run seed."""
    missing = spec.missingness
    if missing is not None and missing.reseed is not None:
        return RNG(missing.reseed)
    return rng.spawn("missing")


def _inject(table, spec, rng, logger, quiet):
    missing = spec.missingness
    positions = inject_missing_columns(
        table,
        missing.columns,
        rng,
        fraction=missing.fraction,
        count=missing.count,
        policy=missing.policy,
        outcome=spec.outcome.name,
    )
    total = sum(len(p) for p in positions.values())
    _log(
        logger,
        "[MISSINGNESS] "
        f"timing={missing.timing} policy={missing.policy} "
        f"columns={len(positions)} cells={total}",
        quiet,
    )
    return positions


def synthesize_outcome(table, spec, rng):
    outcome = spec.outcome
    breakdown = synthesize_score(table, outcome.terms, outcome.noise, rng)
    labels = (
        list(outcome.labels)
        if outcome.labels is not None
        else default_labels(outcome.levels, outcome.prefix)
    )
    values = discretize_score(
        breakdown.score, outcome.levels, method=outcome.method, labels=labels
    )
    return breakdown.score, Column(outcome.name, CATEGORICAL, values, levels=labels)


def bin_columns(table, spec, binner=None):
    outcome = table.require(spec.outcome.name, CATEGORICAL)
    for bin_spec in spec.binning:
        binned = apply_bin_spec(table, bin_spec, outcome=outcome, binner=binner)
        column = Column(bin_spec.output, CATEGORICAL, binned.values, levels=binned.levels)
        if bin_spec.output in table:
            table.replace(column)
        else:
            table.add(column)
    return table


def build_dataset(spec, binner=None, logger=None, quiet=False):
    """Run every stage for one scenario and return the miner-ready dataset."""
    rng = RNG(spec.seed)
    table = generate_columns(spec, rng)
    _log(
        logger,
        f"[GENERATE] scenario={spec.name} rows={spec.n_rows} "
        f"columns={len(table)} seed={spec.seed}",
        quiet,
    )

    gap_rng = missing_stream(spec, rng)
    positions = {}
    missing = spec.missingness
    if missing is not None and missing.timing == "before_outcome":
        positions.update(_inject(table, spec, gap_rng, logger, quiet))

    score, outcome_column = synthesize_outcome(table, spec, rng.spawn("noise"))
    table.add(outcome_column)
    _log(
        logger,
        "[OUTCOME] "
        f"name={spec.outcome.name} method={spec.outcome.method} "
        f"levels={spec.outcome.levels} missing={outcome_column.missing_count()}",
        quiet,
    )

    if missing is not None and missing.timing == "after_outcome":
        positions.update(_inject(table, spec, gap_rng, logger, quiet))
    if missing is not None and missing.include_outcome:
        positions.update(
            inject_missing_columns(
                table,
                [spec.outcome.name],
                gap_rng,
                fraction=missing.fraction,
                count=missing.count,
                outcome=spec.outcome.name,
                allow_outcome=True,
            )
        )

    raw_frame = table.to_frame()

    bin_columns(table, spec, binner=binner)
    if spec.binning:
        _log(logger, f"[BINNING] columns={len(spec.binning)}", quiet)

    warnings = []
    predictors = spec.dataset.predictors
    if predictors is None:
        predictors = [
            c.name for c in table if c.is_categorical and c.name != spec.outcome.name
        ]
        left_out = [c.name for c in table if not c.is_categorical]
        if left_out:
            warnings.append(f"Numeric columns left out of the dataset: {left_out}")

    dataset = assemble(
        table,
        spec.outcome.name,
        predictors=list(predictors),
        max_predictor_levels=spec.dataset.max_predictor_levels,
        max_outcome_levels=spec.dataset.max_outcome_levels,
    )
    warnings.extend(dataset.warnings)
    _log(
        logger,
        "[ASSEMBLE] "
        f"rows={len(dataset.frame)} dropped={dataset.dropped_rows} "
        f"predictors={len(dataset.predictors)}",
        quiet,
    )
    if logger is not None:
        for warning in warnings:
            logger.warning(f"  - {warning}")

    return PipelineResult(
        scenario=spec.name,
        seed=spec.seed,
        raw_frame=raw_frame,
        score=score,
        dataset=dataset,
        missing_positions=positions,
        warnings=warnings,
    )
