"""
Assemble named columns into the frame handed to the miner.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

from .. import defaults
from ..errors import ContractViolation
from .table import Table


@dataclass
class AssembledDataset:
    frame: pd.DataFrame
    outcome: str
    rows_before: int
    dropped_rows: int
    warnings: list[str] = field(default_factory=list)

    @property
    def predictors(self) -> list[str]:
        return [name for name in self.frame.columns if name != self.outcome]


def level_count(series) -> int:
    return int(series.dropna().nunique())


def cardinality_warnings(
    frame,
    outcome,
    max_predictor_levels=defaults.DEFAULT_MAX_PREDICTOR_LEVELS,
    max_outcome_levels=defaults.DEFAULT_MAX_OUTCOME_LEVELS,
):
    warnings = []
    for name in frame.columns:
        limit = max_outcome_levels if name == outcome else max_predictor_levels
        levels = level_count(frame[name])
        if limit is not None and levels > limit:
            role = "outcome" if name == outcome else "predictor"
            warnings.append(
                f"{role} '{name}' has {levels} levels (limit {limit}); "
                "mining combinatorics grow quickly"
            )
    return warnings


def assemble(
    data,
    outcome,
    predictors=None,
    max_predictor_levels=defaults.DEFAULT_MAX_PREDICTOR_LEVELS,
    max_outcome_levels=defaults.DEFAULT_MAX_OUTCOME_LEVELS,
):
    """Concatenate predictors, put the outcome last and drop rows missing it."""
    frame = data.to_frame() if isinstance(data, Table) else pd.DataFrame(data)
    if outcome not in frame.columns:
        raise ContractViolation(f"Outcome '{outcome}' is not among the columns")

    if predictors is None:
        predictors = [name for name in frame.columns if name != outcome]
    else:
        predictors = list(predictors)
        unknown = [name for name in predictors if name not in frame.columns]
        if unknown:
            raise ContractViolation(f"Unknown predictor columns: {unknown}")
        if outcome in predictors:
            raise ContractViolation(f"Outcome '{outcome}' cannot also be a predictor")
    if not predictors:
        raise ContractViolation("Dataset needs at least one predictor")

    ordered = frame[predictors + [outcome]]
    rows_before = len(ordered)
    kept = ordered[ordered[outcome].notna()].reset_index(drop=True)

    warnings = cardinality_warnings(
        kept,
        outcome,
        max_predictor_levels=max_predictor_levels,
        max_outcome_levels=max_outcome_levels,
    )
    return AssembledDataset(
        frame=kept,
        outcome=outcome,
        rows_before=rows_before,
        dropped_rows=rows_before - len(kept),
        warnings=warnings,
    )
