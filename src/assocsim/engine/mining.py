"""
Contract checks and result handling around the external combination miner.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Protocol

import pandas as pd

from .. import defaults
from ..errors import BackendError, ContractViolation
from .assembler import level_count


class CombinationMiner(Protocol):
    def mine_combination(
        self,
        frame: pd.DataFrame,
        combination_size: int | None = None,
        result_count: int | None = None,
    ) -> list[Any]: ...


class AutoBinner(Protocol):
    def auto_bin(self, frame: pd.DataFrame, index: int = 0) -> Any: ...


@dataclass(frozen=True)
class CombinationResult:
    """One ranked variable combination reported by the miner."""

    variables: tuple[str, ...]
    estimate: float
    confidence_interval: tuple[float, float]
    z_score: float
    p_value: float

    @classmethod
    def from_mapping(cls, payload) -> "CombinationResult":
        try:
            variables = payload["variables"]
            if isinstance(variables, str):
                variables = [variables]
            low, high = payload["confidence_interval"]
            return cls(
                variables=tuple(str(v) for v in variables),
                estimate=float(payload["estimate"]),
                confidence_interval=(float(low), float(high)),
                z_score=float(payload["z_score"]),
                p_value=float(payload["p_value"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise BackendError(f"Malformed miner result: {payload!r}") from exc


def check_mining_preconditions(
    frame, outcome, level_ceiling=defaults.MINER_LEVEL_CEILING
):
    """Raise ``ContractViolation`` unless ``frame`` is ready for the miner."""
    if not isinstance(frame, pd.DataFrame):
        raise ContractViolation("Miner input must be a pandas DataFrame")
    if frame.shape[1] < 2:
        raise ContractViolation("Miner input needs at least one predictor and the outcome")
    if frame.empty:
        raise ContractViolation("Miner input has no rows")
    if frame.columns[-1] != outcome:
        raise ContractViolation(
            f"Outcome '{outcome}' must be the last column, found '{frame.columns[-1]}'"
        )
    missing = int(frame[outcome].isna().sum())
    if missing:
        raise ContractViolation(
            f"Outcome '{outcome}' has {missing} missing values; drop those rows first"
        )

    for name in frame.columns:
        series = frame[name]
        if pd.api.types.is_float_dtype(series):
            raise ContractViolation(
                f"Column '{name}' is continuous; discretize it before mining"
            )
        levels = level_count(series)
        if level_ceiling is not None and levels > level_ceiling:
            raise ContractViolation(
                f"Column '{name}' has {levels} levels; the miner ceiling is "
                f"{level_ceiling}"
            )


def resolve_result_count(combination_size, result_count):
    if combination_size is not None:
        combination_size = int(combination_size)
        if combination_size < 1:
            raise ContractViolation("Combination size must be >= 1")
        if result_count is None:
            result_count = defaults.DEFAULT_RESULT_COUNT
    if result_count is not None:
        result_count = int(result_count)
        if result_count < 1:
            raise ContractViolation("Result count must be >= 1")
    return combination_size, result_count


def mine(
    frame,
    miner,
    outcome,
    combination_size=None,
    result_count=None,
    level_ceiling=defaults.MINER_LEVEL_CEILING,
    logger=None,
):
    """Validate ``frame`` and hand a copy of it to ``miner``.

    With no combination size the miner picks both the size and the variables.
    With a fixed size and no result count the top three are requested.
    """

    check_mining_preconditions(frame, outcome, level_ceiling=level_ceiling)
    n_predictors = frame.shape[1] - 1
    combination_size, result_count = resolve_result_count(
        combination_size, result_count
    )
    if combination_size is not None and combination_size > n_predictors:
        raise ContractViolation(
            f"Combination size {combination_size} exceeds the {n_predictors} predictors"
        )

    if logger is not None:
        logger.info(
            "[MINING] "
            f"rows={len(frame)} predictors={n_predictors} "
            f"combination_size={combination_size} result_count={result_count}"
        )
    raw = miner.mine_combination(
        frame.copy(), combination_size=combination_size, result_count=result_count
    )

    results = []
    for item in raw or []:
        if isinstance(item, CombinationResult):
            results.append(item)
        else:
            results.append(CombinationResult.from_mapping(item))

    known = set(frame.columns[:-1])
    for result in results:
        unknown = [v for v in result.variables if v not in known]
        if unknown:
            raise BackendError(f"Miner reported unknown variables: {unknown}")

    results.sort(key=lambda r: r.estimate, reverse=True)
    if result_count is not None:
        results = results[:result_count]
    return results


def _fmt(value, digits=4):
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "NA"
    return f"{value:.{digits}f}"


def format_results(results, title=None):
    """Plain-text ranked table of combination results."""
    lines = []
    if title:
        lines.append(title)
    if not results:
        lines.append("  (no combinations reported)")
        return "\n".join(lines)

    header = f"{'rank':>4}  {'estimate':>8}  {'ci':>19}  {'z':>8}  {'p':>10}  variables"
    lines.append(header)
    for rank, result in enumerate(results, start=1):
        low, high = result.confidence_interval
        ci = f"[{_fmt(low)}, {_fmt(high)}]"
        p_value = f"{result.p_value:.3g}" if not math.isnan(result.p_value) else "NA"
        lines.append(
            f"{rank:>4}  {_fmt(result.estimate):>8}  {ci:>19}  "
            f"{_fmt(result.z_score, 2):>8}  {p_value:>10}  "
            f"{', '.join(result.variables)}"
        )
    return "\n".join(lines)
