"""
Discretization of numeric columns into small categorical label sets.

Three modes are supported: fixed cut-points, equal-frequency (quantile) bins,
and supervised binning delegated to an external auto-binner.
"""

import numpy as np
import pandas as pd

from ..errors import ConfigurationError, ContractViolation
from .outcome import quantile_breaks
from .table import CATEGORICAL, Column

BIN_MODES = ("fixed", "quantile", "supervised")


def parse_boundaries(boundaries, labels, name="column"):
    if not isinstance(boundaries, (list, tuple, np.ndarray)) or len(boundaries) < 2:
        raise ConfigurationError(
            f"Column '{name}' bin boundaries must be a list with at least 2 values"
        )
    parsed = []
    for idx, value in enumerate(boundaries):
        try:
            parsed.append(float(value))
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Column '{name}' bin boundaries[{idx}] must be numeric"
            ) from None
    if any(b <= a for a, b in zip(parsed, parsed[1:])):
        raise ConfigurationError(
            f"Column '{name}' bin boundaries must be strictly increasing"
        )

    labels = [str(label) for label in labels or []]
    if len(labels) != len(parsed) - 1:
        raise ConfigurationError(
            f"Column '{name}' needs exactly {len(parsed) - 1} bin labels, "
            f"got {len(labels)}"
        )
    if len(set(labels)) != len(labels):
        raise ConfigurationError(f"Column '{name}' bin labels must be unique")
    return parsed, labels


def _already_discretized(values, labels):
    if isinstance(values.dtype, pd.CategoricalDtype):
        observed = values.dropna().astype(str)
    elif pd.api.types.is_numeric_dtype(values):
        return False
    else:
        observed = values.dropna().map(str)
    return bool(set(observed).issubset(labels))


def cut_fixed(values, boundaries, labels, include_lowest=False, name=None):
    """Map each value to the label of the right-closed interval holding it.

    ``B[i-1] < v <= B[i]`` selects ``labels[i-1]``; a value equal to an inner
    boundary lands in the interval that boundary closes. With
    ``include_lowest`` the first interval also holds ``B[0]``. Values outside
    the boundaries and missing values map to missing. Input that already holds
    only these labels is returned unchanged.
    """

    series = pd.Series(values).reset_index(drop=True)
    name = name or series.name or "column"
    boundaries, labels = parse_boundaries(boundaries, labels, name=name)

    if not pd.api.types.is_numeric_dtype(series) or isinstance(
        series.dtype, pd.CategoricalDtype
    ):
        if _already_discretized(series, labels):
            text = series.astype(object).map(lambda v: None if pd.isna(v) else str(v))
            return pd.Series(
                pd.Categorical(text, categories=labels, ordered=True), name=name
            )
        raise ConfigurationError(
            f"Column '{name}' is not numeric and does not hold the bin labels"
        )

    cut = pd.cut(
        series.astype(float),
        bins=boundaries,
        labels=labels,
        right=True,
        include_lowest=bool(include_lowest),
    )
    return pd.Series(pd.Categorical(cut, categories=labels, ordered=True), name=name)


def _format_edge(value):
    return np.format_float_positional(
        float(value), precision=4, unique=False, fractional=False, trim="-"
    )


def interval_labels(breaks):
    labels = []
    for idx in range(len(breaks) - 1):
        left = "[" if idx == 0 else "("
        labels.append(f"{left}{_format_edge(breaks[idx])},{_format_edge(breaks[idx + 1])}]")
    return labels


def cut_quantile(values, k, labels=None, name=None):
    """Equal-frequency bins over the non-missing values, lowest bin closed."""
    series = pd.Series(values).reset_index(drop=True)
    name = name or series.name or "column"
    if not pd.api.types.is_numeric_dtype(series):
        raise ConfigurationError(f"Column '{name}' must be numeric for quantile bins")
    try:
        k = int(k)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Column '{name}' bin count must be an integer") from None
    if k < 2:
        raise ConfigurationError(f"Column '{name}' needs at least 2 quantile bins")

    breaks = quantile_breaks(series, k)
    if labels is None:
        labels = interval_labels(breaks)
        if len(set(labels)) != len(labels):
            labels = [f"Q{idx}" for idx in range(1, k + 1)]
    return cut_fixed(series, breaks, labels, include_lowest=True, name=name)


def _binner_output(result, n_rows, name):
    if isinstance(result, pd.DataFrame):
        if result.shape[1] < 1:
            raise ContractViolation(f"Auto-binner returned no column for '{name}'")
        result = result.iloc[:, 0]
    series = pd.Series(result).reset_index(drop=True)
    if len(series) != n_rows:
        raise ContractViolation(
            f"Auto-binner returned {len(series)} values for '{name}'; expected {n_rows}"
        )
    return series.astype(object).map(lambda v: None if pd.isna(v) else str(v))


def supervised_bin(binner, predictor, outcome):
    """Bin ``predictor`` with an external auto-binner guided by ``outcome``.

    Only rows with an observed outcome are handed over, as a two-column frame
    with the outcome last. Rows whose outcome is missing come back missing.
    """

    if predictor.is_categorical:
        raise ConfigurationError(
            f"Column '{predictor.name}' is already categorical; supervised binning "
            "expects a numeric predictor"
        )
    if not outcome.is_categorical:
        raise ContractViolation(f"Outcome '{outcome.name}' must be categorical")
    if len(predictor) != len(outcome):
        raise ContractViolation(
            f"Predictor '{predictor.name}' and outcome '{outcome.name}' lengths differ"
        )

    observed = ~outcome.missing_mask()
    if not observed.any():
        raise ContractViolation(
            f"Outcome '{outcome.name}' has no observed rows to guide binning"
        )
    frame = pd.DataFrame(
        {
            predictor.name: predictor.values[observed].reset_index(drop=True),
            outcome.name: outcome.values[observed].reset_index(drop=True),
        }
    )
    if frame[outcome.name].isna().any():
        raise ContractViolation(f"Outcome '{outcome.name}' must be fully observed")

    binned = _binner_output(
        binner.auto_bin(frame, index=0), int(observed.sum()), predictor.name
    )
    full = pd.Series([None] * len(predictor), dtype=object)
    full[observed] = binned.to_numpy()
    levels = sorted(set(binned.dropna()))
    return Column(predictor.name, CATEGORICAL, full, levels=levels)


def apply_bin_spec(table, spec, outcome=None, binner=None):
    """Discretize one column of ``table`` according to a parsed bin spec."""
    column = table.require(spec.column)
    if spec.mode == "fixed":
        values = cut_fixed(
            column.values,
            spec.boundaries,
            spec.labels,
            include_lowest=spec.include_lowest,
            name=column.name,
        )
        return Column(column.name, CATEGORICAL, values, levels=list(spec.labels))
    if spec.mode == "quantile":
        values = cut_quantile(
            column.values, spec.bins, labels=spec.labels, name=column.name
        )
        return Column(
            column.name,
            CATEGORICAL,
            values,
            levels=[str(c) for c in values.cat.categories],
        )
    if spec.mode == "supervised":
        if binner is None:
            raise ConfigurationError(
                f"Column '{column.name}' uses supervised binning but no auto-binner "
                "is configured"
            )
        if outcome is None:
            raise ConfigurationError(
                f"Column '{column.name}' uses supervised binning but the outcome "
                "is not available yet"
            )
        return supervised_bin(binner, column, outcome)
    raise ConfigurationError(
        f"Column '{column.name}' bin mode '{spec.mode}' is not supported. "
        f"Use one of: {', '.join(BIN_MODES)}"
    )
