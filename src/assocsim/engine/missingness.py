"""
MCAR missingness injection.
"""

import numpy as np
import pandas as pd

from ..errors import ConfigurationError

MISSING_POLICIES = ("independent", "disjoint")


def missing_count(n_rows, fraction=None, count=None):
    """Number of cells to blank: ``round(fraction * n)`` or an explicit count."""
    if (fraction is None) == (count is None):
        raise ConfigurationError("Give exactly one of missing fraction or count")
    if fraction is not None:
        try:
            fraction = float(fraction)
        except (TypeError, ValueError):
            raise ConfigurationError("Missing fraction must be numeric") from None
        if not 0.0 < fraction < 1.0:
            raise ConfigurationError("Missing fraction must be in (0, 1)")
        return int(round(fraction * n_rows))
    if isinstance(count, bool):
        raise ConfigurationError("Missing count must be an integer")
    try:
        parsed = int(count)
    except (TypeError, ValueError):
        raise ConfigurationError("Missing count must be an integer") from None
    if parsed != count or parsed < 0 or parsed > n_rows:
        raise ConfigurationError(f"Missing count must be in [0, {n_rows}]")
    return parsed


def blank_positions(series, positions):
    out = pd.Series(series).reset_index(drop=True).copy()
    if len(positions):
        out.iloc[np.asarray(positions, dtype=int)] = np.nan
    return out


def inject_missing(series, rng, fraction=None, count=None):
    """Blank uniformly chosen positions, drawn without replacement.

    Returns the new series and the sorted positions; the input is left as is.
    """

    n_rows = len(series)
    k = missing_count(n_rows, fraction=fraction, count=count)
    if k:
        positions = np.sort(rng.choice(n_rows, size=k, replace=False))
    else:
        positions = np.empty(0, dtype=int)
    return blank_positions(series, positions), positions


def disjoint_positions(n_rows, n_columns, k, rng):
    """Partition one shuffled row order so no two columns share a position."""
    if k * n_columns > n_rows:
        raise ConfigurationError(
            f"Disjoint missingness needs {k * n_columns} rows; table has {n_rows}"
        )
    order = rng.permutation(n_rows)
    return [np.sort(order[idx * k:(idx + 1) * k]) for idx in range(n_columns)]


def inject_missing_columns(
    table,
    columns,
    rng,
    fraction=None,
    count=None,
    policy="independent",
    outcome=None,
    allow_outcome=False,
):
    """Blank cells in each named column of ``table`` in place.

    Returns a mapping of column name to blanked positions.
    """

    columns = list(columns)
    if policy not in MISSING_POLICIES:
        raise ConfigurationError(
            f"Missingness policy '{policy}' is not supported. "
            f"Use one of: {', '.join(MISSING_POLICIES)}"
        )
    if outcome is not None and outcome in columns and not allow_outcome:
        raise ConfigurationError(
            f"Missingness would touch outcome '{outcome}'; enable include_outcome first"
        )
    for name in columns:
        table.require(name)

    n_rows = table.n_rows
    injected = {}
    if policy == "disjoint":
        k = missing_count(n_rows, fraction=fraction, count=count)
        partitions = disjoint_positions(n_rows, len(columns), k, rng)
        for name, positions in zip(columns, partitions):
            column = table.require(name)
            table.replace(column.with_values(blank_positions(column.values, positions)))
            injected[name] = positions
        return injected

    for name in columns:
        column = table.require(name)
        values, positions = inject_missing(
            column.values, rng, fraction=fraction, count=count
        )
        table.replace(column.with_values(values))
        injected[name] = positions
    return injected
