"""
Typed column container used by every pipeline stage.

A ``Table`` is an ordered mapping from column name to ``Column``. Stages look
columns up through ``Table.require`` so a formula that references a missing
column, or treats a categorical column as numeric, fails before any
arithmetic happens.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

import numpy as np
import pandas as pd

from ..errors import ConfigurationError

CATEGORICAL = "categorical"
NUMERIC = "numeric"
_KINDS = (CATEGORICAL, NUMERIC)


@dataclass
class Column:
    """One named column with a uniform kind and a declared domain."""

    name: str
    kind: str
    values: pd.Series
    levels: list[str] | None = None
    clamp: tuple[float, float] | None = None
    ordered: bool | None = None

    def __post_init__(self):
        if self.kind not in _KINDS:
            raise ConfigurationError(
                f"Column '{self.name}' kind must be one of {', '.join(_KINDS)}"
            )
        values = pd.Series(self.values).reset_index(drop=True)
        values.name = self.name
        if self.kind == CATEGORICAL:
            if self.ordered is None:
                self.ordered = isinstance(
                    values.dtype, pd.CategoricalDtype
                ) and bool(values.cat.ordered)
            if self.levels is None and isinstance(values.dtype, pd.CategoricalDtype):
                self.levels = [str(level) for level in values.cat.categories]
            elif self.levels is None:
                observed = pd.unique(values.dropna())
                self.levels = [str(level) for level in observed]
            values = _as_categorical(values, self.levels, self.name, self.ordered)
        else:
            values = pd.to_numeric(values, errors="raise").astype(float)
        self.values = values

    def __len__(self):
        return len(self.values)

    @property
    def is_categorical(self) -> bool:
        return self.kind == CATEGORICAL

    def missing_mask(self) -> np.ndarray:
        return self.values.isna().to_numpy()

    def missing_count(self) -> int:
        return int(self.values.isna().sum())

    def with_values(self, values) -> "Column":
        """Return a copy of this column holding ``values`` (same kind and domain)."""
        return Column(
            name=self.name,
            kind=self.kind,
            values=pd.Series(values),
            levels=list(self.levels) if self.levels is not None else None,
            clamp=self.clamp,
            ordered=self.ordered,
        )


def _as_categorical(values, levels, name, ordered=False):
    levels = [str(level) for level in levels]
    if len(set(levels)) != len(levels):
        raise ConfigurationError(f"Column '{name}' levels must be unique")
    text = values.astype(object).where(values.notna(), None)
    text = text.map(lambda v: None if pd.isna(v) else str(v))
    unknown = sorted({v for v in text.dropna() if v not in levels})
    if unknown:
        raise ConfigurationError(
            f"Column '{name}' has values outside its levels: {unknown[:5]}"
        )
    return pd.Series(
        pd.Categorical(text, categories=levels, ordered=bool(ordered)), name=name
    )


@dataclass
class Table:
    """Ordered collection of equal-length columns."""

    columns: dict[str, Column] = field(default_factory=dict)

    def __post_init__(self):
        columns = self.columns
        self.columns = {}
        for column in columns.values():
            self.add(column)

    def __contains__(self, name) -> bool:
        return name in self.columns

    def __iter__(self) -> Iterator[Column]:
        return iter(self.columns.values())

    def __len__(self):
        return len(self.columns)

    @property
    def names(self) -> list[str]:
        return list(self.columns)

    @property
    def n_rows(self) -> int:
        for column in self.columns.values():
            return len(column)
        return 0

    def add(self, column: Column) -> None:
        if self.columns and len(column) != self.n_rows:
            raise ConfigurationError(
                f"Column '{column.name}' has {len(column)} rows; "
                f"table has {self.n_rows}"
            )
        self.columns[column.name] = column

    def replace(self, column: Column) -> None:
        if column.name not in self.columns:
            raise KeyError(column.name)
        if len(column) != self.n_rows:
            raise ConfigurationError(
                f"Column '{column.name}' has {len(column)} rows; "
                f"table has {self.n_rows}"
            )
        self.columns[column.name] = column

    def require(self, name, kind=None) -> Column:
        """Look a column up, optionally checking its kind."""
        column = self.columns.get(name)
        if column is None:
            raise ConfigurationError(
                f"Unknown column '{name}'. Available: {', '.join(self.names)}"
            )
        if kind is not None and column.kind != kind:
            raise ConfigurationError(
                f"Column '{name}' is {column.kind}; expected {kind}"
            )
        return column

    def to_frame(self, names=None) -> pd.DataFrame:
        selected = self.names if names is None else list(names)
        data = {name: self.require(name).values for name in selected}
        return pd.DataFrame(data)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "Table":
        table = cls()
        for name in frame.columns:
            series = frame[name]
            if pd.api.types.is_numeric_dtype(series) and not isinstance(
                series.dtype, pd.CategoricalDtype
            ):
                table.add(Column(str(name), NUMERIC, series))
            else:
                levels = None
                if isinstance(series.dtype, pd.CategoricalDtype):
                    levels = [str(c) for c in series.cat.categories]
                table.add(Column(str(name), CATEGORICAL, series, levels=levels))
        return table
