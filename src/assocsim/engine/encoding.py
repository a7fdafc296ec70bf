"""
Explicit categorical-to-numeric encodings used by the outcome formula.

Each encoder returns a new numeric ``Column``; the source column is never
modified, so the mapping used for an outcome can be inspected on its own.
"""

import numpy as np
import pandas as pd

from ..errors import ConfigurationError
from .table import NUMERIC, Column


def _labels_as_text(column):
    values = column.values.astype(object)
    return values.where(values.isna(), values.astype(str))


def ordinal_mapping(levels):
    levels = [str(level) for level in levels or []]
    if not levels:
        raise ConfigurationError("Ordinal encoding needs at least one level")
    if len(set(levels)) != len(levels):
        raise ConfigurationError("Ordinal encoding levels must be unique")
    return {label: float(idx + 1) for idx, label in enumerate(levels)}


def ordinal_encode(column, levels=None, name=None):
    """Map labels to their 1-based position in ``levels``."""
    if not column.is_categorical:
        raise ConfigurationError(f"Column '{column.name}' is not categorical")
    mapping = ordinal_mapping(levels if levels is not None else column.levels)
    text = _labels_as_text(column)
    unknown = sorted({v for v in text.dropna() if v not in mapping})
    if unknown:
        raise ConfigurationError(
            f"Column '{column.name}' has labels missing from the encoding order: "
            f"{unknown}"
        )
    encoded = text.map(lambda v: np.nan if pd.isna(v) else mapping[v]).astype(float)
    return Column(name or f"{column.name}_num", NUMERIC, encoded)


def indicator_encode(column, level, name=None):
    """1.0 where the label equals ``level``, 0.0 elsewhere, missing stays missing."""
    if not column.is_categorical:
        raise ConfigurationError(f"Column '{column.name}' is not categorical")
    level = str(level)
    if column.levels is not None and level not in column.levels:
        raise ConfigurationError(
            f"Column '{column.name}' has no level '{level}'"
        )
    text = _labels_as_text(column)
    encoded = text.map(
        lambda v: np.nan if pd.isna(v) else (1.0 if v == level else 0.0)
    ).astype(float)
    return Column(name or f"{column.name}_is_{level}", NUMERIC, encoded)
