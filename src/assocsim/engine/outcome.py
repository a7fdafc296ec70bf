"""
Latent score synthesis and discretization into an ordered outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from ..errors import ConfigurationError
from .encoding import indicator_encode, ordinal_encode
from .table import CATEGORICAL, NUMERIC, Column
from .variables import sample_noise

TERM_KINDS = ("numeric", "ordinal", "indicator")
SCORE_METHODS = ("equal_width", "quantile")


@dataclass(frozen=True)
class OutcomeTerm:
    """One weighted contribution to the latent score."""

    column: str
    weight: float
    kind: str = "numeric"
    levels: tuple[str, ...] | None = None
    level: str | None = None


@dataclass(frozen=True)
class NoiseSpec:
    mean: float = 0.0
    sd: float = 1.0


@dataclass
class ScoreBreakdown:
    """Latent score with the encoded contribution of every term."""

    score: pd.Series
    encoded: dict[str, Column] = field(default_factory=dict)
    noise: np.ndarray | None = None


def encode_term(table, term):
    if term.kind not in TERM_KINDS:
        raise ConfigurationError(
            f"Outcome term '{term.column}' kind must be one of {', '.join(TERM_KINDS)}"
        )
    if term.kind == "numeric":
        return table.require(term.column, NUMERIC)
    column = table.require(term.column, CATEGORICAL)
    if term.kind == "ordinal":
        return ordinal_encode(column, term.levels)
    if term.level is None:
        raise ConfigurationError(f"Outcome term '{term.column}' needs a level")
    return indicator_encode(column, term.level)


def synthesize_score(table, terms, noise, rng):
    """Weighted sum of encoded informative columns plus one noise draw per row."""
    terms = list(terms or [])
    if not terms:
        raise ConfigurationError("Outcome needs at least one informative term")

    n_rows = table.n_rows
    score = np.zeros(n_rows, dtype=float)
    encoded = {}
    for term in terms:
        column = encode_term(table, term)
        encoded[column.name] = column
        score = score + float(term.weight) * column.values.to_numpy(dtype=float)

    noise = noise or NoiseSpec()
    draw = sample_noise(rng, n_rows, noise.mean, noise.sd)
    score = score + draw
    return ScoreBreakdown(
        score=pd.Series(score, name="score"), encoded=encoded, noise=draw
    )


def default_labels(k, prefix):
    return [f"{prefix}{idx}" for idx in range(1, int(k) + 1)]


def quantile_breaks(values, k):
    observed = pd.Series(values, dtype=float).dropna().to_numpy()
    if observed.size == 0:
        raise ConfigurationError("Cannot compute quantiles: every value is missing")
    probs = np.linspace(0.0, 1.0, int(k) + 1)
    breaks = np.quantile(observed, probs)
    if np.any(np.diff(breaks) <= 0):
        raise ConfigurationError(
            f"Quantile breakpoints are not unique for {k} bins; "
            "use fewer bins or equal_width"
        )
    return breaks


def discretize_score(score, k, method="quantile", labels=None, prefix="Category"):
    """Cut the latent score into ``k`` ordered categories.

    ``equal_width`` splits the observed range into equal intervals (widened by
    0.1% so the minimum falls inside), ``quantile`` uses the k-quantiles of the
    non-missing scores with the lowest interval closed on the left. Missing
    scores give a missing outcome either way.
    """

    try:
        k = int(k)
    except (TypeError, ValueError):
        raise ConfigurationError("Outcome levels must be an integer") from None
    if k < 2:
        raise ConfigurationError("Outcome needs at least 2 levels")
    if labels is None:
        labels = default_labels(k, prefix)
    labels = [str(label) for label in labels]
    if len(labels) != k:
        raise ConfigurationError(
            f"Outcome has {k} levels but {len(labels)} labels"
        )
    if len(set(labels)) != len(labels):
        raise ConfigurationError("Outcome labels must be unique")

    values = pd.Series(score, dtype=float).reset_index(drop=True)
    if method == "equal_width":
        if values.dropna().empty:
            raise ConfigurationError("Cannot bin score: every value is missing")
        cut = pd.cut(values, bins=k, labels=labels, right=True)
    elif method == "quantile":
        breaks = quantile_breaks(values, k)
        cut = pd.cut(
            values, bins=breaks, labels=labels, right=True, include_lowest=True
        )
    else:
        raise ConfigurationError(
            f"Outcome method '{method}' is not supported. "
            f"Use one of: {', '.join(SCORE_METHODS)}"
        )
    return pd.Series(
        pd.Categorical(cut, categories=labels, ordered=True), name=values.name
    )
