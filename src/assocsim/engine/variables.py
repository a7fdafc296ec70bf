"""
Column samplers for categorical labels and continuous or count measurements.
"""

import math

import numpy as np
import pandas as pd

from ..errors import ConfigurationError
from .table import CATEGORICAL, NUMERIC, Column

CONTINUOUS_FAMILIES = ("normal", "lognormal", "poisson", "binomial")


def check_sample_size(n):
    if isinstance(n, bool):
        raise ConfigurationError("Sample size must be a positive integer")
    try:
        parsed = int(n)
    except (TypeError, ValueError):
        raise ConfigurationError("Sample size must be a positive integer") from None
    if parsed != n or parsed <= 0:
        raise ConfigurationError(f"Sample size must be a positive integer, got {n!r}")
    return parsed


def normalize_probabilities(labels, probabilities, name="column"):
    """Validate a probability vector against its label set and normalize it."""
    labels = list(labels or [])
    if not labels:
        raise ConfigurationError(f"Column '{name}' needs at least one label")
    if probabilities is None:
        return np.full(len(labels), 1.0 / len(labels))

    if isinstance(probabilities, dict):
        extra = sorted(set(map(str, probabilities)) - set(map(str, labels)))
        if extra:
            raise ConfigurationError(
                f"Column '{name}' probabilities name unknown labels: {extra}"
            )
        probabilities = [probabilities.get(label, 0.0) for label in labels]

    probs = list(probabilities)
    if len(probs) != len(labels):
        raise ConfigurationError(
            f"Column '{name}' has {len(labels)} labels but "
            f"{len(probs)} probabilities"
        )
    try:
        values = np.asarray([float(p) for p in probs], dtype=float)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Column '{name}' probabilities must be numeric"
        ) from None
    if not np.isfinite(values).all() or (values < 0).any():
        raise ConfigurationError(
            f"Column '{name}' probabilities must be finite and non-negative"
        )
    total = float(values.sum())
    if total <= 0:
        raise ConfigurationError(f"Column '{name}' probabilities must have a positive sum")
    return values / total


def sample_categorical(rng, labels, probabilities, n, name="column"):
    n = check_sample_size(n)
    labels = [str(label) for label in labels]
    if len(set(labels)) != len(labels):
        raise ConfigurationError(f"Column '{name}' labels must be unique")
    probs = normalize_probabilities(labels, probabilities, name=name)
    draw = rng.choice(labels, size=n, replace=True, p=probs)
    return Column(name, CATEGORICAL, pd.Series(draw), levels=labels)


def _param(params, key, name, minimum=None, strict=False):
    if key not in params:
        raise ConfigurationError(f"Column '{name}' distribution needs '{key}'")
    try:
        value = float(params[key])
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Column '{name}' distribution '{key}' must be numeric"
        ) from None
    if not math.isfinite(value):
        raise ConfigurationError(f"Column '{name}' distribution '{key}' must be finite")
    if minimum is not None:
        if strict and value <= minimum:
            raise ConfigurationError(
                f"Column '{name}' distribution '{key}' must be > {minimum}"
            )
        if not strict and value < minimum:
            raise ConfigurationError(
                f"Column '{name}' distribution '{key}' must be >= {minimum}"
            )
    return value


def draw_continuous(rng, family, params, n, name="column"):
    """Raw draw from one of the supported families, before clamping."""
    params = params or {}
    if family == "normal":
        mean = _param(params, "mean", name)
        sd = _param(params, "sd", name, minimum=0.0)
        return rng.normal(mean, sd, n).astype(float)
    if family == "lognormal":
        meanlog = _param(params, "meanlog", name)
        sdlog = _param(params, "sdlog", name, minimum=0.0)
        return rng.lognormal(meanlog, sdlog, n).astype(float)
    if family == "poisson":
        lam = _param(params, "lam", name, minimum=0.0)
        return rng.poisson(lam, n).astype(float)
    if family == "binomial":
        size = _param(params, "size", name, minimum=0.0)
        if int(size) != size:
            raise ConfigurationError(f"Column '{name}' binomial 'size' must be an integer")
        prob = _param(params, "prob", name, minimum=0.0)
        if prob > 1.0:
            raise ConfigurationError(f"Column '{name}' binomial 'prob' must be <= 1")
        return rng.binomial(int(size), prob, n).astype(float)
    raise ConfigurationError(
        f"Column '{name}' distribution '{family}' is not supported. "
        f"Use one of: {', '.join(CONTINUOUS_FAMILIES)}"
    )


def parse_clamp(clamp, name="column"):
    if clamp is None:
        return None
    try:
        low, high = (float(v) for v in clamp)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Column '{name}' clamp must be a [low, high] pair"
        ) from None
    if not low < high:
        raise ConfigurationError(f"Column '{name}' clamp low must be below high")
    return low, high


def clamp_and_round(values, clamp=None, decimals=None):
    out = np.asarray(values, dtype=float)
    if clamp is not None:
        out = np.clip(out, clamp[0], clamp[1])
    if decimals is not None:
        out = np.round(out, int(decimals))
    return out


def sample_continuous(rng, family, params, n, clamp=None, decimals=None, name="column"):
    n = check_sample_size(n)
    clamp = parse_clamp(clamp, name=name)
    if decimals is not None:
        try:
            decimals = int(decimals)
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Column '{name}' decimals must be an integer"
            ) from None
        if decimals < 0:
            raise ConfigurationError(f"Column '{name}' decimals must be >= 0")
    draw = draw_continuous(rng, family, params, n, name=name)
    values = clamp_and_round(draw, clamp=clamp, decimals=decimals)
    return Column(name, NUMERIC, pd.Series(values), clamp=clamp)


def sample_noise(rng, n, mean=0.0, sd=1.0):
    n = check_sample_size(n)
    try:
        mean = float(mean)
        sd = float(sd)
    except (TypeError, ValueError):
        raise ConfigurationError("Noise mean and sd must be numeric") from None
    if sd < 0:
        raise ConfigurationError("Noise sd must be >= 0")
    return rng.normal(mean, sd, n).astype(float)
