"""
Scenario configuration parsing into typed stage specs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .. import defaults
from ..engine.discretize import BIN_MODES, parse_boundaries
from ..engine.missingness import MISSING_POLICIES
from ..engine.outcome import SCORE_METHODS, TERM_KINDS, NoiseSpec, OutcomeTerm
from ..engine.variables import CONTINUOUS_FAMILIES, normalize_probabilities, parse_clamp
from ..errors import ConfigurationError

MISSING_TIMINGS = ("before_outcome", "after_outcome")


@dataclass(frozen=True)
class FixedCut:
    boundaries: tuple[float, ...]
    labels: tuple[str, ...]
    include_lowest: bool = False


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    kind: str
    labels: tuple[str, ...] = ()
    probabilities: tuple[float, ...] | None = None
    family: str | None = None
    params: dict = field(default_factory=dict)
    clamp: tuple[float, float] | None = None
    decimals: int | None = None
    cut: FixedCut | None = None


@dataclass(frozen=True)
class OutcomeSpec:
    name: str
    terms: tuple[OutcomeTerm, ...]
    noise: NoiseSpec
    levels: int
    method: str
    labels: tuple[str, ...] | None = None
    prefix: str = "Category"


@dataclass(frozen=True)
class MissingSpec:
    columns: tuple[str, ...]
    fraction: float | None = None
    count: int | None = None
    timing: str = defaults.DEFAULT_MISSING_TIMING
    policy: str = defaults.DEFAULT_MISSING_POLICY
    reseed: int | None = None
    include_outcome: bool = False


@dataclass(frozen=True)
class BinSpec:
    column: str
    mode: str
    output: str
    boundaries: tuple[float, ...] | None = None
    labels: tuple[str, ...] | None = None
    include_lowest: bool = False
    bins: int | None = None


@dataclass(frozen=True)
class DatasetSpec:
    predictors: tuple[str, ...] | None = None
    max_predictor_levels: int = defaults.DEFAULT_MAX_PREDICTOR_LEVELS
    max_outcome_levels: int = defaults.DEFAULT_MAX_OUTCOME_LEVELS


@dataclass(frozen=True)
class MiningCall:
    combination_size: int | None = None
    result_count: int | None = None

    def describe(self):
        parts = []
        if self.combination_size is not None:
            parts.append(f"combination_size={self.combination_size}")
        if self.result_count is not None:
            parts.append(f"result_count={self.result_count}")
        return ", ".join(parts) if parts else "automatic"


@dataclass(frozen=True)
class ScenarioSpec:
    name: str
    n_rows: int
    seed: int
    columns: tuple[ColumnSpec, ...]
    outcome: OutcomeSpec
    missingness: MissingSpec | None
    binning: tuple[BinSpec, ...]
    dataset: DatasetSpec
    mining: tuple[MiningCall, ...]

    @property
    def column_names(self):
        return [col.name for col in self.columns]


def _mapping(value, where):
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{where} must be a mapping")
    return value


def _optional_int(value, where, minimum=None):
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigurationError(f"{where} must be an integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{where} must be an integer") from None
    if parsed != value:
        raise ConfigurationError(f"{where} must be an integer")
    if minimum is not None and parsed < minimum:
        raise ConfigurationError(f"{where} must be >= {minimum}")
    return parsed


def _float(value, where):
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{where} must be numeric") from None
    if math.isnan(parsed):
        raise ConfigurationError(f"{where} must be numeric")
    return parsed


def _string_list(value, where):
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        raise ConfigurationError(f"{where} must be a list")
    items = [str(item).strip() for item in value]
    if any(not item for item in items):
        raise ConfigurationError(f"{where} cannot contain empty names")
    return items


def _parse_fixed_cut(raw, where):
    raw = _mapping(raw, where)
    boundaries, labels = parse_boundaries(
        raw.get("boundaries"), raw.get("labels"), name=where
    )
    return FixedCut(
        boundaries=tuple(boundaries),
        labels=tuple(labels),
        include_lowest=bool(raw.get("include_lowest", False)),
    )


def _parse_column(raw, idx):
    raw = _mapping(raw, f"columns[{idx}]")
    name = str(raw.get("column_id") or "").strip()
    if not name:
        raise ConfigurationError(f"columns[{idx}] needs a column_id")
    dist = _mapping(raw.get("distribution"), f"Column '{name}' distribution")
    dist_type = str(dist.get("type") or "").strip().lower()

    if dist_type == "categorical":
        values = _mapping(raw.get("values"), f"Column '{name}' values")
        labels = _string_list(values.get("categories"), f"Column '{name}' categories")
        if not labels:
            raise ConfigurationError(f"Column '{name}' needs values.categories")
        if len(set(labels)) != len(labels):
            raise ConfigurationError(f"Column '{name}' categories must be unique")
        raw_probs = dist.get("probabilities")
        probs = None
        if raw_probs is not None:
            probs = tuple(
                float(p) for p in normalize_probabilities(labels, raw_probs, name=name)
            )
        return ColumnSpec(
            name=name, kind="categorical", labels=tuple(labels), probabilities=probs
        )

    if dist_type in CONTINUOUS_FAMILIES:
        params = dict(_mapping(dist.get("params"), f"Column '{name}' params"))
        decimals = _optional_int(
            dist.get("decimals"), f"Column '{name}' decimals", minimum=0
        )
        cut = None
        if raw.get("discretize") is not None:
            cut = _parse_fixed_cut(raw.get("discretize"), f"Column '{name}' discretize")
        return ColumnSpec(
            name=name,
            kind="continuous",
            family=dist_type,
            params=params,
            clamp=parse_clamp(dist.get("clamp"), name=name),
            decimals=decimals,
            cut=cut,
        )

    supported = ", ".join(("categorical",) + CONTINUOUS_FAMILIES)
    raise ConfigurationError(
        f"Column '{name}' distribution type '{dist_type}' is not supported. "
        f"Use one of: {supported}"
    )


def _parse_term(raw, idx, columns_by_name):
    raw = _mapping(raw, f"outcome.terms[{idx}]")
    column = str(raw.get("column") or "").strip()
    if column not in columns_by_name:
        raise ConfigurationError(
            f"outcome.terms[{idx}] references unknown column '{column}'"
        )
    kind = str(raw.get("encoding") or "numeric").strip().lower()
    if kind not in TERM_KINDS:
        raise ConfigurationError(
            f"outcome.terms[{idx}] encoding must be one of {', '.join(TERM_KINDS)}"
        )
    spec = columns_by_name[column]
    produces_labels = spec.kind == "categorical" or spec.cut is not None
    if kind == "numeric" and produces_labels:
        raise ConfigurationError(
            f"outcome.terms[{idx}] uses categorical column '{column}' as numeric; "
            "pick ordinal or indicator encoding"
        )
    if kind != "numeric" and not produces_labels:
        raise ConfigurationError(
            f"outcome.terms[{idx}] encodes numeric column '{column}' as {kind}"
        )

    levels = None
    level = None
    domain = []
    if produces_labels:
        domain = list(spec.labels) if spec.cut is None else list(spec.cut.labels)
    if kind == "ordinal":
        levels = _string_list(raw.get("levels"), f"outcome.terms[{idx}].levels")
        levels = tuple(levels) if levels is not None else tuple(domain)
        if sorted(levels) != sorted(domain):
            raise ConfigurationError(
                f"outcome.terms[{idx}].levels must list every label of '{column}' once"
            )
    elif kind == "indicator":
        level = raw.get("level")
        if level is None or str(level) not in domain:
            raise ConfigurationError(
                f"outcome.terms[{idx}].level must be one of {domain}"
            )
        level = str(level)

    return OutcomeTerm(
        column=column,
        weight=_float(raw.get("weight"), f"outcome.terms[{idx}].weight"),
        kind=kind,
        levels=levels,
        level=level,
    )


def _parse_outcome(raw, columns_by_name):
    raw = _mapping(raw, "outcome")
    if not raw:
        raise ConfigurationError("Config needs an outcome section")
    name = str(raw.get("column_id") or defaults.DEFAULT_OUTCOME_NAME).strip()
    if name in columns_by_name:
        raise ConfigurationError(f"Outcome '{name}' collides with a predictor column")

    terms_raw = raw.get("terms")
    if not isinstance(terms_raw, list) or not terms_raw:
        raise ConfigurationError("outcome.terms must be a non-empty list")
    terms = tuple(
        _parse_term(item, idx, columns_by_name) for idx, item in enumerate(terms_raw)
    )

    noise_raw = _mapping(raw.get("noise"), "outcome.noise")
    noise = NoiseSpec(
        mean=_float(
            noise_raw.get("mean", defaults.DEFAULT_NOISE_MEAN), "outcome.noise.mean"
        ),
        sd=_float(noise_raw.get("sd", defaults.DEFAULT_NOISE_SD), "outcome.noise.sd"),
    )
    if noise.sd < 0:
        raise ConfigurationError("outcome.noise.sd must be >= 0")

    disc = _mapping(raw.get("discretize"), "outcome.discretize")
    levels = _optional_int(
        disc.get("levels", defaults.DEFAULT_OUTCOME_LEVELS),
        "outcome.discretize.levels",
        minimum=2,
    )
    method = str(disc.get("method") or "quantile").strip().lower()
    if method not in SCORE_METHODS:
        raise ConfigurationError(
            f"outcome.discretize.method must be one of {', '.join(SCORE_METHODS)}"
        )
    labels = _string_list(disc.get("labels"), "outcome.discretize.labels")
    if labels is not None and len(labels) != levels:
        raise ConfigurationError(
            f"outcome.discretize.labels must have exactly {levels} items"
        )
    return OutcomeSpec(
        name=name,
        terms=terms,
        noise=noise,
        levels=levels,
        method=method,
        labels=tuple(labels) if labels is not None else None,
        prefix=str(disc.get("prefix") or "Category"),
    )


def _parse_missingness(raw, columns_by_name, outcome_name):
    if raw is None:
        return None
    raw = _mapping(raw, "missingness")
    columns = raw.get("columns", "predictors")
    if columns == "predictors":
        columns = list(columns_by_name)
    columns = _string_list(columns, "missingness.columns")
    unknown = [name for name in columns if name not in columns_by_name]
    if outcome_name in unknown:
        raise ConfigurationError(
            "missingness.columns cannot name the outcome; use include_outcome"
        )
    if unknown:
        raise ConfigurationError(f"missingness.columns names unknown columns: {unknown}")

    fraction = raw.get("fraction")
    count = raw.get("count")
    if (fraction is None) == (count is None):
        raise ConfigurationError("missingness needs exactly one of fraction or count")
    if fraction is not None:
        fraction = _float(fraction, "missingness.fraction")
        if not 0.0 < fraction < 1.0:
            raise ConfigurationError("missingness.fraction must be in (0, 1)")
    count = _optional_int(count, "missingness.count", minimum=0)

    timing = str(raw.get("timing") or defaults.DEFAULT_MISSING_TIMING).strip().lower()
    if timing not in MISSING_TIMINGS:
        raise ConfigurationError(
            f"missingness.timing must be one of {', '.join(MISSING_TIMINGS)}"
        )
    policy = str(raw.get("policy") or defaults.DEFAULT_MISSING_POLICY).strip().lower()
    if policy not in MISSING_POLICIES:
        raise ConfigurationError(
            f"missingness.policy must be one of {', '.join(MISSING_POLICIES)}"
        )
    include_outcome = raw.get("include_outcome", False)
    if not isinstance(include_outcome, bool):
        raise ConfigurationError("missingness.include_outcome must be a boolean")

    return MissingSpec(
        columns=tuple(columns),
        fraction=fraction,
        count=count,
        timing=timing,
        policy=policy,
        reseed=_optional_int(raw.get("reseed"), "missingness.reseed"),
        include_outcome=include_outcome,
    )


def _parse_bin(raw, idx, columns_by_name):
    raw = _mapping(raw, f"binning[{idx}]")
    column = str(raw.get("column") or "").strip()
    spec = columns_by_name.get(column)
    if spec is None:
        raise ConfigurationError(f"binning[{idx}] references unknown column '{column}'")
    if spec.kind != "continuous" or spec.cut is not None:
        raise ConfigurationError(
            f"binning[{idx}] column '{column}' is already categorical"
        )
    mode = str(raw.get("mode") or "").strip().lower()
    if mode not in BIN_MODES:
        raise ConfigurationError(
            f"binning[{idx}].mode must be one of {', '.join(BIN_MODES)}"
        )
    output = str(raw.get("output") or column).strip()

    if mode == "fixed":
        cut = _parse_fixed_cut(raw, f"binning[{idx}]")
        return BinSpec(
            column=column,
            mode=mode,
            output=output,
            boundaries=cut.boundaries,
            labels=cut.labels,
            include_lowest=cut.include_lowest,
        )
    if mode == "quantile":
        bins = _optional_int(raw.get("bins", 5), f"binning[{idx}].bins", minimum=2)
        labels = _string_list(raw.get("labels"), f"binning[{idx}].labels")
        if labels is not None and len(labels) != bins:
            raise ConfigurationError(
                f"binning[{idx}].labels must have exactly {bins} items"
            )
        return BinSpec(
            column=column,
            mode=mode,
            output=output,
            labels=tuple(labels) if labels is not None else None,
            bins=bins,
        )
    return BinSpec(column=column, mode=mode, output=output)


def _parse_dataset(raw):
    raw = _mapping(raw, "dataset")
    predictors = _string_list(raw.get("predictors"), "dataset.predictors")
    return DatasetSpec(
        predictors=tuple(predictors) if predictors is not None else None,
        max_predictor_levels=_optional_int(
            raw.get("max_predictor_levels", defaults.DEFAULT_MAX_PREDICTOR_LEVELS),
            "dataset.max_predictor_levels",
            minimum=1,
        ),
        max_outcome_levels=_optional_int(
            raw.get("max_outcome_levels", defaults.DEFAULT_MAX_OUTCOME_LEVELS),
            "dataset.max_outcome_levels",
            minimum=2,
        ),
    )


def parse_mining_calls(raw):
    if raw is None:
        return (MiningCall(),)
    if not isinstance(raw, list):
        raise ConfigurationError("mining must be a list of invocations")
    calls = []
    for idx, item in enumerate(raw):
        item = _mapping(item, f"mining[{idx}]")
        calls.append(
            MiningCall(
                combination_size=_optional_int(
                    item.get("combination_size"),
                    f"mining[{idx}].combination_size",
                    minimum=1,
                ),
                result_count=_optional_int(
                    item.get("result_count"), f"mining[{idx}].result_count", minimum=1
                ),
            )
        )
    return tuple(calls)


def parse_scenario(config, n_rows=None, seed=None):
    """Normalize a scenario config mapping into a ``ScenarioSpec``.

    ``n_rows`` and ``seed`` override the values in ``metadata``.
    """

    if not isinstance(config, dict):
        raise ConfigurationError("Config must be a mapping")
    metadata = _mapping(config.get("metadata"), "metadata")

    rows = _optional_int(
        n_rows if n_rows is not None else metadata.get("n_rows", defaults.DEFAULT_ROWS),
        "n_rows",
    )
    if rows is None or rows <= 0:
        raise ConfigurationError("n_rows must be a positive integer")
    base_seed = _optional_int(
        seed if seed is not None else metadata.get("seed", defaults.DEFAULT_SEED), "seed"
    )

    raw_columns = config.get("columns")
    if not isinstance(raw_columns, list) or not raw_columns:
        raise ConfigurationError("Config needs a non-empty columns list")
    columns = tuple(_parse_column(raw, idx) for idx, raw in enumerate(raw_columns))
    columns_by_name = {}
    for col in columns:
        if col.name in columns_by_name:
            raise ConfigurationError(f"Duplicate column_id '{col.name}'")
        columns_by_name[col.name] = col

    outcome = _parse_outcome(config.get("outcome"), columns_by_name)
    missingness = _parse_missingness(
        config.get("missingness"), columns_by_name, outcome.name
    )

    raw_bins = config.get("binning") or []
    if not isinstance(raw_bins, list):
        raise ConfigurationError("binning must be a list")
    binning = tuple(
        _parse_bin(raw, idx, columns_by_name) for idx, raw in enumerate(raw_bins)
    )
    outputs = [spec.output for spec in binning]
    if len(set(outputs)) != len(outputs):
        raise ConfigurationError("binning outputs must be unique")
    for spec in binning:
        if spec.output != spec.column and spec.output in columns_by_name:
            raise ConfigurationError(
                f"binning output '{spec.output}' collides with a generated column"
            )
        if spec.output == outcome.name:
            raise ConfigurationError(f"binning output '{spec.output}' is the outcome")

    dataset = _parse_dataset(config.get("dataset"))
    if dataset.predictors is not None:
        available = set(columns_by_name) | set(outputs)
        unknown = [name for name in dataset.predictors if name not in available]
        if unknown:
            raise ConfigurationError(f"dataset.predictors names unknown columns: {unknown}")
        if outcome.name in dataset.predictors:
            raise ConfigurationError("dataset.predictors cannot include the outcome")

    return ScenarioSpec(
        name=str(metadata.get("name") or "scenario"),
        n_rows=rows,
        seed=base_seed,
        columns=columns,
        outcome=outcome,
        missingness=missingness,
        binning=binning,
        dataset=dataset,
        mining=parse_mining_calls(config.get("mining")),
    )
