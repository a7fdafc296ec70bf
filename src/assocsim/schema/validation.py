"""
Soft configuration checks that produce warnings instead of errors.

Hard errors are raised by ``parse_scenario``; the validators here flag
settings that are legal but likely unintended, so the runner can log them.
"""

from typing import Any

from .. import defaults

_TOP_LEVEL_KEYS = {
    "metadata",
    "columns",
    "outcome",
    "missingness",
    "binning",
    "dataset",
    "mining",
}
_METADATA_KEYS = {"name", "version", "description", "n_rows", "seed", "log_level"}
_COLUMN_KEYS = {"column_id", "values", "distribution", "discretize", "description"}


def validate_top_level(config: dict[str, Any]) -> list[str]:
    """Flag unknown top-level sections.

    Args:
        config: The configuration dictionary

    Returns:
        List of warning messages
    """
    unknown = sorted(set(config) - _TOP_LEVEL_KEYS)
    if not unknown:
        return []
    return [f"Unknown config sections ignored: {', '.join(map(str, unknown))}"]


def validate_metadata(metadata: dict[str, Any]) -> list[str]:
    warnings = []
    unknown = sorted(set(metadata) - _METADATA_KEYS)
    if unknown:
        warnings.append(f"Unknown metadata keys ignored: {', '.join(map(str, unknown))}")

    log_level = metadata.get("log_level")
    if log_level is not None and log_level not in ("info", "quiet"):
        warnings.append("metadata.log_level must be info or quiet")

    n_rows = metadata.get("n_rows")
    if isinstance(n_rows, int) and 0 < n_rows < 100:
        warnings.append(
            f"metadata.n_rows={n_rows} is small; quantile bins and mining "
            "estimates will be unstable"
        )
    return warnings


def validate_columns(columns: list[Any]) -> list[str]:
    """Flag column settings that are valid but likely unintended."""
    warnings = []
    for col in columns or []:
        if not isinstance(col, dict):
            continue
        col_id = col.get("column_id", "<unknown>")
        unknown = sorted(set(col) - _COLUMN_KEYS)
        if unknown:
            warnings.append(
                f"Column '{col_id}' has unknown keys ignored: "
                f"{', '.join(map(str, unknown))}"
            )

        dist = col.get("distribution") or {}
        if not isinstance(dist, dict):
            continue
        if dist.get("type") == "categorical":
            categories = (col.get("values") or {}).get("categories") or []
            if len(categories) > defaults.DEFAULT_MAX_PREDICTOR_LEVELS:
                warnings.append(
                    f"Column '{col_id}' has {len(categories)} categories; predictors "
                    f"above {defaults.DEFAULT_MAX_PREDICTOR_LEVELS} levels slow mining"
                )
            probs = dist.get("probabilities")
            values = probs.values() if isinstance(probs, dict) else probs
            if values is not None:
                try:
                    total = float(sum(float(v) for v in values))
                except (TypeError, ValueError):
                    continue
                if abs(total - 1.0) > 1e-6:
                    warnings.append(
                        f"Column '{col_id}' probabilities sum to {total:.4f}; "
                        "they will be normalized"
                    )
        elif dist.get("type") in ("normal", "lognormal") and dist.get("clamp") is None:
            if col.get("discretize") is None:
                warnings.append(
                    f"Column '{col_id}' has no clamp range; values are unbounded"
                )
    return warnings


def validate_outcome(outcome: dict[str, Any], columns: list[Any]) -> list[str]:
    warnings = []
    if not isinstance(outcome, dict):
        return warnings
    disc = outcome.get("discretize") or {}
    levels = disc.get("levels", defaults.DEFAULT_OUTCOME_LEVELS)
    if isinstance(levels, int) and levels > defaults.DEFAULT_MAX_OUTCOME_LEVELS:
        warnings.append(
            f"outcome.discretize.levels={levels} exceeds "
            f"{defaults.DEFAULT_MAX_OUTCOME_LEVELS}; mining may be slow"
        )
    noise = outcome.get("noise") or {}
    if isinstance(noise, dict) and noise.get("sd") == 0:
        warnings.append("outcome.noise.sd is 0; the outcome is a deterministic score")

    informative = {
        term.get("column") for term in outcome.get("terms") or [] if isinstance(term, dict)
    }
    weights = [
        term.get("weight") for term in outcome.get("terms") or [] if isinstance(term, dict)
    ]
    if any(weight == 0 for weight in weights):
        warnings.append("outcome.terms has zero weights; those columns are noise")
    names = [col.get("column_id") for col in columns or [] if isinstance(col, dict)]
    if names and not set(names) - informative:
        warnings.append("Every column is informative; no noise variables to test")
    return warnings


def validate_missingness(missingness: Any) -> list[str]:
    warnings = []
    if not isinstance(missingness, dict):
        return warnings
    fraction = missingness.get("fraction")
    if isinstance(fraction, (int, float)) and fraction > 0.5:
        warnings.append(
            f"missingness.fraction={fraction} blanks most of each column"
        )
    if missingness.get("include_outcome"):
        warnings.append(
            "missingness.include_outcome is set; rows with a missing outcome "
            "will be dropped before mining"
        )
    if missingness.get("timing") == "before_outcome":
        warnings.append(
            "missingness.timing=before_outcome propagates missing predictors "
            "into the outcome"
        )
    return warnings


def validate_config(config: dict[str, Any]) -> list[str]:
    """Run every soft validator and collect their warnings."""
    if not isinstance(config, dict):
        return []
    warnings = []
    warnings.extend(validate_top_level(config))
    metadata = config.get("metadata") or {}
    if isinstance(metadata, dict):
        warnings.extend(validate_metadata(metadata))
    columns = config.get("columns") or []
    warnings.extend(validate_columns(columns))
    warnings.extend(validate_outcome(config.get("outcome") or {}, columns))
    warnings.extend(validate_missingness(config.get("missingness")))
    return warnings
