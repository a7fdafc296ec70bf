"""
Descriptive summaries of a generated frame.
"""

import pandas as pd


def summarize_dataset(frame):
    """Numeric describe() table plus per-column frequency tables with gaps."""
    numeric_cols = [
        name
        for name in frame.columns
        if pd.api.types.is_numeric_dtype(frame[name])
        and not isinstance(frame[name].dtype, pd.CategoricalDtype)
    ]
    categorical_cols = [name for name in frame.columns if name not in numeric_cols]

    numeric = None
    if numeric_cols:
        numeric = frame[numeric_cols].describe().T
        numeric["missing"] = frame[numeric_cols].isna().sum()

    frequencies = {}
    for name in categorical_cols:
        counts = frame[name].value_counts(dropna=False, sort=False)
        counts.index = ["<NA>" if pd.isna(label) else str(label) for label in counts.index]
        frequencies[name] = {label: int(count) for label, count in counts.items()}

    return {"numeric": numeric, "frequencies": frequencies}


def format_summary(summary):
    lines = []
    numeric = summary.get("numeric")
    if numeric is not None and not numeric.empty:
        lines.append("[NUMERIC]")
        lines.append(numeric.round(3).to_string())
    for name, counts in (summary.get("frequencies") or {}).items():
        pieces = ", ".join(f"{label}={count}" for label, count in counts.items())
        lines.append(f"[FREQ] {name}: {pieces}")
    return "\n".join(lines)
