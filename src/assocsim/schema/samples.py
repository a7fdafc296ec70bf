"""
Built-in scenario configurations stored as YAML strings.
"""

import copy
from pathlib import Path
from typing import Any

import yaml

CONFIG_GROUND_TRUTH = """
metadata:
  name: "ground_truth"
  description: "10 categorical predictors, outcome driven by x1-x5 only"
  n_rows: 1000
  seed: 123

columns:
  # informative predictors
  - column_id: "x1"
    values: { categories: ["A", "B", "C", "D"] }
    distribution:
      type: "categorical"
      probabilities: [0.1, 0.2, 0.3, 0.4]
  - column_id: "x2"
    values: { categories: ["W", "X", "Y", "Z"] }
    distribution:
      type: "categorical"
      probabilities: [0.4, 0.3, 0.2, 0.1]
  - column_id: "x3"
    values: { categories: ["L", "M", "N"] }
    distribution:
      type: "categorical"
      probabilities: [0.5, 0.3, 0.2]
  - column_id: "x4"
    values: { categories: ["P", "Q"] }
    distribution:
      type: "categorical"
      probabilities: [0.7, 0.3]
  - column_id: "x5"
    values: { categories: ["E", "F", "G", "H", "I"] }
    distribution:
      type: "categorical"
      probabilities: [0.2, 0.3, 0.2, 0.2, 0.1]
  # noise predictors
  - column_id: "x6"
    values: { categories: ["A", "B", "C", "D"] }
    distribution:
      type: "categorical"
      probabilities: [0.05, 0.25, 0.25, 0.45]
  - column_id: "x7"
    values: { categories: ["W", "X", "Y", "Z"] }
    distribution:
      type: "categorical"
      probabilities: [0.1, 0.1, 0.3, 0.5]
  - column_id: "x8"
    values: { categories: ["L", "M", "N"] }
    distribution:
      type: "categorical"
      probabilities: [0.7, 0.2, 0.1]
  - column_id: "x9"
    values: { categories: ["P", "Q"] }
    distribution:
      type: "categorical"
      probabilities: [0.4, 0.6]
  - column_id: "x10"
    values: { categories: ["E", "F", "G", "H", "I"] }
    distribution:
      type: "categorical"
      probabilities: [0.3, 0.1, 0.15, 0.25, 0.2]

outcome:
  column_id: "y"
  terms:
    - { column: "x1", weight: 3, encoding: "ordinal", levels: ["A", "B", "C", "D"] }
    - { column: "x2", weight: 2, encoding: "ordinal", levels: ["W", "X", "Y", "Z"] }
    - { column: "x3", weight: 1, encoding: "ordinal", levels: ["L", "M", "N"] }
    - { column: "x4", weight: 2, encoding: "ordinal", levels: ["P", "Q"] }
    - { column: "x5", weight: -2, encoding: "ordinal", levels: ["E", "F", "G", "H", "I"] }
  noise: { mean: 0, sd: 2 }
  discretize: { method: "quantile", levels: 10, prefix: "Category" }

missingness:
  columns: "predictors"
  fraction: 0.05
  timing: "after_outcome"
  policy: "independent"

mining:
  - {}
  - { combination_size: 2 }
  - { combination_size: 2, result_count: 2 }
"""

CONFIG_CLINICAL_NUTRITION = """
metadata:
  name: "clinical_nutrition"
  description: "Nutrient intakes and lipid markers predicting a 5-level risk"
  n_rows: 1000
  seed: 42

columns:
  - column_id: "protein"
    distribution: { type: "normal", params: { mean: 60, sd: 10 }, clamp: [0, 200] }
  - column_id: "fiber"
    distribution: { type: "normal", params: { mean: 25, sd: 5 }, clamp: [0, 100] }
  - column_id: "sodium"
    distribution: { type: "normal", params: { mean: 3000, sd: 500 }, clamp: [0, 10000] }
  - column_id: "potassium"
    distribution: { type: "normal", params: { mean: 3500, sd: 600 }, clamp: [0, 10000] }
  - column_id: "calcium"
    distribution: { type: "normal", params: { mean: 1000, sd: 200 }, clamp: [0, 3000] }
  - column_id: "zinc"
    distribution: { type: "normal", params: { mean: 10, sd: 2 }, clamp: [0, 50] }
  - column_id: "iron"
    distribution: { type: "normal", params: { mean: 15, sd: 3 }, clamp: [0, 60] }
  - column_id: "magnesium"
    distribution: { type: "normal", params: { mean: 400, sd: 50 }, clamp: [0, 1200] }
  - column_id: "cholesterol"
    distribution: { type: "normal", params: { mean: 190, sd: 30 } }
    discretize:
      boundaries: [-.inf, 200, 240, .inf]
      labels: ["Desirable", "Borderline", "High"]
  - column_id: "hdl"
    distribution: { type: "normal", params: { mean: 55, sd: 15 } }
    discretize:
      boundaries: [-.inf, 40, 60, .inf]
      labels: ["Low", "Normal", "High"]

outcome:
  column_id: "outcome"
  terms:
    - { column: "protein", weight: 0.02 }
    - { column: "sodium", weight: -0.03 }
    - { column: "fiber", weight: 0.05 }
    - { column: "cholesterol", weight: 0.1, encoding: "indicator", level: "High" }
    - { column: "hdl", weight: -0.1, encoding: "indicator", level: "Low" }
  noise: { mean: 0, sd: 1.5 }
  discretize: { method: "equal_width", levels: 5, prefix: "Risk" }

binning:
  - { column: "protein", mode: "quantile", bins: 5, output: "protein_cat" }
  - { column: "fiber", mode: "quantile", bins: 5, output: "fiber_cat" }
  - { column: "sodium", mode: "quantile", bins: 5, output: "sodium_cat" }
  - { column: "potassium", mode: "quantile", bins: 5, output: "potassium_cat" }
  - { column: "calcium", mode: "quantile", bins: 5, output: "calcium_cat" }
  - { column: "zinc", mode: "quantile", bins: 5, output: "zinc_cat" }
  - { column: "iron", mode: "quantile", bins: 5, output: "iron_cat" }
  - { column: "magnesium", mode: "quantile", bins: 5, output: "magnesium_cat" }

dataset:
  predictors:
    - "protein_cat"
    - "fiber_cat"
    - "sodium_cat"
    - "potassium_cat"
    - "calcium_cat"
    - "zinc_cat"
    - "iron_cat"
    - "magnesium_cat"
    - "cholesterol"
    - "hdl"

mining:
  - {}
  - { combination_size: 2 }
  - { combination_size: 2, result_count: 2 }
"""

CONFIG_REALWORLD_SIMPLE = """
metadata:
  name: "realworld_simple"
  description: "Clamped lab values with MCAR gaps feeding a decile risk outcome"
  n_rows: 1000
  seed: 123

columns:
  - column_id: "glucose_cont"
    distribution:
      type: "normal"
      params: { mean: 90, sd: 20 }
      clamp: [50, 250]
      decimals: 0
  - column_id: "chol_cont"
    distribution:
      type: "normal"
      params: { mean: 190, sd: 35 }
      clamp: [100, 300]
      decimals: 0
  - column_id: "hdl_cont"
    distribution:
      type: "normal"
      params: { mean: 55, sd: 12 }
      clamp: [20, 100]
      decimals: 0
  - column_id: "sodium_mmol"
    distribution:
      type: "normal"
      params: { mean: 140, sd: 3 }
      clamp: [125, 155]
      decimals: 1
  - column_id: "creatinine_mgdl"
    distribution:
      type: "normal"
      params: { mean: 1.0, sd: 0.25 }
      clamp: [0.4, 2.5]
      decimals: 2
  - column_id: "sex"
    values: { categories: ["Female", "Male"] }
    distribution: { type: "categorical" }
  - column_id: "smoker"
    values: { categories: ["No", "Yes"] }
    distribution: { type: "categorical", probabilities: [0.7, 0.3] }
  - column_id: "zip_code"
    values: { categories: ["10001", "60610", "94105"] }
    distribution: { type: "categorical" }

missingness:
  columns: ["glucose_cont", "chol_cont", "hdl_cont", "sodium_mmol", "creatinine_mgdl"]
  fraction: 0.05
  timing: "before_outcome"
  policy: "independent"
  reseed: 456

outcome:
  column_id: "y_cat"
  terms:
    - { column: "glucose_cont", weight: 0.20 }
    - { column: "chol_cont", weight: 0.15 }
    - { column: "hdl_cont", weight: -0.025 }
    - { column: "sodium_mmol", weight: 0.50 }
    - { column: "creatinine_mgdl", weight: 1.50 }
  noise: { mean: 0, sd: 2 }
  discretize: { method: "quantile", levels: 10, prefix: "Y" }

binning:
  - { column: "glucose_cont", mode: "supervised", output: "glucose_cat" }
  - { column: "chol_cont", mode: "supervised", output: "chol_cat" }
  - { column: "hdl_cont", mode: "supervised", output: "hdl_cat" }
  - { column: "sodium_mmol", mode: "supervised", output: "sodium_cat" }
  - { column: "creatinine_mgdl", mode: "supervised", output: "creat_cat" }

dataset:
  predictors: ["glucose_cat", "chol_cat", "hdl_cat", "sodium_cat", "creat_cat"]

mining:
  - {}
  - { combination_size: 3 }
  - { combination_size: 3, result_count: 2 }
"""

CONFIG_COUNTS_DISJOINT = """
metadata:
  name: "counts_disjoint"
  description: "Count and skewed labs with clinical cut-points and non-overlapping gaps"
  n_rows: 1000
  seed: 2024

columns:
  - column_id: "wbc_k"
    distribution:
      type: "poisson"
      params: { lam: 7 }
      clamp: [2, 25]
      decimals: 0
  - column_id: "crp_mgl"
    distribution:
      type: "lognormal"
      params: { meanlog: 1.0, sdlog: 0.8 }
      clamp: [0.1, 200]
      decimals: 1
  - column_id: "prior_visits"
    distribution:
      type: "binomial"
      params: { size: 12, prob: 0.25 }
      clamp: [0, 12]
      decimals: 0
  - column_id: "age_group"
    values: { categories: ["18-39", "40-64", "65+"] }
    distribution: { type: "categorical", probabilities: [0.35, 0.45, 0.2] }
  - column_id: "region"
    values: { categories: ["north", "south", "east", "west"] }
    distribution: { type: "categorical" }

outcome:
  column_id: "acuity"
  terms:
    - { column: "crp_mgl", weight: 0.15 }
    - { column: "prior_visits", weight: 0.6 }
    - { column: "age_group", weight: 1.2, encoding: "ordinal", levels: ["18-39", "40-64", "65+"] }
  noise: { mean: 0, sd: 1 }
  discretize: { method: "quantile", levels: 4, labels: ["low", "moderate", "high", "critical"] }

missingness:
  columns: ["wbc_k", "crp_mgl", "prior_visits", "age_group", "region"]
  count: 40
  timing: "after_outcome"
  policy: "disjoint"
  reseed: 7

binning:
  - column: "wbc_k"
    mode: "fixed"
    boundaries: [2, 4, 11, 25]
    labels: ["Low", "Normal", "High"]
    include_lowest: true
  - column: "crp_mgl"
    mode: "fixed"
    boundaries: [0, 3, 10, 200]
    labels: ["Normal", "Elevated", "High"]
    include_lowest: true
  - column: "prior_visits"
    mode: "fixed"
    boundaries: [0, 1, 3, 12]
    labels: ["0-1", "2-3", "4+"]
    include_lowest: true

mining:
  - {}
  - { combination_size: 2 }
"""


_SAMPLE_CONFIGS = {
    "ground_truth": CONFIG_GROUND_TRUTH,
    "clinical_nutrition": CONFIG_CLINICAL_NUTRITION,
    "realworld_simple": CONFIG_REALWORLD_SIMPLE,
    "counts_disjoint": CONFIG_COUNTS_DISJOINT,
}


def available_sample_configs() -> list[str]:
    """Return sorted names for all built-in scenario configurations."""

    return sorted(_SAMPLE_CONFIGS.keys())


def load_config(config: Any) -> dict[str, Any]:
    """Parse a config from a dict, YAML text, or a YAML file path."""

    if isinstance(config, dict):
        return copy.deepcopy(config)

    if isinstance(config, Path):
        config = config.expanduser().read_text(encoding="utf-8")
    elif isinstance(config, str):
        stripped = config.strip()
        if stripped and "\n" not in stripped and stripped.endswith((".yaml", ".yml")):
            path = Path(stripped).expanduser()
            if not path.is_file():
                raise ValueError(f"Config file not found: {path}")
            config = path.read_text(encoding="utf-8")
    else:
        raise TypeError("Config must be a dict, YAML string, or path")

    parsed = yaml.safe_load(config)
    if parsed is None:
        raise ValueError("Config text is empty")
    if not isinstance(parsed, dict):
        raise ValueError("Config must parse to a mapping")
    return parsed


def get_sample_config(name: str) -> dict[str, Any]:
    """Load one of the built-in scenario configurations by name."""

    key = str(name).strip().lower()
    if key not in _SAMPLE_CONFIGS:
        options = ", ".join(available_sample_configs())
        raise ValueError(f"Unknown sample config '{name}'. Available: {options}")
    return load_config(_SAMPLE_CONFIGS[key])
