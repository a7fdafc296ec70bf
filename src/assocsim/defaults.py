"""
Default settings shared by the scenario runner and the pipeline stages.
"""

DEFAULT_ROWS = 1000
DEFAULT_SEED = 123

DEFAULT_LOG_LEVEL = "info"

DEFAULT_OUTCOME_NAME = "y"
DEFAULT_OUTCOME_LEVELS = 10
DEFAULT_NOISE_MEAN = 0.0
DEFAULT_NOISE_SD = 1.0

DEFAULT_MISSING_TIMING = "after_outcome"
DEFAULT_MISSING_POLICY = "independent"

# Soft limits keep the miner's combinatorics tractable; the ceiling is a hard stop.
DEFAULT_MAX_PREDICTOR_LEVELS = 5
DEFAULT_MAX_OUTCOME_LEVELS = 10
MINER_LEVEL_CEILING = 20

DEFAULT_RESULT_COUNT = 3
DEFAULT_RSCRIPT = "Rscript"
DEFAULT_BACKEND_TIMEOUT = 600
