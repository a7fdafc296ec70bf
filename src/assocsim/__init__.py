"""Public package interface for assocsim."""

from importlib.metadata import PackageNotFoundError, version

from .api.models import MiningRun, RunConfig, ScenarioResult
from .api.scenario import ScenarioRunner, run_scenario
from .engine.mining import CombinationResult, format_results, mine
from .engine.pipeline import build_dataset
from .engine.summary import format_summary, summarize_dataset
from .errors import BackendError, ConfigurationError, ContractViolation
from .schema.config import parse_scenario
from .schema.samples import (
    available_sample_configs,
    get_sample_config,
    load_config,
)

try:
    __version__ = version("assocsim")
except PackageNotFoundError:
    __version__ = "0.1.0"


__all__ = [
    "BackendError",
    "CombinationResult",
    "ConfigurationError",
    "ContractViolation",
    "MiningRun",
    "RunConfig",
    "ScenarioResult",
    "ScenarioRunner",
    "available_sample_configs",
    "build_dataset",
    "format_results",
    "format_summary",
    "get_sample_config",
    "load_config",
    "mine",
    "parse_scenario",
    "run_scenario",
    "summarize_dataset",
]
