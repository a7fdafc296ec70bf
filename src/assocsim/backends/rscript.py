"""
CASMI collaborator reached through ``Rscript``.

Frames go to R as CSV and results come back as JSON, both inside a
temporary working directory. The R side needs the ``CASMI`` and ``jsonlite``
packages.
"""

from __future__ import annotations

import json
import re
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd

from .. import defaults
from ..errors import BackendError

_R_PRELUDE = """
suppressPackageStartupMessages({
  library(CASMI)
  library(jsonlite)
})
data <- read.csv("input.csv", colClasses = "character", check.names = FALSE,
                 na.strings = "NA", stringsAsFactors = FALSE)
"""

_R_MINE = """
data[] <- lapply(data, factor)
res <- CASMI.mineCombination(data{options})
out <- if (is.data.frame(res)) res else if (!is.null(res$results)) res$results else as.data.frame(res)
write(toJSON(list(columns = names(data), results = out),
             dataframe = "rows", digits = NA, na = "null", auto_unbox = TRUE),
      "output.json")
"""

_R_AUTOBIN = """
data[[{index}]] <- as.numeric(data[[{index}]])
data[[ncol(data)]] <- factor(data[[ncol(data)]])
binned <- autoBin.binary(data, index = {index})
write(toJSON(as.character(binned[, {index}]), na = "null"), "output.json")
"""

_VARIABLE_KEYS = ("var.name", "var.names", "variables", "variable")
_INDEX_KEYS = ("var.idx", "var.index", "index")
_ESTIMATE_KEYS = ("kappa*", "kappa.star", "kappa", "casmi.est", "estimate")
_CI_KEYS = ("kappa*.ci", "kappa.ci", "ci", "confidence.interval")
_Z_KEYS = ("smiz", "z", "z.score")
_P_KEYS = ("smiz.wald.p", "smiz.p", "p.value", "pvalue", "p")

_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _norm(key) -> str:
    return re.sub(r"[^a-z0-9*]", "", str(key).lower())


def _lookup(row, aliases):
    normalized = {_norm(key): value for key, value in row.items()}
    for alias in aliases:
        value = normalized.get(_norm(alias))
        if value is not None:
            return value
    return None


def _as_float(value):
    if value is None:
        return float("nan")
    if isinstance(value, list):
        value = value[0] if value else None
        return _as_float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        match = _NUMBER.search(str(value))
        return float(match.group(0)) if match else float("nan")


def _parse_interval(value):
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return _as_float(value[0]), _as_float(value[1])
    numbers = _NUMBER.findall(str(value)) if value is not None else []
    if len(numbers) >= 2:
        return float(numbers[0]), float(numbers[1])
    return float("nan"), float("nan")


def _parse_variables(row, columns):
    names = _lookup(row, _VARIABLE_KEYS)
    if names is not None:
        if isinstance(names, list):
            return [str(name) for name in names]
        return [part for part in re.split(r"[,\s]+", str(names)) if part]

    indices = _lookup(row, _INDEX_KEYS)
    if indices is None:
        raise BackendError(f"CASMI result row has no variable columns: {row!r}")
    if not isinstance(indices, list):
        indices = _NUMBER.findall(str(indices))
    resolved = []
    for idx in indices:
        position = int(float(idx)) - 1
        if position < 0 or position >= len(columns) - 1:
            raise BackendError(f"CASMI reported variable index {idx} out of range")
        resolved.append(columns[position])
    return resolved


def parse_mine_output(payload) -> list[dict[str, Any]]:
    """Normalize CASMI ``mineCombination`` JSON rows into result mappings."""
    if not isinstance(payload, dict):
        raise BackendError("CASMI output must be a JSON object")
    columns = [str(name) for name in payload.get("columns") or []]
    rows = payload.get("results") or []
    if isinstance(rows, dict):
        rows = [rows]

    parsed = []
    for row in rows:
        if not isinstance(row, dict):
            raise BackendError(f"CASMI result row must be an object: {row!r}")
        parsed.append(
            {
                "variables": _parse_variables(row, columns),
                "estimate": _as_float(_lookup(row, _ESTIMATE_KEYS)),
                "confidence_interval": _parse_interval(_lookup(row, _CI_KEYS)),
                "z_score": _as_float(_lookup(row, _Z_KEYS)),
                "p_value": _as_float(_lookup(row, _P_KEYS)),
            }
        )
    return parsed


class RscriptCasmiBackend:
    """Run CASMI ``mineCombination`` and ``autoBin.binary`` through Rscript."""

    def __init__(
        self,
        rscript: str = defaults.DEFAULT_RSCRIPT,
        timeout: float | None = defaults.DEFAULT_BACKEND_TIMEOUT,
        logger=None,
    ):
        self.rscript = rscript
        self.timeout = timeout
        self.logger = logger

    def is_available(self) -> bool:
        return shutil.which(self.rscript) is not None

    def _run(self, frame: pd.DataFrame, body: str) -> Any:
        with tempfile.TemporaryDirectory(prefix="assocsim_r_") as temp_dir:
            workdir = Path(temp_dir)
            frame.to_csv(workdir / "input.csv", index=False, na_rep="NA")
            script_path = workdir / "run.R"
            script_path.write_text(_R_PRELUDE + body, encoding="utf-8")

            try:
                completed = subprocess.run(
                    [self.rscript, "--vanilla", str(script_path)],
                    cwd=str(workdir),
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except FileNotFoundError as exc:
                raise BackendError(
                    f"'{self.rscript}' was not found. Install R with the CASMI and "
                    "jsonlite packages, or pass a custom miner."
                ) from exc
            except subprocess.TimeoutExpired as exc:
                raise BackendError(
                    f"Rscript did not finish within {self.timeout} seconds"
                ) from exc

            if completed.returncode != 0:
                raise BackendError(
                    f"Rscript exited with code {completed.returncode}: "
                    f"{completed.stderr.strip()}"
                )
            output_path = workdir / "output.json"
            if not output_path.exists():
                raise BackendError("Rscript finished without writing output.json")
            try:
                return json.loads(output_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                raise BackendError(f"Rscript wrote invalid JSON: {exc}") from exc

    def mine_combination(self, frame, combination_size=None, result_count=None):
        options = ""
        if combination_size is not None:
            options += f", NumOfVar = {int(combination_size)}"
        if result_count is not None:
            options += f", NumOfComb = {int(result_count)}"
        if self.logger is not None:
            self.logger.info(f"[RSCRIPT] CASMI.mineCombination(data{options})")
        payload = self._run(frame, _R_MINE.format(options=options))
        return parse_mine_output(payload)

    def auto_bin(self, frame, index=0):
        if frame.shape[1] != 2:
            raise BackendError("autoBin.binary expects a predictor and an outcome")
        r_index = int(index) + 1
        if self.logger is not None:
            self.logger.info(
                f"[RSCRIPT] autoBin.binary(index = {r_index}) on '{frame.columns[index]}'"
            )
        payload = self._run(frame, _R_AUTOBIN.format(index=r_index))
        if not isinstance(payload, list) or len(payload) != len(frame):
            raise BackendError("autoBin.binary output does not match the input rows")
        return pd.Series(payload, dtype=object)
