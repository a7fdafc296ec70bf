"""Quick local sample run for assocsim."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
SRC_PATH = PROJECT_ROOT / "src"
if SRC_PATH.exists() and str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from assocsim import (  # noqa: E402
    RunConfig,
    ScenarioRunner,
    format_summary,
    get_sample_config,
    summarize_dataset,
)


def main() -> int:
    try:
        config = get_sample_config("ground_truth")
        run_cfg = RunConfig(n_rows=1000, seed=123, log_level="info", mine=False)
        result = ScenarioRunner(config, run_cfg).run()
    except Exception as exc:
        print(f"[SAMPLE RUN ERROR] {exc}", file=sys.stderr)
        print("Tip: install dependencies with `pip install -e .`", file=sys.stderr)
        return 1

    frame = result.dataframe
    missing = {name: int(count) for name, count in frame.isna().sum().items()}
    print(
        f"[SAMPLE RUN] scenario={result.scenario} rows={len(frame)} "
        f"columns={len(frame.columns)} outcome={result.outcome} log={result.log_path}"
    )
    print(f"[MISSING] {missing}")
    print(format_summary(summarize_dataset(frame)))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
