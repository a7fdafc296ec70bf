import logging
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import pandas as pd

from assocsim import RunConfig, ScenarioRunner, get_sample_config, run_scenario
from assocsim.api.scenario import _resolve_output_path, write_dataset
from assocsim.engine.mining import CombinationResult
from assocsim.errors import ConfigurationError


class _FakeMiner:
    def __init__(self):
        self.calls = []

    def mine_combination(self, frame, combination_size=None, result_count=None):
        self.calls.append((list(frame.columns), combination_size, result_count))
        size = combination_size or 2
        names = list(frame.columns[:-1])
        return [
            CombinationResult(tuple(names[:size]), 0.4, (0.3, 0.5), 5.0, 1e-6),
            CombinationResult(tuple(names[1:size + 1]), 0.2, (0.1, 0.3), 2.0, 0.02),
        ]


def _small_ground_truth():
    config = get_sample_config("ground_truth")
    config["metadata"]["n_rows"] = 400
    return config


class ScenarioRunnerTests(unittest.TestCase):
    def test_run_with_custom_miner_reports_every_call(self):
        miner = _FakeMiner()
        with tempfile.TemporaryDirectory() as temp_dir:
            result = ScenarioRunner(
                _small_ground_truth(),
                RunConfig(log_dir=temp_dir, log_level="quiet"),
                miner=miner,
            ).run()

            self.assertTrue(result.log_path.exists())
        self.assertEqual(result.scenario, "ground_truth")
        self.assertEqual(len(result.mining_runs), 3)
        self.assertEqual([call[1:] for call in miner.calls], [(None, None), (2, 3), (2, 2)])
        self.assertEqual(miner.calls[0][0][-1], "y")
        self.assertEqual(len(result.mining_runs[2].results), 2)
        self.assertEqual(result.best().variables, ("x1", "x2"))
        self.assertEqual(len(result.dataframe), 400)
        self.assertEqual(result.outcome, "y")

    def test_run_releases_log_handlers(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            ScenarioRunner(
                _small_ground_truth(),
                RunConfig(log_dir=temp_dir, log_level="quiet"),
                miner=_FakeMiner(),
            ).run()
            self.assertEqual(logging.getLogger("assocsim").handlers, [])

            config = _small_ground_truth()
            config["outcome"]["terms"][0]["column"] = "missing_column"
            with self.assertRaises(ConfigurationError):
                ScenarioRunner(
                    config, RunConfig(log_dir=temp_dir, log_level="quiet", mine=False)
                ).run()
            self.assertEqual(logging.getLogger("assocsim").handlers, [])

    def test_run_config_overrides_rows_seed_and_mining_calls(self):
        miner = _FakeMiner()
        with tempfile.TemporaryDirectory() as temp_dir:
            result = run_scenario(
                _small_ground_truth(),
                RunConfig(
                    n_rows=300,
                    seed=5,
                    missing_seed=11,
                    log_dir=temp_dir,
                    mining_calls=[{"combination_size": 1, "result_count": 1}],
                ),
                miner=miner,
            )
        self.assertEqual(len(result.dataframe), 300)
        self.assertEqual(len(result.mining_runs), 1)
        self.assertEqual(len(result.mining_runs[0].results), 1)
        self.assertEqual(result.pipeline.seed, 5)

    def test_mining_skipped_when_rscript_missing(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            with patch(
                "assocsim.backends.rscript.shutil.which", return_value=None
            ):
                result = ScenarioRunner(
                    _small_ground_truth(), RunConfig(log_dir=temp_dir)
                ).run()
                self.assertEqual(result.mining_runs, [])
                self.assertTrue(
                    any("Rscript is unavailable" in n for n in result.runtime_notes)
                )

                with self.assertRaises(RuntimeError):
                    ScenarioRunner(
                        _small_ground_truth(),
                        RunConfig(log_dir=temp_dir, mine_required=True),
                    ).run()

    def test_mine_false_skips_mining(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            result = ScenarioRunner(
                _small_ground_truth(), RunConfig(log_dir=temp_dir, mine=False)
            ).run()
        self.assertEqual(result.mining_runs, [])
        self.assertIsNone(result.best())
        self.assertIn("Mining skipped by run configuration", result.runtime_notes)

    def test_output_is_written_as_csv(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            result = ScenarioRunner(
                _small_ground_truth(),
                RunConfig(
                    log_dir=temp_dir,
                    output_path=str(Path(temp_dir) / "out"),
                    mine=False,
                ),
            ).run()
            self.assertEqual(result.output_path.suffix, ".csv")
            written = pd.read_csv(result.output_path)
            self.assertEqual(list(written.columns), list(result.dataframe.columns))
            self.assertEqual(len(written), 400)


class OutputPathTests(unittest.TestCase):
    def test_resolve_output_path(self):
        self.assertIsNone(_resolve_output_path(None, "s"))
        self.assertIsNone(_resolve_output_path("  ", "s"))
        self.assertEqual(_resolve_output_path("data.xlsx", "s"), Path("data.xlsx"))
        directory = _resolve_output_path("exports/", "ground_truth")
        self.assertEqual(directory.parent, Path("exports"))
        self.assertTrue(directory.name.endswith("_ground_truth.csv"))
        with self.assertRaises(ConfigurationError):
            _resolve_output_path("data.json", "s")

    def test_write_dataset_reports_missing_openpyxl(self):
        frame = pd.DataFrame({"x": ["a"], "y": ["b"]})
        error = ModuleNotFoundError("No module named 'openpyxl'")
        error.name = "openpyxl"
        with tempfile.TemporaryDirectory() as temp_dir:
            with patch.object(pd.DataFrame, "to_excel", side_effect=error):
                with self.assertRaises(RuntimeError) as exc:
                    write_dataset(frame, Path(temp_dir) / "out.xlsx")
        self.assertIn("openpyxl", str(exc.exception))


if __name__ == "__main__":
    unittest.main()
