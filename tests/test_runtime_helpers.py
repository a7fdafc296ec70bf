import logging
import tempfile
import unittest
from pathlib import Path

import numpy as np

from assocsim.runtime.logging_utils import close_run_logger, setup_run_logger
from assocsim.runtime.rng import RNG


class RngTests(unittest.TestCase):
    def test_derive_seed_is_stable_and_namespaced(self):
        first = RNG.derive_seed(123, "generate", "x1")
        self.assertEqual(first, RNG.derive_seed(123, "generate", "x1"))
        self.assertNotEqual(first, RNG.derive_seed(123, "generate", "x2"))
        self.assertNotEqual(first, RNG.derive_seed(124, "generate", "x1"))
        self.assertTrue(0 <= first < 2**32)

    def test_spawned_streams_repeat_for_same_seed(self):
        a = RNG(7).spawn("noise").normal(0, 1, 5)
        b = RNG(7).spawn("noise").normal(0, 1, 5)
        c = RNG(7).spawn("missing").normal(0, 1, 5)
        np.testing.assert_allclose(a, b)
        self.assertFalse(np.allclose(a, c))


class LoggingTests(unittest.TestCase):
    def test_setup_run_logger_defaults_to_cwd_logs_directory(self):
        logger, log_path = setup_run_logger(log_dir=None, name="assocsim_test_logger")
        logger.info("test-log-entry")

        path = Path(log_path)
        self.assertEqual(path.parent, Path.cwd() / "logs")
        self.assertTrue(path.exists())

        close_run_logger(logger)
        path.unlink(missing_ok=True)

    def test_setup_run_logger_writes_info_to_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            logger, log_path = setup_run_logger(
                log_dir=temp_dir, name="assocsim_test_file_logger"
            )
            logger.info("[GENERATE] rows=10")
            close_run_logger(logger)

            text = Path(log_path).read_text(encoding="utf-8")
            self.assertIn("[GENERATE] rows=10", text)
            self.assertEqual(Path(log_path).parent, Path(temp_dir))

    def test_run_label_and_quiet_mode(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            logger, log_path = setup_run_logger(
                log_dir=temp_dir,
                name="assocsim_test_quiet_logger",
                run_label="ground truth/v2",
                quiet=True,
            )
            logger.info("[GENERATE] hidden")
            logger.warning("shown")
            close_run_logger(logger)

            self.assertTrue(Path(log_path).name.endswith("_ground_truth_v2.log"))
            text = Path(log_path).read_text(encoding="utf-8")
            self.assertNotIn("hidden", text)
            self.assertIn("shown", text)

    def test_setup_run_logger_ignores_handler_close_errors(self):
        class _BrokenHandler(logging.Handler):
            def emit(self, record):
                return None

            def close(self):
                raise RuntimeError("close failed")

        logger_name = "assocsim_test_logger_broken_close"
        logger = logging.getLogger(logger_name)
        logger.handlers = []
        logger.addHandler(_BrokenHandler())

        with tempfile.TemporaryDirectory() as temp_dir:
            logger, log_path = setup_run_logger(log_dir=temp_dir, name=logger_name)
            logger.info("info")
            self.assertTrue(Path(log_path).exists())
            close_run_logger(logger)


if __name__ == "__main__":
    unittest.main()
