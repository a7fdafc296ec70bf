import importlib
import io
import runpy
import unittest
from contextlib import redirect_stdout
from importlib.metadata import PackageNotFoundError
from unittest.mock import patch

import assocsim


class PackageInitVersionTests(unittest.TestCase):
    def test_init_falls_back_when_package_metadata_missing(self):
        with patch("importlib.metadata.version", side_effect=PackageNotFoundError):
            reloaded = importlib.reload(assocsim)
        self.assertEqual(reloaded.__version__, "0.1.0")

        importlib.reload(assocsim)

    def test_module_execution_path_raises_system_exit(self):
        with patch("sys.argv", ["assocsim"]):
            with redirect_stdout(io.StringIO()):
                with self.assertRaises(SystemExit) as exc:
                    runpy.run_module("assocsim.__main__", run_name="__main__")
        self.assertEqual(exc.exception.code, 0)

    def test_public_names_are_exported(self):
        for name in assocsim.__all__:
            self.assertTrue(hasattr(assocsim, name), name)


if __name__ == "__main__":
    unittest.main()
