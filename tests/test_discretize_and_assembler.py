import unittest

import numpy as np
import pandas as pd

from assocsim.engine.assembler import assemble, cardinality_warnings
from assocsim.engine.discretize import (
    apply_bin_spec,
    cut_fixed,
    cut_quantile,
    interval_labels,
    supervised_bin,
)
from assocsim.engine.table import CATEGORICAL, NUMERIC, Column, Table
from assocsim.errors import ConfigurationError, ContractViolation
from assocsim.schema.config import BinSpec


class _ThresholdBinner:
    """Stand-in auto-binner that splits the predictor at its median."""

    def __init__(self):
        self.frames = []
        self.indexes = []

    def auto_bin(self, frame, index=0):
        self.frames.append(frame.copy())
        self.indexes.append(index)
        values = frame.iloc[:, index].astype(float)
        cut = values.median()
        return pd.Series(np.where(values <= cut, "low", "high"), dtype=object)


class FixedCutTests(unittest.TestCase):
    def test_boundary_values_land_in_interval_they_close(self):
        values = pd.Series([150.0, 200.0, 200.5, 240.0, 260.0])
        out = cut_fixed(
            values,
            [-np.inf, 200, 240, np.inf],
            ["Desirable", "Borderline", "High"],
        )
        self.assertEqual(
            out.tolist(), ["Desirable", "Desirable", "Borderline", "Borderline", "High"]
        )
        self.assertTrue(out.cat.ordered)

    def test_lowest_boundary_needs_include_lowest(self):
        values = pd.Series([0.0, 1.0, 5.0])
        plain = cut_fixed(values, [0, 1, 12], ["0-1", "2+"])
        self.assertTrue(pd.isna(plain.iloc[0]))
        closed = cut_fixed(values, [0, 1, 12], ["0-1", "2+"], include_lowest=True)
        self.assertEqual(closed.tolist(), ["0-1", "0-1", "2+"])

    def test_out_of_range_and_missing_values_map_to_missing(self):
        out = cut_fixed(pd.Series([np.nan, 50.0, -1.0]), [0, 10, 20], ["a", "b"])
        self.assertEqual(int(out.isna().sum()), 3)

    def test_already_binned_input_is_unchanged(self):
        bounds = [-np.inf, 40, 60, np.inf]
        labels = ["Low", "Normal", "High"]
        first = cut_fixed(pd.Series([10.0, 45.0, 70.0]), bounds, labels)
        second = cut_fixed(first, bounds, labels)
        self.assertEqual(first.tolist(), second.tolist())

    def test_invalid_boundaries_and_labels_fail(self):
        values = pd.Series([1.0, 2.0])
        with self.assertRaises(ConfigurationError):
            cut_fixed(values, [0, 5, 3], ["a", "b"])
        with self.assertRaises(ConfigurationError):
            cut_fixed(values, [0, 5, 10], ["a"])
        with self.assertRaises(ConfigurationError):
            cut_fixed(values, [0], [])
        with self.assertRaises(ConfigurationError):
            cut_fixed(pd.Series(["x", "y"]), [0, 5, 10], ["a", "b"])


class QuantileCutTests(unittest.TestCase):
    def test_equal_frequency_bins(self):
        values = pd.Series(np.arange(1, 101, dtype=float))
        out = cut_quantile(values, 5, name="protein")
        counts = out.value_counts()
        self.assertEqual(sorted(counts.tolist()), [20, 20, 20, 20, 20])
        self.assertTrue(str(out.cat.categories[0]).startswith("["))

    def test_custom_labels_and_missing_values(self):
        values = pd.Series([1.0, 2.0, np.nan, 3.0, 4.0])
        out = cut_quantile(values, 2, labels=["lo", "hi"])
        self.assertEqual(out.tolist()[:2], ["lo", "lo"])
        self.assertTrue(pd.isna(out.iloc[2]))

    def test_interval_labels_close_first_interval(self):
        labels = interval_labels([1.0, 1.5, 3.0])
        self.assertEqual(labels, ["[1,1.5]", "(1.5,3]"])


class SupervisedBinTests(unittest.TestCase):
    def test_binner_sees_only_observed_outcome_rows(self):
        predictor = Column("glucose", NUMERIC, [80.0, 95.0, 120.0, 150.0, np.nan])
        outcome = Column(
            "y_cat", CATEGORICAL, ["Y1", None, "Y2", "Y2", "Y1"], levels=["Y1", "Y2"]
        )
        binner = _ThresholdBinner()
        binned = supervised_bin(binner, predictor, outcome)

        handed = binner.frames[0]
        self.assertEqual(list(handed.columns), ["glucose", "y_cat"])
        self.assertEqual(binner.indexes, [0])
        self.assertEqual(len(handed), 4)
        self.assertTrue(pd.isna(binned.values.iloc[1]))
        self.assertEqual(binned.values.iloc[0], "low")
        self.assertEqual(binned.values.iloc[3], "high")
        self.assertTrue(binned.is_categorical)

    def test_binner_output_length_is_checked(self):
        class _ShortBinner:
            def auto_bin(self, frame, index=0):
                return pd.Series(["a"])

        predictor = Column("lab", NUMERIC, [1.0, 2.0, 3.0])
        outcome = Column("y", CATEGORICAL, ["a", "b", "a"], levels=["a", "b"])
        with self.assertRaises(ContractViolation):
            supervised_bin(_ShortBinner(), predictor, outcome)

    def test_apply_bin_spec_requires_binner_for_supervised_mode(self):
        table = Table()
        table.add(Column("lab", NUMERIC, [1.0, 2.0]))
        spec = BinSpec(column="lab", mode="supervised", output="lab_cat")
        with self.assertRaises(ConfigurationError):
            apply_bin_spec(table, spec)

    def test_apply_bin_spec_fixed_mode(self):
        table = Table()
        table.add(Column("wbc", NUMERIC, [2.0, 7.0, 12.0]))
        spec = BinSpec(
            column="wbc",
            mode="fixed",
            output="wbc",
            boundaries=(2.0, 4.0, 11.0, 25.0),
            labels=("Low", "Normal", "High"),
            include_lowest=True,
        )
        column = apply_bin_spec(table, spec)
        self.assertEqual(column.values.tolist(), ["Low", "Normal", "High"])
        self.assertEqual(column.levels, ["Low", "Normal", "High"])


class AssemblerTests(unittest.TestCase):
    def _frame(self):
        return pd.DataFrame(
            {
                "y": pd.Categorical(["Y1", None, "Y2", "Y1"]),
                "x1": pd.Categorical(["A", "B", None, "A"]),
                "x2": pd.Categorical(["P", "Q", "P", "Q"]),
            }
        )

    def test_outcome_goes_last_and_missing_outcome_rows_drop(self):
        dataset = assemble(self._frame(), "y")
        self.assertEqual(list(dataset.frame.columns), ["x1", "x2", "y"])
        self.assertEqual(len(dataset.frame), 3)
        self.assertEqual(dataset.dropped_rows, 1)
        self.assertEqual(dataset.rows_before, 4)
        self.assertEqual(int(dataset.frame["x1"].isna().sum()), 1)
        self.assertEqual(dataset.predictors, ["x1", "x2"])

    def test_predictor_selection_and_contract_errors(self):
        dataset = assemble(self._frame(), "y", predictors=["x2"])
        self.assertEqual(list(dataset.frame.columns), ["x2", "y"])
        with self.assertRaises(ContractViolation):
            assemble(self._frame(), "z")
        with self.assertRaises(ContractViolation):
            assemble(self._frame(), "y", predictors=["x9"])
        with self.assertRaises(ContractViolation):
            assemble(self._frame(), "y", predictors=["y"])
        with self.assertRaises(ContractViolation):
            assemble(self._frame(), "y", predictors=[])

    def test_cardinality_warnings(self):
        frame = pd.DataFrame(
            {
                "wide": [str(i) for i in range(12)],
                "y": [f"Y{i % 11}" for i in range(12)],
            }
        )
        warnings = cardinality_warnings(frame, "y")
        self.assertEqual(len(warnings), 2)
        self.assertIn("predictor 'wide'", warnings[0])
        self.assertIn("outcome 'y'", warnings[1])

    def test_assemble_accepts_tables(self):
        table = Table()
        table.add(Column("x1", CATEGORICAL, ["A", "B"], levels=["A", "B"]))
        table.add(Column("y", CATEGORICAL, ["Y1", "Y2"], levels=["Y1", "Y2"]))
        dataset = assemble(table, "y")
        self.assertEqual(dataset.warnings, [])
        self.assertEqual(dataset.dropped_rows, 0)


if __name__ == "__main__":
    unittest.main()
