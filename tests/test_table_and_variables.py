import unittest

import numpy as np
import pandas as pd

from assocsim.engine.encoding import indicator_encode, ordinal_encode
from assocsim.engine.table import CATEGORICAL, NUMERIC, Column, Table
from assocsim.engine.variables import (
    check_sample_size,
    normalize_probabilities,
    sample_categorical,
    sample_continuous,
    sample_noise,
)
from assocsim.errors import ConfigurationError
from assocsim.runtime.rng import RNG


class TableTests(unittest.TestCase):
    def test_categorical_column_rejects_unknown_labels(self):
        with self.assertRaises(ConfigurationError):
            Column("x", CATEGORICAL, ["A", "Z"], levels=["A", "B"])

    def test_categorical_column_keeps_missing_values(self):
        column = Column("x", CATEGORICAL, ["A", None, "B"], levels=["A", "B"])
        self.assertEqual(column.missing_count(), 1)
        self.assertEqual(list(column.values.cat.categories), ["A", "B"])

    def test_table_rejects_length_mismatch_and_unknown_lookups(self):
        table = Table()
        table.add(Column("a", NUMERIC, [1.0, 2.0, 3.0]))
        with self.assertRaises(ConfigurationError):
            table.add(Column("b", NUMERIC, [1.0, 2.0]))
        with self.assertRaises(ConfigurationError):
            table.require("missing")
        with self.assertRaises(ConfigurationError):
            table.require("a", CATEGORICAL)

    def test_frame_round_trip_keeps_kinds_and_order(self):
        frame = pd.DataFrame(
            {
                "lab": [1.5, np.nan, 3.0],
                "sex": pd.Categorical(["F", "M", None], categories=["F", "M"]),
            }
        )
        table = Table.from_frame(frame)
        self.assertEqual(table.names, ["lab", "sex"])
        self.assertFalse(table.require("lab").is_categorical)
        self.assertEqual(table.require("sex").levels, ["F", "M"])
        out = table.to_frame()
        self.assertEqual(int(out["sex"].isna().sum()), 1)
        self.assertEqual(int(out["lab"].isna().sum()), 1)

    def test_ordered_labels_survive_column_round_trips(self):
        source = pd.Series(
            pd.Categorical(
                ["High", "Low", None], categories=["Low", "High"], ordered=True
            )
        )
        column = Column("risk", CATEGORICAL, source)
        self.assertTrue(column.ordered)
        self.assertTrue(column.values.cat.ordered)

        blanked = column.with_values(pd.Series([None, "High", "Low"]))
        self.assertTrue(blanked.values.cat.ordered)
        self.assertEqual(list(blanked.values.cat.categories), ["Low", "High"])

        plain = Column("x", CATEGORICAL, ["A", "B"], levels=["A", "B"])
        self.assertFalse(plain.values.cat.ordered)


class VariableSamplerTests(unittest.TestCase):
    def test_categorical_draws_stay_in_label_set_and_match_frequencies(self):
        rng = RNG(123)
        column = sample_categorical(
            rng, ["A", "B", "C", "D"], [0.1, 0.2, 0.3, 0.4], 20000, name="x1"
        )
        self.assertEqual(len(column), 20000)
        self.assertEqual(column.missing_count(), 0)
        self.assertTrue(set(column.values.astype(str)).issubset({"A", "B", "C", "D"}))

        shares = column.values.value_counts(normalize=True)
        for label, expected in zip("ABCD", [0.1, 0.2, 0.3, 0.4]):
            self.assertAlmostEqual(float(shares[label]), expected, delta=0.02)

    def test_uniform_probabilities_when_omitted(self):
        probs = normalize_probabilities(["a", "b", "c", "d"], None)
        np.testing.assert_allclose(probs, [0.25, 0.25, 0.25, 0.25])

    def test_probabilities_are_normalized(self):
        probs = normalize_probabilities(["a", "b"], [2, 6])
        np.testing.assert_allclose(probs, [0.25, 0.75])
        probs = normalize_probabilities(["a", "b"], {"b": 1})
        np.testing.assert_allclose(probs, [0.0, 1.0])

    def test_bad_probability_vectors_fail(self):
        with self.assertRaises(ConfigurationError):
            normalize_probabilities(["a", "b"], [0.5, 0.3, 0.2])
        with self.assertRaises(ConfigurationError):
            normalize_probabilities(["a", "b"], [-0.5, 1.5])
        with self.assertRaises(ConfigurationError):
            normalize_probabilities(["a", "b"], [0, 0])
        with self.assertRaises(ConfigurationError):
            normalize_probabilities(["a", "b"], {"c": 1})

    def test_sample_size_must_be_positive_integer(self):
        for bad in (0, -5, 2.5, True, "ten"):
            with self.assertRaises(ConfigurationError):
                check_sample_size(bad)
        self.assertEqual(check_sample_size(10), 10)

    def test_continuous_values_are_clamped_and_rounded(self):
        column = sample_continuous(
            RNG(5),
            "normal",
            {"mean": 90, "sd": 40},
            5000,
            clamp=[50, 250],
            decimals=0,
            name="glucose",
        )
        values = column.values.to_numpy()
        self.assertGreaterEqual(values.min(), 50)
        self.assertLessEqual(values.max(), 250)
        np.testing.assert_allclose(values, np.round(values))
        self.assertEqual(column.clamp, (50.0, 250.0))

    def test_count_families_produce_integers(self):
        column = sample_continuous(RNG(1), "poisson", {"lam": 7}, 500, name="wbc")
        values = column.values.to_numpy()
        np.testing.assert_allclose(values, np.round(values))
        self.assertGreaterEqual(values.min(), 0)

        column = sample_continuous(
            RNG(1), "binomial", {"size": 12, "prob": 0.25}, 500, name="visits"
        )
        self.assertLessEqual(column.values.max(), 12)

    def test_unknown_family_and_bad_params_fail(self):
        with self.assertRaises(ConfigurationError):
            sample_continuous(RNG(1), "gamma", {}, 10)
        with self.assertRaises(ConfigurationError):
            sample_continuous(RNG(1), "normal", {"mean": 0}, 10)
        with self.assertRaises(ConfigurationError):
            sample_continuous(RNG(1), "normal", {"mean": 0, "sd": -1}, 10)
        with self.assertRaises(ConfigurationError):
            sample_continuous(RNG(1), "binomial", {"size": 3, "prob": 1.5}, 10)
        with self.assertRaises(ConfigurationError):
            sample_continuous(RNG(1), "normal", {"mean": 0, "sd": 1}, 10, clamp=[5, 1])

    def test_noise_rejects_negative_sd(self):
        self.assertEqual(len(sample_noise(RNG(2), 4, 0.0, 0.0)), 4)
        with self.assertRaises(ConfigurationError):
            sample_noise(RNG(2), 4, 0.0, -1.0)


class EncodingTests(unittest.TestCase):
    def test_ordinal_encoding_uses_declared_order(self):
        column = Column("x3", CATEGORICAL, ["L", "N", None, "M"], levels=["L", "M", "N"])
        encoded = ordinal_encode(column, ["L", "M", "N"])
        self.assertEqual(encoded.name, "x3_num")
        values = encoded.values.tolist()
        self.assertEqual(values[0], 1.0)
        self.assertEqual(values[1], 3.0)
        self.assertTrue(np.isnan(values[2]))
        self.assertEqual(values[3], 2.0)

    def test_ordinal_encoding_rejects_labels_outside_order(self):
        column = Column("x", CATEGORICAL, ["A", "B"], levels=["A", "B"])
        with self.assertRaises(ConfigurationError):
            ordinal_encode(column, ["A"])

    def test_indicator_encoding(self):
        column = Column(
            "chol", CATEGORICAL, ["High", "Desirable", None], levels=["Desirable", "High"]
        )
        encoded = indicator_encode(column, "High")
        self.assertEqual(encoded.name, "chol_is_High")
        self.assertEqual(encoded.values.tolist()[:2], [1.0, 0.0])
        self.assertTrue(np.isnan(encoded.values.iloc[2]))
        with self.assertRaises(ConfigurationError):
            indicator_encode(column, "Low")

    def test_encoders_leave_missing_cells_missing(self):
        column = Column("chol", CATEGORICAL, ["High", None], levels=["High", "Low"])
        encoded = indicator_encode(column, "High")
        self.assertEqual(encoded.values.iloc[0], 1.0)
        self.assertTrue(np.isnan(encoded.values.iloc[1]))

        column = Column("x3", CATEGORICAL, [None, None], levels=["L", "M"])
        encoded = ordinal_encode(column, ["L", "M"])
        self.assertTrue(encoded.values.isna().all())

    def test_encoders_reject_numeric_columns(self):
        column = Column("lab", NUMERIC, [1.0, 2.0])
        with self.assertRaises(ConfigurationError):
            ordinal_encode(column, ["1", "2"])


if __name__ == "__main__":
    unittest.main()
