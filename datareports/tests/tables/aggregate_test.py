# Recidiviz - a data platform for criminal justice reform
# Copyright (C) 2024 Recidiviz, Inc.
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
# =============================================================================
"""Tests for aggregate.py"""
import unittest

import pandas as pd

from datareports.common.errors import DataQualityError, SchemaError
from datareports.tables.aggregate import COUNT_COL, count_by, share_by, sum_by


def _incidents() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "INC_YEAR": [2020, 2020, 2021, 2021, 2021, None],
            "BORO": ["BRONX", "BRONX", "BRONX", "QUEENS", None, "QUEENS"],
            "FLAG": [True, False, True, False, False, True],
            "victims": [1, 2, None, 1, 1, 3],
        }
    ).astype(
        {"INC_YEAR": "Int64", "BORO": "string", "FLAG": "boolean", "victims": "Int64"}
    )


def _as_dict(df: pd.DataFrame, keys: list, value: str) -> dict:
    return {
        tuple(None if pd.isna(v) else v for v in row[:-1]): row[-1]
        for row in df[[*keys, value]].itertuples(index=False)
    }


class TestCountBy(unittest.TestCase):
    """Tests for count_by"""

    def test_counts_sum_to_row_count(self) -> None:
        df = _incidents()
        counts = count_by(df, ["INC_YEAR", "BORO"])
        self.assertEqual(len(df), counts[COUNT_COL].sum())
        self.assertEqual("Int64", counts[COUNT_COL].dtype)

    def test_null_keys_form_their_own_group(self) -> None:
        counts = count_by(_incidents(), ["INC_YEAR", "BORO"])

        self.assertEqual(
            {
                (2020, "BRONX"): 2,
                (2021, "BRONX"): 1,
                (2021, "QUEENS"): 1,
                (2021, None): 1,
                (None, "QUEENS"): 1,
            },
            _as_dict(counts, ["INC_YEAR", "BORO"], COUNT_COL),
        )

    def test_custom_name(self) -> None:
        counts = count_by(_incidents(), ["BORO"], name="incidents")
        self.assertEqual(["BORO", "incidents"], list(counts.columns))

    def test_no_keys(self) -> None:
        with self.assertRaises(ValueError):
            count_by(_incidents(), [])

    def test_missing_key(self) -> None:
        with self.assertRaises(SchemaError):
            count_by(_incidents(), ["PRECINCT"])


class TestSumBy(unittest.TestCase):
    """Tests for sum_by"""

    def test_sum_ignores_nulls(self) -> None:
        sums = sum_by(_incidents(), ["BORO"], "victims")

        self.assertEqual(
            {("BRONX",): 3, ("QUEENS",): 4, (None,): 1},
            _as_dict(sums, ["BORO"], "victims"),
        )

    def test_sum_total_is_preserved(self) -> None:
        df = _incidents()
        sums = sum_by(df, ["INC_YEAR"], "victims", name="total")
        self.assertEqual(df["victims"].sum(), sums["total"].sum())


class TestShareBy(unittest.TestCase):
    """Tests for share_by"""

    def test_share(self) -> None:
        shares = share_by(_incidents(), ["BORO"], "FLAG", name="flag_share")

        bronx = shares[shares["BORO"].isin(["BRONX"])].iloc[0]
        self.assertEqual(3, bronx[COUNT_COL])
        self.assertEqual(2, bronx["FLAG_count"])
        self.assertAlmostEqual(2 / 3, bronx["flag_share"])
        self.assertEqual(len(_incidents()), shares[COUNT_COL].sum())

    def test_null_flag_raises(self) -> None:
        df = _incidents()
        df.loc[0, "FLAG"] = pd.NA
        with self.assertRaisesRegex(DataQualityError, r"\[1\] row\(s\) have a null"):
            share_by(df, ["BORO"], "FLAG")
