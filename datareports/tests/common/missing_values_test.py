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
"""Tests for missing_values.py"""
import unittest

import pandas as pd

from datareports.common.missing_values import (
    normalize_missing_series,
    normalize_missing_values,
)


class TestNormalizeMissingValues(unittest.TestCase):
    """Tests for normalize_missing_series and normalize_missing_values"""

    def test_normalize_series(self) -> None:
        series = pd.Series(["a", "", "(null)", " b ", None], name="col")

        normalized = normalize_missing_series(series)

        self.assertEqual("string", normalized.dtype)
        self.assertEqual(["a", "b"], normalized.dropna().tolist())
        self.assertEqual([False, True, True, False, True], normalized.isna().tolist())

    def test_normalize_frame_keeps_index_and_columns(self) -> None:
        df = pd.DataFrame(
            {"x": ["1", "(null)"], "y": ["", "z"]}, index=pd.Index([10, 11])
        )

        normalized = normalize_missing_values(df)

        self.assertEqual(["x", "y"], list(normalized.columns))
        self.assertEqual([10, 11], list(normalized.index))
        self.assertTrue(pd.isna(normalized.loc[11, "x"]))
        self.assertTrue(pd.isna(normalized.loc[10, "y"]))
        self.assertEqual("z", normalized.loc[11, "y"])

    def test_normalize_empty_frame(self) -> None:
        normalized = normalize_missing_values(pd.DataFrame({"x": []}))
        self.assertEqual(["x"], list(normalized.columns))
        self.assertTrue(normalized.empty)
