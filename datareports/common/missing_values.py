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
"""Normalization of the different ways source files spell "no value".

Source CSVs use an empty string, the literal "(null)" and true missing values
interchangeably. All of them are collapsed into pd.NA once, at ingestion, so
that later stages only ever see one missing-value representation.
"""
from typing import FrozenSet

import pandas as pd

# Compared after stripping surrounding whitespace
MISSING_VALUE_MARKERS: FrozenSet[str] = frozenset({"", "(null)"})


def normalize_missing_series(series: pd.Series) -> pd.Series:
    """Returns a copy of |series| as a nullable string Series with every missing
    marker replaced by pd.NA and surrounding whitespace stripped."""
    as_strings = series.astype("string").str.strip()
    return as_strings.mask(as_strings.isin(MISSING_VALUE_MARKERS), pd.NA)


def normalize_missing_values(df: pd.DataFrame) -> pd.DataFrame:
    """Returns a copy of |df| where every column is a nullable string column and
    all missing-value markers are pd.NA."""
    return pd.DataFrame(
        {column: normalize_missing_series(df[column]) for column in df.columns},
        index=df.index,
    )
