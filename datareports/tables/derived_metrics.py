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
"""Per-group running differences and guarded ratios over cumulative series."""
from typing import List, Sequence

import pandas as pd
from pandas.core.groupby import DataFrameGroupBy

from datareports.tables.schema import require_columns

NEW_CASES_COL = "new_cases"
NEW_DEATHS_COL = "new_deaths"
CASE_FATALITY_RATE_COL = "case_fatality_rate"

# Stands in for null group keys so that they form their own group
_NULL_KEY = "\x00<null>"


def group_by_null_safe(df: pd.DataFrame, keys: Sequence[str]) -> DataFrameGroupBy:
    """Groups |df| by |keys| without dropping rows whose key values are null.
    Null key values are grouped together."""
    key_series: List[pd.Series] = [
        df[key].astype("string").fillna(_NULL_KEY).rename(key) for key in keys
    ]
    return df.groupby(key_series, sort=False)


def running_difference(
    df: pd.DataFrame, *, group_columns: Sequence[str], value_column: str
) -> pd.Series:
    """Returns value[i] - value[i-1] within each group, using the frame's current
    row order. The row before the first row of a group counts as 0. A null on
    either side gives a null; negative differences are kept as-is."""
    grouped = group_by_null_safe(df, group_columns)
    values = df[value_column].astype("Int64")
    previous = grouped[value_column].shift(1).astype("Int64")
    is_first_row = grouped.cumcount() == 0
    previous = previous.mask(is_first_row, 0)
    return values - previous


def guarded_ratio(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    """Returns numerator / denominator where the denominator is positive, and null
    everywhere else (zero, negative or missing denominators, missing numerators)."""
    has_positive_denominator = denominator.astype("Float64").gt(0).fillna(False)
    ratio = numerator.astype("Float64") / denominator.astype("Float64").where(
        has_positive_denominator
    )
    return ratio.where(has_positive_denominator)


def add_derived_metrics(
    df: pd.DataFrame,
    *,
    group_columns: Sequence[str],
    date_column: str,
    confirmed_column: str,
    deaths_column: str,
) -> pd.DataFrame:
    """Returns a copy of a joined cumulative table, sorted by group then date, with
    three added columns:

        new_cases           confirmed[i] - confirmed[i-1], confirmed[-1] = 0
        new_deaths          the same over the deaths series
        case_fatality_rate  deaths[i] / confirmed[i] if confirmed[i] > 0 else null

    The output has exactly one row per input row.
    """
    require_columns(
        df,
        [*group_columns, date_column, confirmed_column, deaths_column],
        stage="Derived metrics",
    )
    derived = df.sort_values(
        [*group_columns, date_column], na_position="last", kind="stable"
    ).reset_index(drop=True)

    derived[NEW_CASES_COL] = running_difference(
        derived, group_columns=group_columns, value_column=confirmed_column
    )
    derived[NEW_DEATHS_COL] = running_difference(
        derived, group_columns=group_columns, value_column=deaths_column
    )
    derived[CASE_FATALITY_RATE_COL] = guarded_ratio(
        derived[deaths_column], derived[confirmed_column]
    )
    return derived
