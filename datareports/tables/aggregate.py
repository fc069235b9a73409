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
"""Group-by aggregations that produce one bucket per distinct key combination.

Null key values form their own bucket; callers that want them gone filter
before aggregating. Output order is not meaningful, callers sort as needed.
"""
from typing import Optional, Sequence

import pandas as pd

from datareports.common.errors import DataQualityError
from datareports.tables.schema import require_columns

COUNT_COL = "count"
SHARE_COL = "share"


def _group(
    df: pd.DataFrame, keys: Sequence[str]
) -> "pd.core.groupby.DataFrameGroupBy":
    if not keys:
        raise ValueError("At least one grouping key is required")
    return df.groupby(list(keys), dropna=False, sort=False, observed=True)


def count_by(
    df: pd.DataFrame, keys: Sequence[str], *, name: str = COUNT_COL
) -> pd.DataFrame:
    """Returns the number of rows for each distinct combination of |keys|."""
    require_columns(df, keys, stage="Count aggregation")
    counts = _group(df, keys).size()
    return counts.astype("Int64").rename(name).reset_index()


def sum_by(
    df: pd.DataFrame,
    keys: Sequence[str],
    value_column: str,
    *,
    name: Optional[str] = None,
) -> pd.DataFrame:
    """Returns the sum of |value_column| for each distinct combination of |keys|.
    Null values are ignored, so a group of only nulls sums to 0."""
    require_columns(df, [*keys, value_column], stage="Sum aggregation")
    sums = _group(df, keys)[value_column].sum(min_count=0)
    return sums.rename(name or value_column).reset_index()


def share_by(
    df: pd.DataFrame,
    keys: Sequence[str],
    flag_column: str,
    *,
    name: str = SHARE_COL,
) -> pd.DataFrame:
    """Returns, for each distinct combination of |keys|, the row count, the number
    of rows where |flag_column| is true, and their ratio.

    A null flag would leave the denominator undefined, so it raises a
    DataQualityError; filter those rows out first to compute over complete cases.
    """
    require_columns(df, [*keys, flag_column], stage="Share aggregation")
    null_flags = df[flag_column].isna()
    if null_flags.any():
        raise DataQualityError(
            f"Cannot compute [{name}] by {list(keys)}: [{int(null_flags.sum())}] "
            f"row(s) have a null [{flag_column}]"
        )
    flag_count_name = f"{flag_column}_count"
    flagged = df.assign(**{flag_count_name: df[flag_column].astype(int)})
    grouped = _group(flagged, keys)
    shares = grouped.agg(
        **{
            COUNT_COL: (flag_column, "size"),
            flag_count_name: (flag_count_name, "sum"),
        }
    ).reset_index()
    shares[COUNT_COL] = shares[COUNT_COL].astype("Int64")
    shares[flag_count_name] = shares[flag_count_name].astype("Int64")
    shares[name] = shares[flag_count_name].astype("Float64") / shares[COUNT_COL]
    return shares

