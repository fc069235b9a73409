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
"""Shape transforms: wide (one column per date) to long (one row per date) and
back, and decomposition of incident date/time strings into calendar parts."""
import logging
from typing import Dict, List, Sequence

import pandas as pd

from datareports.common.date import (
    MONTH_DAY_YEAR_FORMAT,
    TIME_OF_DAY_FORMAT,
    is_month_day_year_str,
    parse_month_day_year,
    to_datetime_series,
)
from datareports.common.errors import ParseError
from datareports.tables.schema import cast_numeric, require_columns

DATE_COL = "date"

INC_YEAR_COL = "INC_YEAR"
INC_MONTH_COL = "INC_MONTH"
INC_MONTH_NAME_COL = "INC_MONTH_NAME"
INC_TIME_COL = "INC_TIME"


def date_columns(df: pd.DataFrame) -> List[str]:
    """Returns the columns of |df| whose names look like month/day/year dates."""
    return [column for column in df.columns if is_month_day_year_str(column)]


def parse_date_column_names(columns: Sequence[str]) -> Dict[str, pd.Timestamp]:
    """Maps each date-like column name to the date it represents. A name that
    matches the pattern but is not a real calendar date (e.g. '2/30/21') raises a
    ParseError rather than being coerced. Two names that spell the same date
    (e.g. '1/2/20' and '01/02/20') also raise a ParseError."""
    parsed = {}
    for column in columns:
        try:
            parsed[column] = pd.Timestamp(parse_month_day_year(column))
        except ValueError as e:
            raise ParseError(
                "Column name looks like a date but is not a valid calendar date",
                column=column,
            ) from e

    columns_by_date: Dict[pd.Timestamp, List[str]] = {}
    for column, date in parsed.items():
        columns_by_date.setdefault(date, []).append(column)
    for same_date_columns in columns_by_date.values():
        if len(same_date_columns) > 1:
            raise ParseError(
                f"Columns {same_date_columns} all name the same date",
                column=same_date_columns[-1],
            )
    return parsed


def wide_to_long(
    df: pd.DataFrame, *, value_name: str, date_name: str = DATE_COL
) -> pd.DataFrame:
    """Unpivots every month/day/year column of a wide table into (|date_name|,
    |value_name|) rows.

    All non-date columns are treated as identifying columns and are carried
    through unchanged on every emitted row. Values are cast to nullable integers;
    a value that is neither a number nor missing raises a ParseError naming the
    original row.
    """
    value_columns = date_columns(df)
    if not value_columns:
        raise ParseError(
            "Wide table has no month/day/year columns to unpivot", column=value_name
        )
    column_dates = parse_date_column_names(value_columns)
    id_columns = [column for column in df.columns if column not in column_dates]

    for column in value_columns:
        # Validates here so that a failure points at the wide table's row
        cast_numeric(df[column], "Int64")

    long_df = df.melt(
        id_vars=id_columns,
        value_vars=value_columns,
        var_name=date_name,
        value_name=value_name,
        ignore_index=True,
    )
    long_df[date_name] = long_df[date_name].map(column_dates).astype("datetime64[ns]")
    long_df[value_name] = cast_numeric(long_df[value_name], "Int64")
    return long_df.sort_values(
        [*id_columns, date_name], na_position="last", kind="stable"
    ).reset_index(drop=True)


def long_to_wide(
    df: pd.DataFrame,
    *,
    id_columns: Sequence[str],
    value_name: str,
    date_name: str = DATE_COL,
) -> pd.DataFrame:
    """Pivots a long table back to one row per |id_columns| combination and one
    column per date. Column labels are the dates as Timestamps."""
    require_columns(df, [*id_columns, date_name, value_name], stage="Pivot")
    wide = df.pivot(index=list(id_columns), columns=date_name, values=value_name)
    wide.columns.name = None
    return wide.reset_index()


def decompose_incident_datetime(
    df: pd.DataFrame, *, date_column: str, time_column: str
) -> pd.DataFrame:
    """Returns a copy of |df| with calendar parts derived from a month/day/year
    date column and an HH:MM:SS time column:

        INC_YEAR        calendar year
        INC_MONTH       calendar month, 1-12
        INC_MONTH_NAME  full month name, e.g. "March"
        INC_TIME        hour of day 0-23, truncating minutes and seconds

    Missing or unparseable values produce nulls; no row is dropped and nothing is
    defaulted to a sentinel date.
    """
    require_columns(df, [date_column, time_column], stage="Date decomposition")
    result = df.copy()

    dates = df[date_column]
    if not pd.api.types.is_datetime64_any_dtype(dates):
        dates = to_datetime_series(dates, MONTH_DAY_YEAR_FORMAT)
    times = to_datetime_series(df[time_column], TIME_OF_DAY_FORMAT)

    for column, parsed in ((date_column, dates), (time_column, times)):
        unparseable = int((df[column].notna() & parsed.isna()).sum())
        if unparseable:
            logging.warning(
                "Treating [%d] unparseable value(s) in column [%s] as missing",
                unparseable,
                column,
            )

    result[INC_YEAR_COL] = dates.dt.year.astype("Int64")
    result[INC_MONTH_COL] = dates.dt.month.astype("Int64")
    result[INC_MONTH_NAME_COL] = dates.dt.month_name().astype("string")
    result[INC_TIME_COL] = times.dt.hour.astype("Int64")
    return result
