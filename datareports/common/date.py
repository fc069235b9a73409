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
"""Helpers for the month/day/year dates used by the source files."""
import datetime
import re

import pandas as pd

# Source files always use US-style month/day/year, with either a two or four
# digit year (e.g. '1/22/20' in the COVID files, '3/15/2021' in the NYPD file).
MONTH_DAY_YEAR_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})$")

MONTH_DAY_YEAR_FORMAT = "%m/%d/%Y"
TIME_OF_DAY_FORMAT = "%H:%M:%S"


def is_month_day_year_str(potential_date_str: str) -> bool:
    """Returns True if the string looks like a month/day/year date, whether or not
    it is a valid calendar date."""
    return bool(MONTH_DAY_YEAR_PATTERN.match(str(potential_date_str).strip()))


def parse_month_day_year(date_str: str) -> datetime.date:
    """Parses a month/day/year string into a date. Two digit years are read with
    the usual %y pivot (00-68 => 20xx).

    Raises ValueError if the string does not match the pattern or is not a valid
    calendar date.
    """
    match = MONTH_DAY_YEAR_PATTERN.match(str(date_str).strip())
    if not match:
        raise ValueError(f"[{date_str}] is not a month/day/year date")
    month, day, year = match.groups()
    year_format = "%y" if len(year) == 2 else "%Y"
    return datetime.datetime.strptime(
        f"{month}/{day}/{year}", f"%m/%d/{year_format}"
    ).date()


def to_datetime_series(series: pd.Series, date_format: str) -> pd.Series:
    """Converts a string Series with the given format into a datetime64 Series.
    Missing and unparseable values become NaT."""
    values = series.astype(object).where(series.notna(), None)
    return pd.to_datetime(values, format=date_format, errors="coerce")
