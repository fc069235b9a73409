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
"""Named, typed column declarations used to project raw source frames.

A TableSchema selects a subset of a raw (all-string) frame, renames columns for
clarity, and casts each one to its declared type. Values that cannot be cast are
reported with the offending row rather than silently coerced.
"""
from enum import Enum
from typing import Dict, Iterable, List, Mapping

import attr
import pandas as pd

from datareports.common.date import MONTH_DAY_YEAR_FORMAT, to_datetime_series
from datareports.common.errors import ParseError, SchemaError

BOOL_VALUES: Dict[str, bool] = {
    "TRUE": True,
    "FALSE": False,
    "T": True,
    "F": False,
    "Y": True,
    "N": False,
    "1": True,
    "0": False,
}


class ColumnType(Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DATE = "date"
    # Kept as the raw (normalized) string; decomposed by a later stage
    PASSTHROUGH = "passthrough"


def require_columns(df: pd.DataFrame, columns: Iterable[str], *, stage: str) -> None:
    """Throws a SchemaError if any of |columns| is absent from |df|."""
    missing = [column for column in columns if column not in df.columns]
    if missing:
        raise SchemaError(
            f"{stage} requires column(s) {missing}; found {list(df.columns)}"
        )


def _first_failure(original: pd.Series, converted: pd.Series) -> ParseError:
    failed = original.notna() & converted.isna()
    row = failed.idxmax()
    return ParseError(
        "Value is not an accepted missing marker and could not be parsed",
        column=str(original.name),
        row=row,
        value=original.loc[row],
    )


def cast_numeric(series: pd.Series, dtype: str) -> pd.Series:
    """Casts a string Series to the nullable numeric |dtype| ("Int64" or
    "Float64"). Missing values stay missing; anything else that does not parse
    raises a ParseError naming the first offending row."""
    values = series.astype(object).where(series.notna(), None)
    converted = pd.to_numeric(values, errors="coerce")
    if (series.notna() & converted.isna()).any():
        raise _first_failure(series, converted)
    if dtype == "Int64" and not (converted.dropna() % 1 == 0).all():
        non_integral = converted.notna() & (converted % 1 != 0)
        row = non_integral.idxmax()
        raise ParseError(
            "Value is not an integer",
            column=str(series.name),
            row=row,
            value=series.loc[row],
        )
    return converted.astype(dtype)


def cast_bool(series: pd.Series) -> pd.Series:
    values = series.astype(object).where(series.notna(), None)
    converted = values.str.strip().str.upper().map(BOOL_VALUES)
    if (series.notna() & converted.isna()).any():
        raise _first_failure(series, converted)
    return converted.astype("boolean")


def cast_column(series: pd.Series, column_type: ColumnType) -> pd.Series:
    """Casts one normalized string column to |column_type|."""
    if column_type is ColumnType.STRING:
        return series.astype("string")
    if column_type is ColumnType.INT:
        return cast_numeric(series, "Int64")
    if column_type is ColumnType.FLOAT:
        return cast_numeric(series, "Float64")
    if column_type is ColumnType.BOOL:
        return cast_bool(series)
    if column_type is ColumnType.DATE:
        converted = to_datetime_series(series, MONTH_DAY_YEAR_FORMAT)
        if (series.notna() & converted.isna()).any():
            raise _first_failure(series, converted)
        return converted
    if column_type is ColumnType.PASSTHROUGH:
        return series.copy()
    raise ValueError(f"Unexpected column type: [{column_type}]")


@attr.s(frozen=True)
class ColumnSpec:
    """A single column to keep from a source file."""

    source_name: str = attr.ib()
    column_type: ColumnType = attr.ib(default=ColumnType.STRING)
    # Defaults to source_name
    name: str = attr.ib()

    @name.default
    def _name_default(self) -> str:
        return self.source_name


@attr.s(frozen=True)
class TableSchema:
    """An ordered list of columns to project out of a raw source frame."""

    columns: List[ColumnSpec] = attr.ib(factory=list)

    @columns.validator
    def _check_unique_names(
        self, _attribute: attr.Attribute, value: List[ColumnSpec]
    ) -> None:
        names = [column.name for column in value]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate output column names in schema: {duplicates}")

    @classmethod
    def from_mappings(
        cls,
        renames: Mapping[str, str],
        column_types: Mapping[str, ColumnType],
    ) -> "TableSchema":
        """Builds a schema from a source -> output rename map, in map order, and a
        map of output column name -> type. Unlisted types default to STRING."""
        return cls(
            columns=[
                ColumnSpec(
                    source_name=source_name,
                    name=name,
                    column_type=column_types.get(name, ColumnType.STRING),
                )
                for source_name, name in renames.items()
            ]
        )

    @property
    def names(self) -> List[str]:
        return [column.name for column in self.columns]

    def project(self, df: pd.DataFrame) -> pd.DataFrame:
        """Returns a new frame with only the schema's columns, renamed and cast."""
        require_columns(
            df, [column.source_name for column in self.columns], stage="Projection"
        )
        return pd.DataFrame(
            {
                column.name: cast_column(
                    df[column.source_name], column.column_type
                ).rename(column.name)
                for column in self.columns
            },
            index=df.index,
        )
