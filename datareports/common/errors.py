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
"""Contains errors raised while building reports."""
from typing import Any, Hashable, Optional


class DataReportsError(Exception):
    """Base class for all errors raised by report pipelines."""


class FetchError(DataReportsError):
    """Raised when a source file cannot be retrieved or read as CSV."""

    def __init__(self, msg: str, url: str):
        self.url = url
        super().__init__(f"{msg} [url={url}]")


class SchemaError(DataReportsError):
    """Raised when a table is missing columns that a stage requires."""


class ParseError(DataReportsError):
    """Raised when a value that must be numeric or date-like is neither and is not
    an accepted missing marker."""

    def __init__(
        self,
        msg: str,
        column: str,
        row: Optional[Hashable] = None,
        value: Optional[Any] = None,
    ):
        self.column = column
        self.row = row
        self.value = value
        location = f"column [{column}]"
        if row is not None:
            location += f", row [{row}]"
        if value is not None:
            location += f", value [{value!r}]"
        super().__init__(f"{msg}: {location}")


class DataQualityError(DataReportsError):
    """Raised when input data violates an invariant the reports depend on, e.g.
    duplicate join keys."""


class ModelFitError(DataReportsError):
    """Raised when a regression model cannot be fit."""
