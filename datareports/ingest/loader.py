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
"""Fetches source CSV files over HTTP(S) into dataframes.

Every value is read as a string and missing-value markers are normalized to
pd.NA before the frame is handed to any transform. Failures are fatal: there is
no retry and no partial fallback.
"""
import io
import logging
from typing import Callable, Optional

import pandas as pd
import requests

from datareports.common.errors import FetchError
from datareports.common.missing_values import normalize_missing_values

DEFAULT_TIMEOUT_SECONDS = 60

# Signature shared by fetch_csv and the fakes used in tests
CsvFetcher = Callable[[str], pd.DataFrame]


def _fetch_remote_text(
    url: str, session: Optional[requests.Session], timeout: float
) -> str:
    """Fetches the content of a remote file as a string"""
    try:
        response = (session or requests).get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch remote file: {e}", url) from e
    logging.info("Fetched remote file from %s", url)
    try:
        return response.content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FetchError(f"Malformed CSV payload, not valid UTF-8: {e}", url) from e


def read_csv_text(text: str, *, source: str = "<memory>") -> pd.DataFrame:
    """Parses CSV |text| into a frame of nullable strings with missing markers
    normalized to pd.NA."""
    try:
        df = pd.read_csv(
            io.StringIO(text),
            # Read all as str so that nothing is coerced before the schema is applied
            dtype=str,
            keep_default_na=False,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise FetchError(f"Malformed CSV payload: {e}", source) from e
    return normalize_missing_values(df)


def fetch_csv(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> pd.DataFrame:
    """Fetches the CSV at |url| and returns it as a frame of nullable strings."""
    df = read_csv_text(_fetch_remote_text(url, session, timeout), source=url)
    logging.info("Read [%d] rows and [%d] columns from %s", *df.shape, url)
    return df
