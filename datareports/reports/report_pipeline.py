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
"""Abstract base class for a single report's data pipeline."""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Generic, Optional, TypeVar

import pandas as pd

from datareports.ingest.loader import CsvFetcher, fetch_csv

ConfigT = TypeVar("ConfigT")
ResultsT = TypeVar("ResultsT", bound="ReportResults")


class ReportResults(ABC):
    """The in-memory tables a pipeline produces for the presentation layer."""

    @abstractmethod
    def tables(self) -> Dict[str, pd.DataFrame]:
        """Returns the named output tables, in display order."""


class ReportPipeline(ABC, Generic[ConfigT, ResultsT]):
    """Runs one report end to end, from source URLs to output tables.

    Each stage is a module-level pure function from input frame(s) to a new
    frame; the pipeline only wires the stages together. A run either completes or
    raises, there is no partial result and nothing is retried.
    """

    def __init__(self, config: ConfigT, fetcher: Optional[CsvFetcher] = None):
        self.config = config
        self.fetcher: CsvFetcher = fetcher or fetch_csv

    @property
    @abstractmethod
    def report_name(self) -> str:
        """Short, path-safe name of the report, e.g. "covid"."""

    @abstractmethod
    def _run(self) -> ResultsT:
        """Fetches the sources and computes every output table."""

    def run(self) -> ResultsT:
        logging.info("Running [%s] report pipeline", self.report_name)
        results = self._run()
        for name, table in results.tables().items():
            logging.info(
                "[%s] produced table [%s] with [%d] rows",
                self.report_name,
                name,
                len(table),
            )
        return results
