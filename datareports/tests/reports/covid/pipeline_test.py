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
"""Tests for the COVID-19 report pipeline."""
import unittest
from typing import Optional

import pandas as pd

from datareports.common.errors import FetchError
from datareports.modeling.regression import ModelFamily
from datareports.reports.covid.config import CovidReportConfig
from datareports.reports.covid.pipeline import (
    CONFIRMED_COL,
    COUNTRY_REGION_COL,
    DEATHS_COL,
    PROVINCE_STATE_COL,
    CovidReportPipeline,
    CovidReportResults,
)
from datareports.tables.derived_metrics import (
    CASE_FATALITY_RATE_COL,
    NEW_CASES_COL,
    NEW_DEATHS_COL,
)
from datareports.tables.reshape import DATE_COL
from datareports.tests.reports.fixture_fetcher import FixtureFetcher, fixture_path

_CONFIRMED_URL = "https://example.com/time_series_covid19_confirmed_global.csv"
_DEATHS_URL = "https://example.com/time_series_covid19_deaths_global.csv"


def _fetcher() -> FixtureFetcher:
    return FixtureFetcher(
        {
            _CONFIRMED_URL: fixture_path(
                __file__, "time_series_confirmed_global.csv"
            ),
            _DEATHS_URL: fixture_path(__file__, "time_series_deaths_global.csv"),
        }
    )


def _run() -> CovidReportResults:
    return CovidReportPipeline(
        CovidReportConfig(confirmed_url=_CONFIRMED_URL, deaths_url=_DEATHS_URL),
        fetcher=_fetcher(),
    ).run()


def _region(
    df: pd.DataFrame, country: str, province: Optional[str] = None
) -> pd.DataFrame:
    in_country = df[COUNTRY_REGION_COL].isin([country])
    if province is None:
        return df[in_country & df[PROVINCE_STATE_COL].isna()]
    return df[in_country & df[PROVINCE_STATE_COL].isin([province])]


class TestCovidReportPipeline(unittest.TestCase):
    """Tests for CovidReportPipeline"""

    results: CovidReportResults

    @classmethod
    def setUpClass(cls) -> None:
        cls.results = _run()

    def test_long_tables(self) -> None:
        self.assertEqual(4 * 4, len(self.results.confirmed_long))
        self.assertEqual(3 * 4, len(self.results.deaths_long))
        self.assertEqual(
            [
                PROVINCE_STATE_COL,
                COUNTRY_REGION_COL,
                "lat",
                "long",
                DATE_COL,
                CONFIRMED_COL,
            ],
            list(self.results.confirmed_long.columns),
        )

    def test_join_keeps_every_confirmed_row(self) -> None:
        derived = self.results.derived
        self.assertEqual(len(self.results.confirmed_long), len(derived))
        # No deaths series for this province
        self.assertTrue(_region(derived, "Beta", "South")[DEATHS_COL].isna().all())

    def test_derived_metrics(self) -> None:
        alpha = _region(self.results.derived, "Alpha")
        self.assertEqual([0, 5, 0, 7], alpha[NEW_CASES_COL].tolist())
        self.assertEqual([0, 1, 0, 1], alpha[NEW_DEATHS_COL].tolist())
        self.assertTrue(pd.isna(alpha[CASE_FATALITY_RATE_COL].iloc[0]))
        self.assertAlmostEqual(2 / 12, alpha[CASE_FATALITY_RATE_COL].iloc[3])

        north = _region(self.results.derived, "Beta", "North")
        self.assertEqual([1, 1, 2, 0], north[NEW_CASES_COL].tolist())

        south = _region(self.results.derived, "Beta", "South")
        self.assertEqual([0, 1, 2, 3], south[NEW_CASES_COL].tolist())
        self.assertTrue(south[NEW_DEATHS_COL].isna().all())
        self.assertTrue(south[CASE_FATALITY_RATE_COL].isna().all())

    def test_country_totals(self) -> None:
        totals = self.results.country_totals
        self.assertEqual(
            ["Alpha", "Beta", "Gamma"], totals[COUNTRY_REGION_COL].tolist()
        )
        self.assertEqual([12, 10, 5], totals[CONFIRMED_COL].tolist())
        # Beta's deaths only come from the province that reports them
        self.assertEqual([2, 1, 1], totals[DEATHS_COL].tolist())
        self.assertEqual({pd.Timestamp(2020, 1, 25)}, set(totals[DATE_COL]))

    def test_global_daily(self) -> None:
        global_daily = self.results.global_daily
        self.assertEqual([3, 10, 15, 27], global_daily[CONFIRMED_COL].tolist())
        self.assertEqual([3, 7, 5, 12], global_daily[NEW_CASES_COL].tolist())
        self.assertEqual(
            global_daily[CONFIRMED_COL].iloc[-1], global_daily[NEW_CASES_COL].sum()
        )

    def test_country_daily_new_cases_sum_to_latest_total(self) -> None:
        country_daily = self.results.country_daily
        new_case_totals = country_daily.groupby(COUNTRY_REGION_COL)[NEW_CASES_COL].sum()
        self.assertEqual(
            {"Alpha": 12, "Beta": 10, "Gamma": 5}, new_case_totals.to_dict()
        )

    def test_top_countries(self) -> None:
        self.assertEqual(["Alpha", "Beta", "Gamma"], self.results.top_countries)

    def test_model(self) -> None:
        model = self.results.model
        self.assertEqual(ModelFamily.GAUSSIAN, model.family)
        self.assertEqual(3, model.n_observations)
        self.assertIn("Q('confirmed')", model.coefficients.index)

    def test_tables(self) -> None:
        self.assertEqual(
            ["derived", "country_daily", "country_totals", "global_daily"],
            list(self.results.tables()),
        )


class TestCovidReportPipelineFailures(unittest.TestCase):
    """Tests for failures while running CovidReportPipeline"""

    def test_fetch_failure_propagates(self) -> None:
        fetcher = FixtureFetcher({})
        pipeline = CovidReportPipeline(
            CovidReportConfig(confirmed_url=_CONFIRMED_URL, deaths_url=_DEATHS_URL),
            fetcher=fetcher,
        )
        with self.assertRaises(FetchError):
            pipeline.run()
        self.assertEqual([_CONFIRMED_URL], fetcher.requested_urls)

    def test_top_n_limits_countries(self) -> None:
        results = CovidReportPipeline(
            CovidReportConfig(
                confirmed_url=_CONFIRMED_URL, deaths_url=_DEATHS_URL, top_n_countries=2
            ),
            fetcher=_fetcher(),
        ).run()
        self.assertEqual(["Alpha", "Beta"], results.top_countries)
