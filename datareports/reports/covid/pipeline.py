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
"""Data pipeline for the COVID-19 report.

Loads the global confirmed and deaths time series, unpivots them into one row
per (province/state, country/region, date), left joins deaths onto confirmed,
derives daily new cases and deaths and the case fatality rate, and aggregates
by country and date.
"""
from typing import Dict, List, Sequence

import attr
import pandas as pd

from datareports.modeling.regression import ModelFamily, ModelFit, fit_model
from datareports.reports.covid.config import CovidReportConfig
from datareports.reports.report_pipeline import ReportPipeline, ReportResults
from datareports.tables.aggregate import sum_by
from datareports.tables.derived_metrics import (
    CASE_FATALITY_RATE_COL,
    NEW_CASES_COL,
    NEW_DEATHS_COL,
    add_derived_metrics,
    guarded_ratio,
)
from datareports.tables.join import left_join
from datareports.tables.reshape import DATE_COL, date_columns, wide_to_long
from datareports.tables.schema import ColumnSpec, ColumnType, TableSchema

PROVINCE_STATE_COL = "province_state"
COUNTRY_REGION_COL = "country_region"
LAT_COL = "lat"
LONG_COL = "long"
CONFIRMED_COL = "confirmed"
DEATHS_COL = "deaths"

REGION_KEY_COLUMNS = [PROVINCE_STATE_COL, COUNTRY_REGION_COL]
JOIN_KEY_COLUMNS = [*REGION_KEY_COLUMNS, DATE_COL]

# Identifying columns of the wide source files. Date columns are kept as-is.
WIDE_ID_SCHEMA = TableSchema(
    columns=[
        ColumnSpec("Province/State", name=PROVINCE_STATE_COL),
        ColumnSpec("Country/Region", name=COUNTRY_REGION_COL),
        ColumnSpec("Lat", name=LAT_COL, column_type=ColumnType.FLOAT),
        ColumnSpec("Long", name=LONG_COL, column_type=ColumnType.FLOAT),
    ]
)


@attr.s(frozen=True)
class CovidReportResults(ReportResults):
    """Output tables of the COVID-19 report."""

    confirmed_long: pd.DataFrame = attr.ib()
    deaths_long: pd.DataFrame = attr.ib()
    # Joined table plus new_cases, new_deaths and case_fatality_rate
    derived: pd.DataFrame = attr.ib()
    country_daily: pd.DataFrame = attr.ib()
    country_totals: pd.DataFrame = attr.ib()
    global_daily: pd.DataFrame = attr.ib()
    top_countries: List[str] = attr.ib()
    model: ModelFit = attr.ib()

    def tables(self) -> Dict[str, pd.DataFrame]:
        return {
            "derived": self.derived,
            "country_daily": self.country_daily,
            "country_totals": self.country_totals,
            "global_daily": self.global_daily,
        }


def project_wide_table(raw: pd.DataFrame) -> pd.DataFrame:
    """Renames and types the identifying columns of a raw wide file and keeps its
    date columns untouched."""
    ids = WIDE_ID_SCHEMA.project(raw)
    return pd.concat([ids, raw[date_columns(raw)]], axis="columns")


def to_long(raw: pd.DataFrame, value_name: str) -> pd.DataFrame:
    return wide_to_long(project_wide_table(raw), value_name=value_name)


def join_confirmed_and_deaths(
    confirmed_long: pd.DataFrame, deaths_long: pd.DataFrame
) -> pd.DataFrame:
    """Left joins the deaths counts onto the confirmed counts. Every confirmed row
    is kept; where no deaths row matches, deaths is null."""
    return left_join(
        confirmed_long,
        deaths_long,
        on=JOIN_KEY_COLUMNS,
        right_columns=[DEATHS_COL],
    )


def derive_metrics(joined: pd.DataFrame) -> pd.DataFrame:
    return add_derived_metrics(
        joined,
        group_columns=REGION_KEY_COLUMNS,
        date_column=DATE_COL,
        confirmed_column=CONFIRMED_COL,
        deaths_column=DEATHS_COL,
    )


def sum_columns(
    df: pd.DataFrame, keys: Sequence[str], value_columns: Sequence[str]
) -> pd.DataFrame:
    """Sums each of |value_columns| by |keys| into a single frame."""
    summed = sum_by(df, keys, value_columns[0])
    for value_column in value_columns[1:]:
        summed = summed.merge(
            sum_by(df, keys, value_column), on=list(keys), how="left"
        )
    return summed


def country_daily_totals(derived: pd.DataFrame) -> pd.DataFrame:
    """Sums the province-level series up to one row per country and date."""
    daily = sum_columns(
        derived,
        [COUNTRY_REGION_COL, DATE_COL],
        [CONFIRMED_COL, DEATHS_COL, NEW_CASES_COL, NEW_DEATHS_COL],
    )
    daily[CASE_FATALITY_RATE_COL] = guarded_ratio(
        daily[DEATHS_COL], daily[CONFIRMED_COL]
    )
    return daily.sort_values([COUNTRY_REGION_COL, DATE_COL]).reset_index(drop=True)


def latest_country_totals(country_daily: pd.DataFrame) -> pd.DataFrame:
    """Returns each country's cumulative totals on the latest date in the data."""
    latest_date = country_daily[DATE_COL].max()
    latest = country_daily[country_daily[DATE_COL] == latest_date]
    return (
        latest[
            [
                COUNTRY_REGION_COL,
                DATE_COL,
                CONFIRMED_COL,
                DEATHS_COL,
                CASE_FATALITY_RATE_COL,
            ]
        ]
        .sort_values(CONFIRMED_COL, ascending=False)
        .reset_index(drop=True)
    )


def global_daily_totals(derived: pd.DataFrame) -> pd.DataFrame:
    daily = sum_columns(
        derived,
        [DATE_COL],
        [CONFIRMED_COL, DEATHS_COL, NEW_CASES_COL, NEW_DEATHS_COL],
    )
    daily[CASE_FATALITY_RATE_COL] = guarded_ratio(
        daily[DEATHS_COL], daily[CONFIRMED_COL]
    )
    return daily.sort_values(DATE_COL).reset_index(drop=True)


def top_countries_by_confirmed(country_totals: pd.DataFrame, n: int) -> List[str]:
    return list(
        country_totals.sort_values(CONFIRMED_COL, ascending=False)[
            COUNTRY_REGION_COL
        ].head(n)
    )


def fit_deaths_on_confirmed(country_totals: pd.DataFrame) -> ModelFit:
    """Linear model of cumulative deaths on cumulative confirmed cases across
    countries."""
    return fit_model(
        country_totals,
        target=DEATHS_COL,
        predictors=[CONFIRMED_COL],
        family=ModelFamily.GAUSSIAN,
    )


class CovidReportPipeline(ReportPipeline[CovidReportConfig, CovidReportResults]):
    """Builds the COVID-19 report tables from the configured source files."""

    @property
    def report_name(self) -> str:
        return "covid"

    def _run(self) -> CovidReportResults:
        confirmed_long = to_long(
            self.fetcher(self.config.confirmed_url), CONFIRMED_COL
        )
        deaths_long = to_long(self.fetcher(self.config.deaths_url), DEATHS_COL)

        derived = derive_metrics(
            join_confirmed_and_deaths(confirmed_long, deaths_long)
        )
        country_daily = country_daily_totals(derived)
        country_totals = latest_country_totals(country_daily)

        return CovidReportResults(
            confirmed_long=confirmed_long,
            deaths_long=deaths_long,
            derived=derived,
            country_daily=country_daily,
            country_totals=country_totals,
            global_daily=global_daily_totals(derived),
            top_countries=top_countries_by_confirmed(
                country_totals, self.config.top_n_countries
            ),
            model=fit_deaths_on_confirmed(country_totals),
        )
