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
"""Builds the COVID-19 report page from pipeline results."""
import os

import pandas as pd
from matplotlib.figure import Figure

from datareports.reports.covid.pipeline import (
    CONFIRMED_COL,
    COUNTRY_REGION_COL,
    CovidReportResults,
)
from datareports.reports.plots import line_chart, save_figure, use_report_style
from datareports.reports.rendering import (
    ChartImage,
    ReportPage,
    TableSection,
    write_tables_csv,
)
from datareports.tables.derived_metrics import CASE_FATALITY_RATE_COL, NEW_CASES_COL
from datareports.tables.reshape import DATE_COL

SLUG = "covid"


def _save_chart(
    fig: Figure, report_dir: str, file_name: str, caption: str
) -> ChartImage:
    save_figure(fig, os.path.join(report_dir, file_name))
    return ChartImage(caption=caption, file_name=file_name)


def _top_country_rows(results: CovidReportResults) -> pd.DataFrame:
    daily = results.country_daily
    return daily[daily[COUNTRY_REGION_COL].isin(results.top_countries)]


def build_covid_report_page(
    results: CovidReportResults, report_dir: str
) -> ReportPage:
    """Saves the report's charts and CSV tables under |report_dir| and returns the
    page that references them."""
    use_report_style()
    write_tables_csv(results.tables(), report_dir)

    top_countries = _top_country_rows(results)
    charts = [
        _save_chart(
            line_chart(
                results.global_daily,
                x_column=DATE_COL,
                y_column=NEW_CASES_COL,
                title="Global daily new cases",
                y_label="New cases",
                # Corrections in the source data can make daily changes negative
                y_min=None,
            ),
            report_dir,
            "global_new_cases.png",
            "Daily new confirmed cases, summed over all countries and regions.",
        ),
        _save_chart(
            line_chart(
                top_countries,
                x_column=DATE_COL,
                y_column=CONFIRMED_COL,
                series_column=COUNTRY_REGION_COL,
                series_order=results.top_countries,
                title="Cumulative confirmed cases",
                y_label="Confirmed cases",
            ),
            report_dir,
            "top_countries_confirmed.png",
            f"Cumulative confirmed cases for the {len(results.top_countries)} "
            "countries with the most cases on the latest date.",
        ),
        _save_chart(
            line_chart(
                top_countries,
                x_column=DATE_COL,
                y_column=CASE_FATALITY_RATE_COL,
                series_column=COUNTRY_REGION_COL,
                series_order=results.top_countries,
                title="Case fatality rate",
                y_label="Deaths / confirmed cases",
            ),
            report_dir,
            "top_countries_case_fatality_rate.png",
            "Cumulative deaths divided by cumulative confirmed cases. Days with no "
            "confirmed cases have no rate.",
        ),
    ]

    return ReportPage(
        slug=SLUG,
        title="COVID-19 cases and deaths",
        summary=(
            "Confirmed cases and deaths from the Johns Hopkins CSSE global time "
            "series, with daily changes and case fatality rates by country."
        ),
        charts=charts,
        tables=[
            TableSection("Latest totals by country", results.country_totals),
            TableSection(
                "Global daily totals",
                results.global_daily.sort_values(DATE_COL, ascending=False),
            ),
        ],
        model=results.model,
        model_description=(
            "Linear regression of cumulative deaths on cumulative confirmed cases "
            "across countries, on the latest date."
        ),
    )
