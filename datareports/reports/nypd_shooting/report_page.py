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
"""Builds the NYPD shooting incident report page from pipeline results."""
import os

from datareports.reports.nypd_shooting.pipeline import (
    BORO_COL,
    MURDER_SHARE_COL,
    PERP_RACE_COL,
    ShootingReportResults,
)
from datareports.reports.plots import (
    bar_chart,
    line_chart,
    save_figure,
    use_report_style,
)
from datareports.reports.rendering import (
    ChartImage,
    ReportPage,
    TableSection,
    write_tables_csv,
)
from datareports.tables.aggregate import COUNT_COL
from datareports.tables.reshape import INC_MONTH_NAME_COL, INC_TIME_COL, INC_YEAR_COL

SLUG = "nypd_shooting"


def build_shooting_report_page(
    results: ShootingReportResults, report_dir: str
) -> ReportPage:
    """Saves the report's charts and CSV tables under |report_dir| and returns the
    page that references them."""
    use_report_style()
    write_tables_csv(results.tables(), report_dir)

    chart_specs = [
        (
            line_chart(
                results.by_year_borough,
                x_column=INC_YEAR_COL,
                y_column=COUNT_COL,
                series_column=BORO_COL,
                title="Shooting incidents per year",
                x_label="Year",
                y_label="Incidents",
                only_integer_ticks_in_x_axis=True,
            ),
            "incidents_by_year_borough.png",
            "Shooting incidents per year in each borough.",
        ),
        (
            line_chart(
                results.by_year_perp_race,
                x_column=INC_YEAR_COL,
                y_column=COUNT_COL,
                series_column=PERP_RACE_COL,
                title="Shooting incidents per year by perpetrator race",
                x_label="Year",
                y_label="Incidents",
                only_integer_ticks_in_x_axis=True,
            ),
            "incidents_by_year_perp_race.png",
            "Shooting incidents per year by reported perpetrator race. Incidents "
            "with no recorded race are not plotted but are in the table export.",
        ),
        (
            bar_chart(
                results.by_hour,
                x_column=INC_TIME_COL,
                y_column=COUNT_COL,
                title="Shooting incidents by hour of day",
                x_label="Hour",
                y_label="Incidents",
            ),
            "incidents_by_hour.png",
            "All incidents by the hour of day they occurred.",
        ),
        (
            bar_chart(
                results.by_month,
                x_column=INC_MONTH_NAME_COL,
                y_column=COUNT_COL,
                title="Shooting incidents by month",
                x_label="Month",
                y_label="Incidents",
            ),
            "incidents_by_month.png",
            "All incidents by calendar month.",
        ),
        (
            bar_chart(
                results.murder_share_by_borough,
                x_column=BORO_COL,
                y_column=MURDER_SHARE_COL,
                title="Share of incidents classified as murder",
                x_label="Borough",
                y_label="Share",
                y_max=1,
            ),
            "murder_share_by_borough.png",
            "Share of incidents with a statistical murder flag, by borough.",
        ),
    ]
    charts = []
    for fig, file_name, caption in chart_specs:
        save_figure(fig, os.path.join(report_dir, file_name))
        charts.append(ChartImage(caption=caption, file_name=file_name))

    return ReportPage(
        slug=SLUG,
        title="NYPD shooting incidents",
        summary=(
            "Historic shooting incidents reported by the NYPD, counted by year, "
            "borough, perpetrator race, month and hour of day."
        ),
        charts=charts,
        tables=[
            TableSection("Incidents by year and borough", results.by_year_borough),
            TableSection("Incidents by hour of day", results.by_hour),
            TableSection("Incidents by month", results.by_month),
            TableSection(
                "Murder share by borough", results.murder_share_by_borough
            ),
        ],
        model=results.model,
        model_description=(
            "Logistic regression of the statistical murder flag on the configured "
            "incident attributes. Categorical predictors are compared against their "
            "first level."
        ),
    )
