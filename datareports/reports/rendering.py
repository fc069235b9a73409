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
"""Renders report pages and the index page to HTML.

Report pages are built from charts already saved next to the page, tables, and
an optional model summary, then interpolated into the jinja templates in
./templates.
"""
import datetime
import logging
import os
from typing import Dict, List, Optional, Sequence

import attr
import pandas as pd
from jinja2 import Environment, FileSystemLoader, select_autoescape

from datareports.modeling.regression import ModelFit

REPORT_PAGE_FILE_NAME = "report.html"
INDEX_PAGE_FILE_NAME = "index.html"

# Long tables are truncated on the page; the full table is in the CSV export
DEFAULT_MAX_TABLE_ROWS = 25


@attr.s(frozen=True)
class ChartImage:
    caption: str = attr.ib()
    # Relative to the report page
    file_name: str = attr.ib()


@attr.s(frozen=True)
class TableSection:
    caption: str = attr.ib()
    table: pd.DataFrame = attr.ib()
    max_rows: int = attr.ib(default=DEFAULT_MAX_TABLE_ROWS)


@attr.s(frozen=True)
class ReportPage:
    """Everything needed to render one report's HTML page."""

    slug: str = attr.ib()
    title: str = attr.ib()
    summary: str = attr.ib()
    charts: List[ChartImage] = attr.ib(factory=list)
    tables: List[TableSection] = attr.ib(factory=list)
    model: Optional[ModelFit] = attr.ib(default=None)
    model_description: str = attr.ib(default="")

    @property
    def relative_path(self) -> str:
        return f"{self.slug}/{REPORT_PAGE_FILE_NAME}"


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(
            os.path.join(os.path.dirname(__file__), "templates")
        ),
        autoescape=select_autoescape(["html"]),
    )


def table_to_html(
    table: pd.DataFrame, max_rows: int = DEFAULT_MAX_TABLE_ROWS
) -> str:
    """Renders the first |max_rows| rows of |table| as an HTML table, showing nulls
    as blank cells."""
    return table.head(max_rows).to_html(
        index=False,
        na_rep="",
        float_format=lambda value: f"{value:,.4f}",
        classes="report-table",
        border=0,
    )


def model_to_html(model: ModelFit) -> str:
    return model.summary_frame().reset_index().to_html(
        index=False,
        na_rep="",
        float_format=lambda value: f"{value:.4g}",
        classes="report-table",
        border=0,
    )


def write_tables_csv(tables: Dict[str, pd.DataFrame], report_dir: str) -> List[str]:
    """Writes each table to <report_dir>/<name>.csv. Returns the written paths."""
    os.makedirs(report_dir, exist_ok=True)
    paths = []
    for name, table in tables.items():
        path = os.path.join(report_dir, f"{name}.csv")
        table.to_csv(path, index=False)
        paths.append(path)
    return paths


def render_report_page(page: ReportPage) -> str:
    """Interpolates |page| into the report template and returns the HTML."""
    template = _environment().get_template("report.html")
    return template.render(
        page=page,
        tables=[
            (
                section.caption,
                table_to_html(section.table, section.max_rows),
                len(section.table),
                section.max_rows,
            )
            for section in page.tables
        ],
        model_html=model_to_html(page.model) if page.model is not None else None,
    )


def write_report_page(page: ReportPage, output_dir: str) -> str:
    """Writes |page| to <output_dir>/<slug>/report.html and returns the path."""
    path = os.path.join(output_dir, page.slug, REPORT_PAGE_FILE_NAME)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as html_file:
        html_file.write(render_report_page(page))
    logging.info("Wrote report page %s", path)
    return path


def write_index_page(
    pages: Sequence[ReportPage],
    output_dir: str,
    generated_on: Optional[datetime.date] = None,
) -> str:
    """Writes <output_dir>/index.html linking to each of |pages|."""
    template = _environment().get_template("index.html")
    path = os.path.join(output_dir, INDEX_PAGE_FILE_NAME)
    os.makedirs(output_dir, exist_ok=True)
    with open(path, "w", encoding="utf-8") as html_file:
        html_file.write(
            template.render(
                pages=pages, generated_on=generated_on or datetime.date.today()
            )
        )
    logging.info("Wrote index page %s", path)
    return path
