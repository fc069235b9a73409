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
"""Script for building the report pages and the index page that links them.

Example usage:

python -m datareports.tools.run_reports \
    --output_dir /tmp/reports \
    [--reports covid nypd_shooting] \
    [--covid_config_path path/to/covid.yaml] \
    [--nypd_shooting_config_path path/to/nypd_shooting.yaml]
"""
import argparse
import logging
import os
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from datareports.common.errors import DataReportsError
from datareports.ingest.loader import CsvFetcher
from datareports.reports.covid.config import CovidReportConfig
from datareports.reports.covid.pipeline import CovidReportPipeline, CovidReportResults
from datareports.reports.covid.report_page import build_covid_report_page
from datareports.reports.nypd_shooting.config import ShootingReportConfig
from datareports.reports.nypd_shooting.pipeline import (
    ShootingReportPipeline,
    ShootingReportResults,
)
from datareports.reports.nypd_shooting.report_page import (
    build_shooting_report_page,
)
from datareports.reports.rendering import (
    ReportPage,
    write_index_page,
    write_report_page,
)
from datareports.reports.report_pipeline import ReportResults

COVID_REPORT = "covid"
NYPD_SHOOTING_REPORT = "nypd_shooting"
ALL_REPORTS = [COVID_REPORT, NYPD_SHOOTING_REPORT]


def run_covid_pipeline(
    config_path: Optional[str], fetcher: Optional[CsvFetcher]
) -> CovidReportResults:
    return CovidReportPipeline(CovidReportConfig.load(config_path), fetcher).run()


def run_nypd_shooting_pipeline(
    config_path: Optional[str], fetcher: Optional[CsvFetcher]
) -> ShootingReportResults:
    return ShootingReportPipeline(
        ShootingReportConfig.load(config_path), fetcher
    ).run()


REPORT_PIPELINES: Dict[
    str, Callable[[Optional[str], Optional[CsvFetcher]], ReportResults]
] = {
    COVID_REPORT: run_covid_pipeline,
    NYPD_SHOOTING_REPORT: run_nypd_shooting_pipeline,
}

PAGE_BUILDERS: Dict[str, Callable[[Any, str], ReportPage]] = {
    COVID_REPORT: build_covid_report_page,
    NYPD_SHOOTING_REPORT: build_shooting_report_page,
}


def run_reports(
    reports: Sequence[str],
    output_dir: str,
    config_paths: Optional[Dict[str, Optional[str]]] = None,
    fetcher: Optional[CsvFetcher] = None,
) -> str:
    """Runs the pipelines of all |reports|, then writes their pages under
    |output_dir| followed by the index page. Returns the index page path.

    Nothing is written until every pipeline has succeeded, so a failing report
    leaves no partial output behind.
    """
    config_paths = config_paths or {}
    results_by_report = [
        (report, REPORT_PIPELINES[report](config_paths.get(report), fetcher))
        for report in reports
    ]

    pages = []
    for report, results in results_by_report:
        page = PAGE_BUILDERS[report](results, os.path.join(output_dir, report))
        write_report_page(page, output_dir)
        pages.append(page)
    return write_index_page(pages, output_dir)


def parse_arguments(argv: List[str]) -> Tuple[argparse.Namespace, List[str]]:
    """Parses the required arguments."""
    parser = argparse.ArgumentParser()

    parser.add_argument(
        "--output_dir",
        required=True,
        help="Directory to write the report pages, charts and tables to.",
    )

    parser.add_argument(
        "--reports",
        nargs="+",
        choices=ALL_REPORTS,
        default=ALL_REPORTS,
        help="Which reports to build. Defaults to all of them.",
    )

    parser.add_argument(
        "--covid_config_path",
        help="YAML config for the COVID-19 report. Defaults to the packaged one.",
    )

    parser.add_argument(
        "--nypd_shooting_config_path",
        help="YAML config for the NYPD shooting report. Defaults to the packaged "
        "one.",
    )

    return parser.parse_known_args(argv)


def main(argv: List[str]) -> int:
    known_args, _ = parse_arguments(argv)
    try:
        index_path = run_reports(
            reports=known_args.reports,
            output_dir=known_args.output_dir,
            config_paths={
                COVID_REPORT: known_args.covid_config_path,
                NYPD_SHOOTING_REPORT: known_args.nypd_shooting_config_path,
            },
        )
    except DataReportsError as e:
        logging.error("Report run failed: %s", e)
        return 1
    logging.info("Reports written, open %s", index_path)
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main(sys.argv[1:]))
