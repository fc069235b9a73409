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
"""Data pipeline for the NYPD shooting incident report.

Loads the historic incident file, keeps and types the configured columns,
decomposes the occurrence date and time, and counts incidents by year, borough,
perpetrator race, month and hour of day. Also fits a logistic model of whether
an incident was classified as a murder.
"""
import logging
from typing import Dict, Mapping

import attr
import pandas as pd

from datareports.common.errors import DataQualityError
from datareports.modeling.regression import ModelFamily, ModelFit, fit_model
from datareports.reports.nypd_shooting.config import (
    IncidentKeyPolicy,
    ShootingReportConfig,
)
from datareports.reports.report_pipeline import ReportPipeline, ReportResults
from datareports.tables.aggregate import count_by, share_by
from datareports.tables.join import find_duplicate_keys
from datareports.tables.reshape import (
    INC_MONTH_COL,
    INC_MONTH_NAME_COL,
    INC_TIME_COL,
    INC_YEAR_COL,
    decompose_incident_datetime,
)
from datareports.tables.schema import ColumnType, TableSchema, require_columns

INCIDENT_KEY_COL = "INCIDENT_KEY"
OCCUR_DATE_COL = "OCCUR_DATE"
OCCUR_TIME_COL = "OCCUR_TIME"
BORO_COL = "BORO"
PERP_RACE_COL = "PERP_RACE"
MURDER_FLAG_COL = "STATISTICAL_MURDER_FLAG"
MURDER_SHARE_COL = "murder_share"

# Report column name -> type. Columns not listed are kept as strings. Date and
# time stay raw so that unparseable values become nulls during decomposition
# instead of failing the projection.
COLUMN_TYPES: Dict[str, ColumnType] = {
    OCCUR_DATE_COL: ColumnType.PASSTHROUGH,
    OCCUR_TIME_COL: ColumnType.PASSTHROUGH,
    MURDER_FLAG_COL: ColumnType.BOOL,
}

REQUIRED_COLUMNS = [
    INCIDENT_KEY_COL,
    OCCUR_DATE_COL,
    OCCUR_TIME_COL,
    BORO_COL,
    PERP_RACE_COL,
    MURDER_FLAG_COL,
]


@attr.s(frozen=True)
class ShootingReportResults(ReportResults):
    """Output tables of the NYPD shooting incident report."""

    incidents: pd.DataFrame = attr.ib()
    by_year_borough: pd.DataFrame = attr.ib()
    by_year_perp_race: pd.DataFrame = attr.ib()
    by_hour: pd.DataFrame = attr.ib()
    by_month: pd.DataFrame = attr.ib()
    murder_share_by_borough: pd.DataFrame = attr.ib()
    model: ModelFit = attr.ib()

    def tables(self) -> Dict[str, pd.DataFrame]:
        return {
            "incidents": self.incidents,
            "by_year_borough": self.by_year_borough,
            "by_year_perp_race": self.by_year_perp_race,
            "by_hour": self.by_hour,
            "by_month": self.by_month,
            "murder_share_by_borough": self.murder_share_by_borough,
        }


def project_incidents(raw: pd.DataFrame, columns: Mapping[str, str]) -> pd.DataFrame:
    """Keeps, renames and types the configured incident columns."""
    projected = TableSchema.from_mappings(columns, COLUMN_TYPES).project(raw)
    require_columns(projected, REQUIRED_COLUMNS, stage="Incident projection")
    return projected


def apply_incident_key_policy(
    incidents: pd.DataFrame, policy: IncidentKeyPolicy
) -> pd.DataFrame:
    """Makes the incident key unique, either by failing on duplicates or by keeping
    the first row for each key."""
    duplicates = find_duplicate_keys(incidents, [INCIDENT_KEY_COL])
    if duplicates.empty:
        return incidents.copy()
    if policy is IncidentKeyPolicy.UNIQUE:
        raise DataQualityError(
            f"Found [{len(duplicates)}] duplicated [{INCIDENT_KEY_COL}] value(s), "
            f"e.g. {list(duplicates[INCIDENT_KEY_COL].head(5))}"
        )
    deduplicated = incidents.drop_duplicates(subset=[INCIDENT_KEY_COL], keep="first")
    logging.info(
        "Kept the first of several rows for [%d] incident key(s), dropping [%d] rows",
        len(duplicates),
        len(incidents) - len(deduplicated),
    )
    return deduplicated


def prepare_incidents(
    raw: pd.DataFrame, config: ShootingReportConfig
) -> pd.DataFrame:
    incidents = apply_incident_key_policy(
        project_incidents(raw, config.columns), config.incident_key_policy
    )
    return decompose_incident_datetime(
        incidents, date_column=OCCUR_DATE_COL, time_column=OCCUR_TIME_COL
    ).reset_index(drop=True)


def incidents_by_year_and_borough(incidents: pd.DataFrame) -> pd.DataFrame:
    return (
        count_by(incidents, [INC_YEAR_COL, BORO_COL])
        .sort_values([INC_YEAR_COL, BORO_COL], na_position="last")
        .reset_index(drop=True)
    )


def incidents_by_year_and_perp_race(incidents: pd.DataFrame) -> pd.DataFrame:
    return (
        count_by(incidents, [INC_YEAR_COL, PERP_RACE_COL])
        .sort_values([INC_YEAR_COL, PERP_RACE_COL], na_position="last")
        .reset_index(drop=True)
    )


def incidents_by_hour(incidents: pd.DataFrame) -> pd.DataFrame:
    return (
        count_by(incidents, [INC_TIME_COL])
        .sort_values(INC_TIME_COL, na_position="last")
        .reset_index(drop=True)
    )


def incidents_by_month(incidents: pd.DataFrame) -> pd.DataFrame:
    return (
        count_by(incidents, [INC_MONTH_COL, INC_MONTH_NAME_COL])
        .sort_values(INC_MONTH_COL, na_position="last")
        .reset_index(drop=True)
    )


def murder_share_by_borough(incidents: pd.DataFrame) -> pd.DataFrame:
    """Share of incidents flagged as murders in each borough, over incidents whose
    flag is known."""
    known = incidents[incidents[MURDER_FLAG_COL].notna()]
    return (
        share_by(known, [BORO_COL], MURDER_FLAG_COL, name=MURDER_SHARE_COL)
        .sort_values(BORO_COL, na_position="last")
        .reset_index(drop=True)
    )


def fit_murder_model(
    incidents: pd.DataFrame, config: ShootingReportConfig
) -> ModelFit:
    return fit_model(
        incidents,
        target=config.model_target,
        predictors=config.model_predictors,
        family=ModelFamily.BINOMIAL,
    )


class ShootingReportPipeline(
    ReportPipeline[ShootingReportConfig, ShootingReportResults]
):
    """Builds the NYPD shooting incident report tables from the configured source
    file."""

    @property
    def report_name(self) -> str:
        return "nypd_shooting"

    def _run(self) -> ShootingReportResults:
        incidents = prepare_incidents(
            self.fetcher(self.config.source_url), self.config
        )
        return ShootingReportResults(
            incidents=incidents,
            by_year_borough=incidents_by_year_and_borough(incidents),
            by_year_perp_race=incidents_by_year_and_perp_race(incidents),
            by_hour=incidents_by_hour(incidents),
            by_month=incidents_by_month(incidents),
            murder_share_by_borough=murder_share_by_borough(incidents),
            model=fit_murder_model(incidents, self.config),
        )
