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
"""Configuration for the NYPD shooting incident report."""
import os
from enum import Enum
from typing import Dict, List, Optional

import attr

from datareports.tables.reshape import (
    INC_MONTH_COL,
    INC_MONTH_NAME_COL,
    INC_TIME_COL,
    INC_YEAR_COL,
)
from datareports.utils.yaml_dict import YAMLDict

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")


class IncidentKeyPolicy(Enum):
    # Duplicated incident keys fail the run
    UNIQUE = "unique"
    # Keep the first row for each incident key
    FIRST = "first"


@attr.s(frozen=True)
class ShootingReportConfig:
    """Where to find the incident file and which of its columns to use."""

    source_url: str = attr.ib()
    # Source column name -> report column name, in output order
    columns: Dict[str, str] = attr.ib()
    model_target: str = attr.ib()
    model_predictors: List[str] = attr.ib()
    incident_key_policy: IncidentKeyPolicy = attr.ib(default=IncidentKeyPolicy.FIRST)

    @model_predictors.validator
    def _check_model_columns(
        self, _attribute: attr.Attribute, value: List[str]
    ) -> None:
        derived_columns = {
            INC_YEAR_COL,
            INC_MONTH_COL,
            INC_MONTH_NAME_COL,
            INC_TIME_COL,
        }
        available = set(self.columns.values()) | derived_columns
        unknown = [
            column for column in [self.model_target, *value] if column not in available
        ]
        if unknown:
            raise ValueError(
                f"Model column(s) {unknown} are not among the configured columns "
                f"{sorted(available)}"
            )

    @classmethod
    def from_yaml_dict(cls, yaml_dict: YAMLDict) -> "ShootingReportConfig":
        policy = yaml_dict.pop_optional("incident_key_policy", str)
        config = cls(
            source_url=yaml_dict.pop("source_url", str),
            columns=yaml_dict.pop_str_mapping("columns"),
            model_target=yaml_dict.pop("model_target", str),
            model_predictors=yaml_dict.pop_list("model_predictors", str),
            incident_key_policy=(
                IncidentKeyPolicy(policy) if policy else IncidentKeyPolicy.FIRST
            ),
        )
        yaml_dict.assert_fully_consumed()
        return config

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "ShootingReportConfig":
        """Loads the config at |config_path|, or the packaged default."""
        return cls.from_yaml_dict(
            YAMLDict.from_path(config_path or DEFAULT_CONFIG_PATH)
        )
