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
"""Configuration for the COVID-19 report."""
import os
from typing import Optional

import attr

from datareports.utils.yaml_dict import YAMLDict

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")


@attr.s(frozen=True)
class CovidReportConfig:
    confirmed_url: str = attr.ib()
    deaths_url: str = attr.ib()
    top_n_countries: int = attr.ib(default=10)

    @top_n_countries.validator
    def _check_top_n_countries(self, _attribute: attr.Attribute, value: int) -> None:
        if value < 1:
            raise ValueError(f"top_n_countries must be positive, found [{value}]")

    @classmethod
    def from_yaml_dict(cls, yaml_dict: YAMLDict) -> "CovidReportConfig":
        top_n_countries = yaml_dict.pop_optional("top_n_countries", int)
        config = cls(
            confirmed_url=yaml_dict.pop("confirmed_url", str),
            deaths_url=yaml_dict.pop("deaths_url", str),
            top_n_countries=10 if top_n_countries is None else top_n_countries,
        )
        yaml_dict.assert_fully_consumed()
        return config

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "CovidReportConfig":
        """Loads the config at |config_path|, or the packaged default."""
        return cls.from_yaml_dict(
            YAMLDict.from_path(config_path or DEFAULT_CONFIG_PATH)
        )
