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
"""Tests for config.py"""
import os
import tempfile
import unittest

from datareports.reports.covid.config import CovidReportConfig


class TestCovidReportConfig(unittest.TestCase):
    """Tests for CovidReportConfig"""

    def test_load_packaged_config(self) -> None:
        config = CovidReportConfig.load()
        self.assertTrue(config.confirmed_url.endswith("confirmed_global.csv"))
        self.assertTrue(config.deaths_url.endswith("deaths_global.csv"))
        self.assertEqual(10, config.top_n_countries)

    def test_load_custom_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, "covid.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("confirmed_url: c.csv\ndeaths_url: d.csv\n")
            config = CovidReportConfig.load(path)
        self.assertEqual(CovidReportConfig("c.csv", "d.csv", 10), config)

    def test_unexpected_key(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, "covid.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("confirmed_url: c.csv\ndeaths_url: d.csv\ntop_n: 3\n")
            with self.assertRaisesRegex(ValueError, r"unexpected config keys"):
                CovidReportConfig.load(path)

    def test_invalid_top_n(self) -> None:
        with self.assertRaisesRegex(ValueError, r"must be positive"):
            CovidReportConfig("c.csv", "d.csv", top_n_countries=0)

    def test_load_zero_top_n(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, "covid.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("confirmed_url: c.csv\ndeaths_url: d.csv\ntop_n_countries: 0\n")
            with self.assertRaisesRegex(ValueError, r"must be positive, found \[0\]"):
                CovidReportConfig.load(path)

    def test_load_custom_top_n(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, "covid.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("confirmed_url: c.csv\ndeaths_url: d.csv\ntop_n_countries: 3\n")
            config = CovidReportConfig.load(path)
        self.assertEqual(3, config.top_n_countries)
