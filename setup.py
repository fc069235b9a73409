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
"""Packaging for the datareports package.

The REQUIRED_PACKAGES are the external packages imported by ./datareports and must
be manually updated any time a dependency is added to the project.
"""
import setuptools

REQUIRED_PACKAGES = [
    "attrs",
    "Jinja2",
    "matplotlib",
    "numpy",
    "pandas>=1.5",
    "PyYAML",
    "requests",
    "statsmodels",
]

TEST_PACKAGES = [
    "parameterized",
    "pytest",
]

setuptools.setup(
    name="datareports",
    version="1.0.0",
    python_requires=">=3.9",
    install_requires=REQUIRED_PACKAGES,
    extras_require={"tests": TEST_PACKAGES},
    packages=setuptools.find_packages(include=["datareports", "datareports.*"]),
    package_data={
        "datareports.reports": ["report.mplstyle", "templates/*.html"],
        "datareports.reports.covid": ["config.yaml"],
        "datareports.reports.nypd_shooting": ["config.yaml"],
    },
)
