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
"""Tools for plotting report charts"""

import os
from os.path import abspath, dirname
from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

# Report plotting colors
REPORT_COLORS = [
    "#25636F",
    "#D9A95F",
    "#BA4F4F",
    "#4C6290",
    "#90AEB5",
    "#CC989C",
    "#B6CC98",
    "#56256F",
    "#4FBABA",
    "#904C84",
    "#5F8FD9",
]

STYLE_PATH = os.path.join(dirname(abspath(__file__)), "report.mplstyle")


def use_report_style() -> None:
    """Applies report.mplstyle so that charts look the same across reports."""
    plt.style.use(STYLE_PATH)


# Plot settings
def plot_settings(
    ax: plt.Axes,
    *,
    title: str = "",
    y_label: str = "",
    x_label: str = "",
    y_min: Optional[float] = 0,
    y_max: Optional[float] = None,
    only_integer_ticks_in_x_axis: bool = False,
) -> None:
    """
    Configures the settings for a plot.

    Args:
        ax (plt.Axes): The axes object to configure.
        title (str): The title of the plot.
        y_label (str): The label for the y-axis.
        x_label (str): The label for the x-axis.
        y_min (Optional[float]): The lower limit for the y-axis. None lets matplotlib
            choose, which is needed for series that can go negative (default: 0).
        y_max (Optional[float]): The upper limit for the y-axis (default: None).
        only_integer_ticks_in_x_axis (bool): Whether to only show integer ticks on the
            x-axis, e.g. for years or hours (default: False).
    """
    ax.set_title(title)
    ax.set_xlabel(x_label)
    ax.set_ylabel(y_label)
    ax.set_ylim(bottom=y_min, top=y_max)
    if only_integer_ticks_in_x_axis:
        ax.xaxis.set_major_locator(MaxNLocator(integer=True))


def add_legend(ax: plt.Axes, title: Optional[str] = None) -> None:
    """Adds a legend outside the right edge of the plot, if anything is labeled."""
    handles, labels = ax.get_legend_handles_labels()
    if handles:
        ax.legend(
            handles=handles,
            labels=labels,
            title=title,
            loc="center left",
            bbox_to_anchor=(1, 0.5),
        )


def _plottable(series: pd.Series) -> pd.Series:
    """Converts nullable numeric columns to plain floats for matplotlib."""
    if pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(
        series
    ):
        return series.astype(float)
    return series


def line_chart(
    df: pd.DataFrame,
    *,
    x_column: str,
    y_column: str,
    series_column: Optional[str] = None,
    series_order: Optional[Sequence[str]] = None,
    title: str = "",
    x_label: str = "",
    y_label: str = "",
    y_min: Optional[float] = 0,
    only_integer_ticks_in_x_axis: bool = False,
) -> Figure:
    """Plots |y_column| against |x_column|, one line per value of |series_column|
    (or a single line if it is None). Rows with a null x or y are skipped."""
    fig, ax = plt.subplots()
    plotted = df.dropna(subset=[x_column, y_column])
    if series_column is None:
        ax.plot(
            _plottable(plotted[x_column]),
            _plottable(plotted[y_column]),
            color=REPORT_COLORS[0],
        )
    else:
        series_names: List = (
            list(series_order)
            if series_order is not None
            else sorted(plotted[series_column].dropna().unique())
        )
        for i, name in enumerate(series_names):
            in_series = plotted[series_column].eq(name).fillna(False).astype(bool)
            series = plotted[in_series].sort_values(x_column)
            ax.plot(
                _plottable(series[x_column]),
                _plottable(series[y_column]),
                label=str(name),
                color=REPORT_COLORS[i % len(REPORT_COLORS)],
            )
        add_legend(ax, title=series_column)
    plot_settings(
        ax,
        title=title,
        x_label=x_label,
        y_label=y_label,
        y_min=y_min,
        only_integer_ticks_in_x_axis=only_integer_ticks_in_x_axis,
    )
    return fig


def bar_chart(
    df: pd.DataFrame,
    *,
    x_column: str,
    y_column: str,
    title: str = "",
    x_label: str = "",
    y_label: str = "",
    y_max: Optional[float] = None,
) -> Figure:
    """Plots one bar per row. Null categories are labeled "(missing)"."""
    fig, ax = plt.subplots()
    labels = df[x_column].astype("string").fillna("(missing)").tolist()
    ax.bar(labels, _plottable(df[y_column]), color=REPORT_COLORS[0])
    plot_settings(ax, title=title, x_label=x_label, y_label=y_label, y_max=y_max)
    ax.tick_params(axis="x", labelrotation=45)
    return fig


def save_figure(fig: Figure, path: str) -> str:
    """Saves |fig| to |path| and closes it. Returns the path."""
    os.makedirs(dirname(path), exist_ok=True)
    fig.savefig(path, bbox_inches="tight")
    plt.close(fig)
    return path
