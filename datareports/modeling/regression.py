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
"""Tools for fitting the small regression models shown in reports."""
import logging
from enum import Enum
from typing import List, Sequence, Tuple

import attr
import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf

from datareports.common.errors import ModelFitError
from datareports.tables.schema import require_columns


class ModelFamily(Enum):
    # Logistic regression
    BINOMIAL = "binomial"
    # Ordinary least squares
    GAUSSIAN = "gaussian"


@attr.s(frozen=True)
class ModelFit:
    """Coefficient estimates and significance for a fitted model. All three series
    are indexed by model term (e.g. "Intercept", "C(Q('BORO'))[T.BRONX]")."""

    family: ModelFamily = attr.ib()
    formula: str = attr.ib()
    coefficients: pd.Series = attr.ib()
    standard_errors: pd.Series = attr.ib()
    p_values: pd.Series = attr.ib()
    n_observations: int = attr.ib()
    # Rows dropped because a target or predictor value was null
    n_excluded: int = attr.ib()

    def summary_frame(self) -> pd.DataFrame:
        """Returns one row per term with its estimate, standard error and p-value."""
        return pd.DataFrame(
            {
                "coefficient": self.coefficients,
                "standard_error": self.standard_errors,
                "p_value": self.p_values,
            }
        ).rename_axis("term")


def complete_cases(
    df: pd.DataFrame, columns: Sequence[str]
) -> Tuple[pd.DataFrame, int]:
    """Returns the rows of |df| with no null in any of |columns|, along with the
    number of rows excluded."""
    require_columns(df, columns, stage="Model fit")
    complete = df.dropna(subset=list(columns))
    return complete, len(df) - len(complete)


def _is_numeric_predictor(series: pd.Series) -> bool:
    return pd.api.types.is_numeric_dtype(series) and not pd.api.types.is_bool_dtype(
        series
    )


def _design_frame(
    df: pd.DataFrame, target: str, predictors: Sequence[str]
) -> pd.DataFrame:
    """Converts nullable pandas dtypes into the plain numpy/object dtypes the
    formula interface expects."""
    design = pd.DataFrame(index=df.index)
    design[target] = df[target].astype(float)
    for predictor in predictors:
        if _is_numeric_predictor(df[predictor]):
            design[predictor] = df[predictor].astype(float)
        else:
            design[predictor] = df[predictor].astype(str).astype(object)
    return design


def build_formula(
    design: pd.DataFrame, target: str, predictors: Sequence[str]
) -> str:
    """Builds a formula where numeric predictors enter linearly and everything else
    is treatment-coded. Column names are quoted so that any name is allowed."""
    terms: List[str] = []
    for predictor in predictors:
        if pd.api.types.is_float_dtype(design[predictor]):
            terms.append(f"Q('{predictor}')")
        else:
            terms.append(f"C(Q('{predictor}'))")
    return f"Q('{target}') ~ {' + '.join(terms) if terms else '1'}"


def fit_model(
    df: pd.DataFrame,
    *,
    target: str,
    predictors: Sequence[str],
    family: ModelFamily,
) -> ModelFit:
    """Fits a logistic (BINOMIAL) or linear (GAUSSIAN) regression of |target| on
    |predictors| using only rows with no null in any of those columns.

    Boolean targets are fit as 0/1. Raises a ModelFitError when no complete rows
    remain.
    """
    used_columns = [target, *predictors]
    complete, n_excluded = complete_cases(df, used_columns)
    if n_excluded:
        logging.info(
            "Excluding [%d] of [%d] rows with null values in %s from model fit",
            n_excluded,
            len(df),
            used_columns,
        )
    if complete.empty:
        raise ModelFitError(
            f"No complete rows to fit [{target}] on {list(predictors)}"
        )

    design = _design_frame(complete, target, predictors)
    formula = build_formula(design, target, predictors)
    if family is ModelFamily.BINOMIAL:
        model = smf.glm(formula, data=design, family=sm.families.Binomial())
    elif family is ModelFamily.GAUSSIAN:
        model = smf.ols(formula, data=design)
    else:
        raise ValueError(f"Unexpected model family: [{family}]")

    try:
        results = model.fit()
    except np.linalg.LinAlgError as e:
        raise ModelFitError(f"Could not fit [{formula}]: {e}") from e
    logging.info("Fit %s model [%s] on [%d] rows", family.value, formula, len(design))
    return ModelFit(
        family=family,
        formula=formula,
        coefficients=results.params,
        standard_errors=results.bse,
        p_values=results.pvalues,
        n_observations=int(results.nobs),
        n_excluded=n_excluded,
    )
