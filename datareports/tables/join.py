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
"""Left join of two long tables on a composite key."""
from typing import List, Optional, Sequence

import pandas as pd

from datareports.common.errors import DataQualityError
from datareports.tables.schema import require_columns

# Number of duplicated keys included in error messages
_MAX_KEYS_IN_ERROR = 10


def find_duplicate_keys(df: pd.DataFrame, keys: Sequence[str]) -> pd.DataFrame:
    """Returns the distinct key combinations that appear more than once in |df|.
    Null key values compare equal to each other."""
    duplicated = df[df.duplicated(subset=list(keys), keep=False)]
    return duplicated[list(keys)].drop_duplicates().reset_index(drop=True)


def left_join(
    left: pd.DataFrame,
    right: pd.DataFrame,
    *,
    on: Sequence[str],
    right_columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """Left joins |right| onto |left| using the composite key |on|.

    Every row of |left| appears exactly once in the output, in its original order;
    where |right| has no matching row, the right-hand columns are null. Null key
    values match null key values, so a region with no sub-region joins to the same
    region's no-sub-region row.

    |right| having more than one row for a key is malformed input and raises a
    DataQualityError rather than picking one of the matches.
    """
    keys: List[str] = list(on)
    require_columns(left, keys, stage="Join (left)")
    require_columns(right, keys, stage="Join (right)")

    if right_columns is None:
        right_columns = [column for column in right.columns if column not in keys]
    require_columns(right, right_columns, stage="Join (right)")
    overlapping = [column for column in right_columns if column in left.columns]
    if overlapping:
        raise ValueError(
            f"Columns {overlapping} exist on both sides of the join; "
            "rename one side first"
        )

    duplicates = find_duplicate_keys(right, keys)
    if not duplicates.empty:
        raise DataQualityError(
            f"Right side of join has [{len(duplicates)}] duplicated key(s) on {keys}, "
            f"e.g.:\n{duplicates.head(_MAX_KEYS_IN_ERROR)}"
        )

    joined = left.merge(
        right[[*keys, *right_columns]],
        how="left",
        on=keys,
        validate="many_to_one",
    )
    joined.index = left.index
    return joined
