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
"""Typed access to report configuration parsed from YAML."""
from typing import Any, Dict, List, Optional, Type, TypeVar

import yaml

T = TypeVar("T")


class YAMLDict:
    """Wraps a dict parsed from YAML. Values are popped off as they are read so that
    callers can detect config keys that nothing consumed."""

    def __init__(self, raw_yaml: Dict[str, Any]):
        self.raw_yaml = raw_yaml

    @classmethod
    def from_path(cls, yaml_path: str) -> "YAMLDict":
        with open(yaml_path, encoding="utf-8") as yaml_file:
            loaded_raw_yaml = yaml.safe_load(yaml_file)
        if not isinstance(loaded_raw_yaml, dict):
            raise ValueError(
                f"Expected config to contain a top-level dictionary, but "
                f"received: {type(loaded_raw_yaml)} at path [{yaml_path}]."
            )
        return YAMLDict(loaded_raw_yaml)

    @classmethod
    def _assert_type(cls, field: str, value: Any, value_type: Type[T]) -> T:
        if value is None or not isinstance(value, value_type):
            raise ValueError(
                f"Invalid [{field}] value, expected type [{value_type}] but "
                f"received: {type(value)}"
            )
        return value

    def pop(self, field: str, value_type: Type[T]) -> T:
        """Pops the value at |field|. Throws if the field does not exist, is None, or
        is not of type |value_type|."""
        try:
            value = self.raw_yaml.pop(field)
        except KeyError as e:
            raise KeyError(
                f"Expected nonnull [{field}] in input: {self.raw_yaml}"
            ) from e
        return self._assert_type(field, value, value_type)

    def pop_optional(self, field: str, value_type: Type[T]) -> Optional[T]:
        """Pops the value at |field|, returning None if it is absent or None."""
        value = self.raw_yaml.pop(field, None)
        if value is None:
            return None
        return self._assert_type(field, value, value_type)

    def pop_list(self, field: str, item_type: Type[T]) -> List[T]:
        """Pops the list at |field|, checking that every item is an |item_type|."""
        values = self.pop(field, list)
        return [self._assert_type(field, value, item_type) for value in values]

    def pop_str_mapping(self, field: str) -> Dict[str, str]:
        """Pops the mapping at |field|, which must map strings to strings. Key order
        is preserved."""
        mapping = self.pop(field, dict)
        return {
            self._assert_type(field, key, str): self._assert_type(field, value, str)
            for key, value in mapping.items()
        }

    def keys(self) -> List[str]:
        return list(self.raw_yaml.keys())

    def assert_fully_consumed(self) -> None:
        """Throws if any keys were never read, which usually means a typo in the
        config file."""
        if self.raw_yaml:
            raise ValueError(f"Found unexpected config keys: {self.keys()}")
