"""Form-only helper fields.

Helper fields are values the surrounding application keeps inside the
document for its own purposes (campaign status, pre-fill dates, UI state).
They are known by an explicit list, never inferred, and a trailing ``*``
matches by prefix.
"""

from copy import deepcopy
from typing import Any

from .common.exceptions import ConfigurationError
from .paths import PathPart, format_path


class HelperFieldMatcher:
    """Matches and strips helper fields by property name."""

    def __init__(self, names: tuple[str, ...] | list[str] = ()):
        self.names = tuple(names)
        self._exact = frozenset(name for name in self.names if not name.endswith("*"))
        self._prefixes = tuple(name[:-1] for name in self.names if name.endswith("*"))

    def matches(self, name: PathPart) -> bool:
        """Check whether a property name is a helper field."""
        if not isinstance(name, str):
            return False
        if name in self._exact:
            return True
        return any(name.startswith(prefix) for prefix in self._prefixes)

    def matches_path(self, data_path: str) -> bool:
        """Check whether the last segment of a data path is a helper field."""
        if not data_path or data_path.endswith("]"):
            return False
        return self.matches(data_path.rsplit(".", 1)[-1])

    def check_against(self, schema_names: frozenset[str]) -> None:
        """
        Reject helper names the schema owns.

        Raises:
            ConfigurationError: If a helper name is a schema property
        """
        owned = sorted(name for name in schema_names if self.matches(name))
        if owned:
            raise ConfigurationError(
                f"Helper fields collide with schema properties: {', '.join(owned)}",
                config_section="helper_fields",
                config_key=owned[0],
            )

    def strip(self, data: Any) -> tuple[Any, list[str]]:
        """
        Remove helper fields at every depth from a deep copy of ``data``.

        Returns:
            Tuple of (cleaned copy, data paths of removed fields)
        """
        cleaned = deepcopy(data)
        removed: list[str] = []
        self._strip(cleaned, [], removed)
        return cleaned, removed

    def _strip(self, value: Any, parts: list[PathPart], removed: list[str]) -> None:
        if isinstance(value, dict):
            for key in list(value):
                if self.matches(key):
                    del value[key]
                    removed.append(format_path([*parts, key]))
                else:
                    self._strip(value[key], [*parts, key], removed)
        elif isinstance(value, list):
            for index, element in enumerate(value):
                self._strip(element, [*parts, index], removed)

    def contains_helpers(self, data: Any) -> bool:
        """Check whether any helper field is present at any depth."""
        if isinstance(data, dict):
            return any(self.matches(key) or self.contains_helpers(value) for key, value in data.items())
        if isinstance(data, list):
            return any(self.contains_helpers(element) for element in data)
        return False
