"""Schema and data path handling for campaignflow.

Two path flavours are in use:

- Data paths address concrete values and carry array indices:
  ``measurement_location[0].measurement_point[2].height_m``
  (``measurement_location.0.height_m`` is accepted too).
- Canonical schema paths address schema nodes. Root properties are bare
  names, nested properties sit under ``properties`` and array elements
  under ``items``:
  ``measurement_location.items.properties.measurement_point.items``

Any data path converts to exactly one canonical schema path by replacing
indices (or ``*`` wildcards) with ``items``.
"""

from typing import TYPE_CHECKING, Any

from .common.exceptions import PathNotFound
from .models import SchemaNode

if TYPE_CHECKING:
    from .repository import SchemaRepository

WILDCARD = "*"
ITEMS = "items"
PROPERTIES = "properties"
DEFINITIONS = "definitions"

PathPart = str | int


class _Missing:
    """Sentinel for values absent from a document."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


MISSING: Any = _Missing()


# ============================================================================
# Path parsing
# ============================================================================


def parse_path(path: str) -> list[PathPart]:
    """
    Parse a path into a list of keys and indices.

    Handles:
    - Dot notation: "a.b.c" -> ["a", "b", "c"]
    - Bracket indices: "a[0].b" -> ["a", 0, "b"]
    - Dotted indices: "a.0.b" -> ["a", 0, "b"]
    - Quoted keys: "a['key with spaces']" -> ["a", "key with spaces"]
    - Wildcards: "a[*].b", "a[].b" and "a.*.b" -> ["a", "*", "b"]

    Raises:
        ValueError: If path syntax is invalid
    """
    if not path:
        return []

    parts: list[PathPart] = []
    i = 0
    current_key = ""

    while i < len(path):
        char = path[i]

        if char == ".":
            if current_key:
                parts.append(_key_or_index(current_key))
                current_key = ""
        elif char == "[":
            if current_key:
                parts.append(_key_or_index(current_key))
                current_key = ""

            bracket_content, bracket_end = _parse_bracket(path, i)
            parts.append(bracket_content)
            i = bracket_end
        else:
            current_key += char

        i += 1

    if current_key:
        parts.append(_key_or_index(current_key))

    return parts


def _key_or_index(key: str) -> PathPart:
    return int(key) if key.isdigit() else key


def _parse_bracket(path: str, start_index: int) -> tuple[PathPart, int]:
    """
    Parse bracket notation starting at the given index.

    Returns:
        Tuple of (parsed_value, end_index)
    """
    i = start_index + 1
    content = ""
    in_quotes = False
    quoted = False
    quote_char = None

    while i < len(path):
        char = path[i]

        if not in_quotes:
            if char in ("'", '"'):
                in_quotes = True
                quoted = True
                quote_char = char
            elif char == "]":
                break
            elif not char.isspace():
                content += char
        else:
            if char == quote_char:
                if path[i - 1] == "\\":
                    content = content[:-1] + char
                else:
                    in_quotes = False
                    quote_char = None
            else:
                content += char

        i += 1

    if i >= len(path):
        raise ValueError(f"Unclosed bracket starting at position {start_index}")

    if in_quotes:
        raise ValueError(f"Unclosed quote in bracket starting at position {start_index}")

    if quoted:
        return content, i
    if content in ("", WILDCARD):
        return WILDCARD, i
    try:
        return int(content), i
    except ValueError:
        return content, i


def format_path(parts: list[PathPart] | tuple[PathPart, ...]) -> str:
    """Build a data path string from parsed parts."""
    if not parts:
        return ""

    result = ""
    for part in parts:
        if isinstance(part, int):
            result += f"[{part}]"
        elif part == WILDCARD:
            result += f"[{WILDCARD}]"
        elif result:
            result += f".{part}"
        else:
            result = str(part)
    return result


def is_within(path: str, ancestor: str) -> bool:
    """Check whether data path ``path`` equals or lies below ``ancestor``."""
    if not ancestor:
        return True
    if path == ancestor:
        return True
    return path.startswith(f"{ancestor}.") or path.startswith(f"{ancestor}[")


# ============================================================================
# Canonical schema paths
# ============================================================================


def child_schema_path(parent: str, name: str) -> str:
    """Canonical path of property ``name`` declared on ``parent``."""
    if not parent:
        return name
    return f"{parent}.{PROPERTIES}.{name}"


def items_schema_path(parent: str) -> str:
    """Canonical path of the element node of array ``parent``."""
    return f"{parent}.{ITEMS}" if parent else ITEMS


def schema_parts(path: str) -> list[PathPart]:
    """
    Split any schema or data path into names and ``*`` markers.

    ``properties`` keywords are dropped, ``items`` keywords and array
    indices become ``*``. A leading ``definitions.<name>`` pair is kept as
    a single ``definitions.<name>`` part.

    Examples:
        measurement_location.items.properties.name -> ["measurement_location", "*", "name"]
        measurement_location[3].name -> ["measurement_location", "*", "name"]
        properties.author -> ["author"]
    """
    tokens = parse_path(path)
    parts: list[PathPart] = []
    start = 0
    if len(tokens) >= 2 and tokens[0] == DEFINITIONS:
        parts.append(f"{DEFINITIONS}.{tokens[1]}")
        start = 2

    expect_name = False
    for token in tokens[start:]:
        if expect_name:
            parts.append(str(token))
            expect_name = False
        elif token == PROPERTIES:
            expect_name = True
        elif isinstance(token, int) or token in (ITEMS, WILDCARD):
            parts.append(WILDCARD)
        else:
            parts.append(token)
    return parts


def to_schema_path(parts: list[PathPart] | tuple[PathPart, ...]) -> str:
    """Build the canonical schema path for parsed data parts."""
    path = ""
    for part in parts:
        if isinstance(part, int) or part == WILDCARD:
            path = items_schema_path(path)
        else:
            path = child_schema_path(path, str(part))
    return path


def normalize_schema_path(path: str) -> str:
    """Canonical schema path for any schema or data path."""
    return to_schema_path(schema_parts(path))


# ============================================================================
# Value resolution
# ============================================================================


def resolve_value(data: Any, path: str | list[PathPart]) -> Any:
    """
    Walk a concrete data path.

    Returns:
        The value, or ``MISSING`` when any segment is absent. Absence is an
        expected state during incremental entry, so nothing is raised.
    """
    parts = parse_path(path) if isinstance(path, str) else path
    current = data
    for part in parts:
        if isinstance(part, int):
            if not isinstance(current, list) or not 0 <= part < len(current):
                return MISSING
            current = current[part]
        elif isinstance(current, dict):
            if part not in current:
                return MISSING
            current = current[part]
        else:
            return MISSING
    return current


def expand_parts(data: Any, schema_path: str) -> list[list[PathPart]]:
    """
    Concrete data paths (as parts) for a canonical schema path.

    Array segments expand over the elements present in ``data``; property
    segments are followed whether or not the value exists, so a missing
    leaf still yields its path.
    """
    states: list[tuple[list[PathPart], Any]] = [([], data)]
    for part in schema_parts(schema_path):
        next_states: list[tuple[list[PathPart], Any]] = []
        for parts, value in states:
            if part == WILDCARD:
                if isinstance(value, list):
                    for index, element in enumerate(value):
                        next_states.append(([*parts, index], element))
            else:
                child = value.get(part, MISSING) if isinstance(value, dict) else MISSING
                next_states.append(([*parts, part], child))
        states = next_states
    return [parts for parts, _ in states]


class PathResolver:
    """Resolves schema and data paths against one SchemaRepository."""

    def __init__(self, repository: "SchemaRepository"):
        self.repository = repository

    def resolve_schema(self, path: str) -> SchemaNode:
        """
        Resolve a schema path, wildcard path or data path to its node.

        Raises:
            PathNotFound: If no node exists for the path
        """
        node = self.repository.find_node(path)
        if node is not None:
            return node
        try:
            canonical = normalize_schema_path(path)
        except ValueError as e:
            raise PathNotFound(f"Invalid path '{path}': {e}", path) from e
        node = self.repository.find_node(canonical)
        if node is None:
            raise PathNotFound(f"Schema path '{path}' not found", path)
        return node

    def owns(self, path: str) -> bool:
        """Check whether the schema declares a node for ``path``."""
        try:
            self.resolve_schema(path)
        except PathNotFound:
            return False
        return True

    @staticmethod
    def resolve_value(data: Any, path: str | list[PathPart]) -> Any:
        return resolve_value(data, path)

    @staticmethod
    def expand(data: Any, schema_path: str) -> list[str]:
        """Concrete data paths for a canonical schema path."""
        return [format_path(parts) for parts in expand_parts(data, schema_path)]
