"""Schema repository for campaignflow.

Loads the canonical schema document once, resolves local ``$ref``
references and indexes every sub-schema by its canonical path. The
repository is read-only after construction.
"""

import logging
from collections.abc import Iterator, Mapping
from copy import deepcopy
from types import MappingProxyType
from typing import Any

import regress
from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError as MetaSchemaError
from pydantic import ValidationError as PydanticValidationError

from .common.exceptions import PathNotFound, SchemaError
from .models import (
    JSON_TYPES,
    ArrayNode,
    BooleanNode,
    ConditionalClause,
    EnumNode,
    NumberNode,
    ObjectNode,
    SchemaNode,
    StringNode,
)
from .paths import DEFINITIONS, child_schema_path, items_schema_path, normalize_schema_path

logger = logging.getLogger(__name__)

ROOT_PATH = ""
REF_PREFIX = "#/definitions/"


class SchemaRepository:
    """
    Immutable index of the canonical schema.

    Use ``SchemaRepository.load(document)`` to build one. Every node is
    reachable by its canonical path (``""`` is the root, definitions are
    indexed as ``definitions.<name>``).
    """

    def __init__(self, document: dict[str, Any], nodes: Mapping[str, SchemaNode]):
        self._document = document
        self._nodes = MappingProxyType(dict(nodes))
        self._positions = MappingProxyType({path: i for i, path in enumerate(self._nodes)})
        self._property_names = frozenset(
            name
            for node in self._nodes.values()
            if isinstance(node, ObjectNode)
            for name in node.properties
        )

    @classmethod
    def load(cls, document: dict[str, Any]) -> "SchemaRepository":
        """
        Build a repository from a parsed schema document.

        Raises:
            SchemaError: If the document is not a valid draft-07 schema, a
                ``$ref`` cannot be resolved, or a property declares neither a
                type nor an enum
        """
        if not isinstance(document, dict):
            raise SchemaError("Schema document must be a JSON object", ROOT_PATH)

        try:
            Draft7Validator.check_schema(document)
        except MetaSchemaError as e:
            path = ".".join(str(p) for p in e.path)
            raise SchemaError(f"Invalid schema document: {e.message}", path) from e

        document = deepcopy(document)
        builder = _NodeBuilder(document)
        root = builder.build(document, ROOT_PATH)
        if not isinstance(root, ObjectNode):
            raise SchemaError("Schema root must be an object", ROOT_PATH)
        for name, raw in document.get(DEFINITIONS, {}).items():
            builder.build(raw, f"{DEFINITIONS}.{name}")

        repository = cls(document, builder.nodes())
        logger.info(
            f"Indexed {len(repository)} schema nodes for "
            f"'{repository.title or 'untitled schema'}' (version {repository.version or 'n/a'})"
        )
        return repository

    # ------------------------------------------------------------------
    # Document metadata
    # ------------------------------------------------------------------

    @property
    def title(self) -> str | None:
        return self._document.get("title")

    @property
    def version(self) -> str | None:
        """The schema's own ``$version``, surfaced as plain data."""
        return self._document.get("$version")

    @property
    def root(self) -> ObjectNode:
        return self._nodes[ROOT_PATH]  # type: ignore[return-value]

    def schema_info(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "version": self.version,
            "description": self._document.get("description"),
            "node_count": len(self),
        }

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_node(self, path: str) -> SchemaNode | None:
        """Exact canonical lookup; None when the path is not indexed."""
        return self._nodes.get(path)

    def get_node(self, path: str) -> SchemaNode:
        """
        Get the node for a schema path.

        Non-canonical spellings (``properties.author``, array indices) are
        normalized first.

        Raises:
            PathNotFound: If the path does not exist in the schema
        """
        node = self._nodes.get(path)
        if node is not None:
            return node
        try:
            node = self._nodes.get(normalize_schema_path(path))
        except ValueError as e:
            raise PathNotFound(f"Invalid path '{path}': {e}", path) from e
        if node is None:
            raise PathNotFound(f"Schema path '{path}' not found", path)
        return node

    def get_enum_values(self, path: str) -> list[str]:
        """Ordered enum options for a path, empty when it is not an enum."""
        node = self.get_node(path)
        if isinstance(node, EnumNode):
            return node.options
        return []

    def get_required_children(self, path: str) -> frozenset[str]:
        """Statically required property names of an object node."""
        node = self.get_node(path)
        if isinstance(node, ObjectNode):
            return frozenset(node.required)
        return frozenset()

    def parent_path(self, path: str) -> str | None:
        """Canonical path of the node that declares ``path``."""
        if path == ROOT_PATH:
            return None
        if path.endswith(".items"):
            return path[: -len(".items")]
        if ".properties." in path:
            return path.rsplit(".properties.", 1)[0]
        if path.startswith(f"{DEFINITIONS}."):
            return None
        return ROOT_PATH

    def is_required(self, path: str) -> bool:
        """Check whether the node at ``path`` is statically required by its parent."""
        parent_path = self.parent_path(path)
        if parent_path is None:
            return False
        parent = self._nodes.get(parent_path)
        if not isinstance(parent, ObjectNode):
            return False
        return parent.is_required(self._nodes[path].name)

    def position(self, path: str) -> int:
        """Declaration order of a node; unknown paths sort last."""
        return self._positions.get(path, len(self._positions))

    def property_names(self) -> frozenset[str]:
        """Every property name declared anywhere in the schema."""
        return self._property_names

    def paths(self) -> Iterator[str]:
        return iter(self._nodes)

    def nodes(self) -> Iterator[tuple[str, SchemaNode]]:
        return iter(self._nodes.items())

    def __contains__(self, path: object) -> bool:
        return path in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)


class _NodeBuilder:
    """Builds typed nodes from raw schema dictionaries in one traversal."""

    def __init__(self, document: dict[str, Any]):
        self.definitions = document.get(DEFINITIONS, {})
        self._nodes: dict[str, SchemaNode | None] = {}

    def nodes(self) -> dict[str, SchemaNode]:
        return {path: node for path, node in self._nodes.items() if node is not None}

    def build(self, raw: Any, path: str, ref_stack: tuple[str, ...] = ()) -> SchemaNode:
        raw, ref_stack = self._resolve_ref(raw, path, ref_stack)
        if not isinstance(raw, dict):
            raise SchemaError(f"Sub-schema at '{path}' must be an object", path)

        # Reserve the slot so the index keeps declaration order
        self._nodes.setdefault(path, None)

        common = {
            "path": path,
            "types": self._types(raw, path),
            "title": raw.get("title"),
            "description": raw.get("description"),
            "default": raw.get("default"),
            "has_default": "default" in raw,
            "examples": tuple(raw.get("examples", ())),
            "read_only": bool(raw.get("readOnly", False)),
        }

        try:
            node = self._create(raw, path, common, ref_stack)
        except PydanticValidationError as e:
            raise SchemaError(f"Invalid constraints at '{path}': {e}", path) from e

        self._nodes[path] = node
        return node

    def _create(
        self, raw: dict[str, Any], path: str, common: dict[str, Any], ref_stack: tuple[str, ...]
    ) -> SchemaNode:
        if "enum" in raw:
            return EnumNode(values=tuple(raw["enum"]), **common)

        primary = next((t for t in common["types"] if t != "null"), None)
        if primary is None:
            raise SchemaError(f"Property '{path or '<root>'}' declares no type and no enum", path)

        if primary == "string":
            return StringNode(
                min_length=raw.get("minLength"),
                max_length=raw.get("maxLength"),
                pattern=self._pattern(raw, path),
                format=raw.get("format"),
                **common,
            )
        if primary in ("number", "integer"):
            return NumberNode(
                integer=primary == "integer",
                minimum=raw.get("minimum"),
                maximum=raw.get("maximum"),
                exclusive_minimum=raw.get("exclusiveMinimum"),
                exclusive_maximum=raw.get("exclusiveMaximum"),
                **common,
            )
        if primary == "boolean":
            return BooleanNode(**common)
        if primary == "array":
            items = raw.get("items")
            return ArrayNode(
                items=self.build(items, items_schema_path(path), ref_stack)
                if isinstance(items, dict)
                else None,
                min_items=raw.get("minItems"),
                max_items=raw.get("maxItems"),
                unique_items=bool(raw.get("uniqueItems", False)),
                **common,
            )

        properties = {
            name: self.build(sub_schema, child_schema_path(path, name), ref_stack)
            for name, sub_schema in raw.get("properties", {}).items()
        }
        return ObjectNode(
            properties=properties,
            required=tuple(raw.get("required", ())),
            additional_properties=raw.get("additionalProperties", True) is not False,
            conditionals=self._conditionals(raw, path, properties),
            **common,
        )

    def _resolve_ref(
        self, raw: Any, path: str, ref_stack: tuple[str, ...]
    ) -> tuple[Any, tuple[str, ...]]:
        """Inline ``$ref`` targets; sibling keywords override the target's."""
        while isinstance(raw, dict) and "$ref" in raw:
            ref = raw["$ref"]
            if not isinstance(ref, str) or not ref.startswith(REF_PREFIX):
                raise SchemaError(f"Unsupported reference '{ref}' at '{path}'", path)
            if ref in ref_stack:
                raise SchemaError(f"Circular reference '{ref}' at '{path}'", path)
            name = ref[len(REF_PREFIX):]
            if name not in self.definitions:
                raise SchemaError(f"Unresolvable reference '{ref}' at '{path}'", path)
            siblings = {key: value for key, value in raw.items() if key != "$ref"}
            raw = {**self.definitions[name], **siblings}
            ref_stack = (*ref_stack, ref)
        return raw, ref_stack

    @staticmethod
    def _types(raw: dict[str, Any], path: str) -> tuple[str, ...]:
        declared = raw.get("type")
        if declared is None:
            return ()
        types = (declared,) if isinstance(declared, str) else tuple(declared)
        for type_name in types:
            if type_name not in JSON_TYPES:
                raise SchemaError(f"Unknown type '{type_name}' at '{path}'", path)
        return types

    @staticmethod
    def _pattern(raw: dict[str, Any], path: str) -> str | None:
        pattern = raw.get("pattern")
        if pattern is None:
            return None
        try:
            regress.Regex(pattern)
        except regress.RegressError as e:
            raise SchemaError(f"Invalid pattern '{pattern}' at '{path}': {e}", path) from e
        return pattern

    def _conditionals(
        self, raw: dict[str, Any], path: str, properties: dict[str, SchemaNode]
    ) -> tuple[ConditionalClause, ...]:
        blocks = [raw] if "if" in raw else []
        for entry in raw.get("allOf", ()):
            if not isinstance(entry, dict) or "if" not in entry:
                raise SchemaError(f"Unsupported allOf entry at '{path}'", path)
            blocks.append(entry)
        return tuple(self._conditional(block, path, properties) for block in blocks)

    @staticmethod
    def _conditional(
        block: dict[str, Any], path: str, properties: dict[str, SchemaNode]
    ) -> ConditionalClause:
        condition = block["if"].get("properties", {})
        if len(condition) != 1:
            raise SchemaError(
                f"Conditional at '{path}' must test exactly one property", path
            )
        (name, check), = condition.items()
        if "const" in check:
            values = (check["const"],)
        elif "enum" in check:
            values = tuple(check["enum"])
        else:
            raise SchemaError(
                f"Conditional on '{name}' at '{path}' must use const or enum", path
            )

        then_required = tuple(block.get("then", {}).get("required", ()))
        else_required = tuple(block.get("else", {}).get("required", ()))
        for referenced in (name, *then_required, *else_required):
            if referenced not in properties:
                raise SchemaError(
                    f"Conditional at '{path}' references undeclared property '{referenced}'",
                    path,
                )
        return ConditionalClause(
            property=name,
            values=values,
            then_required=then_required,
            else_required=else_required,
        )
