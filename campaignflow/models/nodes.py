"""
Typed schema node tree.

Single file containing:
- Node models (pydantic, one subclass per node kind)
- Conditional clause model for ``if``/``then``/``else`` blocks

Nodes are built once by ``SchemaRepository`` and never modified afterwards.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .enums import NodeKind

JSON_TYPES = ("string", "number", "integer", "boolean", "array", "object", "null")


class ConditionalClause(BaseModel):
    """One ``if``/``then``/``else`` block keyed on a single sibling property."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    property: str
    values: tuple[Any, ...]
    then_required: tuple[str, ...] = ()
    else_required: tuple[str, ...] = ()


# ============================================================================
# Node Models (Pydantic with inheritance)
# ============================================================================


class SchemaNode(BaseModel):
    """
    Base node with the annotations every schema node carries.

    All node kinds inherit from this.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: NodeKind
    path: str
    types: tuple[str, ...] = ()
    title: str | None = None
    description: str | None = None
    default: Any = None
    has_default: bool = False
    examples: tuple[Any, ...] = ()
    read_only: bool = False

    @property
    def name(self) -> str:
        """Property name this node is declared under."""
        parts = [p for p in self.path.split(".") if p not in ("items", "properties")]
        return parts[-1] if parts else ""

    @property
    def nullable(self) -> bool:
        """Whether ``null`` is part of the declared type union."""
        return "null" in self.types

    @property
    def primary_type(self) -> str | None:
        """First non-null declared type."""
        for type_name in self.types:
            if type_name != "null":
                return type_name
        return None

    def constraints(self) -> dict[str, Any]:
        """Constraint keywords set on this node, keyed by JSON Schema name."""
        return {}

    def children(self) -> dict[str, "SchemaNode"]:
        """Direct child nodes keyed by the segment that reaches them."""
        return {}


class StringNode(SchemaNode):
    """String node."""

    kind: Literal[NodeKind.STRING] = NodeKind.STRING

    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    pattern: str | None = None
    format: str | None = None

    def constraints(self) -> dict[str, Any]:
        return _present(
            minLength=self.min_length,
            maxLength=self.max_length,
            pattern=self.pattern,
            format=self.format,
        )


class NumberNode(SchemaNode):
    """Number or integer node."""

    kind: Literal[NodeKind.NUMBER] = NodeKind.NUMBER

    integer: bool = False
    minimum: int | float | None = None
    maximum: int | float | None = None
    exclusive_minimum: int | float | None = None
    exclusive_maximum: int | float | None = None

    def constraints(self) -> dict[str, Any]:
        return _present(
            minimum=self.minimum,
            maximum=self.maximum,
            exclusiveMinimum=self.exclusive_minimum,
            exclusiveMaximum=self.exclusive_maximum,
        )


class BooleanNode(SchemaNode):
    """Boolean node."""

    kind: Literal[NodeKind.BOOLEAN] = NodeKind.BOOLEAN


class EnumNode(SchemaNode):
    """Node restricted to a fixed, ordered set of values."""

    kind: Literal[NodeKind.ENUM] = NodeKind.ENUM

    values: tuple[Any, ...]

    @property
    def options(self) -> list[str]:
        """Selectable values, without ``null``."""
        return [str(value) for value in self.values if value is not None]

    def constraints(self) -> dict[str, Any]:
        return {"enum": list(self.values)}


class ArrayNode(SchemaNode):
    """Array node; ``items`` is the node every element is checked against."""

    kind: Literal[NodeKind.ARRAY] = NodeKind.ARRAY

    items: "AnyNode | None" = None
    min_items: int | None = Field(default=None, ge=0)
    max_items: int | None = Field(default=None, ge=0)
    unique_items: bool = False

    def constraints(self) -> dict[str, Any]:
        return _present(
            minItems=self.min_items,
            maxItems=self.max_items,
            uniqueItems=self.unique_items or None,
        )

    def children(self) -> dict[str, SchemaNode]:
        return {"items": self.items} if self.items is not None else {}


class ObjectNode(SchemaNode):
    """Object node with declared properties in declaration order."""

    kind: Literal[NodeKind.OBJECT] = NodeKind.OBJECT

    properties: dict[str, "AnyNode"] = Field(default_factory=dict)
    required: tuple[str, ...] = ()
    additional_properties: bool = True
    conditionals: tuple[ConditionalClause, ...] = ()

    def constraints(self) -> dict[str, Any]:
        return _present(
            required=list(self.required) or None,
            additionalProperties=False if not self.additional_properties else None,
        )

    def children(self) -> dict[str, SchemaNode]:
        return dict(self.properties)

    def is_required(self, name: str) -> bool:
        """Check whether ``name`` is statically required on this object."""
        return name in self.required


AnyNode = Annotated[
    StringNode | NumberNode | BooleanNode | EnumNode | ArrayNode | ObjectNode,
    Field(discriminator="kind"),
]

ArrayNode.model_rebuild()
ObjectNode.model_rebuild()


def _present(**constraints: Any) -> dict[str, Any]:
    """Drop unset constraints."""
    return {key: value for key, value in constraints.items() if value is not None}
