"""Form model construction for campaignflow.

A form model is the list of fields a data entry step currently shows,
projected from the schema and filtered by the visibility rules for one
data snapshot. Building one has no side effects, so the same snapshot
always yields the same model.
"""

import logging
from collections.abc import Mapping
from copy import deepcopy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .helpers import HelperFieldMatcher
from .models import (
    ArrayNode,
    EnumNode,
    NodeKind,
    ObjectNode,
    SchemaNode,
    StepDefinition,
    Visibility,
)
from .paths import PathResolver, resolve_value
from .repository import SchemaRepository
from .rules import ConditionalRule, ConditionalRuleEvaluator

logger = logging.getLogger(__name__)

TYPE_DEFAULTS = {
    "string": "",
    "number": 0,
    "integer": 0,
    "boolean": False,
    "array": [],
    "object": {},
}

# Date properties pre-filled from the campaign dates kept as helper fields
CAMPAIGN_DATES = {
    "date_from": ("startDate", "T00:00:00"),
    "date_to": ("endDate", "T23:59:59"),
}


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Form-relevant projection of one schema node at one data path.

    ``label`` and ``description`` are passed through from the schema as-is.
    """

    name: str
    path: str
    data_path: str
    kind: NodeKind
    types: tuple[str, ...] = ()
    constraints: Mapping[str, Any] = field(default_factory=dict)
    static_required: bool = False
    dynamic_required: bool = False
    disabled: bool = False
    options: tuple[str, ...] = ()
    label: str | None = None
    description: str | None = None
    default: Any = None
    examples: tuple[Any, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "constraints", MappingProxyType(dict(self.constraints)))

    @property
    def required(self) -> bool:
        return self.static_required or self.dynamic_required

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "path": self.path,
            "data_path": self.data_path,
            "kind": self.kind.value,
            "types": list(self.types),
            "constraints": dict(self.constraints),
            "static_required": self.static_required,
            "dynamic_required": self.dynamic_required,
            "disabled": self.disabled,
        }
        if self.options:
            result["options"] = list(self.options)
        if self.label:
            result["label"] = self.label
        if self.description:
            result["description"] = self.description
        if self.default is not None:
            result["default"] = self.default
        if self.examples:
            result["examples"] = list(self.examples)
        return result


@dataclass(frozen=True)
class FormModel:
    """Visible fields of one step for one data snapshot."""

    step: str
    fields: tuple[FieldDescriptor, ...] = ()
    visibility: Mapping[str, Visibility] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "visibility", MappingProxyType(dict(self.visibility)))

    @property
    def field_paths(self) -> list[str]:
        return [descriptor.data_path for descriptor in self.fields]

    @property
    def required_fields(self) -> list[FieldDescriptor]:
        return [descriptor for descriptor in self.fields if descriptor.required]

    def get_field(self, data_path: str) -> FieldDescriptor | None:
        for descriptor in self.fields:
            if descriptor.data_path == data_path:
                return descriptor
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "fields": [descriptor.to_dict() for descriptor in self.fields],
            "visibility": {path: value.value for path, value in self.visibility.items()},
        }


class FormModelBuilder:
    """Builds form models and default objects from the schema."""

    def __init__(
        self,
        repository: SchemaRepository,
        evaluator: ConditionalRuleEvaluator,
        rules: list[ConditionalRule],
        helpers: HelperFieldMatcher,
    ):
        self.repository = repository
        self.evaluator = evaluator
        self.rules = rules
        self.helpers = helpers
        self.resolver = PathResolver(repository)

    def build(self, step: StepDefinition, data: Any) -> FormModel:
        """
        Build the form model of a step for a data snapshot.

        Step paths that cross arrays expand over the elements present in
        ``data``. Hidden fields and helper fields are left out.
        """
        visibility = self.evaluator.evaluate(self.rules, data)
        fields = []
        for schema_path in step.fields:
            node = self.repository.get_node(schema_path)
            static_required = self.repository.is_required(node.path)
            for data_path in self.resolver.expand(data, schema_path):
                if self.helpers.matches_path(data_path):
                    continue
                state = visibility.visibility(data_path, static_required)
                if state == Visibility.HIDDEN:
                    continue
                fields.append(
                    self._describe(
                        node,
                        data_path,
                        static_required=static_required,
                        dynamic_required=state == Visibility.VISIBLE_REQUIRED,
                        disabled=visibility.is_disabled(data_path),
                    )
                )

        model_visibility = {
            path: state
            for path, state in visibility.entries.items()
            if any(visibility.schema_paths[path] == schema_path for schema_path in step.fields)
        }
        logger.debug(f"Built form model for step '{step.name}' with {len(fields)} fields")
        return FormModel(step=step.name, fields=tuple(fields), visibility=model_visibility)

    @staticmethod
    def _describe(
        node: SchemaNode,
        data_path: str,
        static_required: bool,
        dynamic_required: bool,
        disabled: bool,
    ) -> FieldDescriptor:
        return FieldDescriptor(
            name=node.name,
            path=node.path,
            data_path=data_path,
            kind=node.kind,
            types=node.types,
            constraints=node.constraints(),
            static_required=static_required,
            dynamic_required=dynamic_required,
            disabled=disabled,
            options=tuple(node.options) if isinstance(node, EnumNode) else (),
            label=node.title,
            description=node.description,
            default=node.default if node.has_default else None,
            examples=node.examples,
        )

    # ------------------------------------------------------------------
    # Default objects
    # ------------------------------------------------------------------

    def create_default_object(self, path: str, data: Any = None) -> Any:
        """
        Create a skeleton value for a new object or array element.

        For an array path the skeleton is one new element. Required
        properties of an object get the schema default, else the first enum
        value, else an empty value of their type. ``date_from`` and
        ``date_to`` are pre-filled from the campaign dates in ``data``.

        Raises:
            PathNotFound: If the path does not exist in the schema
        """
        node = self.resolver.resolve_schema(path)
        if isinstance(node, ArrayNode) and node.items is not None:
            node = node.items
        if not isinstance(node, ObjectNode):
            return self.default_value(node)

        result = {
            name: self.default_value(child)
            for name, child in node.properties.items()
            if node.is_required(name)
        }
        for name, (helper, time_suffix) in CAMPAIGN_DATES.items():
            if name not in node.properties:
                continue
            campaign_date = resolve_value(data, [helper])
            if isinstance(campaign_date, str) and campaign_date:
                result[name] = campaign_date if "T" in campaign_date else f"{campaign_date}{time_suffix}"
        return result

    @staticmethod
    def default_value(node: SchemaNode) -> Any:
        """Default for a single node; null only when no other type is allowed."""
        if node.has_default:
            return deepcopy(node.default)
        if isinstance(node, EnumNode):
            for value in node.values:
                if value is not None:
                    return value
        primary = node.primary_type
        if primary is None:
            return None
        return deepcopy(TYPE_DEFAULTS.get(primary))
