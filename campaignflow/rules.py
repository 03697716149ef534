"""Conditional rules and visibility evaluation for campaignflow.

Rules are derived once from the schema and the standard definition and
kept as a small declarative table. Evaluating the table against a data
snapshot yields a ``VisibilityMap``: which concrete fields are hidden,
required, disabled or recommended for that snapshot.

Rule sources:
- schema ``if``/``then``/``else`` blocks (``require``)
- discriminator groups of the standard definition (``show`` and ``hide``)
- ``readOnly`` schema nodes (``disable``)
- recommended fields of the standard definition (``recommend``)
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .common.exceptions import ConfigurationError
from .models import (
    ObjectNode,
    RuleAction,
    RuleSource,
    StandardDefinition,
    Visibility,
)
from .paths import (
    ITEMS,
    MISSING,
    PROPERTIES,
    WILDCARD,
    PathPart,
    child_schema_path,
    expand_parts,
    format_path,
    parse_path,
    resolve_value,
    schema_parts,
)
from .repository import SchemaRepository
from .validation import json_equal

logger = logging.getLogger(__name__)


def scope_of(schema_path: str) -> str:
    """Nearest enclosing array element (``...items``) of a schema path, or root."""
    tokens = schema_path.split(".")
    for i in range(len(tokens) - 1, -1, -1):
        if tokens[i] == ITEMS and (i == 0 or tokens[i - 1] != PROPERTIES):
            return ".".join(tokens[: i + 1])
    return ""


def _relative_parts(schema_path: str, scope: str) -> list[PathPart]:
    return schema_parts(schema_path)[len(schema_parts(scope)) if scope else 0:]


@dataclass(frozen=True)
class ConditionalRule:
    """
    One declarative rule.

    Attributes:
        targets: Canonical schema paths the rule acts on
        action: Effect on the targets when the rule fires
        trigger_path: Canonical path of the field the rule depends on; None
            for unconditional rules
        trigger_values: Values of the trigger that fire the rule
        negate: Fire when the trigger is set to a value outside
            ``trigger_values`` instead
        source: Where the rule was derived from
        message: Message for issues the rule gives rise to
        suggested_fix: Fix suggested alongside ``message``
    """

    targets: tuple[str, ...]
    action: RuleAction
    trigger_path: str | None = None
    trigger_values: tuple[Any, ...] = ()
    negate: bool = False
    source: RuleSource = RuleSource.SCHEMA
    message: str = ""
    suggested_fix: str | None = None
    scope: str = field(init=False)

    def __post_init__(self):
        """Compute the scope and check targets stay within it."""
        anchor = self.trigger_path if self.trigger_path is not None else self.targets[0]
        scope = scope_of(anchor)
        object.__setattr__(self, "scope", scope)
        if self.trigger_path is None:
            return
        for target in self.targets:
            if scope and not target.startswith(f"{scope}."):
                raise ConfigurationError(
                    f"Rule target '{target}' is outside the list element of trigger "
                    f"'{self.trigger_path}'",
                    config_section="rules",
                    config_key=target,
                )
            if WILDCARD in _relative_parts(target, scope):
                raise ConfigurationError(
                    f"Rule target '{target}' crosses into a nested list of '{scope}'",
                    config_section="rules",
                    config_key=target,
                )

    def fires(self, value: Any) -> bool:
        """
        Check whether the rule applies for a trigger value.

        Unconditional rules always fire. An absent or null trigger never
        fires a conditional rule, negated or not.
        """
        if self.trigger_path is None:
            return True
        if value is MISSING or value is None:
            return False
        matched = any(json_equal(value, candidate) for candidate in self.trigger_values)
        return matched != self.negate

    def to_dict(self) -> dict[str, Any]:
        """Convert rule to dictionary representation."""
        result: dict[str, Any] = {
            "action": self.action.value,
            "targets": list(self.targets),
            "source": self.source.value,
        }
        if self.trigger_path is not None:
            result["trigger"] = self.trigger_path
            result["values"] = list(self.trigger_values)
            if self.negate:
                result["negate"] = True
        if self.message:
            result["message"] = self.message
        return result


@dataclass(frozen=True)
class RuleHit:
    """A rule that fired for one concrete target."""

    rule: ConditionalRule
    target_path: str
    target_schema_path: str
    trigger_data_path: str | None = None
    trigger_value: Any = None


@dataclass(frozen=True)
class VisibilityMap:
    """
    Visibility of rule-governed fields for one data snapshot.

    Fields that no rule targets are not listed; they are visible, and
    required exactly when the schema requires them. Hidden entries hide
    their whole subtree.
    """

    entries: Mapping[str, Visibility] = field(default_factory=dict)
    schema_paths: Mapping[str, str] = field(default_factory=dict)
    disabled: frozenset[str] = frozenset()
    forbidden: tuple[RuleHit, ...] = ()
    recommended: tuple[RuleHit, ...] = ()
    _hidden: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        hidden = frozenset(path for path, visibility in self.entries.items() if visibility == Visibility.HIDDEN)
        object.__setattr__(self, "_hidden", hidden)

    @property
    def hidden_paths(self) -> list[str]:
        return sorted(self._hidden)

    def is_hidden(self, data_path: str) -> bool:
        """Check whether a data path or any of its ancestors is hidden."""
        if not self._hidden:
            return False
        if data_path in self._hidden:
            return True
        parts = parse_path(data_path) if data_path else []
        return any(format_path(parts[:depth]) in self._hidden for depth in range(len(parts)))

    def is_disabled(self, data_path: str) -> bool:
        return data_path in self.disabled

    def visibility(self, data_path: str, static_required: bool = False) -> Visibility:
        """Resolved visibility of a field, falling back to its static flag."""
        if self.is_hidden(data_path):
            return Visibility.HIDDEN
        entry = self.entries.get(data_path)
        if entry is not None:
            return entry
        return Visibility.VISIBLE_REQUIRED if static_required else Visibility.VISIBLE_OPTIONAL

    def required_paths(self) -> list[tuple[str, str]]:
        """(data path, schema path) of every rule-governed required field."""
        return [
            (path, self.schema_paths[path])
            for path, visibility in self.entries.items()
            if visibility == Visibility.VISIBLE_REQUIRED and not self.is_hidden(path)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": {path: visibility.value for path, visibility in self.entries.items()},
            "disabled": sorted(self.disabled),
        }


class ConditionalRuleEvaluator:
    """
    Derives the rule table and evaluates it against data snapshots.

    ``evaluate`` is a pure function of (rules, data); the evaluator itself
    only holds the read-only repository and standard definition.
    """

    def __init__(self, repository: SchemaRepository, standard: StandardDefinition | None = None):
        self.repository = repository
        self.standard = standard

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def derive_rules(self) -> list[ConditionalRule]:
        """
        Derive the full rule table.

        Raises:
            ConfigurationError: If a rule references a field the schema does
                not declare or crosses list elements
        """
        rules: list[ConditionalRule] = []
        rules.extend(self._schema_rules())
        rules.extend(self._discriminator_rules())
        rules.extend(self._read_only_rules())
        rules.extend(self._recommendation_rules())
        logger.debug(f"Derived {len(rules)} conditional rules")
        return rules

    def _schema_rules(self) -> list[ConditionalRule]:
        rules = []
        for path, node in self.repository.nodes():
            if not isinstance(node, ObjectNode) or path.startswith("definitions."):
                continue
            for clause in node.conditionals:
                trigger = child_schema_path(path, clause.property)
                if clause.then_required:
                    rules.append(ConditionalRule(
                        targets=tuple(child_schema_path(path, name) for name in clause.then_required),
                        action=RuleAction.REQUIRE,
                        trigger_path=trigger,
                        trigger_values=clause.values,
                        source=RuleSource.SCHEMA,
                    ))
                if clause.else_required:
                    rules.append(ConditionalRule(
                        targets=tuple(child_schema_path(path, name) for name in clause.else_required),
                        action=RuleAction.REQUIRE,
                        trigger_path=trigger,
                        trigger_values=clause.values,
                        negate=True,
                        source=RuleSource.SCHEMA,
                    ))
        return rules

    def _discriminator_rules(self) -> list[ConditionalRule]:
        if self.standard is None:
            return []
        rules = []
        for discriminator in self.standard.discriminators:
            self._require_node(discriminator.field, "discriminators")
            owner = self.repository.parent_path(discriminator.field)
            for group in discriminator.groups:
                targets = tuple(child_schema_path(owner or "", name) for name in group.fields)
                for target in targets:
                    self._require_node(target, "discriminators")
                rules.append(ConditionalRule(
                    targets=targets,
                    action=RuleAction.SHOW,
                    trigger_path=discriminator.field,
                    trigger_values=group.values,
                    source=RuleSource.DISCRIMINATOR,
                ))
                rules.append(ConditionalRule(
                    targets=targets,
                    action=RuleAction.HIDE,
                    trigger_path=discriminator.field,
                    trigger_values=group.values,
                    negate=True,
                    source=RuleSource.DISCRIMINATOR,
                    message=group.conflict_message or "",
                    suggested_fix=group.suggested_fix,
                ))
        return rules

    def _read_only_rules(self) -> list[ConditionalRule]:
        return [
            ConditionalRule(targets=(path,), action=RuleAction.DISABLE, source=RuleSource.SCHEMA)
            for path, node in self.repository.nodes()
            if node.read_only and not path.startswith("definitions.")
        ]

    def _recommendation_rules(self) -> list[ConditionalRule]:
        if self.standard is None:
            return []
        rules = []
        for recommendation in self.standard.recommended:
            self._require_node(recommendation.path, "recommended")
            rules.append(ConditionalRule(
                targets=(recommendation.path,),
                action=RuleAction.RECOMMEND,
                source=RuleSource.STANDARD,
                message=recommendation.message,
                suggested_fix=recommendation.suggested_fix,
            ))
        return rules

    def _require_node(self, path: str, section: str) -> None:
        if self.repository.find_node(path) is None:
            raise ConfigurationError(
                f"Path '{path}' does not exist in the schema",
                config_section=section,
                config_key=path,
            )

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(
        self,
        rules: list[ConditionalRule],
        data: Any,
        location_index: int | None = None,
    ) -> VisibilityMap:
        """
        Evaluate the rule table against a data snapshot.

        Args:
            rules: Rules from ``derive_rules``
            data: The document snapshot
            location_index: Restrict list-scoped rules to the element with
                this index in the outermost list

        Returns:
            VisibilityMap for the snapshot
        """
        shown: dict[str, bool] = {}
        hidden: set[str] = set()
        required: set[str] = set()
        disabled: set[str] = set()
        schema_paths: dict[str, str] = {}
        forbidden: list[RuleHit] = []
        recommended: list[RuleHit] = []

        for rule in rules:
            for instance in self._instances(rule.scope, data, location_index):
                trigger_data_path = None
                trigger_value = None
                if rule.trigger_path is not None:
                    trigger_parts = [*instance, *_relative_parts(rule.trigger_path, rule.scope)]
                    trigger_data_path = format_path(trigger_parts)
                    trigger_value = resolve_value(data, trigger_parts)
                fired = rule.fires(trigger_value)

                for target in rule.targets:
                    target_path = format_path([*instance, *_relative_parts(target, rule.scope)])
                    schema_paths[target_path] = target
                    hit = RuleHit(rule, target_path, target, trigger_data_path, trigger_value)

                    if rule.action == RuleAction.SHOW:
                        shown[target_path] = shown.get(target_path, False) or fired
                    elif not fired:
                        continue
                    elif rule.action == RuleAction.HIDE:
                        hidden.add(target_path)
                        forbidden.append(hit)
                    elif rule.action == RuleAction.REQUIRE:
                        required.add(target_path)
                    elif rule.action == RuleAction.DISABLE:
                        disabled.add(target_path)
                    elif rule.action == RuleAction.RECOMMEND:
                        recommended.append(hit)

        entries: dict[str, Visibility] = {}
        for target_path in [*shown, *sorted(hidden), *sorted(required)]:
            if target_path in entries:
                continue
            if target_path in hidden or shown.get(target_path) is False:
                entries[target_path] = Visibility.HIDDEN
            elif target_path in required or self.repository.is_required(schema_paths[target_path]):
                entries[target_path] = Visibility.VISIBLE_REQUIRED
            else:
                entries[target_path] = Visibility.VISIBLE_OPTIONAL

        return VisibilityMap(
            entries=MappingProxyType(entries),
            schema_paths=MappingProxyType(schema_paths),
            disabled=frozenset(disabled),
            forbidden=tuple(forbidden),
            recommended=tuple(recommended),
        )

    @staticmethod
    def _instances(scope: str, data: Any, location_index: int | None) -> list[list[PathPart]]:
        if not scope:
            return [[]]
        instances = expand_parts(data, scope)
        if location_index is None:
            return instances
        return [
            parts for parts in instances
            if next((p for p in parts if isinstance(p, int)), None) == location_index
        ]


def derive_rules(
    repository: SchemaRepository, standard: StandardDefinition | None = None
) -> list[ConditionalRule]:
    """Derive the rule table for a repository and optional standard definition."""
    return ConditionalRuleEvaluator(repository, standard).derive_rules()


__all__ = [
    "ConditionalRule",
    "ConditionalRuleEvaluator",
    "RuleHit",
    "VisibilityMap",
    "derive_rules",
    "scope_of",
]
