"""Validation aggregation for campaignflow.

Runs compiled validators over a single field, the fields of one step, or
the whole document, and folds the results into reports keyed by step and
by data path. Hidden fields and helper fields are pruned before any
keyword runs, so they can never produce issues.
"""

import logging
from collections.abc import Callable
from typing import Any

from .common.exceptions import ConfigurationError, PathNotFound
from .helpers import HelperFieldMatcher
from .models import (
    DateRangeDefinition,
    FieldReport,
    ObjectNode,
    SchemaNode,
    Severity,
    StandardDefinition,
    StepDefinition,
    StepReport,
    ValidationIssue,
    ValidationReport,
    Visibility,
)
from .paths import (
    MISSING,
    PathResolver,
    child_schema_path,
    format_path,
    is_within,
    items_schema_path,
    parse_path,
    resolve_value,
)
from .repository import SchemaRepository
from .rules import ConditionalRule, ConditionalRuleEvaluator, VisibilityMap
from .validation import ValidationEngine, parse_datetime

logger = logging.getLogger(__name__)

IssueFilter = Callable[[ValidationIssue], bool]


def _populated(value: Any) -> bool:
    """A value counts as entered unless absent, null or an empty container."""
    if value is MISSING or value is None:
        return False
    if isinstance(value, list | dict) and not value:
        return False
    return True


def _blank(value: Any) -> bool:
    return value is MISSING or value is None or (isinstance(value, str) and not value.strip())


class ValidationAggregator:
    """
    Aggregates validation across fields and steps.

    All public methods are pure functions of the data snapshot they are
    given.
    """

    def __init__(
        self,
        repository: SchemaRepository,
        engine: ValidationEngine,
        evaluator: ConditionalRuleEvaluator,
        rules: list[ConditionalRule],
        standard: StandardDefinition,
        helpers: HelperFieldMatcher,
    ):
        self.repository = repository
        self.engine = engine
        self.evaluator = evaluator
        self.rules = rules
        self.standard = standard
        self.helpers = helpers
        self.resolver = PathResolver(repository)
        self._step_fields = {step.name: frozenset(step.fields) for step in standard.steps}
        self._date_ranges = self._date_range_owners()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def visibility(self, data: Any) -> VisibilityMap:
        return self.evaluator.evaluate(self.rules, data)

    def validate_field(self, data: Any, path: str) -> list[ValidationIssue]:
        """
        Validate the value at one concrete data path and its subtree.

        Helper fields and hidden fields yield no issues.

        Raises:
            PathNotFound: If the path is neither a helper field nor declared
                by the schema
        """
        try:
            parts = parse_path(path)
        except ValueError as e:
            raise PathNotFound(f"Invalid path '{path}': {e}", path) from e
        if parts and self.helpers.matches(parts[-1]):
            return []

        data_path = format_path(parts)
        node = self.resolver.resolve_schema(data_path)
        visibility = self.visibility(data)
        prune = self._pruner(visibility)
        if data_path and prune(data_path):
            return []

        issues = self._check_field(data, data_path, node, visibility, prune, recursive=True)
        issues.extend(
            self._rule_issues(data, visibility, prune, lambda issue: is_within(issue.data_path, data_path))
        )
        return self._ordered(issues)

    def validate_step(self, data: Any, step: str) -> StepReport:
        """
        Validate the fields of one step.

        Each step field is checked on its own (presence plus its own
        keywords); nested fields are covered by their own step entries.
        Summary steps report the whole document.

        Raises:
            ConfigurationError: If the step is unknown
        """
        step_definition = self.get_step(step)
        if step_definition.summary:
            return StepReport(step_definition.name, self.validate_all(data).issues)

        visibility = self.visibility(data)
        prune = self._pruner(visibility)
        issues: list[ValidationIssue] = []
        for schema_path in step_definition.fields:
            node = self.repository.get_node(schema_path)
            for data_path in self.resolver.expand(data, schema_path):
                if prune(data_path):
                    continue
                issues.extend(
                    self._check_field(data, data_path, node, visibility, prune, recursive=False)
                )

        fields = self._step_fields[step_definition.name]
        issues.extend(
            self._rule_issues(data, visibility, prune, lambda issue: issue.schema_path in fields)
        )
        return StepReport(step_definition.name, tuple(self._ordered(issues)))

    def validate_all(self, data: Any) -> ValidationReport:
        """Validate the whole document against the canonical schema."""
        visibility = self.visibility(data)
        prune = self._pruner(visibility)

        issues = self.engine.compile(self.repository.root).run(data, "", prune=prune)
        issues.extend(self._rule_issues(data, visibility, prune, lambda issue: True))
        ordered = tuple(self._ordered(issues))

        steps = {}
        for step in self.standard.steps:
            if step.summary:
                steps[step.name] = StepReport(step.name, ordered)
            else:
                fields = self._step_fields[step.name]
                steps[step.name] = StepReport(
                    step.name, tuple(issue for issue in ordered if issue.schema_path in fields)
                )

        grouped: dict[str, list[ValidationIssue]] = {}
        for issue in ordered:
            grouped.setdefault(issue.data_path, []).append(issue)
        field_reports = {path: FieldReport(path, tuple(found)) for path, found in grouped.items()}

        report = ValidationReport(issues=ordered, steps=steps, fields=field_reports)
        logger.debug(
            f"Validated document: {len(report.errors)} errors, {len(report.warnings)} warnings"
        )
        return report

    def get_step(self, step: str) -> StepDefinition:
        """
        Get a step definition by name.

        Raises:
            ConfigurationError: If the step is unknown
        """
        step_definition = self.standard.get_step(step)
        if step_definition is None:
            raise ConfigurationError(
                f"Unknown step '{step}'. Available steps: {', '.join(self.standard.step_names)}",
                config_section="steps",
                config_key=step,
            )
        return step_definition

    # ------------------------------------------------------------------
    # Field checks
    # ------------------------------------------------------------------

    def _pruner(self, visibility: VisibilityMap) -> Callable[[str], bool]:
        def prune(data_path: str) -> bool:
            return self.helpers.matches_path(data_path) or visibility.is_hidden(data_path)

        return prune

    def _check_field(
        self,
        data: Any,
        data_path: str,
        node: SchemaNode,
        visibility: VisibilityMap,
        prune: Callable[[str], bool],
        recursive: bool,
    ) -> list[ValidationIssue]:
        value = resolve_value(data, data_path)
        if value is not MISSING:
            return self.engine.compile(node).run(value, data_path, recursive=recursive, prune=prune)

        parts = parse_path(data_path)
        if not parts or isinstance(parts[-1], int):
            return []
        if not isinstance(resolve_value(data, parts[:-1]), dict):
            return []
        static_required = self.repository.is_required(node.path)
        if visibility.visibility(data_path, static_required) != Visibility.VISIBLE_REQUIRED:
            return []
        return [self._required_issue(data_path, node.path, str(parts[-1]))]

    @staticmethod
    def _required_issue(data_path: str, schema_path: str, name: str) -> ValidationIssue:
        return ValidationIssue(
            schema_path=schema_path,
            data_path=data_path,
            message=f"Required field '{name}' is missing",
            rule="required",
            suggested_fix=f"The field '{name}' is required",
        )

    # ------------------------------------------------------------------
    # Rule-driven and cross-field checks
    # ------------------------------------------------------------------

    def _rule_issues(
        self,
        data: Any,
        visibility: VisibilityMap,
        prune: Callable[[str], bool],
        include: IssueFilter,
    ) -> list[ValidationIssue]:
        issues = [
            *self._conditional_required(data, visibility),
            *self._conflicts(data, visibility),
            *self._recommendations(data, visibility, prune),
            *self._date_order(data, prune),
        ]
        return [issue for issue in issues if include(issue)]

    def _conditional_required(self, data: Any, visibility: VisibilityMap) -> list[ValidationIssue]:
        issues = []
        for data_path, schema_path in visibility.required_paths():
            if resolve_value(data, data_path) is not MISSING:
                continue
            parts = parse_path(data_path)
            if not isinstance(resolve_value(data, parts[:-1]), dict):
                continue
            issues.append(self._required_issue(data_path, schema_path, str(parts[-1])))
        return issues

    def _conflicts(self, data: Any, visibility: VisibilityMap) -> list[ValidationIssue]:
        """A populated group that the discriminator hides is reported on the discriminator."""
        issues = []
        for hit in visibility.forbidden:
            if not hit.rule.message or hit.trigger_data_path is None:
                continue
            if not _populated(resolve_value(data, hit.target_path)):
                continue
            issues.append(
                ValidationIssue(
                    schema_path=hit.rule.trigger_path or "",
                    data_path=hit.trigger_data_path,
                    message=hit.rule.message.format(value=hit.trigger_value),
                    rule="conditional",
                    suggested_fix=hit.rule.suggested_fix,
                )
            )
        return issues

    def _recommendations(
        self, data: Any, visibility: VisibilityMap, prune: Callable[[str], bool]
    ) -> list[ValidationIssue]:
        issues = []
        for hit in visibility.recommended:
            if prune(hit.target_path) or not _blank(resolve_value(data, hit.target_path)):
                continue
            issues.append(
                ValidationIssue(
                    schema_path=hit.target_schema_path,
                    data_path=hit.target_path,
                    message=hit.rule.message,
                    rule="recommended",
                    severity=Severity.WARNING,
                    suggested_fix=hit.rule.suggested_fix,
                )
            )
        return issues

    def _date_order(self, data: Any, prune: Callable[[str], bool]) -> list[ValidationIssue]:
        issues = []
        for owner, definition in self._date_ranges:
            for owner_path in self.resolver.expand(data, owner):
                value = resolve_value(data, owner_path)
                if not isinstance(value, dict) or prune(owner_path):
                    continue
                start = parse_datetime(value.get(definition.start))
                end = parse_datetime(value.get(definition.end))
                if start is None or end is None:
                    continue
                if (start.tzinfo is None) != (end.tzinfo is None):
                    start, end = start.replace(tzinfo=None), end.replace(tzinfo=None)
                if end > start:
                    continue
                end_parts = [*parse_path(owner_path), definition.end]
                issues.append(
                    ValidationIssue(
                        schema_path=child_schema_path(owner, definition.end),
                        data_path=format_path(end_parts),
                        message=definition.message,
                        rule="date_order",
                        suggested_fix=f"Set {definition.end} to a date after {definition.start}",
                    )
                )
        return issues

    def _date_range_owners(self) -> list[tuple[str, DateRangeDefinition]]:
        owners = []
        for path, node in self.repository.nodes():
            if not isinstance(node, ObjectNode) or path.startswith("definitions."):
                continue
            for definition in self.standard.date_ranges:
                if definition.start in node.properties and definition.end in node.properties:
                    owners.append((path, definition))
        return owners

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def _ordered(self, issues: list[ValidationIssue]) -> list[ValidationIssue]:
        """Drop duplicates and sort by document position."""
        unique: dict[tuple[str, str, str, str], ValidationIssue] = {}
        for issue in issues:
            key = (issue.data_path, issue.rule, issue.schema_path, issue.message)
            unique.setdefault(key, issue)
        return sorted(unique.values(), key=lambda issue: self._position(issue.data_path))

    def _position(self, data_path: str) -> tuple[int, ...]:
        position = []
        schema_path = ""
        for part in parse_path(data_path):
            if isinstance(part, int):
                schema_path = items_schema_path(schema_path)
                position.append(part)
            else:
                schema_path = child_schema_path(schema_path, part)
                position.append(self.repository.position(schema_path))
        return tuple(position)
