"""
Validation issue and report structures.

Note: This module must NOT import from any campaignflow modules except
.enums to avoid circular imports.
"""

from dataclasses import dataclass, field
from typing import Any, TypedDict

from .enums import Severity, StepStatus


class ValidationIssueDict(TypedDict, total=False):
    """JSON-serializable dictionary format for ValidationIssue."""

    schema_path: str
    data_path: str
    message: str
    rule: str
    severity: str
    suggested_fix: str
    allowed_values: list[Any]


@dataclass(frozen=True)
class ValidationIssue:
    """One rule violation or advisory.

    Attributes:
        schema_path: Canonical schema path of the violated node
        data_path: Concrete data path (with indices) the issue refers to
        message: Human-readable description
        rule: Violated keyword or rule identifier (``required``, ``enum``, ...)
        severity: ``error`` blocks progress and export, ``warning`` does not
        suggested_fix: Optional hint on how to resolve the issue
        allowed_values: Permitted values for enum violations
    """

    schema_path: str
    data_path: str
    message: str
    rule: str
    severity: Severity = Severity.ERROR
    suggested_fix: str | None = None
    allowed_values: tuple[Any, ...] = ()

    @property
    def is_blocking(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> ValidationIssueDict:
        """Convert issue to dictionary for JSON serialization."""
        result: ValidationIssueDict = {
            "schema_path": self.schema_path,
            "data_path": self.data_path,
            "message": self.message,
            "rule": self.rule,
            "severity": self.severity.value,
        }
        if self.suggested_fix:
            result["suggested_fix"] = self.suggested_fix
        if self.allowed_values:
            result["allowed_values"] = list(self.allowed_values)
        return result


def errors_of(issues: tuple[ValidationIssue, ...] | list[ValidationIssue]) -> tuple[ValidationIssue, ...]:
    """Blocking issues only."""
    return tuple(issue for issue in issues if issue.severity == Severity.ERROR)


def warnings_of(issues: tuple[ValidationIssue, ...] | list[ValidationIssue]) -> tuple[ValidationIssue, ...]:
    """Advisory issues only."""
    return tuple(issue for issue in issues if issue.severity == Severity.WARNING)


@dataclass(frozen=True)
class FieldReport:
    """Issues attached to one concrete data path."""

    path: str
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def valid(self) -> bool:
        return not errors_of(self.issues)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "valid": self.valid,
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass(frozen=True)
class StepReport:
    """Validation outcome for one data entry step.

    The status follows the issues: any missing required field makes the
    step ``incomplete``, any other error makes it ``blocked``, otherwise it
    is ``ready``. Warnings never change the status.
    """

    step: str
    issues: tuple[ValidationIssue, ...] = ()

    @property
    def errors(self) -> tuple[ValidationIssue, ...]:
        return errors_of(self.issues)

    @property
    def warnings(self) -> tuple[ValidationIssue, ...]:
        return warnings_of(self.issues)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def status(self) -> StepStatus:
        errors = self.errors
        if any(issue.rule == "required" for issue in errors):
            return StepStatus.INCOMPLETE
        if errors:
            return StepStatus.BLOCKED
        return StepStatus.READY

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "status": self.status.value,
            "valid": self.valid,
            "issues": [issue.to_dict() for issue in self.issues],
        }


@dataclass(frozen=True)
class ValidationReport:
    """Aggregated validation state for one data snapshot.

    Attributes:
        issues: All issues in document order
        steps: Step name -> StepReport
        fields: Data path -> FieldReport, only for paths that carry issues
    """

    issues: tuple[ValidationIssue, ...] = ()
    steps: dict[str, StepReport] = field(default_factory=dict)
    fields: dict[str, FieldReport] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        """True when no issue has severity ``error``."""
        return not self.errors

    @property
    def errors(self) -> tuple[ValidationIssue, ...]:
        return errors_of(self.issues)

    @property
    def warnings(self) -> tuple[ValidationIssue, ...]:
        return warnings_of(self.issues)

    def group_by_field(self) -> dict[str, list[ValidationIssue]]:
        """Group issues by data path, keeping document order."""
        grouped: dict[str, list[ValidationIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.data_path, []).append(issue)
        return grouped

    def filter_by_severity(self, severity: Severity) -> tuple[ValidationIssue, ...]:
        return tuple(issue for issue in self.issues if issue.severity == severity)

    def most_severe(self) -> ValidationIssue | None:
        """First error, else first warning, else None."""
        errors = self.errors
        if errors:
            return errors[0]
        warnings = self.warnings
        return warnings[0] if warnings else None

    def get_error_summary(self) -> str:
        """Get a human-readable summary of all errors and warnings."""
        if not self.issues:
            return "Document is valid"

        lines = []
        errors = self.errors
        warnings = self.warnings
        if errors:
            lines.append(f"Errors ({len(errors)}):")
            for issue in errors:
                lines.append(f"  • {issue.data_path or '<root>'}: {issue.message}")
        if warnings:
            lines.append(f"Warnings ({len(warnings)}):")
            for issue in warnings:
                lines.append(f"  • {issue.data_path or '<root>'}: {issue.message}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary for JSON serialization."""
        return {
            "valid": self.valid,
            "issues": [issue.to_dict() for issue in self.issues],
            "steps": {name: report.to_dict() for name, report in self.steps.items()},
            "fields": {path: report.to_dict() for path, report in self.fields.items()},
        }
