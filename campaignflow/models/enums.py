"""
Enums used across campaignflow.

Usage:
    from campaignflow.models.enums import Severity, Visibility
"""

from enum import StrEnum

# ============================================================================
# Schema Enums
# ============================================================================


class NodeKind(StrEnum):
    """Kind of a schema node, derived from its declared type or enum."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ENUM = "enum"


# ============================================================================
# Validation Enums
# ============================================================================


class Severity(StrEnum):
    """Severity of a validation issue."""

    ERROR = "error"  # Blocks step completion and export
    WARNING = "warning"  # Advisory only


class StepStatus(StrEnum):
    """Status of a data entry step.

    - INCOMPLETE: required fields are missing
    - BLOCKED: fields are present but violate the schema
    - READY: no blocking issues
    """

    INCOMPLETE = "incomplete"
    BLOCKED = "blocked"
    READY = "ready"


# ============================================================================
# Rule Enums
# ============================================================================


class RuleAction(StrEnum):
    """Effect a conditional rule has on its targets when it fires."""

    SHOW = "show"
    HIDE = "hide"
    REQUIRE = "require"
    DISABLE = "disable"
    RECOMMEND = "recommend"


class RuleSource(StrEnum):
    """Where a conditional rule was derived from."""

    SCHEMA = "schema"
    DISCRIMINATOR = "discriminator"
    STANDARD = "standard"


class Visibility(StrEnum):
    """Resolved visibility of a field for one data snapshot."""

    VISIBLE_REQUIRED = "visible-required"
    VISIBLE_OPTIONAL = "visible-optional"
    HIDDEN = "hidden"


# ============================================================================
# Export Enums
# ============================================================================


class ExportState(StrEnum):
    """States of a single export attempt.

    Idle -> Cleaning -> Validating -> {Blocked | Ready}
    """

    IDLE = "idle"
    CLEANING = "cleaning"
    VALIDATING = "validating"
    BLOCKED = "blocked"
    READY = "ready"
