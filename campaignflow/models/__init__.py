"""Models package for campaignflow.

Exports the schema node tree, validation issue/report structures, standard
definition models and enums.
"""

from .definitions import (
    DateRangeDefinition,
    DiscriminatorDefinition,
    DiscriminatorGroup,
    RecommendationDefinition,
    StandardDefinition,
    StepDefinition,
)
from .enums import (
    ExportState,
    NodeKind,
    RuleAction,
    RuleSource,
    Severity,
    StepStatus,
    Visibility,
)
from .issues import (
    FieldReport,
    StepReport,
    ValidationIssue,
    ValidationIssueDict,
    ValidationReport,
    errors_of,
    warnings_of,
)
from .nodes import (
    JSON_TYPES,
    AnyNode,
    ArrayNode,
    BooleanNode,
    ConditionalClause,
    EnumNode,
    NumberNode,
    ObjectNode,
    SchemaNode,
    StringNode,
)

__all__ = [
    # Nodes
    "JSON_TYPES",
    "AnyNode",
    "ArrayNode",
    "BooleanNode",
    "ConditionalClause",
    "EnumNode",
    "NumberNode",
    "ObjectNode",
    "SchemaNode",
    "StringNode",
    # Issues and reports
    "FieldReport",
    "StepReport",
    "ValidationIssue",
    "ValidationIssueDict",
    "ValidationReport",
    "errors_of",
    "warnings_of",
    # Definitions
    "DateRangeDefinition",
    "DiscriminatorDefinition",
    "DiscriminatorGroup",
    "RecommendationDefinition",
    "StandardDefinition",
    "StepDefinition",
    # Enums
    "ExportState",
    "NodeKind",
    "RuleAction",
    "RuleSource",
    "Severity",
    "StepStatus",
    "Visibility",
]
