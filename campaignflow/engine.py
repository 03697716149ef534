"""
CampaignEngine: the public surface of campaignflow.

The engine owns the read-only schema repository and the components built
on it. Every operation is a pure function of its arguments and the
repository; the engine keeps no per-document state.
"""

import logging
from functools import lru_cache
from typing import Any

from .aggregator import ValidationAggregator
from .cache import FormModelCache
from .common.exceptions import ConfigurationError
from .config import EngineConfig
from .export import ExportPipeline, ExportResult, ExportStatistics
from .form import FormModel, FormModelBuilder
from .helpers import HelperFieldMatcher
from .loader import load_schema_document, load_standard
from .models import SchemaNode, StandardDefinition, StepReport, ValidationIssue, ValidationReport
from .paths import PathResolver
from .repository import SchemaRepository
from .rules import ConditionalRule, ConditionalRuleEvaluator, VisibilityMap
from .validation import ValidationEngine

logger = logging.getLogger(__name__)


def load_schema(document: dict[str, Any]) -> SchemaRepository:
    """
    Index a canonical schema document.

    Raises:
        SchemaError: If the document is malformed
    """
    return SchemaRepository.load(document)


class CampaignEngine:
    """
    Schema-driven validation and form model engine.

    Example:
        engine = CampaignEngine(load_schema(document), load_standard())
        report = engine.validate_all(data)
        if not report.valid:
            print(report.get_error_summary())
    """

    def __init__(
        self,
        repository: SchemaRepository,
        standard: StandardDefinition,
        config: EngineConfig | None = None,
    ):
        """
        Wire the engine components.

        Raises:
            ConfigurationError: If a step or rule references a path the
                schema does not declare, or a helper field is owned by the
                schema
        """
        self.repository = repository
        self.standard = standard
        self.config = config or EngineConfig()
        self.resolver = PathResolver(repository)

        self._check_steps()
        helper_names = (
            self.config.helper_fields
            if self.config.helper_fields is not None
            else standard.helper_fields
        )
        self.helpers = HelperFieldMatcher(helper_names)
        self.helpers.check_against(repository.property_names())

        self.evaluator = ConditionalRuleEvaluator(repository, standard)
        self.rules: list[ConditionalRule] = self.evaluator.derive_rules()
        self.validators = ValidationEngine.for_repository(repository)
        self.aggregator = ValidationAggregator(
            repository, self.validators, self.evaluator, self.rules, standard, self.helpers
        )
        self.form_builder = FormModelBuilder(repository, self.evaluator, self.rules, self.helpers)
        self.form_cache = (
            FormModelCache(self.form_builder, self.config.form_cache_size)
            if self.config.form_cache_enabled
            else None
        )
        self.exporter = ExportPipeline(self.aggregator, self.helpers)

        logger.info(
            f"Engine ready for standard '{standard.name}': {len(self.rules)} rules, "
            f"{len(standard.steps)} steps, {len(self.helpers.names)} helper fields"
        )

    @classmethod
    def from_config(cls, config: EngineConfig | None = None) -> "CampaignEngine":
        """Build an engine from configured (or bundled) documents."""
        config = config or EngineConfig.from_env()
        repository = load_schema(load_schema_document(config.schema_path))
        standard = load_standard(config.standard_path)
        return cls(repository, standard, config)

    def _check_steps(self) -> None:
        for step in self.standard.steps:
            for path in step.fields:
                if self.repository.find_node(path) is None:
                    raise ConfigurationError(
                        f"Step '{step.name}' references unknown schema path '{path}'",
                        config_section="steps",
                        config_key=path,
                    )

    # ------------------------------------------------------------------
    # Schema access
    # ------------------------------------------------------------------

    def get_schema_property(self, path: str) -> SchemaNode:
        """
        Get the schema node for a schema, wildcard or data path.

        Raises:
            PathNotFound: If the path does not exist in the schema
        """
        return self.resolver.resolve_schema(path)

    def get_enum_values(self, path: str) -> list[str]:
        """Ordered enum options for a path; empty when the node is not an enum."""
        return self.repository.get_enum_values(self.get_schema_property(path).path)

    # ------------------------------------------------------------------
    # Forms
    # ------------------------------------------------------------------

    def build_form_model(self, step: str, data: Any) -> FormModel:
        """
        Build the form model of a step.

        Raises:
            ConfigurationError: If the step is unknown
        """
        step_definition = self.aggregator.get_step(step)
        if self.form_cache is not None:
            return self.form_cache.build(step_definition, data)
        return self.form_builder.build(step_definition, data)

    def create_default_object(self, path: str, data: Any = None) -> Any:
        """Skeleton for a new object or array element at ``path``."""
        return self.form_builder.create_default_object(path, data)

    def evaluate_visibility(self, data: Any, location_index: int | None = None) -> VisibilityMap:
        return self.evaluator.evaluate(self.rules, data, location_index)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_field(self, data: Any, path: str) -> list[ValidationIssue]:
        return self.aggregator.validate_field(data, path)

    def validate_step(self, data: Any, step: str) -> StepReport:
        return self.aggregator.validate_step(data, step)

    def validate_all(self, data: Any) -> ValidationReport:
        return self.aggregator.validate_all(data)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def prepare_export(self, data: Any) -> ExportResult:
        return self.exporter.prepare_export(data)

    def preview_export(self, data: Any) -> tuple[Any, ValidationReport]:
        return self.exporter.preview(data)

    def export_statistics(self, data: Any) -> ExportStatistics:
        cleaned, _ = self.helpers.strip(data)
        return self.exporter.statistics(cleaned)

    def owns(self, path: str) -> bool:
        """Check whether a path is declared by the schema."""
        return self.resolver.owns(path)


@lru_cache(maxsize=1)
def load_engine() -> CampaignEngine:
    """Process-wide engine built from the environment configuration."""
    return CampaignEngine.from_config()
