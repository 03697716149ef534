"""
campaignflow: schema-driven validation and form models for campaign metadata.

campaignflow turns a canonical JSON Schema (the IEA Task 43 wind resource
assessment data model ships with the package) into the pieces a data entry
application needs: per-step form models that follow the station type,
field, step and document validation with exact data paths, and an export
gate that strips form-only helper fields before the final check.

Core Components:
    - SchemaRepository: Read-only index of the canonical schema
    - CampaignEngine: Form models, validation and export for one schema
    - ValidationReport: Aggregated issues by step and by field
    - ExportResult: Outcome of one export attempt

Example Usage:
    ```python
    from campaignflow import load_engine

    engine = load_engine()

    model = engine.build_form_model("measurement_location", data)
    report = engine.validate_all(data)
    print(report.get_error_summary())

    result = engine.prepare_export(data)
    if result.can_export:
        print(result.to_json())
    ```
"""

__version__ = "0.1.0"

from .common.exceptions import (
    CampaignFlowError,
    ConfigurationError,
    DocumentLoadError,
    ExportBlocked,
    PathNotFound,
    SchemaError,
)
from .config import EngineConfig
from .engine import CampaignEngine, load_engine, load_schema
from .export import ExportResult, ExportStatistics
from .form import FieldDescriptor, FormModel
from .loader import load_standard, read_document
from .models import (
    Severity,
    StepReport,
    StepStatus,
    ValidationIssue,
    ValidationReport,
    Visibility,
)
from .paths import MISSING
from .repository import SchemaRepository

__all__ = [
    # Core functionality
    "CampaignEngine",
    "SchemaRepository",
    "load_engine",
    "load_schema",
    "load_standard",
    "read_document",
    "EngineConfig",
    "MISSING",
    "__version__",
    # Results
    "ExportResult",
    "ExportStatistics",
    "FieldDescriptor",
    "FormModel",
    "Severity",
    "StepReport",
    "StepStatus",
    "ValidationIssue",
    "ValidationReport",
    "Visibility",
    # Errors
    "CampaignFlowError",
    "ConfigurationError",
    "DocumentLoadError",
    "ExportBlocked",
    "PathNotFound",
    "SchemaError",
]
