"""Common exceptions for campaignflow.

Structural failures (a broken schema, an unknown path, a bad configuration)
are raised. Data-quality problems are never raised: they are returned as
``ValidationIssue`` values so that many of them can be reported at once.
"""

from typing import Any


class CampaignFlowError(Exception):
    """Base exception for all campaignflow errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        """Initialize exception with message and optional context."""
        super().__init__(message)
        self.context = context or {}


class SchemaError(CampaignFlowError):
    """Raised when the canonical schema document is malformed."""

    def __init__(
        self,
        message: str,
        schema_path: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        """Initialize schema error with the offending schema path."""
        super().__init__(message, context)
        self.schema_path = schema_path


class PathNotFound(CampaignFlowError):
    """Raised when a schema or data path does not exist in the schema."""

    def __init__(
        self,
        message: str,
        path: str,
        context: dict[str, Any] | None = None,
    ):
        """Initialize with the path that could not be resolved."""
        super().__init__(message, context)
        self.path = path


class ConfigurationError(CampaignFlowError):
    """Raised when configuration or a standard definition is invalid."""

    def __init__(
        self,
        message: str,
        config_section: str | None = None,
        config_key: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        """Initialize configuration error with details."""
        super().__init__(message, context)
        self.config_section = config_section
        self.config_key = config_key


class DocumentLoadError(CampaignFlowError):
    """Raised when a schema, definition or data document cannot be read."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        """Initialize load error with the source it was read from."""
        super().__init__(message, context)
        self.source = source


class ExportBlocked(CampaignFlowError):
    """Raised when serializing an export that has blocking issues.

    ``prepare_export`` itself never raises this; it returns the blocked
    ``ExportResult``. Only asking a blocked result for its serialized
    document does.
    """

    def __init__(
        self,
        message: str,
        result: Any,
        context: dict[str, Any] | None = None,
    ):
        """Initialize with the blocked export result."""
        super().__init__(message, context)
        self.result = result
