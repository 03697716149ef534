"""Common utilities and exceptions for campaignflow."""

from .exceptions import (
    CampaignFlowError,
    ConfigurationError,
    DocumentLoadError,
    ExportBlocked,
    PathNotFound,
    SchemaError,
)

__all__ = [
    "CampaignFlowError",
    "ConfigurationError",
    "DocumentLoadError",
    "ExportBlocked",
    "PathNotFound",
    "SchemaError",
]
