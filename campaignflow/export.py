"""
Export pipeline for campaignflow.

One export attempt moves through ``idle -> cleaning -> validating`` and
ends ``blocked`` or ``ready``. The caller's document is never modified:
helper fields are stripped from a deep copy, and that copy is what gets
validated and returned.
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from .aggregator import ValidationAggregator
from .common.exceptions import ExportBlocked
from .helpers import HelperFieldMatcher
from .models import ExportState, ValidationIssue, ValidationReport, errors_of, warnings_of

logger = logging.getLogger(__name__)

LOCATIONS = "measurement_location"
MEASUREMENT_POINTS = "measurement_point"
STATION_TYPE = "measurement_station_type_id"
COMPLETENESS_FIELDS = ("author", "organisation", LOCATIONS)


@dataclass(frozen=True)
class ExportStatistics:
    """Summary figures of a campaign document."""

    total_locations: int = 0
    total_measurement_points: int = 0
    station_types: dict[str, int] = field(default_factory=dict)
    data_completeness: float = 0.0
    required_fields_complete: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_locations": self.total_locations,
            "total_measurement_points": self.total_measurement_points,
            "station_types": dict(self.station_types),
            "data_completeness": self.data_completeness,
            "required_fields_complete": self.required_fields_complete,
        }


@dataclass(frozen=True)
class ExportResult:
    """
    Outcome of one export attempt.

    ``can_export`` holds exactly when there are no blocking issues;
    ``cleaned`` is only set when the export can go ahead.
    """

    can_export: bool
    blocking_issues: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    cleaned: Any = None
    removed_fields: tuple[str, ...] = ()
    state: ExportState = ExportState.IDLE
    statistics: ExportStatistics | None = None

    def __post_init__(self):
        """Validate result consistency."""
        if self.can_export == bool(self.blocking_issues):
            raise ValueError("can_export must be True exactly when there are no blocking issues")

    def to_json(self, indent: int = 2) -> str:
        """
        Serialize the cleaned document.

        Raises:
            ExportBlocked: If the export has blocking issues or holds values JSON cannot represent
        """
        if not self.can_export:
            raise ExportBlocked(
                f"Export blocked by {len(self.blocking_issues)} issue(s)",
                self,
                context={"blocking_paths": [issue.data_path for issue in self.blocking_issues]},
            )
        try:
            return json.dumps(self.cleaned, indent=indent, ensure_ascii=False, allow_nan=False)
        except ValueError as e:
            logger.error(f"Cleaned document is not valid JSON: {e}")
            raise ExportBlocked(f"Cleaned document is not valid JSON: {e}", self) from e

    def get_error_summary(self) -> str:
        """Itemized list of blocking issues with the data path of each."""
        if self.can_export:
            return "Ready for export"
        lines = [f"Export blocked by {len(self.blocking_issues)} issue(s):"]
        for issue in self.blocking_issues:
            lines.append(f"  • {issue.data_path or '<root>'}: {issue.message}")
            if issue.suggested_fix:
                lines.append(f"    → {issue.suggested_fix}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for serialization."""
        return {
            "can_export": self.can_export,
            "state": self.state.value,
            "blocking_issues": [issue.to_dict() for issue in self.blocking_issues],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "removed_fields": list(self.removed_fields),
            "statistics": self.statistics.to_dict() if self.statistics else None,
        }


class ExportPipeline:
    """Cleans and validates documents for export."""

    def __init__(self, aggregator: ValidationAggregator, helpers: HelperFieldMatcher):
        self.aggregator = aggregator
        self.helpers = helpers

    def prepare_export(self, data: Any) -> ExportResult:
        """
        Run one export attempt.

        Never raises for invalid data; a blocked export is returned as an
        ``ExportResult`` with ``can_export=False``.
        """
        state = ExportState.IDLE
        state = self._transition(state, ExportState.CLEANING)
        cleaned, removed = self.helpers.strip(data)

        state = self._transition(state, ExportState.VALIDATING)
        report = self.aggregator.validate_all(cleaned)
        blocking = errors_of(report.issues)
        warnings = warnings_of(report.issues)
        statistics = self.statistics(cleaned)

        if blocking:
            state = self._transition(state, ExportState.BLOCKED)
            logger.info(f"Export blocked by {len(blocking)} issue(s)")
            return ExportResult(
                can_export=False,
                blocking_issues=blocking,
                warnings=warnings,
                cleaned=None,
                removed_fields=tuple(removed),
                state=state,
                statistics=statistics,
            )

        state = self._transition(state, ExportState.READY)
        logger.info(
            f"Export ready: {len(removed)} helper field(s) removed, {len(warnings)} warning(s)"
        )
        return ExportResult(
            can_export=True,
            warnings=warnings,
            cleaned=cleaned,
            removed_fields=tuple(removed),
            state=state,
            statistics=statistics,
        )

    def preview(self, data: Any) -> tuple[Any, ValidationReport]:
        """Cleaned copy and its validation report, whether blocked or not."""
        cleaned, _ = self.helpers.strip(data)
        return cleaned, self.aggregator.validate_all(cleaned)

    def statistics(self, data: Any) -> ExportStatistics:
        """Count locations, measurement points and station types."""
        if not isinstance(data, dict):
            return ExportStatistics()

        locations = [
            location for location in data.get(LOCATIONS) or [] if isinstance(location, dict)
        ]
        points = sum(
            len(location.get(MEASUREMENT_POINTS))
            for location in locations
            if isinstance(location.get(MEASUREMENT_POINTS), list)
        )
        station_types = Counter(
            str(location[STATION_TYPE]) for location in locations if location.get(STATION_TYPE)
        )
        filled = sum(1 for name in COMPLETENESS_FIELDS if _is_set(data.get(name)))
        required = self.aggregator.repository.root.required

        return ExportStatistics(
            total_locations=len(locations),
            total_measurement_points=points,
            station_types=dict(sorted(station_types.items())),
            data_completeness=round(filled / len(COMPLETENESS_FIELDS) * 100, 1),
            required_fields_complete=all(_is_set(data.get(name)) for name in required),
        )

    @staticmethod
    def _transition(current: ExportState, target: ExportState) -> ExportState:
        logger.debug(f"Export state: {current.value} -> {target.value}")
        return target


def _is_set(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, list | dict):
        return bool(value)
    return True
