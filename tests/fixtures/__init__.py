"""Shared test data for campaignflow tests."""

from tests.fixtures.documents import (
    LIDAR_LOCATION,
    MAST_LOCATION,
    REANALYSIS_LOCATION,
    make_document,
)

__all__ = ["LIDAR_LOCATION", "MAST_LOCATION", "REANALYSIS_LOCATION", "make_document"]
