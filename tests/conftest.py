"""Pytest configuration and fixtures for campaignflow tests.

This module provides the shared fixtures of the campaignflow test suite:
the bundled schema and standard definition, an engine built on them, and
campaign documents that are valid against the bundled schema.
"""

import json
from typing import Any

import pytest

from campaignflow import CampaignEngine, load_schema, load_standard
from campaignflow.loader import load_schema_document
from campaignflow.models import StandardDefinition
from campaignflow.repository import SchemaRepository
from tests.fixtures import (
    LIDAR_LOCATION,
    MAST_LOCATION,
    REANALYSIS_LOCATION,
    make_document,
)


@pytest.fixture(scope="session")
def schema_document() -> dict[str, Any]:
    """The bundled IEA Task 43 schema document."""
    return load_schema_document()


@pytest.fixture(scope="session")
def repository(schema_document) -> SchemaRepository:
    """Repository indexed from the bundled schema."""
    return load_schema(schema_document)


@pytest.fixture(scope="session")
def standard() -> StandardDefinition:
    """The bundled standard definition."""
    return load_standard()


@pytest.fixture(scope="session")
def engine(repository, standard) -> CampaignEngine:
    """Engine over the bundled schema; engines keep no per-document state."""
    return CampaignEngine(repository, standard)


@pytest.fixture
def valid_document() -> dict[str, Any]:
    """Valid document with one mast and one reanalysis location."""
    return make_document(MAST_LOCATION, REANALYSIS_LOCATION)


@pytest.fixture
def mast_document() -> dict[str, Any]:
    """Valid document with a single mast location."""
    return make_document(MAST_LOCATION)


@pytest.fixture
def reanalysis_document() -> dict[str, Any]:
    """Valid document with a single reanalysis location."""
    return make_document(REANALYSIS_LOCATION)


@pytest.fixture
def document_file(tmp_path, valid_document):
    """Write a document to a temporary JSON file; defaults to the valid document."""

    def write(data: Any = None, name: str = "campaign.json"):
        path = tmp_path / name
        path.write_text(json.dumps(valid_document if data is None else data, indent=2))
        return path

    return write


@pytest.fixture
def lidar_document() -> dict[str, Any]:
    """Valid document with a single lidar location."""
    return make_document(LIDAR_LOCATION)
