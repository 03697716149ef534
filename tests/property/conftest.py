"""Configuration for property-based tests.

Every example builds a whole campaign document and runs it through the
engine, so profiles trade example count for wall time. Pick a profile
with the ``HYPOTHESIS_PROFILE`` environment variable:

    HYPOTHESIS_PROFILE=thorough pytest -m property
"""

import os

import pytest
from hypothesis import HealthCheck, Verbosity, settings

# Generated documents are large and validation walks all of them.
# empty_form_cache runs once per test, not once per example.
DOCUMENT_HEALTH_CHECKS = [
    HealthCheck.too_slow,
    HealthCheck.data_too_large,
    HealthCheck.function_scoped_fixture,
]

settings.register_profile(
    "default",
    max_examples=40,
    deadline=None,
    suppress_health_check=DOCUMENT_HEALTH_CHECKS,
)

# Smoke run for CI
settings.register_profile(
    "fast",
    max_examples=10,
    deadline=None,
    suppress_health_check=[*DOCUMENT_HEALTH_CHECKS, HealthCheck.filter_too_much],
)

settings.register_profile(
    "thorough",
    max_examples=300,
    deadline=None,
    suppress_health_check=DOCUMENT_HEALTH_CHECKS,
)

settings.register_profile(
    "debug",
    max_examples=5,
    deadline=None,
    verbosity=Verbosity.verbose,
    suppress_health_check=[*DOCUMENT_HEALTH_CHECKS, HealthCheck.filter_too_much],
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


@pytest.fixture(autouse=True)
def empty_form_cache(engine):
    """Start every property test with an empty form model cache.

    The engine is shared by the whole session; models cached by one test
    would otherwise answer ``build_form_model`` calls of the next.
    """
    if engine.form_cache is not None:
        engine.form_cache.clear()
    yield engine
