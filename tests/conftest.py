# tests/conftest.py
"""Shared test fixtures.

Test Registry:
- ``registry_specs`` is tests.fixtures.TEST_REGISTRY.
- ``catalog`` puts it in front of the default fallback providers, the
  same chain NodeTypeCatalog.from_settings() builds.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest
from hypothesis import Phase, Verbosity, settings
from structlog.testing import capture_logs
from structlog.typing import EventDict

from flowwire.contracts import EventCollector
from flowwire.core.catalog import (
    CategoryPolicy,
    NodeTypeCatalog,
    NodeTypeSpec,
    PatternFallbackProvider,
    RegistryProvider,
    UniversalDefaultProvider,
)
from flowwire.core.config import CategoryPolicySettings
from tests.fixtures import TEST_REGISTRY


@pytest.fixture
def registry_specs() -> dict[str, NodeTypeSpec]:
    return dict(TEST_REGISTRY)


@pytest.fixture
def catalog(registry_specs: dict[str, NodeTypeSpec]) -> NodeTypeCatalog:
    """Ready catalog: test registry, then pattern fallback, then universal default."""
    return NodeTypeCatalog(
        [RegistryProvider(registry_specs), PatternFallbackProvider(), UniversalDefaultProvider()],
        policy=CategoryPolicy.from_settings(CategoryPolicySettings()),
    )


@pytest.fixture
def pending_catalog() -> NodeTypeCatalog:
    return NodeTypeCatalog.pending()


@pytest.fixture
def collector() -> EventCollector:
    return EventCollector()


@pytest.fixture
def captured_logs() -> Iterator[list[EventDict]]:
    """Capture structlog events emitted during the test."""
    with capture_logs() as logs:
        yield logs


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
