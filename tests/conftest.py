"""Common test fixtures for observability tests."""

import pytest

from ai_observability_core.storage import MemoryScoresStore, ObservabilityInMemory


@pytest.fixture
def scores() -> MemoryScoresStore:
    return MemoryScoresStore()


@pytest.fixture
def storage(scores: MemoryScoresStore) -> ObservabilityInMemory:
    """Fresh in-memory engine with an explicitly owned, empty collection."""
    return ObservabilityInMemory(collection={}, scores=scores)
