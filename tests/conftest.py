"""
Shared Test Fixtures for the Co-Evolution Simulator
=====================================================

Reusable pytest fixtures, organized by layer:

    1. Configuration fixtures
    2. Infrastructure fixtures (Repository)
    3. Orchestration fixtures (PropagationEngine)
    4. Facade fixtures (Ecosystem, scenario catalog)
    5. Artifact fixtures (a tiny microservice ecosystem)
"""

from __future__ import annotations

import pytest

from coevolution.core.builder import new_artifact, new_consumer, new_transformation
from coevolution.core.config import CoEvolutionConfig
from coevolution.ecosystem import Ecosystem
from coevolution.infrastructure.repository import InMemoryRepository
from coevolution.orchestration.propagation import PropagationEngine
from coevolution.scenarios import build_catalog


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def config():
    """Simulator configuration with defaults."""
    return CoEvolutionConfig()


@pytest.fixture
def small_config():
    """Configuration with tight cascade bounds for loop tests."""
    return CoEvolutionConfig(max_cascade_depth=8, max_cascade_commits=50)


# =============================================================================
# Infrastructure / Orchestration
# =============================================================================

@pytest.fixture
def engine(config):
    """Fresh PropagationEngine."""
    return PropagationEngine(config)


@pytest.fixture
def repository(config, engine):
    """Fresh InMemoryRepository wired to the engine fixture."""
    return InMemoryRepository(config, engine=engine)


# =============================================================================
# Facade
# =============================================================================

@pytest.fixture
def ecosystem(config):
    """Fresh Ecosystem (its own repository and engine)."""
    return Ecosystem(config)


@pytest.fixture
def catalog():
    """The example ecosystem's artifacts."""
    return build_catalog()


# =============================================================================
# Artifacts
# =============================================================================

@pytest.fixture
def metamodel():
    """Plain meta-model ``microservice@0``."""
    return new_artifact("microservice").build()


@pytest.fixture
def instance(metamodel):
    """Instance ``customer@0`` conforming to ``microservice@0``."""
    return new_artifact("customer").with_metamodel(metamodel.version).build()


@pytest.fixture
def firings():
    """List collecting (transformation name, target) pairs from recorders."""
    return []


@pytest.fixture
def recording_transformation(metamodel, firings):
    """Transformation on ``microservice@0`` that records calls and produces nothing."""

    def record(version, repository):
        firings.append(("recorder", version))
        return None

    return (
        new_transformation("recorder")
        .with_input(metamodel.version)
        .with_output(new_artifact("code").build().version)
        .with_transformation(record)
        .build()
    )


@pytest.fixture
def approving_consumer(metamodel):
    """Consumer on ``microservice@0`` that approves everything."""
    return (
        new_consumer("approver")
        .with_input(metamodel.version)
        .with_consumer(lambda version, repository: True)
        .build()
    )


@pytest.fixture
def rejecting_consumer(metamodel):
    """Consumer on ``microservice@0`` that rejects everything."""
    return (
        new_consumer("rejecter")
        .with_input(metamodel.version)
        .with_consumer(lambda version, repository: False)
        .build()
    )
