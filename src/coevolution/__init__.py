"""
coevolution - Model-Driven Engineering Co-Evolution Simulator
===============================================================

A versioned store of artifacts (models, meta-models, transformations,
consumers) in which committing a change triggers every dependent
transformation and consumer, cascading through the dependency graph:

    commit(microservice@1)
        → co-evolution model → model migration → migrated instances
                             → transformation migration → migrated generators
                                                        → regenerated code

Architecture Layers (top to bottom):
    1. Facade          - Ecosystem (one simulation run), scenarios, CLI
    2. Orchestration   - PropagationEngine, ConsumerGate, generators
    3. Infrastructure  - Repository, InMemoryRepository
    4. Core            - models, builder, config, exceptions, enums

Quick Start:
    >>> from coevolution import Ecosystem
    >>> from coevolution.scenarios import run_scenario
    >>> run_scenario(2, Ecosystem())
"""

# =============================================================================
# Package Version
# =============================================================================
__version__ = "0.1.0"

# =============================================================================
# Package-Level Exports
# =============================================================================
# For specific components, import from submodules directly:
#   from coevolution.core.builder import new_artifact
#   from coevolution.core.models import ArtifactVersion
# =============================================================================
from coevolution.ecosystem import Ecosystem

__all__ = ["Ecosystem", "__version__"]
