"""
coevolution.orchestration - Propagation Layer
===============================================

Components:
    - PropagationEngine: reacts to every commit, fires dependent
      transformations and consumers
    - ConsumerGate:      unanimous consumer approval in front of propagation
    - generators:        model/transformation migrations and the meta-level
      generators that emit them
"""

from coevolution.orchestration.generators import (
    coevolution_model_generator,
    model_coevolution_generator,
    model_migration,
    transformation_coevolution_generator,
    transformation_migration,
)
from coevolution.orchestration.propagation import (
    ConsumerGate,
    GateResult,
    PropagationEngine,
)

__all__ = [
    "PropagationEngine",
    "ConsumerGate",
    "GateResult",
    "model_migration",
    "transformation_migration",
    "coevolution_model_generator",
    "model_coevolution_generator",
    "transformation_coevolution_generator",
]
