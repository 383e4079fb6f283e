"""
coevolution.core - Foundation Layer
=====================================

The building blocks every other module depends on:

    - config:      Configuration management (CoEvolutionConfig, load_config)
    - enums:       Type-safe enumerations (ArtifactKind, ArtifactRole, TraceTag)
    - models:      Immutable data models (ArtifactVersion, Artifact, CommitRecord)
    - builder:     Copy/modify factory for artifacts (ArtifactBuilder)
    - exceptions:  Custom exception hierarchy for structured error handling

Dependency Rule:
    core/ depends on NOTHING else in the coevolution package (the repository
    type appears only in type-checking imports). Every other package
    (infrastructure/, orchestration/) depends on core/.
"""

# =============================================================================
# Re-exports for convenient importing
# =============================================================================
# Instead of:  from coevolution.core.models import ArtifactVersion
# Users can:   from coevolution.core import ArtifactVersion
# =============================================================================
from coevolution.core.builder import (
    ArtifactBuilder,
    builder_for,
    clone_with,
    new_artifact,
    new_coevolution_model,
    new_consumer,
    new_transformation,
)
from coevolution.core.config import CoEvolutionConfig, get_default_config, load_config
from coevolution.core.enums import ArtifactKind, ArtifactRole, TraceTag
from coevolution.core.exceptions import (
    ArtifactError,
    CoEvolutionError,
    ConfigurationError,
    InvalidVersionOperation,
    PropagationLimitError,
)
from coevolution.core.models import (
    Artifact,
    ArtifactVersion,
    CoEvolutionPayload,
    CommitRecord,
    ConsumerPayload,
    PlainPayload,
    TransformationPayload,
)

__all__ = [
    # Config
    "CoEvolutionConfig",
    "load_config",
    "get_default_config",
    # Enums
    "ArtifactKind",
    "ArtifactRole",
    "TraceTag",
    # Models
    "ArtifactVersion",
    "Artifact",
    "PlainPayload",
    "TransformationPayload",
    "ConsumerPayload",
    "CoEvolutionPayload",
    "CommitRecord",
    # Builder
    "ArtifactBuilder",
    "new_artifact",
    "new_transformation",
    "new_consumer",
    "new_coevolution_model",
    "builder_for",
    "clone_with",
    # Exceptions
    "CoEvolutionError",
    "ConfigurationError",
    "InvalidVersionOperation",
    "ArtifactError",
    "PropagationLimitError",
]
