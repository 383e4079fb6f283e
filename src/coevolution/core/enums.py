"""
coevolution.core.enums - Type-Safe Enumerations
=================================================

This module defines the enumeration types used throughout the simulator.

All enums inherit from both `str` and `Enum`, which means:
    - They serialize to strings in JSON/YAML (Pydantic-friendly)
    - They can be compared with plain strings: ArtifactKind.CONSUMER == "consumer"
    - They double as the discriminator values of the artifact payload union

Two Different Questions:
    ArtifactKind answers "what executable payload does this artifact carry?"
    ArtifactRole answers "what shape does this artifact have in the graph?"

    The two usually agree, but not always: a plain artifact copied from a
    transformation's relationship sets has the TRANSFORMATION role and the
    ARTIFACT kind. The repository's relationship queries look at the role,
    the propagation engine looks at the kind before firing anything.
"""

from enum import Enum


# =============================================================================
# Artifact Kind Enumeration
# =============================================================================
# The closed set of artifact variants. Each value is the `kind` tag of one
# payload model in coevolution.core.models:
#
#   ARTIFACT          → PlainPayload           (models, meta-models, platforms)
#   TRANSFORMATION    → TransformationPayload  (generators, migrations)
#   CONSUMER          → ConsumerPayload        (validators, pipelines)
#   COEVOLUTION_MODEL → CoEvolutionPayload     (records of a changed artifact)
# =============================================================================
class ArtifactKind(str, Enum):
    """The variant of an artifact, i.e. which payload it carries.

    Usage:
        >>> artifact.kind == ArtifactKind.TRANSFORMATION
        True
    """

    ARTIFACT = "artifact"
    TRANSFORMATION = "transformation"
    CONSUMER = "consumer"
    COEVOLUTION_MODEL = "coevolution_model"


# =============================================================================
# Artifact Role Enumeration
# =============================================================================
# Derived from the inputs/outputs shape of an artifact:
#
#   inputs and outputs  → TRANSFORMATION
#   inputs, no outputs  → CONSUMER
#   no inputs           → DATA
# =============================================================================
class ArtifactRole(str, Enum):
    """The role an artifact plays as an edge in the transformation graph."""

    DATA = "data"
    TRANSFORMATION = "transformation"
    CONSUMER = "consumer"


# =============================================================================
# Trace Tags
# =============================================================================
# Short tags attached to trace log lines so a cascade can be read at a glance.
# The repository and engine emit PUSH/FIRE/CONSUME; generators and scenario
# payloads emit the rest.
# =============================================================================
class TraceTag(str, Enum):
    """Tags for human-readable trace lines."""

    PUSH = "PUSH"           # An artifact was committed
    FIRE = "FIRE"           # A transformation payload ran
    CONSUME = "CONSUME"     # A consumer predicate ran
    COEV = "CoEv"           # A co-evolution model or migration was generated
    M2M = "M2M"             # A model-to-model migration ran
    M2T = "M2T"             # A model-to-text generator ran
    BUILD = "BUILD"         # A build pipeline ran
    DEPLOY = "DEPLOY"       # A deployment pipeline ran
