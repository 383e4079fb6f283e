"""
coevolution.core.models - Core Data Models
============================================

This module defines the Pydantic data models every layer of the simulator
speaks in terms of.

Model Hierarchy:
    ArtifactVersion → Which artifact, which revision? (identity)
    Artifact        → What does it conform to, consume, produce? (record)
    *Payload        → What can it execute? (closed variant)
    CommitRecord    → What happened when it was committed? (history entry)

The Closed Variant:
    Every Artifact carries exactly one payload, discriminated by its ``kind``
    tag. Callers never inspect classes to find out what an artifact can do;
    they match on the payload:

        match artifact.payload:
            case TransformationPayload(function=fn):
                produced = fn(version, repository)
            case ConsumerPayload(predicate=accepts):
                approved = accepts(version, repository)
            case CoEvolutionPayload(changed_artifact=changed):
                ...
            case PlainPayload():
                ...

Identity vs. Content:
    Two Artifact values are equal when their versions are equal, whatever
    their relationship sets or payloads. A migrated copy of an artifact
    differs in content but belongs to the same lineage, and the repository
    keys its map by version.

Design Principles:
    1. Frozen: models are immutable; "updates" are new values (see builder.py)
    2. Self-validating: revisions are non-negative, names non-empty
    3. No ordering: versions are compared by identity only
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Annotated, Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

from coevolution.core.enums import ArtifactKind, ArtifactRole
from coevolution.core.exceptions import InvalidVersionOperation

if TYPE_CHECKING:
    from coevolution.infrastructure.repository import Repository


def _now() -> datetime:
    """Get the current UTC timestamp."""
    return datetime.now(timezone.utc)


# =============================================================================
# Artifact Version
# =============================================================================
# (name, revision) is the identity of a committed artifact and the key of the
# repository map. Successive commits of the same logical artifact share the
# name and differ by revision.
# =============================================================================
class ArtifactVersion(BaseModel):
    """Immutable version identity of an artifact.

    Attributes:
        name: Logical name of the artifact ("microservice", "java", ...).
        revision: Non-negative revision counter; 0 is the initial version.

    Example:
        >>> v = ArtifactVersion(name="microservice", revision=1)
        >>> str(v.predecessor())
        'microservice@0'
        >>> v.predecessor().is_initial()
        True
    """

    name: str = Field(
        min_length=1,
        description="Logical artifact name",
    )
    revision: int = Field(
        default=0,
        ge=0,
        description="Revision counter (0 = initial version)",
    )

    model_config = {"frozen": True}

    @classmethod
    def initial(cls, name: str) -> ArtifactVersion:
        """Return the initial version (revision 0) for ``name``."""
        return cls(name=name, revision=0)

    def successor(self) -> ArtifactVersion:
        """Return the next revision of the same name."""
        return ArtifactVersion(name=self.name, revision=self.revision + 1)

    def predecessor(self) -> ArtifactVersion:
        """Return the previous revision of the same name.

        Raises:
            InvalidVersionOperation: If this is the initial version.
        """
        if self.is_initial():
            raise InvalidVersionOperation(
                message=f"Can't create previous version for initial version {self}",
                version=str(self),
            )
        return ArtifactVersion(name=self.name, revision=self.revision - 1)

    def is_initial(self) -> bool:
        """True if this is revision 0."""
        return self.revision == 0

    def __str__(self) -> str:
        return f"{self.name}@{self.revision}"


def version_sort_key(version: ArtifactVersion) -> tuple[str, int]:
    """Key for rendering versions in a stable order (logs, CLI output)."""
    return (version.name, version.revision)


def sorted_versions(versions: Iterable[ArtifactVersion]) -> list[ArtifactVersion]:
    """Return ``versions`` sorted by name, then revision."""
    return sorted(versions, key=version_sort_key)


# =============================================================================
# Payload Variants
# =============================================================================
# Payload callables receive the triggering version AND the repository, so a
# payload can read the store without reaching for a global:
#
#   TransformationFunction: (version, repository) -> Artifact | None
#       Returns the artifact it produced; the engine commits it.
#   ConsumerPredicate:      (version, repository) -> bool
#       Approves (True) or rejects (False) the version.
#
# The aliases below document the signatures. The model fields themselves are
# typed loosely because Pydantic only needs to check "is it callable".
# =============================================================================
TransformationFunction = Callable[[ArtifactVersion, "Repository"], Optional["Artifact"]]
ConsumerPredicate = Callable[[ArtifactVersion, "Repository"], bool]


class PlainPayload(BaseModel):
    """Payload of a plain data artifact: carries nothing executable."""

    kind: Literal[ArtifactKind.ARTIFACT] = ArtifactKind.ARTIFACT

    model_config = {"frozen": True}


class TransformationPayload(BaseModel):
    """Payload of a transformation: a function producing an optional artifact."""

    kind: Literal[ArtifactKind.TRANSFORMATION] = ArtifactKind.TRANSFORMATION
    function: Callable[..., Any] = Field(
        description="(version, repository) -> Artifact | None",
    )

    model_config = {"frozen": True}


class ConsumerPayload(BaseModel):
    """Payload of a consumer: a predicate approving or rejecting a version."""

    kind: Literal[ArtifactKind.CONSUMER] = ArtifactKind.CONSUMER
    predicate: Callable[..., Any] = Field(
        description="(version, repository) -> bool",
    )

    model_config = {"frozen": True}


class CoEvolutionPayload(BaseModel):
    """Payload of a co-evolution model: the version whose change it documents."""

    kind: Literal[ArtifactKind.COEVOLUTION_MODEL] = ArtifactKind.COEVOLUTION_MODEL
    changed_artifact: ArtifactVersion = Field(
        description="The artifact version whose change triggered co-evolution",
    )

    model_config = {"frozen": True}


ArtifactPayload = Annotated[
    Union[PlainPayload, TransformationPayload, ConsumerPayload, CoEvolutionPayload],
    Field(discriminator="kind"),
]


# =============================================================================
# Artifact
# =============================================================================
# A versioned unit of the ecosystem: a model, a meta-model, a transformation,
# a consumer or a co-evolution record.
#
#   metamodels  instance-of edges   (empty for top-level meta-models)
#   inputs      meta-models this artifact accepts instances of
#   outputs     meta-models this artifact produces instances of
# =============================================================================
class Artifact(BaseModel):
    """An immutable, versioned artifact.

    Construct artifacts with the builder (coevolution.core.builder) rather
    than directly; the builder keeps kind and payload consistent.

    Attributes:
        version: Identity of this artifact.
        metamodels: Versions this artifact claims conformance to.
        inputs: Meta-model versions whose instances this artifact accepts.
        outputs: Meta-model versions whose instances this artifact produces.
        payload: The executable (or referential) variant payload.
    """

    version: ArtifactVersion = Field(
        description="Identity of this artifact",
    )
    metamodels: frozenset[ArtifactVersion] = Field(
        default_factory=frozenset,
        description="Versions this artifact conforms to (instance-of)",
    )
    inputs: frozenset[ArtifactVersion] = Field(
        default_factory=frozenset,
        description="Meta-model versions accepted as input",
    )
    outputs: frozenset[ArtifactVersion] = Field(
        default_factory=frozenset,
        description="Meta-model versions produced as output",
    )
    payload: ArtifactPayload = Field(
        default_factory=PlainPayload,
        description="Variant payload, discriminated by its kind tag",
    )

    model_config = {"frozen": True}

    @property
    def kind(self) -> ArtifactKind:
        """The variant this artifact belongs to."""
        return self.payload.kind

    @property
    def role(self) -> ArtifactRole:
        """The graph role derived from the inputs/outputs shape."""
        if self.inputs and self.outputs:
            return ArtifactRole.TRANSFORMATION
        if self.inputs:
            return ArtifactRole.CONSUMER
        return ArtifactRole.DATA

    def describe(self) -> str:
        """Render the version together with all relationship sets."""
        text = (
            f"{self.version}; "
            f"metamodels={_render(self.metamodels)}; "
            f"inputs={_render(self.inputs)}; "
            f"outputs={_render(self.outputs)}"
        )
        if isinstance(self.payload, CoEvolutionPayload):
            text += f"; changedArtifact={self.payload.changed_artifact}"
        return text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Artifact):
            return NotImplemented
        return self.version == other.version

    def __hash__(self) -> int:
        return hash(self.version)

    def __str__(self) -> str:
        return str(self.version)


def _render(versions: Iterable[ArtifactVersion]) -> str:
    return "[" + ", ".join(str(v) for v in sorted_versions(versions)) + "]"


# =============================================================================
# Commit Record
# =============================================================================
# One entry per commit, appended to the repository history. The history is
# how callers (and tests) see what a cascade did without parsing logs.
# =============================================================================
class CommitRecord(BaseModel):
    """History entry describing one commit.

    Attributes:
        version: Version the artifact was stored under.
        requested_version: Version the caller passed in (before collision
            resolution).
        kind: Variant of the committed artifact.
        depth: Nesting level of the commit; 0 for an outer commit.
        produced_by: Transformation whose output this artifact is, if any.
        committed_at: When the commit happened (UTC).
    """

    version: ArtifactVersion
    requested_version: ArtifactVersion
    kind: ArtifactKind
    depth: int = Field(default=0, ge=0)
    produced_by: Optional[ArtifactVersion] = None
    committed_at: datetime = Field(default_factory=_now)

    model_config = {"frozen": True}
