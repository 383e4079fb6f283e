"""
coevolution.core.builder - Artifact Builder
=============================================

Artifacts are frozen, so every "change" to one goes through a builder: start
from a name (``new_*``) or from an existing artifact (``builder_for``),
adjust the version and relationship sets fluently, then ``build()`` a new
immutable value. The source artifact is never touched.

Selective Update Rule:
    ``update_metamodel(new)`` and ``update_dependency(new)`` advance a link
    only when the set currently holds ``new.predecessor()``. Links to older,
    non-adjacent versions stay where they are:

        metamodels = {microservice@0}
        update_metamodel(microservice@1)  → {microservice@1}
        update_metamodel(microservice@2)  → {microservice@1}   (no-op)

    This is what makes co-evolution step-wise: only artifacts conforming to
    the immediately preceding version are migrated.

Usage:
    >>> from coevolution.core.builder import new_artifact, builder_for
    >>> mm = new_artifact("microservice").build()
    >>> customer = new_artifact("customer").with_metamodel(mm.version).build()
    >>> migrated = (
    ...     builder_for(customer)
    ...     .update_metamodel(mm.version.successor())
    ...     .build()
    ... )
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from coevolution.core.enums import ArtifactKind
from coevolution.core.exceptions import ArtifactError
from coevolution.core.models import (
    Artifact,
    ArtifactVersion,
    CoEvolutionPayload,
    ConsumerPayload,
    PlainPayload,
    TransformationPayload,
)


class ArtifactBuilder:
    """Mutable staging area for one immutable Artifact.

    All ``with_*`` and ``update_*`` methods return the builder itself so
    calls can be chained. Relationship sets have set semantics: adding the
    same version twice is harmless.

    Attributes:
        kind: The variant ``build()`` will produce.
    """

    def __init__(
        self,
        version: ArtifactVersion,
        kind: ArtifactKind = ArtifactKind.ARTIFACT,
    ) -> None:
        self.kind = kind
        self._version = version
        self._metamodels: set[ArtifactVersion] = set()
        self._inputs: set[ArtifactVersion] = set()
        self._outputs: set[ArtifactVersion] = set()
        self._function: Optional[Callable[..., Any]] = None
        self._predicate: Optional[Callable[..., Any]] = None
        self._changed_artifact: Optional[ArtifactVersion] = None

    @property
    def version(self) -> ArtifactVersion:
        return self._version

    # -------------------------------------------------------------------------
    # Additive setters
    # -------------------------------------------------------------------------

    def with_version(self, version: ArtifactVersion) -> ArtifactBuilder:
        self._version = version
        return self

    def with_metamodel(self, version: ArtifactVersion) -> ArtifactBuilder:
        self._metamodels.add(version)
        return self

    def with_input(self, version: ArtifactVersion) -> ArtifactBuilder:
        self._inputs.add(version)
        return self

    def with_output(self, version: ArtifactVersion) -> ArtifactBuilder:
        self._outputs.add(version)
        return self

    def with_transformation(self, function: Callable[..., Any]) -> ArtifactBuilder:
        """Set the transformation function ``(version, repository) -> Artifact | None``."""
        self._function = function
        return self

    def with_consumer(self, predicate: Callable[..., Any]) -> ArtifactBuilder:
        """Set the consumer predicate ``(version, repository) -> bool``."""
        self._predicate = predicate
        return self

    def with_changed_artifact(self, version: ArtifactVersion) -> ArtifactBuilder:
        self._changed_artifact = version
        return self

    # -------------------------------------------------------------------------
    # Selective updates
    # -------------------------------------------------------------------------

    def update_metamodel(self, new_version: ArtifactVersion) -> ArtifactBuilder:
        """Replace the predecessor of ``new_version`` in the metamodel set.

        No-op when the predecessor is not a current metamodel.

        Raises:
            InvalidVersionOperation: If ``new_version`` is an initial version.
        """
        _replace_predecessor(self._metamodels, new_version)
        return self

    def update_dependency(self, new_version: ArtifactVersion) -> ArtifactBuilder:
        """Apply the selective replace rule to inputs and outputs independently.

        Raises:
            InvalidVersionOperation: If ``new_version`` is an initial version.
        """
        _replace_predecessor(self._inputs, new_version)
        _replace_predecessor(self._outputs, new_version)
        return self

    # -------------------------------------------------------------------------
    # Finalize
    # -------------------------------------------------------------------------

    def build(self) -> Artifact:
        """Produce the immutable Artifact described by this builder.

        Raises:
            ArtifactError: If the payload required by ``kind`` is missing.
        """
        return Artifact(
            version=self._version,
            metamodels=frozenset(self._metamodels),
            inputs=frozenset(self._inputs),
            outputs=frozenset(self._outputs),
            payload=self._build_payload(),
        )

    def _build_payload(
        self,
    ) -> PlainPayload | TransformationPayload | ConsumerPayload | CoEvolutionPayload:
        match self.kind:
            case ArtifactKind.TRANSFORMATION:
                if self._function is None:
                    raise self._missing("transformation function")
                return TransformationPayload(function=self._function)
            case ArtifactKind.CONSUMER:
                if self._predicate is None:
                    raise self._missing("consumer predicate")
                return ConsumerPayload(predicate=self._predicate)
            case ArtifactKind.COEVOLUTION_MODEL:
                if self._changed_artifact is None:
                    raise self._missing("changed artifact")
                return CoEvolutionPayload(changed_artifact=self._changed_artifact)
            case _:
                return PlainPayload()

    def _missing(self, what: str) -> ArtifactError:
        return ArtifactError(
            message=f"Cannot build {self.kind.value} {self._version}: no {what} set",
            artifact=str(self._version),
            details={"kind": self.kind.value, "missing": what},
        )


def _replace_predecessor(
    links: set[ArtifactVersion], new_version: ArtifactVersion
) -> None:
    previous = new_version.predecessor()
    if previous in links:
        links.discard(previous)
        links.add(new_version)


# =============================================================================
# Constructors
# =============================================================================
def new_artifact(name: str) -> ArtifactBuilder:
    """Builder for a plain artifact at ``name@0``."""
    return ArtifactBuilder(ArtifactVersion.initial(name), ArtifactKind.ARTIFACT)


def new_transformation(name: str) -> ArtifactBuilder:
    """Builder for a transformation at ``name@0``."""
    return ArtifactBuilder(ArtifactVersion.initial(name), ArtifactKind.TRANSFORMATION)


def new_consumer(name: str) -> ArtifactBuilder:
    """Builder for a consumer at ``name@0``."""
    return ArtifactBuilder(ArtifactVersion.initial(name), ArtifactKind.CONSUMER)


def new_coevolution_model(name: str) -> ArtifactBuilder:
    """Builder for a co-evolution model at ``name@0``."""
    return ArtifactBuilder(
        ArtifactVersion.initial(name), ArtifactKind.COEVOLUTION_MODEL
    )


def builder_for(artifact: Artifact) -> ArtifactBuilder:
    """Return a builder pre-populated from ``artifact``, payload included."""
    builder = ArtifactBuilder(artifact.version, artifact.kind)
    builder._metamodels.update(artifact.metamodels)
    builder._inputs.update(artifact.inputs)
    builder._outputs.update(artifact.outputs)

    match artifact.payload:
        case TransformationPayload(function=function):
            builder.with_transformation(function)
        case ConsumerPayload(predicate=predicate):
            builder.with_consumer(predicate)
        case CoEvolutionPayload(changed_artifact=changed):
            builder.with_changed_artifact(changed)

    return builder


def clone_with(
    artifact: Artifact,
    *,
    version: Optional[ArtifactVersion] = None,
    metamodels: Optional[Iterable[ArtifactVersion]] = None,
    inputs: Optional[Iterable[ArtifactVersion]] = None,
    outputs: Optional[Iterable[ArtifactVersion]] = None,
) -> Artifact:
    """Copy ``artifact``, replacing only the given fields.

    The variant payload is always preserved.
    """
    update: dict[str, Any] = {}
    if version is not None:
        update["version"] = version
    if metamodels is not None:
        update["metamodels"] = frozenset(metamodels)
    if inputs is not None:
        update["inputs"] = frozenset(inputs)
    if outputs is not None:
        update["outputs"] = frozenset(outputs)
    return artifact.model_copy(update=update)
