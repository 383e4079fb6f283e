"""
Tests for coevolution.core.models.Artifact
============================================

What's Being Tested:
    - Equality and hashing by version only
    - Immutability
    - kind (payload variant) and role (graph shape)
    - The discriminated payload union
    - describe() rendering
    - CommitRecord defaults
"""

import pytest
from pydantic import ValidationError

from coevolution.core.enums import ArtifactKind, ArtifactRole
from coevolution.core.models import (
    Artifact,
    ArtifactVersion,
    CoEvolutionPayload,
    CommitRecord,
    ConsumerPayload,
    PlainPayload,
    TransformationPayload,
)


def _v(name: str, revision: int = 0) -> ArtifactVersion:
    return ArtifactVersion(name=name, revision=revision)


# =============================================================================
# Tests: Identity
# =============================================================================
class TestArtifactIdentity:
    """Equality is defined by version alone."""

    def test_equal_when_versions_equal(self) -> None:
        """Different relationship sets, same version → equal."""
        a = Artifact(version=_v("customer"), metamodels=frozenset({_v("microservice")}))
        b = Artifact(version=_v("customer"), metamodels=frozenset({_v("microservice", 1)}))
        assert a == b
        assert hash(a) == hash(b)

    def test_not_equal_when_versions_differ(self) -> None:
        assert Artifact(version=_v("customer")) != Artifact(version=_v("customer", 1))

    def test_not_equal_to_other_types(self) -> None:
        assert Artifact(version=_v("customer")) != _v("customer")

    def test_is_frozen(self) -> None:
        artifact = Artifact(version=_v("customer"))
        with pytest.raises(ValidationError):
            artifact.version = _v("other")

    def test_str_is_version(self) -> None:
        assert str(Artifact(version=_v("customer", 3))) == "customer@3"


# =============================================================================
# Tests: Kind and Role
# =============================================================================
class TestArtifactKindAndRole:
    """kind follows the payload; role follows the inputs/outputs shape."""

    def test_plain_artifact_defaults(self) -> None:
        artifact = Artifact(version=_v("ecore"))
        assert isinstance(artifact.payload, PlainPayload)
        assert artifact.kind == ArtifactKind.ARTIFACT
        assert artifact.role == ArtifactRole.DATA
        assert artifact.metamodels == frozenset()

    def test_transformation_role(self) -> None:
        artifact = Artifact(
            version=_v("gen"),
            inputs=frozenset({_v("a")}),
            outputs=frozenset({_v("b")}),
            payload=TransformationPayload(function=lambda v, r: None),
        )
        assert artifact.kind == ArtifactKind.TRANSFORMATION
        assert artifact.role == ArtifactRole.TRANSFORMATION

    def test_consumer_role(self) -> None:
        artifact = Artifact(
            version=_v("validator"),
            inputs=frozenset({_v("a")}),
            payload=ConsumerPayload(predicate=lambda v, r: True),
        )
        assert artifact.kind == ArtifactKind.CONSUMER
        assert artifact.role == ArtifactRole.CONSUMER

    def test_kind_and_role_can_disagree(self) -> None:
        """A plain artifact may have a transformation's shape."""
        artifact = Artifact(
            version=_v("shape"),
            inputs=frozenset({_v("a")}),
            outputs=frozenset({_v("b")}),
        )
        assert artifact.kind == ArtifactKind.ARTIFACT
        assert artifact.role == ArtifactRole.TRANSFORMATION


# =============================================================================
# Tests: Payload Union
# =============================================================================
class TestPayloadUnion:
    """The payload field is discriminated by its kind tag."""

    def test_coevolution_payload_from_dict(self) -> None:
        artifact = Artifact(
            version=_v("microservice-coEvM"),
            payload={
                "kind": "coevolution_model",
                "changed_artifact": {"name": "microservice", "revision": 1},
            },
        )
        assert isinstance(artifact.payload, CoEvolutionPayload)
        assert artifact.payload.changed_artifact == _v("microservice", 1)

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Artifact(version=_v("x"), payload={"kind": "mystery"})

    def test_transformation_payload_requires_callable(self) -> None:
        with pytest.raises(ValidationError):
            TransformationPayload(function="not callable")


# =============================================================================
# Tests: Rendering
# =============================================================================
class TestDescribe:
    """describe() renders the relationship sets in a stable order."""

    def test_describe_lists_sorted_sets(self) -> None:
        artifact = Artifact(
            version=_v("gen"),
            metamodels=frozenset({_v("trafoMM")}),
            inputs=frozenset({_v("microservice", 1), _v("ecore")}),
            outputs=frozenset({_v("springBoot")}),
        )
        assert artifact.describe() == (
            "gen@0; metamodels=[trafoMM@0]; "
            "inputs=[ecore@0, microservice@1]; outputs=[springBoot@0]"
        )

    def test_describe_includes_changed_artifact(self) -> None:
        artifact = Artifact(
            version=_v("microservice-coEvM"),
            payload=CoEvolutionPayload(changed_artifact=_v("microservice", 1)),
        )
        assert artifact.describe().endswith("; changedArtifact=microservice@1")


# =============================================================================
# Tests: CommitRecord
# =============================================================================
class TestCommitRecord:

    def test_defaults(self) -> None:
        record = CommitRecord(
            version=_v("a", 1),
            requested_version=_v("a"),
            kind=ArtifactKind.ARTIFACT,
        )
        assert record.depth == 0
        assert record.produced_by is None
        assert record.committed_at.tzinfo is not None
