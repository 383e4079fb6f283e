"""
coevolution.orchestration.generators - Co-Evolution Generators
=================================================================

Factories for the transformations that keep an ecosystem consistent after a
meta-model changes. They are ordinary transformation artifacts built from
the builder; committing them is enough to put them to work.

Two Levels:

    Migrations (react to instances)
        model_migration           input  = old meta-model version
                                  output = new meta-model version
                                  moves conforming instances to the new one
        transformation_migration  input = output = transformation meta-model
                                  moves transformations depending on the old
                                  version to the new one (higher order)

    Meta-level generators (react to changes, emit migrations)
        coevolution_model_generator             changed meta-model → co-evolution model
        model_coevolution_generator             co-evolution model → model_migration
        transformation_coevolution_generator    co-evolution model → transformation_migration

    Committed together, the meta-level generators turn a new meta-model
    revision into migrated instances and migrated generators without any
    manual step:

        microservice@1
          └─ coEvModelGen         → microservice-coEvM@0
               ├─ modelCoEvGen    → microservice-model-migration@0
               │     └─ migrates every instance of microservice@0
               └─ trafoCoEvGen    → microservice-transformation-migration@0
                     └─ migrates every generator reading/writing microservice@0

Loop Guard:
    A transformation migration has the transformation meta-model as input
    AND output, so every transformation it commits triggers it again. The
    predecessor check in its payload is what ends that: an already migrated
    transformation no longer references the old version.
"""

from __future__ import annotations

from typing import Optional

import structlog

from coevolution.core.builder import (
    builder_for,
    new_coevolution_model,
    new_transformation,
)
from coevolution.core.enums import TraceTag
from coevolution.core.models import Artifact, ArtifactVersion, CoEvolutionPayload
from coevolution.infrastructure.repository import Repository


logger = structlog.get_logger(component="coevolution_generators")


# =============================================================================
# Migrations
# =============================================================================
def model_migration(changed: ArtifactVersion) -> Artifact:
    """Build the transformation migrating instances of ``changed.predecessor()``.

    Only instances whose metamodels contain the exact predecessor are
    migrated; the migrated copy has that link replaced by ``changed``.

    Raises:
        InvalidVersionOperation: If ``changed`` is an initial version.
    """
    previous = changed.predecessor()

    def migrate(instance_version: ArtifactVersion, repository: Repository) -> Optional[Artifact]:
        instance = repository.get(instance_version)
        if instance is None or previous not in instance.metamodels:
            return None
        logger.info(
            "model_migrated",
            tag=TraceTag.M2M.value,
            instance=str(instance_version),
            metamodel=str(changed),
        )
        return builder_for(instance).update_metamodel(changed).build()

    return (
        new_transformation(f"{changed.name}-model-migration")
        .with_input(previous)
        .with_output(changed)
        .with_transformation(migrate)
        .build()
    )


def transformation_migration(
    changed: ArtifactVersion,
    transformation_metamodel: ArtifactVersion,
) -> Artifact:
    """Build the higher-order transformation migrating dependent transformations.

    A transformation is migrated when its inputs or outputs contain
    ``changed.predecessor()``; the copy has those links moved to ``changed``.

    Raises:
        InvalidVersionOperation: If ``changed`` is an initial version.
    """
    previous = changed.predecessor()

    def migrate(target_version: ArtifactVersion, repository: Repository) -> Optional[Artifact]:
        target = repository.get(target_version)
        if target is None:
            return None
        if previous not in target.inputs and previous not in target.outputs:
            return None
        logger.info(
            "transformation_migrated",
            tag=TraceTag.M2M.value,
            transformation=str(target_version),
            dependency=str(changed),
        )
        return builder_for(target).update_dependency(changed).build()

    return (
        new_transformation(f"{changed.name}-transformation-migration")
        .with_input(transformation_metamodel)
        .with_output(transformation_metamodel)
        .with_transformation(migrate)
        .build()
    )


# =============================================================================
# Meta-Level Generators
# =============================================================================
def coevolution_model_generator(
    metamodel_root: ArtifactVersion,
    coevolution_metamodel: ArtifactVersion,
    name: str = "coEvModelGen",
) -> Artifact:
    """Build the generator recording every non-initial meta-model change.

    Args:
        metamodel_root: The meta-meta-model changed meta-models conform to
            (e.g. ``ecore@0``).
        coevolution_metamodel: Meta-model of the emitted co-evolution models.
        name: Name of the generator artifact.
    """

    def generate(changed: ArtifactVersion, repository: Repository) -> Optional[Artifact]:
        if changed.is_initial():
            logger.info(
                "coevolution_model_skipped",
                tag=TraceTag.COEV.value,
                changed=str(changed),
                reason="initial version",
            )
            return None
        logger.info(
            "coevolution_model_created",
            tag=TraceTag.COEV.value,
            changed=str(changed),
        )
        return (
            new_coevolution_model(f"{changed.name}-coEvM")
            .with_metamodel(coevolution_metamodel)
            .with_changed_artifact(changed)
            .build()
        )

    return (
        new_transformation(name)
        .with_input(metamodel_root)
        .with_output(coevolution_metamodel)
        .with_transformation(generate)
        .build()
    )


def model_coevolution_generator(
    coevolution_metamodel: ArtifactVersion,
    transformation_metamodel: ArtifactVersion,
    name: str = "modelCoEvGen",
) -> Artifact:
    """Build the generator emitting a model migration per co-evolution model."""

    def generate(version: ArtifactVersion, repository: Repository) -> Optional[Artifact]:
        artifact = repository.get(version)
        if artifact is None:
            return None
        match artifact.payload:
            case CoEvolutionPayload(changed_artifact=changed):
                logger.info(
                    "model_migration_created",
                    tag=TraceTag.COEV.value,
                    changed=str(changed),
                )
                return model_migration(changed)
            case _:
                return None

    return (
        new_transformation(name)
        .with_input(coevolution_metamodel)
        .with_output(transformation_metamodel)
        .with_transformation(generate)
        .build()
    )


def transformation_coevolution_generator(
    coevolution_metamodel: ArtifactVersion,
    transformation_metamodel: ArtifactVersion,
    name: str = "trafoCoEvGen",
) -> Artifact:
    """Build the generator emitting a transformation migration per co-evolution model."""

    def generate(version: ArtifactVersion, repository: Repository) -> Optional[Artifact]:
        artifact = repository.get(version)
        if artifact is None:
            return None
        match artifact.payload:
            case CoEvolutionPayload(changed_artifact=changed):
                logger.info(
                    "transformation_migration_created",
                    tag=TraceTag.COEV.value,
                    changed=str(changed),
                )
                return transformation_migration(changed, transformation_metamodel)
            case _:
                return None

    return (
        new_transformation(name)
        .with_input(coevolution_metamodel)
        .with_output(transformation_metamodel)
        .with_transformation(generate)
        .build()
    )
