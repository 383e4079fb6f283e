"""
coevolution.scenarios - Example Ecosystems
============================================

A small but complete model-driven ecosystem (a microservice meta-model, its
instances, code generators for three platforms, a Java build pipeline and
the co-evolution generators) plus five numbered scenarios that change one
part of it and let the cascade run.

The Ecosystem:

    ecore ◄─ microservice ◄─ customer / shoppingCard / order microservices
                 │
                 ├─ validator, analyzer, simulator                (consumers)
                 └─ microserviceTo{SpringBoot,DotNet,Python}     (trafoMM)
                        │ generates *SpringBootGen (java), *Gen (sourceCode)
                        ▼
    sourceCode ◄─ java ── javaBuildPipeline ──→ executable ── deploymentPipeline

    coEvM, coEvModelGen, modelCoEvGen, trafoCoEvGen                (co-evolution)

Usage:
    >>> ecosystem = Ecosystem()
    >>> run_scenario(2, ecosystem)
    >>> ecosystem.latest("customerMicroservice").metamodels
    frozenset({ArtifactVersion(name='microservice', revision=1)})
"""

from __future__ import annotations

from typing import Callable

import structlog
from pydantic import BaseModel

from coevolution.core.builder import (
    builder_for,
    new_artifact,
    new_consumer,
    new_transformation,
)
from coevolution.core.enums import TraceTag
from coevolution.core.models import Artifact, ArtifactVersion
from coevolution.ecosystem import Ecosystem
from coevolution.infrastructure.repository import Repository
from coevolution.orchestration.generators import (
    coevolution_model_generator,
    model_coevolution_generator,
    transformation_coevolution_generator,
)


logger = structlog.get_logger(component="scenarios")


# =============================================================================
# Catalog
# =============================================================================
class Catalog(BaseModel):
    """The named artifacts of the example ecosystem, all at revision 0."""

    executable: Artifact
    deployment_pipeline: Artifact
    source_code: Artifact
    ecore: Artifact
    trafo_mm: Artifact
    java: Artifact
    java_build_pipeline: Artifact
    spring_boot: Artifact
    dot_net: Artifact
    python: Artifact
    microservice: Artifact
    customer_microservice: Artifact
    shopping_cart_microservice: Artifact
    order_microservice: Artifact
    microservice_validator: Artifact
    microservice_analyzer: Artifact
    microservice_simulator: Artifact
    microservice_to_spring_boot: Artifact
    microservice_to_dot_net: Artifact
    microservice_to_python: Artifact
    generator_validator: Artifact
    coev_m: Artifact
    coev_model_generator: Artifact
    model_migration_generator: Artifact
    transformation_migration_generator: Artifact

    model_config = {"frozen": True}

    def full_ecosystem(self, with_coevolution: bool = True) -> list[Artifact]:
        """Everything in the order the scenarios commit it."""
        coevolution = (
            [
                self.coev_model_generator,
                self.model_migration_generator,
                self.transformation_migration_generator,
            ]
            if with_coevolution
            else []
        )
        return [
            self.executable,
            self.source_code,
            self.ecore,
            self.trafo_mm,
            self.java,
            self.java_build_pipeline,
            self.spring_boot,
            self.dot_net,
            self.python,
            *coevolution,
            self.microservice,
            self.microservice_to_spring_boot,
            self.microservice_to_dot_net,
            self.customer_microservice,
            self.shopping_cart_microservice,
            self.order_microservice,
            self.microservice_to_python,
            self.generator_validator,
            self.microservice_analyzer,
            self.microservice_simulator,
            self.microservice_validator,
            self.deployment_pipeline,
        ]


def _approving(tag: TraceTag, event: str) -> Callable[[ArtifactVersion, Repository], bool]:
    def predicate(version: ArtifactVersion, repository: Repository) -> bool:
        logger.info(event, tag=tag.value, artifact=str(version))
        return True

    return predicate


def _generator(
    event: str, suffix: str, metamodel: ArtifactVersion
) -> Callable[[ArtifactVersion, Repository], Artifact]:
    def generate(version: ArtifactVersion, repository: Repository) -> Artifact:
        logger.info(event, tag=TraceTag.M2T.value, model=str(version))
        return new_artifact(f"{version.name}{suffix}").with_metamodel(metamodel).build()

    return generate


def build_catalog() -> Catalog:
    """Build the example ecosystem's artifacts."""
    executable = new_artifact("executable").build()
    source_code = new_artifact("sourceCode").build()
    ecore = new_artifact("ecore").build()
    trafo_mm = new_artifact("trafoMM").build()
    java = new_artifact("java").with_metamodel(source_code.version).build()

    def build_and_package(version: ArtifactVersion, repository: Repository) -> Artifact:
        logger.info("build_started", tag=TraceTag.BUILD.value, artifact=str(version))
        return (
            new_artifact(f"{version.name}Ver{version.revision}.jar")
            .with_metamodel(executable.version)
            .build()
        )

    spring_boot = new_artifact("springBoot").build()
    dot_net = new_artifact("dotNet").build()
    python = new_artifact("python").build()
    microservice = new_artifact("microservice").with_metamodel(ecore.version).build()

    def instance(name: str) -> Artifact:
        return new_artifact(name).with_metamodel(microservice.version).build()

    def microservice_consumer(name: str, event: str) -> Artifact:
        return (
            new_consumer(name)
            .with_input(microservice.version)
            .with_consumer(_approving(TraceTag.CONSUME, event))
            .build()
        )

    def platform_generator(
        name: str, platform: Artifact, event: str, suffix: str, metamodel: Artifact
    ) -> Artifact:
        return (
            new_transformation(name)
            .with_metamodel(trafo_mm.version)
            .with_input(microservice.version)
            .with_output(platform.version)
            .with_transformation(_generator(event, suffix, metamodel.version))
            .build()
        )

    coev_m = new_artifact("coEvM").build()

    return Catalog(
        executable=executable,
        deployment_pipeline=(
            new_consumer("deploymentPipeline")
            .with_input(executable.version)
            .with_consumer(_approving(TraceTag.DEPLOY, "deployment_started"))
            .build()
        ),
        source_code=source_code,
        ecore=ecore,
        trafo_mm=trafo_mm,
        java=java,
        java_build_pipeline=(
            new_transformation("javaBuildPipeline")
            .with_input(java.version)
            .with_output(executable.version)
            .with_transformation(build_and_package)
            .build()
        ),
        spring_boot=spring_boot,
        dot_net=dot_net,
        python=python,
        microservice=microservice,
        customer_microservice=instance("customerMicroservice"),
        shopping_cart_microservice=instance("shoppingCardMicroservice"),
        order_microservice=instance("orderMicroservice"),
        microservice_validator=microservice_consumer(
            "microserviceValidator", "microservice_validated"
        ),
        microservice_analyzer=microservice_consumer(
            "microserviceAnalyzer", "microservice_analyzed"
        ),
        microservice_simulator=microservice_consumer(
            "microserviceSimulator", "microservice_simulated"
        ),
        microservice_to_spring_boot=platform_generator(
            "microserviceToSpringBoot", spring_boot,
            "spring_boot_generated", "SpringBootGen", java,
        ),
        microservice_to_dot_net=platform_generator(
            "microserviceToDotNet", dot_net,
            "dot_net_generated", "DotNetGen", source_code,
        ),
        microservice_to_python=platform_generator(
            "microserviceToPython", python,
            "python_generated", "PythonGen", source_code,
        ),
        generator_validator=(
            new_consumer("generatorValidator")
            .with_input(trafo_mm.version)
            .with_consumer(_approving(TraceTag.CONSUME, "generator_validated"))
            .build()
        ),
        coev_m=coev_m,
        coev_model_generator=coevolution_model_generator(
            ecore.version, coev_m.version
        ),
        model_migration_generator=model_coevolution_generator(
            coev_m.version, trafo_mm.version
        ),
        transformation_migration_generator=transformation_coevolution_generator(
            coev_m.version, trafo_mm.version
        ),
    )


# =============================================================================
# Scenarios
# =============================================================================
def manual_metamodel_change(ecosystem: Ecosystem) -> None:
    catalog = build_catalog()
    ecosystem.commit_all(*catalog.full_ecosystem(with_coevolution=False))

    logger.info("scenario_step", step="change microservice meta model, migrate by hand")
    next_microservice = catalog.microservice.version.successor()
    ecosystem.commit(catalog.customer_microservice)
    ecosystem.commit(catalog.microservice)
    ecosystem.commit(
        builder_for(catalog.customer_microservice)
        .update_metamodel(next_microservice)
        .build()
    )
    ecosystem.commit(
        builder_for(catalog.microservice_to_spring_boot)
        .update_dependency(next_microservice)
        .build()
    )


def automatic_metamodel_change(ecosystem: Ecosystem) -> None:
    catalog = build_catalog()
    ecosystem.commit_all(*catalog.full_ecosystem())

    logger.info("scenario_step", step="change microservice meta model")
    ecosystem.commit(catalog.microservice)


def platform_change(ecosystem: Ecosystem) -> None:
    catalog = build_catalog()
    ecosystem.commit_all(*catalog.full_ecosystem())

    logger.info("scenario_step", step="change Spring Boot platform")
    ecosystem.commit(catalog.spring_boot)
    ecosystem.commit(
        builder_for(catalog.microservice_to_spring_boot)
        .update_dependency(catalog.spring_boot.version.successor())
        .build()
    )


def java_version_change(ecosystem: Ecosystem) -> None:
    catalog = build_catalog()
    ecosystem.commit_all(*catalog.full_ecosystem())

    logger.info(
        "scenario_step",
        step="change Java version, migrate platform, build pipeline and generator by hand",
    )
    next_java = catalog.java.version.successor()
    ecosystem.commit(catalog.java)
    ecosystem.commit(builder_for(catalog.spring_boot).update_metamodel(next_java).build())
    ecosystem.commit(
        builder_for(catalog.java_build_pipeline).update_dependency(next_java).build()
    )
    ecosystem.commit(
        builder_for(catalog.microservice_to_spring_boot)
        .update_dependency(catalog.spring_boot.version.successor())
        .build()
    )


def self_feeding_transformation(ecosystem: Ecosystem) -> None:
    """Commit a transformation whose input and output are the same version.

    Every instance it re-commits is again an instance of its input, so the
    cascade only ends at the repository's cascade bound
    (PropagationLimitError).
    """
    catalog = build_catalog()
    ecosystem.commit_all(
        catalog.microservice,
        catalog.microservice_to_spring_boot,
        catalog.customer_microservice,
        catalog.shopping_cart_microservice,
    )

    def recommit(version: ArtifactVersion, repository: Repository) -> Artifact | None:
        logger.info("loop_fired", artifact=str(version))
        return repository.get(version)

    logger.info("scenario_step", step="commit transformation with input == output")
    ecosystem.commit(
        new_transformation("loop")
        .with_input(catalog.microservice.version)
        .with_output(catalog.microservice.version)
        .with_transformation(recommit)
        .build()
    )


class Scenario(BaseModel):
    """A numbered, described example run."""

    description: str
    run: Callable[[Ecosystem], None]

    model_config = {"frozen": True}


SCENARIOS: dict[int, Scenario] = {
    1: Scenario(
        description=(
            "Ecosystem with manual co-evolution support where a meta model is changed"
        ),
        run=manual_metamodel_change,
    ),
    2: Scenario(
        description=(
            "Ecosystem with support for semi-automatic model and transformation "
            "co-evolution where a meta model is changed"
        ),
        run=automatic_metamodel_change,
    ),
    3: Scenario(
        description=(
            "Ecosystem with support for semi-automatic model and transformation "
            "co-evolution where a platform is changed"
        ),
        run=platform_change,
    ),
    4: Scenario(
        description=(
            "Ecosystem with support for semi-automatic model and transformation "
            "co-evolution where the java version is changed"
        ),
        run=java_version_change,
    ),
    5: Scenario(
        description=(
            "Ecosystem with transformation to same metamodel version, will create a loop"
        ),
        run=self_feeding_transformation,
    ),
}


def run_scenario(number: int, ecosystem: Ecosystem) -> None:
    """Run scenario ``number`` on ``ecosystem``.

    Raises:
        KeyError: If there is no scenario with that number.
    """
    scenario = SCENARIOS[number]
    logger.info("scenario_started", number=number, description=scenario.description)
    scenario.run(ecosystem)
    logger.info("scenario_finished", number=number, artifacts=ecosystem.repository.count())
