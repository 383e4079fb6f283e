"""
Co-Evolution Walkthrough: Watch a Meta-Model Change Propagate
================================================================

This example builds a tiny ecosystem by hand (one meta-model, two
instances, a code generator and a validator), adds the co-evolution
generators, and then commits a new revision of the meta-model.

Without any manual step the cascade:
    - records a co-evolution model for microservice@1
    - migrates both instances to microservice@1
    - migrates the generator to read microservice@1
    - regenerates code from the migrated instances

Usage:
    python examples/coevolution_walkthrough.py
"""

from __future__ import annotations

from coevolution import Ecosystem
from coevolution.core.builder import new_artifact, new_consumer, new_transformation
from coevolution.core.config import CoEvolutionConfig
from coevolution.observability import configure_logging
from coevolution.orchestration import (
    coevolution_model_generator,
    model_coevolution_generator,
    transformation_coevolution_generator,
)


def main() -> None:
    """Commit a meta-model change and print who produced what."""
    config = CoEvolutionConfig(log_level="WARNING")
    configure_logging(config)
    ecosystem = Ecosystem(config)

    ecore = new_artifact("ecore").build()
    trafo_mm = new_artifact("trafoMM").build()
    coev_mm = new_artifact("coEvM").build()
    code = new_artifact("code").build()
    microservice = new_artifact("microservice").with_metamodel(ecore.version).build()

    generator = (
        new_transformation("microserviceToCode")
        .with_metamodel(trafo_mm.version)
        .with_input(microservice.version)
        .with_output(code.version)
        .with_transformation(
            lambda version, repository: new_artifact(f"{version.name}Code")
            .with_metamodel(code.version)
            .build()
        )
        .build()
    )
    validator = (
        new_consumer("microserviceValidator")
        .with_input(microservice.version)
        .with_consumer(lambda version, repository: True)
        .build()
    )

    ecosystem.commit_all(
        ecore,
        trafo_mm,
        coev_mm,
        code,
        coevolution_model_generator(ecore.version, coev_mm.version),
        model_coevolution_generator(coev_mm.version, trafo_mm.version),
        transformation_coevolution_generator(coev_mm.version, trafo_mm.version),
        microservice,
        validator,
        generator,
        new_artifact("customer").with_metamodel(microservice.version).build(),
        new_artifact("order").with_metamodel(microservice.version).build(),
    )
    before = len(ecosystem.history())

    # The change: a second revision of the microservice meta-model
    changed = ecosystem.commit(microservice)

    print(f"Committed {changed}")
    print("-" * 60)
    for record in ecosystem.history()[before:]:
        producer = str(record.produced_by) if record.produced_by else "(caller)"
        print(f"{'  ' * record.depth}{record.version}  <- {producer}")
    print()
    print(f"customer  : {ecosystem.latest('customer')}")
    print(f"generator : {ecosystem.latest('microserviceToCode').describe()}")


if __name__ == "__main__":
    main()
