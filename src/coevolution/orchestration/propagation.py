"""
coevolution.orchestration.propagation - Reactive Propagation Engine
=====================================================================

After every commit the repository hands the new version to the propagation
engine, which decides which other artifacts must react and runs them. Any
artifact a transformation returns is committed again, so one outer commit
can cascade through the whole dependency graph.

Architecture Context:

    commit(changed)
        │
        ▼
    ┌────────────────────────────────────────────────────────────┐
    │ PropagationEngine.on_change(repository, changed)           │
    │                                                            │
    │  1. M = metamodels_of(changed)                             │
    │  2. ConsumerGate: every consumer of every m in M approves? │
    │        │ no  → stop (transformations never see `changed`)  │
    │        ▼ yes                                               │
    │  3. for m in M, for t in transformations_accepting(m):     │
    │        fire t on changed  → commit(result, produced_by=t)  │
    │  4. for n in inputs_of(changed), for i in instances_of(n): │
    │        fire changed itself on i                            │
    └────────────────────────────────────────────────────────────┘

    Step 4 is what runs a freshly committed transformation (or consumer)
    over the instances that already exist. Whether a rejection in step 2
    also skips step 4 is the ``gate_downstream`` setting.

Ordering:
    Everything is synchronous and depth-first. Candidate sets are
    snapshotted before firing and walked in (name, revision) order, so a
    cascade is reproducible. Repeated triggers are NOT deduplicated; a
    self-feeding transformation loops until the repository's cascade bounds
    stop it.

Payload Failures:
    Exceptions raised by payloads are not caught here. They unwind through
    the nested commits to the caller of the outer commit.
"""

from __future__ import annotations

from typing import Optional

import structlog
from pydantic import BaseModel, Field

from coevolution.core.config import CoEvolutionConfig
from coevolution.core.enums import TraceTag
from coevolution.core.models import (
    ArtifactVersion,
    ConsumerPayload,
    TransformationPayload,
    sorted_versions,
)
from coevolution.infrastructure.repository import Repository


# =============================================================================
# Logger Setup
# =============================================================================
logger = structlog.get_logger()


# =============================================================================
# Gate Result Model
# =============================================================================
# The outcome of asking every consumer of the changed artifact's metamodels
# for approval. Evaluation stops at the first rejection, so ``approvals``
# lists only the consumers that were actually asked before it.
# =============================================================================
class GateResult(BaseModel):
    """Outcome of the consumer gate for one changed version.

    Attributes:
        allowed: True if there were no consumers or all of them approved.
        changed_version: The version the consumers were asked about.
        approvals: Consumers that approved, in evaluation order.
        rejections: The rejecting consumer (at most one; evaluation stops).
    """

    allowed: bool = Field(
        description="Whether propagation to transformations may proceed",
    )
    changed_version: ArtifactVersion = Field(
        description="The version the consumers evaluated",
    )
    approvals: list[ArtifactVersion] = Field(
        default_factory=list,
        description="Consumers that approved, in evaluation order",
    )
    rejections: list[ArtifactVersion] = Field(
        default_factory=list,
        description="Consumer that rejected, if any",
    )

    @property
    def reason(self) -> str:
        if self.rejections:
            return f"rejected by {self.rejections[0]}"
        if self.approvals:
            return f"approved by {len(self.approvals)} consumer(s)"
        return "no consumers registered"


# =============================================================================
# Consumer Gate
# =============================================================================
# Unanimity, not majority: a single rejecting consumer blocks the version.
#
#   metamodels_of(changed) = {}             → allowed (nothing to ask)
#   consumers on those metamodels = {}      → allowed
#   any consumer predicate returns False    → rejected
#
# Consumer versions whose stored artifact carries no predicate (e.g. a plain
# artifact that merely has a consumer's shape) are skipped.
# =============================================================================
class ConsumerGate:
    """Asks the consumers of a version's metamodels for approval."""

    def __init__(self) -> None:
        self._logger = logger.bind(component="consumer_gate")

    def evaluate(self, repository: Repository, changed: ArtifactVersion) -> GateResult:
        """Evaluate consumer predicates against ``changed``, stopping at a rejection.

        Args:
            repository: Store to resolve consumers from; passed on to
                every predicate.
            changed: The version under evaluation.

        Returns:
            A GateResult; ``allowed`` is False as soon as one predicate
            returns a falsy value.
        """
        approvals: list[ArtifactVersion] = []

        for metamodel in sorted_versions(repository.metamodels_of(changed)):
            for consumer_version in sorted_versions(
                repository.consumers_accepting(metamodel)
            ):
                consumer = repository.get(consumer_version)
                if consumer is None:
                    continue
                match consumer.payload:
                    case ConsumerPayload(predicate=accepts):
                        approved = bool(accepts(changed, repository))
                    case _:
                        continue

                self._logger.debug(
                    "consumer_evaluated",
                    tag=TraceTag.CONSUME.value,
                    consumer=str(consumer_version),
                    target=str(changed),
                    approved=approved,
                )
                if not approved:
                    self._logger.info(
                        "propagation_rejected",
                        consumer=str(consumer_version),
                        target=str(changed),
                    )
                    return GateResult(
                        allowed=False,
                        changed_version=changed,
                        approvals=approvals,
                        rejections=[consumer_version],
                    )
                approvals.append(consumer_version)

        return GateResult(allowed=True, changed_version=changed, approvals=approvals)

    def check(self, repository: Repository, changed: ArtifactVersion) -> bool:
        """Convenience wrapper returning only ``allowed``."""
        return self.evaluate(repository, changed).allowed


# =============================================================================
# Propagation Engine
# =============================================================================
class PropagationEngine:
    """Reacts to commits by firing dependent transformations and consumers.

    The engine holds no artifact state of its own; everything it needs is
    read from the repository passed to ``on_change``, so one engine can
    serve several repositories.

    Attributes:
        gate: The consumer gate evaluated before any transformation fires.

    Example:
        >>> engine = PropagationEngine(CoEvolutionConfig(gate_downstream=False))
        >>> repository = InMemoryRepository(engine=engine)
    """

    def __init__(
        self,
        config: Optional[CoEvolutionConfig] = None,
        gate: Optional[ConsumerGate] = None,
    ) -> None:
        self._config = config or CoEvolutionConfig()
        self.gate = gate or ConsumerGate()
        self._logger = logger.bind(component="propagation_engine")

    def on_change(self, repository: Repository, changed: ArtifactVersion) -> GateResult:
        """Propagate the commit of ``changed`` through the repository.

        Args:
            repository: The repository ``changed`` was just committed to.
            changed: The version that was stored.

        Returns:
            The consumer gate's verdict for ``changed``.
        """
        metamodels = sorted_versions(repository.metamodels_of(changed))
        verdict = self.gate.evaluate(repository, changed)

        if verdict.allowed:
            for metamodel in metamodels:
                for transformation in sorted_versions(
                    repository.transformations_accepting(metamodel)
                ):
                    self._fire(repository, transformation, changed)

        if verdict.allowed or not self._config.gate_downstream:
            self._fire_downstream(repository, changed)

        return verdict

    # -------------------------------------------------------------------------
    # Firing
    # -------------------------------------------------------------------------

    def _fire_downstream(self, repository: Repository, changed: ArtifactVersion) -> None:
        """Run ``changed`` itself over existing instances of its inputs."""
        for metamodel in sorted_versions(repository.inputs_of(changed)):
            for instance in sorted_versions(repository.instances_of(metamodel)):
                self._fire(repository, changed, instance)

    def _fire(
        self,
        repository: Repository,
        source: ArtifactVersion,
        target: ArtifactVersion,
    ) -> None:
        """Run the payload of ``source`` on ``target``.

        A transformation's returned artifact is committed with ``source`` as
        its producer. A consumer's verdict is only traced.
        """
        artifact = repository.get(source)
        if artifact is None:
            return

        match artifact.payload:
            case TransformationPayload(function=function):
                self._logger.info(
                    "transformation_fired",
                    tag=TraceTag.FIRE.value,
                    transformation=self._render(repository, source),
                    target=str(target),
                )
                produced = function(target, repository)
                if produced is not None:
                    repository.commit(produced, produced_by=source)
            case ConsumerPayload(predicate=accepts):
                approved = bool(accepts(target, repository))
                self._logger.info(
                    "consumer_evaluated",
                    tag=TraceTag.CONSUME.value,
                    consumer=str(source),
                    target=str(target),
                    approved=approved,
                )

    def _render(self, repository: Repository, version: ArtifactVersion) -> str:
        if self._config.verbose:
            artifact = repository.get(version)
            if artifact is not None:
                return artifact.describe()
        return str(version)
