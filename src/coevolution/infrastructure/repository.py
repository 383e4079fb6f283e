"""
coevolution.infrastructure.repository - Versioned Artifact Repository
=======================================================================

The repository is the versioned store of the simulated ecosystem. It owns
the version → artifact map, answers the fixed relationship queries the
propagation engine needs, and is the only place artifacts enter the store.

Architecture Context:

    caller ── commit(artifact) ──→ ┌──────────────────────┐
                                   │  InMemoryRepository  │
                                   │  1. resolve version  │
                                   │  2. store copy       │
                                   │  3. record + trace   │
                                   │  4. engine.on_change │──→ PropagationEngine
                                   └──────────────────────┘          │
                                              ↑                      │
                                              └── nested commit() ───┘

    A commit returns only after its whole cascade has settled. Nested
    commits made by transformation payloads run on the same call stack.

Version Resolution:
    The requested version is advanced with ``successor()`` until it is free,
    so committing the same artifact twice stores ``name@0`` and ``name@1``.
    Nothing is ever overwritten or deleted.

Cascade Bounds:
    A transformation whose output conforms to its own input re-triggers
    itself on every commit. Each repository counts the nesting depth and the
    number of commits of the current outer commit, and refuses (with
    PropagationLimitError) to store an artifact once ``max_cascade_depth`` or
    ``max_cascade_commits`` is reached. Earlier commits stay stored.

Thread Safety:
    ``commit`` and every query run under a re-entrant lock. Another thread
    never observes a half-finished cascade, while payloads on the committing
    thread can still query and commit.

Usage:
    >>> repository = InMemoryRepository()
    >>> v0 = repository.commit(new_artifact("microservice").build())
    >>> v1 = repository.commit(new_artifact("microservice").build())
    >>> str(v0), str(v1)
    ('microservice@0', 'microservice@1')
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

import structlog

from coevolution.core.builder import clone_with
from coevolution.core.config import CoEvolutionConfig
from coevolution.core.enums import TraceTag
from coevolution.core.exceptions import PropagationLimitError
from coevolution.core.models import Artifact, ArtifactVersion, CommitRecord

if TYPE_CHECKING:
    from coevolution.orchestration.propagation import PropagationEngine


# =============================================================================
# Logger
# =============================================================================
logger = structlog.get_logger()


# =============================================================================
# Abstract Base Class
# =============================================================================
class Repository(ABC):
    """Abstract interface of the versioned artifact store.

    Relationship queries are total: a version the store has never seen
    yields None or an empty set, never an error.

    Methods:
        engine: The PropagationEngine run after every commit.
        commit(artifact): Store under a free version and propagate.
        get(version): The stored artifact, or None.
        metamodels_of / inputs_of / outputs_of(version): Relationship sets.
        instances_of(metamodel): Artifacts conforming to ``metamodel``.
        transformations_accepting(metamodel): Transformations taking it as input.
        consumers_accepting(metamodel): Consumers taking it as input.
    """

    @property
    @abstractmethod
    def engine(self) -> PropagationEngine:
        """The engine this repository hands every stored version to."""
        ...

    @abstractmethod
    def commit(
        self,
        artifact: Artifact,
        *,
        produced_by: Optional[ArtifactVersion] = None,
    ) -> ArtifactVersion:
        """Store ``artifact`` under a free version and run propagation.

        Args:
            artifact: The artifact to store. Its version is the starting
                point of version resolution.
            produced_by: Transformation that produced the artifact, recorded
                in the commit history.

        Returns:
            The version the artifact was actually stored under.
        """
        ...

    @abstractmethod
    def get(self, version: ArtifactVersion) -> Optional[Artifact]:
        ...

    @abstractmethod
    def metamodels_of(self, version: ArtifactVersion) -> frozenset[ArtifactVersion]:
        ...

    @abstractmethod
    def inputs_of(self, version: ArtifactVersion) -> frozenset[ArtifactVersion]:
        ...

    @abstractmethod
    def outputs_of(self, version: ArtifactVersion) -> frozenset[ArtifactVersion]:
        ...

    @abstractmethod
    def instances_of(self, metamodel: ArtifactVersion) -> frozenset[ArtifactVersion]:
        ...

    @abstractmethod
    def transformations_accepting(
        self, metamodel: ArtifactVersion
    ) -> frozenset[ArtifactVersion]:
        ...

    @abstractmethod
    def consumers_accepting(
        self, metamodel: ArtifactVersion
    ) -> frozenset[ArtifactVersion]:
        ...

    @abstractmethod
    def versions_of(self, name: str) -> list[ArtifactVersion]:
        """All stored versions named ``name``, oldest revision first."""
        ...

    @abstractmethod
    def versions(self) -> list[ArtifactVersion]:
        """All stored versions in commit order."""
        ...

    @abstractmethod
    def history(self) -> tuple[CommitRecord, ...]:
        ...

    # -------------------------------------------------------------------------
    # Derived operations
    # -------------------------------------------------------------------------

    def commit_all(self, *artifacts: Artifact) -> list[ArtifactVersion]:
        """Commit ``artifacts`` one after another, each with its full cascade."""
        return [self.commit(artifact) for artifact in artifacts]

    def contains(self, version: ArtifactVersion) -> bool:
        return self.get(version) is not None

    def latest(self, name: str) -> Optional[Artifact]:
        """The stored artifact with the highest revision of ``name``, if any."""
        versions = self.versions_of(name)
        if not versions:
            return None
        return self.get(versions[-1])

    def count(self) -> int:
        return len(self.versions())


# =============================================================================
# In-Memory Implementation
# =============================================================================
class InMemoryRepository(Repository):
    """Dict-backed repository, one instance per simulation run.

    Attributes:
        config: Supplies the cascade bounds and the verbose trace switch.

    Example:
        >>> repository = InMemoryRepository(CoEvolutionConfig(max_cascade_depth=8))
        >>> repository.commit_all(metamodel, instance)
    """

    def __init__(
        self,
        config: Optional[CoEvolutionConfig] = None,
        engine: Optional[PropagationEngine] = None,
    ) -> None:
        self.config = config or CoEvolutionConfig()
        self._engine = engine
        self._store: dict[ArtifactVersion, Artifact] = {}
        self._history: list[CommitRecord] = []
        self._lock = threading.RLock()
        self._depth = 0
        self._cascade_commits = 0
        self._logger = logger.bind(component="in_memory_repository")

    @property
    def engine(self) -> PropagationEngine:
        """The propagation engine, created from the config on first use."""
        if self._engine is None:
            from coevolution.orchestration.propagation import PropagationEngine

            self._engine = PropagationEngine(self.config)
        return self._engine

    # -------------------------------------------------------------------------
    # Commit
    # -------------------------------------------------------------------------

    def commit(
        self,
        artifact: Artifact,
        *,
        produced_by: Optional[ArtifactVersion] = None,
    ) -> ArtifactVersion:
        """Store ``artifact`` under the first free version and propagate.

        Raises:
            PropagationLimitError: If storing the artifact would exceed
                ``max_cascade_depth`` or ``max_cascade_commits``.
        """
        with self._lock:
            if self._depth == 0:
                self._cascade_commits = 0
            self._check_bounds(artifact)

            version = artifact.version
            while version in self._store:
                version = version.successor()

            stored = artifact
            if version != artifact.version:
                stored = clone_with(artifact, version=version)
            self._store[version] = stored
            self._cascade_commits += 1
            self._history.append(
                CommitRecord(
                    version=version,
                    requested_version=artifact.version,
                    kind=stored.kind,
                    depth=self._depth,
                    produced_by=produced_by,
                )
            )
            self._logger.info(
                "artifact_committed",
                tag=TraceTag.PUSH.value,
                artifact=stored.describe() if self.config.verbose else str(version),
                kind=stored.kind.value,
                depth=self._depth,
                produced_by=str(produced_by) if produced_by else None,
            )

            self._depth += 1
            try:
                self.engine.on_change(self, version)
            finally:
                self._depth -= 1

            return version

    def _check_bounds(self, artifact: Artifact) -> None:
        if self._depth >= self.config.max_cascade_depth:
            raise PropagationLimitError(
                message=(
                    f"Cascade depth {self._depth} reached while committing "
                    f"{artifact.version}"
                ),
                version=str(artifact.version),
                limit="max_cascade_depth",
                details={"depth": self._depth},
            )
        if self._cascade_commits >= self.config.max_cascade_commits:
            raise PropagationLimitError(
                message=(
                    f"{self._cascade_commits} commits made in one cascade "
                    f"while committing {artifact.version}"
                ),
                version=str(artifact.version),
                limit="max_cascade_commits",
                details={"commits": self._cascade_commits},
            )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, version: ArtifactVersion) -> Optional[Artifact]:
        with self._lock:
            return self._store.get(version)

    def metamodels_of(self, version: ArtifactVersion) -> frozenset[ArtifactVersion]:
        artifact = self.get(version)
        return artifact.metamodels if artifact else frozenset()

    def inputs_of(self, version: ArtifactVersion) -> frozenset[ArtifactVersion]:
        artifact = self.get(version)
        return artifact.inputs if artifact else frozenset()

    def outputs_of(self, version: ArtifactVersion) -> frozenset[ArtifactVersion]:
        artifact = self.get(version)
        return artifact.outputs if artifact else frozenset()

    def instances_of(self, metamodel: ArtifactVersion) -> frozenset[ArtifactVersion]:
        with self._lock:
            return frozenset(
                v for v, a in self._store.items() if metamodel in a.metamodels
            )

    def transformations_accepting(
        self, metamodel: ArtifactVersion
    ) -> frozenset[ArtifactVersion]:
        with self._lock:
            return frozenset(
                v for v, a in self._store.items()
                if metamodel in a.inputs and a.outputs
            )

    def consumers_accepting(
        self, metamodel: ArtifactVersion
    ) -> frozenset[ArtifactVersion]:
        with self._lock:
            return frozenset(
                v for v, a in self._store.items()
                if metamodel in a.inputs and not a.outputs
            )

    def versions_of(self, name: str) -> list[ArtifactVersion]:
        with self._lock:
            return sorted(
                (v for v in self._store if v.name == name),
                key=lambda v: v.revision,
            )

    def versions(self) -> list[ArtifactVersion]:
        with self._lock:
            return list(self._store)

    def history(self) -> tuple[CommitRecord, ...]:
        with self._lock:
            return tuple(self._history)
