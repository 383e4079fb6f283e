"""
coevolution.ecosystem - Simulation Facade
===========================================

One Ecosystem is one simulation run: it owns a configuration, a repository
and the propagation engine wired into it. Nothing is global, so two
ecosystems never see each other's artifacts.

Architecture Context:

    ┌──────────────────────────────────────────────┐
    │              Ecosystem (Facade)              │
    │                                              │
    │   CoEvolutionConfig                          │
    │        │                                     │
    │        ├──→ PropagationEngine ──┐            │
    │        │                        ▼            │
    │        └──→ InMemoryRepository (engine=...)  │
    └──────────────────────────────────────────────┘

Usage:
    >>> from coevolution import Ecosystem
    >>> from coevolution.core.builder import new_artifact
    >>>
    >>> ecosystem = Ecosystem()
    >>> mm = new_artifact("microservice").build()
    >>> ecosystem.commit_all(mm, new_artifact("customer").with_metamodel(mm.version).build())
    >>> ecosystem.commit(mm)
    ArtifactVersion(name='microservice', revision=1)
"""

from __future__ import annotations

from typing import Optional

import structlog

from coevolution.core.config import CoEvolutionConfig
from coevolution.core.models import Artifact, ArtifactVersion, CommitRecord
from coevolution.infrastructure.repository import InMemoryRepository, Repository
from coevolution.orchestration.propagation import PropagationEngine


logger = structlog.get_logger()


class Ecosystem:
    """Facade wiring config, repository and engine for one simulation run.

    Args:
        config: Simulation configuration. Defaults to CoEvolutionConfig(),
            which reads COEVO_* environment variables.
        repository: Optional custom repository. When given, it keeps its own
            engine and ``engine`` is ignored.
        engine: Optional custom engine for the default repository.
    """

    def __init__(
        self,
        config: Optional[CoEvolutionConfig] = None,
        *,
        repository: Optional[Repository] = None,
        engine: Optional[PropagationEngine] = None,
    ) -> None:
        self._config = config or CoEvolutionConfig()
        if repository is None:
            repository = InMemoryRepository(
                self._config, engine=engine or PropagationEngine(self._config)
            )
        self._repository: Repository = repository
        self._logger = logger.bind(component="ecosystem")

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def config(self) -> CoEvolutionConfig:
        return self._config

    @property
    def repository(self) -> Repository:
        return self._repository

    @property
    def engine(self) -> PropagationEngine:
        """The engine of the repository in use."""
        return self._repository.engine

    # =========================================================================
    # Operations
    # =========================================================================

    def commit(self, artifact: Artifact) -> ArtifactVersion:
        """Commit one artifact and run its cascade to completion."""
        return self._repository.commit(artifact)

    def commit_all(self, *artifacts: Artifact) -> list[ArtifactVersion]:
        """Commit several artifacts in order, each with its full cascade."""
        self._logger.debug("committing_batch", size=len(artifacts))
        return self._repository.commit_all(*artifacts)

    def get(self, version: ArtifactVersion) -> Optional[Artifact]:
        return self._repository.get(version)

    def latest(self, name: str) -> Optional[Artifact]:
        return self._repository.latest(name)

    def history(self) -> tuple[CommitRecord, ...]:
        return self._repository.history()

    def __repr__(self) -> str:
        return (
            f"Ecosystem("
            f"artifacts={self._repository.count()}, "
            f"gate_downstream={self._config.gate_downstream})"
        )
