"""
Tests for coevolution.infrastructure.repository
=================================================

What's Being Tested:
    - Version resolution (monotonic revisions, no overwrites)
    - Relationship queries, including unknown versions
    - Commit history (requested version, depth, provenance)
    - Cascade bounds (depth and commit count)
    - Payload exceptions propagate without rollback
    - Concurrent outer commits from several threads

All tests use InMemoryRepository.
"""

import threading

import pytest

from coevolution.core.builder import new_artifact, new_consumer, new_transformation
from coevolution.core.config import CoEvolutionConfig
from coevolution.core.enums import ArtifactKind
from coevolution.core.exceptions import PropagationLimitError
from coevolution.core.models import ArtifactVersion
from coevolution.infrastructure.repository import InMemoryRepository, Repository
from coevolution.orchestration.propagation import PropagationEngine


def _v(name: str, revision: int = 0) -> ArtifactVersion:
    return ArtifactVersion(name=name, revision=revision)


def _loop(metamodel):
    """Transformation with input == output that re-commits whatever it sees."""
    return (
        new_transformation("loop")
        .with_input(metamodel.version)
        .with_output(metamodel.version)
        .with_transformation(lambda version, repository: repository.get(version))
        .build()
    )


# =============================================================================
# Tests: Version Resolution
# =============================================================================
class TestVersionResolution:
    """commit() stores under the first free version."""

    def test_is_a_repository(self, repository) -> None:
        assert isinstance(repository, Repository)

    def test_first_commit_keeps_version(self, repository, metamodel) -> None:
        assert repository.commit(metamodel) == _v("microservice")
        assert repository.contains(_v("microservice"))

    def test_repeated_commits_increase_revision(self, repository, metamodel) -> None:
        versions = [repository.commit(metamodel) for _ in range(4)]
        assert [v.revision for v in versions] == [0, 1, 2, 3]

    def test_commit_never_overwrites(self, repository) -> None:
        first = new_artifact("customer").with_metamodel(_v("a")).build()
        second = new_artifact("customer").with_metamodel(_v("b")).build()
        repository.commit(first)
        repository.commit(second)
        assert repository.get(_v("customer")).metamodels == frozenset({_v("a")})
        assert repository.get(_v("customer", 1)).metamodels == frozenset({_v("b")})

    def test_stored_copy_carries_resolved_version(self, repository, metamodel) -> None:
        repository.commit(metamodel)
        resolved = repository.commit(metamodel)
        assert repository.get(resolved).version == resolved
        assert metamodel.version == _v("microservice")

    def test_explicit_free_version_is_kept(self, repository) -> None:
        artifact = new_artifact("customer").with_version(_v("customer", 5)).build()
        assert repository.commit(artifact) == _v("customer", 5)

    def test_commit_all_returns_versions_in_order(self, repository, metamodel, instance) -> None:
        assert repository.commit_all(metamodel, instance) == [
            _v("microservice"),
            _v("customer"),
        ]


# =============================================================================
# Tests: Queries
# =============================================================================
class TestQueries:
    """Relationship queries are total functions."""

    def test_unknown_version_queries(self, repository) -> None:
        unknown = _v("nothing", 3)
        assert repository.get(unknown) is None
        assert repository.contains(unknown) is False
        assert repository.metamodels_of(unknown) == frozenset()
        assert repository.inputs_of(unknown) == frozenset()
        assert repository.outputs_of(unknown) == frozenset()
        assert repository.instances_of(unknown) == frozenset()
        assert repository.transformations_accepting(unknown) == frozenset()
        assert repository.consumers_accepting(unknown) == frozenset()
        assert repository.latest("nothing") is None
        assert repository.versions_of("nothing") == []

    def test_relationship_queries(
        self, repository, metamodel, instance, recording_transformation, approving_consumer
    ) -> None:
        repository.commit_all(metamodel, instance, recording_transformation, approving_consumer)
        m = metamodel.version

        assert repository.metamodels_of(instance.version) == frozenset({m})
        assert repository.inputs_of(recording_transformation.version) == frozenset({m})
        assert repository.outputs_of(recording_transformation.version) == frozenset({_v("code")})
        assert repository.instances_of(m) == frozenset({instance.version})
        assert repository.transformations_accepting(m) == frozenset(
            {recording_transformation.version}
        )
        assert repository.consumers_accepting(m) == frozenset({approving_consumer.version})

    def test_versions_of_and_latest(self, repository, metamodel) -> None:
        for _ in range(3):
            repository.commit(metamodel)
        repository.commit(new_artifact("other").build())
        assert repository.versions_of("microservice") == [
            _v("microservice", 0),
            _v("microservice", 1),
            _v("microservice", 2),
        ]
        assert repository.latest("microservice").version == _v("microservice", 2)

    def test_count_and_versions_in_commit_order(self, repository, metamodel, instance) -> None:
        repository.commit_all(instance, metamodel)
        assert repository.count() == 2
        assert repository.versions() == [_v("customer"), _v("microservice")]


# =============================================================================
# Tests: History
# =============================================================================
class TestHistory:
    """Every commit appends a CommitRecord."""

    def test_history_records_requested_and_resolved(self, repository, metamodel) -> None:
        repository.commit(metamodel)
        repository.commit(metamodel)
        records = repository.history()
        assert [r.version for r in records] == [_v("microservice"), _v("microservice", 1)]
        assert records[1].requested_version == _v("microservice")
        assert all(r.kind == ArtifactKind.ARTIFACT for r in records)
        assert all(r.depth == 0 for r in records)

    def test_history_records_provenance_and_depth(self, repository, metamodel, instance) -> None:
        generator = (
            new_transformation("gen")
            .with_input(metamodel.version)
            .with_output(_v("code"))
            .with_transformation(
                lambda version, repo: new_artifact(f"{version.name}Code").build()
            )
            .build()
        )
        repository.commit_all(metamodel, generator, instance)
        produced = [r for r in repository.history() if r.produced_by is not None]
        assert [r.version for r in produced] == [_v("customerCode")]
        assert produced[0].produced_by == generator.version
        assert produced[0].depth == 1

    def test_history_is_a_snapshot(self, repository, metamodel) -> None:
        snapshot = repository.history()
        repository.commit(metamodel)
        assert snapshot == ()


# =============================================================================
# Tests: Cascade Bounds
# =============================================================================
class TestCascadeBounds:
    """A self-feeding transformation is stopped by PropagationLimitError."""

    def test_depth_bound(self, small_config, metamodel, instance) -> None:
        repository = InMemoryRepository(small_config)
        repository.commit_all(metamodel, instance)

        with pytest.raises(PropagationLimitError) as exc_info:
            repository.commit(_loop(metamodel))

        assert exc_info.value.limit == "max_cascade_depth"
        assert exc_info.value.error_code == "PROPAGATION_LIMIT"
        # Commits made before the bound stay stored
        assert len(repository.versions_of("customer")) == small_config.max_cascade_depth

    def test_commit_count_bound(self, metamodel, instance) -> None:
        config = CoEvolutionConfig(max_cascade_depth=50, max_cascade_commits=5)
        repository = InMemoryRepository(config)
        repository.commit_all(metamodel, instance)

        with pytest.raises(PropagationLimitError) as exc_info:
            repository.commit(_loop(metamodel))

        assert exc_info.value.limit == "max_cascade_commits"
        assert len(repository.versions_of("customer")) == 5

    def test_repository_usable_after_limit(self, small_config, metamodel, instance) -> None:
        """Depth and commit counters are reset for the next outer commit."""
        repository = InMemoryRepository(small_config)
        repository.commit_all(metamodel, instance)
        with pytest.raises(PropagationLimitError):
            repository.commit(_loop(metamodel))

        version = repository.commit(new_artifact("unrelated").build())
        assert version == _v("unrelated")
        assert repository.history()[-1].depth == 0

    def test_commit_bound_counts_per_outer_commit(self, metamodel) -> None:
        """Unrelated outer commits never add up to the cascade bound."""
        config = CoEvolutionConfig(max_cascade_commits=2)
        repository = InMemoryRepository(config)
        for _ in range(5):
            repository.commit(metamodel)
        assert repository.count() == 5


# =============================================================================
# Tests: Payload Failures
# =============================================================================
class TestPayloadFailures:
    """Payload exceptions reach the caller; nothing is rolled back."""

    def test_transformation_exception_propagates(self, repository, metamodel, instance) -> None:
        def explode(version, repo):
            raise RuntimeError(f"cannot transform {version}")

        failing = (
            new_transformation("failing")
            .with_input(metamodel.version)
            .with_output(_v("code"))
            .with_transformation(explode)
            .build()
        )
        repository.commit_all(metamodel, failing)

        with pytest.raises(RuntimeError, match="cannot transform customer@0"):
            repository.commit(instance)
        assert repository.contains(instance.version)

    def test_consumer_exception_propagates(self, repository, metamodel, instance) -> None:
        def explode(version, repo):
            raise ValueError("validator crashed")

        consumer = (
            new_consumer("crashing")
            .with_input(metamodel.version)
            .with_consumer(explode)
            .build()
        )
        repository.commit_all(metamodel, consumer)
        with pytest.raises(ValueError, match="validator crashed"):
            repository.commit(instance)


# =============================================================================
# Tests: Wiring and Concurrency
# =============================================================================
class TestWiring:

    def test_engine_is_part_of_the_interface(self) -> None:
        assert "engine" in Repository.__abstractmethods__

    def test_default_engine_created_lazily(self) -> None:
        repository = InMemoryRepository()
        assert isinstance(repository.engine, PropagationEngine)
        assert repository.engine is repository.engine

    def test_concurrent_outer_commits_get_distinct_versions(self, repository) -> None:
        artifact = new_artifact("shared").build()
        results: list[ArtifactVersion] = []
        results_lock = threading.Lock()

        def worker() -> None:
            for _ in range(25):
                version = repository.commit(artifact)
                with results_lock:
                    results.append(version)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(results)) == 100
        assert sorted(v.revision for v in results) == list(range(100))
