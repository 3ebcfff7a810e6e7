"""Tests for the artifact repository — dedup, delete, reference counts."""

from __future__ import annotations

from bobhost.core.artifact_repository import ArtifactRepository
from bobhost.core.deployment_registry import DeploymentRegistry

HASH_A = "a" * 64
HASH_B = "b" * 64


class TestInsert:
    def test_insert_new(self, repository: ArtifactRepository):
        outcome = repository.insert(HASH_A, 1024, 3)
        assert outcome.created is True
        assert outcome.artifact.hash == HASH_A
        assert outcome.artifact.file_count == 3

    def test_insert_duplicate_returns_existing(self, repository: ArtifactRepository):
        first = repository.insert(HASH_A, 1024, 3)
        second = repository.insert(HASH_A, 9999, 99)
        assert second.created is False
        assert second.artifact.size == 1024
        assert second.artifact.file_count == 3
        assert second.artifact.created_at == first.artifact.created_at

    def test_get_and_exists(self, repository: ArtifactRepository):
        assert repository.get(HASH_A) is None
        assert repository.exists(HASH_A) is False
        repository.insert(HASH_A, 10, 1)
        assert repository.get(HASH_A).size == 10
        assert repository.exists(HASH_A) is True

    def test_list_all(self, repository: ArtifactRepository):
        repository.insert(HASH_A, 10, 1)
        repository.insert(HASH_B, 20, 2)
        assert {a.hash for a in repository.list_all()} == {HASH_A, HASH_B}


class TestDelete:
    def test_delete(self, repository: ArtifactRepository):
        repository.insert(HASH_A, 10, 1)
        assert repository.delete(HASH_A) is True
        assert repository.get(HASH_A) is None

    def test_delete_missing(self, repository: ArtifactRepository):
        assert repository.delete(HASH_A) is False

    def test_delete_cascades_to_deployments(
        self,
        repository: ArtifactRepository,
        registry: DeploymentRegistry,
        owner: str,
    ):
        repository.insert(HASH_A, 10, 1)
        deployment = registry.bind("cascade-me", HASH_A, owner)
        repository.delete(HASH_A)
        assert registry.count_for_owner(owner) == 0
        assert registry.get_ready_by_name(deployment.name) is None


class TestCountReferences:
    def test_counts_live_deployments(
        self,
        repository: ArtifactRepository,
        registry: DeploymentRegistry,
        owner: str,
    ):
        repository.insert(HASH_A, 10, 1)
        first = registry.bind("site-one", HASH_A, owner)
        registry.bind("site-two", HASH_A, owner)
        assert repository.count_references(HASH_A) == 2
        assert repository.count_references(HASH_A, exclude_deployment_id=first.id) == 1

    def test_ignores_binned_deployments(
        self,
        repository: ArtifactRepository,
        registry: DeploymentRegistry,
        owner: str,
    ):
        repository.insert(HASH_A, 10, 1)
        deployment = registry.bind("site-one", HASH_A, owner)
        registry.soft_delete(deployment.id, owner)
        assert repository.count_references(HASH_A) == 0

    def test_counts_across_owners(
        self,
        repository: ArtifactRepository,
        registry: DeploymentRegistry,
        owner: str,
    ):
        repository.insert(HASH_A, 10, 1)
        registry.bind("mine", HASH_A, owner)
        registry.bind("theirs", HASH_A, "user-2")
        assert repository.count_references(HASH_A) == 2
