"""Tests for the object store backends."""

from __future__ import annotations

from pathlib import Path

import pytest

from bobhost.core.errors import (
    InvalidInputError,
    NotFoundError,
    ObjectExistsError,
    ObjectNotFoundError,
    StorageError,
)
from bobhost.core.object_store import (
    LocalObjectStore,
    MemoryObjectStore,
    ObjectStore,
    validate_key,
)


@pytest.fixture(params=["local", "memory"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> ObjectStore:
    if request.param == "local":
        return LocalObjectStore(tmp_path / "objects")
    return MemoryObjectStore()


class TestValidateKey:
    def test_valid(self):
        assert validate_key("abc/css/site.css") == "abc/css/site.css"

    @pytest.mark.parametrize("key", ["", "/abs", "a/../b", "a//b", "./a", "a/"])
    def test_invalid(self, key: str):
        with pytest.raises(InvalidInputError):
            validate_key(key)


class TestObjectStoreContract:
    def test_satisfies_protocol(self, store: ObjectStore):
        assert isinstance(store, ObjectStore)

    def test_put_get(self, store: ObjectStore):
        store.put("h/index.html", b"<html></html>", "text/html")
        assert store.get("h/index.html") == b"<html></html>"

    def test_put_existing_raises(self, store: ObjectStore):
        store.put("h/a.css", b"1", "text/css")
        with pytest.raises(ObjectExistsError):
            store.put("h/a.css", b"2", "text/css")
        assert store.get("h/a.css") == b"1"

    def test_object_exists_is_a_storage_error(self):
        assert issubclass(ObjectExistsError, StorageError)

    def test_get_missing(self, store: ObjectStore):
        with pytest.raises(ObjectNotFoundError):
            store.get("h/missing.html")

    def test_missing_is_not_found(self):
        assert issubclass(ObjectNotFoundError, NotFoundError)

    def test_list_keys(self, store: ObjectStore):
        store.put("h1/index.html", b"a", "text/html")
        store.put("h1/css/a.css", b"b", "text/css")
        store.put("h2/index.html", b"c", "text/html")
        assert store.list_keys("h1") == ["h1/css/a.css", "h1/index.html"]
        assert store.list_keys("h3") == []

    def test_remove_prefix(self, store: ObjectStore):
        store.put("h1/index.html", b"a", "text/html")
        store.put("h1/css/a.css", b"b", "text/css")
        store.put("h2/index.html", b"c", "text/html")
        assert store.remove("h1") == 2
        assert store.list_keys("h1") == []
        assert store.get("h2/index.html") == b"c"

    def test_remove_does_not_match_longer_prefix(self, store: ObjectStore):
        store.put("h1/index.html", b"a", "text/html")
        store.put("h10/index.html", b"b", "text/html")
        store.remove("h1")
        assert store.get("h10/index.html") == b"b"

    def test_remove_missing_prefix(self, store: ObjectStore):
        assert store.remove("nothing") == 0

    def test_content_type_recorded(self, store: ObjectStore):
        store.put("h/logo.png", b"\x89PNG", "image/png")
        assert store.content_type("h/logo.png") == "image/png"
        assert store.content_type("h/other.png") is None


class TestLocalObjectStore:
    def test_layout(self, tmp_path: Path):
        store = LocalObjectStore(tmp_path)
        store.put("h/css/a.css", b"p {}", "text/css")
        assert (tmp_path / "data" / "h" / "css" / "a.css").read_bytes() == b"p {}"
        assert (tmp_path / "meta" / "h" / "css" / "a.css.json").exists()

    def test_rejects_escaping_key(self, tmp_path: Path):
        store = LocalObjectStore(tmp_path / "objects")
        with pytest.raises(InvalidInputError):
            store.put("../outside.txt", b"x", "text/plain")
        assert not (tmp_path / "outside.txt").exists()


class TestMemoryObjectStore:
    def test_put_count_includes_failed_attempts(self):
        store = MemoryObjectStore()
        store.put("h/a", b"1", "text/plain")
        with pytest.raises(ObjectExistsError):
            store.put("h/a", b"1", "text/plain")
        assert store.put_count == 2
        assert len(store) == 1
