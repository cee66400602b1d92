"""Tests for the file storage backend."""

import pathlib as _pathlib

import dotstore.store as store


class TestFileStorage:
    """FileStorage read/write."""

    def test_missing_file(self, tmp_path: _pathlib.Path) -> None:
        """A missing file does not exist."""
        assert not store.FileStorage(tmp_path / "none.yaml").exists()

    def test_directory_is_not_a_snapshot(self, tmp_path: _pathlib.Path) -> None:
        """Only regular files count."""
        assert not store.FileStorage(tmp_path).exists()

    def test_write_creates_parents(self, tmp_path: _pathlib.Path) -> None:
        """Writing creates missing directories."""
        storage = store.FileStorage(tmp_path / "deep" / "er" / "s.yaml")
        storage.write("name: s\n")
        assert storage.exists()
        assert storage.read() == "name: s\n"

    def test_unicode(self, tmp_path: _pathlib.Path) -> None:
        """Text is stored as UTF-8."""
        storage = store.FileStorage(tmp_path / "u.yaml")
        storage.write("greeting: héllo ✓\n")
        assert (tmp_path / "u.yaml").read_bytes().decode("utf-8") == "greeting: héllo ✓\n"

    def test_satisfies_protocol(self, tmp_path: _pathlib.Path) -> None:
        """FileStorage is a Storage."""
        assert isinstance(store.FileStorage(tmp_path / "x"), store.Storage)
