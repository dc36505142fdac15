"""Tests for local folder helpers."""

import logging

import pytest

from albumsync.local_store import (
    delete_local_file,
    ensure_folder,
    file_stem,
    find_orphans,
    list_local_files,
)


@pytest.mark.parametrize(
    "name, stem",
    [
        ("a1.png", "a1"),
        ("a1", "a1"),
        ("a1.tar.gz", "a1"),
        ("A1.PNG", "A1"),
    ],
)
def test_file_stem(name, stem):
    assert file_stem(name) == stem


def test_ensure_folder_creates_parents(tmp_path):
    target = tmp_path / "a" / "b" / "c"

    ensure_folder(target)
    ensure_folder(target)

    assert target.is_dir()


def test_list_local_files_skips_directories(local_folder):
    (local_folder / "b.jpg").write_bytes(b"b")
    (local_folder / "a.png").write_bytes(b"a")
    (local_folder / "sub").mkdir()
    (local_folder / "sub" / "c.jpg").write_bytes(b"c")

    assert [p.name for p in list_local_files(local_folder)] == ["a.png", "b.jpg"]


def test_find_orphans_any_extension(local_folder):
    for name in ["a1.png", "orphan.png", "orphan2", "A1.png", "notes.txt"]:
        (local_folder / name).write_bytes(b"x")

    orphans = find_orphans(local_folder, {"a1"})

    assert sorted(p.name for p in orphans) == ["A1.png", "notes.txt", "orphan.png", "orphan2"]


def test_delete_local_file(local_folder, caplog):
    path = local_folder / "orphan.png"
    path.write_bytes(b"x")

    with caplog.at_level(logging.INFO):
        assert delete_local_file(path) is True

    assert not path.exists()
    assert "Deleted orphaned local file" in caplog.text


def test_delete_local_file_failure_is_logged(local_folder, caplog):
    path = local_folder / "gone.png"

    with caplog.at_level(logging.INFO):
        assert delete_local_file(path) is False

    assert "Failed to delete orphaned local file" in caplog.text
