"""Tests for filesystem operations — paths, discovery, atomic writes, recovery."""

import os
from pathlib import Path

import pytest

from taco.infrastructure.filesystem import (
    clear_recovery,
    find_issue_files,
    load_recovery,
    resolve_issue_path,
    save_recovery,
    storage_signature,
    write_atomic,
)


class TestResolveIssuePath:
    def test_plain_id(self, tmp_path: Path) -> None:
        assert resolve_issue_path(tmp_path, "abc123") == tmp_path / "abc123"

    @pytest.mark.parametrize("issue_id", ["../escape", "sub/dir", ".index.db"])
    def test_rejects_escaping_or_reserved_names(self, tmp_path: Path, issue_id: str) -> None:
        with pytest.raises(ValueError, match="escapes"):
            resolve_issue_path(tmp_path, issue_id)


class TestFindIssueFiles:
    def test_skips_dot_files_and_directories(self, tmp_path: Path) -> None:
        (tmp_path / "bbb").write_text("{}")
        (tmp_path / "aaa").write_text("{}")
        (tmp_path / ".index.db").write_text("")
        (tmp_path / "subdir").mkdir()
        assert [p.name for p in find_issue_files(tmp_path)] == ["aaa", "bbb"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert find_issue_files(tmp_path / "nope") == []


class TestStorageSignature:
    def test_empty(self, tmp_path: Path) -> None:
        assert storage_signature(tmp_path).startswith("0:")
        assert storage_signature(tmp_path) == storage_signature(tmp_path)

    def test_changes_with_count_and_mtime(self, tmp_path: Path) -> None:
        path = tmp_path / "aaa"
        path.write_text("{}")
        os.utime(path, ns=(1_000_000_000, 1_000_000_000))
        first = storage_signature(tmp_path)
        assert first.startswith("1:")

        os.utime(path, ns=(2_000_000_000, 2_000_000_000))
        assert storage_signature(tmp_path) != first

        (tmp_path / "bbb").write_text("{}")
        assert storage_signature(tmp_path).startswith("2:")

    def test_rewrite_keeping_mtime_of_older_file(self, tmp_path: Path) -> None:
        older = tmp_path / "aaa"
        older.write_text("{\"kind\": \"Defect\"}")
        os.utime(older, ns=(1_000_000_000, 1_000_000_000))
        newer = tmp_path / "bbb"
        newer.write_text("{}")
        os.utime(newer, ns=(5_000_000_000, 5_000_000_000))
        first = storage_signature(tmp_path)

        older.write_text("{\"kind\": \"Feature Request\"}")
        os.utime(older, ns=(1_000_000_000, 1_000_000_000))
        assert storage_signature(tmp_path) != first


class TestWriteAtomic:
    def test_writes_content(self, tmp_path: Path) -> None:
        path = tmp_path / "issue"
        write_atomic(path, "hello\n")
        assert path.read_text(encoding="utf-8") == "hello\n"

    def test_replaces_existing(self, tmp_path: Path) -> None:
        path = tmp_path / "issue"
        path.write_text("old")
        write_atomic(path, "new")
        assert path.read_text() == "new"

    def test_leaves_no_temp_files(self, tmp_path: Path) -> None:
        write_atomic(tmp_path / "issue", "x")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["issue"]


class TestRecovery:
    def test_round_trip_is_verbatim(self, tmp_path: Path) -> None:
        path = tmp_path / ".taco_retry.txt"
        text = "Summary : x\n\n# comment kept\n"
        save_recovery(path, text)
        assert load_recovery(path) == text

    def test_missing(self, tmp_path: Path) -> None:
        assert load_recovery(tmp_path / ".taco_retry.txt") is None

    def test_clear(self, tmp_path: Path) -> None:
        path = tmp_path / ".taco_retry.txt"
        save_recovery(path, "x")
        clear_recovery(path)
        assert not path.exists()
        clear_recovery(path)
