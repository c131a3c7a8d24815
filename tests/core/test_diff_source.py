"""Tests for diff parsing and file pattern matching."""

from datetime import datetime, timezone

import pytest

from code_halflife.core.diff_source import (
    ChunkKind,
    CommitInfo,
    DiffChunk,
    FileDiff,
    FileEntry,
    matches_pattern,
    parse_unified_diff,
)


class TestParseUnifiedDiff:
    """Tests for parse_unified_diff."""

    def test_single_hunk(self):
        diff = (
            "@@ -1,4 +1,4 @@\n"
            " import os\n"
            " \n"
            " def a():\n"
            "-    return 1\n"
            "+    return 2\n"
        )

        chunks = parse_unified_diff(diff)

        assert [c.kind for c in chunks] == [
            ChunkKind.UNCHANGED,
            ChunkKind.DELETED,
            ChunkKind.ADDED,
        ]
        assert chunks[0].lines == ["import os", "", "def a():"]
        assert chunks[1].lines == ["    return 1"]
        assert chunks[2].lines == ["    return 2"]
        assert all(c.hunk == 0 for c in chunks)

    def test_new_hunk_starts_new_chunk(self):
        diff = "@@ -1 +1 @@\n+a\n@@ -10 +10 @@\n+b\n"

        chunks = parse_unified_diff(diff)

        assert len(chunks) == 2
        assert [c.hunk for c in chunks] == [0, 1]
        assert [c.lines for c in chunks] == [["a"], ["b"]]

    def test_headers_and_markers_are_ignored(self):
        diff = (
            "diff --git a/f b/f\n"
            "--- a/f\n"
            "+++ b/f\n"
            "@@ -1 +1 @@\n"
            "-old\n"
            "\\ No newline at end of file\n"
            "+new\n"
            "\\ No newline at end of file\n"
        )

        chunks = parse_unified_diff(diff)

        assert [(c.kind, c.lines) for c in chunks] == [
            (ChunkKind.DELETED, ["old"]),
            (ChunkKind.ADDED, ["new"]),
        ]

    def test_hunk_header_with_context(self):
        diff = "@@ -3,2 +3,3 @@ def main():\n x\n+y\n"

        chunks = parse_unified_diff(diff)

        assert [c.kind for c in chunks] == [ChunkKind.UNCHANGED, ChunkKind.ADDED]

    def test_empty_diff(self):
        assert parse_unified_diff("") == []

    def test_chunk_size(self):
        chunk = DiffChunk(ChunkKind.ADDED, ["abc", "", "de"])
        assert chunk.size == 5


class TestMatchesPattern:
    """Tests for matches_pattern."""

    @pytest.mark.parametrize(
        "path,pattern,expected",
        [
            ("src/main.go", "*", True),
            ("src/main.go", "*.go", True),
            ("src/main.go", "*.py", False),
            ("main.go.orig", "*.go", False),
            ("src/test_main.py", "test_*.py", True),
            ("test_dir/main.py", "test_*.py", False),
            ("Makefile", "Makefile", True),
        ],
    )
    def test_patterns(self, path, pattern, expected):
        assert matches_pattern(path, pattern) is expected


class TestValueTypes:
    def test_short_id(self):
        commit = CommitInfo("0123456789abcdef", datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert commit.short_id == "0123456"

    def test_file_entry_lines(self):
        entry = FileEntry("a.py", "x\ny\n")
        assert entry.lines == ["x", "y", ""]

    def test_chunks_of(self):
        diff = FileDiff(
            "a.py",
            [
                DiffChunk(ChunkKind.ADDED, ["x"]),
                DiffChunk(ChunkKind.UNCHANGED, ["y"]),
                DiffChunk(ChunkKind.ADDED, ["z"], hunk=1),
            ],
        )
        assert [c.lines for c in diff.chunks_of(ChunkKind.ADDED)] == [["x"], ["z"]]
