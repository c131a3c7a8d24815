"""Tests for line identity resolvers."""

import pytest

from code_halflife.analysis.identity import ContentIdentityResolver, LineIdentityResolver


class TestContentIdentityResolver:
    """Tests for ContentIdentityResolver."""

    @pytest.fixture
    def resolver(self):
        return ContentIdentityResolver()

    def test_name(self, resolver):
        assert resolver.name == "content"

    def test_key_joins_path_and_content(self, resolver):
        assert resolver.resolve("file.go", "x := 1") == "file.go:x := 1"

    def test_whitespace_is_significant(self, resolver):
        assert resolver.resolve("a.py", "    pass") != resolver.resolve("a.py", "pass")

    def test_same_line_in_different_files(self, resolver):
        assert resolver.resolve("a.py", "pass") != resolver.resolve("b.py", "pass")

    @pytest.mark.parametrize("line", ["", " ", "\t", "  \t  "])
    def test_blank_lines_are_not_tracked(self, resolver, line):
        assert resolver.resolve("a.py", line) is None
        assert not resolver.is_trackable(line)

    def test_is_resolver(self, resolver):
        assert isinstance(resolver, LineIdentityResolver)

    def test_cannot_instantiate_abstract_base(self):
        with pytest.raises(TypeError):
            LineIdentityResolver()
