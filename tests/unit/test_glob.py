"""Unit tests for glob pattern matching."""

import pytest

from reviewthor.utils.glob import glob_to_regex, matches_any, matches_pattern


class TestLiterals:
    """Tests for literal characters."""

    def test_exact_match(self) -> None:
        """Test that a literal pattern matches only itself."""
        assert matches_pattern("src/index.js", "src/index.js")
        assert not matches_pattern("src/index.jsx", "src/index.js")
        assert not matches_pattern("lib/src/index.js", "src/index.js")

    @pytest.mark.parametrize("pattern", ["a+b.js", "a(b).js", "a$b.js", "a^b.js", "a{b}.js"])
    def test_regex_metacharacters_are_literal(self, pattern: str) -> None:
        """Test that regex syntax in a pattern has no special meaning."""
        assert matches_pattern(pattern, pattern)

    def test_dot_is_literal(self) -> None:
        """Test that a dot does not match any character."""
        assert not matches_pattern("indexXjs", "index.js")


class TestSingleStar:
    """Tests for ``*``."""

    def test_matches_within_segment(self) -> None:
        """Test that a star matches any run in one segment."""
        assert matches_pattern("index.js", "*.js")
        assert matches_pattern(".js", "*.js")
        assert matches_pattern("src/app.test.js", "src/*.test.js")

    def test_does_not_cross_slash(self) -> None:
        """Test that a star stops at directory separators."""
        assert not matches_pattern("src/index.js", "*.js")
        assert not matches_pattern("src/a/b.js", "src/*.js")


class TestDoubleStar:
    """Tests for ``**``."""

    def test_matches_across_segments(self) -> None:
        """Test that a double star crosses directories."""
        assert matches_pattern("src/a/b/c.js", "src/**.js")
        assert matches_pattern("anything/at/all", "**")

    def test_leading_double_star_slash_matches_zero_directories(self) -> None:
        """Test ``**/`` at the root and at depth."""
        assert matches_pattern("app.min.js", "**/*.min.js")
        assert matches_pattern("public/js/app.min.js", "**/*.min.js")
        assert not matches_pattern("app.js", "**/*.min.js")

    def test_inner_double_star_slash(self) -> None:
        """Test ``**/`` in the middle of a pattern."""
        assert matches_pattern("src/index.test.js", "src/**/*.test.js")
        assert matches_pattern("src/a/b/index.test.js", "src/**/*.test.js")
        assert not matches_pattern("lib/index.test.js", "src/**/*.test.js")

    def test_trailing_double_star_matches_directory_contents(self) -> None:
        """Test ``dir/**``."""
        assert matches_pattern("test/index.test.js", "test/**")
        assert matches_pattern("test/a/b/c.js", "test/**")
        assert matches_pattern("test", "test/**")

    def test_trailing_double_star_needs_separator(self) -> None:
        """Test that ``dir/**`` does not match a sibling with the same prefix."""
        assert not matches_pattern("testing/index.js", "test/**")
        assert not matches_pattern("src/test/index.js", "test/**")


class TestQuestionMark:
    """Tests for ``?``."""

    def test_matches_one_character(self) -> None:
        """Test that ``?`` matches exactly one character."""
        assert matches_pattern("a1.js", "a?.js")
        assert not matches_pattern("a.js", "a?.js")
        assert not matches_pattern("a12.js", "a?.js")

    def test_does_not_match_slash(self) -> None:
        """Test that ``?`` never matches a separator."""
        assert not matches_pattern("a/.js", "a?.js")


class TestCharacterClass:
    """Tests for ``[...]``."""

    def test_set(self) -> None:
        """Test a character set."""
        assert matches_pattern("file1.js", "file[123].js")
        assert not matches_pattern("file4.js", "file[123].js")

    def test_range(self) -> None:
        """Test a character range."""
        assert matches_pattern("vb.js", "v[a-c].js")
        assert not matches_pattern("vd.js", "v[a-c].js")

    def test_negated(self) -> None:
        """Test ``[!...]``."""
        assert matches_pattern("file4.js", "file[!123].js")
        assert not matches_pattern("file1.js", "file[!123].js")

    def test_unterminated_class_is_literal(self) -> None:
        """Test that a lone bracket matches itself."""
        assert matches_pattern("a[b.js", "a[b.js")
        assert not matches_pattern("ab.js", "a[b.js")

    def test_empty_class_is_literal(self) -> None:
        """Test that ``[]`` matches itself."""
        assert matches_pattern("a[].js", "a[].js")

    def test_caret_is_literal_inside_class(self) -> None:
        """Test that ``^`` does not negate a class."""
        assert matches_pattern("a^.js", "a[^b].js")
        assert matches_pattern("ab.js", "a[^b].js")
        assert not matches_pattern("ac.js", "a[^b].js")


class TestMatchesAny:
    """Tests for matching against several patterns."""

    def test_any(self) -> None:
        """Test that one matching pattern is enough."""
        patterns = ["node_modules/**", "**/*.min.js"]

        assert matches_any("node_modules/lib/index.js", patterns)
        assert matches_any("dist/app.min.js", patterns)
        assert not matches_any("src/app.js", patterns)

    def test_no_patterns(self) -> None:
        """Test that an empty pattern list matches nothing."""
        assert not matches_any("src/app.js", [])


class TestGlobToRegex:
    """Tests for the compiled form."""

    def test_is_anchored(self) -> None:
        """Test that the regex matches the whole path."""
        regex = glob_to_regex("*.js")

        assert regex.match("a.js")
        assert not regex.match("a.jsx")

    def test_is_cached(self) -> None:
        """Test that compiling the same pattern twice returns the same object."""
        assert glob_to_regex("src/**") is glob_to_regex("src/**")
