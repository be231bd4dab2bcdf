"""Tests for tenet.guidelines.matcher — glob grammar, normalization, scoring."""

from __future__ import annotations

import time

import pytest

import tenet.guidelines.errors
import tenet.guidelines.matcher

matches = tenet.guidelines.matcher.matches
specificity = tenet.guidelines.matcher.specificity
normalize_path = tenet.guidelines.matcher.normalize_path


class TestNormalizePath:
    def test_backslashes_become_slashes(self) -> None:
        assert normalize_path("src\\app\\a.ts") == "src/app/a.ts"

    def test_drops_dot_and_empty_segments(self) -> None:
        assert normalize_path("./src//app/./a.ts") == "src/app/a.ts"

    def test_strips_leading_separator(self) -> None:
        assert normalize_path("/src/a.ts") == "src/a.ts"

    def test_parent_segments_collapse(self) -> None:
        assert normalize_path("src/../etc/passwd") == "etc/passwd"
        assert normalize_path("src/app/../lib/a.ts") == "src/lib/a.ts"
        assert not matches("src/**", "src/../etc/passwd")

    def test_leading_parent_kept(self) -> None:
        assert normalize_path("../../a.ts") == "../../a.ts"
        assert normalize_path("a/../../b.ts") == "../b.ts"

    def test_empty(self) -> None:
        assert tenet.guidelines.matcher.split_path("") == ()


class TestStar:
    def test_star_within_segment(self) -> None:
        assert matches("*.ts", "foo.ts")
        assert not matches("*.ts", "foo.tsx")

    def test_star_does_not_cross_separator(self) -> None:
        assert not matches("*.ts", "src/foo.ts")
        assert matches("src/app/*.ts", "src/app/foo.ts")
        assert not matches("src/app/*.ts", "src/app/sub/foo.ts")

    def test_star_matches_empty_run(self) -> None:
        assert matches("foo*.ts", "foo.ts")

    def test_multiple_stars(self) -> None:
        assert matches("*.spec.*", "user.spec.ts")
        assert not matches("*.spec.*", "user.ts")


class TestGlobstar:
    def test_matches_zero_segments(self) -> None:
        assert matches("**/*.ts", "foo.ts")

    def test_matches_many_segments(self) -> None:
        assert matches("**/*.ts", "src/app/deep/foo.ts")

    def test_in_the_middle(self) -> None:
        assert matches("src/**/*.ts", "src/foo.ts")
        assert matches("src/**/*.ts", "src/a/b/foo.ts")
        assert not matches("src/**/*.ts", "lib/a/foo.ts")

    def test_trailing_matches_everything_below(self) -> None:
        assert matches("src/**", "src/a/b.c")
        assert matches("src/**", "src")

    def test_compound_extension(self) -> None:
        assert matches("**/*.component.html", "app/user.component.html")
        assert not matches("**/*.component.html", "app/user.html")
        assert matches("**/*.html", "app/user.component.html")

    def test_many_globstars_on_deep_path_is_fast(self) -> None:
        pattern = "**/a/**/a/**/a/**/a/**/a/**/b"
        deep = "a/" * 40 + "c"
        start = time.monotonic()
        assert not matches(pattern, deep)
        assert matches(pattern, "a/" * 40 + "b")
        assert time.monotonic() - start < 1.0

    def test_glued_globstar_rejected(self) -> None:
        with pytest.raises(tenet.guidelines.errors.InvalidPatternError):
            tenet.guidelines.matcher.compile_pattern("src/a**")


class TestQuestionMarkAndClasses:
    def test_question_mark_is_one_char(self) -> None:
        assert matches("?.py", "a.py")
        assert not matches("?.py", "ab.py")

    def test_question_mark_never_matches_separator(self) -> None:
        assert not matches("a?b", "a/b")

    def test_character_set(self) -> None:
        assert matches("[abc].ts", "a.ts")
        assert not matches("[abc].ts", "d.ts")

    def test_character_range(self) -> None:
        assert matches("v[0-9].md", "v7.md")
        assert not matches("v[0-9].md", "vx.md")

    def test_negated_class(self) -> None:
        assert matches("[!a].ts", "b.ts")
        assert not matches("[!a].ts", "a.ts")
        assert matches("[^a].ts", "b.ts")

    def test_literal_bracket_first_in_class(self) -> None:
        assert matches("[]]x", "]x")


class TestBracesAndEscapes:
    def test_brace_alternatives(self) -> None:
        assert matches("**/*.{ts,tsx}", "src/a.ts")
        assert matches("**/*.{ts,tsx}", "src/a.tsx")
        assert not matches("**/*.{ts,tsx}", "src/a.js")

    def test_brace_across_directories(self) -> None:
        assert matches("{src,lib}/*.py", "lib/a.py")
        assert not matches("{src,lib}/*.py", "test/a.py")

    def test_escaped_star_is_literal(self) -> None:
        assert matches("\\*.md", "*.md")
        assert not matches("\\*.md", "a.md")


class TestPathHandling:
    def test_case_sensitive(self) -> None:
        assert not matches("**/*.TS", "a.ts")

    def test_windows_style_path(self) -> None:
        assert matches("src/app/*.ts", "src\\app\\foo.ts")

    def test_leading_dot_and_slash(self) -> None:
        assert matches("src/app/*.ts", "./src/app/foo.ts")
        assert matches("src/app/*.ts", "/src/app/foo.ts")

    def test_anchored_on_whole_path(self) -> None:
        assert not matches("app/*.ts", "src/app/foo.ts")


class TestEmptyPattern:
    def test_matches_nothing(self) -> None:
        assert not matches("", "foo.ts")
        assert not matches("", "")
        assert not matches("   ", "foo.ts")


class TestMalformed:
    @pytest.mark.parametrize(
        "pattern",
        ["[unclosed", "a{b", "a}b", "a]b", "trailing\\", "{a,{b}}", "[z-a].ts"],
    )
    def test_rejected_at_compile(self, pattern: str) -> None:
        with pytest.raises(tenet.guidelines.errors.InvalidPatternError) as excinfo:
            tenet.guidelines.matcher.compile_pattern(pattern)
        assert excinfo.value.pattern == pattern


class TestSpecificity:
    def test_documented_examples(self) -> None:
        assert specificity("**/*.ts") == 0
        assert specificity("src/app/*.ts") == 2

    def test_compound_extension_bonus(self) -> None:
        assert specificity("**/*.component.html") == 1
        assert specificity("**/*.html") == 0
        assert specificity("**/*.spec.component.ts") == 2
        assert specificity("**/*.component.html") > specificity("**/*.html")

    def test_literal_path(self) -> None:
        assert specificity("src/app/main.ts") == 3

    def test_globstar_contributes_nothing(self) -> None:
        assert specificity("**") == 0
        assert specificity("src/**/*.ts") == 1

    def test_braces_take_minimum(self) -> None:
        assert specificity("{src/app,lib}/*.ts") == 1

    def test_match_specificity_uses_matching_alternative(self) -> None:
        compiled = tenet.guidelines.matcher.compile_pattern(
            "{src/app/*.ts,**/*.js}"
        )
        split = tenet.guidelines.matcher.split_path
        assert compiled.specificity == 0
        assert compiled.match_specificity(split("src/app/foo.ts")) == 2
        assert compiled.match_specificity(split("lib/foo.js")) == 0
        assert compiled.match_specificity(split("lib/foo.ts")) is None

    def test_escaped_wildcard_counts_as_literal(self) -> None:
        assert specificity("docs/\\*.md") == 2
