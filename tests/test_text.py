from transcript_extractor.text import (
    collapse_blank_lines,
    normalize_content,
    normalize_whitespace,
    trim_line_ends,
)


class TestNormalizeWhitespace:
    def test_nbsp_becomes_space(self):
        assert normalize_whitespace("a\u00a0b") == "a b"

    def test_horizontal_runs_collapse(self):
        assert normalize_whitespace("a \t\u00a0\u00a0 b") == "a b"

    def test_newlines_are_kept(self):
        assert normalize_whitespace("a\nb") == "a\nb"


class TestLineRules:
    def test_trim_line_ends(self):
        assert trim_line_ends("one  \ntwo\t\nthree") == "one\ntwo\nthree"

    def test_collapse_blank_lines(self):
        assert collapse_blank_lines("a\n\n\n\n\nb\n\n") == "a\n\nb"

    def test_single_blank_line_untouched(self):
        assert collapse_blank_lines("a\n\nb") == "a\n\nb"


class TestNormalizeContent:
    def test_empty(self):
        assert normalize_content("") == ""

    def test_strips_ends_and_collapses(self):
        assert normalize_content("\n\n  Hello\n\n\n\nWorld \u00a0\n") == "Hello\n\nWorld"

    def test_fenced_code_keeps_blank_lines(self):
        value = "Intro\n\n\n\n```\nx = 1\n\n\n\ny = 2\n```\n\n\nOutro"
        assert normalize_content(value) == "Intro\n\n```\nx = 1\n\n\n\ny = 2\n```\n\nOutro"

    def test_indented_fence_is_protected(self):
        value = "- Run:\n\n  ```\n  make\n\n\n  make test\n  ```"
        assert normalize_content(value) == value

    def test_longer_fence_is_not_closed_by_inner_backticks(self):
        value = "````\na\n```\n\n\n\nb\n````\n\n\n\nafter"
        assert normalize_content(value) == "````\na\n```\n\n\n\nb\n````\n\nafter"
