import pytest

from tests.helpers.html import element, parse
from transcript_extractor.markdown import SENTINEL_OPEN, html_to_markdown, render


class TestBlocks:
    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_heading_levels(self, level):
        node = element(f"<h{level}>Title</h{level}>", f"h{level}")
        assert render(node) == "#" * level + " Title"

    def test_heading_and_paragraphs(self):
        node = element(
            "<div><h2>Chapter 2: Ghosts and Gears</h2>"
            "<p>The return of the ghost ship.</p>"
            "<p>The airlock hissed open.</p></div>",
            "div",
        )
        assert render(node) == (
            "## Chapter 2: Ghosts and Gears\n\n"
            "The return of the ghost ship.\n\n"
            "The airlock hissed open."
        )

    def test_blank_lines_collapse_to_one(self):
        node = element("<div><p>Top</p><div></div><p></p><br><br><br><br><p>Bottom</p></div>", "div")
        assert render(node) == "Top\n\nBottom"

    def test_blockquote(self):
        node = element("<blockquote><p>Quoted line</p><p>Second</p></blockquote>", "blockquote")
        assert render(node) == "> Quoted line\n>\n> Second"

    def test_nested_blockquote(self):
        node = element("<blockquote><p>Outer</p><blockquote><p>Inner</p></blockquote></blockquote>", "blockquote")
        assert render(node) == "> Outer\n>\n> > Inner"

    def test_line_break_and_rule(self):
        assert render(element("<p>one<br>two</p>", "p")) == "one\ntwo"
        assert render(element("<div><p>a</p><hr><p>b</p></div>", "div")) == "a\n\n---\n\nb"

    def test_table_with_header_row(self):
        node = element(
            "<table><tr><th>Name</th><th>Age</th></tr><tr><td>Ann</td><td>31</td></tr></table>",
            "table",
        )
        assert render(node) == "| Name | Age |\n| --- | --- |\n| Ann | 31 |"


class TestLists:
    def test_unordered_list_with_formatting(self):
        node = element(
            "<ul><li>First item</li><li>Second item</li><li><strong>Bold detail</strong></li></ul>",
            "ul",
        )
        assert render(node) == "- First item\n- Second item\n- **Bold detail**"

    def test_ordered_list_counts_its_own_items(self):
        node = element("<ol><li>One<ol><li>Inner a</li><li>Inner b</li></ol></li><li>Two</li></ol>", "ol")
        assert render(node) == "1. One\n  1. Inner a\n  2. Inner b\n2. Two"

    def test_nesting_indents_two_spaces_per_level(self):
        node = element("<ul><li>A<ul><li>B<ul><li>C</li></ul></li></ul></li></ul>", "ul")
        assert render(node) == "- A\n  - B\n    - C"

    def test_separate_lists_restart_numbering(self):
        node = element("<div><ol><li>a</li><li>b</li></ol><p>mid</p><ol><li>c</li></ol></div>", "div")
        assert render(node) == "1. a\n2. b\n\nmid\n\n1. c"

    def test_numbering_restarts_per_render_call(self):
        node = element("<ol><li>a</li><li>b</li></ol>", "ol")
        assert render(node) == render(node) == "1. a\n2. b"

    def test_empty_bullet_is_dropped(self):
        node = element("<ul><li>a</li><li> </li><li>b</li></ul>", "ul")
        assert render(node) == "- a\n- b"

    def test_empty_numbered_item_keeps_its_number(self):
        node = element("<ol><li>a</li><li></li><li>c</li></ol>", "ol")
        assert render(node) == "1. a\n2.\n3. c"


class TestCode:
    def test_code_block_keeps_blank_lines(self):
        node = element("<div><p>Before</p><pre>line one\n\n\n\nline five</pre><p>After</p></div>", "div")
        result = render(node)
        assert result == "Before\n\n```\nline one\n\n\n\nline five\n```\n\nAfter"
        assert SENTINEL_OPEN not in result

    def test_language_from_class(self):
        node = element('<pre><code class="language-python">print(1)</code></pre>', "pre")
        assert render(node) == "```python\nprint(1)\n```"

    def test_code_whitespace_is_verbatim(self):
        node = element("<pre>a&nbsp;  b\t\tc</pre>", "pre")
        assert render(node) == "```\na\u00a0  b\t\tc\n```"

    def test_inline_code(self):
        assert render(element("<p>Use <code>  git   status </code> now</p>", "p")) == "Use `git status` now"

    def test_code_block_inside_list_item(self):
        node = element("<ul><li>Run:<pre>make\n\nmake test</pre></li></ul>", "ul")
        assert render(node) == "- Run:\n\n  ```\n  make\n\n  make test\n  ```"

    def test_empty_pre_is_dropped(self):
        assert render(element("<div><p>x</p><pre>\n\n</pre></div>", "div")) == "x"

    def test_fence_outruns_backticks_in_code(self):
        node = element("<pre>x = 1\n```\ny = 2</pre>", "pre")
        assert render(node) == "````\nx = 1\n```\ny = 2\n````"


class TestInline:
    def test_link(self):
        node = element('<a href="https://chat.deepseek.com">DeepSeek</a>', "a")
        assert render(node) == "[DeepSeek](https://chat.deepseek.com)"

    def test_link_in_sentence(self):
        node = element('<p>Visit <a href="https://chat.deepseek.com">DeepSeek</a> for more details.</p>', "p")
        assert render(node) == "Visit [DeepSeek](https://chat.deepseek.com) for more details."

    def test_link_without_text_uses_href(self):
        node = element('<a href="https://x.test/a"></a>', "a")
        assert render(node) == "[https://x.test/a](https://x.test/a)"

    def test_link_without_href_is_plain_text(self):
        assert render(element("<p>see <a>plain</a></p>", "p")) == "see plain"
        assert render(element("<p>before<a></a>after</p>", "p")) == "beforeafter"

    def test_image(self):
        assert render(element('<img src="/cat.png" alt="A cat">', "img")) == "![A cat](/cat.png)"
        assert render(element('<img alt="Only alt">', "img")) == "Only alt"

    def test_emphasis(self):
        assert render(element("<p><em>soft</em> and <b>hard</b></p>", "p")) == "*soft* and **hard**"

    def test_empty_emphasis_is_dropped(self):
        assert render(element("<p><strong> </strong>x</p>", "p")) == "x"

    def test_whitespace_normalized(self):
        assert render(element("<p>a&nbsp;&nbsp;b \t c</p>", "p")) == "a b c"


class TestTraversal:
    def test_none_renders_empty(self):
        assert render(None) == ""

    def test_unknown_tags_pass_through(self):
        node = element("<p>Hello <custom-tag>inner <em>world</em></custom-tag></p>", "p")
        assert render(node) == "Hello inner *world*"

    def test_comments_and_scripts_are_skipped(self):
        assert render(element("<p>Visible<!-- hidden --></p>", "p")) == "Visible"
        assert render(element("<div><script>var x = 1;</script><p>Shown</p></div>", "div")) == "Shown"

    def test_exclude_skips_subtree_without_touching_it(self):
        root = element('<div><p>Keep</p><div class="x"><p>Drop</p></div></div>', "div")
        dropped = root.select_one(".x")
        assert render(root, exclude=[dropped]) == "Keep"
        assert dropped.parent is root
        assert render(root) == "Keep\n\nDrop"

    def test_render_does_not_modify_document(self):
        soup = parse("<div><ul><li>a<pre>x</pre></li></ul><p>b</p></div>")
        before = str(soup)
        render(soup)
        assert str(soup) == before


class TestHtmlToMarkdown:
    def test_fragment(self):
        assert html_to_markdown("<h1>Title</h1><p>Body</p>") == "# Title\n\nBody"

    def test_empty(self):
        assert html_to_markdown("") == ""
