"""Tests for the extraction engine: locator, renderer, normalizer, extract()."""

import pytest
from web2markdown.conversion import (
    ContentLocator,
    MarkdownRenderer,
    PageExtractor,
    RenderState,
    extract,
    normalize_markdown,
    resolve_reference,
)
from web2markdown.dom import ElementNode, TextNode, find_first, parse_html, text_content
from web2markdown.errors import NoContentFound, SelectorError, UnresolvableReference
from web2markdown.models import ExtractionConfig

BASE_URL = "https://x.com/dir/"


def render_body(body: str, url: str = BASE_URL, include_images: bool = True) -> str:
    """Extract markdown from a document with the given body markup."""
    root = parse_html(f"<html><head><title>T</title></head><body>{body}</body></html>")
    return extract(root, ExtractionConfig(include_images=include_images), url=url).content


class TestResolveReference:
    """Tests for URL resolution."""

    def test_resolves_root_relative(self):
        """Test resolution against the page URL."""
        assert resolve_reference("/p", BASE_URL) == "https://x.com/p"

    def test_resolves_document_relative(self):
        """Test relative path resolution."""
        assert resolve_reference("page.html", BASE_URL) == "https://x.com/dir/page.html"

    def test_protocol_relative(self):
        """Test protocol-relative references pick up the base scheme."""
        assert resolve_reference("//cdn.x.com/a.png", BASE_URL) == "https://cdn.x.com/a.png"

    @pytest.mark.parametrize(
        "reference",
        ["#section", "mailto:me@x.com", "https://other.com/a", "data:image/png;base64,AAAA"],
    )
    def test_leaves_passthrough_references(self, reference):
        """Test fragments, mail links and absolute URLs are untouched."""
        assert resolve_reference(reference, BASE_URL) == reference

    def test_relative_without_base_is_unresolvable(self):
        """Test relative references need an absolute base."""
        with pytest.raises(UnresolvableReference):
            resolve_reference("/p", "")

    def test_invalid_url_is_unresolvable(self):
        """Test unparsable URLs."""
        with pytest.raises(UnresolvableReference):
            resolve_reference("http://[::1", BASE_URL)

    def test_script_url_is_unresolvable(self):
        """Test javascript: references."""
        with pytest.raises(UnresolvableReference):
            resolve_reference("javascript:void(0)", BASE_URL)

    def test_file_base_url(self):
        """Test resolution against a local file URL."""
        assert resolve_reference("img/a.png", "file:///tmp/page.html") == "file:///tmp/img/a.png"


class TestContentLocator:
    """Tests for ContentLocator."""

    def test_prefers_main_over_article(self):
        """Test selector priority order."""
        root = parse_html("<html><body><article>Article</article><main>Main</main></body></html>")

        located = ContentLocator().locate(root)

        assert located.tag == "main"

    def test_falls_back_to_body(self):
        """Test body fallback when no content selector matches."""
        root = parse_html("<html><body><div>Body text</div></body></html>")

        located = ContentLocator().locate(root)

        assert located.tag == "body"
        assert "Body text" in text_content(located)

    def test_no_body_raises(self):
        """Test NoContentFound when there is no body."""
        root = ElementNode("#document", children=(ElementNode("div", children=(TextNode("x"),)),))

        with pytest.raises(NoContentFound):
            ContentLocator().locate(root)

    def test_prunes_deny_list_and_boilerplate(self):
        """Test boilerplate removal at any depth."""
        root = parse_html(
            """<html><body><main>
                <div><div><script>var secret = 1;</script></div></div>
                <div class="sidebar">Side</div>
                <div role="navigation">Crumbs</div>
                <p>Keep</p>
            </main></body></html>"""
        )

        text = text_content(ContentLocator().locate(root))

        assert "secret" not in text
        assert "Side" not in text
        assert "Crumbs" not in text
        assert "Keep" in text

    def test_boilerplate_removed_before_selection(self):
        """Test a content candidate inside boilerplate is never selected."""
        root = parse_html("<html><body><aside><article>Promo</article></aside><p>Body</p></body></html>")

        located = ContentLocator().locate(root)

        assert located.tag == "body"
        assert "Promo" not in text_content(located)

    def test_original_tree_is_untouched(self):
        """Test that locating works on a copy."""
        root = parse_html("<html><body><main><script>x()</script><p>A</p></main></body></html>")

        ContentLocator().locate(root)

        assert find_first(root, lambda element: element.tag == "script") is not None

    def test_extra_remove_selectors(self):
        """Test configurable boilerplate selectors."""
        root = parse_html('<html><body><div class="cookie-banner">Cookies</div><p>Text</p></body></html>')

        located = ContentLocator(remove_selectors=[".cookie-banner"]).locate(root)

        assert "Cookies" not in text_content(located)

    def test_custom_content_selectors(self):
        """Test replacing the content selector list."""
        root = parse_html('<html><body><main>Main</main><div id="docs">Docs</div></body></html>')

        located = ContentLocator(content_selectors=["#docs"]).locate(root)

        assert text_content(located) == "Docs"

    def test_invalid_selector_raises(self):
        """Test bad selectors fail at construction."""
        with pytest.raises(SelectorError):
            ContentLocator(remove_selectors=["div > p"])


class TestMarkdownRenderer:
    """Tests for the renderer rules, through extract()."""

    def test_heading_surrounded_by_blank_lines(self):
        """Test heading fidelity."""
        result = render_body("<p>Before</p><h2>Title</h2><p>After</p>")

        assert result == "Before\n\n## Title\n\nAfter"

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_heading_levels(self, level):
        """Test all heading levels."""
        assert render_body(f"<h{level}>Head</h{level}>") == f"{'#' * level} Head"

    def test_unordered_list(self):
        """Test list rendering."""
        assert render_body("<ul><li>A</li><li>B</li></ul>") == "- A\n- B"

    def test_ordered_list(self):
        """Test ordered list markers."""
        assert render_body("<ol><li>A</li><li>B</li></ol>") == "1. A\n1. B"

    def test_nested_list_indentation(self):
        """Test one two-space unit per nesting level."""
        result = render_body(
            "<ul><li>One<ul><li>Two<ol><li>Three<ul><li>Four</li></ul></li></ol></li></ul></li></ul>"
        )
        lines = result.split("\n")

        assert "- One" in lines
        assert "  - Two" in lines
        assert "    1. Three" in lines
        assert "      - Four" in lines

    def test_links_are_resolved(self):
        """Test link resolution against the page URL."""
        assert render_body('<a href="/p">Go</a>') == "[Go](https://x.com/p)"

    def test_link_text_is_collapsed(self):
        """Test multi-line anchor text stays on one line."""
        assert render_body('<a href="https://a.com">Read\n   more</a>') == "[Read more](https://a.com)"

    def test_fragment_and_mail_links(self):
        """Test fragment and mailto links are left as written."""
        assert render_body('<a href="#top">Top</a>') == "[Top](#top)"
        assert render_body('<a href="mailto:me@x.com">Mail</a>') == "[Mail](mailto:me@x.com)"

    def test_link_without_href_renders_children(self):
        """Test anchors without href fall back to their content."""
        assert render_body("<p><a name='x'>Plain <b>bold</b></a></p>") == "Plain **bold**"

    def test_link_without_text_renders_children(self):
        """Test image-only links render the image."""
        result = render_body('<a href="/home"><img src="/logo.png" alt="Logo"></a>')

        assert result == "![Logo](https://x.com/logo.png)"

    def test_unresolvable_link_degrades_to_text(self):
        """Test malformed references never abort rendering."""
        result = render_body('<p><a href="http://[::1">Broken</a> and <a href="/ok">Fine</a></p>')

        assert result == "Broken and [Fine](https://x.com/ok)"

    def test_relative_link_without_base_url(self):
        """Test relative links on a document with no URL."""
        assert render_body('<a href="/p">Go</a>', url="") == "Go"

    def test_image_rendering(self):
        """Test image markdown with resolved source."""
        assert render_body('<img src="img/a.png" alt="A pic">') == "![A pic](https://x.com/dir/img/a.png)"

    def test_image_lazy_load_fallback(self):
        """Test data-src is used when src is absent."""
        assert render_body('<img data-src="/lazy.png">') == "![](https://x.com/lazy.png)"

    def test_image_without_source_emits_nothing(self):
        """Test images with no usable source."""
        assert render_body("<p>A<img alt='none'>B</p>") == "AB"

    def test_images_opt_out(self):
        """Test include_images=False drops images entirely."""
        result = render_body(
            '<p>Text <img src="/a.png" alt="alt text"></p><a href="/x"><img src="/b.png" alt="B"></a>',
            include_images=False,
        )

        assert result == "Text"

    def test_preformatted_block_is_verbatim(self):
        """Test literal mode preserves whitespace."""
        result = render_body("<pre>a   b\n\n  c</pre>")

        assert result == "```\na   b\n\n  c\n```"

    def test_code_inside_pre_is_not_backticked(self):
        """Test pre > code renders as a fenced block only."""
        result = render_body("<pre><code>def hello():\n    print('Hello')</code></pre>")

        assert result == "```\ndef hello():\n    print('Hello')\n```"

    def test_whitespace_collapses_outside_literal_mode(self):
        """Test text whitespace collapsing in a paragraph."""
        assert render_body("<p>a   b\n\n  c</p>") == "a b c"

    def test_inline_code(self):
        """Test inline code."""
        assert render_body("<p>Use the <code>print()</code> function.</p>") == "Use the `print()` function."

    def test_inline_formatting(self):
        """Test bold, emphasis, underline and strikethrough."""
        result = render_body(
            "<p><strong>S</strong> <b>B</b> <em>E</em> <i>I</i> <u>U</u> <del>D</del> <s>X</s></p>"
        )

        assert result == "**S** **B** *E* *I* <u>U</u> ~~D~~ ~~X~~"

    def test_blockquote(self):
        """Test blockquote prefix."""
        assert render_body("<blockquote>Quoted</blockquote>") == "> Quoted"

    def test_table(self):
        """Test table rows and cells."""
        result = render_body(
            """<table>
                <tr><th>Name</th><th>Value</th></tr>
                <tr><td>a</td><td>1</td></tr>
            </table>"""
        )

        assert result == "| Name | Value |\n| a | 1 |"

    def test_line_break_and_rule(self):
        """Test br and hr."""
        assert render_body("<p>A<br>B</p><hr><p>C</p>") == "A\nB\n\n---\n\nC"

    def test_unknown_elements_are_transparent(self):
        """Test passthrough for unknown tags."""
        assert render_body("<p><span>in</span><custom-tag>side</custom-tag></p>") == "inside"

    def test_paragraphs_separated_by_blank_line(self):
        """Test block spacing with inter-element whitespace."""
        assert render_body("\n  <p>One</p>\n  <p>Two</p>\n") == "One\n\nTwo"

    def test_render_state_restored(self):
        """Test that list depth and literal mode are restored after a walk."""
        tree = ElementNode(
            "div",
            children=(
                ElementNode("ul", children=(ElementNode("li", children=(TextNode("A"),)),)),
                ElementNode("pre", children=(TextNode("x  y"),)),
            ),
        )
        state = RenderState()

        MarkdownRenderer().render(tree, state)

        assert state.list_depth == 0
        assert state.literal is False

    def test_render_is_deterministic(self):
        """Test identical input renders identically."""
        root = parse_html("<body><h1>T</h1><ul><li><a href='/a'>a</a></li></ul></body>")
        renderer = MarkdownRenderer(base_url=BASE_URL)

        assert renderer.render(root) == renderer.render(root)


class TestNormalizer:
    """Tests for normalize_markdown."""

    def test_collapses_blank_lines(self):
        """Test 3+ newlines (with blank-line whitespace) become two."""
        assert normalize_markdown("a\n\n\n\nb") == "a\n\nb"
        assert normalize_markdown("a\n  \n \t\nb") == "a\n\nb"

    def test_collapses_spaces_and_strips_lines(self):
        """Test inline runs, leading and trailing spaces."""
        assert normalize_markdown("  a  \t b \n   c  ") == "a b\nc"

    def test_keeps_nested_bullet_indentation(self):
        """Test indentation in front of list bullets survives."""
        assert normalize_markdown("- a\n  - b\n    1. c") == "- a\n  - b\n    1. c"

    def test_keeps_fenced_code_verbatim(self):
        """Test fenced blocks are not normalized."""
        text = "Intro   text\n\n```\n  x  =  1\n\n\n\ny\n```\n\n\n\nOutro  "

        assert normalize_markdown(text) == "Intro text\n\n```\n  x  =  1\n\n\n\ny\n```\n\nOutro"

    @pytest.mark.parametrize(
        "text",
        [
            "  Title \n\n\n\n para  graph \n - item\n\n\n  - nested ",
            "a\n \n \nb\n\n```\n  code \n```\n\n\n  c",
            "\t\tx\t\ty\n\n\n\n\n| a | b |\n| 1 | 2 |\n",
        ],
    )
    def test_idempotent(self, text):
        """Test normalizing normalized output is a no-op."""
        once = normalize_markdown(text)

        assert normalize_markdown(once) == once


class TestExtract:
    """Tests for the extract() entry point and PageExtractor."""

    def test_returns_extraction_result(self):
        """Test result fields."""
        root = parse_html("<html><body><main><h1>Hi</h1></main></body></html>")

        result = extract(root, url="https://x.com/a", title="Page")

        assert result.title == "Page"
        assert result.source_url == "https://x.com/a"
        assert result.content == "# Hi"
        assert result.captured_at.tzinfo is not None
        assert result.to_dict()["url"] == "https://x.com/a"

    def test_no_leak_of_pruned_content(self):
        """Test pruned subtrees contribute nothing."""
        result = render_body(
            "<header>Site header</header><p>Body</p><style>.x{}</style>"
            "<script>var secret = 42;</script><footer>Copyright</footer>"
        )

        assert result == "Body"

    def test_no_body_raises(self):
        """Test NoContentFound propagates from extract()."""
        root = ElementNode("#document", children=(TextNode("loose text"),))

        with pytest.raises(NoContentFound):
            extract(root)

    def test_page_extractor_reads_title_and_base(self):
        """Test the HTML convenience entry point."""
        html = b"""<html><head><title>Guide</title><base href="/docs/"></head>
            <body><nav><a href="/">Home</a></nav>
            <article><h1>Start</h1><p>See <a href="intro">intro</a>.</p></article></body></html>"""

        result = PageExtractor().extract_html(html, "https://example.com/page")

        assert result.title == "Guide"
        assert result.content == "# Start\n\nSee [intro](https://example.com/docs/intro)."
        assert "Home" not in result.content

    def test_full_document(self):
        """Test a realistic page end to end."""
        html = b"""<!DOCTYPE html>
        <html>
        <head><title>Getting Started Guide</title></head>
        <body>
            <nav><a href="/">Home</a></nav>
            <div class="sidebar"><ul><li>Link</li></ul></div>
            <main>
                <h1>Getting Started</h1>
                <p>Welcome to our <em>documentation</em>.</p>
                <h2>Installation</h2>
                <pre><code>pip install mypackage</code></pre>
                <p>Then run <code>mypackage --help</code>.</p>
                <div class="comments">Nice post!</div>
            </main>
            <footer>Copyright 2024</footer>
        </body>
        </html>"""

        result = PageExtractor().extract_html(html, "https://docs.example.com/start")

        assert result.content == (
            "# Getting Started\n\n"
            "Welcome to our *documentation*.\n\n"
            "## Installation\n\n"
            "```\npip install mypackage\n```\n\n"
            "Then run `mypackage --help`."
        )

    def test_deeply_nested_document(self):
        """Test nesting far beyond the interpreter recursion limit."""
        depth = 2000
        html = "<html><body>" + "<div>" * depth + "deep <b>text</b>" + "</div>" * depth + "</body></html>"

        result = PageExtractor().extract_html(html, "https://x.com/")

        assert result.content == "deep **text**"

    def test_deeply_nested_lists_and_code(self):
        """Test state restoration on a deep tree."""
        inner = ElementNode("pre", children=(TextNode("a  b"),))
        for _ in range(3000):
            inner = ElementNode("section", children=(inner,))
        tree = ElementNode(
            "body",
            children=(ElementNode("ul", children=(ElementNode("li", children=(inner,)),)), TextNode("after  it")),
        )
        state = RenderState()

        raw = MarkdownRenderer().render(tree, state)

        assert "```\na  b\n```" in raw
        assert raw.endswith("after it")
        assert state.list_depth == 0
        assert state.literal is False

    def test_custom_locator(self):
        """Test any object with a locate() method can select the content root."""

        class FirstParagraph:
            def locate(self, root):
                return find_first(root, lambda element: element.tag == "p")

        root = parse_html("<html><body><main><h1>Skip</h1><p>Only this</p></main></body></html>")

        assert extract(root, locator=FirstParagraph()).content == "Only this"
        assert PageExtractor(locator=FirstParagraph()).extract(root).content == "Only this"
