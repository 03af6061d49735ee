from crosspub.gemtext import GemtextToken, TokenKind, parse_gemtext, to_html, tokens_to_html


def test_parse_line_types():
    source = "\n".join(
        [
            "# Title",
            "## Section",
            "### Sub",
            "=> gemini://example.org Example",
            "=> /plain",
            "* item",
            "> quoted",
            "Plain text",
        ]
    )
    kinds = [t.kind for t in parse_gemtext(source)]
    assert kinds == [
        TokenKind.HEADING,
        TokenKind.SUBHEADING,
        TokenKind.SUBSUBHEADING,
        TokenKind.LINK,
        TokenKind.LINK,
        TokenKind.LIST_ITEM,
        TokenKind.QUOTE,
        TokenKind.TEXT,
    ]
    tokens = parse_gemtext(source)
    assert tokens[0].text == "Title"
    assert tokens[3] == GemtextToken(TokenKind.LINK, "gemini://example.org", "Example")
    assert tokens[4] == GemtextToken(TokenKind.LINK, "/plain", "")


def test_link_label_after_any_whitespace():
    tokens = parse_gemtext("=> /a.gmi\tTabbed label\n=>/b.gmi   Spaced  out\n=>")
    assert tokens[0] == GemtextToken(TokenKind.LINK, "/a.gmi", "Tabbed label")
    assert tokens[1] == GemtextToken(TokenKind.LINK, "/b.gmi", "Spaced  out")
    assert tokens[2] == GemtextToken(TokenKind.LINK, "", "")


def test_preformatted_block():
    tokens = parse_gemtext("```python\nx = 1\n# not a heading\n```\nafter")
    assert tokens[0] == GemtextToken(TokenKind.PREFORMATTED, "x = 1\n# not a heading", "python")
    assert tokens[1] == GemtextToken(TokenKind.TEXT, "after")


def test_unterminated_preformatted_block_runs_to_end():
    tokens = parse_gemtext("```\nraw")
    assert tokens == [GemtextToken(TokenKind.PREFORMATTED, "raw", "")]


def test_to_html():
    html = to_html("# Hi\n\nSome <b>text</b>\n=> /a.html A & B\n=> /plain\n")
    assert html == (
        "<h1>Hi</h1>\n"
        "<p>Some &lt;b&gt;text&lt;/b&gt;</p>\n"
        '<p><a href="/a.html">A &amp; B</a></p>\n'
        '<p><a href="/plain">/plain</a></p>\n'
    )


def test_list_items_are_grouped():
    html = to_html("* one\n* two\ntext\n* three")
    assert html == (
        "<ul>\n<li>one</li>\n<li>two</li>\n</ul>\n"
        "<p>text</p>\n"
        "<ul>\n<li>three</li>\n</ul>\n"
    )


def test_blank_line_closes_list():
    assert to_html("* one\n\n* two") == "<ul>\n<li>one</li>\n</ul>\n<ul>\n<li>two</li>\n</ul>\n"


def test_preformatted_html_is_escaped():
    html = to_html("```shell\n<tag> & more\n```")
    assert html == '<pre aria-label="shell">&lt;tag&gt; &amp; more</pre>\n'


def test_quote_and_empty_input():
    assert to_html("> wise") == "<blockquote>wise</blockquote>\n"
    assert to_html("") == ""
    assert tokens_to_html([]) == ""
