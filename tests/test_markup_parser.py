from __future__ import annotations

import pytest

from docview.core.markup_parser import (
    MarkupBlockParser,
    decode_entities,
    is_cover_image,
)
from docview.models.content import ImageBlock, TextBlock

PNG = b"\x89PNG fake"


@pytest.fixture
def parser() -> MarkupBlockParser:
    return MarkupBlockParser()


def test_line_break_and_nbsp(parser: MarkupBlockParser) -> None:
    blocks = parser.parse("Line1<br>Line2&nbsp;end", {})
    assert blocks == [TextBlock(text="Line1\nLine2 end")]


def test_cover_image_discards_preceding_text(parser: MarkupBlockParser) -> None:
    html = '<p>Hello <b>World</b></p><img src="images/cover.png">'
    blocks = parser.parse(html, {"images/cover.png": PNG})
    assert blocks == [ImageBlock(data=PNG, is_cover=True)]


def test_cover_image_discards_following_content(parser: MarkupBlockParser) -> None:
    html = (
        '<img src="a.png"><p>Before</p>'
        '<img class="FrontCover" src="b.png"><p>After</p><img src="a.png">'
    )
    blocks = parser.parse(html, {"a.png": b"a", "b.png": b"b"})
    assert blocks == [ImageBlock(data=b"b", is_cover=True)]


def test_unresolved_cover_does_not_short_circuit(parser: MarkupBlockParser) -> None:
    html = '<p>Before</p><img src="images/cover.png"><p>After</p>'
    blocks = parser.parse(html, {})
    assert blocks == [TextBlock(text="Before"), TextBlock(text="After")]


def test_text_and_images_keep_order(parser: MarkupBlockParser) -> None:
    html = '<p>One</p><img src="pics/one.png" alt="x"><p>Two</p><img src="pics/two.png">'
    blocks = parser.parse(html, {"pics/one.png": b"1", "pics/two.png": b"2"})
    assert blocks == [
        TextBlock(text="One"),
        ImageBlock(data=b"1", is_cover=False),
        TextBlock(text="Two"),
        ImageBlock(data=b"2", is_cover=False),
    ]


def test_unresolved_image_is_skipped(parser: MarkupBlockParser) -> None:
    blocks = parser.parse('Start<img src="missing.png">End', {"other.png": b"x"})
    assert blocks == [TextBlock(text="Start"), TextBlock(text="End")]


def test_src_is_url_decoded(parser: MarkupBlockParser) -> None:
    blocks = parser.parse('<img src="my%20picture.png">', {"OEBPS/my picture.png": b"p"})
    assert blocks == [ImageBlock(data=b"p", is_cover=False)]


def test_relative_src_matches_manifest_path(parser: MarkupBlockParser) -> None:
    blocks = parser.parse('<img src="../images/fig.png">', {"images/fig.png": b"f"})
    assert blocks == [ImageBlock(data=b"f", is_cover=False)]


def test_resolution_is_bidirectional(parser: MarkupBlockParser) -> None:
    assert parser.resolve_image("OEBPS/images/a.png", {"images/a.png": b"a"}) == b"a"
    assert parser.resolve_image("a.png", {"OEBPS/images/a.png": b"a"}) == b"a"


def test_resolution_prefers_longest_shared_suffix(parser: MarkupBlockParser) -> None:
    images = {"a.png": b"short", "images/a.png": b"long"}
    assert parser.resolve_image("images/a.png", images) == b"long"


def test_resolution_ties_go_to_first_entry(parser: MarkupBlockParser) -> None:
    images = {"x/fig.png": b"first", "y/fig.png": b"second"}
    assert parser.resolve_image("fig.png", images) == b"first"


def test_empty_keys_never_match(parser: MarkupBlockParser) -> None:
    assert parser.resolve_image("fig.png", {"": b"junk"}) is None


def test_paragraphs_and_divs(parser: MarkupBlockParser) -> None:
    html = "<div><p>First   paragraph</p>\n\n<p class='x'>Second</p></div>"
    blocks = parser.parse(html, {})
    assert blocks == [TextBlock(text="First paragraph\n\nSecond")]


def test_excess_newlines_collapse_to_two(parser: MarkupBlockParser) -> None:
    text = parser.format_text("a<br><br> <br><br>b")
    assert text == "a\n\nb"


def test_entities_decoded_after_tags(parser: MarkupBlockParser) -> None:
    text = parser.format_text("<p>1 &lt; 2 &amp;&amp; 3 &gt; 2 &quot;ok&quot; it&apos;s</p>")
    assert text == "1 < 2 && 3 > 2 \"ok\" it's"


def test_escaped_tag_survives_as_text(parser: MarkupBlockParser) -> None:
    assert parser.format_text("&lt;br&gt;x") == "<br>x"


def test_double_quoted_src_may_contain_apostrophe(parser: MarkupBlockParser) -> None:
    blocks = parser.parse("<img src=\"it's.png\">", {"it's.png": b"q"})
    assert blocks == [ImageBlock(data=b"q", is_cover=False)]


def test_single_quoted_src_may_contain_double_quote(parser: MarkupBlockParser) -> None:
    blocks = parser.parse("<img src='say\"hi\".png'>", {'say"hi".png': b"s"})
    assert blocks == [ImageBlock(data=b"s", is_cover=False)]


def test_text_without_images_preserves_words(parser: MarkupBlockParser) -> None:
    html = "<h1>Title</h1><p>Some <em>emphasised</em> words,</p><ul><li>and</li><li>a list</li></ul>"
    blocks = parser.parse(html, {})
    assert all(isinstance(block, TextBlock) for block in blocks)
    joined = "".join("".join(block.text.split()) for block in blocks)
    assert joined == "TitleSomeemphasisedwords,andalist"


def test_whitespace_only_markup_yields_nothing(parser: MarkupBlockParser) -> None:
    assert parser.parse("  <p> </p>\n<br/>  ", {}) == []


@pytest.mark.parametrize(
    "html",
    ["", "<", "<<<>>>", "<p", '<img src="', "&amp", "<img src=x>", "</div></div>"],
)
def test_malformed_markup_never_raises(parser: MarkupBlockParser, html: str) -> None:
    blocks = parser.parse(html, {"x": b"x"})
    assert isinstance(blocks, list)


def test_decode_entities_single_pass() -> None:
    assert decode_entities("&amp;amp;") == "&amp;"
    assert decode_entities("&amp;lt;") == "&lt;"
    assert decode_entities("&#160;&nbsp;") == "  "


@pytest.mark.parametrize("text", ["plain", "a &amp; b", "&lt;tag&gt;", "&nbsp;x&quot;"])
def test_decode_entities_is_stable_once_decoded(text: str) -> None:
    once = decode_entities(text)
    assert decode_entities(once) == once


@pytest.mark.parametrize(
    "tag,expected",
    [
        ('<img src="images/Cover.jpg">', True),
        ('<img class="title-page" src="p.png">', True),
        ('<img id="FRONTCOVER" src="p.png">', True),
        ('<img src="figure1.png">', False),
    ],
)
def test_cover_detection(tag: str, expected: bool) -> None:
    assert is_cover_image(tag) is expected
