import pytest

from namuki.macromark import Macromark
from namuki.namumark import Namumark


def render(text):
    return Namumark(None, {"data": text}).render()


def macro(text):
    return Macromark(None, {"data": text}).render()


@pytest.mark.parametrize(
    "wiki, macro_text",
    [
        ("'''x'''", "[b(x)]"),
        ("''x''", "[i(x)]"),
        ("__x__", "[u(x)]"),
        ("^^^x^^^", "[sup(x)]"),
        ("^^x^^", "[sup(x)]"),
        (",,,x,,,", "[sub(x)]"),
        (",,x,,", "[sub(x)]"),
        ("--x--", "[s(x)]"),
        ("~~x~~", "[s(x)]"),
    ],
)
def test_inline_styles_match_macros(wiki, macro_text):
    assert render(wiki) == macro(macro_text)


def test_bold_output():
    assert render("'''bold'''")["data"] == "<b>bold</b>"


def test_heading_with_closing_marks():
    assert render("== Title ==") == macro("[h2(Title)]")


def test_heading_without_closing_marks():
    assert render("= Top") == macro("[h1(Top)]")


def test_heading_level_follows_mark_count():
    assert render("=== Deep ===") == macro("[h3(Deep)]")


def test_carriage_returns_are_ignored():
    assert render("'''x'''\r") == render("'''x'''")


def test_script_is_table_of_contents():
    assert render("text")["js_data"] == "opennamu_do_toc();"


def test_input_mapping_is_not_modified():
    source = {"data": "''x''", "doc_name": "doc"}
    Namumark(None, source).render()
    assert source == {"data": "''x''", "doc_name": "doc"}


def test_styles_combine():
    data = render("'''a''' ''b''")["data"]
    assert data.startswith("<b>a</b>")
    assert data.endswith("<i>b</i>")