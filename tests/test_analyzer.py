# File: tests/test_analyzer.py
"""Тесты эвристик одной страницы (`parser/html_parser.py`)."""
import pytest

from access_scout.errors import ParseFailure
from access_scout.parser import html_parser
from access_scout.parser.html_parser import analyze_html

PAGE = "https://example.gov/forms/apply"


def wrap(body: str, head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


def test_alt_missing_vs_empty():
    facts = analyze_html(
        wrap('<img src="a.png"><img src="b.png" alt=""><img src="c.png" alt="Chart">'), PAGE
    )
    assert facts.images_total == 3
    assert facts.images_missing_alt == 1


@pytest.mark.parametrize(
    "markup",
    [
        '<input type="text" aria-label="Name">',
        '<input type="text" title="Name">',
        '<span id="lbl">Name</span><input type="text" aria-labelledby="lbl">',
        '<label for="name">Name</label><input type="text" id="name">',
        '<label>Name <input type="text"></label>',
        '<label>Notes <textarea></textarea></label>',
        '<select aria-label="State"><option>CA</option></select>',
    ],
)
def test_each_label_source_counts(markup):
    facts = analyze_html(wrap(markup), PAGE)
    assert facts.controls_total == 1
    assert facts.controls_unlabeled == 0


@pytest.mark.parametrize(
    "markup",
    [
        '<input type="text" placeholder="Name">',
        '<input type="text" aria-label="   ">',
        '<input type="text" aria-labelledby="missing">',
        '<label for="other">Name</label><input type="text" id="name">',
        "<select><option>CA</option></select>",
        "<textarea></textarea>",
    ],
)
def test_unlabeled_controls(markup):
    facts = analyze_html(wrap(markup), PAGE)
    assert facts.controls_total == 1
    assert facts.controls_unlabeled == 1


def test_ignored_input_types():
    markup = (
        '<input type="hidden" name="csrf">'
        '<input type="submit">'
        '<input type="button" value="x">'
        '<input type="reset">'
        '<input type="checkbox">'
        "<input>"
    )
    facts = analyze_html(wrap(markup), PAGE)
    assert facts.controls_total == 2
    assert facts.controls_unlabeled == 2


def test_title_meta_and_forms():
    head = '<title>  Apply for benefits </title><meta name="description" content=" Apply online ">'
    facts = analyze_html(wrap("<form></form><form></form>", head), PAGE)
    assert facts.title == "Apply for benefits"
    assert facts.meta_description == "Apply online"
    assert facts.forms_total == 2


def test_missing_title_is_none():
    facts = analyze_html(wrap("<p>hi</p>"), PAGE)
    assert facts.title is None
    assert facts.meta_description is None


def test_links_resolved_deduplicated_and_split():
    body = (
        '<a href="/contact">c</a>'
        '<a href="/contact#top">dup</a>'
        '<a href="../help">h</a>'
        '<a href="https://partner.org/x">p</a>'
        '<a href="mailto:a@example.gov">m</a>'
        '<a href="javascript:void(0)">j</a>'
        '<a href="tel:123">t</a>'
        '<a href="">empty</a>'
    )
    facts = analyze_html(wrap(body), PAGE, "https://example.gov/", sample_limit=5)
    assert facts.links == (
        "https://example.gov/contact",
        "https://example.gov/help",
        "https://partner.org/x",
    )
    assert facts.internal_sample == ("https://example.gov/contact", "https://example.gov/help")
    assert facts.external_sample == ("https://partner.org/x",)


def test_sample_limit_and_base_url():
    body = "".join(f'<a href="p{i}">{i}</a>' for i in range(10))
    facts = analyze_html(
        wrap(body), PAGE, "https://example.gov/", base_url="https://example.gov/dir/", sample_limit=3
    )
    assert len(facts.links) == 10
    assert facts.links[0] == "https://example.gov/dir/p0"
    assert len(facts.internal_sample) == 3


def test_order_is_carried_through():
    assert analyze_html(wrap(""), PAGE, order=7).order == 7


def test_empty_document():
    facts = analyze_html("", PAGE)
    assert facts.images_total == facts.controls_total == facts.forms_total == 0
    assert facts.links == ()


def test_broken_markup_raises_parse_failure(monkeypatch):
    def explode(_soup):
        raise ValueError("bad tree")

    monkeypatch.setattr(html_parser, "count_images", explode)
    with pytest.raises(ParseFailure) as info:
        analyze_html(wrap("<img>"), PAGE)
    assert info.value.url == PAGE


def test_any_analysis_error_becomes_parse_failure(monkeypatch):
    def explode(_soup):
        raise RuntimeError("recursion in tree walk")

    monkeypatch.setattr(html_parser, "count_controls", explode)
    with pytest.raises(ParseFailure) as info:
        analyze_html(wrap("<input>"), PAGE)
    assert isinstance(info.value.__cause__, RuntimeError)
