"""Page heuristics for AccessScout.

:func:`analyze_html` turns the markup of one page into a :class:`PageFacts`
record. It never touches the network, so it is safe to call from tests and
from the engine once the crawl is over.

What is counted
---------------
* images   : every ``<img>``; *missing* only when ``alt`` is absent.
  ``alt=""`` marks a decorative image and is not a defect.
* controls : ``input``/``select``/``textarea`` except hidden, submit,
  button and reset inputs. A control is labeled by ``aria-label``,
  ``title``, an ``aria-labelledby`` that points at an existing id, a
  ``<label for=…>`` or an enclosing ``<label>``. ``placeholder`` is not a
  label.
* links    : ``<a href>`` resolved against the page URL and split into
  internal/external by hostname of the site root.
* forms    : number of ``<form>`` elements.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from access_scout.crawler.link_extractor import iter_hrefs, resolve_href
from access_scout.errors import ParseFailure
from access_scout.utils import canonical_url, extract_domain

__all__: Sequence[str] = ("PageFacts", "analyze_html", "count_controls", "count_images")

_IGNORED_INPUT_TYPES = frozenset({"hidden", "submit", "button", "reset"})


@dataclass(slots=True, frozen=True)
class PageFacts:
    """Accessibility facts of one fetched page."""

    url: str
    order: int
    title: Optional[str]
    meta_description: Optional[str]
    images_total: int
    images_missing_alt: int
    controls_total: int
    controls_unlabeled: int
    forms_total: int
    links: tuple[str, ...]
    internal_sample: tuple[str, ...]
    external_sample: tuple[str, ...]


# ---------------------------------------------------------------------------
# Heuristics
# ---------------------------------------------------------------------------


def count_images(soup: BeautifulSoup) -> tuple[int, int]:
    """Return ``(total, missing_alt)`` for the images in *soup*."""
    images = soup.find_all("img")
    missing = sum(1 for img in images if isinstance(img, Tag) and img.get("alt") is None)
    return len(images), missing


def _is_counted_control(el: Tag) -> bool:
    if el.name != "input":
        return True
    input_type = str(el.get("type") or "text").strip().lower()
    return input_type not in _IGNORED_INPUT_TYPES


def _non_empty(value: object) -> bool:
    if isinstance(value, list):
        value = " ".join(value)
    return bool(value and str(value).strip())


def _is_labeled(el: Tag, ids: set[str], label_targets: set[str]) -> bool:
    if _non_empty(el.get("aria-label")) or _non_empty(el.get("title")):
        return True

    labelledby = el.get("aria-labelledby")
    if labelledby:
        refs = labelledby.split() if isinstance(labelledby, str) else list(labelledby)
        if any(ref in ids for ref in refs):
            return True

    control_id = el.get("id")
    if isinstance(control_id, str) and control_id in label_targets:
        return True

    return el.find_parent("label") is not None


def count_controls(soup: BeautifulSoup) -> tuple[int, int]:
    """Return ``(total, unlabeled)`` for the form controls in *soup*."""
    ids = {str(tag["id"]) for tag in soup.find_all(id=True)}
    label_targets = {
        str(label["for"]).strip() for label in soup.find_all("label", attrs={"for": True})
    }

    total = unlabeled = 0
    for el in soup.find_all(["input", "select", "textarea"]):
        if not isinstance(el, Tag) or not _is_counted_control(el):
            continue
        total += 1
        if not _is_labeled(el, ids, label_targets):
            unlabeled += 1
    return total, unlabeled


def _links(
    soup: BeautifulSoup, page_url: str, site_host: str, sample_limit: int
) -> tuple[tuple[str, ...], tuple[str, ...], tuple[str, ...]]:
    seen: set[str] = set()
    links: list[str] = []
    internal: list[str] = []
    external: list[str] = []
    for href in iter_hrefs(soup):
        absolute = resolve_href(href, page_url)
        if absolute is None:
            continue
        url = canonical_url(absolute)
        if url in seen:
            continue
        seen.add(url)
        links.append(url)
        bucket = internal if extract_domain(url) == site_host else external
        if len(bucket) < sample_limit:
            bucket.append(url)
    return tuple(links), tuple(internal), tuple(external)


def _meta_description(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("meta", attrs={"name": "description"})
    if not isinstance(tag, Tag):
        return None
    content = tag.get("content")
    return content.strip() or None if isinstance(content, str) else None


# ---------------------------------------------------------------------------
# Public function
# ---------------------------------------------------------------------------


def analyze_html(
    html: str,
    page_url: str,
    site_root: Optional[str] = None,
    *,
    order: int = 0,
    base_url: Optional[str] = None,
    parser: str = "lxml",
    sample_limit: int = 5,
) -> PageFacts:
    """Parse one page and return its :class:`PageFacts`.

    Parameters
    ----------
    html
        Page markup.
    page_url
        URL the markup came from; relative links are resolved against it.
    site_root
        Root of the scanned site; decides which links are internal.
        Defaults to *page_url*.
    order
        Discovery position of the page, carried through for tie-breaking.
    base_url
        URL to resolve relative links against when it differs from
        *page_url* (e.g. after a redirect).

    Raises :class:`~access_scout.errors.ParseFailure` if the markup cannot be
    processed at all.
    """
    site_host = extract_domain(site_root or page_url)
    try:
        soup = BeautifulSoup(html, parser)

        title_tag = soup.find("title")
        title = title_tag.get_text(strip=True) or None if title_tag else None

        images_total, images_missing = count_images(soup)
        controls_total, controls_unlabeled = count_controls(soup)
        links, internal, external = _links(soup, base_url or page_url, site_host, sample_limit)

        return PageFacts(
            url=page_url,
            order=order,
            title=title,
            meta_description=_meta_description(soup),
            images_total=images_total,
            images_missing_alt=images_missing,
            controls_total=controls_total,
            controls_unlabeled=controls_unlabeled,
            forms_total=len(soup.find_all("form")),
            links=links,
            internal_sample=internal,
            external_sample=external,
        )
    except Exception as exc:
        raise ParseFailure(page_url, exc) from exc
