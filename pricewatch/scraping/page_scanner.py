"""
BeautifulSoup-based price discovery for arbitrary product pages.

Candidates are produced by the rules in `CANDIDATE_RULES`, in table order,
and handed to the price extractor until one yields a positive price.
Struck-through (``del``/``s``/``strike``) and old/was/original-marked
descendants are left out of an element's text, so a wrapper holding both
prices reads as the current one.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.element import NavigableString, PreformattedString
from soupsieve import SelectorSyntaxError

from pricewatch.scraping.logging_utils import describe_exception, log_event
from pricewatch.scraping.price_extractor import PriceMatch, match_price
from pricewatch.scraping.types import Candidate, CandidateRank, ScrapeResult

logger = logging.getLogger(__name__)

RAW_TEXT_MAX_LENGTH = 500
BODY_EXCERPT_RADIUS = 80

NON_VISIBLE_TAGS = ("script", "style", "noscript", "template")
PRICE_TOKEN = "price"
EXCLUDED_PRICE_TOKENS = ("old", "was", "original")
STRUCK_TAGS = ("del", "s", "strike")
MARKER_WORD_PATTERN = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|\d+")
COMMON_PRICE_SELECTORS = (
    ".price",
    "#price",
    ".product-price",
    ".current-price",
    ".sale-price",
    ".offer-price",
    "#priceblock_ourprice",
    ".a-price-whole",
)


@dataclass(frozen=True)
class CandidateRule:
    """
    One row of the candidate ranking table.
    """

    rank: CandidateRank
    collect: Callable[[BeautifulSoup, str | None], Iterable[str]]


def parse_html(html: str | bytes | None) -> BeautifulSoup | None:
    """
    Parse markup permissively and drop elements that never hold visible text.

    Returns ``None`` when there is nothing to parse or the parser rejects
    the markup outright.
    """

    if not isinstance(html, (str, bytes)) or not html.strip():
        return None
    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as exc:
        log_event(
            logger,
            logging.WARNING,
            "html_parse_rejected",
            error=describe_exception(exc),
        )
        return None

    for node in soup.find_all(list(NON_VISIBLE_TAGS)):
        node.decompose()
    return soup


def scan_page(html: str | bytes | None, selector: str | None = None) -> ScrapeResult:
    """
    Find the current price on a product page.

    The first candidate whose extracted price is strictly positive wins; a
    zero price counts as "not found".
    """

    soup = parse_html(html)
    if soup is None:
        return ScrapeResult.not_found()

    for candidate in generate_candidates(soup, selector):
        match = match_price(candidate.text)
        if match is None or match.value is None or match.value <= 0:
            continue
        return ScrapeResult(
            price=match.value,
            raw_text=_raw_text(candidate, match),
            rank=candidate.rank,
        )
    return ScrapeResult.not_found()


def generate_candidates(soup: BeautifulSoup, selector: str | None = None) -> Iterator[Candidate]:
    """
    Yield candidates in ranking-table order, document order within a rule.

    `soup` is expected to come from `parse_html`.
    """

    for rule in CANDIDATE_RULES:
        for raw in rule.collect(soup, selector):
            text = _clean_text(raw)
            if text:
                yield Candidate(text=text, rank=rule.rank)


def _selector_override_texts(soup: BeautifulSoup, selector: str | None) -> list[str]:
    if not selector or not selector.strip():
        return []
    try:
        node = soup.select_one(selector.strip())
    except (SelectorSyntaxError, NotImplementedError) as exc:
        log_event(
            logger,
            logging.WARNING,
            "selector_override_invalid",
            selector=selector,
            error=describe_exception(exc),
        )
        return []
    if node is None:
        return []
    return [_visible_text(node, prune=_is_struck)]


def _microdata_texts(soup: BeautifulSoup, selector: str | None) -> list[str]:
    nodes = soup.find_all(attrs={"itemprop": _has_price_itemprop})
    return [_element_text(node) for node in nodes]


def _class_or_id_texts(soup: BeautifulSoup, selector: str | None) -> list[str]:
    return [_element_text(node) for node in soup.find_all(_is_current_price_element)]


def _data_attribute_texts(soup: BeautifulSoup, selector: str | None) -> list[str]:
    return [_element_text(node) for node in soup.find_all(attrs={"data-price": True})]


def _common_selector_texts(soup: BeautifulSoup, selector: str | None) -> list[str]:
    texts: list[str] = []
    for common_selector in COMMON_PRICE_SELECTORS:
        texts.extend(_element_text(node) for node in soup.select(common_selector))
    return texts


def _body_texts(soup: BeautifulSoup, selector: str | None) -> list[str]:
    root = soup.body or soup
    return [_visible_text(root, prune=_is_superseded_price)]


CANDIDATE_RULES: tuple[CandidateRule, ...] = (
    CandidateRule(CandidateRank.SELECTOR_OVERRIDE, _selector_override_texts),
    CandidateRule(CandidateRank.MICRODATA, _microdata_texts),
    CandidateRule(CandidateRank.CLASS_OR_ID, _class_or_id_texts),
    CandidateRule(CandidateRank.DATA_ATTRIBUTE, _data_attribute_texts),
    CandidateRule(CandidateRank.COMMON_SELECTOR, _common_selector_texts),
    CandidateRule(CandidateRank.BODY_TEXT, _body_texts),
)


def _has_price_itemprop(value: str | None) -> bool:
    return bool(value) and PRICE_TOKEN in value.lower().split()


def _markers(tag: Tag) -> list[str]:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    element_id = tag.get("id") or ""
    return [value for value in (*classes, element_id) if isinstance(value, str) and value]


def _is_current_price_element(tag: Tag) -> bool:
    markers = [marker.lower() for marker in _markers(tag)]
    if not any(PRICE_TOKEN in marker for marker in markers):
        return False
    return not any(token in marker for marker in markers for token in EXCLUDED_PRICE_TOKENS)


def _marker_words(tag: Tag) -> set[str]:
    # "old-price", "oldPrice" and "price_was" all split into separate words.
    return {
        word.lower()
        for marker in _markers(tag)
        for word in MARKER_WORD_PATTERN.findall(marker)
    }


def _is_struck(tag: Tag) -> bool:
    return tag.name in STRUCK_TAGS


def _is_superseded(tag: Tag) -> bool:
    """
    True for a nested element holding a struck-through or previous price.
    """

    if _is_struck(tag):
        return True
    return not _marker_words(tag).isdisjoint(EXCLUDED_PRICE_TOKENS)


def _is_superseded_price(tag: Tag) -> bool:
    if _is_struck(tag):
        return True
    if not any(PRICE_TOKEN in marker.lower() for marker in _markers(tag)):
        return False
    return not _marker_words(tag).isdisjoint(EXCLUDED_PRICE_TOKENS)


def _visible_text(root: Tag, *, prune: Callable[[Tag], bool]) -> str:
    """
    Join the text under `root`, skipping every descendant subtree `prune` rejects.

    `root` itself is never pruned. The walk is iterative, so nesting depth is
    not bounded by the recursion limit.
    """

    parts: list[str] = []
    stack = list(reversed(root.contents))
    while stack:
        node = stack.pop()
        if isinstance(node, Tag):
            if not prune(node):
                stack.extend(reversed(node.contents))
        elif isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
            text = node.strip()
            if text:
                parts.append(text)
    return " ".join(parts)


def _element_text(node: Tag) -> str:
    for attribute in ("content", "data-price"):
        value = node.get(attribute)
        if isinstance(value, str) and value.strip():
            return value
    return _visible_text(node, prune=_is_superseded)


def _clean_text(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()


def _raw_text(candidate: Candidate, match: PriceMatch) -> str:
    if candidate.rank is CandidateRank.BODY_TEXT:
        start = max(0, match.start - BODY_EXCERPT_RADIUS)
        return candidate.text[start : match.end + BODY_EXCERPT_RADIUS].strip()
    return candidate.text[:RAW_TEXT_MAX_LENGTH]
