# parking_tracker/parser.py
"""Candidate extraction from saved Leboncoin search pages.

Two passes over the markup:

* the primary pass reads known ad-card markers and their title, location
  and price sub-markers;
* the fallback pass only runs when the primary pass yields nothing. It scans
  loose containers and recovers title, price and address heuristically, so
  it keeps working when the card markup drifts.

Every element ends up as either a ``ParsedCandidate`` or a ``SkipReason``;
a malformed element never aborts the extraction.
"""
import re
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .neighborhoods import Neighborhood, classify
from .utils import clean_text, logger

# try to detect available parser; prefer lxml if installed
try:
    import lxml  # type: ignore  # noqa: F401
    _bs_parser = "lxml"
except ImportError:
    _bs_parser = "html.parser"

CARD_SELECTORS = ('[data-qa-id="aditem_container"]', ".styles_adCard__ILIC2", ".aditem")
TITLE_SELECTORS = ('[data-qa-id="aditem_title"]', ".aditem-title", "h3", ".title")
LOCATION_SELECTORS = ('[data-qa-id="aditem_location"]', ".aditem-location", ".location")
PRICE_SELECTORS = ('[data-qa-id="aditem_price"]', ".aditem-price", ".price")
FALLBACK_SELECTORS = ('div[class*="ad"]', 'div[class*="item"]', "article", ".listing-item")

PARKING_KEYWORDS = ("parking", "garage", "place", "box", "stationnement")
CITY_NAME = "angers"
CITY_TOKENS = (CITY_NAME, "49000", "49100")
MAX_TITLE_CHARS = 200
MIN_ADDRESS_CHARS = 5

_LEADING_PRICE = re.compile(r"(\d+)€?")
_EURO_AMOUNT = re.compile(r"(\d+)\s*€")


class SkipReason(str, Enum):
    MISSING_TITLE = "missing_title"
    NOT_PARKING = "not_parking"
    MISSING_ADDRESS = "missing_address"
    OUTSIDE_CITY = "outside_city"
    NO_PRICE = "no_price"
    PARSE_ERROR = "parse_error"


@dataclass(frozen=True)
class ParsedCandidate:
    title: str
    address: str
    neighborhood: Neighborhood
    price: int

    @property
    def dedup_key(self):
        return (self.title.lower(), self.address.lower(), self.price)


@dataclass(frozen=True)
class ParseOutcome:
    """Either a candidate or the reason the element was dropped."""
    candidate: Optional[ParsedCandidate] = None
    skip_reason: Optional[SkipReason] = None


@dataclass
class ExtractionReport:
    strategy: str = "none"
    candidates: List[ParsedCandidate] = field(default_factory=list)
    skipped: Counter = field(default_factory=Counter)
    duplicates: int = 0


class MarkupTree:
    """Minimal query surface over a parsed document."""

    def __init__(self, markup: str):
        # lone surrogates (e.g. from JSON \u escapes) make the parser raise
        markup = (markup or "").encode("utf-8", "replace").decode("utf-8")
        self.soup = BeautifulSoup(markup, _bs_parser)

    def find_all(self, selectors: Sequence[str], root: Optional[Tag] = None) -> List[Tag]:
        scope = root if root is not None else self.soup
        return scope.select(", ".join(selectors))

    def text_of(self, node: Tag) -> str:
        return node.get_text() or ""

    def children(self, node: Tag) -> List[Tag]:
        return [child for child in node.children if isinstance(child, Tag)]

    def text_children(self, node: Tag) -> List[str]:
        return [
            str(child) for child in node.children
            if isinstance(child, NavigableString) and not isinstance(child, Comment)
        ]


def parse_price(price_text: str) -> int:
    """Leading digit run of the whitespace-stripped text, 0 if there is none."""
    m = _LEADING_PRICE.search(re.sub(r"\s", "", price_text or ""))
    return int(m.group(1)) if m else 0


def is_parking_text(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in PARKING_KEYWORDS)


def mentions_city(text: str) -> bool:
    lowered = text.lower()
    return any(token in lowered for token in CITY_TOKENS)


def build_candidate(title: str, address: str, price: int) -> ParseOutcome:
    """Apply the acceptance filter shared by both passes."""
    if not title:
        return ParseOutcome(skip_reason=SkipReason.MISSING_TITLE)
    if not is_parking_text(title):
        return ParseOutcome(skip_reason=SkipReason.NOT_PARKING)
    if not address:
        return ParseOutcome(skip_reason=SkipReason.MISSING_ADDRESS)
    if not mentions_city(address):
        return ParseOutcome(skip_reason=SkipReason.OUTSIDE_CITY)
    if price <= 0:
        return ParseOutcome(skip_reason=SkipReason.NO_PRICE)
    address = clean_text(address)
    return ParseOutcome(candidate=ParsedCandidate(
        title=clean_text(title),
        address=address,
        neighborhood=classify(address),
        price=price,
    ))


def _first_marker_text(tree: MarkupTree, card: Tag, selectors: Iterable[str]) -> str:
    for selector in selectors:
        nodes = tree.find_all((selector,), root=card)
        if nodes:
            text = tree.text_of(nodes[0]).strip()
            if text:
                return text
    return ""


def parse_card(tree: MarkupTree, card: Tag) -> ParseOutcome:
    title = _first_marker_text(tree, card, TITLE_SELECTORS)
    address = _first_marker_text(tree, card, LOCATION_SELECTORS)
    price_text = _first_marker_text(tree, card, PRICE_SELECTORS) or "0"
    return build_candidate(title, address, parse_price(price_text))


def parse_loose_container(tree: MarkupTree, element: Tag) -> Optional[ParseOutcome]:
    """Heuristic parse of a container; None when it does not look like an ad."""
    text = tree.text_of(element)
    if not (is_parking_text(text) and mentions_city(text)):
        return None

    title = ""
    for link in tree.find_all(("a",), root=element):
        link_text = tree.text_of(link).strip()
        if len(title) < len(link_text) < MAX_TITLE_CHARS:
            title = link_text

    price = 0
    for node in tree.find_all(("*",), root=element):
        m = _EURO_AMOUNT.search(tree.text_of(node).strip())
        if m and int(m.group(1)) > price:
            price = int(m.group(1))

    address = ""
    for chunk in tree.text_children(element):
        chunk = chunk.strip()
        if len(chunk) > MIN_ADDRESS_CHARS and CITY_NAME in chunk.lower():
            address = chunk
            break

    return build_candidate(title, address, price)


def _run_pass(tree, elements, parse_one, label, report) -> List[ParsedCandidate]:
    found = []
    for element in elements:
        try:
            outcome = parse_one(tree, element)
        except Exception as e:
            logger.warning("Skipping %s element after parse error: %s", label, e)
            outcome = ParseOutcome(skip_reason=SkipReason.PARSE_ERROR)
        if outcome is None:
            continue
        if outcome.candidate is not None:
            found.append(outcome.candidate)
        else:
            report.skipped[outcome.skip_reason.value] += 1
    return found


def dedupe(candidates: Iterable[ParsedCandidate]) -> List[ParsedCandidate]:
    """Drop case-insensitive repeats of (title, address, price), keeping the first."""
    seen = set()
    unique = []
    for candidate in candidates:
        if candidate.dedup_key in seen:
            continue
        seen.add(candidate.dedup_key)
        unique.append(candidate)
    return unique


def extract_with_report(markup: str) -> ExtractionReport:
    report = ExtractionReport()
    tree = MarkupTree(markup)

    found = _run_pass(tree, tree.find_all(CARD_SELECTORS), parse_card, "card", report)
    if found:
        report.strategy = "primary"
    else:
        found = _run_pass(tree, tree.find_all(FALLBACK_SELECTORS), parse_loose_container, "fallback", report)
        if found:
            report.strategy = "fallback"

    report.candidates = dedupe(found)
    report.duplicates = len(found) - len(report.candidates)
    logger.debug(
        "Extraction via %s: %d candidates, %d duplicates, skipped=%s",
        report.strategy, len(report.candidates), report.duplicates, dict(report.skipped),
    )
    return report


def extract(markup: str) -> List[ParsedCandidate]:
    return extract_with_report(markup).candidates
