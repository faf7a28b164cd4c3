#!/usr/bin/env python3
"""
HTML changelog parsing.

Two page layouts are supported: a product page where each release is an
h2 followed by h3 highlights and collapsible <details> lists, and a
multi-product page of <article> entries told apart by their titles.
"""

import json
import re
from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

from bs4 import BeautifulSoup, Tag

from changelog import ParsedRelease

PATCH_VERSION_PREFIX = re.compile(r"^\d+\.\d+(\.\d+)?:\s*")
DATE_PATTERN = re.compile(r"(\w+ \d{1,2}(?:st|nd|rd|th)?, \d{4})")
MAX_BODY_LENGTH = 300


@dataclass(frozen=True)
class ArticleEntry:
    """One product entry from a multi-product changelog page."""
    title: str
    date: str
    changelog: str

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False, separators=(",", ":"))


def _siblings_until(heading: Tag, name: str):
    """Yield element siblings after heading up to the next <name> element."""
    element = heading.find_next_sibling(True)
    while element is not None and element.name != name:
        yield element
        element = element.find_next_sibling(True)


def _list_items(details: Tag, strip_version: bool = False) -> list[str]:
    items = []
    for li in details.find_all("li"):
        text = li.get_text().strip()
        if strip_version:
            text = PATCH_VERSION_PREFIX.sub("", text)
        if text:
            items.append(f"  • {text}\n")
    return items


def parse_heading_siblings(html: str) -> Optional[ParsedRelease]:
    """
    Parse the newest release from a page of h2-delimited releases.

    The block starts with the h2 title and its h3 highlights, then a blank
    line, then the "Improvements" and "Patches" lists from any <details>
    elements in the same release.
    """
    soup = BeautifulSoup(html, "html.parser")
    heading = soup.find("h2")
    if heading is None:
        return None

    title = heading.get_text().strip()
    if not title:
        return None

    changelog = f"{title}\n"
    for element in _siblings_until(heading, "h2"):
        if element.name == "h3":
            text = element.get_text().strip()
            if text:
                changelog += f"• {text}\n"

    changelog += "\n"

    for element in _siblings_until(heading, "h2"):
        if element.name != "details":
            continue
        summary = "".join(s.get_text() for s in element.find_all("summary")).lower()
        if "improvements" in summary:
            changelog += "Improvements\n"
            changelog += "".join(_list_items(element))
            changelog += "\n"
        elif "patches" in summary:
            changelog += "Patches\n"
            changelog += "".join(_list_items(element, strip_version=True))

    return ParsedRelease(version=title, changelog=changelog, payload=changelog)


def parse_article_entry(html: str, keywords: list[str], limit: int = 10) -> Optional[ArticleEntry]:
    """
    Find the newest article whose title mentions one of the keywords.

    Args:
        html: Changelog page markup
        keywords: Lowercase keywords identifying the product
        limit: Number of leading articles to scan

    Returns:
        ArticleEntry for the first match, or None
    """
    soup = BeautifulSoup(html, "html.parser")

    for article in soup.find_all("article", limit=limit):
        heading = article.find("h2")
        title = heading.get_text().strip() if heading else ""
        if not any(keyword in title.lower() for keyword in keywords):
            continue

        date_text = "".join(p.get_text() for p in article.find_all("p"))
        date_match = DATE_PATTERN.search(date_text)
        published = date_match.group(0) if date_match else date.today().isoformat()

        body = " ".join(el.get_text().strip() for el in article.select("p, ul > li"))
        return ArticleEntry(title=title, date=published, changelog=body[:MAX_BODY_LENGTH])

    return None


def parse_article_release(html: str, keywords: list[str], limit: int = 10) -> Optional[ParsedRelease]:
    """Article entry as a release: announced by title, fingerprinted on all fields."""
    entry = parse_article_entry(html, keywords, limit)
    if entry is None:
        return None
    return ParsedRelease(version=entry.title, changelog=entry.title, payload=entry.to_json())
