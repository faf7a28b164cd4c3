#!/usr/bin/env python3
"""
Changelog sources configuration.

Each source defines where its changelog lives and which parser reads it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import requests

from changelog import (
    ParsedRelease,
    parse_complex_changelog,
    parse_simple_changelog,
    parse_standard_changelog,
)
from html_changelog import parse_article_release, parse_heading_siblings

USER_AGENT = "Mozilla/5.0 (compatible; ChangelogSentinel/1.0)"
RAW_GITHUB = "https://raw.githubusercontent.com"


class SectionStyle(Enum):
    SIMPLE = "simple"
    STANDARD = "standard"
    COMPLEX = "complex"
    HTML_HEADINGS = "html_headings"
    HTML_ARTICLE = "html_article"


@dataclass(frozen=True)
class SourceConfig:
    """A monitored changelog."""
    key: str  # fingerprint store key
    name: str  # tool name used in the notification
    url: str  # document to fetch
    link: str  # link shown to readers
    style: SectionStyle
    keywords: tuple[str, ...] = ()  # HTML_ARTICLE only
    article_limit: int = 10


SOURCES = {
    "claude": SourceConfig(
        key="claude",
        name="claude code",
        url=f"{RAW_GITHUB}/anthropics/claude-code/main/CHANGELOG.md",
        link="https://github.com/anthropics/claude-code/blob/main/CHANGELOG.md",
        style=SectionStyle.SIMPLE,
    ),
    "cursor": SourceConfig(
        key="cursor",
        name="cursor",
        url="https://cursor.com/changelog",
        link="https://cursor.com/changelog",
        style=SectionStyle.HTML_HEADINGS,
    ),
    "v0": SourceConfig(
        key="v0",
        name="v0",
        url="https://vercel.com/changelog",
        link="https://vercel.com/changelog",
        style=SectionStyle.HTML_ARTICLE,
        keywords=("v0",),
        article_limit=5,
    ),
    "elements": SourceConfig(
        key="elements",
        name="ai elements",
        url="https://vercel.com/changelog",
        link="https://vercel.com/changelog",
        style=SectionStyle.HTML_ARTICLE,
        keywords=("ai elements", "elements", "ai-elements"),
    ),
    "aiSdk": SourceConfig(
        key="aiSdk",
        name="ai sdk",
        url=f"{RAW_GITHUB}/vercel/ai/main/packages/ai/CHANGELOG.md",
        link="https://github.com/vercel/ai/blob/main/packages/ai/CHANGELOG.md",
        style=SectionStyle.COMPLEX,
    ),
    "wagmi": SourceConfig(
        key="wagmi",
        name="wagmi",
        url=f"{RAW_GITHUB}/wevm/wagmi/refs/heads/main/packages/core/CHANGELOG.md",
        link="https://github.com/wevm/wagmi/blob/main/packages/core/CHANGELOG.md",
        style=SectionStyle.STANDARD,
    ),
    "viem": SourceConfig(
        key="viem",
        name="viem",
        url=f"{RAW_GITHUB}/wevm/viem/refs/heads/main/src/CHANGELOG.md",
        link="https://github.com/wevm/viem/blob/main/src/CHANGELOG.md",
        style=SectionStyle.STANDARD,
    ),
}

Parser = Callable[[str, SourceConfig], Optional[ParsedRelease]]

PARSERS: dict[SectionStyle, Parser] = {
    SectionStyle.SIMPLE: lambda document, source: parse_simple_changelog(document),
    SectionStyle.STANDARD: lambda document, source: parse_standard_changelog(document),
    SectionStyle.COMPLEX: lambda document, source: parse_complex_changelog(document),
    SectionStyle.HTML_HEADINGS: lambda document, source: parse_heading_siblings(document),
    SectionStyle.HTML_ARTICLE: lambda document, source: parse_article_release(
        document, list(source.keywords), source.article_limit
    ),
}


def fetch_document(url: str, timeout: int = 30) -> str:
    """
    Fetch a changelog document as UTF-8 text.

    Raises:
        requests.RequestException: on network errors or non-2xx responses
    """
    response = requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
    response.raise_for_status()
    response.encoding = "utf-8"
    return response.text


def parse_document(source: SourceConfig, document: str) -> Optional[ParsedRelease]:
    """Run the parser registered for the source's section style."""
    return PARSERS[source.style](document, source)


def get_sources(keys: Optional[list[str]] = None) -> list[SourceConfig]:
    """
    Look up sources by key, in registry order when no keys are given.

    Raises:
        KeyError: for an unknown source key
    """
    if keys is None:
        return list(SOURCES.values())
    unknown = [key for key in keys if key not in SOURCES]
    if unknown:
        raise KeyError(f"Unknown source: {', '.join(unknown)}")
    return [SOURCES[key] for key in keys]


def list_sources() -> list[str]:
    """List all available source keys."""
    return list(SOURCES.keys())
