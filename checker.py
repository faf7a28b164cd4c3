#!/usr/bin/env python3
"""
Per-source change detection.

check_source fetches one changelog, fingerprints its latest release and
returns a notification message when the fingerprint differs from the
stored one. run_checks does that for every source concurrently.
"""

import asyncio
import logging
from hashlib import sha256
from typing import Optional

import requests

from changelog import ParsedRelease
from sources import SourceConfig, fetch_document, parse_document

logger = logging.getLogger(__name__)


def generate_message(tool_name: str, changelog: str, link: str) -> str:
    """Render the notification text. The body is lowercased; the notifier does the escaping."""
    return f"{tool_name} release\n\n{changelog.lower()}\n\n{link}"


def fingerprint(release: ParsedRelease) -> str:
    return sha256(release.fingerprint_text().encode("utf-8")).hexdigest()


def check_source(source: SourceConfig, storage, timeout: int = 30,
                 fetch=None) -> Optional[str]:
    """
    Check one source for a new release.

    Args:
        source: Source to check
        storage: Fingerprint store with get_value/set_value
        timeout: HTTP timeout in seconds
        fetch: Document fetcher, fetch(url, timeout) -> str (default: fetch_document)

    Returns:
        Notification message if the latest release changed, else None
    """
    fetch = fetch or fetch_document
    try:
        document = fetch(source.url, timeout=timeout)
        release = parse_document(source, document)
        if release is None:
            logger.debug(f"No release section found for {source.key}")
            return None

        content_hash = fingerprint(release)
        last_hash = storage.get_value(source.key, "")
        if content_hash == last_hash:
            logger.debug(f"No changes for {source.key}")
            return None

        storage.set_value(source.key, content_hash)
        logger.info(f"New release for {source.key}: {release.version}")
        return generate_message(source.name, release.changelog.strip(), source.link)

    except requests.RequestException as e:
        logger.warning(f"Fetch failed for {source.key}: {e}")
        return None
    except Exception as e:
        logger.error(f"Check failed for {source.key}: {e}", exc_info=True)
        return None


async def run_checks(sources: list[SourceConfig], storage,
                     timeout: int = 30) -> list[tuple[SourceConfig, Optional[str]]]:
    """
    Check all sources concurrently and wait for every one to finish.

    Returns:
        (source, message or None) pairs in the order of sources
    """
    results = await asyncio.gather(
        *(asyncio.to_thread(check_source, source, storage, timeout) for source in sources),
        return_exceptions=True,
    )

    outcomes = []
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            logger.error(f"Check task for {source.key} failed: {result}")
            result = None
        outcomes.append((source, result))
    return outcomes
