#!/usr/bin/env python3
"""
Markdown changelog parsing.

Finds the latest release section in a CHANGELOG.md and turns its bullets
into a short "• "-prefixed block suitable for a Telegram message.
"""

import re
from dataclasses import dataclass
from typing import Optional

SIMPLE_VERSION_PATTERN = re.compile(r"^##\s+\d+\.\d+(\.\d+)?$")
VERSION_PATTERN = re.compile(r"^##\s+\d+\.\d+\.\d+")

BULLET_PATTERN = re.compile(r"^(\s*)[-*+]\s+(.+)$")
SIMPLE_BULLET_PATTERN = re.compile(r"^-\s+")
HEADER_PREFIX = re.compile(r"^##\s+")
COMMIT_PREFIX = re.compile(r"^[a-f0-9]{7,}:\s*(.+)$")

# Applied in order. Attribution removal must run before the conventional
# commit prefix is stripped.
CLEANUP_RULES = [
    (re.compile(r"\[#\d+\]\([^)]+\)"), ""),
    (re.compile(r"\[`[a-f0-9]+`\]\([^)]+\)"), ""),
    (re.compile(r"Thanks \[@[\w-]+\]\([^)]+\)!?\s*-\s*"), ""),
    (re.compile(r"thanks @[\w-]+(\s*\([^)]+\))?\s*!?\s*-\s*", re.IGNORECASE), ""),
    (re.compile(r"\[`[a-f0-9]{7,}`\]"), ""),
    (re.compile(r"^(feat|fix|chore)\s*(\([^)]+\))?\s*:\s*", re.IGNORECASE), ""),
    (re.compile(r"^-\s*"), ""),
    (re.compile(r"\.\s*$"), ""),
    (re.compile(r"\s+"), " "),
]

# Substrings that mark a bullet as noise. Monorepo release notes list
# package bumps such as "@wagmi/core@2.1.0" as bullets.
NOISE_SUBSTRINGS = ["core@", "connectors@"]
NOISE_PATTERNS = [
    re.compile(r"^[a-f0-9]{7,}"),
    re.compile(r"^#{1,6}\s"),
    re.compile(r"^\[.*\]:$"),
]

MEANINGFUL_WORDS = [
    "feat",
    "fix",
    "add",
    "improve",
    "support",
    "throw",
    "when",
    "error",
    "callback",
    "sent",
    "remove",
    "update",
    "change",
]

MIN_ENTRY_LENGTH = 8
TERSE_RELEASE_LINES = 4


@dataclass(frozen=True)
class ParsedRelease:
    """Latest release extracted from a changelog document."""
    version: str
    changelog: str  # newline-joined "• " / "  • " lines, may be empty
    payload: Optional[str] = None  # text to fingerprint, defaults to version + changelog

    def fingerprint_text(self) -> str:
        if self.payload is not None:
            return self.payload
        return self.version + self.changelog


def clean_changelog_text(text: str) -> str:
    """Strip markdown links, contributor credits and commit noise from a bullet."""
    for pattern, replacement in CLEANUP_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def is_valid_changelog_entry(text: str) -> bool:
    """Return True if a cleaned bullet is a real, displayable change."""
    if len(text) <= MIN_ENTRY_LENGTH:
        return False
    if "thanks @" in text.lower():
        return False
    if text.startswith("Updated dependencies") or text.startswith("@"):
        return False
    if text == "-":
        return False
    if any(noise in text for noise in NOISE_SUBSTRINGS):
        return False
    return not any(pattern.match(text) for pattern in NOISE_PATTERNS)


def is_meaningful_change(text: str) -> bool:
    return any(word in text for word in MEANINGFUL_WORDS)


def version_label(line: str) -> str:
    return HEADER_PREFIX.sub("", line).strip()


def parse_simple_changelog(markdown: str) -> Optional[ParsedRelease]:
    """
    Parse a terse changelog with "## X.Y[.Z]" headers and "- " bullets.

    Bullets are taken verbatim; the source is trusted to be clean already.
    """
    version = ""
    changelog = ""

    for line in markdown.splitlines():
        if SIMPLE_VERSION_PATTERN.match(line):
            if version:
                break
            version = version_label(line)
            continue

        if version and SIMPLE_BULLET_PATTERN.match(line):
            bullet_text = SIMPLE_BULLET_PATTERN.sub("", line).strip()
            if bullet_text:
                changelog += f"• {bullet_text}\n"

    return ParsedRelease(version, changelog) if version else None


def parse_standard_changelog(markdown: str,
                             version_pattern: re.Pattern = VERSION_PATTERN) -> Optional[ParsedRelease]:
    """
    Parse the first release section, cleaning and filtering every bullet.

    Args:
        markdown: Raw CHANGELOG.md text
        version_pattern: Regex matching a release header line

    Returns:
        ParsedRelease for the first header, or None if no header matches
    """
    version = ""
    changelog = ""

    for line in markdown.splitlines():
        if version_pattern.match(line):
            if version:
                break
            version = version_label(line)
            continue

        if not version:
            continue

        bullet = BULLET_PATTERN.match(line)
        if not bullet:
            continue

        indentation, bullet_text = bullet.groups()
        clean_text = clean_changelog_text(bullet_text)
        if is_valid_changelog_entry(clean_text):
            prefix = "  • " if len(indentation) > 2 else "• "
            changelog += f"{prefix}{clean_text}\n"

    return ParsedRelease(version, changelog) if version else None


def _complex_bullet(line: str, accumulated: str) -> Optional[str]:
    """Return the formatted bullet for a line under the current version, if any."""
    bullet = BULLET_PATTERN.match(line)
    if not bullet:
        return None

    indentation, bullet_text = bullet.groups()
    text = bullet_text.strip()

    commit = COMMIT_PREFIX.match(text)
    if commit:
        text = commit.group(1)

    if not is_valid_changelog_entry(text):
        return None

    terse = len(accumulated.split("\n")) < TERSE_RELEASE_LINES
    if not (is_meaningful_change(text) or terse):
        return None

    text = clean_changelog_text(text)
    if len(text) <= MIN_ENTRY_LENGTH:
        return None

    prefix = "  • " if indentation else "• "
    return f"{prefix}{text}\n"


def parse_complex_changelog(markdown: str,
                            version_pattern: re.Pattern = VERSION_PATTERN) -> Optional[ParsedRelease]:
    """
    Parse a monorepo changelog where the newest versions are often bump-only.

    Versions are scanned newest first. A version whose bullets all get filtered
    out is skipped; the first version that keeps at least one bullet is the
    result, and scanning stops at the header that follows it. If the document
    ends first, the last version seen is used when it kept any bullets.
    """
    current_version = ""
    current_changelog = ""

    for line in markdown.splitlines():
        if version_pattern.match(line):
            if current_changelog.strip():
                return ParsedRelease(current_version, current_changelog)
            current_version = version_label(line)
            current_changelog = ""
            continue

        if current_version:
            formatted = _complex_bullet(line, current_changelog)
            if formatted:
                current_changelog += formatted

    if current_changelog.strip():
        return ParsedRelease(current_version, current_changelog)
    return None
