"""Helpers shared by the page parsers, the session and the submission service."""

import re
from datetime import timedelta
from typing import Optional

from bs4 import Comment, NavigableString, Tag

TITLE_PREFIX_PATTERN = re.compile(r"^[A-Z]\d*\.\s*")
RATING_PATTERN = re.compile(r"\*(\d+)")
PROBLEM_INDEX_PATTERN = re.compile(r"/problem/([A-Z]\d*)$")
DURATION_MS_PATTERN = re.compile(r"(\d+)\s*ms", re.IGNORECASE)
MEMORY_PATTERN = re.compile(r"(\d+)\s*(KB|MB)", re.IGNORECASE)

# Tried in order; the first match wins.
CSRF_PATTERNS = (
    re.compile(r"""<meta[^>]+name=["']X-Csrf-Token["'][^>]+content=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""<meta[^>]+content=["']([^"']+)["'][^>]+name=["']X-Csrf-Token["']""", re.IGNORECASE),
    re.compile(r"""<input[^>]+name=["']csrf_token["'][^>]+value=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""<input[^>]+value=["']([^"']+)["'][^>]+name=["']csrf_token["']""", re.IGNORECASE),
    re.compile(r'Codeforces\.getCsrfToken[^"]*"([^"]+)"'),
    re.compile(r"""\bcsrf_token\s*[=:]\s*["']([^"']+)["']"""),
)

BOT_CHALLENGE_MARKERS = (
    "<title>just a moment",
    "<title>attention required",
    'id="challenge-form"',
    "cf-challenge",
    "cf_chl_opt",
)

_KB = 1024
_MB = 1024 * 1024


def extract_csrf_token(html: str) -> Optional[str]:
    """
    Find the anti-forgery token in a page.

    Looks at the ``X-Csrf-Token`` meta tag first, then the ``csrf_token``
    hidden input, then inline script. Returns ``None`` when nothing matches.
    """
    for pattern in CSRF_PATTERNS:
        match = pattern.search(html)
        if match:
            return match.group(1)
    return None


def extract_hidden_input(html: str, name: str) -> str:
    """Value of an ``<input name=...>`` in either attribute order, "" if absent."""
    quoted = re.escape(name)
    patterns = (
        rf"""<input[^>]+name=["']{quoted}["'][^>]+value=["']([^"']*)["']""",
        rf"""<input[^>]+value=["']([^"']*)["'][^>]+name=["']{quoted}["']""",
    )
    for pattern in patterns:
        match = re.search(pattern, html, re.IGNORECASE)
        if match:
            return match.group(1)
    return ""


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def clean_title(text: str) -> str:
    """Strip the problem index prefix, e.g. ``"B1. Name"`` -> ``"Name"``."""
    return TITLE_PREFIX_PATTERN.sub("", text.strip()).strip()


def extract_limit(text: str, label: str) -> str:
    """Drop a leading label such as ``time limit per test``."""
    text = collapse_whitespace(text)
    if text.lower().startswith(label.lower()):
        text = text[len(label):]
    return text.strip()


def direct_text(tag: Optional[Tag]) -> str:
    """
    Text of a block without its nested sections.

    Only text nodes and ``<p>`` paragraphs that are direct children are
    used, so headers and sub-blocks handled elsewhere are not repeated.
    """
    if tag is None:
        return ""

    parts = []
    for child in tag.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child))
        elif isinstance(child, Tag) and child.name == "p":
            parts.append(child.get_text(" "))
    return collapse_whitespace(" ".join(parts))


def _pre_chunks(node: Tag):
    for child in node.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            yield str(child)
        elif isinstance(child, Tag):
            if child.name == "br":
                yield "\n"
                continue
            yield from _pre_chunks(child)
            # Newer statements render one <div> per sample line.
            if child.name == "div":
                yield "\n"


def extract_pre_text(tag: Optional[Tag]) -> str:
    """
    Sample text of a ``<pre>`` block.

    ``<br>`` and per-line ``<div>`` wrappers become newlines, carriage
    returns are removed, trailing spaces and tabs are trimmed per line,
    leading indentation is kept and surrounding blank lines are dropped.
    """
    if tag is None:
        return ""

    text = "".join(_pre_chunks(tag)).replace("\r", "")
    lines = [line.rstrip(" \t") for line in text.split("\n")]

    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def parse_rating(text: str) -> Optional[int]:
    match = RATING_PATTERN.search(text)
    return int(match.group(1)) if match else None


def extract_problem_index(href: str) -> str:
    """Problem index from a ``.../problem/<index>`` link, "" if it is not one."""
    match = PROBLEM_INDEX_PATTERN.search(href)
    return match.group(1) if match else ""


def is_bot_challenge(html: str) -> bool:
    """True if the page is a bot-mitigation interstitial rather than content."""
    head = html[:20000].lower()
    return any(marker in head for marker in BOT_CHALLENGE_MARKERS)


def parse_duration_ms(text: str) -> timedelta:
    """``"46 ms"`` -> 46 milliseconds. Anything without ``ms`` is zero."""
    match = DURATION_MS_PATTERN.search(text)
    if not match:
        return timedelta()
    return timedelta(milliseconds=int(match.group(1)))


def parse_memory_bytes(text: str) -> int:
    """``"256 KB"`` -> 262144. Units other than KB and MB are zero."""
    match = MEMORY_PATTERN.search(text)
    if not match:
        return 0
    amount, unit = int(match.group(1)), match.group(2).upper()
    return amount * (_MB if unit == "MB" else _KB)
