"""Parsers for extracting data from Codeforces pages."""

from .interfaces import HTTPClientProtocol, PageFetcherProtocol, ProblemPageParserProtocol
from .problem_page_parser import ProblemPageParser
from .selectors import CURRENT_SELECTORS, SelectorProvider, SelectorSet, StaticSelectorProvider
from .submission_page_parser import (
    find_missing_form_elements,
    parse_submission_listing,
    parse_submission_page,
    parse_submission_row,
)
from .url_parser import URLParser, URLParsingError

__all__ = [
    "CURRENT_SELECTORS",
    "HTTPClientProtocol",
    "PageFetcherProtocol",
    "ProblemPageParser",
    "ProblemPageParserProtocol",
    "SelectorProvider",
    "SelectorSet",
    "StaticSelectorProvider",
    "URLParser",
    "URLParsingError",
    "find_missing_form_elements",
    "parse_submission_listing",
    "parse_submission_page",
    "parse_submission_row",
]
