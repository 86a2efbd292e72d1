"""Exception hierarchy for the Codeforces client."""

from enum import Enum


class ErrorCategory(str, Enum):
    """Coarse error category a caller can branch on."""

    TRANSPORT = "transport"
    HTTP = "http"
    API = "api"
    PARSE = "parse"
    AUTH = "auth"
    SUBMISSION = "submission"
    TIMEOUT = "timeout"
    CONFIG = "config"


class CodeforcesClientError(Exception):
    """Base exception for all client errors."""

    category: ErrorCategory = ErrorCategory.API


# Transport / HTTP / API


class TransportError(CodeforcesClientError):
    """Network, DNS or timeout failure before a response was received."""

    category = ErrorCategory.TRANSPORT

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(message)


class HTTPStatusError(CodeforcesClientError):
    """Server answered with an unexpected HTTP status."""

    category = ErrorCategory.HTTP

    def __init__(self, status_code: int, body: str = "", url: str | None = None):
        self.status_code = status_code
        self.body = body
        self.url = url
        snippet = body[:200]
        super().__init__(f"HTTP {status_code} for {url}: {snippet}" if url else f"HTTP {status_code}: {snippet}")


class APIError(CodeforcesClientError):
    """The JSON API returned a FAILED envelope."""

    category = ErrorCategory.API

    def __init__(self, comment: str, method: str | None = None):
        self.comment = comment
        self.method = method
        super().__init__(f"API error in {method}: {comment}" if method else f"API error: {comment}")


class NotFoundError(CodeforcesClientError):
    """Requested contest, problem or submission does not exist."""

    category = ErrorCategory.API


# Parsing


class ParsingError(CodeforcesClientError):
    """Error parsing HTML or JSON content."""

    category = ErrorCategory.PARSE


class ResponseDecodeError(ParsingError):
    """Response body is not a valid API document."""


class PageStructureError(ParsingError):
    """Page markup no longer matches the selector table."""

    def __init__(self, missing: list[str], selector_version: str, url: str | None = None):
        self.missing = list(missing)
        self.selector_version = selector_version
        self.url = url
        super().__init__(
            f"selectors not found: {', '.join(self.missing)} (selector version: {selector_version})"
        )


# Authentication


class AuthenticationError(CodeforcesClientError):
    """Session is not usable; the caller should re-authenticate."""

    category = ErrorCategory.AUTH


class NotAuthenticatedError(AuthenticationError):
    """Handle or session cookies are missing."""


class CSRFTokenNotFoundError(AuthenticationError):
    """None of the supported CSRF token patterns matched."""

    def __init__(self, url: str | None = None):
        self.url = url
        super().__init__(f"csrf token not found on {url}" if url else "csrf token not found")


class BypassCookieExpiredError(AuthenticationError):
    """Bot-mitigation bypass cookie is empty or past its expiry."""


class BotChallengeError(AuthenticationError):
    """A bot-mitigation challenge page was served instead of content."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(
            f"bot challenge page served for {url} (HTTP {status_code}); "
            "refresh the bypass cookie and its user agent"
        )


class SessionValidationError(AuthenticationError):
    """Cookies are present but the site does not recognise the session."""


# Submission


class SubmissionError(CodeforcesClientError):
    """Submission was not accepted by the site."""

    category = ErrorCategory.SUBMISSION

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class DuplicateSubmissionError(SubmissionError):
    """Exactly the same source was submitted before."""

    def __init__(self, status_code: int | None = None, body: str = ""):
        super().__init__(
            "duplicate submission: you have submitted exactly the same code before",
            status_code,
            body,
        )


class SourceTooLongError(SubmissionError):
    """Source exceeds the site's size limit."""

    def __init__(self, status_code: int | None = None, body: str = ""):
        super().__init__("source code is too long", status_code, body)


class SubmissionNotAllowedError(SubmissionError):
    """The account may not submit to this contest."""

    def __init__(self, status_code: int | None = None, body: str = ""):
        super().__init__("you are not allowed to submit to this contest", status_code, body)


class ContestOverError(SubmissionError):
    """Contest has finished and no longer accepts submissions."""

    def __init__(self, status_code: int | None = None, body: str = ""):
        super().__init__("contest is over", status_code, body)


class VerdictTimeoutError(CodeforcesClientError):
    """Verdict polling deadline passed before a terminal status."""

    category = ErrorCategory.TIMEOUT

    def __init__(self, submission_id: int, timeout: float):
        self.submission_id = submission_id
        self.timeout = timeout
        super().__init__(f"timeout waiting for verdict of submission {submission_id} after {timeout:g}s")


class ConfigurationError(CodeforcesClientError):
    """Configuration values are missing or invalid."""

    category = ErrorCategory.CONFIG
