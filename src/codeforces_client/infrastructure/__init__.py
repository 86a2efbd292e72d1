from .cache import ResponseCache
from .codeforces_client import CodeforcesApiClient
from .http_client import AsyncHTTPClient, HTTPResponse
from .rate_limiter import RateLimiter
from .session import AuthSession
from .signing import SignedRequestBuilder

__all__ = [
    "AsyncHTTPClient",
    "AuthSession",
    "CodeforcesApiClient",
    "HTTPResponse",
    "RateLimiter",
    "ResponseCache",
    "SignedRequestBuilder",
]
