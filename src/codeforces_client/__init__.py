"""Async client for the Codeforces JSON API and its HTML interface."""

from loguru import logger

from codeforces_client.config import ClientConfig, Credentials
from codeforces_client.infrastructure import AuthSession, CodeforcesApiClient
from codeforces_client.infrastructure.parsers import ProblemPageParser
from codeforces_client.services import (
    SubmissionService,
    create_api_client,
    create_health_probes,
    create_page_parser,
    create_session,
    create_submission_service,
    run_health_probes,
)

# Library: applications opt in with logger.enable("codeforces_client").
logger.disable("codeforces_client")

__all__ = [
    "AuthSession",
    "ClientConfig",
    "CodeforcesApiClient",
    "Credentials",
    "ProblemPageParser",
    "SubmissionService",
    "create_api_client",
    "create_health_probes",
    "create_page_parser",
    "create_session",
    "create_submission_service",
    "run_health_probes",
]
