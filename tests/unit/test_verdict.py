"""Unit tests for verdict normalization and status classification."""

import pytest

from codeforces_client.domain.models.submission import (
    SubmissionResult,
    SubmissionState,
    Verdict,
    classify_status,
    normalize_verdict,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Accepted", "OK"),
        ("  Accepted  ", "OK"),
        ("Accepted (partial)", "OK"),
        ("Pretests passed", "OK"),
        ("Wrong answer on test 5", "WRONG_ANSWER"),
        ("Wrong answer", "WRONG_ANSWER"),
        ("Time limit exceeded on test 3", "TIME_LIMIT_EXCEEDED"),
        ("Memory limit exceeded", "MEMORY_LIMIT_EXCEEDED"),
        ("Runtime error on test 1", "RUNTIME_ERROR"),
        ("Compilation error", "COMPILATION_ERROR"),
        ("Presentation error", "PRESENTATION_ERROR"),
        ("Idleness limit exceeded", "IDLENESS_LIMIT_EXCEEDED"),
        ("Hacked", "CHALLENGED"),
        ("WRONG_ANSWER", "WRONG_ANSWER"),
        ("Unknown verdict", "Unknown verdict"),
        ("", ""),
    ],
)
def test_normalize_verdict(text, expected):
    assert normalize_verdict(text) == expected


@pytest.mark.parametrize(
    "text, state",
    [
        ("", SubmissionState.QUEUED),
        ("In queue", SubmissionState.QUEUED),
        ("Waiting", SubmissionState.QUEUED),
        ("Running on test 5", SubmissionState.RUNNING),
        ("Testing", SubmissionState.RUNNING),
        ("Compiling", SubmissionState.RUNNING),
        ("Accepted", SubmissionState.TERMINAL),
        ("Wrong answer on test 2", SubmissionState.TERMINAL),
    ],
)
def test_classify_status(text, state):
    assert classify_status(text).state is state


def test_terminal_transition_carries_verdict():
    transition = classify_status("Time limit exceeded on test 12")

    assert transition.is_terminal
    assert transition.verdict == Verdict.TIME_LIMIT_EXCEEDED
    assert transition.label == "TIME_LIMIT_EXCEEDED"


def test_transition_labels():
    assert classify_status("In queue").label == "In queue"
    assert classify_status("Running on test 1").label == "Running"
    assert classify_status("Accepted").label == "Accepted"


def test_submission_result_defaults():
    result = SubmissionResult(submission_id=123456789, contest_id=1)

    assert result.time.total_seconds() == 0
    assert result.memory == 0
    assert result.submitted_at is None
    assert not result.is_accepted
    assert not result.is_terminal


def test_submission_result_terminal_states():
    assert SubmissionResult(1, 1, verdict="OK", status="Accepted").is_accepted
    assert SubmissionResult(1, 1, verdict="WRONG_ANSWER", status="Wrong answer on test 3").is_terminal
    assert not SubmissionResult(1, 1, status="Running").is_terminal
