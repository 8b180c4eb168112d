"""Tests for the domain models."""

import math

import pytest
from pydantic import ValidationError

from editorial_checker.domain.errors import ConfigurationError

from editorial_checker.domain.models.claim import Claim, ClaimKind, ClaimPriority
from editorial_checker.domain.models.job import JobState, JobStatus
from editorial_checker.domain.models.options import FactCheckOptions, RecencyWindow
from editorial_checker.domain.models.report import (
    IssueLabel,
    Report,
    ReportStatus,
    Severity,
    VerificationMode,
    clamp_score,
    round_half_up,
)
from editorial_checker.domain.models.verification import (
    Citation,
    ConfidenceLevel,
    CredibilityLevel,
    DEFAULT_EXPLANATION,
    IssueType,
    Verdict,
)


def test_claim_strips_text():
    claim = Claim(text="  Unemployment fell to 3.9%.  ", kind=ClaimKind.STATISTIC)
    assert claim.text == "Unemployment fell to 3.9%."
    assert claim.priority == ClaimPriority.MEDIUM


def test_claim_rejects_blank_text():
    with pytest.raises(ValidationError):
        Claim(text="   ")


def test_claim_is_immutable():
    claim = Claim(text="The bridge opened in 1932.")
    with pytest.raises(ValidationError):
        claim.text = "changed"


def test_citation_title_derived_from_url():
    citation = Citation(title="", url="https://www.reuters.com/world/story")
    assert citation.title == "www.reuters.com"
    assert citation.credibility == CredibilityLevel.MEDIUM


def test_citation_coerces_unknown_credibility():
    citation = Citation(title="Blog", url="https://blog.example.com", credibility="very high")
    assert citation.credibility == CredibilityLevel.MEDIUM


def test_citation_equality_uses_every_field():
    first = Citation(title="A", url="https://a.example.com")
    same = Citation(title="A", url="https://a.example.com")
    retitled = Citation(title="B", url="https://a.example.com")

    assert first == same
    assert hash(first) == hash(same)
    assert first != retitled


@pytest.mark.parametrize(
    "raw,expected",
    [
        (True, True),
        ("true", True),
        ("Yes", True),
        (1, True),
        (False, False),
        ("false", False),
        ("maybe", False),
        (None, False),
        (0, False),
    ],
)
def test_verdict_coerces_is_accurate(raw, expected):
    verdict = Verdict(claim="X", is_accurate=raw)
    assert verdict.is_accurate is expected


def test_verdict_defaults_for_unknown_values():
    verdict = Verdict(claim="X", confidence="certain", issue_type="fabricated", explanation="  ")

    assert verdict.confidence == ConfidenceLevel.LOW
    assert verdict.issue_type == IssueType.UNVERIFIED
    assert verdict.explanation == DEFAULT_EXPLANATION


def test_verdict_counts_as_accurate_requires_confidence():
    assert Verdict(claim="X", is_accurate=True, confidence="high").counts_as_accurate
    assert Verdict(claim="X", is_accurate=True, confidence="medium").counts_as_accurate
    assert not Verdict(claim="X", is_accurate=True, confidence="low").counts_as_accurate
    assert not Verdict(claim="X", is_accurate=False, confidence="high").counts_as_accurate


@pytest.mark.parametrize(
    "value,expected",
    [
        (57.5, 58),
        (12.5, 13),
        (-3, 0),
        (140, 100),
        ("88", 88),
        ("high", 0),
        (None, 0),
        (True, 0),
        (math.nan, 0),
        (math.inf, 100),
        (-math.inf, 0),
    ],
)
def test_clamp_score(value, expected):
    assert clamp_score(value) == expected


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_report_clamps_score():
    report = Report(score=150, status=ReportStatus.VERIFIED, description="", mode=VerificationMode.AGGREGATE)
    assert report.score == 100

    report = Report(score=-20, status=ReportStatus.FALSE, description="", mode=VerificationMode.AGGREGATE)
    assert report.score == 0


def test_report_to_dict_uses_wire_values():
    report = Report(
        score=53,
        status=ReportStatus.MULTIPLE_ERRORS,
        description="Summary",
        mode=VerificationMode.MULTISTEP,
        sources=[Citation(title="A", url="https://a.example.com")],
    )

    data = report.to_dict()

    assert data["status"] == "Multiple Errors"
    assert data["mode"] == "multistep"
    assert data["sources"] == [{"title": "A", "url": "https://a.example.com", "credibility": "medium"}]


def test_issue_enum_values():
    assert IssueLabel.MISSING_CONTEXT.value == "Missing Context"
    assert Severity.HIGH.value == "high"


def test_options_recency_description():
    assert FactCheckOptions().recency_description == "1 week"
    assert FactCheckOptions(recency_window=RecencyWindow.DAY, recency_value=3).recency_description == "3 days"


def test_options_reject_invalid_values():
    with pytest.raises(ValidationError):
        FactCheckOptions(max_claims=0)
    with pytest.raises(ValidationError):
        FactCheckOptions(request_delay=-1)


def test_options_from_env(monkeypatch):
    monkeypatch.setenv("PERPLEXITY_MODEL", "sonar")
    monkeypatch.setenv("FACT_CHECK_RECENCY", "month")
    monkeypatch.setenv("FACT_CHECK_RECENCY_VALUE", "2")
    monkeypatch.setenv("FACT_CHECK_MAX_CLAIMS", "4")
    monkeypatch.setenv("FACT_CHECK_MULTISTEP", "false")
    monkeypatch.setenv("FACT_CHECK_REQUEST_DELAY", "0")

    options = FactCheckOptions.from_env()

    assert options.model == "sonar"
    assert options.recency_window == RecencyWindow.MONTH
    assert options.recency_value == 2
    assert options.max_claims == 4
    assert options.multistep_enabled is False
    assert options.request_delay == 0.0


def test_options_from_env_defaults(monkeypatch):
    for name in (
        "PERPLEXITY_MODEL", "FACT_CHECK_RECENCY", "FACT_CHECK_RECENCY_VALUE",
        "FACT_CHECK_MAX_CLAIMS", "FACT_CHECK_MULTISTEP", "FACT_CHECK_REQUEST_DELAY",
    ):
        monkeypatch.delenv(name, raising=False)

    assert FactCheckOptions.from_env() == FactCheckOptions()


def test_job_state_lifecycle():
    state = JobState(job_id="job-1")
    assert state.status == JobStatus.QUEUED
    assert not state.is_finished

    state.mark_processing(42.7, "verifying", "Verifying claim 2 of 5...")
    assert state.status == JobStatus.PROCESSING
    assert state.progress == 42

    state.mark_completed({"score": 90})
    assert state.is_finished
    assert state.progress == 100
    assert state.to_dict()["report"] == {"score": 90}


def test_job_state_failure():
    state = JobState(job_id="job-2")
    state.mark_failed("Perplexity API key not configured")

    data = state.to_dict()
    assert data["status"] == "failed"
    assert data["error"] == "Perplexity API key not configured"
    assert state.is_finished


def test_unknown_job_state():
    state = JobState.unknown("missing")
    assert state.status == JobStatus.UNKNOWN
    assert state.to_dict()["status"] == "unknown"


@pytest.mark.parametrize(
    "name,value",
    [
        ("FACT_CHECK_MAX_CLAIMS", "ten"),
        ("FACT_CHECK_RECENCY_VALUE", "1.5"),
        ("FACT_CHECK_REQUEST_DELAY", "fast"),
        ("FACT_CHECK_RECENCY", "decade"),
        ("FACT_CHECK_MAX_CLAIMS", "0"),
    ],
)
def test_options_from_env_rejects_bad_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError) as exc_info:
        FactCheckOptions.from_env()

    assert "Invalid fact-check configuration" in str(exc_info.value)
