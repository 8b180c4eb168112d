"""Tests for the fact checking service."""

import asyncio

import pytest

from editorial_checker.domain.errors import ConfigurationError, ProviderHTTPError
from editorial_checker.domain.models.options import FactCheckOptions
from editorial_checker.domain.models.report import ReportStatus, VerificationMode
from editorial_checker.domain.services.fact_checking_service import FactCheckingService, format_current_date

ARTICLE = """City council approves new budget

Unemployment fell to 3.9% in March. The mayor is Jane Doe.
The bridge opened in 1932. The budget grew by 40%."""


class RecordingProgress:
    """Progress reporter that keeps every update."""

    def __init__(self):
        self.updates = []

    def report(self, percent, stage, message):
        self.updates.append((percent, stage, message))

    @property
    def percents(self):
        return [percent for percent, _, _ in self.updates]


class ExplodingProgress:
    """Progress reporter whose every update fails."""

    def report(self, percent, stage, message):
        raise RuntimeError("UI disconnected")


def extraction(*texts):
    return {"claims": [{"claim": text, "type": "general_fact", "priority": "high"} for text in texts]}


def verification(accurate, confidence, issue_type, explanation="Checked."):
    return {
        "is_accurate": accurate,
        "confidence": confidence,
        "issue_type": issue_type,
        "explanation": explanation,
        "sources": [],
    }


@pytest.fixture
def service(fake_provider, options, no_throttle) -> FactCheckingService:
    return FactCheckingService(fake_provider, options, throttle=no_throttle)


@pytest.fixture
def aggregate_service(fake_provider, no_throttle) -> FactCheckingService:
    return FactCheckingService(
        fake_provider,
        FactCheckOptions(multistep_enabled=False, request_delay=0),
        throttle=no_throttle,
    )


def test_format_current_date(today):
    assert format_current_date(today) == "October 19, 2026"


def test_mode(service, aggregate_service):
    assert service.mode == VerificationMode.MULTISTEP
    assert aggregate_service.mode == VerificationMode.AGGREGATE


@pytest.mark.asyncio
async def test_multistep_scores_four_claims(service, fake_provider, make_completion, today):
    fake_provider.queue(
        make_completion(extraction("A", "B", "C", "D")),
        make_completion(verification(True, "high", "none")),
        make_completion(verification(False, "low", "unverified")),
        make_completion(verification(False, "medium", "outdated")),
        make_completion(verification(False, "high", "factual_error")),
    )

    report = await service.fact_check(ARTICLE, current_date=today)

    assert report.score == 53
    assert report.status == ReportStatus.MULTIPLE_ERRORS
    assert report.mode == VerificationMode.MULTISTEP
    assert len(report.issues) == 3
    assert len(report.verified_facts) == 1
    assert report.total_claims == 4
    assert fake_provider.call_count == 5
    assert all("October 19, 2026" in request.user_prompt for request in fake_provider.requests)


@pytest.mark.asyncio
async def test_multistep_progress_milestones(service, fake_provider, make_completion, today):
    fake_provider.queue(
        make_completion(extraction("A", "B")),
        make_completion(verification(True, "high", "none")),
        make_completion(verification(True, "medium", "none")),
    )
    progress = RecordingProgress()

    await service.fact_check(ARTICLE, progress=progress, current_date=today)

    assert progress.percents == [10, 20, 30, 60, 90, 95, 100]
    assert progress.updates[-1][1] == "complete"


@pytest.mark.asyncio
async def test_satire_short_circuits(service, fake_provider):
    progress = RecordingProgress()

    report = await service.fact_check("This parody imagines the mayor as a golden retriever.", progress=progress)

    assert report.score == 100
    assert report.status == ReportStatus.SATIRE
    assert fake_provider.call_count == 0
    assert progress.percents[-1] == 100


@pytest.mark.asyncio
async def test_no_claims_needs_review(service, fake_provider, make_completion):
    fake_provider.queue(make_completion({"claims": []}))

    report = await service.fact_check(ARTICLE)

    assert report.score == 75
    assert report.status == ReportStatus.NEEDS_REVIEW
    assert report.issues == []
    assert fake_provider.call_count == 1


@pytest.mark.asyncio
async def test_extraction_failure_treated_as_no_claims(service, fake_provider):
    fake_provider.queue(ProviderHTTPError(503, "Service unavailable"))

    report = await service.fact_check(ARTICLE)

    assert report.score == 75
    assert report.status == ReportStatus.NEEDS_REVIEW


@pytest.mark.asyncio
async def test_unconfigured_provider_raises_before_any_call(unconfigured_provider, options, no_throttle):
    service = FactCheckingService(unconfigured_provider, options, throttle=no_throttle)

    with pytest.raises(ConfigurationError):
        await service.fact_check(ARTICLE)

    assert unconfigured_provider.call_count == 0


@pytest.mark.asyncio
async def test_failed_claim_does_not_abort_run(service, fake_provider, make_completion):
    fake_provider.queue(
        make_completion(extraction("A", "B", "C")),
        make_completion(verification(True, "high", "none")),
        ProviderHTTPError(500, "Internal error"),
        make_completion("not json at all"),
    )

    report = await service.fact_check(ARTICLE)

    assert len(report.verified_facts) == 1
    assert [issue.the_problem for issue in report.issues] == [
        "HTTP error during verification",
        "Failed to parse verification result",
    ]
    # (100 + 80 + 80) / 3 = 86.67 -> 87
    assert report.score == 87
    assert report.status == ReportStatus.MOSTLY_ACCURATE


@pytest.mark.asyncio
async def test_unexpected_error_becomes_unverified(service, fake_provider, make_completion):
    fake_provider.queue(
        make_completion(extraction("A")),
        RuntimeError("boom"),
    )

    report = await service.fact_check(ARTICLE)

    assert report.issues[0].the_problem == "Unexpected error during verification"
    assert report.score == 80


@pytest.mark.asyncio
async def test_configuration_error_during_verification_propagates(service, fake_provider, make_completion):
    fake_provider.queue(
        make_completion(extraction("A", "B")),
        ConfigurationError("API key revoked"),
    )

    with pytest.raises(ConfigurationError):
        await service.fact_check(ARTICLE)


@pytest.mark.asyncio
async def test_cancellation_compiles_verified_subset(service, fake_provider, make_completion):
    cancel = asyncio.Event()

    class CancelAfterFirstClaim(RecordingProgress):
        def report(self, percent, stage, message):
            super().report(percent, stage, message)
            if message.startswith("Verifying claim 1"):
                cancel.set()

    fake_provider.queue(
        make_completion(extraction("A", "B", "C")),
        make_completion(verification(True, "high", "none")),
    )

    report = await service.fact_check(ARTICLE, progress=CancelAfterFirstClaim(), cancel_event=cancel)

    assert fake_provider.call_count == 2
    assert report.total_claims == 1
    assert report.score == 100


@pytest.mark.asyncio
async def test_progress_failures_are_ignored(service, fake_provider, make_completion):
    fake_provider.queue(
        make_completion(extraction("A")),
        make_completion(verification(True, "high", "none")),
    )

    report = await service.fact_check(ARTICLE, progress=ExplodingProgress())

    assert report.score == 100


@pytest.mark.asyncio
async def test_throttle_waits_before_each_claim(fake_provider, options, make_completion):
    class CountingThrottle:
        def __init__(self):
            self.waits = 0

        async def wait(self):
            self.waits += 1

    throttle = CountingThrottle()
    service = FactCheckingService(fake_provider, options, throttle=throttle)
    fake_provider.queue(
        make_completion(extraction("A", "B", "C")),
        *[make_completion(verification(True, "high", "none")) for _ in range(3)],
    )

    await service.fact_check(ARTICLE)

    assert throttle.waits == 3


@pytest.mark.asyncio
async def test_aggregate_mode(aggregate_service, fake_provider, make_completion):
    fake_provider.queue(make_completion({
        "score": 91,
        "status": "Mostly Accurate",
        "description": "Largely accurate.",
        "issues": [],
        "verified_facts": [{"claim": "The bridge opened in 1932.", "confidence": "high"}],
        "sources": [],
    }))
    progress = RecordingProgress()

    report = await aggregate_service.fact_check(ARTICLE, progress=progress)

    assert report.mode == VerificationMode.AGGREGATE
    assert report.score == 91
    assert report.status == ReportStatus.MOSTLY_ACCURATE
    assert fake_provider.call_count == 1
    assert progress.percents == [15, 30, 55, 100]


@pytest.mark.asyncio
async def test_aggregate_mode_degrades_on_garbage(aggregate_service, fake_provider, make_completion):
    fake_provider.queue(make_completion("<html>Bad gateway</html>"))

    report = await aggregate_service.fact_check(ARTICLE)

    assert report.score == 50
    assert report.status == ReportStatus.ANALYSIS_INCOMPLETE


@pytest.mark.asyncio
async def test_aggregate_mode_satire(aggregate_service, fake_provider):
    report = await aggregate_service.fact_check("SATIRE: Council votes to abolish Mondays.")

    assert report.status == ReportStatus.SATIRE
    assert report.mode == VerificationMode.AGGREGATE
    assert fake_provider.call_count == 0
