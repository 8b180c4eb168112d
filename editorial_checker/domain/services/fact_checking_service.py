"""Service coordinating claim extraction, verification and report compilation."""

import asyncio
import logging
from datetime import date
from typing import List, Optional

from ..errors import ConfigurationError
from ..models.claim import Claim
from ..models.options import FactCheckOptions
from ..models.report import Report, ReportStatus, VerificationMode
from ..models.verification import Verdict
from ..ports.progress import NullProgressReporter, ProgressReporter
from ..ports.reasoning_provider import ReasoningProvider
from .aggregate_verifier import AggregateVerifier
from .claim_verifier import ClaimVerifier
from .evidence_extractor import EvidenceExtractor, is_satire, satire_report
from .report_compiler import ReportCompiler
from .response_normalizer import failed_verdict
from .throttle import FixedIntervalThrottle, Throttle

logger = logging.getLogger(__name__)


def format_current_date(day: date) -> str:
    """Format a date the way prompts ground verdicts, e.g. ``October 19, 2026``."""
    return f"{day:%B} {day.day}, {day.year}"


class FactCheckingService:
    """Runs one fact-check per call in either per-claim or aggregate mode."""

    def __init__(
        self,
        provider: ReasoningProvider,
        options: Optional[FactCheckOptions] = None,
        throttle: Optional[Throttle] = None,
    ):
        """Initialize the service.

        Args:
            provider: Reasoning provider shared by every component
            options: Fact-check options (model, recency, claim cap, mode)
            throttle: Pacing between per-claim requests; defaults to a
                fixed interval of ``options.request_delay``
        """
        self._provider = provider
        self._options = options or FactCheckOptions()
        self._throttle = throttle or FixedIntervalThrottle(self._options.request_delay)
        self.extractor = EvidenceExtractor(provider, self._options)
        self.claim_verifier = ClaimVerifier(provider, self._options)
        self.aggregate_verifier = AggregateVerifier(provider, self._options)
        self.compiler = ReportCompiler(self._options)
        logger.info(
            f"🔧 FactCheckingService initialized (mode="
            f"{'multistep' if self._options.multistep_enabled else 'aggregate'}, "
            f"model={self._options.model})"
        )

    @property
    def options(self) -> FactCheckOptions:
        """Options this service was built with."""
        return self._options

    @property
    def mode(self) -> VerificationMode:
        """Verification path used by ``fact_check``."""
        if self._options.multistep_enabled:
            return VerificationMode.MULTISTEP
        return VerificationMode.AGGREGATE

    async def fact_check(
        self,
        article_text: str,
        progress: Optional[ProgressReporter] = None,
        current_date: Optional[date] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Report:
        """Fact check an article.

        Args:
            article_text: Plain article text (title and body)
            progress: Receives percentage/stage updates
            current_date: Date verdicts are grounded on; defaults to today
            cancel_event: When set between claims, remaining claims are skipped

        Returns:
            Compiled report. Provider failures are represented in the report.

        Raises:
            ConfigurationError: If the provider has no credential
        """
        if not self._provider.is_configured:
            raise ConfigurationError("Reasoning provider API key not configured")

        progress = progress or NullProgressReporter()
        today = format_current_date(current_date or date.today())
        logger.info(f"🔍 Starting fact check ({self.mode.value}) for article: {article_text[:100]}...")

        if self.mode == VerificationMode.MULTISTEP:
            return await self._run_multistep(article_text, today, progress, cancel_event)
        return await self._run_aggregate(article_text, today, progress)

    async def _run_multistep(
        self,
        article_text: str,
        today: str,
        progress: ProgressReporter,
        cancel_event: Optional[asyncio.Event],
    ) -> Report:
        self._report(progress, 10, "analyzing", "Starting multi-step analysis...")

        if is_satire(article_text):
            logger.info("🎭 Satire detected, skipping verification")
            self._report(progress, 100, "complete", "Satire detected")
            return satire_report(VerificationMode.MULTISTEP)

        self._report(progress, 20, "extracting", "Extracting factual claims...")
        claims = await self.extractor.extract(article_text, today)
        logger.info(f"📝 Extracted {len(claims)} claims from article")

        if not claims:
            self._report(progress, 100, "complete", "No verifiable claims found")
            return Report(
                score=75,
                status=ReportStatus.NEEDS_REVIEW,
                description="No specific factual claims found to verify in this article.",
                mode=VerificationMode.MULTISTEP,
            )

        total = len(claims)
        self._report(progress, 30, "verifying", f"Found {total} claims. Verifying each claim...")

        verdicts = await self._verify_claims(claims, today, progress, cancel_event)

        self._report(progress, 95, "generating", "Compiling comprehensive report...")
        report = self.compiler.compile(verdicts, len(verdicts))
        self._report(progress, 100, "complete", "Fact-check complete")
        logger.info(f"✅ Fact check complete: {report.score} ({report.status.value})")
        return report

    async def _verify_claims(
        self,
        claims: List[Claim],
        today: str,
        progress: ProgressReporter,
        cancel_event: Optional[asyncio.Event],
    ) -> List[Verdict]:
        verdicts: List[Verdict] = []
        total = len(claims)

        for index, claim in enumerate(claims):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"⚠️ Fact check cancelled after {index} of {total} claims")
                break

            percent = 30 + (index + 1) / total * 60
            self._report(progress, percent, "verifying", f"Verifying claim {index + 1} of {total}...")

            await self._throttle.wait()
            try:
                verdict = await self.claim_verifier.verify(claim, today)
            except ConfigurationError:
                raise
            except Exception as e:
                logger.warning(f"⚠️ Error verifying claim '{claim.text}': {e}", exc_info=True)
                verdict = failed_verdict(claim.text, "Unexpected error during verification")
            verdicts.append(verdict)

        return verdicts

    async def _run_aggregate(self, article_text: str, today: str, progress: ProgressReporter) -> Report:
        self._report(progress, 15, "analyzing", "Starting deep research...")

        if is_satire(article_text):
            logger.info("🎭 Satire detected, skipping verification")
            self._report(progress, 100, "complete", "Satire detected")
            return satire_report(VerificationMode.AGGREGATE)

        self._report(progress, 30, "researching", "Researching claims with real-time sources...")
        report = await self.aggregate_verifier.verify_all(article_text, today)

        self._report(progress, 55, "compiling", "Compiling detailed report...")
        self._report(progress, 100, "complete", "Fact-check complete")
        logger.info(f"✅ Fact check complete: {report.score} ({report.status.value})")
        return report

    @staticmethod
    def _report(progress: ProgressReporter, percent: float, stage: str, message: str) -> None:
        try:
            progress.report(percent, stage, message)
        except Exception as e:
            logger.warning(f"⚠️ Progress update failed at {stage}: {e}")
