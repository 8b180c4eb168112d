"""Compile per-claim verdicts into one weighted fact-check report."""

import logging
from typing import List, Optional, Sequence

from ..models.options import FactCheckOptions
from ..models.report import (
    Issue,
    Report,
    ReportStatus,
    VerificationMode,
    VerifiedFact,
    classify_issue,
    clamp_score,
    round_half_up,
)
from ..models.verification import IssueType, Verdict
from .response_normalizer import (
    DEFAULT_ACTUAL_FACTS,
    DEFAULT_PROBLEM,
    DEFAULT_WHY_IT_MATTERS,
    MAX_REPORT_SOURCES,
    dedupe_citations,
)

logger = logging.getLogger(__name__)

# Credit each claim earns towards the weighted score
ACCURATE_WEIGHT = 100
UNVERIFIED_WEIGHT = 80  # uncertainty is not falsehood
MISLEADING_WEIGHT = 50
FALSE_WEIGHT = 0

FACTUAL_ERROR_PENALTY = 5

MISLEADING_TYPES = (IssueType.OUTDATED, IssueType.MISLEADING, IssueType.MISSING_CONTEXT)

# Lower bound of each status band, highest first
STATUS_LADDER = (
    (95, ReportStatus.VERIFIED),
    (85, ReportStatus.MOSTLY_ACCURATE),
    (70, ReportStatus.NEEDS_REVIEW),
    (50, ReportStatus.MULTIPLE_ERRORS),
)


def status_for_score(score: int) -> ReportStatus:
    """Map a 0-100 score onto the editorial status ladder."""
    for threshold, status in STATUS_LADDER:
        if score >= threshold:
            return status
    return ReportStatus.FALSE


def weighted_score(
    accurate_count: int,
    unverified_count: int,
    misleading_count: int,
    false_count: int,
    total_claims: int,
) -> int:
    """Weighted accuracy score before penalties, rounded half up.

    Claims in none of the buckets (e.g. an inaccurate verdict with issue
    type ``none``) still count towards ``total_claims`` and earn nothing.
    """
    if total_claims <= 0:
        return 0
    weighted = (
        accurate_count * ACCURATE_WEIGHT
        + unverified_count * UNVERIFIED_WEIGHT
        + misleading_count * MISLEADING_WEIGHT
        + false_count * FALSE_WEIGHT
    ) / total_claims
    return round_half_up(weighted)


def issue_from_verdict(verdict: Verdict) -> Issue:
    """Build the editor-facing issue record for an inaccurate verdict."""
    severity, label = classify_issue(verdict.issue_type)
    return Issue(
        claim=verdict.claim,
        type=label,
        severity=severity,
        what_article_says=verdict.claim,
        the_problem=verdict.explanation or DEFAULT_PROBLEM,
        actual_facts=verdict.actual_facts or DEFAULT_ACTUAL_FACTS,
        why_it_matters=verdict.why_it_matters or DEFAULT_WHY_IT_MATTERS,
        sources=list(verdict.sources),
    )


class ReportCompiler:
    """Reduces per-claim verdicts into a single scored report."""

    def __init__(self, options: Optional[FactCheckOptions] = None):
        """Initialize the compiler.

        Args:
            options: Shared fact-check options
        """
        self._options = options or FactCheckOptions()

    def compile(self, verdicts: Sequence[Verdict], total_claims: int) -> Report:
        """Compile verdicts into a report.

        Args:
            verdicts: One verdict per verified claim
            total_claims: Number of claims the score is averaged over

        Returns:
            Scored report with issues, verified facts and merged sources
        """
        issues: List[Issue] = []
        verified_facts: List[VerifiedFact] = []
        all_sources = []

        accurate_count = 0
        unverified_count = 0
        misleading_count = 0
        false_count = 0

        for verdict in verdicts:
            if verdict.counts_as_accurate:
                accurate_count += 1
                verified_facts.append(VerifiedFact(
                    claim=verdict.claim,
                    confidence=verdict.confidence,
                ))
            else:
                if verdict.issue_type == IssueType.FACTUAL_ERROR:
                    false_count += 1
                elif verdict.issue_type in MISLEADING_TYPES:
                    misleading_count += 1
                elif verdict.issue_type == IssueType.UNVERIFIED:
                    unverified_count += 1
                issues.append(issue_from_verdict(verdict))

            all_sources.extend(verdict.sources)

        score = weighted_score(
            accurate_count, unverified_count, misleading_count, false_count, total_claims
        )
        if false_count:
            score -= false_count * FACTUAL_ERROR_PENALTY
        score = clamp_score(score)
        status = status_for_score(score)

        logger.info(
            f"📊 Compiled {total_claims} claims: {accurate_count} accurate, "
            f"{unverified_count} unverified, {misleading_count} misleading, "
            f"{false_count} false -> {score} ({status.value})"
        )

        return Report(
            score=score,
            status=status,
            description=(
                f"Multi-step verification analyzed {total_claims} claims: "
                f"{accurate_count} verified accurate, {len(issues)} with issues."
            ),
            issues=issues,
            verified_facts=verified_facts,
            sources=dedupe_citations(all_sources, limit=MAX_REPORT_SOURCES),
            mode=VerificationMode.MULTISTEP,
            total_claims=total_claims,
        )
