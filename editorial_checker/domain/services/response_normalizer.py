"""Lenient parsing of reasoning-service output into the strict domain model.

Both verification paths send every model response through this module.
Nothing here raises on malformed input: parse failures return ``None`` and
schema problems are repaired with named defaults.
"""

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from ..models.report import (
    Issue,
    IssueLabel,
    Report,
    ReportStatus,
    VerificationMode,
    VerifiedFact,
    clamp_score,
    severity_for_label,
)
from ..models.verification import (
    Citation,
    ConfidenceLevel,
    CredibilityLevel,
    DEFAULT_EXPLANATION,
    IssueType,
    Verdict,
    VerdictLabel,
)

logger = logging.getLogger(__name__)

MAX_CLAIM_SOURCES = 5
MAX_REPORT_SOURCES = 20

DEFAULT_PROBLEM = "Could not verify this claim"
DEFAULT_ACTUAL_FACTS = "See explanation"
DEFAULT_WHY_IT_MATTERS = "Accuracy is important for reader trust"

_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```$")
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)

_LABEL_FOR_VERDICT = {
    VerdictLabel.ACCURATE: IssueType.NONE,
    VerdictLabel.PARTIALLY_TRUE: IssueType.MISLEADING,
    VerdictLabel.FALSE: IssueType.FACTUAL_ERROR,
    VerdictLabel.UNVERIFIED: IssueType.UNVERIFIED,
}


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence wrapping around a JSON payload."""
    cleaned = (text or "").strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def parse_json_payload(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Parse model output into a JSON object.

    Returns ``None`` when no JSON object can be recovered.
    """
    if not text or not text.strip():
        return None

    candidates = [strip_code_fences(text)]
    block = _FENCED_BLOCK.search(text)
    if block:
        candidates.append(block.group(1))
    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        candidates.append(text[start:end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(parsed, dict):
            return parsed
    logger.debug(f"Could not recover JSON object from model output: {text[:200]!r}")
    return None


def apply_defaults(parsed: Mapping[str, Any], defaults: Mapping[str, Any]) -> Dict[str, Any]:
    """Defaults first, parsed values override.

    A key that is present with a falsy value (``""``, ``[]``, ``False``) is
    kept as parsed.
    """
    return {**defaults, **parsed}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, (list, tuple)):
        return "; ".join(str(item) for item in value if item is not None) or None
    return str(value)


def citation_from_raw(raw: Any, credibility: Optional[CredibilityLevel] = None) -> Optional[Citation]:
    """Build a citation from a dict or bare URL string; ``None`` when there is no URL."""
    if isinstance(raw, str):
        raw = {"url": raw}
    if not isinstance(raw, Mapping):
        return None
    url = _text(raw.get("url"))
    if not url:
        return None
    try:
        return Citation(
            title=_text(raw.get("title")) or "",
            url=url,
            date=_text(raw.get("date")),
            credibility=credibility or raw.get("credibility"),
        )
    except ValidationError as e:
        logger.debug(f"Dropping malformed citation {raw!r}: {e}")
        return None


def normalize_citations(
    raw_sources: Any,
    credibility: Optional[CredibilityLevel] = None,
) -> List[Citation]:
    """Convert a raw source list into citations, discarding entries without a URL."""
    if not isinstance(raw_sources, (list, tuple)):
        return []
    citations = []
    for raw in raw_sources:
        citation = citation_from_raw(raw, credibility)
        if citation is not None:
            citations.append(citation)
    return citations


def dedupe_citations(citations: Iterable[Citation], limit: Optional[int] = None) -> List[Citation]:
    """Drop repeated citations, keeping first-seen order.

    Citations are compared on title, url, date and credibility together, so
    the same URL under two titles is kept twice.
    """
    unique = list(dict.fromkeys(citations))
    return unique[:limit] if limit is not None else unique


def native_citations(raw_citations: Iterable[Any]) -> List[Citation]:
    """Citations surfaced by the search layer itself. They are always trusted as high."""
    return normalize_citations(list(raw_citations or []), credibility=CredibilityLevel.HIGH)


def failed_verdict(claim_text: str, explanation: str) -> Verdict:
    """Low-confidence unverified verdict used when verification could not complete."""
    return Verdict(
        claim=claim_text or "Unknown claim",
        is_accurate=False,
        confidence=ConfidenceLevel.LOW,
        issue_type=IssueType.UNVERIFIED,
        explanation=explanation,
        sources=[],
    )


def normalize_verdict(
    parsed: Mapping[str, Any],
    claim_text: str,
    surfaced: Optional[List[Citation]] = None,
) -> Verdict:
    """Turn a parsed per-claim verification payload into a Verdict."""
    fields = apply_defaults(parsed, {
        "claim": claim_text,
        "is_accurate": False,
        "confidence": ConfidenceLevel.LOW.value,
        "issue_type": IssueType.UNVERIFIED.value,
        "explanation": DEFAULT_EXPLANATION,
        "sources": [],
    })

    sources = dedupe_citations(
        list(surfaced or []) + normalize_citations(fields.get("sources")),
        limit=MAX_CLAIM_SOURCES,
    )

    try:
        return Verdict(
            claim=claim_text or _text(fields.get("claim")) or "Unknown claim",
            is_accurate=fields.get("is_accurate"),
            verdict_label=fields.get("verdict_label") or fields.get("verdict"),
            confidence=fields.get("confidence"),
            issue_type=fields.get("issue_type"),
            explanation=_text(fields.get("explanation")),
            actual_facts=_text(fields.get("actual_facts")),
            why_it_matters=_text(fields.get("why_it_matters")),
            sources=sources,
        )
    except ValidationError as e:
        logger.warning(f"⚠️ Verification payload failed validation: {e}")
        return failed_verdict(claim_text, "Failed to parse verification result")


def _coerce_issue_label(value: Any) -> IssueLabel:
    if isinstance(value, IssueLabel):
        return value
    text = (_text(value) or "").replace("_", " ").lower()
    for label in IssueLabel:
        if label.value.lower() == text:
            return label
    return IssueLabel.UNVERIFIED


def _coerce_verdict_label(value: Any) -> VerdictLabel:
    text = (_text(value) or "").replace("_", " ").lower()
    for label in VerdictLabel:
        if label.value.lower() == text:
            return label
    return VerdictLabel.UNVERIFIED


def _coerce_status(value: Any) -> ReportStatus:
    text = (_text(value) or "").lower()
    for status in ReportStatus:
        if status.value.lower() == text:
            return status
    return ReportStatus.UNKNOWN


def _normalize_issue(raw: Any) -> Optional[Issue]:
    if not isinstance(raw, Mapping):
        return None
    claim = _text(raw.get("claim")) or _text(raw.get("what_article_says"))
    if not claim:
        return None
    label = _coerce_issue_label(raw.get("type") or raw.get("issue_type"))
    return Issue(
        claim=claim,
        type=label,
        severity=severity_for_label(label),
        what_article_says=_text(raw.get("what_article_says")) or claim,
        the_problem=_text(raw.get("the_problem")) or _text(raw.get("explanation")) or DEFAULT_PROBLEM,
        actual_facts=_text(raw.get("actual_facts")) or DEFAULT_ACTUAL_FACTS,
        why_it_matters=_text(raw.get("why_it_matters")) or DEFAULT_WHY_IT_MATTERS,
        how_to_fix=_text(raw.get("how_to_fix")),
        sources=dedupe_citations(normalize_citations(raw.get("sources")), limit=MAX_CLAIM_SOURCES),
    )


def _normalize_fact(raw: Any) -> Optional[VerifiedFact]:
    if not isinstance(raw, Mapping):
        return None
    claim = _text(raw.get("claim"))
    if not claim:
        return None
    confidence = ConfidenceLevel.LOW
    try:
        confidence = ConfidenceLevel(str(raw.get("confidence", "")).strip().lower())
    except ValueError:
        pass
    return VerifiedFact(
        claim=claim,
        confidence=confidence,
        sources=dedupe_citations(normalize_citations(raw.get("sources")), limit=MAX_CLAIM_SOURCES),
    )


def _normalize_labelled_verdict(raw: Any) -> Optional[Verdict]:
    if not isinstance(raw, Mapping):
        return None
    claim = _text(raw.get("claim"))
    if not claim:
        return None
    label = _coerce_verdict_label(raw.get("verdict") or raw.get("verdict_label"))
    fields = dict(raw)
    fields.setdefault("is_accurate", label == VerdictLabel.ACCURATE)
    fields.setdefault("issue_type", _LABEL_FOR_VERDICT[label].value)
    fields["verdict_label"] = label.value
    return normalize_verdict(fields, claim)


def _normalize_items(raw_items: Any, normalizer) -> List[Any]:
    if not isinstance(raw_items, (list, tuple)):
        return []
    items = []
    for raw in raw_items:
        try:
            item = normalizer(raw)
        except ValidationError as e:
            logger.debug(f"Dropping malformed report entry {raw!r}: {e}")
            continue
        if item is not None:
            items.append(item)
    return items


def incomplete_report(
    surfaced: Optional[List[Citation]] = None,
    mode: VerificationMode = VerificationMode.AGGREGATE,
    description: str = "Analysis completed but response format was invalid.",
) -> Report:
    """Degraded report used when the aggregate pass cannot be parsed."""
    return Report(
        score=50,
        status=ReportStatus.ANALYSIS_INCOMPLETE,
        description=description,
        issues=[],
        verified_facts=[],
        sources=dedupe_citations(surfaced or [], limit=MAX_REPORT_SOURCES),
        mode=mode,
    )


def normalize_report(
    parsed: Mapping[str, Any],
    surfaced: Optional[List[Citation]] = None,
    mode: VerificationMode = VerificationMode.AGGREGATE,
) -> Report:
    """Turn a parsed aggregate payload into a Report with backfilled fields."""
    fields = apply_defaults(parsed, {
        "score": 0,
        "status": ReportStatus.UNKNOWN.value,
        "description": "No description provided",
        "claims": [],
        "issues": [],
        "verified_facts": [],
        "sources": [],
    })

    claims = _normalize_items(fields["claims"], _normalize_labelled_verdict)
    issues = _normalize_items(fields["issues"], _normalize_issue)
    verified_facts = _normalize_items(fields["verified_facts"], _normalize_fact)
    sources = dedupe_citations(
        list(surfaced or []) + normalize_citations(fields["sources"]),
        limit=MAX_REPORT_SOURCES,
    )

    return Report(
        score=clamp_score(fields["score"]),
        status=_coerce_status(fields["status"]),
        description=_text(fields["description"]) or "",
        issues=issues,
        verified_facts=verified_facts,
        sources=sources,
        mode=mode,
        claims=claims,
        total_claims=len(claims) or len(issues) + len(verified_facts),
    )
