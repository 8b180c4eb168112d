"""Extraction of verifiable factual claims from article text."""

import logging
import re
from typing import Any, List, Optional

from pydantic import ValidationError

from ..errors import ProviderError
from ..models.claim import Claim, ClaimKind, ClaimPriority
from ..models.options import FactCheckOptions
from ..models.report import Report, ReportStatus, VerificationMode
from ..ports.reasoning_provider import CompletionRequest, ReasoningProvider
from .response_normalizer import parse_json_payload

logger = logging.getLogger(__name__)

SATIRE_PATTERNS = (
    re.compile(
        r"\b(satire|satirical|parody|joke|humor|humorous|comedy|comedic|onion|babylonbee)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(not to be taken seriously|for entertainment purposes|fictional account)\b",
        re.IGNORECASE,
    ),
)

EXTRACTION_SYSTEM_PROMPT = "You are a claim extraction specialist. Return only valid JSON."

EXTRACTION_PROMPT = """You are extracting factual claims from an article for verification. Today is {current_date}.

**TASK:** Extract ONLY factual claims that can be verified (up to {max_claims} maximum).

**WHAT TO EXTRACT:**
- Specific facts, statistics, numbers, dates
- Claims about events, people, places, policies
- Statements that can be true or false
- Current office holders, appointments, positions

**WHAT TO SKIP:**
- Opinions, predictions, speculation
- Questions or hypotheticals
- General observations
- Obvious common knowledge

**ARTICLE:**
{article}

**RETURN EXACTLY THIS JSON FORMAT:**
```json
{{
    "claims": [
        {{
            "claim": "Exact quote from article",
            "type": "statistic" | "event" | "appointment" | "policy" | "general_fact",
            "priority": "high" | "medium" | "low"
        }}
    ]
}}
```

Return ONLY the JSON with up to {max_claims} most important factual claims to verify. No other text."""


def is_satire(text: str) -> bool:
    """Check whether the article flags itself as satire, parody or entertainment."""
    return any(pattern.search(text or "") for pattern in SATIRE_PATTERNS)


def satire_report(mode: VerificationMode) -> Report:
    """Fixed report returned for satirical content."""
    return Report(
        score=100,
        status=ReportStatus.SATIRE,
        description="This is satirical content meant for entertainment.",
        issues=[],
        verified_facts=[],
        sources=[],
        mode=mode,
    )


def _enum_or_default(enum_cls, value: Any, default):
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


def claim_from_raw(raw: Any) -> Optional[Claim]:
    """Build a claim from one extracted entry; ``None`` when it carries no text."""
    if isinstance(raw, str):
        raw = {"claim": raw}
    if not isinstance(raw, dict):
        return None
    text = raw.get("claim") or raw.get("text")
    if not isinstance(text, str) or not text.strip():
        return None
    try:
        return Claim(
            text=text,
            kind=_enum_or_default(ClaimKind, raw.get("type", raw.get("kind")), ClaimKind.GENERAL_FACT),
            priority=_enum_or_default(ClaimPriority, raw.get("priority"), ClaimPriority.MEDIUM),
        )
    except ValidationError:
        return None


class EvidenceExtractor:
    """Turns raw article text into a bounded list of verifiable claims."""

    TEMPERATURE = 0.1
    MAX_TOKENS = 2000
    TIMEOUT = 60.0

    def __init__(self, provider: ReasoningProvider, options: Optional[FactCheckOptions] = None):
        """Initialize the extractor.

        Args:
            provider: Reasoning provider used for extraction
            options: Shared fact-check options
        """
        self._provider = provider
        self._options = options or FactCheckOptions()

    async def extract(
        self,
        article_text: str,
        current_date: str,
        max_claims: Optional[int] = None,
    ) -> List[Claim]:
        """Extract up to ``max_claims`` claims.

        Provider failures and unparseable output are not errors here: they
        yield an empty list, which callers treat as nothing to verify.
        """
        limit = max_claims or self._options.max_claims
        request = CompletionRequest(
            model=self._options.model,
            system_prompt=EXTRACTION_SYSTEM_PROMPT,
            user_prompt=EXTRACTION_PROMPT.format(
                current_date=current_date,
                max_claims=limit,
                article=article_text,
            ),
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
            timeout=self.TIMEOUT,
        )

        try:
            result = await self._provider.complete(request)
        except ProviderError as e:
            logger.error(f"❌ Claim extraction failed: {e}")
            return []

        payload = parse_json_payload(result.content)
        if payload is None or not isinstance(payload.get("claims"), list):
            logger.warning("⚠️ Failed to parse claims JSON from extraction response")
            return []

        claims = [
            claim for claim in (claim_from_raw(raw) for raw in payload["claims"])
            if claim is not None
        ]
        if len(claims) > limit:
            logger.info(f"✂️ Extraction proposed {len(claims)} claims, keeping {limit}")
        return claims[:limit]
