"""Single-pass verification: claim discovery and checking in one request."""

import logging
from typing import Optional

from ..errors import ProviderError
from ..models.options import FactCheckOptions
from ..models.report import Report, VerificationMode
from ..ports.reasoning_provider import CompletionRequest, ReasoningProvider
from .response_normalizer import (
    incomplete_report,
    native_citations,
    normalize_report,
    parse_json_payload,
)

logger = logging.getLogger(__name__)

AGGREGATE_SYSTEM_PROMPT = (
    "You are a precise fact-checker for editors. Return only valid JSON. "
    "CRITICAL: Always prioritize MOST RECENT sources. NEVER mark as false unless you "
    "have strong contradicting evidence - if uncertain, mark as UNVERIFIED."
)

AGGREGATE_PROMPT = """You are an expert fact-checker helping EDITORS verify article accuracy BEFORE publication. Today is {current_date}.

**YOUR MISSION**: Provide a detailed, actionable report that helps editors fix issues and improve their article.

**ARTICLE TO FACT-CHECK**:
{article}

**INSTRUCTIONS**:

1. **DETECT SATIRE FIRST**: If this is clearly satirical content (absurd scenarios, obvious jokes, parody), immediately return:
```json
{{
    "score": 100,
    "status": "Satire",
    "description": "This is satirical content.",
    "claims": [],
    "issues": [],
    "verified_facts": [],
    "sources": []
}}
```

2. **FOR REAL ARTICLES**: Identify 5-15 key FACTUAL claims (skip opinions/predictions) and verify each one using real-time web search.

3. **CRITICAL VERIFICATION RULES**:
   - Use ONLY sources from the last {recency} (prioritize last few days for current events)
   - For current events/office holders: VERIFY as of {current_date} with RECENT sources
   - Cross-reference multiple credible sources before marking as false
   - **NEVER mark as "Factual Error" unless you have STRONG contradicting evidence**
   - Lack of sources = "Unverified", NOT "Factual Error"
   - Unverified is not False (if you can't verify, say that, don't call it false)

4. **SCORING GUIDE** (Be precise - use full 0-100 range):
   - **95-100**: Completely accurate, well-sourced, current
   - **85-94**: Accurate with minor issues or some unverified claims
   - **70-84**: Mostly accurate, some problems
   - **50-69**: Mixed accuracy, significant concerns
   - **30-49**: Mostly inaccurate or outdated
   - **0-29**: False or highly misleading

   **IMPORTANT**: Unverified claims should NOT heavily penalize the score. Good articles with some unverified claims can still score 80-90.

5. **RETURN THIS EXACT JSON**:
```json
{{
    "score": <0-100 integer>,
    "status": "Verified" | "Mostly Accurate" | "Needs Review" | "Multiple Errors" | "False" | "Satire",
    "description": "One clear sentence for editors explaining overall accuracy",
    "claims": [
        {{
            "claim": "Exact quote or paraphrase from article",
            "verdict": "Accurate" | "Partially True" | "False" | "Unverified",
            "confidence": "high" | "medium" | "low",
            "explanation": "Clear explanation for editors",
            "sources": [{{"title": "Source name", "url": "https://...", "date": "YYYY-MM-DD", "credibility": "high" | "medium"}}]
        }}
    ],
    "issues": [
        {{
            "claim": "Exact quote from article",
            "type": "Factual Error" | "Outdated" | "Misleading" | "Unverified" | "Missing Context",
            "severity": "high" | "medium" | "low",
            "what_article_says": "The problematic claim",
            "the_problem": "Why it's wrong/misleading/unverified",
            "actual_facts": "What's actually true (with sources)",
            "how_to_fix": "Specific suggestion for editor",
            "sources": [{{"title": "Source", "url": "https://...", "date": "YYYY-MM-DD"}}]
        }}
    ],
    "verified_facts": [
        {{
            "claim": "Accurate claim from article",
            "confidence": "high" | "medium",
            "sources": [{{"title": "Source", "url": "https://..."}}]
        }}
    ],
    "sources": [{{"title": "Source name", "url": "https://...", "credibility": "high" | "medium", "date": "YYYY-MM-DD"}}]
}}
```

**ISSUE TYPE GUIDE**:
- **"Factual Error"**: Use ONLY when you have clear evidence that CONTRADICTS the claim from multiple recent, credible sources
- **"Unverified"**: Use when you cannot find sources (lack of evidence is not falsity)
- **"Outdated"**: Use when claim was true but is no longer accurate as of {current_date}
- **"Misleading"**: Use when technically true but missing critical context
- **"Missing Context"**: Use when needs additional information

**CRITICAL REQUIREMENTS**:
- Include specific sources for EACH claim/issue
- For unverified claims, suggest where editors might find verification
- Prioritize sources dated closest to {current_date}
- Write for editors who will ACT on this feedback
- Return ONLY valid JSON (no markdown formatting)"""


class AggregateVerifier:
    """Verifies a whole article in one request and returns a finished report.

    Cheaper than per-claim verification (one call instead of N + 1) at the
    cost of per-claim evidence attribution.
    """

    TEMPERATURE = 0.2
    MAX_TOKENS = 6000
    TIMEOUT = 120.0

    def __init__(self, provider: ReasoningProvider, options: Optional[FactCheckOptions] = None):
        """Initialize the verifier.

        Args:
            provider: Reasoning provider with web search
            options: Shared fact-check options
        """
        self._provider = provider
        self._options = options or FactCheckOptions()

    def build_request(self, article_text: str, current_date: str) -> CompletionRequest:
        """Build the single completion request covering the whole article."""
        return CompletionRequest(
            model=self._options.model,
            system_prompt=AGGREGATE_SYSTEM_PROMPT,
            user_prompt=AGGREGATE_PROMPT.format(
                current_date=current_date,
                recency=self._options.recency_description,
                article=article_text,
            ),
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
            timeout=self.TIMEOUT,
            search_recency_filter=self._options.recency_window.value,
            return_citations=True,
        )

    async def verify_all(self, article_text: str, current_date: str) -> Report:
        """Verify every claim in the article in one pass.

        Provider failures and unparseable output degrade to an
        "Analysis Incomplete" report instead of raising.
        """
        try:
            result = await self._provider.complete(self.build_request(article_text, current_date))
        except ProviderError as e:
            logger.error(f"❌ Aggregate verification failed: {e}")
            return incomplete_report(
                description="Analysis could not be completed because the verification service failed.",
            )

        surfaced = native_citations(result.citations)
        payload = parse_json_payload(result.content)
        if payload is None:
            logger.warning("⚠️ Aggregate verification returned unparseable content")
            return incomplete_report(surfaced)

        report = normalize_report(payload, surfaced, VerificationMode.AGGREGATE)
        logger.info(
            f"✅ Aggregate verification: score={report.score} status={report.status.value} "
            f"issues={len(report.issues)} sources={len(report.sources)}"
        )
        return report
