"""Per-claim verification against the retrieval-augmented reasoning service."""

import logging
from typing import Optional, Union

from ..errors import (
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTransportError,
)
from ..models.claim import Claim, ClaimKind
from ..models.options import FactCheckOptions
from ..models.verification import Verdict
from ..ports.reasoning_provider import CompletionRequest, ReasoningProvider
from .response_normalizer import (
    failed_verdict,
    native_citations,
    normalize_verdict,
    parse_json_payload,
)

logger = logging.getLogger(__name__)

VERIFICATION_SYSTEM_PROMPT = (
    "You are a precise fact-checker. You have access to sources from the past {recency}. "
    "CRITICAL: Always PRIORITIZE the MOST RECENT sources (last few days) when verifying "
    "current information. NEVER mark a claim as factual_error unless you have strong "
    "contradicting evidence - if you can't find sources, mark it as unverified. "
    "Return only valid JSON."
)

VERIFICATION_PROMPT = """You are fact-checking a SINGLE specific claim. Today is {current_date}.

**SMART RECENCY:** You have access to sources from the past {recency}. ALWAYS PRIORITIZE THE MOST RECENT sources (last few days) for current events. Use older sources only for historical context.

**CLAIM TO VERIFY:**
"{claim}"

**CLAIM TYPE:** {kind}

**YOUR TASK:**
1. Use real-time web search - PRIORITIZE MOST RECENT sources for current events
2. For political/current events: Verify current office holders AS OF {current_date} using RECENT sources
3. Cross-reference at least 2-3 reliable sources (prefer newer sources)
4. Determine if the claim is accurate, outdated, misleading, or false

**VERIFICATION CHECKLIST:**
- **CRITICAL: NEVER mark as "factual_error" unless you have STRONG, RECENT contradicting evidence from credible sources**
- **Lack of sources = "unverified", NOT "factual_error"**
- If claim mentions current officials: Verify who holds the position AS OF {current_date} using sources from the last few days
- Check dates and timelines match {current_date}
- Look for updates or corrections to the claim
- Assess if claim needs additional context
- For events from the last 1-2 hours: It's acceptable to mark as "unverified" with explanation "Very recent event - sources may not be indexed yet"
- When in doubt between "unverified" and "factual_error": Choose "unverified"

**RETURN THIS EXACT JSON:**
```json
{{
    "claim": "The claim being verified",
    "is_accurate": true | false,
    "confidence": "high" | "medium" | "low",
    "issue_type": "none" | "factual_error" | "outdated" | "misleading" | "unverified" | "missing_context",
    "explanation": "Brief explanation of accuracy status with current facts as of {current_date}",
    "actual_facts": "What is actually true as of {current_date} (if claim is inaccurate)",
    "why_it_matters": "Why this matters to readers (if inaccurate)",
    "sources": [
        {{
            "title": "Source title",
            "url": "https://...",
            "date": "Recent date if available",
            "credibility": "high" | "medium"
        }}
    ]
}}
```

**CRITICAL:** Verify current information as of {current_date}. Prioritize MOST RECENT sources. Return ONLY valid JSON."""

EMPTY_CLAIM_EXPLANATION = "Claim was empty or invalid"
TRANSPORT_FAILURE_EXPLANATION = "API error during verification"
HTTP_FAILURE_EXPLANATION = "HTTP error during verification"
RESPONSE_FAILURE_EXPLANATION = "Invalid response format"
PARSE_FAILURE_EXPLANATION = "Failed to parse verification result"


class ClaimVerifier:
    """Verifies one claim per request with a dedicated web search."""

    TEMPERATURE = 0.2
    MAX_TOKENS = 1500
    TIMEOUT = 60.0

    def __init__(self, provider: ReasoningProvider, options: Optional[FactCheckOptions] = None):
        """Initialize the verifier.

        Args:
            provider: Reasoning provider with web search
            options: Shared fact-check options
        """
        self._provider = provider
        self._options = options or FactCheckOptions()

    def build_request(self, claim: Claim, current_date: str) -> CompletionRequest:
        """Build the completion request for one claim."""
        recency = self._options.recency_description
        return CompletionRequest(
            model=self._options.model,
            system_prompt=VERIFICATION_SYSTEM_PROMPT.format(recency=recency),
            user_prompt=VERIFICATION_PROMPT.format(
                current_date=current_date,
                recency=recency,
                claim=claim.text,
                kind=claim.kind.value,
            ),
            temperature=self.TEMPERATURE,
            max_tokens=self.MAX_TOKENS,
            timeout=self.TIMEOUT,
            search_recency_filter=self._options.recency_window.value,
            return_citations=True,
        )

    async def verify(self, claim: Union[Claim, str, None], current_date: str) -> Verdict:
        """Verify a single claim.

        Never raises for provider or parsing failures: those come back as
        low-confidence ``unverified`` verdicts whose explanation names what
        went wrong.
        """
        if isinstance(claim, str):
            claim = Claim(text=claim, kind=ClaimKind.GENERAL_FACT) if claim.strip() else None
        if claim is None or not claim.text.strip():
            return failed_verdict("Unknown claim", EMPTY_CLAIM_EXPLANATION)

        try:
            result = await self._provider.complete(self.build_request(claim, current_date))
        except ProviderTransportError as e:
            logger.warning(f"⚠️ Verification transport error for claim '{claim.text}': {e}")
            return failed_verdict(claim.text, TRANSPORT_FAILURE_EXPLANATION)
        except ProviderHTTPError as e:
            logger.warning(f"⚠️ Verification HTTP error {e.status_code} for claim '{claim.text}': {e.detail}")
            return failed_verdict(claim.text, HTTP_FAILURE_EXPLANATION)
        except ProviderResponseError as e:
            logger.warning(f"⚠️ Invalid verification response for claim '{claim.text}': {e}")
            return failed_verdict(claim.text, RESPONSE_FAILURE_EXPLANATION)
        except ProviderError as e:
            logger.warning(f"⚠️ Verification failed for claim '{claim.text}': {e}")
            return failed_verdict(claim.text, TRANSPORT_FAILURE_EXPLANATION)

        payload = parse_json_payload(result.content)
        if payload is None:
            logger.warning(f"⚠️ Could not parse verification result for claim '{claim.text}'")
            return failed_verdict(claim.text, PARSE_FAILURE_EXPLANATION)

        verdict = normalize_verdict(payload, claim.text, native_citations(result.citations))
        logger.info(
            f"🔍 Verified '{claim.text[:80]}': accurate={verdict.is_accurate} "
            f"confidence={verdict.confidence.value} issue={verdict.issue_type.value}"
        )
        return verdict
