"""
OM Spiritual Backend - Google Gemini Service Implementation
============================================================

What:  LLMService backed by Google Gemini, producing a structured
       {frequency, type, advice} recommendation from mood history.
How:   Sends a fixed instruction plus the formatted history, asks for a JSON
       response, validates the three keys.
Who:   Singleton used by RecommendationService.

Resilience:
    1. Hard timeout per call (GEMINI_TIMEOUT_SECONDS)
    2. Tenacity retry with exponential backoff + jitter (RETRY_MAX_ATTEMPTS)
    3. Circuit breaker: after CB_FAILURE_THRESHOLD consecutive failures,
       calls fail instantly for CB_RECOVERY_TIMEOUT seconds
    Every failure leaves this module as LLMServiceError or
    CircuitBreakerOpenError; RecommendationService turns both into the
    static fallback.
"""

import asyncio
import json
import logging
import time
import uuid
from typing import Dict, Optional

import google.generativeai as genai
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from omspiritual.config import settings
from omspiritual.exceptions import CircuitBreakerOpenError, LLMServiceError
from omspiritual.services.llm_base import LLMService

logger = logging.getLogger(__name__)

RECOMMENDATION_KEYS = ("frequency", "type", "advice")


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker around the Gemini call.

    State Machine:
        CLOSED (normal operation)
            → On failure: increment failure_count
            → When failure_count >= threshold: transition to OPEN
        OPEN (rejecting all requests)
            → can_execute() raises CircuitBreakerOpenError
            → After recovery_timeout seconds: transition to HALF_OPEN
        HALF_OPEN (testing recovery)
            → On success: CLOSED (failure_count reset)
            → On failure: back to OPEN (timer reset)

    Not shared between worker processes; each uvicorn worker keeps its own.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Returns True when a call may proceed.

        Raises:
            CircuitBreakerOpenError if OPEN and the recovery timeout has not elapsed.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info("Circuit breaker transitioning to HALF_OPEN after %.1fs", elapsed)
                self.state = self.HALF_OPEN
                return True
            remaining = int(self.recovery_timeout - elapsed)
            raise CircuitBreakerOpenError(recovery_time=remaining)

        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Circuit breaker transitioning to CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Circuit breaker returning to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Gemini Service
# ══════════════════════════════════════════════════════════════════════════

def parse_recommendation(raw: Optional[str]) -> Dict[str, str]:
    """
    Decode the model's JSON answer and keep exactly the three expected keys.

    Raises:
        LLMServiceError: empty text, invalid JSON, not an object, or a key
            missing / not a non-empty string
    """
    if not raw or not raw.strip():
        raise LLMServiceError(message="Empty response from Gemini")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise LLMServiceError(message="Gemini returned invalid JSON", context={"error": str(e)})
    if not isinstance(data, dict):
        raise LLMServiceError(message="Gemini returned JSON that is not an object")

    result = {}
    for key in RECOMMENDATION_KEYS:
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            raise LLMServiceError(
                message="Gemini response is missing a recommendation field",
                context={"field": key},
            )
        result[key] = value
    return result


class GeminiService(LLMService):
    """
    Error Handling Chain:
        not configured → LLMServiceError immediately (no network, breaker untouched)
        breaker OPEN   → CircuitBreakerOpenError immediately
        call fails     → tenacity retries → all fail → breaker failure → LLMServiceError
    """

    RECOMMENDATION_PROMPT = """Based on this meditation and mood history:
{history}

Suggest the best OM frequency and type of meditation for tomorrow. Provide calming advice in 3 sentences. Return as JSON with keys: "frequency", "type", "advice"."""

    def __init__(self):
        if settings.gemini_configured:
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(
            settings.gemini_model,
            generation_config={"response_mime_type": "application/json"},
        )

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

        logger.info(
            "GeminiService initialized with model=%s, configured=%s, "
            "circuit_breaker(threshold=%d, recovery=%ds)",
            settings.gemini_model,
            settings.gemini_configured,
            settings.cb_failure_threshold,
            settings.cb_recovery_timeout,
        )

    def build_prompt(self, history_text: str) -> str:
        return self.RECOMMENDATION_PROMPT.format(history=history_text)

    async def recommend(self, history_text: str) -> Dict[str, str]:
        """
        Raises:
            LLMServiceError: not configured, or failed after all retries
            CircuitBreakerOpenError: circuit is open
        """
        if not settings.gemini_configured:
            raise LLMServiceError(message="Gemini API key is not configured")

        request_id = str(uuid.uuid4())[:8]

        self.circuit_breaker.can_execute()

        try:
            result = await self._call_gemini_with_retry(self.build_prompt(history_text), request_id)
        except Exception as e:
            self.circuit_breaker.record_failure()
            logger.warning(
                "[%s] Gemini recommendation failed: %s (%s)",
                request_id,
                str(e),
                type(e).__name__,
            )
            if isinstance(e, LLMServiceError):
                raise
            raise LLMServiceError(
                message="AI recommendation failed after multiple attempts.",
                retry_after=self.circuit_breaker.recovery_timeout,
                context={"request_id": request_id, "error_type": type(e).__name__},
            )

        self.circuit_breaker.record_success()
        return result

    @retry(
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_gemini_with_retry(self, prompt: str, request_id: str) -> Dict[str, str]:
        """Single Gemini round trip, retried by tenacity; breaker checks stay outside."""
        start_time = time.time()

        try:
            response = await asyncio.wait_for(
                self.model.generate_content_async(
                    prompt,
                    request_options={"timeout": settings.gemini_timeout_seconds},
                ),
                timeout=settings.gemini_timeout_seconds,
            )
            result = parse_recommendation(response.text)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(
                "[%s] Gemini call failed after %.0fms: %s",
                request_id,
                duration_ms,
                str(e) or type(e).__name__,
            )
            raise

        logger.info(
            "[%s] Gemini recommendation completed in %.0fms (frequency=%s)",
            request_id,
            (time.time() - start_time) * 1000,
            result["frequency"],
        )
        return result

    def status(self) -> str:
        if not settings.gemini_configured:
            return "not_configured"
        if self.circuit_breaker.state == CircuitBreaker.OPEN:
            return "circuit_open"
        return "configured"


gemini_service = GeminiService()
