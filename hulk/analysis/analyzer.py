"""Report analyzer backed by an OpenAI-compatible chat completions API."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

import aiohttp

from ..core.errors import AnalysisError
from ..core.models import Report
from ..settings import ANALYZER_DEFAULTS, Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a performance engineer reviewing the results of an HTTP load test. "
    "The test fired a fixed batch of requests at the target once per second. "
    "A request counts as successful when the target answered at all; timeouts "
    "and connection errors count as failures.\n\n"
    "Explain in plain language how the target held up: throughput, error rate, "
    "and whether requests per second stayed steady or degraded over the run. "
    "Keep the answer short and concrete, and suggest a next test if useful."
)


class ReportAnalyzer(ABC):
    """Turns a finished report (and an optional question) into prose."""

    @abstractmethod
    async def analyze(
        self, report: Union[Report, Dict[str, Any]], question: Optional[str] = None
    ) -> str:
        """
        Analyze a report.

        Raises:
            AnalysisError: If no analysis could be produced
        """


def build_messages(report: Dict[str, Any], question: Optional[str] = None) -> List[Dict[str, str]]:
    """Build the chat messages for one analysis request."""
    report_json = json.dumps(report, indent=2, ensure_ascii=False, default=str)
    user_message = f"LOAD TEST REPORT:\n{report_json}"
    if question and question.strip():
        user_message += f"\n\nQUESTION:\n{question.strip()}"
    else:
        user_message += "\n\nSummarize this load test."

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_message},
    ]


class ChatCompletionsAnalyzer(ReportAnalyzer):
    """Calls ``POST {base_url}/chat/completions`` with a bearer key."""

    def __init__(
        self,
        api_key: str,
        base_url: str = ANALYZER_DEFAULTS["base_url"],
        model: str = ANALYZER_DEFAULTS["model"],
        timeout_seconds: float = ANALYZER_DEFAULTS["timeout_seconds"],
        temperature: float = ANALYZER_DEFAULTS["temperature"],
    ):
        if not api_key:
            raise ValueError("An API key is required for the report analyzer")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature

    async def analyze(
        self, report: Union[Report, Dict[str, Any]], question: Optional[str] = None
    ) -> str:
        if isinstance(report, Report):
            report = report.to_dict()

        payload = {
            "model": self.model,
            "messages": build_messages(report, question),
            "temperature": self.temperature,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        url = f"{self.base_url}/chat/completions"
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        logger.info(f"Requesting report analysis from {self.base_url} ({self.model})")
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=payload, headers=headers) as response:
                    text = await response.text()
                    if response.status != 200:
                        logger.error(f"Analyzer API error {response.status}: {text[:200]}")
                        raise AnalysisError(f"Analyzer returned HTTP {response.status}: {text[:200]}")
        except asyncio.TimeoutError:
            logger.error(f"Analyzer timed out after {self.timeout_seconds}s")
            raise AnalysisError(f"Analyzer timed out after {self.timeout_seconds} seconds")
        except aiohttp.ClientError as e:
            logger.error(f"Analyzer request failed: {e}")
            raise AnalysisError(f"Analyzer request failed: {e}") from e

        try:
            data = json.loads(text)
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AnalysisError(f"Unexpected analyzer response: {text[:200]}") from e

        if not content or not content.strip():
            raise AnalysisError("Empty response from analyzer")
        return content.strip()


def build_analyzer(settings: Settings) -> Optional[ReportAnalyzer]:
    """Create the configured analyzer, or None when no API key is set."""
    if not settings.analyzer_enabled:
        logger.warning(
            "HULK_ANALYZER_API_KEY is not set; report analysis is disabled"
        )
        return None
    return ChatCompletionsAnalyzer(
        api_key=settings.analyzer_api_key,
        base_url=settings.analyzer_base_url,
        model=settings.analyzer_model,
        timeout_seconds=settings.analyzer_timeout_seconds,
    )
