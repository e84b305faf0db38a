"""The three escalating analysis strategies and the rules that choose between them.

Strategies never raise AgentAPIError: every upstream failure is converted into
an outcome value, and escalation is an explicit EscalateToProgressive outcome.
None of them releases the document handle; the pipeline owns that.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

from docexplain.analysis.client_base import BaseAgentClient
from docexplain.analysis.exceptions import (
    AgentAPIError,
    AgentNetworkError,
    AgentParseError,
    AgentTimeoutError,
    AgentTransportError,
)
from docexplain.analysis.models import (
    AnalysisRequest,
    CompletionRequest,
    DocumentHandle,
    EscalateToProgressive,
    StrategyOutcome,
    Success,
    UpstreamError,
)
from docexplain.analysis.prompt_builder import PromptBuilder
from docexplain.logging.logger import Log

CONTEXT_OVERFLOW_MARKERS = ("context length", "token limit", "too large")


class StrategyName(str, Enum):
    SINGLE_PASS = "single_pass"
    EXTENDED_TIMEOUT = "extended_timeout"
    PROGRESSIVE = "progressive"


def select_initial_strategy(size_bytes: int, threshold_bytes: int) -> StrategyName:
    """Documents above the threshold start with the extended-timeout strategy."""
    if size_bytes > threshold_bytes:
        return StrategyName.EXTENDED_TIMEOUT
    return StrategyName.SINGLE_PASS


def is_context_overflow(error_text: str) -> bool:
    """Heuristic: does an upstream error body say the document was too big?

    The agents API exposes no structured code for this, so it matches vendor
    wording. Keep every such check behind this function.
    """
    lowered = error_text.lower()
    return any(marker in lowered for marker in CONTEXT_OVERFLOW_MARKERS)


class UpstreamErrorFormatter:
    """Turns AgentAPIError exceptions into bounded UpstreamError outcomes."""

    _PARSE_MESSAGES: ClassVar[dict[str, str]] = {
        "malformed_json": "Failed to parse response from agent API",
        "html_error_page": "Agent API returned an HTML error page instead of JSON",
        "unexpected_shape": "Agent API response did not contain any content",
    }

    def __init__(self, *, details_max_chars: int = 500, parse_details_max_chars: int = 1000) -> None:
        self._details_max_chars = details_max_chars
        self._parse_details_max_chars = parse_details_max_chars

    def format(self, exc: AgentAPIError, action: str) -> UpstreamError:
        if isinstance(exc, AgentTransportError):
            return UpstreamError(
                kind="http_error",
                message=f"Failed to {action}: HTTP error {exc.status_code}",
                details=exc.body[: self._details_max_chars],
            )
        if isinstance(exc, AgentParseError):
            return UpstreamError(
                kind=exc.kind,
                message=self._PARSE_MESSAGES.get(exc.kind, f"Failed to {action}: {exc}"),
                details=exc.body[: self._parse_details_max_chars],
            )
        if isinstance(exc, AgentTimeoutError):
            return UpstreamError(kind="timeout", message=f"Failed to {action}: request timed out")
        if isinstance(exc, AgentNetworkError):
            return UpstreamError(
                kind="network",
                message=f"Failed to {action}: agent API unreachable",
                details=str(exc)[: self._details_max_chars],
            )
        return UpstreamError(kind="upstream", message=f"Failed to {action}: {exc}")


class AnalysisStrategy(ABC):
    """One way of turning an uploaded document into Markdown."""

    name: ClassVar[StrategyName]

    def __init__(
        self,
        client: BaseAgentClient,
        prompts: PromptBuilder,
        errors: UpstreamErrorFormatter,
    ) -> None:
        self._client = client
        self._prompts = prompts
        self._errors = errors

    @abstractmethod
    def run(self, request: AnalysisRequest, handle: DocumentHandle) -> StrategyOutcome:
        raise NotImplementedError

    def _complete(self, completion: CompletionRequest, timeout_seconds: float) -> str:
        Log.info(
            "Sending completion request",
            strategy=self.name.value,
            agent_id=completion.agent_id,
            max_tokens=completion.max_tokens,
        )
        return self._client.create_completion(completion, timeout_seconds=timeout_seconds).markdown


class SinglePassStrategy(AnalysisStrategy):
    """One completion call over the whole document."""

    name = StrategyName.SINGLE_PASS

    def __init__(
        self,
        client: BaseAgentClient,
        prompts: PromptBuilder,
        errors: UpstreamErrorFormatter,
        *,
        max_tokens: int,
        timeout_seconds: float,
    ) -> None:
        super().__init__(client, prompts, errors)
        self._max_tokens = max_tokens
        self._timeout_seconds = timeout_seconds

    def run(self, request: AnalysisRequest, handle: DocumentHandle) -> Success | UpstreamError:
        completion = self._prompts.single_pass(request, handle, self._max_tokens)
        try:
            markdown = self._complete(completion, self._timeout_seconds)
        except AgentAPIError as exc:
            Log.error(f"Single-pass completion failed: {exc}", file_id=handle.remote_id)
            return self._errors.format(exc, "process request")
        Log.info("Agent completion successful", strategy=self.name.value)
        return Success(markdown=markdown)


class ExtendedTimeoutStrategy(AnalysisStrategy):
    """One completion with a defensive prompt and a hard client-side timeout.

    Timeouts and context-overflow errors escalate instead of failing.
    """

    name = StrategyName.EXTENDED_TIMEOUT

    def __init__(
        self,
        client: BaseAgentClient,
        prompts: PromptBuilder,
        errors: UpstreamErrorFormatter,
        *,
        max_tokens: int,
        timeout_seconds: float,
    ) -> None:
        super().__init__(client, prompts, errors)
        self._max_tokens = max_tokens
        self._timeout_seconds = timeout_seconds

    def run(self, request: AnalysisRequest, handle: DocumentHandle) -> StrategyOutcome:
        completion = self._prompts.extended(request, handle, self._max_tokens)
        try:
            markdown = self._complete(completion, self._timeout_seconds)
        except AgentTimeoutError:
            Log.warning("Large document request timed out", timeout=self._timeout_seconds)
            return EscalateToProgressive(reason="timeout")
        except AgentTransportError as exc:
            if is_context_overflow(exc.body):
                Log.warning("Context length issue detected", status=exc.status_code)
                return EscalateToProgressive(reason="context_overflow")
            return self._errors.format(exc, "process large document")
        except AgentAPIError as exc:
            Log.error(f"Large document completion failed: {exc}", file_id=handle.remote_id)
            return self._errors.format(exc, "process large document")
        Log.info("Large document agent completion successful")
        return Success(markdown=markdown)


class ProgressiveStrategy(AnalysisStrategy):
    """Outline pass, then a detail pass guided by that outline.

    Terminal: any failure here ends the pipeline.
    """

    name = StrategyName.PROGRESSIVE

    def __init__(
        self,
        client: BaseAgentClient,
        prompts: PromptBuilder,
        errors: UpstreamErrorFormatter,
        *,
        outline_max_tokens: int,
        detail_max_tokens: int,
        timeout_seconds: float,
    ) -> None:
        super().__init__(client, prompts, errors)
        self._outline_max_tokens = outline_max_tokens
        self._detail_max_tokens = detail_max_tokens
        self._timeout_seconds = timeout_seconds

    def run(self, request: AnalysisRequest, handle: DocumentHandle) -> Success | UpstreamError:
        Log.info("Progressive analysis: first pass - outline", file_id=handle.remote_id)
        try:
            outline = self._complete(
                self._prompts.outline(request, handle, self._outline_max_tokens),
                self._timeout_seconds,
            )
        except AgentAPIError as exc:
            Log.error(f"Progressive analysis outline pass failed: {exc}")
            return self._errors.format(exc, "run progressive analysis outline pass")

        Log.info("Progressive analysis: second pass - detail", outline_chars=len(outline))
        try:
            detail = self._complete(
                self._prompts.detail(request, handle, outline, self._detail_max_tokens),
                self._timeout_seconds,
            )
        except AgentAPIError as exc:
            Log.error(f"Progressive analysis detail pass failed: {exc}")
            return self._errors.format(exc, "run progressive analysis detail pass")

        return Success(markdown=detail)
