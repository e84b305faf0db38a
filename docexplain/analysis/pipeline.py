from dataclasses import dataclass

from docexplain.analysis.client_base import BaseAgentClient
from docexplain.analysis.document_handles import DocumentHandleManager, ReleaseFailureObserver
from docexplain.analysis.exceptions import DocumentHandleError
from docexplain.analysis.factory import AgentClientFactory
from docexplain.analysis.models import (
    AnalysisRequest,
    AnalysisSubmission,
    DocumentHandle,
    EscalateToProgressive,
    PipelineOutcome,
    Success,
    TaskType,
    UserError,
)
from docexplain.analysis.prompt_builder import PromptBuilder
from docexplain.analysis.strategies import (
    AnalysisStrategy,
    ExtendedTimeoutStrategy,
    ProgressiveStrategy,
    SinglePassStrategy,
    StrategyName,
    UpstreamErrorFormatter,
    select_initial_strategy,
)
from docexplain.analysis.validator import validate_submission
from docexplain.config.settings import Settings
from docexplain.logging.logger import Log
from docexplain.pdf.base import BasePdfInspector
from docexplain.pdf.factory import PdfInspectorFactory


@dataclass(frozen=True)
class PipelineConfig:
    """Everything the pipeline reads from configuration, fixed at construction."""

    summary_agent_id: str
    explain_agent_id: str
    credential_configured: bool = True
    max_single_request_bytes: int = 5 * 1024 * 1024
    single_pass_max_tokens: int = 4000
    outline_max_tokens: int = 2000
    detail_max_tokens: int = 4000
    completion_timeout_seconds: float = 300.0
    extended_timeout_seconds: float = 75.0
    progressive_timeout_seconds: float = 120.0
    error_details_max_chars: int = 500
    parse_details_max_chars: int = 1000

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineConfig":
        return cls(
            summary_agent_id=settings.summary_agent_id,
            explain_agent_id=settings.explain_agent_id,
            credential_configured=AgentClientFactory.credential_configured(settings),
            max_single_request_bytes=settings.max_single_request_bytes,
            single_pass_max_tokens=settings.single_pass_max_tokens,
            outline_max_tokens=settings.outline_max_tokens,
            detail_max_tokens=settings.detail_max_tokens,
            completion_timeout_seconds=settings.completion_timeout_seconds,
            extended_timeout_seconds=settings.extended_timeout_seconds,
            progressive_timeout_seconds=settings.progressive_timeout_seconds,
            error_details_max_chars=settings.error_details_max_chars,
            parse_details_max_chars=settings.parse_details_max_chars,
        )


class AnalysisPipeline:
    """Orchestrates one document analysis.

    Pipeline: validate -> upload + sign -> single-pass | extended-timeout
    -> [escalate once] -> progressive outline -> progressive detail.
    The uploaded document is released exactly once, whichever tier finishes.
    """

    def __init__(
        self,
        *,
        config: PipelineConfig,
        client: BaseAgentClient,
        inspector: BasePdfInspector,
        on_release_failure: ReleaseFailureObserver | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._inspector = inspector
        self._handles = DocumentHandleManager(client, on_release_failure=on_release_failure)
        self._errors = UpstreamErrorFormatter(
            details_max_chars=config.error_details_max_chars,
            parse_details_max_chars=config.parse_details_max_chars,
        )
        prompts = PromptBuilder(
            agent_ids={
                TaskType.SUMMARIZE: config.summary_agent_id,
                TaskType.EXPLAIN: config.explain_agent_id,
            }
        )
        self._initial: dict[StrategyName, AnalysisStrategy] = {
            StrategyName.SINGLE_PASS: SinglePassStrategy(
                client,
                prompts,
                self._errors,
                max_tokens=config.single_pass_max_tokens,
                timeout_seconds=config.completion_timeout_seconds,
            ),
            StrategyName.EXTENDED_TIMEOUT: ExtendedTimeoutStrategy(
                client,
                prompts,
                self._errors,
                max_tokens=config.single_pass_max_tokens,
                timeout_seconds=config.extended_timeout_seconds,
            ),
        }
        self._progressive = ProgressiveStrategy(
            client,
            prompts,
            self._errors,
            outline_max_tokens=config.outline_max_tokens,
            detail_max_tokens=config.detail_max_tokens,
            timeout_seconds=config.progressive_timeout_seconds,
        )

    def run(self, submission: AnalysisSubmission) -> PipelineOutcome:
        """Analyse one submission and return its terminal outcome."""
        validated = validate_submission(
            submission,
            credential_configured=self._config.credential_configured,
            inspector=self._inspector,
        )
        if isinstance(validated, UserError):
            Log.warning(f"Rejected analysis request: {validated.message}", kind=validated.kind)
            return validated

        request = validated
        Log.info(
            "Processing file",
            filename=request.filename,
            size_bytes=request.size_bytes,
            pages=request.page_count,
            task_type=request.task_type.value,
        )
        try:
            with self._handles.open(request.filename, request.document) as handle:
                return self._dispatch(request, handle)
        except DocumentHandleError as exc:
            Log.error(f"Failed to prepare document upstream: {exc}", filename=request.filename)
            return self._errors.format(exc.cause, exc.action)

    def close(self) -> None:
        """Close the upstream client."""
        self._client.close()

    def _dispatch(self, request: AnalysisRequest, handle: DocumentHandle) -> PipelineOutcome:
        strategy_name = select_initial_strategy(
            request.size_bytes, self._config.max_single_request_bytes
        )
        Log.info("Selected strategy", strategy=strategy_name.value, file_id=handle.remote_id)
        outcome = self._initial[strategy_name].run(request, handle)
        if isinstance(outcome, EscalateToProgressive):
            Log.warning(
                "Attempting progressive analysis approach",
                reason=outcome.reason,
                file_id=handle.remote_id,
            )
            return self._progressive.run(request, handle)
        if isinstance(outcome, Success):
            Log.info("Analysis complete", markdown_chars=len(outcome.markdown))
        return outcome


def build_pipeline(settings: Settings, client: BaseAgentClient | None = None) -> AnalysisPipeline:
    """Build an AnalysisPipeline with all required adapters."""
    return AnalysisPipeline(
        config=PipelineConfig.from_settings(settings),
        client=client if client is not None else AgentClientFactory.create(settings),
        inspector=PdfInspectorFactory.create(settings),
    )
