"""Tests for the document analysis pipeline and its strategy escalation."""

from unittest.mock import MagicMock

import pytest

from docexplain.analysis.client_base import BaseAgentClient
from docexplain.analysis.example_client_adapter import ExampleClientAdapter
from docexplain.analysis.exceptions import (
    AgentNetworkError,
    AgentParseError,
    AgentTimeoutError,
    AgentTransportError,
)
from docexplain.analysis.models import (
    AnalysisSubmission,
    CompletionRequest,
    CompletionResult,
    Success,
    UpstreamError,
    UserError,
)
from docexplain.analysis.pipeline import AnalysisPipeline, PipelineConfig, build_pipeline
from docexplain.config.settings import Settings
from docexplain.pdf.base import BasePdfInspector
from docexplain.pdf.exceptions import PdfInspectionError

MIB = 1024 * 1024


def _make_client() -> MagicMock:
    client = MagicMock(spec=BaseAgentClient)
    client.upload_file.return_value = "file-1"
    client.get_signed_url.return_value = "https://signed.example/file-1"
    client.create_completion.return_value = CompletionResult(markdown="# Summary")
    return client


def _make_pipeline(
    client: MagicMock | None = None,
    *,
    credential_configured: bool = True,
    on_release_failure: MagicMock | None = None,
) -> tuple[AnalysisPipeline, MagicMock, MagicMock]:
    if client is None:
        client = _make_client()
    inspector = MagicMock(spec=BasePdfInspector)
    inspector.page_count.return_value = 3
    config = PipelineConfig(
        summary_agent_id="agent-summary",
        explain_agent_id="agent-explain",
        credential_configured=credential_configured,
        max_single_request_bytes=5 * MIB,
    )
    pipeline = AnalysisPipeline(
        config=config,
        client=client,
        inspector=inspector,
        on_release_failure=on_release_failure,
    )
    return pipeline, client, inspector


def _submission(
    size: int = 1024,
    *,
    instructions: str | None = "Summarize key points",
    task_type: str | None = "summarize",
) -> AnalysisSubmission:
    return AnalysisSubmission(
        document=b"%PDF" + b"0" * (size - 4),
        filename="notes.pdf",
        instructions=instructions,
        task_type=task_type,
    )


def _call_names(client: MagicMock) -> list[str]:
    return [call[0] for call in client.mock_calls]


def _completion_requests(client: MagicMock) -> list[CompletionRequest]:
    return [call.args[0] for call in client.create_completion.call_args_list]


class TestValidationFailsFast:
    @pytest.mark.parametrize(
        ("submission", "kind"),
        [
            (AnalysisSubmission(document=None, instructions="x", task_type="summarize"), "missing_document"),
            (AnalysisSubmission(document=b"", instructions="x", task_type="summarize"), "missing_document"),
            (AnalysisSubmission(document=b"%PDF", instructions=None, task_type="summarize"), "missing_instructions"),
            (AnalysisSubmission(document=b"%PDF", instructions="   ", task_type="summarize"), "missing_instructions"),
            (AnalysisSubmission(document=b"%PDF", instructions="x", task_type=None), "missing_task_type"),
            (AnalysisSubmission(document=b"%PDF", instructions="x", task_type="translate"), "invalid_task_type"),
        ],
    )
    def test_rejects_incomplete_submission_without_upstream_calls(
        self, submission: AnalysisSubmission, kind: str
    ) -> None:
        pipeline, client, _inspector = _make_pipeline()

        outcome = pipeline.run(submission)

        assert isinstance(outcome, UserError)
        assert outcome.kind == kind
        assert outcome.status_code == 400
        assert client.mock_calls == []

    def test_missing_credential_is_a_server_error(self) -> None:
        pipeline, client, _inspector = _make_pipeline(credential_configured=False)

        outcome = pipeline.run(_submission())

        assert outcome == UserError(
            "missing_credential", "Mistral API key is not configured", status_code=500
        )
        assert client.mock_calls == []

    def test_unreadable_pdf_is_rejected_before_upload(self) -> None:
        pipeline, client, inspector = _make_pipeline()
        inspector.page_count.side_effect = PdfInspectionError("broken xref")

        outcome = pipeline.run(_submission())

        assert isinstance(outcome, UserError)
        assert outcome.kind == "invalid_document"
        assert client.mock_calls == []


class TestSinglePass:
    def test_small_summarize_request_makes_one_of_each_call(self) -> None:
        pipeline, client, _inspector = _make_pipeline()

        outcome = pipeline.run(_submission(1024))

        assert outcome == Success(markdown="# Summary")
        assert _call_names(client) == [
            "upload_file",
            "get_signed_url",
            "create_completion",
            "delete_file",
        ]
        client.upload_file.assert_called_once()
        client.delete_file.assert_called_once_with("file-1")
        (request,) = _completion_requests(client)
        assert request.max_tokens == 4000
        assert request.agent_id == "agent-summary"
        assert request.document_url == "https://signed.example/file-1"
        assert "Summarize key points" in request.user_text

    def test_explain_task_uses_explain_agent(self) -> None:
        pipeline, client, _inspector = _make_pipeline()

        pipeline.run(_submission(task_type="explain"))

        (request,) = _completion_requests(client)
        assert request.agent_id == "agent-explain"
        assert "explain in detail" in request.system_prompt

    def test_document_at_threshold_stays_single_pass(self) -> None:
        pipeline, client, _inspector = _make_pipeline()

        pipeline.run(_submission(5 * MIB))

        client.create_completion.assert_called_once()
        assert client.create_completion.call_args.kwargs["timeout_seconds"] == 300.0

    def test_http_error_is_terminal_and_releases_document(self) -> None:
        client = _make_client()
        client.create_completion.side_effect = AgentTransportError(500, "context length exceeded")
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission(1024))

        assert isinstance(outcome, UpstreamError)
        assert outcome.kind == "http_error"
        assert outcome.message == "Failed to process request: HTTP error 500"
        assert outcome.details == "context length exceeded"
        client.create_completion.assert_called_once()
        client.delete_file.assert_called_once_with("file-1")

    def test_error_details_are_truncated(self) -> None:
        client = _make_client()
        client.create_completion.side_effect = AgentTransportError(502, "x" * 5000)
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission())

        assert isinstance(outcome, UpstreamError)
        assert len(outcome.details) == 500

    def test_html_error_page_is_reported_distinctly(self) -> None:
        client = _make_client()
        client.create_completion.side_effect = AgentParseError(
            "html_error_page", "html", "<!DOCTYPE html><html>gateway</html>"
        )
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission())

        assert isinstance(outcome, UpstreamError)
        assert outcome.kind == "html_error_page"
        client.delete_file.assert_called_once_with("file-1")


class TestCleanup:
    def test_delete_failure_does_not_change_success(self) -> None:
        client = _make_client()
        delete_error = AgentNetworkError("connection reset")
        client.delete_file.side_effect = delete_error
        observer = MagicMock()
        pipeline, client, _inspector = _make_pipeline(client, on_release_failure=observer)

        outcome = pipeline.run(_submission())

        assert outcome == Success(markdown="# Summary")
        client.delete_file.assert_called_once_with("file-1")
        observer.assert_called_once_with("file-1", delete_error)

    def test_delete_failure_does_not_change_upstream_error(self) -> None:
        client = _make_client()
        client.create_completion.side_effect = AgentTransportError(400, "bad request")
        client.delete_file.side_effect = RuntimeError("boom")
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission())

        assert isinstance(outcome, UpstreamError)
        assert outcome.details == "bad request"
        client.delete_file.assert_called_once()

    def test_upload_failure_needs_no_cleanup(self) -> None:
        client = _make_client()
        client.upload_file.side_effect = AgentTransportError(413, "y" * 2000)
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission())

        assert isinstance(outcome, UpstreamError)
        assert outcome.message == "Failed to upload PDF file: HTTP error 413"
        assert len(outcome.details) == 500
        client.delete_file.assert_not_called()
        client.create_completion.assert_not_called()

    def test_signing_failure_deletes_the_upload(self) -> None:
        client = _make_client()
        client.get_signed_url.side_effect = AgentTransportError(500, "no url")
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission())

        assert isinstance(outcome, UpstreamError)
        assert outcome.message == "Failed to get signed URL: HTTP error 500"
        assert outcome.details == "no url"
        client.delete_file.assert_called_once_with("file-1")
        client.create_completion.assert_not_called()


class TestEscalation:
    def test_timeout_escalates_to_progressive_reusing_the_upload(self) -> None:
        client = _make_client()
        client.create_completion.side_effect = [
            AgentTimeoutError("read timed out"),
            CompletionResult(markdown="## Outline"),
            CompletionResult(markdown="# Detailed summary"),
        ]
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission(6 * MIB))

        assert outcome == Success(markdown="# Detailed summary")
        client.upload_file.assert_called_once()
        client.get_signed_url.assert_called_once()
        client.delete_file.assert_called_once_with("file-1")
        requests = _completion_requests(client)
        assert len(requests) == 3
        assert {r.document_url for r in requests} == {"https://signed.example/file-1"}
        assert _call_names(client)[-1] == "delete_file"

    def test_context_length_error_escalates_to_outline_then_detail(self) -> None:
        client = _make_client()
        outline = "## Outline\n- Chapter 1\n- Chapter 2 ($x^2$)"
        client.create_completion.side_effect = [
            AgentTransportError(500, "context length exceeded"),
            CompletionResult(markdown=outline),
            CompletionResult(markdown="# Full summary"),
        ]
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission(6 * MIB))

        assert outcome == Success(markdown="# Full summary")
        extended, outline_pass, detail_pass = _completion_requests(client)
        assert [extended.max_tokens, outline_pass.max_tokens, detail_pass.max_tokens] == [
            4000,
            2000,
            4000,
        ]
        assert "FIRST PASS" in outline_pass.system_prompt
        assert outline in detail_pass.user_text
        assert "Summarize key points" in detail_pass.user_text
        client.delete_file.assert_called_once_with("file-1")

    def test_timeouts_per_tier(self) -> None:
        client = _make_client()
        client.create_completion.side_effect = [
            AgentTimeoutError("slow"),
            CompletionResult(markdown="outline"),
            CompletionResult(markdown="detail"),
        ]
        pipeline, client, _inspector = _make_pipeline(client)

        pipeline.run(_submission(6 * MIB))

        timeouts = [
            call.kwargs["timeout_seconds"] for call in client.create_completion.call_args_list
        ]
        assert timeouts == [75.0, 120.0, 120.0]

    def test_other_extended_failures_do_not_escalate(self) -> None:
        client = _make_client()
        client.create_completion.side_effect = AgentTransportError(401, "invalid api key")
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission(6 * MIB))

        assert isinstance(outcome, UpstreamError)
        assert outcome.message == "Failed to process large document: HTTP error 401"
        client.create_completion.assert_called_once()
        client.delete_file.assert_called_once_with("file-1")

    def test_outline_failure_is_terminal(self) -> None:
        client = _make_client()
        client.create_completion.side_effect = [
            AgentTimeoutError("slow"),
            AgentTransportError(500, "too large"),
        ]
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission(6 * MIB))

        assert isinstance(outcome, UpstreamError)
        assert "outline pass" in outcome.message
        assert client.create_completion.call_count == 2
        client.delete_file.assert_called_once_with("file-1")

    def test_detail_failure_is_terminal(self) -> None:
        client = _make_client()
        client.create_completion.side_effect = [
            AgentTimeoutError("slow"),
            CompletionResult(markdown="outline"),
            AgentParseError("malformed_json", "bad json", "{not json"),
        ]
        pipeline, client, _inspector = _make_pipeline(client)

        outcome = pipeline.run(_submission(6 * MIB))

        assert isinstance(outcome, UpstreamError)
        assert outcome.kind == "malformed_json"
        assert outcome.details == "{not json"
        assert client.create_completion.call_count == 3
        client.delete_file.assert_called_once_with("file-1")


class TestIdempotence:
    def test_identical_inputs_give_identical_results_and_call_counts(self) -> None:
        pipeline, client, _inspector = _make_pipeline()

        first = pipeline.run(_submission())
        calls_after_first = len(client.mock_calls)
        first_request = client.create_completion.call_args.args[0]
        second = pipeline.run(_submission())
        calls_in_second = len(client.mock_calls) - calls_after_first

        assert first == second
        assert calls_after_first == calls_in_second == 4
        assert client.create_completion.call_args.args[0] == first_request


class TestBuildPipeline:
    def test_config_from_settings(self) -> None:
        settings = Settings(
            agent_provider="mistral",
            mistral_api_key="",
            max_single_request_bytes=1024,
            progressive_timeout_seconds=60,
        )

        config = PipelineConfig.from_settings(settings)

        assert config.credential_configured is False
        assert config.max_single_request_bytes == 1024
        assert config.progressive_timeout_seconds == 60
        assert config.summary_agent_id == settings.summary_agent_id

    def test_example_provider_end_to_end(self, sample_pdf_bytes: bytes) -> None:
        client = ExampleClientAdapter()
        pipeline = build_pipeline(Settings(agent_provider="example"), client=client)

        outcome = pipeline.run(
            AnalysisSubmission(
                document=sample_pdf_bytes,
                filename="hello.pdf",
                instructions="Summarize",
                task_type="summarize",
            )
        )

        assert outcome == Success(markdown=ExampleClientAdapter.DEFAULT_MARKDOWN)
        assert client.stored_file_count == 0

    def test_non_pdf_rejected_by_real_inspector(self, not_a_pdf_bytes: bytes) -> None:
        client = ExampleClientAdapter()
        pipeline = build_pipeline(Settings(agent_provider="example"), client=client)

        outcome = pipeline.run(
            AnalysisSubmission(
                document=not_a_pdf_bytes, instructions="Summarize", task_type="explain"
            )
        )

        assert isinstance(outcome, UserError)
        assert outcome.kind == "invalid_document"
        assert client.stored_file_count == 0


class TestClose:
    def test_close_closes_the_upstream_client(self) -> None:
        pipeline, client, _inspector = _make_pipeline()

        pipeline.close()

        client.close.assert_called_once_with()

    def test_example_client_close_is_a_no_op(self) -> None:
        build_pipeline(Settings(agent_provider="example"), client=ExampleClientAdapter()).close()
