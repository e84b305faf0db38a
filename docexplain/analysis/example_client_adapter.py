"""Example agent client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseAgentClient and register the provider in AgentClientFactory.
"""

import uuid
from typing import ClassVar

from docexplain.analysis.client_base import BaseAgentClient
from docexplain.analysis.models import CompletionRequest, CompletionResult


class ExampleClientAdapter(BaseAgentClient):
    """Example adapter that keeps files in memory and returns fixed Markdown.

    No network calls. Useful for local development and demos without an
    upstream API key.
    """

    DEFAULT_MARKDOWN: ClassVar[str] = (
        "# Example analysis\n\n"
        "- This response was produced by the offline example client.\n"
        "- Inline math renders as $e^{i\\pi} + 1 = 0$.\n"
    )

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}

    def upload_file(self, filename: str, content: bytes) -> str:
        _ = filename
        file_id = uuid.uuid4().hex
        self._files[file_id] = content
        return file_id

    def get_signed_url(self, file_id: str) -> str:
        return f"memory://files/{file_id}"

    def delete_file(self, file_id: str) -> None:
        self._files.pop(file_id, None)

    def create_completion(
        self,
        request: CompletionRequest,
        *,
        timeout_seconds: float | None = None,
    ) -> CompletionResult:
        _ = request, timeout_seconds
        return CompletionResult(markdown=self.DEFAULT_MARKDOWN)

    @property
    def stored_file_count(self) -> int:
        return len(self._files)
