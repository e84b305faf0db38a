from abc import ABC, abstractmethod

from docexplain.analysis.models import CompletionRequest, CompletionResult


class BaseAgentClient(ABC):
    """Contract for provider-specific agent and file-storage clients.

    All methods raise AgentAPIError subclasses on failure.
    """

    @abstractmethod
    def upload_file(self, filename: str, content: bytes) -> str:
        """Store a document for OCR and return its remote id."""

    @abstractmethod
    def get_signed_url(self, file_id: str) -> str:
        """Return a time-limited URL the agent can read the document from."""

    @abstractmethod
    def delete_file(self, file_id: str) -> None:
        """Delete a previously uploaded document."""

    @abstractmethod
    def create_completion(
        self,
        request: CompletionRequest,
        *,
        timeout_seconds: float | None = None,
    ) -> CompletionResult:
        """Run one agent completion and return the first choice's content."""

    def close(self) -> None:
        """Release network resources. Adapters without any keep the default."""
