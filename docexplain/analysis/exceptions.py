class AgentAPIError(Exception):
    """Raised when a call to the agent or file API fails."""


class AgentTransportError(AgentAPIError):
    """Raised when the API answers with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"HTTP error {status_code}")
        self.status_code = status_code
        self.body = body


class AgentParseError(AgentAPIError):
    """Raised when a response body does not match the expected contract.

    ``kind`` is one of ``malformed_json``, ``html_error_page`` or
    ``unexpected_shape``.
    """

    def __init__(self, kind: str, message: str, body: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.body = body


class AgentTimeoutError(AgentAPIError):
    """Raised when a call exceeds its client-side timeout."""


class AgentNetworkError(AgentAPIError):
    """Raised when the API cannot be reached."""


class PromptTemplateError(Exception):
    """Raised when a bundled prompt template cannot be read."""


class DocumentHandleError(Exception):
    """Raised when a document cannot be prepared for the agent.

    ``action`` names the failed step (``"upload PDF file"`` or
    ``"get signed URL"``); ``cause`` is the underlying API error.
    """

    def __init__(self, action: str, cause: AgentAPIError) -> None:
        super().__init__(f"Failed to {action}: {cause}")
        self.action = action
        self.cause = cause
