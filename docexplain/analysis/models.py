from dataclasses import dataclass
from enum import Enum
from typing import Any


class TaskType(str, Enum):
    """What the agent is asked to do with the document."""

    SUMMARIZE = "summarize"
    EXPLAIN = "explain"


@dataclass(frozen=True)
class AnalysisSubmission:
    """Raw inbound fields, before validation. Any of them may be missing."""

    document: bytes | None = None
    filename: str = "document.pdf"
    instructions: str | None = None
    task_type: str | None = None
    neurodivergence_type: str | None = None
    personalization: str = ""


@dataclass(frozen=True)
class AnalysisRequest:
    """A validated analysis request."""

    document: bytes
    instructions: str
    task_type: TaskType
    filename: str = "document.pdf"
    page_count: int = 0
    neurodivergence_type: str | None = None
    personalization: str = ""

    @property
    def size_bytes(self) -> int:
        return len(self.document)


@dataclass(frozen=True)
class DocumentHandle:
    """A document stored upstream plus the signed URL the agent reads it from."""

    remote_id: str
    signed_url: str


@dataclass(frozen=True)
class CompletionRequest:
    """One agent completion call."""

    agent_id: str
    system_prompt: str
    user_text: str
    document_url: str
    max_tokens: int

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON body expected by the agents completion endpoint."""
        return {
            "agent_id": self.agent_id,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": self.user_text},
                        {"type": "document_url", "document_url": self.document_url},
                    ],
                },
            ],
        }


@dataclass(frozen=True)
class CompletionResult:
    """Markdown produced by a successful completion."""

    markdown: str


@dataclass(frozen=True)
class Success:
    """Terminal outcome: the analysis produced Markdown."""

    markdown: str


@dataclass(frozen=True)
class UserError:
    """Terminal outcome: the request was rejected before any upstream call."""

    kind: str
    message: str
    status_code: int = 400


@dataclass(frozen=True)
class UpstreamError:
    """Terminal outcome: the agent or file API failed."""

    kind: str
    message: str
    details: str = ""


@dataclass(frozen=True)
class EscalateToProgressive:
    """Non-terminal outcome: retry the same document with progressive analysis."""

    reason: str


PipelineOutcome = Success | UserError | UpstreamError
StrategyOutcome = Success | UpstreamError | EscalateToProgressive
