from pathlib import Path

from docexplain.analysis.models import (
    AnalysisRequest,
    CompletionRequest,
    DocumentHandle,
    TaskType,
)
from docexplain.analysis.personalization import neurodivergence_modifier
from docexplain.analysis.prompt_loader import load_prompt_templates

_TASK_WORDING: dict[TaskType, dict[str, str]] = {
    TaskType.SUMMARIZE: {
        "task_action": "summarize",
        "task_goal": "create a comprehensive summary",
        "task_goal_short": "comprehensive summary",
        "task_output": "well-structured summary",
    },
    TaskType.EXPLAIN: {
        "task_action": "explain in detail",
        "task_goal": "provide a detailed explanation",
        "task_goal_short": "detailed explanation",
        "task_output": "comprehensive explanation",
    },
}

OUTLINE_USER_TEXT = (
    "This is a large document that requires progressive analysis. For this FIRST PASS, "
    "please ONLY identify the document's structure, major sections, and organization. "
    "Do not perform detailed analysis yet."
)


class PromptBuilder:
    """Builds the CompletionRequest for every strategy and pass.

    Output depends only on its inputs, so identical requests always produce
    identical payloads.
    """

    def __init__(
        self,
        *,
        agent_ids: dict[TaskType, str],
        prompt_dir: Path | None = None,
    ) -> None:
        self._agent_ids = agent_ids
        self._templates = load_prompt_templates(prompt_dir)

    def agent_id(self, task_type: TaskType) -> str:
        return self._agent_ids[task_type]

    def single_pass(
        self, request: AnalysisRequest, handle: DocumentHandle, max_tokens: int
    ) -> CompletionRequest:
        return self._completion(
            request,
            handle,
            max_tokens=max_tokens,
            system_prompt=self._system("single_pass_system", request, personalized=True),
            user_text=f"Here are my instructions: {request.instructions}{_modifier_block(request)}",
        )

    def extended(
        self, request: AnalysisRequest, handle: DocumentHandle, max_tokens: int
    ) -> CompletionRequest:
        user_text = (
            "This is a large document that might exceed normal processing limits. "
            f"Here are my instructions: {request.instructions}{_modifier_block(request)}\n\n"
            "Please analyze this document as thoroughly as possible, focusing on the most "
            "important content if you cannot process everything. If the document contains "
            "mathematical notation, ensure it's properly formatted in LaTeX."
        )
        return self._completion(
            request,
            handle,
            max_tokens=max_tokens,
            system_prompt=self._system("extended_system", request, personalized=True),
            user_text=user_text,
        )

    def outline(
        self, request: AnalysisRequest, handle: DocumentHandle, max_tokens: int
    ) -> CompletionRequest:
        return self._completion(
            request,
            handle,
            max_tokens=max_tokens,
            system_prompt=self._system("outline_system", request, personalized=False),
            user_text=OUTLINE_USER_TEXT,
        )

    def detail(
        self,
        request: AnalysisRequest,
        handle: DocumentHandle,
        outline: str,
        max_tokens: int,
    ) -> CompletionRequest:
        goal = _TASK_WORDING[request.task_type]["task_goal_short"]
        user_text = (
            "Here is the structural outline of the document from our first pass:\n\n"
            f"{outline}\n\n"
            f"Now, please provide a {goal} based on this structure, following my "
            f"instructions: {request.instructions}{_modifier_block(request)}"
        )
        return self._completion(
            request,
            handle,
            max_tokens=max_tokens,
            system_prompt=self._system("detail_system", request, personalized=True),
            user_text=user_text,
        )

    def _system(self, name: str, request: AnalysisRequest, *, personalized: bool) -> str:
        prompt = self._templates[name].format(**_TASK_WORDING[request.task_type])
        if not personalized:
            return prompt
        extras = [neurodivergence_modifier(request.neurodivergence_type), request.personalization]
        return prompt + "".join(f"\n\n{extra}" for extra in extras if extra)

    def _completion(
        self,
        request: AnalysisRequest,
        handle: DocumentHandle,
        *,
        max_tokens: int,
        system_prompt: str,
        user_text: str,
    ) -> CompletionRequest:
        return CompletionRequest(
            agent_id=self.agent_id(request.task_type),
            system_prompt=system_prompt,
            user_text=user_text,
            document_url=handle.signed_url,
            max_tokens=max_tokens,
        )


def _modifier_block(request: AnalysisRequest) -> str:
    modifier = neurodivergence_modifier(request.neurodivergence_type)
    return f"\n\n{modifier}" if modifier else ""
