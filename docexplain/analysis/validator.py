"""Validates a raw submission before anything is sent upstream."""

from docexplain.analysis.models import AnalysisRequest, AnalysisSubmission, TaskType, UserError
from docexplain.logging.logger import Log
from docexplain.pdf.base import BasePdfInspector
from docexplain.pdf.exceptions import PdfInspectionError

_VALID_TASK_TYPES = ", ".join(t.value for t in TaskType)


def validate_submission(
    submission: AnalysisSubmission,
    *,
    credential_configured: bool,
    inspector: BasePdfInspector,
) -> AnalysisRequest | UserError:
    """Check required fields, credential configuration and PDF readability.

    Returns a UserError (400, or 500 for a missing credential) on the first
    failed check, otherwise the validated AnalysisRequest.
    """
    if not submission.document:
        return UserError("missing_document", "PDF file is required")

    instructions = (submission.instructions or "").strip()
    if not instructions:
        return UserError("missing_instructions", "Instructions are required")

    raw_task_type = (submission.task_type or "").strip().lower()
    if not raw_task_type:
        return UserError("missing_task_type", "Task type is required")
    try:
        task_type = TaskType(raw_task_type)
    except ValueError:
        return UserError("invalid_task_type", f"Task type must be one of: {_VALID_TASK_TYPES}")

    if not credential_configured:
        return UserError(
            "missing_credential", "Mistral API key is not configured", status_code=500
        )

    try:
        page_count = inspector.page_count(submission.document)
    except PdfInspectionError as exc:
        Log.warning(f"Rejected unreadable document: {exc}", filename=submission.filename)
        return UserError("invalid_document", "Uploaded file is not a readable PDF")

    return AnalysisRequest(
        document=submission.document,
        instructions=instructions,
        task_type=task_type,
        filename=submission.filename,
        page_count=page_count,
        neurodivergence_type=submission.neurodivergence_type,
        personalization=submission.personalization,
    )
