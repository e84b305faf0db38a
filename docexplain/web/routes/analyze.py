import psycopg
from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from docexplain.analysis.models import (
    AnalysisSubmission,
    PipelineOutcome,
    Success,
    UpstreamError,
)
from docexplain.analysis.personalization import build_personalized_prompt
from docexplain.config.settings import Settings
from docexplain.database.repositories.usage_repository import SUMMARY_ACTION
from docexplain.logging.logger import Log
from docexplain.web.dependencies import Services, get_current_user_id, get_services, get_settings
from docexplain.web.schemas import AnalyzeResponse, ErrorResponse, LimitReachedResponse

router = APIRouter(prefix="/api", tags=["analyze"])


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": LimitReachedResponse},
        500: {"model": ErrorResponse},
    },
)
def analyze(
    pdf: UploadFile | None = File(default=None),
    instructions: str | None = Form(default=None),
    task_type: str | None = Form(default=None, alias="taskType"),
    neurodivergence_type: str | None = Form(default=None, alias="neurodivergenceType"),
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    try:
        usage = services.usage_repo.check_limit(
            user_id, SUMMARY_ACTION, settings.daily_summary_limit
        )
    except psycopg.Error as exc:
        Log.error(f"Failed to check usage limit: {exc}", user_id=user_id)
        return JSONResponse(status_code=500, content={"error": "Failed to check usage limit"})

    if not usage.allowed:
        return JSONResponse(
            status_code=429,
            content=LimitReachedResponse(
                error="Daily limit reached",
                message=(
                    f"You have reached your daily limit of {usage.limit} summaries. "
                    "Please try again tomorrow."
                ),
                remaining=usage.remaining,
            ).model_dump(),
        )

    submission = AnalysisSubmission(
        document=pdf.file.read() if pdf is not None else None,
        filename=(pdf.filename if pdf is not None and pdf.filename else "document.pdf"),
        instructions=instructions,
        task_type=task_type,
        neurodivergence_type=neurodivergence_type,
        personalization=_load_personalization(services, user_id),
    )
    outcome = services.pipeline.run(submission)

    if isinstance(outcome, Success):
        try:
            services.usage_repo.record(user_id, SUMMARY_ACTION)
        except psycopg.Error as exc:
            Log.error(f"Failed to record usage: {exc}", user_id=user_id)
    return render_outcome(outcome)


@router.get("/analyze", status_code=405)
def analyze_get() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"message": "This endpoint requires a POST request with PDF data"},
    )


def render_outcome(outcome: PipelineOutcome) -> JSONResponse:
    """Map a pipeline outcome onto the JSON envelope and HTTP status."""
    if isinstance(outcome, Success):
        return JSONResponse(status_code=200, content={"markdown": outcome.markdown})
    if isinstance(outcome, UpstreamError):
        body = ErrorResponse(error=outcome.message, details=outcome.details or None)
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
    return JSONResponse(status_code=outcome.status_code, content={"error": outcome.message})


def _load_personalization(services: Services, user_id: str) -> str:
    try:
        profile = services.profiles_repo.find_by_user_id(user_id)
    except psycopg.Error as exc:
        Log.warning(f"Profile lookup failed, continuing without personalization: {exc}")
        return ""
    return build_personalized_prompt(profile)
