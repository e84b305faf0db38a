from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query

from docexplain.database.exceptions import SavedResponseNotFoundError
from docexplain.database.models import SavedResponseRecord
from docexplain.logging.logger import Log
from docexplain.web.dependencies import Services, get_current_user_id, get_services
from docexplain.web.schemas import (
    DeleteResult,
    SavedResponseEnvelope,
    SavedResponseList,
    SavedResponseOut,
    SaveResponseRequest,
)

router = APIRouter(prefix="/api/responses", tags=["responses"])


def _to_out(record: SavedResponseRecord) -> SavedResponseOut:
    return SavedResponseOut(**asdict(record))


@router.post("/save", response_model=SavedResponseEnvelope)
def save_response(
    body: SaveResponseRequest,
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> SavedResponseEnvelope:
    if not body.title or not body.markdown_content or not body.task_type:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: title, markdown_content, task_type",
        )
    record = services.responses_repo.insert(
        user_id,
        title=body.title,
        markdown_content=body.markdown_content,
        task_type=body.task_type,
        original_filename=body.original_filename or None,
        instructions_used=body.instructions_used or None,
        neurodivergence_type_used=body.neurodivergence_type_used or None,
        metadata=body.metadata,
    )
    Log.info("Saved response", response_id=record.id, user_id=user_id)
    return SavedResponseEnvelope(response=_to_out(record))


@router.get("", response_model=SavedResponseEnvelope | SavedResponseList)
def get_responses(
    response_id: str | None = Query(default=None, alias="id"),
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> SavedResponseEnvelope | SavedResponseList:
    if response_id:
        try:
            record = services.responses_repo.find_for_user(response_id, user_id)
        except SavedResponseNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Response not found") from exc
        return SavedResponseEnvelope(response=_to_out(record))

    records = services.responses_repo.list_for_user(user_id)
    return SavedResponseList(responses=[_to_out(r) for r in records])


@router.delete("", response_model=DeleteResult)
def delete_response(
    response_id: str | None = Query(default=None, alias="id"),
    user_id: str = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> DeleteResult:
    if not response_id:
        raise HTTPException(status_code=400, detail="Missing id parameter")
    try:
        services.responses_repo.delete_for_user(response_id, user_id)
    except SavedResponseNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Response not found") from exc
    Log.info("Deleted response", response_id=response_id, user_id=user_id)
    return DeleteResult(success=True)
