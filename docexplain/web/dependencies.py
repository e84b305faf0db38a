from dataclasses import dataclass

from fastapi import Header, HTTPException, Request

from docexplain.analysis.pipeline import AnalysisPipeline, build_pipeline
from docexplain.config.settings import Settings
from docexplain.database.repositories.saved_responses_repository import SavedResponsesRepository
from docexplain.database.repositories.usage_repository import UsageRepository
from docexplain.database.repositories.user_profiles_repository import UserProfilesRepository


@dataclass
class Services:
    """Collaborators the HTTP routes depend on."""

    pipeline: AnalysisPipeline
    usage_repo: UsageRepository
    profiles_repo: UserProfilesRepository
    responses_repo: SavedResponsesRepository


def build_services(settings: Settings) -> Services:
    return Services(
        pipeline=build_pipeline(settings),
        usage_repo=UsageRepository(),
        profiles_repo=UserProfilesRepository(),
        responses_repo=SavedResponsesRepository(),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Identity is asserted by the fronting auth layer via the X-User-Id header."""
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()
