from docexplain.analysis.models import (
    AnalysisSubmission,
    PipelineOutcome,
    Success,
    TaskType,
    UpstreamError,
    UserError,
)
from docexplain.analysis.pipeline import AnalysisPipeline, PipelineConfig, build_pipeline

__all__ = [
    "AnalysisPipeline",
    "AnalysisSubmission",
    "PipelineConfig",
    "PipelineOutcome",
    "Success",
    "TaskType",
    "UpstreamError",
    "UserError",
    "build_pipeline",
]
