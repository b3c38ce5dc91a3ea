from .progress_tracker import ProgressTracker
from .session_analytics import SessionAnalytics
from .plan_assembler import generate_treatment_plan, PipelineCapabilities, PlanRequest, MediaFile
from .whisper_service import transcribe_audio

__all__ = [
    'ProgressTracker',
    'SessionAnalytics',
    'generate_treatment_plan',
    'PipelineCapabilities',
    'PlanRequest',
    'MediaFile',
    'transcribe_audio'
]
