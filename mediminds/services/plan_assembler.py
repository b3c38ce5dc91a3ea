"""
Plan Assembler - runs the treatment-plan generation pipeline end to end.

Stage order:
1. upload the session audio          (required)
2. transcribe                        (required)
3. summarize + validate              (required)
4. enrich daily tasks                (fan-out, per-task failures tolerated)
5. upload the companion document     (optional)
6. liveness check, then persist one new TreatmentPlan

A required-stage failure propagates to the caller and no plan is written.
Media already uploaded by then stays in storage; rerunning the pipeline
creates a fresh plan rather than patching an old one.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Optional

from ..errors import MediaUploadError, PipelineCancelledError, TranscriptionError
from ..schemas.treatment_plan import PlanGenerationResult, TreatmentPlan, WeeklyGoal
from .summarization import SummarizeFn, summarize_transcript
from .task_enrichment import SuggestFn, enrich_tasks

logger = logging.getLogger(__name__)

VOICE_RECORDINGS_FOLDER = "voice-recordings"
DOCUMENTS_FOLDER = "documents"


@dataclass
class MediaFile:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class PlanRequest:
    child_id: str
    therapist_id: str
    audio: MediaFile
    document: Optional[MediaFile] = None
    locale: str = "en"


@dataclass
class PipelineCapabilities:
    """External services the pipeline needs, as plain async callables"""
    transcribe: Callable[[bytes, str], Awaitable[str]]
    summarize: SummarizeFn
    suggest_demo_video: SuggestFn
    upload_media: Callable[[str, str, bytes], Awaitable[str]]
    save_plan: Callable[[TreatmentPlan], Awaitable[TreatmentPlan]]


async def generate_treatment_plan(
        request: PlanRequest,
        capabilities: PipelineCapabilities,
        is_alive: Optional[Callable[[], Awaitable[bool]]] = None,
        now: Optional[datetime] = None
) -> PlanGenerationResult:
    caveats = []
    logger.info("Generating treatment plan for child %s", request.child_id)

    voice_url = await capabilities.upload_media(
        VOICE_RECORDINGS_FOLDER,
        f"{request.child_id}_{request.audio.filename}",
        request.audio.content
    )
    logger.info("Voice recording stored: %s", voice_url)

    transcript = await capabilities.transcribe(request.audio.content, request.audio.filename)
    if not transcript or not transcript.strip():
        raise TranscriptionError("Transcription returned no text")
    transcript = transcript.strip()

    summary = await summarize_transcript(transcript, request.locale, capabilities.summarize)
    caveats.extend(f"goal_index_clamped:{w}" for w in summary.warnings)

    tasks, enrichment_caveats = await enrich_tasks(
        summary.daily_tasks, request.locale, capabilities.suggest_demo_video, now=now
    )
    caveats.extend(enrichment_caveats)

    document_url = ""
    if request.document is not None:
        try:
            document_url = await capabilities.upload_media(
                DOCUMENTS_FOLDER,
                f"{request.child_id}_{request.document.filename}",
                request.document.content
            )
        except MediaUploadError as e:
            logger.warning("Document upload failed, saving plan without it: %s", e)
            caveats.append("document_upload_failed")

    if is_alive is not None and not await is_alive():
        logger.warning("Requester disconnected, discarding plan for child %s", request.child_id)
        raise PipelineCancelledError("Request was cancelled before the plan was saved")

    timestamp = now or datetime.utcnow()
    plan = TreatmentPlan(
        id=str(uuid.uuid4()),
        child_id=request.child_id,
        therapist_id=request.therapist_id,
        voice_recording_url=voice_url,
        document_url=document_url,
        transcript=transcript,
        summary=summary.summary,
        therapy_type=summary.therapy_type,
        locale=request.locale,
        weekly_goals=[WeeklyGoal(**goal) for goal in summary.weekly_goals],
        daily_tasks=tasks,
        created_at=timestamp,
        updated_at=timestamp
    )
    saved = await capabilities.save_plan(plan)
    logger.info("Treatment plan %s saved with %d caveat(s)", saved.id, len(caveats))

    return PlanGenerationResult(plan=saved, caveats=caveats)
