import logging
from typing import Awaitable, Callable, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from .. import schemas
from ..config import MAX_VIDEO_BYTES
from ..database import get_db
from ..errors import MediaUploadError, NotFoundError, PipelineCancelledError, RETRYABLE_PIPELINE_ERRORS
from ..services.calendar_export import build_task_calendar
from ..services.child_registry import ChildRegistry
from ..services.media_storage import upload_media
from ..services.plan_assembler import MediaFile, PipelineCapabilities, PlanRequest, generate_treatment_plan
from ..services.plan_store import PlanRepository
from ..services.whisper_service import transcribe_audio, validate_audio_upload
from ..utils.auth import CurrentUser, get_current_user, require_therapist
from ..utils.openai_utils import generate_demo_video_suggestion, summarize_treatment_plan

logger = logging.getLogger(__name__)

router = APIRouter(tags=["treatment_plans"])

DEMO_VIDEOS_FOLDER = "demo-videos"


def get_pipeline_capabilities(db: Session = Depends(get_db)) -> PipelineCapabilities:
    return PipelineCapabilities(
        transcribe=transcribe_audio,
        summarize=summarize_treatment_plan,
        suggest_demo_video=generate_demo_video_suggestion,
        upload_media=upload_media,
        save_plan=PlanRepository(db).save
    )


def get_liveness_check(request: Request) -> Callable[[], Awaitable[bool]]:
    async def is_alive() -> bool:
        return not await request.is_disconnected()

    return is_alive


def _child_or_404(db: Session, child_id: str, user: CurrentUser):
    try:
        return ChildRegistry(db).get_for_user(child_id, user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/children/{child_id}/generate", response_model=schemas.PlanGenerationResult, status_code=201)
async def generate_plan(
        child_id: str,
        audio_file: UploadFile = File(...),
        document_file: Optional[UploadFile] = File(None),
        locale: str = Form("en"),
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user),
        capabilities: PipelineCapabilities = Depends(get_pipeline_capabilities),
        is_alive: Callable[[], Awaitable[bool]] = Depends(get_liveness_check)
):
    """
    Build a treatment plan from a recorded session:
    upload -> transcribe -> summarize -> demo-video suggestions -> save.

    A 502 response means nothing was saved and the request can be retried.
    A 201 response may list caveats (missing document, missing suggestions).
    """
    require_therapist(current_user)
    child = _child_or_404(db, child_id, current_user)
    if child.therapist_id != current_user.id:
        raise HTTPException(status_code=403, detail="Assign yourself to this patient first")

    audio = await validate_audio_upload(audio_file)
    document = None
    if document_file is not None and document_file.filename:
        document = MediaFile(
            filename=document_file.filename,
            content=await document_file.read(),
            content_type=document_file.content_type or "application/octet-stream"
        )

    request = PlanRequest(
        child_id=child.id,
        therapist_id=current_user.id,
        audio=MediaFile(
            filename=audio_file.filename or "recording.webm",
            content=audio,
            content_type=audio_file.content_type
        ),
        document=document,
        locale=locale
    )

    try:
        return await generate_treatment_plan(request, capabilities, is_alive=is_alive)
    except PipelineCancelledError as e:
        raise HTTPException(status_code=499, detail={"saved": False, "message": str(e)})
    except RETRYABLE_PIPELINE_ERRORS as e:
        logger.error("Plan generation failed for child %s: %s", child_id, e)
        raise HTTPException(
            status_code=502,
            detail={
                "saved": False,
                "retryable": True,
                "error": type(e).__name__,
                "message": str(e)
            }
        )


@router.get("/children/{child_id}/current", response_model=schemas.TreatmentPlan)
def get_current_plan(
        child_id: str,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    _child_or_404(db, child_id, current_user)
    try:
        return PlanRepository(db).get_current_plan(child_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/children/{child_id}", response_model=List[schemas.TreatmentPlan])
def list_plans(
        child_id: str,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    """All plans for the child, newest first"""
    _child_or_404(db, child_id, current_user)
    return PlanRepository(db).list_for_child(child_id)


@router.get("/children/{child_id}/calendar.ics")
def download_calendar(
        child_id: str,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    _child_or_404(db, child_id, current_user)
    try:
        plan = PlanRepository(db).get_current_plan(child_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return Response(
        content=build_task_calendar(plan.daily_tasks),
        media_type="text/calendar",
        headers={"Content-Disposition": 'attachment; filename="therapy-tasks.ics"'}
    )


def _plan_for_therapist(db: Session, plan_id: str, user: CurrentUser) -> PlanRepository:
    require_therapist(user)
    plans = PlanRepository(db)
    try:
        plan = plans.get_plan(plan_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    _child_or_404(db, plan.child_id, user)
    return plans


@router.patch("/{plan_id}/tasks/{task_id}", response_model=schemas.TreatmentPlan)
def update_task(
        plan_id: str,
        task_id: str,
        changes: schemas.DailyTaskUpdate,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    plans = _plan_for_therapist(db, plan_id, current_user)
    try:
        return plans.update_task(plan_id, task_id, changes)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{plan_id}/tasks/{task_id}/demo-video", response_model=schemas.TreatmentPlan)
async def upload_demo_video(
        plan_id: str,
        task_id: str,
        video_file: UploadFile = File(...),
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    plans = _plan_for_therapist(db, plan_id, current_user)

    if not (video_file.content_type or "").startswith("video/"):
        raise HTTPException(status_code=400, detail="Please select a valid video file")
    content = await video_file.read()
    if len(content) > MAX_VIDEO_BYTES:
        raise HTTPException(status_code=400, detail=f"Video file is too large. Max size is {MAX_VIDEO_BYTES} bytes")

    try:
        video_url = await upload_media(DEMO_VIDEOS_FOLDER, video_file.filename or "demo.mp4", content)
        return plans.attach_demo_video(plan_id, task_id, video_url)
    except MediaUploadError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
