from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..errors import CapabilityUnavailableError
from ..services import assistant
from ..utils.auth import CurrentUser, get_current_user

router = APIRouter(tags=["chat"])


@router.post("/", response_model=schemas.ChatResponse)
async def chat(
        request: schemas.ChatRequest,
        db: Session = Depends(get_db),
        current_user: CurrentUser = Depends(get_current_user)
):
    messages = [m.model_dump() for m in request.messages]
    try:
        reply = await assistant.answer(
            db, current_user.id, current_user.role, messages, request.locale, name=current_user.name
        )
    except CapabilityUnavailableError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"reply": reply}
