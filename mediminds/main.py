import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .api import (
    children,
    treatment_plans,
    feedback,
    analytics,
    chat
)
from .config import LOG_LEVEL, MEDIA_ROOT
from .database import Base, engine

logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="MediMinds")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Adjust for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

os.makedirs(MEDIA_ROOT, exist_ok=True)
app.mount("/media", StaticFiles(directory=MEDIA_ROOT), name="media")

app.include_router(children.router, prefix="/children", tags=["children"])
app.include_router(treatment_plans.router, prefix="/treatment-plans", tags=["treatment_plans"])
app.include_router(feedback.router, prefix="/feedback", tags=["feedback"])
app.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
app.include_router(chat.router, prefix="/chat", tags=["chat"])
