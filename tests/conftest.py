import json
import os
import tempfile

import pytest

# Configure before any mediminds import reads the environment
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="mediminds_media_"))
os.environ.setdefault("OPENAI_API_KEY", "test-key")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mediminds.database import Base
from mediminds.services.plan_assembler import PipelineCapabilities
from mediminds.services.plan_store import PlanRepository

BALANCE_TRANSCRIPT = "the child practiced balancing on one foot"

BALANCE_SUMMARY = {
    "summary": "Work on balance through short daily games.",
    "therapyType": "motor",
    "weeklyGoals": [{"goal": "improve balance", "category": "motor"}],
    "dailyTasks": [
        {
            "title": "Flamingo stand",
            "description": "Stand on one foot for 10 seconds, three times per leg",
            "whyItMatters": "Builds the core stability needed for walking on uneven ground",
            "weeklyGoalIndex": 0
        }
    ]
}


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


class FakeCapabilities:
    """Deterministic stand-ins for the external services, recording every call"""

    def __init__(self, db=None, summary=BALANCE_SUMMARY, transcript=BALANCE_TRANSCRIPT):
        self.db = db
        self.summary = summary
        self.transcript = transcript
        self.calls = []
        self.saved = []
        self.failing_folders = set()
        self.failing_suggestions = set()
        self.transcribe_error = None

    async def transcribe(self, audio_bytes, filename):
        self.calls.append("transcribe")
        if self.transcribe_error:
            raise self.transcribe_error
        return self.transcript

    async def summarize(self, transcript, locale):
        self.calls.append("summarize")
        if isinstance(self.summary, (dict, list)):
            return json.dumps(self.summary)
        return self.summary

    async def suggest_demo_video(self, description, locale):
        self.calls.append("suggest")
        if description in self.failing_suggestions:
            raise RuntimeError("suggestion service down")
        return f"Show a parent demonstrating: {description}"

    async def upload_media(self, folder, filename, content):
        from mediminds.errors import MediaUploadError

        self.calls.append(f"upload:{folder}")
        if folder in self.failing_folders:
            raise MediaUploadError(f"{folder} unavailable")
        return f"/media/{folder}/{filename}"

    async def save_plan(self, plan):
        self.calls.append("save")
        self.saved.append(plan)
        if self.db is not None:
            return await PlanRepository(self.db).save(plan)
        return plan

    def as_capabilities(self):
        return PipelineCapabilities(
            transcribe=self.transcribe,
            summarize=self.summarize,
            suggest_demo_video=self.suggest_demo_video,
            upload_media=self.upload_media,
            save_plan=self.save_plan
        )


@pytest.fixture
def fakes(db):
    return FakeCapabilities(db)
