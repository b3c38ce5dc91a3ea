import os

from dotenv import load_dotenv

load_dotenv()

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
SUMMARY_MODEL = os.getenv("SUMMARY_MODEL", "gpt-4o")
SUGGESTION_MODEL = os.getenv("SUGGESTION_MODEL", "gpt-4")
CHAT_MODEL = os.getenv("CHAT_MODEL", "gpt-4")
TRANSCRIPTION_MODEL = os.getenv("TRANSCRIPTION_MODEL", "whisper-1")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mediminds.db")

MEDIA_ROOT = os.getenv("MEDIA_ROOT", "media")
MEDIA_BASE_URL = os.getenv("MEDIA_BASE_URL", "/media")

MAX_AUDIO_BYTES = int(os.getenv("MAX_AUDIO_BYTES", 25 * 1024 * 1024))
MAX_VIDEO_BYTES = int(os.getenv("MAX_VIDEO_BYTES", 50 * 1024 * 1024))

# Upper bound on simultaneous demo-video suggestion requests per plan
MAX_CONCURRENT_ENRICHMENTS = int(os.getenv("MAX_CONCURRENT_ENRICHMENTS", 5))

# Days of sample feedback generated for children with no history
SAMPLE_DAYS = int(os.getenv("SAMPLE_DAYS", 14))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
