import logging
import os
import re
import time

from ..config import MEDIA_ROOT, MEDIA_BASE_URL
from ..errors import MediaUploadError

logger = logging.getLogger(__name__)


def safe_filename(filename: str) -> str:
    name = re.sub(r'[^A-Za-z0-9._-]+', '_', os.path.basename(filename or "")).strip("._")
    return name or "upload"


async def upload_media(folder: str, filename: str, content: bytes) -> str:
    """Store a file under MEDIA_ROOT/<folder> and return its public URL"""
    stored_name = f"{int(time.time() * 1000)}_{safe_filename(filename)}"
    directory = os.path.join(MEDIA_ROOT, folder)
    try:
        os.makedirs(directory, exist_ok=True)
        with open(os.path.join(directory, stored_name), "wb") as f:
            f.write(content)
    except OSError as e:
        raise MediaUploadError(f"Could not store {filename}: {e}") from e

    logger.info("Stored %s/%s (%d bytes)", folder, stored_name, len(content))
    return f"{MEDIA_BASE_URL.rstrip('/')}/{folder}/{stored_name}"
