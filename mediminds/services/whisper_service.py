import asyncio
import logging
import os
import tempfile
from typing import Optional

import ffmpeg
from fastapi import HTTPException, UploadFile
from openai import AsyncOpenAI, OpenAIError

from ..config import OPENAI_API_KEY, TRANSCRIPTION_MODEL, MAX_AUDIO_BYTES
from ..errors import TranscriptionError

logger = logging.getLogger(__name__)

_client: Optional[AsyncOpenAI] = None


def get_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        _client = AsyncOpenAI(api_key=OPENAI_API_KEY)
    return _client


async def transcribe_audio(audio_bytes: bytes, filename: str = "recording.webm") -> str:
    """Convert the recording to Whisper-friendly WAV and transcribe it"""
    if not audio_bytes:
        raise TranscriptionError("Audio recording is empty")

    file_ext = os.path.splitext(filename)[-1].lower() or ".webm"
    with tempfile.TemporaryDirectory(prefix="mediminds_audio_") as temp_dir:
        input_path = os.path.join(temp_dir, f"input{file_ext}")
        processed_path = os.path.join(temp_dir, "processed.wav")

        with open(input_path, "wb") as f:
            f.write(audio_bytes)
        logger.info("Audio saved for transcription: %s (%d bytes)", filename, len(audio_bytes))

        await asyncio.to_thread(convert_audio, input_path, processed_path)
        await asyncio.to_thread(verify_audio, processed_path)
        return await call_whisper(processed_path)


def convert_audio(input_path: str, output_path: str):
    """16 kHz mono PCM with loudness normalization"""
    try:
        (
            ffmpeg
            .input(input_path)
            .output(output_path,
                    ac=1, ar=16000, acodec='pcm_s16le',
                    af='loudnorm=I=-16:TP=-1.5:LRA=11')
            .overwrite_output()
            .run(cmd='ffmpeg', capture_stdout=True, capture_stderr=True)
        )
    except ffmpeg.Error as e:
        stderr = e.stderr.decode(errors="replace") if e.stderr else str(e)
        logger.error("FFmpeg conversion failed: %s", stderr)
        raise TranscriptionError(f"Audio conversion failed: {stderr}") from e
    except FileNotFoundError as e:
        raise TranscriptionError("ffmpeg is not installed") from e


def verify_audio(file_path: str):
    try:
        info = ffmpeg.probe(file_path)
        duration = float(info['format']['duration'])
    except (ffmpeg.Error, KeyError, ValueError) as e:
        raise TranscriptionError(f"Invalid audio: {e}") from e
    if duration < 0.5:
        raise TranscriptionError("Audio too short (<500ms)")
    logger.info("Audio verified: duration=%.1fs", duration)


async def call_whisper(audio_path: str) -> str:
    try:
        with open(audio_path, "rb") as audio_file:
            transcript = await get_client().audio.transcriptions.create(
                model=TRANSCRIPTION_MODEL,
                file=audio_file,
                temperature=0.0
            )
    except OpenAIError as e:
        raise TranscriptionError(f"Transcription failed: {e}") from e
    return transcript.text


async def validate_audio_upload(file: UploadFile) -> bytes:
    """Check type and size of an uploaded recording and return its bytes"""
    if not (file.content_type or "").startswith(("audio/", "video/webm")):
        raise HTTPException(status_code=400, detail="File must be an audio file")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Audio file is empty")
    if len(content) > MAX_AUDIO_BYTES:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size is {MAX_AUDIO_BYTES} bytes"
        )
    return content
