import logging

from fastapi import HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from .constants import CHUNK_SIZE, MAX_UPLOAD_BYTES
from .speech import transcribe_audio


logger = logging.getLogger("uvicorn.error")


async def read_upload_bytes(
    upload: UploadFile,
    *,
    field_name: str,
    max_size_bytes: int = MAX_UPLOAD_BYTES,
) -> bytes:
    chunks = []
    total_bytes = 0
    try:
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            total_bytes += len(chunk)
            if total_bytes > max_size_bytes:
                raise HTTPException(
                    status_code=413,
                    detail=f"{field_name} is too large. Max size is {max_size_bytes} bytes.",
                )
            chunks.append(chunk)
    finally:
        await upload.close()

    if total_bytes == 0:
        raise HTTPException(status_code=400, detail=f"{field_name} file is empty.")
    return b"".join(chunks)


async def transcribe_upload(upload: UploadFile) -> str:
    audio_bytes = await read_upload_bytes(upload, field_name="audio")
    text = await run_in_threadpool(
        transcribe_audio,
        audio_bytes,
        filename=upload.filename or "",
        content_type=upload.content_type or "",
    )
    logger.info(
        "transcription_done filename=%s bytes=%s chars=%s",
        upload.filename,
        len(audio_bytes),
        len(text),
    )
    return text
