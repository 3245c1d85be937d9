"""Upload endpoints."""

from fastapi import APIRouter, Depends, File, Form, UploadFile

from framecast.api.delivery import CleanupFileResponse
from framecast.api.dependencies import get_app_settings, get_pipeline
from framecast.config import Settings
from framecast.models.errors import UploadRejected
from framecast.models.media import UploadRequest
from framecast.pipeline.manager import CompositingPipeline
from framecast.uploads.validators import (
    extension_for_mime,
    save_upload,
    validate_file_format,
    validate_mime_type,
)

router = APIRouter(tags=["upload"])
blob_router = APIRouter(prefix="/api", tags=["upload"])


async def _composite(
    video: UploadFile,
    ext: str,
    prefix: str,
    is_desktop: str | None,
    is_mobile: str | None,
    audio_id: str | None,
    settings: Settings,
    pipeline: CompositingPipeline,
) -> CleanupFileResponse:
    input_path = pipeline.store.allocate(prefix, ext)
    size = await save_upload(
        video, input_path, settings.upload_max_bytes, settings.upload_chunk_bytes
    )
    request = UploadRequest(
        input_path=input_path,
        device_class=pipeline.resolver.resolve_device_class(is_desktop, is_mobile),
        audio_id=audio_id,
        original_filename=video.filename or "",
        byte_size=size,
    )
    result = await pipeline.run(request)
    return CleanupFileResponse(result.output_path, pipeline.store, result.download_name)


@router.post("/upload")
async def upload_video(
    video: UploadFile | None = File(default=None),
    is_desktop: str | None = Form(default=None, alias="isDesktop"),
    is_mobile: str | None = Form(default=None, alias="isMobile"),
    audio_id: str | None = Form(default=None, alias="audioId"),
    settings: Settings = Depends(get_app_settings),
    pipeline: CompositingPipeline = Depends(get_pipeline),
):
    """Upload a video and receive it back with the campaign frame and music."""
    if video is None or not video.filename:
        raise UploadRejected("No video file uploaded")
    ext = validate_file_format(video.filename, settings.allowed_video_formats)
    validate_mime_type(video.content_type, settings.allowed_video_mime_types)
    return await _composite(
        video, ext, "video", is_desktop, is_mobile, audio_id, settings, pipeline
    )


@blob_router.post("/upload-blob")
async def upload_blob(
    video: UploadFile | None = File(default=None),
    is_desktop: str | None = Form(default=None, alias="isDesktop"),
    is_mobile: str | None = Form(default=None, alias="isMobile"),
    audio_id: str | None = Form(default=None, alias="audioId"),
    settings: Settings = Depends(get_app_settings),
    pipeline: CompositingPipeline = Depends(get_pipeline),
):
    """Blob variant for in-browser recordings, validated by MIME type only."""
    if video is None:
        raise UploadRejected("No video file provided")
    validate_mime_type(video.content_type, settings.allowed_video_mime_types)
    ext = extension_for_mime(video.content_type)
    return await _composite(
        video, ext, "input", is_desktop, is_mobile, audio_id, settings, pipeline
    )
