"""Application configuration using Pydantic BaseSettings."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from framecast.models.media import AudioMode, DeviceClass


class Settings(BaseSettings):
    """Framecast configuration loaded from environment variables."""

    model_config = {"env_prefix": "FRAMECAST_", "env_file": ".env", "extra": "ignore"}

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Assets (paths relative to assets_root)
    assets_root: Path = Path("assets")
    frame_assets: dict[str, str] = {
        "mobile": "images/frame-mobile.png",
        "desktop": "images/frame-desktop.png",
    }
    audio_tracks: dict[str, str] = {
        "1": "audio/track-1.wav",
        "2": "audio/track-2.wav",
        "3": "audio/track-3.wav",
        "4": "audio/track-4.wav",
        "5": "audio/track-5.wav",
    }
    default_audio_id: str = "1"
    default_device_class: DeviceClass = DeviceClass.MOBILE
    honor_device_flag: bool = True

    # Audio strategy
    audio_mode: AudioMode = AudioMode.REPLACE
    music_volume: float = Field(default=0.5, ge=0.0)

    # Upload constraints
    upload_max_bytes: int = 100 * 1024 * 1024
    upload_chunk_bytes: int = 1024 * 1024
    multipart_overhead_bytes: int = 1024 * 1024
    allowed_video_formats: list[str] = ["mp4", "mov", "avi", "wmv", "flv", "mkv", "webm"]
    allowed_video_mime_types: list[str] = [
        "video/mp4",
        "video/quicktime",
        "video/x-msvideo",
        "video/avi",
        "video/x-ms-wmv",
        "video/x-flv",
        "video/x-matroska",
        "video/webm",
    ]

    # Scratch directory
    scratch_dir: Path = Path("uploads")
    scratch_file_ttl_seconds: int = 3600

    # Tools
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
    probe_timeout_seconds: float = 30.0

    # Rendering
    output_video_codec: str = "libx264"
    output_audio_codec: str = "aac"
    output_audio_bitrate: str = "128k"
    output_crf: int = 23
    output_preset: str = "veryfast"
    output_pixel_format: str = "yuv420p"
    output_profile: str = "main"
    output_level: str = "4.0"
    max_muxing_queue_size: int = 9999

    # Supervision
    stall_interval_seconds: float = 30.0
    transcode_timeout_seconds: float = 900.0
    kill_grace_seconds: float = 5.0
    stderr_tail_lines: int = 30

    # Admission control
    max_concurrent_jobs: int = Field(default_factory=lambda: os.cpu_count() or 2, ge=1)
    admission_timeout_seconds: float = 60.0

    @property
    def upload_max_mb(self) -> int:
        return self.upload_max_bytes // (1024 * 1024)


def get_settings() -> Settings:
    """Return a fresh settings instance built from the environment."""
    return Settings()
