"""Upload and probe data models."""

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class DeviceClass(StrEnum):
    """Which frame artwork the client wants."""

    MOBILE = "mobile"
    DESKTOP = "desktop"


class AudioMode(StrEnum):
    """How the campaign track is combined with the uploaded video."""

    REPLACE = "replace"
    MIX = "mix"


class UploadRequest(BaseModel):
    """A validated upload handed from the HTTP boundary to the pipeline."""

    model_config = {"frozen": True}

    input_path: Path
    device_class: DeviceClass = DeviceClass.MOBILE
    audio_id: str | None = None
    original_filename: str = ""
    byte_size: int = Field(default=0, ge=0)


class VideoProbe(BaseModel):
    """Display geometry and timing of an input video.

    ``width`` and ``height`` are the dimensions the video is *shown* at, i.e. the
    native stream dimensions swapped when the rotation is 90 or 270 degrees.
    """

    model_config = {"frozen": True}

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    rotation: int = Field(default=0, description="Clockwise rotation in degrees")
    duration_seconds: float = Field(default=0.0, ge=0)
    byte_size: int = Field(default=0, ge=0)
    has_audio: bool = False

    @field_validator("rotation")
    @classmethod
    def validate_rotation(cls, v: int) -> int:
        if v not in (0, 90, 180, 270):
            raise ValueError(f"rotation must be one of 0, 90, 180, 270, got {v}")
        return v

    @property
    def is_rotated(self) -> bool:
        return self.rotation != 0
