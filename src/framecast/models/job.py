"""Composition plan and job outcome models."""

from enum import StrEnum
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from framecast.models.media import AudioMode


class CompositionPlan(BaseModel):
    """Everything needed to invoke ffmpeg for one upload."""

    model_config = {"frozen": True}

    input_path: Path
    frame_path: Path
    audio_path: Path
    output_path: Path
    audio_mode: AudioMode = AudioMode.REPLACE
    rotation: int = 0
    expected_duration: float = Field(default=0.0, ge=0)
    filter_complex: str = Field(..., min_length=1)
    input_args: list[str] = Field(default_factory=list)
    map_args: list[str] = Field(default_factory=list)
    output_options: list[str] = Field(default_factory=list)


class JobState(StrEnum):
    """Lifecycle of a supervised transcode."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureCause(StrEnum):
    TOOL_ERROR = "tool_error"
    KILLED = "killed"
    TIMEOUT = "timeout"
    OUTPUT_INVALID = "output_invalid"


class JobSucceeded(BaseModel):
    status: Literal["succeeded"] = "succeeded"
    output_byte_size: int = Field(..., gt=0)
    compression_ratio: float = Field(default=0.0, ge=0)


class JobFailed(BaseModel):
    status: Literal["failed"] = "failed"
    cause: FailureCause
    message: str = ""
    stderr_tail: str = ""


JobOutcome = Annotated[JobSucceeded | JobFailed, Field(discriminator="status")]


class PipelineResult(BaseModel):
    """What the pipeline hands back to the delivery boundary."""

    output_path: Path
    download_name: str
    outcome: JobSucceeded
