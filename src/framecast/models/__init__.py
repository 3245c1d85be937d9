"""Data models for Framecast."""

from framecast.models.errors import (
    DeliveryFailed,
    ErrorResponse,
    FramecastError,
    NoVideoStream,
    OutputInvalid,
    ProbeFailed,
    ProbeToolError,
    ServerBusy,
    TranscodeFailed,
    UploadRejected,
)
from framecast.models.job import (
    CompositionPlan,
    FailureCause,
    JobFailed,
    JobOutcome,
    JobState,
    JobSucceeded,
    PipelineResult,
)
from framecast.models.media import AudioMode, DeviceClass, UploadRequest, VideoProbe

__all__ = [
    "AudioMode",
    "CompositionPlan",
    "DeliveryFailed",
    "DeviceClass",
    "ErrorResponse",
    "FailureCause",
    "FramecastError",
    "JobFailed",
    "JobOutcome",
    "JobState",
    "JobSucceeded",
    "NoVideoStream",
    "OutputInvalid",
    "PipelineResult",
    "ProbeFailed",
    "ProbeToolError",
    "ServerBusy",
    "TranscodeFailed",
    "UploadRejected",
    "UploadRequest",
    "VideoProbe",
]
