"""Error hierarchy and error response models."""

from pydantic import BaseModel, Field


class FramecastError(Exception):
    """Base error for all Framecast errors."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}


class UploadRejected(FramecastError):
    """The upload is missing, of the wrong type, empty or too large."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="upload", details=details)


class ProbeFailed(FramecastError):
    """The input could not be inspected."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="probe", details=details)


class NoVideoStream(ProbeFailed):
    pass


class ProbeToolError(ProbeFailed):
    pass


class TranscodeFailed(FramecastError):
    """ffmpeg failed, was killed or timed out."""

    def __init__(
        self,
        message: str,
        cause: str = "tool_error",
        stderr_tail: str = "",
        details: dict | None = None,
    ):
        super().__init__(message, component="rendering", details=details)
        self.cause = cause
        self.stderr_tail = stderr_tail


class OutputInvalid(TranscodeFailed):
    """ffmpeg exited cleanly but left no usable output."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, cause="output_invalid", details=details)


class DeliveryFailed(FramecastError):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="delivery", details=details)


class ServerBusy(FramecastError):
    """All transcode slots stayed occupied past the admission timeout."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="admission", details=details)


class ErrorResponse(BaseModel):
    """JSON body returned for every failed request."""

    error: str = Field(..., description="Human-readable error message")
    error_type: str = Field(default="", description="Error category")

    @classmethod
    def from_exception(cls, exc: FramecastError) -> "ErrorResponse":
        return cls(error=exc.message, error_type=type(exc).__name__)
