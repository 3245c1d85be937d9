"""Read-only ffprobe inspection of uploaded videos."""

import json
import logging
import math
import subprocess
from pathlib import Path

from framecast.config import Settings
from framecast.models.errors import NoVideoStream, ProbeToolError
from framecast.models.media import VideoProbe

logger = logging.getLogger(__name__)


def _to_float(value) -> float | None:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result) or result <= 0:
        return None
    return result


def _normalize_rotation(degrees: float) -> int:
    return int(round(degrees / 90.0)) * 90 % 360


def read_rotation(stream: dict) -> int:
    """Clockwise rotation of a video stream in degrees.

    The legacy ``rotate`` tag is clockwise. Display-matrix side data reports the
    counter-clockwise angle, so it is negated.
    """
    tag = stream.get("tags", {}).get("rotate")
    if tag is not None:
        try:
            return _normalize_rotation(float(tag))
        except (ValueError, OverflowError):
            logger.warning("Ignoring unparseable rotate tag %r", tag)
    for side_data in stream.get("side_data_list", []):
        if "rotation" in side_data:
            try:
                return _normalize_rotation(-float(side_data["rotation"]))
            except (TypeError, ValueError, OverflowError):
                logger.warning("Ignoring unparseable display matrix rotation %r", side_data)
    return 0


def parse_probe(data: dict, byte_size: int = 0) -> VideoProbe:
    """Build a VideoProbe from ffprobe's JSON output."""
    streams = data.get("streams", [])
    video = next((s for s in streams if s.get("codec_type") == "video"), None)
    if video is None:
        raise NoVideoStream("No video stream found")

    try:
        width = int(video["width"])
        height = int(video["height"])
    except (KeyError, TypeError, ValueError):
        raise ProbeToolError("Video stream has no usable dimensions", details={"stream": video})
    if width <= 0 or height <= 0:
        raise ProbeToolError(
            f"Video stream reports invalid dimensions {width}x{height}", details={"stream": video}
        )

    rotation = read_rotation(video)
    if rotation in (90, 270):
        width, height = height, width

    fmt = data.get("format", {})
    duration = _to_float(video.get("duration"))
    if duration is None:
        duration = _to_float(fmt.get("duration"))
    if duration is None:
        logger.warning("No usable duration in probe data, assuming 0")
        duration = 0.0

    size = _to_float(fmt.get("size"))
    if size is not None:
        byte_size = int(size)

    return VideoProbe(
        width=width,
        height=height,
        rotation=rotation,
        duration_seconds=duration,
        byte_size=byte_size,
        has_audio=any(s.get("codec_type") == "audio" for s in streams),
    )


class MediaProber:
    """Runs ffprobe against a file and returns its display geometry."""

    def __init__(self, settings: Settings):
        self.ffprobe_binary = settings.ffprobe_binary
        self.timeout = settings.probe_timeout_seconds

    def probe(self, path: Path) -> VideoProbe:
        """Inspect ``path`` without decoding frames."""
        if not path.exists():
            raise ProbeToolError(f"File not found: {path}")
        try:
            result = subprocess.run(
                [
                    self.ffprobe_binary,
                    "-v",
                    "quiet",
                    "-print_format",
                    "json",
                    "-show_format",
                    "-show_streams",
                    str(path),
                ],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise ProbeToolError(
                "ffprobe not found. Please install FFmpeg.",
                details={"command": self.ffprobe_binary},
            )
        except subprocess.TimeoutExpired:
            raise ProbeToolError(
                "Video probe timed out",
                details={"file": str(path), "timeout": self.timeout},
            )

        if result.returncode != 0:
            logger.error("ffprobe failed for %s: %s", path, result.stderr)
            raise ProbeToolError(
                "Video file appears to be corrupted or unreadable",
                details={"stderr": result.stderr[:500]},
            )
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError:
            raise ProbeToolError("Failed to parse ffprobe output", details={"file": str(path)})

        probe = parse_probe(data, byte_size=path.stat().st_size)
        logger.info(
            "Probed %s: %dx%d rotation=%d duration=%.2fs size=%d audio=%s",
            path.name,
            probe.width,
            probe.height,
            probe.rotation,
            probe.duration_seconds,
            probe.byte_size,
            probe.has_audio,
        )
        return probe
