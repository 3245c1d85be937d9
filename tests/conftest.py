"""Shared test fixtures, fakes and test media generators."""

import asyncio
import math
import struct
import wave
from pathlib import Path

import pytest

from framecast.config import Settings
from framecast.models.job import CompositionPlan, JobSucceeded
from framecast.models.media import VideoProbe
from framecast.rendering.compositor import Compositor


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment, rooted in a temp directory."""
    return Settings(
        _env_file=None,
        scratch_dir=tmp_path / "scratch",
        assets_root=tmp_path / "assets",
        max_concurrent_jobs=2,
        admission_timeout_seconds=0.2,
    )


@pytest.fixture
def plan(tmp_path):
    """A minimal plan whose input exists and whose output does not yet."""
    input_path = tmp_path / "video-1-1.mp4"
    input_path.write_bytes(b"x" * 1000)
    return CompositionPlan(
        input_path=input_path,
        frame_path=tmp_path / "frame.png",
        audio_path=tmp_path / "track.wav",
        output_path=tmp_path / "processed-video-1-1.mp4",
        expected_duration=10.0,
        filter_complex="[0:v]null[outv];[2:a]anull[outa]",
    )


def probe_payload(
    width: int = 640,
    height: int = 360,
    rotate_tag: str | None = None,
    matrix_rotation: float | None = None,
    stream_duration: str | None = "5.000000",
    format_duration: str | None = "5.020000",
    size: str | None = "123456",
    with_audio: bool = True,
) -> dict:
    """ffprobe -show_streams -show_format JSON for a single-video-stream file."""
    video = {"index": 0, "codec_type": "video", "codec_name": "h264", "width": width, "height": height}
    if stream_duration is not None:
        video["duration"] = stream_duration
    if rotate_tag is not None:
        video["tags"] = {"rotate": rotate_tag}
    if matrix_rotation is not None:
        video["side_data_list"] = [{"side_data_type": "Display Matrix", "rotation": matrix_rotation}]
    streams = [video]
    if with_audio:
        streams.append({"index": 1, "codec_type": "audio", "codec_name": "aac"})
    fmt = {"format_name": "mov,mp4,m4a,3gp,3g2,mj2"}
    if format_duration is not None:
        fmt["duration"] = format_duration
    if size is not None:
        fmt["size"] = size
    return {"streams": streams, "format": fmt}


class FakeStderr:
    """Stands in for a child's stderr StreamReader."""

    def __init__(self, chunks=(), delay: float = 0.0, hang: bool = False):
        self.chunks = list(chunks)
        self.delay = delay
        self.hang = hang

    async def read(self, n: int = -1) -> bytes:
        if self.chunks:
            if self.delay:
                await asyncio.sleep(self.delay)
            chunk = self.chunks.pop(0)
            return chunk.encode() if isinstance(chunk, str) else chunk
        if self.hang:
            await asyncio.sleep(3600)
        return b""


class FakeProcess:
    """Minimal asyncio.subprocess.Process double."""

    def __init__(self, chunks=(), exit_code: int = 0, delay: float = 0.0, hang: bool = False):
        self.stderr = FakeStderr(chunks, delay=delay, hang=hang)
        self.exit_code = exit_code
        self.returncode = None
        self.terminated = False
        self.killed = False

    async def wait(self) -> int:
        if self.returncode is None:
            self.returncode = self.exit_code
        return self.returncode

    def terminate(self) -> None:
        self.terminated = True
        self.returncode = -15

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9


def generate_test_wav(
    path: Path, duration: float = 1.0, sample_rate: int = 22050, freq: float = 440.0
) -> Path:
    """Generate a simple test WAV file with a sine wave."""
    n_samples = int(duration * sample_rate)
    with wave.open(str(path), "w") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        frames = b"".join(
            struct.pack("<h", int(32767 * 0.5 * math.sin(2 * math.pi * freq * i / sample_rate)))
            for i in range(n_samples)
        )
        wav.writeframes(frames)
    return path


class StubProber:
    """MediaProber double returning a fixed probe or raising."""

    def __init__(self, probe=None, error=None):
        self.probe_result = probe or VideoProbe(
            width=640, height=360, duration_seconds=5.0, byte_size=1000, has_audio=True
        )
        self.error = error
        self.calls = 0

    def probe(self, path):
        self.calls += 1
        if self.error:
            raise self.error
        return self.probe_result


class StubCompositor(Compositor):
    """Real planning, fake execution: writes ``output`` instead of running ffmpeg."""

    def __init__(self, settings, outcome=None, output=b"x" * 400, hold=None):
        super().__init__(settings)
        self.outcome = outcome
        self.output = output
        self.hold = hold
        self.plans = []

    async def execute(self, plan, monitor=None, input_byte_size=0, on_progress=None):
        self.plans.append(plan)
        if self.hold is not None:
            await self.hold.wait()
        if self.output:
            plan.output_path.write_bytes(self.output)
        return self.outcome or JobSucceeded(
            output_byte_size=len(self.output),
            compression_ratio=len(self.output) / input_byte_size if input_byte_size else 0.0,
        )
