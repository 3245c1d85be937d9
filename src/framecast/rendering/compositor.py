"""Compositor: frame overlay + soundtrack transcoding with FFmpeg."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from framecast.config import Settings
from framecast.models.errors import TranscodeFailed
from framecast.models.job import CompositionPlan, JobOutcome
from framecast.models.media import AudioMode, VideoProbe
from framecast.rendering.filter_graph import FrameOverlayGraphBuilder
from framecast.rendering.monitor import JobMonitor

logger = logging.getLogger(__name__)


class Compositor:
    """Plans and launches the ffmpeg job for one upload."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.builder = FrameOverlayGraphBuilder()

    def build_plan(
        self,
        input_path: Path,
        probe: VideoProbe,
        frame_path: Path,
        audio_path: Path,
        output_path: Path,
    ) -> CompositionPlan:
        """Fix every detail of the ffmpeg invocation up front."""
        mode = self.settings.audio_mode
        filter_complex = self.builder.build_filter_graph(probe, mode, self.settings.music_volume)

        input_args = []
        if probe.is_rotated:
            # The rotation is corrected in the filter graph instead.
            input_args.append("-noautorotate")
        input_args += ["-i", str(input_path)]
        input_args += ["-i", str(frame_path)]
        input_args += ["-stream_loop", "-1", "-i", str(audio_path)]

        return CompositionPlan(
            input_path=input_path,
            frame_path=frame_path,
            audio_path=audio_path,
            output_path=output_path,
            audio_mode=mode,
            rotation=probe.rotation,
            expected_duration=probe.duration_seconds,
            filter_complex=filter_complex,
            input_args=input_args,
            map_args=["-map", "[outv]", "-map", "[outa]"],
            output_options=self.build_output_options(probe, mode),
        )

    def build_output_options(self, probe: VideoProbe, mode: AudioMode) -> list[str]:
        """Encoding flags chosen for broad device and browser playback."""
        s = self.settings
        options = [
            "-c:v",
            s.output_video_codec,
            "-preset",
            s.output_preset,
            "-crf",
            str(s.output_crf),
            "-profile:v",
            s.output_profile,
            "-level",
            s.output_level,
            "-pix_fmt",
            s.output_pixel_format,
            "-c:a",
            s.output_audio_codec,
            "-b:a",
            s.output_audio_bitrate,
            "-movflags",
            "+faststart",
            "-max_muxing_queue_size",
            str(s.max_muxing_queue_size),
        ]
        # The looped track never ends on its own unless mix mode trimmed it.
        if mode == AudioMode.REPLACE or probe.duration_seconds <= 0:
            options.append("-shortest")
        if probe.is_rotated:
            options += ["-metadata:s:v:0", "rotate=0"]
        return options

    def build_command(self, plan: CompositionPlan) -> list[str]:
        """Build the complete FFmpeg command."""
        return [
            self.settings.ffmpeg_binary,
            "-hide_banner",
            "-nostdin",
            "-y",
            *plan.input_args,
            "-filter_complex",
            plan.filter_complex,
            *plan.map_args,
            *plan.output_options,
            str(plan.output_path),
        ]

    async def start(self, plan: CompositionPlan) -> asyncio.subprocess.Process:
        """Launch ffmpeg for ``plan`` without waiting for it."""
        plan.output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(plan)
        logger.info("Starting ffmpeg: %s", " ".join(cmd))
        try:
            return await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise TranscodeFailed(
                "FFmpeg not found. Please install FFmpeg.",
                details={"command": self.settings.ffmpeg_binary},
            )
        except OSError as e:
            raise TranscodeFailed(f"Could not start ffmpeg: {e}", details={"error": str(e)})

    async def execute(
        self,
        plan: CompositionPlan,
        monitor: JobMonitor | None = None,
        input_byte_size: int = 0,
        on_progress: Callable[[float], None] | None = None,
    ) -> JobOutcome:
        """Run ``plan`` to completion under ``monitor``."""
        monitor = monitor or JobMonitor(self.settings)
        process = await self.start(plan)
        return await monitor.supervise(process, plan, input_byte_size, on_progress)
