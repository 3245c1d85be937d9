"""Compositing pipeline: probe, resolve assets, transcode, validate."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from framecast.assets.resolver import AssetResolver
from framecast.config import Settings
from framecast.media.prober import MediaProber
from framecast.models.errors import OutputInvalid, ServerBusy, TranscodeFailed
from framecast.models.job import FailureCause, JobFailed, PipelineResult
from framecast.models.media import UploadRequest
from framecast.rendering.compositor import Compositor
from framecast.rendering.monitor import JobMonitor
from framecast.storage.temp_store import ScratchStore

logger = logging.getLogger(__name__)


class CompositingPipeline:
    """Runs one upload through the compositor.

    Transcodes are CPU heavy, so at most ``max_concurrent_jobs`` run at a time;
    further requests wait up to ``admission_timeout_seconds`` for a slot.
    """

    def __init__(
        self,
        settings: Settings,
        store: ScratchStore | None = None,
        prober: MediaProber | None = None,
        resolver: AssetResolver | None = None,
        compositor: Compositor | None = None,
        monitor_factory: Callable[[], JobMonitor] | None = None,
    ):
        self.settings = settings
        self.store = store or ScratchStore(settings.scratch_dir)
        self.prober = prober or MediaProber(settings)
        self.resolver = resolver or AssetResolver(settings)
        self.compositor = compositor or Compositor(settings)
        self.monitor_factory = monitor_factory or (lambda: JobMonitor(settings))
        self._slots = asyncio.Semaphore(settings.max_concurrent_jobs)

    async def run(self, request: UploadRequest) -> PipelineResult:
        """Composite ``request`` and return the output for delivery.

        The input file is always deleted before returning. The output file is
        deleted on failure; on success the caller owns it.
        """
        try:
            await self._acquire_slot()
            try:
                return await self._run(request)
            finally:
                self._slots.release()
        finally:
            self.store.delete(request.input_path)

    async def _acquire_slot(self) -> None:
        try:
            await asyncio.wait_for(
                self._slots.acquire(), timeout=self.settings.admission_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(
                "No transcode slot free after %.0fs (limit %d)",
                self.settings.admission_timeout_seconds,
                self.settings.max_concurrent_jobs,
            )
            raise ServerBusy("Server is busy processing other videos, please try again later")

    async def _run(self, request: UploadRequest) -> PipelineResult:
        input_path = request.input_path
        logger.info(
            "Processing %s (%s, device=%s, audio=%s)",
            input_path.name,
            request.original_filename,
            request.device_class,
            request.audio_id,
        )

        probe = await asyncio.to_thread(self.prober.probe, input_path)

        frame_path = self.resolver.resolve_frame(request.device_class)
        audio_path = self.resolver.resolve_audio(request.audio_id)
        logger.info("Using frame %s and audio %s", frame_path, audio_path)

        output_path = self.output_path_for(input_path)
        plan = self.compositor.build_plan(input_path, probe, frame_path, audio_path, output_path)

        try:
            outcome = await self.compositor.execute(
                plan,
                monitor=self.monitor_factory(),
                input_byte_size=probe.byte_size or request.byte_size,
            )
        except BaseException:
            self.store.delete(output_path)
            raise

        if isinstance(outcome, JobFailed):
            self.store.delete(output_path)
            if outcome.cause == FailureCause.OUTPUT_INVALID:
                logger.error("Output invalid for %s: %s", input_path.name, outcome.message)
                raise OutputInvalid(f"Video processing failed: {outcome.message}")
            logger.error(
                "Transcode failed for %s (%s): %s", input_path.name, outcome.cause, outcome.message
            )
            raise TranscodeFailed(
                f"Video processing failed: {outcome.message}",
                cause=outcome.cause,
                stderr_tail=outcome.stderr_tail,
            )

        logger.info("Video processing finished: %s", output_path.name)
        return PipelineResult(
            output_path=output_path,
            download_name=output_path.name,
            outcome=outcome,
        )

    def output_path_for(self, input_path: Path) -> Path:
        """Output path derived from the (already unique) input name."""
        return input_path.with_name(f"processed-{input_path.stem}.mp4")
