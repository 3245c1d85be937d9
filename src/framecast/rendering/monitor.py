"""Supervision of a running ffmpeg transcode."""

import asyncio
import codecs
import contextlib
import logging
import re
from collections import deque
from collections.abc import AsyncIterator, Callable
from pathlib import Path

from framecast.config import Settings
from framecast.models.job import (
    CompositionPlan,
    FailureCause,
    JobFailed,
    JobOutcome,
    JobState,
    JobSucceeded,
)
from framecast.rendering.progress import ProgressTracker

logger = logging.getLogger(__name__)

# ffmpeg terminates status lines with \r, everything else with \n.
_LINE_SPLIT = re.compile(r"[\r\n]+")


async def iter_lines(reader: asyncio.StreamReader, chunk_size: int = 4096) -> AsyncIterator[str]:
    """Yield lines from a byte stream, treating both \\r and \\n as terminators."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""
    while True:
        chunk = await reader.read(chunk_size)
        if not chunk:
            break
        buffer += decoder.decode(chunk)
        *lines, buffer = _LINE_SPLIT.split(buffer)
        for line in lines:
            if line.strip():
                yield line.strip()
    buffer += decoder.decode(b"", final=True)
    if buffer.strip():
        yield buffer.strip()


class JobMonitor:
    """Watches one ffmpeg child process until it reaches a terminal outcome.

    Progress is tracked from stderr. If nothing moves for ``stall_interval_seconds``
    the monitor logs a diagnostic about the input file and carries on; only the
    hard ``transcode_timeout_seconds`` deadline terminates the child. No retries.
    """

    def __init__(self, settings: Settings):
        self.stall_interval = settings.stall_interval_seconds
        self.timeout = settings.transcode_timeout_seconds
        self.kill_grace = settings.kill_grace_seconds
        self.tail_lines = settings.stderr_tail_lines
        self.state = JobState.RUNNING
        self.stall_warnings = 0
        self.progress_log: list[str] = []
        self._last_activity = 0.0

    async def supervise(
        self,
        process: asyncio.subprocess.Process,
        plan: CompositionPlan,
        input_byte_size: int = 0,
        on_progress: Callable[[float], None] | None = None,
    ) -> JobOutcome:
        """Wait for ``process`` and return its outcome."""
        loop = asyncio.get_running_loop()
        self.state = JobState.RUNNING
        self._last_activity = loop.time()
        tracker = ProgressTracker(plan.expected_duration, on_progress)
        tail: deque[str] = deque(maxlen=self.tail_lines)
        # Recent non-progress output, logged if ffmpeg fails.
        diagnostics: deque[str] = deque(maxlen=self.tail_lines * 10)

        watchdog = asyncio.create_task(self._watchdog(plan.input_path))
        try:
            returncode = await asyncio.wait_for(
                self._drain(process, plan, tracker, tail, diagnostics),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error("ffmpeg exceeded %.0fs for %s, terminating", self.timeout, plan.output_path)
            await self.terminate(process)
            return self._finish(
                JobFailed(
                    cause=FailureCause.TIMEOUT,
                    message=f"ffmpeg did not finish within {self.timeout:.0f} seconds",
                    stderr_tail="\n".join(tail),
                )
            )
        except asyncio.CancelledError:
            await self.terminate(process)
            raise
        finally:
            watchdog.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watchdog

        if returncode != 0:
            logger.error(
                "ffmpeg exited with code %d for %s. stderr:\n%s",
                returncode,
                plan.output_path,
                "\n".join(diagnostics),
            )
            cause = FailureCause.KILLED if returncode < 0 else FailureCause.TOOL_ERROR
            return self._finish(
                JobFailed(
                    cause=cause,
                    message=f"ffmpeg exited with code {returncode}",
                    stderr_tail="\n".join(tail),
                )
            )

        return self._finish(self.validate_output(plan.output_path, input_byte_size))

    def validate_output(self, output_path: Path, input_byte_size: int = 0) -> JobOutcome:
        """Check that a cleanly finished transcode left a non-empty file."""
        if not output_path.exists():
            logger.error("ffmpeg reported success but %s was not created", output_path)
            return JobFailed(cause=FailureCause.OUTPUT_INVALID, message="Output file was not created")
        size = output_path.stat().st_size
        if size == 0:
            logger.error("ffmpeg reported success but %s is empty", output_path)
            return JobFailed(cause=FailureCause.OUTPUT_INVALID, message="Output file is empty")

        ratio = size / input_byte_size if input_byte_size > 0 else 0.0
        logger.info(
            "Finished %s: %.2f MB (%.1f%% of input)",
            output_path.name,
            size / (1024 * 1024),
            ratio * 100,
        )
        return JobSucceeded(output_byte_size=size, compression_ratio=ratio)

    async def terminate(self, process: asyncio.subprocess.Process) -> None:
        """SIGTERM the child, escalating to SIGKILL after the grace period."""
        if process.returncode is not None:
            return
        with contextlib.suppress(ProcessLookupError):
            process.terminate()
        try:
            await asyncio.wait_for(process.wait(), timeout=self.kill_grace)
        except asyncio.TimeoutError:
            logger.warning("ffmpeg ignored SIGTERM, killing")
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    async def _drain(
        self,
        process: asyncio.subprocess.Process,
        plan: CompositionPlan,
        tracker: ProgressTracker,
        tail: deque[str],
        diagnostics: deque[str],
    ) -> int:
        loop = asyncio.get_running_loop()
        if process.stderr is not None:
            async for line in iter_lines(process.stderr):
                tail.append(line)
                if tracker.feed(line) is None:
                    diagnostics.append(line)
                    continue
                self._last_activity = loop.time()
                for message in tracker.pop_messages():
                    self.progress_log.append(message)
                    logger.info("%s: %s", plan.output_path.name, message)
        return await process.wait()

    async def _watchdog(self, input_path: Path) -> None:
        loop = asyncio.get_running_loop()
        warned_at = 0.0
        while True:
            reference = max(self._last_activity, warned_at)
            remaining = reference + self.stall_interval - loop.time()
            if remaining > 0:
                await asyncio.sleep(remaining)
                continue
            warned_at = loop.time()
            self.stall_warnings += 1
            self._report_stall(input_path, warned_at - self._last_activity)

    def _report_stall(self, input_path: Path, quiet_for: float) -> None:
        try:
            size = input_path.stat().st_size
            exists = True
        except OSError:
            size, exists = 0, False
        logger.warning(
            "No progress for %.0fs (input %s exists=%s size=%d)",
            quiet_for,
            input_path,
            exists,
            size,
        )

    def _finish(self, outcome: JobOutcome) -> JobOutcome:
        self.state = JobState.SUCCEEDED if isinstance(outcome, JobSucceeded) else JobState.FAILED
        return outcome
