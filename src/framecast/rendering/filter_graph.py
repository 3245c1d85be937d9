"""FFmpeg filter graph construction."""

from framecast.models.media import AudioMode, VideoProbe

# Input indices in the ffmpeg command: upload, frame image, audio track.
VIDEO_INPUT = 0
FRAME_INPUT = 1
AUDIO_INPUT = 2

_ROTATION_FILTERS = {
    90: "transpose=clock",
    180: "hflip,vflip",
    270: "transpose=cclock",
}


class FrameOverlayGraphBuilder:
    """Builds the frame-overlay and soundtrack filter graph."""

    def build_rotation_filter(self, rotation: int) -> str:
        """Filter chain that turns a rotated stream upright, or "" for none."""
        return _ROTATION_FILTERS.get(rotation, "")

    def build_video_filter(self, probe: VideoProbe) -> str:
        """Scale the frame to the display size and overlay it on the video.

        Aspect ratio preservation is disabled: the frame is authored per canvas and
        must cover the whole picture.
        """
        parts = [
            f"[{FRAME_INPUT}:v]scale={probe.width}:{probe.height}"
            f":force_original_aspect_ratio=disable[frame]"
        ]
        base = f"[{VIDEO_INPUT}:v]"
        rotation_filter = self.build_rotation_filter(probe.rotation)
        if rotation_filter:
            parts.append(f"{base}{rotation_filter}[base]")
            base = "[base]"
        parts.append(f"{base}[frame]overlay=x=0:y=0:format=rgb[outv]")
        return ";".join(parts)

    def build_audio_filter(
        self,
        mode: AudioMode,
        volume: float = 0.5,
        duration: float = 0.0,
        has_native_audio: bool = False,
    ) -> str:
        """Build the soundtrack chain ending in ``[outa]``.

        The audio input is looped indefinitely by the caller. ``replace`` attenuates
        it and relies on ``-shortest``; ``mix`` trims it to the video duration and
        adds it to the native audio without attenuation.
        """
        track = f"[{AUDIO_INPUT}:a]"
        if mode == AudioMode.REPLACE:
            return f"{track}volume={volume:.2f}[outa]"

        trim = ""
        if duration > 0:
            trim = f"atrim=duration={duration:.3f},asetpts=PTS-STARTPTS"
        if not has_native_audio:
            return f"{track}{trim or 'anull'}[outa]"
        return (
            f"{track}{trim or 'anull'}[bg];"
            f"[{VIDEO_INPUT}:a][bg]amix=inputs=2:duration=longest"
            f":dropout_transition=0:normalize=0[outa]"
        )

    def build_filter_graph(
        self,
        probe: VideoProbe,
        mode: AudioMode = AudioMode.REPLACE,
        volume: float = 0.5,
    ) -> str:
        """Full ``-filter_complex`` value producing ``[outv]`` and ``[outa]``."""
        video = self.build_video_filter(probe)
        audio = self.build_audio_filter(
            mode,
            volume=volume,
            duration=probe.duration_seconds,
            has_native_audio=probe.has_audio,
        )
        return f"{video};{audio}"
