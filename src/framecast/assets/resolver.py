"""Maps client choices to deployment-owned frame and audio assets."""

import logging
from pathlib import Path

from framecast.config import Settings
from framecast.models.media import DeviceClass

logger = logging.getLogger(__name__)

_TRUTHY = {"true", "1", "yes", "on"}


def parse_flag(value: str | bool | None) -> bool:
    """Interpret a boolean-ish form value."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY


class AssetResolver:
    """Pure lookup from discrete client choices to asset paths.

    Never raises: unknown device classes and track ids degrade to the configured
    defaults so the pipeline keeps working when clients send unexpected values.
    """

    def __init__(self, settings: Settings):
        self.root = settings.assets_root
        self.frame_assets = settings.frame_assets
        self.audio_tracks = settings.audio_tracks
        self.default_audio_id = settings.default_audio_id
        self.default_device_class = settings.default_device_class
        self.honor_device_flag = settings.honor_device_flag

    def resolve_device_class(
        self, is_desktop: str | bool | None = None, is_mobile: str | bool | None = None
    ) -> DeviceClass:
        """Pick the device class from the request's isDesktop/isMobile fields."""
        if not self.honor_device_flag:
            return self.default_device_class
        if parse_flag(is_desktop):
            return DeviceClass.DESKTOP
        if parse_flag(is_mobile):
            return DeviceClass.MOBILE
        return self.default_device_class

    def resolve_frame(self, device_class: DeviceClass | str | None) -> Path:
        """Frame overlay image for a device class."""
        key = str(device_class) if device_class else ""
        if key not in self.frame_assets:
            key = str(self.default_device_class)
        return self.root / self.frame_assets[key]

    def resolve_audio(self, track_id: str | None) -> Path:
        """Audio track for an id; unknown ids fall back to the default track."""
        key = (track_id or "").strip()
        if key not in self.audio_tracks:
            if key:
                logger.info("Unknown audio id %r, using default track %s", key, self.default_audio_id)
            key = self.default_audio_id
        return self.root / self.audio_tracks[key]

    def missing_assets(self) -> list[Path]:
        """Configured asset files that are not present on disk."""
        paths = [self.root / rel for rel in self.frame_assets.values()]
        paths += [self.root / rel for rel in self.audio_tracks.values()]
        return [p for p in dict.fromkeys(paths) if not p.is_file()]
