"""Tests for asset resolution."""

import pytest

from framecast.assets.resolver import AssetResolver, parse_flag
from framecast.models.media import DeviceClass


@pytest.fixture
def resolver(settings):
    return AssetResolver(settings)


class TestParseFlag:
    @pytest.mark.parametrize("value", ["true", "TRUE", " 1 ", "yes", "on", True])
    def test_truthy(self, value):
        assert parse_flag(value)

    @pytest.mark.parametrize("value", ["false", "0", "", "no", None, False, "maybe"])
    def test_falsy(self, value):
        assert not parse_flag(value)


class TestDeviceClass:
    def test_defaults_to_mobile(self, resolver):
        assert resolver.resolve_device_class() == DeviceClass.MOBILE

    def test_desktop_flag(self, resolver):
        assert resolver.resolve_device_class(is_desktop="true") == DeviceClass.DESKTOP

    def test_mobile_flag(self, resolver):
        assert resolver.resolve_device_class(is_mobile="true") == DeviceClass.MOBILE

    def test_desktop_wins_over_mobile(self, resolver):
        assert resolver.resolve_device_class("true", "true") == DeviceClass.DESKTOP

    def test_flag_ignored_when_not_honored(self, settings):
        settings.honor_device_flag = False
        resolver = AssetResolver(settings)
        assert resolver.resolve_device_class(is_desktop="true") == DeviceClass.MOBILE


class TestResolveFrame:
    def test_mobile(self, resolver, settings):
        assert resolver.resolve_frame(DeviceClass.MOBILE) == (
            settings.assets_root / "images/frame-mobile.png"
        )

    def test_desktop(self, resolver, settings):
        assert resolver.resolve_frame("desktop") == settings.assets_root / "images/frame-desktop.png"

    @pytest.mark.parametrize("device", [None, "", "tablet"])
    def test_unknown_falls_back_to_default(self, resolver, device):
        assert resolver.resolve_frame(device) == resolver.resolve_frame(DeviceClass.MOBILE)


class TestResolveAudio:
    @pytest.mark.parametrize("track_id", ["1", "2", "3", "4", "5"])
    def test_known_tracks(self, resolver, settings, track_id):
        assert resolver.resolve_audio(track_id) == (
            settings.assets_root / f"audio/track-{track_id}.wav"
        )

    @pytest.mark.parametrize("track_id", [None, "", "0", "6", "abc", "../../etc/passwd"])
    def test_unknown_falls_back_to_default(self, resolver, settings, track_id):
        assert resolver.resolve_audio(track_id) == settings.assets_root / "audio/track-1.wav"

    def test_strips_whitespace(self, resolver):
        assert resolver.resolve_audio(" 3 ") == resolver.resolve_audio("3")


class TestMissingAssets:
    def test_reports_absent_files(self, resolver):
        assert len(resolver.missing_assets()) == 7

    def test_present_files_not_reported(self, resolver, settings):
        frame = settings.assets_root / "images/frame-mobile.png"
        frame.parent.mkdir(parents=True)
        frame.write_bytes(b"png")
        assert frame not in resolver.missing_assets()
