"""Hypothesis strategies for property-based testing."""

from hypothesis import strategies as st

from framecast.models.media import VideoProbe
from tests.conftest import probe_payload

NON_VIDEO_EXTENSIONS = ["txt", "jpg", "png", "gif", "mp3", "wav", "pdf", "exe", "zip", "html"]


@st.composite
def generate_probe_payload(draw):
    """Random ffprobe JSON with an optional rotation from either source.

    Returns the payload with the stored (pre-rotation) width, height and the
    expected clockwise rotation.
    """
    width = draw(st.integers(min_value=2, max_value=4096))
    height = draw(st.integers(min_value=2, max_value=4096))
    turns = draw(st.integers(min_value=-4, max_value=4))
    source = draw(st.sampled_from(["none", "tag", "matrix"]))
    if source == "tag":
        payload = probe_payload(width, height, rotate_tag=str(turns * 90))
        expected = turns * 90 % 360
    elif source == "matrix":
        payload = probe_payload(width, height, matrix_rotation=float(turns * 90))
        expected = -turns * 90 % 360
    else:
        payload = probe_payload(width, height)
        expected = 0
    return payload, width, height, expected


@st.composite
def generate_video_probe(draw):
    """Random valid VideoProbe."""
    return VideoProbe(
        width=draw(st.integers(min_value=2, max_value=4096)),
        height=draw(st.integers(min_value=2, max_value=4096)),
        rotation=draw(st.sampled_from([0, 90, 180, 270])),
        duration_seconds=round(draw(st.floats(min_value=0.0, max_value=600.0)), 3),
        byte_size=draw(st.integers(min_value=0, max_value=10**9)),
        has_audio=draw(st.booleans()),
    )


status_lines = st.builds(
    lambda h, m, s: f"frame=  10 fps=25 q=28.0 size=256kB time={h:02d}:{m:02d}:{s:05.2f} speed=1x",
    st.integers(min_value=0, max_value=2),
    st.integers(min_value=0, max_value=59),
    st.floats(min_value=0.0, max_value=59.99).map(lambda x: round(x, 2)),
)
