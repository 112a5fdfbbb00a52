import pytest
from recorder import VideoRecorder, format_duration, get_adaptive_bitrate

class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

@pytest.mark.parametrize("ms, text", [
    (0, "00:00"),
    (999, "00:00"),
    (65000, "01:05"),
    (3599000, "59:59"),
])
def test_format_duration(ms, text):
    assert format_duration(ms) == text

@pytest.mark.parametrize("tier, fps, bitrate", [
    ('low', 15, 1500000),
    ('low', 30, 2500000),
    ('medium', 20, 4000000),
    ('high', 60, 8000000),
    ('unknown', 30, 4000000),
])
def test_adaptive_bitrate(tier, fps, bitrate):
    assert get_adaptive_bitrate(tier, fps) == bitrate

def test_countdown(tmp_path):
    clock = FakeClock()
    recorder = VideoRecorder(output_dir=str(tmp_path), clock=clock)
    assert recorder.countdown_remaining() is None
    recorder.arm(3)
    assert recorder.countdown_remaining() == 3
    clock.now = 1.2
    assert recorder.countdown_remaining() == 2
    recorder.stop()
    assert recorder.countdown_remaining() is None
    assert not recorder.is_recording

def test_stop_without_recording():
    recorder = VideoRecorder()
    assert recorder.stop() is None
    assert recorder.duration_ms() == 0
