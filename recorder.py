import os
import time
import math
import cv2
from datetime import datetime
from config import config

# Target bitrates (bits per second) per tier and frame rate, reported with each recording
BITRATE_TABLE = {
    'low': {15: 1500000, 30: 2500000},
    'medium': {30: 4000000, 60: 6000000},
    'high': {30: 6000000, 60: 8000000},
}

def get_adaptive_bitrate(tier, fps):
    tier_table = BITRATE_TABLE.get(tier, BITRATE_TABLE['medium'])
    available = sorted(tier_table)
    selected = available[0]
    for option in available:
        if fps >= option:
            selected = option
    return tier_table[selected]

def format_duration(ms):
    total_seconds = int(ms // 1000)
    return f"{total_seconds // 60:02d}:{total_seconds % 60:02d}"

class VideoRecorder:
    """Writes the rendered surface to disk; the pipeline knows nothing about recording"""
    def __init__(self, output_dir=None, fps=None, codec=None, clock=None):
        self.output_dir = config.RECORDINGS_DIR if output_dir is None else output_dir
        self.fps = config.RECORD_FPS if fps is None else fps
        self.codec = config.RECORD_CODEC if codec is None else codec
        self.clock = clock if clock is not None else time.monotonic
        self.writer = None
        self.output_path = None
        self.is_recording = False
        self.start_time = None
        self.last_write_time = None
        self.countdown_end = None
        self.tier = 'high'

    def arm(self, countdown_seconds=None, tier='high'):
        """Start recording after a countdown; update() performs the actual start."""
        if self.is_recording or self.countdown_end is not None:
            return
        countdown = config.RECORD_COUNTDOWN if countdown_seconds is None else countdown_seconds
        self.tier = tier
        self.countdown_end = self.clock() + countdown

    def countdown_remaining(self):
        """Whole seconds left on the countdown, or None when no countdown is running."""
        if self.countdown_end is None:
            return None
        return max(0, math.ceil(self.countdown_end - self.clock()))

    def start(self, width, height):
        if self.is_recording:
            print("⚠️ Already recording")
            return False
        os.makedirs(self.output_dir, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        self.output_path = os.path.join(self.output_dir, f"clone-recording-{stamp}.mp4")
        fourcc = cv2.VideoWriter_fourcc(*self.codec)
        self.writer = cv2.VideoWriter(self.output_path, fourcc, self.fps, (width, height))
        if not self.writer.isOpened():
            print(f"❌ Failed to open VideoWriter: {self.output_path}")
            self.writer = None
            return False

        bitrate = get_adaptive_bitrate(self.tier, self.fps)
        print(f"🔴 Recording: {self.fps} FPS @ {bitrate / 1000000:.1f} Mbps ({self.tier} tier) -> {self.output_path}")
        self.is_recording = True
        self.start_time = self.clock()
        self.last_write_time = None
        return True

    def update(self, surface):
        """Call once per rendered frame with the output surface."""
        if self.countdown_end is not None and self.clock() >= self.countdown_end:
            self.countdown_end = None
            h, w = surface.shape[:2]
            self.start(w, h)

        if not self.is_recording:
            return
        # Write at the requested frame rate, not the render rate
        now = self.clock()
        if self.last_write_time is not None and now - self.last_write_time < 1.0 / self.fps:
            return
        self.last_write_time = now
        self.writer.write(surface)

    def stop(self):
        self.countdown_end = None
        if not self.is_recording:
            return None
        self.writer.release()
        self.writer = None
        self.is_recording = False
        print(f"⏹️ Recording complete: {format_duration(self.duration_ms())} -> {self.output_path}")
        return self.output_path

    def duration_ms(self):
        if self.start_time is None:
            return 0
        return (self.clock() - self.start_time) * 1000.0
