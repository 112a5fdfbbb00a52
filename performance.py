from dataclasses import dataclass, replace
from config import config

@dataclass
class PerformanceSettings:
    max_clones: int = 7
    segmentation_enabled: bool = True
    segmentation_resolution: int = 256
    smoke_effects_enabled: bool = True
    frame_buffer_scale: float = 1.0

TIER_SETTINGS = {
    'low': PerformanceSettings(
        max_clones=1,
        segmentation_enabled=True,
        segmentation_resolution=128,
        smoke_effects_enabled=False,
        frame_buffer_scale=0.5,
    ),
    'medium': PerformanceSettings(
        max_clones=3,
        segmentation_enabled=True,
        segmentation_resolution=144,
        smoke_effects_enabled=True,
        frame_buffer_scale=0.75,
    ),
    'high': PerformanceSettings(),
}

class PerformanceManager:
    """Measures the frame rate over the first frames and picks a quality tier"""
    def __init__(self, sample_frames=None):
        self.sample_frames = config.PERFORMANCE_SAMPLE_FRAMES if sample_frames is None else sample_frames
        self.samples = []
        self.measured_fps = 60.0
        self.tier = 'high'
        self.settings = replace(TIER_SETTINGS['high'])
        self.measure_complete = False

    def record_frame(self, delta_ms):
        """Feed one frame time. Returns True on the frame that completes the measurement."""
        if self.measure_complete:
            return False
        if delta_ms > 0:
            self.samples.append(1000.0 / delta_ms)
        if len(self.samples) < self.sample_frames:
            return False

        self.measured_fps = sum(self.samples) / len(self.samples)
        self.determine_tier(self.measured_fps)
        self.measure_complete = True
        print(f"📊 Performance: {self.measured_fps:.1f} FPS - Tier: {self.tier}")
        return True

    def determine_tier(self, fps):
        if fps < config.LOW_FPS_THRESHOLD:
            self.apply_tier('low')
        elif fps < config.MEDIUM_FPS_THRESHOLD:
            self.apply_tier('medium')
        else:
            self.apply_tier('high')
        return self.tier

    def apply_tier(self, tier):
        self.tier = tier
        self.settings = replace(TIER_SETTINGS[tier])
        if tier == 'low':
            print("⚠️ Low performance detected - optimizations applied")

    def monitor_runtime(self, current_fps):
        """Drop to the low tier if the frame rate collapses. Returns True when settings changed."""
        if current_fps < config.RUNTIME_DOWNGRADE_FPS and self.tier != 'low':
            print(f"⚠️ FPS dropped to {current_fps:.1f} - downgrading settings")
            self.apply_tier('low')
            return True
        return False

    def get_settings(self):
        return replace(self.settings)
