import os
from dataclasses import dataclass

@dataclass
class Config:
    # Camera Settings
    CAMERA_ID: int = 0
    FRAME_WIDTH: int = 1280
    FRAME_HEIGHT: int = 720
    BUFFER_SIZE: int = 1
    MIRROR_CAMERA: bool = True
    CAMERA_WARMUP_FRAMES: int = 10

    # Clone Settings
    MAX_CLONES: int = 5
    CLONE_BASE_DELAY: int = 10        # Frames behind live (first clone)
    CLONE_STAGGER_MS: float = 300.0   # Time between clone transitions
    SPAWN_DURATION_MS: float = 1000.0
    DISMISS_DURATION_MS: float = 800.0
    CLONE_REST_OPACITY: float = 0.85  # Ghost look, live feed is always 1.0
    CLONE_REST_SCALE: float = 0.6     # Clones drawn smaller than the live feed
    SPAWN_OPACITY_RATE: float = 2.0   # Opacity reaches rest value at progress 1/rate
    POP_START: float = 0.8            # Progress where the scale pop begins
    POP_AMPLITUDE: float = 0.05

    # Placement Settings
    PLACEMENT_RADIUS: float = 150.0
    PLACEMENT_JITTER: float = 20.0    # +/- pixels on the radius
    PLACEMENT_MIN_DISTANCE: float = 80.0
    PLACEMENT_MAX_ITERATIONS: int = 10

    # Frame History Settings
    FRAME_BUFFER_CAPACITY: int = 30
    FRAME_BUFFER_SCALE: float = 1.0
    FRAME_BUFFER_MIN_SCALE: float = 0.25

    # Particle Settings
    MAX_PARTICLES: int = 200
    PARTICLES_PER_BURST: int = 20
    PARTICLE_EMIT_INTERVAL_MS: float = 20.0
    PARTICLE_MIN_SIZE: float = 20.0
    PARTICLE_MAX_SIZE: float = 50.0
    PARTICLE_MIN_LIFE: float = 0.5    # Seconds
    PARTICLE_MAX_LIFE: float = 1.3
    PARTICLE_DRAG: float = 0.98
    PARTICLE_DRIFT: float = 0.02
    PARTICLE_GROWTH: float = 0.5
    PARTICLE_ALPHA: float = 0.6
    REFERENCE_FRAME_MS: float = 1000.0 / 60.0
    SMOKE_EFFECTS_ENABLED: bool = True

    # Gesture Settings
    MIN_DETECTION_CONFIDENCE: float = 0.7
    MIN_TRACKING_CONFIDENCE: float = 0.7
    GESTURE_HOLD_MS: float = 500.0
    GESTURE_COOLDOWN_MS: float = 2000.0
    GESTURE_INPUT_WIDTH: int = 320
    MP_EVERY_N_FRAMES: int = 2

    # Segmentation Settings
    SEGMENTATION_ENABLED: bool = False
    SEGMENTATION_THRESHOLD: float = 0.7
    SEGMENTATION_RESOLUTION: int = 256
    SEGMENTATION_EVERY_N_FRAMES: int = 2
    LIVE_FOREGROUND_MASKED: bool = False

    # Performance Settings
    PERFORMANCE_SAMPLE_FRAMES: int = 100
    LOW_FPS_THRESHOLD: float = 20.0
    MEDIUM_FPS_THRESHOLD: float = 35.0
    RUNTIME_DOWNGRADE_FPS: float = 15.0

    # Recording Settings
    RECORD_FPS: int = 30
    RECORD_CODEC: str = 'mp4v'
    RECORD_COUNTDOWN: int = 3

    # UI Settings
    SHOW_FPS: bool = True
    SHOW_CONTROLS: bool = True
    FULLSCREEN: bool = False
    WINDOW_NAME: str = "Clone Recorder"

    # Paths
    RECORDINGS_DIR: str = os.path.join(os.path.dirname(__file__), 'recordings')

    # Colors (BGR)
    BACKGROUND_COLOR: tuple = (30, 15, 15)  # #0f0f1e
    SPAWN_SMOKE_COLOR: tuple = (255, 255, 255)
    DISMISS_SMOKE_COLOR: tuple = (200, 200, 200)
    COLOR_TEXT: tuple = (255, 255, 255)
    COLOR_WARNING: tuple = (0, 0, 255)
    COLOR_SUCCESS: tuple = (0, 255, 0)
    COLOR_LOADING_BG_START: tuple = (20, 10, 20)
    COLOR_LOADING_BAR_BG: tuple = (60, 60, 80)
    COLOR_HUD_MAIN: tuple = (100, 200, 255)
    COLOR_HUD_ACCENT: tuple = (255, 180, 100)
    COLOR_RECORDING: tuple = (40, 40, 230)

config = Config()
