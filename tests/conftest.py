import random
import numpy as np
import pytest

class FakeSource:
    """Stands in for CameraThread: read() -> (ok, frame)"""
    def __init__(self, frame=None):
        self.frame = frame

    def read(self):
        if self.frame is None:
            return False, None
        return True, self.frame.copy()

class FakeSegmenter:
    def __init__(self, alpha=None, fail=False):
        self.alpha = alpha
        self.fail = fail
        self.submitted = 0
        self.started = False
        self.resolution = None

    def start(self):
        self.started = True

    def set_resolution(self, resolution):
        self.resolution = resolution

    def process_frame(self, frame):
        if self.fail:
            raise RuntimeError("segmenter crashed")
        self.submitted += 1

    def apply_mask(self, image):
        if self.fail:
            raise RuntimeError("segmenter crashed")
        if self.alpha is None:
            return None
        h, w = image.shape[:2]
        masked = np.zeros((h, w, 4), dtype=np.uint8)
        masked[:, :, :3] = image
        masked[:, :, 3] = self.alpha
        return masked

def make_frame(value, width=8, height=6):
    return np.full((height, width, 3), value, dtype=np.uint8)

@pytest.fixture
def rng():
    return random.Random(1234)

@pytest.fixture
def frame_factory():
    return make_frame

@pytest.fixture
def source_cls():
    return FakeSource

@pytest.fixture
def segmenter_cls():
    return FakeSegmenter
