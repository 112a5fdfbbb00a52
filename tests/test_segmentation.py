import numpy as np
import pytest

pytest.importorskip("mediapipe")

from segmentation import SegmentationWorker

def image():
    return np.full((4, 4, 3), 120, dtype=np.uint8)

def test_no_mask_yet():
    assert SegmentationWorker().apply_mask(image()) is None

def test_mask_makes_background_transparent():
    worker = SegmentationWorker(threshold=0.5)
    mask = np.zeros((4, 4), dtype=np.float32)
    mask[:, :2] = 1.0
    worker.set_mask(mask)
    masked = worker.apply_mask(image())
    assert masked.shape == (4, 4, 4)
    assert (masked[:, :2, 3] == 255).all()
    assert (masked[:, 2:, 3] == 0).all()
    assert (masked[:, :, :3] == 120).all()

def test_mask_is_scaled_to_the_image():
    worker = SegmentationWorker(threshold=0.5)
    worker.set_mask(np.ones((2, 2), dtype=np.float32))
    masked = worker.apply_mask(np.zeros((8, 6, 3), dtype=np.uint8))
    assert masked.shape == (8, 6, 4)
    assert (masked[:, :, 3] == 255).all()

def test_process_frame_keeps_only_the_latest():
    worker = SegmentationWorker(every_n_frames=1)
    first, second = image(), image() + 1
    worker.process_frame(first)
    worker.process_frame(second)
    assert worker.frames_q.qsize() == 1
    assert worker.frames_q.get_nowait() is second

def test_frame_skip_and_disable():
    worker = SegmentationWorker(every_n_frames=2)
    worker.process_frame(image())
    assert worker.frames_q.empty()
    worker.process_frame(image())
    assert worker.frames_q.qsize() == 1

    worker = SegmentationWorker(every_n_frames=1)
    worker.set_enabled(False)
    worker.process_frame(image())
    assert worker.frames_q.empty()
