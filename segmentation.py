import threading
import queue
import time
import cv2
import numpy as np
import mediapipe as mp
import state
from state import update_init_status
from config import config

class SegmentationWorker:
    """
    Person segmentation on a background thread.

    The render loop hands frames over with process_frame() and never waits:
    the queue holds one frame and a newer frame replaces a stale one. The
    latest mask is read back with apply_mask(), which returns None until the
    first mask exists.
    """
    def __init__(self, threshold=None, every_n_frames=None, resolution=None):
        self.threshold = config.SEGMENTATION_THRESHOLD if threshold is None else threshold
        self.every_n_frames = max(1, config.SEGMENTATION_EVERY_N_FRAMES if every_n_frames is None else every_n_frames)
        self.resolution = config.SEGMENTATION_RESOLUTION if resolution is None else resolution
        self.frames_q = queue.Queue(maxsize=1)
        self.mask_lock = threading.Lock()
        self.latest_mask = None
        self.enabled = True
        self.running = False
        self.thread = None
        self.frame_count = 0

    def start(self):
        if self.running:
            return
        update_init_status("Loading segmentation model...", 60)
        self.running = True
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()

    def stop(self):
        self.running = False
        if self.thread:
            self.thread.join(timeout=1.0)

    def _run(self):
        with mp.solutions.selfie_segmentation.SelfieSegmentation(model_selection=1) as segmenter:
            while self.running and not state.stop_threads:
                try:
                    frame = self.frames_q.get(timeout=0.1)
                except queue.Empty:
                    continue

                try:
                    small = self._downscale(frame)
                    results = segmenter.process(cv2.cvtColor(small, cv2.COLOR_BGR2RGB))
                    mask = results.segmentation_mask
                except Exception as e:
                    print(f"⚠️ Segmentation error: {e}")
                    mask = None

                if mask is not None:
                    self.set_mask(mask)
                time.sleep(0.001)

    def _downscale(self, frame):
        h, w = frame.shape[:2]
        if self.resolution and w > self.resolution:
            scale = self.resolution / float(w)
            return cv2.resize(frame, (self.resolution, max(1, int(h * scale))), interpolation=cv2.INTER_LINEAR)
        return frame

    def process_frame(self, frame):
        """Queue a live frame for segmentation without blocking, skipping frames for speed."""
        if not self.enabled or frame is None:
            return
        self.frame_count += 1
        if self.frame_count % self.every_n_frames != 0:
            return
        try:
            self.frames_q.put_nowait(frame)
        except queue.Full:
            try:
                _ = self.frames_q.get_nowait()
            except queue.Empty:
                pass
            try:
                self.frames_q.put_nowait(frame)
            except queue.Full:
                pass

    def set_mask(self, mask):
        with self.mask_lock:
            self.latest_mask = mask

    def get_mask(self):
        with self.mask_lock:
            return self.latest_mask

    def apply_mask(self, image):
        """Return image as BGRA with the background made transparent, or None when no mask is ready."""
        mask = self.get_mask()
        if mask is None or image is None:
            return None
        h, w = image.shape[:2]
        if mask.shape[:2] != (h, w):
            mask = cv2.resize(mask.astype(np.float32), (w, h), interpolation=cv2.INTER_LINEAR)
        alpha = np.where(mask > self.threshold, 255, 0).astype(np.uint8)
        masked = cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
        masked[:, :, 3] = alpha
        return masked

    def set_enabled(self, enabled):
        self.enabled = enabled
        print(f"🧍 Segmentation {'enabled' if enabled else 'disabled'}")

    def set_resolution(self, resolution):
        self.resolution = resolution

    def set_frame_skip(self, every_n_frames):
        self.every_n_frames = max(1, int(every_n_frames))
