import cv2
import numpy as np
from collections import deque
from config import config

class FrameRingBuffer:
    """Rolling history of live frames so a clone can show the user N frames ago"""
    def __init__(self, capacity=None, scale=None):
        capacity = config.FRAME_BUFFER_CAPACITY if capacity is None else capacity
        self._capacity = max(1, int(capacity))
        self._scale = 1.0
        self.frames = deque(maxlen=self._capacity)
        self.set_scale(config.FRAME_BUFFER_SCALE if scale is None else scale)

    @property
    def capacity(self):
        return self._capacity

    @property
    def scale(self):
        return self._scale

    def __len__(self):
        return len(self.frames)

    def push(self, frame):
        """Store a copy of frame as the newest snapshot, evicting the oldest when full."""
        if frame is None or frame.size == 0:
            return
        if self._scale < 1.0:
            h, w = frame.shape[:2]
            size = (max(1, int(w * self._scale)), max(1, int(h * self._scale)))
            snapshot = cv2.resize(frame, size, interpolation=cv2.INTER_AREA)
        else:
            snapshot = frame.copy()
        # deque(maxlen) drops from the left on append
        self.frames.append(np.ascontiguousarray(snapshot))

    def get(self, delay):
        """
        Return the snapshot `delay` frames behind the newest one.

        get(0) is the newest frame. A delay at or past the capacity is clamped
        to the oldest slot. While the buffer is still filling, a delay it has
        no history for returns None.
        """
        if not self.frames:
            return None
        delay = max(0, int(delay))
        if delay >= self._capacity:
            delay = self._capacity - 1
        if delay >= len(self.frames):
            return None
        return self.frames[-1 - delay]

    def set_capacity(self, capacity):
        capacity = max(1, int(capacity))
        if capacity == self._capacity:
            return
        self._capacity = capacity
        # Keeps the newest `capacity` snapshots
        self.frames = deque(self.frames, maxlen=capacity)

    def set_scale(self, scale):
        scale = max(config.FRAME_BUFFER_MIN_SCALE, min(1.0, float(scale)))
        if scale == self._scale:
            return
        # Existing snapshots are resampled to the new scale
        ratio = scale / self._scale
        interpolation = cv2.INTER_AREA if ratio < 1.0 else cv2.INTER_LINEAR
        resized = deque(maxlen=self._capacity)
        for snapshot in self.frames:
            h, w = snapshot.shape[:2]
            size = (max(1, int(round(w * ratio))), max(1, int(round(h * ratio))))
            resized.append(cv2.resize(snapshot, size, interpolation=interpolation))
        self.frames = resized
        self._scale = scale
        print(f"🎞️ Frame buffer scale set to {self._scale:.2f}")

    def clear(self):
        self.frames.clear()
