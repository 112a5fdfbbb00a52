import time
import cv2
import numpy as np
from config import config
from clones import CloneManager
from frame_buffer import FrameRingBuffer
from particles import ParticleSystem

# -------------------- Compositing helpers --------------------
def is_valid_frame(frame):
    return frame is not None and frame.ndim == 3 and frame.shape[0] > 0 and frame.shape[1] > 0

def alpha_paste(dst, fg, alpha, x, y):
    """
    Boundary-safe alpha blend of fg onto dst with its top-left corner at (x, y).
    dst: HxWx3 uint8, fg: hxwx3 uint8, alpha: hxw float in [0..1].
    """
    H, W = dst.shape[:2]
    h, w = fg.shape[:2]

    x1, y1 = max(0, x), max(0, y)
    x2, y2 = min(W, x + w), min(H, y + h)
    if x1 >= x2 or y1 >= y2:
        return dst

    sx1, sy1 = x1 - x, y1 - y
    sx2, sy2 = sx1 + (x2 - x1), sy1 + (y2 - y1)

    roi = dst[y1:y2, x1:x2].astype(np.float32)
    fg_crop = fg[sy1:sy2, sx1:sx2].astype(np.float32)
    a3 = np.clip(alpha[sy1:sy2, sx1:sx2], 0.0, 1.0)[:, :, None]

    dst[y1:y2, x1:x2] = (fg_crop * a3 + roi * (1.0 - a3)).astype(np.uint8)
    return dst

# -------------------- Pipeline --------------------
class CompositingPipeline:
    """
    Builds one output frame per tick: frame history, clone animation, smoke
    particles, delayed clones and finally the live feed on top.

    `source` is anything with read() -> (ok, frame). `segmenter`, when given,
    needs process_frame(frame) and apply_mask(image) -> BGRA image or None.
    """
    def __init__(self, source, width, height, clone_manager=None, particles=None,
                 frame_buffer=None, segmenter=None):
        self.source = source
        self.clone_manager = clone_manager if clone_manager is not None else CloneManager()
        self.particles = particles if particles is not None else ParticleSystem()
        self.frame_buffer = frame_buffer if frame_buffer is not None else FrameRingBuffer()
        self.segmenter = segmenter
        self.use_segmentation = config.SEGMENTATION_ENABLED and segmenter is not None
        # None lets performance tiers decide
        self.segmentation_override = None
        self.smoke_enabled = config.SMOKE_EFFECTS_ENABLED
        self.masked_foreground = config.LIVE_FOREGROUND_MASKED

        self.surface = None
        self.scratch = None
        self.width = 0
        self.height = 0
        self.resize(width, height)

        self.fps = 60.0
        self.frame_count = 0
        self.last_tick_time = time.perf_counter()

    def resize(self, width, height):
        """Reallocate the output surface and the off-surface mask buffer."""
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        self.surface = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self.surface[:] = config.BACKGROUND_COLOR
        self.scratch = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        self.clone_manager.set_bounds(self.width, self.height)
        print(f"🖼️ Canvas resized to {self.width}x{self.height}")

    # -------------------- Main tick --------------------
    def tick(self, delta_ms=None):
        now = time.perf_counter()
        if delta_ms is None:
            delta_ms = (now - self.last_tick_time) * 1000.0
        self.last_tick_time = now
        if delta_ms > 0:
            self.fps = 0.9 * self.fps + 0.1 * (1000.0 / delta_ms)

        ok, frame = self.source.read()
        live_ready = bool(ok) and is_valid_frame(frame)
        if live_ready:
            self.frame_buffer.push(frame)
            if self.use_segmentation:
                self._submit_to_segmenter(frame)

        self.clone_manager.update(delta_ms)
        for event in self.clone_manager.drain_events():
            if self.smoke_enabled:
                self.particles.emit(event.x, event.y, config.PARTICLES_PER_BURST, event.kind)
        self.particles.update(delta_ms)

        self.surface[:] = config.BACKGROUND_COLOR
        # Dismiss bursts outlive their clones
        self.particles.render(self.surface)

        if live_ready:
            if self.clone_manager.has_clones():
                self.draw_clones()
            self.draw_live(frame)

        self.frame_count += 1
        return self.surface

    # -------------------- Drawing --------------------
    def draw_clones(self):
        for clone in self.clone_manager.clones:
            delayed = self.frame_buffer.get(clone.delay)
            if delayed is None:
                continue
            self.draw_clone(clone, self._prepare_clone_source(delayed))

    def _prepare_clone_source(self, delayed):
        """Fill the scratch buffer with the delayed frame at surface size, masked when possible."""
        size = (self.width, self.height)
        masked = self._mask(delayed) if self.use_segmentation else None
        if masked is not None:
            if masked.shape[:2] != (self.height, self.width):
                masked = cv2.resize(masked, size, interpolation=cv2.INTER_LINEAR)
            self.scratch[:] = masked
            return self.scratch

        if delayed.shape[:2] != (self.height, self.width):
            delayed = cv2.resize(delayed, size, interpolation=cv2.INTER_LINEAR)
        self.scratch[:, :, :3] = delayed
        self.scratch[:, :, 3] = 255
        return self.scratch

    def draw_clone(self, clone, source):
        visuals = self.clone_manager.visuals(clone)
        if visuals.opacity <= 0 or visuals.clip_height <= 0:
            return

        cw = int(round(self.width * visuals.scale))
        ch = int(round(self.height * visuals.scale))
        if cw <= 0 or ch <= 0:
            return

        # Reveal window in clone-local rows
        top = int(round(ch * visuals.clip_top))
        bottom = min(ch, int(round(ch * (visuals.clip_top + visuals.clip_height))))
        if bottom <= top:
            return

        scaled = cv2.resize(source, (cw, ch), interpolation=cv2.INTER_LINEAR)
        window = scaled[top:bottom]
        alpha = window[:, :, 3].astype(np.float32) / 255.0 * visuals.opacity

        x = int(round(clone.x - cw / 2))
        y = int(round(clone.y - ch / 2)) + top
        alpha_paste(self.surface, window[:, :, :3], alpha, x, y)

    def draw_live(self, frame):
        """Live feed over the whole surface, always on top of the clones."""
        if frame.shape[:2] != (self.height, self.width):
            frame = cv2.resize(frame, (self.width, self.height), interpolation=cv2.INTER_LINEAR)

        if self.masked_foreground and self.use_segmentation:
            masked = self._mask(frame)
            if masked is not None:
                alpha = masked[:, :, 3].astype(np.float32) / 255.0
                alpha_paste(self.surface, masked[:, :, :3], alpha, 0, 0)
                return

        self.surface[:] = frame

    # -------------------- Segmentation boundary --------------------
    def _submit_to_segmenter(self, frame):
        try:
            self.segmenter.process_frame(frame)
        except Exception as e:
            print(f"⚠️ Segmentation submit failed: {e}")

    def _mask(self, image):
        try:
            return self.segmenter.apply_mask(image)
        except Exception as e:
            print(f"⚠️ Mask unavailable: {e}")
            return None

    # -------------------- Commands --------------------
    def spawn(self, count=None):
        return self.clone_manager.spawn_all((self.width / 2, self.height / 2), count)

    def dismiss(self):
        if not self.clone_manager.has_clones():
            print("👻 No clones to dismiss")
            return
        self.clone_manager.dismiss_all()

    def clear(self):
        """Drop all clone, particle and history state immediately."""
        self.clone_manager.clear()
        self.particles.clear()
        self.frame_buffer.clear()
        self.surface[:] = config.BACKGROUND_COLOR

    # -------------------- Runtime settings --------------------
    def set_max_clones(self, max_clones):
        self.clone_manager.set_max_clones(max_clones)

    def set_buffer_capacity(self, capacity):
        self.frame_buffer.set_capacity(capacity)

    def set_buffer_scale(self, scale):
        self.frame_buffer.set_scale(scale)

    def set_segmentation(self, enabled):
        self.use_segmentation = bool(enabled) and self.segmenter is not None
        if self.use_segmentation and hasattr(self.segmenter, "start"):
            self.segmenter.start()
        print(f"🧍 Clone segmentation {'enabled' if self.use_segmentation else 'disabled'}")

    def override_segmentation(self, enabled):
        """Pin segmentation on or off; performance tiers no longer change it."""
        self.segmentation_override = bool(enabled)
        self.set_segmentation(enabled)

    def set_smoke_effects(self, enabled):
        self.smoke_enabled = bool(enabled)
        if not self.smoke_enabled:
            self.particles.clear()

    def apply_settings(self, settings):
        """Apply a PerformanceSettings bundle without restarting."""
        self.set_max_clones(settings.max_clones)
        self.set_buffer_scale(settings.frame_buffer_scale)
        if self.segmentation_override is None:
            self.set_segmentation(settings.segmentation_enabled)
        else:
            self.set_segmentation(self.segmentation_override)
        self.set_smoke_effects(settings.smoke_effects_enabled)
        if self.segmenter is not None and hasattr(self.segmenter, "set_resolution"):
            self.segmenter.set_resolution(settings.segmentation_resolution)
