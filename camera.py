import cv2
import threading
import time
import state
from state import update_init_status
from config import config

class CameraThread:
    """Dedicated thread for camera capture so the render loop never blocks on the device"""
    def __init__(self, camera_id=None, mirror=None):
        cam_id = camera_id if camera_id is not None else config.CAMERA_ID
        self.mirror = config.MIRROR_CAMERA if mirror is None else mirror

        update_init_status("Opening camera...", 10)
        self.cap = cv2.VideoCapture(cam_id)

        update_init_status("Configuring camera...", 15)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, config.FRAME_WIDTH)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, config.FRAME_HEIGHT)
        # Reduce buffer to get latest frames
        self.cap.set(cv2.CAP_PROP_BUFFERSIZE, config.BUFFER_SIZE)

        try:
            self.cap.set(cv2.CAP_PROP_AUTO_EXPOSURE, 1)
            self.cap.set(cv2.CAP_PROP_AUTOFOCUS, 1)
        except Exception:
            # Some cameras may not support all settings
            pass

        self.frame = None
        self.lock = threading.Lock()
        self.running = False
        self.thread = None

        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or config.FRAME_WIDTH
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or config.FRAME_HEIGHT

        update_init_status("Camera ready", 20)

    def is_opened(self):
        return self.cap is not None and self.cap.isOpened()

    def start(self):
        if self.running:
            return
        self.running = True
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()
        update_init_status("Warming up camera...", 25)

    def _run(self):
        frame_count = 0
        while self.running and not state.stop_threads:
            ret, frame = self.cap.read()
            if ret and frame is not None:
                # Skip first few frames to allow auto exposure to settle
                frame_count += 1
                if frame_count > config.CAMERA_WARMUP_FRAMES:
                    if self.mirror:
                        frame = cv2.flip(frame, 1)
                    with self.lock:
                        self.frame = frame
            time.sleep(0.001)

    def has_frame(self):
        """True once the camera has produced a frame with usable dimensions."""
        with self.lock:
            return self.frame is not None and self.frame.shape[0] > 0 and self.frame.shape[1] > 0

    def read(self):
        with self.lock:
            return self.frame is not None, self.frame.copy() if self.frame is not None else None

    def release(self):
        self.running = False
        if self.thread:
            self.thread.join(timeout=1.0)
        self.cap.release()
