import threading
import queue
import time
import cv2
import mediapipe as mp
import state
from state import update_init_status
from config import config

# MediaPipe hand landmark indices: (tip, joint below the tip)
FINGERS = {
    'thumb': (4, 3),
    'index': (8, 6),
    'middle': (12, 10),
    'ring': (16, 14),
    'pinky': (20, 18),
}

def finger_states(landmarks):
    """Which fingers are extended. y grows downward, so an extended finger has tip.y < joint.y."""
    states = {}
    tip, base = FINGERS['thumb']
    states['thumb'] = landmarks[tip].x > landmarks[base].x
    for name in ('index', 'middle', 'ring', 'pinky'):
        tip, base = FINGERS[name]
        states[name] = landmarks[tip].y < landmarks[base].y
    return states

def classify_gesture(landmarks):
    """Peace sign spawns clones, closed fist dismisses them."""
    f = finger_states(landmarks)
    if f['index'] and f['middle'] and not f['ring'] and not f['pinky']:
        return 'spawn'
    if not any(f.values()):
        return 'dismiss'
    return None

class GestureTracker:
    """Turns per-frame classifications into commands with a hold time and a cooldown"""
    def __init__(self, hold_ms=None, cooldown_ms=None, clock=None):
        self.hold_ms = config.GESTURE_HOLD_MS if hold_ms is None else hold_ms
        self.cooldown_ms = config.GESTURE_COOLDOWN_MS if cooldown_ms is None else cooldown_ms
        self.clock = clock if clock is not None else (lambda: time.monotonic() * 1000.0)
        self.last_trigger_time = None
        self.current_type = None
        self.current_start = None
        # Written by the detector thread, read by the render loop
        self.lock = threading.Lock()

    def update(self, gesture_type):
        """Feed the gesture seen this frame (or None). Returns the gesture once it has been held."""
        now = self.clock()
        with self.lock:
            if gesture_type is None:
                self.current_type = None
                self.current_start = None
                return None

            if self.last_trigger_time is not None and now - self.last_trigger_time < self.cooldown_ms:
                return None

            if gesture_type != self.current_type:
                self.current_type = gesture_type
                self.current_start = now
                return None

            if now - self.current_start >= self.hold_ms:
                self.last_trigger_time = now
                self.current_type = None
                self.current_start = None
                return gesture_type
            return None

    def reset(self):
        with self.lock:
            self.current_type = None
            self.current_start = None

    def progress(self):
        """(gesture, 0..1 hold progress) for on-screen feedback."""
        with self.lock:
            gesture, start = self.current_type, self.current_start
        if gesture is None:
            return None, 0.0
        if self.hold_ms <= 0:
            return gesture, 1.0
        elapsed = max(0.0, self.clock() - start)
        return gesture, min(elapsed / self.hold_ms, 1.0)

class GestureDetector:
    """MediaPipe Hands on its own thread; the render loop submits frames and polls commands"""
    def __init__(self, tracker=None, every_n_frames=None):
        self.tracker = tracker if tracker is not None else GestureTracker()
        self.every_n_frames = max(1, config.MP_EVERY_N_FRAMES if every_n_frames is None else every_n_frames)
        self.frames_q = queue.Queue(maxsize=1)
        self.commands_q = queue.Queue()
        self.running = False
        self.thread = None
        self.frame_count = 0

    def start(self):
        if self.running:
            return
        update_init_status("Starting gesture detection...", 50)
        self.running = True
        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.start()

    def stop(self):
        self.running = False
        if self.thread:
            self.thread.join(timeout=1.0)

    def _run(self):
        with mp.solutions.hands.Hands(
            max_num_hands=1,
            model_complexity=1,
            min_detection_confidence=config.MIN_DETECTION_CONFIDENCE,
            min_tracking_confidence=config.MIN_TRACKING_CONFIDENCE,
        ) as hands:
            while self.running and not state.stop_threads:
                try:
                    frame = self.frames_q.get(timeout=0.1)
                except queue.Empty:
                    continue

                try:
                    results = hands.process(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
                except Exception as e:
                    print(f"⚠️ Gesture detection error: {e}")
                    continue

                gesture = None
                if results.multi_hand_landmarks:
                    gesture = classify_gesture(results.multi_hand_landmarks[0].landmark)
                self.handle_gesture(gesture)

    def handle_gesture(self, gesture):
        triggered = self.tracker.update(gesture)
        if triggered:
            print(f"✋ Gesture detected: {triggered}")
            self.commands_q.put(triggered)

    def submit(self, frame):
        """Hand a live frame to the detector without blocking; stale frames are replaced."""
        if frame is None:
            return
        self.frame_count += 1
        if self.frame_count % self.every_n_frames != 0:
            return
        h, w = frame.shape[:2]
        if w > config.GESTURE_INPUT_WIDTH:
            scale = config.GESTURE_INPUT_WIDTH / float(w)
            frame = cv2.resize(frame, (config.GESTURE_INPUT_WIDTH, max(1, int(h * scale))), interpolation=cv2.INTER_AREA)
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

    def poll(self):
        """Next pending command ('spawn' or 'dismiss'), or None."""
        try:
            return self.commands_q.get_nowait()
        except queue.Empty:
            return None
