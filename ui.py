import cv2
import numpy as np
import time
from config import config

# -------------------- Loading Screen UI --------------------
def create_loading_screen(width, height, step, progress):
    """Create loading screen with progress bar"""
    screen = np.zeros((height, width, 3), dtype=np.uint8)

    start_color = config.COLOR_LOADING_BG_START
    ratios = (1 - np.arange(height) / height) * 30
    for c in range(3):
        screen[:, :, c] = (start_color[c] + ratios.astype(np.int32))[:, None]

    # Title
    title, font = "CLONE RECORDER", cv2.FONT_HERSHEY_SIMPLEX
    (tw, th), _ = cv2.getTextSize(title, font, 2.0, 4)
    tx, ty = (width - tw) // 2, height // 3
    cv2.putText(screen, title, (tx + 3, ty + 3), font, 2.0, (0, 0, 0), 6, cv2.LINE_AA)
    cv2.putText(screen, title, (tx, ty), font, 2.0, config.COLOR_HUD_ACCENT, 4, cv2.LINE_AA)

    # Progress bar
    bw, bh, bx, by = 500, 30, (width - 500) // 2, height // 2 + 50
    cv2.rectangle(screen, (bx, by), (bx + bw, by + bh), config.COLOR_LOADING_BAR_BG, -1)
    cv2.rectangle(screen, (bx, by), (bx + bw, by + bh), (120, 120, 140), 2)

    fill = int(bw * (progress / 100))
    if fill > 0:
        cv2.rectangle(screen, (bx + 2, by + 2), (bx + fill, by + bh - 2), config.COLOR_HUD_MAIN, -1)

    for text, y, scale, thick, color in [
        (f"{int(progress)}%", by + bh + 35, 0.7, 2, (200, 200, 255)),
        (step, by - 25, 0.65, 1, (180, 220, 255)),
    ]:
        w = cv2.getTextSize(text, font, scale, thick)[0][0]
        cv2.putText(screen, text, ((width - w) // 2, y), font, scale, color, thick, cv2.LINE_AA)

    # Spinner
    cx, cy, rad = width // 2, height - 100, 20
    angle = (time.time() * 200) % 360
    for offset in range(0, 270, 30):
        a = (angle + offset) % 360
        alpha = 1.0 - (offset / 270)
        x1 = int(cx + rad * np.cos(np.radians(a)))
        y1 = int(cy + rad * np.sin(np.radians(a)))
        cv2.circle(screen, (x1, y1), 3, (int(255 * alpha), int(127 * alpha), 0), -1)

    return screen

# -------------------- HUD --------------------
def draw_hud(frame, fps, clone_count, tier=None, show_fps=True):
    """FPS and clone counter in the top-left corner"""
    lines = [f"Clones: {clone_count}"]
    if show_fps:
        lines.insert(0, f"{int(round(fps))} FPS")
    if tier:
        lines.append(f"Tier: {tier}")

    font = cv2.FONT_HERSHEY_SIMPLEX
    for i, text in enumerate(lines):
        y = 35 + i * 30
        cv2.putText(frame, text, (22, y + 2), font, 0.7, (0, 0, 0), 3, cv2.LINE_AA)
        cv2.putText(frame, text, (20, y), font, 0.7, config.COLOR_HUD_MAIN, 2, cv2.LINE_AA)
    return frame

def draw_gesture_progress(frame, gesture, progress):
    """Ring that fills while a gesture is being held"""
    if gesture is None or progress <= 0:
        return frame
    h, w = frame.shape[:2]
    center = (w - 70, h - 70)
    color = config.COLOR_SUCCESS if gesture == 'spawn' else config.COLOR_WARNING
    cv2.circle(frame, center, 40, (60, 60, 60), 4, cv2.LINE_AA)
    cv2.ellipse(frame, center, (40, 40), -90, 0, int(360 * progress), color, 4, cv2.LINE_AA)
    label = "SPAWN" if gesture == 'spawn' else "DISMISS"
    (tw, _), _ = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.45, 1)
    cv2.putText(frame, label, (center[0] - tw // 2, center[1] + 5), cv2.FONT_HERSHEY_SIMPLEX, 0.45, color, 1, cv2.LINE_AA)
    return frame

def draw_recording_indicator(frame, duration_text):
    h, w = frame.shape[:2]
    if int(time.time() * 2) % 2 == 0:
        cv2.circle(frame, (w - 150, 32), 10, config.COLOR_RECORDING, -1, cv2.LINE_AA)
    cv2.putText(frame, f"REC {duration_text}", (w - 130, 40), cv2.FONT_HERSHEY_SIMPLEX, 0.7, config.COLOR_TEXT, 2, cv2.LINE_AA)
    return frame

def draw_countdown(frame, seconds_left):
    """Big centered number before a recording starts"""
    if seconds_left is None or seconds_left <= 0:
        return frame
    h, w = frame.shape[:2]
    overlay = frame.copy()
    cv2.rectangle(overlay, (0, 0), (w, h), (0, 0, 0), -1)
    cv2.addWeighted(overlay, 0.4, frame, 0.6, 0, frame)

    text = str(seconds_left)
    font = cv2.FONT_HERSHEY_SIMPLEX
    (tw, th), _ = cv2.getTextSize(text, font, 6.0, 12)
    cv2.putText(frame, text, ((w - tw) // 2, (h + th) // 2), font, 6.0, config.COLOR_HUD_ACCENT, 12, cv2.LINE_AA)
    return frame

def draw_help_overlay(frame):
    """Draw help overlay with instructions"""
    h, w = frame.shape[:2]

    overlay = frame.copy()
    cv2.rectangle(overlay, (w//4, h//6), (3*w//4, 5*h//6), (0, 0, 0), -1)
    cv2.addWeighted(overlay, 0.7, frame, 0.3, 0, frame)

    cv2.putText(frame, "CLONE RECORDER - HELP", (w//4 + 50, h//6 + 50),
                cv2.FONT_HERSHEY_SIMPLEX, 1.0, config.COLOR_HUD_MAIN, 2, cv2.LINE_AA)

    instructions = [
        "GESTURES:",
        "1. Peace sign (hold) - spawn clones",
        "2. Closed fist (hold) - dismiss clones",
        "",
        "KEYBOARD SHORTCUTS:",
        "S - Spawn clones",
        "D - Dismiss clones",
        "C - Clear everything",
        "R - Start/stop recording",
        "M - Toggle segmentation",
        "H - Toggle this help",
        "Q/X - Quit",
    ]

    y_start = h//6 + 100
    for i, line in enumerate(instructions):
        y = y_start + i * 35
        color = (255, 255, 255) if line[:1].isdigit() else (200, 200, 200)
        if line.startswith(("GESTURES", "KEYBOARD")):
            color = config.COLOR_HUD_MAIN
        cv2.putText(frame, line, (w//4 + 70, y),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2, cv2.LINE_AA)

    return frame
