import cv2
import time
import sys
import signal
from argparse import ArgumentParser

try:
    import pyvirtualcam
    from pyvirtualcam import PixelFormat
except ImportError:
    pyvirtualcam = None
    PixelFormat = None

import state
from state import update_init_status, get_init_status
from camera import CameraThread
from clones import CloneManager
from frame_buffer import FrameRingBuffer
from gestures import GestureDetector
from particles import ParticleSystem
from performance import PerformanceManager
from recorder import VideoRecorder, format_duration
from renderer import CompositingPipeline
from segmentation import SegmentationWorker
import ui
from config import config

# -------------------- Argument Parsing --------------------
parser = ArgumentParser(description="Clone Recorder - delayed clones of yourself")
parser.add_argument('--camera', type=int, default=config.CAMERA_ID, help=f'Camera index (default: {config.CAMERA_ID})')
parser.add_argument('--output_mode', type=str, default='window', choices=['window', 'virtual', 'both'], help='Output mode: window, virtual, or both')
parser.add_argument('--no_mirror', action='store_true', help='Do not mirror the camera image')
parser.add_argument('--max_clones', type=int, default=0, help='Clone count override (0 = decided by measured performance)')
parser.add_argument('--buffer_capacity', type=int, default=config.FRAME_BUFFER_CAPACITY, help='Frames of history kept for delayed clones')
parser.add_argument('--segmentation', action='store_true', help='Person-only clones using segmentation')
parser.add_argument('--person_foreground', action='store_true', help='Draw only the person from the live feed so clones show around them')
parser.add_argument('--no_gestures', action='store_true', help='Disable hand gesture control (keyboard only)')
parser.add_argument('--record_fps', type=int, default=config.RECORD_FPS, help='Frame rate of saved recordings')
parser.add_argument('--start_fullscreen', action='store_true', help='Start in fullscreen mode')
args = parser.parse_args()

# -------------------- Signal Handler --------------------
def signal_handler(sig, frame):
    print("\n\n" + "="*60 + "\n🛑 Interruption received (Ctrl+C)\n🧹 Cleaning resources...")
    state.request_stop()

signal.signal(signal.SIGINT, signal_handler)

# -------------------- Initialization --------------------
update_init_status("Initializing...", 5)
camera_thread = CameraThread(args.camera, mirror=not args.no_mirror)
if not camera_thread.is_opened():
    print(f"❌ Could not open camera {args.camera}")
    sys.exit(1)
camera_thread.start()
width = camera_thread.width
height = camera_thread.height

config.LIVE_FOREGROUND_MASKED = args.person_foreground

segmenter = SegmentationWorker()

gesture_detector = None
if not args.no_gestures:
    gesture_detector = GestureDetector()
    gesture_detector.start()

update_init_status("Building compositor...", 70)
pipeline = CompositingPipeline(
    camera_thread,
    width,
    height,
    clone_manager=CloneManager(),
    particles=ParticleSystem(),
    frame_buffer=FrameRingBuffer(args.buffer_capacity),
    segmenter=segmenter,
)
if args.segmentation or args.person_foreground:
    pipeline.override_segmentation(True)
if args.max_clones > 0:
    pipeline.set_max_clones(args.max_clones)

performance = PerformanceManager()
recorder = VideoRecorder(fps=args.record_fps)

show_window = args.output_mode in ['window', 'both']
use_virtual_cam = args.output_mode in ['virtual', 'both']
show_help_overlay = False

update_init_status("Preparing display...", 95)

if show_window:
    cv2.namedWindow(config.WINDOW_NAME, cv2.WINDOW_NORMAL)
    if args.start_fullscreen or config.FULLSCREEN:
        cv2.setWindowProperty(config.WINDOW_NAME, cv2.WND_PROP_FULLSCREEN, cv2.WINDOW_FULLSCREEN)
    else:
        try:
            cv2.resizeWindow(config.WINDOW_NAME, width, height)
        except Exception:
            pass

    loading_start = time.time()
    while time.time() - loading_start < 1.5 and not camera_thread.has_frame():
        step, progress = get_init_status()
        cv2.imshow(config.WINDOW_NAME, ui.create_loading_screen(width, height, step, progress))
        if cv2.waitKey(30) & 0xFF == ord('q'):
            state.request_stop()
            break

update_init_status("Ready!", 100)

def handle_command(command):
    if command == 'spawn':
        count = args.max_clones if args.max_clones > 0 else None
        pipeline.spawn(count)
    elif command == 'dismiss':
        pipeline.dismiss()

# -------------------- Main loop --------------------
cam = None
target_fps = 60
frame_time = 1.0 / target_fps
last_frame_time = time.perf_counter()

try:
    if use_virtual_cam:
        if pyvirtualcam is None:
            print("⚠️ pyvirtualcam is not installed - virtual camera output disabled")
        else:
            cam = pyvirtualcam.Camera(width, height, target_fps, fmt=PixelFormat.BGR)
            print(f"Virtual cam: {cam.device}")

    while camera_thread.running and not state.stop_threads:
        current_time = time.perf_counter()
        delta_ms = (current_time - last_frame_time) * 1000.0
        last_frame_time = current_time

        if gesture_detector is not None:
            ok, live = camera_thread.read()
            if ok:
                gesture_detector.submit(live)
            handle_command(gesture_detector.poll())

        surface = pipeline.tick(delta_ms)

        settings_changed = performance.record_frame(delta_ms)
        if not settings_changed and performance.measure_complete:
            settings_changed = performance.monitor_runtime(pipeline.fps)
        if settings_changed:
            pipeline.apply_settings(performance.get_settings())
            # A command line clone count wins over the measured tier
            if args.max_clones > 0:
                pipeline.set_max_clones(args.max_clones)
            print(f"👥 Clone limit set to {pipeline.clone_manager.max_clones} ({performance.tier} tier)")

        # Recording captures the composite without HUD
        recorder.update(surface)

        if show_window:
            display = surface.copy()
            if config.SHOW_CONTROLS:
                display = ui.draw_hud(display, pipeline.fps, pipeline.clone_manager.count,
                                      performance.tier if performance.measure_complete else None, config.SHOW_FPS)
            if gesture_detector is not None:
                gesture, progress = gesture_detector.tracker.progress()
                display = ui.draw_gesture_progress(display, gesture, progress)
            if recorder.is_recording:
                display = ui.draw_recording_indicator(display, format_duration(recorder.duration_ms()))
            display = ui.draw_countdown(display, recorder.countdown_remaining())
            if show_help_overlay:
                display = ui.draw_help_overlay(display)

            cv2.imshow(config.WINDOW_NAME, display)
            key = cv2.waitKey(1) & 0xFF
            if key != 255:
                if key in (ord('s'), ord('S')):
                    handle_command('spawn')
                elif key in (ord('d'), ord('D')):
                    handle_command('dismiss')
                elif key in (ord('c'), ord('C')):
                    pipeline.clear()
                elif key in (ord('r'), ord('R')):
                    if recorder.is_recording or recorder.countdown_remaining() is not None:
                        recorder.stop()
                    else:
                        recorder.arm(tier=performance.tier)
                elif key in (ord('m'), ord('M')):
                    pipeline.override_segmentation(not pipeline.use_segmentation)
                elif key in (ord('h'), ord('H')):
                    show_help_overlay = not show_help_overlay
                elif key == ord('f'):
                    cv2.setWindowProperty(config.WINDOW_NAME, cv2.WND_PROP_FULLSCREEN, cv2.WINDOW_FULLSCREEN)
                elif key in (ord('x'), ord('q')):
                    break

        if cam:
            cam.send(surface)
            cam.sleep_until_next_frame()

        sleep_time = frame_time - (time.perf_counter() - current_time)
        if sleep_time > 0:
            time.sleep(sleep_time)

except KeyboardInterrupt:
    print("\n\n🛑 Interruption received - closing...")
except Exception as e:
    print(f"\n❌ Error during execution: {e}")
finally:
    state.request_stop()
    print("\n\n" + "="*60)
    print("\n🧹 Final cleanup...\n")
    recorder.stop()
    pipeline.clear()
    if gesture_detector is not None:
        gesture_detector.stop()
    segmenter.stop()
    camera_thread.release()
    if show_window:
        try:
            cv2.destroyAllWindows()
        except Exception:
            pass
    if cam:
        try:
            cam.close()
        except Exception:
            pass
    print("\n🏁 Application terminated\n")
