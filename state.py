import threading

# Shared state for the loading screen while camera and models start up
init_status = {"step": "Starting...", "progress": 0}
init_lock = threading.Lock()

# Global flag read by the capture, gesture and segmentation threads
stop_threads = False

def update_init_status(step, progress):
    """Update the initialization status safely across threads."""
    global init_status
    with init_lock:
        init_status = {"step": step, "progress": progress}

def get_init_status():
    with init_lock:
        return init_status["step"], init_status["progress"]

def request_stop():
    global stop_threads
    stop_threads = True
