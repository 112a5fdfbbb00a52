import math
from dataclasses import dataclass
from enum import Enum
from config import config
import placement

# Absorbs float drift from summing many small progress steps
PROGRESS_EPSILON = 1e-9

class CloneState(Enum):
    SPAWNING = "spawning"
    ACTIVE = "active"
    DISMISSING = "dismissing"

@dataclass
class Clone:
    id: int
    x: float
    y: float
    delay: int
    state: CloneState = CloneState.SPAWNING
    progress: float = 0.0
    stagger_remaining: float = 0.0
    # Set once the stagger for the current transition has elapsed
    started: bool = False

@dataclass
class CloneVisuals:
    opacity: float
    scale: float
    clip_top: float      # Fraction of the clone height where the visible window starts
    clip_height: float   # Fraction of the clone height that is visible

@dataclass
class TransitionEvent:
    x: float
    y: float
    kind: str  # "spawn" or "dismiss"

class CloneManager:
    """Owns the clone batch and drives every clone through spawn, active and dismiss"""
    def __init__(self, max_clones=None, base_delay=None, stagger_ms=None,
                 spawn_duration_ms=None, dismiss_duration_ms=None, bounds=None, rng=None):
        self.max_clones = max(1, int(config.MAX_CLONES if max_clones is None else max_clones))
        self.base_delay = config.CLONE_BASE_DELAY if base_delay is None else base_delay
        self.stagger_ms = config.CLONE_STAGGER_MS if stagger_ms is None else stagger_ms
        self.spawn_duration_ms = config.SPAWN_DURATION_MS if spawn_duration_ms is None else spawn_duration_ms
        self.dismiss_duration_ms = config.DISMISS_DURATION_MS if dismiss_duration_ms is None else dismiss_duration_ms
        self.bounds = bounds
        self.rng = rng
        self.clones = []
        self.events = []

    # -------------------- Commands --------------------
    def spawn_all(self, center, count=None):
        """Replace the current batch with `count` clones placed around center."""
        clone_count = self.max_clones if count is None else int(count)
        if clone_count <= 0:
            return []
        clone_count = min(clone_count, self.max_clones)

        center = self._clamp_to_bounds(center)
        positions = placement.place(center, clone_count, rng=self.rng)

        self.clones = [
            Clone(
                id=i,
                x=x,
                y=y,
                delay=self.base_delay + i,
                stagger_remaining=i * self.stagger_ms,
            )
            for i, (x, y) in enumerate(positions)
        ]

        print(f"👥 Spawned {clone_count} clones")
        return self.clones

    def dismiss_all(self):
        """Start the staggered dismiss for every clone that is not already leaving."""
        # Clones still waiting for their spawn turn were never shown
        self.clones = [c for c in self.clones if c.state != CloneState.SPAWNING or c.started]
        leaving = [c for c in self.clones if c.state != CloneState.DISMISSING]
        if not leaving:
            return

        for index, clone in enumerate(leaving):
            clone.state = CloneState.DISMISSING
            clone.progress = 0.0
            clone.stagger_remaining = index * self.stagger_ms
            clone.started = False

        print(f"💨 Dismissing {len(leaving)} clones")

    def clear(self):
        self.clones = []
        self.events = []

    # -------------------- Animation --------------------
    def update(self, delta_ms):
        """Advance every clone by delta_ms and drop the ones that finished dismissing."""
        if delta_ms < 0:
            delta_ms = 0

        kept = []
        for clone in self.clones:
            if clone.state == CloneState.ACTIVE:
                kept.append(clone)
                continue

            elapsed = delta_ms
            if clone.stagger_remaining > 0:
                clone.stagger_remaining -= elapsed
                if clone.stagger_remaining > 0:
                    kept.append(clone)
                    continue
                # Time left over after the stagger counts toward the transition
                elapsed = -clone.stagger_remaining
                clone.stagger_remaining = 0.0

            if not clone.started:
                clone.started = True
                kind = "spawn" if clone.state == CloneState.SPAWNING else "dismiss"
                self.events.append(TransitionEvent(clone.x, clone.y, kind))

            duration = self.spawn_duration_ms if clone.state == CloneState.SPAWNING else self.dismiss_duration_ms
            if duration <= 0:
                clone.progress = 1.0
            else:
                clone.progress = min(1.0, clone.progress + elapsed / duration)

            if clone.progress >= 1.0 - PROGRESS_EPSILON:
                if clone.state == CloneState.DISMISSING:
                    continue
                clone.state = CloneState.ACTIVE
                clone.progress = 0.0
            kept.append(clone)

        self.clones = kept

    def drain_events(self):
        events, self.events = self.events, []
        return events

    def visuals(self, clone):
        """Opacity, scale and reveal window for this frame, derived from state and progress."""
        rest_opacity = config.CLONE_REST_OPACITY
        rest_scale = config.CLONE_REST_SCALE
        p = max(0.0, min(1.0, clone.progress))

        if clone.state == CloneState.SPAWNING:
            # Bottom-to-top reveal
            scale = 1.0
            if p > config.POP_START:
                pop = (p - config.POP_START) / (1.0 - config.POP_START)
                scale = 1.0 + config.POP_AMPLITUDE * math.sin(pop * math.pi)
            opacity = min(p * config.SPAWN_OPACITY_RATE, 1.0) * rest_opacity
            return CloneVisuals(opacity, scale * rest_scale, 1.0 - p, p)

        if clone.state == CloneState.DISMISSING:
            return CloneVisuals((1.0 - p) * rest_opacity, rest_scale, 0.0, 1.0 - p)

        return CloneVisuals(rest_opacity, rest_scale, 0.0, 1.0)

    # -------------------- Settings --------------------
    def set_max_clones(self, max_clones):
        self.max_clones = max(1, int(max_clones))

    def set_max_clones_from_fps(self, fps):
        if fps < 20:
            self.max_clones = 2
        elif fps < 30:
            self.max_clones = 3
        elif fps < 45:
            self.max_clones = 5
        else:
            self.max_clones = 7
        print(f"👥 Clone limit set to {self.max_clones} based on {fps:.1f} FPS")

    def set_bounds(self, width, height):
        self.bounds = (width, height)

    def _clamp_to_bounds(self, center):
        x, y = center
        if self.bounds is None:
            return x, y
        width, height = self.bounds
        return min(max(x, 0), width), min(max(y, 0), height)

    # -------------------- Queries --------------------
    @property
    def count(self):
        return len(self.clones)

    def has_clones(self):
        return len(self.clones) > 0
