import random
import numpy as np
from dataclasses import dataclass
from config import config

LIFE_EPSILON = 1e-9

@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    size: float
    max_life: float      # Seconds
    life: float = 1.0    # 1 -> 0, drives opacity
    delay: float = 0.0   # ms before the particle starts moving
    kind: str = "spawn"

class ParticleSystem:
    """Smoke puffs for clone spawn/dismiss, knows nothing about clones"""
    def __init__(self, max_particles=None, rng=None):
        self.max_particles = config.MAX_PARTICLES if max_particles is None else max(0, int(max_particles))
        self.rng = rng if rng is not None else random
        self.particles = []

    def emit(self, x, y, count=None, kind="spawn"):
        count = config.PARTICLES_PER_BURST if count is None else count
        # Spawn smoke rises, dismiss smoke falls
        bias = -1.0 if kind == "spawn" else 1.0
        for i in range(max(0, int(count))):
            self.particles.append(Particle(
                x=x,
                y=y,
                vx=self.rng.uniform(-1.0, 1.0),
                vy=self.rng.uniform(-1.0, 1.0) + bias,
                size=self.rng.uniform(config.PARTICLE_MIN_SIZE, config.PARTICLE_MAX_SIZE),
                max_life=self.rng.uniform(config.PARTICLE_MIN_LIFE, config.PARTICLE_MAX_LIFE),
                delay=i * config.PARTICLE_EMIT_INTERVAL_MS,
                kind=kind,
            ))

        if len(self.particles) > self.max_particles:
            self.particles = self.particles[len(self.particles) - self.max_particles:]

    def update(self, delta_ms):
        if delta_ms <= 0:
            return
        step = delta_ms / config.REFERENCE_FRAME_MS
        dt = delta_ms / 1000.0
        drag = config.PARTICLE_DRAG ** step

        alive = []
        for p in self.particles:
            if p.delay > 0:
                p.delay -= delta_ms
                alive.append(p)
                continue

            p.x += p.vx * step
            p.y += p.vy * step

            p.vx *= drag
            p.vy *= drag
            # Drift back against the burst direction, fading with life
            direction = -1.0 if p.kind == "spawn" else 1.0
            p.vy -= direction * config.PARTICLE_DRIFT * p.life * step

            p.life -= dt / p.max_life
            p.size += config.PARTICLE_GROWTH * step

            if p.life > LIFE_EPSILON:
                alive.append(p)

        self.particles = alive

    def render(self, surface):
        """Blend every visible particle onto surface in place as a soft smoke blob."""
        if not self.particles:
            return surface
        h, w = surface.shape[:2]

        for p in self.particles:
            if p.delay > 0:
                continue
            alpha = max(0.0, p.life) * config.PARTICLE_ALPHA
            radius = int(p.size)
            if alpha <= 0 or radius <= 0:
                continue

            x1, y1 = max(0, int(p.x) - radius), max(0, int(p.y) - radius)
            x2, y2 = min(w, int(p.x) + radius + 1), min(h, int(p.y) + radius + 1)
            if x2 <= x1 or y2 <= y1:
                continue

            # Radial falloff: dense core, transparent rim
            ys, xs = np.ogrid[y1:y2, x1:x2]
            dist = np.sqrt((xs - p.x) ** 2 + (ys - p.y) ** 2) / max(p.size, 1.0)
            falloff = np.clip(1.0 - dist, 0.0, 1.0) * alpha
            a3 = falloff[:, :, None]

            color = config.SPAWN_SMOKE_COLOR if p.kind == "spawn" else config.DISMISS_SMOKE_COLOR
            roi = surface[y1:y2, x1:x2].astype(np.float32)
            blended = np.array(color, dtype=np.float32) * a3 + roi * (1.0 - a3)
            surface[y1:y2, x1:x2] = blended.astype(np.uint8)

        return surface

    def clear(self):
        self.particles = []

    @property
    def count(self):
        return len(self.particles)

    def has_particles(self):
        return len(self.particles) > 0
