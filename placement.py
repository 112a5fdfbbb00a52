import math
import random
from config import config

def place(center, count, radius=None, jitter=None, min_distance=None, max_iterations=None, rng=None):
    """
    Spread `count` clone centers on a circle around `center`.

    Each point gets a small random radius offset so the ring does not look
    mechanical, then the separation pass pushes apart anything closer than
    `min_distance`. Pass a seeded `random.Random` as rng for repeatable output.
    """
    if count <= 0:
        return []

    radius = config.PLACEMENT_RADIUS if radius is None else radius
    jitter = config.PLACEMENT_JITTER if jitter is None else jitter
    min_distance = config.PLACEMENT_MIN_DISTANCE if min_distance is None else min_distance
    max_iterations = config.PLACEMENT_MAX_ITERATIONS if max_iterations is None else max_iterations
    rng = rng if rng is not None else random

    cx, cy = center
    angle_step = 2 * math.pi / count
    positions = []
    for i in range(count):
        angle = i * angle_step
        r = radius + rng.uniform(-jitter, jitter)
        positions.append([cx + r * math.cos(angle), cy + r * math.sin(angle)])

    positions, _ = resolve_collisions(positions, min_distance, max_iterations)
    return [(x, y) for x, y in positions]

def resolve_collisions(positions, min_distance=None, max_iterations=None):
    """
    Relaxation pass: any pair closer than min_distance is pushed apart along the
    line joining them, half the deficit each. Returns (positions, passes) where
    passes counts the passes that still found an overlap; passes < max_iterations
    means every pair ended up at least min_distance apart.
    """
    min_distance = config.PLACEMENT_MIN_DISTANCE if min_distance is None else min_distance
    max_iterations = config.PLACEMENT_MAX_ITERATIONS if max_iterations is None else max_iterations
    positions = [list(p) for p in positions]

    passes = 0
    while passes < max_iterations:
        has_collision = False
        for i in range(len(positions)):
            for j in range(i + 1, len(positions)):
                dx = positions[i][0] - positions[j][0]
                dy = positions[i][1] - positions[j][1]
                distance = math.hypot(dx, dy)
                if distance >= min_distance:
                    continue

                has_collision = True
                # Coincident points have no direction, split them horizontally
                angle = math.atan2(dy, dx) if distance > 0 else 0.0
                push = (min_distance - distance) / 2
                positions[i][0] += math.cos(angle) * push
                positions[i][1] += math.sin(angle) * push
                positions[j][0] -= math.cos(angle) * push
                positions[j][1] -= math.sin(angle) * push

        if not has_collision:
            break
        passes += 1

    return positions, passes
