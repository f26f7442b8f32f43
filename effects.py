"""
effects.py
----------------
Small time-based flourishes for the quiz screens (pygame).

- Selection pulse: chosen answer grows ~5% and settles back
- Slide transition: question slides out, next one slides in
- Confetti: a falling burst when the result screen appears

Nothing here touches quiz state. The view asks each effect for an offset,
scale or particle list given the current tick, and draws accordingly.
"""

import math
import random
import pygame


def _ease_out(t: float) -> float:
    t = 0.0 if t < 0 else (1.0 if t > 1.0 else t)
    return 1.0 - (1.0 - t) ** 3


class SelectionPulse:
    def __init__(self, duration_ms=300, peak=1.05):
        self.duration_ms = duration_ms
        self.peak = peak
        self.index = None
        self.start_ms = 0

    def start(self, index, now_ms):
        self.index = index
        self.start_ms = now_ms

    def scale_for(self, index, now_ms) -> float:
        if index != self.index:
            return 1.0
        t = (now_ms - self.start_ms) / self.duration_ms
        if t < 0 or t >= 1:
            return 1.0
        # up then back down
        return 1.0 + (self.peak - 1.0) * math.sin(math.pi * t)


class SlideTransition:
    """Forward slides out left / in from right; backward mirrors it."""

    def __init__(self, out_ms=200, in_ms=400):
        self.out_ms = out_ms
        self.in_ms = in_ms
        self.direction = 0
        self.start_ms = None

    def start(self, direction, now_ms):
        self.direction = 1 if direction >= 0 else -1
        self.start_ms = now_ms

    def active(self, now_ms) -> bool:
        if self.start_ms is None:
            return False
        if now_ms - self.start_ms >= self.out_ms + self.in_ms:
            self.start_ms = None
            return False
        return True

    def offset(self, now_ms, width) -> int:
        if not self.active(now_ms):
            return 0
        elapsed = now_ms - self.start_ms
        if elapsed < self.out_ms:
            return int(-self.direction * width * _ease_out(elapsed / self.out_ms))
        t = (elapsed - self.out_ms) / self.in_ms
        return int(self.direction * width * (1.0 - _ease_out(t)))


CONFETTI_COLORS = [(107, 115, 255), (255, 179, 186), (186, 255, 201), (255, 255, 255)]


class Confetti:
    def __init__(self, count=50, rng=None):
        self.count = count
        self.rng = rng or random.Random()
        self.pieces = []

    def burst(self, width):
        r = self.rng
        self.pieces = [
            {
                "x": r.uniform(0, width),
                "y": -10.0,
                "vx": r.uniform(-30, 30),
                "vy": r.uniform(120, 260),
                "life": r.uniform(2.0, 4.0),
                "color": r.choice(CONFETTI_COLORS),
            }
            for _ in range(self.count)
        ]

    def clear(self):
        self.pieces = []

    def update(self, dt: float, height):
        alive = []
        for p in self.pieces:
            p["life"] -= dt
            p["x"] += p["vx"] * dt
            p["y"] += p["vy"] * dt
            if p["life"] > 0 and p["y"] < height + 10:
                alive.append(p)
        self.pieces = alive

    def draw(self, surface: pygame.Surface):
        for p in self.pieces:
            pygame.draw.circle(surface, p["color"], (int(p["x"]), int(p["y"])), 4)
