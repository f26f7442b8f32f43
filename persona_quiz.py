#!/usr/bin/env python3
# ====== Persona Quiz kiosk: pygame host for QuizEngine ======
import sys

import pygame

from quiz import QuizView, run_quiz
from quiz_data import QUIZ, load_quiz
from quiz_engine import QuizEngine, AutoAdvance, InvalidConfiguration
from quiz_stats import QuizStats
from settings import load_settings

TARGET_RATIO = 4 / 3

# ====== Developer-friendly exits ======
_EXIT_HOLD_MS = 700               # hold F12 to quit
_ESC_TAP_WINDOW_MS = 900          # 3x ESC within this window = restart quiz


class HotKeys:
    """
    Wraps the event stream:
      - ESC x3 within window => restart the quiz (retake)
      - Hold F12             => quit
      - windowed dev mode    => single ESC quits
    Everything else is passed through to the view.
    """

    def __init__(self, on_restart, windowed=False, ticks=None):
        self.on_restart = on_restart
        self.windowed = windowed
        self._ticks = ticks or pygame.time.get_ticks
        self._f12_down_at = None
        self._esc_taps = []

    def filter(self, ev_iterable):
        now = self._ticks()
        for ev in ev_iterable:
            if ev.type == pygame.KEYDOWN and ev.key == pygame.K_F12:
                self._f12_down_at = now
            elif ev.type == pygame.KEYUP and ev.key == pygame.K_F12:
                self._f12_down_at = None

            if ev.type == pygame.KEYDOWN and ev.key == pygame.K_ESCAPE:
                if self.windowed:
                    print("[EXIT] ESC (dev window).")
                    yield pygame.event.Event(pygame.QUIT)
                    return
                self._esc_taps = [t for t in self._esc_taps if now - t <= _ESC_TAP_WINDOW_MS]
                self._esc_taps.append(now)
                if len(self._esc_taps) >= 3:
                    print("[RESET] ESC x3 → restarting quiz.")
                    self._esc_taps = []
                    self.on_restart()
                continue

            yield ev

        if self._f12_down_at is not None and (now - self._f12_down_at) >= _EXIT_HOLD_MS:
            print("[EXIT] F12 held. Exiting to desktop.")
            yield pygame.event.Event(pygame.QUIT)


# ====== DISPLAY: fullscreen/windowed + 4:3 logical canvas ======
def letterbox(screen_w, screen_h, ratio=TARGET_RATIO):
    if screen_w / screen_h > ratio:
        dest_h = screen_h
        dest_w = int(dest_h * ratio)
    else:
        dest_w = screen_w
        dest_h = int(dest_w / ratio)
    return (screen_w - dest_w) // 2, (screen_h - dest_h) // 2, dest_w, dest_h


def _open_display(settings):
    logical_w, logical_h = settings["canvas"]
    if settings["windowed"]:
        display = pygame.display.set_mode((logical_w, logical_h))
        dest = (0, 0, logical_w, logical_h)
    else:
        info = pygame.display.Info()
        display = pygame.display.set_mode((info.current_w, info.current_h), pygame.FULLSCREEN)
        dest = letterbox(info.current_w, info.current_h, logical_w / logical_h)
    pygame.display.set_caption("Persona Quiz")
    screen = pygame.Surface((logical_w, logical_h)).convert()

    def present():
        x, y, w, h = dest
        if (w, h) == (logical_w, logical_h):
            display.blit(screen, (x, y))
        else:
            display.fill((0, 0, 0))
            display.blit(pygame.transform.smoothscale(screen, (w, h)), (x, y))
        pygame.display.flip()

    return screen, present


def _load_definition(settings):
    if settings["quiz_path"]:
        return load_quiz(settings["quiz_path"])
    return QUIZ


def main(argv=None):
    settings = load_settings(argv)

    try:
        definition = _load_definition(settings)
        # validate before any window opens
        QuizEngine.create(definition)
    except (InvalidConfiguration, OSError) as e:
        print(f"[ERROR] Quiz configuration rejected: {e}")
        return 2

    pygame.init()
    try:
        screen, present = _open_display(settings)
        clock = pygame.time.Clock()

        stats = QuizStats(settings["stats_path"])
        font_size = settings["font_size"]
        view = QuizView(
            screen.get_size(),
            base_font=pygame.font.SysFont("Courier New", font_size),
            title_font=pygame.font.SysFont("Courier New", font_size + 4, bold=True),
            stats=stats,
        )
        engine = QuizEngine.create(
            definition,
            view=view,
            notify=view.notify,
            reporter=stats.report,
            strict=settings["strict"],
        )
        auto_advance = AutoAdvance(engine, delay_ms=settings["auto_advance_ms"], clock=pygame.time.get_ticks)
        view.bind(engine, auto_advance)
        print(f"[quiz] Loaded {engine.definition.title!r}: "
              f"{len(engine.definition.questions)} questions, {len(engine.definition.profiles)} profiles.")

        def restart():
            auto_advance.cancel()
            engine.retake()

        hotkeys = HotKeys(restart, windowed=settings["windowed"])
        # kiosk: each finished attempt hands over to the next person
        while run_quiz(screen, clock, engine, view, auto_advance,
                       present=present, events=lambda: hotkeys.filter(pygame.event.get())) is not None:
            restart()
        stats.wait()
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
