# quiz.py
# pygame view for QuizEngine: draws whatever the engine last rendered and
# turns key presses back into engine calls.
import pygame

from effects import SelectionPulse, SlideTransition, Confetti
from quiz_engine import AnswerRequired

WHITE = (230, 230, 230)
DIM   = (150, 150, 160)
HL    = (255, 255, 255)
BG    = (12, 12, 16)
ACCENT = (107, 115, 255)
TOAST_BG = (60, 20, 24)

TOAST_MS = 3000


def share_text(title, profile):
    name = profile.get("name") or profile.get("id")
    subtitle = profile.get("subtitle") or ""
    return f'I just took "{title}" and I am: {name}! {subtitle}'.strip()


def wrap_text_to_width(text, font, max_width):
    words = (text or "").split(" ")
    lines, current = [], ""
    for w in words:
        test = current + (" " if current else "") + w
        if font.size(test)[0] <= max_width:
            current = test
        else:
            if current:
                lines.append(current)
            current = w
    if current:
        lines.append(current)
    return lines


def _render_block(surface, lines, font, color, start_y, line_gap=8, x=40, dx=0):
    y = start_y
    for line in lines:
        if not line:
            y += line_gap
            continue
        img = font.render(line, True, color)
        surface.blit(img, (x + dx, y))
        y += img.get_height() + line_gap
    return y


class QuizView:
    """
    Implements the engine's ``render(state, view_model)`` hook. Rendering only
    stores the model; pixels are produced in ``draw`` on the next frame.
    """

    def __init__(self, size, base_font=None, title_font=None, ticks=None, stats=None, title=""):
        self.w, self.h = size
        self.base_font = base_font
        self.title_font = title_font
        self.stats = stats
        self.title = title
        self._ticks = ticks or pygame.time.get_ticks

        self.engine = None
        self.auto_advance = None
        self.model = None
        self._previous = None
        self.cursor = 0
        self.renders = 0

        self._toast = None
        self._toast_until = 0
        self._pct = None
        self._pct_checked = False

        self.pulse = SelectionPulse()
        self.slide = SlideTransition()
        self.confetti = Confetti()

    def bind(self, engine, auto_advance):
        self.engine = engine
        self.auto_advance = auto_advance
        if not self.title:
            self.title = engine.definition.title

    # ---------- Engine hooks ----------
    def render(self, state, view_model):
        now = self._ticks()
        prev = self.model
        self.renders += 1

        if view_model["kind"] == "question":
            if prev is not None and prev["kind"] == "question" and prev["index"] != view_model["index"]:
                self._previous = prev
                self.slide.start(view_model["index"] - prev["index"], now)
            elif prev is not None and prev["kind"] == "result":
                self.confetti.clear()
            if prev is None or prev.get("index") != view_model["index"] or prev["kind"] != "question":
                sel = view_model["selected"]
                self.cursor = sel if sel is not None else 0
            elif view_model["selected"] is not None:
                self.cursor = view_model["selected"]
                self.pulse.start(view_model["selected"], now)
        else:
            self._pct = None
            self._pct_checked = False
            self.confetti.burst(self.w)

        self.model = view_model

    def notify(self, message):
        print(f"[quiz] {message}")
        self._toast = message
        self._toast_until = self._ticks() + TOAST_MS

    @property
    def toast(self):
        if self._toast and self._ticks() < self._toast_until:
            return self._toast
        return None

    # ---------- Input ----------
    def accepts_answer_input(self) -> bool:
        if self.engine is None or self.model is None or self.model["kind"] != "question":
            return False
        if self.engine.is_complete or self.model["index"] != self.engine.current_question_index:
            return False
        return not self.slide.active(self._ticks())

    def _dispatch(self, fn, *args):
        try:
            fn(*args)
        except AnswerRequired:
            pass  # already surfaced through notify

    def _choose(self, answer_index):
        if not self.accepts_answer_input():
            return
        if not 0 <= answer_index < len(self.model["answers"]):
            return
        self.cursor = answer_index
        self._dispatch(self.engine.select_answer_and_advance, answer_index, self.auto_advance)

    def handle_event(self, event):
        """Returns "done" when the result screen is dismissed, else None."""
        if event.type != pygame.KEYDOWN or self.engine is None or self.model is None:
            return None

        if self.model["kind"] == "result":
            if event.key == pygame.K_r:
                self.auto_advance.cancel()
                self.engine.retake()
            elif event.key == pygame.K_s:
                text = share_text(self.title, self.model["profile"])
                print(f"[share] {text}")
                self.notify("result copied")
            elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_q):
                return "done"
            return None

        n = len(self.model["answers"])
        if pygame.K_a <= event.key <= pygame.K_z:
            self._choose(event.key - pygame.K_a)
        elif event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._choose(self.cursor)
        elif event.key == pygame.K_UP and self.accepts_answer_input():
            self.cursor = (self.cursor - 1) % n
        elif event.key == pygame.K_DOWN and self.accepts_answer_input():
            self.cursor = (self.cursor + 1) % n
        elif event.key in (pygame.K_LEFT, pygame.K_BACKSPACE):
            self.auto_advance.cancel()
            self.engine.go_back()
        elif event.key == pygame.K_RIGHT:
            self.auto_advance.cancel()
            self._dispatch(self.engine.advance)
        return None

    # ---------- Drawing ----------
    def _fonts(self):
        if self.base_font is None:
            self.base_font = pygame.font.SysFont("Courier New", 24)
        if self.title_font is None:
            self.title_font = pygame.font.SysFont("Courier New", 28, bold=True)
        return self.base_font, self.title_font

    def update(self, dt: float):
        self.confetti.update(dt, self.h)

    def draw(self, surface):
        if self.model is None:
            return
        now = self._ticks()
        surface.fill(BG)

        if self.model["kind"] == "result":
            self._draw_progress(surface, 1.0)
            self._draw_result(surface)
            self.confetti.draw(surface)
        else:
            model = self.model
            dx = self.slide.offset(now, self.w)
            if self.slide.active(now) and now - self.slide.start_ms < self.slide.out_ms and self._previous:
                model = self._previous
            self._draw_progress(surface, model["index"] / model["total"])
            self._draw_question(surface, model, now, dx)

        if self.toast:
            self._draw_toast(surface, self.toast)

    def _draw_progress(self, surface, fraction):
        pygame.draw.rect(surface, (40, 40, 48), (0, 0, self.w, 6))
        pygame.draw.rect(surface, ACCENT, (0, 0, int(self.w * fraction), 6))

    def _draw_question(self, surface, model, now, dx):
        base_font, title_font = self._fonts()
        header = f"Question {model['index'] + 1}/{model['total']}"
        _render_block(surface, [self.title, header], base_font, DIM, start_y=24, dx=dx)

        lines = wrap_text_to_width(model["text"], title_font, self.w - 80)
        y = _render_block(surface, lines, title_font, WHITE, start_y=96, line_gap=12, dx=dx)

        y += 24
        for i, text in enumerate(model["answers"]):
            letter = chr(ord("A") + i)
            color = HL if i == self.cursor else DIM
            img = base_font.render(f"{letter}) {text}", True, color)
            scale = self.pulse.scale_for(i, now) if i == model["selected"] else 1.0
            if scale != 1.0:
                size = (int(img.get_width() * scale), int(img.get_height() * scale))
                img = pygame.transform.smoothscale(img, size)
            x = 72 + dx
            if i == model["selected"]:
                pygame.draw.rect(surface, ACCENT, (x - 10, y - 4, img.get_width() + 20, img.get_height() + 8), 2)
            if i == self.cursor:
                pygame.draw.polygon(surface, HL, [(x - 30, y + 4), (x - 18, y + 10), (x - 30, y + 16)])
            surface.blit(img, (x, y))
            y += img.get_height() + 18

        hint = "A-Z or ↑/↓ + ENTER to answer"
        if model["index"] > 0:
            hint += " • ← previous question"
        _render_block(surface, [hint], base_font, DIM, start_y=self.h - 64)

    def _draw_result(self, surface):
        base_font, title_font = self._fonts()
        profile = self.model["profile"]

        lines = [profile.get("icon") or "", profile.get("name") or profile["id"], profile.get("subtitle") or ""]
        y = _render_block(surface, [ln for ln in lines if ln], title_font, WHITE, start_y=40, line_gap=12)

        desc = wrap_text_to_width(profile.get("description") or "", base_font, self.w - 80)
        y = _render_block(surface, desc, base_font, DIM, start_y=y + 16, line_gap=10)

        traits = [f"{t.get('label')}: {t.get('value')}" for t in profile.get("traits") or []]
        if traits:
            _render_block(surface, traits, base_font, WHITE, start_y=y + 16, line_gap=8, x=72)

        footer = []
        pct = self._result_percent(profile)
        if pct is not None:
            footer.append(f"{pct}% of people also got {profile.get('name') or profile['id']}.")
        footer += ["", "R retake • S share • ENTER finish"]
        _render_block(surface, footer, base_font, WHITE, start_y=self.h - 140, line_gap=10)

    def _result_percent(self, profile):
        # looked up once per result, after the background write has landed
        if not self._pct_checked and self.stats is not None and not self.stats.busy:
            self._pct = self.stats.percent_for(self.engine.definition.id, profile["id"])
            self._pct_checked = True
        return self._pct

    def _draw_toast(self, surface, message):
        base_font, _ = self._fonts()
        img = base_font.render(message, True, HL)
        box = pygame.Rect(0, 0, img.get_width() + 32, img.get_height() + 16)
        box.midbottom = (self.w // 2, self.h - 100)
        pygame.draw.rect(surface, TOAST_BG, box)
        surface.blit(img, (box.x + 16, box.y + 8))


def run_quiz(screen, clock, engine, view, auto_advance, present=None, events=None):
    """
    Frame loop. Returns the winning profile, or None if the window closed.
    `events` lets the host wrap pygame.event.get() with its own hotkeys.
    """
    while True:
        for event in (events() if events else pygame.event.get()):
            if event.type == pygame.QUIT:
                return None
            if view.handle_event(event) == "done":
                return engine.result

        auto_advance.poll()

        dt = clock.tick(60) / 1000.0
        view.update(dt)
        view.draw(screen)
        if present:
            present()
        else:
            pygame.display.flip()
