# quiz_engine.py
# Quiz state machine: answers, full-replay scoring, winner selection.
# No pygame drawing in here; the view/stats/notify hooks are plain callables.


# ====== Errors ======
class QuizError(Exception):
    pass


class InvalidConfiguration(QuizError):
    pass


class InvalidAnswerIndex(QuizError):
    pass


class AnswerRequired(QuizError):
    pass


class QuizAlreadyComplete(QuizError):
    pass


ANSWER_REQUIRED_MSG = "Please select an answer before continuing."


# ====== Definition ======
class Answer:
    def __init__(self, text, scores):
        self.text = text
        self.scores = scores

    def weight_for(self, profile_id) -> int:
        return self.scores.get(profile_id, 0)


class Question:
    def __init__(self, text, answers):
        self.text = text
        self.answers = answers


class QuizDefinition:
    """
    Parsed, validated quiz document. Profiles keep their original mapping so
    display metadata (name, subtitle, icon, traits...) passes straight through.
    """

    def __init__(self, quiz_id, title, questions, profiles):
        self.id = quiz_id
        self.title = title
        self.questions = tuple(questions)
        self.profiles = tuple(profiles)
        self.profile_ids = tuple(p["id"] for p in self.profiles)

    def profile(self, profile_id):
        for p in self.profiles:
            if p["id"] == profile_id:
                return p
        return None

    @classmethod
    def from_dict(cls, raw):
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, dict):
            raise InvalidConfiguration("quiz definition must be a mapping")

        profiles = raw.get("profiles") or []
        if not isinstance(profiles, (list, tuple)):
            raise InvalidConfiguration("profiles must be a list")
        if not profiles:
            raise InvalidConfiguration("quiz defines no profiles")
        seen = set()
        for p in profiles:
            pid = p.get("id") if isinstance(p, dict) else None
            if pid is None:
                raise InvalidConfiguration(f"profile without id: {p!r}")
            if isinstance(pid, bool) or not isinstance(pid, (str, int)):
                raise InvalidConfiguration(f"profile id must be a string or integer, got {pid!r}")
            if pid in seen:
                raise InvalidConfiguration(f"duplicate profile id: {pid!r}")
            seen.add(pid)

        raw_questions = raw.get("questions") or []
        if not isinstance(raw_questions, (list, tuple)):
            raise InvalidConfiguration("questions must be a list")
        if not raw_questions:
            raise InvalidConfiguration("quiz defines no questions")
        questions = [_parse_question(q, i) for i, q in enumerate(raw_questions)]

        return cls(raw.get("id"), raw.get("title", ""), questions, [dict(p) for p in profiles])


def _parse_question(raw, index):
    if not isinstance(raw, dict):
        raise InvalidConfiguration(f"question {index + 1} must be a mapping")
    text = raw.get("text") or raw.get("prompt") or ""
    if not isinstance(text, str) or not text.strip():
        raise InvalidConfiguration(f"question {index + 1} has no text")
    raw_answers = raw.get("answers") or raw.get("options") or []
    if not isinstance(raw_answers, (list, tuple)) or len(raw_answers) < 2:
        raise InvalidConfiguration(f"question {index + 1} needs at least 2 answers")
    return Question(text.strip(), [_parse_answer(a, index) for a in raw_answers])


def _parse_answer(raw, q_index):
    # either {"text": ..., "scores": {...}} or the compact ("text", {...}) pair
    if isinstance(raw, dict):
        text, scores = raw.get("text"), raw.get("scores") or {}
    elif isinstance(raw, (list, tuple)) and len(raw) == 2:
        text, scores = raw
    else:
        raise InvalidConfiguration(f"question {q_index + 1}: malformed answer {raw!r}")
    if not text:
        raise InvalidConfiguration(f"question {q_index + 1}: answer without text")
    if not isinstance(scores, dict):
        raise InvalidConfiguration(f"question {q_index + 1}: answer scores must be a mapping")
    for pid, w in scores.items():
        if isinstance(w, bool) or not isinstance(w, int):
            raise InvalidConfiguration(
                f"question {q_index + 1}: weight for {pid!r} must be an integer, got {w!r}"
            )
    return Answer(text, dict(scores))


# ====== State ======
class QuizState:
    def __init__(self, profile_ids):
        self.current_question_index = 0
        self.answers = {}
        self.scores = {pid: 0 for pid in profile_ids}
        self.is_complete = False
        self.version = 0


def _print_warning(message):
    print(f"[WARN] {message}")


# ====== Engine ======
class QuizEngine:
    """
    Owns one quiz attempt. Every state change bumps ``version`` and calls
    ``view.render(state, view_model)``.

    Scores are never patched incrementally: each answer change rebuilds them
    from ``answers``, so re-answering or going back cannot leave stale points.
    """

    def __init__(self, definition, view=None, notify=None, reporter=None, strict=True):
        self._definition = QuizDefinition.from_dict(definition)
        self.view = view
        self.notify = notify or _print_warning
        self.reporter = reporter
        self.strict = strict
        self._state = QuizState(self._definition.profile_ids)
        self._result = None
        self._render()

    @classmethod
    def create(cls, definition, **kwargs):
        return cls(definition, **kwargs)

    # ---------- Read-only views ----------
    @property
    def definition(self):
        return self._definition

    @property
    def state(self):
        return self._state

    @property
    def current_question_index(self) -> int:
        return self._state.current_question_index

    @property
    def answers(self):
        return dict(self._state.answers)

    @property
    def scores(self):
        return dict(self._state.scores)

    @property
    def is_complete(self) -> bool:
        return self._state.is_complete

    @property
    def version(self) -> int:
        return self._state.version

    @property
    def result(self):
        return self._result

    @property
    def current_question(self):
        return self._definition.questions[self._state.current_question_index]

    def question_view(self):
        i = self._state.current_question_index
        q = self._definition.questions[i]
        return {
            "kind": "question",
            "index": i,
            "total": len(self._definition.questions),
            "text": q.text,
            "answers": [a.text for a in q.answers],
            "selected": self._state.answers.get(i),
        }

    def result_view(self):
        return {"kind": "result", "profile": self._result, "scores": dict(self._state.scores)}

    # ---------- Operations ----------
    def select_answer(self, answer_index):
        if self._state.is_complete:
            return self._reject(QuizAlreadyComplete("quiz is already complete"))
        n = len(self.current_question.answers)
        if isinstance(answer_index, bool) or not isinstance(answer_index, int) or not 0 <= answer_index < n:
            return self._reject(InvalidAnswerIndex(
                f"answer {answer_index!r} out of range for question "
                f"{self._state.current_question_index + 1} ({n} answers)"
            ))

        self._state.answers[self._state.current_question_index] = answer_index
        self._recalculate_scores()
        self._changed()

    def select_answer_and_advance(self, answer_index, auto_advance):
        """Select now, advance later once ``auto_advance`` comes due."""
        version = self._state.version
        self.select_answer(answer_index)
        if self._state.version != version:
            auto_advance.schedule()

    def advance(self):
        if self._state.is_complete:
            return self._result
        i = self._state.current_question_index
        if i not in self._state.answers:
            self.notify(ANSWER_REQUIRED_MSG)
            raise AnswerRequired(ANSWER_REQUIRED_MSG)
        if i >= len(self._definition.questions) - 1:
            return self.complete()
        self._state.current_question_index = i + 1
        self._changed()
        return None

    def go_back(self):
        if self._state.is_complete or self._state.current_question_index == 0:
            return
        self._state.current_question_index -= 1
        self._changed()

    def complete(self):
        if self._state.is_complete:
            return self._result

        self._state.current_question_index = len(self._definition.questions) - 1
        self._recalculate_scores()
        self._state.is_complete = True
        self._result = self.compute_winning_profile()
        self._state.version += 1
        print(f"[quiz] Completed {self._definition.title!r}: {self._result.get('name', self._result['id'])}")

        self._report_completion()
        self._render()
        return self._result

    def compute_winning_profile(self):
        scores = self._state.scores
        best = self._definition.profiles[0]
        for p in self._definition.profiles[1:]:
            if scores[p["id"]] > scores[best["id"]]:
                best = p
        return best

    def retake(self):
        version = self._state.version
        self._state = QuizState(self._definition.profile_ids)
        self._state.version = version + 1
        self._result = None
        self._render()

    # ---------- Internals ----------
    def _recalculate_scores(self):
        scores = {pid: 0 for pid in self._definition.profile_ids}
        for q_index, a_index in self._state.answers.items():
            answer = self._definition.questions[q_index].answers[a_index]
            for pid in scores:
                scores[pid] += answer.weight_for(pid)
        self._state.scores = scores

    def _changed(self):
        self._state.version += 1
        self._render()

    def _render(self):
        if self.view is None:
            return
        model = self.result_view() if self._state.is_complete else self.question_view()
        self.view.render(self._state, model)

    def _reject(self, err):
        if self.strict:
            raise err
        _print_warning(f"{type(err).__name__}: {err} (ignored)")

    def _report_completion(self):
        if self.reporter is None:
            return
        payload = {"quiz_id": self._definition.id, "winning_profile_id": self._result["id"]}
        try:
            self.reporter(payload)
        except Exception as e:
            _print_warning(f"completion report failed: {e}")


# ====== Auto-advance ======
class AutoAdvance:
    """
    Cancellable deadline for the "pick an answer, move on shortly after"
    convenience. Polled from the frame loop; a pending advance is dropped if
    the engine changed since it was scheduled.
    """

    def __init__(self, engine, delay_ms=800, clock=None):
        self.engine = engine
        self.delay_ms = delay_ms
        self._clock = clock
        self._due = None
        self._version = None

    def _now(self):
        if self._clock is not None:
            return self._clock()
        # engine stays importable without pygame; hosts normally pass clock=
        import pygame
        return pygame.time.get_ticks()

    @property
    def pending(self) -> bool:
        return self._due is not None

    def schedule(self):
        self._due = self._now() + self.delay_ms
        self._version = self.engine.version

    def cancel(self):
        self._due = None
        self._version = None

    def poll(self, now=None) -> bool:
        if self._due is None:
            return False
        if now is None:
            now = self._now()
        if self.engine.version != self._version:
            self.cancel()
            return False
        if now < self._due:
            return False
        self.cancel()
        self.engine.advance()
        return True
