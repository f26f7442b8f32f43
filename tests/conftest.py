from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class RecordingView:
    """Collects every render call the engine makes."""

    def __init__(self):
        self.calls = []

    def render(self, state, view_model):
        self.calls.append(view_model)

    @property
    def last(self):
        return self.calls[-1]


class FakeClock:
    def __init__(self, now=0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def scenario_quiz():
    """Two questions, two profiles; P1 wins on Q1->0, Q2->1."""
    return {
        "id": "scenario",
        "title": "Scenario quiz",
        "questions": [
            {
                "text": "Q1",
                "answers": [
                    {"text": "a", "scores": {"P1": 2, "P2": 0}},
                    {"text": "b", "scores": {"P1": 0, "P2": 1}},
                ],
            },
            {
                "text": "Q2",
                "answers": [
                    {"text": "c", "scores": {"P1": 1, "P2": 3}},
                    {"text": "d", "scores": {"P1": 0, "P2": 0}},
                ],
            },
        ],
        "profiles": [
            {"id": "P1", "name": "First", "subtitle": "one", "description": "d1", "icon": "1"},
            {"id": "P2", "name": "Second", "subtitle": "two", "description": "d2", "icon": "2"},
        ],
    }


@pytest.fixture
def single_question_quiz():
    return {
        "id": "single",
        "title": "One question",
        "questions": [{"text": "only", "answers": [("yes", {"A": 1}), ("no", {"B": 1})]}],
        "profiles": [{"id": "A", "name": "Alpha"}, {"id": "B", "name": "Beta"}],
    }


@pytest.fixture
def recording_view():
    return RecordingView()


@pytest.fixture
def fake_clock():
    return FakeClock()
