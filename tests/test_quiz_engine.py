from __future__ import annotations

import copy
import random

import pytest

from quiz_data import QUIZ
from quiz_engine import (
    AnswerRequired,
    InvalidAnswerIndex,
    InvalidConfiguration,
    QuizAlreadyComplete,
    QuizEngine,
)


def _expected_scores(definition, answers):
    scores = {p["id"]: 0 for p in definition["profiles"]}
    for q, a in answers.items():
        raw = definition["questions"][q]["answers"][a]
        weights = raw["scores"] if isinstance(raw, dict) else raw[1]
        for pid in scores:
            scores[pid] += weights.get(pid, 0)
    return scores


# ====================
# Construction
# ====================

def test_create_initial_state(scenario_quiz, recording_view):
    engine = QuizEngine.create(scenario_quiz, view=recording_view)
    assert engine.current_question_index == 0
    assert engine.answers == {}
    assert engine.scores == {"P1": 0, "P2": 0}
    assert engine.is_complete is False
    assert engine.result is None
    assert recording_view.last == {
        "kind": "question",
        "index": 0,
        "total": 2,
        "text": "Q1",
        "answers": ["a", "b"],
        "selected": None,
    }


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.update(profiles=[]),
        lambda d: d.update(questions=[]),
        lambda d: d["questions"][0].update(text=""),
        lambda d: d["questions"][1]["answers"].pop(),
        lambda d: d["profiles"].append({"id": "P1", "name": "dup"}),
        lambda d: d["questions"][0]["answers"][0]["scores"].update(P1="2"),
        lambda d: d["questions"][0]["answers"][0]["scores"].update(P1=True),
        lambda d: d["questions"][0]["answers"].__setitem__(0, "just text"),
        lambda d: d.update(questions=5),
        lambda d: d.update(profiles=3),
        lambda d: d["profiles"][0].update(id=["P1"]),
    ],
)
def test_invalid_definitions_rejected(scenario_quiz, mutate):
    broken = copy.deepcopy(scenario_quiz)
    mutate(broken)
    with pytest.raises(InvalidConfiguration):
        QuizEngine.create(broken)


def test_non_mapping_definition_rejected():
    with pytest.raises(InvalidConfiguration):
        QuizEngine.create(["not", "a", "quiz"])


def test_bundled_quiz_is_valid():
    engine = QuizEngine.create(QUIZ)
    assert len(engine.definition.questions) == 5
    assert engine.definition.profile_ids == ("OPTIMIST", "ROMANTIC", "SEEKER", "REALIST", "CYNIC")


def test_compact_answer_pairs_and_missing_weights(single_question_quiz):
    engine = QuizEngine.create(single_question_quiz)
    engine.select_answer(0)
    assert engine.scores == {"A": 1, "B": 0}


def test_unknown_profile_weights_are_ignored(scenario_quiz):
    scenario_quiz["questions"][0]["answers"][0]["scores"]["GHOST"] = 10
    engine = QuizEngine.create(scenario_quiz)
    engine.select_answer(0)
    assert engine.scores == {"P1": 2, "P2": 0}


# ====================
# Scoring
# ====================

def test_scenario_scores_and_winner(scenario_quiz):
    engine = QuizEngine.create(scenario_quiz)
    engine.select_answer(0)
    engine.advance()
    engine.select_answer(1)
    assert engine.scores == {"P1": 2, "P2": 0}
    assert engine.compute_winning_profile()["id"] == "P1"

    engine.go_back()
    engine.select_answer(1)
    assert engine.scores == {"P1": 0, "P2": 1}
    assert engine.answers == {0: 1, 1: 1}


def test_scenario_reanswer_first_question_keeps_second(scenario_quiz):
    scenario_quiz["questions"][1]["answers"][1]["scores"] = {"P1": 1, "P2": 0}
    engine = QuizEngine.create(scenario_quiz)
    engine.select_answer(0)
    engine.advance()
    engine.select_answer(1)
    assert engine.scores == {"P1": 3, "P2": 0}
    assert engine.compute_winning_profile()["id"] == "P1"

    engine.go_back()
    engine.select_answer(1)
    assert engine.scores == {"P1": 1, "P2": 1}
    assert engine.complete()["id"] == "P1"


def test_scenario_change_previous_answer(scenario_quiz):
    engine = QuizEngine.create(scenario_quiz)
    engine.select_answer(0)
    engine.advance()
    engine.select_answer(0)
    assert engine.scores == {"P1": 3, "P2": 3}
    engine.go_back()
    engine.select_answer(1)
    assert engine.scores == {"P1": 1, "P2": 4}


def test_reselecting_same_question_never_double_counts(scenario_quiz):
    engine = QuizEngine.create(scenario_quiz)
    for _ in range(5):
        engine.select_answer(0)
    assert engine.scores == {"P1": 2, "P2": 0}
    engine.select_answer(1)
    assert engine.scores == {"P1": 0, "P2": 1}


def test_full_replay_under_random_navigation():
    rng = random.Random(1234)
    profiles = [{"id": f"p{i}", "name": f"P{i}"} for i in range(4)]
    questions = []
    for q in range(6):
        answers = []
        for a in range(rng.randint(2, 4)):
            weights = {p["id"]: rng.randint(-2, 3) for p in profiles if rng.random() < 0.7}
            answers.append({"text": f"q{q}a{a}", "scores": weights})
        questions.append({"text": f"question {q}", "answers": answers})
    definition = {"id": "rnd", "title": "random", "questions": questions, "profiles": profiles}

    for _trial in range(20):
        engine = QuizEngine.create(definition)
        for _step in range(60):
            if engine.is_complete:
                break
            op = rng.choice(["select", "select", "back", "advance"])
            if op == "select":
                n = len(questions[engine.current_question_index]["answers"])
                engine.select_answer(rng.randrange(n))
            elif op == "back":
                engine.go_back()
            else:
                try:
                    engine.advance()
                except AnswerRequired:
                    pass
            assert set(engine.answers) <= set(range(len(questions)))
            assert engine.scores == _expected_scores(definition, engine.answers)


# ====================
# Navigation
# ====================

def test_advance_requires_answer(scenario_quiz, recording_view):
    messages = []
    engine = QuizEngine.create(scenario_quiz, view=recording_view, notify=messages.append)
    renders = len(recording_view.calls)
    version = engine.version
    with pytest.raises(AnswerRequired):
        engine.advance()
    assert messages == ["Please select an answer before continuing."]
    assert engine.current_question_index == 0
    assert engine.version == version
    assert len(recording_view.calls) == renders


def test_go_back_at_first_question_is_noop(scenario_quiz):
    engine = QuizEngine.create(scenario_quiz)
    version = engine.version
    engine.go_back()
    assert engine.current_question_index == 0
    assert engine.version == version


def test_back_and_forward_keeps_answer_and_selection(scenario_quiz, recording_view):
    engine = QuizEngine.create(scenario_quiz, view=recording_view)
    engine.select_answer(1)
    engine.advance()
    engine.select_answer(0)
    before = engine.scores

    engine.go_back()
    assert recording_view.last["index"] == 0
    assert recording_view.last["selected"] == 1
    engine.advance()
    assert engine.current_question_index == 1
    assert recording_view.last["selected"] == 0
    assert engine.scores == before
    assert engine.answers == {0: 1, 1: 0}


def test_select_then_back_then_advance_round_trip(scenario_quiz):
    engine = QuizEngine.create(scenario_quiz)
    engine.select_answer(0)
    engine.advance()
    engine.select_answer(0)
    scores = engine.scores
    engine.go_back()
    engine.advance()
    assert engine.current_question_index == 1
    assert engine.answers[1] == 0
    assert engine.scores == scores


def test_invalid_answer_index_strict(scenario_quiz):
    engine = QuizEngine.create(scenario_quiz)
    for bad in (-1, 2, 99, True, "0"):
        with pytest.raises(InvalidAnswerIndex):
            engine.select_answer(bad)
    assert engine.answers == {}


def test_invalid_answer_index_lenient(scenario_quiz, capsys):
    engine = QuizEngine.create(scenario_quiz, strict=False)
    version = engine.version
    engine.select_answer(5)
    assert engine.answers == {}
    assert engine.version == version
    assert "[WARN] InvalidAnswerIndex" in capsys.readouterr().out


# ====================
# Completion
# ====================

def test_single_question_completes_after_one_answer(single_question_quiz, recording_view):
    engine = QuizEngine.create(single_question_quiz, view=recording_view)
    engine.select_answer(1)
    winner = engine.advance()
    assert engine.is_complete
    assert winner["id"] == "B"
    assert recording_view.last == {"kind": "result", "profile": winner, "scores": {"A": 0, "B": 1}}


def test_complete_is_idempotent_and_reports_once(scenario_quiz, recording_view):
    reports = []
    engine = QuizEngine.create(scenario_quiz, view=recording_view, reporter=reports.append)
    engine.select_answer(0)
    engine.advance()
    engine.select_answer(1)
    first = engine.advance()
    scores = engine.scores
    renders = len(recording_view.calls)

    second = engine.complete()
    third = engine.advance()
    assert first is second is third
    assert first["id"] == "P1"
    assert engine.scores == scores
    assert reports == [{"quiz_id": "scenario", "winning_profile_id": "P1"}]
    assert len(recording_view.calls) == renders


def test_completed_quiz_rejects_mutation(scenario_quiz):
    engine = QuizEngine.create(scenario_quiz)
    engine.select_answer(0)
    engine.complete()
    with pytest.raises(QuizAlreadyComplete):
        engine.select_answer(1)
    engine.go_back()
    assert engine.current_question_index == 1
    assert engine.answers == {0: 0}


def test_completed_quiz_lenient_mutation_is_noop(scenario_quiz):
    engine = QuizEngine.create(scenario_quiz, strict=False)
    engine.select_answer(0)
    engine.complete()
    engine.select_answer(1)
    assert engine.answers == {0: 0}


def test_tie_goes_to_first_declared_profile(scenario_quiz):
    engine = QuizEngine.create(scenario_quiz)
    engine.select_answer(0)
    engine.advance()
    engine.select_answer(0)
    assert engine.scores == {"P1": 3, "P2": 3}
    assert engine.compute_winning_profile()["id"] == "P1"

    scenario_quiz["profiles"].reverse()
    engine = QuizEngine.create(scenario_quiz)
    engine.select_answer(0)
    engine.advance()
    engine.select_answer(0)
    assert engine.compute_winning_profile()["id"] == "P2"


def test_winner_exists_with_all_negative_scores():
    definition = {
        "id": "neg",
        "title": "negative",
        "questions": [{"text": "q", "answers": [("a", {"X": -3, "Y": -1}), ("b", {"X": -1})]}],
        "profiles": [{"id": "X"}, {"id": "Y"}],
    }
    engine = QuizEngine.create(definition)
    engine.select_answer(0)
    assert engine.complete()["id"] == "Y"


def test_winner_is_deterministic_across_histories(scenario_quiz):
    a = QuizEngine.create(scenario_quiz)
    a.select_answer(1)
    a.advance()
    a.select_answer(0)

    b = QuizEngine.create(scenario_quiz)
    b.select_answer(0)
    b.advance()
    b.select_answer(1)
    b.go_back()
    b.select_answer(1)
    b.advance()
    b.select_answer(0)

    assert a.answers == b.answers
    assert a.compute_winning_profile() is a.definition.profiles[1]
    assert b.compute_winning_profile()["id"] == a.compute_winning_profile()["id"]


def test_reporter_failure_does_not_break_completion(single_question_quiz, capsys):
    def broken(_payload):
        raise RuntimeError("disk full")

    engine = QuizEngine.create(single_question_quiz, reporter=broken)
    engine.select_answer(0)
    assert engine.advance()["id"] == "A"
    assert engine.is_complete
    assert "completion report failed: disk full" in capsys.readouterr().out


def test_profile_metadata_passes_through(scenario_quiz):
    scenario_quiz["profiles"][0]["traits"] = [{"label": "x", "value": "y"}]
    engine = QuizEngine.create(scenario_quiz)
    engine.select_answer(0)
    engine.advance()
    engine.select_answer(1)
    result = engine.advance()
    assert result == scenario_quiz["profiles"][0]


# ====================
# Retake
# ====================

def test_retake_after_completion(scenario_quiz, recording_view):
    engine = QuizEngine.create(scenario_quiz, view=recording_view)
    engine.select_answer(0)
    engine.advance()
    engine.select_answer(0)
    engine.advance()
    assert engine.is_complete

    engine.retake()
    assert engine.current_question_index == 0
    assert engine.answers == {}
    assert engine.scores == {"P1": 0, "P2": 0}
    assert engine.is_complete is False
    assert engine.result is None
    assert recording_view.last["kind"] == "question"
    assert recording_view.last["index"] == 0


def test_retake_mid_quiz_bumps_version(scenario_quiz):
    engine = QuizEngine.create(scenario_quiz)
    engine.select_answer(1)
    engine.advance()
    version = engine.version
    engine.retake()
    assert engine.version > version
    assert engine.answers == {}
    assert engine.definition.title == "Scenario quiz"
