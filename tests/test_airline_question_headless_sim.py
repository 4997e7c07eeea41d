from __future__ import annotations

from airline_quiz.airline_question import AirlineQuestionGenerator, build_airline_round
from airline_quiz.catalog import Airline
from airline_quiz.persistence import MemoryPreferenceStore
from airline_quiz.preferences import HI_SCORE_KEY
from airline_quiz.quiz_core import OptionMark, RoundPhase

CATALOG = [
    Airline(id="A1", name="Aurora Airways", iata_code="AU"),
    Airline(id="A2", name="Boreal Air", iata_code="BO"),
    Airline(id="A3", name="Cirrus Lines", iata_code="CI"),
    Airline(id="A4", name="Drift Aviation", iata_code="DR"),
]


def test_headless_scripted_run_matches_mirror_generator_and_scores() -> None:
    seed = 5150
    store = MemoryPreferenceStore()
    engine = build_airline_round(catalog=CATALOG, store=store, seed=seed)
    mirror = AirlineQuestionGenerator(CATALOG, seed=seed)

    # Round 1: correct.
    q1 = mirror.next_question()
    assert engine.question == q1
    assert engine.answer(q1.correct) is True
    assert engine.feedback == "CORRECT!"
    assert engine.snapshot().score_text == "SCORE: 1 / 1"
    assert store.get_string(HI_SCORE_KEY) == "1"

    # Round 2: correct again, combo.
    assert engine.next() is True
    q2 = mirror.next_question()
    assert engine.question == q2
    engine.answer(q2.correct)
    assert engine.feedback == "CORRECT! 2x COMBO!"

    # Round 3: wrong.
    assert engine.next() is True
    q3 = mirror.next_question()
    assert engine.question == q3
    wrong = next(a for a in q3.options if a.id != q3.correct.id)
    engine.answer(wrong)
    assert engine.feedback == f"WRONG! IT WAS {q3.correct.name.upper()}"
    assert engine.streak == 0

    snap = engine.snapshot()
    assert snap.score_text == "SCORE: 2 / 3"
    assert snap.phase is RoundPhase.ANSWERED
    marks = {view.airline.id: view.mark for view in snap.options}
    assert marks[q3.correct.id] is OptionMark.CORRECT
    assert marks[wrong.id] is OptionMark.INCORRECT
    assert store.get_string(HI_SCORE_KEY) == "2"


def test_reload_keeps_hi_score_and_zeroes_session_counters() -> None:
    store = MemoryPreferenceStore()
    first = build_airline_round(catalog=CATALOG, store=store, seed=1)
    for _ in range(3):
        first.answer(first.current_correct_answer)
        first.next()
    assert first.hi_score == 3

    second = build_airline_round(catalog=CATALOG, store=store, seed=2)
    assert second.hi_score == 3
    assert (second.correct_count, second.total_count, second.streak) == (0, 0, 0)

    second.answer(second.current_correct_answer)
    assert second.hi_score == 3
    assert store.get_string(HI_SCORE_KEY) == "3"


def test_streak_resets_after_wrong_then_restarts_without_combo() -> None:
    engine = build_airline_round(catalog=CATALOG, store=MemoryPreferenceStore(), seed=77)

    engine.answer(engine.current_correct_answer)
    engine.next()
    q = engine.question
    engine.answer(next(a for a in q.options if a.id != q.correct.id))
    engine.next()
    engine.answer(engine.current_correct_answer)

    assert engine.feedback == "CORRECT!"
    assert engine.streak == 1
