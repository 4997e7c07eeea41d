from __future__ import annotations

from collections import Counter

import pytest

from airline_quiz.airline_question import (
    OPTIONS_PER_QUESTION,
    AirlineQuestionGenerator,
    build_airline_round,
    generate_question,
)
from airline_quiz.catalog import DEFAULT_AIRLINES, Airline
from airline_quiz.errors import CatalogFormatError, InsufficientCatalogError, QuizError
from airline_quiz.persistence import MemoryPreferenceStore
from airline_quiz.quiz_core import SeededRng


def _catalog(n: int) -> list[Airline]:
    return [Airline(id=f"id{i}", name=f"Airline {i}", iata_code=f"A{i}") for i in range(n)]


def test_generator_determinism_same_seed_same_sequence() -> None:
    seed = 2468
    g1 = AirlineQuestionGenerator(DEFAULT_AIRLINES, seed=seed)
    g2 = AirlineQuestionGenerator(DEFAULT_AIRLINES, seed=seed)

    seq1 = [g1.next_question() for _ in range(25)]
    seq2 = [g2.next_question() for _ in range(25)]

    assert seq1 == seq2


@pytest.mark.parametrize("size", [4, 5, 9, len(DEFAULT_AIRLINES)])
def test_question_has_four_distinct_options_with_correct_once(size: int) -> None:
    catalog = _catalog(size) if size != len(DEFAULT_AIRLINES) else list(DEFAULT_AIRLINES)
    rng = SeededRng(size)
    for _ in range(200):
        q = generate_question(catalog, rng=rng)
        ids = [a.id for a in q.options]
        assert len(ids) == 4
        assert len(set(ids)) == 4
        assert ids.count(q.correct.id) == 1
        assert q.iata_code == q.correct.iata_code


def test_correct_airline_frequency_is_roughly_uniform() -> None:
    catalog = _catalog(6)
    rng = SeededRng(99)
    counts = Counter(generate_question(catalog, rng=rng).correct.id for _ in range(6000))
    assert set(counts) == {a.id for a in catalog}
    for n in counts.values():
        assert 850 <= n <= 1150


def test_correct_position_among_options_is_roughly_uniform() -> None:
    catalog = _catalog(4)
    rng = SeededRng(4242)
    positions: Counter[int] = Counter()
    for _ in range(6000):
        q = generate_question(catalog, rng=rng)
        positions[q.options.index(q.correct)] += 1
    assert set(positions) == {0, 1, 2, 3}
    for n in positions.values():
        assert 1350 <= n <= 1650


@pytest.mark.parametrize("size", [0, 1, 3])
def test_too_small_catalog_raises(size: int) -> None:
    with pytest.raises(InsufficientCatalogError):
        generate_question(_catalog(size), rng=SeededRng(1))


def test_duplicate_ids_do_not_count_towards_catalog_size() -> None:
    catalog = _catalog(3) + [Airline(id="id0", name="Again", iata_code="AG")]
    with pytest.raises(InsufficientCatalogError):
        generate_question(catalog, rng=SeededRng(1))


def test_build_round_surfaces_catalog_errors_without_retry() -> None:
    with pytest.raises(InsufficientCatalogError) as info:
        build_airline_round(catalog=_catalog(3), store=MemoryPreferenceStore(), seed=1)
    assert isinstance(info.value, QuizError)

    bad = _catalog(4) + [Airline(id="x", name="Bad", iata_code="toolong")]
    with pytest.raises(CatalogFormatError):
        build_airline_round(catalog=bad, store=MemoryPreferenceStore(), seed=1)


def test_build_round_starts_awaiting_with_question_from_catalog() -> None:
    catalog = _catalog(5)
    engine = build_airline_round(catalog=catalog, store=MemoryPreferenceStore(), seed=3)
    assert engine.answered is False
    assert engine.current_correct_answer in catalog
    assert engine.current_correct_answer in engine.question.options


def test_generator_always_deals_four_options() -> None:
    gen = AirlineQuestionGenerator(_catalog(10), seed=8)
    assert {len(gen.next_question().options) for _ in range(50)} == {OPTIONS_PER_QUESTION}
