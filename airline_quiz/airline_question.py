from __future__ import annotations

from collections.abc import Sequence

from .catalog import Airline, build_catalog
from .errors import InsufficientCatalogError
from .preferences import HiScoreRecord, PreferenceStore
from .quiz_core import Question, RoundEngine, SeededRng, sample, shuffle

OPTIONS_PER_QUESTION = 4


def generate_question(catalog: Sequence[Airline], *, rng: SeededRng) -> Question:
    """One uniformly chosen correct airline plus three distractors, in shuffled order."""

    pool = _distinct_by_id(catalog)
    if len(pool) < OPTIONS_PER_QUESTION:
        raise InsufficientCatalogError(
            f"catalog has {len(pool)} distinct airlines, need at least {OPTIONS_PER_QUESTION}"
        )

    correct = pool[rng.randint(0, len(pool) - 1)]
    distractors = sample(pool, OPTIONS_PER_QUESTION - 1, rng=rng, exclude=correct)
    options = shuffle([correct, *distractors], rng=rng)
    return Question(correct=correct, options=tuple(options))


def _distinct_by_id(airlines: Sequence[Airline]) -> list[Airline]:
    seen: set[str] = set()
    out: list[Airline] = []
    for airline in airlines:
        if airline.id in seen:
            continue
        seen.add(airline.id)
        out.append(airline)
    return out


class AirlineQuestionGenerator:
    """Deterministic question stream over a fixed catalog."""

    def __init__(self, catalog: Sequence[Airline], *, seed: int | None = None) -> None:
        self._catalog = tuple(catalog)
        self._rng = SeededRng(seed)

    @property
    def catalog(self) -> tuple[Airline, ...]:
        return self._catalog

    def next_question(self) -> Question:
        return generate_question(self._catalog, rng=self._rng)


def build_airline_round(
    *,
    catalog: Sequence[Airline],
    store: PreferenceStore,
    seed: int | None = None,
) -> RoundEngine:
    """Factory for a round engine; raises QuizError if the catalog cannot start a round."""

    generator = AirlineQuestionGenerator(build_catalog(catalog), seed=seed)
    return RoundEngine(source=generator, hi_score=HiScoreRecord(store))
