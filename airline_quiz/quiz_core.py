from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, TypeVar

from .catalog import Airline
from .errors import InsufficientCatalogError
from .preferences import HiScoreRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Question:
    correct: Airline
    options: tuple[Airline, ...]  # display order

    @property
    def iata_code(self) -> str:
        return self.correct.iata_code


class QuestionSource(Protocol):
    """Deterministic generator of questions."""

    def next_question(self) -> Question:
        ...


class RoundPhase(str, Enum):
    AWAITING_ANSWER = "awaiting_answer"
    ANSWERED = "answered"


class OptionMark(str, Enum):
    NONE = ""
    CORRECT = "correct"
    INCORRECT = "incorrect"


class FeedbackKind(str, Enum):
    NONE = ""
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True, slots=True)
class AnswerEvent:
    index: int
    iata_code: str
    correct_id: str
    selected_id: str
    is_correct: bool
    streak_after: int


@dataclass(frozen=True, slots=True)
class OptionView:
    airline: Airline
    mark: OptionMark
    enabled: bool


@dataclass(frozen=True, slots=True)
class RoundSnapshot:
    """View model for the UI (pure data)."""

    phase: RoundPhase
    iata_code: str
    options: tuple[OptionView, ...]
    correct_count: int
    total_count: int
    streak: int
    hi_score: int
    selected_id: str | None
    feedback: str
    feedback_kind: FeedbackKind

    @property
    def answered(self) -> bool:
        return self.phase is RoundPhase.ANSWERED

    @property
    def next_visible(self) -> bool:
        return self.answered

    @property
    def score_text(self) -> str:
        return f"SCORE: {self.correct_count} / {self.total_count}"


SnapshotListener = Callable[[RoundSnapshot], None]


class SeededRng:
    """Simple seeded RNG wrapper to keep deterministic streams explicit."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(None if seed is None else int(seed))

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(seq)

    def random(self) -> float:
        return self._rng.random()


def shuffle(items: Sequence[T], *, rng: SeededRng) -> list[T]:
    """Return a uniformly shuffled copy of ``items`` (Fisher-Yates)."""

    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out


def sample(
    items: Sequence[T],
    count: int,
    *,
    rng: SeededRng,
    exclude: T | None = None,
) -> list[T]:
    """Draw ``count`` distinct items without replacement, skipping ``exclude``."""

    if count < 0:
        raise ValueError("count must be >= 0")
    available = [item for item in items if exclude is None or not _same_item(item, exclude)]
    if len(available) < count:
        raise InsufficientCatalogError(
            f"need {count} items to sample from, only {len(available)} available"
        )
    return shuffle(available, rng=rng)[:count]


def _same_item(a: object, b: object) -> bool:
    a_id = getattr(a, "id", None)
    b_id = getattr(b, "id", None)
    if a_id is not None and b_id is not None:
        return a_id == b_id
    return a == b


def combo_feedback(streak: int) -> str:
    if streak <= 1:
        return "CORRECT!"
    return f"CORRECT! {streak}x COMBO!"


def wrong_feedback(correct: Airline) -> str:
    return f"WRONG! IT WAS {correct.name.upper()}"


class RoundEngine:
    """Round state machine: awaiting answer -> answered -> (next) -> awaiting answer.

    - Deterministic: the question stream comes from the injected source.
    - Hi-score is written through to the preference store the moment it grows.
    - At most one scoring effect per question; late answers are ignored.
    """

    def __init__(self, *, source: QuestionSource, hi_score: HiScoreRecord) -> None:
        self._source = source
        self._hi_score_record = hi_score

        self._phase: RoundPhase = RoundPhase.AWAITING_ANSWER
        self._correct_count = 0
        self._total_count = 0
        self._streak = 0
        self._hi_score = hi_score.load()
        self._selected_id: str | None = None
        self._feedback = ""
        self._feedback_kind = FeedbackKind.NONE
        self._events: list[AnswerEvent] = []
        self._listeners: list[SnapshotListener] = []

        # InsufficientCatalogError propagates: no round without a valid question.
        self._question: Question = source.next_question()

    @property
    def phase(self) -> RoundPhase:
        return self._phase

    @property
    def question(self) -> Question:
        return self._question

    @property
    def current_correct_answer(self) -> Airline:
        return self._question.correct

    @property
    def correct_count(self) -> int:
        return self._correct_count

    @property
    def total_count(self) -> int:
        return self._total_count

    @property
    def streak(self) -> int:
        return self._streak

    @property
    def hi_score(self) -> int:
        return self._hi_score

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def answered(self) -> bool:
        return self._phase is RoundPhase.ANSWERED

    @property
    def feedback(self) -> str:
        return self._feedback

    def events(self) -> list[AnswerEvent]:
        return list(self._events)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def answer(self, selected: Airline) -> bool:
        """Score a selection. Returns True if accepted."""

        if self._phase is not RoundPhase.AWAITING_ANSWER:
            return False

        correct = self._question.correct
        is_correct = selected.id == correct.id

        self._selected_id = selected.id
        self._phase = RoundPhase.ANSWERED
        self._total_count += 1

        if is_correct:
            self._correct_count += 1
            self._streak += 1
            if self._correct_count > self._hi_score:
                self._hi_score = self._correct_count
                self._hi_score_record.save(self._hi_score)
            self._feedback = combo_feedback(self._streak)
            self._feedback_kind = FeedbackKind.CORRECT
        else:
            self._streak = 0
            self._feedback = wrong_feedback(correct)
            self._feedback_kind = FeedbackKind.INCORRECT

        self._events.append(
            AnswerEvent(
                index=len(self._events),
                iata_code=correct.iata_code,
                correct_id=correct.id,
                selected_id=selected.id,
                is_correct=is_correct,
                streak_after=self._streak,
            )
        )
        logger.debug(
            "answered %s with %s (correct=%s, score=%d/%d)",
            correct.iata_code,
            selected.id,
            is_correct,
            self._correct_count,
            self._total_count,
        )
        self._emit()
        return True

    def answer_option(self, index: int) -> bool:
        """Answer with the option at ``index`` in display order."""

        if not (0 <= index < len(self._question.options)):
            return False
        return self.answer(self._question.options[index])

    def next(self) -> bool:
        """Deal a fresh question. Returns True if the transition happened."""

        if self._phase is not RoundPhase.ANSWERED:
            return False
        self._question = self._source.next_question()
        self._selected_id = None
        self._feedback = ""
        self._feedback_kind = FeedbackKind.NONE
        self._phase = RoundPhase.AWAITING_ANSWER
        self._emit()
        return True

    def option_marks(self) -> tuple[OptionMark, ...]:
        if self._phase is not RoundPhase.ANSWERED:
            return tuple(OptionMark.NONE for _ in self._question.options)
        marks: list[OptionMark] = []
        for airline in self._question.options:
            # Correct wins when the selection is the correct option.
            if airline.id == self._question.correct.id:
                marks.append(OptionMark.CORRECT)
            elif airline.id == self._selected_id:
                marks.append(OptionMark.INCORRECT)
            else:
                marks.append(OptionMark.NONE)
        return tuple(marks)

    def snapshot(self) -> RoundSnapshot:
        enabled = self._phase is RoundPhase.AWAITING_ANSWER
        options = tuple(
            OptionView(airline=airline, mark=mark, enabled=enabled)
            for airline, mark in zip(self._question.options, self.option_marks())
        )
        return RoundSnapshot(
            phase=self._phase,
            iata_code=self._question.iata_code,
            options=options,
            correct_count=self._correct_count,
            total_count=self._total_count,
            streak=self._streak,
            hi_score=self._hi_score,
            selected_id=self._selected_id,
            feedback=self._feedback,
            feedback_kind=self._feedback_kind,
        )

    def _emit(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)
