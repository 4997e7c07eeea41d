from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

HI_SCORE_KEY = "airline-hi-score"
MUTED_KEY = "airline-muted"
LIGHT_THEME_KEY = "airline-light-mode"


class PreferenceStore(Protocol):
    """String key/value storage that survives restarts.

    Reads have no side effects; writes are applied immediately.
    """

    def get_string(self, key: str) -> str | None:
        ...

    def set_string(self, key: str, value: str) -> None:
        ...


def parse_bool(raw: str | None, *, default: bool = False) -> bool:
    if raw == "true":
        return True
    if raw == "false":
        return False
    if raw is not None:
        logger.debug("Ignoring non-boolean preference value %r", raw)
    return default


def parse_non_negative_int(raw: str | None, *, default: int = 0) -> int:
    if raw is None:
        return default
    text = raw.strip()
    if not (text.isascii() and text.isdigit()):
        logger.debug("Ignoring non-numeric preference value %r", raw)
        return default
    return int(text)


class HiScoreRecord:
    """Persisted best score for the session's engine."""

    def __init__(self, store: PreferenceStore, key: str = HI_SCORE_KEY) -> None:
        self._store = store
        self._key = key

    def load(self) -> int:
        return parse_non_negative_int(self._store.get_string(self._key))

    def save(self, value: int) -> None:
        self._store.set_string(self._key, str(max(0, int(value))))


class BooleanPreference:
    """Persisted on/off toggle with synchronous change listeners."""

    def __init__(self, store: PreferenceStore, key: str) -> None:
        self._store = store
        self._key = key
        self._value = parse_bool(store.get_string(key))
        self._listeners: list[Callable[[bool], None]] = []

    @property
    def key(self) -> str:
        return self._key

    @property
    def value(self) -> bool:
        return self._value

    def subscribe(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def toggle(self) -> bool:
        self._value = not self._value
        self._store.set_string(self._key, "true" if self._value else "false")
        for listener in list(self._listeners):
            listener(self._value)
        return self._value


def build_mute_preference(store: PreferenceStore) -> BooleanPreference:
    return BooleanPreference(store, MUTED_KEY)


def build_theme_preference(store: PreferenceStore) -> BooleanPreference:
    """Light theme when True; dark is the default."""
    return BooleanPreference(store, LIGHT_THEME_KEY)
