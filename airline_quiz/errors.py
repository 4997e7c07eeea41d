from __future__ import annotations


class QuizError(Exception):
    """Base class for errors that stop a round from starting."""


class InsufficientCatalogError(QuizError, ValueError):
    """The catalog cannot supply enough distinct airlines for a question."""


class CatalogFormatError(QuizError, ValueError):
    """Catalog data is malformed (duplicate id, bad IATA code, wrong shape)."""
