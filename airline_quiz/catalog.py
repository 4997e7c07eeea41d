from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .errors import CatalogFormatError

logger = logging.getLogger(__name__)

CATALOG_PATH_ENV = "AIRLINE_QUIZ_CATALOG_PATH"

_IATA_RE = re.compile(r"^[A-Z0-9]{2,3}$")


@dataclass(frozen=True, slots=True)
class Airline:
    id: str
    name: str
    iata_code: str


_DEFAULT_ROWS: tuple[tuple[str, str], ...] = (
    ("AA", "American Airlines"),
    ("AC", "Air Canada"),
    ("AF", "Air France"),
    ("AI", "Air India"),
    ("AS", "Alaska Airlines"),
    ("AY", "Finnair"),
    ("AZ", "ITA Airways"),
    ("BA", "British Airways"),
    ("B6", "JetBlue"),
    ("CX", "Cathay Pacific"),
    ("DL", "Delta Air Lines"),
    ("EI", "Aer Lingus"),
    ("EK", "Emirates"),
    ("ET", "Ethiopian Airlines"),
    ("EY", "Etihad Airways"),
    ("FR", "Ryanair"),
    ("IB", "Iberia"),
    ("JL", "Japan Airlines"),
    ("KE", "Korean Air"),
    ("KL", "KLM"),
    ("LH", "Lufthansa"),
    ("LX", "Swiss"),
    ("NH", "All Nippon Airways"),
    ("NZ", "Air New Zealand"),
    ("OS", "Austrian Airlines"),
    ("QF", "Qantas"),
    ("QR", "Qatar Airways"),
    ("SK", "SAS"),
    ("SQ", "Singapore Airlines"),
    ("TK", "Turkish Airlines"),
    ("TP", "TAP Air Portugal"),
    ("UA", "United Airlines"),
    ("U2", "easyJet"),
    ("VS", "Virgin Atlantic"),
    ("WN", "Southwest Airlines"),
    ("WS", "WestJet"),
)

DEFAULT_AIRLINES: tuple[Airline, ...] = tuple(
    Airline(id=code.lower(), name=name, iata_code=code) for code, name in _DEFAULT_ROWS
)


def build_catalog(airlines: Iterable[Airline]) -> tuple[Airline, ...]:
    """Validate and freeze a catalog.

    Ids must be unique and IATA codes 2-3 upper-case letters/digits. Size is
    not checked here; question generation reports a catalog that is too small.
    """

    out: list[Airline] = []
    seen: set[str] = set()
    for airline in airlines:
        if airline.id == "":
            raise CatalogFormatError("airline id must not be empty")
        if airline.id in seen:
            raise CatalogFormatError(f"duplicate airline id: {airline.id!r}")
        if not _IATA_RE.match(airline.iata_code):
            raise CatalogFormatError(
                f"airline {airline.id!r} has invalid IATA code {airline.iata_code!r}"
            )
        seen.add(airline.id)
        out.append(airline)
    return tuple(out)


def catalog_from_records(records: object) -> tuple[Airline, ...]:
    """Build a catalog from decoded JSON: a list of ``{id, name, iataCode}`` objects."""

    if not isinstance(records, list):
        raise CatalogFormatError("catalog must be a JSON list of airline objects")

    airlines: list[Airline] = []
    for idx, item in enumerate(records):
        if not isinstance(item, dict):
            raise CatalogFormatError(f"catalog entry {idx} is not an object")
        code = item.get("iataCode", item.get("iata_code"))
        airline_id = item.get("id")
        name = item.get("name")
        if not isinstance(code, str) or not isinstance(name, str) or airline_id is None:
            raise CatalogFormatError(f"catalog entry {idx} needs id, name and iataCode")
        airlines.append(
            Airline(id=str(airline_id).strip(), name=name.strip(), iata_code=code.strip().upper())
        )
    return build_catalog(airlines)


def load_catalog(path: Path) -> tuple[Airline, ...]:
    try:
        records = json.loads(path.read_text(encoding="utf-8"))
    except (ValueError, OSError) as e:
        raise CatalogFormatError(f"could not read catalog {path}: {e}") from e
    catalog = catalog_from_records(records)
    logger.info("Loaded %d airlines from %s", len(catalog), path)
    return catalog


def catalog_from_env() -> tuple[Airline, ...]:
    explicit = os.environ.get(CATALOG_PATH_ENV, "").strip()
    if explicit:
        return load_catalog(Path(explicit).expanduser())
    return DEFAULT_AIRLINES
