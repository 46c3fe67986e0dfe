"""
Feature catalog: label sets and numeric ranges the generator draws from.

Genres are a closed enum. Every per-genre table (titles, descriptions) must
cover all of them; a missing genre is a ConfigurationError at load time, not
a KeyError halfway through a batch.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from core.errors import ConfigurationError


class Genre(Enum):
    FICTION = "Fiction"
    MYSTERY = "Mystery"
    SCIENCE_FICTION = "Science Fiction"
    FANTASY = "Fantasy"
    ROMANCE = "Romance"
    HISTORY = "History"
    BIOGRAPHY = "Biography"
    SCIENCE = "Science"

    @property
    def label(self) -> str:
        return self.value

    @staticmethod
    def parse(key: str) -> "Genre":
        """Accept either the enum name or the display label."""
        for genre in Genre:
            if key in (genre.name, genre.value):
                return genre
        raise ConfigurationError(f"Unknown genre {key!r}")


GENRES: tuple[Genre, ...] = tuple(Genre)


DEFAULT_TITLES = {
    Genre.FICTION: ("The Quiet Harbor", "A House of Small Lights",
                    "Letters to the River", "The Last Summer Road"),
    Genre.MYSTERY: ("The Locked Library", "Murder at Gray Pines",
                    "The Vanishing Ledger", "Silent Witness"),
    Genre.SCIENCE_FICTION: ("Orbit of Ash", "The Entangled Fleet",
                            "Signals from Kepler", "The Last Colony Ship"),
    Genre.FANTASY: ("The Ember Crown", "Song of the Hollow Wood",
                    "The Dragon's Ledger", "Gate of Nine Winds"),
    Genre.ROMANCE: ("Autumn in Lisbon", "The Summer Arrangement",
                    "Letters Never Sent", "A Season of Second Chances"),
    Genre.HISTORY: ("Empires of Salt", "The Long Winter of 1816",
                    "Roads to Rome", "The Silk Merchants"),
    Genre.BIOGRAPHY: ("A Life in Equations", "The Reluctant General",
                      "Voice of the Century", "Portrait of an Inventor"),
    Genre.SCIENCE: ("The Shape of Chance", "Inside the Quantum World",
                    "A Brief History of Measurement", "The Living Cell"),
}

DEFAULT_DESCRIPTIONS = {
    Genre.FICTION: ("A family story told across three generations.",
                    "An unlikely friendship tested by a single summer.",
                    "A quiet novel about leaving home and coming back.",
                    "Small-town lives braided around one old house."),
    Genre.MYSTERY: ("A detective races to solve a murder before the next one.",
                    "An archivist uncovers a crime hidden in old records.",
                    "Everyone at the lodge has a motive and an alibi.",
                    "A cold case reopens when a letter arrives decades late."),
    Genre.SCIENCE_FICTION: ("A crew wakes early on a generation ship.",
                            "First contact arrives as a mathematical proof.",
                            "A colony fights to survive on a tidally locked world.",
                            "An AI negotiates peace between two fleets."),
    Genre.FANTASY: ("A young mage inherits a crown nobody wants.",
                    "An ancient forest bargains with the last of its wardens.",
                    "A thief steals a dragon's ledger of debts.",
                    "Nine gates, nine winds and one map that lies."),
    Genre.ROMANCE: ("Two rivals are forced to share a bookshop.",
                    "A summer wedding reunites old flames.",
                    "Letters found in an attic rekindle a lost romance.",
                    "A chef and a critic fall for each other slowly."),
    Genre.HISTORY: ("How salt built and broke empires.",
                    "The year without a summer and its consequences.",
                    "The engineering behind Rome's roads.",
                    "Traders who connected continents along the silk routes."),
    Genre.BIOGRAPHY: ("The life of a mathematician who changed statistics.",
                      "A general who never wanted to command.",
                      "The singer whose voice defined an era.",
                      "An inventor's triumphs and failures."),
    Genre.SCIENCE: ("An accessible tour of probability and randomness.",
                    "Quantum mechanics explained without equations.",
                    "How humans learned to measure the world.",
                    "Inside the machinery of living cells."),
}

DEFAULT_USER_IDS = tuple(f"user-{i:03d}" for i in range(1, 17))
DEFAULT_STATES = ("draft", "review", "published", "archived")
DEFAULT_REGIONS = ("north", "south", "east", "west")


def _require_every_genre(table: Mapping, name: str) -> MappingProxyType:
    missing = [genre.label for genre in Genre if not table.get(genre)]
    if missing:
        raise ConfigurationError(f"{name} missing entries for: {', '.join(missing)}")
    return MappingProxyType({genre: tuple(table[genre]) for genre in Genre})


def _require_range(rng: tuple, name: str) -> tuple:
    lo, hi = rng
    if not hi > lo:
        raise ConfigurationError(f"{name} range {rng} is empty")
    return (lo, hi)


@dataclass(frozen=True)
class FeatureCatalog:
    """Read-only label sets and numeric ranges. Load once, share freely."""
    titles: Mapping[Genre, tuple[str, ...]] = field(default_factory=lambda: DEFAULT_TITLES)
    descriptions: Mapping[Genre, tuple[str, ...]] = field(
        default_factory=lambda: DEFAULT_DESCRIPTIONS)
    user_ids: tuple[str, ...] = DEFAULT_USER_IDS
    states: tuple[str, ...] = DEFAULT_STATES
    regions: tuple[str, ...] = DEFAULT_REGIONS
    age_range: tuple[int, int] = (18, 80)
    income_range: tuple[int, int] = (20000, 150000)
    year_range: tuple[int, int] = (1900, 2025)

    def __post_init__(self):
        object.__setattr__(self, "titles", _require_every_genre(self.titles, "titles"))
        object.__setattr__(self, "descriptions",
                           _require_every_genre(self.descriptions, "descriptions"))
        for name in ("user_ids", "states", "regions"):
            values = tuple(getattr(self, name))
            if not values:
                raise ConfigurationError(f"{name} must not be empty")
            object.__setattr__(self, name, values)
        for name in ("age_range", "income_range", "year_range"):
            object.__setattr__(self, name, _require_range(tuple(getattr(self, name)), name))

    @property
    def genres(self) -> tuple[Genre, ...]:
        return GENRES

    @staticmethod
    def from_dict(d: dict) -> "FeatureCatalog":
        kwargs = {}
        for key in ("titles", "descriptions"):
            if key in d:
                kwargs[key] = {Genre.parse(k): tuple(v) for k, v in d[key].items()}
        for key in ("user_ids", "states", "regions"):
            if key in d:
                kwargs[key] = tuple(d[key])
        for key in ("age_range", "income_range", "year_range"):
            if key in d:
                kwargs[key] = tuple(d[key])
        return FeatureCatalog(**kwargs)

    @staticmethod
    def from_json(path: str | Path) -> "FeatureCatalog":
        with open(path, "r", encoding="utf-8") as fh:
            return FeatureCatalog.from_dict(json.load(fh))


def default_catalog() -> FeatureCatalog:
    return FeatureCatalog()
