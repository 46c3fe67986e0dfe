"""
Generator configuration: weights, coupling strengths, register widths.

Everything is validated before the first circuit runs. A config that does
not fit the catalog (wrong number of weights, weights not summing to 1)
raises ConfigurationError from `validate`.
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum

from core.categorical import qubits_for, validate_weights
from core.errors import ConfigurationError
from core.quantum_vm import MAX_QUBITS
from features.catalog import FeatureCatalog, Genre


class RecordType(Enum):
    BOOK = "book"
    PERSON = "person"


@dataclass(frozen=True)
class GeneratorConfig:
    record_type: RecordType = RecordType.BOOK

    # Categorical weights, in catalog order
    genre_weights: tuple[float, ...] = (0.20, 0.15, 0.12, 0.13, 0.14, 0.09, 0.08, 0.09)
    state_weights: tuple[float, ...] = (0.10, 0.10, 0.70, 0.10)
    region_weights: tuple[float, ...] = (0.25, 0.25, 0.25, 0.25)

    # Couplings (0 = independent, 1 = strongest bias)
    age_income_strength: float = 0.8
    genre_title_strength: float = 0.5
    genre_description_strength: float = 0.5
    title_description_strength: float = 0.6
    genre_description_entangle: bool = True
    updater_noise: float = 0.1  # per-bit flip probability of updater vs creator

    # Register widths
    age_bits: int = 8
    income_bits: int = 8
    year_bits: int = 10

    # Shaping
    age_mean: float = 42.0
    age_std: float = 14.0
    income_scale: float = 35000.0
    year_scale: float = 30.0
    isbn_prefix: str = "978"

    def __post_init__(self):
        if isinstance(self.record_type, str):
            object.__setattr__(self, "record_type", RecordType(self.record_type))
        for name in ("genre_weights", "state_weights", "region_weights"):
            object.__setattr__(self, name, tuple(float(w) for w in getattr(self, name)))
            validate_weights(getattr(self, name), name)
        for name in ("age_income_strength", "genre_title_strength",
                     "genre_description_strength", "title_description_strength",
                     "updater_noise"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{name}={value} outside [0, 1]")
        for name in ("age_bits", "income_bits", "year_bits"):
            bits = getattr(self, name)
            # one extra qubit is used for the encoding side of a coupling
            if not 1 <= bits < MAX_QUBITS:
                raise ConfigurationError(f"{name}={bits} outside [1, {MAX_QUBITS - 1}]")
        if self.age_std <= 0 or self.income_scale <= 0 or self.year_scale <= 0:
            raise ConfigurationError("Shaping scales must be positive")
        if len(self.isbn_prefix) != 3 or not self.isbn_prefix.isdigit():
            raise ConfigurationError(f"isbn_prefix must be 3 digits, got {self.isbn_prefix!r}")

    def validate(self, catalog: FeatureCatalog) -> "GeneratorConfig":
        """Check the config against the catalog before anything is sampled.

        Weight vectors must line up with the catalog's label sets, and every
        feature register the catalog implies must fit in MAX_QUBITS.
        """
        expected = {
            "genre_weights": len(Genre),
            "state_weights": len(catalog.states),
            "region_weights": len(catalog.regions),
        }
        for name, n in expected.items():
            if len(getattr(self, name)) != n:
                raise ConfigurationError(
                    f"{name} has {len(getattr(self, name))} entries, catalog has {n} labels"
                )
        for name, width in self.register_widths(catalog).items():
            if width > MAX_QUBITS:
                raise ConfigurationError(
                    f"{name} register needs {width} qubits, limit is {MAX_QUBITS}"
                )
        return self

    def register_widths(self, catalog: FeatureCatalog) -> dict[str, int]:
        """Qubits each feature circuit needs for `catalog`."""
        user_bits = qubits_for(len(catalog.user_ids))
        widths = {
            "age": self.age_bits,
            "income": self.income_bits + 1,
            "published_year": self.year_bits,
            "creator": user_bits,
        }
        if self.record_type is RecordType.BOOK:
            widths["updater"] = 2 * user_bits
            for genre in Genre:
                widths[f"content[{genre.name}]"] = (
                    qubits_for(len(Genre))
                    + qubits_for(len(catalog.titles[genre]))
                    + qubits_for(len(catalog.descriptions[genre]))
                )
        return widths

    def to_dict(self) -> dict:
        d = asdict(self)
        d["record_type"] = self.record_type.value
        return d

    @staticmethod
    def from_dict(d: dict) -> "GeneratorConfig":
        known = {f.name for f in fields(GeneratorConfig)}
        unknown = set(d) - known
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {sorted(unknown)}")
        return GeneratorConfig(**d)
