"""
Feature circuits: one small register per feature group.

Each method builds (or reuses) a circuit, runs it on a fresh register,
measures, and maps the raw integer through the Feature Mapper. Dependent
features take the already-sampled source value as an argument, so their
circuits are only built after the source has been measured.

Register layouts (qubit 0 first):

    income       [enc | income bits]
    content      [genre bits (3) | title bits | description bits]
    updater      [creator bits | updater bits]
"""

import math
import uuid

import numpy as np

from core.categorical import CategoricalSampler, qubits_for
from core.circuit import Circuit, CircuitExecutor
from core.correlation import Coupling, CorrelationEncoder, Encoding, Wiring
from core.sampler import RandomSource
from features import mapper
from features.catalog import GENRES, FeatureCatalog, Genre
from generator.config import GeneratorConfig

GENRE_BITS = qubits_for(len(GENRES))


class FeatureSampler:
    """Samples individual features for one catalog + config pair."""

    def __init__(self, catalog: FeatureCatalog, config: GeneratorConfig,
                 executor: CircuitExecutor | None = None):
        config.validate(catalog)
        self.catalog = catalog
        self.config = config
        self.executor = executor or CircuitExecutor()
        self.encoder = CorrelationEncoder()

        self.genres = CategoricalSampler(config.genre_weights, "genre", self.executor)
        self.states = CategoricalSampler(config.state_weights, "state", self.executor)
        self.regions = CategoricalSampler(config.region_weights, "region", self.executor)
        n_users = len(catalog.user_ids)
        self.creators = CategoricalSampler(np.full(n_users, 1.0 / n_users), "creator",
                                           self.executor)
        self.isbn_digit = CategoricalSampler(np.full(10, 0.1), "isbn_digit", self.executor)

        self.age_circuit = self._uniform_circuit(config.age_bits, "age")
        self.year_circuit = self._uniform_circuit(config.year_bits, "published_year")

    @staticmethod
    def _uniform_circuit(n_bits: int, name: str) -> Circuit:
        circuit = Circuit(n_bits, name=name)
        for q in range(n_bits):
            circuit.h(q)
        return circuit

    # ── Independent features ────────────────────────────────────────

    def identifier(self, source: RandomSource) -> str:
        return str(uuid.UUID(int=source.next_bits(128), version=4))

    def genre(self, source: RandomSource) -> Genre:
        return GENRES[self.genres.sample(source)]

    def state(self, source: RandomSource) -> str:
        return self.catalog.states[self.states.sample(source)]

    def region(self, source: RandomSource) -> str:
        return self.catalog.regions[self.regions.sample(source)]

    def creator_index(self, source: RandomSource) -> int:
        return self.creators.sample(source)

    def isbn(self, source: RandomSource) -> str:
        digits = [int(d) for d in self.config.isbn_prefix]
        digits += [self.isbn_digit.sample(source) for _ in range(12 - len(digits))]
        return mapper.isbn13(digits)

    def published_year(self, source: RandomSource) -> int:
        """Skewed towards recent years: exponential in years-before-latest."""
        lo, hi = self.catalog.year_range
        raw = self.executor.sample(self.year_circuit, source).value
        u = mapper.unit_interval(raw, self.config.year_bits)
        years_ago = mapper.exponential_shape(u, self.config.year_scale, 0.0, 0, hi - lo)
        return int(hi - round(years_ago))

    def age(self, source: RandomSource) -> int:
        lo, hi = self.catalog.age_range
        raw = self.executor.sample(self.age_circuit, source).value
        u = mapper.unit_interval(raw, self.config.age_bits)
        return mapper.box_muller_like(u, self.config.age_mean, self.config.age_std, lo, hi)

    # ── Correlated features ─────────────────────────────────────────

    def income_circuit(self, age: int) -> Circuit:
        """Income bits start in |+⟩ and lean towards 1 as age grows."""
        n = self.config.income_bits
        coupling = Coupling(
            source_range=self.catalog.age_range,
            strength=self.config.age_income_strength,
            encoding=Encoding.ROTATION,
            wiring=Wiring.FAN_OUT,
        )
        income_qubits = tuple(range(1, n + 1))
        circuit = Circuit(n + 1, name=f"income[age={age}]")
        for q in income_qubits:
            circuit.ry(q, math.pi / 2)
        circuit.extend(self.encoder.encode(coupling, age, (0,), income_qubits))
        return circuit

    def _income_value(self, raw: int) -> int:
        lo, hi = self.catalog.income_range
        u = mapper.unit_interval(raw, self.config.income_bits)
        return int(round(mapper.exponential_shape(u, self.config.income_scale, lo, lo, hi)))

    def income(self, source: RandomSource, age: int) -> int:
        n = self.config.income_bits
        outcome = self.executor.sample(self.income_circuit(age), source,
                                       qubits=tuple(range(1, n + 1)))
        return self._income_value(outcome.value)

    def expected_income(self, age: int) -> float:
        """Exact E[income | age] from the marginal, no sampling."""
        n = self.config.income_bits
        vm = self.executor.run(self.income_circuit(age)).vm
        probs = self.executor.sampler.marginal(vm, tuple(range(1, n + 1)))
        values = np.array([self._income_value(raw) for raw in range(2 ** n)], dtype=float)
        return float(np.dot(probs, values))

    def content_circuit(self, genre: Genre) -> Circuit:
        """Genre → title and description, title → description.

        The title register is measured mid-circuit; description qubits are
        then rotated under control of the collapsed title bits and the still
        loaded genre bits.
        """
        genre_index = GENRES.index(genre)
        n_titles = len(self.catalog.titles[genre])
        n_descriptions = len(self.catalog.descriptions[genre])
        t_bits = qubits_for(n_titles)
        d_bits = qubits_for(n_descriptions)

        genre_qubits = tuple(range(GENRE_BITS))
        title_qubits = tuple(range(GENRE_BITS, GENRE_BITS + t_bits))
        desc_qubits = tuple(range(GENRE_BITS + t_bits, GENRE_BITS + t_bits + d_bits))
        genre_range = (0, len(GENRES) - 1)

        circuit = Circuit(GENRE_BITS + t_bits + d_bits, name=f"content[{genre.name}]")
        for q in title_qubits + desc_qubits:
            circuit.h(q)

        genre_title = Coupling(genre_range, self.config.genre_title_strength,
                               Encoding.BITS, Wiring.PAIRWISE)
        circuit.extend(self.encoder.encode(genre_title, genre_index, genre_qubits, title_qubits))
        circuit.measure(title_qubits, "title")

        title_desc = Coupling((0, max(1, 2 ** t_bits - 1)),
                              self.config.title_description_strength,
                              Encoding.BITS, Wiring.PAIRWISE)
        circuit.extend(self.encoder.couple(title_desc, title_qubits, desc_qubits))

        genre_desc = Coupling(genre_range, self.config.genre_description_strength,
                              Encoding.BITS, Wiring.PAIRWISE,
                              entangle=self.config.genre_description_entangle)
        circuit.extend(self.encoder.couple(genre_desc, genre_qubits, desc_qubits,
                                           value=genre_index))
        return circuit

    def content(self, source: RandomSource, genre: Genre) -> tuple[str, str]:
        titles = self.catalog.titles[genre]
        descriptions = self.catalog.descriptions[genre]
        circuit = self.content_circuit(genre)
        t_bits = qubits_for(len(titles))
        d_bits = qubits_for(len(descriptions))
        desc_qubits = tuple(range(GENRE_BITS + t_bits, GENRE_BITS + t_bits + d_bits))

        outcome = self.executor.sample(circuit, source, qubits=desc_qubits)
        title_raw = outcome.mid["title"].value
        title = titles[mapper.linear_range(title_raw, 0, len(titles) - 1)]
        description = descriptions[mapper.linear_range(outcome.value, 0, len(descriptions) - 1)]
        return title, description

    def updater_circuit(self, creator_index: int) -> Circuit:
        """Updater = creator with each bit flipped with probability updater_noise."""
        n_users = len(self.catalog.user_ids)
        bits = qubits_for(n_users)
        creator_qubits = tuple(range(bits))
        updater_qubits = tuple(range(bits, 2 * bits))

        circuit = Circuit(2 * bits, name=f"updater[creator={creator_index}]")
        noise = 2 * math.asin(math.sqrt(self.config.updater_noise))
        if noise > 0.0:
            for q in updater_qubits:
                circuit.ry(q, noise)
        coupling = Coupling((0, max(1, n_users - 1)), strength=0.0,
                            encoding=Encoding.BITS, wiring=Wiring.PAIRWISE, entangle=True)
        circuit.extend(self.encoder.encode(coupling, creator_index, creator_qubits,
                                           updater_qubits))
        return circuit

    def updater_index(self, source: RandomSource, creator_index: int) -> int:
        n_users = len(self.catalog.user_ids)
        bits = qubits_for(n_users)
        outcome = self.executor.sample(self.updater_circuit(creator_index), source,
                                       qubits=tuple(range(bits, 2 * bits)))
        return mapper.linear_range(outcome.value, 0, n_users - 1)
