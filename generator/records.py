"""
Records: one fully populated sample per call.

Features are sampled strictly in dependency order. A correlated feature's
circuit is built only after its source has been measured:

    book:   genre → (title, description)   creator → updater
    person: age → income
"""

from dataclasses import dataclass

from core.sampler import RandomSource
from features.catalog import FeatureCatalog, Genre
from generator.config import GeneratorConfig, RecordType
from generator.feature_sampler import FeatureSampler


@dataclass(frozen=True)
class BookRecord:
    id: str
    title: str
    isbn: str
    published_year: int
    genre: Genre
    description: str
    state: str
    creator_id: str
    updater_id: str

    def to_dict(self) -> dict:
        """Wire format. Field names are a contract for downstream tooling."""
        return {
            "id": self.id,
            "title": self.title,
            "isbn": self.isbn,
            "publishedYear": self.published_year,
            "genre": self.genre.label,
            "description": self.description,
            "state": self.state,
            "creatorId": self.creator_id,
            "updaterId": self.updater_id,
        }

    @staticmethod
    def from_dict(d: dict) -> "BookRecord":
        return BookRecord(
            id=d["id"],
            title=d["title"],
            isbn=d["isbn"],
            published_year=int(d["publishedYear"]),
            genre=Genre.parse(d["genre"]),
            description=d["description"],
            state=d["state"],
            creator_id=d["creatorId"],
            updater_id=d["updaterId"],
        )


@dataclass(frozen=True)
class PersonRecord:
    id: str
    age: int
    income: int
    region: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "age": self.age,
            "income": self.income,
            "region": self.region,
        }

    @staticmethod
    def from_dict(d: dict) -> "PersonRecord":
        return PersonRecord(id=d["id"], age=int(d["age"]),
                            income=int(d["income"]), region=d["region"])


Sample = BookRecord | PersonRecord


def generate_book(source: RandomSource, features: FeatureSampler) -> BookRecord:
    record_id = features.identifier(source)
    genre = features.genre(source)
    title, description = features.content(source, genre)
    isbn = features.isbn(source)
    year = features.published_year(source)
    state = features.state(source)
    creator = features.creator_index(source)
    updater = features.updater_index(source, creator)
    user_ids = features.catalog.user_ids
    return BookRecord(
        id=record_id,
        title=title,
        isbn=isbn,
        published_year=year,
        genre=genre,
        description=description,
        state=state,
        creator_id=user_ids[creator],
        updater_id=user_ids[updater],
    )


def generate_person(source: RandomSource, features: FeatureSampler) -> PersonRecord:
    record_id = features.identifier(source)
    age = features.age(source)
    income = features.income(source, age)
    region = features.region(source)
    return PersonRecord(id=record_id, age=age, income=income, region=region)


def generate_sample(source: RandomSource, catalog: FeatureCatalog,
                    config: GeneratorConfig,
                    features: FeatureSampler | None = None) -> Sample:
    """One typed record. Pass `features` to reuse compiled circuits across calls."""
    if features is None:
        features = FeatureSampler(catalog, config)
    if config.record_type is RecordType.PERSON:
        return generate_person(source, features)
    return generate_book(source, features)
