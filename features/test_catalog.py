"""Catalog loading and exhaustiveness tests."""

import json

import pytest

from core.errors import ConfigurationError
from features.catalog import (
    DEFAULT_DESCRIPTIONS, DEFAULT_TITLES, GENRES, FeatureCatalog, Genre, default_catalog,
)


def test_default_catalog_covers_every_genre(catalog):
    assert len(catalog.genres) == 8
    for genre in Genre:
        assert catalog.titles[genre]
        assert catalog.descriptions[genre]
    assert catalog.age_range == (18, 80)
    assert catalog.income_range == (20000, 150000)
    assert catalog.year_range == (1900, 2025)


def test_missing_genre_is_a_configuration_error():
    titles = dict(DEFAULT_TITLES)
    del titles[Genre.ROMANCE]
    with pytest.raises(ConfigurationError, match="Romance"):
        FeatureCatalog(titles=titles)


def test_empty_label_set_and_range_rejected():
    with pytest.raises(ConfigurationError):
        FeatureCatalog(states=())
    with pytest.raises(ConfigurationError):
        FeatureCatalog(age_range=(80, 18))


def test_genre_parse_accepts_name_or_label():
    assert Genre.parse("SCIENCE_FICTION") is Genre.SCIENCE_FICTION
    assert Genre.parse("Science Fiction") is Genre.SCIENCE_FICTION
    with pytest.raises(ConfigurationError):
        Genre.parse("Poetry")
    assert GENRES.index(Genre.SCIENCE) == 7


def test_catalog_from_json(tmp_path):
    data = {
        "titles": {g.label: list(DEFAULT_TITLES[g][:2]) for g in Genre},
        "descriptions": {g.name: list(DEFAULT_DESCRIPTIONS[g]) for g in Genre},
        "user_ids": ["alice", "bob", "carol"],
        "year_range": [1950, 2020],
    }
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(data), encoding="utf-8")

    catalog = FeatureCatalog.from_json(path)
    assert catalog.titles[Genre.FANTASY] == DEFAULT_TITLES[Genre.FANTASY][:2]
    assert catalog.user_ids == ("alice", "bob", "carol")
    assert catalog.year_range == (1950, 2020)
    assert catalog.states == default_catalog().states
