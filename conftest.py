"""Pytest configuration and shared fixtures."""

import pytest

from core.sampler import RandomSource
from features.catalog import default_catalog
from generator.config import GeneratorConfig, RecordType


@pytest.fixture
def source():
    """A fixed-seed random source."""
    return RandomSource(42)


@pytest.fixture(scope="session")
def catalog():
    return default_catalog()


@pytest.fixture
def book_config():
    return GeneratorConfig(record_type=RecordType.BOOK)


@pytest.fixture
def person_config():
    return GeneratorConfig(record_type=RecordType.PERSON)
