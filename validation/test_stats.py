"""
Distribution validator tests. Inputs are constructed so that each verdict
is known in advance; only the trend check runs on generated records.
"""

import numpy as np
import pytest

from core.sampler import RandomSource
from generator.batch import generate_batch
from validation.stats import DistributionValidator

WEIGHTS = [0.20, 0.15, 0.12, 0.13, 0.14, 0.09, 0.08, 0.09]


def exact_sample(weights, n):
    """Category indices whose counts are exactly weights * n."""
    counts = np.rint(np.asarray(weights) * n).astype(int)
    return np.repeat(np.arange(len(weights)), counts)


@pytest.fixture
def validator():
    return DistributionValidator()


def test_chi_squared_accepts_matching_counts(validator):
    result = validator.chi_squared_test(exact_sample(WEIGHTS, 1000), WEIGHTS, "genre")
    assert result.passed
    assert result.statistic == pytest.approx(0.0)
    assert result.test_name == "chi_squared_genre"


def test_chi_squared_rejects_skewed_counts(validator):
    result = validator.chi_squared_test([0] * 1000, WEIGHTS)
    assert not result.passed
    assert result.p_value < validator.significance


def test_chi_squared_skips_tiny_samples(validator):
    result = validator.chi_squared_test([1, 2, 3], WEIGHTS)
    assert result.passed
    assert "Too few" in result.detail


def test_chi_squared_pools_sparse_bins(validator):
    weights = [0.49, 0.49, 0.01, 0.01]
    result = validator.chi_squared_test(exact_sample(weights, 200), weights)
    assert result.passed
    assert result.detail.startswith("dof=2")


def test_tolerance(validator):
    assert validator.tolerance_test(exact_sample(WEIGHTS, 1000), WEIGHTS).passed
    skewed = validator.tolerance_test(exact_sample([0.25, 0.1, 0.12, 0.13, 0.14, 0.09, 0.08, 0.09],
                                                   1000), WEIGHTS)
    assert not skewed.passed
    assert skewed.statistic == pytest.approx(0.05)


def test_trend(validator):
    ages = list(range(18, 80))
    assert validator.trend_test(ages, [a * 1000 + (a % 3) for a in ages]).passed
    assert not validator.trend_test(ages, [-a for a in ages]).passed
    assert not validator.trend_test(ages, [5] * len(ages)).passed
    assert not validator.trend_test(ages[:5], ages[:5]).passed


def test_independence(validator):
    assert not validator.independence_test(list(range(100))).passed
    assert not validator.independence_test([1.0, -1.0] * 50).passed
    constant = validator.independence_test([7] * 50)
    assert not constant.passed and "identical" in constant.detail
    assert validator.independence_test([1, 2, 3]).passed


def test_checksum(validator):
    assert validator.checksum_test(["9780306406157", "9781234567897"]).passed
    bad = validator.checksum_test(["9780306406157", "9780306406158"])
    assert not bad.passed
    assert bad.statistic == 1.0
    assert "first=9780306406158" in bad.detail


def test_people_batch_shows_age_income_trend(validator, catalog, person_config, source):
    samples = generate_batch(300, source, catalog, person_config).samples

    _, results = validator.batch_verdict(samples, catalog, person_config)
    by_name = {r.test_name: r for r in results}
    assert set(by_name) == {"chi_squared_region", "independence_income", "trend_age_income"}
    assert by_name["trend_age_income"].passed
    assert by_name["trend_age_income"].statistic > 0.15


def test_small_book_batch_skips_tolerance(validator, catalog, book_config):
    samples = generate_batch(20, RandomSource(8), catalog, book_config).samples
    _, results = validator.batch_verdict(samples, catalog, book_config)
    names = [r.test_name for r in results]
    assert "tolerance_genre" not in names
    assert "isbn_checksum" in names
    assert next(r for r in results if r.test_name == "isbn_checksum").passed
