"""
Stats: do generated batches have the distributions they were configured with?

Tests:
  1. Chi-squared goodness-of-fit of categorical features against weights
  2. Tolerance test: every category frequency within ±tol of its weight
  3. Trend test: Spearman rank correlation for coupled pairs (age → income)
  4. Independence test: consecutive samples should not be autocorrelated
  5. Checksum test: every ISBN-13 satisfies its check digit
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy import stats as scipy_stats

from features.catalog import GENRES, FeatureCatalog
from features.mapper import is_valid_isbn13
from generator.config import GeneratorConfig
from generator.records import BookRecord, PersonRecord

logger = logging.getLogger(__name__)


@dataclass
class StatisticalTestResult:
    """Result of a statistical validity test."""
    test_name: str
    passed: bool
    statistic: float
    p_value: float
    threshold: float
    detail: str = ""


class DistributionValidator:
    """Checks sampled features against their configured distributions."""

    def __init__(self, significance: float = 0.01, tolerance: float = 0.02,
                 min_tolerance_samples: int = 2000):
        self.significance = significance  # p-value threshold
        self.tolerance = tolerance        # max |frequency - weight|
        self.min_tolerance_samples = min_tolerance_samples

    def chi_squared_test(self, observed: Sequence[int], weights: Sequence[float],
                         name: str = "categorical") -> StatisticalTestResult:
        """Goodness-of-fit of category indices against their weights."""
        weights = np.asarray(weights, dtype=float)
        counts = np.bincount(np.asarray(observed, dtype=int),
                             minlength=len(weights)).astype(float)
        expected = weights * counts.sum()

        # Only test bins with expected count >= 5 (chi-squared requirement)
        mask = expected >= 5
        if mask.sum() < 2:
            return StatisticalTestResult(
                test_name=f"chi_squared_{name}",
                passed=True,
                statistic=0.0,
                p_value=1.0,
                threshold=self.significance,
                detail="Too few samples for chi-squared test",
            )
        # Mass outside the tested bins is pooled into one extra bin
        obs = np.append(counts[mask], counts[~mask].sum())
        exp = np.append(expected[mask], expected[~mask].sum())
        if exp[-1] == 0:
            obs, exp = obs[:-1], exp[:-1]

        chi2_stat = float(np.sum((obs - exp) ** 2 / exp))
        dof = len(obs) - 1
        p_value = float(scipy_stats.chi2.sf(chi2_stat, dof))

        return StatisticalTestResult(
            test_name=f"chi_squared_{name}",
            passed=p_value >= self.significance,
            statistic=chi2_stat,
            p_value=p_value,
            threshold=self.significance,
            detail=f"dof={dof}, n={int(counts.sum())}",
        )

    def tolerance_test(self, observed: Sequence[int], weights: Sequence[float],
                       name: str = "categorical") -> StatisticalTestResult:
        """Largest absolute gap between observed frequency and weight."""
        weights = np.asarray(weights, dtype=float)
        counts = np.bincount(np.asarray(observed, dtype=int), minlength=len(weights))
        n = counts.sum()
        freqs = counts / n if n else np.zeros(len(weights))
        gap = float(np.max(np.abs(freqs - weights)))
        return StatisticalTestResult(
            test_name=f"tolerance_{name}",
            passed=gap <= self.tolerance,
            statistic=gap,
            p_value=float("nan"),  # Not a p-value test
            threshold=self.tolerance,
            detail=f"max_gap={gap:.4f}, n={int(n)}",
        )

    def trend_test(self, source: Sequence[float], target: Sequence[float],
                   name: str = "trend") -> StatisticalTestResult:
        """Positive rank correlation between a source feature and its target."""
        if len(source) < 10 or np.std(source) == 0 or np.std(target) == 0:
            return StatisticalTestResult(
                test_name=name,
                passed=False,
                statistic=0.0,
                p_value=1.0,
                threshold=self.significance,
                detail="Too few or constant values for a trend test",
            )
        rho, p_value = scipy_stats.spearmanr(source, target)
        return StatisticalTestResult(
            test_name=name,
            passed=bool(rho > 0 and p_value < self.significance),
            statistic=float(rho),
            p_value=float(p_value),
            threshold=self.significance,
            detail=f"spearman_rho={rho:.4f}",
        )

    def independence_test(self, values: Sequence[float],
                          name: str = "independence") -> StatisticalTestResult:
        """Lag-1 autocorrelation of consecutive samples.

        Each sample runs on its own random sub-stream, so sequential values
        should be uncorrelated.
        """
        if len(values) < 20:
            return StatisticalTestResult(
                test_name=name,
                passed=True,
                statistic=0.0,
                p_value=1.0,
                threshold=self.significance,
                detail="Too few samples for autocorrelation test",
            )

        values = np.asarray(values, dtype=float)
        if values.std() == 0:
            return StatisticalTestResult(
                test_name=name,
                passed=False,
                statistic=1.0,
                p_value=0.0,
                threshold=self.significance,
                detail="All values identical, not independent",
            )

        norm = (values - values.mean()) / values.std()

        # Lag-1 autocorrelation
        n = len(norm)
        autocorr = np.sum(norm[:-1] * norm[1:]) / (n - 1)

        # Under independence, autocorrelation ~ N(0, 1/n)
        z_stat = autocorr * np.sqrt(n)
        p_value = float(2 * (1 - scipy_stats.norm.cdf(abs(z_stat))))

        return StatisticalTestResult(
            test_name=name,
            passed=p_value >= self.significance,
            statistic=float(autocorr),
            p_value=p_value,
            threshold=self.significance,
            detail=f"lag1_autocorr={autocorr:.4f}, z={z_stat:.2f}",
        )

    def checksum_test(self, codes: Sequence[str]) -> StatisticalTestResult:
        bad = [c for c in codes if not is_valid_isbn13(c)]
        return StatisticalTestResult(
            test_name="isbn_checksum",
            passed=not bad,
            statistic=float(len(bad)),
            p_value=float("nan"),
            threshold=0.0,
            detail=f"invalid={len(bad)}/{len(codes)}" + (f", first={bad[0]}" if bad else ""),
        )

    # ── Whole-batch reports ─────────────────────────────────────────

    def validate_books(self, samples: Sequence[BookRecord], catalog: FeatureCatalog,
                       config: GeneratorConfig) -> list[StatisticalTestResult]:
        genres = [GENRES.index(s.genre) for s in samples]
        states = [catalog.states.index(s.state) for s in samples]
        results = [
            self.chi_squared_test(genres, config.genre_weights, "genre"),
            self.chi_squared_test(states, config.state_weights, "state"),
            self.checksum_test([s.isbn for s in samples]),
            self.independence_test([s.published_year for s in samples],
                                   "independence_published_year"),
        ]
        # ±tolerance is only meaningful once sampling error is well below it
        if len(samples) >= self.min_tolerance_samples:
            results.append(self.tolerance_test(genres, config.genre_weights, "genre"))
        return results

    def validate_people(self, samples: Sequence[PersonRecord], catalog: FeatureCatalog,
                        config: GeneratorConfig) -> list[StatisticalTestResult]:
        regions = [catalog.regions.index(s.region) for s in samples]
        results = [
            self.chi_squared_test(regions, config.region_weights, "region"),
            self.independence_test([s.income for s in samples], "independence_income"),
        ]
        if config.age_income_strength > 0:
            results.append(self.trend_test([s.age for s in samples],
                                           [s.income for s in samples], "trend_age_income"))
        return results

    def batch_verdict(self, samples: Sequence, catalog: FeatureCatalog,
                      config: GeneratorConfig) -> tuple[bool, list[StatisticalTestResult]]:
        """Run all tests for the batch's record type, return overall verdict."""
        if samples and isinstance(samples[0], PersonRecord):
            results = self.validate_people(samples, catalog, config)
        else:
            results = self.validate_books(samples, catalog, config)
        for r in results:
            if not r.passed:
                logger.warning("Validation %s failed: %s", r.test_name, r.detail)
        return all(r.passed for r in results), results
