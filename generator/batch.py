"""
Batch generation: many independent samples, optionally across threads.

Every sample gets its own child RandomSource, spawned up front from the
caller's source in sample order. Which worker runs a sample therefore has no
effect on its value, and a batch is reproducible from the top-level seed for
any worker count.

A failing sample is recorded as a failed SampleOutcome; the rest of the batch
still runs. Whether to skip, retry or abort is the caller's call.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from core.errors import QuantumSynthError
from core.sampler import RandomSource
from features.catalog import FeatureCatalog
from generator.config import GeneratorConfig
from generator.feature_sampler import FeatureSampler
from generator.records import Sample, generate_sample

logger = logging.getLogger(__name__)


@dataclass
class SampleOutcome:
    """Success-or-failure result for one sample index."""
    index: int
    sample: Sample | None = None
    error: QuantumSynthError | None = None
    wall_time_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Outcomes in generation order."""
    outcomes: list[SampleOutcome] = field(default_factory=list)
    wall_time_ms: float = 0.0

    @property
    def samples(self) -> list[Sample]:
        return [o.sample for o in self.outcomes if o.ok]

    @property
    def failures(self) -> list[SampleOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def all_ok(self) -> bool:
        return not self.failures

    def stats(self) -> dict:
        n = len(self.outcomes)
        return {
            "total": n,
            "succeeded": n - len(self.failures),
            "failed": len(self.failures),
            "wall_time_ms": self.wall_time_ms,
            "avg_sample_ms": (sum(o.wall_time_ms for o in self.outcomes) / n) if n else 0.0,
        }

    def __len__(self):
        return len(self.outcomes)

    def __iter__(self):
        return iter(self.outcomes)


def _run_chunk(indices: list[int], sources: list[RandomSource],
               catalog: FeatureCatalog, config: GeneratorConfig) -> list[SampleOutcome]:
    """One worker's share. Each worker compiles its own feature circuits."""
    features = FeatureSampler(catalog, config)
    outcomes = []
    for index, source in zip(indices, sources):
        t0 = time.perf_counter()
        try:
            sample = generate_sample(source, catalog, config, features=features)
            outcome = SampleOutcome(index=index, sample=sample)
        except QuantumSynthError as err:
            logger.error("Sample %d failed: %s", index, err)
            outcome = SampleOutcome(index=index, error=err)
        outcome.wall_time_ms = (time.perf_counter() - t0) * 1000
        outcomes.append(outcome)
    return outcomes


def generate_batch(n: int, source: RandomSource, catalog: FeatureCatalog,
                   config: GeneratorConfig, workers: int = 1) -> BatchResult:
    """n samples in generation order.

    Configuration problems are raised before any sampling starts; per-sample
    failures are reported in the result.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    config.validate(catalog)

    children = source.spawn(n)
    indices = list(range(n))
    workers = min(workers, max(n, 1))

    t0 = time.perf_counter()
    if workers == 1:
        outcomes = _run_chunk(indices, children, catalog, config)
    else:
        # Contiguous chunks, one FeatureSampler per worker
        bounds = [round(i * n / workers) for i in range(workers + 1)]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(_run_chunk, indices[lo:hi], children[lo:hi], catalog, config)
                for lo, hi in zip(bounds[:-1], bounds[1:])
            ]
            outcomes = [o for f in futures for o in f.result()]
    result = BatchResult(outcomes=outcomes, wall_time_ms=(time.perf_counter() - t0) * 1000)

    stats = result.stats()
    logger.info("Generated %d/%d %s samples in %.1fms (%d workers)",
                stats["succeeded"], n, config.record_type.value, result.wall_time_ms, workers)
    return result
