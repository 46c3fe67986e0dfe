"""
quantum-synth: command-line driver.

    quantum-synth --count 50 --seed 42 --kind book --output books.json

Records go to stdout as JSON unless --output is given. Log lines go to
stderr. Exit status is 1 when any sample failed.
"""

import argparse
import logging
import sys

from core.errors import ConfigurationError
from core.sampler import RandomSource
from features.catalog import FeatureCatalog, default_catalog
from generator import settings
from generator.batch import generate_batch
from generator.config import GeneratorConfig, RecordType
from generator.export import dumps, write_json
from generator.logging_config import setup_logging
from validation.stats import DistributionValidator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quantum-synth",
        description="Generate correlated synthetic records from simulated quantum circuits")
    parser.add_argument("--count", type=int, default=settings.DEFAULT_COUNT,
                        help="Number of records to generate")
    parser.add_argument("--seed", type=int, default=settings.DEFAULT_SEED,
                        help="Top-level seed (omit for a fresh random run)")
    parser.add_argument("--kind", choices=[t.value for t in RecordType],
                        default=RecordType.BOOK.value,
                        help="Record type")
    parser.add_argument("--workers", type=int, default=settings.DEFAULT_WORKERS,
                        help="Worker threads")
    parser.add_argument("--catalog", type=str, default=None,
                        help="JSON catalog overriding the built-in labels and ranges")
    parser.add_argument("--output", type=str, default=None,
                        help="Write JSON here instead of stdout")
    parser.add_argument("--validate", action="store_true",
                        help="Print a distribution report to stderr")
    parser.add_argument("--log-level", type=str, default=settings.LOG_LEVEL,
                        help="DEBUG, INFO, WARNING, ERROR")
    return parser


def print_report(results) -> None:
    for r in results:
        print(f"  {r.test_name}: {'PASS' if r.passed else 'FAIL'} "
              f"(stat={r.statistic:.4f}, p={r.p_value:.4f}) {r.detail}",
              file=sys.stderr)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        if args.count < 0:
            raise ConfigurationError(f"--count must be non-negative, got {args.count}")
        if args.workers < 1:
            raise ConfigurationError(f"--workers must be >= 1, got {args.workers}")
        catalog = FeatureCatalog.from_json(args.catalog) if args.catalog else default_catalog()
        config = GeneratorConfig(record_type=RecordType(args.kind)).validate(catalog)
    except ConfigurationError as err:
        logger.error("Invalid configuration: %s", err)
        return 2

    source = RandomSource(args.seed)
    result = generate_batch(args.count, source, catalog, config, workers=args.workers)

    if args.output:
        path = write_json(result.samples, args.output)
        logger.info("Wrote %d records to %s", len(result.samples), path)
    else:
        print(dumps(result.samples))

    if args.validate:
        passed, results = DistributionValidator().batch_verdict(result.samples, catalog, config)
        print(f"Validation: {'PASS' if passed else 'FAIL'}", file=sys.stderr)
        print_report(results)

    for failure in result.failures:
        logger.error("Sample %d failed: %s", failure.index, failure.error)
    return 0 if result.all_ok else 1


if __name__ == "__main__":
    sys.exit(main())
