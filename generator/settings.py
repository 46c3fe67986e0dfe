"""Environment settings for quantum-synth."""

import os
from typing import Optional

# Logging settings
LOG_LEVEL = os.getenv("QSYNTH_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("QSYNTH_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
LOG_FILE: Optional[str] = os.getenv("QSYNTH_LOG_FILE", None)

# Generation defaults
_seed = os.getenv("QSYNTH_SEED", None)
DEFAULT_SEED: Optional[int] = int(_seed) if _seed else None
DEFAULT_WORKERS = int(os.getenv("QSYNTH_WORKERS", "1"))
DEFAULT_COUNT = int(os.getenv("QSYNTH_COUNT", "50"))

__all__ = [
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE",
    "DEFAULT_SEED",
    "DEFAULT_WORKERS",
    "DEFAULT_COUNT",
]
