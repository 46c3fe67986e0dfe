"""
Feature Mapper: sampled integers → domain values.

Pure, total functions. Given a valid non-negative raw value they never raise
and never return anything outside [lo, hi].

The shaped transforms are deliberately the single-input variants:

    box_muller_like:    g = cos(2πu) · √(−2·ln(u + ε))
    exponential_shape:  x = −ln(1 − u + ε) · scale + offset

They approximate a bell curve and an exponential tail from one uniform
draw. Output is illustrative, not a statistical contract, and the formulas
must not be swapped for the two-input textbook versions.
"""

import math

EPSILON = 1e-9

ISBN_WEIGHTS = (1, 3)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def linear_range(raw: int, lo: int, hi: int) -> int:
    """lo + (raw mod (hi − lo + 1))."""
    return lo + raw % (hi - lo + 1)


def unit_interval(raw: int, n_bits: int) -> float:
    """raw / 2^n_bits, in [0, 1)."""
    return min(max(raw, 0), 2 ** n_bits - 1) / 2 ** n_bits


def box_muller_like(u: float, mean: float, std: float, lo: int, hi: int) -> int:
    """Approximately bell-shaped integer from one uniform u."""
    # u + ε can exceed 1 when u is within ε of 1
    g = math.cos(2 * math.pi * u) * math.sqrt(max(0.0, -2 * math.log(u + EPSILON)))
    return int(clamp(round(mean + g * std), lo, hi))


def exponential_shape(u: float, scale: float, offset: float, lo: float, hi: float) -> float:
    """Skewed value with an exponential tail, clamped to [lo, hi]."""
    x = -math.log(1 - u + EPSILON) * scale + offset
    return clamp(x, lo, hi)


# ── Checksummed identifiers ─────────────────────────────────────────

def check_digit(digits) -> int:
    """(10 − Σ dᵢ·wᵢ mod 10) mod 10 with wᵢ = 1, 3, 1, 3, ..."""
    total = sum(d * ISBN_WEIGHTS[i % 2] for i, d in enumerate(digits))
    return (10 - total % 10) % 10


def isbn13(digits) -> str:
    """Twelve digits plus their check digit."""
    digits = [int(d) % 10 for d in digits]
    if len(digits) != 12:
        raise ValueError(f"ISBN-13 needs 12 digits before the check digit, got {len(digits)}")
    return "".join(str(d) for d in digits) + str(check_digit(digits))


def is_valid_isbn13(code: str) -> bool:
    if len(code) != 13 or not code.isdigit():
        return False
    digits = [int(c) for c in code]
    return check_digit(digits[:12]) == digits[12]
