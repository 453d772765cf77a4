"""Seed - splittable random source.

Bit generation is delegated to ``random.Random`` (Mersenne Twister). A Seed is
an immutable integer state; every draw builds a private ``random.Random`` from
it, so no global random state is ever touched and a Seed can be shared freely
between threads.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from .errors import PreconditionError

# Seeds are kept to 64 bits of state
SEED_BITS = 64
_SEED_MASK = (1 << SEED_BITS) - 1


@dataclass(frozen=True)
class Seed:
    """Opaque splittable random state."""

    state: int

    @classmethod
    def of(cls, value: int) -> Seed:
        """Build a seed from any integer (folded into 64 bits)."""
        return cls(state=value & _SEED_MASK)

    def __post_init__(self) -> None:
        if not 0 <= self.state <= _SEED_MASK:
            raise PreconditionError(f"seed state ({self.state}) must fit in {SEED_BITS} bits; use Seed.of to fold")


def split(seed: Seed) -> tuple[Seed, Seed]:
    """Derive two independent seeds from ``seed``."""
    rng = random.Random(seed.state)
    return Seed(rng.getrandbits(SEED_BITS)), Seed(rng.getrandbits(SEED_BITS))


def range_(lo: int, hi: int, seed: Seed) -> tuple[int, Seed]:
    """Draw a uniform integer in [lo, hi] and return it with a successor seed.

    Callers check ``lo <= hi`` before calling.
    """
    rng = random.Random(seed.state)
    value = rng.randint(lo, hi)
    return value, Seed(rng.getrandbits(SEED_BITS))


def new_seed() -> Seed:
    """Fresh seed from the operating system's entropy source."""
    return Seed(random.SystemRandom().getrandbits(SEED_BITS))
