"""RNG helpers; mutation choices and noise dots draw from PCG64DXSM generators."""
from __future__ import annotations

from numpy.random import Generator, PCG64DXSM


def make_rng(seed: int | None = None) -> Generator:
    """Seeded generator; ``None`` pulls fresh OS entropy."""
    return Generator(PCG64DXSM(seed))


def ensure_rng(rng: Generator | None) -> Generator:
    return rng if rng is not None else make_rng()
