# multipath/services/seeded.py
from __future__ import annotations

import math
import random
from datetime import datetime
from typing import Optional, Protocol, Sequence, TypeVar

from multipath.services.utils_weekly import to_iso

T = TypeVar("T")


class EmptyPoolError(RuntimeError):
    """A uniform pick was asked of an empty list no gate had ruled out."""


class Rng(Protocol):
    def draw(self) -> float:
        """Next float in [0, 1)."""
        ...


class SeededRng:
    """Reproducible draw sequence for one seed string.

    random.Random hashes str seeds with sha512, so the sequence is stable
    across processes (unlike hash()-based seeding).
    """

    def __init__(self, seed: str):
        self.seed = seed
        self._rnd = random.Random(seed)

    def draw(self) -> float:
        return self._rnd.random()


def build_seed(seed: Optional[str], now: datetime) -> str:
    # the instant is folded in even when a seed is pinned
    stamp = to_iso(now)
    return f"{seed}-{stamp}" if seed else stamp


def pick_uniform(items: Sequence[T], rng: Rng) -> T:
    if not items:
        raise EmptyPoolError("Cannot pick from empty list")
    return items[math.floor(rng.draw() * len(items))]


def chance(probability: float, rng: Rng) -> bool:
    return rng.draw() < probability


def rand_int(lo: int, hi: int, rng: Rng) -> int:
    """Uniform integer in [lo, hi], both inclusive."""
    lo, hi = math.ceil(lo), math.floor(hi)
    return math.floor(rng.draw() * (hi - lo + 1)) + lo


def sample_without_replacement(items: Sequence[T], n: int, rng: Rng) -> list[T]:
    pool = list(items)
    out: list[T] = []
    for _ in range(min(n, len(pool))):
        idx = math.floor(rng.draw() * len(pool))
        out.append(pool.pop(idx))
    return out
