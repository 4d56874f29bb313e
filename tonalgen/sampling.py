"""Random helpers shared by the progression and rhythm generators."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

import numpy as np

from tonalgen.errors import GenerationError

T = TypeVar("T")


def make_rng(rng: np.random.Generator | int | None = None) -> np.random.Generator:
    """Return ``rng`` unchanged, or a fresh Generator (seeded when given an int)."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def weighted_choice(items: Sequence[T], weights: Sequence[float], rng: np.random.Generator) -> T:
    """
    Pick one item with probability proportional to its weight.

    Raises:
        GenerationError: If there are no items, the weights do not line up
            with the items, any weight is negative, or the total is not positive.
    """
    if len(items) == 0:
        raise GenerationError("Weighted choice called with no candidates.")
    if len(weights) != len(items):
        raise GenerationError(f"Got {len(weights)} weights for {len(items)} candidates.")

    w = np.asarray(weights, dtype=float)
    total = float(w.sum())
    if np.any(w < 0) or total <= 0:
        raise GenerationError(f"Weights must be non-negative with a positive total, got {list(weights)}.")
    return items[int(rng.choice(len(items), p=w / total))]


def uniform_choice(items: Sequence[T], rng: np.random.Generator) -> T:
    if len(items) == 0:
        raise GenerationError("Uniform choice called with no candidates.")
    return items[int(rng.integers(len(items)))]
