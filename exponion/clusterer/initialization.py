# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Initial center selection.

The engine itself imposes no reproducibility requirement on initializers;
pass a ``seed`` to get repeatable results.
"""

from typing import Optional

import numpy as np

from .errors import ConfigurationError


class Initializer:
    """Base class: produce ``k`` starting centers for ``data``."""

    name = "abstract"

    def initial_means(self, data: np.ndarray, k: int) -> np.ndarray:
        raise NotImplementedError


class RandomInitializer(Initializer):
    """Pick ``k`` distinct data points uniformly at random."""

    name = "random"

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed

    def initial_means(self, data: np.ndarray, k: int) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        idx = rng.choice(data.shape[0], size=k, replace=False)
        return data[np.sort(idx)].copy()


class KMeansPlusPlusInitializer(Initializer):
    """
    k-means++ seeding (Arthur and Vassilvitskii, 2007).

    The first center is drawn uniformly; each further center is drawn with
    probability proportional to the squared Euclidean distance to the nearest
    center chosen so far.
    """

    name = "k-means++"

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed

    def initial_means(self, data: np.ndarray, k: int) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        n = data.shape[0]
        chosen = [int(rng.integers(n))]
        closest = ((data - data[chosen[0]]) ** 2).sum(axis=1)
        for _ in range(1, k):
            total = closest.sum()
            if total <= 0.0:
                # All remaining mass sits on chosen centers; fall back to uniform.
                remaining = np.setdiff1d(np.arange(n), chosen)
                nxt = int(rng.choice(remaining))
            else:
                nxt = int(rng.choice(n, p=closest / total))
            chosen.append(nxt)
            closest = np.minimum(closest, ((data - data[nxt]) ** 2).sum(axis=1))
        return data[chosen].copy()


class FixedInitializer(Initializer):
    """Use caller-provided centers as-is."""

    name = "fixed"

    def __init__(self, means):
        self.means = np.array(means, dtype=float)

    def initial_means(self, data: np.ndarray, k: int) -> np.ndarray:
        return self.means.copy()


def get_initializer(name: str, seed: Optional[int] = None) -> Initializer:
    """Resolve an initializer by name ("random" or "k-means++")."""
    if name == RandomInitializer.name:
        return RandomInitializer(seed)
    if name == KMeansPlusPlusInitializer.name:
        return KMeansPlusPlusInitializer(seed)
    raise ConfigurationError(
        f"Unknown initialization mode '{name}', expected 'random' or 'k-means++'"
    )
