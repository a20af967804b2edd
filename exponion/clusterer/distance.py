# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Distance oracles.

Any object with a ``distance(a, b)`` method and an ``is_squared`` attribute can
be used by the engine. The distance must satisfy the triangle inequality in its
true (non-squared) form, since every pruning bound depends on it.
"""

import math
from typing import Dict, Type

import numpy as np

from .errors import ComputationError, ConfigurationError


class DistanceFunction:
    """
    Base class for distance oracles.

    Attributes
    ----------
    name : str
        Identifier used by ``get_distance`` and the Spark ``distance`` param.

    is_squared : bool
        True when ``distance`` returns the square of a metric. Bounds are
        always kept in true-distance units, so such values are square rooted
        before they are stored.
    """

    name = "abstract"
    is_squared = False

    def distance(self, a: np.ndarray, b: np.ndarray) -> float:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}()"


class EuclideanDistance(DistanceFunction):
    name = "euclidean"

    def distance(self, a: np.ndarray, b: np.ndarray) -> float:
        diff = a - b
        return math.sqrt(float(np.dot(diff, diff)))


class SquaredEuclideanDistance(DistanceFunction):
    """Squared L2 distance. Cheaper than ``EuclideanDistance``, no square root."""

    name = "squaredEuclidean"
    is_squared = True

    def distance(self, a: np.ndarray, b: np.ndarray) -> float:
        diff = a - b
        return float(np.dot(diff, diff))


class ManhattanDistance(DistanceFunction):
    name = "manhattan"

    def distance(self, a: np.ndarray, b: np.ndarray) -> float:
        return float(np.abs(a - b).sum())


_DISTANCES: Dict[str, Type[DistanceFunction]] = {
    cls.name: cls
    for cls in (EuclideanDistance, SquaredEuclideanDistance, ManhattanDistance)
}


def get_distance(name: str) -> DistanceFunction:
    """
    Resolve a distance oracle by name.

    Parameters
    ----------
    name : str
        One of "euclidean", "squaredEuclidean", "manhattan".

    Raises
    ------
    ConfigurationError
        If the name is unknown.
    """
    try:
        return _DISTANCES[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown distance '{name}', expected one of {sorted(_DISTANCES)}"
        ) from None


class CheckedDistance:
    """
    Wraps a distance oracle for the duration of one run.

    Counts evaluations and rejects NaN or negative results. All engine code
    calls distances through this wrapper.
    """

    def __init__(self, oracle):
        self.oracle = oracle
        self.is_squared = bool(getattr(oracle, "is_squared", False))
        self.count = 0

    def __call__(self, a: np.ndarray, b: np.ndarray) -> float:
        d = float(self.oracle.distance(a, b))
        self.count += 1
        if math.isnan(d) or d < 0.0:
            raise ComputationError(
                f"{self.oracle!r} returned {d}; distances must be non-negative numbers"
            )
        return d

    def to_true(self, d: float) -> float:
        """Convert a value returned by the oracle into true-distance units."""
        return math.sqrt(d) if self.is_squared else d

    def true_distance(self, a: np.ndarray, b: np.ndarray) -> float:
        return self.to_true(self(a, b))

    def squared(self, d: float) -> float:
        """Convert a value returned by the oracle into squared-distance units."""
        return d if self.is_squared else d * d
