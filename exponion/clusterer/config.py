# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Run configuration for AcceleratedKMeans.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .assignment import STRATEGIES
from .distance import DistanceFunction, EuclideanDistance
from .errors import ConfigurationError
from .initialization import Initializer, KMeansPlusPlusInitializer


@dataclass(frozen=True)
class KMeansConfig:
    """
    Parameters of a single clustering run, fixed at construction.

    Parameters
    ----------
    k : int, default=2
        Number of clusters (1 <= k <= number of points).

    max_iter : int, default=20
        Maximum number of assignment passes, including the initial one.
        0 means no limit.

    distance : DistanceFunction, default=EuclideanDistance()
        Distance oracle. Its ``is_squared`` flag holds for the whole run.

    initializer : Initializer, default=KMeansPlusPlusInitializer()
        Produces the initial centers.

    strategy : str, default="exponion"
        Assignment strategy: "exponion", "hamerly" or "lloyd".

    varstat : bool, default=False
        Compute the per-cluster sum of squared distances in the result.
    """

    k: int = 2
    max_iter: int = 20
    distance: DistanceFunction = field(default_factory=EuclideanDistance)
    initializer: Initializer = field(default_factory=KMeansPlusPlusInitializer)
    strategy: str = "exponion"
    varstat: bool = False

    @property
    def is_squared(self) -> bool:
        return bool(getattr(self.distance, "is_squared", False))

    def validate(self, data: Optional[np.ndarray] = None) -> List[ConfigurationError]:
        """
        Check the configuration, and the data when given.

        Returns
        -------
        list of ConfigurationError
            Empty when the configuration is usable.
        """
        errors = []
        if not isinstance(self.k, (int, np.integer)) or self.k <= 0:
            errors.append(ConfigurationError(f"k must be a positive integer, got {self.k!r}"))
        if not isinstance(self.max_iter, (int, np.integer)) or self.max_iter < 0:
            errors.append(
                ConfigurationError(f"max_iter must be >= 0 (0 = unbounded), got {self.max_iter!r}")
            )
        if self.strategy not in STRATEGIES:
            errors.append(
                ConfigurationError(
                    f"Unknown strategy '{self.strategy}', expected one of {list(STRATEGIES)}"
                )
            )
        if not callable(getattr(self.distance, "distance", None)):
            errors.append(ConfigurationError("distance must provide a distance(a, b) method"))
        if not callable(getattr(self.initializer, "initial_means", None)):
            errors.append(
                ConfigurationError("initializer must provide an initial_means(data, k) method")
            )
        if data is not None:
            errors.extend(validate_data(data, self.k))
        return errors


def validate_data(data: np.ndarray, k: int) -> List[ConfigurationError]:
    data = np.asarray(data, dtype=float)
    errors = []
    if data.ndim != 2 or data.shape[0] == 0 or data.shape[1] == 0:
        errors.append(
            ConfigurationError(f"data must be a non-empty (n, d) array, got shape {data.shape}")
        )
        return errors
    if not np.all(np.isfinite(data)):
        errors.append(ConfigurationError("data contains NaN or infinite values"))
    if isinstance(k, (int, np.integer)) and k > data.shape[0]:
        errors.append(
            ConfigurationError(f"k={k} exceeds the number of points ({data.shape[0]})")
        )
    return errors


def validate_means(means: np.ndarray, k: int, dim: int) -> List[ConfigurationError]:
    if means.shape != (k, dim):
        return [
            ConfigurationError(
                f"initializer returned centers of shape {means.shape}, expected {(k, dim)}"
            )
        ]
    if not np.all(np.isfinite(means)):
        return [ConfigurationError("initializer returned NaN or infinite centers")]
    return []
