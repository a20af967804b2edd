# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Per-cluster aggregates: centers, vector sums, member counts and member sets.
"""

from typing import List, Set, Tuple

import numpy as np


class CenterStore:
    """
    Mutable cluster aggregates for one run.

    ``sums[c]`` is the vector sum of the members of cluster ``c`` and
    ``counts[c]`` their number. ``means`` holds the centers the current pass
    measures against; they only change in ``recompute_means``.
    """

    def __init__(self, means: np.ndarray):
        self.means = np.array(means, dtype=float)
        k, dim = self.means.shape
        self.sums = np.zeros((k, dim))
        self.counts = np.zeros(k, dtype=np.int64)
        self.members: List[Set[int]] = [set() for _ in range(k)]

    @property
    def k(self) -> int:
        return self.means.shape[0]

    def add(self, point_id: int, vector: np.ndarray, cluster: int) -> None:
        self.members[cluster].add(point_id)
        self.sums[cluster] += vector
        self.counts[cluster] += 1

    def move(self, point_id: int, vector: np.ndarray, source: int, target: int) -> None:
        self.members[source].remove(point_id)
        self.members[target].add(point_id)
        self.sums[source] -= vector
        self.sums[target] += vector
        self.counts[source] -= 1
        self.counts[target] += 1

    def current_means(self) -> np.ndarray:
        """Centroids of the current members; empty clusters keep their last center."""
        means = self.means.copy()
        nonempty = self.counts > 0
        means[nonempty] = self.sums[nonempty] / self.counts[nonempty, None]
        return means

    def recompute_means(self, distance) -> Tuple[np.ndarray, List[int]]:
        """
        Move every center to the mean of its members.

        Parameters
        ----------
        distance : CheckedDistance
            Used to measure how far each center moved.

        Returns
        -------
        movement : np.ndarray
            True distance each center moved (0 for frozen, empty clusters).

        empty : list of int
            Clusters without members, whose centers were left unchanged.
        """
        new_means = self.current_means()
        movement = np.zeros(self.k)
        empty = []
        for c in range(self.k):
            if self.counts[c] == 0:
                empty.append(c)
                continue
            movement[c] = distance.true_distance(self.means[c], new_means[c])
        self.means = new_means
        return movement, empty
