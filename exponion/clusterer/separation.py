# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Center-to-center separation bounds and neighbour ranking.

All pruning rests on the triangle inequality: if a point is within ``u`` of
its own center ``a`` and ``d(a, c) >= 2u``, then ``c`` can not be closer to
the point than ``a``. Storing half the center distances makes that test a
direct comparison against ``u``.
"""

from typing import Tuple

import numpy as np


def initial_separation(means: np.ndarray, distance) -> np.ndarray:
    """
    Half separation between centers, in the oracle's own units.

    Used by the initial assignment, which compares raw oracle values: for a
    squared oracle the half distance squared is a quarter of the oracle value.
    """
    k = means.shape[0]
    scale = 0.25 if distance.is_squared else 0.5
    cdist = np.zeros((k, k))
    for i in range(1, k):
        for j in range(i):
            cdist[i, j] = cdist[j, i] = scale * distance(means[i], means[j])
    return cdist


def recompute_separation(means: np.ndarray, distance) -> Tuple[np.ndarray, np.ndarray]:
    """
    Half separation between centers in true-distance units.

    Returns
    -------
    cdist : np.ndarray
        ``(k, k)`` matrix, ``cdist[i, j] = d(c_i, c_j) / 2``.

    sep : np.ndarray
        ``sep[c] = min_{j != c} cdist[c, j]``; infinite when ``k == 1``.
    """
    k = means.shape[0]
    cdist = np.zeros((k, k))
    sep = np.full(k, np.inf)
    for i in range(1, k):
        for j in range(i):
            d = 0.5 * distance.true_distance(means[i], means[j])
            cdist[i, j] = cdist[j, i] = d
            if d < sep[i]:
                sep[i] = d
            if d < sep[j]:
                sep[j] = d
    return cdist, sep


def rank_neighbors(cdist: np.ndarray) -> np.ndarray:
    """
    For each cluster, the other clusters by ascending separation.

    Equal separations keep ascending cluster index.
    """
    k = cdist.shape[0]
    cnum = np.empty((k, max(k - 1, 0)), dtype=np.intp)
    for c in range(k):
        others = np.delete(np.arange(k), c)
        cnum[c] = others[np.argsort(cdist[c, others], kind="stable")]
    return cnum
