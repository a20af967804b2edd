# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Assignment strategies.

A strategy performs the initial assignment and every later reassignment pass
over an ``AssignmentState``. All strategies produce the partition that an
exhaustive nearest-center search produces, with ties going to the lowest
cluster index; they differ only in how many distances they compute.

Per-point data lives in dense arrays indexed by point id:

- ``assignment[i]``: cluster of point ``i``
- ``upper[i]``: at least the true distance to the assigned center
- ``lower[i]``: at most the true distance to the second nearest center
"""

from typing import Dict, Type

import numpy as np

from .centers import CenterStore
from .distance import CheckedDistance
from .separation import initial_separation, rank_neighbors, recompute_separation

# Relative margin on bound arithmetic. Loosened bounds, separations and search
# radii are rounded outward by it so that an exact tie in the computed
# distances is rescanned rather than pruned.
ROUNDING_SLACK = 1e-12


def _widen(x):
    return x * (1.0 + ROUNDING_SLACK)


def _narrow(x):
    return x * (1.0 - ROUNDING_SLACK)


class AssignmentState:
    """Struct-of-arrays state shared by the driver and the strategy."""

    def __init__(self, data: np.ndarray, store: CenterStore, distance: CheckedDistance):
        n = data.shape[0]
        self.data = data
        self.store = store
        self.distance = distance
        self.assignment = np.full(n, -1, dtype=np.intp)
        self.upper = np.full(n, np.inf)
        self.lower = np.zeros(n)

    @property
    def n(self) -> int:
        return self.data.shape[0]

    @property
    def k(self) -> int:
        return self.store.k

    def assign(self, i: int, cluster: int) -> None:
        self.assignment[i] = cluster
        self.store.add(i, self.data[i], cluster)

    def move(self, i: int, target: int) -> None:
        self.store.move(i, self.data[i], self.assignment[i], target)
        self.assignment[i] = target


def _nearest_two(state: AssignmentState, x: np.ndarray, candidates, seed_index: int, seed_dist: float):
    """
    Scan ``candidates`` for the two nearest centers, starting from a known one.

    Returns ``(best_index, min1, min2)`` in oracle units. A candidate replaces
    the best when strictly closer, or equally close with a lower index.
    """
    means = state.store.means
    best, min1, min2 = seed_index, seed_dist, np.inf
    for c in candidates:
        d = state.distance(x, means[c])
        if d < min1 or (d == min1 and c < best):
            best, min2, min1 = c, min1, d
        elif d < min2:
            min2 = d
    return best, min1, min2


class AssignmentStrategy:
    """Base strategy: exhaustive search, no bounds."""

    name = "abstract"

    def initial_assign(self, state: AssignmentState) -> int:
        """Assign every point; returns the number of points (all are new)."""
        means = state.store.means
        for i in range(state.n):
            x = state.data[i]
            best, min1, min2 = _nearest_two(
                state, x, range(1, state.k), 0, state.distance(x, means[0])
            )
            state.assign(i, best)
            self._store_bounds(state, i, min1, min2)
        return state.n

    def update_bounds(self, state: AssignmentState, movement: np.ndarray) -> None:
        """Loosen stored bounds after the centers moved by ``movement``."""

    def reassign(self, state: AssignmentState) -> int:
        raise NotImplementedError

    def _store_bounds(self, state, i, min1, min2):
        pass


class LloydAssignment(AssignmentStrategy):
    """Exhaustive nearest-center search on every pass."""

    name = "lloyd"

    def reassign(self, state: AssignmentState) -> int:
        means = state.store.means
        changed = 0
        for i in range(state.n):
            x = state.data[i]
            best, _, _ = _nearest_two(
                state, x, range(1, state.k), 0, state.distance(x, means[0])
            )
            if best != state.assignment[i]:
                state.move(i, best)
                changed += 1
        return changed


class BoundedAssignment(AssignmentStrategy):
    """Common bound bookkeeping of the Hamerly and Exponion strategies."""

    def _store_bounds(self, state, i, min1, min2):
        state.upper[i] = state.distance.to_true(min1)
        state.lower[i] = state.distance.to_true(min2)

    def update_bounds(self, state: AssignmentState, movement: np.ndarray) -> None:
        state.upper = _widen(state.upper) + _widen(movement[state.assignment])
        if state.k == 1:
            return
        order = np.argsort(movement)
        furthest = order[-1]
        longest, second = movement[order[-1]], movement[order[-2]]
        delta = np.where(state.assignment == furthest, second, longest)
        # Scaling a negative bound would raise it.
        state.lower = np.where(
            state.lower > 0, _narrow(state.lower), state.lower
        ) - _widen(delta)


class HamerlyAssignment(BoundedAssignment):
    """
    Hamerly's algorithm: one upper and one lower bound per point.

    G. Hamerly. Making k-means even faster. SDM 2010.
    """

    name = "hamerly"

    def reassign(self, state: AssignmentState) -> int:
        _, sep = recompute_separation(state.store.means, state.distance)
        sep = _narrow(sep)
        means = state.store.means
        dist = state.distance
        changed = 0
        for i in range(state.n):
            cur = state.assignment[i]
            bound = max(sep[cur], state.lower[i])
            if state.upper[i] < bound:
                continue
            x = state.data[i]
            curd = dist(x, means[cur])
            u = dist.to_true(curd)
            state.upper[i] = u
            if u < bound:
                continue
            others = [c for c in range(state.k) if c != cur]
            best, min1, min2 = _nearest_two(state, x, others, cur, curd)
            if best != cur:
                state.move(i, best)
                changed += 1
                state.upper[i] = dist.to_true(min1)
            state.lower[i] = u if min2 == curd else dist.to_true(min2)
        return changed


class ExponionAssignment(BoundedAssignment):
    """
    Newling's Exponion algorithm.

    Like Hamerly, but a point that fails the bound test only scans the centers
    inside a ball around its own center, visiting them nearest first.

    J. Newling and F. Fleuret. Fast k-means with accurate bounds. ICML 2016.
    """

    name = "exponion"

    def initial_assign(self, state: AssignmentState) -> int:
        k = state.k
        means = state.store.means
        dist = state.distance
        cdist = _narrow(initial_separation(means, dist))
        for i in range(state.n):
            x = state.data[i]
            best = dist(x, means[0])
            sbest = dist(x, means[1]) if k > 1 else np.inf
            min_index = 0
            if sbest < best:
                best, sbest = sbest, best
                min_index = 1
            for j in range(2, k):
                if sbest <= cdist[min_index, j]:
                    continue
                d = dist(x, means[j])
                if d < best:
                    min_index, sbest, best = j, best, d
                elif d < sbest:
                    sbest = d
            state.assign(i, min_index)
            state.upper[i] = dist.to_true(best)
            state.lower[i] = dist.to_true(sbest)
        return state.n

    def reassign(self, state: AssignmentState) -> int:
        means = state.store.means
        dist = state.distance
        cdist, sep = recompute_separation(means, dist)
        cnum = rank_neighbors(cdist)
        prune_sep = _narrow(sep)
        changed = 0
        for i in range(state.n):
            cur = state.assignment[i]
            z = state.lower[i]
            sa = prune_sep[cur]
            u = state.upper[i]
            if u < z or u < sa:
                continue
            x = state.data[i]
            curd = dist(x, means[cur])
            u = dist.to_true(curd)
            state.upper[i] = u
            if u < z or u < sa:
                continue
            # cdist is half-scaled: Newling's radius 2u + s(cur), halved.
            r = _widen(u + sep[cur])
            row = cdist[cur]
            candidates = []
            for c in cnum[cur]:
                if row[c] > r:
                    break
                candidates.append(c)
            best, min1, min2 = _nearest_two(state, x, candidates, cur, curd)
            if best != cur:
                state.move(i, best)
                changed += 1
                state.upper[i] = u if min1 == curd else dist.to_true(min1)
            state.lower[i] = u if min2 == curd else dist.to_true(min2)
        return changed


_STRATEGIES: Dict[str, Type[AssignmentStrategy]] = {
    cls.name: cls for cls in (ExponionAssignment, HamerlyAssignment, LloydAssignment)
}

STRATEGIES = tuple(_STRATEGIES)


def get_strategy(name: str) -> AssignmentStrategy:
    return _STRATEGIES[name]()
