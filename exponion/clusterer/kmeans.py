# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
K-means driver loop and estimator.

The loop is the same for every assignment strategy:

1. initial assignment against the initializer's centers,
2. repeat: recompute centers from the cluster sums, loosen the point bounds by
   the center movement, reassign; until a pass moves no point (CONVERGED) or
   the iteration budget runs out (EXHAUSTED).
"""

import enum
import time
from typing import List, Optional

import numpy as np

from .assignment import AssignmentState, AssignmentStrategy, get_strategy
from .centers import CenterStore
from .config import KMeansConfig, validate_data, validate_means
from .distance import CheckedDistance
from .errors import ConfigurationError
from .model import KMeansModel, TrainingSummary
from .observer import KMeansObserver, LoggingObserver


class RunState(enum.Enum):
    INITIALIZING = "initializing"
    ITERATING = "iterating"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


class KMeansInstance:
    """
    State of a single clustering run over one dataset.

    Parameters
    ----------
    data : np.ndarray
        ``(n, d)`` points; row index is the point id.

    means : np.ndarray
        ``(k, d)`` initial centers.

    distance : DistanceFunction
        Distance oracle.

    strategy : AssignmentStrategy
        Assignment strategy driving every pass.

    observer : KMeansObserver, optional
        Receives progress events; defaults to a ``LoggingObserver``.

    Raises
    ------
    ConfigurationError
        If the data or the initial centers are unusable, e.g. more centers
        than points or centers of the wrong dimension.
    """

    def __init__(
        self,
        data: np.ndarray,
        means: np.ndarray,
        distance,
        strategy: AssignmentStrategy,
        observer: Optional[KMeansObserver] = None,
    ):
        data = np.asarray(data, dtype=float)
        means = np.asarray(means, dtype=float)
        k = means.shape[0] if means.ndim == 2 else 0
        errors = validate_data(data, k)
        if not errors:
            errors = validate_means(means, k, data.shape[1])
        if not errors and k == 0:
            errors = [ConfigurationError("at least one initial center is required")]
        if errors:
            raise errors[0]

        self.distance = CheckedDistance(distance)
        self.store = CenterStore(means)
        self.state = AssignmentState(data, self.store, self.distance)
        self.strategy = strategy
        self.observer = observer if observer is not None else LoggingObserver()
        self.run_state = RunState.INITIALIZING
        self.iteration = 0
        self.changed_history: List[int] = []

    @property
    def finished(self) -> bool:
        return self.run_state in (RunState.CONVERGED, RunState.EXHAUSTED)

    def reassign(self) -> int:
        """
        Recompute centers, update bounds and run one reassignment pass.

        Returns the number of points that changed cluster.
        """
        movement, empty = self.store.recompute_means(self.distance)
        for c in empty:
            self.observer.empty_cluster(c, self.iteration)
        self.strategy.update_bounds(self.state, movement)
        return self.strategy.reassign(self.state)

    def step(self) -> int:
        """Run the next pass and return how many points changed cluster."""
        if self.finished:
            raise RuntimeError(f"Run already finished ({self.run_state.value})")
        self.iteration += 1
        self.observer.iteration_started(self.iteration)
        if self.run_state is RunState.INITIALIZING:
            changed = self.strategy.initial_assign(self.state)
            self.run_state = RunState.ITERATING
        else:
            changed = self.reassign()
        self.changed_history.append(changed)
        self.observer.iteration_finished(self.iteration, changed)
        return changed

    def run(self, max_iter: int) -> RunState:
        """
        Iterate until convergence or until ``max_iter`` passes ran.

        ``max_iter == 0`` means no limit.
        """
        while not self.finished:
            changed = self.step()
            if self.iteration > 1 and changed == 0:
                self.run_state = RunState.CONVERGED
                self.observer.converged(self.iteration)
            elif max_iter and self.iteration >= max_iter:
                self.run_state = RunState.EXHAUSTED
                self.observer.exhausted(self.iteration)
        return self.run_state

    def build_model(self, varstat: bool = False, elapsed_millis: int = 0) -> KMeansModel:
        centers = self.store.current_means()
        assignment = self.state.assignment.copy()
        varsums = None
        if varstat:
            varsums = np.zeros(self.store.k)
            for i, c in enumerate(assignment):
                d = self.distance(self.state.data[i], centers[c])
                varsums[c] += self.distance.squared(d)
        summary = TrainingSummary(
            algorithm=self.strategy.name,
            k=self.store.k,
            effectiveK=int(np.count_nonzero(self.store.counts)),
            dim=self.state.data.shape[1],
            numPoints=self.state.n,
            iterations=self.iteration,
            converged=self.run_state is RunState.CONVERGED,
            finalDistortion=None if varsums is None else float(varsums.sum()),
            distanceComputations=self.distance.count,
            changedHistory=list(self.changed_history),
            elapsedMillis=elapsed_millis,
        )
        return KMeansModel(
            centers,
            assignment,
            [frozenset(m) for m in self.store.members],
            self.distance.oracle,
            varsums=varsums,
            summary=summary,
        )


class AcceleratedKMeans:
    """
    Exact k-means with triangle-inequality pruning.

    The default "exponion" strategy skips most point-to-center distance
    computations, yet yields the same partition as Lloyd's exhaustive search
    from the same initial centers.

    Parameters
    ----------
    config : KMeansConfig
        Run parameters.

    observer : KMeansObserver, optional
        Receives progress events of every run.

    Examples
    --------
    >>> import numpy as np
    >>> from exponion.clusterer import AcceleratedKMeans, KMeansConfig
    >>> data = np.array([[0.0, 0.0], [1.0, 1.0], [9.0, 8.0], [8.0, 9.0]])
    >>> model = AcceleratedKMeans(KMeansConfig(k=2, max_iter=20)).fit(data)
    >>> model.summary.converged
    True
    """

    def __init__(self, config: Optional[KMeansConfig] = None, observer: Optional[KMeansObserver] = None):
        self.config = config if config is not None else KMeansConfig()
        self.observer = observer

    def fit(self, data) -> KMeansModel:
        """
        Cluster ``data``.

        Raises
        ------
        ConfigurationError
            If the configuration, the data or the initial centers are invalid.

        ComputationError
            If the distance oracle returns NaN or a negative value.
        """
        data = np.asarray(data, dtype=float)
        errors = self.config.validate(data)
        if errors:
            raise errors[0]
        k = self.config.k
        means = np.asarray(self.config.initializer.initial_means(data, k), dtype=float)
        errors = validate_means(means, k, data.shape[1])
        if errors:
            raise errors[0]

        start = time.perf_counter()
        instance = KMeansInstance(
            data,
            means,
            self.config.distance,
            get_strategy(self.config.strategy),
            self.observer,
        )
        instance.run(self.config.max_iter)
        elapsed = int((time.perf_counter() - start) * 1000)
        return instance.build_model(self.config.varstat, elapsed)
