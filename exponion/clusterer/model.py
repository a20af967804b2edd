# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Fitted clustering model and training summary.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, NamedTuple, Optional

import numpy as np

from .distance import CheckedDistance


class ClusterInfo(NamedTuple):
    """One entry of ``KMeansModel.clusters``."""

    center: np.ndarray
    members: FrozenSet[int]
    varsum: Optional[float]


@dataclass(frozen=True)
class TrainingSummary:
    """
    Training summary with details about the clustering run.

    Attributes
    ----------
    algorithm : str
        Assignment strategy used ("exponion", "hamerly" or "lloyd").

    k : int
        Requested number of clusters.

    effectiveK : int
        Number of non-empty clusters.

    dim : int
        Feature dimensionality.

    numPoints : int
        Number of training points.

    iterations : int
        Number of assignment passes, including the initial one.

    converged : bool
        Whether the last pass moved no point.

    finalDistortion : float, optional
        Sum of squared distances to assigned centers; only when the variance
        statistic was requested.

    distanceComputations : int
        Number of distance oracle evaluations during the run.

    changedHistory : list of int
        Points moved by each pass.

    elapsedMillis : int
        Training time in milliseconds.
    """

    algorithm: str
    k: int
    effectiveK: int
    dim: int
    numPoints: int
    iterations: int
    converged: bool
    finalDistortion: Optional[float]
    distanceComputations: int
    changedHistory: List[int] = field(default_factory=list)
    elapsedMillis: int = 0

    @property
    def avgIterationMillis(self) -> float:
        """Average time per iteration in milliseconds."""
        return self.elapsedMillis / self.iterations if self.iterations else 0.0

    def convergenceReport(self) -> str:
        """Get a detailed convergence report as a string."""
        status = "converged" if self.converged else "stopped at iteration limit"
        lines = [
            f"{self.algorithm} k-means: {status} after {self.iterations} iterations",
            f"  points={self.numPoints} dim={self.dim} k={self.k} effectiveK={self.effectiveK}",
            f"  distance computations={self.distanceComputations}",
        ]
        if self.finalDistortion is not None:
            lines.append(f"  final distortion={self.finalDistortion:.6g}")
        lines.append("  changed per iteration: " + ", ".join(str(c) for c in self.changedHistory))
        return "\n".join(lines)


class KMeansModel:
    """
    Model fitted by AcceleratedKMeans.

    Attributes
    ----------
    assignment : np.ndarray
        Cluster index of every training point.

    Examples
    --------
    >>> model = AcceleratedKMeans(KMeansConfig(k=2)).fit(data)
    >>> model.clusterCenters()
    >>> model.predict([0.2, 0.3])
    >>> for cid, info in model.clusters.items():
    ...     print(cid, info.center, len(info.members))
    """

    def __init__(
        self,
        centers: np.ndarray,
        assignment: np.ndarray,
        members: List[FrozenSet[int]],
        distance,
        varsums: Optional[np.ndarray] = None,
        summary: Optional[TrainingSummary] = None,
    ):
        self._centers = np.array(centers, dtype=float)
        self.assignment = np.array(assignment)
        self._members = members
        self._distance = distance
        self._varsums = varsums
        self._summary = summary

    def clusterCenters(self) -> np.ndarray:
        """
        Get the cluster centers as a NumPy array of shape (k, d).
        """
        return self._centers.copy()

    @property
    def numClusters(self) -> int:
        return self._centers.shape[0]

    @property
    def numFeatures(self) -> int:
        return self._centers.shape[1]

    @property
    def clusters(self) -> Dict[int, ClusterInfo]:
        """Mapping of cluster id to center, member ids and variance sum."""
        return {
            c: ClusterInfo(
                self._centers[c].copy(),
                self._members[c],
                None if self._varsums is None else float(self._varsums[c]),
            )
            for c in range(self.numClusters)
        }

    def predict(self, value) -> int:
        """
        Predict the cluster for a single point.

        Ties go to the lowest cluster index.
        """
        x = np.asarray(value, dtype=float)
        dists = [self._distance.distance(x, c) for c in self._centers]
        return int(np.argmin(dists))

    def computeCost(self, data) -> float:
        """
        Sum of squared distances from each point to its nearest center.
        """
        dist = CheckedDistance(self._distance)
        total = 0.0
        for x in np.asarray(data, dtype=float):
            total += dist.squared(min(dist(x, c) for c in self._centers))
        return total

    def hasSummary(self) -> bool:
        return self._summary is not None

    @property
    def summary(self) -> TrainingSummary:
        if self._summary is None:
            raise RuntimeError("No training summary available for this model")
        return self._summary
