# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Accelerated K-Means Clustering
==============================

Exact k-means with triangle-inequality pruning (Exponion, Hamerly) and a
PySpark ML wrapper around the in-memory engine.

Classes:
    AcceleratedKMeans: In-memory estimator
    KMeansConfig: Run configuration
    KMeansModel: Fitted clustering model
    TrainingSummary: Training summary
    SparkAcceleratedKMeans: Spark ML estimator running the engine on the driver

Example:
    >>> import numpy as np
    >>> from exponion.clusterer import AcceleratedKMeans, KMeansConfig
    >>>
    >>> data = np.array([[0.0, 0.0], [1.0, 1.0], [9.0, 8.0], [8.0, 9.0]])
    >>> model = AcceleratedKMeans(KMeansConfig(k=2)).fit(data)
    >>> model.clusterCenters()
"""

from .assignment import ExponionAssignment, HamerlyAssignment, LloydAssignment
from .config import KMeansConfig
from .distance import (
    EuclideanDistance,
    ManhattanDistance,
    SquaredEuclideanDistance,
    get_distance,
)
from .errors import ComputationError, ConfigurationError
from .initialization import (
    FixedInitializer,
    KMeansPlusPlusInitializer,
    RandomInitializer,
    get_initializer,
)
from .kmeans import AcceleratedKMeans, KMeansInstance, RunState
from .model import ClusterInfo, KMeansModel, TrainingSummary
from .observer import KMeansObserver, LoggingObserver
from .spark import SparkAcceleratedKMeans, SparkAcceleratedKMeansModel

__all__ = [
    "AcceleratedKMeans",
    "ClusterInfo",
    "ComputationError",
    "ConfigurationError",
    "EuclideanDistance",
    "ExponionAssignment",
    "FixedInitializer",
    "HamerlyAssignment",
    "KMeansConfig",
    "KMeansInstance",
    "KMeansModel",
    "KMeansObserver",
    "KMeansPlusPlusInitializer",
    "LloydAssignment",
    "LoggingObserver",
    "ManhattanDistance",
    "RandomInitializer",
    "RunState",
    "SparkAcceleratedKMeans",
    "SparkAcceleratedKMeansModel",
    "SquaredEuclideanDistance",
    "TrainingSummary",
    "get_distance",
    "get_initializer",
]
