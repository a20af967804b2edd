# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
PySpark ML wrapper for AcceleratedKMeans.

The engine is in-memory and single-threaded: ``fit`` collects the features
column to the driver and clusters it there. ``transform`` runs on the
executors with the fitted centers shipped inside the UDF closure.
"""

from typing import Optional

import numpy as np

from pyspark import keyword_only
from pyspark.ml import Estimator, Model
from pyspark.ml.linalg import Vector
from pyspark.ml.param import Param, Params, TypeConverters
from pyspark.ml.param.shared import HasFeaturesCol, HasMaxIter, HasPredictionCol, HasSeed
from pyspark.sql import DataFrame
from pyspark.sql.functions import udf
from pyspark.sql.types import IntegerType

from .config import KMeansConfig
from .distance import get_distance
from .initialization import get_initializer
from .kmeans import AcceleratedKMeans
from .model import KMeansModel, TrainingSummary


class AcceleratedKMeansParams(HasFeaturesCol, HasPredictionCol, HasMaxIter, HasSeed):
    """
    Params for SparkAcceleratedKMeans and SparkAcceleratedKMeansModel.

    Parameters
    ----------
    k : int, default=2
        Number of clusters to create (k >= 1).

    distance : str, default="euclidean"
        Distance function: "euclidean", "squaredEuclidean", "manhattan".

    initMode : str, default="k-means++"
        Initialization algorithm: "random", "k-means++".

    strategy : str, default="exponion"
        Assignment strategy: "exponion", "hamerly", "lloyd".

    varstat : bool, default=False
        Compute per-cluster sums of squared distances.

    featuresCol : str, default="features"
        Features column name.

    predictionCol : str, default="prediction"
        Prediction column name.

    maxIter : int, default=20
        Maximum number of iterations (0 = unbounded).

    seed : int, optional
        Random seed for the initializer.
    """

    k = Param(
        Params._dummy(),
        "k",
        "Number of clusters to create (must be >= 1).",
        typeConverter=TypeConverters.toInt,
    )

    distance = Param(
        Params._dummy(),
        "distance",
        "Distance function: euclidean, squaredEuclidean, manhattan",
        typeConverter=TypeConverters.toString,
    )

    initMode = Param(
        Params._dummy(),
        "initMode",
        "Initialization mode: random, k-means++",
        typeConverter=TypeConverters.toString,
    )

    strategy = Param(
        Params._dummy(),
        "strategy",
        "Assignment strategy: exponion, hamerly, lloyd",
        typeConverter=TypeConverters.toString,
    )

    varstat = Param(
        Params._dummy(),
        "varstat",
        "Compute the per-cluster variance statistic",
        typeConverter=TypeConverters.toBoolean,
    )

    def __init__(self, *args):
        super(AcceleratedKMeansParams, self).__init__(*args)
        self._setDefault(
            k=2,
            distance="euclidean",
            initMode="k-means++",
            strategy="exponion",
            varstat=False,
            featuresCol="features",
            predictionCol="prediction",
            maxIter=20,
        )

    def getK(self) -> int:
        """Gets the value of k or its default value."""
        return self.getOrDefault(self.k)

    def getDistance(self) -> str:
        """Gets the value of distance or its default value."""
        return self.getOrDefault(self.distance)

    def getInitMode(self) -> str:
        """Gets the value of initMode or its default value."""
        return self.getOrDefault(self.initMode)

    def getStrategy(self) -> str:
        """Gets the value of strategy or its default value."""
        return self.getOrDefault(self.strategy)

    def getVarstat(self) -> bool:
        """Gets the value of varstat or its default value."""
        return self.getOrDefault(self.varstat)


class SparkAcceleratedKMeans(Estimator, AcceleratedKMeansParams):
    """
    Spark ML estimator running AcceleratedKMeans on the driver.

    Examples
    --------
    >>> from exponion.clusterer import SparkAcceleratedKMeans
    >>> from pyspark.ml.linalg import Vectors
    >>>
    >>> data = spark.createDataFrame([
    ...     (Vectors.dense([0.0, 0.0]),),
    ...     (Vectors.dense([1.0, 1.0]),),
    ...     (Vectors.dense([9.0, 8.0]),),
    ...     (Vectors.dense([8.0, 9.0]),)
    ... ], ["features"])
    >>>
    >>> kmeans = SparkAcceleratedKMeans(k=2, maxIter=20, seed=42)
    >>> model = kmeans.fit(data)
    >>> model.transform(data).select("features", "prediction").show()
    """

    @keyword_only
    def __init__(
        self,
        *,
        k: int = 2,
        distance: str = "euclidean",
        initMode: str = "k-means++",
        strategy: str = "exponion",
        varstat: bool = False,
        featuresCol: str = "features",
        predictionCol: str = "prediction",
        maxIter: int = 20,
        seed: Optional[int] = None,
    ):
        super(SparkAcceleratedKMeans, self).__init__()
        kwargs = self._input_kwargs
        self.setParams(**kwargs)

    @keyword_only
    def setParams(
        self,
        *,
        k: int = 2,
        distance: str = "euclidean",
        initMode: str = "k-means++",
        strategy: str = "exponion",
        varstat: bool = False,
        featuresCol: str = "features",
        predictionCol: str = "prediction",
        maxIter: int = 20,
        seed: Optional[int] = None,
    ):
        """
        Set parameters for SparkAcceleratedKMeans.
        """
        kwargs = self._input_kwargs
        return self._set(**kwargs)

    def setK(self, value: int):
        """Sets the value of k."""
        return self._set(k=value)

    def setDistance(self, value: str):
        """Sets the value of distance."""
        return self._set(distance=value)

    def setInitMode(self, value: str):
        """Sets the value of initMode."""
        return self._set(initMode=value)

    def setStrategy(self, value: str):
        """Sets the value of strategy."""
        return self._set(strategy=value)

    def setVarstat(self, value: bool):
        """Sets the value of varstat."""
        return self._set(varstat=value)

    def setMaxIter(self, value: int):
        """Sets the value of maxIter."""
        return self._set(maxIter=value)

    def setSeed(self, value: int):
        """Sets the value of seed."""
        return self._set(seed=value)

    def setFeaturesCol(self, value: str):
        """Sets the value of featuresCol."""
        return self._set(featuresCol=value)

    def setPredictionCol(self, value: str):
        """Sets the value of predictionCol."""
        return self._set(predictionCol=value)

    def _config(self) -> KMeansConfig:
        seed = self.getSeed()
        # HasSeed defaults to a (possibly negative) string hash; numpy wants >= 0.
        if seed is not None:
            seed = seed % (2 ** 32)
        return KMeansConfig(
            k=self.getK(),
            max_iter=self.getMaxIter(),
            distance=get_distance(self.getDistance()),
            initializer=get_initializer(self.getInitMode(), seed),
            strategy=self.getStrategy(),
            varstat=self.getVarstat(),
        )

    def _fit(self, dataset: DataFrame):
        rows = dataset.select(self.getFeaturesCol()).collect()
        data = np.array([row[0].toArray() for row in rows], dtype=float)
        fitted = AcceleratedKMeans(self._config()).fit(data)
        model = SparkAcceleratedKMeansModel(fitted)
        self._copyValues(model)
        return model


class SparkAcceleratedKMeansModel(Model, AcceleratedKMeansParams):
    """
    Model fitted by SparkAcceleratedKMeans.

    Attributes
    ----------
    clusterCenters : np.ndarray
        Array of cluster centers (k x d).

    numClusters : int
        Number of clusters.

    numFeatures : int
        Number of features (dimension).
    """

    def __init__(self, fitted: Optional[KMeansModel] = None):
        super(SparkAcceleratedKMeansModel, self).__init__()
        self._fitted = fitted

    @property
    def localModel(self) -> KMeansModel:
        """The in-memory KMeansModel this Spark model wraps."""
        return self._fitted

    def clusterCenters(self) -> np.ndarray:
        return self._fitted.clusterCenters()

    @property
    def numClusters(self) -> int:
        return self._fitted.numClusters

    @property
    def numFeatures(self) -> int:
        return self._fitted.numFeatures

    def predict(self, value: Vector) -> int:
        """Predict the cluster for a single feature vector."""
        return self._fitted.predict(value.toArray())

    def computeCost(self, dataset: DataFrame) -> float:
        """
        Compute the within-cluster sum of squares (WCSS) of ``dataset``.
        """
        rows = dataset.select(self.getFeaturesCol()).collect()
        return self._fitted.computeCost([row[0].toArray() for row in rows])

    def hasSummary(self) -> bool:
        return self._fitted.hasSummary()

    @property
    def summary(self) -> TrainingSummary:
        return self._fitted.summary

    def _transform(self, dataset: DataFrame) -> DataFrame:
        fitted = self._fitted

        def _predict(vector):
            return fitted.predict(vector.toArray())

        predict_udf = udf(_predict, IntegerType())
        return dataset.withColumn(
            self.getPredictionCol(), predict_udf(dataset[self.getFeaturesCol()])
        )
