# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Tests for AcceleratedKMeans.
"""

import logging
import unittest

import numpy as np

from exponion.clusterer import (
    AcceleratedKMeans,
    ComputationError,
    ConfigurationError,
    EuclideanDistance,
    FixedInitializer,
    KMeansConfig,
    KMeansInstance,
    KMeansObserver,
    KMeansPlusPlusInitializer,
    LoggingObserver,
    ManhattanDistance,
    RandomInitializer,
    RunState,
    SquaredEuclideanDistance,
)
from exponion.clusterer.assignment import STRATEGIES, get_strategy
from exponion.clusterer.distance import DistanceFunction

FOUR_POINTS = np.array([[0.0, 0.0], [0.0, 1.0], [5.0, 5.0], [5.0, 6.0]])


def make_blobs(seed, n=400, k=6, dim=3, spread=1.0):
    rng = np.random.default_rng(seed)
    centers = rng.uniform(-25.0, 25.0, size=(k, dim))
    labels = rng.integers(k, size=n)
    return centers[labels] + rng.normal(scale=spread, size=(n, dim))


class RecordingObserver(KMeansObserver):
    def __init__(self):
        self.events = []

    def iteration_started(self, iteration):
        self.events.append(("start", iteration))

    def empty_cluster(self, cluster, iteration):
        self.events.append(("empty", cluster))

    def converged(self, iteration):
        self.events.append(("converged", iteration))

    def exhausted(self, iteration):
        self.events.append(("exhausted", iteration))


class NaNDistance(DistanceFunction):
    name = "nan"

    def distance(self, a, b):
        return float("nan")


class NegativeDistance(DistanceFunction):
    name = "negative"

    def distance(self, a, b):
        return -1.0


class AcceleratedKMeansTest(unittest.TestCase):
    """Test cases for AcceleratedKMeans."""

    def fit_four_points(self, **kwargs):
        config = KMeansConfig(
            k=2,
            max_iter=20,
            initializer=FixedInitializer([[0.0, 0.0], [5.0, 5.0]]),
            **kwargs,
        )
        return AcceleratedKMeans(config).fit(FOUR_POINTS)

    def test_four_point_scenario(self):
        """Initial assignment is already final; second pass moves nothing."""
        model = self.fit_four_points()

        np.testing.assert_array_equal(model.assignment, [0, 0, 1, 1])
        np.testing.assert_allclose(model.clusterCenters(), [[0.0, 0.5], [5.0, 5.5]])
        self.assertEqual(model.summary.changedHistory, [4, 0])
        self.assertTrue(model.summary.converged)
        self.assertEqual(model.summary.iterations, 2)

        clusters = model.clusters
        self.assertEqual(clusters[0].members, frozenset({0, 1}))
        self.assertEqual(clusters[1].members, frozenset({2, 3}))
        self.assertIsNone(clusters[0].varsum)

    def test_four_point_scenario_stepwise(self):
        """Drive the instance by hand and check each pass."""
        instance = KMeansInstance(
            FOUR_POINTS,
            np.array([[0.0, 0.0], [5.0, 5.0]]),
            EuclideanDistance(),
            get_strategy("exponion"),
            KMeansObserver(),
        )
        self.assertEqual(instance.run_state, RunState.INITIALIZING)
        self.assertEqual(instance.step(), 4)
        self.assertEqual(instance.run_state, RunState.ITERATING)
        np.testing.assert_array_equal(instance.state.assignment, [0, 0, 1, 1])
        self.assertEqual(instance.step(), 0)
        np.testing.assert_allclose(instance.store.means, [[0.0, 0.5], [5.0, 5.5]])

    def test_single_cluster(self):
        """With k=1 later passes are resolved by the global prune alone."""
        data = make_blobs(3, n=50, k=3)
        instance = KMeansInstance(
            data,
            data[:1].copy(),
            EuclideanDistance(),
            get_strategy("exponion"),
            KMeansObserver(),
        )
        self.assertEqual(instance.step(), 50)
        self.assertTrue(np.all(instance.state.assignment == 0))
        self.assertTrue(np.all(np.isinf(instance.state.lower)))

        before = instance.distance.count
        self.assertEqual(instance.step(), 0)
        # Only the center movement was measured, no point distances.
        self.assertEqual(instance.distance.count - before, 1)
        np.testing.assert_allclose(instance.store.means[0], data.mean(axis=0))

    def test_variance_statistic(self):
        """Per-cluster sums of squared distances and the final distortion."""
        model = self.fit_four_points(varstat=True)

        self.assertAlmostEqual(model.clusters[0].varsum, 0.5)
        self.assertAlmostEqual(model.clusters[1].varsum, 0.5)
        self.assertAlmostEqual(model.summary.finalDistortion, 1.0)
        self.assertAlmostEqual(model.computeCost(FOUR_POINTS), 1.0)

    def test_variance_statistic_squared_oracle(self):
        """Squared oracles report the same variance statistic."""
        model = self.fit_four_points(varstat=True, distance=SquaredEuclideanDistance())
        self.assertAlmostEqual(model.summary.finalDistortion, 1.0)

    def test_predict(self):
        """Predict single points against the fitted centers."""
        model = self.fit_four_points()
        self.assertEqual(model.predict([0.2, 0.3]), 0)
        self.assertEqual(model.predict([6.0, 6.0]), 1)
        self.assertEqual(model.numClusters, 2)
        self.assertEqual(model.numFeatures, 2)

    def test_strategies_agree(self):
        """Exponion, Hamerly and Lloyd produce the same clustering."""
        data = make_blobs(11, k=8, spread=3.0)
        means = RandomInitializer(seed=5).initial_means(data, 8)
        results = {}
        for strategy in ["exponion", "hamerly", "lloyd"]:
            config = KMeansConfig(
                k=8,
                max_iter=0,
                initializer=FixedInitializer(means),
                strategy=strategy,
            )
            results[strategy] = AcceleratedKMeans(config).fit(data)

        lloyd = results["lloyd"]
        for strategy in ["exponion", "hamerly"]:
            model = results[strategy]
            np.testing.assert_array_equal(model.assignment, lloyd.assignment)
            np.testing.assert_allclose(model.clusterCenters(), lloyd.clusterCenters())
            self.assertEqual(model.summary.iterations, lloyd.summary.iterations)
            self.assertEqual(model.summary.algorithm, strategy)

    def test_squared_oracle_matches_euclidean(self):
        """The squared-distance flag changes units, never the partition."""
        data = make_blobs(17, k=5, spread=4.0)
        means = RandomInitializer(seed=2).initial_means(data, 5)
        models = [
            AcceleratedKMeans(
                KMeansConfig(k=5, max_iter=0, distance=d, initializer=FixedInitializer(means))
            ).fit(data)
            for d in (EuclideanDistance(), SquaredEuclideanDistance())
        ]
        np.testing.assert_array_equal(models[0].assignment, models[1].assignment)

    def test_exponion_prunes_distance_computations(self):
        """On well separated data the pruned engine computes fewer distances."""
        data = make_blobs(23, n=600, k=10, spread=0.5)
        means = KMeansPlusPlusInitializer(seed=1).initial_means(data, 10)
        counts = {}
        for strategy in ["exponion", "lloyd"]:
            config = KMeansConfig(
                k=10, max_iter=0, initializer=FixedInitializer(means), strategy=strategy
            )
            counts[strategy] = AcceleratedKMeans(config).fit(data).summary.distanceComputations
        self.assertLess(counts["exponion"], counts["lloyd"])

    def test_manhattan_distance(self):
        """Any metric works, not only Euclidean."""
        config = KMeansConfig(
            k=2,
            distance=ManhattanDistance(),
            initializer=FixedInitializer([[0.0, 0.0], [5.0, 5.0]]),
        )
        model = AcceleratedKMeans(config).fit(FOUR_POINTS)
        np.testing.assert_array_equal(model.assignment, [0, 0, 1, 1])

    def test_reproducibility(self):
        """Same seed produces the same result."""
        data = make_blobs(31)
        assignments = [
            AcceleratedKMeans(
                KMeansConfig(k=6, initializer=KMeansPlusPlusInitializer(seed=42))
            ).fit(data).assignment
            for _ in range(2)
        ]
        np.testing.assert_array_equal(assignments[0], assignments[1])

    def test_exhausted_is_not_an_error(self):
        """Hitting the iteration limit returns the partition found so far."""
        observer = RecordingObserver()
        data = make_blobs(5, k=6, spread=5.0)
        config = KMeansConfig(k=6, max_iter=1, initializer=RandomInitializer(seed=0))
        model = AcceleratedKMeans(config, observer).fit(data)

        self.assertFalse(model.summary.converged)
        self.assertEqual(model.summary.iterations, 1)
        self.assertIn(("exhausted", 1), observer.events)
        self.assertEqual(sum(len(c.members) for c in model.clusters.values()), len(data))

    def test_observer_events(self):
        """Observer sees every iteration start and the convergence."""
        observer = RecordingObserver()
        config = KMeansConfig(k=2, initializer=FixedInitializer([[0.0, 0.0], [5.0, 5.0]]))
        AcceleratedKMeans(config, observer).fit(FOUR_POINTS)
        self.assertEqual(
            observer.events, [("start", 1), ("start", 2), ("converged", 2)]
        )

    def test_empty_cluster_keeps_center(self):
        """An empty cluster keeps its previous center and the run continues."""
        observer = RecordingObserver()
        data = np.array([[0.0], [1.0], [10.0], [11.0]])
        config = KMeansConfig(
            k=3, initializer=FixedInitializer([[0.5], [10.5], [100.0]])
        )
        model = AcceleratedKMeans(config, observer).fit(data)

        self.assertTrue(model.summary.converged)
        self.assertIn(("empty", 2), observer.events)
        np.testing.assert_allclose(model.clusterCenters(), [[0.5], [10.5], [100.0]])
        self.assertEqual(model.clusters[2].members, frozenset())
        self.assertEqual(model.summary.effectiveK, 2)

    def test_ties_go_to_lowest_index(self):
        """Duplicate centers: points land in the lower-indexed duplicate."""
        for strategy in ["exponion", "hamerly", "lloyd"]:
            config = KMeansConfig(
                k=3,
                strategy=strategy,
                initializer=FixedInitializer([[5.0, 5.0], [0.0, 0.5], [0.0, 0.5]]),
            )
            model = AcceleratedKMeans(config).fit(FOUR_POINTS)
            np.testing.assert_array_equal(model.assignment, [1, 1, 0, 0], strategy)
            self.assertEqual(model.clusters[2].members, frozenset())

    def test_reassignment_tie_moves_to_lowest_index(self):
        """A point equidistant to its own and a lower-indexed center moves."""
        data = np.array([[0.0], [2.0]])
        for strategy in ["exponion", "hamerly", "lloyd"]:
            instance = KMeansInstance(
                data,
                data.copy(),
                EuclideanDistance(),
                get_strategy(strategy),
                KMeansObserver(),
            )
            instance.step()
            np.testing.assert_array_equal(instance.state.assignment, [0, 1])

            instance.store.means = np.array([[1.0], [1.0]])
            instance.state.upper[:] = np.inf
            instance.state.lower[:] = 0.0
            self.assertEqual(instance.strategy.reassign(instance.state), 1, strategy)
            np.testing.assert_array_equal(instance.state.assignment, [0, 0])

    def test_step_after_finish_raises(self):
        """Converged and exhausted are terminal states."""
        instance = KMeansInstance(
            FOUR_POINTS,
            np.array([[0.0, 0.0], [5.0, 5.0]]),
            EuclideanDistance(),
            get_strategy("exponion"),
            KMeansObserver(),
        )
        self.assertEqual(instance.run(20), RunState.CONVERGED)
        with self.assertRaises(RuntimeError):
            instance.step()


class ConfigurationTest(unittest.TestCase):
    """Invalid configurations fail before any pass runs."""

    def test_validate_returns_errors(self):
        config = KMeansConfig(k=0, max_iter=-1, strategy="elkan")
        errors = config.validate()
        self.assertEqual(len(errors), 3)
        self.assertTrue(all(isinstance(e, ConfigurationError) for e in errors))

    def test_valid_config(self):
        self.assertEqual(KMeansConfig(k=2).validate(FOUR_POINTS), [])

    def test_k_not_positive(self):
        with self.assertRaises(ConfigurationError):
            AcceleratedKMeans(KMeansConfig(k=0)).fit(FOUR_POINTS)

    def test_k_exceeds_points(self):
        with self.assertRaises(ConfigurationError):
            AcceleratedKMeans(KMeansConfig(k=5)).fit(FOUR_POINTS)

    def test_non_finite_data(self):
        data = FOUR_POINTS.copy()
        data[2, 1] = np.nan
        with self.assertRaises(ConfigurationError):
            AcceleratedKMeans(KMeansConfig(k=2)).fit(data)

    def test_bad_shape(self):
        with self.assertRaises(ConfigurationError):
            AcceleratedKMeans(KMeansConfig(k=1)).fit(np.zeros(4))

    def test_initializer_shape(self):
        config = KMeansConfig(k=2, initializer=FixedInitializer([[0.0, 0.0]]))
        with self.assertRaises(ConfigurationError):
            AcceleratedKMeans(config).fit(FOUR_POINTS)

    def test_initializer_non_finite(self):
        config = KMeansConfig(k=2, initializer=FixedInitializer([[0.0, 0.0], [np.inf, 0.0]]))
        with self.assertRaises(ConfigurationError):
            AcceleratedKMeans(config).fit(FOUR_POINTS)

    def test_every_registered_strategy_is_valid(self):
        for name in STRATEGIES:
            self.assertEqual(KMeansConfig(strategy=name).validate(), [], name)
            self.assertEqual(get_strategy(name).name, name)

    def test_instance_rejects_more_centers_than_points(self):
        with self.assertRaises(ConfigurationError):
            KMeansInstance(
                FOUR_POINTS[:2],
                FOUR_POINTS[:3].copy(),
                EuclideanDistance(),
                get_strategy("exponion"),
                KMeansObserver(),
            )

    def test_instance_rejects_dimension_mismatch(self):
        with self.assertRaises(ConfigurationError):
            KMeansInstance(
                FOUR_POINTS,
                np.zeros((2, 3)),
                EuclideanDistance(),
                get_strategy("hamerly"),
                KMeansObserver(),
            )

    def test_instance_rejects_non_finite_input(self):
        data = FOUR_POINTS.copy()
        data[0, 0] = np.inf
        means = np.array([[0.0, 0.0], [np.nan, 5.0]])
        for bad_data, bad_means in [(data, FOUR_POINTS[:2].copy()), (FOUR_POINTS, means)]:
            with self.assertRaises(ConfigurationError):
                KMeansInstance(
                    bad_data,
                    bad_means,
                    EuclideanDistance(),
                    get_strategy("lloyd"),
                    KMeansObserver(),
                )

    def test_instance_rejects_missing_centers(self):
        for means in [np.zeros((0, 2)), np.zeros(2)]:
            with self.assertRaises(ConfigurationError):
                KMeansInstance(
                    FOUR_POINTS, means, EuclideanDistance(), get_strategy("lloyd"), KMeansObserver()
                )

    def test_is_squared(self):
        self.assertTrue(KMeansConfig(distance=SquaredEuclideanDistance()).is_squared)
        self.assertFalse(KMeansConfig().is_squared)


class LoggingObserverTest(unittest.TestCase):
    def test_injected_logger(self):
        logger = logging.getLogger("exponion.tests.observer")
        config = KMeansConfig(k=2, initializer=FixedInitializer([[0.0, 0.0], [5.0, 5.0]]))
        with self.assertLogs(logger, level="DEBUG") as logs:
            AcceleratedKMeans(config, observer=LoggingObserver(logger)).fit(FOUR_POINTS)
        self.assertIn("K-means iteration 1", logs.output[0])
        self.assertIn("converged after 2 iterations", logs.output[-1])

    def test_default_logger(self):
        observer = LoggingObserver()
        self.assertEqual(observer.logger.name, "exponion.clusterer.observer")


class DistanceContractTest(unittest.TestCase):
    """A misbehaving oracle stops the run."""

    def test_nan_distance(self):
        config = KMeansConfig(k=2, distance=NaNDistance())
        with self.assertRaises(ComputationError):
            AcceleratedKMeans(config).fit(FOUR_POINTS)

    def test_negative_distance(self):
        config = KMeansConfig(
            k=2,
            distance=NegativeDistance(),
            initializer=FixedInitializer([[0.0, 0.0], [5.0, 5.0]]),
        )
        with self.assertRaises(ComputationError):
            AcceleratedKMeans(config).fit(FOUR_POINTS)


if __name__ == "__main__":
    unittest.main()
