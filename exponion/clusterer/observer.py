# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Run observers.

The driver reports progress to an observer passed in at construction rather
than to a module-level logger. ``LoggingObserver`` forwards events to the
standard ``logging`` module and is the default.
"""

import logging
from typing import Optional


class KMeansObserver:
    """No-op observer. Subclass and override the events of interest."""

    def iteration_started(self, iteration: int) -> None:
        pass

    def iteration_finished(self, iteration: int, changed: int) -> None:
        pass

    def empty_cluster(self, cluster: int, iteration: int) -> None:
        pass

    def converged(self, iteration: int) -> None:
        pass

    def exhausted(self, iteration: int) -> None:
        pass


class LoggingObserver(KMeansObserver):
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def iteration_started(self, iteration: int) -> None:
        self.logger.debug("K-means iteration %d", iteration)

    def iteration_finished(self, iteration: int, changed: int) -> None:
        self.logger.debug("Iteration %d reassigned %d points", iteration, changed)

    def empty_cluster(self, cluster: int, iteration: int) -> None:
        self.logger.warning(
            "Cluster %d is empty in iteration %d; keeping its previous center", cluster, iteration
        )

    def converged(self, iteration: int) -> None:
        self.logger.info("K-means converged after %d iterations", iteration)

    def exhausted(self, iteration: int) -> None:
        self.logger.info("K-means stopped at the iteration limit (%d) without converging", iteration)
