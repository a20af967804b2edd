#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Basic clustering example using AcceleratedKMeans with Euclidean distance.
"""

import logging

import numpy as np

from exponion.clusterer import AcceleratedKMeans, KMeansConfig, KMeansPlusPlusInitializer


def main():
    logging.basicConfig(level=logging.INFO)

    # Create sample data - two well-separated clusters
    data = np.array(
        [
            [0.0, 0.0],
            [1.0, 1.0],
            [0.5, 0.5],
            [9.0, 8.0],
            [8.0, 9.0],
            [8.5, 8.5],
        ]
    )

    print("Input data:")
    print(data)

    # Create and train clustering model
    kmeans = AcceleratedKMeans(
        KMeansConfig(
            k=2,
            max_iter=20,
            initializer=KMeansPlusPlusInitializer(seed=42),
            varstat=True,
        )
    )

    print("\nTraining model...")
    model = kmeans.fit(data)

    # Display cluster centers
    print(f"\nNumber of clusters: {model.numClusters}")
    print(f"Number of features: {model.numFeatures}")
    print("\nClusters:")
    for cid, info in model.clusters.items():
        print(f"  Cluster {cid}: center={info.center} members={sorted(info.members)} varsum={info.varsum:.4f}")

    # Compute clustering cost (WCSS)
    cost = model.computeCost(data)
    print(f"\nWithin-cluster sum of squares: {cost:.4f}")

    # Training summary
    print()
    print(model.summary.convergenceReport())

    # Predict cluster for a new point
    new_point = [0.2, 0.3]
    print(f"\nNew point {new_point} assigned to cluster: {model.predict(new_point)}")


if __name__ == "__main__":
    main()
