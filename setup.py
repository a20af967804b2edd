#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Setup configuration for the exponion-kmeans package.
"""

from setuptools import setup, find_packages
import os

# Read version from package
with open(os.path.join("exponion", "__init__.py")) as f:
    for line in f:
        if line.startswith("__version__"):
            version = line.split("=")[1].strip().strip('"').strip("'")
            break

# Read long description from README
long_description = """
# Exponion K-Means

Exact k-means clustering accelerated with the triangle inequality.

## Features

- **Exact Acceleration**: Exponion and Hamerly strategies skip most distance
  computations and still return Lloyd's partition
- **Pluggable Distances**: Euclidean, Squared Euclidean, Manhattan, or any metric
- **Initialization**: k-means++, random sampling, or fixed centers
- **Observability**: Injected observers, training summary with distance counts
- **Spark ML Integration**: Estimator/Model wrapper running the engine on the driver

## Installation

```bash
pip install exponion-kmeans
```

## Quick Start

```python
import numpy as np
from exponion.clusterer import AcceleratedKMeans, KMeansConfig

data = np.array([[0.0, 0.0], [1.0, 1.0], [9.0, 8.0], [8.0, 9.0]])

model = AcceleratedKMeans(KMeansConfig(k=2, max_iter=20)).fit(data)
print(model.clusterCenters())
print(model.summary.convergenceReport())
```
"""

setup(
    name="exponion-kmeans",
    version=version,
    description="Exact triangle-inequality accelerated k-means (Exponion, Hamerly)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="MassiveDataScience",
    author_email="support@massivedatascience.com",
    license="Apache License 2.0",
    packages=find_packages(include=["exponion", "exponion.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20.0",
        "pyspark>=3.4.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
            "black>=22.0.0",
            "flake8>=4.0.0",
            "mypy>=0.950",
        ],
        "test": [
            "pytest>=7.0.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering",
        "Topic :: Software Development :: Libraries",
    ],
    keywords="clustering kmeans exponion hamerly triangle-inequality pyspark",
)
