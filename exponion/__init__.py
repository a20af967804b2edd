# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Exponion K-Means
================

Exact, triangle-inequality accelerated k-means clustering.
"""

__version__ = "0.1.0"
__all__ = ["clusterer"]
