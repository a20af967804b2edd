# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Exceptions raised by the clustering engine.
"""


class ConfigurationError(ValueError):
    """Invalid parameters or input data, detected before the first pass."""


class ComputationError(ArithmeticError):
    """A collaborator (usually the distance oracle) broke its contract."""
