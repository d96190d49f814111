"""Floating and submerged bodies in a pool and in a boat's interior."""

__version__ = "0.1.0"

from .simulation import ApplicationsModel, BuoyancyModel

__all__ = ["ApplicationsModel", "BuoyancyModel", "__version__"]
