"""PlantNamer: punny houseplant names from a short description."""

__version__ = "1.0.0"
