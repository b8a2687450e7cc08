"""Single-car elevator controller with SCAN dispatch."""

__version__ = "0.1.0"
