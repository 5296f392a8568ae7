"""Multi-provider earthquake fusion and volcanic eruption risk scoring."""

__version__ = "0.1.0"
