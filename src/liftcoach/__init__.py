"""Live form analysis and rep counting for squats and deadlifts."""

__version__ = "0.1.0"
