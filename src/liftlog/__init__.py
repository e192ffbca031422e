"""liftlog: workout log with progressive-overload weight recommendations."""

__version__ = "0.1.0"
