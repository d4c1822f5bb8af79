"""Coaching staff extraction pipeline for athletic program websites."""

__version__ = "0.1.0"
