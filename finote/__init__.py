"""Finote: personal finance tracking, recurring detection and tax estimates."""

__version__ = "0.1.0"
