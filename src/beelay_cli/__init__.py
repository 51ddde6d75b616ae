"""Command-line client for the beelay switch control service."""

__all__ = ["cli", "config", "logging", "models"]
__version__ = "0.1.0"
