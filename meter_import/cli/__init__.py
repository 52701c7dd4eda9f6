"""Command line interface: ``python -m meter_import.cli``."""

from .app import main

__all__ = ["main"]
