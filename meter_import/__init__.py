"""Customer / meter-reading CSV validation and import."""

__version__ = "0.1.0"
