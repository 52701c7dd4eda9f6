"""CSV parsing."""
