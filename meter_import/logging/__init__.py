"""Application logging and the JSON Lines error report."""
