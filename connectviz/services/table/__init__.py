"""Table visualization."""
