"""Controllers of mpris-watch."""
