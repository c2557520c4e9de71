"""Models used by mpris-watch."""
