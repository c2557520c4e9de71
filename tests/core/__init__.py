"""Tests for the core of mpris-watch."""
