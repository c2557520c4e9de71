"""Tests for mpris-watch."""
