"""Various (server-only) tools and helpers."""
