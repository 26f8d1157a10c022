"""Test helpers: factories and in-memory fakes."""
