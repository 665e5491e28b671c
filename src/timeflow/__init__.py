"""Timeflow - spacecraft activity scheduling."""
