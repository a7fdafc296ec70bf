"""Scenario configuration: built-in samples, parsing and soft validation."""
