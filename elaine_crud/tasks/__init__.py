"""Maintenance tasks shipped with the engine."""
