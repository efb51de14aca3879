"""Pilot Pay CLI."""
