"""Composite diagnosis: ordered, numbered conclusion sentences for the echo report."""
