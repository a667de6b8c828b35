"""Moodflow: the workflow graph engine behind the moodboard canvas."""

__version__ = "0.1.0"
