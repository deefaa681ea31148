"""Exploration and verification engine for multi-page conditional forms."""

__version__ = "0.1.0"
