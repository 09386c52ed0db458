"""Folio - personal blog and portfolio service."""

__version__ = "0.1.0"
