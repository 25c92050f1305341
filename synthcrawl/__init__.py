"""Synthcrawl - wrapper induction for per-site extraction rules."""

__version__ = "0.1.0"
