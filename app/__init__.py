"""Top-level package for the term count audit.

Audits cached taxonomy term counts against a live recount and optionally
fixes them.
"""
__all__ = ["api", "cli", "core", "pipeline", "repo"]
__version__ = "0.1.0"
