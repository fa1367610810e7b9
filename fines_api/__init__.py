"""
Top-level package for the Fines API.

All functionality lives in submodules under ``app``; the application
object is importable as ``fines_api.app.main:app``.
"""

__all__ = []
