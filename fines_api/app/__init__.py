"""
Application package initializer.

``core`` holds configuration, logging, database access and the error
taxonomy; ``schemas`` the request and response models; ``services`` the
business rules; ``api`` the HTTP routes.
"""

from .main import app  # noqa: F401
