"""
Version 1 of the API.

The fines routes are served at the root (``/fines``) because existing
clients call them without a version prefix; breaking changes should go
into a new version subpackage.
"""
