"""
Top-level package for the agency API.

All functionality lives in submodules under ``app``; import the ASGI
application as ``agency_api.app.main:app``.
"""

__all__ = []
