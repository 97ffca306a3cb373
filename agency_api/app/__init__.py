"""
Application package for the agency API.

``main`` assembles the FastAPI app; ``api`` holds the versioned
routers, ``services`` the business rules, ``schemas`` the pydantic
models and ``core`` configuration, storage and security.
"""

from .main import app  # noqa: F401
