"""
Pydantic schema definitions for API payloads.

Each domain defines its own request and response models.  Responses
are built from storage rows and never include password hashes.
"""
